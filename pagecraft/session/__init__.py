"""Layout design sessions and the request front end.

Example:
    >>> from pagecraft.session import LayoutDesignSession
    >>> session = LayoutDesignSession(adapter, LoggingStatusSink())
    >>> definition = await session.generate_layout_design({"prompt": "Hero section"})
"""

from .lib import DESIGN_STATUS, PROCESSING_STATUS, LayoutDesignSession, SessionState
from .prompt import (
    DESIGN_SYSTEM_PROMPT,
    LAYOUT_DESIGNER_TOOL_DESCRIPTION,
    build_design_messages,
    build_design_prompt,
    layout_designer_tool,
)
from .service import GENERATE_LAYOUT, WELCOME_MESSAGE, LayoutDesignService

__all__ = [
    # Session
    "LayoutDesignSession",
    "SessionState",
    "DESIGN_STATUS",
    "PROCESSING_STATUS",
    # Prompts
    "DESIGN_SYSTEM_PROMPT",
    "LAYOUT_DESIGNER_TOOL_DESCRIPTION",
    "build_design_prompt",
    "build_design_messages",
    "layout_designer_tool",
    # Service
    "LayoutDesignService",
    "WELCOME_MESSAGE",
    "GENERATE_LAYOUT",
]
