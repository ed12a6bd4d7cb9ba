"""Layout generation: layout specifications to definition map entries."""

from .lib import (
    STATUS_PREFIX,
    LayoutGenerator,
    LayoutGeneratorConfig,
    LayoutProcessingResult,
)
from .prompt import LAYOUT_SYSTEM_PROMPT, build_layout_messages

__all__ = [
    "STATUS_PREFIX",
    "LayoutGenerator",
    "LayoutGeneratorConfig",
    "LayoutProcessingResult",
    "LAYOUT_SYSTEM_PROMPT",
    "build_layout_messages",
]
