"""Transport-agnostic front end for layout design requests.

Handles streaming connections (one JSON frame per message) and plain
request/response calls. Every request gets its own session; the layout
generator is shared.
"""

import json
import logging
from typing import Any

from pagecraft.layout import LayoutGenerator
from pagecraft.llm.adapter import ModelAdapter
from pagecraft.status import (
    CommunicationMode,
    Connection,
    StatusEmitter,
    create_status_emitter,
)
from pagecraft.tree import definition_to_dict

from .lib import LayoutDesignSession

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "Connected to Layout_design"
GENERATE_LAYOUT = "generate-layout"


class LayoutDesignService:
    """Per-process entry point for layout design requests.

    Example:
        >>> service = LayoutDesignService(adapter)
        >>> status, payload = await service.handle_generate_request(
        ...     {"content": {"prompt": "Pricing page with three plans"}}
        ... )
    """

    def __init__(self, adapter: ModelAdapter, layout_generator: LayoutGenerator | None = None):
        self.adapter = adapter
        self.layout_generator = layout_generator or LayoutGenerator(adapter)
        self.connections: dict[str, Connection] = {}

    def create_session(self, emit: StatusEmitter) -> LayoutDesignSession:
        return LayoutDesignSession(self.adapter, emit, self.layout_generator)

    async def generate(self, content: Any, emit: StatusEmitter) -> dict[str, Any]:
        """Run one request and return the JSON-ready definition map."""
        definition = await self.create_session(emit).generate_layout_design(content)
        return definition_to_dict(definition)

    # =========================================================================
    # Streaming connections
    # =========================================================================

    def on_connect(self, connection: Connection) -> None:
        self.connections[connection.id] = connection
        connection.send(
            json.dumps({"type": "status", "status": "init", "message": WELCOME_MESSAGE})
        )
        logger.info("Connection %s opened", connection.id)

    def on_disconnect(self, connection: Connection) -> None:
        self.connections.pop(connection.id, None)
        logger.info("Connection %s closed", connection.id)

    async def on_message(self, connection: Connection, message: str | bytes | dict) -> None:
        """Handle one inbound frame.

        ``generate-layout`` frames stream status events and end with a
        ``layout-result`` frame. Unknown types and failures are answered
        with an ``error`` frame.
        """
        try:
            data = json.loads(message) if isinstance(message, (str, bytes)) else message
            message_type = data.get("type") if isinstance(data, dict) else None

            if message_type == GENERATE_LAYOUT:
                emit = create_status_emitter(CommunicationMode.WEBSOCKET, connection)
                emit("layout-design", "Starting layout design generation")
                result = await self.generate(data.get("content"), emit)
                connection.send(json.dumps({"type": "layout-result", "data": result}))
            else:
                connection.send(
                    json.dumps(
                        {
                            "type": "error",
                            "message": "Unknown message type",
                            "originalMessage": data,
                        }
                    )
                )
        except Exception as e:
            logger.error("Layout request on %s failed: %s", connection.id, e)
            connection.send(json.dumps({"type": "error", "message": str(e)}))

    # =========================================================================
    # Request/response
    # =========================================================================

    async def handle_generate_request(self, body: Any) -> tuple[int, dict[str, Any]]:
        """Handle a ``{"content": {...}}`` request body.

        Returns:
            ``(200, definition)`` on success, ``(400, {"error": message})``
            on any failure. Progress is logged.
        """
        try:
            if not isinstance(body, dict) or "content" not in body:
                raise ValueError("Request body must be an object with a 'content' field")
            emit = create_status_emitter(CommunicationMode.REST_API)
            return 200, await self.generate(body["content"], emit)
        except Exception as e:
            logger.error("Layout request failed: %s", e)
            return 400, {"error": str(e)}


__all__ = [
    "WELCOME_MESSAGE",
    "GENERATE_LAYOUT",
    "LayoutDesignService",
]
