"""Layout design session: one page generation request from prompt to map.

A session asks the model for a page structure through the
``layout_designer`` tool, hands the returned layouts to the layout
generator and assembles the final definition map under a fresh ROOT.
"""

import json
import logging
from enum import Enum
from typing import Any

from pydantic import ValidationError

from pagecraft.components import GenerationContext
from pagecraft.layout import LayoutGenerator
from pagecraft.llm.adapter import ModelAdapter, ModelResponse
from pagecraft.llm.backend.base import (
    GenerationError,
    MalformedResponseError,
    NoToolCallError,
    ToolCall,
)
from pagecraft.schema import (
    LAYOUT_DESIGNER_TOOL_NAME,
    Definition,
    LayoutDesignerArgs,
    LayoutSpec,
    PageContent,
)
from pagecraft.status import StatusEmitter
from pagecraft.tree import (
    ROOT_DESIGN_REQUIREMENTS,
    ROOT_ID,
    IdAllocator,
    build_root_node,
    merge_definitions,
    validate_definition,
)

from .prompt import build_design_messages, layout_designer_tool

logger = logging.getLogger(__name__)

DESIGN_STATUS = "layout-design"
PROCESSING_STATUS = "layout-processing"


class SessionState(str, Enum):
    """Lifecycle of a layout design session."""

    RECEIVED = "received"
    PROMPTING_MODEL = "prompting-model"
    AWAITING_TOOL_CALL = "awaiting-tool-call"
    PROCESSING_LAYOUTS = "processing-layouts"
    ASSEMBLING_ROOT = "assembling-root"
    DONE = "done"
    FAILED = "failed"


class LayoutDesignSession:
    """Drives one page generation request.

    A session is single use: it owns the request's status emitter and id
    allocator, and records every state it passes through in
    ``transitions``.

    Example:
        >>> session = LayoutDesignSession(adapter, LoggingStatusSink())
        >>> definition = await session.generate_layout_design(
        ...     {"prompt": "Landing page for a coffee shop", "images": []}
        ... )
        >>> session.state
        <SessionState.DONE: 'done'>
    """

    def __init__(
        self,
        adapter: ModelAdapter,
        emit: StatusEmitter,
        layout_generator: LayoutGenerator | None = None,
    ):
        self.adapter = adapter
        self.emit = emit
        self.layout_generator = layout_generator or LayoutGenerator(adapter)
        self.ctx = GenerationContext(emit=emit, ids=IdAllocator())
        self.state = SessionState.RECEIVED
        self.transitions: list[SessionState] = [SessionState.RECEIVED]

    def _advance(self, state: SessionState) -> None:
        logger.debug("Session %s -> %s", self.state.value, state.value)
        self.state = state
        self.transitions.append(state)

    # =========================================================================
    # Request
    # =========================================================================

    async def generate_layout_design(
        self, page_content: PageContent | dict[str, Any]
    ) -> Definition:
        """Generate the definition map of a page.

        Args:
            page_content: Prompt and optional image URLs.

        Returns:
            Definition map with ROOT first, then every layout and element.

        Raises:
            GenerationError: If the session was already used.
            ModelCallError: If any model call fails.
            NoToolCallError: If the model did not call ``layout_designer``.
            MalformedResponseError: If any model output has the wrong shape.
        """
        if self.state != SessionState.RECEIVED:
            raise GenerationError("A layout design session handles a single request")

        try:
            content = PageContent.model_validate(page_content)
            self.emit(DESIGN_STATUS, "Starting layout design generation for provided content")

            self._advance(SessionState.PROMPTING_MODEL)
            messages = build_design_messages(content)
            self.emit(
                DESIGN_STATUS,
                "Sending layout design request to AI model with reference images",
            )
            response = await self.adapter.call_model(
                DESIGN_STATUS, messages, emit=self.emit, tools=[layout_designer_tool()]
            )

            self._advance(SessionState.AWAITING_TOOL_CALL)
            tool_call = self.extract_layout_call(response)
            self.emit(
                "layout-design-result",
                json.dumps(
                    {"id": tool_call.id, "name": tool_call.name, "arguments": tool_call.arguments}
                ),
            )
            self.emit(DESIGN_STATUS, "Layout design generation completed")

            definition = await self.process_layout(tool_call)
        except Exception:
            self._advance(SessionState.FAILED)
            raise

        self._advance(SessionState.DONE)
        return definition

    def extract_layout_call(self, response: ModelResponse) -> ToolCall:
        """First ``layout_designer`` call of a model response.

        Raises:
            NoToolCallError: If the response has no tool calls, or none of
                them is ``layout_designer``.
        """
        if not response.tool_calls:
            self.emit("error", "No tool calls found in response")
            raise NoToolCallError("No tool calls found in response")

        tool_call = response.find_tool_call(LAYOUT_DESIGNER_TOOL_NAME)
        if tool_call is None:
            self.emit("error", "Layout designer tool not called")
            raise NoToolCallError("Layout designer tool not called")
        return tool_call

    # =========================================================================
    # Layouts
    # =========================================================================

    def parse_layouts(self, tool_call: ToolCall) -> list[LayoutSpec]:
        """Validated layouts of a ``layout_designer`` call.

        Raises:
            MalformedResponseError: If the arguments do not match the tool
                schema or hold no layouts.
        """
        if not tool_call.arguments.get("layouts"):
            self.emit("error", "No layouts found in tool arguments")
            raise MalformedResponseError("No layouts found in tool arguments")

        try:
            args = LayoutDesignerArgs.model_validate(tool_call.arguments)
        except ValidationError as e:
            raise MalformedResponseError(f"Invalid layout_designer arguments: {e}") from e
        return args.layouts

    async def process_layout(self, tool_call: ToolCall) -> Definition:
        """Build the full definition map from a ``layout_designer`` call.

        Args:
            tool_call: The model's ``layout_designer`` invocation.

        Returns:
            Definition map with a fresh ROOT listing the layouts in order.
        """
        try:
            self.emit(PROCESSING_STATUS, "Processing layout tool results")
            self._advance(SessionState.PROCESSING_LAYOUTS)
            layouts = self.parse_layouts(tool_call)
            self.emit(PROCESSING_STATUS, f"Processing {len(layouts)} layouts")

            result = await self.layout_generator.process_layouts(
                layouts, ROOT_DESIGN_REQUIREMENTS, self.ctx
            )

            self._advance(SessionState.ASSEMBLING_ROOT)
            definition: Definition = {ROOT_ID: build_root_node(result.layout_ids)}
            merge_definitions(definition, result.definition)

            issues = validate_definition(definition)
            if issues:
                details = "; ".join(f"{i.node_id}: {i.message}" for i in issues)
                raise GenerationError(f"Assembled definition is invalid: {details}")

            self.emit(PROCESSING_STATUS, "Layout processing completed")
            return definition
        except Exception as e:
            self.emit("error", f"Error processing layout: {e}")
            raise


__all__ = [
    "DESIGN_STATUS",
    "PROCESSING_STATUS",
    "SessionState",
    "LayoutDesignSession",
]
