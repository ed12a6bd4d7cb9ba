"""Base class and response parsing shared by all component generators."""

import json
import logging
import re
from dataclasses import dataclass, field
from textwrap import dedent
from typing import Any, ClassVar

from pydantic import BaseModel, ValidationError

from pagecraft.llm.adapter import ModelAdapter
from pagecraft.llm.backend.base import MalformedResponseError, Message
from pagecraft.schema import (
    ELEMENT_PROPS_MODELS,
    Definition,
    ElementKind,
    Node,
    NodeKind,
    ParentRequirements,
)
from pagecraft.status import StatusEmitter
from pagecraft.tree import IdAllocator

logger = logging.getLogger(__name__)


@dataclass
class GenerationContext:
    """Request-scoped state threaded through every generator call.

    Attributes:
        emit: Status emitter of the request.
        ids: Id allocator of the request.
    """

    emit: StatusEmitter
    ids: IdAllocator = field(default_factory=IdAllocator)


# =============================================================================
# Response parsing
# =============================================================================


def extract_json(content: str) -> str:
    """Extract JSON from response, handling markdown code blocks.

    Args:
        content: Raw response content.

    Returns:
        Extracted JSON string.
    """
    content = content.strip()

    # Match ```json ... ``` or ``` ... ```
    matches = re.findall(r"```(?:json)?\s*([\s\S]*?)```", content)
    for match in matches:
        stripped = match.strip()
        if stripped.startswith("{") or stripped.startswith("["):
            return stripped

    if content.startswith("```json"):
        content = content[7:]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]

    return content.strip()


def parse_props(text: str, props_model: type[BaseModel], subject: str) -> dict[str, Any]:
    """Parse a ``{"props": {...}}`` response and shape-check the props.

    Args:
        text: Raw model text.
        props_model: Props model of the expected kind.
        subject: What was generated, used in error messages.

    Returns:
        The props object exactly as the model returned it.

    Raises:
        MalformedResponseError: If the text is not a JSON object, lacks an
            object-valued ``props`` key, or a prop has the wrong JSON type.
    """
    try:
        data = json.loads(extract_json(text))
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"{subject} response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedResponseError(f"{subject} response is not a JSON object")
    if "props" not in data:
        raise MalformedResponseError(f"{subject} response has no 'props' key")
    props = data["props"]
    if not isinstance(props, dict):
        raise MalformedResponseError(f"{subject} 'props' is not an object")

    try:
        props_model.model_validate(props)
    except ValidationError as e:
        raise MalformedResponseError(f"{subject} props have the wrong shape: {e}") from e
    return props


def format_requirements(requirements: ParentRequirements) -> str:
    """Requirements as prompt text: strings verbatim, objects as indented JSON."""
    if isinstance(requirements, str):
        return requirements
    return json.dumps(requirements, indent=2)


# =============================================================================
# Generator base
# =============================================================================


class ComponentGenerator:
    """Turns one element request into one leaf node.

    Subclasses set ``kind`` and ``SYSTEM_PROMPT``; everything else derives
    from the kind. Generators hold only the adapter, so one instance serves
    any number of concurrent requests.
    """

    kind: ClassVar[ElementKind]
    SYSTEM_PROMPT: ClassVar[str]

    def __init__(self, adapter: ModelAdapter):
        self.adapter = adapter

    @property
    def node_kind(self) -> NodeKind:
        return self.kind.node_kind

    @property
    def display_prefix(self) -> str:
        return self.kind.value.lower()

    @property
    def status_prefix(self) -> str:
        return f"{self.display_prefix}-generation"

    @property
    def props_model(self) -> type[BaseModel]:
        return ELEMENT_PROPS_MODELS[self.kind]

    def build_messages(
        self, element_requirements: str, parent_requirements: ParentRequirements
    ) -> list[Message]:
        """System guidance plus a user message embedding both requirements."""
        user_text = dedent(
            """\
            Generate properties with the following context:

            Element Requirements:
            {element}

            Parent Component Requirements:
            {parent}

            Ensure the generated element maintains visual harmony with the parent
            component while fulfilling its specific requirements.
            """
        ).format(
            element=element_requirements,
            parent=format_requirements(parent_requirements),
        )
        return [Message.system(self.SYSTEM_PROMPT), Message.user(user_text)]

    def finalize_props(self, props: dict[str, Any]) -> dict[str, Any]:
        """Hook for kind-specific completion of generated props."""
        return props

    async def generate(
        self,
        element_requirements: str,
        parent_requirements: ParentRequirements,
        parent_id: str,
        ctx: GenerationContext,
    ) -> Definition:
        """Generate one element node.

        Args:
            element_requirements: What the element should contain and look like.
            parent_requirements: Requirements of the owning layout.
            parent_id: Id of the owning layout.
            ctx: Request-scoped context.

        Returns:
            Single-entry map ``{id: node}``.

        Raises:
            ModelCallError: If the model call fails.
            MalformedResponseError: If the response has the wrong shape.
        """
        name = self.display_prefix
        ctx.emit(self.status_prefix, f"Generating {name} component")
        try:
            response = await self.adapter.call_model(
                self.status_prefix,
                self.build_messages(element_requirements, parent_requirements),
                emit=ctx.emit,
            )
            props = self.finalize_props(
                parse_props(response.text, self.props_model, self.kind.value)
            )
        except Exception as e:
            ctx.emit("error", f"Error generating {name}: {e}")
            raise

        node_id = ctx.ids.element_id()
        node = Node.create(
            self.node_kind,
            props=props,
            display_name=ctx.ids.display_name(self.display_prefix),
            parent=parent_id,
        )
        ctx.emit(
            "component-generated",
            f"{name.capitalize()} component generated with ID: {node_id}",
        )
        logger.debug("Generated %s %s under %s", name, node_id, parent_id)
        return {node_id: node}


__all__ = [
    "GenerationContext",
    "ComponentGenerator",
    "extract_json",
    "parse_props",
    "format_requirements",
]
