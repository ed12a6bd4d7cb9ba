"""Authoritative schema module for page definitions.

This module is the single source of truth for the shapes exchanged with the
model and with the page editor:
- Node kinds, layout kinds and element kinds
- The editor node model (serialised with the editor's camelCase aliases)
- The layout specification the model returns through the layout designer tool
- Per-kind props models used to shape-check model output

Props are otherwise opaque: the models below check JSON types only, never
value ranges or enumerations.
"""

from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

# === KINDS ===


class NodeKind(str, Enum):
    """Concrete node type tag written to ``type.resolvedName``."""

    CONTAINER = "Container"
    FLEXBOX = "Flexbox"
    SECTION = "Section"
    HEADING = "Heading"
    PARAGRAPH = "Paragraph"
    TEXT = "Text"
    USER_BUTTON = "UserButton"
    IMAGE = "Image"
    DIVIDER = "Divider"


class LayoutKind(str, Enum):
    """Layout node kinds that may own children."""

    CONTAINER = "Container"
    FLEXBOX = "Flexbox"
    SECTION = "Section"

    @property
    def node_kind(self) -> NodeKind:
        return NodeKind(self.value)


class ElementKind(str, Enum):
    """Leaf element kinds with a component generator."""

    HEADING = "Heading"
    PARAGRAPH = "Paragraph"
    TEXT = "Text"
    BUTTON = "Button"
    DIVIDER = "Divider"
    IMAGE = "Image"

    @property
    def node_kind(self) -> NodeKind:
        """Node type written for this element (buttons are ``UserButton``)."""
        if self is ElementKind.BUTTON:
            return NodeKind.USER_BUTTON
        return NodeKind(self.value)


# Element types the model may request. Icon has no generator and is skipped.
TOOL_ELEMENT_TYPES: tuple[str, ...] = (
    "Button",
    "Icon",
    "Heading",
    "Paragraph",
    "Image",
    "Text",
    "Divider",
)

ParentRequirements = Union[str, dict[str, Any]]


# === EDITOR NODE ===


class NodeType(BaseModel):
    """The editor's ``type`` object."""

    resolved_name: NodeKind = Field(..., alias="resolvedName")

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class Node(BaseModel):
    """One entry of the flat definition map.

    The node id is not stored on the node; it is the key under which the
    node sits in the definition map.
    """

    type: NodeType
    is_canvas: bool = Field(..., alias="isCanvas")
    props: dict[str, Any] = Field(default_factory=dict)
    display_name: str = Field(..., alias="displayName")
    custom: dict[str, Any] = Field(default_factory=dict)
    parent: str | None = Field(
        default=None,
        description="Owning node id; absent only on ROOT",
    )
    hidden: bool = False
    nodes: list[str] = Field(default_factory=list)
    linked_nodes: dict[str, Any] = Field(default_factory=dict, alias="linkedNodes")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def create(
        cls,
        kind: NodeKind,
        *,
        props: dict[str, Any],
        display_name: str,
        parent: str | None,
        is_canvas: bool = False,
        nodes: list[str] | None = None,
    ) -> "Node":
        """Build a node with the reserved fields left empty."""
        return cls(
            type=NodeType(resolved_name=kind),
            is_canvas=is_canvas,
            props=props,
            display_name=display_name,
            parent=parent,
            nodes=list(nodes or []),
        )

    @property
    def kind(self) -> NodeKind:
        return NodeKind(self.type.resolved_name)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict with editor aliases; ``parent`` omitted when unset."""
        exclude = {"parent"} if self.parent is None else None
        return self.model_dump(by_alias=True, mode="json", exclude=exclude)


Definition = dict[str, Node]


# === LAYOUT DESIGNER TOOL ===

LAYOUT_DESIGNER_TOOL_NAME = "layout_designer"


class BasicElement(BaseModel):
    """One element requested inside a layout.

    ``element_type`` stays a free string so kinds without a generator can
    be skipped rather than rejected.
    """

    element_type: str
    element_requirements: str


class LayoutSpec(BaseModel):
    """One layout requested by the model."""

    index: int = 0
    layout_type: LayoutKind
    layout_requirements: str
    basic_elements: list[BasicElement] = Field(default_factory=list)


class LayoutDesignerArgs(BaseModel):
    """Arguments of a ``layout_designer`` tool call."""

    page_content: str | None = None
    layouts: list[LayoutSpec]


class PageContent(BaseModel):
    """Inbound generation request."""

    prompt: str
    images: list[str] = Field(default_factory=list)


def layout_designer_tool_schema() -> dict[str, Any]:
    """JSON schema of the ``layout_designer`` tool parameters.

    Returns:
        JSON Schema dict with one required ``layouts`` array.
    """
    return {
        "type": "object",
        "properties": {
            "page_content": {
                "type": "string",
                "description": (
                    "Natural language description of the desired page content "
                    "and structure"
                ),
            },
            "layouts": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "index": {
                            "type": "integer",
                            "description": "Position in page order starting from 0",
                        },
                        "layout_type": {
                            "type": "string",
                            "enum": [k.value for k in LayoutKind],
                        },
                        "layout_requirements": {
                            "type": "string",
                            "description": (
                                "Natural language description of layout "
                                "requirements including image URLs if specified"
                            ),
                        },
                        "basic_elements": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "element_type": {
                                        "type": "string",
                                        "enum": list(TOOL_ELEMENT_TYPES),
                                    },
                                    "element_requirements": {
                                        "type": "string",
                                        "description": (
                                            "Natural language description of "
                                            "element requirements"
                                        ),
                                    },
                                },
                                "required": ["element_type", "element_requirements"],
                            },
                        },
                    },
                    "required": [
                        "index",
                        "layout_type",
                        "layout_requirements",
                        "basic_elements",
                    ],
                },
            },
        },
        "required": ["layouts"],
    }


# === PROPS MODELS ===

Number = Union[int, float]
Length = Union[int, float, str]


class _Props(BaseModel):
    """Shape check for generated props, extra keys kept.

    Lax mode: numeric strings such as ``"2"`` pass as numbers, since the
    editor renders them unchanged. Values that cannot be read as the
    field's type (``"32px"`` for a number, ``5`` for a string) fail.
    """

    model_config = ConfigDict(extra="allow")


class ContainerProps(_Props):
    background: str | None = None
    padding: Number | None = None
    margin: Number | None = None
    borderRadius: Number | None = None
    elevation: Number | None = None
    display: str | None = None
    justifyContent: str | None = None
    alignItems: str | None = None


class FlexboxProps(_Props):
    flexDirection: str | None = None
    justifyContent: str | None = None
    alignItems: str | None = None
    flexWrap: str | None = None
    gap: Number | None = None
    padding: Number | None = None
    margin: Number | None = None
    width: Length | None = None
    minHeight: Length | None = None
    backgroundColor: str | None = None
    borderRadius: Number | None = None


class SectionProps(_Props):
    backgroundColor: str | None = None
    padding: Number | None = None
    margin: Number | None = None
    width: Length | None = None
    height: Length | None = None
    minHeight: Length | None = None
    borderRadius: Number | None = None
    shadow: str | None = None
    alignment: str | None = None


class HeadingProps(_Props):
    text: str | None = None
    fontSize: Number | None = None
    color: str | None = None
    textAlign: str | None = None
    level: int | None = None
    margin: Number | None = None
    fontWeight: Number | str | None = None
    lineHeight: Number | None = None


class ParagraphProps(_Props):
    text: str | None = None
    fontSize: Number | None = None
    color: str | None = None
    textAlign: str | None = None
    lineHeight: Number | None = None
    margin: Number | None = None
    maxWidth: Length | None = None


class TextProps(_Props):
    text: str | None = None
    fontSize: Number | None = None
    color: str | None = None
    textAlign: str | None = None
    fontWeight: Number | str | None = None
    margin: Number | None = None


class ButtonProps(_Props):
    text: str | None = None
    size: str | None = None
    variant: str | None = None
    color: str | None = None
    fullWidth: bool | None = None
    margin: Number | None = None


class DividerProps(_Props):
    width: Length | None = None
    color: str | None = None
    thickness: Number | None = None
    style: str | None = None
    margin: Number | None = None


class ImageProps(_Props):
    src: str | None = None
    alt: str | None = None
    width: Length | None = None
    height: Length | None = None
    borderRadius: Number | None = None
    margin: Number | None = None


LAYOUT_PROPS_MODELS: dict[LayoutKind, type[_Props]] = {
    LayoutKind.CONTAINER: ContainerProps,
    LayoutKind.FLEXBOX: FlexboxProps,
    LayoutKind.SECTION: SectionProps,
}

ELEMENT_PROPS_MODELS: dict[ElementKind, type[_Props]] = {
    ElementKind.HEADING: HeadingProps,
    ElementKind.PARAGRAPH: ParagraphProps,
    ElementKind.TEXT: TextProps,
    ElementKind.BUTTON: ButtonProps,
    ElementKind.DIVIDER: DividerProps,
    ElementKind.IMAGE: ImageProps,
}


__all__ = [
    # Kinds
    "NodeKind",
    "LayoutKind",
    "ElementKind",
    "TOOL_ELEMENT_TYPES",
    "ParentRequirements",
    # Editor node
    "NodeType",
    "Node",
    "Definition",
    # Layout designer tool
    "LAYOUT_DESIGNER_TOOL_NAME",
    "BasicElement",
    "LayoutSpec",
    "LayoutDesignerArgs",
    "PageContent",
    "layout_designer_tool_schema",
    # Props
    "ContainerProps",
    "FlexboxProps",
    "SectionProps",
    "HeadingProps",
    "ParagraphProps",
    "TextProps",
    "ButtonProps",
    "DividerProps",
    "ImageProps",
    "LAYOUT_PROPS_MODELS",
    "ELEMENT_PROPS_MODELS",
]
