"""Schema module: node model, layout designer tool contract and props shapes."""

from .lib import (
    ELEMENT_PROPS_MODELS,
    LAYOUT_DESIGNER_TOOL_NAME,
    LAYOUT_PROPS_MODELS,
    TOOL_ELEMENT_TYPES,
    BasicElement,
    ButtonProps,
    ContainerProps,
    Definition,
    DividerProps,
    ElementKind,
    FlexboxProps,
    HeadingProps,
    ImageProps,
    LayoutDesignerArgs,
    LayoutKind,
    LayoutSpec,
    Node,
    NodeKind,
    NodeType,
    PageContent,
    ParagraphProps,
    ParentRequirements,
    SectionProps,
    TextProps,
    layout_designer_tool_schema,
)

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
