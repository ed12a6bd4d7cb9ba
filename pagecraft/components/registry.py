"""Element kind to generator registry."""

from pagecraft.llm.adapter import ModelAdapter
from pagecraft.schema import ElementKind

from .base import ComponentGenerator
from .button import ButtonGenerator
from .divider import DividerGenerator
from .heading import HeadingGenerator
from .image import ImageGenerator
from .paragraph import ParagraphGenerator
from .text import TextGenerator

GENERATOR_CLASSES: dict[ElementKind, type[ComponentGenerator]] = {
    ElementKind.HEADING: HeadingGenerator,
    ElementKind.PARAGRAPH: ParagraphGenerator,
    ElementKind.TEXT: TextGenerator,
    ElementKind.BUTTON: ButtonGenerator,
    ElementKind.DIVIDER: DividerGenerator,
    ElementKind.IMAGE: ImageGenerator,
}

ComponentRegistry = dict[ElementKind, ComponentGenerator]


def build_component_registry(adapter: ModelAdapter) -> ComponentRegistry:
    """One generator per element kind, all sharing ``adapter``."""
    return {kind: cls(adapter) for kind, cls in GENERATOR_CLASSES.items()}


def resolve_element_kind(element_type: str) -> ElementKind | None:
    """Map a requested element type to its kind.

    Args:
        element_type: Type string from the layout designer tool call.

    Returns:
        Matching ElementKind, or None when no generator exists (e.g. Icon).
    """
    try:
        return ElementKind(element_type)
    except ValueError:
        return None
