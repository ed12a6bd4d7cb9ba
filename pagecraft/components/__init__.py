"""Component generators for leaf page elements.

Each generator turns one element request (requirements text plus the
owning layout's requirements) into a single editor node, using one model
call answered with a ``{"props": {...}}`` JSON object.

Example:
    >>> from pagecraft.components import build_component_registry, GenerationContext
    >>> registry = build_component_registry(adapter)
    >>> ctx = GenerationContext(emit=LoggingStatusSink())
    >>> await registry[ElementKind.HEADING].generate(
    ...     "Main title 'Welcome'", "Hero section", "3f9a0c1b2d", ctx
    ... )
    {'a81f3e09': Node(...)}
"""

from .base import (
    ComponentGenerator,
    GenerationContext,
    extract_json,
    format_requirements,
    parse_props,
)
from .button import ButtonGenerator
from .divider import DividerGenerator
from .heading import HeadingGenerator
from .image import (
    DEFAULT_IMAGE_HEIGHT,
    DEFAULT_IMAGE_WIDTH,
    ImageGenerator,
    placeholder_src,
)
from .paragraph import ParagraphGenerator
from .registry import (
    GENERATOR_CLASSES,
    ComponentRegistry,
    build_component_registry,
    resolve_element_kind,
)
from .text import TextGenerator

__all__ = [
    # Base
    "ComponentGenerator",
    "GenerationContext",
    "extract_json",
    "format_requirements",
    "parse_props",
    # Generators
    "HeadingGenerator",
    "ParagraphGenerator",
    "TextGenerator",
    "ButtonGenerator",
    "DividerGenerator",
    "ImageGenerator",
    "DEFAULT_IMAGE_WIDTH",
    "DEFAULT_IMAGE_HEIGHT",
    "placeholder_src",
    # Registry
    "GENERATOR_CLASSES",
    "ComponentRegistry",
    "build_component_registry",
    "resolve_element_kind",
]
