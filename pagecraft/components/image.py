"""Image component generator."""

from typing import Any

from pagecraft.schema import ElementKind

from .base import ComponentGenerator

DEFAULT_IMAGE_WIDTH = 320
DEFAULT_IMAGE_HEIGHT = 240

IMAGE_SYSTEM_PROMPT = """You are an image component specialist for a visual page editor.
Given the requirements of one image and of the layout that holds it, return
the image's properties.

Respond with a single JSON object and nothing else:
{
  "props": {
    "src": "https://example.com/photo.jpg",
    "alt": "Description of the image",
    "width": 320,
    "height": 240,
    "borderRadius": 8,
    "margin": 0
  }
}

Property rules:
- src: when the requirements contain an image URL, use that exact URL
- alt: a meaningful description for screen readers
- width and height: pixels or a percentage string
- borderRadius: pixels
- margin: pixels

Only leave src empty when the requirements give no URL at all."""


def placeholder_src(width: Any, height: Any) -> str:
    """Placeholder image path for the given dimensions."""
    return f"/api/placeholder/{width}/{height}"


class ImageGenerator(ComponentGenerator):
    """Generates ``Image`` nodes; missing sources become placeholders."""

    kind = ElementKind.IMAGE
    SYSTEM_PROMPT = IMAGE_SYSTEM_PROMPT

    def finalize_props(self, props: dict[str, Any]) -> dict[str, Any]:
        if props.get("src"):
            return props
        completed = dict(props)
        completed["src"] = placeholder_src(
            props.get("width") or DEFAULT_IMAGE_WIDTH,
            props.get("height") or DEFAULT_IMAGE_HEIGHT,
        )
        return completed
