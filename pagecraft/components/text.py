"""Text component generator."""

from pagecraft.schema import ElementKind

from .base import ComponentGenerator

TEXT_SYSTEM_PROMPT = """You are a text component specialist for a visual page editor.
Text components hold short inline copy such as labels, captions, prices or
taglines. Given the requirements of one text element and of the layout that
holds it, return its properties.

Respond with a single JSON object and nothing else:
{
  "props": {
    "text": "Short label",
    "fontSize": 14,
    "color": "#555555",
    "textAlign": "left",
    "fontWeight": "500",
    "margin": 4
  }
}

Property rules:
- text: short copy, one line where possible
- fontSize: pixels
- fontWeight: a number or a numeric string such as "500"
- textAlign: "left", "center" or "right"
- margin: pixels
- color: hex color"""


class TextGenerator(ComponentGenerator):
    """Generates ``Text`` nodes."""

    kind = ElementKind.TEXT
    SYSTEM_PROMPT = TEXT_SYSTEM_PROMPT
