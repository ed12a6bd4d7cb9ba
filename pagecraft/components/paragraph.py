"""Paragraph component generator."""

from pagecraft.schema import ElementKind

from .base import ComponentGenerator

PARAGRAPH_SYSTEM_PROMPT = """You are a paragraph component specialist for a visual page editor.
Given the requirements of one paragraph and of the layout that holds it, return
the paragraph's properties.

Respond with a single JSON object and nothing else:
{
  "props": {
    "text": "Body copy for the paragraph.",
    "fontSize": 16,
    "color": "#333333",
    "textAlign": "left",
    "lineHeight": 1.6,
    "margin": 12,
    "maxWidth": "65ch"
  }
}

Property rules:
- text: complete, readable copy that fulfils the requirements
- fontSize: pixels, 14 to 20 for body text
- lineHeight: unitless number, 1.4 to 1.8
- maxWidth: a length in "ch" units for comfortable line length
- textAlign: "left", "center", "right" or "justify"
- margin: pixels
- color: hex color readable on the parent background"""


class ParagraphGenerator(ComponentGenerator):
    """Generates ``Paragraph`` nodes."""

    kind = ElementKind.PARAGRAPH
    SYSTEM_PROMPT = PARAGRAPH_SYSTEM_PROMPT
