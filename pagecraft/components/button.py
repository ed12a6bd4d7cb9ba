"""Button component generator."""

from pagecraft.schema import ElementKind

from .base import ComponentGenerator

BUTTON_SYSTEM_PROMPT = """You are a button component specialist for a visual page editor.
Given the requirements of one button and of the layout that holds it, return
the button's properties.

Respond with a single JSON object and nothing else:
{
  "props": {
    "text": "Get started",
    "size": "medium",
    "variant": "contained",
    "color": "primary",
    "fullWidth": false,
    "margin": 8
  }
}

Property rules:
- text: a short call to action
- size: "small", "medium" or "large"
- variant: "text", "contained" or "outlined"
- color: "primary", "secondary", "error", "warning", "info" or "success"
- fullWidth: boolean
- margin: pixels

Use "contained" for the main action of a layout and "outlined" or "text"
for secondary actions."""


class ButtonGenerator(ComponentGenerator):
    """Generates ``UserButton`` nodes."""

    kind = ElementKind.BUTTON
    SYSTEM_PROMPT = BUTTON_SYSTEM_PROMPT
