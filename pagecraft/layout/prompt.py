"""Prompt text for layout props generation."""

from textwrap import dedent

from pagecraft.components.base import format_requirements
from pagecraft.llm.backend.base import Message
from pagecraft.schema import LayoutKind, ParentRequirements

LAYOUT_SYSTEM_PROMPT = """You are an expert layout engineer for a visual page editor. You produce
the properties of one layout node so that it sits harmoniously inside its
parent and gives its children consistent spacing.

Given the layout type, its requirements and the parent's requirements,
return a JSON object in the format shown for that type.

Container:
{
  "props": {
    "background": "#ffffff",
    "padding": 20,
    "margin": 5,
    "borderRadius": 4,
    "elevation": 0,
    "display": "block",
    "justifyContent": "flex-start",
    "alignItems": "flex-start"
  }
}

Flexbox:
{
  "props": {
    "flexDirection": "row",
    "justifyContent": "flex-start",
    "alignItems": "stretch",
    "flexWrap": "nowrap",
    "gap": 8,
    "padding": 20,
    "margin": 0,
    "width": "100%",
    "minHeight": 100,
    "backgroundColor": "#f5f5f5",
    "borderRadius": 0
  }
}

Section:
{
  "props": {
    "backgroundColor": "#f5f5f5",
    "padding": 20,
    "margin": 0,
    "width": "100%",
    "height": "auto",
    "minHeight": 100,
    "borderRadius": 0,
    "shadow": "none",
    "alignment": "flex-start"
  }
}

Design considerations:
- Pick colors that complement the parent and keep text readable.
- Account for the parent's padding when choosing margins, and keep spacing
  ratios consistent between siblings.
- Follow the parent's border radius, elevation and alignment patterns.
- Respect the parent's max-width and use units that adapt to the viewport.

Technical rules:
- Container uses "background"; Flexbox and Section use "backgroundColor".
- Numbers are unquoted (padding: 20); lengths with units are strings
  (width: "100%").
- Colors are hex strings such as "#ffffff".
- Use exactly the property names of the example for the type.
- Return ONLY the JSON object, with no explanation or comments."""


def build_layout_messages(
    layout_kind: LayoutKind,
    layout_requirements: str,
    parent_requirements: ParentRequirements,
) -> list[Message]:
    """System guidance plus the per-layout user message."""
    user_text = dedent(
        """\
        Generate layout properties for {kind} with the following context:

        Layout Requirements:
        {layout}

        Parent Component Requirements:
        {parent}

        Ensure the generated layout maintains visual harmony with the parent
        component while fulfilling its specific requirements.
        """
    ).format(
        kind=layout_kind.value,
        layout=layout_requirements,
        parent=format_requirements(parent_requirements),
    )
    return [Message.system(LAYOUT_SYSTEM_PROMPT), Message.user(user_text)]
