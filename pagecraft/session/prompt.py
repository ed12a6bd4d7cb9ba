"""Prompt text and tool definition for page layout design."""

from pagecraft.llm.backend.base import (
    ContentPart,
    ImagePart,
    Message,
    TextPart,
    ToolDefinition,
)
from pagecraft.schema import (
    LAYOUT_DESIGNER_TOOL_NAME,
    PageContent,
    layout_designer_tool_schema,
)

DESIGN_SYSTEM_PROMPT = """You are an expert page layout designer who turns content requirements into
structured, user-friendly page layouts built from layout components and
basic elements.

1. Layout components

Container
- General wrapper for a block of content.
- Requirements should state width and height behaviour, padding and
  spacing, content alignment (prefer centered), background styling with any
  image URL, and responsive behaviour.

Flexbox
- Only for rows or columns whose children are ALL the same size.
- Never more than 4 children; use Container or Section when sizes differ.
- Requirements should state flow direction, alignment (prefer centered),
  a gap of at least 20px, wrapping, any background image, and confirm that
  every child is uniform in size.

Section
- A distinct band of content.
- Requirements should state dimensions, padding on all sides, background
  treatment with any image URL, content organisation (prefer centered) and
  how it is separated from neighbouring sections.

2. Basic elements

Button: action type (primary, secondary), size, label, prominence,
alignment (center main calls to action) and spacing.
Icon: icon name, size, color and purpose; always placed next to the
content it belongs to, never on its own.
Heading: text, level h1 to h6, importance, spacing and alignment (prefer
centered).
Paragraph: text, formatting, spacing, width constraints and readability.
Image: source URL when one is given, size, alt text, aspect ratio and
responsive behaviour.

3. Considerations
- Keep a clear hierarchy and proper nesting.
- Design for responsive layouts and accessibility.
- Put every provided image URL into the requirements that use it.
- Prefer centered designs ("justifyContent": "center") over
  "space-between".
- Use consistent padding on all sides (for example 16px or 24px).
- Buttons need clear positioning and alignment inside their layout."""

LAYOUT_DESIGNER_TOOL_DESCRIPTION = """Generate the page structure as layout components, in page
order, each with the basic elements it contains. Layouts are placed inside a
root container with a white background, 20px padding and a maximum width of
1200px.

CRITICAL RULE: element_type in basic_elements may ONLY be "Heading",
"Paragraph", "Text", "Button", "Image", "Divider" or "Icon". Never use
"Container" as an element_type; containers are layout_type values only.

For grouped or nested content, do not nest containers inside
basic_elements. Create a separate layout with its own index and
basic_elements, and describe the relationship in layout_requirements.

Use the Flexbox layout_type only when ALL children are uniform in size, and
never with more than 4 children. Use Container or Section for children of
varying size.

Prefer centered designs ("justifyContent": "center") and consistent padding
on all sides with adequate spacing between elements.

Each layout has:
- index: position in page order starting from 0
- layout_type: Container, Flexbox or Section
- layout_requirements: layout needs, including any image URLs
- basic_elements: elements using only the allowed element types"""

PAGE_GUIDELINES = """\
Consider these important factors:
1. The page will be contained within a root container with:
   - White background
   - 20px padding
   - Maximum width constraint (1200px)
   - Proper spacing between elements

2. Generate layout components that:
   - Follow a logical visual hierarchy
   - Keep spacing and alignment consistent
   - Work responsively within the root container
   - Use the right layout type (Container/Flexbox/Section)
   - Include any specified image URLs in the layout requirements
   - PRIORITIZE CENTERED DESIGNS with "justifyContent": "center" rather than "space-between"
   - Use consistent padding on all sides of containers (e.g., 16px or 24px)

3. For background images or image elements:
   - Include the image URLs directly in the requirements
   - Give images sensible dimensions and spacing

4. IMPORTANT: Only use Flexbox when all child elements should be uniform in size.
   - Limit Flexbox layouts to a maximum of 4 elements
   - If elements need different sizes or proportions, use Container or Section instead"""


def layout_designer_tool() -> ToolDefinition:
    """The ``layout_designer`` tool offered to the model."""
    return ToolDefinition(
        name=LAYOUT_DESIGNER_TOOL_NAME,
        description=LAYOUT_DESIGNER_TOOL_DESCRIPTION,
        input_schema=layout_designer_tool_schema(),
    )


def build_design_prompt(page_content: PageContent) -> str:
    """User prompt for the layout design call.

    Args:
        page_content: The request; every image URL is listed by number.

    Returns:
        Prompt text.
    """
    prompt = (
        "Design a complete page layout based on the following content requirements:\n"
        f"{page_content.prompt}\n\n{PAGE_GUIDELINES}"
    )
    if page_content.images:
        prompt += "\n\n5. Image URLs to use (MUST include ALL of these):\n"
        for number, url in enumerate(page_content.images, start=1):
            prompt += f"  - Image {number}: {url}\n"
        prompt += (
            "\nPlease make sure ALL of these images are incorporated into your layout "
            "design and their exact URLs are included in the element_requirements."
        )
    return prompt


def build_design_messages(page_content: PageContent) -> list[Message]:
    """System guidance plus a user message of images followed by the prompt."""
    parts: list[ContentPart] = [ImagePart(url) for url in page_content.images]
    parts.append(TextPart(build_design_prompt(page_content)))
    return [Message.system(DESIGN_SYSTEM_PROMPT), Message.user(parts)]
