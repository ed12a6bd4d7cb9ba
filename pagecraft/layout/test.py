"""Tests for the layout generator."""

import asyncio
import json

import pytest

from pagecraft.components import GenerationContext
from pagecraft.layout import (
    STATUS_PREFIX,
    LayoutGenerator,
    LayoutGeneratorConfig,
    build_layout_messages,
)
from pagecraft.llm import MalformedResponseError, ModelAdapter, ModelCallError
from pagecraft.schema import LayoutKind, LayoutSpec, NodeKind
from pagecraft.tree import ROOT_DESIGN_REQUIREMENTS, ROOT_ID, IdAllocator

HEADING_REPLY = {"props": {"text": "Title", "fontSize": 32}}


def make_layout(layout_type="Section", elements=(), index=0, requirements="Hero section"):
    return LayoutSpec.model_validate(
        {
            "index": index,
            "layout_type": layout_type,
            "layout_requirements": requirements,
            "basic_elements": [
                {"element_type": t, "element_requirements": f"{t} requirement {i}"}
                for i, t in enumerate(elements)
            ],
        }
    )


@pytest.fixture
def ctx(status_sink):
    return GenerationContext(emit=status_sink, ids=IdAllocator())


@pytest.fixture
def generator(adapter):
    return LayoutGenerator(adapter, config=LayoutGeneratorConfig())


# =============================================================================
# Prompt
# =============================================================================


class TestLayoutMessages:
    """Tests for build_layout_messages."""

    @pytest.mark.unit
    def test_user_message(self):
        system, user = build_layout_messages(
            LayoutKind.FLEXBOX, "Three feature cards", ROOT_DESIGN_REQUIREMENTS
        )
        assert "layout engineer" in system.text
        assert user.text.startswith("Generate layout properties for Flexbox")
        assert "Layout Requirements:\nThree feature cards" in user.text
        assert json.dumps(ROOT_DESIGN_REQUIREMENTS, indent=2) in user.text

    @pytest.mark.unit
    def test_background_rule_in_guidance(self):
        system, _ = build_layout_messages(LayoutKind.CONTAINER, "x", "y")
        assert 'Container uses "background"' in system.text


# =============================================================================
# Single layout
# =============================================================================


class TestProcessSingleLayout:
    """Tests for LayoutGenerator.process_single_layout."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_layout_entry_then_children(self, generator, ctx):
        layout = make_layout("Section", ["Heading", "Paragraph", "Button"])
        definition = await generator.process_single_layout(
            layout, ROOT_DESIGN_REQUIREMENTS, ctx
        )

        layout_id, *child_ids = list(definition)
        node = definition[layout_id]
        assert len(layout_id) == 10
        assert node.kind == NodeKind.SECTION
        assert node.is_canvas is True
        assert node.parent == ROOT_ID
        assert node.nodes == child_ids
        assert node.display_name.startswith("section-")
        assert node.props == {"padding": 20, "margin": 0}
        assert [definition[c].kind for c in child_ids] == [
            NodeKind.HEADING,
            NodeKind.PARAGRAPH,
            NodeKind.USER_BUTTON,
        ]
        assert all(definition[c].parent == layout_id for c in child_ids)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_elements_use_layout_requirements(self, generator, ctx, scripted_backend):
        layout = make_layout("Container", ["Heading"], requirements="Centered hero")
        await generator.process_single_layout(layout, ROOT_DESIGN_REQUIREMENTS, ctx)

        element_request, layout_request = scripted_backend.requests
        assert "heading component" in element_request.system
        assert "Parent Component Requirements:\nCentered hero" in element_request.user.text
        assert "layout engineer" in layout_request.system
        assert json.dumps(ROOT_DESIGN_REQUIREMENTS, indent=2) in layout_request.user.text

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_icon_skipped(self, generator, ctx, status_sink):
        layout = make_layout("Section", ["Heading", "Icon", "Button"])
        definition = await generator.process_single_layout(layout, "Hero", ctx)

        layout_id = next(iter(definition))
        assert len(definition) == 3
        assert len(definition[layout_id].nodes) == 2
        assert "Unsupported element type: Icon, skipping" in status_sink.messages(STATUS_PREFIX)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_layout_without_elements(self, generator, ctx):
        definition = await generator.process_single_layout(make_layout("Flexbox"), "Hero", ctx)
        ((layout_id, node),) = definition.items()
        assert node.nodes == []
        assert node.kind == NodeKind.FLEXBOX

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_status_messages(self, generator, ctx, status_sink):
        layout = make_layout("Section", ["Heading"])
        definition = await generator.process_single_layout(layout, "Hero", ctx)
        layout_id = next(iter(definition))

        messages = status_sink.messages(STATUS_PREFIX)
        expected = [
            "Starting to process single layout",
            f"Processing layout type: Section with ID: {layout_id}",
            "Number of basic elements to process: 1",
            "Processing element 1 of 1, type: Heading",
            "Using Heading generator tool",
            "Successfully generated Heading component",
            "Completed processing 1 basic elements",
            f"Layout {layout_id} processing completed with 1 child components",
        ]
        positions = [messages.index(m) for m in expected]
        assert positions == sorted(positions)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_third_of_five_elements_fails(
        self, make_backend, failing_reply, ctx, status_sink
    ):
        backend = make_backend(
            routes={"heading component": failing_reply(3, ModelCallError("boom"), HEADING_REPLY)}
        )
        generator = LayoutGenerator(ModelAdapter(backend), config=LayoutGeneratorConfig())
        layout = make_layout("Section", ["Heading"] * 5)

        with pytest.raises(ModelCallError, match="boom"):
            await generator.process_single_layout(layout, "Hero", ctx)

        # No element after the failing one and no layout call
        assert len(backend.requests) == 3
        assert backend.requests_for("layout engineer") == []
        assert status_sink.events[-1].status_prefix == "error"
        assert status_sink.events[-1].message == "Error processing layout: boom"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_malformed_layout_props(self, make_backend, ctx):
        backend = make_backend(routes={"layout engineer": {"props": {"padding": "lots"}}})
        generator = LayoutGenerator(ModelAdapter(backend), config=LayoutGeneratorConfig())

        with pytest.raises(MalformedResponseError, match="Section layout"):
            await generator.process_single_layout(make_layout("Section"), "Hero", ctx)


# =============================================================================
# Concurrent elements
# =============================================================================


class TestConcurrentElements:
    """Tests for concurrent element generation."""

    @pytest.mark.unit
    def test_config_from_env(self, monkeypatch):
        monkeypatch.setenv("LAYOUT_CONCURRENT_ELEMENTS", "true")
        assert LayoutGeneratorConfig.from_env().concurrent_elements is True

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_order_preserved(self, make_backend, ctx):
        class SlowFirstBackend(make_backend):
            async def generate(self, messages, *, tools=None, config=None):
                if "requirement 0" in messages[-1].text:
                    await asyncio.sleep(0.05)
                return await super().generate(messages, tools=tools, config=config)

        generator = LayoutGenerator(
            ModelAdapter(SlowFirstBackend()),
            config=LayoutGeneratorConfig(concurrent_elements=True),
        )
        layout = make_layout("Section", ["Heading", "Paragraph", "Divider"])
        definition = await generator.process_single_layout(layout, "Hero", ctx)

        layout_id, *child_ids = list(definition)
        assert definition[layout_id].nodes == child_ids
        assert [definition[c].kind for c in child_ids] == [
            NodeKind.HEADING,
            NodeKind.PARAGRAPH,
            NodeKind.DIVIDER,
        ]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failure_cancels_remaining(self, make_backend, ctx):
        class HangingBackend(make_backend):
            async def generate(self, messages, *, tools=None, config=None):
                if "requirement 0" in messages[-1].text:
                    await asyncio.sleep(30)
                if "requirement 1" in messages[-1].text:
                    raise ModelCallError("element failed")
                return await super().generate(messages, tools=tools, config=config)

        generator = LayoutGenerator(
            ModelAdapter(HangingBackend()),
            config=LayoutGeneratorConfig(concurrent_elements=True),
        )
        layout = make_layout("Section", ["Heading", "Paragraph"])

        with pytest.raises(ModelCallError, match="element failed"):
            await asyncio.wait_for(generator.process_single_layout(layout, "Hero", ctx), 5)


# =============================================================================
# Pages
# =============================================================================


class TestProcessLayouts:
    """Tests for LayoutGenerator.process_layouts."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_sorted_by_index(self, generator, ctx):
        layouts = [
            make_layout("Section", index=2),
            make_layout("Container", index=0),
            make_layout("Flexbox", index=1),
        ]
        result = await generator.process_layouts(layouts, ROOT_DESIGN_REQUIREMENTS, ctx)

        assert [result.definition[i].kind for i in result.layout_ids] == [
            NodeKind.CONTAINER,
            NodeKind.FLEXBOX,
            NodeKind.SECTION,
        ]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_equal_indices_keep_input_order(self, generator, ctx):
        layouts = [
            make_layout("Flexbox", index=1),
            make_layout("Section", index=0),
            make_layout("Container", index=1),
        ]
        result = await generator.process_layouts(layouts, "Page", ctx)

        assert [result.definition[i].kind for i in result.layout_ids] == [
            NodeKind.SECTION,
            NodeKind.FLEXBOX,
            NodeKind.CONTAINER,
        ]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_definition_holds_every_entry(self, generator, ctx):
        layouts = [
            make_layout("Section", ["Heading", "Button"], index=0),
            make_layout("Container", ["Paragraph"], index=1),
        ]
        result = await generator.process_layouts(layouts, "Page", ctx)

        assert len(result.layout_ids) == 2
        assert len(result.definition) == 5
        assert set(result.layout_ids) <= set(result.definition)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fail_fast(self, make_backend, ctx):
        backend = make_backend(routes={"layout engineer": ModelCallError("layout call failed")})
        generator = LayoutGenerator(ModelAdapter(backend), config=LayoutGeneratorConfig())
        layouts = [make_layout("Section", index=0), make_layout("Container", index=1)]

        with pytest.raises(ModelCallError):
            await generator.process_layouts(layouts, "Page", ctx)
        assert len(backend.requests_for("layout engineer")) == 1
