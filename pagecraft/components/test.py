"""Tests for the component generators."""

import json

import pytest

from pagecraft.components import (
    ButtonGenerator,
    GenerationContext,
    HeadingGenerator,
    ImageGenerator,
    ParagraphGenerator,
    build_component_registry,
    extract_json,
    parse_props,
    placeholder_src,
    resolve_element_kind,
)
from pagecraft.llm.backend.base import MalformedResponseError, ModelCallError
from pagecraft.schema import ElementKind, HeadingProps, NodeKind
from pagecraft.tree import IdAllocator

PARENT_ID = "3f9a0c1b2d"


@pytest.fixture
def ctx(status_sink):
    return GenerationContext(emit=status_sink, ids=IdAllocator())


# =============================================================================
# Response parsing
# =============================================================================


class TestParseProps:
    """Tests for extract_json and parse_props."""

    @pytest.mark.unit
    def test_extract_plain_json(self):
        assert extract_json('  {"props": {}} ') == '{"props": {}}'

    @pytest.mark.unit
    def test_extract_fenced_json(self):
        text = 'Here you go:\n```json\n{"props": {"text": "Hi"}}\n```\nDone.'
        assert extract_json(text) == '{"props": {"text": "Hi"}}'

    @pytest.mark.unit
    def test_props_returned_unchanged(self):
        text = json.dumps({"props": {"text": "Hi", "level": 9, "data-cy": "title"}})
        props = parse_props(text, HeadingProps, "Heading")
        # Only JSON types are checked, never ranges.
        assert props == {"text": "Hi", "level": 9, "data-cy": "title"}

    @pytest.mark.unit
    def test_numeric_string_level_kept_as_given(self):
        props = parse_props('{"props": {"level": "2"}}', HeadingProps, "Heading")
        assert props == {"level": "2"}

    @pytest.mark.unit
    def test_invalid_json(self):
        with pytest.raises(MalformedResponseError, match="not valid JSON"):
            parse_props("not json", HeadingProps, "Heading")

    @pytest.mark.unit
    def test_not_an_object(self):
        with pytest.raises(MalformedResponseError, match="not a JSON object"):
            parse_props("[1, 2]", HeadingProps, "Heading")

    @pytest.mark.unit
    def test_missing_props(self):
        with pytest.raises(MalformedResponseError, match="no 'props' key"):
            parse_props('{"text": "Hi"}', HeadingProps, "Heading")

    @pytest.mark.unit
    def test_props_not_object(self):
        with pytest.raises(MalformedResponseError, match="not an object"):
            parse_props('{"props": "Hi"}', HeadingProps, "Heading")

    @pytest.mark.unit
    def test_wrong_prop_type(self):
        with pytest.raises(MalformedResponseError, match="wrong shape"):
            parse_props('{"props": {"fontSize": "big"}}', HeadingProps, "Heading")


# =============================================================================
# Generators
# =============================================================================


class TestComponentGenerator:
    """Tests for ComponentGenerator.generate."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_heading_node(self, adapter, ctx):
        definition = await HeadingGenerator(adapter).generate(
            "Main title 'Welcome'", "Hero section", PARENT_ID, ctx
        )

        ((node_id, node),) = definition.items()
        assert len(node_id) == 8
        assert node.kind == NodeKind.HEADING
        assert node.parent == PARENT_ID
        assert node.is_canvas is False
        assert node.nodes == []
        assert node.display_name.startswith("heading-")
        assert node.props["text"] == "Welcome"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_status_events(self, adapter, ctx, status_sink):
        definition = await HeadingGenerator(adapter).generate("Title", "Hero", PARENT_ID, ctx)
        (node_id,) = definition

        assert [(e.status_prefix, e.message) for e in status_sink.events] == [
            ("heading-generation", "Generating heading component"),
            ("heading-generation", "Calling model scripted-model"),
            ("heading-generation", "Model response received"),
            ("component-generated", f"Heading component generated with ID: {node_id}"),
        ]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_button_is_user_button(self, adapter, ctx):
        generator = ButtonGenerator(adapter)
        definition = await generator.generate("Sign up call to action", "Hero", PARENT_ID, ctx)

        (node,) = definition.values()
        assert node.kind == NodeKind.USER_BUTTON
        assert node.to_dict()["type"] == {"resolvedName": "UserButton"}
        assert node.display_name.startswith("button-")
        assert generator.status_prefix == "button-generation"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_user_message_embeds_requirements(self, adapter, ctx, scripted_backend):
        parent = {"purpose": "Hero", "constraints": {"padding": "20px"}}
        await ParagraphGenerator(adapter).generate("Intro copy", parent, PARENT_ID, ctx)

        (request,) = scripted_backend.requests
        assert "paragraph component" in request.system
        text = request.user.text
        assert "Element Requirements:\nIntro copy" in text
        assert json.dumps(parent, indent=2) in text

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_string_parent_verbatim(self, adapter, ctx, scripted_backend):
        await ParagraphGenerator(adapter).generate("Intro", "Centered hero", PARENT_ID, ctx)
        text = scripted_backend.requests[0].user.text
        assert "Parent Component Requirements:\nCentered hero" in text

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fenced_response_accepted(self, adapter, ctx, scripted_backend):
        scripted_backend.replies.append('```json\n{"props": {"text": "Fenced"}}\n```')
        definition = await HeadingGenerator(adapter).generate("Title", "Hero", PARENT_ID, ctx)
        (node,) = definition.values()
        assert node.props == {"text": "Fenced"}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_malformed_response(self, adapter, ctx, scripted_backend, status_sink):
        scripted_backend.replies.append('{"text": "no props"}')
        with pytest.raises(MalformedResponseError):
            await ParagraphGenerator(adapter).generate("Intro", "Hero", PARENT_ID, ctx)

        assert status_sink.events[-1].status_prefix == "error"
        assert status_sink.events[-1].message.startswith("Error generating paragraph:")
        assert "component-generated" not in status_sink.prefixes
        assert ctx.ids.issued == frozenset()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_model_error_propagates(self, adapter, ctx, scripted_backend, status_sink):
        scripted_backend.replies.append(ModelCallError("upstream 500"))
        with pytest.raises(ModelCallError, match="upstream 500"):
            await HeadingGenerator(adapter).generate("Title", "Hero", PARENT_ID, ctx)

        assert status_sink.messages("error") == [
            "Error calling model: upstream 500",
            "Error generating heading: upstream 500",
        ]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_ids_unique_within_context(self, adapter, ctx):
        generator = HeadingGenerator(adapter)
        ids = set()
        for _ in range(20):
            ids.update(await generator.generate("Title", "Hero", PARENT_ID, ctx))
        assert len(ids) == 20


class TestImageGenerator:
    """Tests for image placeholder completion."""

    @pytest.mark.unit
    def test_placeholder_src(self):
        assert placeholder_src(400, 300) == "/api/placeholder/400/300"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_given_src_kept(self, adapter, ctx):
        definition = await ImageGenerator(adapter).generate("Photo", "Hero", PARENT_ID, ctx)
        (node,) = definition.values()
        assert node.props["src"] == "https://example.com/a.png"
        assert node.kind == NodeKind.IMAGE

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_src_uses_dimensions(self, adapter, ctx, scripted_backend):
        scripted_backend.replies.append({"props": {"alt": "Team", "width": 400, "height": 300}})
        definition = await ImageGenerator(adapter).generate("Team photo", "Hero", PARENT_ID, ctx)
        (node,) = definition.values()
        assert node.props["src"] == "/api/placeholder/400/300"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_src_default_size(self, adapter, ctx, scripted_backend):
        scripted_backend.replies.append({"props": {"alt": "Team", "src": ""}})
        definition = await ImageGenerator(adapter).generate("Team photo", "Hero", PARENT_ID, ctx)
        (node,) = definition.values()
        assert node.props["src"] == "/api/placeholder/320/240"


# =============================================================================
# Registry
# =============================================================================


class TestRegistry:
    """Tests for build_component_registry and resolve_element_kind."""

    @pytest.mark.unit
    def test_one_generator_per_kind(self, adapter):
        registry = build_component_registry(adapter)
        assert set(registry) == set(ElementKind)
        assert all(g.adapter is adapter for g in registry.values())
        assert all(g.kind == kind for kind, g in registry.items())

    @pytest.mark.unit
    def test_resolve_known_kinds(self):
        assert resolve_element_kind("Button") == ElementKind.BUTTON
        assert resolve_element_kind("Divider") == ElementKind.DIVIDER

    @pytest.mark.unit
    def test_resolve_unknown_kinds(self):
        assert resolve_element_kind("Icon") is None
        assert resolve_element_kind("heading") is None
