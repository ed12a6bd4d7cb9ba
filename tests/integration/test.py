"""End-to-end tests of page generation against a scripted model."""

import itertools
import random

import pytest

from pagecraft.layout import LayoutGenerator, LayoutGeneratorConfig
from pagecraft.llm import ModelAdapter, ModelCallError
from pagecraft.schema import NodeKind
from pagecraft.session import LayoutDesignSession, SessionState
from pagecraft.status import CollectingStatusSink
from pagecraft.tree import ROOT_ID, validate_definition

ELEMENT_TYPES = ["Heading", "Paragraph", "Text", "Button", "Divider", "Image", "Icon"]
LAYOUT_TYPES = ["Container", "Flexbox", "Section"]
HEADING_REPLY = {"props": {"text": "Title", "fontSize": 32}}


def make_session(backend, sink=None, concurrent=False):
    adapter = ModelAdapter(backend)
    generator = LayoutGenerator(
        adapter, config=LayoutGeneratorConfig(concurrent_elements=concurrent)
    )
    return LayoutDesignSession(adapter, sink or CollectingStatusSink(), generator)


def layout(index, layout_type="Container", elements=(), requirements=None):
    return {
        "index": index,
        "layout_type": layout_type,
        "layout_requirements": requirements or f"Layout at position {index}",
        "basic_elements": [
            {"element_type": t, "element_requirements": f"{t} number {i}"}
            for i, t in enumerate(elements)
        ],
    }


def random_layouts(rng, count):
    return [
        layout(
            index,
            rng.choice(LAYOUT_TYPES),
            [rng.choice(ELEMENT_TYPES) for _ in range(rng.randint(0, 6))],
            requirements=f"layout-{index}",
        )
        for index in rng.sample(range(count), count)
    ]


class TestHeroScenario:
    """A hero section with a heading and a button."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_four_entries(self, make_backend):
        backend = make_backend().with_design(
            [layout(0, "Container", ["Heading", "Button"], "Hero section")]
        )
        definition = await make_session(backend).generate_layout_design(
            {"prompt": "a hero section with a heading and a button", "images": []}
        )

        assert len(definition) == 4
        (container_id,) = definition[ROOT_ID].nodes
        container = definition[container_id]
        assert container.parent == ROOT_ID
        heading_id, button_id = container.nodes
        assert definition[heading_id].kind == NodeKind.HEADING
        assert definition[button_id].kind == NodeKind.USER_BUTTON
        assert definition[heading_id].parent == container_id
        assert definition[button_id].parent == container_id

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_image_urls_reach_model(self, make_backend):
        urls = ["https://img.test/hero.jpg", "https://img.test/team.png"]
        backend = make_backend().with_design([layout(0, "Section", ["Image", "Image"])])
        await make_session(backend).generate_layout_design({"prompt": "Gallery", "images": urls})

        design_request = backend.requests_for("page layout designer")[0]
        prompt_text = design_request.user.text
        for url in urls:
            assert url in prompt_text
        assert [p.url for p in design_request.user.parts[:2]] == urls


class TestOrdering:
    """Root order follows layout indices only."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_out_of_order_indices(self, make_backend):
        backend = make_backend().with_design(
            [layout(2, "Section"), layout(0, "Container"), layout(1, "Flexbox")]
        )
        definition = await make_session(backend).generate_layout_design({"prompt": "Page"})

        assert [definition[i].kind for i in definition[ROOT_ID].nodes] == [
            NodeKind.CONTAINER,
            NodeKind.FLEXBOX,
            NodeKind.SECTION,
        ]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_permutations_give_same_order(self, make_backend):
        layouts = [layout(0, "Container"), layout(1, "Flexbox"), layout(2, "Section")]
        orders = set()
        for permutation in itertools.permutations(layouts):
            backend = make_backend().with_design(list(permutation))
            definition = await make_session(backend).generate_layout_design({"prompt": "Page"})
            orders.add(tuple(definition[i].kind for i in definition[ROOT_ID].nodes))
        assert orders == {(NodeKind.CONTAINER, NodeKind.FLEXBOX, NodeKind.SECTION)}


class TestStructure:
    """Structural properties of generated maps."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    @pytest.mark.parametrize("seed", range(5))
    @pytest.mark.parametrize("concurrent", [False, True])
    async def test_random_specs_have_no_dangling_children(self, make_backend, seed, concurrent):
        rng = random.Random(seed)
        layouts = random_layouts(rng, rng.randint(1, 6))
        backend = make_backend().with_design(layouts)
        definition = await make_session(backend, concurrent=concurrent).generate_layout_design(
            {"prompt": "Random page"}
        )

        assert validate_definition(definition) == []
        expected_layouts = sorted(layouts, key=lambda entry: entry["index"])
        root_children = definition[ROOT_ID].nodes
        assert len(root_children) == len(expected_layouts)
        for layout_id, spec in zip(root_children, expected_layouts):
            supported = [
                e for e in spec["basic_elements"] if e["element_type"] != "Icon"
            ]
            assert definition[layout_id].kind.value == spec["layout_type"]
            assert len(definition[layout_id].nodes) == len(supported)

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_ids_unique_for_large_pages(self, make_backend):
        layouts = [
            layout(i, "Section", ["Heading", "Paragraph", "Text", "Button", "Divider", "Image"])
            for i in range(10)
        ]
        backend = make_backend().with_design(layouts)
        definition = await make_session(backend).generate_layout_design({"prompt": "Long page"})

        # ROOT + 10 layouts + 60 elements
        assert len(definition) == 71
        listed = [child for node in definition.values() for child in node.nodes]
        assert len(listed) == len(set(listed)) == 70

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_icon_skipped(self, make_backend):
        backend = make_backend().with_design(
            [layout(0, "Section", ["Heading", "Icon", "Paragraph"])]
        )
        sink = CollectingStatusSink()
        definition = await make_session(backend, sink).generate_layout_design({"prompt": "Page"})

        (section_id,) = definition[ROOT_ID].nodes
        kinds = [definition[c].kind for c in definition[section_id].nodes]
        assert kinds == [NodeKind.HEADING, NodeKind.PARAGRAPH]
        assert "Unsupported element type: Icon, skipping" in sink.messages("layout-processing")


class TestFailure:
    """Failures reject the whole request."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_third_of_five_elements(self, make_backend, failing_reply):
        backend = make_backend(
            routes={"heading component": failing_reply(3, ModelCallError("boom"), HEADING_REPLY)}
        ).with_design([layout(0, "Section", ["Heading"] * 5), layout(1, "Container")])
        sink = CollectingStatusSink()
        session = make_session(backend, sink)

        with pytest.raises(ModelCallError, match="boom"):
            await session.generate_layout_design({"prompt": "Page"})

        assert session.state == SessionState.FAILED
        assert len(backend.requests_for("heading component")) == 3
        assert backend.requests_for("layout engineer") == []
        assert "Layout processing completed" not in sink.messages()
        assert sink.events[-1].status_prefix == "error"
