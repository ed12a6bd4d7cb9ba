"""Tests for definition map assembly."""

import re

import pytest

from pagecraft.llm.backend.base import GenerationError
from pagecraft.schema import Node, NodeKind

from .lib import (
    ROOT_ID,
    IdAllocator,
    build_root_node,
    definition_to_dict,
    is_valid_definition,
    merge_definitions,
    validate_definition,
)


def _leaf(parent: str) -> Node:
    return Node.create(NodeKind.TEXT, props={}, display_name="text-0000", parent=parent)


def _layout(children: list[str]) -> Node:
    return Node.create(
        NodeKind.CONTAINER,
        props={},
        display_name="container-000000",
        parent=ROOT_ID,
        is_canvas=True,
        nodes=children,
    )


class TestIdAllocator:
    """Tests for request-scoped id allocation."""

    @pytest.mark.unit
    def test_id_lengths(self):
        ids = IdAllocator()
        assert re.fullmatch(r"[0-9a-f]{10}", ids.layout_id())
        assert re.fullmatch(r"[0-9a-f]{8}", ids.element_id())

    @pytest.mark.unit
    def test_ids_pairwise_distinct(self):
        ids = IdAllocator()
        issued = [ids.element_id() for _ in range(200)] + [
            ids.layout_id() for _ in range(50)
        ]
        assert len(set(issued)) == len(issued)
        assert ROOT_ID not in issued
        assert ids.issued == frozenset(issued)

    @pytest.mark.unit
    def test_collisions_are_redrawn(self, monkeypatch):
        """A repeated UUID prefix is redrawn rather than reissued."""
        import uuid

        draws = iter(
            [
                uuid.UUID("aaaaaaaa-0000-4000-8000-000000000000"),
                uuid.UUID("aaaaaaaa-0000-4000-8000-000000000000"),
                uuid.UUID("bbbbbbbb-0000-4000-8000-000000000000"),
            ]
        )
        monkeypatch.setattr("pagecraft.tree.lib.uuid.uuid4", lambda: next(draws))
        ids = IdAllocator()
        assert ids.element_id() == "aaaaaaaa"
        assert ids.element_id() == "bbbbbbbb"

    @pytest.mark.unit
    def test_display_names(self):
        ids = IdAllocator()
        assert re.fullmatch(r"container-[0-9a-f]{6}", ids.display_name("Container", layout=True))
        assert re.fullmatch(r"heading-[0-9a-f]{4}", ids.display_name("heading"))

    @pytest.mark.unit
    def test_allocators_are_independent(self):
        first, second = IdAllocator(), IdAllocator()
        first.element_id()
        assert second.issued == frozenset()


class TestRootNode:
    """Tests for the page root."""

    @pytest.mark.unit
    def test_root_shape(self):
        root = build_root_node(["a", "b"]).to_dict()
        assert root["type"] == {"resolvedName": "Container"}
        assert root["isCanvas"] is True
        assert root["displayName"] == "root"
        assert root["nodes"] == ["a", "b"]
        assert root["props"]["background"] == "#ffffff"
        assert root["props"]["data-cy"] == "root-container"
        assert "parent" not in root

    @pytest.mark.unit
    def test_fresh_root_every_call(self):
        first = build_root_node(["a"])
        first.props["background"] = "#000000"
        first.nodes.append("b")
        second = build_root_node([])
        assert second.props["background"] == "#ffffff"
        assert second.nodes == []


class TestMerge:
    """Tests for merging definition maps."""

    @pytest.mark.unit
    def test_union(self):
        target = {"a": _leaf("x")}
        merged = merge_definitions(target, {"b": _leaf("x")})
        assert merged is target
        assert list(merged) == ["a", "b"]

    @pytest.mark.unit
    def test_collision_raises(self):
        with pytest.raises(GenerationError, match="Duplicate node id"):
            merge_definitions({"a": _leaf("x")}, {"a": _leaf("y")})


class TestValidateDefinition:
    """Tests for structural validation."""

    @pytest.mark.unit
    def test_valid_tree(self):
        definition = {
            ROOT_ID: build_root_node(["L1"]),
            "L1": _layout(["e1", "e2"]),
            "e1": _leaf("L1"),
            "e2": _leaf("L1"),
        }
        assert validate_definition(definition) == []
        assert is_valid_definition(definition)

    @pytest.mark.unit
    def test_missing_root(self):
        issues = validate_definition({"L1": _layout([])})
        assert [i.issue_type for i in issues] == ["missing_root", "unknown_parent"]

    @pytest.mark.unit
    def test_dangling_child(self):
        definition = {ROOT_ID: build_root_node(["L1"]), "L1": _layout(["ghost"])}
        issues = validate_definition(definition)
        assert [i.issue_type for i in issues] == ["dangling_child"]
        assert issues[0].node_id == "L1"

    @pytest.mark.unit
    def test_parent_mismatch_and_unknown_parent(self):
        definition = {
            ROOT_ID: build_root_node(["L1"]),
            "L1": _layout(["e1"]),
            "e1": _leaf("nowhere"),
        }
        types = sorted(i.issue_type for i in validate_definition(definition))
        assert types == ["parent_mismatch", "unknown_parent"]

    @pytest.mark.unit
    def test_child_listed_twice(self):
        definition = {
            ROOT_ID: build_root_node(["L1"]),
            "L1": _layout(["e1", "e1"]),
            "e1": _leaf("L1"),
        }
        assert [i.issue_type for i in validate_definition(definition)] == [
            "duplicate_child"
        ]

    @pytest.mark.unit
    def test_definition_to_dict(self):
        definition = {ROOT_ID: build_root_node(["L1"]), "L1": _layout([])}
        data = definition_to_dict(definition)
        assert list(data) == [ROOT_ID, "L1"]
        assert data["L1"]["parent"] == ROOT_ID
