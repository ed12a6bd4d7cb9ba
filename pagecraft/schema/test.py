"""Tests for the schema module."""

import pytest
from pydantic import ValidationError

from .lib import (
    ELEMENT_PROPS_MODELS,
    LAYOUT_PROPS_MODELS,
    TOOL_ELEMENT_TYPES,
    ElementKind,
    HeadingProps,
    LayoutDesignerArgs,
    LayoutKind,
    Node,
    NodeKind,
    PageContent,
    TextProps,
    layout_designer_tool_schema,
)


class TestKinds:
    """Tests for kind enums."""

    @pytest.mark.unit
    def test_button_maps_to_user_button(self):
        assert ElementKind.BUTTON.node_kind == NodeKind.USER_BUTTON
        assert ElementKind.HEADING.node_kind == NodeKind.HEADING

    @pytest.mark.unit
    def test_layout_kinds_are_node_kinds(self):
        for kind in LayoutKind:
            assert kind.node_kind.value == kind.value

    @pytest.mark.unit
    def test_tool_types_cover_generators_plus_icon(self):
        assert set(TOOL_ELEMENT_TYPES) == {k.value for k in ElementKind} | {"Icon"}

    @pytest.mark.unit
    def test_every_kind_has_props_model(self):
        assert set(LAYOUT_PROPS_MODELS) == set(LayoutKind)
        assert set(ELEMENT_PROPS_MODELS) == set(ElementKind)


class TestNode:
    """Tests for the editor node model."""

    @pytest.mark.unit
    def test_serialises_with_editor_aliases(self):
        node = Node.create(
            NodeKind.HEADING,
            props={"text": "Hello"},
            display_name="heading-ab12",
            parent="abc123def0",
        )
        assert node.to_dict() == {
            "type": {"resolvedName": "Heading"},
            "isCanvas": False,
            "props": {"text": "Hello"},
            "displayName": "heading-ab12",
            "custom": {},
            "parent": "abc123def0",
            "hidden": False,
            "nodes": [],
            "linkedNodes": {},
        }

    @pytest.mark.unit
    def test_parent_omitted_when_unset(self):
        node = Node.create(
            NodeKind.CONTAINER, props={}, display_name="root", parent=None, is_canvas=True
        )
        assert "parent" not in node.to_dict()

    @pytest.mark.unit
    def test_parses_editor_json(self):
        node = Node.model_validate(
            {
                "type": {"resolvedName": "UserButton"},
                "isCanvas": False,
                "props": {"text": "Go"},
                "displayName": "button-1a2b",
                "parent": "x",
            }
        )
        assert node.kind == NodeKind.USER_BUTTON
        assert node.linked_nodes == {}

    @pytest.mark.unit
    def test_create_copies_children(self):
        children = ["a", "b"]
        node = Node.create(
            NodeKind.SECTION, props={}, display_name="s", parent="ROOT", nodes=children
        )
        children.append("c")
        assert node.nodes == ["a", "b"]


class TestLayoutDesignerArgs:
    """Tests for tool-call argument parsing."""

    @pytest.mark.unit
    def test_parses_layouts(self):
        args = LayoutDesignerArgs.model_validate(
            {
                "page_content": "landing",
                "layouts": [
                    {
                        "index": 1,
                        "layout_type": "Section",
                        "layout_requirements": "hero",
                        "basic_elements": [
                            {"element_type": "Icon", "element_requirements": "star"}
                        ],
                    }
                ],
            }
        )
        assert args.layouts[0].layout_type == LayoutKind.SECTION
        assert args.layouts[0].basic_elements[0].element_type == "Icon"

    @pytest.mark.unit
    def test_index_defaults_to_zero(self):
        args = LayoutDesignerArgs.model_validate(
            {"layouts": [{"layout_type": "Container", "layout_requirements": "x"}]}
        )
        assert args.layouts[0].index == 0
        assert args.layouts[0].basic_elements == []

    @pytest.mark.unit
    def test_rejects_unknown_layout_type(self):
        with pytest.raises(ValidationError):
            LayoutDesignerArgs.model_validate(
                {"layouts": [{"layout_type": "Grid", "layout_requirements": "x"}]}
            )

    @pytest.mark.unit
    def test_page_content_images_default_empty(self):
        assert PageContent(prompt="hi").images == []


class TestToolSchema:
    """Tests for the layout designer JSON schema."""

    @pytest.mark.unit
    def test_schema_shape(self):
        schema = layout_designer_tool_schema()
        item = schema["properties"]["layouts"]["items"]
        assert schema["required"] == ["layouts"]
        assert item["properties"]["index"]["type"] == "integer"
        assert item["properties"]["layout_type"]["enum"] == [
            "Container",
            "Flexbox",
            "Section",
        ]
        element = item["properties"]["basic_elements"]["items"]
        assert len(element["properties"]["element_type"]["enum"]) == 7
        assert "Icon" in element["properties"]["element_type"]["enum"]


class TestPropsModels:
    """Tests for props shape checks."""

    @pytest.mark.unit
    def test_extra_keys_allowed(self):
        HeadingProps.model_validate({"text": "Hi", "letterSpacing": 2})

    @pytest.mark.unit
    def test_values_outside_advisory_ranges_accepted(self):
        HeadingProps.model_validate({"level": 9, "textAlign": "justify"})

    @pytest.mark.unit
    def test_wrong_type_rejected(self):
        with pytest.raises(ValidationError):
            HeadingProps.model_validate({"fontSize": "32px"})

    @pytest.mark.unit
    def test_numeric_strings_accepted(self):
        HeadingProps.model_validate({"level": "2", "fontSize": "32"})

    @pytest.mark.unit
    def test_number_for_text_rejected(self):
        with pytest.raises(ValidationError):
            HeadingProps.model_validate({"text": 5})

    @pytest.mark.unit
    def test_font_weight_accepts_string_or_number(self):
        TextProps.model_validate({"fontWeight": "bold"})
        TextProps.model_validate({"fontWeight": 600})
