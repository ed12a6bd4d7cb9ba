"""Definition map assembly: ids, page root, merging and validation."""

from .lib import (
    ELEMENT_ID_LENGTH,
    LAYOUT_ID_LENGTH,
    ROOT_DESIGN_REQUIREMENTS,
    ROOT_ID,
    ROOT_PROPS,
    IdAllocator,
    TreeIssue,
    build_root_node,
    definition_to_dict,
    is_valid_definition,
    merge_definitions,
    validate_definition,
)

__all__ = [
    "ROOT_ID",
    "LAYOUT_ID_LENGTH",
    "ELEMENT_ID_LENGTH",
    "ROOT_DESIGN_REQUIREMENTS",
    "ROOT_PROPS",
    "IdAllocator",
    "build_root_node",
    "merge_definitions",
    "definition_to_dict",
    "TreeIssue",
    "validate_definition",
    "is_valid_definition",
]
