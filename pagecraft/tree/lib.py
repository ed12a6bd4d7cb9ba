"""Definition map assembly and structural validation.

This module owns node identity and the page root: it allocates ids and
display names for one generation run, builds the fixed ROOT container,
merges per-layout maps and checks the finished map for structural issues.
"""

import uuid
from dataclasses import dataclass
from typing import Any

from pagecraft.llm.backend.base import GenerationError
from pagecraft.schema import Definition, Node, NodeKind

ROOT_ID = "ROOT"
LAYOUT_ID_LENGTH = 10
ELEMENT_ID_LENGTH = 8
LAYOUT_NAME_SUFFIX_LENGTH = 6
ELEMENT_NAME_SUFFIX_LENGTH = 4

# Page-level requirements handed to every layout as its parent context.
ROOT_DESIGN_REQUIREMENTS: dict[str, Any] = {
    "purpose": "Main container for the entire page layout",
    "constraints": {
        "max_width": "1200px",
        "background": "white",
        "padding": "0px",
        "margin": "auto",
    },
    "accessibility": "Should be responsive and contain all page content",
    "visual_hierarchy": "Should maintain proper spacing between child elements",
}

ROOT_PROPS: dict[str, Any] = {
    "background": "#ffffff",
    "padding": 0,
    "margin": 0,
    "borderRadius": 4,
    "elevation": 0,
    "display": "block",
    "justifyContent": "flex-start",
    "alignItems": "flex-start",
    "data-cy": "root-container",
}


# =============================================================================
# Identity
# =============================================================================


class IdAllocator:
    """Request-scoped source of node ids and display names.

    Ids are hex prefixes of random UUIDs, redrawn on collision so that every
    id issued by one allocator is distinct and never equals ``ROOT``.
    Display names get the same treatment.

    Example:
        >>> ids = IdAllocator()
        >>> ids.layout_id()
        '3f9a0c1b2d'
        >>> ids.display_name("Container", layout=True)
        'container-a81f3e'
    """

    def __init__(self) -> None:
        self._ids: set[str] = {ROOT_ID}
        self._names: set[str] = {"root"}

    def _draw(self, length: int, taken: set[str], prefix: str = "") -> str:
        while True:
            candidate = prefix + uuid.uuid4().hex[:length]
            if candidate not in taken:
                taken.add(candidate)
                return candidate

    def new_id(self, length: int) -> str:
        """Issue a fresh id of ``length`` hex characters."""
        return self._draw(length, self._ids)

    def layout_id(self) -> str:
        return self.new_id(LAYOUT_ID_LENGTH)

    def element_id(self) -> str:
        return self.new_id(ELEMENT_ID_LENGTH)

    def display_name(self, prefix: str, *, layout: bool = False) -> str:
        """Issue ``<lower-prefix>-<suffix>``, unique within this allocator."""
        length = LAYOUT_NAME_SUFFIX_LENGTH if layout else ELEMENT_NAME_SUFFIX_LENGTH
        return self._draw(length, self._names, prefix=f"{prefix.lower()}-")

    @property
    def issued(self) -> frozenset[str]:
        """Every id issued so far, ROOT excluded."""
        return frozenset(self._ids - {ROOT_ID})


# =============================================================================
# Assembly
# =============================================================================


def build_root_node(layout_ids: list[str]) -> Node:
    """Build a fresh page root listing ``layout_ids`` in order.

    Args:
        layout_ids: Top-level layout ids in page order.

    Returns:
        ROOT container node; it has no parent.
    """
    return Node.create(
        NodeKind.CONTAINER,
        props=dict(ROOT_PROPS),
        display_name="root",
        parent=None,
        is_canvas=True,
        nodes=list(layout_ids),
    )


def merge_definitions(target: Definition, source: Definition) -> Definition:
    """Add every entry of ``source`` to ``target``.

    Args:
        target: Map updated in place.
        source: Entries to add.

    Returns:
        ``target``.

    Raises:
        GenerationError: If an id is present in both maps.
    """
    for node_id, node in source.items():
        if node_id in target:
            raise GenerationError(f"Duplicate node id in definition: {node_id}")
        target[node_id] = node
    return target


def definition_to_dict(definition: Definition) -> dict[str, dict[str, Any]]:
    """JSON-ready ``{id: node}`` with editor aliases, in map order."""
    return {node_id: node.to_dict() for node_id, node in definition.items()}


# =============================================================================
# Validation
# =============================================================================


@dataclass
class TreeIssue:
    """A structural problem in a definition map.

    Attributes:
        node_id: ID of the node with the problem.
        message: Human-readable description.
        issue_type: Category of the problem.
    """

    node_id: str
    message: str
    issue_type: str


def validate_definition(definition: Definition) -> list[TreeIssue]:
    """Check a definition map for structural issues.

    Performs the following checks:
        - ROOT is present
        - Every child id listed in ``nodes`` exists (no dangling references)
        - No child id is listed twice
        - Every listed child names the listing node as its parent
        - Every non-root node has a parent that exists

    Args:
        definition: The map to check.

    Returns:
        list[TreeIssue]: Issues found (empty if valid).
    """
    issues: list[TreeIssue] = []

    if ROOT_ID not in definition:
        issues.append(TreeIssue(ROOT_ID, "Definition has no ROOT node", "missing_root"))

    seen_children: set[str] = set()
    for node_id, node in definition.items():
        for child_id in node.nodes:
            if child_id not in definition:
                issues.append(
                    TreeIssue(
                        node_id,
                        f"Child '{child_id}' is not in the definition",
                        "dangling_child",
                    )
                )
                continue
            if child_id in seen_children:
                issues.append(
                    TreeIssue(child_id, f"Node '{child_id}' is listed twice", "duplicate_child")
                )
                continue
            seen_children.add(child_id)
            child_parent = definition[child_id].parent
            if child_parent != node_id:
                issues.append(
                    TreeIssue(
                        child_id,
                        f"Listed under '{node_id}' but parent is '{child_parent}'",
                        "parent_mismatch",
                    )
                )

        if node_id == ROOT_ID:
            continue
        if node.parent is None:
            issues.append(TreeIssue(node_id, "Node has no parent", "missing_parent"))
        elif node.parent not in definition:
            issues.append(
                TreeIssue(node_id, f"Parent '{node.parent}' does not exist", "unknown_parent")
            )

    return issues


def is_valid_definition(definition: Definition) -> bool:
    """Check if a definition map has no structural issues."""
    return not validate_definition(definition)


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
