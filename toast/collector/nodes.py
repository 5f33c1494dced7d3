"""Small helpers over tree-sitter nodes."""

from __future__ import annotations

from typing import Iterator, List, Optional

import tree_sitter

Node = tree_sitter.Node

COMMENT = "comment"
_TERMINATORS = {"\n", "\x00"}


def text_of(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def type_text(node: Optional[Node]) -> str:
    """Source text of a type expression with runs of whitespace collapsed."""
    return " ".join(text_of(node).split())


def significant_children(node: Node) -> Iterator[Node]:
    """Named, non-comment children."""
    for child in node.named_children:
        if child.type != COMMENT:
            yield child


def first_named(node: Node) -> Optional[Node]:
    return next(significant_children(node), None)


def prev_sibling(node: Node) -> Optional[Node]:
    sibling = node.prev_sibling
    while sibling is not None and not sibling.is_named and sibling.type in _TERMINATORS:
        sibling = sibling.prev_sibling
    return sibling


def next_sibling(node: Node) -> Optional[Node]:
    sibling = node.next_sibling
    while sibling is not None and not sibling.is_named and sibling.type in _TERMINATORS:
        sibling = sibling.next_sibling
    return sibling


def has_token(node: Node, token: str) -> bool:
    return any(not child.is_named and child.type == token for child in node.children)


def field_nodes(node: Node, name: str) -> List[Node]:
    """Named children under a field, skipping separators and comments."""
    return [
        child
        for child in node.children_by_field_name(name)
        if child.is_named and child.type != COMMENT
    ]


__all__ = [
    "COMMENT",
    "Node",
    "field_nodes",
    "first_named",
    "has_token",
    "next_sibling",
    "prev_sibling",
    "significant_children",
    "text_of",
    "type_text",
]
