"""Classify comment text and attach comment nodes to declarations.

Go comments come in four flavours that must never bleed into each other:

* ``// +build linux,386 darwin`` -- a build constraint, split into options.
* ``//go:generate stringer -type=Pill`` -- a generate directive whose
  remainder is a runnable command line.
* ``//go:noinline`` and any other ``//go:`` line -- a pragma.
* everything else -- documentation. Each documentation line is trimmed and
  the lines are joined with no separator, exactly like the reference schema.

Classification never fails; unknown prefixes are documentation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Union

from ..models import BUILD_PREFIX, Comment, Constraint, GenerateComment, MagicComment
from .nodes import COMMENT, Node, next_sibling, prev_sibling, text_of

MAGIC_PREFIX = "//go:"
GENERATE_PREFIX = MAGIC_PREFIX + "generate"

Pragma = Union[MagicComment, GenerateComment]


@dataclass
class Classified:
    """One comment block split into its disjoint categories."""

    doc: Comment = field(default_factory=Comment)
    magic_comments: List[MagicComment] = field(default_factory=list)
    generate_comments: List[GenerateComment] = field(default_factory=list)
    build_tags: List[Constraint] = field(default_factory=list)


def pragma(text: str) -> Optional[Pragma]:
    """Return the directive carried by a comment line, if any."""
    if text.startswith(GENERATE_PREFIX):
        return GenerateComment(command=text[len(GENERATE_PREFIX):].strip(), raw=text)
    if text.startswith(MAGIC_PREFIX):
        return MagicComment(pragma=text[len(MAGIC_PREFIX):].strip(), raw=text)
    return None


def constraint(text: str) -> Optional[Constraint]:
    if not text.startswith(BUILD_PREFIX):
        return None
    return Constraint(options=text[len(BUILD_PREFIX):].split())


def classify(lines: Sequence[str]) -> Classified:
    result = Classified()
    doc: List[str] = []
    for line in lines:
        tags = constraint(line)
        if tags is not None:
            result.build_tags.append(tags)
            continue
        directive = pragma(line)
        if isinstance(directive, GenerateComment):
            result.generate_comments.append(directive)
        elif isinstance(directive, MagicComment):
            result.magic_comments.append(directive)
        else:
            doc.append(line.strip())
    result.doc = Comment(content="".join(doc))
    return result


def classify_nodes(nodes: Iterable[Node]) -> Classified:
    return classify([text_of(node) for node in nodes])


def leading_comments(node: Node) -> List[Node]:
    """Comment nodes forming the doc comment directly above ``node``."""
    collected: List[Node] = []
    current = node
    sibling = prev_sibling(node)
    while sibling is not None and sibling.type == COMMENT:
        if sibling.end_point[0] + 1 < current.start_point[0]:
            break
        before = prev_sibling(sibling)
        # a comment on the same line as earlier code belongs to that code
        if before is not None and before.type != COMMENT and before.end_point[0] == sibling.start_point[0]:
            break
        collected.append(sibling)
        current = sibling
        sibling = before
    collected.reverse()
    return collected


def trailing_comments(node: Node) -> List[Node]:
    """Comment nodes starting on the line where ``node`` ends."""
    collected: List[Node] = []
    sibling = next_sibling(node)
    while (
        sibling is not None
        and sibling.type == COMMENT
        and sibling.start_point[0] == node.end_point[0]
    ):
        collected.append(sibling)
        sibling = next_sibling(sibling)
    return collected


def comment_groups(parent: Node) -> List[List[Node]]:
    """Runs of adjacent comments among the children of ``parent``."""
    groups: List[List[Node]] = []
    current: List[Node] = []
    for child in parent.named_children:
        if child.type != COMMENT:
            if current:
                groups.append(current)
                current = []
            continue
        if current and child.start_point[0] > current[-1].end_point[0] + 1:
            groups.append(current)
            current = []
        current.append(child)
    if current:
        groups.append(current)
    return groups


__all__ = [
    "Classified",
    "GENERATE_PREFIX",
    "MAGIC_PREFIX",
    "classify",
    "classify_nodes",
    "comment_groups",
    "constraint",
    "leading_comments",
    "pragma",
    "trailing_comments",
]
