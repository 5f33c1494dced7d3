"""Tree-sitter powered Go parser."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import tree_sitter
import tree_sitter_go

from ..errors import ParseError, TraversalError

GO_SUFFIX = ".go"


@dataclass
class SourceUnit:
    """A parsed Go file: its display name, raw bytes and syntax tree root."""

    name: str
    source: bytes
    root: tree_sitter.Node


class GoParser:
    """Parses Go source bytes into tree-sitter syntax trees."""

    def __init__(self) -> None:
        self._language = tree_sitter.Language(tree_sitter_go.language())
        self._parser = tree_sitter.Parser(self._language)

    def parse_bytes(self, source: bytes, name: str = "<source>") -> SourceUnit:
        tree = self._parser.parse(source)
        root = tree.root_node
        if root.has_error:
            raise ParseError(name, _describe_error(root))
        return SourceUnit(name=name, source=source, root=root)

    def parse_file(self, path: Path, name: Optional[str] = None) -> SourceUnit:
        try:
            source = path.read_bytes()
        except OSError as exc:
            raise TraversalError(f"cannot read {path}: {exc}") from exc
        return self.parse_bytes(source, name or str(path))


def _describe_error(root: tree_sitter.Node) -> str:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            row, column = node.start_point
            if node.is_missing:
                return f"{row + 1}:{column + 1}: missing {node.type}"
            return f"{row + 1}:{column + 1}: syntax error"
        stack.extend(reversed([child for child in node.children if child.has_error or child.is_missing]))
    return "syntax error"


__all__ = ["GO_SUFFIX", "GoParser", "SourceUnit"]
