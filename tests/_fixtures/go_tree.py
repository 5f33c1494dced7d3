"""Helper utilities for writing throwaway Go source trees in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping, Sequence

from toast.aggregator import ProgramAggregator
from toast.collector import FileCollector, GoParser
from toast.models import File, RootDocument


def dedent(source: str) -> str:
    return textwrap.dedent(source).lstrip("\n")


class GoTreeBuilder:
    """Writes Go files under a temporary root and aggregates them."""

    def __init__(self, tmp_path: Path, parser: GoParser) -> None:
        self.root = tmp_path / "src"
        self.root.mkdir()
        self._parser = parser

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the tree."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(dedent(content), encoding="utf-8")

    def aggregate(self, exclude_paths: Sequence[str] = ()) -> RootDocument:
        return ProgramAggregator(parser=self._parser, exclude_paths=exclude_paths).aggregate(self.root)

    def path(self) -> Path:
        return self.root


class SourceCollector:
    """Parses an inline Go snippet and collects it into a File."""

    def __init__(self, parser: GoParser) -> None:
        self._parser = parser

    def __call__(self, source: str, name: str = "unit.go") -> File:
        unit = self._parser.parse_bytes(dedent(source).encode("utf-8"), name)
        return FileCollector().collect(unit)


__all__ = ["GoTreeBuilder", "SourceCollector", "dedent"]
