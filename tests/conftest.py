from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.go_tree import GoTreeBuilder, SourceCollector
from toast.collector import GoParser


@pytest.fixture(scope="session")
def go_parser() -> GoParser:
    """Share one tree-sitter parser across the test session."""
    return GoParser()


@pytest.fixture
def go_tree(tmp_path: Path, go_parser: GoParser) -> GoTreeBuilder:
    """Provide a Go source tree builder rooted at the pytest tmp_path."""
    return GoTreeBuilder(tmp_path, go_parser)


@pytest.fixture
def collect(go_parser: GoParser) -> SourceCollector:
    """Collect an inline Go snippet into a File record."""
    return SourceCollector(go_parser)
