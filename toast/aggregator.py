"""Walk an input tree, collect every Go file and group Files by package."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional, Sequence

from .collector import FileCollector, GoParser, SourceUnit
from .collector.parser import GO_SUFFIX
from .errors import TraversalError
from .logging import get_logger
from .models import Package, RootDocument


@dataclass
class IgnoreRule:
    """A gitignore-style exclude pattern from ``.toast.yml``."""

    pattern: str
    directory_only: bool
    anchored: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            return fnmatchcase(rel_path, self.pattern)

        for part in rel_path.split("/"):
            if fnmatchcase(part, self.pattern):
                return True
        return False


def build_ignore_rule(pattern: str) -> Optional[IgnoreRule]:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        has_slash="/" in pattern,
    )


def _raise_traversal_error(exc: OSError) -> None:
    raise TraversalError(f"recursive walk error: {exc}") from exc


class ProgramAggregator:
    """Runs the collector once per source file and assembles the root document.

    Packages are keyed by the package name declared in each file and appear
    in first-seen order; files keep traversal order and are never merged.
    """

    def __init__(
        self,
        parser: Optional[GoParser] = None,
        exclude_paths: Sequence[str] = (),
    ) -> None:
        self._parser = parser or GoParser()
        self._rules = [rule for rule in map(build_ignore_rule, exclude_paths) if rule is not None]
        self.logger = get_logger("aggregator")

    def iter_sources(self, root: Path) -> Iterator[Path]:
        """Yield Go files under ``root``: directories and files in sorted order."""
        if not root.exists():
            raise TraversalError(f"input path not found: {root}")
        if not root.is_dir():
            raise TraversalError(f"input path is not a directory: {root}")

        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_traversal_error):
            current = Path(dirpath)
            rel_dir = current.relative_to(root).as_posix() if current != root else ""
            dirnames[:] = sorted(
                name
                for name in dirnames
                if not self._ignored(f"{rel_dir}/{name}" if rel_dir else name, True)
            )
            for filename in sorted(filenames):
                if not filename.endswith(GO_SUFFIX):
                    continue
                if self._ignored(f"{rel_dir}/{filename}" if rel_dir else filename, False):
                    continue
                yield current / filename

    def parse_tree(self, root: Path) -> Iterator[SourceUnit]:
        for path in self.iter_sources(root):
            self.logger.debug("Parsing %s", path)
            yield self._parser.parse_file(path)

    def aggregate(self, root: str | Path) -> RootDocument:
        """Collect every Go file under ``root`` into one document."""
        document = self.aggregate_units(self.parse_tree(Path(root)))
        self.logger.info(
            "Collected %d file(s) in %d package(s) from %s",
            sum(len(package.files) for package in document.packages),
            len(document.packages),
            root,
        )
        return document

    def aggregate_units(self, units: Iterable[SourceUnit]) -> RootDocument:
        packages: Dict[str, Package] = {}
        for unit in units:
            collected = FileCollector().collect(unit)
            package = packages.get(collected.package)
            if package is None:
                package = packages[collected.package] = Package(name=collected.package)
            package.files.append(collected)
        return RootDocument(packages=list(packages.values()))

    def _ignored(self, rel_path: str, is_dir: bool) -> bool:
        return any(rule.matches(rel_path, is_dir) for rule in self._rules)


__all__ = ["IgnoreRule", "ProgramAggregator", "build_ignore_rule"]
