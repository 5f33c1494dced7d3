"""Go declaration collection: parse, normalize and bind methods."""

from .collector import FileCollector, collect_file
from .parser import GO_SUFFIX, GoParser, SourceUnit

__all__ = ["FileCollector", "GO_SUFFIX", "GoParser", "SourceUnit", "collect_file"]
