"""Error taxonomy shared by the collector, aggregator and plugin pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

PLUGIN_NOT_FOUND = "PluginNotFound"
PLUGIN_EXECUTION_ERROR = "PluginExecutionError"

PLUGIN_ERROR_PREFIX = "[toast:plugin]"


class ToastError(RuntimeError):
    """Base class for fatal toast errors."""


class TraversalError(ToastError):
    """Raised when the input directory walk cannot continue."""


class ParseError(ToastError):
    """Raised when the Go parser rejects a source file."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"{path}: {detail}")
        self.path = path
        self.detail = detail


class SerializationError(ToastError):
    """Raised when the IR document cannot be encoded or patched."""


class PluginConfigError(ToastError):
    """Raised when a plugin registration string is malformed."""


class FormatError(ToastError):
    """Raised when generated Go source cannot be formatted."""


@dataclass
class PluginFailure:
    """One consumer that could not be resolved or did not exit cleanly."""

    kind: str
    command: str
    path: str
    message: str

    def __str__(self) -> str:
        return f"{PLUGIN_ERROR_PREFIX} {self.command}: {self.message} ({self.path})"


class PluginErrors(ToastError):
    """Every plugin failure of a run, reported as one error."""

    def __init__(self, failures: Sequence[PluginFailure]) -> None:
        self.failures: List[PluginFailure] = list(failures)
        super().__init__("\n".join(str(failure) for failure in self.failures))


__all__ = [
    "PLUGIN_ERROR_PREFIX",
    "PLUGIN_EXECUTION_ERROR",
    "PLUGIN_NOT_FOUND",
    "FormatError",
    "ParseError",
    "PluginConfigError",
    "PluginErrors",
    "PluginFailure",
    "SerializationError",
    "ToastError",
    "TraversalError",
]
