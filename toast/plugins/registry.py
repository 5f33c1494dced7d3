"""Plugin registration strings.

A registration names the plugin command and where its output goes::

    --plugin "toast-gen-db subcmd -flag1 val --flag2=val2:out=./internal/db"
                                                         ^
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ..errors import PluginConfigError

OUT_PREFIX = "out="


@dataclass(frozen=True)
class PluginSpec:
    """One registered consumer: its command line and output directory."""

    program: str
    args: List[str] = field(default_factory=list)
    output_dir: str = ""

    @property
    def argv(self) -> List[str]:
        return [self.program, *self.args]

    def __str__(self) -> str:
        return f"plugin command: {self.argv}, output: [{self.output_dir}]"


def parse_plugin_flag(value: str) -> PluginSpec:
    """Parse ``"<program> [args...]:out=<dir>"``; raise PluginConfigError if malformed."""
    command, sep, output = value.partition(":")
    if not sep:
        raise PluginConfigError(f"invalid plugin flag value: {value}")

    parts = command.split()
    if not parts:
        raise PluginConfigError(f"invalid plugin flag value (bad command): {value}")

    if not output.startswith(OUT_PREFIX):
        raise PluginConfigError(f"invalid plugin flag value (bad out): {value}")

    output_dir = output[len(OUT_PREFIX):]
    if not output_dir.strip():
        raise PluginConfigError(f"invalid plugin out value: {output}")

    return PluginSpec(program=parts[0], args=parts[1:], output_dir=output_dir)


__all__ = ["OUT_PREFIX", "PluginSpec", "parse_plugin_flag"]
