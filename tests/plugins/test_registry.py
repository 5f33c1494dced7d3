"""Tests for toast.plugins.registry."""

from __future__ import annotations

import pytest

from toast.errors import PluginConfigError
from toast.plugins.registry import PluginSpec, parse_plugin_flag


def test_parse_plugin_flag_splits_command_and_output() -> None:
    spec = parse_plugin_flag("toast-gen-db subcmd -flag1 val --flag2=val2:out=./internal/db")

    assert spec == PluginSpec(
        program="toast-gen-db",
        args=["subcmd", "-flag1", "val", "--flag2=val2"],
        output_dir="./internal/db",
    )
    assert spec.argv == ["toast-gen-db", "subcmd", "-flag1", "val", "--flag2=val2"]


def test_output_dir_may_contain_colons() -> None:
    spec = parse_plugin_flag("gen:out=C:/build/out")

    assert spec.program == "gen"
    assert spec.args == []
    assert spec.output_dir == "C:/build/out"


@pytest.mark.parametrize(
    "value, message",
    [
        ("toast-gen-db", "invalid plugin flag value"),
        ("   :out=./gen", "bad command"),
        ("gen:./gen", "bad out"),
        ("gen:out=", "invalid plugin out value"),
    ],
)
def test_malformed_flags_are_rejected(value: str, message: str) -> None:
    with pytest.raises(PluginConfigError) as excinfo:
        parse_plugin_flag(value)

    assert message in str(excinfo.value)
