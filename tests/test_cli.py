"""CLI behaviour tests."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from toast.cli import _build_parser, main
from toast.plugins.registry import PluginSpec

APPEND_OUTPUT_BASE = """\
import json
import sys

with open(sys.argv[1], "a", encoding="utf-8") as log:
    log.write(json.load(sys.stdin)["output_base"] + "\\n")
"""


def _write_package(root: Path) -> None:
    (root / "main.go").write_text("package main\n\n// Run runs.\nfunc Run() {}\n", encoding="utf-8")


def test_cli_defaults() -> None:
    args = _build_parser().parse_args([])

    assert args.input == "."
    assert args.plugin == []
    assert args.debug is False
    assert args.verbose is False
    assert args.timeout is None


def test_cli_accepts_repeated_plugin_flags() -> None:
    args = _build_parser().parse_args(
        ["--plugin", "gen-a:out=./a", "--plugin", "gen-b -x:out=./b", "--verbose"]
    )

    assert args.plugin == [
        PluginSpec(program="gen-a", output_dir="./a"),
        PluginSpec(program="gen-b", args=["-x"], output_dir="./b"),
    ]
    assert args.verbose is True


def test_cli_rejects_malformed_plugin_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _build_parser().parse_args(["--plugin", "gen-a"])

    assert excinfo.value.code == 2
    assert "invalid plugin flag value" in capsys.readouterr().err


def test_debug_prints_document_and_skips_plugins(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write_package(tmp_path)

    main(["--input", str(tmp_path), "--debug", "--plugin", "never-run:out=./gen"])

    document = json.loads(capsys.readouterr().out)
    assert document["output_base"] == ""
    package = document["packages"][0]
    assert package["name"] == "main"
    assert package["files"][0]["funcs"][0]["name"] == "Run"


def test_main_runs_config_plugins_before_flag_plugins(tmp_path: Path) -> None:
    _write_package(tmp_path)
    script = tmp_path / "record.py"
    script.write_text(APPEND_OUTPUT_BASE, encoding="utf-8")
    log = tmp_path / "calls.log"
    plugin = f"{sys.executable} {script} {log}"
    (tmp_path / ".toast.yml").write_text(
        f'plugins:\n  - "{plugin}:out=./from-config"\nplugin_timeout: 30\n', encoding="utf-8"
    )

    main(["--input", str(tmp_path), "--plugin", f"{plugin}:out=./from-flag"])

    assert log.read_text(encoding="utf-8").splitlines() == ["./from-config", "./from-flag"]


def test_main_exits_with_accumulated_plugin_errors(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write_package(tmp_path)

    with pytest.raises(SystemExit) as excinfo:
        main(["--input", str(tmp_path), "--plugin", "toast-plugin-that-does-not-exist:out=./gen"])

    assert excinfo.value.code == 1
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "[toast] accumulated plugin errors:"
    assert out[1].startswith("[toast:plugin] toast-plugin-that-does-not-exist:")


def test_main_reports_parse_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "broken.go").write_text("package broken\n\nfunc {\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["--input", str(tmp_path)])

    assert excinfo.value.code == 1
    assert capsys.readouterr().out.startswith("[toast] parse error ")


def test_main_reports_missing_input(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--input", str(tmp_path / "nope")])

    assert excinfo.value.code == 1
    assert "input path not found" in capsys.readouterr().out


def test_log_file_receives_log_records(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write_package(tmp_path)
    log_file = tmp_path / "logs" / "toast.log"

    main(["--input", str(tmp_path), "--debug", "--verbose", "--log-file", str(log_file)])

    capsys.readouterr()
    contents = log_file.read_text(encoding="utf-8")
    assert "INFO toast.aggregator: Collected 1 file(s) in 1 package(s)" in contents
    assert "DEBUG toast.aggregator: Parsing" in contents
