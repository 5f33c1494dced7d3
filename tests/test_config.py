"""Tests for toast.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from toast.config import ConfigError, ToastConfig, load_config
from toast.errors import PluginConfigError
from toast.plugins.registry import PluginSpec


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, ToastConfig)
    assert config.root == tmp_path.resolve()
    assert config.plugins == []
    assert config.exclude_paths == []
    assert config.plugin_timeout is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".toast.yml"
    config_file.write_text(
        """
plugins:
  - "toast-plugin-files:out=./gen"
  - "toast-gen-db subcmd --flag=1:out=./internal/db"
exclude_paths:
  - "vendor/"
  - "testdata/"
plugin_timeout: 30
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.plugins == [
        PluginSpec(program="toast-plugin-files", output_dir="./gen"),
        PluginSpec(program="toast-gen-db", args=["subcmd", "--flag=1"], output_dir="./internal/db"),
    ]
    assert config.exclude_paths == ["vendor/", "testdata/"]
    assert config.plugin_timeout == 30.0


def test_load_config_accepts_single_string_values(tmp_path: Path) -> None:
    (tmp_path / ".toast.yml").write_text('plugins: "gen:out=./gen"\nexclude_paths: vendor/\n', encoding="utf-8")

    config = load_config(tmp_path)

    assert config.plugins == [PluginSpec(program="gen", output_dir="./gen")]
    assert config.exclude_paths == ["vendor/"]


def test_empty_config_file_yields_defaults(tmp_path: Path) -> None:
    (tmp_path / ".toast.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).plugins == []


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".toast.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".toast.yml").write_text("plugins: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_non_positive_timeout(tmp_path: Path) -> None:
    (tmp_path / ".toast.yml").write_text("plugin_timeout: 0\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_validates_plugin_strings(tmp_path: Path) -> None:
    (tmp_path / ".toast.yml").write_text('plugins:\n  - "no-output-dir"\n', encoding="utf-8")

    with pytest.raises(PluginConfigError):
        load_config(tmp_path)
