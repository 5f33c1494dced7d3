"""Configuration loading for toast (.toast.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ToastError
from .plugins.registry import PluginSpec, parse_plugin_flag

CONFIG_FILENAME = ".toast.yml"


class ConfigError(ToastError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ToastConfig:
    """Represents the settings defined in .toast.yml."""

    root: Path
    plugins: List[PluginSpec] = field(default_factory=list)
    exclude_paths: List[str] = field(default_factory=list)
    plugin_timeout: Optional[float] = None


def load_config(config_path: Path) -> ToastConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ToastConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    plugins = [parse_plugin_flag(value) for value in _as_str_list(data.get("plugins"))]

    timeout = _as_float(data.get("plugin_timeout"))
    if timeout is not None and timeout <= 0:
        raise ConfigError("plugin_timeout must be a positive number of seconds")

    return ToastConfig(
        root=root,
        plugins=plugins,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        plugin_timeout=timeout,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = ["CONFIG_FILENAME", "ConfigError", "ToastConfig", "load_config"]
