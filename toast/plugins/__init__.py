"""Plugin registration, payload handling and execution."""

from .payload import decode_document, encode_document, patch_output_base
from .pipeline import PipelineReport, PluginOutcome, PluginPipeline, run_plugins
from .registry import PluginSpec, parse_plugin_flag

__all__ = [
    "PipelineReport",
    "PluginOutcome",
    "PluginPipeline",
    "PluginSpec",
    "decode_document",
    "encode_document",
    "parse_plugin_flag",
    "patch_output_base",
    "run_plugins",
]
