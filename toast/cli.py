"""CLI entrypoint for toast."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .aggregator import ProgramAggregator
from .config import CONFIG_FILENAME, load_config
from .errors import PluginConfigError, PluginErrors, ToastError
from .logging import configure_logging, get_logger
from .plugins import PluginPipeline, PluginSpec, encode_document, parse_plugin_flag

TOAST_PREFIX = "[toast]"


def _plugin_flag(value: str) -> PluginSpec:
    try:
        return parse_plugin_flag(value)
    except PluginConfigError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="toast",
        description="Parse Go source into a simplified AST and run code generation plugins on it.",
    )
    parser.add_argument(
        "--input",
        default=".",
        help="Input directory from where to parse Go code (defaults to current directory).",
    )
    parser.add_argument(
        "--plugin",
        action="append",
        type=_plugin_flag,
        default=[],
        metavar='"CMD [ARGS]:out=DIR"',
        help="Executable plugin for toast to invoke, and the output base directory for files to be written.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Write data from the parsed AST to stdout and skip plugins.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"Path to a {CONFIG_FILENAME} file (defaults to <input>/{CONFIG_FILENAME}).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds each plugin may run before it is treated as failed.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    return parser


def _exit_with_message(message: str, exc: BaseException) -> None:
    print(TOAST_PREFIX, message, exc)
    sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for toast."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    logger = get_logger("cli")

    try:
        config_path = Path(args.config) if args.config else Path(args.input) / CONFIG_FILENAME
        config = load_config(config_path)
    except ToastError as exc:
        _exit_with_message("config error", exc)
        return

    plugins = [*config.plugins, *args.plugin]
    timeout = args.timeout if args.timeout is not None else config.plugin_timeout

    try:
        document = ProgramAggregator(exclude_paths=config.exclude_paths).aggregate(args.input)
    except ToastError as exc:
        _exit_with_message("parse error", exc)
        return

    if args.debug:
        try:
            pretty = encode_document(document, indent=2)
        except ToastError as exc:
            _exit_with_message("(debug) JSON encode error", exc)
            return
        print(pretty.decode("utf-8"))
        return

    try:
        payload = encode_document(document)
    except ToastError as exc:
        _exit_with_message("JSON encode error", exc)
        return

    if not plugins:
        logger.warning("No plugins registered; nothing to run")
        return

    try:
        PluginPipeline(plugins, timeout=timeout).run(payload).raise_for_failures()
    except PluginErrors as exc:
        # one line per failed plugin
        print(TOAST_PREFIX, "accumulated plugin errors:")
        print(exc)
        sys.exit(1)
    except ToastError as exc:
        _exit_with_message("plugin error", exc)


if __name__ == "__main__":
    main(sys.argv[1:])
