"""Helpers for writing toast plugins in Python.

A plugin reads the root document from stdin, generates whatever it wants
under ``document.output_base`` and exits 0 on success::

    def generate(document: RootDocument) -> None:
        with open(Path(document.output_base) / "models.go", "w") as dst:
            output_template(dst, "templates/models.go.j2", document)

    if __name__ == "__main__":
        sys.exit(Plugin("my-plugin").init(generate))

Templates are Jinja2 files; the value passed as ``data`` is available to
the template as ``data``. Generated Go can be normalized with ``gofmt``.
"""

from __future__ import annotations

import io
import subprocess
import sys
from pathlib import Path
from typing import Any, BinaryIO, Callable, Optional, TextIO

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..errors import PLUGIN_ERROR_PREFIX, FormatError
from ..models import RootDocument
from .payload import decode_document

PluginFunc = Callable[[RootDocument], None]

GOFMT = "gofmt"


class Plugin:
    """Plugin-side entry point: decode stdin and hand the document to a function."""

    def __init__(
        self,
        name: str,
        *,
        stdin: Optional[BinaryIO] = None,
        stdout: Optional[TextIO] = None,
    ) -> None:
        self.name = name
        self._stdin = stdin
        self._stdout = stdout

    def init(self, fn: PluginFunc) -> int:
        """Run ``fn`` on the document read from stdin; return the exit status."""
        stdin = self._stdin if self._stdin is not None else sys.stdin.buffer
        try:
            document = decode_document(stdin.read())
            fn(document)
        except Exception as exc:
            self._report(exc)
            return 1
        return 0

    def _report(self, exc: Exception) -> None:
        stdout = self._stdout if self._stdout is not None else sys.stdout
        print(f"{PLUGIN_ERROR_PREFIX} {self.name}: {exc}", file=stdout)


def gofmt(src: bytes, *, executable: str = GOFMT) -> bytes:
    """Format Go source by piping it through the ``gofmt`` binary."""
    try:
        completed = subprocess.run(
            [executable],
            input=src,
            check=True,
            capture_output=True,
        )
    except FileNotFoundError as exc:
        raise FormatError(f"Unable to locate gofmt executable '{executable}'.") from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or b"").decode("utf-8", errors="replace").strip()
        raise FormatError(f"gofmt failed: {stderr or exc.returncode}") from exc
    return completed.stdout


def gofmt_stream(stream: BinaryIO, *, executable: str = GOFMT) -> io.BytesIO:
    """Read a whole stream (an open file, say) and return its formatted copy."""
    return io.BytesIO(gofmt(stream.read(), executable=executable))


def _environment(template_dir: Path, *, autoescape: bool) -> Environment:
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=autoescape,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


def _render(dst: TextIO, template_path: str | Path, data: Any, *, autoescape: bool) -> None:
    path = Path(template_path)
    template = _environment(path.parent, autoescape=autoescape).get_template(path.name)
    dst.write(template.render(data=data))


def output_template(dst: TextIO, template_path: str | Path, data: Any) -> None:
    """Render a text template with ``data`` and write the result to ``dst``."""
    _render(dst, template_path, data, autoescape=False)


def output_template_html(dst: TextIO, template_path: str | Path, data: Any) -> None:
    """Like ``output_template`` but HTML-escapes every substituted value."""
    _render(dst, template_path, data, autoescape=True)


__all__ = [
    "GOFMT",
    "Plugin",
    "PluginFunc",
    "gofmt",
    "gofmt_stream",
    "output_template",
    "output_template_html",
]
