"""Sample plugin: write the name of every collected file to ``my-file.txt``."""

from __future__ import annotations

import sys
from pathlib import Path

from ..models import RootDocument
from .sdk import Plugin

OUTPUT_FILENAME = "my-file.txt"


def list_files(document: RootDocument) -> None:
    output = Path(document.output_base) / OUTPUT_FILENAME
    output.write_text("\n".join(document.file_names()), encoding="utf-8")


def main() -> None:
    sys.exit(Plugin("toast-plugin-files").init(list_files))


if __name__ == "__main__":
    main()
