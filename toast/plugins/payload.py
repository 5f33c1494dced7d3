"""Serialize the root document and retarget it per plugin.

The document is encoded once. Each plugin receives a copy in which only
the top-level ``output_base`` value is replaced; the splice works on the
encoded bytes so no other byte of the payload changes.
"""

from __future__ import annotations

import json
from typing import Any, Tuple

from ..errors import SerializationError
from ..models import RootDocument

OUTPUT_BASE_KEY = "output_base"

_WHITESPACE = " \t\n\r"
_DECODER = json.JSONDecoder()


def encode_document(document: RootDocument, *, indent: int | None = None) -> bytes:
    """Encode the document as compact (or indented) UTF-8 JSON."""
    try:
        if indent is None:
            text = json.dumps(document.to_dict(), separators=(",", ":"), ensure_ascii=False)
        else:
            text = json.dumps(document.to_dict(), indent=indent, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"JSON encode error: {exc}") from exc
    return text.encode("utf-8")


def decode_document(payload: bytes | str) -> RootDocument:
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8")
    try:
        data = json.loads(payload)
    except ValueError as exc:
        raise SerializationError(f"JSON decode error: {exc}") from exc
    if not isinstance(data, dict):
        raise SerializationError("root document must be a JSON object")
    return RootDocument.from_dict(data)


def _skip_whitespace(text: str, index: int) -> int:
    while index < len(text) and text[index] in _WHITESPACE:
        index += 1
    return index


def _expect(text: str, index: int, char: str) -> int:
    index = _skip_whitespace(text, index)
    if index >= len(text) or text[index] != char:
        raise SerializationError(f"malformed payload: expected {char!r} at offset {index}")
    return index + 1


def _locate_top_level(text: str, key: str) -> Tuple[int, int]:
    """Return the ``[start, end)`` span of the value stored under a top-level key."""
    index = _expect(text, 0, "{")
    while True:
        index = _skip_whitespace(text, index)
        if index < len(text) and text[index] == "}":
            break
        try:
            name, index = _DECODER.raw_decode(text, index)
        except json.JSONDecodeError as exc:
            raise SerializationError(f"malformed payload: {exc}") from exc
        index = _expect(text, index, ":")
        start = _skip_whitespace(text, index)
        try:
            _value, end = _DECODER.raw_decode(text, start)
        except json.JSONDecodeError as exc:
            raise SerializationError(f"malformed payload: {exc}") from exc
        if name == key:
            return start, end
        index = _skip_whitespace(text, end)
        if index < len(text) and text[index] == ",":
            index += 1
    raise SerializationError(f"payload has no top-level {key!r} field")


def set_top_level(payload: bytes, key: str, value: Any) -> bytes:
    """Replace one top-level value in an encoded JSON object, leaving other bytes intact."""
    text = payload.decode("utf-8")
    start, end = _locate_top_level(text, key)
    replacement = json.dumps(value, ensure_ascii=False)
    return (text[:start] + replacement + text[end:]).encode("utf-8")


def patch_output_base(payload: bytes, output_dir: str) -> bytes:
    return set_top_level(payload, OUTPUT_BASE_KEY, output_dir)


__all__ = [
    "OUTPUT_BASE_KEY",
    "decode_document",
    "encode_document",
    "patch_output_base",
    "set_top_level",
]
