"""IR records produced by the collector and consumed by plugins.

Every record encodes to the JSON wire schema with ``omitempty`` semantics:
empty strings, ``False``, ``None`` and empty lists are left out, nested
records are always written. Field order follows declaration order so the
same IR always encodes to the same bytes.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Callable, Dict, List, Optional, Union

TYPE_KIND = "type"
MAP_KIND = "map"
ARRAY_KIND = "array"
SLICE_KIND = "slice"
FUNC_KIND = "func"
CHAN_KIND = "chan"
LITERAL_KIND = "literal"
INTERFACE_LITERAL = "interface{}"
ELLIPSIS = "..."

BUILD_PREFIX = "// +build"


def is_exported(name: Optional[str]) -> bool:
    """Return True when a Go identifier is visible outside its package."""
    if not name:
        return False
    return name[0].isupper()


def _is_empty(value: Any) -> bool:
    return value is None or value is False or value == "" or value == []


def _encode(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return value.to_dict()  # type: ignore[union-attr]
    if isinstance(value, list):
        return [_encode(item) for item in value]
    return value


class _Record:
    """Shared JSON encoding for IR dataclasses."""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for spec in fields(self):  # type: ignore[arg-type]
            value = getattr(self, spec.name)
            key = spec.metadata.get("json", spec.name)
            if not is_dataclass(value) and _is_empty(value) and not spec.metadata.get("always"):
                continue
            data[key] = _encode(value)
        return data


def _list(data: Dict[str, Any], key: str, decode: Callable[[Any], Any]) -> List[Any]:
    items = data.get(key) or []
    return [decode(item) for item in items]


def _comment(data: Dict[str, Any], key: str) -> "Comment":
    return Comment.from_dict(data.get(key) or {})


@dataclass
class Comment(_Record):
    """Normalized documentation text with pragma lines removed."""

    content: str = ""

    def lines(self) -> List[str]:
        """Split the content into its logical lines."""
        text = self.content
        if text.startswith("/*") and text.endswith("*/"):
            text = text.strip("/*")
            text = text.replace("\n\n", "\n")
            text = text.removeprefix("\n").removesuffix("\n")
            return text.split("\n")
        if text.startswith("// "):
            return text.split("// ")
        return []

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Comment":
        return cls(content=data.get("content", ""))


@dataclass
class MagicComment(_Record):
    """A ``//go:`` pragma such as ``//go:noinline``."""

    pragma: str = ""
    raw: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MagicComment":
        return cls(pragma=data.get("pragma", ""), raw=data.get("raw", ""))


@dataclass
class GenerateComment(_Record):
    """A ``//go:generate`` directive and the command line it carries."""

    command: str = ""
    raw: str = ""

    def argv(self) -> List[str]:
        """Return the program name followed by its arguments."""
        parts = self.command.split()
        if not parts:
            raise ValueError(f"cmd error, not enough args: comment = {self.raw}")
        return parts

    def run(self, **kwargs: Any) -> subprocess.CompletedProcess:
        """Re-run the directive as a child process."""
        return subprocess.run(self.argv(), check=True, **kwargs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GenerateComment":
        return cls(command=data.get("command", ""), raw=data.get("raw", ""))


@dataclass
class Constraint(_Record):
    """Options of a ``// +build`` line, e.g. ``linux,386 darwin,!cgo``."""

    options: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{BUILD_PREFIX} {' '.join(self.options)}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Constraint":
        return cls(options=list(data.get("options") or []))


@dataclass
class Value(_Record):
    """A parameter or result: optional name plus type text."""

    name: Optional[str] = None
    type: str = ""

    def __str__(self) -> str:
        name = "<nil>" if self.name is None else self.name
        return f"Value{{{name}, {self.type}}}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Value":
        return cls(name=data.get("name"), type=data.get("type", ""))


@dataclass
class Func(_Record):
    """A function without a receiver, an interface method or a func literal type."""

    is_exported: bool = False
    name: str = ""
    doc: Comment = field(default_factory=Comment)
    comment: Comment = field(default_factory=Comment)
    magic_comments: List[MagicComment] = field(default_factory=list)
    generate_comments: List[GenerateComment] = field(default_factory=list)
    params: List[Value] = field(default_factory=list)
    results: List[Value] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Func":
        return cls(
            is_exported=data.get("is_exported", False),
            name=data.get("name", ""),
            doc=_comment(data, "doc"),
            comment=_comment(data, "comment"),
            magic_comments=_list(data, "magic_comments", MagicComment.from_dict),
            generate_comments=_list(data, "generate_comments", GenerateComment.from_dict),
            params=_list(data, "params", Value.from_dict),
            results=_list(data, "results", Value.from_dict),
        )


@dataclass
class Method(_Record):
    """A function bound to a receiver type."""

    is_exported: bool = False
    name: str = ""
    doc: Comment = field(default_factory=Comment)
    comment: Comment = field(default_factory=Comment)
    magic_comments: List[MagicComment] = field(default_factory=list)
    generate_comments: List[GenerateComment] = field(default_factory=list)
    receiver: str = ""
    receiver_indirect: bool = False
    params: List[Value] = field(default_factory=list)
    results: List[Value] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Method":
        return cls(
            is_exported=data.get("is_exported", False),
            name=data.get("name", ""),
            doc=_comment(data, "doc"),
            comment=_comment(data, "comment"),
            magic_comments=_list(data, "magic_comments", MagicComment.from_dict),
            generate_comments=_list(data, "generate_comments", GenerateComment.from_dict),
            receiver=data.get("receiver", ""),
            receiver_indirect=data.get("receiver_indirect", False),
            params=_list(data, "params", Value.from_dict),
            results=_list(data, "results", Value.from_dict),
        )


@dataclass
class Channel(_Record):
    """Channel element type and direction; both flags False means bidirectional."""

    type: str = ""
    recv_only: bool = False
    send_only: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Channel":
        return cls(
            type=data.get("type", ""),
            recv_only=data.get("recv_only", False),
            send_only=data.get("send_only", False),
        )


@dataclass
class MapValue(_Record):
    """Value side of a map, tagged by shape in ``name``."""

    name: str = ""
    value: Union[str, "Map", Func, Channel, None] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MapValue":
        name = data.get("name", "")
        return cls(name=name, value=_decode_tagged(name, data.get("value")))


@dataclass
class Map(_Record):
    """Key type text and a tagged value descriptor."""

    key_type: str = ""
    value_type: MapValue = field(default_factory=MapValue)

    def __str__(self) -> str:
        value = self.value_type.value
        return f"map[{self.key_type}]{value if value is not None else ''}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Map":
        return cls(
            key_type=data.get("key_type", ""),
            value_type=MapValue.from_dict(data.get("value_type") or {}),
        )


@dataclass
class ValueType(_Record):
    """Struct field type descriptor for non-identifier shapes."""

    kind: str = ""
    value: Union[str, Map, Func, Channel, None] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValueType":
        kind = data.get("kind", "")
        return cls(kind=kind, value=_decode_tagged(kind, data.get("value")))


def _decode_tagged(tag: str, value: Any) -> Any:
    if not isinstance(value, dict):
        return value
    if tag == MAP_KIND:
        return Map.from_dict(value)
    if tag == FUNC_KIND:
        return Func.from_dict(value)
    if tag == CHAN_KIND:
        return Channel.from_dict(value)
    return value


FieldType = Union[str, ValueType, None]


@dataclass
class StructField(_Record):
    """One field of a struct; an empty name marks an embedded field."""

    indirect: bool = False
    embed: bool = False
    is_map: bool = False
    is_exported: bool = False
    is_interface: bool = False
    is_slice: bool = False
    is_array: bool = False
    array_length: str = ""
    name: str = ""
    doc: Comment = field(default_factory=Comment)
    comment: Comment = field(default_factory=Comment)
    magic_comments: List[MagicComment] = field(default_factory=list)
    generate_comments: List[GenerateComment] = field(default_factory=list)
    field_type: FieldType = None
    tag: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StructField":
        raw_type = data.get("field_type")
        field_type: FieldType = (
            ValueType.from_dict(raw_type) if isinstance(raw_type, dict) else raw_type
        )
        return cls(
            indirect=data.get("indirect", False),
            embed=data.get("embed", False),
            is_map=data.get("is_map", False),
            is_exported=data.get("is_exported", False),
            is_interface=data.get("is_interface", False),
            is_slice=data.get("is_slice", False),
            is_array=data.get("is_array", False),
            array_length=data.get("array_length", ""),
            name=data.get("name", ""),
            doc=_comment(data, "doc"),
            comment=_comment(data, "comment"),
            magic_comments=_list(data, "magic_comments", MagicComment.from_dict),
            generate_comments=_list(data, "generate_comments", GenerateComment.from_dict),
            field_type=field_type,
            tag=data.get("tag", ""),
        )


@dataclass
class Struct(_Record):
    is_exported: bool = False
    name: str = ""
    doc: Comment = field(default_factory=Comment)
    comment: Comment = field(default_factory=Comment)
    magic_comments: List[MagicComment] = field(default_factory=list)
    generate_comments: List[GenerateComment] = field(default_factory=list)
    fields: List[StructField] = field(default_factory=list)
    methods: List[Method] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Struct":
        return cls(
            is_exported=data.get("is_exported", False),
            name=data.get("name", ""),
            doc=_comment(data, "doc"),
            comment=_comment(data, "comment"),
            magic_comments=_list(data, "magic_comments", MagicComment.from_dict),
            generate_comments=_list(data, "generate_comments", GenerateComment.from_dict),
            fields=_list(data, "fields", StructField.from_dict),
            methods=_list(data, "methods", Method.from_dict),
        )


@dataclass
class TypeDefinition(_Record):
    """A named type over an identifier, or a synthetic holder of unbound methods."""

    is_exported: bool = False
    name: str = ""
    type: str = ""
    doc: Comment = field(default_factory=Comment)
    comment: Comment = field(default_factory=Comment)
    magic_comments: List[MagicComment] = field(default_factory=list)
    generate_comments: List[GenerateComment] = field(default_factory=list)
    methods: List[Method] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TypeDefinition":
        return cls(
            is_exported=data.get("is_exported", False),
            name=data.get("name", ""),
            type=data.get("type", ""),
            doc=_comment(data, "doc"),
            comment=_comment(data, "comment"),
            magic_comments=_list(data, "magic_comments", MagicComment.from_dict),
            generate_comments=_list(data, "generate_comments", GenerateComment.from_dict),
            methods=_list(data, "methods", Method.from_dict),
        )


@dataclass
class Interface(_Record):
    """An interface declaration, or an embedded interface inside a method set."""

    is_exported: bool = False
    embed: bool = False
    name: str = ""
    doc: Comment = field(default_factory=Comment)
    comment: Comment = field(default_factory=Comment)
    method_set: List[Union["Interface", Func]] = field(default_factory=list)
    magic_comments: List[MagicComment] = field(default_factory=list)
    generate_comments: List[GenerateComment] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Interface":
        return cls(
            is_exported=data.get("is_exported", False),
            embed=data.get("embed", False),
            name=data.get("name", ""),
            doc=_comment(data, "doc"),
            comment=_comment(data, "comment"),
            method_set=_list(data, "method_set", _decode_interface_field),
            magic_comments=_list(data, "magic_comments", MagicComment.from_dict),
            generate_comments=_list(data, "generate_comments", GenerateComment.from_dict),
        )


def _decode_interface_field(data: Dict[str, Any]) -> Union[Interface, Func]:
    if data.get("embed"):
        return Interface.from_dict(data)
    return Func.from_dict(data)


@dataclass
class Import(_Record):
    name: str = ""
    path: str = ""
    doc: Comment = field(default_factory=Comment)
    comment: Comment = field(default_factory=Comment)
    magic_comments: List[MagicComment] = field(default_factory=list)
    generate_comments: List[GenerateComment] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Import":
        return cls(
            name=data.get("name", ""),
            path=data.get("path", ""),
            doc=_comment(data, "doc"),
            comment=_comment(data, "comment"),
            magic_comments=_list(data, "magic_comments", MagicComment.from_dict),
            generate_comments=_list(data, "generate_comments", GenerateComment.from_dict),
        )


@dataclass
class Const(_Record):
    is_exported: bool = False
    name: str = ""
    type: str = ""
    value: Optional[str] = None
    doc: Comment = field(default_factory=Comment)
    comment: Comment = field(default_factory=Comment)
    magic_comments: List[MagicComment] = field(default_factory=list)
    generate_comments: List[GenerateComment] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Const":
        return cls(
            is_exported=data.get("is_exported", False),
            name=data.get("name", ""),
            type=data.get("type", ""),
            value=data.get("value"),
            doc=_comment(data, "doc"),
            comment=_comment(data, "comment"),
            magic_comments=_list(data, "magic_comments", MagicComment.from_dict),
            generate_comments=_list(data, "generate_comments", GenerateComment.from_dict),
        )


@dataclass
class Var(Const):
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Var":
        const = Const.from_dict(data)
        return cls(**{spec.name: getattr(const, spec.name) for spec in fields(Const)})


@dataclass
class File(_Record):
    """Declarations collected from one source file."""

    name: str = ""
    package: str = ""
    imports: List[Import] = field(default_factory=list)
    type_defs: List[TypeDefinition] = field(default_factory=list)
    structs: List[Struct] = field(default_factory=list)
    interfaces: List[Interface] = field(default_factory=list)
    funcs: List[Func] = field(default_factory=list)
    consts: List[Const] = field(default_factory=list)
    vars: List[Var] = field(default_factory=list)
    comments: List[Comment] = field(default_factory=list)
    magic_comments: List[MagicComment] = field(default_factory=list)
    generate_comments: List[GenerateComment] = field(default_factory=list)
    build_tags: List[Constraint] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "File":
        return cls(
            name=data.get("name", ""),
            package=data.get("package", ""),
            imports=_list(data, "imports", Import.from_dict),
            type_defs=_list(data, "type_defs", TypeDefinition.from_dict),
            structs=_list(data, "structs", Struct.from_dict),
            interfaces=_list(data, "interfaces", Interface.from_dict),
            funcs=_list(data, "funcs", Func.from_dict),
            consts=_list(data, "consts", Const.from_dict),
            vars=_list(data, "vars", Var.from_dict),
            comments=_list(data, "comments", Comment.from_dict),
            magic_comments=_list(data, "magic_comments", MagicComment.from_dict),
            generate_comments=_list(data, "generate_comments", GenerateComment.from_dict),
            build_tags=_list(data, "build_tags", Constraint.from_dict),
        )


@dataclass
class Package(_Record):
    name: str = ""
    files: List[File] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Package":
        return cls(name=data.get("name", ""), files=_list(data, "files", File.from_dict))


@dataclass
class RootDocument(_Record):
    """The document streamed to every plugin."""

    output_base: str = field(default="", metadata={"always": True})
    packages: List[Package] = field(default_factory=list)

    def file_names(self) -> List[str]:
        """Names of every collected file, in document order."""
        return [file.name for package in self.packages for file in package.files]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RootDocument":
        return cls(
            output_base=data.get("output_base", ""),
            packages=_list(data, "packages", Package.from_dict),
        )


__all__ = [
    "Channel",
    "Comment",
    "Const",
    "Constraint",
    "File",
    "Func",
    "GenerateComment",
    "Import",
    "Interface",
    "MagicComment",
    "Map",
    "MapValue",
    "Method",
    "Package",
    "RootDocument",
    "Struct",
    "StructField",
    "TypeDefinition",
    "Value",
    "ValueType",
    "Var",
    "is_exported",
]
