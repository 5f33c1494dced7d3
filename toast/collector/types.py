"""Normalize Go type expressions into closed IR descriptors.

Each entry point dispatches on the tree-sitter node type through a fixed
table. A node type missing from the table goes through ``_unrecognized``,
which logs the gap and returns the zero-value descriptor; normalization
never raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..logging import get_logger
from ..models import (
    ARRAY_KIND,
    CHAN_KIND,
    ELLIPSIS,
    FUNC_KIND,
    INTERFACE_LITERAL,
    LITERAL_KIND,
    MAP_KIND,
    SLICE_KIND,
    TYPE_KIND,
    Channel,
    FieldType,
    Func,
    Map,
    MapValue,
    Value,
    ValueType,
)
from .nodes import Node, field_nodes, first_named, significant_children, text_of, type_text

_LOGGER = get_logger("collector.types")

IDENTIFIER = "type_identifier"
QUALIFIED = "qualified_type"
GENERIC = "generic_type"
POINTER = "pointer_type"
MAP = "map_type"
ARRAY = "array_type"
IMPLICIT_ARRAY = "implicit_length_array_type"
SLICE = "slice_type"
CHANNEL = "channel_type"
FUNCTION = "function_type"
INTERFACE = "interface_type"
STRUCT = "struct_type"
PARENTHESIZED = "parenthesized_type"
PARAMETER_LIST = "parameter_list"

ARRAY_TYPES = {ARRAY, IMPLICIT_ARRAY, SLICE}


@dataclass
class FieldShape:
    """A struct field's type descriptor plus the flags describing its shape."""

    field_type: FieldType = None
    indirect: bool = False
    is_map: bool = False
    is_slice: bool = False
    is_array: bool = False
    array_length: str = ""
    is_interface: bool = False


def unwrap(node: Optional[Node]) -> Optional[Node]:
    while node is not None and node.type == PARENTHESIZED:
        node = first_named(node)
    return node


def qualified_name(node: Node) -> str:
    package = text_of(node.child_by_field_name("package"))
    name = text_of(node.child_by_field_name("name"))
    return f"{package}.{name}"


def _unrecognized(context: str, node: Optional[Node]) -> None:
    _LOGGER.debug(
        "unrecognized %s expression %s: %r",
        context,
        node.type if node is not None else None,
        type_text(node),
    )


# ----------------------------------------------------------------------
# Struct fields


def normalize_field(node: Optional[Node]) -> FieldShape:
    """Return the descriptor and flags for a struct field's type."""
    node = unwrap(node)
    if node is None:
        return FieldShape()
    handler = _FIELD_HANDLERS.get(node.type)
    if handler is None:
        _unrecognized("field", node)
        return FieldShape()
    return handler(node)


def _identifier_field(node: Node) -> FieldShape:
    return FieldShape(field_type=type_text(node))


def _qualified_field(node: Node) -> FieldShape:
    return FieldShape(field_type=ValueType(kind=TYPE_KIND, value=qualified_name(node)))


def _pointer_field(node: Node) -> FieldShape:
    return normalize_pointee(first_named(node))


def normalize_pointee(pointee: Optional[Node]) -> FieldShape:
    """Descriptor for ``*T``; also used for embedded ``*T`` fields."""
    pointee = unwrap(pointee)
    if pointee is None:
        _unrecognized("pointer", pointee)
        return FieldShape(indirect=True)
    if pointee.type == QUALIFIED:
        shape = _qualified_field(pointee)
    elif pointee.type in (IDENTIFIER, GENERIC):
        shape = FieldShape(field_type=ValueType(kind=TYPE_KIND, value=type_text(pointee)))
    elif pointee.type in ARRAY_TYPES:
        kind = SLICE_KIND if pointee.type == SLICE else ARRAY_KIND
        element = pointee.child_by_field_name("element")
        shape = FieldShape(field_type=ValueType(kind=kind, value=type_text(element)))
    else:
        shape = normalize_field(pointee)
    shape.indirect = True
    return shape


def _map_field(node: Node) -> FieldShape:
    return FieldShape(field_type=ValueType(kind=MAP_KIND, value=map_descriptor(node)), is_map=True)


def _channel_field(node: Node) -> FieldShape:
    return FieldShape(field_type=ValueType(kind=CHAN_KIND, value=channel_descriptor(node)))


def _function_field(node: Node) -> FieldShape:
    return FieldShape(field_type=ValueType(kind=FUNC_KIND, value=func_literal(node)))


def _interface_field(node: Node) -> FieldShape:
    return FieldShape(field_type=INTERFACE_LITERAL, is_interface=True)


def _array_field(node: Node) -> FieldShape:
    shape = FieldShape()
    if node.type == SLICE:
        shape.is_slice = True
    else:
        shape.is_array = True
        shape.array_length = array_length(node)

    element = unwrap(node.child_by_field_name("element"))
    element_type = element.type if element is not None else None
    if element_type == POINTER:
        shape.indirect = True
        shape.field_type = ValueType(kind=TYPE_KIND, value=type_text(first_named(element)))
    elif element_type == INTERFACE:
        shape.field_type = INTERFACE_LITERAL
    elif element_type == IDENTIFIER:
        shape.field_type = type_text(element)
    elif element_type == MAP:
        shape.field_type = ValueType(kind=MAP_KIND, value=map_descriptor(element))
    elif element_type == CHANNEL:
        shape.field_type = ValueType(kind=CHAN_KIND, value=channel_descriptor(element))
    else:
        _unrecognized("array element", element)
    return shape


_FIELD_HANDLERS: Dict[str, Callable[[Node], FieldShape]] = {
    IDENTIFIER: _identifier_field,
    GENERIC: _identifier_field,
    QUALIFIED: _qualified_field,
    POINTER: _pointer_field,
    MAP: _map_field,
    ARRAY: _array_field,
    IMPLICIT_ARRAY: _array_field,
    SLICE: _array_field,
    CHANNEL: _channel_field,
    FUNCTION: _function_field,
    INTERFACE: _interface_field,
}


def array_length(node: Node) -> str:
    """Length token of a fixed array: a literal, a constant name, or ``...``."""
    if node.type == IMPLICIT_ARRAY:
        return ELLIPSIS
    length = node.child_by_field_name("length")
    if length is not None and length.type in ("int_literal", "identifier"):
        return text_of(length)
    _unrecognized("array length", length)
    return ""


# ----------------------------------------------------------------------
# Composite descriptors


def channel_descriptor(node: Node) -> Channel:
    tokens = [child.type for child in node.children if not child.is_named]
    recv_only = bool(tokens) and tokens[0] == "<-"
    send_only = not recv_only and tokens[:2] == ["chan", "<-"]
    return Channel(
        type=type_text(node.child_by_field_name("value")),
        recv_only=recv_only,
        send_only=send_only,
    )


def func_literal(node: Node) -> Func:
    """Signature of a ``func(...) ...`` type; func literals are never exported."""
    return Func(
        is_exported=False,
        params=parameter_values(node.child_by_field_name("parameters")),
        results=parameter_values(node.child_by_field_name("result")),
    )


def map_descriptor(node: Node) -> Map:
    return Map(
        key_type=_map_key(unwrap(node.child_by_field_name("key"))),
        value_type=_map_value(unwrap(node.child_by_field_name("value"))),
    )


def _pointer_name(node: Node) -> Optional[str]:
    pointee = unwrap(first_named(node))
    if pointee is None:
        return None
    if pointee.type == QUALIFIED:
        return "*" + qualified_name(pointee)
    if pointee.type == IDENTIFIER:
        return "*" + text_of(pointee)
    return None


def _map_key(key: Optional[Node]) -> str:
    key_type = key.type if key is not None else None
    if key_type in (IDENTIFIER, GENERIC):
        return type_text(key)
    if key_type == QUALIFIED:
        return qualified_name(key)
    if key_type == INTERFACE:
        return INTERFACE_LITERAL
    if key_type == POINTER:
        name = _pointer_name(key)
        if name is not None:
            return name
    _unrecognized("map key", key)
    return ""


def _map_value(value: Optional[Node]) -> MapValue:
    value_type = value.type if value is not None else None
    if value_type in (IDENTIFIER, GENERIC):
        return MapValue(name=LITERAL_KIND, value=type_text(value))
    if value_type == QUALIFIED:
        return MapValue(name=TYPE_KIND, value=qualified_name(value))
    if value_type == POINTER:
        name = _pointer_name(value)
        if name is not None:
            return MapValue(name=TYPE_KIND, value=name)
    if value_type == SLICE:
        element = type_text(value.child_by_field_name("element"))
        return MapValue(name=SLICE_KIND, value=f"[]{element}")
    if value_type in (ARRAY, IMPLICIT_ARRAY):
        element = type_text(value.child_by_field_name("element"))
        return MapValue(name=ARRAY_KIND, value=f"[{array_length(value)}]{element}")
    if value_type == MAP:
        return MapValue(name=MAP_KIND, value=map_descriptor(value))
    if value_type == FUNCTION:
        return MapValue(name=FUNC_KIND, value=func_literal(value))
    if value_type == INTERFACE:
        return MapValue(name=INTERFACE_LITERAL, value=INTERFACE_LITERAL)
    if value_type == CHANNEL:
        return MapValue(name=CHAN_KIND, value=channel_descriptor(value))
    _unrecognized("map value", value)
    return MapValue()


# ----------------------------------------------------------------------
# Signatures


def parameter_values(node: Optional[Node]) -> List[Value]:
    """Parameters or results of a signature, one Value per declared name.

    ``node`` is a parameter list or, for a single unparenthesized result,
    the result type itself.
    """
    if node is None:
        return []
    if node.type != PARAMETER_LIST:
        return [Value(type=type_text(node))]

    values: List[Value] = []
    for child in significant_children(node):
        type_node = child.child_by_field_name("type")
        if child.type == "variadic_parameter_declaration":
            name = child.child_by_field_name("name")
            values.append(
                Value(
                    name=text_of(name) if name is not None else None,
                    type=ELLIPSIS + type_text(type_node),
                )
            )
            continue
        names = field_nodes(child, "name")
        if not names:
            values.append(Value(type=type_text(type_node)))
            continue
        for name in names:
            values.append(Value(name=text_of(name), type=type_text(type_node)))
    return values


__all__ = [
    "FieldShape",
    "array_length",
    "channel_descriptor",
    "func_literal",
    "map_descriptor",
    "normalize_field",
    "normalize_pointee",
    "parameter_values",
    "qualified_name",
    "unwrap",
]
