"""Tests for toast.collector.types."""

from __future__ import annotations

from typing import Dict

from toast.models import Channel, Func, Map, MapValue, StructField, Value, ValueType


def _fields(collect, body: str) -> Dict[str, StructField]:
    result = collect(
        f"""
        package shapes

        type Shape struct {{
        {body}
        }}
        """
    )
    return {field.name: field for field in result.structs[0].fields}


def test_slice_field_records_element_type(collect) -> None:
    field = _fields(collect, "Items []string")["Items"]

    assert field.is_slice is True
    assert field.is_array is False
    assert field.array_length == ""
    assert field.field_type == "string"


def test_array_field_records_length_and_element(collect) -> None:
    field = _fields(collect, "Matrix [4]int")["Matrix"]

    assert field.is_array is True
    assert field.is_slice is False
    assert field.array_length == "4"
    assert field.field_type == "int"


def test_array_length_may_be_constant_or_implicit(collect) -> None:
    fields = _fields(collect, "Buf [Size]byte")

    assert fields["Buf"].array_length == "Size"
    assert fields["Buf"].field_type == "byte"


def test_slice_of_pointers_is_indirect(collect) -> None:
    field = _fields(collect, "Nodes []*Node")["Nodes"]

    assert field.is_slice is True
    assert field.indirect is True
    assert field.field_type == ValueType(kind="type", value="Node")


def test_slice_of_empty_interface(collect) -> None:
    field = _fields(collect, "Any []interface{}")["Any"]

    assert field.is_slice is True
    assert field.field_type == "interface{}"


def test_qualified_field_becomes_type_descriptor(collect) -> None:
    field = _fields(collect, "Created time.Time")["Created"]

    assert field.field_type == ValueType(kind="type", value="time.Time")
    assert field.indirect is False


def test_pointer_fields(collect) -> None:
    fields = _fields(
        collect,
        """
        Parent *Node
        Clock  *time.Location
        Rows   *[]Row
        """,
    )

    assert fields["Parent"].indirect is True
    assert fields["Parent"].field_type == ValueType(kind="type", value="Node")
    assert fields["Clock"].field_type == ValueType(kind="type", value="time.Location")
    assert fields["Rows"].field_type == ValueType(kind="slice", value="Row")
    assert fields["Rows"].indirect is True


def test_interface_field(collect) -> None:
    field = _fields(collect, "Payload interface{}")["Payload"]

    assert field.is_interface is True
    assert field.field_type == "interface{}"


def test_map_field_describes_key_and_value(collect) -> None:
    fields = _fields(
        collect,
        """
        Counts  map[string]int
        Index   map[string]*pkg.Item
        Groups  map[string][]string
        Grid    map[int][3]float64
        Nested  map[string]map[string]bool
        """,
    )

    counts = fields["Counts"]
    assert counts.is_map is True
    assert counts.field_type == ValueType(
        kind="map", value=Map(key_type="string", value_type=MapValue(name="literal", value="int"))
    )

    index = fields["Index"].field_type.value
    assert index.value_type == MapValue(name="type", value="*pkg.Item")

    assert fields["Groups"].field_type.value.value_type == MapValue(name="slice", value="[]string")
    assert fields["Grid"].field_type.value.value_type == MapValue(name="array", value="[3]float64")

    nested = fields["Nested"].field_type.value.value_type
    assert nested.name == "map"
    assert nested.value == Map(key_type="string", value_type=MapValue(name="literal", value="bool"))


def test_map_with_unsupported_key_has_empty_key(collect) -> None:
    field = _fields(collect, "Odd map[[2]int]string")["Odd"]

    assert field.is_map is True
    assert field.field_type.value.key_type == ""


def test_channel_directions(collect) -> None:
    fields = _fields(
        collect,
        """
        Both chan int
        In   <-chan string
        Out  chan<- error
        """,
    )

    assert fields["Both"].field_type == ValueType(kind="chan", value=Channel(type="int"))
    assert fields["In"].field_type.value == Channel(type="string", recv_only=True)
    assert fields["Out"].field_type.value == Channel(type="error", send_only=True)


def test_func_field_describes_signature(collect) -> None:
    field = _fields(collect, "Handler func(ctx context.Context, args ...string) error")["Handler"]

    assert field.field_type == ValueType(
        kind="func",
        value=Func(
            is_exported=False,
            params=[
                Value(name="ctx", type="context.Context"),
                Value(name="args", type="...string"),
            ],
            results=[Value(type="error")],
        ),
    )


def test_unrecognized_field_shape_yields_empty_descriptor(collect) -> None:
    field = _fields(collect, "Inline struct{ X int }")["Inline"]

    assert field.field_type is None
    assert field.is_map is False
    assert field.is_slice is False
