import pytest

from udformat.errors import InvalidFormatError
from udformat.format import (
    TYPE_DIM_1D,
    TYPE_DIM_2D,
    TYPE_DIM_SCALAR,
    TYPE_HINT_COORD,
    TYPE_HINT_HATCH,
    TYPE_HINT_TEXT,
    TYPE_PRIM_CUSTOM,
    TYPE_PRIM_F32,
    TYPE_PRIM_U8,
    TYPE_PRIM_U64,
)
from udformat.utils import (
    dim_name,
    format_file_size,
    format_hex,
    format_id,
    format_type_info,
    hint_name,
    parse_id,
    parse_type_info,
    prim_name,
)


@pytest.mark.parametrize(
    ("size", "text"),
    [(0, "0 bytes"), (1, "1 byte"), (1023, "1023 bytes"), (5869, "5.73 KiB"), (41190000, "39.28 MiB")],
)
def test_format_file_size(size, text):
    assert format_file_size(size) == text


@pytest.mark.parametrize(
    ("ident", "text"),
    [(b"\0\0\0\0", ""), (b"UDF0", "UDF0"), (b"abc\0", "abc"), (b"z\0\0\0", "z"), (b"\0\0f\0", "\\0\\0f")],
)
def test_format_id(ident, text):
    assert format_id(ident) == text


def test_format_id_non_printable():
    assert format_id(b"\x01ab\0") == "\\x01ab"


def test_parse_id_pads():
    assert parse_id("OBJ") == b"OBJ\0"
    assert parse_id("") == b"\0\0\0\0"
    assert format_id(parse_id("UDF0")) == "UDF0"


def test_parse_id_too_long():
    with pytest.raises(InvalidFormatError):
        parse_id("abcde")


def test_parse_type_info():
    assert parse_type_info("u8:1d:text") == TYPE_PRIM_U8 | TYPE_DIM_1D | TYPE_HINT_TEXT
    assert parse_type_info("f32:2d") == TYPE_PRIM_F32 | TYPE_DIM_2D
    assert parse_type_info("?:scalar") == TYPE_PRIM_CUSTOM | TYPE_DIM_SCALAR
    assert parse_type_info("f32:2d:coord") == TYPE_PRIM_F32 | TYPE_DIM_2D | TYPE_HINT_COORD


@pytest.mark.parametrize("text", ["u8", "u8:1d:text:x", "u9:1d", "u8:4d", "u8:1d:bad", "custom:1d"])
def test_parse_type_info_invalid(text):
    with pytest.raises(InvalidFormatError):
        parse_type_info(text)


def test_format_type_info_adds_hint_only_when_none():
    assert format_type_info(TYPE_PRIM_U8 | TYPE_DIM_1D) == "u8:1d:none"
    assert format_type_info(TYPE_PRIM_F32 | TYPE_DIM_2D | TYPE_HINT_COORD) == "f32:2d"


def test_format_type_info_round_trip_without_hint():
    type_info = TYPE_PRIM_U64 | TYPE_DIM_1D
    assert parse_type_info(format_type_info(type_info)) == type_info


def test_names():
    assert prim_name(TYPE_PRIM_U64) == "u64"
    assert prim_name(0x0F) is None
    assert dim_name(TYPE_DIM_2D) == "2d"
    assert hint_name(TYPE_HINT_HATCH) == "line"
    assert hint_name(0x3F00) is None


def test_format_hex():
    assert format_hex(b"\x01\xab") == "01 ab "
    assert format_hex(b"") == ""