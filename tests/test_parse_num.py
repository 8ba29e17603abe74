import math
import struct

import pytest

from udformat.cli.common import CliError
from udformat.cli.parse_num import parse_all, parse_number, preprocess
from udformat.errors import ParseError
from udformat.format import (
    TYPE_PRIM_F32,
    TYPE_PRIM_F64,
    TYPE_PRIM_I8,
    TYPE_PRIM_I64,
    TYPE_PRIM_U8,
    TYPE_PRIM_U16,
    TYPE_PRIM_U32,
    TYPE_PRIM_U64,
)


def test_preprocess_squashes_separators():
    assert preprocess("1,2;3") == "1 2 3"
    assert preprocess("[-1.5e+3]") == " -1.5e+3 "


def test_preprocess_keeps_length_for_ascii():
    text = "a\tb\n(c)"
    assert len(preprocess(text)) == len(text)
    assert preprocess(text).split() == ["a", "b", "c"]


@pytest.mark.parametrize("value", [0, 1, 200, 255])
def test_parse_u8_decimal_and_hex_round_trip(value):
    assert parse_number(str(value), TYPE_PRIM_U8) == value
    assert parse_number(hex(value), TYPE_PRIM_U8) == value


def test_parse_signed_limits():
    assert parse_number("-128", TYPE_PRIM_I8) == -128
    assert parse_number("+127", TYPE_PRIM_I8) == 127
    with pytest.raises(ParseError):
        parse_number("-129", TYPE_PRIM_I8)
    assert parse_number("-9223372036854775808", TYPE_PRIM_I64) == -(2**63)


def test_parse_unsigned_rejects_negative_and_overflow():
    with pytest.raises(ParseError):
        parse_number("-1", TYPE_PRIM_U32)
    with pytest.raises(ParseError):
        parse_number("256", TYPE_PRIM_U8)
    with pytest.raises(ParseError):
        parse_number(str(2**64), TYPE_PRIM_U64)
    assert parse_number(str(2**64 - 1), TYPE_PRIM_U64) == 2**64 - 1


@pytest.mark.parametrize("text", ["", "0x", "+", "1.5", "abc", "0xzz"])
def test_parse_int_invalid(text):
    with pytest.raises(ParseError):
        parse_number(text, TYPE_PRIM_U16)


def test_parse_floats():
    assert parse_number("0.5", TYPE_PRIM_F64) == 0.5
    assert parse_number("-2.", TYPE_PRIM_F64) == -2.0
    assert parse_number(".25e1", TYPE_PRIM_F64) == 2.5
    assert math.isinf(parse_number("inf", TYPE_PRIM_F64))
    assert math.isnan(parse_number("NaN", TYPE_PRIM_F32))


def test_parse_f32_rounds_to_single_precision():
    value = parse_number("0.1", TYPE_PRIM_F32)
    assert struct.unpack("<f", struct.pack("<f", value))[0] == value
    assert value != 0.1


@pytest.mark.parametrize("text", [".", "e5", "1e", "1_0", "0x10"])
def test_parse_float_invalid(text):
    with pytest.raises(ParseError):
        parse_number(text, TYPE_PRIM_F64)


def test_parse_unsupported_prim():
    with pytest.raises(ValueError):
        parse_number("1", 0)


def test_parse_all_values():
    assert parse_all("1 2\n3\t0x4", TYPE_PRIM_U32) == [1, 2, 3, 4]
    assert parse_all("", TYPE_PRIM_U32) == []


def test_parse_all_after_preprocess():
    assert parse_all(preprocess("[1.5, -2.5]"), TYPE_PRIM_F64) == [1.5, -2.5]


def test_parse_all_reports_bad_token():
    with pytest.raises(CliError, match='Parse error "x1"'):
        parse_all("1 x1", TYPE_PRIM_U32)