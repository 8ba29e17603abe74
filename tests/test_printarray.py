import math
import struct

import pytest

from udformat.printarray import PrintArray, format_f32, format_f64
from udformat.shape import Shape


def _filled(shape, items, line_width=75):
    pa = PrintArray(shape, line_width)
    for item in items:
        pa.push(item)
    return pa


def _f32(value):
    return struct.unpack("<f", struct.pack("<f", value))[0]


def test_one_dimension_joins_elements():
    items = ["1", "2", "3"]
    assert str(_filled(Shape(3), items)) == "[" + ", ".join(items) + "]"


def test_two_dimensions_layout():
    assert str(_filled(Shape(2, 2), ["1", "2", "3", "4"])) == "[[1, 2],\n [3, 4]]"


def test_elements_are_right_aligned():
    assert str(_filled(Shape(2), ["1", "22"])) == "[ 1, 22]"


def test_zero_line_width_single_line():
    text = str(_filled(Shape(2, 2), ["1", "2", "3", "4"], line_width=0))
    assert "\n" not in text
    assert text.count("[") == 3


def test_line_breaks_respect_width():
    items = [str(i % 10) for i in range(25)]
    text = str(_filled(Shape(25), items, line_width=10))
    lines = text.split("\n")
    assert len(lines) > 1
    assert all(len(line.strip().strip("[],").split(", ")) <= 10 for line in lines)


def test_three_dimensions_blank_line_between_blocks():
    text = str(_filled(Shape(2, 1, 2), ["a", "b", "c", "d"]))
    assert text.startswith("[[[")
    assert "\n\n" in text


def test_scalar_prints_element():
    assert str(_filled(Shape(), ["42"])) == "42"


def test_shape_mismatch_raises():
    pa = _filled(Shape(3), ["1", "2"])
    with pytest.raises(ValueError):
        str(pa)
    pa.push("3")
    assert str(pa) == "[1, 2, 3]"


def test_push_too_long_raises():
    pa = PrintArray(Shape(1))
    with pytest.raises(ValueError):
        pa.push("x" * 256)
    assert len(pa) == 0


def test_format_f64_integer_gets_decimal():
    assert format_f64(1.0) == "1.0"


def test_format_f64_no_exponent():
    text = format_f64(1e20)
    assert "e" not in text.lower()
    assert text.endswith(".0")
    assert float(text) == 1e20


def test_format_f64_small_value_roundtrips():
    text = format_f64(1.5e-7)
    assert "e" not in text.lower()
    assert float(text) == 1.5e-7


def test_format_f32_source_value():
    assert format_f32(3.141592) == "3.141592"


@pytest.mark.parametrize("value", [0.1, 42.0, -7.25, 1e-8, 3.4e38, 123456.78])
def test_format_f32_roundtrips(value):
    text = format_f32(value)
    assert "." in text
    assert _f32(float(text)) == _f32(value)


def test_format_f32_is_shorter_than_f64_repr():
    assert len(format_f32(0.1)) <= len(format_f64(_f32(0.1)))


def test_special_values_end_with_decimal():
    assert format_f64(math.inf).endswith(".0")
    assert format_f32(-0.0).startswith("-")