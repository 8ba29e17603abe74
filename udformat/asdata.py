"""Builders that wrap plain Python values as typed table data."""

from __future__ import annotations

import struct
from collections.abc import Iterable, Sequence
from itertools import chain
from typing import Any

from .data import DataRef
from .format import (
    COMPRESS_NONE,
    TYPE_DIM_1D,
    TYPE_DIM_SCALAR,
    TYPE_HINT_NONE,
    TYPE_HINT_TEXT,
    TYPE_PRIM_F32,
    TYPE_PRIM_F64,
    TYPE_PRIM_I8,
    TYPE_PRIM_I16,
    TYPE_PRIM_I32,
    TYPE_PRIM_I64,
    TYPE_PRIM_U8,
    TYPE_PRIM_U16,
    TYPE_PRIM_U32,
    TYPE_PRIM_U64,
)
from .shape import Shape

_PRIM_CODES = {
    TYPE_PRIM_U8: "B",
    TYPE_PRIM_I8: "b",
    TYPE_PRIM_U16: "H",
    TYPE_PRIM_I16: "h",
    TYPE_PRIM_U32: "I",
    TYPE_PRIM_I32: "i",
    TYPE_PRIM_U64: "Q",
    TYPE_PRIM_I64: "q",
    TYPE_PRIM_F32: "f",
    TYPE_PRIM_F64: "d",
}


def _pack(values: Iterable[Any], prim: int) -> bytes:
    code = _PRIM_CODES.get(prim)
    if code is None:
        raise ValueError(f"unsupported primitive type {prim:#x}")
    items = list(values)
    try:
        return struct.pack(f"<{len(items)}{code}", *items)
    except struct.error as exc:
        raise ValueError(str(exc)) from exc


def _data(raw: bytes, type_info: int, shape: Shape) -> DataRef:
    return DataRef(data=raw, type_info=type_info, compress_info=COMPRESS_NONE, shape=shape)


def _uniform_width(rows: Sequence[Sequence[Any]]) -> int:
    width = len(rows[0]) if rows else 0
    if any(len(row) != width for row in rows):
        raise ValueError("all rows must have the same length")
    return width


def scalar_data(value: Any, prim: int) -> DataRef:
    """A single primitive value."""
    return _data(_pack([value], prim), TYPE_HINT_NONE | TYPE_DIM_SCALAR | prim, Shape(1))


def array_data(values: Iterable[Any], prim: int, fixed: bool = False) -> DataRef:
    """A list of primitives; ``fixed`` marks a fixed-size array (scalar dimension)."""
    items = list(values)
    dim = TYPE_DIM_SCALAR if fixed else TYPE_DIM_1D
    return _data(_pack(items, prim), TYPE_HINT_NONE | dim | prim, Shape(len(items)))


def matrix_data(rows: Iterable[Sequence[Any]], prim: int, fixed: bool = False) -> DataRef:
    """Rows of equal length; ``fixed`` marks a fixed-size matrix (scalar dimension)."""
    grid = [list(row) for row in rows]
    width = _uniform_width(grid)
    if width >= 0x1000000:
        raise ValueError("row length exceeds 24 bits")
    dim = TYPE_DIM_SCALAR if fixed else TYPE_DIM_1D
    raw = _pack(chain.from_iterable(grid), prim)
    return _data(raw, TYPE_HINT_NONE | dim | prim, Shape(len(grid), width))


def tensor_data(blocks: Iterable[Sequence[Sequence[Any]]], prim: int) -> DataRef:
    """A list of equally shaped matrices."""
    cube = [[list(row) for row in block] for block in blocks]
    rows = len(cube[0]) if cube else 0
    if any(len(block) != rows for block in cube):
        raise ValueError("all blocks must have the same number of rows")
    cols = _uniform_width([row for block in cube for row in block]) if rows else 0
    if rows >= 0x1000000:
        raise ValueError("row count exceeds 24 bits")
    if cols >= 0x100:
        raise ValueError("row length exceeds 8 bits")
    raw = _pack((v for block in cube for row in block for v in row), prim)
    return _data(raw, TYPE_HINT_NONE | TYPE_DIM_1D | prim, Shape(len(cube), rows, cols))


def _record_type(record: Any) -> type:
    cls = type(record)
    if not all(hasattr(cls, attr) for attr in ("HINT", "PRIM", "ELEMENTS")):
        raise TypeError(f"{cls.__name__} is not a format record type")
    return cls


def record_data(record: Any) -> DataRef:
    """A single format record such as a coordinate or file offset."""
    cls = _record_type(record)
    return _data(record.pack(), cls.HINT | TYPE_DIM_SCALAR | cls.PRIM, Shape(cls.ELEMENTS))


def records_data(records: Iterable[Any]) -> DataRef:
    """A list of format records of a single type."""
    items = list(records)
    if not items:
        raise ValueError("cannot infer the record type of an empty list")
    cls = _record_type(items[0])
    if any(type(item) is not cls for item in items):
        raise ValueError("all records must have the same type")
    raw = b"".join(item.pack() for item in items)
    return _data(raw, cls.HINT | TYPE_DIM_1D | cls.PRIM, Shape(len(items), cls.ELEMENTS))


def text_data(text: str) -> DataRef:
    """UTF-8 text, one element per byte."""
    raw = text.encode("utf-8")
    return _data(raw, TYPE_PRIM_U8 | TYPE_DIM_SCALAR | TYPE_HINT_TEXT, Shape(len(raw)))