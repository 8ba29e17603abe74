"""Typed views over table data and table references."""

from __future__ import annotations

import struct
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from . import simple_f32, simple_u32
from .compress import DecompressError
from .format import (
    COMPRESS_NONE,
    COMPRESS_SIMPLE_F32,
    COMPRESS_SIMPLE_U32,
    TYPE_DIM_1D,
    TYPE_HINT_TEXT,
    TYPE_PRIM_F32,
    TYPE_PRIM_F64,
    TYPE_PRIM_I8,
    TYPE_PRIM_I16,
    TYPE_PRIM_I32,
    TYPE_PRIM_I64,
    TYPE_PRIM_MASK,
    TYPE_PRIM_U8,
    TYPE_PRIM_U16,
    TYPE_PRIM_U32,
    TYPE_PRIM_U64,
)
from .printarray import PrintArray, format_f32, format_f64
from .shape import Shape

_PRIM_FORMATS = {
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


@dataclass(frozen=True)
class DataRef:
    """Raw bytes of a table together with their type, compression and shape."""

    data: bytes = b""
    type_info: int = 0
    compress_info: int = COMPRESS_NONE
    shape: Shape = field(default_factory=Shape)

    def is_compressed(self) -> bool:
        return self.compress_info != COMPRESS_NONE

    def element_count(self) -> int:
        return self.shape.size()

    def unpack(self, fmt: str) -> list:
        """Reinterpret the bytes as little-endian records of struct format ``fmt``.

        Single-field formats give plain values, others give tuples.
        """
        if self.is_compressed():
            raise ValueError("cannot reinterpret compressed data")
        layout = struct.Struct("<" + fmt)
        if layout.size == 0 or len(self.data) % layout.size:
            raise ValueError("data size is not a multiple of the element size")
        fields = len(layout.unpack(bytes(layout.size)))
        records = layout.iter_unpack(self.data)
        if fields == 1:
            return [record[0] for record in records]
        return list(records)

    def values(self) -> list:
        """The elements decoded according to the primitive type."""
        fmt = _PRIM_FORMATS.get(self.type_info & TYPE_PRIM_MASK)
        if fmt is None:
            raise ValueError("data has no known primitive type")
        return self.unpack(fmt)

    def print(self) -> PrintArray:
        """The elements as a printable array shaped like the data."""
        if self.is_compressed():
            raise ValueError("cannot print compressed data")
        prim = self.type_info & TYPE_PRIM_MASK
        if prim == TYPE_PRIM_F32:
            convert = format_f32
        elif prim == TYPE_PRIM_F64:
            convert = format_f64
        else:
            convert = str
        array = PrintArray(self.shape)
        for value in self.values():
            array.push(convert(value))
        return array

    def decompress(self) -> DataRef:
        """Decompressed copy, or this same reference if not compressed or invalid."""
        count = self.element_count()
        try:
            if self.compress_info == COMPRESS_SIMPLE_U32:
                raw = struct.pack(f"<{count}I", *simple_u32.decompress(self.data, count))
            elif self.compress_info == COMPRESS_SIMPLE_F32:
                raw = struct.pack(f"<{count}f", *simple_f32.decompress(self.data, count))
            else:
                return self
        except DecompressError:
            return self
        return replace(self, data=raw, compress_info=COMPRESS_NONE)


@dataclass(frozen=True)
class TableRef:
    """A table to add to a dataset: its names and its data."""

    key_name: int = 0
    data: DataRef = field(default_factory=DataRef)
    index_name: int = 0
    related_name: int = 0


def build_string_array_utf8(strings: Iterable[str]) -> DataRef:
    """Pack strings into nul-padded rows as wide as the longest one."""
    encoded = [s.encode("utf-8") for s in strings]
    width = max((len(raw) for raw in encoded), default=0)
    data = b"".join(raw.ljust(width, b"\0") for raw in encoded)
    return DataRef(
        data=data,
        type_info=TYPE_PRIM_U8 | TYPE_DIM_1D | TYPE_HINT_TEXT,
        compress_info=COMPRESS_NONE,
        shape=Shape(len(encoded), width),
    )