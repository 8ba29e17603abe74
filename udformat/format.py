"""On-disk structures and type constants of the UDF container format."""

from __future__ import annotations

import struct
from dataclasses import astuple, dataclass
from typing import ClassVar

from .errors import InvalidFormatError, OutOfBoundsError, ParseError

# Primitive types.
TYPE_PRIM_MASK = 0x008F
TYPE_PRIM_CUSTOM = 0
TYPE_PRIM_U8 = 2
TYPE_PRIM_I8 = 3
TYPE_PRIM_U16 = 4
TYPE_PRIM_I16 = 5
TYPE_PRIM_U32 = 6
TYPE_PRIM_I32 = 7
TYPE_PRIM_U64 = 8
TYPE_PRIM_I64 = 9
TYPE_PRIM_F32 = 10
TYPE_PRIM_F64 = 11

# Dimensions.
TYPE_DIM_MASK = 0x0030
TYPE_DIM_SCALAR = 0 << 4
TYPE_DIM_1D = 1 << 4
TYPE_DIM_2D = 2 << 4
TYPE_DIM_3D = 3 << 4

# Type hints.
TYPE_HINT_MASK = 0x3F00
TYPE_HINT_NONE = 0 << 8
TYPE_HINT_TEXT = 1 << 8
TYPE_HINT_JSON = 2 << 8
TYPE_HINT_DATASET = 3 << 8
TYPE_HINT_INDEX = 4 << 8
TYPE_HINT_RANGE = 5 << 8
TYPE_HINT_COORD = 6 << 8
TYPE_HINT_HATCH = 7 << 8
TYPE_HINT_TRANSFORM = 8 << 8
TYPE_HINT_RGB = 9 << 8

T_FILE_OFFSET = TYPE_HINT_DATASET | TYPE_DIM_1D | TYPE_PRIM_U64

# Compression schemes.
COMPRESS_NONE = 0
COMPRESS_SIMPLE_U16 = 16 + 0
COMPRESS_SIMPLE_U32 = 16 + 1
COMPRESS_SIMPLE_U64 = 16 + 2
COMPRESS_SIMPLE_F32 = 16 + 3
COMPRESS_SIMPLE_F64 = 16 + 4

_PRIM_SIZES = {
    TYPE_PRIM_U8: 1,
    TYPE_PRIM_I8: 1,
    TYPE_PRIM_U16: 2,
    TYPE_PRIM_I16: 2,
    TYPE_PRIM_U32: 4,
    TYPE_PRIM_I32: 4,
    TYPE_PRIM_F32: 4,
    TYPE_PRIM_U64: 8,
    TYPE_PRIM_I64: 8,
    TYPE_PRIM_F64: 8,
}

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_DEC_DIGITS = frozenset("0123456789")


def prim_size(type_info: int) -> int | None:
    """Byte size of the primitive in ``type_info``, or None for custom/unknown."""
    return _PRIM_SIZES.get(type_info & TYPE_PRIM_MASK)


def type_prim_align(type_info: int) -> int:
    """Alignment in bytes required by the primitive in ``type_info``."""
    return _PRIM_SIZES.get(type_info & TYPE_PRIM_MASK, 1)


def _require(data: bytes, size: int) -> None:
    if len(data) < size:
        raise OutOfBoundsError()


def _parse_u64(src: str) -> int:
    if src.startswith("0x"):
        digits, radix, allowed = src[2:], 16, _HEX_DIGITS
    else:
        digits, radix, allowed = src, 10, _DEC_DIGITS
    if not digits:
        raise ParseError("cannot parse integer from empty string")
    body = digits[1:] if digits.startswith("+") else digits
    if not body or not set(body) <= allowed:
        raise ParseError("invalid digit found in string")
    value = int(body, radix)
    if value >> 64:
        raise ParseError("number too large to fit in target type")
    return value


@dataclass(frozen=True)
class FileOffset:
    """Location and size of a dataset inside a UDF file."""

    offset: int = 0
    size: int = 0

    SIZE: ClassVar[int] = 16
    HINT: ClassVar[int] = TYPE_HINT_DATASET
    PRIM: ClassVar[int] = TYPE_PRIM_U64
    ELEMENTS: ClassVar[int] = 2
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<2Q")

    def is_null(self) -> bool:
        return self.offset == 0 and self.size == 0

    def is_aligned(self) -> bool:
        return self.offset & 0xF == 0 and self.size & 0xF == 0

    @classmethod
    def parse(cls, string: str) -> FileOffset:
        """Parse ``offset:size``; each part is decimal or ``0x`` hexadecimal."""
        parts = string.split(":")
        offset = _parse_u64(parts[0])
        if len(parts) < 2:
            raise InvalidFormatError()
        size = _parse_u64(parts[1])
        if len(parts) > 2:
            raise InvalidFormatError()
        return cls(offset, size)

    def pack(self) -> bytes:
        return self._STRUCT.pack(self.offset, self.size)

    @classmethod
    def unpack(cls, data: bytes) -> FileOffset:
        _require(data, cls.SIZE)
        return cls(*cls._STRUCT.unpack_from(data))

    def __str__(self) -> str:
        return f"{self.offset:#x}:{self.size:#x}"


@dataclass
class UdfHeader:
    """The 64-byte header at the start of every UDF file."""

    magic: bytes = b"UDF0"
    ident: bytes = b"\0\0\0\0"
    next: int = 0
    root: FileOffset = FileOffset()
    reserved: tuple[int, int, int, int] = (0, 0, 0, 0)

    MAGIC: ClassVar[bytes] = b"UDF0"
    SIZE: ClassVar[int] = 0x40
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<4s4sQ2Q4Q")

    def pack(self) -> bytes:
        return self._STRUCT.pack(
            self.magic, self.ident, self.next, self.root.offset, self.root.size, *self.reserved
        )

    @classmethod
    def unpack(cls, data: bytes) -> UdfHeader:
        _require(data, cls.SIZE)
        magic, ident, nxt, offset, size, *reserved = cls._STRUCT.unpack_from(data)
        return cls(magic, ident, nxt, FileOffset(offset, size), tuple(reserved))


@dataclass
class DatasetHeader:
    """Header that starts every dataset block."""

    check: int = 0
    checksum: int = 0
    ident: bytes = b"\0\0\0\0"
    size: int = 0
    descs_len: int = 0
    lookup_len: int = 0
    string_len: int = 0
    reserved: tuple[int, int] = (0, 0)

    CHECK: ClassVar[int] = 0x7FCEA59B
    SIZE: ClassVar[int] = 0x18
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<II4s4H2H")

    def pack(self) -> bytes:
        return self._STRUCT.pack(
            self.check,
            self.checksum,
            self.ident,
            self.size,
            self.descs_len,
            self.lookup_len,
            self.string_len,
            *self.reserved,
        )

    @classmethod
    def unpack(cls, data: bytes) -> DatasetHeader:
        _require(data, cls.SIZE)
        check, checksum, ident, size, descs, lookup, strings, *reserved = cls._STRUCT.unpack_from(data)
        return cls(check, checksum, ident, size, descs, lookup, strings, tuple(reserved))


@dataclass
class TableDesc:
    """Descriptor of one datatable inside a dataset."""

    key_name: int = 0
    type_info: int = 0
    compress_info: int = 0
    mem_start: int = 0
    mem_end: int = 0
    data_size: int = 0
    data_shape: tuple[int, int] = (0, 0)
    index_name: int = 0
    related_name: int = 0
    type_name: int = 0
    checksum: int = 0
    reserved: int = 0

    SIZE: ClassVar[int] = 0x30
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<I2H3I2I5I")

    def pack(self) -> bytes:
        return self._STRUCT.pack(
            self.key_name,
            self.type_info,
            self.compress_info,
            self.mem_start,
            self.mem_end,
            self.data_size,
            *self.data_shape,
            self.index_name,
            self.related_name,
            self.type_name,
            self.checksum,
            self.reserved,
        )

    @classmethod
    def unpack(cls, data: bytes) -> TableDesc:
        _require(data, cls.SIZE)
        v = cls._STRUCT.unpack_from(data)
        return cls(v[0], v[1], v[2], v[3], v[4], v[5], (v[6], v[7]), v[8], v[9], v[10], v[11], v[12])


@dataclass
class LookupEntry:
    """Maps a name hash to a slice of the names string block."""

    hash: int = 0
    offset: int = 0
    length: int = 0

    SIZE: ClassVar[int] = 8
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<IHH")

    def pack(self) -> bytes:
        return self._STRUCT.pack(self.hash, self.offset, self.length)

    @classmethod
    def unpack(cls, data: bytes) -> LookupEntry:
        _require(data, cls.SIZE)
        return cls(*cls._STRUCT.unpack_from(data))


class _Record:
    """Fixed layout element record with its table type information."""

    HINT: ClassVar[int]
    PRIM: ClassVar[int]
    ELEMENTS: ClassVar[int]
    _STRUCT: ClassVar[struct.Struct]

    def pack(self) -> bytes:
        return self._STRUCT.pack(*astuple(self))  # type: ignore[call-overload]

    @classmethod
    def unpack(cls, data: bytes):
        _require(data, cls._STRUCT.size)
        return cls(*cls._STRUCT.unpack_from(data))


@dataclass
class IndexU32(_Record):
    index: int = 0
    HINT = TYPE_HINT_INDEX
    PRIM = TYPE_PRIM_U32
    ELEMENTS = 0
    _STRUCT = struct.Struct("<I")


@dataclass
class Index2U32(_Record):
    i: int = 0
    j: int = 0
    HINT = TYPE_HINT_INDEX
    PRIM = TYPE_PRIM_U32
    ELEMENTS = 2
    _STRUCT = struct.Struct("<2I")


@dataclass
class Index3U32(_Record):
    i: int = 0
    j: int = 0
    k: int = 0
    HINT = TYPE_HINT_INDEX
    PRIM = TYPE_PRIM_U32
    ELEMENTS = 3
    _STRUCT = struct.Struct("<3I")


@dataclass
class RangeU32(_Record):
    start: int = 0
    end: int = 0
    HINT = TYPE_HINT_RANGE
    PRIM = TYPE_PRIM_U32
    ELEMENTS = 2
    _STRUCT = struct.Struct("<2I")


@dataclass
class Coord2F32(_Record):
    x: float = 0.0
    y: float = 0.0
    HINT = TYPE_HINT_COORD
    PRIM = TYPE_PRIM_F32
    ELEMENTS = 2
    _STRUCT = struct.Struct("<2f")


@dataclass
class Coord3F32(_Record):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    HINT = TYPE_HINT_COORD
    PRIM = TYPE_PRIM_F32
    ELEMENTS = 3
    _STRUCT = struct.Struct("<3f")


@dataclass
class HatchF32(_Record):
    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0
    HINT = TYPE_HINT_HATCH
    PRIM = TYPE_PRIM_F32
    ELEMENTS = 4
    _STRUCT = struct.Struct("<4f")


@dataclass
class Transform2F32(_Record):
    a11: float = 0.0
    a12: float = 0.0
    a13: float = 0.0
    a21: float = 0.0
    a22: float = 0.0
    a23: float = 0.0
    HINT = TYPE_HINT_TRANSFORM
    PRIM = TYPE_PRIM_F32
    ELEMENTS = 6
    _STRUCT = struct.Struct("<6f")


@dataclass
class Transform3F32(_Record):
    a11: float = 0.0
    a12: float = 0.0
    a13: float = 0.0
    a14: float = 0.0
    a21: float = 0.0
    a22: float = 0.0
    a23: float = 0.0
    a24: float = 0.0
    a31: float = 0.0
    a32: float = 0.0
    a33: float = 0.0
    a34: float = 0.0
    HINT = TYPE_HINT_TRANSFORM
    PRIM = TYPE_PRIM_F32
    ELEMENTS = 12
    _STRUCT = struct.Struct("<12f")