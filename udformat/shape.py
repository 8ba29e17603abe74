"""Shapes of up to three dimensions and their packed encoding."""

from __future__ import annotations

from collections.abc import Iterator

from .errors import InvalidFormatError, OverflowParseError, ParseError
from .format import TYPE_DIM_1D, TYPE_DIM_2D, TYPE_DIM_3D, TYPE_DIM_MASK, TYPE_DIM_SCALAR

_DIGITS = frozenset("0123456789")


def _parse_u32(text: str) -> int:
    if not text:
        raise ParseError("cannot parse integer from empty string")
    body = text[1:] if text.startswith("+") else text
    if not body or not set(body) <= _DIGITS:
        raise ParseError("invalid digit found in string")
    value = int(body)
    if value >> 32:
        raise ParseError("number too large to fit in target type")
    return value


class Shape:
    """Array shape: scalar or up to three axes.

    The encoding gives 32 bits to the first axis, 24 bits to the second and
    8 bits to the third.
    """

    __slots__ = ("_dims",)

    def __init__(self, *dims: int) -> None:
        if len(dims) > 3:
            raise ValueError("a shape has at most three dimensions")
        if any(not isinstance(d, int) or d < 0 for d in dims):
            raise ValueError("shape dimensions must be non-negative integers")
        if len(dims) == 3 and dims[2] > 0xFF:
            raise ValueError("the third axis is limited to 8 bits")
        self._dims: tuple[int, ...] = tuple(dims)

    @classmethod
    def scalar(cls) -> Shape:
        return cls()

    @property
    def dims(self) -> tuple[int, ...]:
        return self._dims

    def __iter__(self) -> Iterator[int]:
        return iter(self._dims)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Shape):
            return NotImplemented
        return self._dims == other._dims

    def __hash__(self) -> int:
        return hash(self._dims)

    def __repr__(self) -> str:
        return f"Shape({', '.join(map(str, self._dims))})"

    def __str__(self) -> str:
        if not self._dims:
            return "scalar"
        return "x".join(map(str, self._dims))

    @classmethod
    def from_type_info(cls, type_info: int, shape: tuple[int, int]) -> Shape:
        """Decode a shape using only the dimension bits of ``type_info``."""
        x, packed = shape
        dim = type_info & TYPE_DIM_MASK
        if dim == TYPE_DIM_SCALAR:
            return cls()
        if dim == TYPE_DIM_1D:
            return cls(x)
        if dim == TYPE_DIM_2D:
            return cls(x, packed & 0xFFFFFF)
        return cls(x, packed & 0xFFFFFF, (packed >> 24) & 0xFF)

    @classmethod
    def from_shape(cls, type_info: int, shape: tuple[int, int]) -> Shape:
        """Decode a shape, growing the dimension when non-zero axes demand it."""
        dims = type_info & TYPE_DIM_MASK
        x = shape[0]
        y = shape[1] & 0xFFFFFF
        z = (shape[1] >> 24) & 0xFF
        if z == 0 and dims < TYPE_DIM_3D:
            if y == 0 and dims < TYPE_DIM_2D:
                if x == 0 and dims < TYPE_DIM_1D:
                    return cls()
                return cls(x)
            return cls(x, y)
        return cls(x, y, z)

    @classmethod
    def parse(cls, string: str) -> Shape:
        """Parse ``scalar``, ``X``, ``XxY`` or ``XxYxZ``."""
        if string == "scalar":
            return cls()
        parts = string.split("x")
        x = _parse_u32(parts[0])
        if len(parts) == 1:
            return cls(x)
        y = _parse_u32(parts[1])
        if y >= 1 << 24:
            raise OverflowParseError()
        if len(parts) == 2:
            return cls(x, y)
        z = _parse_u32(parts[2])
        if z >= 1 << 8:
            raise OverflowParseError()
        if len(parts) > 3:
            raise InvalidFormatError()
        return cls(x, y, z)

    def size(self) -> int:
        """Total number of elements."""
        total = 1
        for d in self._dims:
            total *= d
        return total

    def flatten(self) -> Shape:
        return Shape(self.size() & 0xFFFFFFFF)

    def dim(self) -> int:
        return (TYPE_DIM_SCALAR, TYPE_DIM_1D, TYPE_DIM_2D, TYPE_DIM_3D)[len(self._dims)]

    def encode(self) -> tuple[int, int]:
        """Pack into the two 32-bit words stored in a table descriptor."""
        dims = self._dims
        if not dims:
            return (0, 0)
        if len(dims) == 1:
            return (dims[0], 0)
        if len(dims) == 2:
            return (dims[0], dims[1] & 0xFFFFFF)
        return (dims[0], (dims[1] & 0xFFFFFF) | (dims[2] << 24))