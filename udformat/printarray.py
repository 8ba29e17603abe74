"""Numpy-style formatting of flat element lists with a shape."""

from __future__ import annotations

import math
import struct
from decimal import Decimal

from .shape import Shape

_F32 = struct.Struct("<f")


def _positional(text: str) -> str:
    """Write a number without exponent and make sure it shows a decimal point."""
    out = format(Decimal(text), "f")
    return out if "." in out else out + ".0"


def _special(value: float) -> str | None:
    if math.isnan(value):
        return "NaN.0"
    if math.isinf(value):
        return "inf.0" if value > 0 else "-inf.0"
    return None


def _round_f32(value: float) -> float:
    try:
        return _F32.unpack(_F32.pack(value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def format_f64(value: float) -> str:
    """Shortest round-trip decimal form of a double, always with a decimal point."""
    value = float(value)
    special = _special(value)
    if special is not None:
        return special
    return _positional(repr(value))


def format_f32(value: float) -> str:
    """Shortest decimal form that round-trips as a single precision float."""
    value = _round_f32(float(value))
    special = _special(value)
    if special is not None:
        return special
    text = repr(value)
    for digits in range(1, 10):
        candidate = f"{value:.{digits}g}"
        try:
            if _F32.unpack(_F32.pack(float(candidate)))[0] == value:
                text = candidate
                break
        except OverflowError:
            continue
    return _positional(text)


class PrintArray:
    """Formats elements the way numpy prints multidimensional arrays.

    ``line_width`` sets where line breaks are inserted; zero prints every
    element on a single line.
    """

    def __init__(self, shape: Shape, line_width: int = 75) -> None:
        self.shape = shape
        self.line_width = line_width
        self.element_width = 0
        self._items: list[str] = []
        self._total = 0

    def __len__(self) -> int:
        return len(self._items)

    def push(self, text: str) -> None:
        """Add one formatted element."""
        start = self._total
        length = len(text.encode("utf-8"))
        if start >= 0x1000000 or length >= 0x100:
            raise ValueError("element does not fit in the print buffer")
        self._items.append(text)
        self._total += length
        self.element_width = max(self.element_width, length)

    def __str__(self) -> str:
        if self.shape.size() != len(self._items):
            raise ValueError("number of elements must match the length of the shape")
        dims = self.shape.dims
        if not dims:
            return "".join(self._items)
        if len(dims) == 1:
            return self._row(0, dims[0], 1)
        if len(dims) == 2:
            return self._rows(0, dims[0], dims[1], 1)
        x, y, z = dims
        separator = ", " if self.line_width == 0 else ",\n\n "
        blocks = (self._rows(xi * y * z, y, z, 2) for xi in range(x))
        return "[" + separator.join(blocks) + "]"

    def _row(self, start: int, end: int, indent: int) -> str:
        width = self.element_width
        cols = self.line_width // width if width else 0
        line_break = ",\n" + " " * indent
        parts: list[str] = []
        column = 0
        for n, value in enumerate(self._items[start:end]):
            if n:
                parts.append(line_break if cols > 0 and column == 0 else ", ")
            if cols > 0:
                column = (column + 1) % cols
                parts.append(value.rjust(width))
            else:
                parts.append(value)
        return "[" + "".join(parts) + "]"

    def _rows(self, start: int, rows: int, cols: int, indent: int) -> str:
        separator = ", " if self.line_width == 0 else ",\n" + " " * indent
        lines = (
            self._row(start + r * cols, start + r * cols + cols, indent + 1) for r in range(rows)
        )
        return "[" + separator.join(lines) + "]"