"""Extracting numbers from free-form text for table import."""

from __future__ import annotations

import json
import math
import re
import struct

from ..errors import ParseError
from ..format import (
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
from .common import CliError

_INT_RANGES = {
    TYPE_PRIM_U8: (0, 0xFF),
    TYPE_PRIM_I8: (-0x80, 0x7F),
    TYPE_PRIM_U16: (0, 0xFFFF),
    TYPE_PRIM_I16: (-0x8000, 0x7FFF),
    TYPE_PRIM_U32: (0, 0xFFFFFFFF),
    TYPE_PRIM_I32: (-0x80000000, 0x7FFFFFFF),
    TYPE_PRIM_U64: (0, 0xFFFFFFFFFFFFFFFF),
    TYPE_PRIM_I64: (-0x8000000000000000, 0x7FFFFFFFFFFFFFFF),
}

_DEC = frozenset("0123456789")
_HEX = frozenset("0123456789abcdefABCDEF")
_FLOAT = re.compile(
    r"[+-]?(?:inf|infinity|nan|(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?)", re.IGNORECASE
)
_F32 = struct.Struct("<f")


def _is_important(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ("0" <= ch <= "9") or ch in ".-+"


def preprocess(text: str) -> str:
    """Replace every character that cannot be part of a number with a space."""
    return "".join(ch if _is_important(ch) else " " for ch in text)


def _parse_int(text: str, low: int, high: int) -> int:
    radix, digits = 10, _DEC
    if text.startswith("0x"):
        text, radix, digits = text[2:], 16, _HEX
    if not text:
        raise ParseError("cannot parse integer from empty string")
    negative = False
    body = text
    if text[0] == "+":
        body = text[1:]
    elif text[0] == "-" and low < 0:
        body, negative = text[1:], True
    if not body or not set(body) <= digits:
        raise ParseError("invalid digit found in string")
    value = int(body, radix)
    if negative:
        value = -value
    if value > high:
        raise ParseError("number too large to fit in target type")
    if value < low:
        raise ParseError("number too small to fit in target type")
    return value


def _parse_float(text: str, single: bool) -> float:
    if not _FLOAT.fullmatch(text):
        raise ParseError("invalid float literal")
    value = float(text)
    if single and math.isfinite(value):
        try:
            value = _F32.unpack(_F32.pack(value))[0]
        except OverflowError:
            value = math.copysign(math.inf, value)
    return value


def parse_number(text: str, prim: int) -> int | float:
    """Parse one number of primitive type ``prim``; integers accept a ``0x`` prefix."""
    limits = _INT_RANGES.get(prim)
    if limits is not None:
        return _parse_int(text, *limits)
    if prim == TYPE_PRIM_F32:
        return _parse_float(text, single=True)
    if prim == TYPE_PRIM_F64:
        return _parse_float(text, single=False)
    raise ValueError(f"unsupported primitive type {prim:#x}")


def parse_all(text: str, prim: int) -> list[int | float]:
    """Parse every whitespace separated token of ``text``."""
    values = []
    for token in text.split():
        try:
            values.append(parse_number(token, prim))
        except ParseError as exc:
            raise CliError(f"Parse error {json.dumps(token, ensure_ascii=False)}", exc) from exc
    return values