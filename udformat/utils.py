"""Formatting and parsing helpers for sizes, identifiers and type info."""

from __future__ import annotations

from . import format as fmt
from .errors import InvalidFormatError

_PRIM_NAMES = {
    fmt.TYPE_PRIM_CUSTOM: "custom",
    fmt.TYPE_PRIM_U8: "u8",
    fmt.TYPE_PRIM_I8: "i8",
    fmt.TYPE_PRIM_U16: "u16",
    fmt.TYPE_PRIM_I16: "i16",
    fmt.TYPE_PRIM_U32: "u32",
    fmt.TYPE_PRIM_I32: "i32",
    fmt.TYPE_PRIM_U64: "u64",
    fmt.TYPE_PRIM_I64: "i64",
    fmt.TYPE_PRIM_F32: "f32",
    fmt.TYPE_PRIM_F64: "f64",
}

_DIM_NAMES = {
    fmt.TYPE_DIM_SCALAR: "scalar",
    fmt.TYPE_DIM_1D: "1d",
    fmt.TYPE_DIM_2D: "2d",
    fmt.TYPE_DIM_3D: "3d",
}

_HINT_NAMES = {
    fmt.TYPE_HINT_NONE: "none",
    fmt.TYPE_HINT_TEXT: "text",
    fmt.TYPE_HINT_JSON: "json",
    fmt.TYPE_HINT_DATASET: "dataset",
    fmt.TYPE_HINT_INDEX: "index",
    fmt.TYPE_HINT_RANGE: "range",
    fmt.TYPE_HINT_COORD: "coord",
    fmt.TYPE_HINT_HATCH: "line",
    fmt.TYPE_HINT_TRANSFORM: "transform",
    fmt.TYPE_HINT_RGB: "rgb",
}

# Parsing accepts "?" for the custom primitive instead of its printed name.
_PARSE_PRIMS = {name: prim for prim, name in _PRIM_NAMES.items() if prim != fmt.TYPE_PRIM_CUSTOM}
_PARSE_PRIMS["?"] = fmt.TYPE_PRIM_CUSTOM
_PARSE_DIMS = {name: dim for dim, name in _DIM_NAMES.items()}
_PARSE_HINTS = {name: hint for hint, name in _HINT_NAMES.items()}

_UNITS = (
    (1024 * 1024, 1024.0, " KiB"),
    (1024 * 1024 * 1024, 1024.0 * 1024.0, " MiB"),
    (1024 * 1024 * 1024 * 1024, 1024.0 * 1024.0 * 1024.0, " GiB"),
)


def format_file_size(size: int) -> str:
    """Human readable size with binary units."""
    if size < 1024:
        return f"{size} byte" if size == 1 else f"{size} bytes"
    for limit, divisor, unit in _UNITS:
        if size < limit:
            return f"{size / divisor:.2f}{unit}"
    return f"{size / (1024.0 * 1024.0 * 1024.0 * 1024.0):.2f} TiB"


def format_id(ident: bytes) -> str:
    """Printable form of a 4-byte identifier, without trailing nul bytes."""
    out = []
    for byte in ident.rstrip(b"\0"):
        if byte == 0:
            out.append("\\0")
        elif 0x20 <= byte < 0x7F:
            out.append(chr(byte))
        else:
            out.append(f"\\x{byte:02x}")
    return "".join(out)


def parse_id(string: str) -> bytes:
    """Encode up to four bytes of ``string`` as a nul-padded identifier."""
    data = string.encode("utf-8")
    if len(data) > 4:
        raise InvalidFormatError()
    return data.ljust(4, b"\0")


def prim_name(type_info: int) -> str | None:
    return _PRIM_NAMES.get(type_info & fmt.TYPE_PRIM_MASK)


def dim_name(type_info: int) -> str | None:
    return _DIM_NAMES.get(type_info & fmt.TYPE_DIM_MASK)


def hint_name(type_info: int) -> str | None:
    return _HINT_NAMES.get(type_info & fmt.TYPE_HINT_MASK)


def format_type_info(type_info: int) -> str:
    """Format as ``prim:dim``, adding ``:hint`` only when the hint bits are zero."""
    text = f"{prim_name(type_info) or '?'}:{dim_name(type_info) or '?'}"
    if type_info & fmt.TYPE_HINT_MASK == 0:
        text += f":{hint_name(type_info) or '?'}"
    return text


def parse_type_info(string: str) -> int:
    """Parse ``prim:dim[:hint]`` into a type info value."""
    parts = string.split(":")
    if len(parts) < 2 or len(parts) > 3:
        raise InvalidFormatError()
    prim_s, dim_s = parts[0], parts[1]
    hint = fmt.TYPE_HINT_NONE
    if len(parts) == 3:
        try:
            hint = _PARSE_HINTS[parts[2]]
        except KeyError:
            raise InvalidFormatError() from None
    try:
        dim = _PARSE_DIMS[dim_s]
        prim = _PARSE_PRIMS[prim_s]
    except KeyError:
        raise InvalidFormatError() from None
    return hint | dim | prim


def format_hex(data: bytes) -> str:
    """Each byte as two hex digits followed by a space."""
    return "".join(f"{byte:02x} " for byte in data)