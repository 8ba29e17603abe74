"""Shared pieces of the command line tools."""

from __future__ import annotations

_HEX_HEADER = "  Offset 00 01 02 03 04 05 06 07 08 09 0A 0B 0C 0D 0E 0F Decoded text"


class CliError(Exception):
    """A fatal command line error carrying a message for the user."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.message = message
        self.cause = cause
        text = message if cause is None else f"{message}\nerror: {cause}"
        super().__init__(text)


def hex_dump(data: bytes) -> str:
    """Classic hex dump: offset, sixteen hex bytes and the printable characters."""
    lines = [_HEX_HEADER]
    for offset in range(0, len(data), 16):
        row = data[offset : offset + 16]
        hex_part = "".join(f"{byte:02x} " for byte in row) + "   " * (16 - len(row))
        text = "".join(chr(byte) if 0x20 <= byte < 0x7F else "." for byte in row)
        lines.append(f"{offset:08x} {hex_part}{text}")
    return "\n".join(lines)