"""Simple lossless compression scheme for 16-bit unsigned integers."""

from __future__ import annotations

from collections.abc import Iterable

from .compress import DecompressError, hash16, sign_extend32

OP_XDELTA = 0b00_000000  # small delta (1 byte)
OP_YDELTA = 0b01_000000  # medium delta (2 bytes)
OP_INDEX = 0b10_000000  # 6-bit lookup index (1 byte)
OP_REPEAT = 0b110_00000  # repeat last value up to 32 times (1 byte)
OP_VALUES = 0b111_00000  # uncompressed values, up to 32 (1 + 2n bytes)

REPEAT_MAX = 32

_MASK = 0xFFFF
_LOOKUP_LEN = 64


def compress(data: Iterable[int]) -> bytes:
    """Compress a sequence of u16 values into a byte stream."""
    buf = bytearray()
    lastv = 0
    run = 0
    lookup = [0] * _LOOKUP_LEN

    for v in data:
        if not 0 <= v <= _MASK:
            raise ValueError(f"value {v} does not fit in 16 bits")

        if v == lastv:
            run += 1
            if run == REPEAT_MAX:
                buf.append(OP_REPEAT | (run - 1))
                run = 0
        else:
            if run > 0:
                buf.append(OP_REPEAT | (run - 1))
                run = 0
                # A short run bumps the last value, which favours counting sequences.
                lastv = (lastv + 1) & _MASK
                if v == lastv:
                    run = 1
                    continue

            index = hash16(v) % _LOOKUP_LEN
            if lookup[index] == v:
                buf.append(OP_INDEX | index)
            else:
                lookup[index] = v
                # The wrapped difference is taken as unsigned, so deltas only go forward.
                dv = (v - lastv) & _MASK
                if dv > 0:
                    dv -= 1

                if dv < 32:
                    buf.append(OP_XDELTA | (dv & 0x3F))
                elif dv < 8192:
                    buf.append(OP_YDELTA | ((dv >> 8) & 0x3F))
                    buf.append(dv & 0xFF)
                else:
                    buf.append(OP_VALUES)
                    buf += v.to_bytes(2, "little")

        lastv = v

    if run > 0:
        buf.append(OP_REPEAT | (run - 1))
    return bytes(buf)


def decompress(stream: bytes, count: int) -> list[int]:
    """Decompress exactly ``count`` u16 values from ``stream``."""
    out: list[int] = []
    lastv = 0
    lookup = [0] * _LOOKUP_LEN
    size = len(stream)
    i = 0

    def emit(value: int) -> None:
        if len(out) >= count:
            raise DecompressError("stream holds more values than expected")
        out.append(value)

    while i < size:
        byte = stream[i]
        i += 1

        if byte & 0b11_000000 in (OP_XDELTA, OP_YDELTA):
            if byte & 0b11_000000 == OP_XDELTA:
                dv = sign_extend32(byte, 6)
            else:
                if i >= size:
                    raise DecompressError("truncated stream")
                dv = sign_extend32((byte << 8) | stream[i], 14)
                i += 1
            if dv >= 0:
                dv += 1
            lastv = (lastv + dv) & _MASK
            emit(lastv)
            lookup[hash16(lastv) % _LOOKUP_LEN] = lastv
        elif byte & 0b11_000000 == OP_INDEX:
            lastv = lookup[byte & 0x3F]
            emit(lastv)
        elif byte & 0b111_00000 == OP_REPEAT:
            repeat = (byte & 0x1F) + 1
            if repeat > count - len(out):
                raise DecompressError("repeat runs past the expected length")
            out.extend([lastv] * repeat)
            if repeat != REPEAT_MAX:
                lastv = (lastv + 1) & _MASK
        else:
            for _ in range((byte & 0x1F) + 1):
                if size - i < 2:
                    raise DecompressError("truncated stream")
                lastv = int.from_bytes(stream[i : i + 2], "little")
                i += 2
                emit(lastv)
                lookup[hash16(lastv) % _LOOKUP_LEN] = lastv

    if len(out) != count:
        raise DecompressError("stream holds fewer values than expected")
    return out