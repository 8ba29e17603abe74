"""Simple lossless compression scheme for 32-bit unsigned integers."""

from __future__ import annotations

from collections.abc import Iterable

from .compress import DecompressError, hash32, sign_extend32

OP_DELTA1 = 0b00_000000  # delta of -32..32 (1 byte)
OP_DELTA2 = 0b01_000000  # delta of -8192..8192 (2 bytes)
OP_INDEX = 0b10_000000  # 6-bit lookup index (1 byte)
OP_DELTA3 = 0b1100_0000  # delta of -524288..524288 (3 bytes)
OP_DELTA4 = 0b1101_0000  # delta of -134217728..134217728 (4 bytes)
OP_REPEAT = 0b1110_0000  # repeat last value up to 16 times (1 byte)
OP_VALUES = 0b1111_0000  # uncompressed values, up to 16 (1 + 4n bytes)

_DELTA1_BITS = 6
_DELTA2_BITS = 6 + 8
_DELTA3_BITS = 4 + 8 + 8
_DELTA4_BITS = 4 + 8 + 8 + 8
_DELTA1_VAL = (1 << _DELTA1_BITS) // 2
_DELTA2_VAL = (1 << _DELTA2_BITS) // 2
_DELTA3_VAL = (1 << _DELTA3_BITS) // 2
_DELTA4_VAL = (1 << _DELTA4_BITS) // 2
REPEAT_MAX = 16

_MASK = 0xFFFFFFFF
_LOOKUP_LEN = 64


def compress(data: Iterable[int]) -> bytes:
    """Compress a sequence of u32 values into a byte stream."""
    buf = bytearray()
    lastv = 0
    run = 0
    lookup = [0] * _LOOKUP_LEN

    for v in data:
        if not 0 <= v <= _MASK:
            raise ValueError(f"value {v} does not fit in 32 bits")

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

            index = hash32(v) % _LOOKUP_LEN
            if lookup[index] == v:
                buf.append(OP_INDEX | index)
            else:
                lookup[index] = v
                dv = (v - lastv) & _MASK
                if dv >= 1 << 31:
                    dv -= 1 << 32
                if dv > 0:
                    dv -= 1  # a zero delta is covered by the repeat opcode

                if -_DELTA1_VAL <= dv < _DELTA1_VAL:
                    buf.append(OP_DELTA1 | (dv & 0x3F))
                elif -_DELTA2_VAL <= dv < _DELTA2_VAL:
                    buf.append(OP_DELTA2 | ((dv >> 8) & 0x3F))
                    buf.append(dv & 0xFF)
                elif -_DELTA3_VAL <= dv < _DELTA3_VAL:
                    buf.append(OP_DELTA3 | ((dv >> 16) & 0x0F))
                    buf.append((dv >> 8) & 0xFF)
                    buf.append(dv & 0xFF)
                elif -_DELTA4_VAL <= dv < _DELTA4_VAL:
                    buf.append(OP_DELTA4 | ((dv >> 24) & 0x0F))
                    buf.append((dv >> 16) & 0xFF)
                    buf.append((dv >> 8) & 0xFF)
                    buf.append(dv & 0xFF)
                else:
                    buf.append(OP_VALUES)
                    buf += v.to_bytes(4, "little")

        lastv = v

    if run > 0:
        buf.append(OP_REPEAT | (run - 1))
    return bytes(buf)


def decompress(stream: bytes, count: int) -> list[int]:
    """Decompress exactly ``count`` u32 values from ``stream``."""
    out: list[int] = []
    lastv = 0
    lookup = [0] * _LOOKUP_LEN
    size = len(stream)
    i = 0

    def emit(value: int) -> None:
        if len(out) >= count:
            raise DecompressError("stream holds more values than expected")
        out.append(value)

    def take(n: int) -> bytes:
        nonlocal i
        if size - i < n:
            raise DecompressError("truncated stream")
        chunk = stream[i : i + n]
        i += n
        return chunk

    while i < size:
        byte = stream[i]
        i += 1
        top2 = byte & 0b11_000000
        top4 = byte & 0b1111_0000

        if top2 in (OP_DELTA1, OP_DELTA2) or top4 in (OP_DELTA3, OP_DELTA4):
            if top2 == OP_DELTA1:
                dv = sign_extend32(byte & 0x3F, _DELTA1_BITS)
            elif top2 == OP_DELTA2:
                (b2,) = take(1)
                dv = sign_extend32(((byte & 0x3F) << 8) | b2, _DELTA2_BITS)
            elif top4 == OP_DELTA3:
                b2, b3 = take(2)
                dv = sign_extend32(((byte & 0x0F) << 16) | (b2 << 8) | b3, _DELTA3_BITS)
            else:
                b2, b3, b4 = take(3)
                dv = sign_extend32(
                    ((byte & 0x0F) << 24) | (b2 << 16) | (b3 << 8) | b4, _DELTA4_BITS
                )
            if dv >= 0:
                dv += 1
            lastv = (lastv + dv) & _MASK
            emit(lastv)
            lookup[hash32(lastv) % _LOOKUP_LEN] = lastv
        elif top2 == OP_INDEX:
            lastv = lookup[byte & 0x3F]
            emit(lastv)
        elif top4 == OP_REPEAT:
            repeat = (byte & 0x0F) + 1
            if repeat > count - len(out):
                raise DecompressError("repeat runs past the expected length")
            out.extend([lastv] * repeat)
            if repeat != REPEAT_MAX:
                lastv = (lastv + 1) & _MASK
        else:
            for _ in range((byte & 0x0F) + 1):
                lastv = int.from_bytes(take(4), "little")
                emit(lastv)
                lookup[hash32(lastv) % _LOOKUP_LEN] = lastv

    if len(out) != count:
        raise DecompressError("stream holds fewer values than expected")
    return out