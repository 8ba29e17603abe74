"""Simple lossy compression scheme for 32-bit floats.

Values are quantized to integer multiples of a unit and the resulting
integers are encoded with the u32 scheme, preceded by the unit itself.
"""

from __future__ import annotations

import math
import struct
from collections.abc import Iterable
from dataclasses import dataclass

from . import simple_u32
from .compress import DecompressError

_F32 = struct.Struct("<f")


def _f32(value: float) -> float:
    """Round a float to single precision."""
    return _F32.unpack(_F32.pack(value))[0]


def _quantize(value: float) -> int:
    """Round half away from zero, saturate to i32 and reinterpret as u32."""
    if math.isnan(value):
        return 0
    if math.isinf(value):
        signed = (1 << 31) - 1 if value > 0 else -(1 << 31)
    else:
        signed = int(math.copysign(math.floor(abs(value) + 0.5), value))
        signed = max(-(1 << 31), min((1 << 31) - 1, signed))
    return signed & 0xFFFFFFFF


def _to_i32(value: int) -> int:
    return value - (1 << 32) if value >= 1 << 31 else value


@dataclass(frozen=True)
class SimpleF32:
    """Lossy float compressor that quantizes to multiples of ``unit``."""

    unit: float

    def compress(self, data: Iterable[float]) -> bytes:
        unit = _f32(self.unit)
        inv_unit = _f32(1.0 / unit)
        ints = [_quantize(_f32(_f32(x) * inv_unit)) for x in data]
        return _F32.pack(unit) + simple_u32.compress(ints)


def decompress(stream: bytes, count: int) -> list[float]:
    """Decompress exactly ``count`` floats from ``stream``."""
    if len(stream) < 4:
        raise DecompressError("stream is missing the unit")
    (unit,) = _F32.unpack_from(stream)
    ints = simple_u32.decompress(stream[4:], count)
    return [_f32(_f32(_to_i32(v)) * unit) for v in ints]