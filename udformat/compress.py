"""Shared helpers for the simple compression schemes."""

from __future__ import annotations

_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF


class DecompressError(ValueError):
    """A compressed stream is malformed or does not match the expected length."""


def hash32(a: int) -> int:
    """32-bit integer hash used to pick lookup slots."""
    a &= _MASK32
    a = (a ^ 61) ^ (a >> 16)
    a = (a + (a << 3)) & _MASK32
    a ^= a >> 4
    a = (a * 0x27D4EB2D) & _MASK32
    a ^= a >> 15
    return a


def hash16(a: int) -> int:
    """16-bit hash: the low half of :func:`hash32`."""
    return hash32(a & 0xFFFF) & 0xFFFF


def hash64(z: int) -> int:
    """SplitMix64 mixing function."""
    z = (z + 0x9E3779B97F4A7C15) & _MASK64
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK64
    return z ^ (z >> 31)


def sign_extend32(value: int, bits: int) -> int:
    """Interpret the low ``bits`` bits of ``value`` as a signed integer."""
    mask = (1 << bits) - 1
    value &= _MASK32
    if value & (1 << (bits - 1)) == 0:
        return value & mask
    result = (value | (~mask & _MASK32)) & _MASK32
    return result - (1 << 32) if result >= 1 << 31 else result