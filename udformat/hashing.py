"""Name hashing used for table keys."""

from __future__ import annotations


def name_hash(s: str | bytes) -> int:
    """Hash a name with the xor variant of DJB2, as a 32-bit value."""
    data = s.encode("utf-8") if isinstance(s, str) else s
    result = 3581
    for byte in data:
        result = ((result * 33) & 0xFFFFFFFF) ^ byte
    return result