"""Table of names keyed by their hash."""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterator
from dataclasses import dataclass, field
from operator import attrgetter

from .errors import OutOfBoundsError
from .format import LookupEntry

_by_hash = attrgetter("hash")


def format_name_or_hash(name: str | None, hash_value: int) -> str:
    """The name when known, otherwise the hash as ``0x`` and eight hex digits."""
    return name if name is not None else f"{hash_value:#010x}"


@dataclass
class Names:
    """Name lookup table; entries must be sorted by hash for lookups."""

    entries: list[LookupEntry] = field(default_factory=list)
    strings: bytearray = field(default_factory=bytearray)

    def __len__(self) -> int:
        return len(self.entries)

    def add(self, name: str, hash_value: int) -> None:
        raw = name.encode("utf-8")
        self.entries.append(
            LookupEntry(hash_value & 0xFFFFFFFF, len(self.strings) & 0xFFFF, len(raw) & 0xFFFF)
        )
        self.strings += raw

    def finalize(self) -> None:
        """Sort entries by hash and pad the strings block to a multiple of 8."""
        self.entries.sort(key=_by_hash)
        self.strings += bytes(-len(self.strings) % 8)

    def _name(self, entry: LookupEntry) -> str | None:
        end = entry.offset + entry.length
        if end > len(self.strings):
            return None
        try:
            return bytes(self.strings[entry.offset : end]).decode("utf-8")
        except UnicodeDecodeError:
            return None

    def lookup(self, hash_value: int) -> str | None:
        """The name for ``hash_value``, or None if absent or unreadable."""
        if hash_value == 0:
            return None
        i = bisect_left(self.entries, hash_value, key=_by_hash)
        if i == len(self.entries) or self.entries[i].hash != hash_value:
            return None
        return self._name(self.entries[i])

    def name_or_hash(self, hash_value: int) -> str:
        return format_name_or_hash(self.lookup(hash_value), hash_value)

    def find(self, name: str) -> int | None:
        """The hash stored for ``name``, if any."""
        for hash_value, entry_name in self.items():
            if entry_name == name:
                return hash_value
        return None

    def items(self) -> Iterator[tuple[int, str | None]]:
        return ((entry.hash, self._name(entry)) for entry in self.entries)

    def names(self) -> Iterator[str | None]:
        return (self._name(entry) for entry in self.entries)

    def file_size(self) -> int:
        return len(self.entries) * LookupEntry.SIZE + len(self.strings)

    def to_bytes(self) -> bytes:
        return b"".join(entry.pack() for entry in self.entries) + bytes(self.strings)

    @classmethod
    def from_bytes(cls, data: bytes, lookup_len: int, string_len: int) -> Names:
        """Read ``lookup_len`` entries followed by ``string_len`` bytes of strings."""
        entries_size = lookup_len * LookupEntry.SIZE
        if len(data) < entries_size + string_len:
            raise OutOfBoundsError()
        view = memoryview(data)
        entries = [
            LookupEntry.unpack(view[pos : pos + LookupEntry.SIZE])
            for pos in range(0, entries_size, LookupEntry.SIZE)
        ]
        return cls(entries, bytearray(view[entries_size : entries_size + string_len]))

    def __repr__(self) -> str:
        body = ", ".join(f"'{h:#010x}': {n!r}" for h, n in self.items())
        return f"Names({{{body}}})"