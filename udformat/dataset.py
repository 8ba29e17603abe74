"""In-memory datasets and their binary layout."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from .data import DataRef, TableRef
from .errors import InvalidFormatError, OutOfBoundsError
from .format import DatasetHeader, TableDesc
from .names import Names
from .shape import Shape

T = TypeVar("T")


@dataclass
class Dataset:
    """A dataset: header, table descriptors, names and 8-byte aligned storage."""

    header: DatasetHeader = field(default_factory=DatasetHeader)
    descs: list[TableDesc] = field(default_factory=list)
    names: Names = field(default_factory=Names)
    storage: bytearray = field(default_factory=bytearray)

    def __len__(self) -> int:
        return len(self.descs)

    def add_table(self, table: TableRef) -> bool:
        """Add a table descriptor and copy its data into the storage."""
        raw = table.data.data
        mem_start, mem_end = self._write_data(raw)
        self.descs.append(
            TableDesc(
                key_name=table.key_name,
                type_info=table.data.type_info,
                compress_info=table.data.compress_info,
                mem_start=mem_start,
                mem_end=mem_end,
                data_size=len(raw),
                data_shape=table.data.shape.encode(),
                index_name=table.index_name,
                related_name=table.related_name,
            )
        )
        return True

    def _write_data(self, raw: bytes) -> tuple[int, int]:
        if not raw:
            return 0, 0
        old_len = len(self.storage) // 8
        self.storage += raw
        self.storage += bytes(-len(raw) % 8)
        return old_len, len(self.storage) // 8

    def finalize(self) -> Dataset:
        """Fill in the header fields and sort the names; returns the dataset."""
        self.header.check = DatasetHeader.CHECK
        self.names.finalize()
        size = DatasetHeader.SIZE + len(self.descs) * TableDesc.SIZE + self.names.file_size()
        self.header.size = size & 0xFFFF
        self.header.descs_len = len(self.descs) & 0xFFFF
        self.header.lookup_len = len(self.names.entries) & 0xFFFF
        self.header.string_len = len(self.names.strings) & 0xFFFF
        return self

    def find_table(self, key_name: int) -> TableDesc | None:
        return next((desc for desc in self.descs if desc.key_name == key_name), None)

    def get_data_ref(self, table: TableDesc) -> DataRef | None:
        """The table's data, or None if its memory range is out of bounds."""
        start, end = table.mem_start * 8, table.mem_end * 8
        if start > end or end > len(self.storage):
            return None
        if table.data_size > end - start:
            return None
        return DataRef(
            data=bytes(self.storage[start : start + table.data_size]),
            type_info=table.type_info,
            compress_info=table.compress_info,
            shape=Shape.from_shape(table.type_info, table.data_shape),
        )

    def file_size(self) -> int:
        """Number of bytes the dataset takes in a file."""
        return (
            DatasetHeader.SIZE
            + len(self.descs) * TableDesc.SIZE
            + self.names.file_size()
            + len(self.storage)
        )

    def to_bytes(self) -> bytes:
        return b"".join(
            (
                self.header.pack(),
                b"".join(desc.pack() for desc in self.descs),
                self.names.to_bytes(),
                bytes(self.storage),
            )
        )

    @classmethod
    def parse(cls, data: bytes) -> Dataset:
        """Read a dataset from its binary form."""
        view = bytes(data)
        header = DatasetHeader.unpack(view)
        if header.size % 8:
            raise InvalidFormatError()
        if len(view) < header.size:
            raise OutOfBoundsError()
        head = view[: header.size]
        descs_end = DatasetHeader.SIZE + header.descs_len * TableDesc.SIZE
        if descs_end > len(head):
            raise OutOfBoundsError()
        descs = [
            TableDesc.unpack(head[pos : pos + TableDesc.SIZE])
            for pos in range(DatasetHeader.SIZE, descs_end, TableDesc.SIZE)
        ]
        names = Names.from_bytes(head[descs_end:], header.lookup_len, header.string_len)
        storage_len = (len(view) - header.size) // 8 * 8
        storage = bytearray(view[header.size : header.size + storage_len])
        return cls(header, descs, names, storage)


@dataclass(frozen=True)
class WalkRef(Generic[T]):
    """Link in a chain of parents while walking nested datasets."""

    instance: T
    parent: WalkRef[T] | None = None

    def __iter__(self) -> Iterator[T]:
        """Instances from this link up to the root."""
        node: WalkRef[T] | None = self
        while node is not None:
            yield node.instance
            node = node.parent