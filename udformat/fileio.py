"""Reading and writing UDF files on disk."""

from __future__ import annotations

import io
import os
from typing import BinaryIO

from .dataset import Dataset
from .errors import InvalidFormatError, OutOfBoundsError, ParseError
from .format import DatasetHeader, FileOffset, UdfHeader

_ZEROS = bytes(512)


def _check_ident(ident: bytes) -> bytes:
    ident = bytes(ident)
    if len(ident) != 4:
        raise ValueError("identifier must be exactly 4 bytes")
    return ident


class UdfFile:
    """A UDF file opened for reading, editing or creation."""

    def __init__(self, file: BinaryIO, header: UdfHeader) -> None:
        self._file = file
        self.header = header

    @classmethod
    def create(cls, path: str | os.PathLike, ident: bytes = b"\0\0\0\0") -> UdfFile:
        """Create a new file, truncating any existing one, and write its header."""
        header = UdfHeader(ident=_check_ident(ident))
        file = io.open(path, "w+b")
        try:
            file.write(header.pack())
        except BaseException:
            file.close()
            raise
        return cls(file, header)

    @classmethod
    def _load(cls, path: str | os.PathLike, mode: str) -> UdfFile:
        file = io.open(path, mode)
        try:
            data = file.read(UdfHeader.SIZE)
            if len(data) < UdfHeader.SIZE:
                raise OutOfBoundsError("file is too short for a UDF header")
            header = UdfHeader.unpack(data)
            if header.magic != UdfHeader.MAGIC:
                raise InvalidFormatError("not a UDF file")
        except BaseException:
            file.close()
            raise
        return cls(file, header)

    @classmethod
    def open(cls, path: str | os.PathLike) -> UdfFile:
        """Open read-only; write methods raise."""
        return cls._load(path, "rb")

    @classmethod
    def edit(cls, path: str | os.PathLike) -> UdfFile:
        """Open an existing file for reading and writing."""
        return cls._load(path, "r+b")

    @property
    def ident(self) -> bytes:
        return self.header.ident

    @ident.setter
    def ident(self, value: bytes) -> None:
        self.header.ident = _check_ident(value)

    @property
    def root(self) -> FileOffset:
        return self.header.root

    @root.setter
    def root(self, value: FileOffset) -> None:
        self.header.root = value

    def write_header(self) -> None:
        """Persist the in-memory header."""
        self._file.seek(0)
        self._file.write(self.header.pack())

    def allocate(self, size: int) -> FileOffset:
        """Reserve a 16-byte aligned region at the end of the file."""
        try:
            self._file.flush()
            end = os.fstat(self._file.fileno()).st_size
        except OSError:
            return FileOffset()
        return FileOffset((end + 0xF) & ~0xF, (size + 0xF) & ~0xF)

    def add_dataset(self, dataset: Dataset) -> FileOffset:
        """Append a finalized dataset in a newly allocated region."""
        fo = self.allocate(dataset.file_size())
        self.write_dataset(fo, dataset)
        return fo

    def write_dataset(self, fo: FileOffset, dataset: Dataset) -> None:
        """Write a finalized dataset at ``fo``, zero-filling the rest of the region."""
        if dataset.header.check != DatasetHeader.CHECK:
            raise ValueError("dataset is not finalized")
        if fo.is_null() or not fo.is_aligned():
            raise ValueError(f"invalid file offset {fo}")
        ds_size = dataset.file_size()
        if fo.size < ds_size:
            raise ValueError(f"file offset {fo} is too small for {ds_size} bytes")
        self._file.seek(fo.offset)
        self._file.write(dataset.to_bytes())
        remaining = fo.size - ds_size
        while remaining > 0:
            chunk = min(len(_ZEROS), remaining)
            self._file.write(_ZEROS[:chunk])
            remaining -= chunk

    def read_dataset(self, fo: FileOffset) -> Dataset:
        """Read and parse the dataset stored at ``fo``."""
        if fo.is_null() or not fo.is_aligned():
            raise ValueError(f"invalid file offset {fo}")
        expected = fo.size // 8 * 8
        self._file.seek(fo.offset)
        data = self._file.read(expected)
        if len(data) < expected:
            raise OutOfBoundsError(f"file offset {fo} reaches past the end of the file")
        try:
            return Dataset.parse(data)
        except ParseError as exc:
            raise InvalidFormatError(f"no valid dataset at {fo}") from exc

    def flush(self) -> None:
        self._file.flush()

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> UdfFile:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()