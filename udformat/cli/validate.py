"""The ``validate`` command: walk all datasets and report problems."""

from __future__ import annotations

import sys
from dataclasses import dataclass

from ..dataset import Dataset, WalkRef
from ..errors import ParseError
from ..fileio import UdfFile
from ..format import (
    T_FILE_OFFSET,
    TYPE_PRIM_CUSTOM,
    TYPE_PRIM_MASK,
    FileOffset,
    TableDesc,
    prim_size,
)
from ..names import Names
from ..shape import Shape
from ..utils import prim_name
from .common import CliError


@dataclass
class ValidateOptions:
    file: str
    verbose: bool = False


def _eprint(*args, **kwargs) -> None:
    print(*args, file=sys.stderr, **kwargs)


def _span(fo: FileOffset) -> str:
    return f"{fo.offset:#x}:{fo.size:#x}"


class Validator:
    """Recursively checks every dataset reachable from the root."""

    def __init__(self, file: UdfFile) -> None:
        self.file = file
        self.seen: set[FileOffset] = set()
        self.datasets = 0
        self.warns = 0
        self.errors = 0

    def _warn(self, message: str) -> None:
        self.warns += 1
        _eprint(message)

    def _error(self, message: str) -> None:
        self.errors += 1
        _eprint(message)

    def run(self, opts: ValidateOptions) -> None:
        self._run_rec(opts, self.file.root, None)

        print(f"Processed {self.datasets} datasets")
        if self.warns == 0 and self.errors == 0:
            print("No warnings or errors found!")
        elif self.errors == 0:
            print(f"Found {self.warns} warnings, but no errors!")
        else:
            print(f"Found {self.warns} warnings, {self.errors} errors!")

    def _run_rec(
        self, opts: ValidateOptions, fo: FileOffset, parent: WalkRef[Dataset] | None
    ) -> None:
        # A null dataset can come from incremental writing, so it only warns.
        if fo.is_null():
            self._warn(f"warn: null dataset {_span(fo)}")
            return

        self.datasets += 1

        if not fo.is_aligned():
            self._error(f"err: unaligned dataset {_span(fo)}")
            return
        if fo.size >= 0x100000000:
            self._error(f"err: large dataset {_span(fo)}")
            return
        if fo.size > 0x40000000:
            self._warn(f"warn: large dataset {_span(fo)}")

        if fo in self.seen:
            _eprint(f"cyclic dataset {_span(fo)}")
            return
        self.seen.add(fo)

        if opts.verbose:
            _eprint(f"reading dataset {_span(fo)}... ", end="")
        try:
            dataset = self.file.read_dataset(fo)
        except (OSError, ValueError) as exc:
            self._error(str(exc))
            return
        if opts.verbose:
            _eprint("ok")

        lines = self.warns + self.errors

        if not dataset.descs:
            self._warn(f"warn: empty dataset {_span(fo)}")
            return

        names = dataset.names
        unique_names: dict[int, int] = {}

        for index, table in enumerate(dataset.descs):
            if table.key_name == 0:
                self._error(f"err: table (index={index}) has null key_name!")
            else:
                other = unique_names.get(table.key_name)
                unique_names[table.key_name] = index
                if other is not None:
                    self._error(
                        f"err: table (index={index} key_name={table.key_name:#x}) "
                        f"with the same name already exists at index={other}"
                    )

            key_name = names.name_or_hash(table.key_name)
            if names.lookup(table.key_name) is None:
                self._error(f"err: table {key_name} invalid name!")

            self._validate_shape(key_name, table)

            if table.index_name != 0:
                if names.lookup(table.index_name) is None:
                    index_name = names.name_or_hash(table.index_name)
                    self._error(f"err: table {key_name} index_name={index_name} not found")
                if table.key_name == table.index_name:
                    self._error("err: index into itself")

            if table.related_name != 0:
                self._validate_related(dataset, names, table)

        if self.warns + self.errors != lines:
            _eprint()

        chain = WalkRef(dataset, parent)
        for table in dataset.descs:
            if table.type_info != T_FILE_OFFSET:
                continue
            data = dataset.get_data_ref(table)
            if data is None:
                continue
            try:
                offsets = data.unpack("2Q")
            except ValueError:
                self._error(f"err: table {names.name_or_hash(table.key_name)} malformed file offsets!")
                continue
            for offset, size in offsets:
                self._run_rec(opts, FileOffset(offset, size), chain)

    def _validate_shape(self, key_name: str, table: TableDesc) -> None:
        """Check that the shape agrees with the data size."""
        prim = table.type_info & TYPE_PRIM_MASK
        if prim == TYPE_PRIM_CUSTOM:
            return
        width = prim_size(prim)
        if width is None:
            self._warn(f"warn: table {key_name} unknown primitive type {prim:#x}!")
            return
        shape = Shape.from_shape(table.type_info, table.data_shape)
        shape_len = shape.size()
        data_size = table.data_size
        if data_size % width == 0 and shape_len == data_size // width:
            return
        self._error(
            f"err: table {key_name} has shape {shape} with {shape_len} elements of "
            f"{prim_name(prim) or '?'} but data size {data_size:#x} does not match!"
        )

    def _validate_related(self, dataset: Dataset, names: Names, table: TableDesc) -> None:
        key_name = names.name_or_hash(table.key_name)
        related_name = names.name_or_hash(table.related_name)
        if names.lookup(table.related_name) is None:
            self._error(f"err: table {key_name} related {related_name} name not found!")

        if table.key_name == table.related_name:
            self._warn(f"warn: table {key_name} related to itself")
            return

        related = dataset.find_table(table.related_name)
        if related is None:
            self._error(f"err: table {key_name} related table {related_name} not found!")
            return

        shape = Shape.from_type_info(table.type_info, table.data_shape)
        related_shape = Shape.from_type_info(related.type_info, related.data_shape)
        if shape != related_shape:
            self._error(
                f"err: related tables {key_name} ~ {related_name} do not have the same shape, "
                f"{shape} != {related_shape}"
            )


def run(opts: ValidateOptions) -> None:
    if opts.verbose:
        _eprint(f"opening {opts.file!r}... ", end="")
    try:
        file = UdfFile.open(opts.file)
    except (OSError, ParseError) as exc:
        raise CliError("error opening file", exc) from exc
    if opts.verbose:
        _eprint("ok")
    with file:
        Validator(file).run(opts)