"""The ``print`` command: show datasets, tables and their contents."""

from __future__ import annotations

import json
import math
import sys
from dataclasses import dataclass
from enum import Enum

from ..dataset import Dataset, WalkRef
from ..errors import InvalidFormatError, ParseError
from ..fileio import UdfFile
from ..format import (
    FileOffset,
    TableDesc,
    TYPE_HINT_DATASET,
    TYPE_HINT_JSON,
    TYPE_HINT_MASK,
    TYPE_HINT_TEXT,
    TYPE_PRIM_MASK,
    TYPE_PRIM_U64,
    prim_size,
)
from ..names import Names
from ..path import parse_path_element
from ..shape import Shape
from ..utils import format_file_size, format_id, format_type_info
from .common import CliError, hex_dump

_MASK32 = 0xFFFFFFFF


class PrintFormat(Enum):
    """How array contents are printed."""

    HEX = "hex"
    FLAT = "flat"
    ARRAY = "array"

    @classmethod
    def parse(cls, string: str) -> PrintFormat:
        try:
            return cls(string)
        except ValueError:
            raise InvalidFormatError() from None


@dataclass
class PrintOptions:
    file: str
    file_offset: FileOffset | None = None
    path: str = ""
    verbose: bool = False
    print_array: bool = False
    line_width: int = 75
    format: PrintFormat = PrintFormat.ARRAY


def _eprint(*args, **kwargs) -> None:
    print(*args, file=sys.stderr, **kwargs)


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def run(opts: PrintOptions) -> None:
    try:
        file = UdfFile.open(opts.file)
    except (OSError, ParseError) as exc:
        raise CliError("open error", exc) from exc
    with file:
        fo = opts.file_offset if opts.file_offset is not None else file.root
        _walk(file, opts, fo, opts.path, None)


def _walk(
    file: UdfFile,
    opts: PrintOptions,
    fo: FileOffset,
    path: str,
    parent: WalkRef[Dataset] | None,
) -> None:
    if opts.verbose:
        _eprint(f"reading dataset {fo}... ", end="")
    dataset = file.read_dataset(fo)
    if opts.verbose:
        _eprint("ok")
    names = dataset.names

    if not path:
        if opts.verbose:
            _eprint()
        print_dataset(fo, dataset)
        return

    if opts.verbose:
        _eprint(f"path={_quote(path)}")

    try:
        element, rest = parse_path_element(path)
    except ParseError:
        _eprint("The path is malformed")
        return

    def find(name: str) -> TableDesc | None:
        key = names.find(name)
        return None if key is None else dataset.find_table(key)

    if element.is_dir:
        table = find(element.name)
        if table is None:
            _eprint(f"Dataset does not have a table named {_quote(element.name)}!")
            return
        data_ref = dataset.get_data_ref(table)
        if data_ref is None:
            raise CliError("dataset is malformed")
        wanted = TYPE_HINT_DATASET | TYPE_PRIM_U64
        if data_ref.type_info & (TYPE_HINT_MASK | TYPE_PRIM_MASK) != wanted:
            _eprint("The path does not refer to a dataset table!")
            return
        try:
            offsets = data_ref.unpack("2Q")
        except ValueError as exc:
            raise CliError("dataset is malformed", exc) from exc
        if element.index >= len(offsets):
            _eprint("")
            return
        child = FileOffset(*offsets[element.index])
        _walk(file, opts, child, rest, WalkRef(dataset, parent))
        return

    if opts.verbose:
        _eprint()
    if rest:
        _eprint("The path is malformed")
        return
    table = find(element.name)
    if table is None:
        _eprint(f"Dataset does not have a table named {_quote(element.name)}!")
        return

    print_table_header(names, table)

    if opts.print_array:
        _print_array(dataset, table, opts)


def _print_array(dataset: Dataset, table: TableDesc, opts: PrintOptions) -> None:
    data_ref = dataset.get_data_ref(table)
    if data_ref is None:
        _eprint("Error reading table data!")
        return
    data_ref = data_ref.decompress()

    if opts.format is PrintFormat.HEX:
        if data_ref.is_compressed():
            raise CliError("cannot dump compressed data")
        sys.stdout.write("```\n" + hex_dump(data_ref.data) + "\n```\n")
        return

    hint = data_ref.type_info & TYPE_HINT_MASK
    if hint in (TYPE_HINT_TEXT, TYPE_HINT_JSON):
        try:
            text = data_ref.data.decode("utf-8")
        except UnicodeDecodeError as exc:
            _eprint(f"Error reading table data: {exc}!")
            return
        print(text)
        return

    try:
        array = data_ref.print()
    except ValueError:
        _eprint("Error printing table data!")
        return
    array.line_width = opts.line_width
    if opts.format is PrintFormat.FLAT:
        array.shape = data_ref.shape.flatten()
    sys.stdout.write(f"```\n{array}\n```")


def print_dataset(fo: FileOffset, dataset: Dataset) -> None:
    header = dataset.header
    print("# Dataset\n")
    print(f"File offset: {fo.offset:#x}:{fo.size:#x}")
    print(f"File size: {format_file_size(fo.size)}")
    print(f"Header size: {format_file_size(header.size)}")
    print(f"Identifier: {format_id(header.ident)}")
    if header.checksum != 0:
        print(f"Checksum:  {header.checksum:#x}")
    print()
    for table in dataset.descs:
        print_table_header(dataset.names, table)


def _names_debug(names: Names) -> str:
    entries = list(names.items())
    if not entries:
        return "NamesRef(\n    {},\n)"
    lines = ["NamesRef(", "    {"]
    for hash_value, name in entries:
        value = "None" if name is None else f"Some({_quote(name)})"
        lines.append(f"        {hash_value:#010x}: {value},")
    lines += ["    },", ")"]
    return "\n".join(lines)


def _percent(value: float) -> str:
    return "NaN" if math.isnan(value) else f"{value:.1f}"


def print_table_header(names: Names, table: TableDesc) -> None:
    if table.key_name == 0:
        print(f"## Names\n\n{_names_debug(names)}\n")
        return

    shape = Shape.from_shape(table.type_info, table.data_shape)
    print(f"## {names.name_or_hash(table.key_name)}")
    print()
    print(f"Type info: {format_type_info(table.type_info)}  ")
    if table.compress_info != 0:
        print(f"Compress info: {table.compress_info}  ")
        width = prim_size(table.type_info)
        if width is not None:
            size = shape.size() * width
            if size:
                ratio = table.data_size / size
            else:
                ratio = math.inf if table.data_size else math.nan
            print(f"Compress ratio: {_percent(ratio * 100.0)}%  ")
    if table.mem_start <= table.mem_end:
        # Only show the memory size when it differs from what data_size implies.
        mem_size = table.mem_end - table.mem_start
        expected = ((((table.data_size - 1) & _MASK32) // 8) + 1) & _MASK32
        if expected != mem_size:
            print(f"Memory size: {format_file_size(mem_size * 8)}  ")
    print(f"Data size: {format_file_size(table.data_size)}  ")
    print(f"Data shape: {shape}  ")
    if table.index_name != 0:
        print(f"Index name: {names.name_or_hash(table.index_name)}  ")
    if table.related_name != 0:
        print(f"Related name: {names.name_or_hash(table.related_name)}  ")
    print()