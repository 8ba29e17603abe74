"""The ``export`` command: write tables out as raw bytes or numpy files."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..dataset import Dataset
from ..errors import InvalidFormatError, ParseError
from ..fileio import UdfFile
from ..format import (
    COMPRESS_NONE,
    TYPE_HINT_DATASET,
    TYPE_HINT_MASK,
    TYPE_PRIM_F32,
    TYPE_PRIM_F64,
    TYPE_PRIM_I8,
    TYPE_PRIM_I16,
    TYPE_PRIM_I32,
    TYPE_PRIM_I64,
    TYPE_PRIM_MASK,
    TYPE_PRIM_U8,
    TYPE_PRIM_U16,
    TYPE_PRIM_U32,
    TYPE_PRIM_U64,
    FileOffset,
    TableDesc,
)
from ..path import parse_path_element
from ..shape import Shape
from ..utils import format_id, format_type_info
from .common import CliError

_NPY_DESCR = {
    TYPE_PRIM_U8: "|u1",
    TYPE_PRIM_I8: "|i1",
    TYPE_PRIM_U16: "<u2",
    TYPE_PRIM_I16: "<i2",
    TYPE_PRIM_U32: "<u4",
    TYPE_PRIM_I32: "<i4",
    TYPE_PRIM_U64: "<u8",
    TYPE_PRIM_I64: "<i8",
    TYPE_PRIM_F32: "<f4",
    TYPE_PRIM_F64: "<f8",
}


class ExportFormat(Enum):
    """Output format of exported tables."""

    RAW = "raw"
    NPY = "npy"
    PRINT = "print"

    @classmethod
    def parse(cls, string: str) -> ExportFormat:
        try:
            return cls(string)
        except ValueError:
            raise InvalidFormatError() from None


@dataclass
class ExportOptions:
    file: str
    output: str
    path: str = ""
    file_offset: FileOffset | None = None
    format: ExportFormat = ExportFormat.RAW
    verbose: bool = False


def _eprint(*args, **kwargs) -> None:
    print(*args, file=sys.stderr, **kwargs)


def _npy_shape(shape: Shape) -> str:
    dims = shape.dims
    if not dims:
        return "()"
    if len(dims) == 1:
        return f"({dims[0]},)"
    return "(" + ", ".join(str(d) for d in dims) + ")"


def npy_header(descr: str, shape: Shape) -> bytes:
    """Magic, length and padded header of a version 1.0 npy file."""
    header = f"{{'descr': '{descr}', 'fortran_order': False, 'shape': {_npy_shape(shape)}, }}"
    # Pad so that the array data starts at a 64-byte aligned offset.
    pad_len = ((10 + len(header)) // 64 + 1) * 64 - 10
    header = header.ljust(pad_len - 1) + "\n"
    raw = header.encode("latin-1")
    return b"\x93NUMPY\x01\x00" + (len(raw) & 0xFFFF).to_bytes(2, "little") + raw


def run(opts: ExportOptions) -> None:
    try:
        file = UdfFile.open(opts.file)
    except (OSError, ParseError) as exc:
        raise CliError(f"Open UDF file='{opts.file}'", exc) from exc

    with file:
        fo = opts.file_offset if opts.file_offset is not None else file.root
        path = opts.path

        while True:
            if opts.verbose:
                print(fo)
            dataset = file.read_dataset(fo)
            names = dataset.names

            if not path:
                _export_dataset(opts, dataset)
                return

            try:
                element, rest = parse_path_element(path)
            except ParseError:
                _eprint("The path is malformed")
                return

            if not element.is_dir and rest:
                _eprint("The path is malformed")
                return

            key = names.find(element.name)
            table = None if key is None else dataset.find_table(key)
            if table is None:
                _eprint(
                    "Dataset does not have a table named "
                    f"{json.dumps(element.name, ensure_ascii=False)}!"
                )
                return

            if element.is_dir:
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
                fo = FileOffset(*offsets[element.index])
                path = rest
                continue

            try:
                desc = _export_table(opts, dataset, table, None)
            except OSError as exc:
                raise CliError(f"Error exporting {element.name}", exc) from exc
            print(desc, end="")
            return


def _export_dataset(opts: ExportOptions, dataset: Dataset) -> None:
    names = dataset.names
    output_dir = Path(opts.output)
    try:
        output_dir.mkdir()
    except OSError as exc:
        raise CliError(f"Create output at '{output_dir}'", exc) from exc

    known = ",".join(name for name in names.names() if name is not None)
    ini = f"Id={format_id(dataset.header.ident)}\nNames={known}\n"

    for table in dataset.descs:
        key_name = names.name_or_hash(table.key_name)
        try:
            ini += _export_table(opts, dataset, table, key_name)
        except OSError as exc:
            _eprint(f"Error exporting {key_name}: {exc}")

    try:
        (output_dir / "Dataset.ini").write_text(ini, encoding="utf-8")
    except OSError as exc:
        raise CliError("Error writing Dataset.ini", exc) from exc

    print(f"Exported {json.dumps(opts.path, ensure_ascii=False)} to {output_dir}")


def _export_table(
    opts: ExportOptions, dataset: Dataset, table: TableDesc, name: str | None
) -> str:
    """Write one table to disk and return its section for the summary file."""
    data = dataset.get_data_ref(table)
    if data is None:
        raise CliError(f"Unable to retrieve {name!r}'s data")
    data = data.decompress()
    if data.is_compressed():
        raise CliError("Decompression failed, cannot export compressed data")

    output = Path(opts.output)
    if opts.format is ExportFormat.RAW:
        path = output / name if name is not None else output
        path.write_bytes(data.data)
    elif opts.format is ExportFormat.NPY:
        descr = _NPY_DESCR.get(data.type_info & TYPE_PRIM_MASK)
        shape = data.shape
        if descr is None:
            # Fall back to dumping the array as bytes.
            descr, shape = "|u1", Shape(len(data.data))
        path = output / f"{name}.npy" if name is not None else output
        path.write_bytes(npy_header(descr, shape) + data.data)
    else:
        raise CliError(f"Export format '{opts.format.value}' is not supported")

    names = dataset.names
    lines = [
        "",
        f"[{names.name_or_hash(table.key_name)}]",
        f"TypeInfo={format_type_info(table.type_info)}",
    ]
    if table.compress_info != COMPRESS_NONE:
        lines.append(f"CompressInfo={table.compress_info}")
    lines.append(f"Shape={Shape.from_shape(table.type_info, table.data_shape)}")
    lines.append(f"Source={opts.format.value}")
    lines.append(f"FilePath={path.name}")
    if table.index_name != 0:
        lines.append(f"IndexName={names.name_or_hash(table.index_name)}")
    if table.related_name != 0:
        lines.append(f"RelatedName={names.name_or_hash(table.related_name)}")
    return "\n".join(lines) + "\n"