"""The ``import`` command: build a dataset from an INI description."""

from __future__ import annotations

import struct
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..data import DataRef, TableRef
from ..dataset import Dataset
from ..errors import InvalidFormatError, ParseError
from ..fileio import UdfFile
from ..format import (
    COMPRESS_NONE,
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
    prim_size,
)
from ..hashing import name_hash
from ..shape import Shape
from ..utils import parse_id, parse_type_info
from .common import CliError
from .parse_num import parse_all, preprocess

AFTER_HELP = (
    "The import file is an INI file describing the dataset to be created.\n"
    "For more information see the project's readme.\n"
    "\n"
    "The final file offset of the Dataset is printed to stdout.\n"
)

_STRUCT_CODES = {
    TYPE_PRIM_U8: "B",
    TYPE_PRIM_I8: "b",
    TYPE_PRIM_U16: "H",
    TYPE_PRIM_I16: "h",
    TYPE_PRIM_U32: "I",
    TYPE_PRIM_I32: "i",
    TYPE_PRIM_U64: "Q",
    TYPE_PRIM_I64: "q",
    TYPE_PRIM_F32: "f",
    TYPE_PRIM_F64: "d",
}

_TABLE_KEYS = {
    "TypeInfo": "type_info",
    "Shape": "shape",
    "Source": "source",
    "FilePath": "file_path",
    "IndexName": "index_name",
    "RelatedName": "related_name",
}

_NPY_DATA_OFFSET = 0x80


class Source(Enum):
    """Where the data of an imported table comes from."""

    ZERO = "zero"
    NPY = "npy"
    RAW = "raw"
    PARSE = "parse"

    @classmethod
    def parse(cls, string: str) -> Source:
        try:
            return cls(string)
        except ValueError:
            raise InvalidFormatError() from None


@dataclass
class ImportOptions:
    file: str
    import_file: str
    create_new: bool = False
    set_root: bool = False
    verbose: bool = False


@dataclass
class _IniTable:
    line: int
    key_name: str
    type_info: str | None = None
    shape: str | None = None
    source: str | None = None
    file_path: str | None = None
    index_name: str | None = None
    related_name: str | None = None


def _eprint(*args, **kwargs) -> None:
    print(*args, file=sys.stderr, **kwargs)


def parse_import(opts: ImportOptions, text: str) -> Dataset:
    """Build a dataset from the INI description ``text``."""
    ds = Dataset()
    names: dict[str, None] = {}
    desc: _IniTable | None = None

    for lineno, raw in enumerate(text.splitlines(), 1):
        line = raw.strip()
        if not line or line[0] in ";#":
            continue
        if line.startswith("["):
            if not line.endswith("]"):
                raise CliError(f"Syntax error at line {lineno}")
            if desc is not None:
                _load_table(opts, names, ds, desc)
            desc = _IniTable(line=lineno, key_name=line[1:-1].strip())
            continue

        key, sep, value = line.partition("=")
        if not sep:
            raise CliError(f"Syntax error at line {lineno}")
        key, value = key.strip(), value.strip()

        if desc is None:
            if key != "Id":
                raise CliError(f"Unknown key: {key}\nLine {lineno}")
            try:
                ds.header.ident = parse_id(value)
            except ParseError as exc:
                raise CliError(f"Invalid Id {value!r}", exc) from exc
        else:
            attr = _TABLE_KEYS.get(key)
            if attr is None:
                raise CliError(f"Unknown key: {key}\nLine {lineno}")
            setattr(desc, attr, value)

    if desc is not None:
        _load_table(opts, names, ds, desc)

    for name in names:
        ds.names.add(name, name_hash(name))
    return ds


def _read_source(opts: ImportOptions, key_name: str, file_path: Path | None, offset: int = 0) -> bytes:
    if file_path is None:
        raise CliError(f"Datatable {key_name}: Missing FilePath")
    if opts.verbose:
        _eprint(f"Reading from {file_path}...")
    try:
        with open(file_path, "rb") as fh:
            fh.seek(offset)
            return fh.read()
    except OSError as exc:
        raise CliError(f"Datatable {key_name}: Invalid FilePath '{file_path}'", exc) from exc


def _load_table(
    opts: ImportOptions, names: dict[str, None], ds: Dataset, desc: _IniTable
) -> None:
    key = desc.key_name
    if opts.verbose:
        _eprint(f"Loading Datatable {key}...")

    if desc.type_info is None:
        raise CliError(f"Datatable {key}: Missing TypeInfo")
    try:
        type_info = parse_type_info(desc.type_info)
    except ParseError as exc:
        raise CliError(f"Datatable {key}: Invalid TypeInfo", exc) from exc

    if desc.shape is None:
        raise CliError(f"Datatable {key}: Missing Shape")
    try:
        shape = Shape.parse(desc.shape)
    except ParseError as exc:
        raise CliError(f"Datatable {key}: Invalid Shape", exc) from exc

    key_name = name_hash(key)
    index_name = name_hash(desc.index_name) if desc.index_name is not None else 0
    related_name = name_hash(desc.related_name) if desc.related_name is not None else 0

    names[key] = None
    if desc.index_name is not None:
        names[desc.index_name] = None
    if desc.related_name is not None:
        names[desc.related_name] = None

    prim = type_info & TYPE_PRIM_MASK

    if desc.source is None:
        raise CliError(f"Datatable {key}: Missing Source")
    try:
        source = Source.parse(desc.source)
    except ParseError as exc:
        raise CliError(
            f"Datatable {key}: Invalid Source: must be one of zero, raw, npy, parse", exc
        ) from exc

    file_path = None
    if desc.file_path is not None:
        file_path = Path(desc.file_path)
        if not file_path.is_absolute():
            file_path = Path(opts.import_file).parent / file_path

    if source is Source.ZERO:
        width = prim_size(prim)
        if width is None:
            raise CliError(
                f"Datatable {key}: Source type 'zero' not compatible with {desc.type_info}"
            )
        data = bytes(shape.size() * width)
    elif source is Source.RAW:
        data = _read_source(opts, key, file_path)
    elif source is Source.NPY:
        data = _read_source(opts, key, file_path, _NPY_DATA_OFFSET)
    else:
        code = _STRUCT_CODES.get(prim)
        if code is None:
            raise CliError(
                f"Datatable {key}: Source type 'parse' not compatible with {desc.type_info}"
            )
        raw = _read_source(opts, key, file_path)
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CliError(f"Datatable {key}: file is not valid UTF-8", exc) from exc
        values = parse_all(preprocess(text), prim)
        data = struct.pack(f"<{len(values)}{code}", *values)

    ds.add_table(
        TableRef(
            key_name=key_name,
            data=DataRef(data=data, type_info=type_info, compress_info=COMPRESS_NONE, shape=shape),
            index_name=index_name,
            related_name=related_name,
        )
    )

    if opts.verbose:
        _eprint("done")


def run(opts: ImportOptions) -> None:
    """Import the described dataset and print its file offset."""
    try:
        text = Path(opts.import_file).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise CliError(f"Read import file='{opts.import_file}'", exc) from exc

    ds = parse_import(opts, text)

    try:
        file = UdfFile.create(opts.file) if opts.create_new else UdfFile.edit(opts.file)
    except (OSError, ParseError) as exc:
        action = "Create" if opts.create_new else "Open"
        raise CliError(f"{action} UDF file='{opts.file}'", exc) from exc

    with file:
        try:
            fo = file.add_dataset(ds.finalize())
        except (OSError, ValueError) as exc:
            raise CliError(f"Add dataset file='{opts.file}'", exc) from exc
        print(fo)
        if opts.set_root:
            file.root = fo
            file.write_header()