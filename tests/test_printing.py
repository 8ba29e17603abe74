import pytest

from udformat.asdata import array_data, records_data
from udformat.cli.common import CliError, hex_dump
from udformat.cli.printing import (
    PrintFormat,
    PrintOptions,
    print_dataset,
    print_table_header,
    run,
)
from udformat.data import TableRef
from udformat.dataset import Dataset
from udformat.errors import InvalidFormatError
from udformat.fileio import UdfFile
from udformat.format import FileOffset, TYPE_PRIM_U32, TYPE_PRIM_U8
from udformat.hashing import name_hash
from udformat.utils import format_file_size, format_type_info


def _dataset(tables):
    ds = Dataset()
    for name, data in tables:
        ds.names.add(name, name_hash(name))
        ds.add_table(TableRef(key_name=name_hash(name), data=data))
    return ds.finalize()


def _write(path, tables):
    with UdfFile.create(path) as f:
        fo = f.add_dataset(_dataset(tables))
        f.root = fo
        f.write_header()
    return fo


def _write_nested(path):
    with UdfFile.create(path) as f:
        child = f.add_dataset(_dataset([("Values", array_data([7, 8], TYPE_PRIM_U32))]))
        root = f.add_dataset(_dataset([("Sub", records_data([child]))]))
        f.root = root
        f.write_header()
    return child


def test_print_format_parse():
    assert PrintFormat.parse("hex") is PrintFormat.HEX
    assert PrintFormat.parse("flat") is PrintFormat.FLAT
    assert PrintFormat.parse("array") is PrintFormat.ARRAY
    with pytest.raises(InvalidFormatError):
        PrintFormat.parse("table")


def test_print_dataset_lists_tables(capsys):
    ds = _dataset([("Floats", array_data([1, 2, 3], TYPE_PRIM_U32))])
    fo = FileOffset(0x40, 0x80)
    print_dataset(fo, ds)
    out = capsys.readouterr().out
    assert out.startswith("# Dataset\n\n")
    assert f"File offset: {fo}\n" in out
    assert f"File size: {format_file_size(0x80)}\n" in out
    assert "## Floats\n" in out
    assert "Checksum" not in out


def test_print_table_header_fields(capsys):
    ds = _dataset([("Items", array_data([1, 2, 3], TYPE_PRIM_U32))])
    table = ds.descs[0]
    print_table_header(ds.names, table)
    out = capsys.readouterr().out
    assert out.startswith("## Items\n\n")
    assert f"Type info: {format_type_info(table.type_info)}  \n" in out
    assert f"Data size: {format_file_size(12)}  \n" in out
    assert "Data shape: 3  \n" in out
    assert "Memory size" not in out
    assert "Index name" not in out


def test_print_table_header_index_and_unknown_related(capsys):
    names = _dataset([("A", array_data([1], TYPE_PRIM_U8))]).names
    from udformat.format import TableDesc

    table = TableDesc(key_name=name_hash("A"), index_name=name_hash("A"), related_name=0x1234)
    print_table_header(names, table)
    out = capsys.readouterr().out
    assert "Index name: A  \n" in out
    assert f"Related name: {0x1234:#010x}  \n" in out


def test_print_table_header_names_table(capsys):
    ds = _dataset([("A", array_data([1], TYPE_PRIM_U8))])
    from udformat.format import TableDesc

    print_table_header(ds.names, TableDesc(key_name=0))
    out = capsys.readouterr().out
    assert out.startswith("## Names\n\nNamesRef(")
    assert f'{name_hash("A"):#010x}: Some("A")' in out


def test_run_prints_root_dataset(tmp_path, capsys):
    path = tmp_path / "a.udf"
    fo = _write(path, [("Floats", array_data([1, 2, 3], TYPE_PRIM_U32))])
    run(PrintOptions(file=str(path)))
    out = capsys.readouterr().out
    assert f"File offset: {fo}" in out
    assert "## Floats" in out


def test_run_prints_array(tmp_path, capsys):
    path = tmp_path / "a.udf"
    _write(path, [("Ints", array_data([1, 2, 3], TYPE_PRIM_U32))])
    run(PrintOptions(file=str(path), path="Ints", print_array=True))
    out = capsys.readouterr().out
    assert "## Ints" in out
    assert out.endswith("```\n[1, 2, 3]\n```")


def test_run_prints_hex(tmp_path, capsys):
    path = tmp_path / "a.udf"
    _write(path, [("Bytes", array_data([65, 66], TYPE_PRIM_U8))])
    run(PrintOptions(file=str(path), path="Bytes", print_array=True, format=PrintFormat.HEX))
    out = capsys.readouterr().out
    assert "```\n" + hex_dump(b"AB") + "\n```\n" in out


def test_run_missing_table(tmp_path, capsys):
    path = tmp_path / "a.udf"
    _write(path, [("Ints", array_data([1], TYPE_PRIM_U32))])
    run(PrintOptions(file=str(path), path="Nope"))
    captured = capsys.readouterr()
    assert 'Dataset does not have a table named "Nope"!' in captured.err
    assert captured.out == ""


def test_run_name_followed_by_more_is_malformed(tmp_path, capsys):
    path = tmp_path / "a.udf"
    _write(path, [("Ints", array_data([1], TYPE_PRIM_U32))])
    run(PrintOptions(file=str(path), path="Ints.More"))
    assert "The path is malformed" in capsys.readouterr().err


def test_run_dir_on_non_dataset_table(tmp_path, capsys):
    path = tmp_path / "a.udf"
    _write(path, [("Ints", array_data([1], TYPE_PRIM_U32))])
    run(PrintOptions(file=str(path), path="Ints[0]"))
    assert "The path does not refer to a dataset table!" in capsys.readouterr().err


def test_run_walks_into_child_dataset(tmp_path, capsys):
    path = tmp_path / "a.udf"
    child = _write_nested(path)
    run(PrintOptions(file=str(path), path="Sub[0]"))
    out = capsys.readouterr().out
    assert f"File offset: {child}" in out
    assert "## Values" in out


def test_run_child_table_array(tmp_path, capsys):
    path = tmp_path / "a.udf"
    _write_nested(path)
    run(PrintOptions(file=str(path), path="Sub[0].Values", print_array=True))
    out = capsys.readouterr().out
    assert out.endswith("```\n[7, 8]\n```")


def test_run_missing_file_raises(tmp_path):
    with pytest.raises(CliError, match="open error"):
        run(PrintOptions(file=str(tmp_path / "missing.udf")))