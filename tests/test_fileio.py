import pytest

from udformat.asdata import array_data, records_data
from udformat.data import TableRef
from udformat.dataset import Dataset
from udformat.errors import InvalidFormatError, OutOfBoundsError
from udformat.fileio import UdfFile
from udformat.format import TYPE_PRIM_F32, FileOffset, UdfHeader
from udformat.hashing import name_hash

FLOATS = [0.0, 1.0, 2.0, 3.0, 42.0]


def _dataset() -> Dataset:
    ds = Dataset()
    ds.names.add("Floats", name_hash("Floats"))
    ds.add_table(TableRef(key_name=name_hash("Floats"), data=array_data(FLOATS, TYPE_PRIM_F32)))
    return ds.finalize()


def test_create_writes_header(tmp_path):
    path = tmp_path / "new.udf"
    with UdfFile.create(path, b"JOB0"):
        pass
    raw = path.read_bytes()
    assert len(raw) == UdfHeader.SIZE
    assert raw[:8] == b"UDF0JOB0"


def test_create_rejects_bad_ident(tmp_path):
    with pytest.raises(ValueError):
        UdfFile.create(tmp_path / "x.udf", b"TOOLONG")


def test_open_rejects_wrong_magic(tmp_path):
    path = tmp_path / "bad.udf"
    path.write_bytes(b"ABCD" + bytes(60))
    with pytest.raises(InvalidFormatError):
        UdfFile.open(path)


def test_open_rejects_short_file(tmp_path):
    path = tmp_path / "short.udf"
    path.write_bytes(b"UDF0")
    with pytest.raises(OutOfBoundsError):
        UdfFile.open(path)


def test_allocate_is_aligned(tmp_path):
    with UdfFile.create(tmp_path / "a.udf") as f:
        fo = f.allocate(17)
        assert fo.offset == UdfHeader.SIZE
        assert fo.is_aligned()
        assert 17 <= fo.size < 17 + 16
        assert f.allocate(32).size == 32


def test_round_trip(tmp_path):
    path = tmp_path / "sample.udf"
    with UdfFile.create(path, b"TEST") as f:
        fo = f.add_dataset(_dataset())
        f.root = fo
        f.write_header()
    assert fo.offset == UdfHeader.SIZE
    assert path.stat().st_size == fo.offset + fo.size
    with UdfFile.open(path) as f:
        assert f.ident == b"TEST"
        assert f.root == fo
        loaded = f.read_dataset(f.root)
    table = loaded.find_table(name_hash("Floats"))
    assert loaded.get_data_ref(table).values() == FLOATS
    assert loaded.names.lookup(name_hash("Floats")) == "Floats"


def test_edit_appends_datasets(tmp_path):
    path = tmp_path / "edit.udf"
    with UdfFile.create(path) as f:
        first = f.add_dataset(_dataset())
    with UdfFile.edit(path) as f:
        root = Dataset()
        root.names.add("Slices", name_hash("Slices"))
        root.add_table(TableRef(key_name=name_hash("Slices"), data=records_data([first])))
        second = f.add_dataset(root.finalize())
        f.root = second
        f.write_header()
    assert second.offset >= first.offset + first.size
    with UdfFile.open(path) as f:
        loaded = f.read_dataset(f.root)
        data = loaded.get_data_ref(loaded.find_table(name_hash("Slices")))
        offsets = [FileOffset(*pair) for pair in data.unpack("2Q")]
        assert offsets == [first]
        child = f.read_dataset(offsets[0])
    assert len(child) == 1


def test_write_dataset_invalid_offsets(tmp_path):
    with UdfFile.create(tmp_path / "w.udf") as f:
        ds = _dataset()
        with pytest.raises(ValueError):
            f.write_dataset(FileOffset(), ds)
        with pytest.raises(ValueError):
            f.write_dataset(FileOffset(0x48, 0x100), ds)
        with pytest.raises(ValueError):
            f.write_dataset(FileOffset(0x40, 0x10), ds)


def test_write_unfinalized_dataset(tmp_path):
    with UdfFile.create(tmp_path / "u.udf") as f:
        with pytest.raises(ValueError):
            f.add_dataset(Dataset())


def test_read_dataset_errors(tmp_path):
    with UdfFile.create(tmp_path / "r.udf") as f:
        with pytest.raises(ValueError):
            f.read_dataset(FileOffset())
        with pytest.raises(OutOfBoundsError):
            f.read_dataset(FileOffset(0x1000, 0x10))
        with pytest.raises(InvalidFormatError):
            f.read_dataset(FileOffset(0, UdfHeader.SIZE))


def test_read_only_cannot_write(tmp_path):
    path = tmp_path / "ro.udf"
    with UdfFile.create(path):
        pass
    with UdfFile.open(path) as f:
        with pytest.raises(OSError):
            f.write_header()


def test_context_manager_closes(tmp_path):
    with UdfFile.create(tmp_path / "c.udf") as f:
        pass
    with pytest.raises(ValueError):
        f.flush()