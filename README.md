# udformat

`udformat` reads and writes UDF files. A UDF file holds datasets. Each dataset holds named tables of typed, shaped data, and a table's data may be stored compressed.

The package has two parts:

- a library that builds datasets in memory, writes them to a file and reads them back;
- a `udf` command that creates, inspects, validates, imports and exports files.

## Installation

```
pip install .
```

To install the test tools as well:

```
pip install .[test]
```

## Library usage

```python
from udformat.asdata import array_data, text_data
from udformat.data import TableRef
from udformat.dataset import Dataset
from udformat.fileio import UdfFile
from udformat.format import TYPE_PRIM_F32
from udformat.hashing import name_hash

ds = Dataset()
for name in ("Floats", "Comment"):
    ds.names.add(name, name_hash(name))

ds.add_table(TableRef(key_name=name_hash("Floats"),
                      data=array_data([0.0, 1.0, 3.141592], TYPE_PRIM_F32)))
ds.add_table(TableRef(key_name=name_hash("Comment"),
                      data=text_data("hello")))

with UdfFile.create("sample.udf", b"\0\0\0\0") as udf:
    fo = udf.add_dataset(ds.finalize())
    udf.root = fo
    udf.write_header()

with UdfFile.open("sample.udf") as udf:
    loaded = udf.read_dataset(udf.root)
    table = loaded.find_table(name_hash("Floats"))
    print(loaded.get_data_ref(table).print())
```

The rest of the library:

- `udformat.format`: the on-disk structures (`UdfHeader`, `DatasetHeader`, `TableDesc`, `LookupEntry`, `FileOffset`), the record types (`Coord2F32`, `RangeU32`, `Index3U32` and others), and the `TYPE_*` and `COMPRESS_*` constants.
- `udformat.asdata`: builds a `DataRef` from plain values. It has `scalar_data`, `array_data`, `matrix_data`, `tensor_data`, `record_data`, `records_data` and `text_data`.
- `udformat.data`: `DataRef` decodes values with `values()` and `unpack()`, formats them with `print()` and undoes compression with `decompress()`. The module also has `TableRef` and `build_string_array_utf8`.
- `udformat.shape.Shape`: a shape of up to three dimensions. It can be parsed from text such as `"4x3"` and encoded to the on-disk form.
- `udformat.names.Names`: the table that maps name hashes back to names.
- `udformat.utils`: formats and parses identifiers and type info strings such as `f32:1d`, and formats file sizes.
- `udformat.simple_u32`, `udformat.simple_u16`, `udformat.simple_f32`: simple compression schemes. The first two are lossless. `SimpleF32` rounds each value to a multiple of a unit.
- `udformat.path.parse_path_element`: splits the first element off a dataset path such as `Slices[3].Points`.

Parse failures raise subclasses of `udformat.errors.ParseError`.

## Command line

```
udf new FILE [--id ID]
udf validate FILE [--verbose]
udf print FILE [PATH] [-p] [-f hex|flat|array] [--line-width N] [--file-offset OFF:SIZE] [--verbose]
udf export FILE PATH OUTPUT [-f raw|npy] [--file-offset OFF:SIZE] [--verbose]
udf import FILE IMPORT [--create-new] [--set-root] [--verbose]
udf set-root FILE OFF:SIZE
```

File offsets are written as `offset:size`. Each part is decimal, or hexadecimal with a `0x` prefix, as in `0x40:0x100`.

A path names a table. `Name[i].` steps into the `i`-th dataset of a file-offset table.

- `print` shows the dataset. If a path is given, it shows that table, and `-p` also prints the table's contents.
- `validate` walks every dataset it can reach from the root. It reports warnings and errors on stderr and prints a summary.
- `set-root` prints the old root offset, then stores the new one.

### Import files

An import file is an INI file. An optional `Id=` line before the first section sets the dataset identifier. Each section describes one table:

```
Id=OBJ

[v]
TypeInfo=f32:2d
Shape=8x3
Source=parse
FilePath=vertices.txt
```

`Source` takes one of these values:

- `zero` fills the table with zeros.
- `raw` copies the bytes of the file named by `FilePath`.
- `npy` copies the file's bytes that follow its first 128 bytes, which is the `.npy` header.
- `parse` reads every number from a text file. Integers may use a `0x` prefix.

A relative `FilePath` is taken relative to the import file. The optional keys `IndexName` and `RelatedName` link the table to other tables.

`udf import` prints the file offset of the new dataset.

### Exporting

`udf export` writes tables as raw bytes or as `.npy` files. When `-f` is not given, the format is `npy` if the output ends in `.npy` and `raw` otherwise. Exporting a whole dataset (an empty path) creates the output directory. It writes one file per table and a `Dataset.ini` file that describes the tables in the import format.

## Limitations

- Compressed tables are decompressed only for the `simple_u32` and `simple_f32` schemes. Data in any other scheme stays compressed, and `export` refuses it.
- The command line tools never write compressed tables.
- Checksum fields are written as zero, and nothing verifies them.