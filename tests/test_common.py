from udformat.cli.common import CliError, hex_dump

HEADER = "  Offset 00 01 02 03 04 05 06 07 08 09 0A 0B 0C 0D 0E 0F Decoded text"


def test_cli_error_message_only():
    err = CliError("Open UDF file='x'")
    assert str(err) == "Open UDF file='x'"
    assert err.cause is None


def test_cli_error_with_cause():
    cause = OSError("boom")
    err = CliError("Read import file", cause)
    assert str(err) == "Read import file\nerror: boom"
    assert err.message == "Read import file"
    assert err.cause is cause


def test_cli_error_can_be_raised():
    err = CliError("bad")
    assert isinstance(err, Exception)
    assert err.message == "bad"
    assert str(err) == "bad"


def test_hex_dump_empty_is_header_only():
    assert hex_dump(b"") == HEADER


def test_hex_dump_partial_row_pads_hex_columns():
    out = hex_dump(b"AB")
    lines = out.split("\n")
    assert lines[0] == HEADER
    assert lines[1].startswith("00000000 41 42 ")
    assert lines[1].endswith("AB")
    # Hex columns are always as wide as a full row.
    assert len(lines[1]) == len("00000000 ") + 16 * 3 + 2


def test_hex_dump_nonprintable_as_dots():
    out = hex_dump(bytes([0x00, 0x7F, 0x41]))
    assert out.split("\n")[1].endswith("..A")


def test_hex_dump_row_count_and_offsets():
    data = bytes(range(40))
    lines = hex_dump(data).split("\n")
    assert len(lines) == 1 + 3
    assert lines[2].startswith("00000010 ")
    assert lines[3].startswith("00000020 ")