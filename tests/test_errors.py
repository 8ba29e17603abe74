import pytest

from udformat.errors import (
    InvalidFormatError,
    OutOfBoundsError,
    OverflowParseError,
    ParseError,
)


@pytest.mark.parametrize(
    ("error_type", "message"),
    [
        (InvalidFormatError, "invalid format"),
        (OutOfBoundsError, "out of bounds"),
        (OverflowParseError, "overflow"),
    ],
)
def test_default_messages(error_type, message):
    assert str(error_type()) == message


@pytest.mark.parametrize("error_type", [InvalidFormatError, OutOfBoundsError, OverflowParseError])
def test_caught_as_parse_error(error_type):
    err = error_type("detail")
    assert isinstance(err, ParseError)
    assert str(err) == "detail"


def test_caught_as_value_error():
    err = OverflowParseError()
    assert isinstance(err, ValueError)
    assert str(err) == "overflow"


def test_custom_message_kept():
    assert str(OutOfBoundsError("table data")) == "table data"


def test_parse_error_message():
    assert str(ParseError("invalid digit found in string")) == "invalid digit found in string"