"""Errors raised while parsing UDF values and structures."""

from __future__ import annotations


class ParseError(ValueError):
    """A value or structure could not be parsed."""


class InvalidFormatError(ParseError):
    """The input does not have the expected layout."""

    def __init__(self, message: str = "invalid format") -> None:
        super().__init__(message)


class OutOfBoundsError(ParseError):
    """The input is too short to hold the requested data."""

    def __init__(self, message: str = "out of bounds") -> None:
        super().__init__(message)


class OverflowParseError(ParseError):
    """A parsed value exceeds the range the format allows."""

    def __init__(self, message: str = "overflow") -> None:
        super().__init__(message)