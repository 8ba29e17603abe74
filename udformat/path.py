"""Parsing of dotted dataset paths such as ``Slices[3].Points``."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import InvalidFormatError, ParseError

_DIGITS = frozenset("0123456789")


def _parse_u32(text: str) -> int:
    body = text[1:] if text.startswith("+") else text
    if not body or not set(body) <= _DIGITS:
        raise ParseError(f"invalid index {text!r}")
    value = int(body)
    if value >> 32:
        raise ParseError(f"index {text!r} is too large")
    return value


@dataclass(frozen=True)
class PathElement:
    """One path step: a table name, with an index when it selects a dataset."""

    name: str
    index: int | None = None

    @property
    def is_dir(self) -> bool:
        return self.index is not None


def parse_path_element(path: str) -> tuple[PathElement, str]:
    """Split off the first element of ``path`` and return it with the remainder."""
    if not path:
        raise InvalidFormatError()
    head, _, rest = path.partition(".")
    bracket = head.find("[")
    if bracket < 0:
        return PathElement(head), rest
    if "[" in head[bracket + 1 :]:
        raise InvalidFormatError()
    if not head.endswith("]"):
        raise InvalidFormatError()
    return PathElement(head[:bracket], _parse_u32(head[bracket + 1 : -1])), rest