"""The ``set-root`` command: point the file header at another dataset."""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import ParseError
from ..fileio import UdfFile
from ..format import FileOffset
from .common import CliError

AFTER_HELP = (
    "This is a dangerous operation that can corrupt the UDF file.\n"
    "Prefer the `--set-root` option when importing a dataset.\n"
    "The old root dataset's file offset is printed.\n"
)


@dataclass
class SetRootOptions:
    file: str
    file_offset: FileOffset


def run(opts: SetRootOptions) -> None:
    """Print the old root, then store the new one in the header."""
    try:
        file = UdfFile.edit(opts.file)
    except (OSError, ParseError) as exc:
        raise CliError(f"Open UDF file='{opts.file}'", exc) from exc
    with file:
        print(file.root)
        file.root = opts.file_offset
        file.write_header()