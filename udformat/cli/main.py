"""Command line entry point for working with UDF files."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from ..errors import ParseError
from ..fileio import UdfFile
from ..format import FileOffset
from ..utils import format_id, parse_id
from . import export, importer, printing, set_root, validate
from .common import CliError


def _converter(parse):
    def convert(text: str):
        try:
            return parse(text)
        except (ParseError, ValueError) as exc:
            raise argparse.ArgumentTypeError(f"invalid value {text!r}: {exc}") from exc

    return convert


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="udf")
    sub = parser.add_subparsers(dest="command")
    file_offset = _converter(FileOffset.parse)

    cmd = sub.add_parser("new", help="Create an empty UDF file")
    cmd.add_argument("file", help="The UDF file")
    cmd.add_argument("--id", help="The identifier")

    cmd = sub.add_parser("validate", help="Check the UDF file for errors")
    cmd.add_argument("file", help="The UDF file")
    cmd.add_argument("--verbose", action="store_true", help="Verbose output")

    cmd = sub.add_parser("print", help="Print dataset or datatable information")
    cmd.add_argument("file", help="The UDF file")
    cmd.add_argument("path", nargs="?", default="", help="Path to the dataset")
    cmd.add_argument("-p", "--print-array", action="store_true", help="Print the array contents")
    cmd.add_argument(
        "-f",
        "--format",
        type=_converter(printing.PrintFormat.parse),
        default=printing.PrintFormat.ARRAY,
        help="Format option: one of hex, flat, array (default array)",
    )
    cmd.add_argument(
        "--line-width",
        type=int,
        default=75,
        help="Sets the line width for the purpose of inserting line breaks (default 75)",
    )
    cmd.add_argument("--file-offset", type=file_offset, help="File offset to the root dataset")
    cmd.add_argument("--verbose", action="store_true", help="Verbose output")

    cmd = sub.add_parser("export", help="Export a dataset or datatable")
    cmd.add_argument("file", help="The UDF file")
    cmd.add_argument("path", help="Path to the dataset")
    cmd.add_argument("output", help="Output path")
    cmd.add_argument(
        "-f",
        "--format",
        type=_converter(export.ExportFormat.parse),
        help="Format option: one of raw, npy (default raw)",
    )
    cmd.add_argument("--file-offset", type=file_offset, help="File offset to the root dataset")
    cmd.add_argument("--verbose", action="store_true", help="Verbose output")

    cmd = sub.add_parser(
        "import",
        help="Import a dataset",
        epilog=importer.AFTER_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    cmd.add_argument("file", help="The UDF file")
    cmd.add_argument(
        "import_file", metavar="import", help="Path to import file describing the dataset"
    )
    cmd.add_argument(
        "--create-new",
        action="store_true",
        help="Create a new UDF file instead of updating an existing UDF file",
    )
    cmd.add_argument(
        "--set-root", action="store_true", help="Set the imported dataset as the root dataset"
    )
    cmd.add_argument("--verbose", action="store_true", help="Verbose output")

    cmd = sub.add_parser(
        "set-root",
        help="Set the root dataset",
        epilog=set_root.AFTER_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    cmd.add_argument("file", help="The UDF file")
    cmd.add_argument("file_offset", metavar="file-offset", type=file_offset, help="The file offset to assign")

    return parser


def _new(args: argparse.Namespace) -> None:
    if args.id is None:
        ident = bytes(4)
    else:
        try:
            ident = parse_id(args.id)
        except ParseError as exc:
            raise CliError(f"Error parsing {json.dumps(args.id, ensure_ascii=False)}", exc) from exc
    try:
        writer = UdfFile.create(args.file, ident)
    except OSError as exc:
        raise CliError(f"Create UDF file='{args.file}' id='{format_id(ident)}'", exc) from exc
    with writer:
        writer.write_header()


def _dispatch(args: argparse.Namespace) -> None:
    if args.command == "new":
        _new(args)
    elif args.command == "validate":
        validate.run(validate.ValidateOptions(file=args.file, verbose=args.verbose))
    elif args.command == "print":
        printing.run(
            printing.PrintOptions(
                file=args.file,
                file_offset=args.file_offset,
                path=args.path,
                verbose=args.verbose,
                print_array=args.print_array,
                line_width=args.line_width,
                format=args.format,
            )
        )
    elif args.command == "export":
        fmt = args.format
        if fmt is None:
            # Pick the format from the output's extension.
            is_npy = Path(args.output).suffix == ".npy"
            fmt = export.ExportFormat.NPY if is_npy else export.ExportFormat.RAW
        export.run(
            export.ExportOptions(
                file=args.file,
                output=args.output,
                path=args.path,
                file_offset=args.file_offset,
                format=fmt,
                verbose=args.verbose,
            )
        )
    elif args.command == "import":
        importer.run(
            importer.ImportOptions(
                file=args.file,
                import_file=args.import_file,
                create_new=args.create_new,
                set_root=args.set_root,
                verbose=args.verbose,
            )
        )
    elif args.command == "set-root":
        set_root.run(set_root.SetRootOptions(file=args.file, file_offset=args.file_offset))


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help(sys.stderr)
        return 2
    try:
        _dispatch(args)
    except (CliError, OSError, ParseError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())