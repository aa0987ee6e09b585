# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Command line entry point: check that flagged APIs match their flag states."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from flaggedapis.checker import find_errors
from flaggedapis.errors import ApiError
from flaggedapis.reader import (
    FlaggedSymbolReader,
    FlagStateReader,
    OutputSymbolReader,
    ReaderError,
)
from flaggedapis.readers import ApiSignatureReader, ApiVersionsReader, FlagValuesReader
from flaggedapis.symbol import SymbolError

logger = logging.getLogger(__name__)

MAX_EXIT_CODE = 255
USAGE_EXIT_CODE = 2
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

TABLE_COLUMN_RATIOS: dict[str, int] = {
    "kind": 1,
    "symbol": 4,
    "flag": 2,
}

DESCRIPTION = """\
Check that all flagged APIs are used in the correct way.

Reads the API signature file and checks every @FlaggedApi symbol against the
flag values and the API versions of the built artifact.

Exit status: the number of errors found (capped at 255), or 2 when the
arguments or input files are invalid. An invalid input writes its cause to
stderr and nothing to stdout.
"""


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with a Rich handler on stderr.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=Console(stderr=True), rich_tracebacks=True, show_path=False
            )
        ],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(
        prog="check-flagged-apis",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--api-signature",
        required=True,
        help="Path to API signature file. Usually named *current.txt.",
    )
    parser.add_argument(
        "--flag-values",
        required=True,
        help="Path to aconfig parsed_flags protobuf file (binary, or .textproto).",
    )
    parser.add_argument(
        "--api-versions",
        required=True,
        help="Path to API versions XML file. Usually named xml-versions.xml.",
    )
    parser.add_argument(
        "--format",
        choices=("text", "table", "json"),
        default="text",
        help="Output format.",
    )
    parser.add_argument(
        "--output",
        required=False,
        help="Optional output file path for raw JSON when --format json is used.",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="INFO",
        help="Logging severity threshold.",
    )
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run the check.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code: the number of errors found, capped at 255, or 2 when the
        arguments or inputs are invalid.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return USAGE_EXIT_CODE
    logging.getLogger().setLevel(args.log_level)

    paths = {
        "api-signature": Path(args.api_signature),
        "flag-values": Path(args.flag_values),
        "api-versions": Path(args.api_versions),
    }
    for option, path in paths.items():
        if not path.is_file():
            logger.warning(f"Input file does not exist (option={option} path={path})")
            stderr.write(f"--{option}: file does not exist: {path}\n")
            return USAGE_EXIT_CODE

    signature_reader: FlaggedSymbolReader = ApiSignatureReader()
    flag_reader: FlagStateReader = FlagValuesReader()
    versions_reader: OutputSymbolReader = ApiVersionsReader()
    try:
        flagged_symbols = signature_reader.read(paths["api-signature"])
        flags = flag_reader.read(paths["flag-values"])
        exported_symbols = versions_reader.read(paths["api-versions"])
    except (ReaderError, SymbolError) as exc:
        logger.warning(f"Failed to read input (error={exc})")
        stderr.write(f"{exc}\n")
        return USAGE_EXIT_CODE

    errors = sorted(find_errors(flagged_symbols, flags, exported_symbols), key=str)
    logger.info(
        f"Check completed (flagged={len(flagged_symbols)} flags={len(flags)} "
        f"exported={len(exported_symbols)} errors={len(errors)})"
    )

    if args.format == "json":
        if args.output:
            try:
                _write_json_file(errors=errors, output_path=Path(args.output))
            except OSError as exc:
                logger.warning(
                    f"Failed to write JSON output file (output_path={args.output} error={exc})"
                )
                stderr.write(f"Failed to write JSON output file: {args.output}\n")
                return USAGE_EXIT_CODE
        else:
            _write_json(errors=errors, stdout=stdout)
    elif args.format == "table":
        _write_table(errors=errors, stdout=stdout)
    else:
        _write_text(errors=errors, stdout=stdout)
    return min(len(errors), MAX_EXIT_CODE)


def _write_text(errors: list[ApiError], stdout: TextIO) -> None:
    for error in errors:
        stdout.write(f"{error}\n")


def _json_payload(errors: list[ApiError]) -> dict[str, object]:
    return {
        "errors": [error.as_dict() for error in errors],
        "error_count": len(errors),
    }


def _write_json(errors: list[ApiError], stdout: TextIO) -> None:
    """Write errors in JSON format.

    Args:
        errors: Errors found by the check.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.print(
        json.dumps(_json_payload(errors), indent=2, sort_keys=True),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def _write_json_file(errors: list[ApiError], output_path: Path) -> None:
    """Write raw JSON payload to an output file.

    Raises:
        OSError: If directory creation or file writing fails.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(_json_payload(errors), indent=2, sort_keys=True), encoding="utf-8"
    )


def _write_table(errors: list[ApiError], stdout: TextIO) -> None:
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    table = Table(show_header=True, show_lines=True, expand=True)
    table.add_column("kind", ratio=TABLE_COLUMN_RATIOS["kind"], overflow="fold")
    table.add_column("symbol", ratio=TABLE_COLUMN_RATIOS["symbol"], overflow="fold")
    table.add_column("flag", ratio=TABLE_COLUMN_RATIOS["flag"], overflow="fold")
    for error in errors:
        table.add_row(error.kind, error.symbol.to_pretty_string(), str(error.flag))
    console.print(table)
    console.print(f"{len(errors)} error(s)", markup=False, highlight=False)


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
