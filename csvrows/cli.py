"""
csv2json: convert CSV from a file or stdin into a JSON array of rows.
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import List, Optional

from .config import get_settings
from .errors import CsvError
from .logging_setup import get_logger, setup_logging
from .output import dump_rows
from .parser import ParserOptions
from .rules import DEFAULT_DELIMITER, DEFAULT_QUOTE
from .sources import parse_path, parse_readable

logger = get_logger("csv2json")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="csv2json", description="CSV to JSON converter")
    parser.add_argument("-i", "--input", default="-", help="Input file path (default: stdin)")
    parser.add_argument("-d", "--delimiter", default=DEFAULT_DELIMITER, help="Field delimiter (default: ,)")
    parser.add_argument("-q", "--quote", default=DEFAULT_QUOTE, help='Quote character (default: ")')
    # --pretty wins when both are given
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--compact", action="store_true", help="Minified JSON (default if not pretty)")
    parser.add_argument(
        "--no-parse-number",
        dest="parse_numbers",
        action="store_false",
        help="Do not convert numeric-looking values",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        setup_logging("INFO", fmt="[csv2json] %(message)s")
    hook = logger if args.verbose else None

    start = time.perf_counter()
    try:
        chunk_size = get_settings().chunk_size
        options = ParserOptions(
            delimiter=args.delimiter,
            quote=args.quote,
            parse_numbers=args.parse_numbers,
        )
        if args.input == "-":
            result = parse_readable(sys.stdin.buffer, options, chunk_size=chunk_size, logger=hook)
        else:
            result = parse_path(args.input, options, chunk_size=chunk_size, logger=hook)
    except (CsvError, OSError) as e:
        sys.stderr.write(f"Error: {e}\n")
        return 1

    sys.stdout.write(dump_rows(result.rows, pretty=args.pretty))
    sys.stdout.flush()

    if args.verbose:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("rows=%d time=%.2fms", result.count, elapsed_ms)
    return 0


if __name__ == "__main__":
    sys.exit(main())
