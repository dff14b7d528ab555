"""
Command-line entry point.

Processes a CSV file of transactions and prints the final account table:

    txprocessor transactions.csv > accounts.csv
    txprocessor -v transactions.csv          # also list failed rows on stderr
    python -m txprocessor --log-level INFO transactions.csv
"""

from __future__ import annotations

import argparse
import csv
import sys
from typing import List, Optional

from . import __version__
from .config import RunConfig
from .core import InvalidRecord
from .logging_config import LOG_LEVELS, setup_logging
from .processor import process_csv_file
from .report import write_report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="txprocessor",
        description="A transaction processing engine that processes CSV files "
                    "containing financial transactions",
    )
    parser.add_argument(
        "csv_file",
        help="Input CSV file containing transactions",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print detailed error messages to stderr",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
        help="Log level for diagnostic output on stderr (default: WARNING)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit diagnostic log records as JSON",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    config = RunConfig.from_args(build_parser().parse_args(argv))
    setup_logging(config.log_level, json_format=config.json_logs)

    try:
        ledger, errors = process_csv_file(config.csv_file)
    except (OSError, csv.Error, InvalidRecord) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if config.verbose:
        for error in errors:
            print(error, file=sys.stderr)

    write_report(ledger, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
