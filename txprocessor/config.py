"""
Run configuration for the command-line processor.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import argparse

from .logging_config import LOG_LEVELS


@dataclass(frozen=True)
class RunConfig:
    """
    Settings for one processing run. Modify these to change CLI behavior.

    Attributes:
        csv_file: Input CSV of events
        verbose: Print every failed row to stderr
        log_level: Level for the txprocessor logger
        json_logs: Emit log records as JSON
    """
    csv_file: Path
    verbose: bool = False
    log_level: str = "WARNING"
    json_logs: bool = False

    def __post_init__(self):
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}")

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> RunConfig:
        return cls(
            csv_file=Path(args.csv_file),
            verbose=args.verbose,
            log_level=args.log_level.upper(),
            json_logs=args.json_logs,
        )
