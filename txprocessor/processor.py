"""
processor.py - Batch processing of event streams

Feeds events to a Ledger in input order and collects every failure as a
ProcessingError. A bad row never stops the run: the error is recorded and
processing continues with the next row.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, TextIO, Tuple, Union
import logging

from .core import LedgerError
from .csv_source import iter_records, parse_record
from .events import Event
from .ledger import Ledger


logger = logging.getLogger(__name__)


class Stage(Enum):
    """Where a row failed: building the event, or applying it to the ledger."""
    PARSE = "parse"
    APPLY = "apply"


@dataclass(frozen=True, slots=True)
class ProcessingError:
    """
    A failed input row.

    Attributes:
        source: Name of the input (file path or "<stream>")
        line: 1-based line number of the row (header is line 1)
        stage: PARSE or APPLY
        error: The typed LedgerError raised for the row
    """
    source: str
    line: int
    stage: Stage
    error: LedgerError

    def __str__(self) -> str:
        if self.stage is Stage.PARSE:
            return f"Error parsing CSV at {self.source}:{self.line}: {self.error}"
        return f"Error processing transaction at {self.source}:{self.line}: {self.error}"


def _apply_one(
    ledger: Ledger,
    line: int,
    event: Event,
    source: str,
) -> Optional[ProcessingError]:
    try:
        ledger.apply(event)
    except LedgerError as e:
        return ProcessingError(source, line, Stage.APPLY, e)
    return None


def apply_events(
    ledger: Ledger,
    events: Iterable[Tuple[int, Event]],
    source: str = "<events>",
) -> List[ProcessingError]:
    """
    Apply (line, event) pairs in order, collecting rejected events.

    Returns:
        One ProcessingError per rejected event, in input order
    """
    errors: List[ProcessingError] = []
    for line, event in events:
        error = _apply_one(ledger, line, event, source)
        if error is not None:
            errors.append(error)
    return errors


def process_stream(
    stream: TextIO,
    ledger: Optional[Ledger] = None,
    source: str = "<stream>",
) -> Tuple[Ledger, List[ProcessingError]]:
    """
    Process a CSV event stream into a ledger.

    Rows the CSV reader rejects (oversized fields, undecodable bytes) are
    recorded as PARSE errors like any other malformed row.

    Args:
        stream: Text stream positioned at the header row
        ledger: Ledger to apply events to (a new one if None)
        source: Name used in error messages

    Returns:
        (ledger, errors) where errors holds one entry per failed row

    Raises:
        InvalidRecord: If the header row lacks required columns
        csv.Error: If the header row cannot be read
    """
    if ledger is None:
        ledger = Ledger()
    errors: List[ProcessingError] = []
    rows = 0

    for line, record in iter_records(stream):
        rows += 1
        if isinstance(record, LedgerError):
            errors.append(ProcessingError(source, line, Stage.PARSE, record))
            continue
        try:
            event = parse_record(record)
        except LedgerError as e:
            errors.append(ProcessingError(source, line, Stage.PARSE, e))
            continue
        error = _apply_one(ledger, line, event, source)
        if error is not None:
            errors.append(error)

    logger.info("Processed %d rows from %s: %d accounts, %d errors",
                rows, source, len(ledger.list_clients()), len(errors))
    return ledger, errors


def process_csv_file(
    path: Union[str, Path],
    ledger: Optional[Ledger] = None,
) -> Tuple[Ledger, List[ProcessingError]]:
    """
    Process a CSV file of events.

    The file is decoded as UTF-8 with errors="surrogateescape", so a row
    holding invalid bytes is reported on its own line instead of ending
    the run.

    Raises:
        OSError: If the file cannot be opened or read
    """
    path = Path(path)
    with path.open("r", encoding="utf-8-sig", errors="surrogateescape", newline="") as f:
        return process_stream(f, ledger, source=str(path))
