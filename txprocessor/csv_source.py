"""
CSV event source.

Reads a `type,client,tx,amount` file with csv.reader. Header names and
every field are whitespace-trimmed (spaces and tabs). Streams rows; does not
load the entire file.
"""

from __future__ import annotations

import csv
import re
from typing import Dict, Iterator, List, Optional, TextIO, Tuple, Union

from .core import InvalidRecord, CLIENT_ID_MAX, TX_ID_MAX
from .events import Event, build_event


FIELDNAMES = ("type", "client", "tx", "amount")

Record = Dict[str, Optional[str]]

# Lone surrogates left by decoding with errors="surrogateescape"
_UNDECODABLE = re.compile("[\udc80-\udcff]")


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _has_undecodable(row: List[str]) -> bool:
    return any(_UNDECODABLE.search(field) for field in row)


def iter_records(stream: TextIO) -> Iterator[Tuple[int, Union[Record, InvalidRecord]]]:
    """
    Yield (line_number, record) for each data row.

    line_number is the 1-based line of the row in the file (the header is
    line 1). Blank lines are skipped. Missing trailing columns read as None.

    A row the csv module cannot read (e.g. a field over
    csv.field_size_limit()) or one holding undecodable bytes is yielded as
    (line_number, InvalidRecord) and reading continues with the next line.
    Undecodable bytes are expected as lone surrogates, which is what
    process_csv_file's errors="surrogateescape" produces.

    Raises:
        InvalidRecord: If the header lacks one of the required columns
        csv.Error: If the header row itself cannot be read
    """
    reader = csv.reader(stream, skipinitialspace=True)
    header = next(reader, None)
    if header is None:
        return
    fieldnames = [name.strip().lower() for name in header]
    missing = [name for name in FIELDNAMES if name not in fieldnames]
    # amount may be absent from a file holding only dispute-path rows
    if missing and missing != ["amount"]:
        raise InvalidRecord(f"CSV header is missing columns: {', '.join(missing)}")

    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            # the reader drops the rest of the offending line and resets
            yield reader.line_num, InvalidRecord(f"Malformed CSV row: {e}")
            continue

        if not row or not any(field.strip() for field in row):
            continue
        if _has_undecodable(row):
            yield reader.line_num, InvalidRecord("Invalid UTF-8 in row")
            continue
        record = {name: _clean(value) for name, value in zip(fieldnames, row)}
        yield reader.line_num, record


def _parse_id(value: Optional[str], name: str, maximum: int) -> int:
    if value is None:
        raise InvalidRecord(f"missing {name}")
    if not value.isascii() or not value.isdigit():
        raise InvalidRecord(f"invalid {name}: {value!r}")
    number = int(value)
    if number > maximum:
        raise InvalidRecord(f"{name} out of range: {value}")
    return number


def parse_record(record: Record) -> Event:
    """
    Turn one trimmed CSV record into an event.

    Raises:
        InvalidRecord: Unknown type, missing or invalid client/tx
        InvalidAmountFormat: Bad or missing deposit/withdrawal amount
        AmountMustBePositive: Zero or negative deposit/withdrawal amount
    """
    kind = record.get("type")
    if kind is None:
        raise InvalidRecord("missing type")
    client = _parse_id(record.get("client"), "client", CLIENT_ID_MAX)
    tx = _parse_id(record.get("tx"), "tx", TX_ID_MAX)
    return build_event(kind, client, tx, record.get("amount"))
