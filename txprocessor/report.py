"""
Account report rendering.

One CSV row per client that has ever appeared:
`client,available,held,total,locked` with amounts at 4 fractional digits and
`locked` as `true`/`false`. Rows are sorted by client id.
"""

from __future__ import annotations

import csv
import io
from typing import List, TextIO

from .core import Account
from .ledger import Ledger


REPORT_COLUMNS = ("client", "available", "held", "total", "locked")


def account_row(account: Account) -> List[str]:
    return [
        str(account.client),
        str(account.available),
        str(account.held),
        str(account.total),
        "true" if account.locked else "false",
    ]


def write_report(ledger: Ledger, stream: TextIO) -> None:
    """Write the header and one row per account to `stream`."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(REPORT_COLUMNS)
    for client in ledger.list_clients():
        writer.writerow(account_row(ledger.get_account(client)))


def render_report(ledger: Ledger) -> str:
    buffer = io.StringIO()
    write_report(ledger, buffer)
    return buffer.getvalue()
