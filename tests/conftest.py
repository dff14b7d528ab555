"""
conftest.py - Shared pytest fixtures for transaction processor tests

Provides common fixtures used across unit, conformance and functional tests:
- Ledgers (empty, funded, with an open dispute, locked)
- CSV file factory for end-to-end processing
- Ledger state snapshots for before/after comparisons
"""

import textwrap
from pathlib import Path
from typing import Callable, Dict, Tuple

import pytest

from txprocessor import (
    Ledger, Account, TransactionRecord,
    deposit, withdrawal, dispute, chargeback,
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def ledger_snapshot(ledger: Ledger) -> Tuple[Dict[int, Account], Dict[Tuple[int, int], TransactionRecord]]:
    """Capture every account and transaction record of a ledger."""
    accounts = ledger.accounts()
    records = {(r.client, r.tx): r for r in ledger.transactions()}
    return accounts, records


# =============================================================================
# LEDGER FIXTURES
# =============================================================================

@pytest.fixture
def ledger() -> Ledger:
    """Empty ledger."""
    return Ledger("test")


@pytest.fixture
def funded_ledger() -> Ledger:
    """Client 1 with a single 100.0 deposit as tx 1."""
    ledger = Ledger("test")
    ledger.apply(deposit(1, 1, "100.0"))
    return ledger


@pytest.fixture
def disputed_ledger(funded_ledger) -> Ledger:
    """Client 1's deposit tx 1 under dispute."""
    funded_ledger.apply(dispute(1, 1))
    return funded_ledger


@pytest.fixture
def locked_ledger() -> Ledger:
    """Client 1 locked by a chargeback of tx 1, with tx 2 still open."""
    ledger = Ledger("test")
    ledger.apply(deposit(1, 1, "100.0"))
    ledger.apply(deposit(1, 2, "40.0"))
    ledger.apply(withdrawal(1, 3, "10.0"))
    ledger.apply(dispute(1, 1))
    ledger.apply(chargeback(1, 1))
    return ledger


@pytest.fixture
def snapshot() -> Callable[[Ledger], tuple]:
    """Return the ledger_snapshot helper."""
    return ledger_snapshot


# =============================================================================
# CSV FIXTURES
# =============================================================================

@pytest.fixture
def write_csv(tmp_path) -> Callable[[str], Path]:
    """Factory writing dedented CSV content to a temporary file."""
    counter = {"n": 0}

    def _write(content: str, name: str = None) -> Path:
        counter["n"] += 1
        path = tmp_path / (name or f"transactions_{counter['n']}.csv")
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return path

    return _write
