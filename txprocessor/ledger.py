"""
ledger.py - Client Account Ledger

The Ledger class is the central state manager for the transaction processor.
It is the only module that mutates state, ensuring controlled changes.

Key responsibilities:
    - Owns every Account and TransactionRecord; both mappings only grow
    - Applies one event at a time, atomically (all effects commit or none do)
    - Raises a typed LedgerError for every rejected event, never swallowing it
    - Verifies the balance invariants on demand
"""

from __future__ import annotations
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

from .core import (
    # Types
    Account, Amount, TransactionRecord, TransactionKind, DisputeStatus,
    ZERO,
    # Exceptions
    LedgerError, AccountLocked, InsufficientFunds, DuplicateTransaction,
    TransactionNotFound,
)
from .events import Event, EventKind, Deposit, Withdrawal, Dispute, Resolve, Chargeback


logger = logging.getLogger(__name__)

# Result of a transition: the account to commit and the record to store (if any).
Transition = Tuple[Account, Optional[TransactionRecord]]


class Ledger:
    """
    In-memory ledger of client accounts and their transactions.

    Design Principles:
        - Pure transitions: each handler reads current state and returns the
          new Account and TransactionRecord values without touching the
          ledger. apply() commits them only if the handler did not raise.
        - No clamping: available may go negative when a deposit is disputed
          after its funds were withdrawn. total stays available + held.
        - Lock applies to money movement only: dispute, resolve and
          chargeback are still processed on a locked account.

    Transaction ids are scoped per client: (client, tx) identifies a record.

    Thread Safety:
        Not thread-safe. Events must be applied from a single ordered stream.

    Example:
        ledger = Ledger()
        ledger.apply(deposit(1, 1, "100.50"))
        ledger.apply(withdrawal(1, 2, "25.25"))
        ledger.get_account(1).available   # Amount('75.2500')
    """

    def __init__(self, name: str = "main"):
        """
        Create an empty ledger.

        Args:
            name: Ledger identifier, used in log messages
        """
        self.name = name
        self._accounts: Dict[int, Account] = {}
        self._transactions: Dict[Tuple[int, int], TransactionRecord] = {}

    # ========================================================================
    # READ-ONLY ACCESS
    # ========================================================================

    def get_account(self, client: int) -> Optional[Account]:
        """Return the client's account, or None if the client never appeared."""
        return self._accounts.get(client)

    def list_clients(self) -> List[int]:
        """Return every client id that has appeared, sorted."""
        return sorted(self._accounts)

    def accounts(self) -> Dict[int, Account]:
        """Return a copy of the client -> Account mapping."""
        return dict(self._accounts)

    def get_transaction(self, client: int, tx: int) -> Optional[TransactionRecord]:
        """Return the client's transaction record `tx`, or None."""
        return self._transactions.get((client, tx))

    def has_transaction(self, client: int, tx: int) -> bool:
        return (client, tx) in self._transactions

    def transaction_count(self, client: int) -> int:
        """Number of deposits and withdrawals recorded for a client."""
        return sum(1 for (owner, _) in self._transactions if owner == client)

    def transactions(self) -> List[TransactionRecord]:
        """All transaction records, ordered by (client, tx)."""
        return [self._transactions[key] for key in sorted(self._transactions)]

    def held_by_disputes(self, client: int) -> Amount:
        """Sum of the client's deposits currently DISPUTED."""
        held = ZERO
        for (owner, _), record in self._transactions.items():
            if owner == client and record.status is DisputeStatus.DISPUTED:
                held = held + record.amount
        return held

    def verify_invariants(self) -> Dict[str, Any]:
        """
        Check the balance invariants for every account.

        Invariants:
            - total == available + held
            - held == sum of the client's DISPUTED deposit amounts
            - held >= 0

        Returns:
            Dict with keys:
            - 'valid': bool - True if every invariant holds
            - 'discrepancies': List[Dict] - one entry per violation, each with
              client, invariant, expected, actual

        Example:
            result = ledger.verify_invariants()
            assert result['valid'], result['discrepancies']
        """
        discrepancies = []
        for client in self.list_clients():
            account = self._accounts[client]
            if account.total != account.available + account.held:
                discrepancies.append({
                    'client': client,
                    'invariant': 'total',
                    'expected': account.available + account.held,
                    'actual': account.total,
                })
            expected_held = self.held_by_disputes(client)
            if account.held != expected_held:
                discrepancies.append({
                    'client': client,
                    'invariant': 'held',
                    'expected': expected_held,
                    'actual': account.held,
                })
            if not account.held.is_non_negative():
                discrepancies.append({
                    'client': client,
                    'invariant': 'held_non_negative',
                    'expected': ZERO,
                    'actual': account.held,
                })
        return {
            'valid': len(discrepancies) == 0,
            'discrepancies': discrepancies,
        }

    # ========================================================================
    # EVENT APPLICATION (Mutating)
    # ========================================================================

    def apply(self, event: Event) -> None:
        """
        Apply a single event atomically.

        The client's account is created (zeroed, unlocked) on first reference,
        even when the event itself is rejected. Apart from that, a rejected
        event leaves every account and transaction record unchanged.

        Check order is fixed so the reported error is deterministic:
        - deposit/withdrawal: lock, duplicate id, then funds
        - dispute/resolve/chargeback: existence for this client, then kind,
          then dispute status

        Args:
            event: Deposit, Withdrawal, Dispute, Resolve or Chargeback

        Raises:
            AccountLocked: Deposit or withdrawal on a locked account
            DuplicateTransaction: Deposit or withdrawal reusing a tx id
            InsufficientFunds: Withdrawal larger than the available balance
            TransactionNotFound: Unknown tx id for this client
            WithdrawalCannotBeDisputed: Dispute on a withdrawal
            AlreadyDisputed: Dispute on a disputed or charged-back deposit
            NotDisputed: Resolve or chargeback on an undisputed transaction
            AlreadyChargedBack: Chargeback on a charged-back deposit
        """
        handler = _HANDLERS.get(getattr(event, "kind", None))
        if handler is None:
            raise TypeError(f"Unsupported event: {event!r}")

        account = self._accounts.get(event.client)
        if account is None:
            account = Account(event.client)
            self._accounts[event.client] = account

        try:
            new_account, record = handler(self, account, event)
        except LedgerError as e:
            logger.debug("%s: rejected %r: %s", self.name, event, e)
            raise

        self._accounts[event.client] = new_account
        if record is not None:
            self._transactions[(record.client, record.tx)] = record

        logger.debug("%s: applied %r -> %r", self.name, event, new_account)
        if new_account.locked and not account.locked:
            logger.info("%s: account %d locked by chargeback of tx %d",
                        self.name, event.client, event.tx)

    def _find_record(self, client: int, tx: int) -> TransactionRecord:
        record = self._transactions.get((client, tx))
        if record is None:
            raise TransactionNotFound()
        return record

    def _apply_deposit(self, account: Account, event: Deposit) -> Transition:
        if account.locked:
            raise AccountLocked()
        if self.has_transaction(event.client, event.tx):
            raise DuplicateTransaction()
        record = TransactionRecord(event.client, event.tx, TransactionKind.DEPOSIT, event.amount)
        return replace(account, available=account.available + event.amount), record

    def _apply_withdrawal(self, account: Account, event: Withdrawal) -> Transition:
        if account.locked:
            raise AccountLocked()
        if self.has_transaction(event.client, event.tx):
            raise DuplicateTransaction()
        if account.available < event.amount:
            raise InsufficientFunds()
        record = TransactionRecord(event.client, event.tx, TransactionKind.WITHDRAWAL, event.amount)
        return replace(account, available=account.available - event.amount), record

    def _apply_dispute(self, account: Account, event: Dispute) -> Transition:
        record = self._find_record(event.client, event.tx).dispute()
        return replace(
            account,
            available=account.available - record.amount,
            held=account.held + record.amount,
        ), record

    def _apply_resolve(self, account: Account, event: Resolve) -> Transition:
        record = self._find_record(event.client, event.tx).resolve()
        return replace(
            account,
            available=account.available + record.amount,
            held=account.held - record.amount,
        ), record

    def _apply_chargeback(self, account: Account, event: Chargeback) -> Transition:
        record = self._find_record(event.client, event.tx).charge_back()
        return replace(account, held=account.held - record.amount, locked=True), record

    # ========================================================================
    # LEDGER OPERATIONS
    # ========================================================================

    def clone(self) -> Ledger:
        """
        Create an independent copy of this ledger.

        Accounts and records are immutable values, so copying the two
        mappings is enough for the clone and the original to evolve
        separately.
        """
        cloned = Ledger.__new__(Ledger)
        cloned.name = self.name
        cloned._accounts = dict(self._accounts)
        cloned._transactions = dict(self._transactions)
        return cloned

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ledger):
            return NotImplemented
        return self._accounts == other._accounts and self._transactions == other._transactions

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"Ledger({self.name!r}, {len(self._accounts)} accounts, "
            f"{len(self._transactions)} transactions)"
        )


# ============================================================================
# HANDLER REGISTRY
# ============================================================================

# Map event kinds to transition functions
_HANDLERS: Dict[EventKind, Callable[[Ledger, Account, Any], Transition]] = {
    EventKind.DEPOSIT: Ledger._apply_deposit,
    EventKind.WITHDRAWAL: Ledger._apply_withdrawal,
    EventKind.DISPUTE: Ledger._apply_dispute,
    EventKind.RESOLVE: Ledger._apply_resolve,
    EventKind.CHARGEBACK: Ledger._apply_chargeback,
}

_unhandled = set(EventKind) - set(_HANDLERS)
if _unhandled:
    raise RuntimeError(f"No ledger handler for event kinds: {sorted(k.value for k in _unhandled)}")
