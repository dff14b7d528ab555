"""
events.py - Input Events

Events are just data: one frozen dataclass per kind, each tagged with its
EventKind. Construction validates everything that can be checked without
ledger state (identifier ranges, amount format and sign), so a malformed row
never reaches Ledger.apply().

Core concepts:
1. EventKind: closed set of the five event kinds
2. Deposit / Withdrawal: money movements carrying an Amount
3. Dispute / Resolve / Chargeback: reference an earlier transaction, no amount
4. Factory functions: build events from raw text fields
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, ClassVar, Dict, Optional, Union

from .core import (
    Amount, AmountMustBePositive, InvalidAmountFormat, InvalidRecord,
    CLIENT_ID_MAX, TX_ID_MAX,
)


class EventKind(Enum):
    """Kind of an input event. Values match the CSV `type` column."""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


def _check_ids(client: int, tx: int) -> None:
    if not isinstance(client, int) or isinstance(client, bool) or not 0 <= client <= CLIENT_ID_MAX:
        raise InvalidRecord(f"client id out of range: {client!r}")
    if not isinstance(tx, int) or isinstance(tx, bool) or not 0 <= tx <= TX_ID_MAX:
        raise InvalidRecord(f"transaction id out of range: {tx!r}")


def _check_amount(amount: Amount) -> None:
    if not isinstance(amount, Amount):
        raise TypeError(f"amount must be Amount, got {type(amount).__name__}")
    if not amount.is_positive():
        raise AmountMustBePositive()


# ============================================================================
# EVENT DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class Deposit:
    """Credit `amount` to the client's available balance."""
    client: int
    tx: int
    amount: Amount
    kind: ClassVar[EventKind] = EventKind.DEPOSIT

    def __post_init__(self):
        _check_ids(self.client, self.tx)
        _check_amount(self.amount)


@dataclass(frozen=True, slots=True)
class Withdrawal:
    """Debit `amount` from the client's available balance."""
    client: int
    tx: int
    amount: Amount
    kind: ClassVar[EventKind] = EventKind.WITHDRAWAL

    def __post_init__(self):
        _check_ids(self.client, self.tx)
        _check_amount(self.amount)


@dataclass(frozen=True, slots=True)
class Dispute:
    """Hold the funds of the client's deposit `tx`."""
    client: int
    tx: int
    kind: ClassVar[EventKind] = EventKind.DISPUTE

    def __post_init__(self):
        _check_ids(self.client, self.tx)


@dataclass(frozen=True, slots=True)
class Resolve:
    """Release a dispute on `tx`, returning held funds to available."""
    client: int
    tx: int
    kind: ClassVar[EventKind] = EventKind.RESOLVE

    def __post_init__(self):
        _check_ids(self.client, self.tx)


@dataclass(frozen=True, slots=True)
class Chargeback:
    """Finalize a dispute on `tx`: remove the held funds and lock the account."""
    client: int
    tx: int
    kind: ClassVar[EventKind] = EventKind.CHARGEBACK

    def __post_init__(self):
        _check_ids(self.client, self.tx)


Event = Union[Deposit, Withdrawal, Dispute, Resolve, Chargeback]


# ============================================================================
# EVENT FACTORY FUNCTIONS
# ============================================================================

def _to_amount(amount: Union[str, Amount, None], kind: EventKind) -> Amount:
    if amount is None:
        raise InvalidAmountFormat(f"{kind.value} requires an amount")
    if isinstance(amount, Amount):
        return amount
    return Amount.parse(amount)


def deposit(client: int, tx: int, amount: Union[str, Amount]) -> Deposit:
    """
    Create a deposit event.

    Raises:
        InvalidAmountFormat: If amount is missing or not a valid decimal string
        AmountMustBePositive: If amount is zero or negative
    """
    return Deposit(client, tx, _to_amount(amount, EventKind.DEPOSIT))


def withdrawal(client: int, tx: int, amount: Union[str, Amount]) -> Withdrawal:
    """
    Create a withdrawal event.

    Raises:
        InvalidAmountFormat: If amount is missing or not a valid decimal string
        AmountMustBePositive: If amount is zero or negative
    """
    return Withdrawal(client, tx, _to_amount(amount, EventKind.WITHDRAWAL))


def dispute(client: int, tx: int, amount: object = None) -> Dispute:
    """Create a dispute event. Any amount is ignored."""
    return Dispute(client, tx)


def resolve(client: int, tx: int, amount: object = None) -> Resolve:
    """Create a resolve event. Any amount is ignored."""
    return Resolve(client, tx)


def chargeback(client: int, tx: int, amount: object = None) -> Chargeback:
    """Create a chargeback event. Any amount is ignored."""
    return Chargeback(client, tx)


EVENT_FACTORIES: Dict[EventKind, Callable[..., Event]] = {
    EventKind.DEPOSIT: deposit,
    EventKind.WITHDRAWAL: withdrawal,
    EventKind.DISPUTE: dispute,
    EventKind.RESOLVE: resolve,
    EventKind.CHARGEBACK: chargeback,
}


def parse_kind(text: str) -> EventKind:
    """
    Map a `type` field to an EventKind, ignoring case and surrounding whitespace.

    Raises:
        InvalidRecord: If the text names no known event kind
    """
    try:
        return EventKind(text.strip().lower())
    except (AttributeError, ValueError):
        raise InvalidRecord(f"Unknown transaction type: {text}") from None


def build_event(
    kind: Union[str, EventKind],
    client: int,
    tx: int,
    amount: Optional[str] = None,
) -> Event:
    """
    Build an event from its raw fields.

    An empty amount string counts as missing. Dispute, resolve and
    chargeback never look at the amount.

    Example:
        build_event("deposit", 1, 1, "100.50")  # Deposit(client=1, tx=1, ...)
        build_event("dispute", 1, 1)            # Dispute(client=1, tx=1)
    """
    if not isinstance(kind, EventKind):
        kind = parse_kind(kind)
    if amount is not None and isinstance(amount, str) and not amount.strip():
        amount = None
    return EVENT_FACTORIES[kind](client, tx, amount)
