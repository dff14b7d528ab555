"""
Core types and pure functions for the transaction processor.

This module provides the foundational data structures of the ledger engine:
1. Exceptions: LedgerError and the typed failures an event can produce
2. Amount: exact fixed-point value with 4 fractional digits
3. TransactionRecord: a deposit or withdrawal plus its dispute status
4. Account: one client's available/held balances and lock flag

Every type here is immutable. State changes are expressed by building a new
value (dataclasses.replace), which the Ledger then commits. No function in
this module can mutate ledger state directly.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Optional


# ============================================================================
# CONSTANTS
# ============================================================================

# Number of fractional digits carried by every Amount.
DECIMAL_PLACES = 4

# Raw units per whole unit (Amount stores a count of 1/10000ths).
SCALE = 10 ** DECIMAL_PLACES

# Largest raw magnitude accepted by Amount.parse (signed 64-bit range).
MAX_RAW = 2 ** 63 - 1

# Identifier ranges accepted on input.
CLIENT_ID_MAX = 2 ** 16 - 1
TX_ID_MAX = 2 ** 32 - 1

_ASCII_DIGITS = frozenset("0123456789")


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for every failure an event can produce."""
    message = "Ledger error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class InvalidAmountFormat(LedgerError):
    """Raised when an amount string is not a valid 4-place decimal."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Invalid amount format: {detail}")


class AmountMustBePositive(LedgerError):
    """Raised for a zero or negative deposit/withdrawal amount."""
    message = "Amount must be positive"


class AccountLocked(LedgerError):
    """Raised when a deposit or withdrawal targets a locked account."""
    message = "Account is locked"


class InsufficientFunds(LedgerError):
    """Raised when a withdrawal exceeds the available balance."""
    message = "Insufficient funds"


class DuplicateTransaction(LedgerError):
    """Raised when a deposit or withdrawal reuses a client's transaction id."""
    message = "Duplicate transaction id"


class TransactionNotFound(LedgerError):
    """Raised when a dispute, resolve or chargeback names an unknown transaction."""
    message = "Transaction not found"


class WithdrawalCannotBeDisputed(LedgerError):
    """Raised when a dispute targets a withdrawal."""
    message = "Withdrawal transaction cannot be disputed"


class AlreadyDisputed(LedgerError):
    """Raised when a dispute targets a disputed or charged-back transaction."""
    message = "Transaction already disputed"


class NotDisputed(LedgerError):
    """Raised when a resolve or chargeback targets an undisputed transaction."""
    message = "Transaction is not disputed"


class AlreadyChargedBack(LedgerError):
    """Raised when a chargeback targets a transaction already charged back."""
    message = "Transaction already charged back"


class InvalidRecord(LedgerError, ValueError):
    """Raised when an input record is malformed (unknown type, bad identifiers)."""
    message = "Invalid record"


# ============================================================================
# AMOUNT
# ============================================================================

def _is_digits(text: str) -> bool:
    # str.isdigit() accepts non-ASCII digits such as "²"
    return all(ch in _ASCII_DIGITS for ch in text)


@dataclass(frozen=True, slots=True, order=True)
class Amount:
    """
    Exact decimal amount with at most 4 fractional digits.

    Stored as an integer count of 1/10000ths, so addition, subtraction and
    comparison are plain integer operations with no rounding anywhere.

    Attributes:
        raw: Scaled integer value (Amount.parse("1.5").raw == 15000)

    Example:
        >>> Amount.parse("100.50") - Amount.parse("25.25")
        Amount('75.2500')
    """
    raw: int

    def __post_init__(self):
        if not isinstance(self.raw, int) or isinstance(self.raw, bool):
            raise TypeError(f"Amount raw value must be int, got {type(self.raw).__name__}")

    @classmethod
    def from_raw(cls, raw: int) -> Amount:
        """Build an Amount from a count of 1/10000ths."""
        return cls(raw)

    @classmethod
    def parse(cls, text: str) -> Amount:
        """
        Parse a decimal string such as "123", "12.5", ".5" or "0.1234".

        Surrounding whitespace is ignored and a single leading "-" is
        accepted. The fractional part is right-padded to 4 digits.

        Raises:
            InvalidAmountFormat: On an empty string, a non-digit character,
                more than one decimal point, more than 4 fractional digits,
                no digits at all, or a value outside the signed 64-bit range.
        """
        if not isinstance(text, str):
            raise InvalidAmountFormat(f"expected a string, got {type(text).__name__}")
        value = text.strip()
        if not value:
            raise InvalidAmountFormat("Empty string")

        negative = value.startswith("-")
        digits = value[1:] if negative else value

        parts = digits.split(".")
        if len(parts) > 2:
            raise InvalidAmountFormat(f"Invalid format: {value} (multiple decimal points)")
        whole = parts[0]
        fraction = parts[1] if len(parts) == 2 else ""

        if not whole and not fraction:
            raise InvalidAmountFormat(f"Invalid number: {value}")
        if not _is_digits(whole):
            raise InvalidAmountFormat(f"Invalid whole number: {whole}")
        if not _is_digits(fraction):
            raise InvalidAmountFormat(f"Invalid decimal: {fraction}")
        if len(fraction) > DECIMAL_PLACES:
            raise InvalidAmountFormat(
                f"Too many decimal places: {len(fraction)} (max {DECIMAL_PLACES})"
            )

        raw = int(whole or "0") * SCALE + int(fraction.ljust(DECIMAL_PLACES, "0"))
        if raw > MAX_RAW:
            raise InvalidAmountFormat(f"Out of range: {value}")
        return cls(-raw if negative else raw)

    def is_positive(self) -> bool:
        return self.raw > 0

    def is_non_negative(self) -> bool:
        return self.raw >= 0

    def to_decimal(self) -> Decimal:
        """Exact Decimal equivalent, e.g. Decimal("75.2500")."""
        return Decimal(str(self))

    def __add__(self, other: Amount) -> Amount:
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(self.raw + other.raw)

    def __sub__(self, other: Amount) -> Amount:
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(self.raw - other.raw)

    def __neg__(self) -> Amount:
        return Amount(-self.raw)

    def __str__(self) -> str:
        sign = "-" if self.raw < 0 else ""
        whole, fraction = divmod(abs(self.raw), SCALE)
        return f"{sign}{whole}.{fraction:0{DECIMAL_PLACES}d}"

    def __repr__(self) -> str:
        return f"Amount('{self}')"


ZERO = Amount(0)


# ============================================================================
# ENUMS
# ============================================================================

class TransactionKind(Enum):
    """Kind of money movement that created a TransactionRecord."""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class DisputeStatus(Enum):
    """
    Dispute lifecycle of a TransactionRecord.

    NORMAL: Initial state for every record; funds are available.
    DISPUTED: Deposit under dispute; its amount is held.
    CHARGED_BACK: Terminal; held funds were removed and the account locked.
    """
    NORMAL = "normal"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


# ============================================================================
# TRANSACTION RECORD
# ============================================================================

@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """
    An accepted deposit or withdrawal and its dispute status.

    The amount and kind never change after creation. Status transitions
    return a new record; the caller decides whether to commit it.

        NORMAL --dispute--> DISPUTED --resolve--> NORMAL
                            DISPUTED --chargeback--> CHARGED_BACK

    Only deposits can leave NORMAL.

    Attributes:
        client: Owning client id
        tx: Transaction id (unique per client)
        kind: DEPOSIT or WITHDRAWAL
        amount: Strictly positive amount moved at creation
        status: Current dispute status
    """
    client: int
    tx: int
    kind: TransactionKind
    amount: Amount
    status: DisputeStatus = DisputeStatus.NORMAL

    def __post_init__(self):
        if not isinstance(self.amount, Amount):
            raise TypeError(f"TransactionRecord amount must be Amount, got {type(self.amount).__name__}")
        if not self.amount.is_positive():
            raise AmountMustBePositive()
        if self.kind is TransactionKind.WITHDRAWAL and self.status is not DisputeStatus.NORMAL:
            raise ValueError("Withdrawal records can only be NORMAL")

    @property
    def is_disputed(self) -> bool:
        return self.status is DisputeStatus.DISPUTED

    def dispute(self) -> TransactionRecord:
        """
        Move a NORMAL deposit to DISPUTED.

        Raises:
            WithdrawalCannotBeDisputed: If this record is a withdrawal
            AlreadyDisputed: If the record is DISPUTED or CHARGED_BACK
        """
        if self.kind is TransactionKind.WITHDRAWAL:
            raise WithdrawalCannotBeDisputed()
        if self.status is not DisputeStatus.NORMAL:
            raise AlreadyDisputed()
        return replace(self, status=DisputeStatus.DISPUTED)

    def resolve(self) -> TransactionRecord:
        """
        Move a DISPUTED deposit back to NORMAL.

        Raises:
            NotDisputed: If the record is not currently DISPUTED
        """
        if self.status is not DisputeStatus.DISPUTED:
            raise NotDisputed()
        return replace(self, status=DisputeStatus.NORMAL)

    def charge_back(self) -> TransactionRecord:
        """
        Move a DISPUTED deposit to CHARGED_BACK.

        Raises:
            AlreadyChargedBack: If the record is already CHARGED_BACK
            NotDisputed: If the record is NORMAL
        """
        if self.status is DisputeStatus.CHARGED_BACK:
            raise AlreadyChargedBack()
        if self.status is not DisputeStatus.DISPUTED:
            raise NotDisputed()
        return replace(self, status=DisputeStatus.CHARGED_BACK)


# ============================================================================
# ACCOUNT
# ============================================================================

@dataclass(frozen=True, slots=True)
class Account:
    """
    One client's balances.

    Attributes:
        client: Client id
        available: Funds the client may withdraw (can be negative after a
            dispute on a deposit whose funds were already withdrawn)
        held: Funds frozen against open disputes
        locked: True after a chargeback; never reset

    total is derived from available and held on every read.
    """
    client: int
    available: Amount = ZERO
    held: Amount = ZERO
    locked: bool = False

    @property
    def total(self) -> Amount:
        return self.available + self.held

    def __repr__(self) -> str:
        return (
            f"Account(client={self.client}, available={self.available}, "
            f"held={self.held}, total={self.total}, locked={self.locked})"
        )
