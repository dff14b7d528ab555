"""
txprocessor - Client Transaction Processor

Applies deposits, withdrawals and the dispute lifecycle (dispute, resolve,
chargeback) to per-client accounts with exact 4-place decimal arithmetic.

Usage:
    from txprocessor import Ledger, deposit, withdrawal, dispute

    ledger = Ledger()
    ledger.apply(deposit(1, 1, "100.0"))
    ledger.apply(withdrawal(1, 2, "50.0"))
    ledger.apply(dispute(1, 1))

    account = ledger.get_account(1)
    account.available   # Amount('-50.0000')
    account.held        # Amount('100.0000')
    account.total       # Amount('50.0000')

    # Whole files, collecting per-row failures
    ledger, errors = process_csv_file("transactions.csv")
"""

__version__ = '1.0.0'

# Core types
from .core import (
    Amount,
    Account,
    TransactionRecord,
    TransactionKind,
    DisputeStatus,
    LedgerError,
    InvalidAmountFormat,
    AmountMustBePositive,
    AccountLocked,
    InsufficientFunds,
    DuplicateTransaction,
    TransactionNotFound,
    WithdrawalCannotBeDisputed,
    AlreadyDisputed,
    NotDisputed,
    AlreadyChargedBack,
    InvalidRecord,
    ZERO,
    SCALE,
    DECIMAL_PLACES,
    CLIENT_ID_MAX,
    TX_ID_MAX,
)

# Events
from .events import (
    Event,
    EventKind,
    Deposit,
    Withdrawal,
    Dispute,
    Resolve,
    Chargeback,
    deposit,
    withdrawal,
    dispute,
    resolve,
    chargeback,
    build_event,
    parse_kind,
    EVENT_FACTORIES,
)

# Ledger
from .ledger import Ledger

# CSV input, processing and report
from .csv_source import iter_records, parse_record
from .processor import (
    ProcessingError,
    Stage,
    apply_events,
    process_stream,
    process_csv_file,
)
from .report import REPORT_COLUMNS, account_row, write_report, render_report

__all__ = [
    # Core
    'Amount', 'Account', 'TransactionRecord', 'TransactionKind', 'DisputeStatus',
    'ZERO', 'SCALE', 'DECIMAL_PLACES', 'CLIENT_ID_MAX', 'TX_ID_MAX',
    # Errors
    'LedgerError', 'InvalidAmountFormat', 'AmountMustBePositive', 'AccountLocked',
    'InsufficientFunds', 'DuplicateTransaction', 'TransactionNotFound',
    'WithdrawalCannotBeDisputed', 'AlreadyDisputed', 'NotDisputed',
    'AlreadyChargedBack', 'InvalidRecord',
    # Events
    'Event', 'EventKind', 'Deposit', 'Withdrawal', 'Dispute', 'Resolve', 'Chargeback',
    'deposit', 'withdrawal', 'dispute', 'resolve', 'chargeback',
    'build_event', 'parse_kind', 'EVENT_FACTORIES',
    # Ledger
    'Ledger',
    # Processing
    'iter_records', 'parse_record',
    'ProcessingError', 'Stage', 'apply_events', 'process_stream', 'process_csv_file',
    # Report
    'REPORT_COLUMNS', 'account_row', 'write_report', 'render_report',
]
