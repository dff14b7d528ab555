"""
test_ledger.py - Unit tests for ledger.py

Tests:
- Account creation and read access
- Deposits and withdrawals (lock, duplicates, funds)
- Dispute, resolve and chargeback transitions
- Error precedence
- Transaction id scoping per client
- Reference scenarios
- clone() and verify_invariants()
"""

import pytest

from txprocessor import (
    Ledger, Amount, Account, DisputeStatus, TransactionKind, ZERO,
    deposit, withdrawal, dispute, resolve, chargeback,
    AccountLocked, InsufficientFunds, DuplicateTransaction, TransactionNotFound,
    WithdrawalCannotBeDisputed, AlreadyDisputed, NotDisputed, AlreadyChargedBack,
)


A = Amount.parse


def _balances(ledger: Ledger, client: int):
    account = ledger.get_account(client)
    return str(account.available), str(account.held), str(account.total), account.locked


class TestLedgerCreation:
    """Tests for a fresh ledger and lazy account creation."""

    def test_empty_ledger(self, ledger):
        assert ledger.list_clients() == []
        assert ledger.get_account(1) is None
        assert ledger.accounts() == {}
        assert ledger.transactions() == []

    def test_first_event_creates_account(self, ledger):
        ledger.apply(deposit(5, 1, "1.0"))
        assert ledger.list_clients() == [5]
        assert ledger.get_account(5).client == 5

    def test_rejected_event_still_registers_client(self, ledger):
        """A client that appeared only in failed events reports zero balances."""
        with pytest.raises(TransactionNotFound):
            ledger.apply(dispute(9, 1))
        assert ledger.get_account(9) == Account(9)

    def test_list_clients_sorted(self, ledger):
        for client in (3, 1, 2):
            ledger.apply(deposit(client, client, "1"))
        assert ledger.list_clients() == [1, 2, 3]

    def test_repr(self, funded_ledger):
        assert repr(funded_ledger) == "Ledger('test', 1 accounts, 1 transactions)"

    def test_unsupported_event(self, ledger):
        with pytest.raises(TypeError, match="Unsupported event"):
            ledger.apply(object())


class TestDepositsAndWithdrawals:
    """Tests for money movement."""

    def test_deposit(self, ledger):
        ledger.apply(deposit(1, 1, "100.50"))
        assert _balances(ledger, 1) == ("100.5000", "0.0000", "100.5000", False)

    def test_deposit_records_transaction(self, ledger):
        ledger.apply(deposit(1, 1, "100.50"))
        record = ledger.get_transaction(1, 1)
        assert record.kind is TransactionKind.DEPOSIT
        assert record.amount == A("100.50")
        assert record.status is DisputeStatus.NORMAL

    def test_withdrawal(self, funded_ledger):
        funded_ledger.apply(withdrawal(1, 2, "25.25"))
        assert _balances(funded_ledger, 1) == ("74.7500", "0.0000", "74.7500", False)
        assert funded_ledger.get_transaction(1, 2).kind is TransactionKind.WITHDRAWAL

    def test_withdraw_entire_balance(self, funded_ledger):
        funded_ledger.apply(withdrawal(1, 2, "100"))
        assert funded_ledger.get_account(1).available == ZERO

    def test_insufficient_funds(self, funded_ledger):
        with pytest.raises(InsufficientFunds):
            funded_ledger.apply(withdrawal(1, 2, "100.0001"))
        assert funded_ledger.get_account(1).available == A("100")
        assert not funded_ledger.has_transaction(1, 2)

    def test_rejected_withdrawal_leaves_state(self, locked_ledger, snapshot):
        """Every account and record is unchanged after a rejected event."""
        before = snapshot(locked_ledger)
        with pytest.raises(AccountLocked):
            locked_ledger.apply(withdrawal(1, 4, "1"))
        assert snapshot(locked_ledger) == before

    def test_withdrawal_from_new_client(self, ledger):
        with pytest.raises(InsufficientFunds):
            ledger.apply(withdrawal(2, 1, "1"))
        assert ledger.get_account(2) == Account(2)

    def test_held_funds_not_withdrawable(self, disputed_ledger):
        with pytest.raises(InsufficientFunds):
            disputed_ledger.apply(withdrawal(1, 2, "0.0001"))

    def test_duplicate_deposit_id(self, funded_ledger):
        with pytest.raises(DuplicateTransaction):
            funded_ledger.apply(deposit(1, 1, "5"))
        assert funded_ledger.get_account(1).available == A("100")
        assert funded_ledger.get_transaction(1, 1).amount == A("100")

    def test_duplicate_withdrawal_id(self, funded_ledger):
        funded_ledger.apply(withdrawal(1, 2, "5"))
        with pytest.raises(DuplicateTransaction):
            funded_ledger.apply(withdrawal(1, 2, "5"))
        assert funded_ledger.get_account(1).available == A("95")

    def test_locked_account_rejects_deposit(self, locked_ledger):
        with pytest.raises(AccountLocked):
            locked_ledger.apply(deposit(1, 10, "50.0"))

    def test_locked_account_rejects_withdrawal(self, locked_ledger):
        with pytest.raises(AccountLocked):
            locked_ledger.apply(withdrawal(1, 10, "1.0"))

    def test_lock_checked_before_duplicate_and_funds(self, locked_ledger):
        with pytest.raises(AccountLocked):
            locked_ledger.apply(deposit(1, 1, "1.0"))
        with pytest.raises(AccountLocked):
            locked_ledger.apply(withdrawal(1, 11, "1000000"))

    def test_duplicate_checked_before_funds(self, funded_ledger):
        with pytest.raises(DuplicateTransaction):
            funded_ledger.apply(withdrawal(1, 1, "1000000"))

    def test_transaction_count(self, funded_ledger):
        funded_ledger.apply(withdrawal(1, 2, "25.5"))
        funded_ledger.apply(deposit(1, 3, "50"))
        funded_ledger.apply(deposit(2, 4, "1"))
        assert funded_ledger.transaction_count(1) == 3
        assert funded_ledger.transaction_count(2) == 1
        assert funded_ledger.has_transaction(1, 2)
        assert not funded_ledger.has_transaction(1, 4)


class TestDisputes:
    """Tests for dispute, resolve and chargeback."""

    def test_dispute_moves_funds_to_held(self, disputed_ledger):
        assert _balances(disputed_ledger, 1) == ("0.0000", "100.0000", "100.0000", False)
        assert disputed_ledger.get_transaction(1, 1).status is DisputeStatus.DISPUTED

    def test_resolve_releases_funds(self, disputed_ledger):
        disputed_ledger.apply(resolve(1, 1))
        assert _balances(disputed_ledger, 1) == ("100.0000", "0.0000", "100.0000", False)
        assert disputed_ledger.get_transaction(1, 1).status is DisputeStatus.NORMAL

    def test_chargeback_removes_funds_and_locks(self, disputed_ledger):
        disputed_ledger.apply(chargeback(1, 1))
        assert _balances(disputed_ledger, 1) == ("0.0000", "0.0000", "0.0000", True)
        assert disputed_ledger.get_transaction(1, 1).status is DisputeStatus.CHARGED_BACK

    def test_dispute_unknown(self, funded_ledger):
        with pytest.raises(TransactionNotFound):
            funded_ledger.apply(dispute(1, 999))

    def test_dispute_withdrawal(self, funded_ledger):
        funded_ledger.apply(withdrawal(1, 2, "10"))
        with pytest.raises(WithdrawalCannotBeDisputed):
            funded_ledger.apply(dispute(1, 2))

    def test_dispute_twice(self, disputed_ledger):
        with pytest.raises(AlreadyDisputed):
            disputed_ledger.apply(dispute(1, 1))
        assert disputed_ledger.get_account(1).held == A("100")

    def test_dispute_charged_back(self, locked_ledger):
        with pytest.raises(AlreadyDisputed):
            locked_ledger.apply(dispute(1, 1))

    def test_resolve_unknown(self, funded_ledger):
        with pytest.raises(TransactionNotFound):
            funded_ledger.apply(resolve(1, 999))

    def test_resolve_undisputed(self, funded_ledger):
        with pytest.raises(NotDisputed):
            funded_ledger.apply(resolve(1, 1))

    def test_resolve_charged_back(self, locked_ledger):
        with pytest.raises(NotDisputed):
            locked_ledger.apply(resolve(1, 1))

    def test_chargeback_unknown(self, funded_ledger):
        with pytest.raises(TransactionNotFound):
            funded_ledger.apply(chargeback(1, 999))

    def test_chargeback_undisputed(self, funded_ledger):
        with pytest.raises(NotDisputed):
            funded_ledger.apply(chargeback(1, 1))
        assert not funded_ledger.get_account(1).locked

    def test_chargeback_twice(self, locked_ledger):
        with pytest.raises(AlreadyChargedBack):
            locked_ledger.apply(chargeback(1, 1))

    def test_chargeback_after_resolve(self, disputed_ledger):
        """A resolved deposit must be re-disputed before it can be charged back."""
        disputed_ledger.apply(resolve(1, 1))
        with pytest.raises(NotDisputed):
            disputed_ledger.apply(chargeback(1, 1))
        disputed_ledger.apply(dispute(1, 1))
        disputed_ledger.apply(chargeback(1, 1))
        assert disputed_ledger.get_account(1).locked

    def test_redispute_after_resolve(self, disputed_ledger):
        disputed_ledger.apply(resolve(1, 1))
        disputed_ledger.apply(dispute(1, 1))
        assert _balances(disputed_ledger, 1) == ("0.0000", "100.0000", "100.0000", False)

    def test_dispute_path_allowed_on_locked_account(self, locked_ledger):
        """Locked accounts still adjudicate outstanding disputes."""
        locked_ledger.apply(dispute(1, 2))
        assert _balances(locked_ledger, 1) == ("-10.0000", "40.0000", "30.0000", True)
        locked_ledger.apply(resolve(1, 2))
        assert _balances(locked_ledger, 1) == ("30.0000", "0.0000", "30.0000", True)
        locked_ledger.apply(dispute(1, 2))
        locked_ledger.apply(chargeback(1, 2))
        assert _balances(locked_ledger, 1) == ("-10.0000", "0.0000", "-10.0000", True)

    def test_multiple_open_disputes(self, ledger):
        ledger.apply(deposit(1, 1, "10"))
        ledger.apply(deposit(1, 2, "20"))
        ledger.apply(deposit(1, 3, "30"))
        ledger.apply(dispute(1, 1))
        ledger.apply(dispute(1, 3))
        assert ledger.get_account(1).held == A("40")
        assert ledger.held_by_disputes(1) == A("40")
        ledger.apply(resolve(1, 3))
        assert ledger.get_account(1).held == A("10")


class TestErrorPrecedence:
    """Existence is checked before kind, and kind before status."""

    def test_unknown_id_reports_not_found(self, ledger):
        ledger.apply(deposit(1, 1, "10"))
        ledger.apply(withdrawal(1, 2, "5"))
        with pytest.raises(TransactionNotFound):
            ledger.apply(dispute(1, 3))

    def test_withdrawal_kind_before_status(self, ledger):
        ledger.apply(deposit(1, 1, "10"))
        ledger.apply(withdrawal(1, 2, "5"))
        with pytest.raises(WithdrawalCannotBeDisputed):
            ledger.apply(dispute(1, 2))


class TestTransactionIdScoping:
    """Transaction ids are scoped to the client that created them."""

    def test_same_id_for_two_clients(self, ledger):
        ledger.apply(deposit(1, 1, "10"))
        ledger.apply(deposit(2, 1, "20"))
        assert ledger.get_account(1).available == A("10")
        assert ledger.get_account(2).available == A("20")
        assert ledger.get_transaction(2, 1).amount == A("20")

    def test_dispute_by_other_client_not_found(self, ledger):
        ledger.apply(deposit(1, 1, "10"))
        with pytest.raises(TransactionNotFound):
            ledger.apply(dispute(2, 1))
        assert ledger.get_account(1).held == ZERO
        assert ledger.get_account(2) == Account(2)

    def test_dispute_targets_stated_clients_record(self, ledger):
        ledger.apply(deposit(1, 1, "10"))
        ledger.apply(deposit(2, 1, "20"))
        ledger.apply(dispute(2, 1))
        assert ledger.get_account(1).held == ZERO
        assert ledger.get_account(2).held == A("20")


class TestScenarios:
    """Reference scenarios."""

    def test_deposit_then_withdrawal(self, ledger):
        ledger.apply(deposit(1, 1, "100.50"))
        ledger.apply(withdrawal(1, 2, "25.25"))
        assert _balances(ledger, 1) == ("75.2500", "0.0000", "75.2500", False)

    def test_dispute_after_withdrawal_goes_negative(self, ledger):
        ledger.apply(deposit(1, 1, "100.0"))
        ledger.apply(withdrawal(1, 2, "50.0"))
        ledger.apply(dispute(1, 1))
        assert _balances(ledger, 1) == ("-50.0000", "100.0000", "50.0000", False)

    def test_chargeback_locks_account(self, ledger):
        ledger.apply(deposit(1, 1, "100.0"))
        ledger.apply(dispute(1, 1))
        ledger.apply(chargeback(1, 1))
        assert _balances(ledger, 1) == ("0.0000", "0.0000", "0.0000", True)
        with pytest.raises(AccountLocked):
            ledger.apply(deposit(1, 2, "50.0"))
        assert _balances(ledger, 1) == ("0.0000", "0.0000", "0.0000", True)

    def test_dispute_lookup_failures(self, ledger):
        ledger.apply(deposit(1, 1, "100.0"))
        ledger.apply(withdrawal(1, 2, "10.0"))
        with pytest.raises(TransactionNotFound):
            ledger.apply(dispute(1, 999))
        with pytest.raises(WithdrawalCannotBeDisputed):
            ledger.apply(dispute(1, 2))
        ledger.apply(dispute(1, 1))
        ledger.apply(chargeback(1, 1))
        with pytest.raises(AlreadyChargedBack):
            ledger.apply(chargeback(1, 1))

    def test_precision(self, ledger):
        ledger.apply(deposit(1, 1, "0.0001"))
        ledger.apply(deposit(1, 2, "0.9999"))
        ledger.apply(withdrawal(1, 3, "1.0"))
        assert ledger.get_account(1).available == ZERO


class TestCloneAndInvariants:
    """Tests for clone() and verify_invariants()."""

    def test_clone_is_equal(self, disputed_ledger):
        assert disputed_ledger.clone() == disputed_ledger

    def test_clone_is_independent(self, disputed_ledger):
        cloned = disputed_ledger.clone()
        cloned.apply(resolve(1, 1))
        cloned.apply(deposit(2, 1, "1"))
        assert disputed_ledger.get_account(1).held == A("100")
        assert disputed_ledger.get_account(2) is None
        assert cloned != disputed_ledger

    def test_invariants_hold(self, locked_ledger):
        locked_ledger.apply(dispute(1, 2))
        result = locked_ledger.verify_invariants()
        assert result['valid'], result['discrepancies']

    def test_invariants_detect_corruption(self, disputed_ledger):
        # Simulate corrupted state to prove the check can fail
        disputed_ledger._accounts[1] = Account(1, available=ZERO, held=A("1"))
        result = disputed_ledger.verify_invariants()
        assert not result['valid']
        assert result['discrepancies'][0]['invariant'] == 'held'
        assert result['discrepancies'][0]['expected'] == A("100")
