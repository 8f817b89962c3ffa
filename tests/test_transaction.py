"""Tests for the transaction service and balance effects."""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from pocketbook.domain.entities import PaymentMethod, TransactionSplit, TransactionType
from pocketbook.domain.errors import CreditLimitExceededError, NotFoundError, ValidationError
from pocketbook.domain.state import Book


def _expense(service, amount, **kwargs):
    kwargs.setdefault("date", date(2024, 3, 10))
    kwargs.setdefault("description", "Expense")
    kwargs.setdefault("payment_method", PaymentMethod.BANK_TRANSFER)
    return service.create_transaction(
        amount=Decimal(amount), type=TransactionType.EXPENSE, **kwargs
    )


def _balance(book, account_id):
    return next(a for a in book.collection("bank_accounts") if a.id == account_id).current_balance


def _available(book, card_id):
    return next(c for c in book.collection("credit_cards") if c.id == card_id).available_balance


def test_income_credits_bank_account(transaction_service, sample_account, book):
    """Test income linked to an account raises its balance."""
    transaction_service.create_transaction(
        date=date(2024, 3, 1),
        description="Salary",
        amount=Decimal("1500.50"),
        type=TransactionType.INCOME,
        payment_method=PaymentMethod.BANK_TRANSFER,
        bank_account_id=sample_account.id,
    )
    assert _balance(book, sample_account.id) == Decimal("11500.50")


def test_cash_expense_leaves_bank_alone(transaction_service, sample_account, book):
    """Test cash expenses don't touch a linked account."""
    _expense(
        transaction_service, "200", payment_method=PaymentMethod.CASH, bank_account_id=sample_account.id
    )
    assert _balance(book, sample_account.id) == Decimal("10000")


def test_delete_restores_balances(transaction_service, sample_account, sample_card, book):
    """Test create then delete leaves account and card balances unchanged."""
    bank_txn = _expense(transaction_service, "1200", bank_account_id=sample_account.id)
    card_txn = _expense(
        transaction_service,
        "800",
        payment_method=PaymentMethod.CREDIT_CARD,
        credit_card_id=sample_card.id,
    )
    assert _balance(book, sample_account.id) == Decimal("8800")
    assert _available(book, sample_card.id) == Decimal("4200")

    transaction_service.delete_transaction(bank_txn.id)
    transaction_service.delete_transaction(card_txn.id)

    assert _balance(book, sample_account.id) == Decimal("10000")
    assert _available(book, sample_card.id) == Decimal("5000")
    assert book.collection("transactions") == []


def test_update_moves_balance_effect(transaction_service, sample_account, book):
    """Test updating a transaction reverses the old effect and applies the new one."""
    txn = _expense(transaction_service, "1000", bank_account_id=sample_account.id)
    transaction_service.update_transaction(replace(txn, amount=Decimal("300")))
    assert _balance(book, sample_account.id) == Decimal("9700")

    transaction_service.update_transaction(
        replace(txn, amount=Decimal("300"), payment_method=PaymentMethod.CASH)
    )
    assert _balance(book, sample_account.id) == Decimal("10000")


def test_unknown_transaction_id_changes_nothing(transaction_service, sample_account, book):
    """Test updating or deleting a missing transaction raises and leaves the ledger alone."""
    txn = _expense(transaction_service, "1000", bank_account_id=sample_account.id)
    ledger = book.collection("transactions")

    with pytest.raises(NotFoundError):
        transaction_service.update_transaction(replace(txn, id="missing", amount=Decimal("5")))
    with pytest.raises(NotFoundError):
        transaction_service.delete_transaction("missing")

    assert book.collection("transactions") == ledger
    assert _balance(book, sample_account.id) == Decimal("9000")


def test_card_charge_over_available_is_rejected(transaction_service, sample_card, book, temp_store):
    """Test a charge above the available balance fails and changes nothing."""
    with pytest.raises(CreditLimitExceededError):
        _expense(
            transaction_service,
            "6000",
            payment_method=PaymentMethod.CREDIT_CARD,
            credit_card_id=sample_card.id,
        )

    assert book.collection("transactions") == []
    assert _available(book, sample_card.id) == Decimal("5000")
    # Nothing reached the store either
    assert Book(temp_store).collection("transactions") == []


def test_unknown_account_is_rejected(transaction_service, book):
    with pytest.raises(NotFoundError):
        _expense(transaction_service, "10", bank_account_id="missing")
    assert book.collection("transactions") == []


def test_zero_amount_is_rejected(transaction_service):
    with pytest.raises(ValidationError):
        _expense(transaction_service, "0", payment_method=PaymentMethod.CASH)


def test_unknown_category_is_rejected(transaction_service):
    with pytest.raises(NotFoundError):
        _expense(transaction_service, "10", payment_method=PaymentMethod.CASH, category_id="nope")


def test_ledger_is_sorted_newest_first(transaction_service):
    for day in (5, 20, 1):
        _expense(transaction_service, "10", date=date(2024, 3, day), payment_method=PaymentMethod.CASH)

    dates = [t.date for t in transaction_service.list_transactions()]
    assert dates == [date(2024, 3, 20), date(2024, 3, 5), date(2024, 3, 1)]


def test_list_filters(transaction_service, sample_account, sample_categories):
    groceries = sample_categories["Groceries"]
    _expense(transaction_service, "50", bank_account_id=sample_account.id, category_id=groceries)
    _expense(transaction_service, "20", date=date(2024, 2, 1), payment_method=PaymentMethod.CASH)

    assert len(transaction_service.list_transactions(start_date=date(2024, 3, 1))) == 1
    assert len(transaction_service.list_transactions(bank_account_id=sample_account.id)) == 1
    assert len(transaction_service.list_transactions(category_id=groceries)) == 1
    assert len(transaction_service.list_transactions(type=TransactionType.INCOME)) == 0
    assert len(transaction_service.list_transactions(limit=1)) == 1


class TestSplits:
    """Tests for split transactions."""

    def test_split_amounts_must_match_total(self, transaction_service, sample_categories):
        splits = (
            TransactionSplit(id="s1", category_id=sample_categories["Groceries"], amount=Decimal("60")),
            TransactionSplit(
                id="s2", category_id=sample_categories["Entertainment"], amount=Decimal("30")
            ),
        )
        with pytest.raises(ValidationError):
            _expense(transaction_service, "100", payment_method=PaymentMethod.CASH, splits=splits)

    def test_category_filter_matches_split_lines(self, transaction_service, sample_categories):
        splits = (
            TransactionSplit(id="s1", category_id=sample_categories["Groceries"], amount=Decimal("70")),
            TransactionSplit(
                id="s2", category_id=sample_categories["Entertainment"], amount=Decimal("30")
            ),
        )
        txn = _expense(transaction_service, "100", payment_method=PaymentMethod.CASH, splits=splits)

        assert txn.is_split
        found = transaction_service.list_transactions(category_id=sample_categories["Entertainment"])
        assert [t.id for t in found] == [txn.id]


def test_changes_are_persisted(transaction_service, sample_account, temp_store):
    """Test a fresh book on the same store sees committed changes."""
    _expense(transaction_service, "250", bank_account_id=sample_account.id)

    reloaded = Book(temp_store)
    assert len(reloaded.collection("transactions")) == 1
    assert _balance(reloaded, sample_account.id) == Decimal("9750")


def test_net_bank_effect_matches_stored_balance(transaction_service, account_service, sample_account):
    """Test reconciling from the opening balance reproduces the stored balance."""
    _expense(transaction_service, "400", bank_account_id=sample_account.id)
    transaction_service.create_transaction(
        date=date(2024, 3, 12),
        description="Refund",
        amount=Decimal("100"),
        type=TransactionType.INCOME,
        payment_method=PaymentMethod.CASH,
        bank_account_id=sample_account.id,
    )

    assert transaction_service.net_bank_effect(sample_account.id) == Decimal("-300")
    reconciled = account_service.reconcile_bank_balance(sample_account.id, Decimal("10000"))
    assert reconciled == account_service.get_account(sample_account.id).current_balance
