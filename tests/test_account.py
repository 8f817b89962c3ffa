"""Tests for bank accounts, transfers and credit cards."""

from datetime import date
from decimal import Decimal

import pytest

from pocketbook.domain.defaults import CASH_TO_BANK, CREDIT_CARD_PAYMENT
from pocketbook.domain.entities import PaymentMethod, TransactionType
from pocketbook.domain.errors import (
    CreditLimitExceededError,
    DependencyError,
    InsufficientFundsError,
    ValidationError,
)
from pocketbook.domain.net_worth import cash_balance


def test_create_account_duplicate_name_at_same_bank(account_service, sample_account):
    """Test account names are unique per bank."""
    with pytest.raises(ValidationError):
        account_service.create_account("Salary", "Test Bank")
    other = account_service.create_account("Salary", "Other Bank")
    assert other.bank_name == "Other Bank"


def test_transfer_cash_to_bank(account_service, sample_account, cash_on_hand, book):
    cash_out, bank_in = account_service.transfer_cash_to_bank(sample_account.id, Decimal("500"))

    assert cash_out.payment_method == PaymentMethod.CASH
    assert cash_out.category_id == bank_in.category_id == CASH_TO_BANK
    assert bank_in.type == TransactionType.INCOME
    assert cash_balance(book.collection("transactions")) == Decimal("1500")
    assert account_service.get_account(sample_account.id).current_balance == Decimal("10500")


def test_transfer_cash_to_bank_needs_cash(account_service, sample_account, cash_on_hand, book):
    with pytest.raises(InsufficientFundsError):
        account_service.transfer_cash_to_bank(sample_account.id, Decimal("2500"))
    assert len(book.collection("transactions")) == 1


def test_inter_bank_transfer(account_service, sample_account):
    savings = account_service.create_account("Savings", "Other Bank")

    outgoing, incoming = account_service.inter_bank_transfer(
        sample_account.id, savings.id, Decimal("2500")
    )

    assert outgoing.bank_account_id == sample_account.id
    assert incoming.bank_account_id == savings.id
    assert account_service.get_account(sample_account.id).current_balance == Decimal("7500")
    assert account_service.get_account(savings.id).current_balance == Decimal("2500")


def test_inter_bank_transfer_rejects_same_account_and_overdraft(account_service, sample_account):
    savings = account_service.create_account("Savings", "Other Bank")
    with pytest.raises(ValidationError):
        account_service.inter_bank_transfer(sample_account.id, sample_account.id, Decimal("1"))
    with pytest.raises(InsufficientFundsError):
        account_service.inter_bank_transfer(savings.id, sample_account.id, Decimal("1"))


def test_delete_account_in_use(account_service, sample_account, cash_on_hand):
    account_service.transfer_cash_to_bank(sample_account.id, Decimal("100"))
    with pytest.raises(DependencyError):
        account_service.delete_account(sample_account.id)


def test_delete_unused_account(account_service, sample_account):
    account_service.delete_account(sample_account.id)
    assert account_service.list_accounts() == []


class TestCreditCardPayment:
    """Tests for paying off a credit card."""

    @pytest.fixture
    def charged_card(self, transaction_service, sample_card):
        transaction_service.create_transaction(
            date=date(2024, 3, 10),
            description="Groceries",
            amount=Decimal("1000"),
            type=TransactionType.EXPENSE,
            payment_method=PaymentMethod.CREDIT_CARD,
            credit_card_id=sample_card.id,
        )
        return sample_card

    def test_payment_is_capped_at_outstanding(self, card_service, charged_card, account_service, sample_account):
        txn = card_service.record_payment(
            charged_card.id, Decimal("1500"), bank_account_id=sample_account.id
        )

        assert txn.amount == Decimal("1000")
        assert txn.category_id == CREDIT_CARD_PAYMENT
        assert txn.credit_card_id is None
        assert card_service.get_card(charged_card.id).available_balance == Decimal("5000")
        assert account_service.get_account(sample_account.id).current_balance == Decimal("9000")

    def test_nothing_outstanding(self, card_service, sample_card, sample_account):
        with pytest.raises(CreditLimitExceededError):
            card_service.record_payment(sample_card.id, Decimal("100"), bank_account_id=sample_account.id)

    def test_bank_payment_needs_account(self, card_service, charged_card):
        with pytest.raises(ValidationError):
            card_service.record_payment(charged_card.id, Decimal("100"))

    def test_cash_payment_needs_cash(self, card_service, charged_card):
        with pytest.raises(InsufficientFundsError):
            card_service.record_payment(
                charged_card.id, Decimal("100"), payment_method=PaymentMethod.CASH
            )

    def test_cash_payment(self, card_service, charged_card, cash_on_hand, book):
        card_service.record_payment(charged_card.id, Decimal("400"), payment_method=PaymentMethod.CASH)
        assert card_service.get_card(charged_card.id).available_balance == Decimal("4400")
        assert cash_balance(book.collection("transactions")) == Decimal("1600")

    def test_limit_cannot_drop_below_outstanding(self, card_service, charged_card):
        with pytest.raises(CreditLimitExceededError):
            card_service.update_card(charged_card.id, credit_limit=Decimal("500"))

        updated = card_service.update_card(charged_card.id, credit_limit=Decimal("8000"))
        assert updated.available_balance == Decimal("7000")
        assert updated.outstanding == Decimal("1000")

    def test_delete_card_in_use(self, card_service, charged_card):
        with pytest.raises(DependencyError):
            card_service.delete_card(charged_card.id)
