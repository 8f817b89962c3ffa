"""Tests for receivables and payables."""

from datetime import date
from decimal import Decimal

import pytest

from pocketbook.domain.defaults import LOAN_REPAYMENTS, OTHER_INCOME
from pocketbook.domain.entities import PaymentMethod, PaymentStatus, TransactionType
from pocketbook.domain.errors import DependencyError, NotFoundError, ValidationError
from pocketbook.domain.net_worth import cash_balance


class TestReceivables:
    """Tests for money owed to the user."""

    def test_cash_payment_creates_income(self, receivable_service, transaction_service, book):
        receivable = receivable_service.create("Nimal", "Loan", Decimal("500"), date(2024, 4, 30))
        payment = receivable_service.add_payment(receivable.id, Decimal("200"))

        txn = transaction_service.get_transaction(payment.transaction_id)
        assert txn.type == TransactionType.INCOME
        assert txn.category_id == OTHER_INCOME
        assert txn.payee == "Nimal"
        assert cash_balance(book.collection("transactions")) == Decimal("200")
        assert receivable_service.get_debt(receivable.id).status == PaymentStatus.PARTIALLY_PAID

    def test_bank_payment_credits_account(self, receivable_service, account_service, sample_account):
        receivable = receivable_service.create("Nimal", "Loan", Decimal("500"), date(2024, 4, 30))
        receivable_service.add_payment(
            receivable.id,
            Decimal("500"),
            payment_method=PaymentMethod.BANK_TRANSFER,
            bank_account_id=sample_account.id,
        )
        assert account_service.get_account(sample_account.id).current_balance == Decimal("10500")
        assert receivable_service.stats(receivable.id).status == PaymentStatus.PAID

    def test_payment_without_destination_is_only_tracked(self, receivable_service, book):
        """Test a non-cash payment without an account records no transaction."""
        receivable = receivable_service.create("Nimal", "Loan", Decimal("500"), date(2024, 4, 30))
        payment = receivable_service.add_payment(
            receivable.id, Decimal("100"), payment_method=PaymentMethod.OTHER
        )
        assert payment.transaction_id is None
        assert book.collection("transactions") == []

        receivable_service.delete_payment(receivable.id, payment.id)
        assert receivable_service.get_debt(receivable.id).payments == ()

    def test_overpayment_is_rejected(self, receivable_service, book):
        receivable = receivable_service.create("Nimal", "Loan", Decimal("500"), date(2024, 4, 30))
        with pytest.raises(ValidationError):
            receivable_service.add_payment(receivable.id, Decimal("500.01"))
        assert book.collection("transactions") == []

    def test_list_filters_by_current_status(self, receivable_service):
        receivable_service.create("Overdue", "Old", Decimal("100"), date(2024, 3, 1))
        receivable_service.create("Soon", "New", Decimal("100"), date(2024, 3, 18))
        receivable_service.create("Later", "Later", Decimal("100"), date(2024, 6, 1))

        overdue = receivable_service.list_debts(PaymentStatus.OVERDUE)
        assert [r.debtor_name for r in overdue] == ["Overdue"]
        assert [r.debtor_name for r in receivable_service.list_debts()] == ["Overdue", "Soon", "Later"]

    def test_missing_receivable(self, receivable_service):
        with pytest.raises(NotFoundError):
            receivable_service.add_payment("missing", Decimal("1"))


class TestPayables:
    """Tests for money the user owes."""

    def test_payment_always_creates_expense(self, payable_service, transaction_service):
        payable = payable_service.create("Kamal", "Dinner", Decimal("300"), date(2024, 4, 1))
        payment = payable_service.add_payment(payable.id, Decimal("300"))

        txn = transaction_service.get_transaction(payment.transaction_id)
        assert txn.type == TransactionType.EXPENSE
        assert txn.category_id == LOAN_REPAYMENTS
        assert payable_service.get_debt(payable.id).status == PaymentStatus.PAID

    def test_card_payment_uses_card_limit(self, payable_service, card_service, sample_card):
        payable = payable_service.create("Shop", "TV", Decimal("800"), date(2024, 4, 1))
        payable_service.add_payment(
            payable.id,
            Decimal("800"),
            payment_method=PaymentMethod.CREDIT_CARD,
            credit_card_id=sample_card.id,
        )
        assert card_service.get_card(sample_card.id).available_balance == Decimal("4200")

    def test_delete_with_payments_is_blocked(self, payable_service):
        payable = payable_service.create("Kamal", "Dinner", Decimal("300"), date(2024, 4, 1))
        payable_service.add_payment(payable.id, Decimal("100"))
        with pytest.raises(DependencyError):
            payable_service.delete(payable.id)

    def test_update_refreshes_status(self, payable_service):
        payable = payable_service.create("Kamal", "Dinner", Decimal("300"), date(2024, 6, 1))
        assert payable.status == PaymentStatus.PENDING
        updated = payable_service.update(payable.id, due_date=date(2024, 3, 1))
        assert updated.status == PaymentStatus.OVERDUE

    def test_status_refreshes_as_days_pass(self, payable_service, book):
        payable = payable_service.create("Kamal", "Dinner", Decimal("300"), date(2024, 4, 1))
        assert payable.status == PaymentStatus.PENDING

        book.clock = lambda: date(2024, 4, 2)
        assert payable_service.refresh_statuses() == 1
        stored = book.collection("payables")[0]
        assert stored.status == PaymentStatus.OVERDUE
