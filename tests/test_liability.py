"""Tests for long-term and short-term liabilities."""

from datetime import date
from decimal import Decimal

import pytest

from pocketbook.domain.entities import LiabilityType, PaymentStatus, PaymentStructure
from pocketbook.domain.errors import DependencyError, ValidationError
from pocketbook.domain.liability import PayoffStrategy


@pytest.fixture
def loans(liability_service):
    """Three loans with different balances and rates."""
    created = {}
    for name, amount, rate in (
        ("Car", "300000", "18"),
        ("Phone", "50000", "12"),
        ("House", "900000", "8"),
    ):
        created[name] = liability_service.add_long_term(
            name=name,
            type=LiabilityType.PERSONAL_LOAN,
            lender="Bank",
            original_amount=Decimal(amount),
            monthly_payment=Decimal("10000"),
            start_date=date(2024, 1, 1),
            interest_rate=Decimal(rate),
        )
    return created


def test_snowball_orders_by_remaining_balance(liability_service, loans):
    names = [l.name for l in liability_service.list_long_term(PayoffStrategy.SNOWBALL)]
    assert names == ["Phone", "Car", "House"]


def test_avalanche_orders_by_interest_rate(liability_service, loans):
    names = [l.name for l in liability_service.list_long_term(PayoffStrategy.AVALANCHE)]
    assert names == ["Car", "Phone", "House"]


def test_long_term_payment(liability_service, loans, sample_account, account_service):
    liability_service.add_long_term_payment(
        loans["Car"].id, Decimal("10000"), bank_account_id=sample_account.id
    )
    stats = liability_service.long_term_stats(loans["Car"].id)
    assert stats.total_paid == Decimal("10000")
    assert stats.estimated_months_to_payoff == 29
    assert account_service.get_account(sample_account.id).current_balance == Decimal("0")

    with pytest.raises(DependencyError):
        liability_service.delete_long_term(loans["Car"].id)


def test_end_date_before_start_is_rejected(liability_service):
    with pytest.raises(ValidationError):
        liability_service.add_long_term(
            name="Lease",
            type=LiabilityType.LEASE_AGREEMENT,
            lender="Leasing Co",
            original_amount=Decimal("1000"),
            monthly_payment=Decimal("100"),
            start_date=date(2024, 1, 1),
            end_date=date(2023, 1, 1),
        )


class TestShortTerm:
    """Tests for short-term liabilities."""

    def test_installments_need_count_and_day(self, liability_service):
        with pytest.raises(ValidationError):
            liability_service.add_short_term(
                name="Phone",
                lender="Shop",
                original_amount=Decimal("1000"),
                due_date=date(2024, 7, 1),
                payment_structure=PaymentStructure.INSTALLMENTS,
                number_of_installments=0,
                payment_day_of_month=5,
            )

    def test_installment_payments(self, liability_service, sample_account):
        liability = liability_service.add_short_term(
            name="Phone",
            lender="Shop",
            original_amount=Decimal("1200"),
            due_date=date(2024, 7, 1),
            payment_structure=PaymentStructure.INSTALLMENTS,
            number_of_installments=3,
            payment_day_of_month=20,
        )
        assert liability.status == PaymentStatus.PENDING

        liability_service.add_short_term_payment(
            liability.id, Decimal("400"), bank_account_id=sample_account.id
        )
        stats = liability_service.short_term_stats(liability.id)
        assert stats.installments_paid_count == 1
        assert stats.next_installment_due_date == date(2024, 4, 20)
        assert liability_service.get_short_term(liability.id).status == PaymentStatus.PARTIALLY_PAID

    def test_overpayment_is_rejected(self, liability_service, sample_account):
        liability = liability_service.add_short_term(
            name="Advance", lender="Friend", original_amount=Decimal("500"), due_date=date(2024, 4, 1)
        )
        with pytest.raises(ValidationError):
            liability_service.add_short_term_payment(
                liability.id, Decimal("600"), bank_account_id=sample_account.id
            )
