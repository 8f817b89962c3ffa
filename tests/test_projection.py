"""Tests for cash-flow projection."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from pocketbook.domain.entities import (
    Payable,
    Payment,
    PaymentMethod,
    Receivable,
    RecurringFrequency,
    RecurringTransaction,
    TransactionType,
)
from pocketbook.domain.errors import ValidationError
from pocketbook.domain.projection import CASH_ACCOUNT, INFLOW, OUTFLOW, ProjectionService, project

START = date(2024, 3, 15)


def _rule(description, amount, kind, due, is_active=True, bank_account_id=None, method=PaymentMethod.CASH):
    return RecurringTransaction(
        id=description,
        description=description,
        amount=Decimal(amount),
        type=kind,
        payment_method=method,
        frequency=RecurringFrequency.MONTHLY,
        start_date=due,
        next_due_date=due,
        bank_account_id=bank_account_id,
        is_active=is_active,
    )


@pytest.fixture
def inputs():
    rules = [
        _rule("Salary", "100", TransactionType.INCOME, START + timedelta(days=2)),
        _rule("Paused", "999", TransactionType.EXPENSE, START + timedelta(days=2), is_active=False),
    ]
    payables = [
        Payable(
            id="b1",
            creditor_name="Landlord",
            description="Rent",
            total_amount=Decimal("80"),
            due_date=START + timedelta(days=1),
            created_at=date(2024, 3, 1),
            payments=(Payment(id="p1", amount=Decimal("30"), date=date(2024, 3, 2)),),
        )
    ]
    receivables = [
        Receivable(
            id="r1",
            debtor_name="Nimal",
            description="Loan",
            total_amount=Decimal("40"),
            due_date=START + timedelta(days=4),
            created_at=date(2024, 3, 1),
        )
    ]
    return rules, payables, receivables


def test_project_applies_events_on_their_dates(inputs):
    rules, payables, receivables = inputs
    days = project(5, Decimal("1000"), rules, payables, receivables, START)

    assert [d.date for d in days] == [START + timedelta(days=i) for i in range(5)]
    assert [d.end_balance for d in days] == [
        Decimal("1000"),
        Decimal("950"),
        Decimal("1050"),
        Decimal("1050"),
        Decimal("1090"),
    ]
    assert days[1].events[0].description == "Payable to Landlord"
    assert days[1].events[0].amount == Decimal("50")
    assert days[1].events[0].type == OUTFLOW
    assert [e.description for e in days[2].events] == ["Salary"]
    assert days[4].events[0].type == INFLOW


def test_project_days_are_continuous(inputs):
    """Test each day opens at the previous day's close."""
    days = project(5, Decimal("1000"), *inputs, START)
    assert days[0].start_balance == Decimal("1000")
    for previous, current in zip(days, days[1:]):
        assert current.start_balance == previous.end_balance


def test_project_is_pure(inputs):
    """Test repeated projections give the same result and leave rules alone."""
    rules = inputs[0]
    first = project(10, Decimal("0"), *inputs, START)
    second = project(10, Decimal("0"), *inputs, START)
    assert first == second
    assert rules[0].next_due_date == START + timedelta(days=2)


def test_project_zero_and_negative_days(inputs):
    assert project(0, Decimal("5"), *inputs, START) == []
    with pytest.raises(ValidationError):
        project(-1, Decimal("5"), *inputs, START)


def test_for_accounts_selects_rules_by_account(book, sample_account, recurring_service, cash_on_hand):
    recurring_service.add_rule(
        description="Salary",
        amount=Decimal("500"),
        type=TransactionType.INCOME,
        payment_method=PaymentMethod.BANK_TRANSFER,
        frequency=RecurringFrequency.MONTHLY,
        start_date=date(2024, 3, 20),
        bank_account_id=sample_account.id,
    )
    recurring_service.add_rule(
        description="Market",
        amount=Decimal("50"),
        type=TransactionType.EXPENSE,
        payment_method=PaymentMethod.CASH,
        frequency=RecurringFrequency.WEEKLY,
        start_date=date(2024, 3, 18),
    )
    service = ProjectionService(book)

    bank_only = service.for_accounts(10, [sample_account.id])
    assert bank_only[0].start_balance == Decimal("10000")
    assert bank_only[-1].end_balance == Decimal("10500")

    cash_only = service.for_accounts(10, [CASH_ACCOUNT])
    assert cash_only[0].start_balance == Decimal("2000")
    assert cash_only[-1].end_balance == Decimal("1950")

    both = service.for_accounts(10, [sample_account.id, CASH_ACCOUNT])
    assert both[-1].end_balance == Decimal("12450")


def test_for_accounts_without_selection(book):
    days = ProjectionService(book).for_accounts(3, [])
    assert len(days) == 3
    assert all(d.events == () and d.end_balance == 0 for d in days)
