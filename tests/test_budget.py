"""Tests for monthly budgets."""

from datetime import date
from decimal import Decimal

import pytest

from pocketbook.domain.entities import PaymentMethod, TransactionSplit, TransactionType
from pocketbook.domain.errors import ConflictError, NotFoundError


@pytest.fixture
def groceries(sample_categories):
    return sample_categories["Groceries"]


def _spend(transaction_service, category_id, amount, on):
    transaction_service.create_transaction(
        date=on,
        description="Spend",
        amount=Decimal(amount),
        type=TransactionType.EXPENSE,
        payment_method=PaymentMethod.CASH,
        category_id=category_id,
    )


def test_usage_and_status(budget_service, transaction_service, groceries):
    budget = budget_service.create_budget(groceries, Decimal("1000"), date(2024, 3, 1))
    assert budget_service.budget_usage(budget.id).status == "Not Started"

    _spend(transaction_service, groceries, "400", date(2024, 3, 5))
    # Spending outside the month is ignored
    _spend(transaction_service, groceries, "999", date(2024, 4, 1))
    usage = budget_service.budget_usage(budget.id)
    assert usage.spent == Decimal("400")
    assert usage.remaining == Decimal("600")
    assert usage.status == "On Track"

    _spend(transaction_service, groceries, "550", date(2024, 3, 6))
    assert budget_service.budget_usage(budget.id).status == "Nearing Limit"

    _spend(transaction_service, groceries, "100", date(2024, 3, 7))
    usage = budget_service.budget_usage(budget.id)
    assert usage.status == "Overspent"
    assert usage.progress == Decimal("100")


def test_rollover_from_previous_month(budget_service, transaction_service, groceries):
    budget_service.create_budget(groceries, Decimal("1000"), date(2024, 2, 1), rollover_enabled=True)
    march = budget_service.create_budget(groceries, Decimal("1000"), date(2024, 3, 1), rollover_enabled=True)
    _spend(transaction_service, groceries, "600", date(2024, 2, 10))

    usage = budget_service.budget_usage(march.id)
    assert usage.rollover_amount == Decimal("400")
    assert usage.effective_limit == Decimal("1400")


def test_rollover_deficit_never_goes_below_zero(budget_service, transaction_service, groceries):
    budget_service.create_budget(groceries, Decimal("100"), date(2024, 2, 1), rollover_enabled=True)
    march = budget_service.create_budget(groceries, Decimal("100"), date(2024, 3, 1), rollover_enabled=True)
    _spend(transaction_service, groceries, "500", date(2024, 2, 10))

    assert budget_service.budget_usage(march.id).effective_limit == Decimal("0")


def test_split_lines_count_towards_budget(budget_service, transaction_service, sample_categories, groceries):
    budget = budget_service.create_budget(groceries, Decimal("1000"), date(2024, 3, 1))
    transaction_service.create_transaction(
        date=date(2024, 3, 3),
        description="Supermarket",
        amount=Decimal("500"),
        type=TransactionType.EXPENSE,
        payment_method=PaymentMethod.CASH,
        splits=(
            TransactionSplit(id="a", category_id=groceries, amount=Decimal("200")),
            TransactionSplit(id="b", category_id=sample_categories["Entertainment"], amount=Decimal("300")),
        ),
    )
    assert budget_service.budget_usage(budget.id).spent == Decimal("200")


def test_one_budget_per_category_and_month(budget_service, groceries):
    budget_service.create_budget(groceries, Decimal("1000"), date(2024, 3, 1))
    with pytest.raises(ConflictError):
        budget_service.create_budget(groceries, Decimal("500"), date(2024, 3, 20))


def test_unknown_category(budget_service):
    with pytest.raises(NotFoundError):
        budget_service.create_budget("missing", Decimal("10"), date(2024, 3, 1))


def test_update_limit(budget_service, transaction_service, groceries):
    budget = budget_service.create_budget(groceries, Decimal("500"), date(2024, 3, 1))
    _spend(transaction_service, groceries, "480", date(2024, 3, 5))
    assert budget_service.budget_usage(budget.id).status == "Nearing Limit"

    budget_service.update_budget(budget.id, limit_amount=Decimal("1000"))
    usage = budget_service.budget_usage(budget.id)
    assert usage.effective_limit == Decimal("1000")
    assert usage.status == "On Track"
