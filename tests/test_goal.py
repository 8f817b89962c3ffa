"""Tests for savings goals."""

from datetime import date
from decimal import Decimal

import pytest

from pocketbook.domain.defaults import GOAL_CONTRIBUTION
from pocketbook.domain.entities import PaymentMethod
from pocketbook.domain.errors import NotFoundError, ValidationError


def test_tracked_contribution_has_no_transaction(goal_service, book):
    goal = goal_service.create_goal("Holiday", Decimal("1000"), deadline=date(2024, 12, 1))
    contribution = goal_service.add_contribution(goal.id, Decimal("250"))

    assert contribution.transaction_id is None
    assert book.collection("transactions") == []
    assert goal_service.get_goal(goal.id).current_amount == Decimal("250")


def test_bank_contribution_creates_expense(goal_service, transaction_service, account_service, sample_account):
    goal = goal_service.create_goal("Holiday", Decimal("1000"))
    contribution = goal_service.add_contribution(
        goal.id,
        Decimal("400"),
        payment_method=PaymentMethod.BANK_TRANSFER,
        bank_account_id=sample_account.id,
    )

    txn = transaction_service.get_transaction(contribution.transaction_id)
    assert txn.category_id == GOAL_CONTRIBUTION
    assert account_service.get_account(sample_account.id).current_balance == Decimal("9600")


def test_bank_contribution_needs_account(goal_service):
    goal = goal_service.create_goal("Holiday", Decimal("1000"))
    with pytest.raises(ValidationError):
        goal_service.add_contribution(goal.id, Decimal("10"), payment_method=PaymentMethod.CHEQUE)


def test_reaching_target_marks_goal_achieved(goal_service):
    goal = goal_service.create_goal("Bike", Decimal("500"))
    goal_service.add_contribution(goal.id, Decimal("300"))
    second = goal_service.add_contribution(goal.id, Decimal("200"))
    assert goal_service.get_goal(goal.id).achieved_date == date(2024, 3, 15)
    assert goal_service.list_goals(include_achieved=False) == []

    goal_service.delete_contribution(goal.id, second.id)
    assert goal_service.get_goal(goal.id).achieved_date is None


def test_raising_target_clears_achievement(goal_service):
    goal = goal_service.create_goal("Bike", Decimal("500"))
    goal_service.add_contribution(goal.id, Decimal("500"))
    updated = goal_service.update_goal(goal.id, target_amount=Decimal("800"))
    assert updated.achieved_date is None


def test_target_must_be_positive(goal_service):
    with pytest.raises(ValidationError):
        goal_service.create_goal("Nothing", Decimal("0"))


def test_missing_goal(goal_service):
    with pytest.raises(NotFoundError):
        goal_service.add_contribution("missing", Decimal("1"))
