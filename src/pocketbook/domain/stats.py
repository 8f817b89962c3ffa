"""Derived payment statistics for receivables, payables and liabilities.

Everything in this module is a pure function of an entity, its payments and
the date treated as "today". Cached ``status`` fields on entities only ever
mirror what these functions return.
"""

import math
from dataclasses import dataclass, replace
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, TypeVar, Union

from dateutil.relativedelta import relativedelta

from pocketbook.domain.entities import (
    FinancialGoal,
    LongTermLiability,
    Payable,
    PaymentStatus,
    PaymentStructure,
    Receivable,
    ShortTermLiability,
)
from pocketbook.domain.errors import ValidationError, invalid_amount

DEFAULT_UPCOMING_WINDOW_DAYS = 7

ZERO = Decimal("0")


@dataclass(frozen=True)
class PaymentStats:
    """Paid/remaining/status triple for a receivable or payable."""

    paid: Decimal
    remaining: Decimal
    status: PaymentStatus


@dataclass(frozen=True)
class ShortTermLiabilityStats:
    """Stats for a short-term liability, including installment details."""

    paid: Decimal
    remaining: Decimal
    status: PaymentStatus
    monthly_installment_amount: Optional[Decimal] = None
    next_installment_due_date: Optional[date] = None
    installments_paid_count: int = 0
    is_installment_overdue: bool = False
    estimated_months_to_payoff: Optional[int] = None


@dataclass(frozen=True)
class LongTermLiabilityStats:
    """Repayment progress of a long-term liability."""

    total_paid: Decimal
    remaining_balance: Decimal
    payments_made_count: int
    estimated_months_to_payoff: int

    @property
    def is_paid_off(self) -> bool:
        return self.remaining_balance <= 0


def check_amount(value: Decimal, field: str = "amount", allow_zero: bool = True) -> Decimal:
    """Reject NaN and negative amounts before they reach a calculation.

    Raises:
        ValidationError: If the amount is NaN, infinite or negative
    """
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value))
        except InvalidOperation:
            raise ValidationError(invalid_amount(field, value))
    if value.is_nan() or value.is_infinite() or value < 0 or (value == 0 and not allow_zero):
        raise ValidationError(invalid_amount(field, value))
    return value


def total_paid(payments: Iterable) -> Decimal:
    """Sum payment or contribution amounts."""
    return sum((check_amount(p.amount, "payment amount") for p in payments), ZERO)


def classify_status(
    total: Decimal,
    paid: Decimal,
    due_date: date,
    today: date,
    window_days: int = DEFAULT_UPCOMING_WINDOW_DAYS,
) -> PaymentStatus:
    """Classify a debt by priority PAID > OVERDUE > PARTIALLY_PAID > UPCOMING > PENDING.

    A debt is overdue only once ``today`` is strictly after the due date, so
    a debt due today is still UPCOMING or PENDING.
    """
    if paid >= total:
        return PaymentStatus.PAID
    if today > due_date:
        return PaymentStatus.OVERDUE
    if paid > 0:
        return PaymentStatus.PARTIALLY_PAID
    if due_date <= today + timedelta(days=window_days):
        return PaymentStatus.UPCOMING
    return PaymentStatus.PENDING


def _payment_stats(
    total: Decimal,
    payments: Iterable,
    due_date: date,
    today: date,
    window_days: int,
) -> PaymentStats:
    total = check_amount(total, "total amount")
    paid = total_paid(payments)
    remaining = max(ZERO, total - paid)
    return PaymentStats(
        paid=paid,
        remaining=remaining,
        status=classify_status(total, paid, due_date, today, window_days),
    )


def receivable_stats(
    receivable: Receivable,
    today: date,
    window_days: int = DEFAULT_UPCOMING_WINDOW_DAYS,
) -> PaymentStats:
    """Compute paid, remaining and status for a receivable."""
    return _payment_stats(
        receivable.total_amount, receivable.payments, receivable.due_date, today, window_days
    )


def payable_stats(
    payable: Payable,
    today: date,
    window_days: int = DEFAULT_UPCOMING_WINDOW_DAYS,
) -> PaymentStats:
    """Compute paid, remaining and status for a payable."""
    return _payment_stats(
        payable.total_amount, payable.payments, payable.due_date, today, window_days
    )


def long_term_liability_stats(liability: LongTermLiability) -> LongTermLiabilityStats:
    """Compute repayment progress for a long-term liability.

    ``remaining_balance`` is not floored at zero; callers treat a liability
    as paid off once it is ``<= 0``.
    """
    original = check_amount(liability.original_amount, "original amount")
    paid = total_paid(liability.payments)
    remaining = original - paid

    months = 0
    if liability.monthly_payment > 0 and remaining > 0:
        months = math.ceil(remaining / liability.monthly_payment)

    return LongTermLiabilityStats(
        total_paid=paid,
        remaining_balance=remaining,
        payments_made_count=len(liability.payments),
        estimated_months_to_payoff=months,
    )


def installment_due_date(created_at: date, payment_day_of_month: int, slot: int) -> date:
    """Return the due date of a 1-based installment slot.

    The first slot is the first ``payment_day_of_month`` strictly after
    ``created_at``; each further slot is one month later. Days past the end
    of a short month clamp to its last day.
    """
    month_start = created_at.replace(day=1)
    first = month_start + relativedelta(day=payment_day_of_month)
    offset = 0 if first > created_at else 1
    return month_start + relativedelta(months=offset + slot - 1, day=payment_day_of_month)


def short_term_liability_stats(
    liability: ShortTermLiability,
    today: date,
    window_days: int = DEFAULT_UPCOMING_WINDOW_DAYS,
) -> ShortTermLiabilityStats:
    """Compute stats for a short-term liability.

    Installment details are only produced for the INSTALLMENTS structure with
    a positive installment count and a payment day; otherwise the liability
    is handled as a single payment.
    """
    base = _payment_stats(
        liability.original_amount, liability.payments, liability.due_date, today, window_days
    )

    installments = liability.number_of_installments or 0
    if (
        liability.payment_structure != PaymentStructure.INSTALLMENTS
        or installments <= 0
        or not liability.payment_day_of_month
    ):
        return ShortTermLiabilityStats(paid=base.paid, remaining=base.remaining, status=base.status)

    installment_amount = liability.original_amount / installments
    paid_count = 0
    if installment_amount > 0:
        paid_count = min(installments, int(base.paid // installment_amount))

    next_due: Optional[date] = None
    months_left: Optional[int] = None
    if base.status == PaymentStatus.PAID or paid_count >= installments:
        months_left = 0
    else:
        candidate = installment_due_date(
            liability.created_at, liability.payment_day_of_month, paid_count + 1
        )
        # No estimate once the next slot would fall after the final due date
        if candidate <= liability.due_date:
            next_due = candidate
            months_left = installments - paid_count

    return ShortTermLiabilityStats(
        paid=base.paid,
        remaining=base.remaining,
        status=base.status,
        monthly_installment_amount=installment_amount,
        next_installment_due_date=next_due,
        installments_paid_count=paid_count,
        is_installment_overdue=next_due is not None and next_due < today,
        estimated_months_to_payoff=months_left,
    )


StatusEntity = TypeVar("StatusEntity", Receivable, Payable, ShortTermLiability)


def refresh_status(
    entity: StatusEntity,
    today: date,
    window_days: int = DEFAULT_UPCOMING_WINDOW_DAYS,
) -> StatusEntity:
    """Return a copy of the entity with its cached status recomputed."""
    stats: Union[PaymentStats, ShortTermLiabilityStats]
    if isinstance(entity, Receivable):
        stats = receivable_stats(entity, today, window_days)
    elif isinstance(entity, Payable):
        stats = payable_stats(entity, today, window_days)
    else:
        stats = short_term_liability_stats(entity, today, window_days)
    if stats.status == entity.status:
        return entity
    return replace(entity, status=stats.status)


def recompute_goal(goal: FinancialGoal, today: date) -> FinancialGoal:
    """Return a copy of the goal with ``current_amount`` and ``achieved_date`` rederived.

    The achieved date is stamped the first time contributions reach the
    target and cleared again if they drop below it.
    """
    current = total_paid(goal.contributions)
    achieved = goal.achieved_date
    if current >= goal.target_amount:
        if achieved is None:
            achieved = today
    else:
        achieved = None
    return replace(goal, current_amount=current, achieved_date=achieved)
