"""Cash-flow forecasting over recurring rules and open debts."""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from pocketbook.domain.entities import (
    DailyProjection,
    Payable,
    PaymentMethod,
    ProjectionEvent,
    Receivable,
    RecurringTransaction,
    TransactionType,
)
from pocketbook.domain.errors import ValidationError
from pocketbook.domain.net_worth import cash_balance
from pocketbook.domain.state import Book
from pocketbook.domain.stats import ZERO, payable_stats, receivable_stats

logger = logging.getLogger(__name__)

CASH_ACCOUNT = "cash"

INFLOW = "inflow"
OUTFLOW = "outflow"


def project(
    days: int,
    starting_balance: Decimal,
    recurring_rules: Iterable[RecurringTransaction],
    payables: Iterable[Payable],
    receivables: Iterable[Receivable],
    start: date,
) -> list[DailyProjection]:
    """Simulate daily balances for ``days`` days beginning at ``start``.

    On each day, active rules whose next due date is that day contribute
    their amount. Unpaid payables and receivables due that day contribute
    their remaining amount as an outflow or inflow. Each day opens at the
    previous day's closing balance. Inputs are never modified and rules are
    not advanced, so calling this twice with the same inputs gives the same
    result.

    Args:
        days: Number of days to project
        starting_balance: Balance at the start of the first day
        recurring_rules: Rules to forecast from
        payables: Payables that may fall due
        receivables: Receivables that may fall due
        start: First projected day

    Returns:
        One DailyProjection per day, in date order

    Raises:
        ValidationError: If ``days`` is negative
    """
    if days < 0:
        raise ValidationError(f"Projection length must not be negative, got {days}")

    rules = [r for r in recurring_rules if r.is_active]
    open_payables = []
    for payable in payables:
        remaining = payable_stats(payable, start).remaining
        if remaining > 0:
            open_payables.append((payable, remaining))
    open_receivables = []
    for receivable in receivables:
        remaining = receivable_stats(receivable, start).remaining
        if remaining > 0:
            open_receivables.append((receivable, remaining))

    result: list[DailyProjection] = []
    balance = starting_balance
    for offset in range(days):
        day = start + timedelta(days=offset)
        events: list[ProjectionEvent] = []

        for rule in rules:
            if rule.next_due_date == day:
                kind = INFLOW if rule.type == TransactionType.INCOME else OUTFLOW
                events.append(ProjectionEvent(rule.description, rule.amount, kind))
        for payable, remaining in open_payables:
            if payable.due_date == day:
                events.append(
                    ProjectionEvent(f"Payable to {payable.creditor_name}", remaining, OUTFLOW)
                )
        for receivable, remaining in open_receivables:
            if receivable.due_date == day:
                events.append(
                    ProjectionEvent(f"Receivable from {receivable.debtor_name}", remaining, INFLOW)
                )

        end_balance = balance
        for event in events:
            end_balance += event.amount if event.type == INFLOW else -event.amount
        result.append(
            DailyProjection(
                date=day, start_balance=balance, events=tuple(events), end_balance=end_balance
            )
        )
        balance = end_balance

    return result


class ProjectionService:
    """Builds forecasts from the book's current state."""

    def __init__(self, book: Book):
        self.book = book

    def for_accounts(
        self,
        days: int,
        account_ids: Sequence[str],
        start: Optional[date] = None,
    ) -> list[DailyProjection]:
        """Project the combined balance of selected bank accounts and cash.

        ``account_ids`` may include ``"cash"`` for the cash balance. Only
        rules that move money through a selected account (or cash, for
        cash-method rules) are included. Payables and receivables are
        included whenever any account is selected.
        """
        selected = set(account_ids)
        if not selected:
            return project(days, ZERO, [], [], [], start or self.book.today())

        starting = ZERO
        for account in self.book.collection("bank_accounts"):
            if account.id in selected:
                starting += account.current_balance
        include_cash = CASH_ACCOUNT in selected
        if include_cash:
            starting += cash_balance(self.book.collection("transactions"))

        rules = [
            rule
            for rule in self.book.collection("recurring_transactions")
            if (rule.bank_account_id is not None and rule.bank_account_id in selected)
            or (include_cash and rule.payment_method == PaymentMethod.CASH)
        ]

        logger.debug("Projecting %d day(s) over %d account(s)", days, len(selected))
        return project(
            days,
            starting,
            rules,
            self.book.collection("payables"),
            self.book.collection("receivables"),
            start or self.book.today(),
        )
