"""Monthly category budget domain service."""

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from pocketbook.domain.entities import Budget, Transaction, TransactionType
from pocketbook.domain.errors import ConflictError, NotFoundError, entity_not_found
from pocketbook.domain.state import Book
from pocketbook.domain.stats import ZERO, check_amount
from pocketbook.utils.ids import new_id

logger = logging.getLogger(__name__)

NEARING_LIMIT_PERCENT = Decimal("90")


@dataclass(frozen=True)
class BudgetUsage:
    """Spending against a budget for its month."""

    budget: Budget
    spent: Decimal
    effective_limit: Decimal
    rollover_amount: Decimal
    remaining: Decimal
    progress: Decimal  # percent of the effective limit, capped at 100

    @property
    def status(self) -> str:
        if self.spent > self.effective_limit:
            return "Overspent"
        if self.progress >= NEARING_LIMIT_PERCENT:
            return "Nearing Limit"
        if self.spent > 0:
            return "On Track"
        return "Not Started"


def month_start(d: date) -> date:
    return d.replace(day=1)


def category_spending(
    transactions: Iterable[Transaction], category_id: str, month: date
) -> Decimal:
    """Sum expenses in a category during the month containing ``month``.

    Split transactions contribute only their lines in the category.
    """
    start = month_start(month)
    end = start + relativedelta(months=1)
    spent = ZERO
    for txn in transactions:
        if txn.type != TransactionType.EXPENSE or not start <= txn.date < end:
            continue
        if txn.splits:
            spent += sum((s.amount for s in txn.splits if s.category_id == category_id), ZERO)
        elif txn.category_id == category_id:
            spent += txn.amount
    return spent


class BudgetService:
    """Service for managing monthly budgets."""

    def __init__(self, book: Book):
        """Initialize budget service.

        Args:
            book: Book holding the state and store
        """
        self.book = book

    def create_budget(
        self,
        category_id: str,
        limit_amount: Decimal,
        month: date,
        rollover_enabled: bool = False,
    ) -> Budget:
        """Create a budget for a category and month.

        Args:
            category_id: Category the budget limits
            limit_amount: Spending limit for the month
            month: Any date in the budget month
            rollover_enabled: Carry last month's surplus or deficit into this month

        Raises:
            NotFoundError: If the category doesn't exist
            ConflictError: If the category already has a budget for that month
            ValidationError: If the limit is invalid
        """
        check_amount(limit_amount, "limit amount")
        start = month_start(month)
        with self.book.unit_of_work() as uow:
            if not any(c.id == category_id for c in uow.get("categories")):
                raise NotFoundError(entity_not_found("Category", category_id))
            budgets = uow.get("budgets")
            if self._find_for_month(budgets, category_id, start) is not None:
                raise ConflictError(
                    f"A budget for category {category_id} already exists for {start:%Y-%m}"
                )
            budget = Budget(
                id=new_id(),
                category_id=category_id,
                limit_amount=limit_amount,
                start_date=start,
                rollover_enabled=rollover_enabled,
            )
            budgets.append(budget)
            uow.put("budgets", sorted(budgets, key=lambda b: b.start_date, reverse=True))
        logger.info("Created budget %s for %s in %s", budget.id, category_id, f"{start:%Y-%m}")
        return budget

    def update_budget(
        self,
        budget_id: str,
        limit_amount: Optional[Decimal] = None,
        rollover_enabled: Optional[bool] = None,
    ) -> Budget:
        """Change a budget's limit or rollover flag.

        Raises:
            NotFoundError: If the budget doesn't exist
        """
        if limit_amount is not None:
            check_amount(limit_amount, "limit amount")
        with self.book.unit_of_work() as uow:
            budgets = uow.get("budgets")
            index = self._index(budgets, budget_id)
            budget = budgets[index]
            budgets[index] = replace(
                budget,
                limit_amount=limit_amount if limit_amount is not None else budget.limit_amount,
                rollover_enabled=(
                    rollover_enabled if rollover_enabled is not None else budget.rollover_enabled
                ),
            )
            uow.put("budgets", budgets)
        return budgets[index]

    def delete_budget(self, budget_id: str) -> None:
        with self.book.unit_of_work() as uow:
            budgets = uow.get("budgets")
            budgets.pop(self._index(budgets, budget_id))
            uow.put("budgets", budgets)
        logger.info("Deleted budget %s", budget_id)

    def list_budgets(self, month: Optional[date] = None) -> list[Budget]:
        """List budgets, most recent month first, optionally for one month."""
        budgets = self.book.collection("budgets")
        if month is not None:
            budgets = [b for b in budgets if b.start_date == month_start(month)]
        return budgets

    def budget_usage(self, budget_id: str) -> BudgetUsage:
        """Compute spending against a budget.

        With rollover enabled, last month's surplus (or deficit) is added to
        the limit when last month's budget for the category also had
        rollover enabled. The effective limit never goes below zero.

        Raises:
            NotFoundError: If the budget doesn't exist
        """
        budgets = self.book.collection("budgets")
        budget = budgets[self._index(budgets, budget_id)]
        transactions = self.book.collection("transactions")
        spent = category_spending(transactions, budget.category_id, budget.start_date)

        rollover = ZERO
        if budget.rollover_enabled:
            previous_month = budget.start_date - relativedelta(months=1)
            previous = self._find_for_month(budgets, budget.category_id, previous_month)
            if previous is not None and previous.rollover_enabled:
                rollover = previous.limit_amount - category_spending(
                    transactions, budget.category_id, previous_month
                )

        effective = max(ZERO, budget.limit_amount + rollover)
        if effective > 0:
            progress = min(Decimal("100"), spent / effective * 100)
        else:
            progress = Decimal("100") if spent > 0 else ZERO
        return BudgetUsage(
            budget=budget,
            spent=spent,
            effective_limit=effective,
            rollover_amount=rollover,
            remaining=effective - spent,
            progress=progress,
        )

    def _find_for_month(
        self, budgets: list[Budget], category_id: str, month: date
    ) -> Optional[Budget]:
        start = month_start(month)
        for budget in budgets:
            if budget.category_id == category_id and budget.start_date == start:
                return budget
        return None

    def _index(self, budgets: list[Budget], budget_id: str) -> int:
        for index, budget in enumerate(budgets):
            if budget.id == budget_id:
                return index
        raise NotFoundError(entity_not_found("Budget", budget_id))
