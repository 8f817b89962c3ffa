"""Financial goal domain service."""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional

from pocketbook.domain.defaults import GOAL_CONTRIBUTION
from pocketbook.domain.entities import FinancialGoal, GoalContribution, PaymentMethod, TransactionType
from pocketbook.domain.errors import NotFoundError, ValidationError, entity_not_found
from pocketbook.domain.state import Book
from pocketbook.domain.stats import check_amount, recompute_goal
from pocketbook.domain.transaction import BANK_DEBIT_METHODS, TransactionService
from pocketbook.utils.ids import new_id

logger = logging.getLogger(__name__)


class GoalService:
    """Service for managing savings goals and their contributions."""

    def __init__(self, book: Book):
        """Initialize goal service.

        Args:
            book: Book holding the state and store
        """
        self.book = book

    def create_goal(
        self,
        name: str,
        target_amount: Decimal,
        deadline: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> FinancialGoal:
        """Create a goal with no contributions.

        Raises:
            ValidationError: If the target is not positive
        """
        check_amount(target_amount, "target amount", allow_zero=False)
        goal = FinancialGoal(
            id=new_id(),
            name=name,
            target_amount=target_amount,
            created_at=self.book.today(),
            deadline=deadline,
            notes=notes,
        )
        with self.book.unit_of_work() as uow:
            goals = uow.get("financial_goals")
            goals.append(goal)
            uow.put("financial_goals", goals)
        logger.info("Created goal %s (%s)", goal.id, name)
        return goal

    def get_goal(self, goal_id: str) -> Optional[FinancialGoal]:
        for goal in self.book.collection("financial_goals"):
            if goal.id == goal_id:
                return goal
        return None

    def list_goals(self, include_achieved: bool = True) -> list[FinancialGoal]:
        goals = self.book.collection("financial_goals")
        if not include_achieved:
            goals = [g for g in goals if g.achieved_date is None]
        return goals

    def update_goal(
        self,
        goal_id: str,
        name: Optional[str] = None,
        target_amount: Optional[Decimal] = None,
        deadline: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> FinancialGoal:
        """Update a goal. A new target re-derives the achieved date.

        Raises:
            NotFoundError: If the goal doesn't exist
            ValidationError: If the target is not positive
        """
        if target_amount is not None:
            check_amount(target_amount, "target amount", allow_zero=False)
        with self.book.unit_of_work() as uow:
            goals = uow.get("financial_goals")
            index = self._index(goals, goal_id)
            goal = goals[index]
            goal = replace(
                goal,
                name=name if name is not None else goal.name,
                target_amount=target_amount if target_amount is not None else goal.target_amount,
                deadline=deadline if deadline is not None else goal.deadline,
                notes=notes if notes is not None else goal.notes,
            )
            goals[index] = recompute_goal(goal, self.book.today())
            uow.put("financial_goals", goals)
        return goals[index]

    def delete_goal(self, goal_id: str) -> None:
        """Delete a goal. Transactions created for its contributions stay in the ledger."""
        with self.book.unit_of_work() as uow:
            goals = uow.get("financial_goals")
            goals.pop(self._index(goals, goal_id))
            uow.put("financial_goals", goals)
        logger.info("Deleted goal %s", goal_id)

    def add_contribution(
        self,
        goal_id: str,
        amount: Decimal,
        contribution_date: Optional[date] = None,
        payment_method: Optional[PaymentMethod] = None,
        bank_account_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> GoalContribution:
        """Add a contribution to a goal.

        When a payment method is given, the money is taken out of the
        ledger with a goal contribution expense: from ``bank_account_id``
        for bank transfers and cheques, or from cash. Without a method the
        contribution is only tracked on the goal.

        Raises:
            NotFoundError: If the goal or bank account doesn't exist
            ValidationError: If the amount is invalid or a bank method has no account
        """
        amount = check_amount(amount, allow_zero=False)
        goal = self.get_goal(goal_id)
        if goal is None:
            raise NotFoundError(entity_not_found("Goal", goal_id))
        if payment_method in BANK_DEBIT_METHODS and bank_account_id is None:
            raise ValidationError(f"{payment_method.value} contributions need a bank account")
        contribution_date = contribution_date or self.book.today()

        with self.book.unit_of_work() as uow:
            transaction_id = None
            if payment_method is not None:
                txn = TransactionService(self.book).create_transaction(
                    date=contribution_date,
                    description=f"Contribution to goal: {goal.name}",
                    amount=amount,
                    type=TransactionType.EXPENSE,
                    payment_method=payment_method,
                    category_id=GOAL_CONTRIBUTION,
                    bank_account_id=bank_account_id,
                    notes=notes,
                )
                transaction_id = txn.id
            contribution = GoalContribution(
                id=new_id(),
                amount=amount,
                date=contribution_date,
                transaction_id=transaction_id,
                notes=notes,
            )
            goals = uow.get("financial_goals")
            index = self._index(goals, goal_id)
            updated = replace(goals[index], contributions=goals[index].contributions + (contribution,))
            goals[index] = recompute_goal(updated, self.book.today())
            uow.put("financial_goals", goals)

        if goals[index].achieved_date is not None and goal.achieved_date is None:
            logger.info("Goal %s reached its target", goal_id)
        return contribution

    def delete_contribution(self, goal_id: str, contribution_id: str) -> None:
        """Remove a contribution, deleting its ledger transaction if it still exists.

        Raises:
            NotFoundError: If the goal or contribution doesn't exist
        """
        goal = self.get_goal(goal_id)
        if goal is None:
            raise NotFoundError(entity_not_found("Goal", goal_id))
        contribution = next((c for c in goal.contributions if c.id == contribution_id), None)
        if contribution is None:
            raise NotFoundError(entity_not_found("Contribution", contribution_id))

        transactions = TransactionService(self.book)
        with self.book.unit_of_work() as uow:
            if contribution.transaction_id and transactions.get_transaction(
                contribution.transaction_id
            ):
                transactions.delete_transaction(contribution.transaction_id)
                return
            goals = uow.get("financial_goals")
            index = self._index(goals, goal_id)
            updated = replace(
                goals[index],
                contributions=tuple(c for c in goals[index].contributions if c.id != contribution_id),
            )
            goals[index] = recompute_goal(updated, self.book.today())
            uow.put("financial_goals", goals)

    def _index(self, goals: list[FinancialGoal], goal_id: str) -> int:
        for index, goal in enumerate(goals):
            if goal.id == goal_id:
                return index
        raise NotFoundError(entity_not_found("Goal", goal_id))
