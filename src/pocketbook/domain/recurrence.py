"""Recurring transaction rules and their due-date arithmetic."""

import logging
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from pocketbook.domain.entities import (
    PaymentMethod,
    RecurringFrequency,
    RecurringTransaction,
    TaxRelevance,
    TransactionType,
)
from pocketbook.domain.errors import NotFoundError, ValidationError, entity_not_found
from pocketbook.domain.state import Book
from pocketbook.domain.stats import check_amount
from pocketbook.domain.transaction import TransactionService
from pocketbook.utils.ids import new_id

logger = logging.getLogger(__name__)


def sunday_based_weekday(d: date) -> int:
    """Return the weekday of ``d`` with 0 for Sunday through 6 for Saturday."""
    return (d.weekday() + 1) % 7


def calculate_next_due_date(rule: RecurringTransaction) -> date:
    """Compute the next date a rule is due.

    A rule that has never been processed is due on the first matching date on
    or after its start date. Once processed, it is due on the first matching
    date strictly after ``last_processed_date``.

    - DAILY: every day.
    - WEEKLY: on ``day_of_week``, or the start date's weekday if unset.
    - MONTHLY: on ``day_of_month``, or the start date's day if unset.
    - YEARLY: on that day in the start date's month.

    Month days past the end of a short month clamp to its last day, so a
    rule for the 31st falls on 28 or 29 February.

    The end date is not applied here; processing deactivates the rule.
    """
    if rule.last_processed_date is None:
        bound = rule.start_date
    else:
        bound = rule.last_processed_date + timedelta(days=1)

    if rule.frequency == RecurringFrequency.DAILY:
        return bound

    if rule.frequency == RecurringFrequency.WEEKLY:
        weekday = rule.day_of_week
        if weekday is None:
            weekday = sunday_based_weekday(rule.start_date)
        return bound + timedelta(days=(weekday - sunday_based_weekday(bound)) % 7)

    day = rule.day_of_month or rule.start_date.day
    if rule.frequency == RecurringFrequency.MONTHLY:
        month_start = bound.replace(day=1)
        candidate = month_start + relativedelta(day=day)
        if candidate < bound:
            candidate = month_start + relativedelta(months=1, day=day)
        return candidate

    if rule.frequency == RecurringFrequency.YEARLY:
        year_start = date(bound.year, rule.start_date.month, 1)
        candidate = year_start + relativedelta(day=day)
        if candidate < bound:
            candidate = year_start + relativedelta(years=1, day=day)
        return candidate

    raise ValidationError(f"Unknown frequency '{rule.frequency}'")


def validate_rule(rule: RecurringTransaction) -> None:
    """Check a rule's amount, schedule fields and date range.

    Raises:
        ValidationError: If any field is out of range
    """
    check_amount(rule.amount, allow_zero=False)
    if rule.day_of_week is not None and not 0 <= rule.day_of_week <= 6:
        raise ValidationError(f"Day of week must be 0-6, got {rule.day_of_week}")
    if rule.day_of_month is not None and not 1 <= rule.day_of_month <= 31:
        raise ValidationError(f"Day of month must be 1-31, got {rule.day_of_month}")
    if rule.end_date is not None and rule.end_date < rule.start_date:
        raise ValidationError("End date cannot be before start date")


def schedule_next(rule: RecurringTransaction) -> RecurringTransaction:
    """Set the rule's next due date from its schedule.

    When the next occurrence falls after the end date, the rule is clamped
    to the end date and deactivated.
    """
    next_due = calculate_next_due_date(rule)
    if rule.end_date is not None and next_due > rule.end_date:
        return replace(rule, next_due_date=rule.end_date, is_active=False)
    return replace(rule, next_due_date=next_due)


def due_rules(rules: Iterable[RecurringTransaction], today: date) -> list[RecurringTransaction]:
    """Return active rules whose next due date is on or before ``today``."""
    return [r for r in rules if r.is_active and r.next_due_date <= today]


class RecurringTransactionService:
    """Service for managing recurring transaction rules."""

    def __init__(self, book: Book):
        """Initialize recurring transaction service.

        Args:
            book: Book holding the state and store
        """
        self.book = book

    def add_rule(
        self,
        description: str,
        amount: Decimal,
        type: TransactionType,
        payment_method: PaymentMethod,
        frequency: RecurringFrequency,
        start_date: date,
        category_id: Optional[str] = None,
        bank_account_id: Optional[str] = None,
        credit_card_id: Optional[str] = None,
        end_date: Optional[date] = None,
        day_of_week: Optional[int] = None,
        day_of_month: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> RecurringTransaction:
        """Create a rule. Its first due date is derived from the schedule.

        Returns:
            The created rule

        Raises:
            ValidationError: If the rule is invalid
        """
        rule = RecurringTransaction(
            id=new_id(),
            description=description,
            amount=amount,
            type=type,
            payment_method=payment_method,
            frequency=frequency,
            start_date=start_date,
            next_due_date=start_date,
            category_id=category_id,
            bank_account_id=bank_account_id,
            credit_card_id=credit_card_id,
            end_date=end_date,
            day_of_week=day_of_week,
            day_of_month=day_of_month,
            notes=notes,
        )
        validate_rule(rule)
        rule = schedule_next(rule)

        with self.book.unit_of_work() as uow:
            rules = uow.get("recurring_transactions")
            rules.append(rule)
            uow.put("recurring_transactions", _by_due_date(rules))
        logger.info("Added recurring rule %s, next due %s", rule.id, rule.next_due_date)
        return rule

    def update_rule(self, rule: RecurringTransaction) -> RecurringTransaction:
        """Replace a rule and recompute its next due date.

        Raises:
            NotFoundError: If the rule doesn't exist
            ValidationError: If the rule is invalid
        """
        validate_rule(rule)
        rule = schedule_next(rule)
        with self.book.unit_of_work() as uow:
            rules = uow.get("recurring_transactions")
            index = self._index(rules, rule.id)
            rules[index] = rule
            uow.put("recurring_transactions", _by_due_date(rules))
        return rule

    def set_active(self, rule_id: str, is_active: bool) -> RecurringTransaction:
        """Pause or resume a rule."""
        with self.book.unit_of_work() as uow:
            rules = uow.get("recurring_transactions")
            index = self._index(rules, rule_id)
            rules[index] = replace(rules[index], is_active=is_active)
            uow.put("recurring_transactions", rules)
        return rules[index]

    def delete_rule(self, rule_id: str) -> None:
        """Delete a rule. Transactions it already generated stay in the ledger."""
        with self.book.unit_of_work() as uow:
            rules = uow.get("recurring_transactions")
            rules.pop(self._index(rules, rule_id))
            uow.put("recurring_transactions", rules)
        logger.info("Deleted recurring rule %s", rule_id)

    def get_rule(self, rule_id: str) -> Optional[RecurringTransaction]:
        for rule in self.book.collection("recurring_transactions"):
            if rule.id == rule_id:
                return rule
        return None

    def list_rules(self, active_only: bool = False) -> list[RecurringTransaction]:
        """List rules ordered by next due date."""
        rules = self.book.collection("recurring_transactions")
        if active_only:
            rules = [r for r in rules if r.is_active]
        return rules

    def due_rules(self, today: Optional[date] = None) -> list[RecurringTransaction]:
        """Return active rules due on or before ``today``."""
        return due_rules(self.book.collection("recurring_transactions"), today or self.book.today())

    def process_recurring_transactions(
        self,
        rule_ids: Iterable[str],
        today: Optional[date] = None,
    ) -> list[str]:
        """Materialise one transaction for each selected rule that is due.

        Each processed rule is advanced to its next due date. A rule whose
        next date passes its end date is clamped to the end date and
        deactivated. Rules that are inactive or not yet due are skipped.

        Args:
            rule_ids: IDs of the rules to process
            today: Processing date, defaults to the book's today

        Returns:
            IDs of the created transactions

        Raises:
            NotFoundError: If a referenced account or card no longer exists
            CreditLimitExceededError: If a card charge doesn't fit
        """
        today = today or self.book.today()
        selected = set(rule_ids)
        transactions = TransactionService(self.book)
        created: list[str] = []

        with self.book.unit_of_work() as uow:
            relevance = {c.id: c.default_tax_relevance for c in uow.get("categories")}
            rules = uow.get("recurring_transactions")
            for index, rule in enumerate(rules):
                if rule.id not in selected or not rule.is_active or rule.next_due_date > today:
                    continue

                txn = transactions.create_transaction(
                    date=rule.next_due_date,
                    description=rule.description,
                    amount=rule.amount,
                    type=rule.type,
                    payment_method=rule.payment_method,
                    category_id=rule.category_id,
                    bank_account_id=rule.bank_account_id,
                    credit_card_id=rule.credit_card_id,
                    recurring_transaction_id=rule.id,
                    payee="Recurring",
                    notes=rule.notes,
                    is_tax_relevant=relevance.get(rule.category_id, TaxRelevance.NONE)
                    != TaxRelevance.NONE,
                )
                created.append(txn.id)

                rules[index] = schedule_next(replace(rule, last_processed_date=rule.next_due_date))

            uow.put("recurring_transactions", _by_due_date(rules))

        logger.info("Processed %d recurring rule(s)", len(created))
        return created

    def _index(self, rules: list[RecurringTransaction], rule_id: str) -> int:
        for index, rule in enumerate(rules):
            if rule.id == rule_id:
                return index
        raise NotFoundError(entity_not_found("Recurring rule", rule_id))


def _by_due_date(rules: list[RecurringTransaction]) -> list[RecurringTransaction]:
    return sorted(rules, key=lambda r: r.next_due_date)
