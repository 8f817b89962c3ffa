"""Removal of payments and contributions that reference a deleted transaction."""

import logging
from dataclasses import dataclass, replace
from datetime import date

from pocketbook.domain.state import UnitOfWork
from pocketbook.domain.stats import DEFAULT_UPCOMING_WINDOW_DAYS, recompute_goal, refresh_status

logger = logging.getLogger(__name__)

# Collections whose entities own ``payments`` with a transaction back reference
PAYMENT_OWNERS = ("receivables", "payables", "short_term_liabilities", "long_term_liabilities")

# Owners with a cached status that must follow their payments
STATUS_OWNERS = ("receivables", "payables", "short_term_liabilities")


@dataclass(frozen=True)
class CascadeReport:
    """Entities that lost a payment or contribution when a transaction was deleted."""

    transaction_id: str
    receivable_ids: tuple[str, ...] = ()
    payable_ids: tuple[str, ...] = ()
    short_term_liability_ids: tuple[str, ...] = ()
    long_term_liability_ids: tuple[str, ...] = ()
    goal_ids: tuple[str, ...] = ()

    @property
    def touched(self) -> bool:
        return any(
            (
                self.receivable_ids,
                self.payable_ids,
                self.short_term_liability_ids,
                self.long_term_liability_ids,
                self.goal_ids,
            )
        )


def cascade_transaction_delete(
    uow: UnitOfWork,
    transaction_id: str,
    today: date,
    window_days: int = DEFAULT_UPCOMING_WINDOW_DAYS,
) -> CascadeReport:
    """Strip every payment and goal contribution linked to a transaction.

    Statuses of affected receivables, payables and short-term liabilities are
    recomputed. Affected goals get their current amount and achieved date
    rederived. Only collections that actually changed are staged.

    Args:
        uow: Open unit of work the changes are staged on
        transaction_id: ID of the transaction being deleted
        today: Date used for status classification
        window_days: Upcoming window for status classification

    Returns:
        Report of the entities that were modified
    """
    touched: dict[str, tuple[str, ...]] = {}

    for name in PAYMENT_OWNERS:
        entities = uow.get(name)
        changed = []
        for index, entity in enumerate(entities):
            kept = tuple(p for p in entity.payments if p.transaction_id != transaction_id)
            if len(kept) == len(entity.payments):
                continue
            updated = replace(entity, payments=kept)
            if name in STATUS_OWNERS:
                updated = refresh_status(updated, today, window_days)
            entities[index] = updated
            changed.append(entity.id)
        if changed:
            uow.put(name, entities)
            touched[name] = tuple(changed)

    goals = uow.get("financial_goals")
    changed_goals = []
    for index, goal in enumerate(goals):
        kept = tuple(c for c in goal.contributions if c.transaction_id != transaction_id)
        if len(kept) == len(goal.contributions):
            continue
        goals[index] = recompute_goal(replace(goal, contributions=kept), today)
        changed_goals.append(goal.id)
    if changed_goals:
        uow.put("financial_goals", goals)

    report = CascadeReport(
        transaction_id=transaction_id,
        receivable_ids=touched.get("receivables", ()),
        payable_ids=touched.get("payables", ()),
        short_term_liability_ids=touched.get("short_term_liabilities", ()),
        long_term_liability_ids=touched.get("long_term_liabilities", ()),
        goal_ids=tuple(changed_goals),
    )
    if report.touched:
        logger.info("Deleting transaction %s updated linked records: %s", transaction_id, report)
    return report
