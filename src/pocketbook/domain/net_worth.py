"""Net worth aggregation and snapshot history."""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from pocketbook.domain.defaults import CASH_TO_BANK
from pocketbook.domain.entities import (
    BankAccount,
    CreditCard,
    LongTermLiability,
    NetWorthSnapshot,
    NetWorthSummary,
    NonCurrentAsset,
    Payable,
    PaymentMethod,
    Receivable,
    ShortTermLiability,
    Transaction,
    TransactionType,
)
from pocketbook.domain.state import Book
from pocketbook.domain.stats import (
    ZERO,
    long_term_liability_stats,
    payable_stats,
    receivable_stats,
    short_term_liability_stats,
)
from pocketbook.utils.ids import new_id

logger = logging.getLogger(__name__)


def cash_balance(transactions: Iterable[Transaction]) -> Decimal:
    """Derive the cash-in-hand balance from the ledger.

    Cash-method income adds and cash-method expenses subtract. Deposits of
    cash into a bank are recorded as a "cash to bank" expense; those that
    were not themselves entered as cash-method expenses are subtracted too,
    so every deposit leaves the cash pool exactly once.
    """
    balance = ZERO
    for txn in transactions:
        if txn.payment_method == PaymentMethod.CASH:
            balance += txn.amount if txn.type == TransactionType.INCOME else -txn.amount
        elif txn.category_id == CASH_TO_BANK and txn.type == TransactionType.EXPENSE:
            balance -= txn.amount
    return balance


def compute_net_worth(
    today: date,
    bank_accounts: Iterable[BankAccount] = (),
    transactions: Iterable[Transaction] = (),
    receivables: Iterable[Receivable] = (),
    assets: Iterable[NonCurrentAsset] = (),
    payables: Iterable[Payable] = (),
    credit_cards: Iterable[CreditCard] = (),
    long_term_liabilities: Iterable[LongTermLiability] = (),
    short_term_liabilities: Iterable[ShortTermLiability] = (),
) -> NetWorthSummary:
    """Total assets and liabilities.

    Assets are bank balances, cash, receivables still owed and non-current
    assets at current value (or cost when no valuation exists). Liabilities
    are payables still owed, card debt, and the remaining balances of long-
    and short-term liabilities.
    """
    total_assets = (
        sum((a.current_balance for a in bank_accounts), ZERO)
        + cash_balance(transactions)
        + sum((receivable_stats(r, today).remaining for r in receivables), ZERO)
        + sum((a.value for a in assets), ZERO)
    )
    total_liabilities = (
        sum((payable_stats(p, today).remaining for p in payables), ZERO)
        + sum((c.outstanding for c in credit_cards), ZERO)
        + sum((long_term_liability_stats(l).remaining_balance for l in long_term_liabilities), ZERO)
        + sum((short_term_liability_stats(l, today).remaining for l in short_term_liabilities), ZERO)
    )
    return NetWorthSummary(
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        net_worth=total_assets - total_liabilities,
    )


class NetWorthService:
    """Computes net worth for a book and keeps its snapshot history."""

    def __init__(self, book: Book):
        self.book = book

    def compute_net_worth(self) -> NetWorthSummary:
        book = self.book
        return compute_net_worth(
            book.today(),
            bank_accounts=book.collection("bank_accounts"),
            transactions=book.collection("transactions"),
            receivables=book.collection("receivables"),
            assets=book.collection("non_current_assets"),
            payables=book.collection("payables"),
            credit_cards=book.collection("credit_cards"),
            long_term_liabilities=book.collection("long_term_liabilities"),
            short_term_liabilities=book.collection("short_term_liabilities"),
        )

    def cash_balance(self) -> Decimal:
        return cash_balance(self.book.collection("transactions"))

    def record_snapshot(self) -> NetWorthSnapshot:
        """Record today's net worth.

        An existing snapshot for today is overwritten in place; otherwise a
        new one is appended and the history is kept in date order.

        Returns:
            The stored snapshot
        """
        today = self.book.today()
        summary = self.compute_net_worth()
        with self.book.unit_of_work() as uow:
            history = uow.get("net_worth_history")
            existing: Optional[int] = None
            for index, snapshot in enumerate(history):
                if snapshot.date == today:
                    existing = index
                    break

            snapshot = NetWorthSnapshot(
                id=history[existing].id if existing is not None else new_id(),
                date=today,
                assets=summary.total_assets,
                liabilities=summary.total_liabilities,
                net_worth=summary.net_worth,
            )
            if existing is not None:
                history[existing] = snapshot
            else:
                history.append(snapshot)
                history.sort(key=lambda s: s.date)
            uow.put("net_worth_history", history)

        logger.info("Recorded net worth %s for %s", snapshot.net_worth, today)
        return snapshot

    def history(self) -> list[NetWorthSnapshot]:
        return self.book.collection("net_worth_history")
