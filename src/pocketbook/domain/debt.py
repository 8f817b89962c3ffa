"""Receivable and payable domain services.

Both kinds of debt share one shape: a counterparty, a total, a due date and
a list of payments. Each payment normally creates a ledger transaction, and
the payment keeps that transaction's ID so deleting the transaction later
removes the payment too.
"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Callable, Generic, Optional, TypeVar

from pocketbook.domain.defaults import LOAN_REPAYMENTS, OTHER_INCOME
from pocketbook.domain.entities import (
    Payable,
    Payment,
    PaymentMethod,
    PaymentStatus,
    Receivable,
    TransactionType,
)
from pocketbook.domain.errors import (
    DependencyError,
    NotFoundError,
    ValidationError,
    delete_blocked,
    entity_not_found,
)
from pocketbook.domain.state import Book
from pocketbook.domain.stats import (
    PaymentStats,
    check_amount,
    payable_stats,
    receivable_stats,
    refresh_status,
)
from pocketbook.domain.transaction import TransactionService
from pocketbook.utils.ids import new_id

logger = logging.getLogger(__name__)

Debt = TypeVar("Debt", Receivable, Payable)


def check_overpayment(amount: Decimal, remaining: Decimal) -> None:
    """Reject a payment larger than what is still owed."""
    if amount > remaining:
        raise ValidationError(
            f"Payment {amount:,.2f} exceeds the remaining amount {remaining:,.2f}"
        )


class _DebtService(Generic[Debt]):
    collection: str
    kind: str
    stats_function: Callable[..., PaymentStats]

    def __init__(self, book: Book):
        self.book = book

    def _stats(self, debt: Debt) -> PaymentStats:
        return type(self).stats_function(debt, self.book.today(), self.book.upcoming_window_days)

    def get_debt(self, debt_id: str) -> Optional[Debt]:
        """Get a debt by ID with its status brought up to date."""
        for debt in self.book.collection(self.collection):
            if debt.id == debt_id:
                return self._refreshed(debt)
        return None

    def list_debts(self, status: Optional[PaymentStatus] = None) -> list[Debt]:
        """List debts ordered by due date, optionally filtered by current status."""
        debts = [self._refreshed(d) for d in self.book.collection(self.collection)]
        if status is not None:
            debts = [d for d in debts if d.status == status]
        return sorted(debts, key=lambda d: d.due_date)

    def stats(self, debt_id: str) -> PaymentStats:
        """Return paid, remaining and status for a debt.

        Raises:
            NotFoundError: If the debt doesn't exist
        """
        return self._stats(self._require(debt_id))

    def refresh_statuses(self) -> int:
        """Store recomputed statuses for every debt.

        Returns:
            Number of debts whose status changed
        """
        changed = 0
        with self.book.unit_of_work() as uow:
            debts = uow.get(self.collection)
            for index, debt in enumerate(debts):
                refreshed = self._refreshed(debt)
                if refreshed is not debt:
                    debts[index] = refreshed
                    changed += 1
            if changed:
                uow.put(self.collection, debts)
        return changed

    def delete(self, debt_id: str) -> None:
        """Delete a debt that has no payments recorded.

        Raises:
            NotFoundError: If the debt doesn't exist
            DependencyError: If payments have been recorded against it
        """
        with self.book.unit_of_work() as uow:
            debts = uow.get(self.collection)
            index = self._index(debts, debt_id)
            debt = debts[index]
            if debt.payments:
                raise DependencyError(
                    delete_blocked(
                        self.kind.lower(),
                        debt.description,
                        f"{len(debt.payments)} payment(s) recorded",
                    )
                )
            debts.pop(index)
            uow.put(self.collection, debts)
        logger.info("Deleted %s %s", self.kind.lower(), debt_id)

    def update(
        self,
        debt_id: str,
        description: Optional[str] = None,
        total_amount: Optional[Decimal] = None,
        due_date: Optional[date] = None,
    ) -> Debt:
        """Change a debt's description, total or due date and refresh its status.

        Raises:
            NotFoundError: If the debt doesn't exist
            ValidationError: If the total is invalid
        """
        with self.book.unit_of_work() as uow:
            debts = uow.get(self.collection)
            index = self._index(debts, debt_id)
            debt = debts[index]
            if total_amount is not None:
                check_amount(total_amount, "total amount", allow_zero=False)
            debt = replace(
                debt,
                description=description if description is not None else debt.description,
                total_amount=total_amount if total_amount is not None else debt.total_amount,
                due_date=due_date if due_date is not None else debt.due_date,
            )
            debts[index] = self._refreshed(debt)
            uow.put(self.collection, debts)
        return debts[index]

    def delete_payment(self, debt_id: str, payment_id: str) -> None:
        """Remove a payment, deleting its ledger transaction if it still exists.

        Raises:
            NotFoundError: If the debt or payment doesn't exist
        """
        debt = self._require(debt_id)
        payment = next((p for p in debt.payments if p.id == payment_id), None)
        if payment is None:
            raise NotFoundError(entity_not_found("Payment", payment_id))

        transactions = TransactionService(self.book)
        with self.book.unit_of_work() as uow:
            if payment.transaction_id and transactions.get_transaction(payment.transaction_id):
                # The cascade strips the payment and refreshes the status
                transactions.delete_transaction(payment.transaction_id)
                return
            debts = uow.get(self.collection)
            index = self._index(debts, debt_id)
            updated = replace(
                debts[index], payments=tuple(p for p in debts[index].payments if p.id != payment_id)
            )
            debts[index] = self._refreshed(updated)
            uow.put(self.collection, debts)

    def _append_payment(self, debt_id: str, payment: Payment) -> Debt:
        with self.book.unit_of_work() as uow:
            debts = uow.get(self.collection)
            index = self._index(debts, debt_id)
            updated = replace(debts[index], payments=debts[index].payments + (payment,))
            debts[index] = self._refreshed(updated)
            uow.put(self.collection, debts)
        return debts[index]

    def _add(self, debt: Debt) -> Debt:
        check_amount(debt.total_amount, "total amount", allow_zero=False)
        debt = self._refreshed(debt)
        with self.book.unit_of_work() as uow:
            debts = uow.get(self.collection)
            debts.append(debt)
            uow.put(self.collection, debts)
        logger.info("Created %s %s for %s", self.kind.lower(), debt.id, debt.total_amount)
        return debt

    def _refreshed(self, debt: Debt) -> Debt:
        return refresh_status(debt, self.book.today(), self.book.upcoming_window_days)

    def _require(self, debt_id: str) -> Debt:
        debt = self.get_debt(debt_id)
        if debt is None:
            raise NotFoundError(entity_not_found(self.kind, debt_id))
        return debt

    def _index(self, debts: list, debt_id: str) -> int:
        for index, debt in enumerate(debts):
            if debt.id == debt_id:
                return index
        raise NotFoundError(entity_not_found(self.kind, debt_id))


class ReceivableService(_DebtService[Receivable]):
    """Service for money owed to the user."""

    collection = "receivables"
    kind = "Receivable"
    stats_function = receivable_stats

    def create(
        self,
        debtor_name: str,
        description: str,
        total_amount: Decimal,
        due_date: date,
    ) -> Receivable:
        """Create a receivable.

        Raises:
            ValidationError: If the total is not positive
        """
        return self._add(
            Receivable(
                id=new_id(),
                debtor_name=debtor_name,
                description=description,
                total_amount=total_amount,
                due_date=due_date,
                created_at=self.book.today(),
            )
        )

    def add_payment(
        self,
        receivable_id: str,
        amount: Decimal,
        payment_date: Optional[date] = None,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        bank_account_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Payment:
        """Record money received against a receivable.

        An income transaction is created when the money lands in a bank
        account or in cash; other methods only record the payment.

        Raises:
            NotFoundError: If the receivable or bank account doesn't exist
            ValidationError: If the amount is invalid or exceeds what is owed
        """
        amount = check_amount(amount, allow_zero=False)
        receivable = self._require(receivable_id)
        check_overpayment(amount, self._stats(receivable).remaining)
        payment_date = payment_date or self.book.today()

        with self.book.unit_of_work():
            transaction_id = None
            if bank_account_id is not None or payment_method == PaymentMethod.CASH:
                txn = TransactionService(self.book).create_transaction(
                    date=payment_date,
                    description=f"Payment from {receivable.debtor_name}: {receivable.description}",
                    amount=amount,
                    type=TransactionType.INCOME,
                    payment_method=payment_method,
                    category_id=OTHER_INCOME,
                    bank_account_id=bank_account_id,
                    payee=receivable.debtor_name,
                    notes=notes,
                )
                transaction_id = txn.id
            payment = Payment(
                id=new_id(),
                amount=amount,
                date=payment_date,
                payment_method=payment_method,
                bank_account_id=bank_account_id,
                transaction_id=transaction_id,
                notes=notes,
            )
            self._append_payment(receivable_id, payment)
        logger.info("Recorded payment of %s on receivable %s", amount, receivable_id)
        return payment


class PayableService(_DebtService[Payable]):
    """Service for money the user owes."""

    collection = "payables"
    kind = "Payable"
    stats_function = payable_stats

    def create(
        self,
        creditor_name: str,
        description: str,
        total_amount: Decimal,
        due_date: date,
    ) -> Payable:
        """Create a payable.

        Raises:
            ValidationError: If the total is not positive
        """
        return self._add(
            Payable(
                id=new_id(),
                creditor_name=creditor_name,
                description=description,
                total_amount=total_amount,
                due_date=due_date,
                created_at=self.book.today(),
            )
        )

    def add_payment(
        self,
        payable_id: str,
        amount: Decimal,
        payment_date: Optional[date] = None,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        bank_account_id: Optional[str] = None,
        credit_card_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Payment:
        """Record a payment towards a payable, always creating an expense transaction.

        Raises:
            NotFoundError: If the payable, account or card doesn't exist
            ValidationError: If the amount is invalid or exceeds what is owed
            CreditLimitExceededError: If a card payment doesn't fit the card
        """
        amount = check_amount(amount, allow_zero=False)
        payable = self._require(payable_id)
        check_overpayment(amount, self._stats(payable).remaining)
        payment_date = payment_date or self.book.today()

        with self.book.unit_of_work():
            txn = TransactionService(self.book).create_transaction(
                date=payment_date,
                description=f"Payment to {payable.creditor_name}: {payable.description}",
                amount=amount,
                type=TransactionType.EXPENSE,
                payment_method=payment_method,
                category_id=LOAN_REPAYMENTS,
                bank_account_id=bank_account_id,
                credit_card_id=credit_card_id,
                payee=payable.creditor_name,
                notes=notes,
            )
            payment = Payment(
                id=new_id(),
                amount=amount,
                date=payment_date,
                payment_method=payment_method,
                bank_account_id=bank_account_id,
                credit_card_id=credit_card_id,
                transaction_id=txn.id,
                notes=notes,
            )
            self._append_payment(payable_id, payment)
        logger.info("Recorded payment of %s on payable %s", amount, payable_id)
        return payment
