"""Long-term and short-term liability domain service."""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pocketbook.domain.defaults import LOAN_REPAYMENTS
from pocketbook.domain.entities import (
    LiabilityType,
    LongTermLiability,
    Payment,
    PaymentMethod,
    PaymentStructure,
    ShortTermLiability,
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
    LongTermLiabilityStats,
    ShortTermLiabilityStats,
    check_amount,
    long_term_liability_stats,
    refresh_status,
    short_term_liability_stats,
)
from pocketbook.domain.transaction import TransactionService
from pocketbook.utils.ids import new_id

logger = logging.getLogger(__name__)

LONG_TERM = "long_term_liabilities"
SHORT_TERM = "short_term_liabilities"

Liability = Union[LongTermLiability, ShortTermLiability]


class PayoffStrategy(str, Enum):
    """Order in which to list liabilities for repayment."""

    DEFAULT = "default"  # newest first
    SNOWBALL = "snowball"  # smallest remaining balance first
    AVALANCHE = "avalanche"  # highest interest rate first


class LiabilityService:
    """Service for managing loans and other liabilities."""

    def __init__(self, book: Book):
        """Initialize liability service.

        Args:
            book: Book holding the state and store
        """
        self.book = book

    def add_long_term(
        self,
        name: str,
        type: LiabilityType,
        lender: str,
        original_amount: Decimal,
        monthly_payment: Decimal,
        start_date: date,
        end_date: Optional[date] = None,
        interest_rate: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> LongTermLiability:
        """Add a long-term liability such as a mortgage or car loan.

        Raises:
            ValidationError: If an amount is invalid or the end date precedes the start date
        """
        check_amount(original_amount, "original amount", allow_zero=False)
        check_amount(monthly_payment, "monthly payment")
        if interest_rate is not None:
            check_amount(interest_rate, "interest rate")
        if end_date is not None and end_date < start_date:
            raise ValidationError("End date cannot be before start date")

        liability = LongTermLiability(
            id=new_id(),
            name=name,
            type=type,
            lender=lender,
            original_amount=original_amount,
            monthly_payment=monthly_payment,
            start_date=start_date,
            created_at=self.book.today(),
            end_date=end_date,
            interest_rate=interest_rate,
            notes=notes,
        )
        self._append(LONG_TERM, liability)
        return liability

    def add_short_term(
        self,
        name: str,
        lender: str,
        original_amount: Decimal,
        due_date: date,
        payment_structure: PaymentStructure = PaymentStructure.SINGLE,
        number_of_installments: Optional[int] = None,
        payment_day_of_month: Optional[int] = None,
        interest_rate: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> ShortTermLiability:
        """Add a short-term liability.

        Installment liabilities need a positive installment count and a
        payment day between 1 and 31.

        Raises:
            ValidationError: If the amount or installment details are invalid
        """
        check_amount(original_amount, "original amount", allow_zero=False)
        if interest_rate is not None:
            check_amount(interest_rate, "interest rate")
        if payment_structure == PaymentStructure.INSTALLMENTS:
            if not number_of_installments or number_of_installments < 1:
                raise ValidationError("Installment liabilities need at least one installment")
            if payment_day_of_month is None or not 1 <= payment_day_of_month <= 31:
                raise ValidationError("Installment liabilities need a payment day between 1 and 31")
        else:
            number_of_installments = None
            payment_day_of_month = None

        liability = ShortTermLiability(
            id=new_id(),
            name=name,
            lender=lender,
            original_amount=original_amount,
            due_date=due_date,
            created_at=self.book.today(),
            payment_structure=payment_structure,
            number_of_installments=number_of_installments,
            payment_day_of_month=payment_day_of_month,
            interest_rate=interest_rate,
            notes=notes,
        )
        liability = refresh_status(liability, self.book.today(), self.book.upcoming_window_days)
        self._append(SHORT_TERM, liability)
        return liability

    def get_long_term(self, liability_id: str) -> Optional[LongTermLiability]:
        return self._find(LONG_TERM, liability_id)

    def get_short_term(self, liability_id: str) -> Optional[ShortTermLiability]:
        liability = self._find(SHORT_TERM, liability_id)
        if liability is None:
            return None
        return refresh_status(liability, self.book.today(), self.book.upcoming_window_days)

    def long_term_stats(self, liability_id: str) -> LongTermLiabilityStats:
        """Raises NotFoundError if the liability doesn't exist."""
        return long_term_liability_stats(self._require(LONG_TERM, liability_id))

    def short_term_stats(self, liability_id: str) -> ShortTermLiabilityStats:
        """Raises NotFoundError if the liability doesn't exist."""
        return short_term_liability_stats(
            self._require(SHORT_TERM, liability_id),
            self.book.today(),
            self.book.upcoming_window_days,
        )

    def list_long_term(
        self, strategy: PayoffStrategy = PayoffStrategy.DEFAULT
    ) -> list[LongTermLiability]:
        """List long-term liabilities in payoff-strategy order."""
        return self._sorted(
            self.book.collection(LONG_TERM),
            strategy,
            lambda l: long_term_liability_stats(l).remaining_balance,
        )

    def list_short_term(
        self, strategy: PayoffStrategy = PayoffStrategy.DEFAULT
    ) -> list[ShortTermLiability]:
        """List short-term liabilities, statuses refreshed, in payoff-strategy order."""
        today = self.book.today()
        window = self.book.upcoming_window_days
        liabilities = [refresh_status(l, today, window) for l in self.book.collection(SHORT_TERM)]
        return self._sorted(
            liabilities,
            strategy,
            lambda l: short_term_liability_stats(l, today, window).remaining,
        )

    def add_long_term_payment(
        self,
        liability_id: str,
        amount: Decimal,
        payment_date: Optional[date] = None,
        payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER,
        bank_account_id: Optional[str] = None,
        credit_card_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Payment:
        """Record a repayment on a long-term liability.

        Raises:
            NotFoundError: If the liability, account or card doesn't exist
            ValidationError: If the amount is invalid
        """
        return self._add_payment(
            LONG_TERM,
            liability_id,
            amount,
            payment_date,
            payment_method,
            bank_account_id,
            credit_card_id,
            notes,
        )

    def add_short_term_payment(
        self,
        liability_id: str,
        amount: Decimal,
        payment_date: Optional[date] = None,
        payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER,
        bank_account_id: Optional[str] = None,
        credit_card_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Payment:
        """Record a payment on a short-term liability and refresh its status.

        Raises:
            NotFoundError: If the liability, account or card doesn't exist
            ValidationError: If the amount is invalid or exceeds what is owed
        """
        return self._add_payment(
            SHORT_TERM,
            liability_id,
            amount,
            payment_date,
            payment_method,
            bank_account_id,
            credit_card_id,
            notes,
        )

    def delete_long_term(self, liability_id: str) -> None:
        """Raises DependencyError if payments have been recorded."""
        self._delete(LONG_TERM, liability_id)

    def delete_short_term(self, liability_id: str) -> None:
        """Raises DependencyError if payments have been recorded."""
        self._delete(SHORT_TERM, liability_id)

    def _add_payment(
        self,
        collection: str,
        liability_id: str,
        amount: Decimal,
        payment_date: Optional[date],
        payment_method: PaymentMethod,
        bank_account_id: Optional[str],
        credit_card_id: Optional[str],
        notes: Optional[str],
    ) -> Payment:
        amount = check_amount(amount, allow_zero=False)
        liability = self._require(collection, liability_id)
        if collection == SHORT_TERM:
            remaining = short_term_liability_stats(liability, self.book.today()).remaining
            if amount > remaining:
                raise ValidationError(
                    f"Payment {amount:,.2f} exceeds the remaining amount {remaining:,.2f}"
                )
        payment_date = payment_date or self.book.today()

        with self.book.unit_of_work() as uow:
            txn = TransactionService(self.book).create_transaction(
                date=payment_date,
                description=f"Payment for {liability.name} ({liability.lender})",
                amount=amount,
                type=TransactionType.EXPENSE,
                payment_method=payment_method,
                category_id=LOAN_REPAYMENTS,
                bank_account_id=bank_account_id,
                credit_card_id=credit_card_id,
                payee=liability.lender,
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
            liabilities = uow.get(collection)
            index = self._index(liabilities, liability_id)
            updated = replace(liabilities[index], payments=liabilities[index].payments + (payment,))
            if collection == SHORT_TERM:
                updated = refresh_status(updated, self.book.today(), self.book.upcoming_window_days)
            liabilities[index] = updated
            uow.put(collection, liabilities)

        logger.info("Recorded payment of %s on liability %s", amount, liability_id)
        return payment

    def _delete(self, collection: str, liability_id: str) -> None:
        with self.book.unit_of_work() as uow:
            liabilities = uow.get(collection)
            index = self._index(liabilities, liability_id)
            liability = liabilities[index]
            if liability.payments:
                raise DependencyError(
                    delete_blocked(
                        "liability", liability.name, f"{len(liability.payments)} payment(s) recorded"
                    )
                )
            liabilities.pop(index)
            uow.put(collection, liabilities)
        logger.info("Deleted liability %s", liability_id)

    def _append(self, collection: str, liability: Liability) -> None:
        with self.book.unit_of_work() as uow:
            liabilities = uow.get(collection)
            liabilities.append(liability)
            uow.put(collection, liabilities)
        logger.info("Added liability %s (%s)", liability.id, liability.name)

    def _sorted(self, liabilities: list, strategy: PayoffStrategy, remaining) -> list:
        if strategy == PayoffStrategy.SNOWBALL:
            return sorted(liabilities, key=remaining)
        if strategy == PayoffStrategy.AVALANCHE:
            return sorted(liabilities, key=lambda l: l.interest_rate or 0, reverse=True)
        return sorted(liabilities, key=lambda l: l.created_at, reverse=True)

    def _find(self, collection: str, liability_id: str) -> Optional[Liability]:
        for liability in self.book.collection(collection):
            if liability.id == liability_id:
                return liability
        return None

    def _require(self, collection: str, liability_id: str) -> Liability:
        liability = self._find(collection, liability_id)
        if liability is None:
            raise NotFoundError(entity_not_found("Liability", liability_id))
        return liability

    def _index(self, liabilities: list, liability_id: str) -> int:
        for index, liability in enumerate(liabilities):
            if liability.id == liability_id:
                return index
        raise NotFoundError(entity_not_found("Liability", liability_id))
