"""Credit card domain service."""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional

from pocketbook.domain.account import account_references
from pocketbook.domain.defaults import CREDIT_CARD_PAYMENT
from pocketbook.domain.entities import CreditCard, PaymentMethod, Transaction, TransactionType
from pocketbook.domain.errors import (
    CreditLimitExceededError,
    DependencyError,
    InsufficientFundsError,
    NotFoundError,
    ValidationError,
    delete_blocked,
    entity_not_found,
    insufficient_funds,
)
from pocketbook.domain.net_worth import cash_balance
from pocketbook.domain.state import Book
from pocketbook.domain.stats import check_amount
from pocketbook.domain.transaction import BANK_DEBIT_METHODS, TransactionService
from pocketbook.utils.ids import new_id

logger = logging.getLogger(__name__)


def _check_day(value: Optional[int], field: str) -> None:
    if value is not None and not 1 <= value <= 31:
        raise ValidationError(f"{field} must be between 1 and 31, got {value}")


class CreditCardService:
    """Service for managing credit cards and their repayments."""

    def __init__(self, book: Book):
        """Initialize credit card service.

        Args:
            book: Book holding the state and store
        """
        self.book = book

    def create_card(
        self,
        name: str,
        bank_name: str,
        credit_limit: Decimal,
        available_balance: Optional[Decimal] = None,
        statement_day: Optional[int] = None,
        due_day: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> CreditCard:
        """Create a credit card. Available balance defaults to the full limit.

        Raises:
            ValidationError: If the limit or available balance is invalid
        """
        credit_limit = check_amount(credit_limit, "credit limit", allow_zero=False)
        if available_balance is None:
            available_balance = credit_limit
        available_balance = check_amount(available_balance, "available balance")
        if available_balance > credit_limit:
            raise ValidationError("Available balance cannot exceed the credit limit")
        _check_day(statement_day, "Statement day")
        _check_day(due_day, "Due day")

        card = CreditCard(
            id=new_id(),
            name=name,
            bank_name=bank_name,
            credit_limit=credit_limit,
            available_balance=available_balance,
            statement_day=statement_day,
            due_day=due_day,
            notes=notes,
        )
        with self.book.unit_of_work() as uow:
            cards = uow.get("credit_cards")
            cards.append(card)
            uow.put("credit_cards", cards)
        logger.info("Created credit card %s (%s)", card.id, name)
        return card

    def get_card(self, card_id: str) -> Optional[CreditCard]:
        for card in self.book.collection("credit_cards"):
            if card.id == card_id:
                return card
        return None

    def list_cards(self) -> list[CreditCard]:
        return self.book.collection("credit_cards")

    def update_card(
        self,
        card_id: str,
        name: Optional[str] = None,
        bank_name: Optional[str] = None,
        credit_limit: Optional[Decimal] = None,
        statement_day: Optional[int] = None,
        due_day: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> CreditCard:
        """Update card details.

        Changing the limit keeps the outstanding amount and moves the
        available balance with it.

        Raises:
            NotFoundError: If the card doesn't exist
            CreditLimitExceededError: If the new limit is below the outstanding amount
        """
        _check_day(statement_day, "Statement day")
        _check_day(due_day, "Due day")
        with self.book.unit_of_work() as uow:
            cards = uow.get("credit_cards")
            index = self._index(cards, card_id)
            card = cards[index]
            available = card.available_balance
            if credit_limit is not None:
                credit_limit = check_amount(credit_limit, "credit limit", allow_zero=False)
                available = credit_limit - card.outstanding
                if available < 0:
                    raise CreditLimitExceededError(
                        f"New limit {credit_limit:,.2f} is below the outstanding "
                        f"{card.outstanding:,.2f}"
                    )
            card = replace(
                card,
                name=name if name is not None else card.name,
                bank_name=bank_name if bank_name is not None else card.bank_name,
                credit_limit=credit_limit if credit_limit is not None else card.credit_limit,
                available_balance=available,
                statement_day=statement_day if statement_day is not None else card.statement_day,
                due_day=due_day if due_day is not None else card.due_day,
                notes=notes if notes is not None else card.notes,
            )
            cards[index] = card
            uow.put("credit_cards", cards)
        return card

    def delete_card(self, card_id: str) -> None:
        """Delete a card nothing refers to.

        Raises:
            NotFoundError: If the card doesn't exist
            DependencyError: If transactions, rules or payments reference it
        """
        with self.book.unit_of_work() as uow:
            cards = uow.get("credit_cards")
            index = self._index(cards, card_id)
            reasons = account_references(self.book, credit_card_id=card_id)
            if reasons:
                raise DependencyError(
                    delete_blocked(
                        "credit card", cards[index].name, "referenced by " + ", ".join(reasons)
                    )
                )
            cards.pop(index)
            uow.put("credit_cards", cards)
        logger.info("Deleted credit card %s", card_id)

    def record_payment(
        self,
        card_id: str,
        amount: Decimal,
        payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER,
        bank_account_id: Optional[str] = None,
        payment_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> Transaction:
        """Pay off part or all of a card's outstanding balance.

        The amount applied is capped at what is outstanding. The payment is
        recorded as an expense from the paying account (or from cash), and
        the card's available balance goes up by the same amount.

        Args:
            card_id: Card being paid
            amount: Amount offered
            payment_method: Bank transfer, cheque or cash
            bank_account_id: Paying account, required for bank transfer and cheque
            payment_date: Payment date, defaults to today
            notes: Optional notes

        Returns:
            The ledger transaction for the payment

        Raises:
            ValidationError: If the amount or method is invalid
            NotFoundError: If the card or paying account doesn't exist
            CreditLimitExceededError: If nothing is outstanding on the card
            InsufficientFundsError: If the paying account or cash cannot cover the amount
        """
        amount = check_amount(amount, allow_zero=False)
        card = self.get_card(card_id)
        if card is None:
            raise NotFoundError(entity_not_found("Credit card", card_id))
        if card.outstanding <= 0:
            raise CreditLimitExceededError(f"Credit card '{card.name}' has nothing outstanding")
        applied = min(amount, card.outstanding)

        if payment_method in BANK_DEBIT_METHODS:
            if bank_account_id is None:
                raise ValidationError(f"{payment_method.value} payments need a bank account")
            account = None
            for candidate in self.book.collection("bank_accounts"):
                if candidate.id == bank_account_id:
                    account = candidate
            if account is None:
                raise NotFoundError(entity_not_found("Bank account", bank_account_id))
            if account.current_balance < applied:
                raise InsufficientFundsError(
                    insufficient_funds(account.account_name, account.current_balance, applied)
                )
        elif payment_method == PaymentMethod.CASH:
            bank_account_id = None
            available = cash_balance(self.book.collection("transactions"))
            if available < applied:
                raise InsufficientFundsError(insufficient_funds("cash", available, applied))
        else:
            raise ValidationError(f"Cannot pay a credit card by {payment_method.value}")

        with self.book.unit_of_work() as uow:
            txn = TransactionService(self.book).create_transaction(
                date=payment_date or self.book.today(),
                description=f"Payment to {card.name}",
                amount=applied,
                type=TransactionType.EXPENSE,
                payment_method=payment_method,
                category_id=CREDIT_CARD_PAYMENT,
                bank_account_id=bank_account_id,
                notes=notes,
            )
            cards = uow.get("credit_cards")
            index = self._index(cards, card_id)
            cards[index] = replace(
                cards[index], available_balance=cards[index].available_balance + applied
            )
            uow.put("credit_cards", cards)
        logger.info("Recorded payment of %s to credit card %s", applied, card_id)
        return txn

    def _index(self, cards: list[CreditCard], card_id: str) -> int:
        for index, card in enumerate(cards):
            if card.id == card_id:
                return index
        raise NotFoundError(entity_not_found("Credit card", card_id))
