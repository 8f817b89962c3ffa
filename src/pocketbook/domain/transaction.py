"""Transaction domain service.

Creating, editing and deleting a transaction is the only way bank account
balances and credit card available balances change in response to the
ledger. Each edit applies the transaction's balance effect, or its reversal,
in the same unit of work as the ledger change itself.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Optional

from pocketbook.domain.cascade import CascadeReport, cascade_transaction_delete
from pocketbook.domain.entities import (
    PaymentMethod,
    Transaction,
    TransactionSplit,
    TransactionType,
)
from pocketbook.domain.errors import (
    CreditLimitExceededError,
    NotFoundError,
    ValidationError,
    entity_not_found,
)
from pocketbook.domain.state import Book, UnitOfWork
from pocketbook.domain.stats import ZERO, check_amount
from pocketbook.utils.ids import new_id

logger = logging.getLogger(__name__)

# Expense methods that debit a linked bank account
BANK_DEBIT_METHODS = (PaymentMethod.BANK_TRANSFER, PaymentMethod.CHEQUE)


@dataclass(frozen=True)
class BalanceEffect:
    """Signed change a transaction makes to a bank account and a credit card."""

    bank_account_id: Optional[str] = None
    bank_delta: Decimal = ZERO
    credit_card_id: Optional[str] = None
    card_delta: Decimal = ZERO

    def reversed(self) -> "BalanceEffect":
        return replace(self, bank_delta=-self.bank_delta, card_delta=-self.card_delta)


def balance_effect(txn: Transaction) -> BalanceEffect:
    """Return the balance effect of a transaction.

    - INCOME linked to a bank account credits it, whatever the method.
    - EXPENSE paid by bank transfer or cheque debits the linked account.
    - EXPENSE paid by credit card reduces the card's available balance.

    Everything else, including cash, leaves account balances alone.
    """
    bank_id = None
    bank_delta = ZERO
    if txn.bank_account_id:
        if txn.type == TransactionType.INCOME:
            bank_delta = txn.amount
        elif txn.payment_method in BANK_DEBIT_METHODS:
            bank_delta = -txn.amount
        if bank_delta:
            bank_id = txn.bank_account_id

    card_id = None
    card_delta = ZERO
    if (
        txn.credit_card_id
        and txn.type == TransactionType.EXPENSE
        and txn.payment_method == PaymentMethod.CREDIT_CARD
    ):
        card_id = txn.credit_card_id
        card_delta = -txn.amount

    return BalanceEffect(
        bank_account_id=bank_id,
        bank_delta=bank_delta,
        credit_card_id=card_id,
        card_delta=card_delta,
    )


def apply_balance_effect(uow: UnitOfWork, effect: BalanceEffect) -> None:
    """Stage the account and card updates for a balance effect.

    A card's available balance never rises above its limit.

    Raises:
        NotFoundError: If the referenced account or card does not exist
        CreditLimitExceededError: If the card would go below zero available
    """
    if effect.bank_account_id is not None:
        accounts = uow.get("bank_accounts")
        index = _index_of(accounts, effect.bank_account_id, "Bank account")
        account = accounts[index]
        accounts[index] = replace(
            account, current_balance=account.current_balance + effect.bank_delta
        )
        uow.put("bank_accounts", accounts)

    if effect.credit_card_id is not None:
        cards = uow.get("credit_cards")
        index = _index_of(cards, effect.credit_card_id, "Credit card")
        card = cards[index]
        available = card.available_balance + effect.card_delta
        if available < 0:
            raise CreditLimitExceededError(
                f"Credit card '{card.name}' has only {card.available_balance:,.2f} available, "
                f"cannot charge {-effect.card_delta:,.2f}"
            )
        cards[index] = replace(card, available_balance=min(available, card.credit_limit))
        uow.put("credit_cards", cards)


def _index_of(entities: list, entity_id: str, kind: str) -> int:
    for index, entity in enumerate(entities):
        if entity.id == entity_id:
            return index
    raise NotFoundError(entity_not_found(kind, entity_id))


def sort_ledger(transactions: list[Transaction]) -> list[Transaction]:
    """Order transactions newest first. Same-day order is preserved."""
    return sorted(transactions, key=lambda t: t.date, reverse=True)


class TransactionService:
    """Service for managing ledger transactions."""

    def __init__(self, book: Book):
        """Initialize transaction service.

        Args:
            book: Book holding the state and store
        """
        self.book = book

    def create_transaction(
        self,
        date: date,
        description: str,
        amount: Decimal,
        type: TransactionType,
        payment_method: PaymentMethod,
        category_id: Optional[str] = None,
        bank_account_id: Optional[str] = None,
        credit_card_id: Optional[str] = None,
        recurring_transaction_id: Optional[str] = None,
        payee: Optional[str] = None,
        notes: Optional[str] = None,
        is_tax_relevant: bool = False,
        splits: tuple[TransactionSplit, ...] = (),
    ) -> Transaction:
        """Create a transaction and apply its balance effect.

        Args:
            date: Transaction date
            description: Description
            amount: Positive amount
            type: INCOME or EXPENSE
            payment_method: How the money moved
            category_id: Optional category ID
            bank_account_id: Optional linked bank account
            credit_card_id: Optional linked credit card
            recurring_transaction_id: Rule that generated the transaction, if any
            payee: Optional payee
            notes: Optional notes
            is_tax_relevant: Whether the transaction matters for tax
            splits: Category lines; their amounts must add up to ``amount``

        Returns:
            The created transaction

        Raises:
            ValidationError: If the amount or splits are invalid
            NotFoundError: If a referenced category, account or card doesn't exist
            CreditLimitExceededError: If a card charge exceeds the available balance
        """
        txn = Transaction(
            id=new_id(),
            date=date,
            description=description,
            amount=amount,
            type=type,
            payment_method=payment_method,
            category_id=category_id,
            bank_account_id=bank_account_id,
            credit_card_id=credit_card_id,
            recurring_transaction_id=recurring_transaction_id,
            payee=payee,
            notes=notes,
            is_tax_relevant=is_tax_relevant,
            splits=tuple(splits),
        )
        self.add_transaction(txn)
        return txn

    def add_transaction(self, txn: Transaction) -> None:
        """Insert a fully built transaction into the ledger.

        Raises:
            ValidationError: If the transaction ID already exists or the amount is invalid
        """
        with self.book.unit_of_work() as uow:
            transactions = uow.get("transactions")
            if any(t.id == txn.id for t in transactions):
                raise ValidationError(f"Transaction {txn.id} already exists")
            self._validate(uow, txn)
            apply_balance_effect(uow, balance_effect(txn))
            transactions.insert(0, txn)
            uow.put("transactions", sort_ledger(transactions))
        logger.info(
            "Created %s transaction %s for %s on %s",
            txn.type.value.lower(),
            txn.id,
            txn.amount,
            txn.date,
        )

    def update_transaction(self, txn: Transaction) -> None:
        """Replace a transaction, moving balances from the old version to the new one.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ValidationError: If the new version is invalid
            CreditLimitExceededError: If the new card charge doesn't fit
        """
        with self.book.unit_of_work() as uow:
            transactions = uow.get("transactions")
            index = _index_of(transactions, txn.id, "Transaction")
            self._validate(uow, txn)
            apply_balance_effect(uow, balance_effect(transactions[index]).reversed())
            apply_balance_effect(uow, balance_effect(txn))
            transactions[index] = txn
            uow.put("transactions", sort_ledger(transactions))
        logger.info("Updated transaction %s", txn.id)

    def delete_transaction(self, transaction_id: str) -> CascadeReport:
        """Delete a transaction, reverse its balance effect and unlink its payments.

        Returns:
            Report of receivables, payables, liabilities and goals that lost a
            payment or contribution

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        today = self.book.today()
        with self.book.unit_of_work() as uow:
            transactions = uow.get("transactions")
            index = _index_of(transactions, transaction_id, "Transaction")
            txn = transactions.pop(index)
            apply_balance_effect(uow, balance_effect(txn).reversed())
            uow.put("transactions", transactions)
            report = cascade_transaction_delete(
                uow, transaction_id, today, self.book.upcoming_window_days
            )
        logger.info("Deleted transaction %s", transaction_id)
        return report

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction or None if not found
        """
        for txn in self.book.collection("transactions"):
            if txn.id == transaction_id:
                return txn
        return None

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category_id: Optional[str] = None,
        bank_account_id: Optional[str] = None,
        credit_card_id: Optional[str] = None,
        type: Optional[TransactionType] = None,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        """List transactions, newest first, with optional filters.

        A category filter also matches split transactions with a line in
        that category.
        """
        result = []
        for txn in self.book.collection("transactions"):
            if start_date is not None and txn.date < start_date:
                continue
            if end_date is not None and txn.date > end_date:
                continue
            if category_id is not None and txn.category_id != category_id and not any(
                s.category_id == category_id for s in txn.splits
            ):
                continue
            if bank_account_id is not None and txn.bank_account_id != bank_account_id:
                continue
            if credit_card_id is not None and txn.credit_card_id != credit_card_id:
                continue
            if type is not None and txn.type != type:
                continue
            result.append(txn)
        if limit is not None:
            result = result[:limit]
        return result

    def net_bank_effect(self, bank_account_id: str) -> Decimal:
        """Sum the balance effects of every transaction on one bank account.

        Comparing this against the change in an account's stored balance
        detects drift between the ledger and the incremental balance.
        """
        total = ZERO
        for txn in self.book.collection("transactions"):
            effect = balance_effect(txn)
            if effect.bank_account_id == bank_account_id:
                total += effect.bank_delta
        return total

    def _validate(self, uow: UnitOfWork, txn: Transaction) -> None:
        check_amount(txn.amount, allow_zero=False)
        if txn.splits:
            for split in txn.splits:
                check_amount(split.amount, "split amount", allow_zero=False)
            if sum((s.amount for s in txn.splits), ZERO) != txn.amount:
                raise ValidationError(
                    f"Split amounts must add up to the transaction amount {txn.amount}"
                )
        category_ids = {c.id for c in uow.get("categories")}
        for category_id in [txn.category_id, *(s.category_id for s in txn.splits)]:
            if category_id is not None and category_id not in category_ids:
                raise NotFoundError(entity_not_found("Category", category_id))
