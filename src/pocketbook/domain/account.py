"""Bank account domain service and money transfers."""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional

from pocketbook.domain.defaults import CASH_TO_BANK, INTER_BANK_IN, INTER_BANK_OUT
from pocketbook.domain.entities import BankAccount, PaymentMethod, Transaction, TransactionType
from pocketbook.domain.errors import (
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
from pocketbook.domain.transaction import TransactionService
from pocketbook.utils.ids import new_id

logger = logging.getLogger(__name__)

PAYMENT_OWNERS = ("receivables", "payables", "long_term_liabilities", "short_term_liabilities")


def account_references(
    book: Book,
    bank_account_id: Optional[str] = None,
    credit_card_id: Optional[str] = None,
) -> list[str]:
    """Describe the records that point at a bank account or credit card.

    Returns:
        Human-readable reasons, empty if nothing references the account
    """

    def linked(record) -> bool:
        if bank_account_id is not None and getattr(record, "bank_account_id", None) == bank_account_id:
            return True
        if credit_card_id is not None and getattr(record, "credit_card_id", None) == credit_card_id:
            return True
        return False

    reasons = []
    count = sum(1 for t in book.collection("transactions") if linked(t))
    if count:
        reasons.append(f"{count} transaction(s)")
    count = sum(1 for r in book.collection("recurring_transactions") if linked(r))
    if count:
        reasons.append(f"{count} recurring rule(s)")
    count = sum(
        1 for name in PAYMENT_OWNERS for owner in book.collection(name) for p in owner.payments if linked(p)
    )
    if count:
        reasons.append(f"{count} payment(s)")
    if bank_account_id is not None and bank_account_id in book.collection(
        "user_settings"
    ).emergency_fund_account_ids:
        reasons.append("emergency fund settings")
    return reasons


class AccountService:
    """Service for managing bank accounts."""

    def __init__(self, book: Book):
        """Initialize account service.

        Args:
            book: Book holding the state and store
        """
        self.book = book

    def create_account(
        self,
        account_name: str,
        bank_name: str,
        current_balance: Decimal = Decimal("0"),
        notes: Optional[str] = None,
    ) -> BankAccount:
        """Create a new bank account.

        Args:
            account_name: Account name (must be unique per bank)
            bank_name: Bank name
            current_balance: Opening balance
            notes: Optional notes

        Returns:
            The created account

        Raises:
            ValidationError: If an account with the same name exists at the bank
        """
        if not account_name.strip():
            raise ValidationError("Account name is required")
        with self.book.unit_of_work() as uow:
            accounts = uow.get("bank_accounts")
            for existing in accounts:
                if (
                    existing.account_name.lower() == account_name.lower()
                    and existing.bank_name.lower() == bank_name.lower()
                ):
                    raise ValidationError(
                        f"Account '{account_name}' already exists at {bank_name}"
                    )
            account = BankAccount(
                id=new_id(),
                account_name=account_name,
                bank_name=bank_name,
                current_balance=current_balance,
                notes=notes,
            )
            accounts.append(account)
            uow.put("bank_accounts", accounts)
        logger.info("Created bank account %s (%s)", account.id, account_name)
        return account

    def get_account(self, account_id: str) -> Optional[BankAccount]:
        for account in self.book.collection("bank_accounts"):
            if account.id == account_id:
                return account
        return None

    def list_accounts(self) -> list[BankAccount]:
        return self.book.collection("bank_accounts")

    def update_account(
        self,
        account_id: str,
        account_name: Optional[str] = None,
        bank_name: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> BankAccount:
        """Rename an account or change its notes. The balance is ledger-driven.

        Raises:
            NotFoundError: If account doesn't exist
        """
        with self.book.unit_of_work() as uow:
            accounts = uow.get("bank_accounts")
            index = self._index(accounts, account_id)
            account = accounts[index]
            account = replace(
                account,
                account_name=account_name if account_name is not None else account.account_name,
                bank_name=bank_name if bank_name is not None else account.bank_name,
                notes=notes if notes is not None else account.notes,
            )
            accounts[index] = account
            uow.put("bank_accounts", accounts)
        return account

    def delete_account(self, account_id: str) -> None:
        """Delete an account nothing refers to.

        Raises:
            NotFoundError: If account doesn't exist
            DependencyError: If transactions, rules, payments or settings reference it
        """
        with self.book.unit_of_work() as uow:
            accounts = uow.get("bank_accounts")
            index = self._index(accounts, account_id)
            reasons = account_references(self.book, bank_account_id=account_id)
            if reasons:
                raise DependencyError(
                    delete_blocked(
                        "bank account",
                        accounts[index].account_name,
                        "referenced by " + ", ".join(reasons),
                    )
                )
            accounts.pop(index)
            uow.put("bank_accounts", accounts)
        logger.info("Deleted bank account %s", account_id)

    def reconcile_bank_balance(self, account_id: str, opening_balance: Decimal) -> Decimal:
        """Return the balance the ledger implies for an account.

        This is ``opening_balance`` plus the balance effect of every
        transaction linked to the account. A difference from the stored
        ``current_balance`` means the two have drifted apart.

        Raises:
            NotFoundError: If account doesn't exist
        """
        if self.get_account(account_id) is None:
            raise NotFoundError(entity_not_found("Bank account", account_id))
        return opening_balance + TransactionService(self.book).net_bank_effect(account_id)

    def transfer_cash_to_bank(
        self,
        bank_account_id: str,
        amount: Decimal,
        transfer_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> tuple[Transaction, Transaction]:
        """Deposit cash in hand into a bank account.

        Records a cash expense leaving the cash pool and a matching bank
        income into the account.

        Returns:
            The (cash out, bank in) transaction pair

        Raises:
            ValidationError: If the amount is not positive
            NotFoundError: If the account doesn't exist
            InsufficientFundsError: If the amount exceeds the cash balance
        """
        amount = check_amount(amount, allow_zero=False)
        transfer_date = transfer_date or self.book.today()
        account = self._require(bank_account_id)
        available = cash_balance(self.book.collection("transactions"))
        if amount > available:
            raise InsufficientFundsError(insufficient_funds("cash", available, amount))

        transactions = TransactionService(self.book)
        with self.book.unit_of_work():
            cash_out = transactions.create_transaction(
                date=transfer_date,
                description=f"Cash deposit to {account.account_name}",
                amount=amount,
                type=TransactionType.EXPENSE,
                payment_method=PaymentMethod.CASH,
                category_id=CASH_TO_BANK,
                notes=notes,
            )
            bank_in = transactions.create_transaction(
                date=transfer_date,
                description="Cash deposit",
                amount=amount,
                type=TransactionType.INCOME,
                payment_method=PaymentMethod.BANK_TRANSFER,
                category_id=CASH_TO_BANK,
                bank_account_id=bank_account_id,
                notes=notes,
            )
        logger.info("Transferred %s cash to bank account %s", amount, bank_account_id)
        return cash_out, bank_in

    def inter_bank_transfer(
        self,
        from_account_id: str,
        to_account_id: str,
        amount: Decimal,
        transfer_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> tuple[Transaction, Transaction]:
        """Move money between two of the user's bank accounts.

        Returns:
            The (outgoing, incoming) transaction pair

        Raises:
            ValidationError: If the accounts are the same or the amount is not positive
            NotFoundError: If either account doesn't exist
            InsufficientFundsError: If the source balance is below the amount
        """
        amount = check_amount(amount, allow_zero=False)
        if from_account_id == to_account_id:
            raise ValidationError("Source and destination accounts must differ")
        transfer_date = transfer_date or self.book.today()
        source = self._require(from_account_id)
        target = self._require(to_account_id)
        if source.current_balance < amount:
            raise InsufficientFundsError(
                insufficient_funds(source.account_name, source.current_balance, amount)
            )

        transactions = TransactionService(self.book)
        with self.book.unit_of_work():
            outgoing = transactions.create_transaction(
                date=transfer_date,
                description=f"Transfer to {target.account_name}",
                amount=amount,
                type=TransactionType.EXPENSE,
                payment_method=PaymentMethod.BANK_TRANSFER,
                category_id=INTER_BANK_OUT,
                bank_account_id=from_account_id,
                notes=notes,
            )
            incoming = transactions.create_transaction(
                date=transfer_date,
                description=f"Transfer from {source.account_name}",
                amount=amount,
                type=TransactionType.INCOME,
                payment_method=PaymentMethod.BANK_TRANSFER,
                category_id=INTER_BANK_IN,
                bank_account_id=to_account_id,
                notes=notes,
            )
        logger.info(
            "Transferred %s from account %s to %s", amount, from_account_id, to_account_id
        )
        return outgoing, incoming

    def _require(self, account_id: str) -> BankAccount:
        account = self.get_account(account_id)
        if account is None:
            raise NotFoundError(entity_not_found("Bank account", account_id))
        return account

    def _index(self, accounts: list[BankAccount], account_id: str) -> int:
        for index, account in enumerate(accounts):
            if account.id == account_id:
                return index
        raise NotFoundError(entity_not_found("Bank account", account_id))
