"""Shared pytest fixtures for pocketbook tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from pocketbook.database.factories import create_sqlite_store
from pocketbook.domain.account import AccountService
from pocketbook.domain.budget import BudgetService
from pocketbook.domain.category import CategoryService
from pocketbook.domain.credit_card import CreditCardService
from pocketbook.domain.debt import PayableService, ReceivableService
from pocketbook.domain.entities import PaymentMethod, TransactionType
from pocketbook.domain.goal import GoalService
from pocketbook.domain.liability import LiabilityService
from pocketbook.domain.recurrence import RecurringTransactionService
from pocketbook.domain.state import Book
from pocketbook.domain.transaction import TransactionService

TODAY = date(2024, 3, 15)


@pytest.fixture
def temp_store():
    """Create a temporary SQLite store for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    store = create_sqlite_store(database_path=db_path)
    # Store the path for CLI tests
    store.database_path = db_path
    store.connect()

    yield store

    # Cleanup
    store.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def book(temp_store):
    """Create a Book on the temporary store with a fixed clock."""
    return Book(temp_store, clock=lambda: TODAY)


@pytest.fixture
def account_service(book):
    return AccountService(book)


@pytest.fixture
def card_service(book):
    return CreditCardService(book)


@pytest.fixture
def category_service(book):
    return CategoryService(book)


@pytest.fixture
def transaction_service(book):
    return TransactionService(book)


@pytest.fixture
def receivable_service(book):
    return ReceivableService(book)


@pytest.fixture
def payable_service(book):
    return PayableService(book)


@pytest.fixture
def liability_service(book):
    return LiabilityService(book)


@pytest.fixture
def goal_service(book):
    return GoalService(book)


@pytest.fixture
def budget_service(book):
    return BudgetService(book)


@pytest.fixture
def recurring_service(book):
    return RecurringTransactionService(book)


@pytest.fixture
def sample_account(account_service):
    """Create a bank account holding 10,000."""
    return account_service.create_account("Salary", "Test Bank", current_balance=Decimal("10000"))


@pytest.fixture
def sample_card(card_service):
    """Create a credit card with a 5,000 limit and nothing outstanding."""
    return card_service.create_card("Visa", "Test Bank", credit_limit=Decimal("5000"))


@pytest.fixture
def sample_categories(category_service):
    """Seed the default categories."""
    category_service.init_default_categories()
    return {c.name: c.id for c in category_service.list_categories()}


@pytest.fixture
def cash_on_hand(transaction_service):
    """Record 2,000 of cash income so cash-funded operations have a balance."""
    return transaction_service.create_transaction(
        date=date(2024, 3, 1),
        description="Cash gift",
        amount=Decimal("2000"),
        type=TransactionType.INCOME,
        payment_method=PaymentMethod.CASH,
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
