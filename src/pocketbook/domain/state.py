"""Application state, unit of work and the Book that services operate on.

All collections live on one ``AppState`` object owned by a ``Book``. Domain
services never mutate the state directly: they open a unit of work, stage
whole replacement collections, and the unit of work commits every staged
collection to the store in one ``save_many`` call before swapping them into
the in-memory state. An exception anywhere inside the block discards every
staged change.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Iterator, Optional

from pocketbook.database.base import KeyValueStore
from pocketbook.database.memory import InMemoryStore
from pocketbook.database.mappers import from_record, from_records, to_record, to_records
from pocketbook.domain.defaults import SYSTEM_CATEGORIES
from pocketbook.domain.entities import (
    BankAccount,
    Budget,
    Category,
    CreditCard,
    FinancialGoal,
    LongTermLiability,
    NetWorthSnapshot,
    NonCurrentAsset,
    Payable,
    Receivable,
    RecurringTransaction,
    ShortTermLiability,
    Transaction,
    UserSettings,
)

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "LKR"

# attribute name -> (store key, entity type)
COLLECTIONS: dict[str, tuple[str, type]] = {
    "categories": ("categories", Category),
    "transactions": ("transactions", Transaction),
    "budgets": ("budgets", Budget),
    "receivables": ("receivables", Receivable),
    "payables": ("payables", Payable),
    "credit_cards": ("creditCards", CreditCard),
    "bank_accounts": ("bankAccounts", BankAccount),
    "long_term_liabilities": ("longTermLiabilities", LongTermLiability),
    "short_term_liabilities": ("shortTermLiabilities", ShortTermLiability),
    "non_current_assets": ("nonCurrentAssets", NonCurrentAsset),
    "financial_goals": ("financialGoals", FinancialGoal),
    "recurring_transactions": ("recurringTransactions", RecurringTransaction),
    "net_worth_history": ("netWorthHistory", NetWorthSnapshot),
}

SETTINGS_KEY = "userSettings"
CURRENCY_KEY = "selectedCurrency"


@dataclass
class AppState:
    """Every collection the tracker keeps, held in memory."""

    categories: list[Category] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    budgets: list[Budget] = field(default_factory=list)
    receivables: list[Receivable] = field(default_factory=list)
    payables: list[Payable] = field(default_factory=list)
    credit_cards: list[CreditCard] = field(default_factory=list)
    bank_accounts: list[BankAccount] = field(default_factory=list)
    long_term_liabilities: list[LongTermLiability] = field(default_factory=list)
    short_term_liabilities: list[ShortTermLiability] = field(default_factory=list)
    non_current_assets: list[NonCurrentAsset] = field(default_factory=list)
    financial_goals: list[FinancialGoal] = field(default_factory=list)
    recurring_transactions: list[RecurringTransaction] = field(default_factory=list)
    net_worth_history: list[NetWorthSnapshot] = field(default_factory=list)
    user_settings: UserSettings = field(default_factory=UserSettings)
    selected_currency: str = DEFAULT_CURRENCY

    @classmethod
    def load(cls, store: KeyValueStore) -> "AppState":
        """Read every collection from a store, using empty defaults for missing keys."""
        state = cls()
        for name, (key, entity_type) in COLLECTIONS.items():
            setattr(state, name, from_records(entity_type, store.load(key, [])))
        known = {category.id for category in state.categories}
        state.categories.extend(c for c in SYSTEM_CATEGORIES if c.id not in known)
        settings = store.load(SETTINGS_KEY)
        if settings is not None:
            state.user_settings = from_record(UserSettings, settings)
        state.selected_currency = store.load(CURRENCY_KEY, DEFAULT_CURRENCY)
        return state


def serialize_value(name: str, value: Any) -> tuple[str, Any]:
    """Return the store key and JSON-compatible value for a state attribute."""
    if name in COLLECTIONS:
        return COLLECTIONS[name][0], to_records(value)
    if name == "user_settings":
        return SETTINGS_KEY, to_record(value)
    if name == "selected_currency":
        return CURRENCY_KEY, value
    raise KeyError(name)


class UnitOfWork:
    """Stages replacement collections and commits them together."""

    def __init__(self, state: AppState):
        self._state = state
        self._staged: dict[str, Any] = {}

    def get(self, name: str) -> Any:
        """Return the staged value for a state attribute, or a copy of the current one.

        Lists are copied so callers can edit and ``put`` them back.
        """
        if name in self._staged:
            value = self._staged[name]
        else:
            value = getattr(self._state, name)
        return list(value) if isinstance(value, list) else value

    def put(self, name: str, value: Any) -> None:
        """Stage a replacement value for a state attribute."""
        if not hasattr(self._state, name):
            raise KeyError(name)
        self._staged[name] = value

    @property
    def staged_names(self) -> list[str]:
        return sorted(self._staged)

    def commit(self, store: KeyValueStore) -> None:
        """Write staged values to the store, then apply them to the state."""
        if not self._staged:
            return
        store.save_many(dict(serialize_value(name, value) for name, value in self._staged.items()))
        for name, value in self._staged.items():
            setattr(self._state, name, value)
        logger.debug("Committed %s", ", ".join(self.staged_names))
        self._staged = {}


class Book:
    """A user's finance data: state, backing store and clock."""

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        clock: Callable[[], date] = date.today,
    ):
        """Initialize a book.

        Args:
            store: Backing store. Defaults to an empty in-memory store.
            clock: Callable returning "today"; injectable for tests.
        """
        self.store = store if store is not None else InMemoryStore()
        self.clock = clock
        self.state = AppState.load(self.store)
        self._active: Optional[UnitOfWork] = None

    def today(self) -> date:
        return self.clock()

    @property
    def upcoming_window_days(self) -> int:
        return self.collection("user_settings").upcoming_window_days

    def collection(self, name: str) -> Any:
        """Read a state attribute, seeing staged values while a unit of work is open."""
        if self._active is not None:
            return self._active.get(name)
        value = getattr(self.state, name)
        return list(value) if isinstance(value, list) else value

    @contextmanager
    def unit_of_work(self) -> Iterator[UnitOfWork]:
        """Open a unit of work, or join the one already open.

        Nested blocks share the outermost unit of work, so an operation that
        calls another service commits once, when the outermost block exits.
        """
        if self._active is not None:
            yield self._active
            return

        uow = UnitOfWork(self.state)
        self._active = uow
        try:
            yield uow
            uow.commit(self.store)
        finally:
            self._active = None
