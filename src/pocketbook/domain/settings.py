"""User settings and display currency."""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Optional, Sequence

from pocketbook.domain.entities import UserSettings
from pocketbook.domain.errors import NotFoundError, ValidationError, entity_not_found
from pocketbook.domain.state import Book
from pocketbook.domain.stats import ZERO, check_amount

logger = logging.getLogger(__name__)


class SettingsService:
    """Reads and updates the book's user settings."""

    def __init__(self, book: Book):
        self.book = book

    def get_settings(self) -> UserSettings:
        return self.book.collection("user_settings")

    def update_settings(
        self,
        emergency_fund_target_months: Optional[int] = None,
        emergency_fund_account_ids: Optional[Sequence[str]] = None,
        gross_monthly_income: Optional[Decimal] = None,
        savings_rate_target: Optional[Decimal] = None,
        upcoming_window_days: Optional[int] = None,
    ) -> UserSettings:
        """Update any subset of the settings.

        Raises:
            ValidationError: If a value is out of range
            NotFoundError: If an emergency fund account doesn't exist
        """
        settings = self.get_settings()
        changes: dict = {}
        if emergency_fund_target_months is not None:
            if emergency_fund_target_months < 0:
                raise ValidationError("Emergency fund target months must not be negative")
            changes["emergency_fund_target_months"] = emergency_fund_target_months
        if emergency_fund_account_ids is not None:
            known = {a.id for a in self.book.collection("bank_accounts")}
            for account_id in emergency_fund_account_ids:
                if account_id not in known:
                    raise NotFoundError(entity_not_found("Bank account", account_id))
            changes["emergency_fund_account_ids"] = tuple(emergency_fund_account_ids)
        if gross_monthly_income is not None:
            changes["gross_monthly_income"] = check_amount(gross_monthly_income, "gross monthly income")
        if savings_rate_target is not None:
            changes["savings_rate_target"] = check_amount(savings_rate_target, "savings rate target")
        if upcoming_window_days is not None:
            if upcoming_window_days < 0:
                raise ValidationError("Upcoming window must not be negative")
            changes["upcoming_window_days"] = upcoming_window_days

        settings = replace(settings, **changes)
        with self.book.unit_of_work() as uow:
            uow.put("user_settings", settings)
        return settings

    def emergency_fund_balance(self) -> Decimal:
        """Sum the balances of the accounts set aside as an emergency fund."""
        ids = set(self.get_settings().emergency_fund_account_ids)
        return sum(
            (a.current_balance for a in self.book.collection("bank_accounts") if a.id in ids), ZERO
        )

    def get_currency(self) -> str:
        return self.book.collection("selected_currency")

    def set_currency(self, currency: str) -> str:
        """Set the display currency code, e.g. ``LKR`` or ``USD``."""
        currency = currency.strip().upper()
        if len(currency) != 3 or not currency.isalpha():
            raise ValidationError(f"Invalid currency code '{currency}'")
        with self.book.unit_of_work() as uow:
            uow.put("selected_currency", currency)
        logger.info("Currency set to %s", currency)
        return currency
