"""Tests for user settings."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from pocketbook.database.factories import create_memory_store
from pocketbook.domain.entities import PaymentStatus
from pocketbook.domain.errors import NotFoundError, ValidationError
from pocketbook.domain.settings import SettingsService
from pocketbook.domain.state import Book

TODAY = date(2024, 3, 15)


@pytest.fixture
def settings_service(book):
    return SettingsService(book)


def test_defaults(settings_service):
    settings = settings_service.get_settings()
    assert settings.upcoming_window_days == 7
    assert settings.emergency_fund_target_months == 6
    assert settings_service.get_currency() == "LKR"


def test_upcoming_window_changes_status(settings_service, receivable_service):
    """Test that widening the lookahead turns a pending debt into an upcoming one."""
    receivable = receivable_service.create("Nimal", "Loan", Decimal("500"), TODAY + timedelta(days=10))
    assert receivable_service.stats(receivable.id).status == PaymentStatus.PENDING

    settings_service.update_settings(upcoming_window_days=14)
    assert receivable_service.stats(receivable.id).status == PaymentStatus.UPCOMING


def test_emergency_fund_balance(settings_service, account_service, sample_account):
    other = account_service.create_account("Spending", "Other Bank", current_balance=Decimal("500"))
    settings_service.update_settings(emergency_fund_account_ids=[sample_account.id])

    assert settings_service.emergency_fund_balance() == Decimal("10000")
    assert other.id not in settings_service.get_settings().emergency_fund_account_ids


def test_emergency_fund_unknown_account(settings_service):
    with pytest.raises(NotFoundError):
        settings_service.update_settings(emergency_fund_account_ids=["missing"])


def test_rejects_negative_window(settings_service):
    with pytest.raises(ValidationError):
        settings_service.update_settings(upcoming_window_days=-1)
    assert settings_service.get_settings().upcoming_window_days == 7


def test_currency_persists(temp_store, settings_service):
    assert settings_service.set_currency(" usd ") == "USD"
    assert Book(temp_store).collection("selected_currency") == "USD"

    with pytest.raises(ValidationError, match="Invalid currency code"):
        settings_service.set_currency("dollars")


def test_settings_on_memory_store():
    service = SettingsService(Book(create_memory_store()))
    service.update_settings(gross_monthly_income=Decimal("150000"))
    assert service.get_settings().gross_monthly_income == Decimal("150000")
