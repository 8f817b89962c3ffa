"""Tests for cash balance and net worth."""

from datetime import date
from decimal import Decimal

from pocketbook.domain.asset import AssetService
from pocketbook.domain.defaults import CASH_TO_BANK
from pocketbook.domain.entities import (
    AssetType,
    LiabilityType,
    PaymentMethod,
    Transaction,
    TransactionType,
)
from pocketbook.domain.net_worth import NetWorthService, cash_balance


def _txn(txn_id, amount, kind, method, category_id=None):
    return Transaction(
        id=txn_id,
        date=date(2024, 3, 1),
        description=txn_id,
        amount=Decimal(amount),
        type=kind,
        payment_method=method,
        category_id=category_id,
    )


def test_cash_balance_counts_each_deposit_once():
    """Test a cash-to-bank deposit leaves the cash pool exactly once."""
    transactions = [
        _txn("gift", "1000", TransactionType.INCOME, PaymentMethod.CASH),
        _txn("lunch", "50", TransactionType.EXPENSE, PaymentMethod.CASH),
        # Deposit recorded as a cash expense
        _txn("deposit", "200", TransactionType.EXPENSE, PaymentMethod.CASH, CASH_TO_BANK),
        # Older deposit recorded against the bank side only
        _txn("legacy", "100", TransactionType.EXPENSE, PaymentMethod.BANK_TRANSFER, CASH_TO_BANK),
        # Bank-side income of a deposit doesn't touch cash
        _txn("bank-in", "200", TransactionType.INCOME, PaymentMethod.BANK_TRANSFER, CASH_TO_BANK),
        _txn("card", "75", TransactionType.EXPENSE, PaymentMethod.CREDIT_CARD),
    ]
    assert cash_balance(transactions) == Decimal("650")


def test_net_worth_totals(
    book,
    sample_account,
    sample_card,
    cash_on_hand,
    transaction_service,
    receivable_service,
    payable_service,
    liability_service,
):
    transaction_service.create_transaction(
        date=date(2024, 3, 5),
        description="Shoes",
        amount=Decimal("1000"),
        type=TransactionType.EXPENSE,
        payment_method=PaymentMethod.CREDIT_CARD,
        credit_card_id=sample_card.id,
    )
    receivable_service.create("Nimal", "Loan", Decimal("500"), date(2024, 4, 1))
    payable_service.create("Kamal", "Dinner", Decimal("300"), date(2024, 4, 1))
    liability_service.add_long_term(
        name="Housing",
        type=LiabilityType.HOUSING_LOAN,
        lender="Bank",
        original_amount=Decimal("5000"),
        monthly_payment=Decimal("500"),
        start_date=date(2024, 1, 1),
    )
    assets = AssetService(book)
    assets.create_asset("Land", AssetType.PROPERTY, date(2020, 1, 1), Decimal("15000"), Decimal("20000"))
    assets.create_asset("Car", AssetType.VEHICLE, date(2021, 1, 1), Decimal("3000"))

    summary = NetWorthService(book).compute_net_worth()

    # 10000 bank + 2000 cash + 500 receivable + 20000 land + 3000 car at cost
    assert summary.total_assets == Decimal("35500")
    # 300 payable + 1000 card + 5000 loan
    assert summary.total_liabilities == Decimal("6300")
    assert summary.net_worth == Decimal("29200")


def test_snapshot_overwrites_same_day(book, sample_account):
    service = NetWorthService(book)
    first = service.record_snapshot()
    second = service.record_snapshot()

    assert len(service.history()) == 1
    assert second.id == first.id

    book.clock = lambda: date(2024, 3, 10)
    service.record_snapshot()
    assert [s.date for s in service.history()] == [date(2024, 3, 10), date(2024, 3, 15)]


def test_revalue_asset(book):
    assets = AssetService(book)
    car = assets.create_asset("Car", AssetType.VEHICLE, date(2021, 1, 1), Decimal("3000"))
    assert car.current_value_date is None

    revalued = assets.revalue_asset(car.id, Decimal("2500"), date(2024, 3, 1))
    assert revalued.current_value_date == date(2024, 3, 1)
    assert assets.total_value() == Decimal("2500")


def test_cash_deposit_leaves_net_worth_unchanged(book, account_service, sample_account, cash_on_hand):
    """Test moving cash into a bank only shifts money between pools."""
    service = NetWorthService(book)
    before = service.compute_net_worth()

    account_service.transfer_cash_to_bank(sample_account.id, Decimal("100"))

    assert service.cash_balance() == Decimal("1900")
    assert service.compute_net_worth().net_worth == before.net_worth
