"""Tests for payment cleanup when a transaction is deleted."""

from datetime import date
from decimal import Decimal

from pocketbook.domain.entities import (
    LiabilityType,
    PaymentMethod,
    PaymentStatus,
    TransactionType,
)


def test_deleting_payment_transaction_reopens_payable(
    payable_service, transaction_service, sample_account, book
):
    """Test a payable paid 400 then 600 goes back to 600 owed when the second txn is deleted."""
    payable = payable_service.create("Landlord", "March rent", Decimal("1000"), date(2024, 4, 30))
    assert payable.status == PaymentStatus.PENDING

    payable_service.add_payment(
        payable.id, Decimal("400"), payment_method=PaymentMethod.BANK_TRANSFER, bank_account_id=sample_account.id
    )
    assert payable_service.get_debt(payable.id).status == PaymentStatus.PARTIALLY_PAID

    second = payable_service.add_payment(
        payable.id, Decimal("600"), payment_method=PaymentMethod.BANK_TRANSFER, bank_account_id=sample_account.id
    )
    assert payable_service.get_debt(payable.id).status == PaymentStatus.PAID
    assert book.collection("bank_accounts")[0].current_balance == Decimal("9000")

    report = transaction_service.delete_transaction(second.transaction_id)

    assert report.payable_ids == (payable.id,)
    assert report.touched
    reopened = payable_service.get_debt(payable.id)
    assert [p.amount for p in reopened.payments] == [Decimal("400")]
    assert reopened.status == PaymentStatus.PARTIALLY_PAID
    assert payable_service.stats(payable.id).remaining == Decimal("600")
    # The stored status was refreshed too, not just the derived one
    stored = next(p for p in book.collection("payables") if p.id == payable.id)
    assert stored.status == PaymentStatus.PARTIALLY_PAID
    assert book.collection("bank_accounts")[0].current_balance == Decimal("9600")


def test_deleting_contribution_transaction_clears_achieved_goal(goal_service, transaction_service, sample_account):
    goal = goal_service.create_goal("Emergency fund", Decimal("1000"))
    contribution = goal_service.add_contribution(
        goal.id,
        Decimal("1000"),
        payment_method=PaymentMethod.BANK_TRANSFER,
        bank_account_id=sample_account.id,
    )
    assert goal_service.get_goal(goal.id).achieved_date == date(2024, 3, 15)

    report = transaction_service.delete_transaction(contribution.transaction_id)

    assert report.goal_ids == (goal.id,)
    updated = goal_service.get_goal(goal.id)
    assert updated.contributions == ()
    assert updated.current_amount == Decimal("0")
    assert updated.achieved_date is None


def test_deleting_loan_payment_transaction(liability_service, transaction_service, sample_account):
    loan = liability_service.add_long_term(
        name="Car loan",
        type=LiabilityType.CAR_LOAN,
        lender="Bank",
        original_amount=Decimal("100000"),
        monthly_payment=Decimal("5000"),
        start_date=date(2024, 1, 1),
    )
    payment = liability_service.add_long_term_payment(
        loan.id, Decimal("5000"), bank_account_id=sample_account.id
    )
    assert liability_service.long_term_stats(loan.id).remaining_balance == Decimal("95000")

    report = transaction_service.delete_transaction(payment.transaction_id)

    assert report.long_term_liability_ids == (loan.id,)
    assert liability_service.long_term_stats(loan.id).remaining_balance == Decimal("100000")


def test_deleting_unrelated_transaction_touches_nothing(transaction_service, receivable_service):
    receivable_service.create("Nimal", "Loan", Decimal("500"), date(2024, 4, 30))
    txn = transaction_service.create_transaction(
        date=date(2024, 3, 1),
        description="Lunch",
        amount=Decimal("15"),
        type=TransactionType.EXPENSE,
        payment_method=PaymentMethod.CASH,
    )

    report = transaction_service.delete_transaction(txn.id)

    assert not report.touched
    assert report.transaction_id == txn.id


def test_delete_payment_removes_its_transaction(receivable_service, transaction_service, book):
    """Test deleting a payment through its debt also deletes the ledger transaction."""
    receivable = receivable_service.create("Nimal", "Loan", Decimal("500"), date(2024, 4, 30))
    payment = receivable_service.add_payment(receivable.id, Decimal("200"))
    assert transaction_service.get_transaction(payment.transaction_id) is not None

    receivable_service.delete_payment(receivable.id, payment.id)

    assert transaction_service.get_transaction(payment.transaction_id) is None
    assert receivable_service.get_debt(receivable.id).payments == ()


def test_cascade_leaves_other_entities_untouched(
    payable_service, receivable_service, goal_service, transaction_service, sample_account, cash_on_hand
):
    """Test only the payment linked to the deleted transaction is removed."""
    rent = payable_service.create("Landlord", "March rent", Decimal("1000"), date(2024, 4, 30))
    dinner = payable_service.create("Kamal", "Dinner", Decimal("300"), date(2024, 4, 30))
    loan = receivable_service.create("Nimal", "Loan", Decimal("500"), date(2024, 4, 30))
    goal = goal_service.create_goal("Holiday", Decimal("2000"))

    rent_payment = payable_service.add_payment(
        rent.id, Decimal("400"), payment_method=PaymentMethod.BANK_TRANSFER, bank_account_id=sample_account.id
    )
    payable_service.add_payment(dinner.id, Decimal("100"))
    receivable_service.add_payment(loan.id, Decimal("200"))
    goal_service.add_contribution(goal.id, Decimal("250"), payment_method=PaymentMethod.CASH)

    dinner_before = payable_service.get_debt(dinner.id)
    loan_before = receivable_service.get_debt(loan.id)
    goal_before = goal_service.get_goal(goal.id)

    report = transaction_service.delete_transaction(rent_payment.transaction_id)

    assert report.payable_ids == (rent.id,)
    assert report.receivable_ids == ()
    assert report.goal_ids == ()
    assert payable_service.get_debt(rent.id).payments == ()
    assert payable_service.get_debt(dinner.id) == dinner_before
    assert receivable_service.get_debt(loan.id) == loan_before
    assert goal_service.get_goal(goal.id) == goal_before
