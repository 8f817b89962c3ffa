"""Domain model entities for pocketbook.

These are pure data classes representing business concepts, independent of
how they are persisted. Entities are immutable; services produce updated
copies with ``dataclasses.replace`` and hand whole collections back to the
unit of work.

Payments and contributions are owned by their parent entity. Their
``transaction_id`` is a weak back reference to the ledger transaction the
payment generated and is only used to cascade ledger deletions.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Direction of a ledger transaction."""

    INCOME = "Income"
    EXPENSE = "Expense"


class PaymentMethod(str, Enum):
    """How money moved for a transaction or payment."""

    CASH = "Cash"
    CHEQUE = "Cheque"
    BANK_TRANSFER = "Bank Transfer"
    CREDIT_CARD = "Credit Card"
    OTHER = "Other"


class PaymentStatus(str, Enum):
    """Derived status shared by receivables, payables and short-term liabilities."""

    UPCOMING = "Upcoming"
    PENDING = "Pending"
    PARTIALLY_PAID = "Partially Paid"
    PAID = "Paid"
    OVERDUE = "Overdue"


class PaymentStructure(str, Enum):
    """Repayment structure of a short-term liability."""

    SINGLE = "Single Payment"
    INSTALLMENTS = "Installments"


class LiabilityType(str, Enum):
    """Kind of long-term liability."""

    PERSONAL_LOAN = "Personal Loan"
    HOUSING_LOAN = "Housing Loan"
    CAR_LOAN = "Car Loan"
    STUDENT_LOAN = "Student Loan"
    LEASE_AGREEMENT = "Lease Agreement"
    OTHER = "Other Non-Current Liability"


class AssetType(str, Enum):
    """Kind of non-current asset."""

    PROPERTY = "PROPERTY"
    BUILDING = "BUILDING"
    VEHICLE = "VEHICLE"
    FIXED_DEPOSIT = "FIXED_DEPOSIT"
    OTHER_INVESTMENT = "OTHER_INVESTMENT"


class RecurringFrequency(str, Enum):
    """How often a recurring rule materialises."""

    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"


class TaxRelevance(str, Enum):
    """Default tax treatment of a category."""

    INCOME = "income"
    DEDUCTION = "deduction"
    NONE = "none"


@dataclass(frozen=True)
class Category:
    """Transaction category."""

    id: str
    name: str
    default_tax_relevance: TaxRelevance = TaxRelevance.NONE


@dataclass(frozen=True)
class TransactionSplit:
    """One category line of a split transaction."""

    id: str
    category_id: str
    amount: Decimal
    description: Optional[str] = None


@dataclass(frozen=True)
class Transaction:
    """Ledger transaction. ``amount`` is always positive; ``type`` gives the sign."""

    id: str
    date: date
    description: str
    amount: Decimal
    type: TransactionType
    payment_method: PaymentMethod
    category_id: Optional[str] = None
    bank_account_id: Optional[str] = None
    credit_card_id: Optional[str] = None
    recurring_transaction_id: Optional[str] = None
    payee: Optional[str] = None
    notes: Optional[str] = None
    is_tax_relevant: bool = False
    splits: tuple[TransactionSplit, ...] = ()

    @property
    def is_split(self) -> bool:
        return len(self.splits) > 0


@dataclass(frozen=True)
class BankAccount:
    """Bank account with an incrementally maintained balance."""

    id: str
    account_name: str
    bank_name: str
    current_balance: Decimal
    notes: Optional[str] = None


@dataclass(frozen=True)
class CreditCard:
    """Credit card. ``available_balance`` stays within ``[0, credit_limit]``."""

    id: str
    name: str
    bank_name: str
    credit_limit: Decimal
    available_balance: Decimal
    statement_day: Optional[int] = None
    due_day: Optional[int] = None
    notes: Optional[str] = None

    @property
    def outstanding(self) -> Decimal:
        return self.credit_limit - self.available_balance


@dataclass(frozen=True)
class Payment:
    """Payment recorded against a receivable, payable or liability."""

    id: str
    amount: Decimal
    date: date
    payment_method: Optional[PaymentMethod] = None
    bank_account_id: Optional[str] = None
    credit_card_id: Optional[str] = None
    transaction_id: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class Receivable:
    """Money owed to the user."""

    id: str
    debtor_name: str
    description: str
    total_amount: Decimal
    due_date: date
    created_at: date
    payments: tuple[Payment, ...] = ()
    status: PaymentStatus = PaymentStatus.PENDING


@dataclass(frozen=True)
class Payable:
    """Money the user owes."""

    id: str
    creditor_name: str
    description: str
    total_amount: Decimal
    due_date: date
    created_at: date
    payments: tuple[Payment, ...] = ()
    status: PaymentStatus = PaymentStatus.PENDING


@dataclass(frozen=True)
class LongTermLiability:
    """Loan or lease repaid over many months. Has no cached status."""

    id: str
    name: str
    type: LiabilityType
    lender: str
    original_amount: Decimal
    monthly_payment: Decimal
    start_date: date
    created_at: date
    end_date: Optional[date] = None
    interest_rate: Optional[Decimal] = None
    payments: tuple[Payment, ...] = ()
    notes: Optional[str] = None


@dataclass(frozen=True)
class ShortTermLiability:
    """Short-term debt paid in one go or in monthly installments."""

    id: str
    name: str
    lender: str
    original_amount: Decimal
    due_date: date
    created_at: date
    payment_structure: PaymentStructure = PaymentStructure.SINGLE
    number_of_installments: Optional[int] = None
    payment_day_of_month: Optional[int] = None
    interest_rate: Optional[Decimal] = None
    payments: tuple[Payment, ...] = ()
    status: PaymentStatus = PaymentStatus.PENDING
    notes: Optional[str] = None


@dataclass(frozen=True)
class NonCurrentAsset:
    """Property, vehicle, deposit or other long-lived asset."""

    id: str
    name: str
    type: AssetType
    acquisition_date: date
    acquisition_cost: Decimal
    current_value: Optional[Decimal] = None
    current_value_date: Optional[date] = None
    notes: Optional[str] = None

    @property
    def value(self) -> Decimal:
        return self.current_value if self.current_value is not None else self.acquisition_cost


@dataclass(frozen=True)
class GoalContribution:
    """Contribution towards a financial goal."""

    id: str
    amount: Decimal
    date: date
    transaction_id: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class FinancialGoal:
    """Savings goal. ``current_amount`` and ``achieved_date`` are derived."""

    id: str
    name: str
    target_amount: Decimal
    created_at: date
    current_amount: Decimal = Decimal("0")
    deadline: Optional[date] = None
    notes: Optional[str] = None
    contributions: tuple[GoalContribution, ...] = ()
    achieved_date: Optional[date] = None


@dataclass(frozen=True)
class RecurringTransaction:
    """Template that periodically materialises into ledger transactions.

    ``day_of_week`` uses 0 for Sunday through 6 for Saturday.
    """

    id: str
    description: str
    amount: Decimal
    type: TransactionType
    payment_method: PaymentMethod
    frequency: RecurringFrequency
    start_date: date
    next_due_date: date
    category_id: Optional[str] = None
    bank_account_id: Optional[str] = None
    credit_card_id: Optional[str] = None
    end_date: Optional[date] = None
    day_of_week: Optional[int] = None
    day_of_month: Optional[int] = None
    is_active: bool = True
    last_processed_date: Optional[date] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class NetWorthSnapshot:
    """Net worth recorded for one calendar day."""

    id: str
    date: date
    assets: Decimal
    liabilities: Decimal
    net_worth: Decimal


@dataclass(frozen=True)
class Budget:
    """Monthly spending limit for a category. ``start_date`` is the first of the month."""

    id: str
    category_id: str
    limit_amount: Decimal
    start_date: date
    period: str = "Monthly"
    rollover_enabled: bool = False


@dataclass(frozen=True)
class UserSettings:
    """Per-user preferences that feed derived calculations."""

    emergency_fund_target_months: int = 6
    emergency_fund_account_ids: tuple[str, ...] = ()
    gross_monthly_income: Decimal = Decimal("0")
    savings_rate_target: Decimal = Decimal("20")
    upcoming_window_days: int = 7


@dataclass(frozen=True)
class ProjectionEvent:
    """Single inflow or outflow in a cash-flow projection day."""

    description: str
    amount: Decimal
    type: str  # "inflow" or "outflow"


@dataclass(frozen=True)
class DailyProjection:
    """Simulated balances for one projected day."""

    date: date
    start_balance: Decimal
    events: tuple[ProjectionEvent, ...] = field(default_factory=tuple)
    end_balance: Decimal = Decimal("0")


@dataclass(frozen=True)
class NetWorthSummary:
    """Totals produced by the net worth aggregation."""

    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal
