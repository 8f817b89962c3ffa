"""Built-in categories.

System categories have fixed ids because services tag the transactions they
generate with them (transfers, card payments, goal contributions, debt
payments). They are always present in a book.
"""

from pocketbook.domain.entities import Category, TaxRelevance

CASH_TO_BANK = "cat_sys_cash_to_bank"
INTER_BANK_OUT = "cat_sys_inter_bank_out"
INTER_BANK_IN = "cat_sys_inter_bank_in"
CREDIT_CARD_PAYMENT = "cat_sys_cc_payment"
GOAL_CONTRIBUTION = "cat_sys_goal_contrib"
OTHER_INCOME = "cat_inc_other"
LOAN_REPAYMENTS = "cat_exp_loan_repayments_general"

SYSTEM_CATEGORIES: tuple[Category, ...] = (
    Category(CASH_TO_BANK, "Cash to Bank Transfer"),
    Category(INTER_BANK_OUT, "Inter-Bank Transfer Out"),
    Category(INTER_BANK_IN, "Inter-Bank Transfer In"),
    Category(CREDIT_CARD_PAYMENT, "Credit Card Payment"),
    Category(GOAL_CONTRIBUTION, "Goal Contribution Transfer"),
    Category(OTHER_INCOME, "Other Income"),
    Category(LOAN_REPAYMENTS, "Loan Repayments (General)"),
)

# (id, name, tax relevance) seeded by `pocketbook init-categories`
DEFAULT_CATEGORIES: list[tuple[str, str, TaxRelevance]] = [
    ("cat_inc_salary", "Salary", TaxRelevance.INCOME),
    ("cat_inc_business", "Business Income", TaxRelevance.INCOME),
    ("cat_inc_freelance", "Freelance/Consulting Income", TaxRelevance.INCOME),
    ("cat_inc_investments", "Investment Income", TaxRelevance.INCOME),
    ("cat_inc_rental", "Rental Income", TaxRelevance.INCOME),
    ("cat_inc_gifts_received", "Gifts Received", TaxRelevance.NONE),
    ("cat_inc_pension", "Pension", TaxRelevance.INCOME),
    ("cat_exp_housing_rent_mortgage", "Housing (Rent/Mortgage)", TaxRelevance.NONE),
    ("cat_exp_groceries", "Groceries", TaxRelevance.NONE),
    ("cat_exp_personal_care", "Personal Care", TaxRelevance.NONE),
    ("cat_exp_entertainment", "Entertainment", TaxRelevance.NONE),
    ("cat_exp_clothing", "Clothing & Apparel", TaxRelevance.NONE),
    ("cat_exp_subscriptions", "Subscriptions", TaxRelevance.NONE),
    ("cat_exp_gifts_donations_given", "Gifts & Donations (Given)", TaxRelevance.DEDUCTION),
    ("cat_exp_home_maintenance", "Home Maintenance & Repairs", TaxRelevance.NONE),
    ("cat_exp_travel_vacation", "Travel & Vacation", TaxRelevance.NONE),
    ("cat_exp_bank_charges", "Bank Fees & Charges", TaxRelevance.NONE),
    ("cat_exp_util_electricity", "Utilities - Electricity Bill", TaxRelevance.NONE),
    ("cat_exp_util_water", "Utilities - Water Bill", TaxRelevance.NONE),
    ("cat_exp_util_internet", "Utilities - Internet/Broadband", TaxRelevance.NONE),
    ("cat_exp_util_mobile", "Utilities - Mobile/Telephone Bill", TaxRelevance.NONE),
    ("cat_exp_transport_fuel", "Transportation - Fuel", TaxRelevance.NONE),
    ("cat_exp_transport_public", "Transportation - Public Transport", TaxRelevance.NONE),
    ("cat_exp_vehicle_insurance", "Transportation - Vehicle Insurance", TaxRelevance.DEDUCTION),
    ("cat_exp_health_medical_fees", "Healthcare - Medical Fees", TaxRelevance.DEDUCTION),
    ("cat_exp_health_pharmacy", "Healthcare - Pharmacy/Medicines", TaxRelevance.DEDUCTION),
    ("cat_exp_health_insurance", "Healthcare - Health Insurance", TaxRelevance.DEDUCTION),
    ("cat_exp_edu_school_fees", "Education - School/University Fees", TaxRelevance.NONE),
    ("cat_exp_edu_books_supplies", "Education - Books & Supplies", TaxRelevance.NONE),
]
