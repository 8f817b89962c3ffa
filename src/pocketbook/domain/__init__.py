"""Domain layer for pocketbook.

Services are imported lazily: the persistence mappers import the entity
module, and the services in turn import the persistence layer.
"""

from importlib import import_module

_SERVICES = {
    "AccountService": "pocketbook.domain.account",
    "AssetService": "pocketbook.domain.asset",
    "BackupService": "pocketbook.domain.backup",
    "Book": "pocketbook.domain.state",
    "BudgetService": "pocketbook.domain.budget",
    "CategoryService": "pocketbook.domain.category",
    "CreditCardService": "pocketbook.domain.credit_card",
    "GoalService": "pocketbook.domain.goal",
    "LiabilityService": "pocketbook.domain.liability",
    "NetWorthService": "pocketbook.domain.net_worth",
    "PayableService": "pocketbook.domain.debt",
    "ProjectionService": "pocketbook.domain.projection",
    "ReceivableService": "pocketbook.domain.debt",
    "RecurringTransactionService": "pocketbook.domain.recurrence",
    "SettingsService": "pocketbook.domain.settings",
    "TransactionService": "pocketbook.domain.transaction",
}

__all__ = sorted(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
