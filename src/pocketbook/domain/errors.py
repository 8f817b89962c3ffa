"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as a second budget for the same month."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class InsufficientFundsError(DomainError):
    """Source account or cash pool cannot cover the requested amount."""


class CreditLimitExceededError(DomainError):
    """Credit card operation would leave the card outside its limit."""


def entity_not_found(kind: str, entity_id: str) -> str:
    """Return message for a missing entity of the given kind."""
    return f"{kind} {entity_id} not found"


def invalid_amount(field: str, value: object) -> str:
    """Return message for a NaN, negative or otherwise unusable amount."""
    return f"Invalid {field}: {value!r} (must be a positive number)"


def insufficient_funds(source: str, available: Decimal, requested: Decimal) -> str:
    """Return message when a source cannot cover an amount."""
    return f"Insufficient funds in {source}: available {available:,.2f}, requested {requested:,.2f}"


def delete_blocked(kind: str, name: str, reason: str) -> str:
    """Return message when an entity has dependent records."""
    return f"Cannot delete {kind} '{name}': {reason}"
