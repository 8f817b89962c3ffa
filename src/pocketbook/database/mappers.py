"""Mapper functions to convert between domain entities and stored records.

Records use the camelCase layout of the finance tracker's JSON backups, so a
store written by pocketbook and a backup file share one format. Decimals are
written as strings to keep exact cents; numbers are accepted on the way in.
"""

import types
from dataclasses import MISSING, fields, is_dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, Type, TypeVar, Union, get_args, get_origin, get_type_hints

from pocketbook.domain import entities as domain
from pocketbook.domain.errors import ValidationError

T = TypeVar("T")

# Fields whose stored name is not the plain camelCase of the attribute
FIELD_ALIASES: dict[type, dict[str, str]] = {
    domain.CreditCard: {"statement_day": "statementDate", "due_day": "dueDate"},
}


def camel_case(name: str) -> str:
    """Convert snake_case attribute names to camelCase record keys."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _record_key(cls: type, name: str) -> str:
    return FIELD_ALIASES.get(cls, {}).get(name, camel_case(name))


def _unwrap_optional(tp: Any) -> Any:
    if get_origin(tp) in (Union, types.UnionType):
        args = [arg for arg in get_args(tp) if arg is not type(None)]
        return args[0]
    return tp


def _dump_value(value: Any) -> Any:
    if value is None:
        return None
    if is_dataclass(value):
        return to_record(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (tuple, list)):
        return [_dump_value(item) for item in value]
    return value


def _load_value(tp: Any, value: Any) -> Any:
    if value is None:
        return None
    tp = _unwrap_optional(tp)
    if get_origin(tp) is tuple:
        item_type = get_args(tp)[0]
        return tuple(_load_value(item_type, item) for item in value)
    if is_dataclass(tp):
        return from_record(tp, value)
    if tp is Decimal:
        try:
            return Decimal(str(value))
        except InvalidOperation:
            raise ValidationError(f"Invalid amount '{value}'")
    if tp is date:
        # Backups may carry full ISO timestamps; only the calendar date matters
        try:
            return date.fromisoformat(str(value)[:10])
        except ValueError:
            raise ValidationError(f"Invalid date '{value}'")
    if isinstance(tp, type) and issubclass(tp, Enum):
        try:
            return tp(value)
        except ValueError:
            raise ValidationError(f"Invalid {tp.__name__} value '{value}'")
    if tp is bool:
        return bool(value)
    if tp is int:
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid number '{value}'")
    return value


def to_record(entity: Any) -> dict[str, Any]:
    """Convert a domain entity to a JSON-compatible record."""
    cls = type(entity)
    return {
        _record_key(cls, f.name): _dump_value(getattr(entity, f.name))
        for f in fields(entity)
    }


def from_record(cls: Type[T], record: dict[str, Any]) -> T:
    """Build a domain entity from a stored record.

    Unknown keys are ignored. Missing keys fall back to the field default.

    Raises:
        ValidationError: If a required field is missing or a value cannot be converted
    """
    if not isinstance(record, dict):
        raise ValidationError(f"Expected an object for {cls.__name__}, got {type(record).__name__}")

    hints = get_type_hints(cls)
    kwargs = {}
    for f in fields(cls):
        key = _record_key(cls, f.name)
        if key in record:
            kwargs[f.name] = _load_value(hints[f.name], record[key])
        elif f.default is MISSING and f.default_factory is MISSING:
            raise ValidationError(f"{cls.__name__} record is missing '{key}'")
    return cls(**kwargs)


def to_records(entities: Iterable[Any]) -> list[dict[str, Any]]:
    """Convert a collection of entities to records."""
    return [to_record(entity) for entity in entities]


def from_records(cls: Type[T], records: Iterable[dict[str, Any]]) -> list[T]:
    """Convert a list of records to entities of one type."""
    return [from_record(cls, record) for record in records]
