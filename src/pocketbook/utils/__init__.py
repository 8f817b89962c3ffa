"""Utility functions for pocketbook."""

from pocketbook.utils.amount_parser import parse_amount
from pocketbook.utils.date_parser import get_date_range, parse_date, parse_month
from pocketbook.utils.ids import new_id
from pocketbook.utils.resolver import resolve_entity

__all__ = ["get_date_range", "new_id", "parse_amount", "parse_date", "parse_month", "resolve_entity"]
