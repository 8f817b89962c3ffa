"""Tests for amount parsing and reference resolution."""

from decimal import Decimal

import pytest

from pocketbook.domain.entities import Category
from pocketbook.utils.amount_parser import parse_amount
from pocketbook.utils.resolver import resolve_entity


@pytest.mark.parametrize(
    "text,expected",
    [
        ("1,234.56", Decimal("1234.56")),
        ("$12", Decimal("12")),
        ("Rs. 2,500", Decimal("2500")),
        ("LKR 100", Decimal("100")),
        ("100 usd", Decimal("100")),
        ("0.01", Decimal("0.01")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "abc", "-5", "0", "NaN", "Infinity"])
def test_parse_amount_rejects(text):
    with pytest.raises(ValueError):
        parse_amount(text)


class TestResolveEntity:
    """Tests for resolving IDs, prefixes and names."""

    entities = [
        Category(id="abc123", name="Groceries"),
        Category(id="abd456", name="Fuel"),
        Category(id="xyz789", name="fuel"),
    ]

    def _resolve(self, reference):
        return resolve_entity(self.entities, reference, lambda c: c.name, "Category")

    def test_exact_id(self):
        assert self._resolve("abc123").name == "Groceries"

    def test_name_ignores_case(self):
        assert self._resolve("GROCERIES").id == "abc123"

    def test_unique_prefix(self):
        assert self._resolve("xyz").id == "xyz789"

    def test_ambiguous_name(self):
        with pytest.raises(ValueError) as excinfo:
            self._resolve("Fuel")
        assert "ambiguous" in str(excinfo.value)

    def test_ambiguous_prefix(self):
        with pytest.raises(ValueError):
            self._resolve("ab")

    def test_not_found(self):
        with pytest.raises(ValueError) as excinfo:
            self._resolve("nothing")
        assert "not found" in str(excinfo.value)
