"""Category domain service."""

import logging
from dataclasses import replace
from typing import Optional

from pocketbook.domain.defaults import DEFAULT_CATEGORIES, SYSTEM_CATEGORIES
from pocketbook.domain.entities import Category, TaxRelevance
from pocketbook.domain.errors import (
    DependencyError,
    NotFoundError,
    ValidationError,
    delete_blocked,
    entity_not_found,
)
from pocketbook.domain.state import Book
from pocketbook.utils.ids import new_id

logger = logging.getLogger(__name__)

SYSTEM_CATEGORY_IDS = frozenset(c.id for c in SYSTEM_CATEGORIES)


class CategoryService:
    """Service for managing categories."""

    def __init__(self, book: Book):
        """Initialize category service.

        Args:
            book: Book holding the state and store
        """
        self.book = book

    def create_category(
        self,
        name: str,
        default_tax_relevance: TaxRelevance = TaxRelevance.NONE,
        category_id: Optional[str] = None,
    ) -> Category:
        """Create a category.

        Args:
            name: Category name, unique ignoring case
            default_tax_relevance: Tax treatment suggested for new transactions
            category_id: Optional fixed ID, generated when omitted

        Returns:
            The created category

        Raises:
            ValidationError: If the name is empty or already used
        """
        name = name.strip()
        if not name:
            raise ValidationError("Category name is required")
        with self.book.unit_of_work() as uow:
            categories = uow.get("categories")
            if any(c.name.lower() == name.lower() for c in categories):
                raise ValidationError(f"Category '{name}' already exists")
            category = Category(
                id=category_id or new_id(), name=name, default_tax_relevance=default_tax_relevance
            )
            if any(c.id == category.id for c in categories):
                raise ValidationError(f"Category {category.id} already exists")
            categories.append(category)
            uow.put("categories", categories)
        return category

    def get_category(self, category_id: str) -> Optional[Category]:
        for category in self.book.collection("categories"):
            if category.id == category_id:
                return category
        return None

    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Find a category by name, ignoring case."""
        for category in self.book.collection("categories"):
            if category.name.lower() == name.strip().lower():
                return category
        return None

    def list_categories(self, include_system: bool = True) -> list[Category]:
        """List categories sorted by name."""
        categories = self.book.collection("categories")
        if not include_system:
            categories = [c for c in categories if c.id not in SYSTEM_CATEGORY_IDS]
        return sorted(categories, key=lambda c: c.name.lower())

    def update_category(
        self,
        category_id: str,
        name: Optional[str] = None,
        default_tax_relevance: Optional[TaxRelevance] = None,
    ) -> Category:
        """Rename a category or change its tax relevance.

        Raises:
            NotFoundError: If the category doesn't exist
        """
        with self.book.unit_of_work() as uow:
            categories = uow.get("categories")
            index = self._index(categories, category_id)
            category = categories[index]
            categories[index] = replace(
                category,
                name=name.strip() if name else category.name,
                default_tax_relevance=default_tax_relevance or category.default_tax_relevance,
            )
            uow.put("categories", categories)
        return categories[index]

    def delete_category(self, category_id: str) -> None:
        """Delete an unused, non-system category.

        Raises:
            NotFoundError: If the category doesn't exist
            DependencyError: If it is a system category or transactions,
                budgets or recurring rules use it
        """
        with self.book.unit_of_work() as uow:
            categories = uow.get("categories")
            index = self._index(categories, category_id)
            category = categories[index]
            if category_id in SYSTEM_CATEGORY_IDS:
                raise DependencyError(delete_blocked("category", category.name, "system category"))

            in_use = (
                any(
                    t.category_id == category_id
                    or any(s.category_id == category_id for s in t.splits)
                    for t in uow.get("transactions")
                )
                or any(b.category_id == category_id for b in uow.get("budgets"))
                or any(r.category_id == category_id for r in uow.get("recurring_transactions"))
            )
            if in_use:
                raise DependencyError(
                    delete_blocked(
                        "category",
                        category.name,
                        "in use by transactions, budgets or recurring rules",
                    )
                )
            categories.pop(index)
            uow.put("categories", categories)
        logger.info("Deleted category %s", category_id)

    def init_default_categories(self) -> int:
        """Add the default category set, skipping IDs that already exist.

        Returns:
            Number of categories added
        """
        with self.book.unit_of_work() as uow:
            categories = uow.get("categories")
            known = {c.id for c in categories}
            added = [
                Category(id=category_id, name=name, default_tax_relevance=relevance)
                for category_id, name, relevance in DEFAULT_CATEGORIES
                if category_id not in known
            ]
            if added:
                uow.put("categories", categories + added)
        logger.info("Added %d default categories", len(added))
        return len(added)

    def _index(self, categories: list[Category], category_id: str) -> int:
        for index, category in enumerate(categories):
            if category.id == category_id:
                return index
        raise NotFoundError(entity_not_found("Category", category_id))
