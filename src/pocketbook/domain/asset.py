"""Non-current asset domain service."""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional

from pocketbook.domain.entities import AssetType, NonCurrentAsset
from pocketbook.domain.errors import NotFoundError, entity_not_found
from pocketbook.domain.state import Book
from pocketbook.domain.stats import ZERO, check_amount
from pocketbook.utils.ids import new_id

logger = logging.getLogger(__name__)


class AssetService:
    """Service for managing property, vehicles, deposits and other long-lived assets."""

    def __init__(self, book: Book):
        self.book = book

    def create_asset(
        self,
        name: str,
        type: AssetType,
        acquisition_date: date,
        acquisition_cost: Decimal,
        current_value: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> NonCurrentAsset:
        """Create an asset. A current value is dated today.

        Raises:
            ValidationError: If the cost or value is invalid
        """
        check_amount(acquisition_cost, "acquisition cost")
        if current_value is not None:
            check_amount(current_value, "current value")
        asset = NonCurrentAsset(
            id=new_id(),
            name=name,
            type=type,
            acquisition_date=acquisition_date,
            acquisition_cost=acquisition_cost,
            current_value=current_value,
            current_value_date=self.book.today() if current_value is not None else None,
            notes=notes,
        )
        with self.book.unit_of_work() as uow:
            assets = uow.get("non_current_assets")
            assets.append(asset)
            uow.put("non_current_assets", assets)
        logger.info("Created asset %s (%s)", asset.id, name)
        return asset

    def revalue_asset(
        self, asset_id: str, current_value: Decimal, value_date: Optional[date] = None
    ) -> NonCurrentAsset:
        """Record a new valuation for an asset.

        Raises:
            NotFoundError: If the asset doesn't exist
            ValidationError: If the value is invalid
        """
        check_amount(current_value, "current value")
        with self.book.unit_of_work() as uow:
            assets = uow.get("non_current_assets")
            index = self._index(assets, asset_id)
            assets[index] = replace(
                assets[index],
                current_value=current_value,
                current_value_date=value_date or self.book.today(),
            )
            uow.put("non_current_assets", assets)
        return assets[index]

    def delete_asset(self, asset_id: str) -> None:
        with self.book.unit_of_work() as uow:
            assets = uow.get("non_current_assets")
            assets.pop(self._index(assets, asset_id))
            uow.put("non_current_assets", assets)
        logger.info("Deleted asset %s", asset_id)

    def get_asset(self, asset_id: str) -> Optional[NonCurrentAsset]:
        for asset in self.book.collection("non_current_assets"):
            if asset.id == asset_id:
                return asset
        return None

    def list_assets(self) -> list[NonCurrentAsset]:
        return self.book.collection("non_current_assets")

    def total_value(self) -> Decimal:
        """Sum asset values, using cost where no valuation has been recorded."""
        return sum((a.value for a in self.book.collection("non_current_assets")), ZERO)

    def _index(self, assets: list[NonCurrentAsset], asset_id: str) -> int:
        for index, asset in enumerate(assets):
            if asset.id == asset_id:
                return index
        raise NotFoundError(entity_not_found("Asset", asset_id))
