"""Full-state export and import in the backup file layout."""

import json
import logging
from pathlib import Path
from typing import Any, Union

from pocketbook.database.mappers import from_record, from_records, to_record, to_records
from pocketbook.domain.defaults import SYSTEM_CATEGORIES
from pocketbook.domain.entities import UserSettings
from pocketbook.domain.errors import ValidationError
from pocketbook.domain.net_worth import cash_balance
from pocketbook.domain.state import COLLECTIONS, CURRENCY_KEY, DEFAULT_CURRENCY, SETTINGS_KEY, Book

logger = logging.getLogger(__name__)

# Backup keys that differ from the store keys
BACKUP_KEYS = {"transactions": "rawTransactions"}

REQUIRED_KEYS = ("categories", "rawTransactions", SETTINGS_KEY)

CASH_BALANCE_KEY = "cashBalance"


def backup_key(name: str) -> str:
    return BACKUP_KEYS.get(name, COLLECTIONS[name][0])


class BackupService:
    """Exports a book to, and restores it from, a single JSON document."""

    def __init__(self, book: Book):
        self.book = book

    def export_all(self) -> dict[str, Any]:
        """Serialise every collection, the settings, the currency and the cash balance."""
        snapshot: dict[str, Any] = {}
        for name in COLLECTIONS:
            snapshot[backup_key(name)] = to_records(self.book.collection(name))
        snapshot[SETTINGS_KEY] = to_record(self.book.collection("user_settings"))
        snapshot[CURRENCY_KEY] = self.book.collection("selected_currency")
        snapshot[CASH_BALANCE_KEY] = str(cash_balance(self.book.collection("transactions")))
        return snapshot

    def import_all(self, snapshot: dict[str, Any]) -> None:
        """Replace every collection with the contents of a snapshot.

        The snapshot must contain categories, transactions and user
        settings. Other collections missing from it are emptied. The stored
        cash balance is ignored because cash is derived from the ledger.
        Nothing changes unless the whole snapshot parses.

        Raises:
            ValidationError: If a required key is missing or a record is malformed
        """
        if not isinstance(snapshot, dict):
            raise ValidationError("Backup must be a JSON object")
        missing = [key for key in REQUIRED_KEYS if key not in snapshot]
        if missing:
            raise ValidationError(f"Backup is missing required data: {', '.join(missing)}")

        parsed: dict[str, Any] = {}
        for name, (_, entity_type) in COLLECTIONS.items():
            records = snapshot.get(backup_key(name)) or []
            if not isinstance(records, list):
                raise ValidationError(f"Backup field '{backup_key(name)}' must be a list")
            parsed[name] = from_records(entity_type, records)
        known = {c.id for c in parsed["categories"]}
        parsed["categories"].extend(c for c in SYSTEM_CATEGORIES if c.id not in known)
        parsed["user_settings"] = from_record(UserSettings, snapshot[SETTINGS_KEY])
        parsed["selected_currency"] = snapshot.get(CURRENCY_KEY) or DEFAULT_CURRENCY

        with self.book.unit_of_work() as uow:
            for name, value in parsed.items():
                uow.put(name, value)
        logger.info(
            "Imported backup with %d transaction(s) and %d categories",
            len(parsed["transactions"]),
            len(parsed["categories"]),
        )

    def export_to_file(self, path: Union[str, Path]) -> Path:
        """Write a backup as JSON and return its path."""
        path = Path(path)
        path.write_text(json.dumps(self.export_all(), indent=2), encoding="utf-8")
        logger.info("Wrote backup to %s", path)
        return path

    def import_from_file(self, path: Union[str, Path]) -> None:
        """Restore a backup written by ``export_to_file``.

        Raises:
            ValidationError: If the file isn't valid JSON or fails validation
        """
        try:
            snapshot = json.loads(Path(path).read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValidationError(f"Backup file is not valid JSON: {e}")
        self.import_all(snapshot)
