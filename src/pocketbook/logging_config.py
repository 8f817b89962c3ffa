"""Logging setup for the command line.

Log records go to stderr so they never mix with command output. Plain text
is the default; ``json_format`` switches to one JSON object per line.
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any

from pythonjsonlogger.json import JsonFormatter

DEFAULT_LEVEL = "WARNING"
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class PocketbookJsonFormatter(JsonFormatter):
    """JSON formatter adding a UTC timestamp, the level and the app name."""

    def add_fields(
        self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict[str, Any]
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["app"] = "pocketbook"


def setup_logging(level: str = DEFAULT_LEVEL, json_format: bool = False) -> None:
    """Configure the root logger.

    Args:
        level: Level name such as "DEBUG" or "INFO"
        json_format: Emit JSON lines instead of plain text

    Raises:
        ValueError: If the level name is unknown
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level '{level}'")

    root = logging.getLogger()
    root.setLevel(numeric)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(PocketbookJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)

    # SQLAlchemy engine logging is only useful when debugging the store
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if numeric <= logging.DEBUG else logging.WARNING
    )
