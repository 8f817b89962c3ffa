"""Identifier generation."""

import uuid


def new_id() -> str:
    """Return a new random entity identifier."""
    return uuid.uuid4().hex
