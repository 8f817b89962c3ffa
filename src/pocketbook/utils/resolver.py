"""Resolve user-supplied references to entities."""

from typing import Callable, Sequence, TypeVar

T = TypeVar("T")


def resolve_entity(
    entities: Sequence[T],
    reference: str,
    name_of: Callable[[T], str],
    kind: str,
) -> T:
    """Find an entity by exact ID, unique ID prefix or case-insensitive name.

    IDs are long hex strings, so a short prefix (as shown in listings) is
    enough to pick one out.

    Args:
        entities: Candidates with an ``id`` attribute
        reference: ID, ID prefix or name
        name_of: Returns the display name of a candidate
        kind: Entity kind used in error messages

    Returns:
        The matching entity

    Raises:
        ValueError: If nothing matches or the reference is ambiguous
    """
    reference = reference.strip()
    for entity in entities:
        if entity.id == reference:
            return entity

    by_name = [e for e in entities if name_of(e).lower() == reference.lower()]
    if len(by_name) == 1:
        return by_name[0]
    if len(by_name) > 1:
        raise ValueError(f"{kind} name '{reference}' is ambiguous, use its ID")

    by_prefix = [e for e in entities if e.id.startswith(reference)]
    if len(by_prefix) == 1:
        return by_prefix[0]
    if len(by_prefix) > 1:
        raise ValueError(f"{kind} ID prefix '{reference}' matches more than one {kind.lower()}")

    raise ValueError(f"{kind} '{reference}' not found")
