"""Uniqueness guard for indexed lookups."""

from typing import Optional, Sequence, TypeVar

from pgfdump.errors import NonUniqueIndexError

T = TypeVar("T")


def single_match(
    matches: Sequence[T],
    key: int,
    level: int,
    source: str,
    column: str,
    source_kind: str = "pgf",
) -> Optional[T]:
    """
    Return the only match of an indexed lookup.

    Args:
        matches: Records returned by the lookup
        key: Looked-up identifier
        level: Level the index lives on
        source: File path, used in the error message
        column: Indexed column name
        source_kind: "pgf" or "clf", used in the error message

    Returns:
        None when nothing matched, else the single match

    Raises:
        NonUniqueIndexError: If more than one record matched
    """
    if not matches:
        return None
    if len(matches) > 1:
        raise NonUniqueIndexError(key, level, source, column, source_kind)
    return matches[0]
