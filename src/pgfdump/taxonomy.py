"""
Taxonomy matching for probeset ``type`` values.

A type value is a path such as ``main->rescue->FLmRNA->unmapped``. Selection
by type compares requested segments against the segments of that path.
"""

from typing import Sequence

from pgfdump.model import MatchMode, TaxonomyPath

TYPE_DELIMITER = "->"


def split(raw: str) -> TaxonomyPath:
    """
    Split a type value into its path segments.

    Leading, trailing and repeated delimiters never produce empty segments:
    ``"A->->B"``, ``"->A->B"`` and ``"A->B->"`` all give ``("A", "B")``.

    Args:
        raw: Type column value

    Returns:
        Tuple of non-empty segments
    """
    return tuple(segment for segment in raw.split(TYPE_DELIMITER) if segment)


def matches(path: TaxonomyPath, requested: Sequence[str], mode: MatchMode = MatchMode.AND) -> bool:
    """
    Decide whether a probeset with this type path is selected.

    Args:
        path: Segments of the probeset type
        requested: Types asked for by the user
        mode: AND requires all requested types, OR requires any

    Returns:
        True if the probeset should be dumped
    """
    segments = set(path)
    if mode == MatchMode.OR:
        return any(item in segments for item in requested)
    return all(item in segments for item in requested)
