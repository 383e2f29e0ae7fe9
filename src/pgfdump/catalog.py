"""
Column Binding Catalog

Derives the output schema from the source schema of a PGF file.

Output Order:
    probeset columns (probeset_id first)
    [atom columns, probe_id, remaining probe columns]   unless probeset-only
    [x, y]                                              if a CLF is joined

ARCHITECTURAL RULE:
    The identifier column is the first column of its level. Any other
    layout is a SchemaError; rows are written positionally and depend on it.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from pgfdump.errors import MissingColumnError, SchemaError
from pgfdump.model import ColumnBinding, ColumnRole, Level

PROBESET_ID = "probeset_id"
PROBE_ID = "probe_id"
TYPE_COLUMN = "type"
X_COLUMN = "x"
Y_COLUMN = "y"


def _require_first(columns: Sequence[str], expected: str, level: Level) -> None:
    if not columns:
        raise SchemaError(f"No level {level.value} header found; expected first column '{expected}'")
    if columns[0] != expected:
        raise SchemaError(
            f"First level {level.value} column must be '{expected}', found '{columns[0]}'"
        )


@dataclass(frozen=True)
class Catalog:
    """
    Immutable output schema for one run.

    Properties:
        parent_columns: Level 0 names, probeset_id first
        mid_columns: Level 1 names (empty when parent_only)
        leaf_columns: Level 2 names, probe_id first (empty when parent_only)
        parent_only: Only probeset level data is written
        coordinate_join: x and y are appended to every probe row
        type_slot: Index of ``type`` within the non-id probeset fields, or None
    """

    parent_columns: Tuple[str, ...]
    mid_columns: Tuple[str, ...] = ()
    leaf_columns: Tuple[str, ...] = ()
    parent_only: bool = False
    coordinate_join: bool = False
    type_slot: Optional[int] = None

    @classmethod
    def build(
        cls,
        level0: Sequence[str],
        level1: Sequence[str],
        level2: Sequence[str],
        parent_only: bool,
        coordinate_join: bool = False,
    ) -> "Catalog":
        """
        Validate the source schema and derive the output schema.

        Args:
            level0: Probeset column names
            level1: Atom column names
            level2: Probe column names
            parent_only: Keep probeset columns only
            coordinate_join: Append x, y (ignored when parent_only)

        Returns:
            Catalog

        Raises:
            SchemaError: If an identifier column is missing or not first
        """
        _require_first(level0, PROBESET_ID, Level.PARENT)
        type_slot = None
        if TYPE_COLUMN in level0[1:]:
            type_slot = list(level0[1:]).index(TYPE_COLUMN)

        if parent_only:
            return cls(parent_columns=tuple(level0), parent_only=True, type_slot=type_slot)

        _require_first(level2, PROBE_ID, Level.LEAF)
        return cls(
            parent_columns=tuple(level0),
            mid_columns=tuple(level1),
            leaf_columns=tuple(level2),
            parent_only=False,
            coordinate_join=coordinate_join,
            type_slot=type_slot,
        )

    @property
    def has_type_column(self) -> bool:
        return self.type_slot is not None

    def require_type_column(self) -> int:
        """
        Slot of the probeset ``type`` column.

        Raises:
            MissingColumnError: If the PGF file has no type column
        """
        if self.type_slot is None:
            raise MissingColumnError("No type column in pgf file")
        return self.type_slot

    @property
    def parent_field_count(self) -> int:
        """Probeset fields written after probeset_id."""
        return len(self.parent_columns) - 1

    @property
    def mid_field_count(self) -> int:
        return len(self.mid_columns)

    @property
    def leaf_field_count(self) -> int:
        """Probe fields written after probe_id."""
        return max(len(self.leaf_columns) - 1, 0)

    @property
    def bindings(self) -> List[ColumnBinding]:
        """Every output column with its source level, slot and role."""
        result: List[ColumnBinding] = []

        def add(level, name, role=None):
            result.append(ColumnBinding(level=level, name=name, slot=len(result), role=role))

        for i, name in enumerate(self.parent_columns):
            if i == 0:
                add(Level.PARENT, name, ColumnRole.ID_COLUMN)
            elif i - 1 == self.type_slot:
                add(Level.PARENT, name, ColumnRole.TYPE_COLUMN)
            else:
                add(Level.PARENT, name)
        for name in self.mid_columns:
            add(Level.MID, name)
        for i, name in enumerate(self.leaf_columns):
            add(Level.LEAF, name, ColumnRole.ID_COLUMN if i == 0 else None)
        if self.coordinate_join:
            add(None, X_COLUMN, ColumnRole.INJECTED_X)
            add(None, Y_COLUMN, ColumnRole.INJECTED_Y)
        return result

    def output_header(self) -> List[str]:
        """Column names of the header line, in output order."""
        return [binding.name for binding in self.bindings]
