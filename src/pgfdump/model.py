"""
Core Data Model

Defines the structures that flow between the record source, the selection
strategies and the row assembler:

    - Records (probeset / atom / probe, i.e. parent / mid / leaf)
    - Column bindings (where each source column lands in the output)
    - Selection configurations (which probesets to emit)
    - Coordinate results (x/y of a probe, or undefined)

ARCHITECTURAL RULE:
    Records are transient. They describe the line(s) the source cursor is
    positioned on and are dropped as soon as their rows are written.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union


class Level(Enum):
    """Nesting levels of a PGF file, valued by their header index."""
    PARENT = 0   # probeset
    MID = 1      # atom
    LEAF = 2     # probe


class ColumnRole(Enum):
    """Special meaning attached to an output column."""
    ID_COLUMN = "id"
    TYPE_COLUMN = "type"
    INJECTED_X = "x"
    INJECTED_Y = "y"


class MatchMode(Enum):
    """How requested probeset types combine."""
    AND = "and"   # every requested type must be in the path
    OR = "or"     # at least one requested type must be in the path


@dataclass
class LeafRecord:
    """
    A probe line.

    Properties:
        id: probe_id
        fields: Remaining level-2 values in header order, excluding probe_id
    """

    id: int
    fields: List[str] = field(default_factory=list)


@dataclass
class MidRecord:
    """
    An atom line and the probes under it.

    Atoms have no identifier of their own in the output contract; every
    level-1 column (atom_id included) is a plain field.

    Properties:
        fields: Level-1 values in header order
        leaves: Probes owned by this atom, possibly lazy
    """

    fields: List[str] = field(default_factory=list)
    leaves: Iterable[LeafRecord] = field(default_factory=tuple)


@dataclass
class ParentRecord:
    """
    A probeset line and everything nested under it.

    Also the unit a selection strategy hands to the assembler (a "row
    group"). For a probe id lookup the parent carries only the matching
    atom and probe.

    Properties:
        id: probeset_id
        fields: Remaining level-0 values in header order, excluding probeset_id
        mids: Atoms owned by this probeset, possibly lazy
    """

    id: int
    fields: List[str] = field(default_factory=list)
    mids: Iterable[MidRecord] = field(default_factory=tuple)


@dataclass(frozen=True)
class ColumnBinding:
    """
    Places one source column in the output.

    Properties:
        level: Source level, None for injected columns
        name: Column name as written in the header line
        slot: Position in the output row
        role: Optional special meaning
    """

    level: Optional[Level]
    name: str
    slot: int
    role: Optional[ColumnRole] = None


# ---------------------------------------------------------------------------
# Selection configuration: a closed set of three variants.
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FullDump:
    """No filter: every probeset in stored order."""
    pass


@dataclass(frozen=True)
class IdSelection:
    """
    Explicit identifier list looked up through an index.

    Properties:
        level: Level.PARENT (probeset ids) or Level.LEAF (probe ids)
        ids: Requested ids, deduplicated, first occurrence order
    """

    level: Level
    ids: Tuple[int, ...] = ()

    def __post_init__(self):
        if self.level not in (Level.PARENT, Level.LEAF):
            raise ValueError(f"Id selection is only defined for parent or leaf level, not {self.level.name}")
        # Collapse duplicates, first occurrence wins.
        object.__setattr__(self, "ids", tuple(dict.fromkeys(self.ids)))


@dataclass(frozen=True)
class TypeSelection:
    """
    Taxonomy match on the probeset ``type`` column.

    Properties:
        types: Requested type segments
        mode: MatchMode.AND (default) or MatchMode.OR
    """

    types: Tuple[str, ...]
    mode: MatchMode = MatchMode.AND

    def __post_init__(self):
        if not self.types:
            raise ValueError("Type selection needs at least one requested type")


SelectionConfig = Union[FullDump, IdSelection, TypeSelection]


# ---------------------------------------------------------------------------
# Coordinates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Coordinate:
    """Resolved probe position on the array."""
    x: int
    y: int


class Undefined(Enum):
    """Marker for a probe whose position is unknown."""
    UNDEFINED = "undefined"


UNDEFINED = Undefined.UNDEFINED

CoordinateResult = Union[Coordinate, Undefined]

TaxonomyPath = Tuple[str, ...]
