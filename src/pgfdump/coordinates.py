"""
Coordinate resolution for probes (CLF join).

Two interchangeable strategies answer ``resolve(probe_id)``:

    - SequentialResolver: the CLF header declares a regular raster, so x/y
      follow from the probe id by arithmetic. The CLF body is never read.
    - IndexedResolver: anything else. probe_id is indexed once and every
      lookup goes through the uniqueness guard.

``choose_resolver`` probes the CLF header once, before any row is written,
and the returned object is used unchanged for the whole run.

Sequential Layout (CLF header keys):
    sequential  first probe_id of the raster
    rows, cols  raster size
    order       col_major: probe_id = y * cols + x + sequential (x fastest)
                row_major: probe_id = x * rows + y + sequential (y fastest)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from pgfdump.catalog import PROBE_ID, X_COLUMN, Y_COLUMN
from pgfdump.errors import SourceFormatError
from pgfdump.guard import single_match
from pgfdump.model import UNDEFINED, Coordinate, CoordinateResult
from pgfdump.tsv_source import TsvSource, strict_int

logger = logging.getLogger(__name__)

COL_MAJOR = "col_major"
ROW_MAJOR = "row_major"


class CoordinateResolver(ABC):
    """Maps a probe id to its array position."""

    @abstractmethod
    def resolve(self, probe_id: int) -> CoordinateResult:
        """Return the probe's Coordinate, or UNDEFINED when unknown."""
        raise NotImplementedError


@dataclass(frozen=True)
class SequentialLayout:
    """Regular raster declared by a CLF header."""
    start: int
    rows: int
    cols: int
    order: str

    @classmethod
    def probe(cls, source: TsvSource) -> Optional["SequentialLayout"]:
        """
        Read the layout from a CLF header.

        Returns:
            SequentialLayout, or None if the file is not declared sequential
            or its declaration is incomplete
        """
        values = {key: source.header(key) for key in ("sequential", "rows", "cols", "order")}
        if any(value is None for value in values.values()):
            return None
        if values["order"] not in (COL_MAJOR, ROW_MAJOR):
            return None
        try:
            start = strict_int(values["sequential"])
            rows = strict_int(values["rows"])
            cols = strict_int(values["cols"])
        except ValueError:
            return None
        if start < 0 or rows <= 0 or cols <= 0:
            return None
        return cls(start=start, rows=rows, cols=cols, order=values["order"])


class SequentialResolver(CoordinateResolver):
    """Closed-form x/y for a sequential CLF."""

    def __init__(self, layout: SequentialLayout):
        self.layout = layout

    def resolve(self, probe_id: int) -> CoordinateResult:
        layout = self.layout
        n = probe_id - layout.start
        if n < 0 or n >= layout.rows * layout.cols:
            return UNDEFINED
        if layout.order == COL_MAJOR:
            return Coordinate(x=n % layout.cols, y=n // layout.cols)
        return Coordinate(x=n // layout.rows, y=n % layout.rows)


class IndexedResolver(CoordinateResolver):
    """
    x/y looked up through a probe_id index on the CLF.

    Raises:
        MissingColumnError: If probe_id, x or y is absent (at construction)
    """

    def __init__(self, source: TsvSource):
        self.source = source
        self._x_col = source.column_index(0, X_COLUMN)
        self._y_col = source.column_index(0, Y_COLUMN)
        source.define_index(0, PROBE_ID)

    def resolve(self, probe_id: int) -> CoordinateResult:
        match = single_match(
            self.source.find(0, PROBE_ID, probe_id),
            key=probe_id,
            level=0,
            source=self.source.path,
            column=PROBE_ID,
            source_kind="clf",
        )
        if match is None:
            return UNDEFINED
        fields = self.source.fetch_fields(match)
        try:
            return Coordinate(x=int(fields[self._x_col]), y=int(fields[self._y_col]))
        except (IndexError, ValueError):
            raise SourceFormatError(
                f"Problem reading clf file {self.source.path}: bad x/y for probe_id {probe_id}"
            )


def choose_resolver(source: TsvSource) -> CoordinateResolver:
    """
    Pick the coordinate strategy for a CLF, once per run.

    Args:
        source: Open CLF file

    Returns:
        SequentialResolver for a declared regular raster, IndexedResolver otherwise
    """
    layout = SequentialLayout.probe(source)
    if layout is not None:
        logger.info("CLF file %s is sequential (%s, %dx%d)", source.path, layout.order, layout.rows, layout.cols)
        return SequentialResolver(layout)
    logger.info("Indexing probe_id in CLF file %s", source.path)
    return IndexedResolver(source)
