"""
Output Row Assembler

Turns accepted probesets into flat tab-delimited lines.

    probeset-only:  probeset_id, probeset fields
    full:           probeset_id, probeset fields, atom fields,
                    probe_id, probe fields [, x, y]

Each line is written as soon as it is built; only the probeset being
written is held in memory.
"""

from typing import List, Optional, Sequence, TextIO

from pgfdump.catalog import Catalog
from pgfdump.coordinates import CoordinateResolver
from pgfdump.model import UNDEFINED, LeafRecord, ParentRecord


def _fit(fields: Sequence[str], width: int) -> List[str]:
    """Pad with empty strings or cut so a level always fills its columns."""
    fields = list(fields[:width])
    if len(fields) < width:
        fields.extend([""] * (width - len(fields)))
    return fields


class RowAssembler:
    """
    Writes denormalized rows for one run.

    Properties:
        catalog: Output schema
        out: Text stream receiving the rows
        resolver: Coordinate strategy, or None when no CLF is joined
        rows_written: Data lines written so far
    """

    def __init__(self, catalog: Catalog, out: TextIO, resolver: Optional[CoordinateResolver] = None):
        self.catalog = catalog
        self.out = out
        self.resolver = resolver if catalog.coordinate_join else None
        self.rows_written = 0

    def write_header(self) -> None:
        self.out.write("\t".join(self.catalog.output_header()) + "\n")

    def write_group(self, parent: ParentRecord) -> None:
        """Write every line of one accepted probeset."""
        prefix = [str(parent.id)] + _fit(parent.fields, self.catalog.parent_field_count)
        if self.catalog.parent_only:
            self._write_line(prefix)
            return
        for mid in parent.mids:
            mid_fields = prefix + _fit(mid.fields, self.catalog.mid_field_count)
            for leaf in mid.leaves:
                self._write_line(mid_fields + self._leaf_fields(leaf))

    def _leaf_fields(self, leaf: LeafRecord) -> List[str]:
        fields = [str(leaf.id)] + _fit(leaf.fields, self.catalog.leaf_field_count)
        if self.resolver is not None:
            coord = self.resolver.resolve(leaf.id)
            # Unknown positions are written as empty fields, never as numbers.
            if coord is UNDEFINED:
                fields.extend(["", ""])
            else:
                fields.extend([str(coord.x), str(coord.y)])
        return fields

    def _write_line(self, fields: List[str]) -> None:
        self.out.write("\t".join(fields) + "\n")
        self.rows_written += 1
