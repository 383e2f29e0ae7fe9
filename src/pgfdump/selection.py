"""
Selection strategies: which probesets end up in the dump.

    FullScanSelection   every probeset, stored order
    IdLookupSelection   explicit probeset or probe ids, through an index
    TypeScanSelection   probesets whose type path matches, full scan

Exactly one strategy runs per dump. The id lookup moves the source cursor
around by offset, the type scan walks it forward; the two are never mixed.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterator, Sequence

from pgfdump.catalog import PROBE_ID, PROBESET_ID, Catalog
from pgfdump.guard import single_match
from pgfdump.model import (
    FullDump,
    IdSelection,
    Level,
    MatchMode,
    ParentRecord,
    SelectionConfig,
    TypeSelection,
)
from pgfdump.taxonomy import matches, split
from pgfdump.tsv_source import TsvSource

logger = logging.getLogger(__name__)


class SelectionStrategy(ABC):
    """Produces the accepted probesets (row groups) of a source."""

    def prepare(self, source: TsvSource) -> None:
        """Set up anything the strategy needs on the source (e.g. an index)."""
        pass

    @abstractmethod
    def select(self, source: TsvSource) -> Iterator[ParentRecord]:
        raise NotImplementedError


class FullScanSelection(SelectionStrategy):
    """Accept every probeset."""

    def select(self, source: TsvSource) -> Iterator[ParentRecord]:
        logger.info("Dumping entire PGF file")
        return source.parents()


class IdLookupSelection(SelectionStrategy):
    """
    Look up requested ids one at a time.

    For each id, in the order given (IdSelection has already collapsed
    duplicates):
        - no match: skipped, not an error
        - one match: its row group is produced
        - more than one: NonUniqueIndexError, and no later id is tried
    """

    def __init__(self, level: Level, ids: Sequence[int]):
        if level not in (Level.PARENT, Level.LEAF):
            raise ValueError(f"Cannot look up ids at level {level.name}")
        self.level = level
        self.ids = list(ids)
        self.column = PROBESET_ID if level == Level.PARENT else PROBE_ID

    def prepare(self, source: TsvSource) -> None:
        source.define_index(self.level.value, self.column)

    def select(self, source: TsvSource) -> Iterator[ParentRecord]:
        if self.level == Level.PARENT:
            logger.info("Indexing probesets in PGF file")
            logger.info("Dumping probeset info")
        else:
            logger.info("Indexing probes in PGF file")
            logger.info("Dumping probe info")
        for key in self.ids:
            match = single_match(
                source.find(self.level.value, self.column, key),
                key=key,
                level=self.level.value,
                source=source.path,
                column=self.column,
            )
            if match is None:
                logger.debug("%s %d not found", self.column, key)
                continue
            yield source.fetch(match)


class TypeScanSelection(SelectionStrategy):
    """Accept probesets whose type path contains the requested types."""

    def __init__(self, types: Sequence[str], mode: MatchMode, type_slot: int):
        self.types = list(types)
        self.mode = mode
        self.type_slot = type_slot

    def select(self, source: TsvSource) -> Iterator[ParentRecord]:
        logger.info("Scanning PGF file for requested type(s)")
        for parent in source.parents():
            raw = parent.fields[self.type_slot] if self.type_slot < len(parent.fields) else ""
            if matches(split(raw), self.types, self.mode):
                yield parent


def make_strategy(config: SelectionConfig, catalog: Catalog) -> SelectionStrategy:
    """
    Build the single strategy for a validated selection configuration.

    Raises:
        MissingColumnError: If a type selection meets a PGF without a type column
    """
    if isinstance(config, FullDump):
        return FullScanSelection()
    if isinstance(config, IdSelection):
        return IdLookupSelection(config.level, config.ids)
    if isinstance(config, TypeSelection):
        return TypeScanSelection(config.types, config.mode, catalog.require_type_column())
    raise TypeError(f"Unsupported selection config: {type(config)}")
