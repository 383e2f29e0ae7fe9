"""
Tests for the selection strategies.
"""

import pytest
from pgfdump.catalog import Catalog
from pgfdump.errors import MissingColumnError, NonUniqueIndexError
from pgfdump.examples import EXAMPLE_PGF
from pgfdump.model import FullDump, IdSelection, Level, MatchMode, TypeSelection
from pgfdump.selection import (
    FullScanSelection,
    IdLookupSelection,
    TypeScanSelection,
    make_strategy,
)
from pgfdump.tsv_source import TsvSource

DUPLICATE_PGF = "\n".join([
    "#%header0=probeset_id\ttype",
    "#%header1=\tatom_id",
    "#%header2=\t\tprobe_id",
    "5\tmain",
    "\t1",
    "\t\t50",
    "9\tmain",
    "\t2",
    "\t\t90",
    "9\tmain",
    "\t3",
    "\t\t91",
    "42\tmain",
    "\t4",
    "\t\t420",
]) + "\n"

DUPLICATE_PROBE_PGF = "\n".join([
    "#%header0=probeset_id\ttype",
    "#%header1=\tatom_id",
    "#%header2=\t\tprobe_id",
    "1\tmain",
    "\t1",
    "\t\t10",
    "2\tmain",
    "\t2",
    "\t\t20",
    "3\tmain",
    "\t3",
    "\t\t20",
    "4\tmain",
    "\t4",
    "\t\t40",
]) + "\n"


@pytest.fixture
def pgf(tmp_path):
    path = tmp_path / "example.pgf"
    path.write_text(EXAMPLE_PGF, encoding="utf-8")
    with TsvSource.open(path) as source:
        yield source


def catalog_for(source, parent_only=False):
    return Catalog.build(
        source.column_names(0), source.column_names(1), source.column_names(2), parent_only=parent_only,
    )


def run(strategy, source):
    strategy.prepare(source)
    return list(strategy.select(source))


class TestMakeStrategy:
    def test_full_dump(self, pgf):
        assert isinstance(make_strategy(FullDump(), catalog_for(pgf)), FullScanSelection)

    def test_ids(self, pgf):
        strategy = make_strategy(IdSelection(level=Level.LEAF, ids=(1,)), catalog_for(pgf))
        assert isinstance(strategy, IdLookupSelection)
        assert strategy.column == "probe_id"

    def test_types(self, pgf):
        strategy = make_strategy(TypeSelection(types=("main",)), catalog_for(pgf))
        assert isinstance(strategy, TypeScanSelection)

    def test_types_without_type_column(self):
        catalog = Catalog.build(["probeset_id", "name"], [], [], parent_only=True)
        with pytest.raises(MissingColumnError):
            make_strategy(TypeSelection(types=("main",)), catalog)


class TestFullScan:
    def test_every_parent_in_order(self, pgf):
        assert [p.id for p in run(FullScanSelection(), pgf)] == [1, 2, 3, 4]


class TestIdLookup:
    """Test explicit id lists."""

    def test_requested_order_not_file_order(self, pgf):
        groups = run(IdLookupSelection(Level.PARENT, [3, 1]), pgf)
        assert [g.id for g in groups] == [3, 1]

    def test_duplicates_processed_once(self, pgf):
        strategy = make_strategy(IdSelection(level=Level.PARENT, ids=(2, 2, 2)), catalog_for(pgf))
        groups = run(strategy, pgf)
        assert [g.id for g in groups] == [2]

    def test_absent_ids_skipped(self, pgf):
        groups = run(IdLookupSelection(Level.PARENT, [42, 4, 99]), pgf)
        assert [g.id for g in groups] == [4]

    def test_probe_ids_yield_single_probe_groups(self, pgf):
        groups = run(IdLookupSelection(Level.LEAF, [5, 1]), pgf)
        assert [g.id for g in groups] == [2, 1]
        leaves = [[leaf.id for mid in g.mids for leaf in mid.leaves] for g in groups]
        assert leaves == [[5], [1]]

    def test_mid_level_rejected(self):
        with pytest.raises(ValueError):
            IdLookupSelection(Level.MID, [1])

    def test_duplicate_stops_processing(self, tmp_path):
        """[5, 5, 9, 42]: 5 is emitted, 9 is fatal, 42 is never tried."""
        path = tmp_path / "dup.pgf"
        path.write_text(DUPLICATE_PGF, encoding="utf-8")
        with TsvSource.open(path) as source:
            strategy = make_strategy(IdSelection(level=Level.PARENT, ids=(5, 5, 9, 42)), catalog_for(source))
            strategy.prepare(source)
            emitted = []
            with pytest.raises(NonUniqueIndexError) as info:
                for group in strategy.select(source):
                    emitted.append(group.id)
        assert emitted == [5]
        assert info.value.key == 9
        assert info.value.column == "probeset_id"
        assert info.value.source == str(path)

    def test_duplicate_probe_id_stops_processing(self, tmp_path, monkeypatch):
        """Probe 20 sits under probesets 2 and 3: 10 is emitted, 20 is fatal, 40 is never tried."""
        path = tmp_path / "dup_probe.pgf"
        path.write_text(DUPLICATE_PROBE_PGF, encoding="utf-8")
        with TsvSource.open(path) as source:
            strategy = make_strategy(IdSelection(level=Level.LEAF, ids=(10, 20, 40)), catalog_for(source))
            strategy.prepare(source)
            looked_up = []
            find = source.find

            def recording_find(level, column, key):
                looked_up.append(key)
                return find(level, column, key)

            monkeypatch.setattr(source, "find", recording_find)
            emitted = []
            with pytest.raises(NonUniqueIndexError) as info:
                for group in strategy.select(source):
                    emitted.append((group.id, [leaf.id for mid in group.mids for leaf in mid.leaves]))
        assert emitted == [(1, [10])]
        assert looked_up == [10, 20]
        assert info.value.key == 20
        assert info.value.column == "probe_id"
        assert info.value.level == 2


class TestTypeScan:
    """Test selection by probeset type."""

    def test_and(self, pgf):
        strategy = TypeScanSelection(["main", "rescue"], MatchMode.AND, type_slot=0)
        assert [p.id for p in run(strategy, pgf)] == [1]

    def test_or(self, pgf):
        strategy = TypeScanSelection(["main", "rescue"], MatchMode.OR, type_slot=0)
        assert [p.id for p in run(strategy, pgf)] == [1, 2]

    def test_empty_segments_ignored(self, pgf):
        strategy = TypeScanSelection(["bgp", "antigenomic"], MatchMode.AND, type_slot=0)
        assert [p.id for p in run(strategy, pgf)] == [4]

    def test_and_subset_of_or(self, pgf):
        requested = ["main", "intron"]
        and_ids = {p.id for p in run(TypeScanSelection(requested, MatchMode.AND, 0), pgf)}
        or_ids = {p.id for p in run(TypeScanSelection(requested, MatchMode.OR, 0), pgf)}
        assert and_ids <= or_ids
