"""
Tests for the core data model.
"""

import pytest
from pgfdump.errors import NonUniqueIndexError
from pgfdump.model import (
    UNDEFINED,
    Coordinate,
    FullDump,
    IdSelection,
    Level,
    MatchMode,
    ParentRecord,
    TypeSelection,
)


class TestIdSelection:
    """Test the id list selection variant."""

    def test_duplicates_removed_first_occurrence_wins(self):
        selection = IdSelection(level=Level.PARENT, ids=(5, 5, 9, 42, 9))
        assert selection.ids == (5, 9, 42)

    def test_leaf_level_allowed(self):
        selection = IdSelection(level=Level.LEAF, ids=(1,))
        assert selection.level == Level.LEAF

    def test_mid_level_rejected(self):
        with pytest.raises(ValueError):
            IdSelection(level=Level.MID, ids=(1,))

    def test_is_frozen(self):
        selection = IdSelection(level=Level.PARENT, ids=(1,))
        with pytest.raises(Exception):
            selection.ids = (2,)


class TestTypeSelection:
    def test_default_mode_is_and(self):
        assert TypeSelection(types=("main",)).mode == MatchMode.AND

    @pytest.mark.parametrize("mode", [MatchMode.AND, MatchMode.OR])
    def test_empty_type_list_rejected(self, mode):
        with pytest.raises(ValueError, match="at least one"):
            TypeSelection(types=(), mode=mode)


class TestVariants:
    def test_full_dump_instances_are_equal(self):
        assert FullDump() == FullDump()

    def test_parent_record_defaults(self):
        parent = ParentRecord(id=3)
        assert parent.fields == []
        assert list(parent.mids) == []


class TestCoordinate:
    def test_undefined_is_not_a_coordinate(self):
        assert UNDEFINED != Coordinate(x=0, y=0)

    def test_coordinate_equality(self):
        assert Coordinate(x=1, y=2) == Coordinate(x=1, y=2)


class TestNonUniqueIndexError:
    def test_message_and_attributes(self):
        error = NonUniqueIndexError(9, 0, "chip.pgf", "probeset_id")
        assert error.key == 9
        assert error.level == 0
        assert error.source == "chip.pgf"
        assert str(error) == (
            "probeset_id '9' is not a unique index. "
            "Duplicate probeset_id found, [9] for pgf file chip.pgf"
        )

    def test_clf_message(self):
        error = NonUniqueIndexError(4, 0, "chip.clf", "probe_id", source_kind="clf")
        assert "for clf file chip.clf" in str(error)
