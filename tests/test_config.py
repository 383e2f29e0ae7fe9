"""
Tests for run options, YAML run files and selection building.
"""

import logging

import pytest
from pgfdump.config import (
    DumpOptions,
    build_selection,
    load_options,
    options_from_dict,
    read_id_files,
)
from pgfdump.errors import ConfigError, SourceOpenError
from pgfdump.model import FullDump, IdSelection, Level, MatchMode, TypeSelection


def base_options(**kwargs):
    return DumpOptions(pgf_file="chip.pgf", out_file="out.txt", **kwargs)


def write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestValidate:
    """Test option combinations."""

    def test_requires_pgf(self):
        with pytest.raises(ConfigError, match="pgf file"):
            DumpOptions(out_file="out.txt").validate()

    def test_requires_out_file(self):
        with pytest.raises(ConfigError, match="--out-file"):
            DumpOptions(pgf_file="chip.pgf").validate()

    @pytest.mark.parametrize("kwargs", [
        {"probeset_types": ["main"], "probeset_id_files": ["a.txt"]},
        {"probeset_types": ["main"], "probe_id_files": ["a.txt"]},
        {"probeset_id_files": ["a.txt"], "probe_id_files": ["b.txt"]},
    ])
    def test_selection_modes_are_exclusive(self, kwargs):
        with pytest.raises(ConfigError, match="Cannot mix"):
            base_options(**kwargs).validate()

    def test_probeset_only_with_probe_ids(self):
        with pytest.raises(ConfigError, match="--probeset-only"):
            base_options(probeset_only=True, probe_id_files=["a.txt"]).validate()

    def test_empty_strings_discarded(self):
        options = base_options(probeset_types=["", "main", ""], probeset_id_files=[""])
        assert options.probeset_types == ["main"]
        options.validate()


class TestBuildSelection:
    def test_full_dump(self):
        assert build_selection(base_options()) == FullDump()

    def test_types_and(self):
        selection = build_selection(base_options(probeset_types=["main", "rescue"]))
        assert selection == TypeSelection(types=("main", "rescue"), mode=MatchMode.AND)

    def test_types_or(self):
        selection = build_selection(base_options(probeset_types=["main"], union=True))
        assert selection.mode == MatchMode.OR

    def test_probeset_ids(self, tmp_path):
        ids = write(tmp_path, "ids.txt", "probeset_id\n5\n5\n9\n42\n")
        selection = build_selection(base_options(probeset_id_files=[ids]))
        assert selection == IdSelection(level=Level.PARENT, ids=(5, 9, 42))

    def test_probe_ids(self, tmp_path):
        ids = write(tmp_path, "probes.txt", "probe_id\n3\n")
        selection = build_selection(base_options(probe_id_files=[ids]))
        assert selection.level == Level.LEAF


class TestReadIdFiles:
    """Test id list files."""

    def test_dedup_across_files_first_seen_order(self, tmp_path):
        first = write(tmp_path, "a.txt", "probeset_id\n9\n5\n")
        second = write(tmp_path, "b.txt", "#%header0=probeset_id\tnote\n5\tdup\n42\tnew\n")
        assert read_id_files([first, second], "probeset_id", "probeset") == (9, 5, 42)

    def test_logs_count(self, tmp_path, caplog):
        path = write(tmp_path, "a.txt", "probeset_id\n1\n2\n")
        with caplog.at_level(logging.INFO, logger="pgfdump.config"):
            read_id_files([path], "probeset_id", "probeset")
        assert "Found 2 probesets in probeset list files." in caplog.text

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceOpenError, match="Problem opening probeset id file"):
            read_id_files([str(tmp_path / "nope.txt")], "probeset_id", "probeset")

    def test_missing_column(self, tmp_path):
        path = write(tmp_path, "a.txt", "probe_id\n1\n")
        with pytest.raises(SourceOpenError, match="no probeset_id column"):
            read_id_files([path], "probeset_id", "probeset")

    def test_non_integer_id(self, tmp_path):
        path = write(tmp_path, "a.txt", "probe_id\nabc\n")
        with pytest.raises(SourceOpenError, match="bad probe_id 'abc'"):
            read_id_files([path], "probe_id", "probe")

    @pytest.mark.parametrize("value", ["1_000", " 5", "5 "])
    def test_loose_integer_spelling(self, tmp_path, value):
        path = write(tmp_path, "a.txt", f"probe_id\n{value}\n")
        with pytest.raises(SourceOpenError, match="bad probe_id"):
            read_id_files([path], "probe_id", "probe")


class TestRunFile:
    """Test YAML run files."""

    def test_load(self, tmp_path):
        path = write(tmp_path, "run.yaml", (
            "pgf-file: chip.pgf\n"
            "out_file: out.txt\n"
            "probeset_types: main\n"
            "union: true\n"
        ))
        options = load_options(path)
        assert options.pgf_file == "chip.pgf"
        assert options.out_file == "out.txt"
        assert options.probeset_types == ["main"]
        assert options.union is True

    def test_empty_file(self, tmp_path):
        assert load_options(write(tmp_path, "run.yaml", "")) == DumpOptions()

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="Unknown option"):
            options_from_dict({"pgf_fiel": "x"})

    def test_bad_bool(self):
        with pytest.raises(ConfigError, match="true or false"):
            options_from_dict({"union": "yes please"})

    def test_not_a_mapping(self, tmp_path):
        with pytest.raises(ConfigError, match="mapping"):
            load_options(write(tmp_path, "run.yaml", "- a\n- b\n"))

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_options(write(tmp_path, "run.yaml", "pgf_file: [unclosed\n"))

    def test_missing_run_file(self, tmp_path):
        with pytest.raises(SourceOpenError):
            load_options(str(tmp_path / "absent.yaml"))

    def test_command_line_overrides(self):
        options = DumpOptions(pgf_file="file.pgf", union=True, probeset_types=["main"])
        merged = options.merged({"pgf_file": "cli.pgf", "union": False, "probeset_types": None, "clf_file": ""})
        assert merged.pgf_file == "cli.pgf"
        assert merged.union is True
        assert merged.probeset_types == ["main"]
        assert merged.clf_file == ""
