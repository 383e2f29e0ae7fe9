"""
Run configuration.

Collects the options of one dump, from the command line and optionally a
YAML run file, checks that they make sense together and turns the selection
options into exactly one SelectionConfig.

YAML Run File:
    pgf_file: HuEx-1_0-st.pgf
    clf_file: HuEx-1_0-st.clf
    out_file: dump.txt
    probeset_types: [main, rescue]
    union: false

Keys may also be spelled like the command-line options (``pgf-file``).
Values given on the command line win over the run file.
"""

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Sequence, Tuple

import yaml

from pgfdump.catalog import PROBE_ID, PROBESET_ID
from pgfdump.errors import ConfigError, MissingColumnError, SourceOpenError
from pgfdump.model import (
    FullDump,
    IdSelection,
    Level,
    MatchMode,
    SelectionConfig,
    TypeSelection,
)
from pgfdump.tsv_source import TsvSource, strict_int

logger = logging.getLogger(__name__)

_LIST_OPTIONS = ("probeset_types", "probeset_id_files", "probe_id_files")
_BOOL_OPTIONS = ("probeset_only", "union")


@dataclass
class DumpOptions:
    """
    Options of one dump run.

    Properties:
        pgf_file: PGF design file (required)
        out_file: Report file (required)
        clf_file: Optional CLF; when set, probe rows get x and y
        probeset_types: Requested type segments
        probeset_id_files: Files listing probeset_id values
        probe_id_files: Files listing probe_id values
        probeset_only: Write probeset level data only
        union: Match any requested type instead of all of them
        command_line: Invoking command line, copied to the report
    """

    pgf_file: str = ""
    out_file: str = ""
    clf_file: str = ""
    probeset_types: List[str] = field(default_factory=list)
    probeset_id_files: List[str] = field(default_factory=list)
    probe_id_files: List[str] = field(default_factory=list)
    probeset_only: bool = False
    union: bool = False
    command_line: str = ""

    def __post_init__(self):
        # Empty strings are the same as not giving the option at all.
        for name in _LIST_OPTIONS:
            setattr(self, name, [value for value in getattr(self, name) if value])

    def validate(self) -> None:
        """
        Check that the options can be run.

        Raises:
            ConfigError: If a required option is missing or options conflict
        """
        if not self.pgf_file:
            raise ConfigError("Must provide pgf file.")
        if not self.out_file:
            raise ConfigError("Must provide an output file, --out-file option.")
        chosen = sum(1 for name in _LIST_OPTIONS if getattr(self, name))
        if chosen > 1:
            raise ConfigError("Cannot mix use of --probeset-ids, --probe-ids, and --probeset-type.")
        if self.probeset_only and self.probe_id_files:
            raise ConfigError("Cannot use --probeset-only with --probe-ids.")

    def merged(self, overrides: Dict[str, Any]) -> "DumpOptions":
        """Copy with every given override applied; empty values and False flags are ignored."""
        changes = {
            key: value
            for key, value in overrides.items()
            if value is not False and value not in (None, "", [], ())
        }
        return replace(self, **changes)


def options_from_dict(data: Dict[str, Any]) -> DumpOptions:
    """
    Build options from a mapping (e.g. a parsed run file).

    Raises:
        ConfigError: On unknown keys or values of the wrong shape
    """
    known = {f.name for f in fields(DumpOptions)}
    values: Dict[str, Any] = {}
    for raw_key, value in (data or {}).items():
        key = str(raw_key).replace("-", "_")
        if key not in known:
            raise ConfigError(f"Unknown option in run file: {raw_key}")
        if key in _LIST_OPTIONS:
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list):
                raise ConfigError(f"Option {raw_key} must be a list of strings")
            value = [str(item) for item in value]
        elif key in _BOOL_OPTIONS:
            if not isinstance(value, bool):
                raise ConfigError(f"Option {raw_key} must be true or false")
        elif value is not None:
            value = str(value)
        values[key] = value
    return DumpOptions(**values)


def load_options(path: str) -> DumpOptions:
    """
    Read options from a YAML run file.

    Raises:
        SourceOpenError: If the file cannot be read
        ConfigError: If it is not valid YAML or not a mapping
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError:
        raise SourceOpenError(f"Problem opening run file {path}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in run file {path}: {e}")
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Run file {path} must contain a mapping of options")
    return options_from_dict(data)


def read_id_files(paths: Sequence[str], column: str, label: str) -> Tuple[int, ...]:
    """
    Read ids from one or more list files.

    Ids are merged across files in first-seen order; repeats are dropped.

    Args:
        paths: Id list files
        column: Column holding the ids
        label: Plural noun for log and error messages ("probeset")

    Returns:
        Tuple of unique ids

    Raises:
        SourceOpenError: If a file cannot be opened, lacks the column or holds a non-integer id
    """
    seen: Dict[int, None] = {}
    for path in paths:
        try:
            source = TsvSource.open(path)
        except SourceOpenError as e:
            raise SourceOpenError(f"Problem opening {label} id file {path}") from e
        with source:
            try:
                source.column_index(0, column)
            except MissingColumnError as e:
                raise SourceOpenError(f"Problem opening {label} id file {path}: no {column} column") from e
            for row in source.rows():
                value = row.get(column, "")
                try:
                    seen.setdefault(strict_int(value), None)
                except ValueError:
                    raise SourceOpenError(f"Problem reading {label} id file {path}: bad {column} '{value}'")
    logger.info("Found %d %ss in %s list files.", len(seen), label, label)
    return tuple(seen)


def build_selection(options: DumpOptions) -> SelectionConfig:
    """
    Turn validated options into the single active selection.

    Raises:
        ConfigError: If the options conflict
        SourceOpenError: If an id list file cannot be read
    """
    options.validate()
    if options.probeset_id_files:
        ids = read_id_files(options.probeset_id_files, PROBESET_ID, "probeset")
        return IdSelection(level=Level.PARENT, ids=ids)
    if options.probe_id_files:
        ids = read_id_files(options.probe_id_files, PROBE_ID, "probe")
        return IdSelection(level=Level.LEAF, ids=ids)
    if options.probeset_types:
        mode = MatchMode.OR if options.union else MatchMode.AND
        return TypeSelection(types=tuple(options.probeset_types), mode=mode)
    return FullDump()
