"""
Hierarchical TSV record source (Raw Input -> Records).

Reads the tab-separated layout shared by PGF, CLF and id list files.

File Format:
    #%chip_type=HuEx-1_0-st          <- header metadata, kept in order
    #%header0=probeset_id<TAB>type   <- level 0 columns
    #%header1=<TAB>atom_id           <- level 1 columns (one leading tab)
    #%header2=<TAB><TAB>probe_id...  <- level 2 columns (two leading tabs)
    # free comment
    2590411<TAB>normgene->intron     <- level 0 line
    <TAB>1                           <- level 1 line
    <TAB><TAB>563326<TAB>pm:st...    <- level 2 line

Syntax Notes:
    - A data line's level is its number of leading tabs
    - A line may descend at most one level below the previous line
    - Files without any #%headerN line use their first non-comment line as
      the level 0 header (plain single-level files such as id lists)

Records are produced lazily and nested: a probeset yields its atoms, an atom
yields its probes. Nothing read by a pass is kept after the caller moves on.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from pgfdump.errors import MissingColumnError, SourceFormatError, SourceOpenError
from pgfdump.model import LeafRecord, Level, MidRecord, ParentRecord

logger = logging.getLogger(__name__)

_HEADER_KEY = re.compile(r"^header(\d+)$")
_INTEGER = re.compile(r"-?[0-9]+")


def strict_int(value: str) -> int:
    """
    Parse a decimal integer field exactly as written.

    Unlike ``int()``, surrounding whitespace, underscores, a leading plus
    sign and non-ASCII digits are all rejected.

    Raises:
        ValueError: If the value is not an optionally negative run of digits
    """
    if _INTEGER.fullmatch(value) is None:
        raise ValueError(f"invalid integer field: {value!r}")
    return int(value)


@dataclass(frozen=True)
class _Line:
    """One parsed data line."""
    level: int
    fields: List[str]
    offset: int
    line_number: Optional[int] = None


@dataclass(frozen=True)
class IndexMatch:
    """
    Position of one record found through an index.

    Offsets are byte positions of the matching line and of the lines that
    own it (-1 where the level does not apply).
    """

    level: int
    offset: int
    parent_offset: int = -1
    mid_offset: int = -1


class _LineCursor:
    """
    Forward read position over data lines.

    The cursor remembers its own byte offset and seeks to it before every
    read, so several cursors (and index fetches) can share one file handle.
    """

    def __init__(self, source: "TsvSource", offset: int, line_number: Optional[int] = None):
        self._source = source
        self._offset = offset
        self._line_number = line_number
        self._pending: Optional[_Line] = None
        self._exhausted = False
        self._previous_level = -1

    def peek(self) -> Optional[_Line]:
        if self._pending is None and not self._exhausted:
            self._pending = self._read()
        return self._pending

    def take(self) -> Optional[_Line]:
        line = self.peek()
        self._pending = None
        return line

    def _read(self) -> Optional[_Line]:
        while True:
            offset = self._offset
            raw = self._source._readline_at(offset)
            if not raw:
                self._exhausted = True
                return None
            self._offset = offset + len(raw)
            if self._line_number is not None:
                self._line_number += 1
            line = self._source._parse_data_line(raw, offset, self._line_number)
            if line is None:
                continue
            if line.level > self._previous_level + 1:
                raise SourceFormatError(
                    f"{self._source._where(line)}: level {line.level} line "
                    f"has no enclosing level {line.level - 1} line"
                )
            self._previous_level = line.level
            return line


class TsvSource:
    """
    Open tabular file with iteration, column lookup and integer indexing.

    Use ``TsvSource.open(path)``, ideally as a context manager.
    """

    def __init__(self, path: str):
        self.path = str(path)
        self._handle = None
        self._headers: List[Tuple[str, str]] = []
        self._columns: Dict[int, List[str]] = {}
        self._data_offset = 0
        self._data_line_number = 0
        self._indexes: Dict[Tuple[int, str], Dict[int, List[IndexMatch]]] = {}

    @classmethod
    def open(cls, path: str) -> "TsvSource":
        """
        Open a file and read its header block.

        Raises:
            SourceOpenError: If the file cannot be opened or read
            SourceFormatError: If the header block is malformed
        """
        source = cls(path)
        try:
            source._handle = open(source.path, "rb")
        except OSError as e:
            raise SourceOpenError(f"Problem opening file {source.path}.") from e
        try:
            source._read_header_block()
        except Exception:
            source.close()
            raise
        return source

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> "TsvSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # =========================================================================
    # Header access
    # =========================================================================

    def headers(self) -> List[Tuple[str, str]]:
        """Header metadata (``#%key=value``) in file order, excluding headerN."""
        return list(self._headers)

    def header(self, key: str) -> Optional[str]:
        """First value recorded for a metadata key, or None."""
        for k, v in self._headers:
            if k == key:
                return v
        return None

    @property
    def level_count(self) -> int:
        return len(self._columns)

    def column_names(self, level: int) -> List[str]:
        """Column names declared for a level; empty if the level is absent."""
        return list(self._columns.get(level, []))

    def column_index(self, level: int, column: str) -> int:
        """
        Position of a named column within its level.

        Raises:
            MissingColumnError: If the level has no such column
        """
        names = self._columns.get(level, [])
        if column not in names:
            raise MissingColumnError(f"No {column} column at level {level} in file {self.path}")
        return names.index(column)

    # =========================================================================
    # Iteration
    # =========================================================================

    def parents(self) -> Iterator[ParentRecord]:
        """
        Iterate level 0 records in stored order.

        Each call starts a new pass at the first data line. Atoms and probes
        the caller does not consume are skipped when the next probeset is
        requested.
        """
        cursor = _LineCursor(self, self._data_offset, self._data_line_number)
        while True:
            line = cursor.take()
            if line is None:
                return
            yield self._make_parent(line, self._iter_mids(cursor))
            # Skip whatever the caller left unread under this probeset.
            while cursor.peek() is not None and cursor.peek().level > 0:
                cursor.take()

    def rows(self) -> Iterator[Dict[str, str]]:
        """Iterate level 0 lines as column name -> value mappings."""
        names = self._columns.get(0, [])
        cursor = _LineCursor(self, self._data_offset, self._data_line_number)
        while True:
            line = cursor.take()
            if line is None:
                return
            if line.level == 0:
                yield dict(zip(names, line.fields))

    def _iter_mids(self, cursor: _LineCursor) -> Iterator[MidRecord]:
        while True:
            line = cursor.peek()
            if line is None or line.level < 1:
                return
            cursor.take()
            if line.level > 1:
                continue
            yield MidRecord(fields=line.fields, leaves=self._iter_leaves(cursor))
            while cursor.peek() is not None and cursor.peek().level > 1:
                cursor.take()

    def _iter_leaves(self, cursor: _LineCursor) -> Iterator[LeafRecord]:
        while True:
            line = cursor.peek()
            if line is None or line.level < 2:
                return
            cursor.take()
            if line.level == 2:
                yield self._make_leaf(line)

    # =========================================================================
    # Indexing
    # =========================================================================

    def define_index(self, level: int, column: str) -> None:
        """
        Build a single-column integer index over one level.

        One pass over the file records the byte offsets of every line at
        ``level`` together with the offsets of the lines that own it.

        Raises:
            MissingColumnError: If the column does not exist at that level
            SourceFormatError: If an indexed value is not an integer
        """
        col = self.column_index(level, column)
        index: Dict[int, List[IndexMatch]] = {}
        owners = [-1] * (level + 1)
        cursor = _LineCursor(self, self._data_offset, self._data_line_number)
        count = 0
        while True:
            line = cursor.take()
            if line is None:
                break
            if line.level < level:
                owners[line.level] = line.offset
                continue
            if line.level > level:
                continue
            key = self._int_field(line, col, column)
            index.setdefault(key, []).append(IndexMatch(
                level=level,
                offset=line.offset,
                parent_offset=owners[0] if level > 0 else line.offset,
                mid_offset=owners[1] if level > 1 else -1,
            ))
            count += 1
        self._indexes[(level, column)] = index
        logger.debug("Indexed %d %s values at level %d of %s", count, column, level, self.path)

    def find(self, level: int, column: str, key: int) -> List[IndexMatch]:
        """
        Equality lookup through an index built by ``define_index``.

        Returns every match; callers decide what more than one means.
        """
        try:
            index = self._indexes[(level, column)]
        except KeyError:
            raise ValueError(f"No index defined on {column} at level {level} of {self.path}")
        return list(index.get(key, ()))

    def fetch(self, match: IndexMatch) -> ParentRecord:
        """
        Read back the probeset that owns an index match.

        A level 0 match yields the whole probeset with lazy atoms and probes.
        A level 2 match yields its probeset holding only the owning atom and
        the matched probe.
        """
        if match.level == Level.PARENT.value:
            cursor = _LineCursor(self, match.offset)
            line = cursor.take()
            return self._make_parent(line, self._iter_mids(cursor))
        parent = self._line_at(match.parent_offset)
        leaf = self._make_leaf(self._line_at(match.offset))
        mids = []
        if match.mid_offset >= 0:
            mids.append(MidRecord(fields=self._line_at(match.mid_offset).fields, leaves=[leaf]))
        return self._make_parent(parent, mids)

    def fetch_fields(self, match: IndexMatch) -> List[str]:
        """Raw field values of the matched line."""
        return self._line_at(match.offset).fields

    # =========================================================================
    # Low level reading
    # =========================================================================

    def _read_header_block(self) -> None:
        handle = self._handle
        line_number = 0
        while True:
            offset = handle.tell()
            raw = handle.readline()
            if not raw:
                self._data_offset = offset
                break
            line_number += 1
            text = self._decode(raw, line_number)
            if text.startswith("#%"):
                key, _, value = text[2:].partition("=")
                header_match = _HEADER_KEY.match(key)
                if header_match:
                    level = int(header_match.group(1))
                    self._columns[level] = value.split("\t")[level:]
                else:
                    self._headers.append((key, value))
                continue
            if text.startswith("#") or not text.strip():
                continue
            if not self._columns:
                # Plain file: the first line names the columns.
                self._columns[0] = text.split("\t")
                self._data_offset = handle.tell()
                self._data_line_number = line_number
            else:
                self._data_offset = offset
                self._data_line_number = line_number - 1
            break
        for level in range(len(self._columns)):
            if level not in self._columns:
                raise SourceFormatError(f"{self.path}: header{level} is missing")
        logger.debug("Opened %s with %d level(s)", self.path, len(self._columns))

    def _readline_at(self, offset: int) -> bytes:
        if self._handle is None:
            raise SourceOpenError(f"Problem reading file {self.path}: file is closed.")
        try:
            self._handle.seek(offset)
            return self._handle.readline()
        except OSError as e:
            raise SourceOpenError(f"Problem reading file {self.path}.") from e

    def _line_at(self, offset: int) -> _Line:
        line = self._parse_data_line(self._readline_at(offset), offset, None)
        if line is None:
            raise SourceFormatError(f"{self.path}: no data line at byte offset {offset}")
        return line

    def _decode(self, raw: bytes, line_number: Optional[int]) -> str:
        try:
            return raw.decode("utf-8").rstrip("\r\n")
        except UnicodeDecodeError as e:
            where = f"line {line_number}" if line_number is not None else "unknown line"
            raise SourceFormatError(f"{self.path} {where}: not valid UTF-8") from e

    def _parse_data_line(self, raw: bytes, offset: int, line_number: Optional[int]) -> Optional[_Line]:
        text = self._decode(raw, line_number)
        if not text.strip() or text.startswith("#"):
            return None
        stripped = text.lstrip("\t")
        level = len(text) - len(stripped)
        line = _Line(level=level, fields=text.split("\t")[level:], offset=offset, line_number=line_number)
        if level not in self._columns:
            raise SourceFormatError(f"{self._where(line)}: no header declared for level {level}")
        return line

    def _where(self, line: _Line) -> str:
        if line.line_number is not None:
            return f"{self.path} line {line.line_number}"
        return f"{self.path} byte offset {line.offset}"

    def _int_field(self, line: _Line, col: int, column: str) -> int:
        if col >= len(line.fields):
            raise SourceFormatError(f"{self._where(line)}: missing {column} value")
        value = line.fields[col]
        try:
            return strict_int(value)
        except ValueError:
            raise SourceFormatError(f"{self._where(line)}: {column} value '{value}' is not an integer")

    def _make_parent(self, line: _Line, mids) -> ParentRecord:
        return ParentRecord(id=self._int_field(line, 0, self._first_column(0)), fields=line.fields[1:], mids=mids)

    def _make_leaf(self, line: _Line) -> LeafRecord:
        return LeafRecord(id=self._int_field(line, 0, self._first_column(2)), fields=line.fields[1:])

    def _first_column(self, level: int) -> str:
        names = self._columns.get(level)
        return names[0] if names else f"level {level} id"
