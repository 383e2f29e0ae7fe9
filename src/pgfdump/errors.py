"""
Error taxonomy for PGF dumping.

Every condition here aborts the run. None of them is retried or turned into
a warning. A lookup that finds nothing is NOT an error and never raises.
"""


class PgfDumpError(Exception):
    """Base class for all fatal dump errors."""
    pass


class SchemaError(PgfDumpError):
    """Raised when an identifier column is missing or not first in its level."""
    pass


class MissingColumnError(PgfDumpError):
    """Raised when a required column (e.g. ``type``) is absent."""
    pass


class ConfigError(PgfDumpError):
    """Raised when the run options are contradictory or incomplete."""
    pass


class SourceOpenError(PgfDumpError):
    """Raised when an input or output file cannot be opened or read."""
    pass


class SourceFormatError(SourceOpenError):
    """Raised when a tabular file is readable but malformed."""
    pass


class NonUniqueIndexError(PgfDumpError):
    """
    Raised when an indexed lookup returns more than one record.

    The indexed columns (probeset_id, probe_id) are unique by file format
    contract, so a duplicate means the file is corrupt.

    Attributes:
        key: The looked-up identifier
        level: Level index the lookup ran against
        source: Path of the file that was searched
        column: Indexed column name
        source_kind: Short file kind used in the message ("pgf", "clf")
    """

    def __init__(self, key: int, level: int, source: str, column: str, source_kind: str = "pgf"):
        self.key = key
        self.level = level
        self.source = source
        self.column = column
        self.source_kind = source_kind
        super().__init__(
            f"{column} '{key}' is not a unique index. "
            f"Duplicate {column} found, [{key}] for {source_kind} file {source}"
        )
