"""
Dump engine: runs one selection over a PGF file and writes the report.

Pipeline:
    1. Announce the run (module, command line, exec_guid)
    2. Resolve the selection (reads id list files)
    3. Open the PGF and the optional CLF
    4. Build the catalog, choose the coordinate strategy, prepare indexes
    5. Open the report, write preamble and header line
    6. Stream accepted probesets through the row assembler

Any PgfDumpError aborts the run where it is raised.
"""

import logging
from contextlib import nullcontext
from typing import Callable, ContextManager, Optional, TextIO

from pgfdump import __version__
from pgfdump.assembler import RowAssembler
from pgfdump.catalog import Catalog
from pgfdump.config import DumpOptions, build_selection
from pgfdump.coordinates import CoordinateResolver, choose_resolver
from pgfdump.errors import SourceOpenError
from pgfdump.model import SelectionConfig
from pgfdump.report import RunInfo, new_guid, write_preamble
from pgfdump.selection import make_strategy
from pgfdump.tsv_source import TsvSource

logger = logging.getLogger(__name__)

VERSION = f"pgfdump {__version__}"


class DumpEngine:
    """
    One dump run.

    Properties:
        options: Run options
        exec_guid: Identifier of this execution
        rows_written: Data lines written by the last run
    """

    def __init__(self, options: DumpOptions):
        self.options = options
        self.exec_guid = new_guid()
        self.rows_written = 0

    def run(self) -> int:
        """
        Read, select, write.

        The output file is only created once the PGF and CLF have been
        opened and checked, so a bad input never leaves an empty report.

        Returns:
            Number of data lines written
        """
        options = self.options
        logger.info("MODULE: %s", VERSION)
        logger.info("CMD: %s", options.command_line)
        logger.info("exec_guid %s", self.exec_guid)

        selection = build_selection(options)
        self.rows_written = self._execute(selection, self._open_output)
        logger.info("Wrote %d rows to %s", self.rows_written, options.out_file)
        return self.rows_written

    def dump(self, selection: SelectionConfig, out: TextIO) -> int:
        """
        Write the full report for a selection to an open stream.

        The stream stays open; the caller owns it.

        Returns:
            Number of data lines written
        """
        return self._execute(selection, lambda: nullcontext(out))

    def _open_output(self) -> TextIO:
        try:
            return open(self.options.out_file, "w", encoding="utf-8", newline="\n")
        except OSError as e:
            raise SourceOpenError(f"Problem opening output file {self.options.out_file}.") from e

    def _execute(self, selection: SelectionConfig, open_out: Callable[[], ContextManager[TextIO]]) -> int:
        options = self.options
        logger.info("Reading meta data from PGF and CLF files")
        with TsvSource.open(options.pgf_file) as pgf:
            clf: Optional[TsvSource] = None
            if options.clf_file:
                clf = TsvSource.open(options.clf_file)
            try:
                catalog = Catalog.build(
                    pgf.column_names(0),
                    pgf.column_names(1),
                    pgf.column_names(2),
                    parent_only=options.probeset_only,
                    coordinate_join=clf is not None,
                )
                strategy = make_strategy(selection, catalog)
                resolver: Optional[CoordinateResolver] = None
                if catalog.coordinate_join:
                    resolver = choose_resolver(clf)
                strategy.prepare(pgf)

                with open_out() as out:
                    run = RunInfo(exec_guid=self.exec_guid, version=VERSION, command_line=options.command_line)
                    write_preamble(out, run, pgf.headers())
                    assembler = RowAssembler(catalog, out, resolver)
                    assembler.write_header()
                    for group in strategy.select(pgf):
                        assembler.write_group(group)
                    out.flush()
                    return assembler.rows_written
            finally:
                if clf is not None:
                    clf.close()
