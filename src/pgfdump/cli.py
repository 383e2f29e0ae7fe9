"""Command-line entry point: ``pgf-dump``."""

import logging
import shlex
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from pgfdump import __version__
from pgfdump.config import DumpOptions, load_options
from pgfdump.engine import DumpEngine
from pgfdump.errors import PgfDumpError

app = typer.Typer(
    name="pgf-dump",
    help="Dump information from a pgf file, optionally joined with clf probe positions.",
    add_completion=False,
)

err_console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _version_callback(value: bool) -> None:
    if value:
        print(f"pgf-dump {__version__}")
        raise typer.Exit()


@app.command()
def dump(
    pgf_file: Optional[str] = typer.Option(None, "--pgf-file", "-p", help="The pgf file used to dump information."),
    clf_file: Optional[str] = typer.Option(
        None, "--clf-file", "-c",
        help="Optional clf file to use. When present, probe position will be included in the output.",
    ),
    probeset_type: Optional[List[str]] = typer.Option(
        None, "--probeset-type",
        help="Probeset type to extract; can be specified multiple times. "
        "When specified multiple times, the intersection of all types is taken.",
    ),
    probeset_ids: Optional[List[str]] = typer.Option(
        None, "--probeset-ids", "-s",
        help="File containing probeset ids to extract; can be specified multiple times.",
    ),
    probe_ids: Optional[List[str]] = typer.Option(
        None, "--probe-ids",
        help="File containing probe ids to extract; can be specified multiple times.",
    ),
    probeset_only: bool = typer.Option(False, "--probeset-only", help="Dump only probeset level information."),
    union: bool = typer.Option(False, "--or", help="Use the union of the types requested, not the intersection."),
    out_file: Optional[str] = typer.Option(None, "--out-file", "-o", help="Output file to contain the dump output."),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML run file with any of the options above."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Report progress on stderr."),
    version: bool = typer.Option(
        False, "--version", help="Display version information.", callback=_version_callback, is_eager=True,
    ),
):
    """
    Dump a pgf file as one flat tab-delimited row per probe (or per probeset).

    Only one of --probeset-type, --probeset-ids and --probe-ids may be used.
    """
    setup_logging(verbose)
    try:
        options = load_options(str(config)) if config is not None else DumpOptions()
        options = options.merged({
            "pgf_file": pgf_file,
            "clf_file": clf_file,
            "out_file": out_file,
            "probeset_types": probeset_type,
            "probeset_id_files": probeset_ids,
            "probe_id_files": probe_ids,
            "probeset_only": probeset_only,
            "union": union,
        })
        options.command_line = shlex.join(sys.argv) if sys.argv else "pgf-dump"
        DumpEngine(options).run()
    except PgfDumpError as e:
        err_console.print(f"FATAL: {e}", markup=False, highlight=False, soft_wrap=True)
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
