"""
Report preamble: the ``#%key=value`` lines written before the header line.
"""

import time
import uuid
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, TextIO, Tuple

# Only these PGF header keys are copied to the report.
PROPAGATED_KEYS = ("chip_type", "lib_set_version", "lib_set_name")


def new_guid() -> str:
    return str(uuid.uuid4())


@dataclass
class RunInfo:
    """Identity of one dump run, as written to the preamble."""
    exec_guid: str
    version: str
    command_line: str
    guid: str = field(default_factory=new_guid)
    create_date: Optional[str] = None


def propagated_headers(headers: Iterable[Tuple[str, str]]) -> List[Tuple[str, str]]:
    """Allow-listed source headers, in source order."""
    return [(key, value) for key, value in headers if key in PROPAGATED_KEYS]


def write_preamble(out: TextIO, run: RunInfo, source_headers: Iterable[Tuple[str, str]]) -> None:
    """
    Write the metadata lines of a report.

    Args:
        out: Report stream
        run: Run identity
        source_headers: Header metadata of the PGF file
    """
    create_date = run.create_date or time.asctime(time.localtime())
    out.write(f"#%guid={run.guid}\n")
    out.write(f"#%exec_guid={run.exec_guid}\n")
    out.write(f"#%exec_version={run.version}\n")
    out.write(f"#%create_date={create_date}\n")
    out.write(f"#%cmd={run.command_line}\n")
    for key, value in propagated_headers(source_headers):
        out.write(f"#%{key}={value}\n")
