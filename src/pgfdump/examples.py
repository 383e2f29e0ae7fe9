"""
Example design files for demos and tests.

A small PGF with four probesets (eight probes) plus two CLF files describing
the same 3x3 array: one declared sequential, one listing positions row by
row. Probe 8 is missing from the listed CLF.
"""
from pathlib import Path
from typing import Dict, Optional

EXAMPLE_PGF = "\n".join([
    "#%chip_type=Example-1_0-st",
    "#%chip_type=Example-1_0-st-v1",
    "#%lib_set_name=Example-1_0-st",
    "#%lib_set_version=r1",
    "#%pgf_format_version=1.0",
    "#%create_date=Tue Apr 08 10:00:00 2008",
    "#%header0=probeset_id\ttype\tprobeset_name",
    "#%header1=\tatom_id",
    "#%header2=\t\tprobe_id\ttype\tgc_count\tprobe_length\tinterrogation_position\tprobe_sequence",
    "# four probesets",
    "1\tmain->rescue->v1\tPS-ONE",
    "\t1",
    "\t\t1\tpm:st\t11\t25\t13\tACGTACGTACGTACGTACGTACGTA",
    "\t\t2\tpm:st\t12\t25\t13\tCCGTACGTACGTACGTACGTACGTA",
    "\t2",
    "\t\t3\tpm:st\t13\t25\t13\tGCGTACGTACGTACGTACGTACGTA",
    "2\tmain->v1\tPS-TWO",
    "\t3",
    "\t\t4\tpm:st\t9\t25\t13\tTCGTACGTACGTACGTACGTACGTA",
    "\t\t5\tmm:st\t9\t25\t13\tTCGTACGTACGTAGGTACGTACGTA",
    "3\tnormgene->intron\tPS-THREE",
    "\t4",
    "\t\t6\tpm:st\t10\t25\t13\tAAGTACGTACGTACGTACGTACGTA",
    "4\tcontrol->->bgp->antigenomic->\tPS-FOUR",
    "\t5",
    "\t\t7\tpm:st\t4\t25\t13\tAAATACGTACGTACGTACGTACGTA",
    "\t\t8\tpm:st\t5\t25\t13\tAAAAACGTACGTACGTACGTACGTA",
]) + "\n"

EXAMPLE_SEQUENTIAL_CLF = "\n".join([
    "#%chip_type=Example-1_0-st",
    "#%lib_set_name=Example-1_0-st",
    "#%lib_set_version=r1",
    "#%clf_format_version=1.0",
    "#%rows=3",
    "#%cols=3",
    "#%sequential=1",
    "#%order=col_major",
    "#%header0=probe_id\tx\ty",
]) + "\n"


def sequential_positions(rows: int = 3, cols: int = 3, start: int = 1, order: str = "col_major") -> Dict[int, tuple]:
    """probe_id -> (x, y) for every cell of a sequential layout."""
    positions = {}
    for x in range(cols):
        for y in range(rows):
            if order == "col_major":
                probe_id = y * cols + x + start
            else:
                probe_id = x * rows + y + start
            positions[probe_id] = (x, y)
    return positions


def build_listed_clf(positions: Dict[int, tuple], skip: Optional[set] = None) -> str:
    """CLF text listing every position explicitly (no sequential header)."""
    skip = skip or set()
    lines = [
        "#%chip_type=Example-1_0-st",
        "#%clf_format_version=1.0",
        "#%header0=probe_id\tx\ty",
    ]
    for probe_id, (x, y) in sorted(positions.items()):
        if probe_id in skip:
            continue
        lines.append(f"{probe_id}\t{x}\t{y}")
    return "\n".join(lines) + "\n"


EXAMPLE_LISTED_CLF = build_listed_clf(sequential_positions(), skip={8})


def write_example_files(directory) -> Dict[str, Path]:
    """
    Write the example PGF and CLF files.

    Args:
        directory: Target directory (created if missing)

    Returns:
        Mapping of "pgf", "sequential_clf", "listed_clf" to file paths
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    paths = {
        "pgf": directory / "example.pgf",
        "sequential_clf": directory / "example_sequential.clf",
        "listed_clf": directory / "example_listed.clf",
    }
    paths["pgf"].write_text(EXAMPLE_PGF, encoding="utf-8")
    paths["sequential_clf"].write_text(EXAMPLE_SEQUENTIAL_CLF, encoding="utf-8")
    paths["listed_clf"].write_text(EXAMPLE_LISTED_CLF, encoding="utf-8")
    return paths
