"""
PGF Dump Package

Selects records from a three-level PGF design file (probeset -> atom -> probe),
flattens them into one tab-delimited row per probe (or per probeset), and
optionally joins each probe against its x/y position from a CLF file.

ARCHITECTURAL GUARANTEE:
------------------------
The engine knows nothing about:
    - Command-line parsing
    - Where the selection configuration came from
    - How many id list files were merged

It receives one validated SelectionConfig and open record sources.
"""

__version__ = "0.1.0"
