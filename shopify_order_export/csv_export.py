"""
CSV Export — Writes export rows as spreadsheet-friendly CSV.

Column order is always EXPORT_COLUMNS. Text starts with a UTF-8 byte-order
mark so that spreadsheet tools (Excel in particular) detect the encoding and
render non-ASCII names and addresses correctly. read_csv() accepts files with
or without the mark.
"""

import csv
import io
from typing import Dict, List, Sequence

from .order_normalizer import EXPORT_COLUMNS

BOM = "\ufeff"


def _write(rows: Sequence[Dict[str, str]], stream):
    writer = csv.DictWriter(stream, fieldnames=EXPORT_COLUMNS, extrasaction="ignore", lineterminator="\r\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({column: row.get(column, "") for column in EXPORT_COLUMNS})


def rows_to_csv(rows: Sequence[Dict[str, str]]) -> str:
    """Render rows as CSV text, prefixed with a byte-order mark."""
    buffer = io.StringIO()
    _write(rows, buffer)
    return BOM + buffer.getvalue()


def write_csv(rows: Sequence[Dict[str, str]], filepath: str) -> str:
    """Write rows to filepath (UTF-8 with BOM) and return the path."""
    with open(filepath, "w", encoding="utf-8-sig", newline="") as f:
        _write(rows, f)
    return filepath


def parse_csv(text: str) -> List[Dict[str, str]]:
    """Parse CSV text produced by rows_to_csv() back into row dicts."""
    if text.startswith(BOM):
        text = text[len(BOM):]
    return list(csv.DictReader(io.StringIO(text, newline="")))


def read_csv(filepath: str) -> List[Dict[str, str]]:
    """Load an export file into a list of row dicts.

    Handles the UTF-8 BOM written by write_csv().
    """
    with open(filepath, "r", encoding="utf-8-sig", newline="") as f:
        return list(csv.DictReader(f))
