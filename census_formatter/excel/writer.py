from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from ..models.census_record import CensusRecord
from ..models.field_schema import EXPORT_COLUMNS
from ..services.column_analyzer import analyze_columns

"""Census export writer.

Writes the reconciled records to a MASTER CENSUS sheet holding every export
column that has a value in at least one record. Columns that are blank for
every record are listed on a separate BLANKS sheet.
"""

__all__ = [
    "ExportError",
    "MASTER_SHEET",
    "BLANKS_SHEET",
    "export_frames",
    "write_census",
]

MASTER_SHEET = "MASTER CENSUS"
BLANKS_SHEET = "BLANKS"


class ExportError(Exception):
    pass


def export_frames(records: Sequence[CensusRecord]) -> tuple[pd.DataFrame, list[str]]:
    """Build the MASTER CENSUS frame and the list of all-blank headings."""
    rows = [record.to_row() for record in records]
    export_rows = [{heading: row.get(key) for heading, key in EXPORT_COLUMNS} for row in rows]
    analysis = analyze_columns(export_rows)
    blank = set(analysis.blank_columns)
    headings = [heading for heading, _ in EXPORT_COLUMNS]
    if not export_rows:
        return pd.DataFrame(columns=headings), []
    kept = [h for h in headings if h not in blank]
    frame = pd.DataFrame(export_rows, columns=kept)
    frame = frame.astype(object).where(frame.notna(), "")
    return frame, [h for h in headings if h in blank]


def write_census(records: Sequence[CensusRecord], path: Path) -> Path:
    """Write the export workbook to ``path``.

    Raises:
        ExportError: the workbook could not be written
    """
    frame, blank_headings = export_frames(records)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            frame.to_excel(writer, sheet_name=MASTER_SHEET, index=False)
            if blank_headings:
                pd.DataFrame(columns=blank_headings).to_excel(
                    writer, sheet_name=BLANKS_SHEET, index=False
                )
    except (OSError, ValueError) as e:
        raise ExportError(f"failed to write {path}: {e}") from e
    return path
