from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

"""Census workbook reader.

Picks one sheet (configured name, else MASTER CENSUS, else the first sheet),
takes the configured 1-based row as the header and returns the rows below it
as header -> value dicts. Fully empty rows are dropped; NaN becomes None.
"""

__all__ = [
    "DEFAULT_SHEET_NAME",
    "SheetHeaderError",
    "MissingSheetError",
    "CensusSheet",
    "pick_sheet_name",
    "read_census_file",
]

DEFAULT_SHEET_NAME = "MASTER CENSUS"


class SheetHeaderError(Exception):
    """Raised when the header row is missing or blank."""


class MissingSheetError(Exception):
    """Raised when the configured sheet does not exist in the workbook."""


@dataclass
class CensusSheet:
    sheet_name: str
    headers: list[str]
    rows: list[dict[str, Any]]


def pick_sheet_name(sheet_names: list[str], configured: str | None = None) -> str:
    if configured:
        if configured not in sheet_names:
            raise MissingSheetError(f"sheet '{configured}' not found (have: {sheet_names})")
        return configured
    for name in sheet_names:
        if name.strip().upper() == DEFAULT_SHEET_NAME:
            return name
    if not sheet_names:
        raise MissingSheetError("workbook has no sheets")
    return sheet_names[0]


def _header_names(values: list[Any]) -> list[str]:
    # blank headings get a positional name; duplicates get a numeric suffix
    headers: list[str] = []
    seen: dict[str, int] = {}
    for idx, value in enumerate(values, start=1):
        name = "" if pd.isna(value) else str(value).strip()
        if not name:
            name = f"Column {idx}"
        if name in seen:
            seen[name] += 1
            name = f"{name}.{seen[name]}"
        else:
            seen[name] = 0
        headers.append(name)
    return headers


def _cell_value(value: Any) -> Any:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    return value


def read_census_file(
    path: Path, sheet_name: str | None = None, header_row: int = 1
) -> CensusSheet:
    """Read the census sheet of ``path``.

    Raises:
        MissingSheetError: configured sheet not in the workbook
        SheetHeaderError: header row beyond the sheet or entirely blank
    """
    with pd.ExcelFile(path, engine="openpyxl") as xls:
        name = pick_sheet_name([str(s) for s in xls.sheet_names], sheet_name)
        df = xls.parse(name, header=None, keep_default_na=False, na_values=[""])

    if df.shape[0] < header_row:
        raise SheetHeaderError(f"sheet '{name}' has no header at row {header_row}")
    header_values = df.iloc[header_row - 1].tolist()
    if all(pd.isna(v) or str(v).strip() == "" for v in header_values):
        raise SheetHeaderError(f"sheet '{name}' header row {header_row} is blank")
    headers = _header_names(header_values)

    rows: list[dict[str, Any]] = []
    for _, raw in df.iloc[header_row:].iterrows():
        if raw.isna().all():
            continue
        values = [_cell_value(v) for v in raw.tolist()]
        if all(v is None or (isinstance(v, str) and not v.strip()) for v in values):
            continue
        rows.append(dict(zip(headers, values)))
    return CensusSheet(sheet_name=name, headers=headers, rows=rows)
