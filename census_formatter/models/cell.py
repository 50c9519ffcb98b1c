from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Union

"""Cell value model for census spreadsheet rows.

Spreadsheet cells arrive loosely typed (string, number or empty). Every
canonicalizer converts its input through ``to_cell`` first and then branches
on the concrete variant instead of relying on implicit coercion.
"""

__all__ = [
    "Empty",
    "Text",
    "Number",
    "Cell",
    "EMPTY",
    "to_cell",
    "cell_text",
]


@dataclass(frozen=True)
class Empty:
    """Blank cell (None, NaN or whitespace only)."""


@dataclass(frozen=True)
class Text:
    value: str  # stripped, never empty


@dataclass(frozen=True)
class Number:
    value: float  # finite

    @property
    def is_integral(self) -> bool:
        return float(self.value).is_integer()


Cell = Union[Empty, Text, Number]

EMPTY = Empty()


def to_cell(raw: Any) -> Cell:
    """Convert a raw spreadsheet value into a Cell variant.

    Dates coming from the Excel reader (datetime / pandas Timestamp) are
    rendered as ISO text so that the date canonicalizer can parse them.
    """
    if isinstance(raw, (Empty, Text, Number)):
        return raw
    if raw is None:
        return EMPTY
    if isinstance(raw, bool):
        return Text("Yes" if raw else "No")
    if isinstance(raw, (int, float)):
        value = float(raw)
        if math.isnan(value) or math.isinf(value):
            return EMPTY
        return Number(value)
    if type(raw).__name__ == "NaTType":
        return EMPTY
    if isinstance(raw, datetime):
        return Text(raw.date().isoformat())
    if isinstance(raw, date):
        return Text(raw.isoformat())
    # numpy scalars expose item()
    item = getattr(raw, "item", None)
    if callable(item) and not isinstance(raw, str):
        try:
            return to_cell(item())
        except (TypeError, ValueError):
            pass
    text = str(raw).strip()
    if not text:
        return EMPTY
    return Text(text)


def cell_text(cell: Any) -> str:
    """Render a cell as text ('' for Empty, integral numbers without '.0')."""
    cell = to_cell(cell)
    if isinstance(cell, Text):
        return cell.value
    if isinstance(cell, Number):
        if cell.is_integral:
            return str(int(cell.value))
        return repr(cell.value)
    return ""
