from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..models.cell import Empty, to_cell

"""Column population analysis.

Classifies every column of a row sequence as blank (no value in any row),
populated (a value in every row) or partially filled. The export writer uses
the classification to move all-blank columns to a separate sheet, and the
record normalizer uses it to tell "nobody answered this column" apart from
"this person left it blank".

Works on raw rows, canonical-keyed rows or ``CensusRecord.to_row()`` dicts.
"""

__all__ = [
    "ColumnAnalysis",
    "analyze_columns",
    "has_existing_entries",
    "is_blank",
]


@dataclass(frozen=True)
class ColumnAnalysis:
    total_columns: int
    blank_columns: list[str] = field(default_factory=list)
    populated_columns: list[str] = field(default_factory=list)
    partially_filled_columns: list[str] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)  # original column order

    @property
    def non_blank_columns(self) -> list[str]:
        blank = set(self.blank_columns)
        return [c for c in self.columns if c not in blank]


def is_blank(value: Any) -> bool:
    """True for None, NaN, '' and whitespace-only values."""
    return isinstance(to_cell(value), Empty)


def _column_order(rows: Sequence[Mapping[str, Any]]) -> list[str]:
    # first appearance across all rows, not just the first row
    seen: dict[str, None] = {}
    for row in rows:
        for key in row:
            seen.setdefault(key, None)
    return list(seen)


def analyze_columns(rows: Sequence[Mapping[str, Any]]) -> ColumnAnalysis:
    if not rows:
        return ColumnAnalysis(total_columns=0)

    columns = _column_order(rows)
    blank: list[str] = []
    populated: list[str] = []
    partial: list[str] = []
    for column in columns:
        filled = sum(1 for row in rows if not is_blank(row.get(column)))
        if filled == 0:
            blank.append(column)
        elif filled == len(rows):
            populated.append(column)
        else:
            partial.append(column)

    return ColumnAnalysis(
        total_columns=len(columns),
        blank_columns=blank,
        populated_columns=populated,
        partially_filled_columns=partial,
        columns=columns,
    )


def has_existing_entries(rows: Sequence[Mapping[str, Any]], column: str) -> bool:
    """True if at least one row has a non-blank value in ``column``."""
    return any(not is_blank(row.get(column)) for row in rows)
