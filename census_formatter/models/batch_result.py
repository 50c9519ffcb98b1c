from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Batch result models.

Aggregates the per-file outcomes of one CLI run for the SUMMARY line.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file statistics."""
    file_name: str
    status: str  # valid/invalid/failed
    records: int
    errors: int
    warnings: int
    elapsed_seconds: float


@dataclass(frozen=True)
class BatchResult:
    """Aggregated results of processing every census file in a directory."""
    valid_files: int
    invalid_files: int
    failed_files: int
    total_records: int
    total_errors: int
    total_warnings: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.valid_files + self.invalid_files + self.failed_files
