from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

"""CensusFile domain model and FileStatus enum.

A CensusFile tracks one census workbook through a batch run, from discovery
to its exported output.
"""


class FileStatus(Enum):
    """Processing status of a census workbook.

    State transitions: pending -> processing -> (valid | invalid | failed)

    - VALID: processed and exported, no validation errors
    - INVALID: processed and exported, validation errors present
    - FAILED: could not be read or exported
    """
    PENDING = "pending"
    PROCESSING = "processing"
    VALID = "valid"
    INVALID = "invalid"
    FAILED = "failed"


@dataclass(frozen=True)
class CensusFile:
    path: Path
    name: str
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: FileStatus = FileStatus.PENDING
    output_path: Path | None = None
    total_records: int = 0
    error_count: int = 0
    warning_count: int = 0
    anomaly_count: int = 0
    error: str | None = None  # failure reason for FAILED files

    @property
    def elapsed_seconds(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()
