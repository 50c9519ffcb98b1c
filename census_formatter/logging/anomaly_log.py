from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from ..models.anomaly import Anomaly

"""Anomaly log buffering.

Anomalies from every processed workbook are buffered in memory and written
as JSON Lines (one object per line, keys ``file`` plus the Anomaly fields) to
``logs/anomalies-YYYYMMDD-HHMMSS.log`` (UTC). The file is created on the
first non-empty flush only.
"""

__all__ = [
    "AnomalyLogBuffer",
    "LOGS_DIR",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class AnomalyLogBuffer:
    """In-memory buffer of (source file, anomaly) entries. Not thread safe."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._logs_dir = logs_dir or LOGS_DIR
        self._entries: list[tuple[str, Anomaly]] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(timezone.utc).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"anomalies-{stamp}.log"
        return self._file_path

    def append(self, source: str, anomaly: Anomaly) -> None:
        self._entries.append((source, anomaly))

    def extend(self, source: str, anomalies: list[Anomaly]) -> None:
        self._entries.extend((source, a) for a in anomalies)

    def __len__(self) -> int:
        return len(self._entries)

    def flush(self) -> Path | None:
        """Append buffered entries to the log file; None when nothing was buffered."""
        if not self._entries:
            return None
        fp = self.file_path
        fp.parent.mkdir(parents=True, exist_ok=True)
        with fp.open("a", encoding="utf-8") as f:
            for source, anomaly in self._entries:
                f.write(anomaly.to_json_line(source) + "\n")
        self._entries.clear()
        return fp
