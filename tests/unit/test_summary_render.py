from __future__ import annotations

import re
from datetime import datetime, timezone

from census_formatter.models.batch_result import BatchResult
from census_formatter.services.summary import format_elapsed, render_summary_line

SUMMARY_RE = re.compile(
    r"^SUMMARY files=\d+/\d+ valid=\d+ invalid=\d+ failed=\d+ records=\d+ "
    r"errors=\d+ warnings=\d+ elapsed_sec=[0-9.]+$"
)


def _result(**kw) -> BatchResult:
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    values = dict(
        valid_files=0, invalid_files=0, failed_files=0, total_records=0, total_errors=0,
        total_warnings=0, start_time=now, end_time=now, elapsed_seconds=0.0,
    )
    values.update(kw)
    return BatchResult(**values)


def test_empty_batch():
    line = render_summary_line(_result())
    assert line == (
        "SUMMARY files=0/0 valid=0 invalid=0 failed=0 records=0 errors=0 warnings=0 elapsed_sec=0"
    )
    assert SUMMARY_RE.match(line)


def test_failed_files_not_counted_as_done():
    line = render_summary_line(
        _result(valid_files=2, invalid_files=1, failed_files=1, total_records=40,
                total_errors=5, total_warnings=7, elapsed_seconds=1.25)
    )
    assert line.startswith("SUMMARY files=3/4 valid=2 invalid=1 failed=1 records=40")
    assert line.endswith("elapsed_sec=1.25")
    assert SUMMARY_RE.match(line)


def test_format_elapsed():
    assert format_elapsed(0) == "0"
    assert format_elapsed(3.0) == "3"
    assert format_elapsed(0.000123) == "0.000123"
    assert format_elapsed(2.3456) == "2.346"
    assert "e" not in format_elapsed(1e-7)
