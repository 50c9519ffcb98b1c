from __future__ import annotations

from ..models.batch_result import BatchResult

"""SUMMARY line rendering for the batch CLI."""

__all__ = [
    "format_elapsed",
    "render_summary_line",
]


def format_elapsed(seconds: float) -> str:
    """Render seconds without scientific notation; whole numbers without '.0'."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: BatchResult) -> str:
    """Render the SUMMARY line.

    Format::

        SUMMARY files={done}/{total} valid={v} invalid={i} failed={f}
        records={r} errors={e} warnings={w} elapsed_sec={s}

    (on one line). ``done`` counts valid and invalid files, i.e. the ones
    that produced an export.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = BatchResult(
        ...     valid_files=1, invalid_files=1, failed_files=0, total_records=12,
        ...     total_errors=3, total_warnings=4, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY files=2/2 valid=1 invalid=1 failed=0 records=12 errors=3 warnings=4 elapsed_sec=2'
    """
    done = result.valid_files + result.invalid_files
    return (
        f"SUMMARY files={done}/{result.total_files} "
        f"valid={result.valid_files} "
        f"invalid={result.invalid_files} "
        f"failed={result.failed_files} "
        f"records={result.total_records} "
        f"errors={result.total_errors} "
        f"warnings={result.total_warnings} "
        f"elapsed_sec={format_elapsed(result.elapsed_seconds)}"
    )
