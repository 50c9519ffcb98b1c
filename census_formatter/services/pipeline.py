from __future__ import annotations

import logging
import zipfile
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config.loader import CensusConfig
from ..excel.reader import MissingSheetError, SheetHeaderError, read_census_file
from ..excel.writer import ExportError, write_census
from ..logging.anomaly_log import AnomalyLogBuffer
from ..models.anomaly import Anomaly
from ..models.batch_result import BatchResult, FileStat
from ..models.census_file import CensusFile, FileStatus
from ..models.census_record import CensusRecord
from ..models.field_schema import REQUIRED_FIELD_KEYS, FieldMapping
from ..models.validation_result import ValidationResult
from .column_analyzer import ColumnAnalysis, analyze_columns
from .family_reconciler import FamilyGroup, reconcile_families
from .header_matcher import MappingError, apply_overrides, match_headers, missing_required, project_rows
from .progress import ProgressTracker
from .record_normalizer import normalize_records
from .validator import ValidationOptions, validate_records

logger = logging.getLogger(__name__)

"""Census pipeline and batch orchestration.

``run_pipeline`` runs the in-memory stages over one sheet:

    header matching -> normalization -> family reconciliation -> validation

``process_file`` wraps it with workbook I/O for one file and ``process_all``
runs every ``.xlsx`` in the configured source directory, one file at a time.
A file that cannot be read or written is marked FAILED and the batch moves
on; validation errors make a file INVALID but it is still exported.
"""

__all__ = [
    "PipelineError",
    "PipelineResult",
    "run_pipeline",
    "scan_census_files",
    "output_path_for",
    "process_file",
    "process_all",
]


class PipelineError(Exception):
    """Raised for conditions that stop the pipeline or the batch."""


@dataclass(frozen=True)
class PipelineResult:
    mapping: FieldMapping
    records: list[CensusRecord]
    validation: ValidationResult
    anomalies: list[Anomaly] = field(default_factory=list)
    groups: list[FamilyGroup] = field(default_factory=list)
    column_analysis: ColumnAnalysis | None = None
    unmapped_required: list[str] = field(default_factory=list)


def _validation_options(config: CensusConfig | None) -> ValidationOptions:
    if config is None:
        return ValidationOptions()
    return ValidationOptions(
        warn_missing_expected=config.validation.warn_missing_expected,
        child_age_limit=config.validation.child_age_limit,
    )


def run_pipeline(
    headers: Sequence[str],
    rows: Sequence[Mapping[str, Any]] | None,
    *,
    mapping: Mapping[str, str] | None = None,
    overrides: Mapping[str, str | None] | None = None,
    config: CensusConfig | None = None,
) -> PipelineResult:
    """Run every stage over one sheet's rows.

    Args:
        headers: raw column headings in sheet order
        rows: raw header -> value dicts
        mapping: previously inferred/edited mapping; inferred when None
        overrides: user edits applied on top of the mapping
        config: source of default hours, required fields and validation options

    Raises:
        PipelineError: ``rows`` is None
        MappingError: an override names an unknown field or a missing header
    """
    if rows is None:
        raise PipelineError("no rows to process")

    field_mapping: FieldMapping = dict(mapping) if mapping is not None else match_headers(headers)
    if config is not None and config.column_overrides:
        field_mapping = apply_overrides(field_mapping, config.column_overrides, headers)
    if overrides:
        field_mapping = apply_overrides(field_mapping, overrides, headers)

    required = config.required_fields if config is not None else REQUIRED_FIELD_KEYS
    unmapped = missing_required(field_mapping, required)
    if unmapped:
        logger.warning("required field(s) without a column: %s", ", ".join(unmapped))

    projected = project_rows(rows, field_mapping)
    default_hours = config.default_hours_worked if config is not None else 40
    records, anomalies = normalize_records(projected, default_hours=default_hours)
    reconciled = reconcile_families(records)
    validation = validate_records(reconciled.records, options=_validation_options(config))

    return PipelineResult(
        mapping=field_mapping,
        records=reconciled.records,
        validation=validation,
        anomalies=anomalies + reconciled.anomalies,
        groups=reconciled.groups,
        column_analysis=analyze_columns([r.to_row() for r in reconciled.records]),
        unmapped_required=unmapped,
    )


def scan_census_files(directory: Path) -> list[Path]:
    """Sorted ``.xlsx`` files in ``directory`` (non-recursive, lock files skipped).

    Raises:
        PipelineError: directory missing or unreadable
    """
    if not directory.exists():
        raise PipelineError(f"directory not found: {directory}")
    if not directory.is_dir():
        raise PipelineError(f"path is not a directory: {directory}")
    try:
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() == ".xlsx" and not p.name.startswith("~$")
        )
    except OSError as e:
        raise PipelineError(f"error reading directory {directory}: {e}") from e


def output_path_for(path: Path, config: CensusConfig) -> Path:
    return Path(config.output_directory) / f"{path.stem}-formatted.xlsx"


def process_file(path: Path, config: CensusConfig, anomaly_log: AnomalyLogBuffer) -> CensusFile:
    """Read, run and export one workbook. Never raises for per-file problems."""
    census_file = CensusFile(
        path=path, name=path.name, start_time=datetime.now(timezone.utc),
        status=FileStatus.PROCESSING,
    )
    try:
        sheet = read_census_file(path, config.sheet_name, config.header_row)
        result = run_pipeline(sheet.headers, sheet.rows, config=config)
        output = write_census(result.records, output_path_for(path, config))
    except (
        SheetHeaderError, MissingSheetError, MappingError, ExportError,
        zipfile.BadZipFile, OSError, ValueError,
    ) as e:
        logger.error("%s: %s", path.name, e)
        return replace(
            census_file, status=FileStatus.FAILED, end_time=datetime.now(timezone.utc), error=str(e)
        )

    anomaly_log.extend(path.name, result.anomalies)
    summary = result.validation.summary
    for issue in result.validation.errors:
        logger.debug("%s row=%s %s: %s", path.name, issue.row_index, issue.field, issue.message)
    status = FileStatus.VALID if result.validation.is_valid else FileStatus.INVALID
    logger.info(
        "%s: %s records=%d errors=%d warnings=%d anomalies=%d -> %s",
        path.name, status.value, summary.total_records, summary.error_count,
        summary.warning_count, len(result.anomalies), output,
    )
    return replace(
        census_file,
        status=status,
        end_time=datetime.now(timezone.utc),
        output_path=output,
        total_records=summary.total_records,
        error_count=summary.error_count,
        warning_count=summary.warning_count,
        anomaly_count=len(result.anomalies),
    )


def process_all(config: CensusConfig, anomaly_log: AnomalyLogBuffer | None = None) -> BatchResult:
    """Process every census workbook in ``config.source_directory``.

    Raises:
        PipelineError: the source directory is missing or unreadable
    """
    start_time = datetime.now(timezone.utc)
    anomaly_log = anomaly_log if anomaly_log is not None else AnomalyLogBuffer()
    file_paths = scan_census_files(Path(config.source_directory))

    counts = {FileStatus.VALID: 0, FileStatus.INVALID: 0, FileStatus.FAILED: 0}
    total_records = total_errors = total_warnings = 0
    file_stats: list[FileStat] = []

    with ProgressTracker(len(file_paths)) as progress:
        for file_path in file_paths:
            progress.start_file(file_path)
            result = process_file(file_path, config, anomaly_log)
            counts[result.status] += 1
            total_records += result.total_records
            total_errors += result.error_count
            total_warnings += result.warning_count
            progress.set_postfix(
                valid=counts[FileStatus.VALID],
                invalid=counts[FileStatus.INVALID],
                failed=counts[FileStatus.FAILED],
            )
            progress.finish_file()
            file_stats.append(
                FileStat(
                    file_name=result.name,
                    status=result.status.value,
                    records=result.total_records,
                    errors=result.error_count,
                    warnings=result.warning_count,
                    elapsed_seconds=result.elapsed_seconds,
                )
            )

    log_path = anomaly_log.flush()
    if log_path is not None:
        logger.info("anomalies written to %s", log_path)

    end_time = datetime.now(timezone.utc)
    return BatchResult(
        valid_files=counts[FileStatus.VALID],
        invalid_files=counts[FileStatus.INVALID],
        failed_files=counts[FileStatus.FAILED],
        total_records=total_records,
        total_errors=total_errors,
        total_warnings=total_warnings,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
    )
