from __future__ import annotations

from dataclasses import dataclass, field

"""Validation result models.

Errors block ``is_valid``; warnings are advisory only.
"""

__all__ = [
    "ValidationIssue",
    "ValidationSummary",
    "ValidationResult",
]


@dataclass(frozen=True)
class ValidationIssue:
    field: str  # display name, e.g. "Gender"
    message: str
    row_index: int | None = None  # None for sequence-level issues


@dataclass(frozen=True)
class ValidationSummary:
    """Aggregate counts over the validated record sequence."""
    total_records: int
    valid_records: int  # records with zero errors
    error_count: int
    warning_count: int
    demographic_counts: dict[str, int] = field(default_factory=dict)
    coverage_enrollment: dict[str, dict[str, int]] = field(default_factory=dict)


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: list[ValidationIssue]
    warnings: list[ValidationIssue]
    summary: ValidationSummary

    def errors_for(self, row_index: int) -> list[ValidationIssue]:
        return [e for e in self.errors if e.row_index == row_index]

    def warnings_for(self, row_index: int) -> list[ValidationIssue]:
        return [w for w in self.warnings if w.row_index == row_index]
