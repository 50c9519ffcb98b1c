from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime

from ..models.census_record import CensusRecord, Relationship
from ..models.field_schema import field_by_key
from ..models.validation_result import ValidationIssue, ValidationResult, ValidationSummary
from .canonicalizers import COVERAGE_TIERS

"""Validator: per-record checks plus aggregate summary.

Errors (block validity):
    missing last/first name, gender not M/F, date of birth missing or not
    MM/DD/YYYY, unknown relationship, Employee without a 9-digit SSN, and an
    empty upload.

Warnings (advisory):
    malformed phone/zip/email/state, non-positive salary, an over-age child
    not marked disabled, and (optionally) missing address and employment
    fields.

Coverage enrollment is tallied on Employee records only.
"""

__all__ = [
    "ValidationOptions",
    "validate_records",
]

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^\d{2}/\d{2}/\d{4}$")
_SSN_RE = re.compile(r"^\d{9}$")
_PHONE_RE = re.compile(r"^\d{10}$")
_ZIP_RE = re.compile(r"^\d{5}$")
_STATE_RE = re.compile(r"^[A-Z]{2}$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

_RELATIONSHIP_VALUES = frozenset(r.value for r in Relationship)

_EXPECTED_FIELDS = ("member_street_address", "city", "state", "zip")
_EXPECTED_EMPLOYEE_FIELDS = ("date_of_hire", "employee_status")


@dataclass(frozen=True)
class ValidationOptions:
    warn_missing_expected: bool = False
    child_age_limit: int = 25
    as_of: date | None = None  # reference date for age checks; today if None


def _label(key: str) -> str:
    return field_by_key(key).label


class _Collector:
    def __init__(self) -> None:
        self.errors: list[ValidationIssue] = []
        self.warnings: list[ValidationIssue] = []

    def error(self, key: str, message: str, row_index: int | None = None) -> None:
        self.errors.append(ValidationIssue(_label(key), message, row_index))

    def warn(self, key: str, message: str, row_index: int | None = None) -> None:
        self.warnings.append(ValidationIssue(_label(key), message, row_index))


def _age(dob: str, as_of: date) -> int | None:
    try:
        born = datetime.strptime(dob, "%m/%d/%Y").date()
    except ValueError:
        return None
    return as_of.year - born.year - ((as_of.month, as_of.day) < (born.month, born.day))


def _check_required(rec: CensusRecord, i: int, out: _Collector) -> None:
    if not rec.member_last_name:
        out.error("member_last_name", "Member last name is required", i)
    if not rec.first_name:
        out.error("first_name", "First name is required", i)
    if rec.gender not in ("M", "F"):
        out.error("gender", f"Gender must be M or F, got '{rec.gender}'", i)
    if not rec.date_of_birth:
        out.error("date_of_birth", "Date of birth is required", i)
    elif not _DATE_RE.match(rec.date_of_birth):
        out.error("date_of_birth", f"Date of birth must be MM/DD/YYYY, got '{rec.date_of_birth}'", i)
    if str(rec.relationship) not in _RELATIONSHIP_VALUES:
        out.error("relationship", f"Unknown relationship '{rec.relationship}'", i)
    if rec.is_employee and not _SSN_RE.match(rec.social_security_number or ""):
        out.error("social_security_number", "Employees require a 9-digit SSN", i)


def _check_formats(rec: CensusRecord, i: int, out: _Collector) -> None:
    if rec.phone and not _PHONE_RE.match(rec.phone):
        out.warn("phone", f"Phone should be 10 digits, got '{rec.phone}'", i)
    if rec.zip and not _ZIP_RE.match(rec.zip):
        out.warn("zip", f"Zip should be 5 digits, got '{rec.zip}'", i)
    if rec.email and not _EMAIL_RE.match(rec.email):
        out.warn("email", f"Email looks malformed: '{rec.email}'", i)
    if rec.state and not _STATE_RE.match(rec.state):
        out.warn("state", f"State should be a 2-letter code, got '{rec.state}'", i)
    if rec.salary_amount is not None and rec.salary_amount <= 0:
        out.warn("salary_amount", "Salary should be a positive number", i)


def _check_expected(rec: CensusRecord, i: int, out: _Collector) -> None:
    for key in _EXPECTED_FIELDS:
        if not getattr(rec, key):
            out.warn(key, f"{_label(key)} is missing", i)
    if rec.is_employee:
        for key in _EXPECTED_EMPLOYEE_FIELDS:
            if not getattr(rec, key):
                out.warn(key, f"{_label(key)} is missing", i)


def _check_child_age(rec: CensusRecord, i: int, out: _Collector, options: ValidationOptions) -> None:
    if rec.relationship != Relationship.CHILD or rec.disabled == "Yes":
        return
    age = _age(rec.date_of_birth, options.as_of or date.today())
    if age is not None and age > options.child_age_limit:
        out.warn(
            "date_of_birth",
            f"Child is {age}, over the age limit of {options.child_age_limit}, and not disabled",
            i,
        )


def _demographics(records: Sequence[CensusRecord]) -> dict[str, int]:
    counts = {"employees": 0, "spouses": 0, "domestic_partners": 0, "children": 0}
    names = {
        Relationship.EMPLOYEE: "employees",
        Relationship.SPOUSE: "spouses",
        Relationship.DOMESTIC_PARTNER: "domestic_partners",
        Relationship.CHILD: "children",
    }
    for rec in records:
        name = names.get(rec.relationship)
        if name:
            counts[name] += 1
    return counts


def _coverage(records: Sequence[CensusRecord]) -> dict[str, dict[str, int]]:
    dental = {tier: 0 for tier in COVERAGE_TIERS}
    vision = {tier: 0 for tier in COVERAGE_TIERS}
    basic_life = {"enrolled": 0, "waived": 0}
    voluntary_life = {"enrolled": 0, "waived": 0}
    for rec in records:
        if not rec.is_employee:
            continue
        for tally, tier in ((dental, rec.dental_coverage_type), (vision, rec.vision_coverage_type)):
            tier = tier or "W"
            tally[tier] = tally.get(tier, 0) + 1
        if rec.basic_life_coverage_type and rec.basic_life_coverage_type != "W":
            basic_life["enrolled"] += 1
        else:
            basic_life["waived"] += 1
        if rec.employee_volume_amount:
            voluntary_life["enrolled"] += 1
        else:
            voluntary_life["waived"] += 1
    return {
        "dental": dental,
        "vision": vision,
        "basic_life": basic_life,
        "voluntary_life": voluntary_life,
    }


def validate_records(
    records: Sequence[CensusRecord], *, options: ValidationOptions | None = None
) -> ValidationResult:
    """Validate the reconciled record sequence. Never raises."""
    options = options or ValidationOptions()
    out = _Collector()

    if not records:
        out.errors.append(ValidationIssue("Master Census", "No census records found"))

    rows_with_errors: set[int] = set()
    for i, rec in enumerate(records):
        before = len(out.errors)
        _check_required(rec, i, out)
        if len(out.errors) > before:
            rows_with_errors.add(i)
        _check_formats(rec, i, out)
        _check_child_age(rec, i, out, options)
        if options.warn_missing_expected:
            _check_expected(rec, i, out)

    summary = ValidationSummary(
        total_records=len(records),
        valid_records=len(records) - len(rows_with_errors),
        error_count=len(out.errors),
        warning_count=len(out.warnings),
        demographic_counts=_demographics(records),
        coverage_enrollment=_coverage(records),
    )
    logger.debug(
        "validated %d records: %d errors, %d warnings",
        len(records), summary.error_count, summary.warning_count,
    )
    return ValidationResult(
        is_valid=not out.errors,
        errors=out.errors,
        warnings=out.warnings,
        summary=summary,
    )
