from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any

from ..models.anomaly import (
    DEPENDENT_BASIC_LIFE_DEFAULTED,
    DEPENDENT_VOLUME_DEFAULTED,
    DEPENDENT_VOLUME_NEEDS_VERIFICATION,
    SSN_LENGTH_ADJUSTED,
    UNKNOWN_COVERAGE_TYPE,
    UNPARSEABLE_AMOUNT,
    UNPARSEABLE_DATE,
    Anomaly,
)
from ..models.cell import Cell, Empty, cell_text, to_cell
from ..models.census_record import CensusRecord, Relationship
from . import canonicalizers as canon
from .column_analyzer import has_existing_entries

"""Record normalizer: canonical-keyed row -> CensusRecord.

Relationship and gender are resolved first because they decide which fields
are filled. Employees get every field; a dependent gets identity and contact
fields only, plus the one benefit amount that rolls up onto its employee
(spouse voluntary life for a spouse or domestic partner, child voluntary life
for a child). The family reconciler clears that amount once it is rolled up.

Each best-effort decision on a present-but-odd value is reported as an
Anomaly next to the record.
"""

__all__ = [
    "normalize_record",
    "normalize_records",
]

logger = logging.getLogger(__name__)

_DATE_FIELDS = (
    "date_of_hire",
    "dental_prior_carrier_effective_date",
    "dental_prior_carrier_term_date",
)


class _RowReader:
    """Reads one canonical-keyed row and collects anomalies while doing so."""

    def __init__(self, row: Mapping[str, Any], row_index: int):
        self.row = row
        self.row_index = row_index
        self.anomalies: list[Anomaly] = []

    def cell(self, key: str) -> Cell:
        return to_cell(self.row.get(key))

    def text(self, key: str) -> str:
        return cell_text(self.cell(key))

    def flag(self, key: str, kind: str, raw: Any, resolved: Any, message: str) -> None:
        self.anomalies.append(
            Anomaly.create(self.row_index, key, kind, cell_text(raw), resolved, message)
        )

    def date(self, key: str) -> str:
        raw = self.cell(key)
        value = canon.format_date(raw)
        if not value and not isinstance(raw, Empty):
            self.flag(key, UNPARSEABLE_DATE, raw, "", "date could not be parsed; left blank")
        return value

    def amount(self, key: str) -> float:
        raw = self.cell(key)
        value = canon.format_amount(raw)
        if not isinstance(raw, Empty) and canon.format_salary(raw) is None:
            self.flag(key, UNPARSEABLE_AMOUNT, raw, value, "amount could not be parsed; set to 0")
        return value

    def coverage_type(self, key: str) -> str:
        raw = self.cell(key)
        value = canon.format_coverage_type(raw)
        if value and not canon.is_known_coverage_type(raw):
            self.flag(key, UNKNOWN_COVERAGE_TYPE, raw, value, "unrecognized coverage tier")
        return value

    def dependent_volume(self) -> str:
        key = "dependent_volume"
        raw = self.cell(key)
        value = canon.format_dependent_volume(raw)
        if not value:
            return value
        if not canon.is_known_dependent_volume(raw):
            self.flag(key, DEPENDENT_VOLUME_DEFAULTED, raw, value,
                      "unrecognized child volume; treated as waived")
        elif value == "Enroll":
            self.flag(key, DEPENDENT_VOLUME_NEEDS_VERIFICATION, raw, value,
                      "child volume elected without an amount")
        return value

    def ssn(self) -> str:
        key = "social_security_number"
        raw = self.cell(key)
        value = canon.format_ssn(raw)
        digits = re.sub(r"\D", "", cell_text(raw))
        if digits and len(digits) != 9:
            self.flag(key, SSN_LENGTH_ADJUSTED, raw, value,
                      f"SSN had {len(digits)} digits; adjusted to 9")
        return value


def _identity_fields(reader: _RowReader, relationship: Relationship) -> dict[str, Any]:
    return {
        "relationship": relationship,
        "employee_status": canon.format_employee_status(reader.cell("employee_status")),
        "social_security_number": reader.ssn(),
        "member_last_name": canon.format_name(reader.cell("member_last_name")),
        "first_name": canon.format_name(reader.cell("first_name")),
        "middle_initial": canon.format_middle_initial(reader.cell("middle_initial")),
        "gender": canon.validate_gender(reader.cell("gender")),
        "date_of_birth": reader.date("date_of_birth"),
        "disabled": canon.format_yes_no(reader.cell("disabled")),
        "member_street_address": canon.format_address(reader.cell("member_street_address")),
        "city": canon.format_city(reader.cell("city")),
        "state": canon.format_state(reader.cell("state")),
        "zip": canon.format_zip(reader.cell("zip")),
        "phone": canon.format_phone(reader.cell("phone")),
        "email": reader.text("email"),
    }


def _dependent_basic_life(reader: _RowReader, column_answered: bool) -> str | None:
    key = "dependent_basic_life"
    raw = reader.cell(key)
    if not isinstance(raw, Empty):
        return canon.format_dependent_basic_life(raw)
    if column_answered:
        reader.flag(key, DEPENDENT_BASIC_LIFE_DEFAULTED, raw, "W",
                    "blank while other rows answered; treated as waived")
        return "W"
    return None


def _employee_fields(
    reader: _RowReader, column_answered: bool, default_hours: int
) -> dict[str, Any]:
    salary_type = canon.format_salary_type(reader.cell("salary_type"))
    hours_worked = canon.format_hours(reader.cell("hours_worked"), default_hours)

    salary_raw = reader.cell("salary_amount")
    salary_amount = canon.format_salary(salary_raw, salary_type, hours_worked)
    if salary_amount is None and not isinstance(salary_raw, Empty):
        reader.flag("salary_amount", UNPARSEABLE_AMOUNT, salary_raw, "",
                    "salary could not be parsed; left blank")

    values: dict[str, Any] = {
        "salary_amount": salary_amount,
        "salary_type": salary_type,
        "hours_worked": hours_worked,
        "occupation": canon.clean_text(reader.cell("occupation")),
        "working_location": canon.clean_text(reader.cell("working_location")),
        "billing_division": canon.clean_text(reader.cell("billing_division")),
        "dental_plan_election": reader.text("dental_plan_election"),
        "dental_coverage_type": reader.coverage_type("dental_coverage_type"),
        "dhmo_provider_name": reader.text("dhmo_provider_name"),
        "dental_prior_carrier_name": reader.text("dental_prior_carrier_name"),
        "dental_prior_carrier_ortho": canon.format_yes_no(reader.cell("dental_prior_carrier_ortho")),
        "vision_plan_election": reader.text("vision_plan_election"),
        "vision_coverage_type": reader.coverage_type("vision_coverage_type"),
        "basic_life_coverage_type": canon.format_restricted_coverage_type(
            reader.cell("basic_life_coverage_type")
        ),
        "dependent_basic_life": _dependent_basic_life(reader, column_answered),
        "primary_life_beneficiary": reader.text("primary_life_beneficiary"),
        "employee_volume_amount": reader.amount("employee_volume_amount"),
        "spouse_volume_amount": reader.amount("spouse_volume_amount"),
        "dependent_volume": reader.dependent_volume(),
        "std": canon.format_restricted_coverage_type(reader.cell("std")),
        "ltd": canon.format_restricted_coverage_type(reader.cell("ltd")),
        "std_class": reader.text("std_class"),
        "ltd_class": reader.text("ltd_class"),
        "life_add_class": reader.text("life_add_class"),
    }
    for key in _DATE_FIELDS:
        values[key] = reader.date(key)
    return values


def _rollup_source(reader: _RowReader, relationship: Relationship) -> dict[str, Any]:
    if relationship.is_partner:
        if isinstance(reader.cell("spouse_volume_amount"), Empty):
            return {}
        return {"spouse_volume_amount": reader.amount("spouse_volume_amount")}
    if relationship == Relationship.CHILD:
        volume = reader.dependent_volume()
        return {"dependent_volume": volume} if volume else {}
    return {}


def _normalize(
    row: Mapping[str, Any], row_index: int, column_answered: bool, default_hours: int
) -> tuple[CensusRecord, list[Anomaly]]:
    reader = _RowReader(row, row_index)
    relationship = canon.validate_relationship(reader.cell("relationship"))
    values = _identity_fields(reader, relationship)
    if relationship == Relationship.EMPLOYEE:
        values.update(_employee_fields(reader, column_answered, default_hours))
    else:
        values.update(_rollup_source(reader, relationship))
    return CensusRecord(**values), reader.anomalies


def normalize_record(
    row: Mapping[str, Any],
    all_rows: Sequence[Mapping[str, Any]] | None = None,
    *,
    row_index: int = 0,
    default_hours: int = 40,
) -> tuple[CensusRecord, list[Anomaly]]:
    """Normalize one canonical-keyed row.

    ``all_rows`` is the full upload; it decides whether a blank dependent
    basic life answer means "waived" (others answered) or "not collected".
    """
    column_answered = has_existing_entries(
        all_rows if all_rows is not None else [row], "dependent_basic_life"
    )
    return _normalize(row, row_index, column_answered, default_hours)


def normalize_records(
    rows: Sequence[Mapping[str, Any]], *, default_hours: int = 40
) -> tuple[list[CensusRecord], list[Anomaly]]:
    """Normalize every row; output order and length match the input."""
    column_answered = has_existing_entries(rows, "dependent_basic_life")
    records: list[CensusRecord] = []
    anomalies: list[Anomaly] = []
    for index, row in enumerate(rows):
        record, found = _normalize(row, index, column_answered, default_hours)
        records.append(record)
        anomalies.extend(found)
    logger.debug("normalized %d records (%d anomalies)", len(records), len(anomalies))
    return records, anomalies
