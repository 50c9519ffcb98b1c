from __future__ import annotations

from census_formatter.models.anomaly import (
    DEPENDENT_BASIC_LIFE_DEFAULTED,
    DEPENDENT_VOLUME_DEFAULTED,
    DEPENDENT_VOLUME_NEEDS_VERIFICATION,
    SSN_LENGTH_ADJUSTED,
    UNKNOWN_COVERAGE_TYPE,
    UNPARSEABLE_AMOUNT,
    UNPARSEABLE_DATE,
)
from census_formatter.models.census_record import Relationship
from census_formatter.models.field_schema import EMPLOYEE_ONLY_FIELDS
from census_formatter.services.record_normalizer import normalize_record, normalize_records


def _kinds(anomalies):
    return [a.kind for a in anomalies]


def test_employee_end_to_end():
    row = {
        "relationship": "EE",
        "member_last_name": "o'connor",
        "first_name": "  mary ",
        "middle_initial": "jane",
        "gender": "female",
        "date_of_birth": 29221,
        "social_security_number": "123-45-6789",
        "member_street_address": "12 North Main Street #3",
        "city": "springfield",
        "state": "il",
        "zip": "62701-0001",
        "phone": "(217) 555-0100",
        "email": "mary@example.com",
        "date_of_hire": "2015-06-01",
        "salary_amount": "25",
        "salary_type": "hourly",
        "hours_worked": "30",
        "dental_coverage_type": "Employee + Spouse",
        "vision_coverage_type": "family",
        "basic_life_coverage_type": "Basic",
        "employee_volume_amount": "$20,000",
        "std": "waive",
    }
    record, anomalies = normalize_record(row)
    assert record.relationship is Relationship.EMPLOYEE
    assert record.member_last_name == "O CONNOR"
    assert record.first_name == "MARY"
    assert record.middle_initial == "J"
    assert record.gender == "F"
    assert record.date_of_birth == "01/01/1980"
    assert record.social_security_number == "123456789"
    assert record.member_street_address == "12 N MAIN ST UNIT 3"
    assert record.city == "SPRINGFIELD"
    assert record.state == "IL"
    assert record.zip == "62701"
    assert record.phone == "2175550100"
    assert record.employee_status == "Active"
    assert record.date_of_hire == "06/01/2015"
    assert record.salary_type == "Hourly"
    assert record.hours_worked == 30
    assert record.salary_amount == 25 * 30 * 52
    assert record.dental_coverage_type == "ES"
    assert record.vision_coverage_type == "EF"
    assert record.basic_life_coverage_type == "EE"
    assert record.employee_volume_amount == 20000.0
    assert record.spouse_volume_amount == 0.0
    assert record.std == "W"
    assert record.ltd == ""
    assert record.dependent_basic_life is None
    assert anomalies == []


def test_dependent_keeps_identity_only():
    row = {
        "relationship": "Child",
        "member_last_name": "Smith",
        "first_name": "Sam",
        "gender": "M",
        "date_of_birth": "03/01/2012",
        "dental_coverage_type": "Family",
        "salary_amount": "50000",
        "employee_volume_amount": "10000",
    }
    record, _ = normalize_record(row)
    assert record.relationship is Relationship.CHILD
    assert record.first_name == "SAM"
    assert not record.has_employee_only_fields()


def test_spouse_carries_rollup_source():
    record, _ = normalize_record(
        {"relationship": "Spouse", "spouse_volume_amount": "10,000", "dental_coverage_type": "EE"}
    )
    assert record.spouse_volume_amount == 10000.0
    assert record.dental_coverage_type is None
    populated = [f for f in EMPLOYEE_ONLY_FIELDS if getattr(record, f) is not None]
    assert populated == ["spouse_volume_amount"]


def test_child_carries_dependent_volume():
    record, anomalies = normalize_record({"relationship": "Child", "dependent_volume": "enroll"})
    assert record.dependent_volume == "Enroll"
    assert _kinds(anomalies) == [DEPENDENT_VOLUME_NEEDS_VERIFICATION]


def test_anomalies_for_odd_values():
    row = {
        "relationship": "Employee",
        "social_security_number": "1234567",
        "date_of_birth": "someday",
        "dental_coverage_type": "Platinum",
        "dependent_volume": "lots",
        "employee_volume_amount": "plenty",
    }
    record, anomalies = normalize_record(row, row_index=7)
    kinds = set(_kinds(anomalies))
    assert kinds == {
        SSN_LENGTH_ADJUSTED,
        UNPARSEABLE_DATE,
        UNKNOWN_COVERAGE_TYPE,
        DEPENDENT_VOLUME_DEFAULTED,
        UNPARSEABLE_AMOUNT,
    }
    assert all(a.row_index == 7 for a in anomalies)
    assert record.social_security_number == "001234567"
    assert record.date_of_birth == ""
    assert record.dental_coverage_type == "PLATINUM"
    assert record.dependent_volume == "W"
    assert record.employee_volume_amount == 0.0


def test_dependent_basic_life_blank_column_stays_unset():
    rows = [{"relationship": "Employee"}, {"relationship": "Employee"}]
    records, anomalies = normalize_records(rows)
    assert [r.dependent_basic_life for r in records] == [None, None]
    assert anomalies == []


def test_dependent_basic_life_defaults_to_waived_when_others_answered():
    rows = [
        {"relationship": "Employee", "dependent_basic_life": "Yes"},
        {"relationship": "Employee", "dependent_basic_life": ""},
    ]
    records, anomalies = normalize_records(rows)
    assert [r.dependent_basic_life for r in records] == ["Enroll", "W"]
    assert _kinds(anomalies) == [DEPENDENT_BASIC_LIFE_DEFAULTED]
    assert anomalies[0].row_index == 1


def test_normalize_record_uses_all_rows():
    answered = [{"dependent_basic_life": "Declined"}, {"dependent_basic_life": None}]
    record, _ = normalize_record(answered[1], answered, row_index=1)
    assert record.dependent_basic_life == "W"


def test_default_hours_applied():
    records, _ = normalize_records([{"relationship": "Employee"}], default_hours=37)
    assert records[0].hours_worked == 37


def test_order_and_length_preserved():
    rows = [{"first_name": name} for name in ("a", "b", "c")]
    records, _ = normalize_records(rows)
    assert [r.first_name for r in records] == ["A", "B", "C"]
