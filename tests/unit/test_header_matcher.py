from __future__ import annotations

import pytest

from census_formatter.models.cell import EMPTY, Number, Text
from census_formatter.services.header_matcher import (
    MappingError,
    apply_overrides,
    match_headers,
    missing_required,
    normalize_header,
    project_rows,
    unmapped_headers,
)


def test_normalize_header_strips_hints_and_colons():
    assert normalize_header("  Date of Birth (MM/DD/YYYY): ") == "date of birth"
    assert normalize_header("Zip\nCode") == "zip code"
    assert normalize_header(None) == ""


def test_basic_headers():
    mapping = match_headers(["SSN", "First Name", "DOB"])
    assert mapping == {
        "first_name": "First Name",
        "date_of_birth": "DOB",
        "social_security_number": "SSN",
    }
    assert "member_last_name" in missing_required(mapping)


def test_exact_label_beats_rule():
    headers = ["Dental Plan Election", "Dental Coverage Type", "Dental Plan"]
    mapping = match_headers(headers)
    assert mapping["dental_plan_election"] == "Dental Plan Election"
    assert mapping["dental_coverage_type"] == "Dental Coverage Type"


def test_header_used_once():
    mapping = match_headers(["Employee Last Name", "Spouse Last Name"])
    assert mapping["member_last_name"] == "Employee Last Name"
    assert list(mapping.values()).count("Employee Last Name") == 1


def test_excludes_keep_related_columns_apart():
    headers = [
        "Relationship", "Last Name", "First Name", "Gender", "Birth Date",
        "Salary", "Salary Type", "STD Class", "STD", "Prior Carrier Eff Date",
        "Prior Carrier", "Prior Carrier Term Date",
    ]
    mapping = match_headers(headers)
    assert mapping["salary_amount"] == "Salary"
    assert mapping["salary_type"] == "Salary Type"
    assert mapping["std"] == "STD"
    assert mapping["std_class"] == "STD Class"
    assert mapping["dental_prior_carrier_name"] == "Prior Carrier"
    assert mapping["dental_prior_carrier_effective_date"] == "Prior Carrier Eff Date"
    assert mapping["dental_prior_carrier_term_date"] == "Prior Carrier Term Date"
    assert missing_required(mapping) == []


def test_export_headings_round_trip():
    headers = ["Relationship", "Member Last Name", "First Name", "Gender", "Date of Birth",
               "Zip", "Phone", "Email"]
    mapping = match_headers(headers)
    assert mapping["zip"] == "Zip"
    assert mapping["phone"] == "Phone"
    assert mapping["email"] == "Email"


def test_match_is_pure():
    headers = ["Last Name", "First", "Sex"]
    assert match_headers(headers) == match_headers(list(headers))


def test_unmapped_headers():
    headers = ["First Name", "Favorite Color"]
    assert unmapped_headers(headers, match_headers(headers)) == ["Favorite Color"]


class TestOverrides:
    headers = ["Last", "EE SSN", "SSN", "First Name"]

    def test_assign_moves_header(self):
        mapping = {"social_security_number": "SSN", "first_name": "First Name"}
        result = apply_overrides(mapping, {"member_last_name": "First Name"}, self.headers)
        assert result["member_last_name"] == "First Name"
        assert "first_name" not in result

    def test_empty_unmaps(self):
        mapping = {"social_security_number": "SSN"}
        assert apply_overrides(mapping, {"social_security_number": ""}, self.headers) == {}

    def test_unknown_header_raises(self):
        with pytest.raises(MappingError):
            apply_overrides({}, {"first_name": "Given"}, self.headers)

    def test_unknown_key_raises(self):
        with pytest.raises(MappingError):
            apply_overrides({}, {"shoe_size": "SSN"}, self.headers)

    def test_input_not_mutated(self):
        mapping = {"social_security_number": "SSN"}
        apply_overrides(mapping, {"social_security_number": "EE SSN"}, self.headers)
        assert mapping == {"social_security_number": "SSN"}


def test_project_rows():
    rows = [{"Last": "Smith", "SSN": 123456789, "Other": "x"}, {"Last": None}]
    mapping = {"member_last_name": "Last", "social_security_number": "SSN"}
    projected = project_rows(rows, mapping)
    assert projected[0] == {
        "member_last_name": Text("Smith"),
        "social_security_number": Number(123456789),
    }
    assert projected[1] == {"member_last_name": EMPTY}


def test_unrelated_status_columns_stay_unmapped():
    headers = ["Relationship", "Last Name", "First Name", "Tobacco Status", "Student Status"]
    mapping = match_headers(headers)
    assert "employee_status" not in mapping
    assert set(unmapped_headers(headers, mapping)) == {"Tobacco Status", "Student Status"}


def test_employee_status_variants_match():
    assert match_headers(["Emp Status"])["employee_status"] == "Emp Status"
    assert match_headers(["Employment Status"])["employee_status"] == "Employment Status"
