from __future__ import annotations

import math

import pytest

from census_formatter.models.cell import EMPTY, Number, Text
from census_formatter.models.census_record import Relationship
from census_formatter.services import canonicalizers as canon


class TestText:
    def test_clean_text_uppercases_and_collapses(self):
        assert canon.clean_text("  o'brien-smith  jr. ") == "O BRIEN SMITH JR"

    def test_clean_text_empty(self):
        assert canon.clean_text(None) == ""
        assert canon.clean_text(math.nan) == ""
        assert canon.clean_text("   ") == ""

    def test_format_name_and_middle_initial(self):
        assert canon.format_name("mary ann") == "MARY ANN"
        assert canon.format_middle_initial("quincy") == "Q"
        assert canon.format_middle_initial("") == ""


class TestDate:
    def test_serial_41(self):
        assert canon.format_date(Number(41)) == "02/09/1900"
        assert canon.format_date(41) == "02/09/1900"

    def test_modern_serial_and_fraction(self):
        assert canon.format_date(43831) == "01/01/2020"
        assert canon.format_date(43831.75) == "01/01/2020"

    def test_serial_exported_as_text(self):
        assert canon.format_date("43831") == "01/01/2020"

    def test_compact_text(self):
        assert canon.format_date("20200105") == "01/05/2020"

    @pytest.mark.parametrize(
        "raw",
        ["1/5/2020", "01/05/2020", "2020-01-05", "01-05-2020", "Jan 5, 2020", "1/5/20"],
    )
    def test_text_formats(self, raw):
        assert canon.format_date(raw) == "01/05/2020"

    def test_unparseable_and_blank(self):
        assert canon.format_date("next tuesday") == ""
        assert canon.format_date(None) == ""
        assert canon.format_date(0) == ""
        assert canon.format_date(-5) == ""

    def test_idempotent(self):
        once = canon.format_date(Number(41))
        assert canon.format_date(once) == once


class TestIdentifiers:
    def test_ssn_pads_to_nine(self):
        assert canon.format_ssn("123-45-678") == "012345678"
        assert canon.format_ssn(12345678) == "012345678"

    def test_ssn_keeps_last_nine(self):
        assert canon.format_ssn("00123456789") == "123456789"

    def test_ssn_blank(self):
        assert canon.format_ssn("n/a") == ""

    def test_address(self):
        assert canon.format_address("123 North Main Street #4") == "123 N MAIN ST UNIT 4"
        assert canon.format_address("9 O'Neil Avenue, Apartment 2") == "9 ONEIL AVE APT 2"

    def test_address_idempotent(self):
        once = canon.format_address("77 South Oak Boulevard Suite 100")
        assert once == "77 S OAK BLVD STE 100"
        assert canon.format_address(once) == once

    def test_city_state(self):
        assert canon.format_city("st. louis") == "ST LOUIS"
        assert canon.format_state(" il ") == "IL"
        assert canon.format_state("") == ""

    def test_zip(self):
        assert canon.format_zip("62701-1234") == "62701"
        assert canon.format_zip(Number(2134)) == "2134"
        assert canon.format_zip(1234) == "1234"
        assert canon.format_zip("") == ""

    def test_phone(self):
        assert canon.format_phone("(555) 123-4567") == "5551234567"
        assert canon.format_phone("1-555-123-4567") == "1555123456"
        assert canon.format_phone("555-1234") == "5551234"


class TestAmounts:
    def test_annual_salary(self):
        assert canon.format_salary("$50,000") == 50000.0
        assert canon.format_salary(50000, "Annual") == 50000.0

    def test_hourly_salary_annualized(self):
        assert canon.format_salary(20, "Hourly", 40) == 20 * 40 * 52
        assert canon.format_salary("20", "hourly", None) == 20 * 40 * 52

    def test_unparseable_salary(self):
        assert canon.format_salary("ask HR") is None
        assert canon.format_salary(None) is None

    def test_salary_type(self):
        assert canon.format_salary_type("hr") == "Hourly"
        assert canon.format_salary_type("Salaried") == "Annual"
        assert canon.format_salary_type("weekly") == "weekly"

    def test_amount_defaults_to_zero(self):
        assert canon.format_amount("$10,000") == 10000.0
        assert canon.format_amount("") == 0.0
        assert canon.format_amount("lots") == 0.0

    def test_hours(self):
        assert canon.format_hours("32 hrs") == 32
        assert canon.format_hours("") == 40
        assert canon.format_hours(0, default=37) == 37


class TestCoverage:
    @pytest.mark.parametrize(
        "raw,tier",
        [
            ("Employee Only", "EE"),
            ("ee", "EE"),
            ("Employee + Spouse", "ES"),
            ("EE/CH", "EC"),
            ("Employee + Child(ren)", "EC"),
            ("Family", "EF"),
            ("Waived", "W"),
            ("decline", "W"),
        ],
    )
    def test_known_tiers(self, raw, tier):
        assert canon.format_coverage_type(raw) == tier
        assert canon.is_known_coverage_type(raw)

    def test_unknown_tier_passes_through(self):
        assert canon.format_coverage_type("gold plus") == "GOLD PLUS"
        assert not canon.is_known_coverage_type("gold plus")

    def test_coverage_idempotent(self):
        for tier in canon.COVERAGE_TIERS:
            assert canon.format_coverage_type(tier) == tier

    def test_restricted(self):
        assert canon.format_restricted_coverage_type("Waive") == "W"
        assert canon.format_restricted_coverage_type("Basic Life 1x") == "EE"
        assert canon.format_restricted_coverage_type("") == ""

    def test_dependent_volume(self):
        assert canon.format_dependent_volume("$10,000") == "10000"
        assert canon.format_dependent_volume("5k") == "5000"
        assert canon.format_dependent_volume("enrolled") == "Enroll"
        assert canon.format_dependent_volume("none") == "W"
        assert canon.format_dependent_volume("maybe") == "W"
        assert not canon.is_known_dependent_volume("maybe")
        assert canon.format_dependent_volume("") == ""

    def test_dependent_basic_life(self):
        assert canon.format_dependent_basic_life("Declined") == "W"
        assert canon.format_dependent_basic_life("yes") == "Enroll"


class TestFlags:
    def test_yes_no(self):
        assert canon.format_yes_no("Y") == "Yes"
        assert canon.format_yes_no(True) == "Yes"
        assert canon.format_yes_no("") == "No"

    def test_employee_status(self):
        assert canon.format_employee_status("") == "Active"
        assert canon.format_employee_status("a") == "Active"
        assert canon.format_employee_status("cobra") == "COBRA"
        assert canon.format_employee_status("Leave") == "Leave"


class TestRelationshipGender:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Employee", Relationship.EMPLOYEE),
            ("", Relationship.EMPLOYEE),
            ("Spouse", Relationship.SPOUSE),
            ("Spouse of EE", Relationship.SPOUSE),
            ("Domestic Partner", Relationship.DOMESTIC_PARTNER),
            ("Child", Relationship.CHILD),
            ("Dependent Child", Relationship.CHILD),
            ("partner", Relationship.DOMESTIC_PARTNER),
            ("EE", Relationship.EMPLOYEE),
            ("S", Relationship.EMPLOYEE),
            ("SP", Relationship.EMPLOYEE),
            ("C", Relationship.EMPLOYEE),
            ("Ch", Relationship.EMPLOYEE),
            ("dep", Relationship.EMPLOYEE),
            ("wife", Relationship.EMPLOYEE),
            ("Son", Relationship.EMPLOYEE),
            ("somebody", Relationship.EMPLOYEE),
        ],
    )
    def test_relationship(self, raw, expected):
        assert canon.validate_relationship(raw) is expected

    def test_gender(self):
        assert canon.validate_gender("Female") == "F"
        assert canon.validate_gender("f") == "F"
        assert canon.validate_gender("Male") == "M"
        assert canon.validate_gender("X") == "M"
        assert canon.validate_gender(EMPTY) == "M"


def test_canonicalizers_accept_cells():
    assert canon.clean_text(Text("abc")) == "ABC"
    assert canon.format_phone(Number(5551234567)) == "5551234567"
