from __future__ import annotations

from dataclasses import dataclass

"""Canonical census field schema.

``CENSUS_FIELDS`` is the fixed, ordered table of canonical fields. Its order
drives header matching (first field wins a contested header) and its labels
are the exact-match candidates for incoming headers. ``EXPORT_COLUMNS`` holds
the column headings and order of the exported MASTER CENSUS sheet.
"""

__all__ = [
    "FieldDefinition",
    "FieldMapping",
    "CENSUS_FIELDS",
    "FIELD_KEYS",
    "REQUIRED_FIELD_KEYS",
    "EMPLOYEE_ONLY_FIELDS",
    "EXPORT_COLUMNS",
    "field_by_key",
]

# canonical key -> raw header
FieldMapping = dict[str, str]


@dataclass(frozen=True)
class FieldDefinition:
    key: str
    label: str
    required: bool = False
    employee_only: bool = False


CENSUS_FIELDS: tuple[FieldDefinition, ...] = (
    FieldDefinition("relationship", "Relationship", required=True),
    FieldDefinition("member_last_name", "Member Last Name", required=True),
    FieldDefinition("first_name", "First Name", required=True),
    FieldDefinition("middle_initial", "Middle Initial"),
    FieldDefinition("gender", "Gender", required=True),
    FieldDefinition("date_of_birth", "Date of Birth", required=True),
    FieldDefinition("social_security_number", "Social Security Number"),
    FieldDefinition("employee_status", "Employee Status"),
    FieldDefinition("disabled", "Disabled"),
    FieldDefinition("member_street_address", "Member Street Address"),
    FieldDefinition("city", "City"),
    FieldDefinition("state", "State"),
    FieldDefinition("zip", "Zip Code"),
    FieldDefinition("phone", "Phone Number"),
    FieldDefinition("email", "Email Address"),
    FieldDefinition("date_of_hire", "Date of Hire", employee_only=True),
    FieldDefinition("salary_amount", "Salary", employee_only=True),
    FieldDefinition("salary_type", "Annual or Hourly", employee_only=True),
    FieldDefinition("hours_worked", "Hours Worked Per Week", employee_only=True),
    FieldDefinition("occupation", "Occupation", employee_only=True),
    FieldDefinition("working_location", "Working Location", employee_only=True),
    FieldDefinition("billing_division", "Billing Division", employee_only=True),
    FieldDefinition("dental_plan_election", "Dental Plan Election", employee_only=True),
    FieldDefinition("dental_coverage_type", "Dental Coverage Type", employee_only=True),
    FieldDefinition("dhmo_provider_name", "DHMO Provider Name", employee_only=True),
    FieldDefinition("dental_prior_carrier_name", "Prior Carrier Name", employee_only=True),
    FieldDefinition(
        "dental_prior_carrier_effective_date", "Prior Carrier Eff Date", employee_only=True
    ),
    FieldDefinition("dental_prior_carrier_term_date", "Prior Carrier Term Date", employee_only=True),
    FieldDefinition("dental_prior_carrier_ortho", "Prior Carrier Ortho?", employee_only=True),
    FieldDefinition("vision_plan_election", "Vision Plan Selection", employee_only=True),
    FieldDefinition("vision_coverage_type", "Vision Coverage Type", employee_only=True),
    FieldDefinition("basic_life_coverage_type", "Basic Life Election", employee_only=True),
    FieldDefinition("dependent_basic_life", "Dependent Basic Life", employee_only=True),
    FieldDefinition("primary_life_beneficiary", "Primary Life Beneficiary", employee_only=True),
    FieldDefinition("employee_volume_amount", "Employee Voluntary Life", employee_only=True),
    FieldDefinition("spouse_volume_amount", "Spousal Voluntary Life", employee_only=True),
    FieldDefinition("dependent_volume", "Child Voluntary Life", employee_only=True),
    FieldDefinition("std", "STD Coverage Type", employee_only=True),
    FieldDefinition("ltd", "LTD Coverage Type", employee_only=True),
    FieldDefinition("std_class", "STD Class", employee_only=True),
    FieldDefinition("ltd_class", "LTD Class", employee_only=True),
    FieldDefinition("life_add_class", "Basic Life Class", employee_only=True),
)

FIELD_KEYS: tuple[str, ...] = tuple(f.key for f in CENSUS_FIELDS)

REQUIRED_FIELD_KEYS: frozenset[str] = frozenset(f.key for f in CENSUS_FIELDS if f.required)

EMPLOYEE_ONLY_FIELDS: tuple[str, ...] = tuple(f.key for f in CENSUS_FIELDS if f.employee_only)

# Export heading -> record attribute, in output column order
EXPORT_COLUMNS: tuple[tuple[str, str], ...] = (
    ("Relationship", "relationship"),
    ("Employee Status", "employee_status"),
    ("Social Security Number", "social_security_number"),
    ("Member Last Name", "member_last_name"),
    ("First Name", "first_name"),
    ("Middle Initial", "middle_initial"),
    ("Gender", "gender"),
    ("Date of Birth", "date_of_birth"),
    ("Disabled", "disabled"),
    ("Member Street Address", "member_street_address"),
    ("City", "city"),
    ("State", "state"),
    ("Zip", "zip"),
    ("Phone", "phone"),
    ("Email", "email"),
    ("Date of Hire", "date_of_hire"),
    ("Dental Plan Election", "dental_plan_election"),
    ("Dental Coverage Type", "dental_coverage_type"),
    ("DHMO Provider Name", "dhmo_provider_name"),
    ("Dental Prior Carrier Name", "dental_prior_carrier_name"),
    ("Dental Prior Carrier Effective Date", "dental_prior_carrier_effective_date"),
    ("Dental Prior Carrier Term Date", "dental_prior_carrier_term_date"),
    ("Dental Prior Carrier Ortho", "dental_prior_carrier_ortho"),
    ("Vision Plan Election", "vision_plan_election"),
    ("Vision Coverage Type", "vision_coverage_type"),
    ("Basic Life Coverage Type", "basic_life_coverage_type"),
    ("Primary Life Beneficiary", "primary_life_beneficiary"),
    ("Dependent Basic Life", "dependent_basic_life"),
    ("Life ADD Class", "life_add_class"),
    ("Employee Volume Amount", "employee_volume_amount"),
    ("Spouse Volume Amount", "spouse_volume_amount"),
    ("Dependent Volume", "dependent_volume"),
    ("STD", "std"),
    ("LTD", "ltd"),
    ("STD Class", "std_class"),
    ("LTD Class", "ltd_class"),
    ("Salary Type", "salary_type"),
    ("Salary Amount", "salary_amount"),
    ("Occupation", "occupation"),
    ("Hours Worked", "hours_worked"),
    ("Working Location", "working_location"),
    ("Billing Division", "billing_division"),
)

_BY_KEY = {f.key: f for f in CENSUS_FIELDS}


def field_by_key(key: str) -> FieldDefinition:
    """Look up a field definition; raises KeyError for unknown keys."""
    return _BY_KEY[key]
