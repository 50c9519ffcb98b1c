from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any

from .field_schema import EMPLOYEE_ONLY_FIELDS, FIELD_KEYS

"""CensusRecord domain model.

One CensusRecord is one covered person (employee or dependent) after
normalization. Records are frozen; the family reconciler produces new
records with ``dataclasses.replace`` instead of mutating in place.
"""

__all__ = [
    "Relationship",
    "CensusRecord",
    "ROLLUP_SOURCE_FIELDS",
]


class Relationship(str, Enum):
    """Relation of the covered person to the employee.

    Values are the export spellings.
    """
    EMPLOYEE = "Employee"
    SPOUSE = "Spouse"
    DOMESTIC_PARTNER = "Domestic Partner"
    CHILD = "Child"

    def __str__(self) -> str:
        return self.value

    @property
    def is_partner(self) -> bool:
        return self in (Relationship.SPOUSE, Relationship.DOMESTIC_PARTNER)


# Employee-only fields a dependent may declare before reconciliation so the
# amount can be rolled up onto the owning employee.
ROLLUP_SOURCE_FIELDS: dict[Relationship, str] = {
    Relationship.SPOUSE: "spouse_volume_amount",
    Relationship.DOMESTIC_PARTNER: "spouse_volume_amount",
    Relationship.CHILD: "dependent_volume",
}


@dataclass(frozen=True)
class CensusRecord:
    """Canonical census row.

    Identity and contact fields are always populated (possibly ''); the
    employee-only benefit and employment fields are None on dependents.
    """
    # identity
    relationship: Relationship | str = Relationship.EMPLOYEE
    employee_status: str = ""
    social_security_number: str = ""
    member_last_name: str = ""
    first_name: str = ""
    middle_initial: str = ""
    gender: str = ""
    date_of_birth: str = ""
    disabled: str = "No"

    # contact
    member_street_address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    phone: str = ""
    email: str = ""

    # employee only
    date_of_hire: str | None = None
    salary_amount: float | None = None
    salary_type: str | None = None
    hours_worked: int | None = None
    occupation: str | None = None
    working_location: str | None = None
    billing_division: str | None = None
    dental_plan_election: str | None = None
    dental_coverage_type: str | None = None
    dhmo_provider_name: str | None = None
    dental_prior_carrier_name: str | None = None
    dental_prior_carrier_effective_date: str | None = None
    dental_prior_carrier_term_date: str | None = None
    dental_prior_carrier_ortho: str | None = None
    vision_plan_election: str | None = None
    vision_coverage_type: str | None = None
    basic_life_coverage_type: str | None = None
    dependent_basic_life: str | None = None
    primary_life_beneficiary: str | None = None
    employee_volume_amount: float | None = None
    spouse_volume_amount: float | None = None
    dependent_volume: str | None = None
    std: str | None = None
    ltd: str | None = None
    std_class: str | None = None
    ltd_class: str | None = None
    life_add_class: str | None = None

    @property
    def is_employee(self) -> bool:
        return self.relationship == Relationship.EMPLOYEE

    def has_employee_only_fields(self) -> bool:
        return any(getattr(self, name) is not None for name in EMPLOYEE_ONLY_FIELDS)

    def without_employee_fields(self) -> CensusRecord:
        """Copy with every employee-only field cleared."""
        return replace(self, **{name: None for name in EMPLOYEE_ONLY_FIELDS})

    def to_row(self) -> dict[str, Any]:
        """Field key -> value dict in schema order (relationship as text)."""
        row: dict[str, Any] = {}
        for key in FIELD_KEYS:
            value = getattr(self, key)
            row[key] = str(value) if isinstance(value, Relationship) else value
        return row

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))
