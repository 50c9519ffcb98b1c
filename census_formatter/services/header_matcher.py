from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Union

from ..models.cell import Cell, to_cell
from ..models.field_schema import (
    CENSUS_FIELDS,
    EXPORT_COLUMNS,
    FIELD_KEYS,
    REQUIRED_FIELD_KEYS,
    FieldDefinition,
    FieldMapping,
)

"""Header matcher: infer canonical field -> raw column mapping.

For each canonical field, in schema order:

1. the first unused header whose normalized text equals the field label (or
   its export heading, so a formatted file can be re-imported) wins;
2. otherwise the first unused header satisfying the field's rule in
   ``HEADER_RULES`` wins.

A header consumed by an earlier field is never reused. Matching is plain
string comparison; there is no fuzzy scoring.
"""

__all__ = [
    "MappingError",
    "HEADER_RULES",
    "normalize_header",
    "match_headers",
    "missing_required",
    "unmapped_headers",
    "apply_overrides",
    "project_rows",
]


class MappingError(Exception):
    """Raised when a user supplied mapping is inconsistent with the sheet."""


# A term is a substring, or a tuple of substrings that must all be present.
Term = Union[str, tuple[str, ...]]

# key -> (any-of terms, none-of substrings); compared against normalize_header()
HEADER_RULES: dict[str, tuple[tuple[Term, ...], tuple[str, ...]]] = {
    "relationship": (("relation", "member type", "dependent type", "dep code"), ()),
    "member_last_name": (("last name", "member last", "lastname", "surname", "lname"), ()),
    "first_name": (("first name", "firstname", "fname", "given name"), ()),
    "middle_initial": (("middle",), ()),
    "gender": (("gender", "sex"), ()),
    "date_of_birth": (("date of birth", "dob", "birth"), ()),
    "social_security_number": (("ssn", "social security", "social sec"), ()),
    "employee_status": (("employee status", "emp status", "employment status", "ee status"), ()),
    "disabled": (("disabled",), ()),
    "member_street_address": (("address", "street"), ("mail",)),
    "city": (("city", "town"), ("ethnic",)),
    "state": (("state",), ("statement",)),
    "zip": (("zip", "postal"), ()),
    "phone": (("phone", "telephone", "mobile"), ()),
    "email": (("email", "e-mail", "e mail"), ()),
    "date_of_hire": (("hire",), ()),
    "salary_amount": (("salary", "wage", "compensation", "earnings"), ("type", "basis", "frequency")),
    "salary_type": (("annual or hourly", "salary type", "pay type", "annual", "hourly", "basis"), ()),
    "hours_worked": (("hours",), ()),
    "occupation": (("occupation", "job title", "title", "position"), ()),
    "working_location": (("location", "worksite"), ()),
    "billing_division": (("billing", "division"), ()),
    "dental_plan_election": (
        ("dental",),
        ("coverage", "tier", "type", "dhmo", "prior", "ortho"),
    ),
    "dental_coverage_type": (("dental",), ("plan", "election", "dhmo", "prior", "ortho")),
    "dhmo_provider_name": (("dhmo", "provider", "dentist"), ()),
    "dental_prior_carrier_name": (
        ("prior carrier", "prior dental", "previous carrier", "incumbent"),
        ("eff", "term", "ortho", "date"),
    ),
    "dental_prior_carrier_effective_date": ((("prior", "eff"), ("previous", "eff")), ()),
    "dental_prior_carrier_term_date": ((("prior", "term"), ("previous", "term")), ()),
    "dental_prior_carrier_ortho": (("ortho",), ()),
    "vision_plan_election": (("vision",), ("coverage", "tier", "type")),
    "vision_coverage_type": (("vision",), ("plan", "election", "selection")),
    "basic_life_coverage_type": (
        ("basic life", "group life", "life election"),
        ("class", "dependent", "dep ", "beneficiary", "voluntary", "spous", "child"),
    ),
    "dependent_basic_life": (
        (("dependent", "basic life"), ("dep", "basic life"), ("dep", "life")),
        ("voluntary", "vol "),
    ),
    "primary_life_beneficiary": (("beneficiary",), ()),
    "employee_volume_amount": (
        (("employee", "vol"), ("ee", "vol"), ("employee", "supplemental life")),
        ("spous", "child", "dependent"),
    ),
    "spouse_volume_amount": ((("spous", "vol"), ("spous", "life"), ("sp ", "vol")), ("child",)),
    "dependent_volume": ((("child", "vol"), ("child", "life"), ("dep", "vol")), ()),
    "std": (("std", "short term disability", "short-term disability"), ("class", "standard")),
    "ltd": (("ltd", "long term disability", "long-term disability"), ("class",)),
    "std_class": ((("std", "class"), ("short term", "class")), ()),
    "ltd_class": ((("ltd", "class"), ("long term", "class")), ()),
    "life_add_class": ((("life", "class"), ("ad&d", "class"), ("add", "class")), ()),
}

_EXPORT_HEADINGS = {key: heading for heading, key in EXPORT_COLUMNS}


def normalize_header(header: Any) -> str:
    """Lowercase header text without line breaks, (...) hints or trailing colons."""
    if header is None:
        return ""
    text = str(header).strip()
    text = re.sub(r"[\r\n\t]+", " ", text)
    text = re.sub(r"\([^)]*\)", "", text)
    text = re.sub(r"\s*:\s*$", "", text)
    text = re.sub(r"\s{2,}", " ", text)
    return text.strip().lower()


def _term_matches(term: Term, header: str) -> bool:
    if isinstance(term, tuple):
        return all(part in header for part in term)
    return term in header


def _rule_matches(key: str, header: str) -> bool:
    rule = HEADER_RULES.get(key)
    if rule is None:
        return False
    includes, excludes = rule
    if any(ex in header for ex in excludes):
        return False
    return any(_term_matches(term, header) for term in includes)


def _exact_candidates(fd: FieldDefinition) -> set[str]:
    candidates = {fd.label.lower()}
    heading = _EXPORT_HEADINGS.get(fd.key)
    if heading:
        candidates.add(heading.lower())
    return candidates


def match_headers(
    headers: Sequence[str], fields: Iterable[FieldDefinition] = CENSUS_FIELDS
) -> FieldMapping:
    """Infer a canonical field -> header mapping. Pure function of ``headers``."""
    normalized = [(h, normalize_header(h)) for h in headers]
    normalized = [(h, n) for h, n in normalized if n]
    used: set[str] = set()
    mapping: FieldMapping = {}

    for fd in fields:
        candidates = _exact_candidates(fd)
        found = next((h for h, n in normalized if h not in used and n in candidates), None)
        if found is None:
            found = next(
                (h for h, n in normalized if h not in used and _rule_matches(fd.key, n)), None
            )
        if found is not None:
            mapping[fd.key] = found
            used.add(found)
    return mapping


def missing_required(
    mapping: Mapping[str, str], required: Iterable[str] = REQUIRED_FIELD_KEYS
) -> list[str]:
    """Required keys without a mapped header, in schema order."""
    required = set(required)
    return [key for key in FIELD_KEYS if key in required and not mapping.get(key)]


def unmapped_headers(headers: Sequence[str], mapping: Mapping[str, str]) -> list[str]:
    used = set(v for v in mapping.values() if v)
    return [h for h in headers if h not in used]


def apply_overrides(
    mapping: Mapping[str, str], overrides: Mapping[str, str | None], headers: Sequence[str]
) -> FieldMapping:
    """Apply user edits on top of an inferred mapping.

    An empty override unmaps the key. Assigning a header already used by
    another key moves it.

    Raises:
        MappingError: unknown field key, or a header that is not in the sheet
    """
    result: FieldMapping = dict(mapping)
    header_set = set(headers)
    for key, header in overrides.items():
        if key not in FIELD_KEYS:
            raise MappingError(f"unknown census field: {key}")
        if not header:
            result.pop(key, None)
            continue
        if header not in header_set:
            raise MappingError(f"column '{header}' for field '{key}' not found in sheet header")
        for other, other_header in list(result.items()):
            if other != key and other_header == header:
                del result[other]
        result[key] = header
    return result


def project_rows(
    rows: Sequence[Mapping[str, Any]], mapping: Mapping[str, str]
) -> list[dict[str, Cell]]:
    """Canonical-keyed view of each raw row (only mapped headers present in the row)."""
    projected: list[dict[str, Cell]] = []
    for row in rows:
        projected.append(
            {key: to_cell(row[header]) for key, header in mapping.items() if header and header in row}
        )
    return projected
