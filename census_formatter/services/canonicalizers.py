from __future__ import annotations

import math
import re
from datetime import datetime, timedelta
from typing import Any

from ..models.cell import Empty, Number, Text, cell_text, to_cell
from ..models.census_record import Relationship

"""Per-value field canonicalizers.

Every function here is pure and total: it never raises on malformed input
and degrades to an empty/default value instead. Applying a canonicalizer to
its own output returns the same value.

The alias and abbreviation tables are data constants so they can be reviewed
(and extended) without touching the matching code.
"""

__all__ = [
    "EXCEL_EPOCH",
    "DATE_FORMATS",
    "ADDRESS_ABBREVIATIONS",
    "WAIVER_ALIASES",
    "COVERAGE_TYPE_ALIASES",
    "COVERAGE_TIERS",
    "DEPENDENT_VOLUME_ALIASES",
    "clean_text",
    "format_name",
    "format_middle_initial",
    "format_date",
    "format_ssn",
    "format_address",
    "format_city",
    "format_state",
    "format_zip",
    "format_phone",
    "format_salary",
    "format_salary_type",
    "format_amount",
    "format_hours",
    "format_coverage_type",
    "is_known_coverage_type",
    "format_restricted_coverage_type",
    "format_dependent_volume",
    "is_known_dependent_volume",
    "format_dependent_basic_life",
    "format_yes_no",
    "format_employee_status",
    "validate_relationship",
    "validate_gender",
]

# Serial day 0 of the spreadsheet date system. Anchoring at Dec 30 1899 (not
# Jan 1 1900) absorbs the phantom Feb 29 1900 of the spreadsheet format.
EXCEL_EPOCH = datetime(1899, 12, 30)
_MAX_SERIAL = 2958465  # 12/31/9999

DATE_FORMATS: tuple[str, ...] = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m-%d-%Y",
    "%m-%d-%y",
    "%m.%d.%Y",
    "%d-%b-%Y",
    "%d-%b-%y",
    "%b %d %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%B %d, %Y",
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
)

# Full word -> USPS abbreviation. Applied token by token, abbreviation only.
ADDRESS_ABBREVIATIONS: dict[str, str] = {
    # street suffixes
    "ALLEY": "ALY",
    "AVENUE": "AVE",
    "AV": "AVE",
    "BOULEVARD": "BLVD",
    "CENTER": "CTR",
    "CIRCLE": "CIR",
    "COURT": "CT",
    "COVE": "CV",
    "CREEK": "CRK",
    "CROSSING": "XING",
    "DRIVE": "DR",
    "EXPRESSWAY": "EXPY",
    "FREEWAY": "FWY",
    "HEIGHTS": "HTS",
    "HIGHWAY": "HWY",
    "LANE": "LN",
    "LOOP": "LOOP",
    "PARKWAY": "PKWY",
    "PLACE": "PL",
    "PLAZA": "PLZ",
    "POINT": "PT",
    "ROAD": "RD",
    "ROUTE": "RTE",
    "SQUARE": "SQ",
    "STREET": "ST",
    "STR": "ST",
    "TERRACE": "TER",
    "TRAIL": "TRL",
    "TURNPIKE": "TPKE",
    # secondary unit designators
    "APARTMENT": "APT",
    "BUILDING": "BLDG",
    "DEPARTMENT": "DEPT",
    "FLOOR": "FL",
    "ROOM": "RM",
    "SUITE": "STE",
    # directionals
    "NORTH": "N",
    "SOUTH": "S",
    "EAST": "E",
    "WEST": "W",
    "NORTHEAST": "NE",
    "NORTHWEST": "NW",
    "SOUTHEAST": "SE",
    "SOUTHWEST": "SW",
}

# Keys are compared after _alias_key(): uppercase, non-alphanumerics -> space
WAIVER_ALIASES: frozenset[str] = frozenset({
    "W",
    "WV",
    "WO",
    "WAIVE",
    "WAIVED",
    "WAIVES",
    "WAIVER",
    "DECLINE",
    "DECLINED",
    "DECLINES",
    "NONE",
    "NO",
    "N",
    "N A",
    "NO COVERAGE",
    "NOT ENROLLED",
})

COVERAGE_TIERS: tuple[str, ...] = ("EE", "ES", "EC", "EF", "W")

COVERAGE_TYPE_ALIASES: dict[str, str] = {
    # employee only
    "EE": "EE",
    "E": "EE",
    "EO": "EE",
    "EMP": "EE",
    "EMPLOYEE": "EE",
    "EMPLOYEE ONLY": "EE",
    "EE ONLY": "EE",
    "SINGLE": "EE",
    "INDIVIDUAL": "EE",
    "SUBSCRIBER": "EE",
    "SUBSCRIBER ONLY": "EE",
    # employee + spouse / domestic partner
    "ES": "ES",
    "ESP": "ES",
    "EE SP": "ES",
    "EE SPOUSE": "ES",
    "EE PLUS SPOUSE": "ES",
    "EMPLOYEE SPOUSE": "ES",
    "EMPLOYEE AND SPOUSE": "ES",
    "EMPLOYEE PLUS SPOUSE": "ES",
    "EE DP": "ES",
    "EMPLOYEE DOMESTIC PARTNER": "ES",
    "EMPLOYEE PARTNER": "ES",
    # employee + child(ren)
    "EC": "EC",
    "ECH": "EC",
    "EE CH": "EC",
    "EE CHILD": "EC",
    "EE CHILDREN": "EC",
    "EE CHILD REN": "EC",
    "EE PLUS CHILD": "EC",
    "EE PLUS CHILDREN": "EC",
    "EMPLOYEE CHILD": "EC",
    "EMPLOYEE CHILDREN": "EC",
    "EMPLOYEE CHILD REN": "EC",
    "EMPLOYEE AND CHILD": "EC",
    "EMPLOYEE AND CHILDREN": "EC",
    "EMPLOYEE PLUS CHILD": "EC",
    "EMPLOYEE PLUS CHILDREN": "EC",
    # family
    "EF": "EF",
    "F": "EF",
    "FAM": "EF",
    "FAMILY": "EF",
    "EE FAM": "EF",
    "EE FAMILY": "EF",
    "EMPLOYEE FAMILY": "EF",
    "EMPLOYEE AND FAMILY": "EF",
    "EMPLOYEE PLUS FAMILY": "EF",
    **{alias: "W" for alias in WAIVER_ALIASES},
}

# Keys are compared after removing whitespace, '$' and ',' from the uppercased value
DEPENDENT_VOLUME_ALIASES: dict[str, str] = {
    "5000": "5000",
    "5K": "5000",
    "10000": "10000",
    "10K": "10000",
    "0": "0",
    "ENROLL": "Enroll",
    "ENROLLED": "Enroll",
    "ELECT": "Enroll",
    "ELECTED": "Enroll",
    "YES": "Enroll",
    "Y": "Enroll",
    **{alias.replace(" ", ""): "W" for alias in WAIVER_ALIASES},
}

_YES_VALUES = frozenset({"YES", "Y", "TRUE", "T", "1", "X"})

_EMPLOYEE_STATUS_ALIASES: dict[str, str] = {
    "ACTIVE": "Active",
    "A": "Active",
    "ACT": "Active",
    "FULL TIME": "Active",
    "COBRA": "COBRA",
    "C": "COBRA",
    "RETIREE": "Retiree",
    "RETIRED": "Retiree",
    "R": "Retiree",
}

# Short relationship codes that carry no matchable substring
_NON_WORD = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")
_NON_DIGIT = re.compile(r"\D")
_NON_ALNUM = re.compile(r"[^A-Z0-9]+")
_LEADING_NUMBER = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)")
_LEADING_INT = re.compile(r"[-+]?\d+")


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _alias_key(raw: Any) -> str:
    return _collapse(_NON_ALNUM.sub(" ", cell_text(raw).upper()))


def clean_text(raw: Any) -> str:
    """Uppercase, replace punctuation with a space, collapse whitespace."""
    text = cell_text(raw)
    if not text:
        return ""
    return _collapse(_NON_WORD.sub(" ", text.upper()))


def format_name(raw: Any) -> str:
    return clean_text(raw)


def format_middle_initial(raw: Any) -> str:
    text = cell_text(raw)
    return text[0].upper() if text else ""


def _serial_to_date(serial: float) -> datetime | None:
    if serial <= 0 or serial > _MAX_SERIAL:
        return None
    return EXCEL_EPOCH + timedelta(days=math.floor(serial))


def _parse_date_text(text: str) -> datetime | None:
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_date(raw: Any) -> str:
    """Format a spreadsheet serial or a date string as MM/DD/YYYY.

    Five-digit text is read as a serial (serials that were exported as text);
    eight digits are read as YYYYMMDD. Returns '' when the value cannot be
    parsed.
    """
    cell = to_cell(raw)
    parsed: datetime | None = None
    if isinstance(cell, Number):
        parsed = _serial_to_date(cell.value)
    elif isinstance(cell, Text):
        text = cell.value
        if text.isdigit() and len(text) == 5:
            parsed = _serial_to_date(float(text))
        elif text.isdigit() and len(text) == 8:
            try:
                parsed = datetime.strptime(text, "%Y%m%d")
            except ValueError:
                parsed = None
        else:
            parsed = _parse_date_text(text)
    if parsed is None:
        return ""
    return f"{parsed.month:02d}/{parsed.day:02d}/{parsed.year:04d}"


def format_ssn(raw: Any) -> str:
    """Digits only, left-padded with zeros to 9 (longer values keep the last 9)."""
    digits = _NON_DIGIT.sub("", cell_text(raw))
    if not digits:
        return ""
    if len(digits) > 9:
        return digits[-9:]
    return digits.zfill(9)


def format_address(raw: Any) -> str:
    text = cell_text(raw).upper()
    if not text:
        return ""
    text = text.replace("#", " UNIT ").replace("'", "")
    text = _NON_WORD.sub(" ", text)
    tokens = [ADDRESS_ABBREVIATIONS.get(tok, tok) for tok in text.split()]
    return " ".join(tokens)


def format_city(raw: Any) -> str:
    text = cell_text(raw).upper()
    if not text:
        return ""
    return _collapse(_NON_WORD.sub("", text))


def format_state(raw: Any) -> str:
    return re.sub(r"[^A-Z]", "", cell_text(raw).upper())[:2]


def format_zip(raw: Any) -> str:
    """First five digits."""
    return _NON_DIGIT.sub("", cell_text(raw))[:5]


def format_phone(raw: Any) -> str:
    return _NON_DIGIT.sub("", cell_text(raw))[:10]


def _parse_number(raw: Any) -> float | None:
    cell = to_cell(raw)
    if isinstance(cell, Number):
        return cell.value
    if isinstance(cell, Empty):
        return None
    cleaned = re.sub(r"[\s$,]", "", cell.value)
    match = _LEADING_NUMBER.match(cleaned)
    if match is None:
        return None
    return float(match.group(0))


def format_hours(raw: Any, default: int = 40) -> int:
    """Leading integer of the value; blank, zero or unparseable -> default."""
    cell = to_cell(raw)
    if isinstance(cell, Number):
        hours = int(cell.value)
    else:
        match = _LEADING_INT.match(cell_text(cell).replace(",", ""))
        hours = int(match.group(0)) if match else 0
    return hours or default


def format_salary(amount: Any, salary_type: Any = None, hours_worked: Any = None) -> float | None:
    """Parse a salary, annualizing hourly rates.

    Hourly: amount * (hours_worked or 40) * 52. Unparseable -> None.
    """
    value = _parse_number(amount)
    if value is None:
        return None
    if cell_text(salary_type).strip().lower() == "hourly":
        return value * format_hours(hours_worked) * 52
    return value


_HOURLY_TYPES = frozenset({"HOURLY", "HOUR", "HR", "H", "PER HOUR"})
_ANNUAL_TYPES = frozenset({"ANNUAL", "ANNUALLY", "YEARLY", "SALARY", "SALARIED", "A", "S"})


def format_salary_type(raw: Any) -> str:
    """Hourly / Annual; other non-empty text passes through."""
    key = _alias_key(raw)
    if key in _HOURLY_TYPES:
        return "Hourly"
    if key in _ANNUAL_TYPES:
        return "Annual"
    return cell_text(raw)


def format_amount(raw: Any) -> float:
    """Voluntary life amount; blank or unparseable -> 0."""
    value = _parse_number(raw)
    return value if value is not None else 0.0


def format_coverage_type(raw: Any) -> str:
    """Dental/vision tier -> EE/ES/EC/EF/W; unknown values pass through uppercased."""
    text = cell_text(raw)
    if not text:
        return ""
    tier = COVERAGE_TYPE_ALIASES.get(_alias_key(text))
    if tier is not None:
        return tier
    return text.upper()


def is_known_coverage_type(raw: Any) -> bool:
    return _alias_key(raw) in COVERAGE_TYPE_ALIASES


def format_restricted_coverage_type(raw: Any) -> str:
    """Basic life / STD / LTD: waiver -> W, any other election -> EE."""
    key = _alias_key(raw)
    if not key:
        return ""
    return "W" if key in WAIVER_ALIASES else "EE"


def _volume_key(raw: Any) -> str:
    return re.sub(r"[\s$,]", "", cell_text(raw).upper())


def format_dependent_volume(raw: Any) -> str:
    """Child voluntary life -> 5000/10000/0/Enroll/W; unknown -> W."""
    key = _volume_key(raw)
    if not key:
        return ""
    volume = _lookup_dependent_volume(key)
    return volume if volume is not None else "W"


def is_known_dependent_volume(raw: Any) -> bool:
    key = _volume_key(raw)
    return bool(key) and _lookup_dependent_volume(key) is not None


def _lookup_dependent_volume(key: str) -> str | None:
    if key in DEPENDENT_VOLUME_ALIASES:
        return DEPENDENT_VOLUME_ALIASES[key]
    try:
        amount = float(key)
    except ValueError:
        return None
    if amount in (0.0, 5000.0, 10000.0):
        return str(int(amount))
    return None


def format_dependent_basic_life(raw: Any) -> str:
    key = _alias_key(raw)
    if not key:
        return ""
    return "W" if key in WAIVER_ALIASES else "Enroll"


def format_yes_no(raw: Any) -> str:
    return "Yes" if _alias_key(raw) in _YES_VALUES else "No"


def format_employee_status(raw: Any) -> str:
    key = _alias_key(raw)
    if not key:
        return "Active"
    return _EMPLOYEE_STATUS_ALIASES.get(key, cell_text(raw))


def validate_relationship(raw: Any) -> Relationship:
    """Classify free text; anything unrecognized is an Employee."""
    text = cell_text(raw).lower()
    if "spouse" in text:
        return Relationship.SPOUSE
    if "domestic" in text or "partner" in text:
        return Relationship.DOMESTIC_PARTNER
    if "child" in text or "dependent" in text:
        return Relationship.CHILD
    return Relationship.EMPLOYEE


def validate_gender(raw: Any) -> str:
    return "F" if cell_text(raw).lower().startswith("f") else "M"
