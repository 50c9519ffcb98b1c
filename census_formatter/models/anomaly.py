from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any

"""Anomaly model for normalization diagnostics.

An Anomaly records a best-effort decision the pipeline took on a value that
was present but ambiguous (unknown coverage tier, "Enroll" without an amount,
an unparseable date, a dependent that could not be grouped...). Anomalies are
returned next to each stage's output and never block validity; the user is
expected to review them, not be stopped by them.
"""

__all__ = [
    "Anomaly",
    "UNKNOWN_COVERAGE_TYPE",
    "DEPENDENT_VOLUME_NEEDS_VERIFICATION",
    "DEPENDENT_VOLUME_DEFAULTED",
    "UNPARSEABLE_DATE",
    "UNPARSEABLE_AMOUNT",
    "SSN_LENGTH_ADJUSTED",
    "DEPENDENT_BASIC_LIFE_DEFAULTED",
    "FAMILY_GROUPED",
    "ORPHAN_DEPENDENT",
]

UNKNOWN_COVERAGE_TYPE = "UNKNOWN_COVERAGE_TYPE"
DEPENDENT_VOLUME_NEEDS_VERIFICATION = "DEPENDENT_VOLUME_NEEDS_VERIFICATION"
DEPENDENT_VOLUME_DEFAULTED = "DEPENDENT_VOLUME_DEFAULTED"
UNPARSEABLE_DATE = "UNPARSEABLE_DATE"
UNPARSEABLE_AMOUNT = "UNPARSEABLE_AMOUNT"
SSN_LENGTH_ADJUSTED = "SSN_LENGTH_ADJUSTED"
DEPENDENT_BASIC_LIFE_DEFAULTED = "DEPENDENT_BASIC_LIFE_DEFAULTED"
FAMILY_GROUPED = "FAMILY_GROUPED"
ORPHAN_DEPENDENT = "ORPHAN_DEPENDENT"


@dataclass(frozen=True)
class Anomaly:
    """Structured diagnostic entry.

    Attributes:
        row_index: 0-based index of the record in the upload sequence
        field: canonical field key the decision applies to
        kind: classification in UPPER_SNAKE_CASE
        raw_value: value as it appeared in the source (text)
        resolved_value: value the pipeline settled on (text)
        message: human readable explanation
    """
    row_index: int
    field: str
    kind: str
    raw_value: str
    resolved_value: str
    message: str

    @staticmethod
    def create(
        row_index: int,
        field: str,
        kind: str,
        raw_value: Any = "",
        resolved_value: Any = "",
        message: str = "",
    ) -> Anomaly:
        return Anomaly(
            row_index=row_index,
            field=field,
            kind=kind,
            raw_value="" if raw_value is None else str(raw_value),
            resolved_value="" if resolved_value is None else str(resolved_value),
            message=message,
        )

    def to_json_line(self, source: str | None = None) -> str:
        """Serialize to a single JSON Lines entry.

        Keys are fixed; ``file`` leads the object only when ``source`` is given.
        """
        data: dict[str, Any] = {"file": source} if source is not None else {}
        data.update(asdict(self))
        return json.dumps(data, ensure_ascii=False)
