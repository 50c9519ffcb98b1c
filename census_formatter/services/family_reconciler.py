from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace

from ..models.anomaly import FAMILY_GROUPED, ORPHAN_DEPENDENT, Anomaly
from ..models.census_record import CensusRecord, Relationship

"""Family reconciler.

Groups each Employee with the dependents that follow it, rolls dependent
benefit amounts up onto the employee and clears employee-only fields on the
dependents. Records are never mutated; every output record is a new copy.

Grouping rule: from an Employee, scan forward until the next Employee; every
non-Employee with the same last name joins the family. Non-Employees with a
different last name are skipped but stay available. Records never claimed by
a family are appended after all families, in original order.

Roll-up rules (kept asymmetric on purpose, confirm with the benefits team
before unifying):

* spouse volume: max of the employee's own amount and every spouse/domestic
  partner amount
* child volume: the last child with a real election (not 0, W or blank)
  overwrites the employee's value
"""

__all__ = [
    "FamilyGroup",
    "ReconcileResult",
    "reconcile_families",
]

logger = logging.getLogger(__name__)

_NON_ELECTIONS = frozenset({"", "0", "W"})


@dataclass(frozen=True)
class FamilyGroup:
    """Indices (into the reconciler input) of one employee and its dependents."""
    owner_index: int
    dependent_indices: tuple[int, ...] = ()


@dataclass(frozen=True)
class ReconcileResult:
    records: list[CensusRecord]
    groups: list[FamilyGroup] = field(default_factory=list)
    orphan_indices: list[int] = field(default_factory=list)
    anomalies: list[Anomaly] = field(default_factory=list)


def _is_real_child_election(volume: str | None) -> bool:
    return (volume or "").strip() not in _NON_ELECTIONS


def _find_groups(records: Sequence[CensusRecord]) -> tuple[list[FamilyGroup], set[int]]:
    consumed: set[int] = set()
    groups: list[FamilyGroup] = []
    for i, owner in enumerate(records):
        if i in consumed or not owner.is_employee:
            continue
        consumed.add(i)
        dependents: list[int] = []
        for j in range(i + 1, len(records)):
            candidate = records[j]
            if candidate.is_employee:
                break
            if j not in consumed and candidate.member_last_name == owner.member_last_name:
                dependents.append(j)
                consumed.add(j)
        groups.append(FamilyGroup(owner_index=i, dependent_indices=tuple(dependents)))
    return groups, consumed


def _roll_up(owner: CensusRecord, dependents: list[CensusRecord]) -> CensusRecord:
    spouse_volume = owner.spouse_volume_amount
    dependent_volume = owner.dependent_volume
    for dep in dependents:
        if dep.relationship in (Relationship.SPOUSE, Relationship.DOMESTIC_PARTNER):
            if dep.spouse_volume_amount is not None:
                spouse_volume = max(spouse_volume or 0.0, dep.spouse_volume_amount)
        elif dep.relationship == Relationship.CHILD:
            if _is_real_child_election(dep.dependent_volume):
                dependent_volume = dep.dependent_volume
    if spouse_volume == owner.spouse_volume_amount and dependent_volume == owner.dependent_volume:
        return owner
    return replace(owner, spouse_volume_amount=spouse_volume, dependent_volume=dependent_volume)


def _strip(record: CensusRecord) -> CensusRecord:
    if record.is_employee or not record.has_employee_only_fields():
        return record
    return record.without_employee_fields()


def reconcile_families(records: Sequence[CensusRecord]) -> ReconcileResult:
    """Group, roll up and strip. Output length always equals input length."""
    groups, consumed = _find_groups(records)
    output: list[CensusRecord] = []
    anomalies: list[Anomaly] = []

    for group in groups:
        owner = records[group.owner_index]
        dependents = [records[j] for j in group.dependent_indices]
        output.append(_roll_up(owner, dependents))
        output.extend(_strip(dep) for dep in dependents)
        for j in group.dependent_indices:
            anomalies.append(
                Anomaly.create(
                    j, "relationship", FAMILY_GROUPED,
                    records[j].relationship, group.owner_index,
                    f"grouped under employee at row {group.owner_index}",
                )
            )

    orphans = [i for i in range(len(records)) if i not in consumed]
    for i in orphans:
        record = records[i]
        output.append(_strip(record))
        anomalies.append(
            Anomaly.create(
                i, "relationship", ORPHAN_DEPENDENT, record.relationship, "",
                "no preceding employee with the same last name",
            )
        )

    if orphans:
        logger.debug("%d dependent(s) could not be grouped: %s", len(orphans), orphans)
    return ReconcileResult(
        records=output, groups=groups, orphan_indices=orphans, anomalies=anomalies
    )
