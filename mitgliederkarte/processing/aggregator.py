"""Aggregation of member counts over the region code hierarchy.

Region codes are hierarchical: a Landkreis code is a prefix of the codes of
all its Gemeinden. Summing over records whose code starts with the feature
code therefore works for both levels.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from mitgliederkarte.models import ResolvedRecord

MATCHED = "matched"
NO_RECORDS = "no_records"


@dataclass(frozen=True)
class AggregateResult:
    """Aggregate of one region.

    ``status`` is MATCHED as soon as one resolved record belongs to the
    region, even if its count is zero. NO_RECORDS means no record was
    attributed to the region at all.
    """

    value: float
    status: str
    record_count: int

    @property
    def has_members(self) -> bool:
        return self.value > 0


def _matching(feature_code: str, resolved_records: Iterable[ResolvedRecord]):
    return (r for r in resolved_records if r.resolved and r.code.startswith(feature_code))


def aggregate(feature_code: str, resolved_records: Iterable[ResolvedRecord]) -> float:
    """Sum of members over all records resolved to ``feature_code`` or a sub-region."""
    return sum(r.members for r in _matching(feature_code, resolved_records))


def aggregate_detail(feature_code: str, resolved_records: Iterable[ResolvedRecord]) -> AggregateResult:
    matched = list(_matching(feature_code, resolved_records))
    return AggregateResult(
        value=sum(r.members for r in matched),
        status=MATCHED if matched else NO_RECORDS,
        record_count=len(matched),
    )
