"""Severity aggregation: per-severity counts and the overall 0-10 security score.

The score is deterministic given the finding list and is stored with the session; it
is never recomputed on read.
"""

from collections.abc import Iterable
from typing import Protocol

from app.schemas.analysis import SeverityAggregate
from app.schemas.findings import SEVERITY_ORDER, SEVERITY_WEIGHTS

MAX_SCORE = 10.0
MIN_SCORE = 0.0


class _HasSeverity(Protocol):
    severity: str


def count_by_severity(findings: Iterable[_HasSeverity]) -> dict[str, int]:
    """Count findings per severity; every level is present in the result (possibly 0)."""
    counts = {level: 0 for level in SEVERITY_ORDER}
    for finding in findings:
        if finding.severity in counts:
            counts[finding.severity] += 1
    return counts


def compute_overall_score(counts: dict[str, int]) -> float:
    """10 - (3*critical + 2*high + 1*medium + 0.5*low), clamped to [0, 10]."""
    penalty = sum(SEVERITY_WEIGHTS[level] * counts.get(level, 0) for level in SEVERITY_ORDER)
    return max(MIN_SCORE, min(MAX_SCORE, MAX_SCORE - penalty))


def aggregate(findings: Iterable[_HasSeverity]) -> SeverityAggregate:
    """Return counts, total and overall score for the given validated findings."""
    counts = count_by_severity(findings)
    return SeverityAggregate(
        counts=counts,
        total=sum(counts.values()),
        overall_score=compute_overall_score(counts),
    )
