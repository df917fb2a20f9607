"""Health score and one-line summary for a set of detected issues."""

from __future__ import annotations

import math
from typing import Sequence

from .models import Issue, SystemSnapshot

SEVERITY_PENALTY = {"critical": 20, "warning": 10, "info": 2}

SUMMARY_GOOD = "The system is in good shape."
SUMMARY_MINOR = "There are minor performance issues."
SUMMARY_ISSUES = "Performance issues were detected."
SUMMARY_SEVERE = "There are severe performance issues."


def health_score(snapshot: SystemSnapshot, issues: Sequence[Issue]) -> int:
    """Score the system from 0 (unusable) to 100 (healthy).

    Usage above the comfort level is penalised directly and again through every
    issue derived from it; the two penalties add up.
    """
    score = 100.0
    score -= max(0.0, snapshot.cpu.usage_percent - 50) * 0.5
    score -= max(0.0, snapshot.memory.usage_percent - 70) * 0.8
    score -= max(0.0, snapshot.disk.usage_percent - 80) * 0.3

    for issue in issues:
        score -= SEVERITY_PENALTY.get(issue.severity, 0)

    # half-up rounding, not banker's rounding
    return max(0, min(100, math.floor(score + 0.5)))


def summarize(issues: Sequence[Issue], score: int) -> str:
    if score >= 80:
        return SUMMARY_GOOD
    if score >= 60:
        return SUMMARY_MINOR
    if score >= 40:
        return SUMMARY_ISSUES
    return SUMMARY_SEVERE
