"""
Recommendation ranker: merges recommendation lists into one prioritised list.

Usage flow
----------
1. merge_recommendations(engine_recs, yield_recs, ...)
   -> list[Recommendation]  (concatenated, duplicates removed)

2. prioritize_recommendations(merged, limit=5)
   -> list[Recommendation]  (severity-sorted, truncated)

De-duplication
--------------
Two recommendations are duplicates when they share ``type`` and ``message``.
The copy with the higher severity is kept; on equal severity the first one
seen wins. Different messages on the same topic are both kept (e.g. the
engine's "Temperature is too high" and the orchestrator's "outside optimal
range" advice).

Ordering
--------
Severity weight descending (high 3, medium 2, low 1). The sort is stable, so
within a severity level recommendations keep the order they were produced
in, which puts rule-engine findings before seasonal tips.
"""

from __future__ import annotations

from typing import Iterable

from coffee_analytics.models.analysis import Recommendation
from coffee_analytics.taxonomy.agronomy import SEVERITY_PRIORITY, RecommendationType

DEFAULT_TOP_N = 5


def merge_recommendations(*groups: Iterable[Recommendation]) -> list[Recommendation]:
    """Concatenate recommendation groups, keeping one copy per (type, message)."""
    best: dict[tuple[RecommendationType, str], Recommendation] = {}
    for group in groups:
        for rec in group:
            key = (rec.type, rec.message)
            existing = best.get(key)
            if existing is None:
                best[key] = rec
            elif SEVERITY_PRIORITY[rec.severity] > SEVERITY_PRIORITY[existing.severity]:
                # dicts keep first-insertion position on reassignment
                best[key] = rec
    return list(best.values())


def prioritize_recommendations(
    recommendations: Iterable[Recommendation],
    limit: int = DEFAULT_TOP_N,
) -> list[Recommendation]:
    """De-duplicate, sort by severity (highest first) and keep the top ``limit``.

    Args:
        recommendations: Any iterable of recommendations, possibly with duplicates.
        limit: Maximum number of entries to return (``0`` → empty list).

    Returns:
        New list; the input is not modified.
    """
    if limit <= 0:
        return []
    deduped = merge_recommendations(recommendations)
    ranked = sorted(deduped, key=lambda rec: -SEVERITY_PRIORITY[rec.severity])
    return ranked[:limit]


def count_by_severity(recommendations: Iterable[Recommendation]) -> dict[str, int]:
    """Tally recommendations per severity value (all three keys always present)."""
    counts = {severity.value: 0 for severity in SEVERITY_PRIORITY}
    for rec in recommendations:
        counts[rec.severity.value] += 1
    return counts
