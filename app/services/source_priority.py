"""Ranking of external data sources by reliability and scrape history."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence, TypeVar

from app.core.records import field_value

T = TypeVar("T")

ACCURACY_WEIGHT = 0.4
COMPLETENESS_WEIGHT = 0.3
TIMELINESS_WEIGHT = 0.2
SUCCESS_RATE_WEIGHT = 0.1

# Untested sources are neither rewarded nor punished
DEFAULT_SUCCESS_RATE = 0.5


def _number(mapping: Optional[Mapping[str, Any]], key: str) -> float:
    if not mapping:
        return 0.0
    value = mapping.get(key)
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def success_rate(history: Optional[Mapping[str, Any]]) -> float:
    successes = _number(history, "success_count")
    failures = _number(history, "failure_count")
    attempts = successes + failures
    if attempts <= 0:
        return DEFAULT_SUCCESS_RATE
    return successes / attempts


def priority_score(source: Any) -> float:
    """Weighted sum of accuracy, completeness, timeliness and success rate."""
    metrics = field_value(source, "reliability_metrics") or {}
    history = field_value(source, "success_history") or {}
    return (
        ACCURACY_WEIGHT * _number(metrics, "accuracy")
        + COMPLETENESS_WEIGHT * _number(metrics, "completeness")
        + TIMELINESS_WEIGHT * _number(metrics, "timeliness")
        + SUCCESS_RATE_WEIGHT * success_rate(history)
    )


def prioritize_sources(sources: Sequence[T]) -> List[T]:
    """Return a new list sorted by descending priority; ties keep input order."""
    # sorted() is stable, and reverse=True preserves the relative order of equal keys
    return sorted(sources, key=priority_score, reverse=True)
