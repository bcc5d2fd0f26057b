"""Quality gate evaluation.

A score passes when it reaches the threshold, but only renders green when it
clears the threshold by at least ten points:

    score >= threshold + 10  -> green
    score >= threshold       -> yellow   (passing)
    otherwise                -> red      (failing, retry hint shown)

Dimension scores use the same bands against the same global threshold.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Sequence

from .config import DEFAULT_QUALITY_THRESHOLD

COMFORT_MARGIN = 10
SPARK_CHARS = "▁▂▃▄▅▆▇█"
SPARK_LEVELS = len(SPARK_CHARS)


@dataclass(frozen=True)
class QualitySummary:
    """Quality data supplied by the evaluation collaborator.

    ``history`` is oldest first and is display-only; it is never checked
    against ``score``.
    """

    score: float | None
    threshold: float = DEFAULT_QUALITY_THRESHOLD
    dimensions: dict[str, float] = field(default_factory=dict)
    history: list[float] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any], default_threshold: float = DEFAULT_QUALITY_THRESHOLD) -> "QualitySummary":
        score = data.get("score")
        threshold = data.get("threshold")
        return cls(
            score=float(score) if score is not None else None,
            threshold=float(threshold) if threshold is not None else float(default_threshold),
            dimensions={str(k): float(v) for k, v in (data.get("dimensions") or {}).items()},
            history=[float(v) for v in data.get("history") or []],
        )


@dataclass(frozen=True)
class QualityGate:
    score: float | None
    threshold: float
    passed: bool
    color: str
    retry_hint: bool


@dataclass(frozen=True)
class QualityReport:
    """Everything the quality view needs, derived from one summary."""

    gate: QualityGate
    dimensions: list[tuple[str, float, str]]
    sparkline: str
    trend: str


def band_color(score: float | None, threshold: float = DEFAULT_QUALITY_THRESHOLD) -> str:
    """Colour band for ``score``; ``gray`` when there is no score."""
    if score is None:
        return "gray"
    if score >= threshold + COMFORT_MARGIN:
        return "green"
    if score >= threshold:
        return "yellow"
    return "red"


def evaluate_quality(score: float | None, threshold: float | None = None) -> QualityGate:
    """Evaluate the pass/fail gate for a single score.

    A missing score neither passes nor asks for a retry.
    """
    if threshold is None:
        threshold = DEFAULT_QUALITY_THRESHOLD
    if score is None:
        return QualityGate(score=None, threshold=threshold, passed=False, color="gray", retry_hint=False)

    passed = score >= threshold
    return QualityGate(
        score=score,
        threshold=threshold,
        passed=passed,
        color=band_color(score, threshold),
        retry_hint=not passed,
    )


def dimension_colors(
    dimensions: dict[str, float] | None,
    threshold: float = DEFAULT_QUALITY_THRESHOLD,
) -> list[tuple[str, float, str]]:
    """Return (name, score, colour) per dimension, in input order."""
    if not dimensions:
        return []
    return [(name, score, band_color(score, threshold)) for name, score in dimensions.items()]


def sparkline_levels(history: Sequence[float]) -> list[int]:
    """Bucket each value into 0..7 relative to the sequence's own min and max.

    A flat sequence maps every value to level 0.
    """
    if not history:
        return []
    low = min(history)
    span = (max(history) - low) or 1
    # Half-up rounding, not Python's round-half-to-even
    return [
        int(math.floor((value - low) / span * (SPARK_LEVELS - 1) + 0.5))
        for value in history
    ]


def sparkline(history: Sequence[float]) -> str:
    return "".join(SPARK_CHARS[level] for level in sparkline_levels(history))


def trend_slope(history: Sequence[float]) -> float:
    """Least-squares slope of ``history`` in points per sample."""
    n = len(history)
    if n < 2:
        return 0.0
    mean_x = (n - 1) / 2
    mean_y = sum(history) / n
    num = sum((i - mean_x) * (y - mean_y) for i, y in enumerate(history))
    den = sum((i - mean_x) ** 2 for i in range(n))
    return num / den


def trend_direction(history: Sequence[float], tolerance: float = 1.0) -> str:
    """Classify history as ``improving``, ``declining`` or ``stable``."""
    slope = trend_slope(history)
    if slope > tolerance:
        return "improving"
    if slope < -tolerance:
        return "declining"
    return "stable"


def evaluate_summary(summary: QualitySummary) -> QualityReport:
    return QualityReport(
        gate=evaluate_quality(summary.score, summary.threshold),
        dimensions=dimension_colors(summary.dimensions, summary.threshold),
        sparkline=sparkline(summary.history),
        trend=trend_direction(summary.history),
    )
