"""Arrangement scorer — reduce routing metrics to a 0–100 ranking score."""

from __future__ import annotations

from dataclasses import dataclass

from tapeboard.pipeline.design.models import Arrangement, ArrangementMetrics


@dataclass(frozen=True)
class ScoreWeights:
    """Penalty weights.  Higher absolute value = more influence."""

    reference_length_mm: float = 100.0  # free routing budget
    length_per_mm: float = 0.1
    per_crossing: float = 10.0
    utilization: float = 50.0           # per unit of distance outside the band
    utilization_low: float = 0.40
    utilization_high: float = 0.70
    per_unrouted: float = 15.0


DEFAULT_WEIGHTS = ScoreWeights()


def utilization_excess(utilization: float, weights: ScoreWeights = DEFAULT_WEIGHTS) -> float:
    """Distance of *utilization* outside the target band (0 inside it)."""
    if utilization < weights.utilization_low:
        return weights.utilization_low - utilization
    if utilization > weights.utilization_high:
        return utilization - weights.utilization_high
    return 0.0


def score_metrics(metrics: ArrangementMetrics, weights: ScoreWeights = DEFAULT_WEIGHTS) -> float:
    """Score in [0, 100], rounded to 0.1.

    Non-increasing in route length, crossings and unrouted connections;
    under- and over-utilization are penalised symmetrically.
    """
    score = 100.0
    score -= weights.length_per_mm * max(0.0, metrics.total_route_length - weights.reference_length_mm)
    score -= weights.per_crossing * metrics.route_crossings
    score -= weights.utilization * utilization_excess(metrics.board_utilization, weights)
    score -= weights.per_unrouted * metrics.unrouted
    return round(max(0.0, min(100.0, score)), 1)


def rank_arrangements(arrangements: list[Arrangement]) -> list[Arrangement]:
    """Best first; equal scores keep their original order."""
    return sorted(arrangements, key=lambda a: -a.score)
