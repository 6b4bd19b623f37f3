"""Scoring - Team Health Score, legacy composite score and traffic-light colour.

Invariants:
    - THS weights are fixed: participation 25, sentiment 15, depth 40, resolution 20
    - compute_legacy_score(10, 0, 10) == 100 and compute_legacy_score(0, 10, 0) == 0
    - score_to_color: score >= green_min is green, score <= red_max is red,
      anything strictly between is yellow (green wins if thresholds overlap)
    - Both score formulas are retained: historical records used either one

Design Decisions:
    - Half-up rounding (floor(x + 0.5)) rather than Python's banker's rounding,
      so x.5 scores round the way stored historical scores did
"""

import math

from teaminsight.core.domain_types import StatusColor, THSComponent

THS_WEIGHTS: dict[THSComponent, float] = {
    THSComponent.PARTICIPATION_EQUITY: 0.25,
    THSComponent.CONSTRUCTIVE_SENTIMENT: 0.15,
    THSComponent.REFLECTIVE_DEPTH: 0.40,
    THSComponent.CONFLICT_RESOLUTION: 0.20,
}


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def compute_team_health_score(components: dict[str, dict]) -> int:
    """Weighted sum of the four 0-100 component scores, rounded."""
    total = 0.0
    for component, weight in THS_WEIGHTS.items():
        entry = components.get(component.value) or {}
        total += weight * float(entry.get("score", 0))
    return round_half_up(total)


def compute_legacy_score(quality: float, risk: float, compliance: float) -> int:
    """Pre-THS composite: quality and compliance up, risk down, on 0-100."""
    raw = (quality * 0.45 + (10 - risk) * 0.4 + compliance * 0.15) * 10
    return round_half_up(max(0.0, min(100.0, raw)))


def score_to_color(score: float, green_min: float, red_max: float) -> StatusColor:
    if score >= green_min:
        return StatusColor.GREEN
    if score <= red_max:
        return StatusColor.RED
    return StatusColor.YELLOW


def select_final_score(team_health_score: float | None, legacy_score: int) -> float:
    """THS when present and positive, otherwise the legacy score."""
    if team_health_score is not None and team_health_score > 0:
        return team_health_score
    return legacy_score
