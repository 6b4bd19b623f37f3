"""Evaluation Parsing - validates the evaluator oracle's Team Health Score report.

Invariants:
    - parse_evaluation_response never raises; non-object input yields default_evaluation()
    - Component scores clamped to 0-100 (default 50), risk values to 0-10
    - teamHealthScore missing, non-numeric or <= 0 is recomputed from components
    - List fields (strengths, concerns, recommendations, reasons) hold at most 5 strings
    - reasons is never empty

Design Decisions:
    - Legacy quality/risk/compliance are derived when absent so the legacy
      score formula always has inputs
"""

import logging
from dataclasses import dataclass, field

from teaminsight.core.domain_types import (
    AnomalyFlag, ReflectiveDepth, THSComponent, TuckmanStage,
)
from teaminsight.core.language_strings import (
    DEFAULT_BREAKDOWN, DEFAULT_REASON, NO_DETAILED_REASONS, NOT_AVAILABLE,
)
from teaminsight.core.llm_json import (
    as_enum, as_enum_list, as_number, as_string_list, as_text,
    clamp_number, parse_json_object,
)
from teaminsight.core.scoring import compute_team_health_score, round_half_up

logger = logging.getLogger(__name__)

MAX_LIST_ITEMS = 5
DEFAULT_COMPONENT_SCORE = 50.0
DEFAULT_RISK = 5.0
DEFAULT_LEGACY_SCORE = 5.0


@dataclass
class EvaluationResult:
    team_health_score: float
    components: dict[str, dict]
    risk_level: float
    risk_explanation: str
    tuckman_stage: TuckmanStage
    tuckman_explanation: str
    anomaly_flags: list[AnomalyFlag] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)
    concerns: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    # Legacy fields
    quality: float = DEFAULT_LEGACY_SCORE
    risk: float = DEFAULT_RISK
    compliance: float = DEFAULT_LEGACY_SCORE
    quality_breakdown: str = DEFAULT_BREAKDOWN
    risk_breakdown: str = DEFAULT_BREAKDOWN
    compliance_breakdown: str = DEFAULT_BREAKDOWN
    reasons: list[str] = field(default_factory=lambda: [DEFAULT_REASON])


def _default_components() -> dict[str, dict]:
    components = {
        c.value: {"score": DEFAULT_COMPONENT_SCORE, "breakdown": NOT_AVAILABLE}
        for c in THSComponent
    }
    components[THSComponent.REFLECTIVE_DEPTH.value]["level"] = ReflectiveDepth.DESCRIPTIVE.value
    return components


def default_evaluation() -> EvaluationResult:
    return EvaluationResult(
        team_health_score=DEFAULT_COMPONENT_SCORE,
        components=_default_components(),
        risk_level=DEFAULT_RISK,
        risk_explanation=NOT_AVAILABLE,
        tuckman_stage=TuckmanStage.FORMING,
        tuckman_explanation=NOT_AVAILABLE,
    )


def _parse_components(raw: object) -> dict[str, dict]:
    data = raw if isinstance(raw, dict) else {}
    components: dict[str, dict] = {}
    for component in THSComponent:
        entry = data.get(component.value)
        entry = entry if isinstance(entry, dict) else {}
        parsed = {
            "score": clamp_number(entry.get("score"), 0, 100, DEFAULT_COMPONENT_SCORE),
            "breakdown": as_text(entry.get("breakdown"), NOT_AVAILABLE, strip=False),
        }
        if component == THSComponent.REFLECTIVE_DEPTH:
            parsed["level"] = as_enum(
                entry.get("level"), ReflectiveDepth, ReflectiveDepth.DESCRIPTIVE,
            ).value
        components[component.value] = parsed
    return components


def _first_number(*values: object, low: float, high: float, default: float) -> float:
    for value in values:
        if as_number(value) is not None:
            return clamp_number(value, low, high, default)
    return default


def parse_evaluation_response(raw: str) -> EvaluationResult:
    """Validate evaluator output field by field."""
    obj = parse_json_object(raw)
    if obj is None:
        logger.warning("Evaluation reply was not a JSON object, using default evaluation")
        return default_evaluation()

    components = _parse_components(obj.get("components"))
    depth = components[THSComponent.REFLECTIVE_DEPTH.value]
    computed_ths = compute_team_health_score(components)
    team_health_score = clamp_number(obj.get("teamHealthScore"), 0, 100, computed_ths)
    if team_health_score <= 0:
        team_health_score = computed_ths
    risk_level = _first_number(
        obj.get("riskLevel"), obj.get("risk"), low=0, high=10, default=DEFAULT_RISK,
    )
    risk_explanation = as_text(
        obj.get("riskExplanation"),
        as_text(obj.get("riskBreakdown"), NOT_AVAILABLE, strip=False),
        strip=False,
    )
    strengths = as_string_list(obj.get("strengths"), MAX_LIST_ITEMS) or []
    concerns = as_string_list(obj.get("concerns"), MAX_LIST_ITEMS) or []
    reasons = as_string_list(obj.get("reasons"), MAX_LIST_ITEMS)
    if reasons is None:
        reasons = (strengths + concerns)[:MAX_LIST_ITEMS]

    return EvaluationResult(
        team_health_score=team_health_score,
        components=components,
        risk_level=risk_level,
        risk_explanation=risk_explanation,
        tuckman_stage=as_enum(obj.get("tuckmanStage"), TuckmanStage, TuckmanStage.FORMING),
        tuckman_explanation=as_text(obj.get("tuckmanExplanation"), NOT_AVAILABLE, strip=False),
        anomaly_flags=as_enum_list(obj.get("anomalyFlags"), AnomalyFlag),
        strengths=strengths,
        concerns=concerns,
        recommendations=as_string_list(obj.get("recommendations"), MAX_LIST_ITEMS) or [],
        quality=_first_number(
            obj.get("quality"), low=0, high=10,
            default=round_half_up(depth["score"] / 10),
        ),
        risk=_first_number(obj.get("risk"), low=0, high=10, default=risk_level),
        compliance=_first_number(obj.get("compliance"), low=0, high=10, default=DEFAULT_LEGACY_SCORE),
        quality_breakdown=as_text(obj.get("qualityBreakdown"), depth["breakdown"]),
        risk_breakdown=as_text(obj.get("riskBreakdown"), risk_explanation),
        compliance_breakdown=as_text(obj.get("complianceBreakdown"), NOT_AVAILABLE),
        reasons=reasons or [NO_DETAILED_REASONS],
    )
