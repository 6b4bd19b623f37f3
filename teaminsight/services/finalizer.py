"""Finalizer - final narrative summary and Team Health Score evaluation.

Invariants:
    - render_final_summary never returns "": an empty oracle reply falls back
      to the running summary
    - evaluate never raises on malformed JSON (core/evaluation_parsing.py)
    - score_evaluation is pure: final score and colour depend only on the
      evaluation and the session's profile thresholds
    - Nothing here writes to the database; the flow persists the outcome
"""

import json
import logging
from dataclasses import dataclass

from teaminsight.core.domain_types import OracleRole, StatusColor
from teaminsight.core.errors import ErrorContext, oracle_context
from teaminsight.core.evaluation_parsing import EvaluationResult, parse_evaluation_response
from teaminsight.core.llm_protocol import CompletionClient
from teaminsight.core.policy import EffectivePolicy, ProfileSnapshot
from teaminsight.core.scoring import compute_legacy_score, score_to_color, select_final_score
from teaminsight.core.transcript import transcript_for_oracle
from teaminsight.services.reflection_prompts import EVALUATOR_PROMPT, FINAL_SUMMARY_PROMPT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreOutcome:
    final_score: float
    legacy_score: int
    color: StatusColor


async def render_final_summary(
    client: CompletionClient,
    *,
    answers: list[dict],
    running_summary: str,
    transcript: list[dict],
    max_tokens: int | None = None,
    context: ErrorContext | None = None,
) -> str:
    """Lecturer-facing markdown synthesis of the whole reflection."""
    payload = {
        "answers": answers or [],
        "runningSummary": running_summary or "",
        "messages": transcript_for_oracle(transcript),
    }
    text = (await client.complete(
        system=FINAL_SUMMARY_PROMPT,
        content=json.dumps(payload, ensure_ascii=False),
        max_tokens=max_tokens,
        context=oracle_context(context, OracleRole.FINAL_SUMMARY.value),
    )).strip()
    if not text:
        logger.warning(
            "Final summary empty, keeping running summary",
            extra={"oracle": OracleRole.FINAL_SUMMARY.value},
        )
        return running_summary or ""
    return text


async def evaluate(
    client: CompletionClient,
    *,
    narrative_summary: str,
    answers: list[dict],
    transcript: list[dict],
    policy: EffectivePolicy,
    context: ErrorContext | None = None,
) -> EvaluationResult:
    """Team Health Score report for a finished reflection."""
    payload = {
        "summary": narrative_summary,
        "answers": answers or [],
        "messages": transcript_for_oracle(transcript),
        "policy": policy.evaluator_payload(),
    }
    raw = await client.complete(
        system=EVALUATOR_PROMPT,
        content=json.dumps(payload, ensure_ascii=False),
        context=oracle_context(context, OracleRole.EVALUATOR.value),
    )
    return parse_evaluation_response(raw)


def score_evaluation(evaluation: EvaluationResult, profile: ProfileSnapshot) -> ScoreOutcome:
    """Final composite score and traffic-light colour under the profile's thresholds."""
    legacy = compute_legacy_score(
        evaluation.quality, evaluation.risk, evaluation.compliance,
    )
    final = select_final_score(evaluation.team_health_score, legacy)
    return ScoreOutcome(
        final_score=final,
        legacy_score=legacy,
        color=score_to_color(final, profile.green_min, profile.red_max),
    )
