"""Turn Controller - one analyst oracle call per turn, producing the next directive.

Invariants:
    - Side-effect free: returns a ControllerResult, persists nothing
    - Unparseable replies degrade to the prior state (fallback), never raise
    - Oracle transport errors (LLMAPIError) propagate to the caller untouched
    - Once turn_count reaches max_turns the directive strategy is wrap_up

Design Decisions:
    - The full context (transcript, prior answers, policy, recent summaries,
      topics) is sent every call; the oracle keeps no state between turns
"""

import json
import logging

from teaminsight.core.controller_parsing import (
    ControllerResult,
    build_controller_fallback,
    enforce_turn_ceiling,
    parse_controller_response,
)
from teaminsight.core.domain_types import OracleRole
from teaminsight.core.errors import ErrorContext, oracle_context
from teaminsight.core.llm_protocol import CompletionClient
from teaminsight.core.policy import EffectivePolicy
from teaminsight.core.topics import topics_payload
from teaminsight.core.transcript import transcript_for_oracle
from teaminsight.services.reflection_prompts import CONTROLLER_PROMPT

logger = logging.getLogger(__name__)


async def run_controller_turn(
    client: CompletionClient,
    *,
    transcript: list[dict],
    prior_answers: list[dict],
    prior_summary: str,
    clarify_count: int,
    turn_count: int,
    max_turns: int,
    recent_summaries: list[str],
    policy: EffectivePolicy,
    context: ErrorContext | None = None,
) -> ControllerResult:
    """Ask the analyst for updated answers, summary, readiness and directive."""
    fallback = build_controller_fallback(
        prior_answers, prior_summary, clarify_count, turn_count,
    )
    payload = {
        "messages": transcript_for_oracle(transcript),
        "answers": prior_answers or [],
        "runningSummary": prior_summary or "",
        "clarifyCount": clarify_count or 0,
        "turnCount": turn_count or 0,
        "maxTurns": max_turns,
        "recentSummaries": list(recent_summaries or []),
        "topics": topics_payload(),
        "policy": policy.controller_payload(),
    }
    raw = await client.complete(
        system=CONTROLLER_PROMPT,
        content=json.dumps(payload, ensure_ascii=False),
        context=oracle_context(context, OracleRole.CONTROLLER.value),
    )
    result = enforce_turn_ceiling(parse_controller_response(raw, fallback), max_turns)
    logger.info(
        f"Controller directive: {result.directive.strategy.value}, "
        f"stage={result.analysis.tuckman_stage.value}, "
        f"ready={result.ready_to_submit}",
        extra={
            "oracle": OracleRole.CONTROLLER.value,
            "session_id": context.session_id if context else None,
            "turn_count": result.turn_count,
        },
    )
    return result

