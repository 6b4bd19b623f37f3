"""Tests for the four oracle calls - payload shape, fallbacks, language retry, scoring."""

import pytest

from teaminsight.core.controller_parsing import NextDirective
from teaminsight.core.domain_types import DirectiveStrategy, StatusColor, TuckmanStage
from teaminsight.core.errors import ErrorContext, LLMAPIError
from teaminsight.core.evaluation_parsing import parse_evaluation_response
from teaminsight.core.language_strings import FALLBACK_CONTINUATION
from teaminsight.core.policy import DEFAULT_PROFILE, EffectivePolicy, ProfileSnapshot
from teaminsight.services.finalizer import (
    evaluate,
    render_final_summary,
    score_evaluation,
)
from teaminsight.services.interviewer import render_next_message
from teaminsight.services.turn_controller import run_controller_turn

from tests.services.fake_llm import (
    CONTROLLER,
    EVALUATOR,
    FINAL_SUMMARY,
    INTERVIEWER,
    INTERVIEWER_TEXT,
    controller_reply,
    evaluation_reply,
)

POLICY = EffectivePolicy(
    profile_key="default", weekly_instructions="Talk about the demo", profile=DEFAULT_PROFILE,
)
TRANSCRIPT = [
    {"role": "assistant", "text": "מה עשיתם השבוע?", "timestamp": "2026-10-01T10:00:00+00:00"},
    {"role": "user", "text": "סיימנו את מסך ההתחברות"},
]
CONTEXT = ErrorContext(team_id="T1", session_id="S1")

ENGLISH_REPLY = (
    "Great work team! Could you tell me more about what blocked you "
    "this week and how you decided to split the remaining tasks?"
)


async def _run_controller(client, **overrides):
    kwargs = dict(
        transcript=TRANSCRIPT,
        prior_answers=[],
        prior_summary="",
        clarify_count=0,
        turn_count=1,
        max_turns=16,
        recent_summaries=["last week: demo slipped"],
        policy=POLICY,
        context=CONTEXT,
    )
    kwargs.update(overrides)
    return await run_controller_turn(client, **kwargs)


# ==============================================================================
# Turn Controller
# ==============================================================================


async def test_controller_payload_carries_full_context(fake_llm):
    await _run_controller(fake_llm)
    call = fake_llm.calls_for(CONTROLLER)[0]
    payload = call["payload"]
    assert payload["messages"] == [
        {"role": "assistant", "text": "מה עשיתם השבוע?"},
        {"role": "user", "text": "סיימנו את מסך ההתחברות"},
    ]
    assert payload["recentSummaries"] == ["last week: demo slipped"]
    assert payload["policy"]["weeklyInstructions"] == "Talk about the demo"
    assert payload["maxTurns"] == 16
    assert len(payload["topics"]) == 7
    assert call["context"].oracle == "controller"
    assert call["context"].session_id == "S1"


async def test_controller_garbage_reply_keeps_prior_state(fake_llm):
    fake_llm.queue(CONTROLLER, "The team seems fine.")
    prior = [{"topicId": "wins", "prompt": "p", "answer": "a"}]
    result = await _run_controller(
        fake_llm, prior_answers=prior, prior_summary="old", clarify_count=2, turn_count=3,
    )
    assert result.answers == prior
    assert result.running_summary == "old"
    assert (result.clarify_count, result.turn_count) == (2, 3)
    assert result.ready_to_submit is False


async def test_controller_turn_ceiling_forces_wrap_up(fake_llm):
    result = await _run_controller(fake_llm, turn_count=16, max_turns=16)
    assert result.directive.strategy == DirectiveStrategy.WRAP_UP


async def test_controller_transport_error_propagates(fake_llm):
    fake_llm.queue(CONTROLLER, LLMAPIError("down", "timeout"))
    with pytest.raises(LLMAPIError):
        await _run_controller(fake_llm)


async def test_controller_ready_flag_parsed(fake_llm):
    fake_llm.queue(CONTROLLER, controller_reply(readyToSubmit=True))
    assert (await _run_controller(fake_llm)).ready_to_submit is True


# ==============================================================================
# Interviewer
# ==============================================================================


async def test_interviewer_returns_oracle_text(fake_llm):
    text = await render_next_message(
        fake_llm, transcript=TRANSCRIPT, directive=NextDirective(), context=CONTEXT,
    )
    assert text == INTERVIEWER_TEXT
    payload = fake_llm.calls_for(INTERVIEWER)[0]["payload"]
    assert payload["nextDirective"]["strategy"] == "probe_deeper"
    assert payload["nextIntent"]["kind"] == "clarify_current"


async def test_interviewer_empty_reply_uses_fallback(fake_llm):
    fake_llm.queue(INTERVIEWER, "   ")
    text = await render_next_message(fake_llm, transcript=TRANSCRIPT, directive=NextDirective())
    assert text == FALLBACK_CONTINUATION


async def test_interviewer_wrong_language_retried_once(fake_llm):
    fake_llm.queue(INTERVIEWER, ENGLISH_REPLY, INTERVIEWER_TEXT)
    text = await render_next_message(fake_llm, transcript=TRANSCRIPT, directive=NextDirective())
    assert text == INTERVIEWER_TEXT
    assert len(fake_llm.calls_for(INTERVIEWER)) == 2


async def test_interviewer_wrong_language_twice_uses_fallback(fake_llm):
    fake_llm.queue(INTERVIEWER, ENGLISH_REPLY, ENGLISH_REPLY)
    text = await render_next_message(fake_llm, transcript=TRANSCRIPT, directive=NextDirective())
    assert text == FALLBACK_CONTINUATION
    assert len(fake_llm.calls_for(INTERVIEWER)) == 2


# ==============================================================================
# Finalizer
# ==============================================================================


async def test_final_summary_uses_summary_token_budget(fake_llm):
    text = await render_final_summary(
        fake_llm, answers=[], running_summary="running", transcript=TRANSCRIPT,
        max_tokens=4096,
    )
    assert "משימות" in text
    assert fake_llm.calls_for(FINAL_SUMMARY)[0]["max_tokens"] == 4096


async def test_final_summary_empty_reply_keeps_running_summary(fake_llm):
    fake_llm.queue(FINAL_SUMMARY, "")
    text = await render_final_summary(
        fake_llm, answers=[], running_summary="running", transcript=TRANSCRIPT,
    )
    assert text == "running"


async def test_evaluate_sends_policy_and_parses(fake_llm):
    result = await evaluate(
        fake_llm, narrative_summary="summary", answers=[], transcript=TRANSCRIPT, policy=POLICY,
    )
    assert result.team_health_score == 82
    assert result.tuckman_stage == TuckmanStage.PERFORMING
    payload = fake_llm.calls_for(EVALUATOR)[0]["payload"]
    assert payload["summary"] == "summary"
    assert payload["policy"]["weeklyInstructions"] == "Talk about the demo"


async def test_evaluate_malformed_reply_defaults(fake_llm):
    fake_llm.queue(EVALUATOR, "no json here")
    result = await evaluate(
        fake_llm, narrative_summary="s", answers=[], transcript=[], policy=POLICY,
    )
    assert result.team_health_score == 50


def test_score_evaluation_uses_profile_thresholds():
    evaluation = parse_evaluation_response(evaluation_reply(teamHealthScore=80))
    strict = ProfileSnapshot(key="strict", title="Strict", green_min=85, red_max=55)
    assert score_evaluation(evaluation, DEFAULT_PROFILE).color == StatusColor.GREEN
    assert score_evaluation(evaluation, strict).color == StatusColor.YELLOW


def test_zero_ths_scores_from_components_not_legacy():
    components = {
        name: {"score": 90, "breakdown": "ok"}
        for name in (
            "participationEquity", "constructiveSentiment",
            "reflectiveDepth", "conflictResolution",
        )
    }
    evaluation = parse_evaluation_response(
        evaluation_reply(teamHealthScore=0, components=components, quality=1, risk=9, compliance=1),
    )
    outcome = score_evaluation(evaluation, DEFAULT_PROFILE)
    assert evaluation.team_health_score == 90
    assert outcome.final_score == 90
    assert outcome.color == StatusColor.GREEN


def test_score_evaluation_falls_back_to_legacy_score():
    components = {
        name: {"score": 0, "breakdown": "none"}
        for name in (
            "participationEquity", "constructiveSentiment",
            "reflectiveDepth", "conflictResolution",
        )
    }
    evaluation = parse_evaluation_response(
        evaluation_reply(
            teamHealthScore=0, components=components, quality=10, risk=0, compliance=10,
        ),
    )
    outcome = score_evaluation(evaluation, DEFAULT_PROFILE)
    assert outcome.final_score == 100
    assert outcome.legacy_score == 100
