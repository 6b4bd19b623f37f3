"""Tests for parse_controller_response - per-field validation with fallback, never raising."""

import json

from teaminsight.core.controller_parsing import (
    NextDirective,
    build_controller_fallback,
    directive_to_intent,
    enforce_turn_ceiling,
    merge_answers,
    parse_controller_response,
)
from teaminsight.core.domain_types import (
    DetectedPattern,
    DirectiveStrategy,
    DirectiveTone,
    IntentKind,
    TuckmanStage,
)

PRIOR_ANSWERS = [
    {"topicId": "achievements", "prompt": "מה השגתם?", "answer": "סיימנו את מסך הכניסה"},
]


def _fallback(clarify=1, turns=3):
    return build_controller_fallback(PRIOR_ANSWERS, "סיכום קודם", clarify, turns)


def _parse(obj, fallback=None):
    return parse_controller_response(json.dumps(obj, ensure_ascii=False), fallback or _fallback())


# -- Whole-reply fallback ------------------------------------------------------


def test_non_json_returns_exact_fallback_object():
    fallback = _fallback()
    assert parse_controller_response("I think the team is doing great!", fallback) is fallback


def test_json_array_returns_exact_fallback_object():
    fallback = _fallback()
    assert parse_controller_response("[1, 2, 3]", fallback) is fallback


def test_empty_reply_returns_fallback():
    fallback = _fallback()
    assert parse_controller_response("", fallback) is fallback


def test_fallback_keeps_prior_state():
    fallback = _fallback(clarify=2, turns=5)
    assert fallback.answers == PRIOR_ANSWERS
    assert fallback.running_summary == "סיכום קודם"
    assert fallback.clarify_count == 2
    assert fallback.turn_count == 5
    assert fallback.ready_to_submit is False


# -- Field-level validation ----------------------------------------------------


def test_fenced_reply_is_parsed():
    raw = "```json\n" + json.dumps({"runningSummary": "חדש"}) + "\n```"
    result = parse_controller_response(raw, _fallback())
    assert result.running_summary == "חדש"


def test_valid_fields_are_applied():
    result = _parse({
        "thinking": "reasoning",
        "runningSummary": "סיכום מעודכן",
        "analysis": {
            "tuckmanStage": "storming",
            "psychologicalSafety": 14,
            "detectedPatterns": ["blame_game", "made_up"],
        },
        "nextDirective": {"strategy": "mediate_conflict", "tone": "mediator"},
        "clarifyCount": 2,
        "turnCount": 4,
    })
    assert result.thinking == "reasoning"
    assert result.running_summary == "סיכום מעודכן"
    assert result.analysis.tuckman_stage == TuckmanStage.STORMING
    assert result.analysis.psychological_safety == 10
    assert result.analysis.detected_patterns == [DetectedPattern.BLAME_GAME]
    assert result.directive.strategy == DirectiveStrategy.MEDIATE_CONFLICT
    assert result.directive.tone == DirectiveTone.MEDIATOR
    assert result.clarify_count == 2
    assert result.turn_count == 4


def test_bad_fields_fall_back_individually():
    result = _parse({
        "runningSummary": 42,
        "nextDirective": {"strategy": "shout", "tone": "warm"},
        "analysis": "not an object",
    })
    fallback = _fallback()
    assert result.running_summary == fallback.running_summary
    assert result.directive.strategy == DirectiveStrategy.PROBE_DEEPER
    assert result.directive.tone == DirectiveTone.WARM
    assert result.analysis.tuckman_stage == TuckmanStage.FORMING


def test_ready_to_submit_requires_literal_true():
    assert _parse({"readyToSubmit": True}).ready_to_submit is True
    assert _parse({"readyToSubmit": "true"}).ready_to_submit is False
    assert _parse({"readyToSubmit": 1}).ready_to_submit is False
    assert _parse({}).ready_to_submit is False


def test_counters_never_decrease():
    result = _parse({"clarifyCount": 0, "turnCount": 1}, _fallback(clarify=1, turns=3))
    assert result.clarify_count == 1
    assert result.turn_count == 3


def test_non_integer_counters_keep_prior():
    result = _parse({"clarifyCount": "5", "turnCount": 4.5}, _fallback(clarify=1, turns=3))
    assert result.clarify_count == 1
    assert result.turn_count == 3


# -- Answers merge -------------------------------------------------------------


def test_answers_merge_by_topic_id():
    result = _parse({"answers": [
        {"topicId": "achievements", "prompt": "מה השגתם?", "answer": "סיימנו גם את ההרשמה"},
        {"topicId": "blockers", "prompt": "מה עיכב?", "answer": "השרת נפל"},
    ]})
    by_topic = {a["topicId"]: a["answer"] for a in result.answers}
    assert by_topic == {"achievements": "סיימנו גם את ההרשמה", "blockers": "השרת נפל"}


def test_answers_omitted_topics_survive():
    merged = merge_answers(PRIOR_ANSWERS, [
        {"topicId": "risks", "prompt": "סיכונים?", "answer": "לוח זמנים צפוף"},
    ])
    assert [a["topicId"] for a in merged] == ["achievements", "risks"]


def test_answers_invalid_items_skipped():
    merged = merge_answers(PRIOR_ANSWERS, [
        {"topicId": "", "prompt": "x", "answer": "y"},
        {"topicId": "wins", "prompt": 3, "answer": "y"},
        "garbage",
    ])
    assert merged == PRIOR_ANSWERS


def test_answers_non_list_keeps_prior():
    assert _parse({"answers": "none"}).answers == PRIOR_ANSWERS


# -- Intent --------------------------------------------------------------------


def test_intent_derived_from_directive_when_absent():
    result = _parse({"nextDirective": {"strategy": "wrap_up"}})
    assert result.intent.kind == IntentKind.WRAP_UP


def test_legacy_intent_parsed_when_present():
    result = _parse({"nextIntent": {"kind": "clarify_current", "topicId": "blockers"}})
    assert result.intent.kind == IntentKind.CLARIFY_CURRENT
    assert result.intent.topic_id == "blockers"


def test_directive_to_intent_uses_first_urgent_topic():
    intent = directive_to_intent(NextDirective(urgent_topics=["risks", "wins"]))
    assert intent.topic_id == "risks"
    assert intent.missing_info == ["risks", "wins"]


# -- Turn ceiling --------------------------------------------------------------


def test_turn_ceiling_forces_wrap_up():
    result = enforce_turn_ceiling(_fallback(turns=16), max_turns=16)
    assert result.directive.strategy == DirectiveStrategy.WRAP_UP
    assert result.intent.kind == IntentKind.WRAP_UP
    assert result.ready_to_submit is False


def test_below_turn_ceiling_unchanged():
    fallback = _fallback(turns=3)
    assert enforce_turn_ceiling(fallback, max_turns=16) is fallback
