"""Controller Parsing - turns the analyst oracle's JSON into a validated ControllerResult.

Invariants:
    - parse_controller_response never raises; non-JSON or non-object input
      returns the caller's fallback object itself
    - Every field is validated independently: a bad field falls back alone,
      the rest of the reply is still used
    - Enum fields only ever hold allow-listed values
    - Counters never decrease: an oracle value below the prior count is ignored
    - readyToSubmit is True only for a literal JSON true
    - Answers merge by topicId: oracle items overwrite, omitted topics survive

Design Decisions:
    - Pure function (raw, fallback) -> result: the service layer supplies the
      prior state as the fallback, so a failed parse leaves the session unchanged
    - Legacy nextIntent is parsed when present, otherwise derived from the
      directive so the interviewer always receives both
"""

import logging
from dataclasses import dataclass, field, replace

from teaminsight.core.domain_types import (
    DetectedPattern,
    DirectiveStrategy,
    DirectiveTone,
    IntentKind,
    ReflectiveDepth,
    SentimentTone,
    TuckmanStage,
)
from teaminsight.core.language_strings import DEFAULT_ANCHOR, DEFAULT_KEY_QUESTION
from teaminsight.core.llm_json import (
    as_enum,
    as_enum_list,
    as_int,
    as_string_list,
    as_text,
    clamp_number,
    parse_json_object,
)

logger = logging.getLogger(__name__)

_STRATEGY_TO_INTENT: dict[DirectiveStrategy, IntentKind] = {
    DirectiveStrategy.PROBE_DEEPER: IntentKind.CLARIFY_CURRENT,
    DirectiveStrategy.MEDIATE_CONFLICT: IntentKind.CLARIFY_CURRENT,
    DirectiveStrategy.BREAK_SILENCE: IntentKind.ADVANCE_TOPIC,
    DirectiveStrategy.CHALLENGE_GROUPTHINK: IntentKind.CLARIFY_CURRENT,
    DirectiveStrategy.ADDRESS_LOAFER: IntentKind.CLARIFY_CURRENT,
    DirectiveStrategy.ELEVATE_REFLECTION: IntentKind.ADVANCE_TOPIC,
    DirectiveStrategy.WRAP_UP: IntentKind.WRAP_UP,
}


@dataclass
class ControllerAnalysis:
    """Analyst's read of team dynamics for this turn (logged, not persisted)."""
    tuckman_stage: TuckmanStage = TuckmanStage.FORMING
    tuckman_reasoning: str = "Initial assessment - team stage unknown"
    psychological_safety: float = 5
    safety_indicators: list[str] = field(default_factory=list)
    detected_patterns: list[DetectedPattern] = field(default_factory=list)
    pattern_evidence: str = ""
    reflective_depth: ReflectiveDepth = ReflectiveDepth.DESCRIPTIVE
    sentiment_tone: SentimentTone = SentimentTone.NEUTRAL
    participation_equity: str = "Unknown - need more data"


@dataclass
class NextDirective:
    """Abstract instruction for the interviewer; never shown to students."""
    strategy: DirectiveStrategy = DirectiveStrategy.PROBE_DEEPER
    tone: DirectiveTone = DirectiveTone.WARM
    target_user: str | None = None
    key_question: str = DEFAULT_KEY_QUESTION
    question_rationale: str = "Starting conversation about team collaboration"
    anchor: str = DEFAULT_ANCHOR
    history_reference: str = ""
    avoid_topics: list[str] = field(default_factory=list)
    urgent_topics: list[str] = field(default_factory=lambda: ["collaboration"])

    def to_payload(self) -> dict:
        return {
            "strategy": self.strategy.value,
            "tone": self.tone.value,
            "targetUser": self.target_user,
            "keyQuestion": self.key_question,
            "questionRationale": self.question_rationale,
            "anchor": self.anchor,
            "historyReference": self.history_reference,
            "avoidTopics": list(self.avoid_topics),
            "urgentTopics": list(self.urgent_topics),
        }


@dataclass
class NextIntent:
    """Legacy intent shape, kept alongside the directive."""
    kind: IntentKind
    topic_id: str | None
    anchor: str
    style_note: str
    question_goal: str
    missing_info: list[str]
    user_context: str
    history_reference: str

    def to_payload(self) -> dict:
        return {
            "kind": self.kind.value,
            "topicId": self.topic_id,
            "anchor": self.anchor,
            "styleNote": self.style_note,
            "questionGoal": self.question_goal,
            "missingInfo": list(self.missing_info),
            "userContext": self.user_context,
            "historyReference": self.history_reference,
        }


@dataclass
class ControllerResult:
    thinking: str
    analysis: ControllerAnalysis
    running_summary: str
    answers: list[dict]
    directive: NextDirective
    intent: NextIntent
    ready_to_submit: bool
    clarify_count: int
    turn_count: int


def directive_to_intent(directive: NextDirective) -> NextIntent:
    """Derive the legacy intent from a directive."""
    return NextIntent(
        kind=_STRATEGY_TO_INTENT.get(directive.strategy, IntentKind.ADVANCE_TOPIC),
        topic_id=directive.urgent_topics[0] if directive.urgent_topics else None,
        anchor=directive.anchor,
        style_note=directive.tone.value,
        question_goal=directive.key_question,
        missing_info=list(directive.urgent_topics),
        user_context=directive.question_rationale,
        history_reference=directive.history_reference,
    )


def build_controller_fallback(
    prior_answers: list[dict],
    prior_summary: str,
    clarify_count: int,
    turn_count: int,
) -> ControllerResult:
    """Result used verbatim when the analyst reply cannot be parsed at all."""
    directive = NextDirective()
    return ControllerResult(
        thinking="Starting reflection. Assessing team dynamics and collaboration patterns.",
        analysis=ControllerAnalysis(),
        running_summary=prior_summary or "",
        answers=list(prior_answers or []),
        directive=directive,
        intent=directive_to_intent(directive),
        ready_to_submit=False,
        clarify_count=clarify_count or 0,
        turn_count=turn_count or 0,
    )


def merge_answers(prior: list[dict], incoming: object) -> list[dict]:
    """Overlay valid oracle answer items onto prior answers, keyed by topicId."""
    if not isinstance(incoming, list):
        return list(prior)
    merged: dict[str, dict] = {}
    for item in prior:
        if isinstance(item, dict) and isinstance(item.get("topicId"), str):
            merged[item["topicId"]] = item
    for item in incoming:
        answer = _coerce_answer(item)
        if answer is not None:
            merged[answer["topicId"]] = answer
    return list(merged.values())


def _coerce_answer(item: object) -> dict | None:
    if not isinstance(item, dict):
        return None
    topic_id = item.get("topicId")
    if not isinstance(topic_id, str) or not topic_id.strip():
        return None
    prompt, answer = item.get("prompt"), item.get("answer")
    if not isinstance(prompt, str) or not isinstance(answer, str):
        return None
    return {
        "topicId": topic_id.strip(),
        "prompt": prompt.strip(),
        "answer": answer.strip(),
    }


def _monotonic_count(value: object, prior: int) -> int:
    count = as_int(value)
    if count is None or count < prior:
        return prior
    return count


def _parse_analysis(raw: object, fallback: ControllerAnalysis) -> ControllerAnalysis:
    data = raw if isinstance(raw, dict) else {}
    return ControllerAnalysis(
        tuckman_stage=as_enum(data.get("tuckmanStage"), TuckmanStage, fallback.tuckman_stage),
        tuckman_reasoning=as_text(
            data.get("tuckmanReasoning"), fallback.tuckman_reasoning, strip=False,
        ),
        psychological_safety=clamp_number(
            data.get("psychologicalSafety"), 1, 10, fallback.psychological_safety,
        ),
        safety_indicators=as_string_list(data.get("safetyIndicators")) or [],
        detected_patterns=as_enum_list(data.get("detectedPatterns"), DetectedPattern),
        pattern_evidence=as_text(data.get("patternEvidence"), ""),
        reflective_depth=as_enum(
            data.get("reflectiveDepth"), ReflectiveDepth, fallback.reflective_depth,
        ),
        sentiment_tone=as_enum(data.get("sentimentTone"), SentimentTone, fallback.sentiment_tone),
        participation_equity=as_text(
            data.get("participationEquity"), fallback.participation_equity, strip=False,
        ),
    )


def _parse_directive(raw: object, fallback: NextDirective) -> NextDirective:
    data = raw if isinstance(raw, dict) else {}
    target = data.get("targetUser")
    return NextDirective(
        strategy=as_enum(data.get("strategy"), DirectiveStrategy, fallback.strategy),
        tone=as_enum(data.get("tone"), DirectiveTone, fallback.tone),
        target_user=target.strip() or None if isinstance(target, str) else None,
        key_question=as_text(data.get("keyQuestion"), fallback.key_question),
        question_rationale=as_text(data.get("questionRationale"), ""),
        anchor=as_text(data.get("anchor"), fallback.anchor),
        history_reference=as_text(data.get("historyReference"), ""),
        avoid_topics=as_string_list(data.get("avoidTopics")) or [],
        urgent_topics=as_string_list(data.get("urgentTopics")) or [],
    )


def _parse_intent(raw: object, directive: NextDirective) -> NextIntent:
    if not isinstance(raw, dict):
        return directive_to_intent(directive)
    topic_id = raw.get("topicId")
    return NextIntent(
        kind=as_enum(raw.get("kind"), IntentKind, IntentKind.ADVANCE_TOPIC),
        topic_id=topic_id if isinstance(topic_id, str) else None,
        anchor=as_text(raw.get("anchor"), directive.anchor),
        style_note=as_text(raw.get("styleNote"), directive.tone.value),
        question_goal=as_text(raw.get("questionGoal"), directive.key_question),
        missing_info=as_string_list(raw.get("missingInfo")) or [],
        user_context=as_text(raw.get("userContext"), ""),
        history_reference=as_text(raw.get("historyReference"), directive.history_reference),
    )


def parse_controller_response(raw: str, fallback: ControllerResult) -> ControllerResult:
    """Validate analyst output field by field; return fallback if it is not a JSON object."""
    obj = parse_json_object(raw)
    if obj is None:
        logger.warning("Controller reply was not a JSON object, using fallback")
        return fallback

    directive = _parse_directive(obj.get("nextDirective"), fallback.directive)
    return ControllerResult(
        thinking=as_text(obj.get("thinking"), fallback.thinking),
        analysis=_parse_analysis(obj.get("analysis"), fallback.analysis),
        running_summary=as_text(obj.get("runningSummary"), fallback.running_summary),
        answers=merge_answers(fallback.answers, obj.get("answers")),
        directive=directive,
        intent=_parse_intent(obj.get("nextIntent"), directive),
        ready_to_submit=obj.get("readyToSubmit") is True,
        clarify_count=_monotonic_count(obj.get("clarifyCount"), fallback.clarify_count),
        turn_count=_monotonic_count(obj.get("turnCount"), fallback.turn_count),
    )


def enforce_turn_ceiling(result: ControllerResult, max_turns: int) -> ControllerResult:
    """Force a wrap-up directive once the turn budget is spent."""
    if result.turn_count < max_turns or result.directive.strategy == DirectiveStrategy.WRAP_UP:
        return result
    directive = replace(result.directive, strategy=DirectiveStrategy.WRAP_UP)
    return replace(result, directive=directive, intent=directive_to_intent(directive))
