"""Domain Types - enums and value types for the reflection session domain.

Invariants:
    - All closed vocabularies (statuses, stages, strategies, flags) encoded as Enums
    - Oracle output is only ever accepted if it matches one of these values

Design Decisions:
    - str Enums: serialize to JSON without custom encoders, compare equal to raw strings
"""

from enum import Enum


# ─── Session lifecycle ───────────────────────────────────────────

class SessionStatus(str, Enum):
    """Reflection session lifecycle - maps to DB `status` column."""
    IN_PROGRESS = "in_progress"
    READY_TO_SUBMIT = "ready_to_submit"
    SUBMITTED = "submitted"


NON_TERMINAL_STATUSES: tuple[SessionStatus, ...] = (
    SessionStatus.IN_PROGRESS, SessionStatus.READY_TO_SUBMIT,
)


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class StatusColor(str, Enum):
    """Team traffic-light colour shown on the lecturer dashboard."""
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


# ─── Analyst vocabulary ──────────────────────────────────────────

class TuckmanStage(str, Enum):
    FORMING = "forming"
    STORMING = "storming"
    NORMING = "norming"
    PERFORMING = "performing"
    ADJOURNING = "adjourning"


class DetectedPattern(str, Enum):
    """Group-dynamics patterns the analyst may flag during a turn."""
    SOCIAL_LOAFER = "social_loafer"
    PASSIVE_AGGRESSIVE = "passive_aggressive"
    GROUPTHINK = "groupthink"
    BLAME_GAME = "blame_game"
    SILENCE = "silence"
    POTENTIAL_LOAFER = "potential_loafer"


class ReflectiveDepth(str, Enum):
    DESCRIPTIVE = "descriptive"
    COMPARATIVE = "comparative"
    CRITICAL = "critical"
    TRANSFORMATIVE = "transformative"


class SentimentTone(str, Enum):
    TENSE = "tense"
    APATHETIC = "apathetic"
    ENTHUSIASTIC = "enthusiastic"
    FRUSTRATED = "frustrated"
    NEUTRAL = "neutral"
    DEFENSIVE = "defensive"


class DirectiveStrategy(str, Enum):
    """What the next interviewer message should try to accomplish."""
    PROBE_DEEPER = "probe_deeper"
    MEDIATE_CONFLICT = "mediate_conflict"
    BREAK_SILENCE = "break_silence"
    CHALLENGE_GROUPTHINK = "challenge_groupthink"
    ADDRESS_LOAFER = "address_loafer"
    ELEVATE_REFLECTION = "elevate_reflection"
    WRAP_UP = "wrap_up"


class DirectiveTone(str, Enum):
    WARM = "warm"
    CURIOUS = "curious"
    FIRM = "firm"
    PLAYFUL = "playful"
    EMPATHETIC = "empathetic"
    MEDIATOR = "mediator"


class IntentKind(str, Enum):
    """Legacy three-way intent, still sent to the interviewer."""
    CLARIFY_CURRENT = "clarify_current"
    ADVANCE_TOPIC = "advance_topic"
    WRAP_UP = "wrap_up"


# ─── Evaluator vocabulary ────────────────────────────────────────

class AnomalyFlag(str, Enum):
    """Flags raised for lecturer attention at finalize time."""
    RED_ZONE = "red_zone"
    SILENT_DROPOUT = "silent_dropout"
    TOXIC_SPIKE = "toxic_spike"
    CHRONIC_ISSUE = "chronic_issue"


class THSComponent(str, Enum):
    """The four weighted Team Health Score components."""
    PARTICIPATION_EQUITY = "participationEquity"
    CONSTRUCTIVE_SENTIMENT = "constructiveSentiment"
    REFLECTIVE_DEPTH = "reflectiveDepth"
    CONFLICT_RESOLUTION = "conflictResolution"


class OracleRole(str, Enum):
    """The four stateless oracle calls, used for logging and error context."""
    CONTROLLER = "controller"
    INTERVIEWER = "interviewer"
    FINAL_SUMMARY = "final_summary"
    EVALUATOR = "evaluator"
