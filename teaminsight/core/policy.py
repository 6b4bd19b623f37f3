"""Reflection Policy - immutable view of the lecturer configuration a session runs under.

Invariants:
    - EffectivePolicy and ProfileSnapshot are frozen; nothing mutates them after resolution
    - A policy is resolved once per session (at creation) and its key plus
      weekly instructions are persisted on the session row
    - Blank or missing profile keys normalize to DEFAULT_PROFILE_KEY

Design Decisions:
    - Plain frozen dataclasses, not ORM rows: oracle calls receive policy
      explicitly and never read lecturer settings mid-session
    - Payload builders live here so controller and evaluator see the same
      camelCase shape the prompts document
"""

from dataclasses import dataclass

DEFAULT_PROFILE_KEY = "default"
DEFAULT_GREEN_MIN = 75
DEFAULT_RED_MAX = 45


@dataclass(frozen=True)
class ProfileSnapshot:
    """Scoring thresholds and persona addenda of one reflection profile."""
    key: str
    title: str
    controller_addendum: str = ""
    evaluator_addendum: str = ""
    green_min: int = DEFAULT_GREEN_MIN
    red_max: int = DEFAULT_RED_MAX


DEFAULT_PROFILE = ProfileSnapshot(key=DEFAULT_PROFILE_KEY, title="Default")


@dataclass(frozen=True)
class EffectivePolicy:
    """Profile plus free-text weekly instructions, as frozen on a session."""
    profile_key: str
    weekly_instructions: str
    profile: ProfileSnapshot

    def controller_payload(self) -> dict:
        return {
            "profile": {
                "key": self.profile.key,
                "title": self.profile.title,
                "controllerAddendum": self.profile.controller_addendum,
            },
            "weeklyInstructions": self.weekly_instructions,
        }

    def evaluator_payload(self) -> dict:
        return {
            "profile": {
                "key": self.profile.key,
                "evaluatorAddendum": self.profile.evaluator_addendum,
            },
            "weeklyInstructions": self.weekly_instructions,
        }


def normalize_profile_key(key: str | None) -> str:
    """Trimmed profile key, or the built-in default key when blank."""
    if not isinstance(key, str):
        return DEFAULT_PROFILE_KEY
    return key.strip() or DEFAULT_PROFILE_KEY


def needs_snapshot_backfill(
    profile_key: str | None, weekly_instructions_snapshot: object,
) -> bool:
    """True for legacy sessions created before policy snapshotting."""
    return not profile_key or not isinstance(weekly_instructions_snapshot, str)
