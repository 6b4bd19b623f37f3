"""Policy Provider - resolves lecturer reflection policy into an immutable EffectivePolicy.

Invariants:
    - resolve_effective_policy is a pure read: it never writes settings or profiles
    - A missing settings row, missing selected key or missing profile row all
      degrade to the built-in default profile, never to an error
    - load_session_policy reads the profile frozen on the session, never the
      lecturer's current selection

Design Decisions:
    - Profiles are re-read by key at confirm time so the thresholds used are
      those of the session's profile, as stored by the lecturer
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from teaminsight.core.policy import (
    DEFAULT_PROFILE,
    DEFAULT_PROFILE_KEY,
    EffectivePolicy,
    ProfileSnapshot,
    needs_snapshot_backfill,
    normalize_profile_key,
)
from teaminsight.models.reflection_profile import ReflectionProfile
from teaminsight.models.reflection_session import ReflectionSession
from teaminsight.models.reflection_settings import ReflectionSettings, SETTINGS_ROW_ID

logger = logging.getLogger(__name__)


async def load_profile(db: AsyncSession, key: str | None) -> ProfileSnapshot:
    """Profile by key, else the stored default profile, else the built-in default."""
    profile_key = normalize_profile_key(key)
    row = await db.get(ReflectionProfile, profile_key)
    if row is None and profile_key != DEFAULT_PROFILE_KEY:
        logger.warning(f"Reflection profile '{profile_key}' missing, using default")
        row = await db.get(ReflectionProfile, DEFAULT_PROFILE_KEY)
    return row.to_snapshot() if row is not None else DEFAULT_PROFILE


async def resolve_effective_policy(db: AsyncSession) -> EffectivePolicy:
    """Current lecturer selection plus weekly instructions."""
    settings_row = await db.get(ReflectionSettings, SETTINGS_ROW_ID)
    selected_key = settings_row.selected_profile_key if settings_row else None
    weekly = settings_row.weekly_instructions if settings_row else ""
    profile = await load_profile(db, selected_key)
    return EffectivePolicy(
        profile_key=profile.key,
        weekly_instructions=weekly if isinstance(weekly, str) else "",
        profile=profile,
    )


async def load_session_policy(
    db: AsyncSession, session: ReflectionSession,
) -> EffectivePolicy:
    """Policy as frozen on the session at creation."""
    profile = await load_profile(db, session.profile_key)
    return EffectivePolicy(
        profile_key=profile.key,
        weekly_instructions=session.weekly_instructions_snapshot or "",
        profile=profile,
    )


async def ensure_policy_snapshot(
    db: AsyncSession, session: ReflectionSession,
) -> None:
    """Backfill the snapshot on legacy sessions created before snapshotting."""
    if not needs_snapshot_backfill(
        session.profile_key, session.weekly_instructions_snapshot,
    ):
        return
    policy = await resolve_effective_policy(db)
    if not session.profile_key:
        session.profile_key = policy.profile_key
    if not isinstance(session.weekly_instructions_snapshot, str):
        session.weekly_instructions_snapshot = policy.weekly_instructions
    logger.info(
        "Backfilled policy snapshot on legacy session",
        extra={"team_id": session.team_id, "session_id": session.session_id},
    )
