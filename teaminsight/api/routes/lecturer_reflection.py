"""Lecturer Reflection Routes - profile list and lecturer-wide reflection settings.

Invariants:
    - Every route requires the lecturer session cookie
    - PUT only accepts a profile key that exists as a row (or the built-in default)
    - Changing settings never touches existing sessions; their snapshot is frozen

Design Decisions:
    - Settings are a singleton row created lazily on first PUT
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teaminsight.api.dependencies import require_lecturer
from teaminsight.core.errors import InvalidRequestError
from teaminsight.core.policy import DEFAULT_PROFILE, DEFAULT_PROFILE_KEY
from teaminsight.infrastructure.database import get_db
from teaminsight.models.reflection_profile import ReflectionProfile
from teaminsight.models.reflection_settings import ReflectionSettings, SETTINGS_ROW_ID
from teaminsight.schemas.reflection import (
    ProfileListResponse, ProfileResponse, ReflectionSettingsResponse,
    ReflectionSettingsUpdate,
)
from teaminsight.services.policy_provider import resolve_effective_policy

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/lecturer/reflection", tags=["lecturer-reflection"])


@router.get("/profiles", response_model=ProfileListResponse)
async def list_profiles(
    _lecturer: str = Depends(require_lecturer),
    db: AsyncSession = Depends(get_db),
):
    """All stored profiles; the built-in default is listed when not stored."""
    result = await db.execute(select(ReflectionProfile).order_by(ReflectionProfile.key))
    snapshots = [row.to_snapshot() for row in result.scalars().all()]
    if not any(s.key == DEFAULT_PROFILE_KEY for s in snapshots):
        snapshots.insert(0, DEFAULT_PROFILE)
    return ProfileListResponse(profiles=[
        ProfileResponse(
            key=s.key, title=s.title, green_min=s.green_min, red_max=s.red_max,
        )
        for s in snapshots
    ])


@router.get("/settings", response_model=ReflectionSettingsResponse)
async def get_reflection_settings(
    _lecturer: str = Depends(require_lecturer),
    db: AsyncSession = Depends(get_db),
):
    policy = await resolve_effective_policy(db)
    return ReflectionSettingsResponse(
        selected_profile_key=policy.profile_key,
        weekly_instructions=policy.weekly_instructions,
    )


@router.put("/settings", response_model=ReflectionSettingsResponse)
async def update_reflection_settings(
    body: ReflectionSettingsUpdate,
    lecturer_id: str = Depends(require_lecturer),
    db: AsyncSession = Depends(get_db),
):
    """Select the profile and weekly instructions for sessions created from now on."""
    key = body.selected_profile_key
    if key != DEFAULT_PROFILE_KEY and await db.get(ReflectionProfile, key) is None:
        raise InvalidRequestError(
            f"Unknown reflection profile '{key}'", "selected_profile_key",
        )
    row = await db.get(ReflectionSettings, SETTINGS_ROW_ID)
    if row is None:
        row = ReflectionSettings(id=SETTINGS_ROW_ID)
        db.add(row)
    row.selected_profile_key = key
    row.weekly_instructions = body.weekly_instructions
    row.updated_at = datetime.now(timezone.utc)
    await db.commit()
    logger.info(f"Reflection settings updated by lecturer {lecturer_id}: profile={key}")
    return ReflectionSettingsResponse(
        selected_profile_key=row.selected_profile_key,
        weekly_instructions=row.weekly_instructions,
    )
