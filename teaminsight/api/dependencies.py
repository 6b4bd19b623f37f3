"""Auth Dependencies - verify the team and lecturer session cookies.

Invariants:
    - Cookies are HS256 JWTs signed by the auth service; only verified here
    - A missing, expired or forged cookie is UnauthorizedError (401)
    - A valid team cookie for a team that no longer exists is 404
    - Routes receive the team_id string, never a claim they must re-check

Design Decisions:
    - python-jose for decoding: issuance lives elsewhere, so this module never
      signs anything
"""

import logging

from fastapi import Cookie, Depends
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from teaminsight.config import Settings, get_settings
from teaminsight.core.errors import ResourceNotFoundError, UnauthorizedError
from teaminsight.infrastructure.database import get_db
from teaminsight.models.team import Team

logger = logging.getLogger(__name__)

TEAM_COOKIE = "team_session"
LECTURER_COOKIE = "lecturer_session"


def _decode_claim(token: str | None, secret: str, algorithm: str, claim: str) -> str:
    if not token:
        raise UnauthorizedError("Missing session cookie")
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as e:
        logger.warning(f"Rejected session cookie: {e}")
        raise UnauthorizedError("Invalid session cookie")
    value = payload.get(claim)
    if not isinstance(value, str) or not value.strip():
        raise UnauthorizedError(f"Session cookie has no {claim}")
    return value.strip()


async def require_team(
    team_session: str | None = Cookie(None, alias=TEAM_COOKIE),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> str:
    """Authenticated team_id from the team session cookie."""
    team_id = _decode_claim(
        team_session, settings.team_session_secret,
        settings.session_token_algorithm, "teamId",
    )
    if await db.get(Team, team_id) is None:
        raise ResourceNotFoundError("Team", team_id)
    return team_id


async def require_lecturer(
    lecturer_session: str | None = Cookie(None, alias=LECTURER_COOKIE),
    settings: Settings = Depends(get_settings),
) -> str:
    """Authenticated lecturer id from the lecturer session cookie."""
    return _decode_claim(
        lecturer_session, settings.lecturer_session_secret,
        settings.session_token_algorithm, "lecturerId",
    )
