"""Session Store - persistence operations for reflection sessions, always scoped by team.

Invariants:
    - Every query filters on team_id; no lookup by session_id alone
    - create_session raises SessionConflictError if the team already has an
      active session, including when a concurrent insert wins the race
    - Mutators reassign JSON columns (never mutate in place) so SQLAlchemy
      tracks the change
    - delete_non_terminal_sessions never touches submitted sessions
    - The store flushes but never commits; the caller owns the unit of work

Design Decisions:
    - Check-then-insert for the common case, partial unique index as the
      atomic guard for the race; IntegrityError is translated, not leaked
    - create_session must be the first write of its unit of work: the
      conflict path rolls the whole transaction back
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from teaminsight.core.domain_types import (
    NON_TERMINAL_STATUSES, MessageRole, SessionStatus,
)
from teaminsight.core.errors import ErrorContext, SessionConflictError
from teaminsight.core.policy import EffectivePolicy
from teaminsight.models.reflection_session import ReflectionSession

logger = logging.getLogger(__name__)

_ACTIVE_VALUES = [s.value for s in NON_TERMINAL_STATUSES]


class SessionStore:
    """Reflection session persistence over one AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_active_session(self, team_id: str) -> ReflectionSession | None:
        """The team's in_progress or ready_to_submit session, if any."""
        result = await self.db.execute(
            select(ReflectionSession).where(
                ReflectionSession.team_id == team_id,
                ReflectionSession.status.in_(_ACTIVE_VALUES),
            ),
        )
        return result.scalars().first()

    async def find_session_by_status(
        self, team_id: str, status: SessionStatus,
    ) -> ReflectionSession | None:
        result = await self.db.execute(
            select(ReflectionSession).where(
                ReflectionSession.team_id == team_id,
                ReflectionSession.status == status.value,
            ),
        )
        return result.scalars().first()

    async def create_session(
        self, team_id: str, policy: EffectivePolicy,
    ) -> ReflectionSession:
        """Insert a fresh in_progress session carrying the policy snapshot."""
        if await self.find_active_session(team_id) is not None:
            raise SessionConflictError(
                "Team already has an active reflection session",
                ErrorContext(team_id=team_id),
            )
        session = ReflectionSession(
            team_id=team_id,
            session_id=str(uuid.uuid4()),
            status=SessionStatus.IN_PROGRESS.value,
            messages=[],
            answers=[],
            running_summary="",
            turn_count=0,
            clarify_count=0,
            profile_key=policy.profile_key,
            weekly_instructions_snapshot=policy.weekly_instructions,
        )
        self.db.add(session)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            logger.warning(
                "Concurrent session creation lost the race",
                extra={"team_id": team_id},
            )
            raise SessionConflictError(
                "Team already has an active reflection session",
                ErrorContext(team_id=team_id),
            )
        logger.info(
            "Reflection session created",
            extra={"team_id": team_id, "session_id": session.session_id},
        )
        return session

    def append_message(
        self, session: ReflectionSession, role: MessageRole, text: str,
    ) -> dict:
        message = {
            "role": role.value,
            "text": text,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        session.messages = [*(session.messages or []), message]
        return message

    def set_answers(self, session: ReflectionSession, answers: list[dict]) -> None:
        session.answers = [dict(a) for a in answers]

    def set_summary(self, session: ReflectionSession, text: str) -> None:
        session.running_summary = text or ""

    def increment_turn(self, session: ReflectionSession) -> int:
        session.turn_count = (session.turn_count or 0) + 1
        return session.turn_count

    def set_counters(
        self, session: ReflectionSession, turn_count: int, clarify_count: int,
    ) -> None:
        """Apply oracle counters without ever moving backwards."""
        session.turn_count = max(session.turn_count or 0, turn_count)
        session.clarify_count = max(session.clarify_count or 0, clarify_count)

    def set_status(self, session: ReflectionSession, status: SessionStatus) -> None:
        session.status = status.value

    async def delete_non_terminal_sessions(self, team_id: str) -> int:
        """Delete the team's in_progress/ready_to_submit sessions; returns count."""
        result = await self.db.execute(
            delete(ReflectionSession).where(
                ReflectionSession.team_id == team_id,
                ReflectionSession.status.in_(_ACTIVE_VALUES),
            ),
        )
        return result.rowcount or 0

    async def get_recent_summaries(
        self,
        team_id: str,
        days: int,
        limit: int,
        now: datetime | None = None,
    ) -> list[str]:
        """Final summaries of recently submitted sessions, newest first."""
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=days)
        result = await self.db.execute(
            select(ReflectionSession.final_summary)
            .where(
                ReflectionSession.team_id == team_id,
                ReflectionSession.status == SessionStatus.SUBMITTED.value,
                ReflectionSession.submitted_at >= cutoff,
            )
            .order_by(ReflectionSession.submitted_at.desc())
            .limit(limit),
        )
        return [s for s in result.scalars().all() if isinstance(s, str) and s.strip()]
