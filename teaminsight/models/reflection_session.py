"""ReflectionSession ORM - one guided weekly reflection conversation of one team.

Invariants:
    - (team_id, session_id) is unique; session_id is an opaque token
    - At most one row per team with status in_progress or ready_to_submit,
      enforced by the partial unique index uq_reflection_sessions_active_team
    - messages is append-only: {role, text, timestamp} dicts, never reordered
    - profile_key / weekly_instructions_snapshot frozen at creation; nullable
      only for legacy rows that predate snapshotting
    - Result fields are NULL until confirm; a submitted row is never mutated again

Design Decisions:
    - JSON columns for transcript, answers and evaluation lists: stored as the
      oracle payloads use them, no join tables
    - Partial index declared for both postgresql and sqlite so tests exercise
      the same constraint production relies on
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    String, Text, Integer, Float, DateTime, JSON, ForeignKey, Index,
    UniqueConstraint, text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from teaminsight.db.base import Base

_ACTIVE_STATUS_PREDICATE = text("status IN ('in_progress', 'ready_to_submit')")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReflectionSession(Base):
    """Reflection conversation plus its finalize-time evaluation."""
    __tablename__ = "reflection_sessions"
    __table_args__ = (
        UniqueConstraint("team_id", "session_id", name="uq_reflection_sessions_team_session"),
        Index(
            "uq_reflection_sessions_active_team",
            "team_id",
            unique=True,
            postgresql_where=_ACTIVE_STATUS_PREDICATE,
            sqlite_where=_ACTIVE_STATUS_PREDICATE,
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    team_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("teams.team_id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    session_id: Mapped[str] = mapped_column(
        String(64), nullable=False, default=lambda: str(uuid.uuid4()),
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="in_progress",
    )

    # Conversation state
    messages: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    answers: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    running_summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    turn_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    clarify_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Policy snapshot
    profile_key: Mapped[str | None] = mapped_column(String(64), nullable=True)
    weekly_instructions_snapshot: Mapped[str | None] = mapped_column(
        Text, nullable=True,
    )

    # Finalize results
    final_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    team_health_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    ths_components: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    tuckman_stage: Mapped[str | None] = mapped_column(String(20), nullable=True)
    tuckman_explanation: Mapped[str | None] = mapped_column(Text, nullable=True)
    risk_level: Mapped[float | None] = mapped_column(Float, nullable=True)
    risk_explanation: Mapped[str | None] = mapped_column(Text, nullable=True)
    anomaly_flags: Mapped[list | None] = mapped_column(JSON, nullable=True)
    strengths: Mapped[list | None] = mapped_column(JSON, nullable=True)
    concerns: Mapped[list | None] = mapped_column(JSON, nullable=True)
    recommendations: Mapped[list | None] = mapped_column(JSON, nullable=True)

    # Legacy finalize results
    reflection_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    reflection_color: Mapped[str | None] = mapped_column(String(10), nullable=True)
    reflection_reasons: Mapped[list | None] = mapped_column(JSON, nullable=True)
    quality_breakdown: Mapped[str | None] = mapped_column(Text, nullable=True)
    risk_breakdown: Mapped[str | None] = mapped_column(Text, nullable=True)
    compliance_breakdown: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )
    submitted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
