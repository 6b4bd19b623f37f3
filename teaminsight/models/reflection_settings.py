"""ReflectionSettings ORM - the lecturer-wide selected profile and weekly instructions.

Invariants:
    - Singleton row: id is always SETTINGS_ROW_ID
    - Read only by policy_provider at session creation (or legacy backfill)
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from teaminsight.db.base import Base

SETTINGS_ROW_ID = 1


class ReflectionSettings(Base):
    __tablename__ = "reflection_settings"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, default=SETTINGS_ROW_ID,
    )
    selected_profile_key: Mapped[str | None] = mapped_column(
        String(64), nullable=True,
    )
    weekly_instructions: Mapped[str] = mapped_column(
        Text, nullable=False, default="",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
