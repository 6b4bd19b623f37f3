"""Team ORM - the slice of the team record this service reads and writes.

Invariants:
    - team_id is the external identifier carried in the team session cookie
    - Reflection fields are a denormalized copy of the latest submitted session,
      written only by the confirm path

Design Decisions:
    - Team CRUD (members, project metadata) belongs to another service; only
      the columns dashboards read after a reflection are modelled here
"""

from datetime import datetime, timezone

from sqlalchemy import String, Float, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from teaminsight.db.base import Base


class Team(Base):
    """Student project team with its latest reflection outcome."""
    __tablename__ = "teams"

    team_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    project_name: Mapped[str] = mapped_column(
        String(200), nullable=False, default="",
    )
    status: Mapped[str] = mapped_column(
        String(10), nullable=False, default="green",
    )
    reflection_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    team_health_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    tuckman_stage: Mapped[str | None] = mapped_column(String(20), nullable=True)
    risk_level: Mapped[float | None] = mapped_column(Float, nullable=True)
    anomaly_flags: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    reflection_updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
