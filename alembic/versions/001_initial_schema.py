"""Initial schema - teams, reflection sessions, profiles, settings.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_ACTIVE_STATUS_PREDICATE = sa.text("status IN ('in_progress', 'ready_to_submit')")


def upgrade() -> None:
    op.create_table(
        "teams",
        sa.Column("team_id", sa.String(64), primary_key=True),
        sa.Column("project_name", sa.String(200), nullable=False, server_default=""),
        sa.Column("status", sa.String(10), nullable=False, server_default="green"),
        sa.Column("reflection_score", sa.Float, nullable=True),
        sa.Column("team_health_score", sa.Float, nullable=True),
        sa.Column("tuckman_stage", sa.String(20), nullable=True),
        sa.Column("risk_level", sa.Float, nullable=True),
        sa.Column("anomaly_flags", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("reflection_updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "reflection_profiles",
        sa.Column("key", sa.String(64), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("controller_addendum", sa.Text, nullable=False, server_default=""),
        sa.Column("evaluator_addendum", sa.Text, nullable=False, server_default=""),
        sa.Column("green_min", sa.Integer, nullable=False, server_default="75"),
        sa.Column("red_max", sa.Integer, nullable=False, server_default="45"),
    )

    op.create_table(
        "reflection_settings",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("selected_profile_key", sa.String(64), nullable=True),
        sa.Column("weekly_instructions", sa.Text, nullable=False, server_default=""),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "reflection_sessions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "team_id", sa.String(64),
            sa.ForeignKey("teams.team_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("session_id", sa.String(64), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="in_progress"),
        sa.Column("messages", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("answers", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("running_summary", sa.Text, nullable=False, server_default=""),
        sa.Column("turn_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("clarify_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("profile_key", sa.String(64), nullable=True),
        sa.Column("weekly_instructions_snapshot", sa.Text, nullable=True),
        sa.Column("final_summary", sa.Text, nullable=True),
        sa.Column("team_health_score", sa.Float, nullable=True),
        sa.Column("ths_components", sa.JSON, nullable=True),
        sa.Column("tuckman_stage", sa.String(20), nullable=True),
        sa.Column("tuckman_explanation", sa.Text, nullable=True),
        sa.Column("risk_level", sa.Float, nullable=True),
        sa.Column("risk_explanation", sa.Text, nullable=True),
        sa.Column("anomaly_flags", sa.JSON, nullable=True),
        sa.Column("strengths", sa.JSON, nullable=True),
        sa.Column("concerns", sa.JSON, nullable=True),
        sa.Column("recommendations", sa.JSON, nullable=True),
        sa.Column("reflection_score", sa.Float, nullable=True),
        sa.Column("reflection_color", sa.String(10), nullable=True),
        sa.Column("reflection_reasons", sa.JSON, nullable=True),
        sa.Column("quality_breakdown", sa.Text, nullable=True),
        sa.Column("risk_breakdown", sa.Text, nullable=True),
        sa.Column("compliance_breakdown", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("team_id", "session_id", name="uq_reflection_sessions_team_session"),
    )
    op.create_index(
        "ix_reflection_sessions_team_id", "reflection_sessions", ["team_id"],
    )
    op.create_index(
        "uq_reflection_sessions_active_team",
        "reflection_sessions",
        ["team_id"],
        unique=True,
        postgresql_where=_ACTIVE_STATUS_PREDICATE,
    )


def downgrade() -> None:
    op.drop_index("uq_reflection_sessions_active_team", table_name="reflection_sessions")
    op.drop_index("ix_reflection_sessions_team_id", table_name="reflection_sessions")
    op.drop_table("reflection_sessions")
    op.drop_table("reflection_settings")
    op.drop_table("reflection_profiles")
    op.drop_table("teams")
