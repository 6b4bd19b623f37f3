"""Reflection Schemas - request/response contracts for the team and lecturer reflection routes.

Invariants:
    - StartResponse never carries the running or final summary
    - TurnRequest.text is stripped before the route sees it
    - Snake_case field names on the wire, matching the rest of the API

Design Decisions:
    - Separate from ORM models: the transcript is re-shaped (no internal fields)
      before it leaves the service (ADR: DDD boundary)
"""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class TranscriptMessage(BaseModel):
    role: str
    text: str
    timestamp: str | None = None


class StartResponse(BaseModel):
    session_id: str
    status: str
    messages: list[TranscriptMessage]


class TurnRequest(BaseModel):
    """One student message."""
    text: str = Field(..., max_length=4000)

    @field_validator("text", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class TurnResponse(BaseModel):
    assistant_text: str
    ready_to_submit: bool
    status: str


class StatusResponse(BaseModel):
    status: str


class ConfirmResponse(BaseModel):
    submission_id: UUID
    team_health_score: float
    tuckman_stage: str
    tasks: list[str]
    strengths: list[str]


class ResetResponse(BaseModel):
    deleted: int


# ─── Lecturer policy ─────────────────────────────────────────────

class ProfileResponse(BaseModel):
    key: str
    title: str
    green_min: int
    red_max: int


class ProfileListResponse(BaseModel):
    profiles: list[ProfileResponse]


class ReflectionSettingsResponse(BaseModel):
    selected_profile_key: str
    weekly_instructions: str


class ReflectionSettingsUpdate(BaseModel):
    """Lecturer-wide policy applied to sessions created from now on."""
    selected_profile_key: str = Field(..., min_length=1, max_length=64)
    weekly_instructions: str = Field("", max_length=4000)

    @field_validator("selected_profile_key", "weekly_instructions", mode="before")
    @classmethod
    def strip_values(cls, v):
        return v.strip() if isinstance(v, str) else v
