"""Team Reflection Routes - the student-facing reflection conversation.

Invariants:
    - Every route requires the team session cookie (api/dependencies.py)
    - Routes are thin: all state logic lives in services/reflection_flow.py
    - Summaries never appear in any response of this router
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from teaminsight.api.dependencies import require_team
from teaminsight.config import Settings, get_settings
from teaminsight.infrastructure.anthropic_client import get_llm_client
from teaminsight.infrastructure.database import get_db
from teaminsight.core.llm_protocol import CompletionClient
from teaminsight.schemas.reflection import (
    ConfirmResponse, ResetResponse, StartResponse, StatusResponse,
    TurnRequest, TurnResponse,
)
from teaminsight.services.reflection_flow import ReflectionFlow

router = APIRouter(prefix="/api/v1/team/reflection", tags=["team-reflection"])


def get_reflection_flow(
    db: AsyncSession = Depends(get_db),
    client: CompletionClient = Depends(get_llm_client),
    settings: Settings = Depends(get_settings),
) -> ReflectionFlow:
    return ReflectionFlow(db, client, settings)


@router.post("/start", response_model=StartResponse)
async def start_reflection(
    team_id: str = Depends(require_team),
    flow: ReflectionFlow = Depends(get_reflection_flow),
):
    """Create or resume the team's active reflection."""
    return await flow.start(team_id)


@router.post("/turn", response_model=TurnResponse)
async def reflection_turn(
    body: TurnRequest,
    team_id: str = Depends(require_team),
    flow: ReflectionFlow = Depends(get_reflection_flow),
):
    return await flow.turn(team_id, body.text)


@router.post("/finish", response_model=StatusResponse)
async def finish_reflection(
    team_id: str = Depends(require_team),
    flow: ReflectionFlow = Depends(get_reflection_flow),
):
    """End the conversation early; the summary stays server-side."""
    return await flow.finish(team_id)


@router.post("/reopen", response_model=StatusResponse)
async def reopen_reflection(
    team_id: str = Depends(require_team),
    flow: ReflectionFlow = Depends(get_reflection_flow),
):
    return await flow.reopen(team_id)


@router.post("/confirm", response_model=ConfirmResponse)
async def confirm_reflection(
    team_id: str = Depends(require_team),
    flow: ReflectionFlow = Depends(get_reflection_flow),
):
    """Submit the ready reflection and publish its score to the team."""
    return await flow.confirm(team_id)


@router.post("/reset", response_model=ResetResponse)
async def reset_reflection(
    team_id: str = Depends(require_team),
    flow: ReflectionFlow = Depends(get_reflection_flow),
):
    return await flow.reset(team_id)
