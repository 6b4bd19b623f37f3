"""Reflection Flow - start/turn/finish/reopen/confirm/reset over one team's session.

Invariants:
    - Every operation is scoped by the authenticated team_id
    - Each operation commits exactly once, at the end; an oracle or store
      failure anywhere leaves the session as it was
    - Status changes go through core/session_transitions.py only
    - Readiness is honoured only on a turn whose transcript has a user message
    - confirm writes the session result, the submitted status and the Team
      denormalization in one unit of work
    - The student never receives the running or final summary

Design Decisions:
    - Oracle calls run before the session is mutated so the in-memory row
      never holds half-applied state while awaiting the network
    - Two concurrent starts converge: the loser's insert trips the partial
      unique index and it resumes the winner's session
    - finish stores a draft final summary; confirm reuses it unless reopen
      cleared it
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from teaminsight.config import Settings
from teaminsight.core.domain_types import MessageRole, SessionStatus
from teaminsight.core.errors import (
    ErrorContext, InvalidRequestError, ResourceNotFoundError, SessionConflictError,
)
from teaminsight.core.language_strings import READY_TO_SUBMIT_MESSAGE
from teaminsight.core.llm_protocol import CompletionClient
from teaminsight.core.session_transitions import SessionEvent, next_status, required_status
from teaminsight.core.summary_tasks import MAX_TASKS, extract_tasks_from_summary
from teaminsight.core.transcript import count_user_messages
from teaminsight.models.reflection_session import ReflectionSession
from teaminsight.models.team import Team
from teaminsight.schemas.reflection import (
    ConfirmResponse, ResetResponse, StartResponse, StatusResponse,
    TranscriptMessage, TurnResponse,
)
from teaminsight.services.finalizer import evaluate, render_final_summary, score_evaluation
from teaminsight.services.interviewer import render_next_message
from teaminsight.services.policy_provider import (
    ensure_policy_snapshot, load_session_policy, resolve_effective_policy,
)
from teaminsight.services.session_store import SessionStore
from teaminsight.services.turn_controller import run_controller_turn

logger = logging.getLogger(__name__)

MAX_REASONS = 5
MAX_CONFIRM_STRENGTHS = 2


class ReflectionFlow:
    """One team's reflection operations over a single request's DB session."""

    def __init__(self, db: AsyncSession, client: CompletionClient, settings: Settings):
        self.db = db
        self.client = client
        self.settings = settings
        self.store = SessionStore(db)

    # ─── start ──────────────────────────────────────────────────

    async def start(self, team_id: str) -> StartResponse:
        """Create the team's session, or resume the active one unchanged."""
        session = await self.store.find_active_session(team_id)
        if session is None:
            policy = await resolve_effective_policy(self.db)
            try:
                session = await self.store.create_session(team_id, policy)
            except SessionConflictError:
                session = await self.store.find_active_session(team_id)
                if session is None:
                    raise
                logger.info(
                    "Concurrent start converged on existing session",
                    extra=self._log_extra(session),
                )

        if session.messages:
            logger.info("Reflection session resumed", extra=self._log_extra(session))
            return self._start_response(session)

        await ensure_policy_snapshot(self.db, session)
        policy = await load_session_policy(self.db, session)
        context = self._context(session)
        recent = await self._recent_summaries(team_id)
        result = await run_controller_turn(
            self.client,
            transcript=[],
            prior_answers=session.answers or [],
            prior_summary=session.running_summary or "",
            clarify_count=session.clarify_count or 0,
            turn_count=session.turn_count or 0,
            max_turns=self.settings.reflection_max_turns,
            recent_summaries=recent,
            policy=policy,
            context=context,
        )
        opening = await render_next_message(
            self.client,
            transcript=[],
            directive=result.directive,
            intent=result.intent,
            locale=self.settings.reflection_locale,
            context=context,
        )

        self.store.append_message(session, MessageRole.ASSISTANT, opening)
        self.store.set_summary(session, result.running_summary)
        self.store.set_answers(session, result.answers)
        self.store.set_counters(session, result.turn_count, result.clarify_count)
        await self.db.commit()
        logger.info("Reflection session opened", extra=self._log_extra(session))
        return self._start_response(session)

    # ─── turn ───────────────────────────────────────────────────

    async def turn(self, team_id: str, text: str) -> TurnResponse:
        """Record one student message and produce the assistant's reply."""
        text = (text or "").strip()
        if not text:
            raise InvalidRequestError("Message text is required", "text")

        session = await self.store.find_session_by_status(team_id, SessionStatus.IN_PROGRESS)
        if session is None:
            ready = await self.store.find_session_by_status(
                team_id, SessionStatus.READY_TO_SUBMIT,
            )
            raise SessionConflictError(
                "Reflection is ready to submit" if ready else "No active session",
                ErrorContext(team_id=team_id),
            )

        await ensure_policy_snapshot(self.db, session)
        policy = await load_session_policy(self.db, session)
        context = self._context(session)
        transcript = [
            *(session.messages or []),
            {"role": MessageRole.USER.value, "text": text},
        ]
        recent = await self._recent_summaries(team_id)
        result = await run_controller_turn(
            self.client,
            transcript=transcript,
            prior_answers=session.answers or [],
            prior_summary=session.running_summary or "",
            clarify_count=session.clarify_count or 0,
            turn_count=(session.turn_count or 0) + 1,
            max_turns=self.settings.reflection_max_turns,
            recent_summaries=recent,
            policy=policy,
            context=context,
        )
        ready = result.ready_to_submit and count_user_messages(transcript) > 0
        if ready:
            assistant_text = READY_TO_SUBMIT_MESSAGE
        else:
            assistant_text = await render_next_message(
                self.client,
                transcript=transcript,
                directive=result.directive,
                intent=result.intent,
                locale=self.settings.reflection_locale,
                context=context,
            )

        event = SessionEvent.TURN_READY if ready else SessionEvent.TURN_CONTINUE
        self.store.append_message(session, MessageRole.USER, text)
        self.store.append_message(session, MessageRole.ASSISTANT, assistant_text)
        self.store.set_answers(session, result.answers)
        self.store.set_summary(session, result.running_summary)
        self.store.increment_turn(session)
        self.store.set_counters(session, result.turn_count, result.clarify_count)
        self.store.set_status(session, next_status(session.status, event))
        await self.db.commit()
        logger.info(
            "Reflection session ready to submit" if ready else "Reflection turn recorded",
            extra=self._log_extra(session, turn_count=session.turn_count),
        )
        return TurnResponse(
            assistant_text=assistant_text,
            ready_to_submit=ready,
            status=session.status,
        )

    # ─── finish / reopen ────────────────────────────────────────

    async def finish(self, team_id: str) -> StatusResponse:
        """Close the conversation early and draft the final summary."""
        session = await self._require(team_id, SessionEvent.FINISH, "No active session")
        summary = await render_final_summary(
            self.client,
            answers=session.answers or [],
            running_summary=session.running_summary or "",
            transcript=session.messages or [],
            max_tokens=self.settings.summary_max_tokens,
            context=self._context(session),
        )
        session.final_summary = summary
        self.store.set_status(session, next_status(session.status, SessionEvent.FINISH))
        await self.db.commit()
        logger.info("Reflection session finished", extra=self._log_extra(session))
        return StatusResponse(status=session.status)

    async def reopen(self, team_id: str) -> StatusResponse:
        """Return a ready session to in_progress so the team can add more."""
        session = await self._require(team_id, SessionEvent.REOPEN, "Nothing to reopen")
        session.final_summary = None
        self.store.set_status(session, next_status(session.status, SessionEvent.REOPEN))
        await self.db.commit()
        logger.info("Reflection session reopened", extra=self._log_extra(session))
        return StatusResponse(status=session.status)

    # ─── confirm ────────────────────────────────────────────────

    async def confirm(self, team_id: str) -> ConfirmResponse:
        """Evaluate, submit, and denormalize the outcome onto the team."""
        session = await self._require(team_id, SessionEvent.CONFIRM, "Nothing to confirm")
        team = await self.db.get(Team, team_id)
        if team is None:
            raise ResourceNotFoundError("Team", team_id)

        policy = await load_session_policy(self.db, session)
        context = self._context(session)
        narrative = session.final_summary or await render_final_summary(
            self.client,
            answers=session.answers or [],
            running_summary=session.running_summary or "",
            transcript=session.messages or [],
            max_tokens=self.settings.summary_max_tokens,
            context=context,
        )
        evaluation = await evaluate(
            self.client,
            narrative_summary=narrative,
            answers=session.answers or [],
            transcript=session.messages or [],
            policy=policy,
            context=context,
        )
        outcome = score_evaluation(evaluation, policy.profile)
        now = datetime.now(timezone.utc)
        flags = [f.value for f in evaluation.anomaly_flags]

        session.final_summary = narrative
        session.team_health_score = evaluation.team_health_score
        session.ths_components = {k: dict(v) for k, v in evaluation.components.items()}
        session.tuckman_stage = evaluation.tuckman_stage.value
        session.tuckman_explanation = evaluation.tuckman_explanation
        session.risk_level = evaluation.risk_level
        session.risk_explanation = evaluation.risk_explanation
        session.anomaly_flags = flags
        session.strengths = list(evaluation.strengths)
        session.concerns = list(evaluation.concerns)
        session.recommendations = list(evaluation.recommendations)
        session.reflection_score = outcome.final_score
        session.reflection_color = outcome.color.value
        session.reflection_reasons = list(evaluation.reasons[:MAX_REASONS])
        session.quality_breakdown = evaluation.quality_breakdown
        session.risk_breakdown = evaluation.risk_breakdown
        session.compliance_breakdown = evaluation.compliance_breakdown
        session.submitted_at = now
        self.store.set_status(session, next_status(session.status, SessionEvent.CONFIRM))

        team.status = outcome.color.value
        team.reflection_score = outcome.final_score
        team.team_health_score = evaluation.team_health_score
        team.tuckman_stage = evaluation.tuckman_stage.value
        team.risk_level = evaluation.risk_level
        team.anomaly_flags = list(flags)
        team.reflection_updated_at = now
        await self.db.commit()
        logger.info(
            f"Reflection submitted: score={outcome.final_score}, color={outcome.color.value}",
            extra=self._log_extra(session),
        )

        tasks = extract_tasks_from_summary(narrative) or list(
            evaluation.recommendations[:MAX_TASKS],
        )
        return ConfirmResponse(
            submission_id=session.id,
            team_health_score=evaluation.team_health_score,
            tuckman_stage=evaluation.tuckman_stage.value,
            tasks=tasks,
            strengths=list(evaluation.strengths[:MAX_CONFIRM_STRENGTHS]),
        )

    # ─── reset ──────────────────────────────────────────────────

    async def reset(self, team_id: str) -> ResetResponse:
        """Discard the team's unsubmitted sessions. Idempotent."""
        deleted = await self.store.delete_non_terminal_sessions(team_id)
        await self.db.commit()
        logger.info(f"Reflection reset deleted {deleted} session(s)", extra={"team_id": team_id})
        return ResetResponse(deleted=deleted)

    # ─── helpers ────────────────────────────────────────────────

    async def _require(
        self, team_id: str, event: SessionEvent, conflict_message: str,
    ) -> ReflectionSession:
        """The team's session in the status event needs, else 409."""
        session = await self.store.find_session_by_status(team_id, required_status(event))
        if session is None:
            raise SessionConflictError(conflict_message, ErrorContext(team_id=team_id))
        return session

    async def _recent_summaries(self, team_id: str) -> list[str]:
        return await self.store.get_recent_summaries(
            team_id,
            days=self.settings.recent_summaries_days,
            limit=self.settings.recent_summaries_limit,
        )

    @staticmethod
    def _context(session: ReflectionSession) -> ErrorContext:
        return ErrorContext(team_id=session.team_id, session_id=session.session_id)

    @staticmethod
    def _log_extra(session: ReflectionSession, **extra) -> dict:
        return {
            "team_id": session.team_id,
            "session_id": session.session_id,
            "status": session.status,
            **extra,
        }

    @staticmethod
    def _start_response(session: ReflectionSession) -> StartResponse:
        return StartResponse(
            session_id=session.session_id,
            status=session.status,
            messages=[TranscriptMessage(**m) for m in session.messages or []],
        )
