"""Tests for the session state machine table."""

import pytest

from teaminsight.core.domain_types import SessionStatus
from teaminsight.core.errors import InvalidTransitionError
from teaminsight.core.session_transitions import (
    SessionEvent,
    next_status,
    required_status,
)


def test_turn_not_ready_stays_in_progress():
    assert next_status("in_progress", SessionEvent.TURN_CONTINUE) == SessionStatus.IN_PROGRESS


def test_turn_ready_moves_to_ready_to_submit():
    assert next_status("in_progress", SessionEvent.TURN_READY) == SessionStatus.READY_TO_SUBMIT


def test_finish_moves_to_ready_to_submit():
    assert next_status(SessionStatus.IN_PROGRESS, SessionEvent.FINISH) == SessionStatus.READY_TO_SUBMIT


def test_reopen_moves_back_to_in_progress():
    assert next_status("ready_to_submit", SessionEvent.REOPEN) == SessionStatus.IN_PROGRESS


def test_confirm_moves_to_submitted():
    assert next_status("ready_to_submit", SessionEvent.CONFIRM) == SessionStatus.SUBMITTED


def test_confirm_from_in_progress_raises():
    with pytest.raises(InvalidTransitionError) as exc:
        next_status("in_progress", SessionEvent.CONFIRM)
    assert exc.value.http_status == 409
    assert exc.value.code == "INVALID_TRANSITION"
    assert exc.value.current == "in_progress"
    assert exc.value.event == "confirm"


@pytest.mark.parametrize("event", list(SessionEvent))
def test_submitted_is_terminal(event):
    with pytest.raises(InvalidTransitionError):
        next_status("submitted", event)


def test_required_status():
    assert required_status(SessionEvent.CONFIRM) == SessionStatus.READY_TO_SUBMIT
    assert required_status(SessionEvent.FINISH) == SessionStatus.IN_PROGRESS
