"""Session Transitions - the reflection session state machine as a pure table.

Invariants:
    - submitted is terminal: no event leaves it
    - An event applied from the wrong status raises InvalidTransitionError
    - Every event is legal from exactly one source status
    - Reset is not a transition: it deletes non-terminal sessions outright

Design Decisions:
    - Table lookup over if/else chains: the flow asks "what status does this
      event need?" before calling any oracle, and "where does it lead?" after
"""

from enum import Enum

from teaminsight.core.domain_types import SessionStatus
from teaminsight.core.errors import InvalidTransitionError


class SessionEvent(str, Enum):
    TURN_CONTINUE = "turn_continue"
    TURN_READY = "turn_ready"
    FINISH = "finish"
    REOPEN = "reopen"
    CONFIRM = "confirm"


_TRANSITIONS: dict[SessionEvent, tuple[SessionStatus, SessionStatus]] = {
    SessionEvent.TURN_CONTINUE: (SessionStatus.IN_PROGRESS, SessionStatus.IN_PROGRESS),
    SessionEvent.TURN_READY: (SessionStatus.IN_PROGRESS, SessionStatus.READY_TO_SUBMIT),
    SessionEvent.FINISH: (SessionStatus.IN_PROGRESS, SessionStatus.READY_TO_SUBMIT),
    SessionEvent.REOPEN: (SessionStatus.READY_TO_SUBMIT, SessionStatus.IN_PROGRESS),
    SessionEvent.CONFIRM: (SessionStatus.READY_TO_SUBMIT, SessionStatus.SUBMITTED),
}


def required_status(event: SessionEvent) -> SessionStatus:
    """Status a session must be in for event to apply."""
    return _TRANSITIONS[event][0]


def next_status(current: SessionStatus | str, event: SessionEvent) -> SessionStatus:
    """Target status of event from current."""
    source, target = _TRANSITIONS[event]
    if SessionStatus(current) != source:
        raise InvalidTransitionError(SessionStatus(current).value, event.value)
    return target
