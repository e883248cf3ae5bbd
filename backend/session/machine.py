"""
Session state machine.

``transition(state, event)`` is total: an event that does not apply to the
current state leaves it unchanged. It performs no I/O; the coordinator runs
the network work and feeds the outcomes back in as events.
"""

import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict

from pairing.descriptor import ConnectionDescriptor, ParseError, decode
from session.state import SessionStage, SessionState
from transfer.models import Role

logger = logging.getLogger(__name__)

INVALID_PAIRING_CODE = "invalid pairing code"
ADDRESS_UNAVAILABLE = "device address unavailable"


class EventKind(str, Enum):
    CHOOSE_ROLE = "choose_role"
    ROLE_LOADED = "role_loaded"
    RECEIVER_STARTED = "receiver_started"
    DESCRIPTOR_OBTAINED = "descriptor_obtained"
    SEND_SUCCEEDED = "send_succeeded"
    SERVER_NOTIFIED_RECEIVED = "server_notified_received"
    FAILED = "failed"
    RESET = "reset"


class SessionEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: EventKind
    role: Role | None = None
    descriptor: ConnectionDescriptor | None = None
    text: str | None = None
    payload: str | None = None
    reason: str | None = None

    @classmethod
    def choose_role(cls, role: Role) -> "SessionEvent":
        return cls(kind=EventKind.CHOOSE_ROLE, role=role)

    @classmethod
    def role_loaded(cls) -> "SessionEvent":
        return cls(kind=EventKind.ROLE_LOADED)

    @classmethod
    def receiver_started(cls, descriptor: ConnectionDescriptor) -> "SessionEvent":
        return cls(kind=EventKind.RECEIVER_STARTED, descriptor=descriptor)

    @classmethod
    def descriptor_obtained(cls, text: str) -> "SessionEvent":
        return cls(kind=EventKind.DESCRIPTOR_OBTAINED, text=text)

    @classmethod
    def send_succeeded(cls, payload: str) -> "SessionEvent":
        return cls(kind=EventKind.SEND_SUCCEEDED, payload=payload)

    @classmethod
    def server_notified_received(cls, payload: str) -> "SessionEvent":
        return cls(kind=EventKind.SERVER_NOTIFIED_RECEIVED, payload=payload)

    @classmethod
    def failed(cls, reason: str) -> "SessionEvent":
        return cls(kind=EventKind.FAILED, reason=reason)

    @classmethod
    def reset(cls) -> "SessionEvent":
        return cls(kind=EventKind.RESET)


# Stages in which work is pending and a failure can still land.
_FAILABLE = frozenset({
    SessionStage.ROLE_CHOSEN_LOADING,
    SessionStage.RECEIVER_STARTING,
    SessionStage.SENDER_AWAITING_DESCRIPTOR,
    SessionStage.SENDER_READY,
    SessionStage.RECEIVER_WAITING,
})


def _on_descriptor(text: str | None) -> SessionState:
    decoded = decode(text)
    if isinstance(decoded, ParseError):
        logger.info(f"Rejected pairing code {decoded.text!r}: {decoded.reason}")
        return SessionState.error(INVALID_PAIRING_CODE, Role.SENDER)
    return SessionState.sender_ready(decoded)


def transition(state: SessionState, event: SessionEvent) -> SessionState:
    stage = state.stage
    kind = event.kind

    if kind is EventKind.RESET:
        return SessionState.selection()

    if kind is EventKind.CHOOSE_ROLE and stage is SessionStage.SELECTION and event.role:
        return SessionState.role_chosen_loading(event.role)

    if kind is EventKind.ROLE_LOADED and stage is SessionStage.ROLE_CHOSEN_LOADING:
        if state.role is Role.SENDER:
            return SessionState.sender_awaiting_descriptor()
        return SessionState.receiver_starting()

    if kind is EventKind.RECEIVER_STARTED and stage is SessionStage.RECEIVER_STARTING:
        return SessionState.receiver_waiting(event.descriptor)

    if kind is EventKind.DESCRIPTOR_OBTAINED and stage is SessionStage.SENDER_AWAITING_DESCRIPTOR:
        return _on_descriptor(event.text)

    if kind is EventKind.SEND_SUCCEEDED and stage is SessionStage.SENDER_READY:
        return SessionState.sender_completed(event.payload)

    if kind is EventKind.SERVER_NOTIFIED_RECEIVED and stage is SessionStage.RECEIVER_WAITING:
        return SessionState.receiver_completed(event.payload)

    if kind is EventKind.FAILED and stage in _FAILABLE:
        return SessionState.error(event.reason or "unknown error", state.role)

    logger.debug(f"Ignoring {kind.value} in {stage.value}")
    return state


class SessionStateMachine:
    """Holds the current state and advances it one event at a time.

    Not thread-safe; the owner serializes calls to ``apply``.
    """

    def __init__(self, initial: SessionState | None = None) -> None:
        self._state = initial or SessionState.selection()

    @property
    def state(self) -> SessionState:
        return self._state

    def apply(self, event: SessionEvent) -> SessionState | None:
        """Advance on ``event``. Returns the new state, or None if unchanged."""
        previous = self._state
        current = transition(previous, event)
        if current == previous:
            return None
        self._state = current
        logger.info(f"Session {previous} -> {current}")
        return current
