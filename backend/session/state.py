"""Session states, one model tagged by stage."""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from pairing.descriptor import ConnectionDescriptor, encode
from transfer.models import Role


class SessionStage(str, Enum):
    SELECTION = "selection"
    ROLE_CHOSEN_LOADING = "role_chosen_loading"
    SENDER_AWAITING_DESCRIPTOR = "sender_awaiting_descriptor"
    SENDER_READY = "sender_ready"
    SENDER_COMPLETED = "sender_completed"
    RECEIVER_STARTING = "receiver_starting"
    RECEIVER_WAITING = "receiver_waiting"
    RECEIVER_COMPLETED = "receiver_completed"
    ERROR = "error"


TERMINAL_STAGES = frozenset({SessionStage.SENDER_COMPLETED, SessionStage.RECEIVER_COMPLETED})


class SessionState(BaseModel):
    """The current session. Only the fields relevant to ``stage`` are set."""
    model_config = ConfigDict(frozen=True)

    stage: SessionStage
    role: Role | None = None
    descriptor: ConnectionDescriptor | None = None
    payload: str | None = None
    reason: str | None = None

    @classmethod
    def selection(cls) -> "SessionState":
        return cls(stage=SessionStage.SELECTION)

    @classmethod
    def role_chosen_loading(cls, role: Role) -> "SessionState":
        return cls(stage=SessionStage.ROLE_CHOSEN_LOADING, role=role)

    @classmethod
    def sender_awaiting_descriptor(cls) -> "SessionState":
        return cls(stage=SessionStage.SENDER_AWAITING_DESCRIPTOR, role=Role.SENDER)

    @classmethod
    def sender_ready(cls, descriptor: ConnectionDescriptor) -> "SessionState":
        return cls(stage=SessionStage.SENDER_READY, role=Role.SENDER, descriptor=descriptor)

    @classmethod
    def sender_completed(cls, payload: str) -> "SessionState":
        return cls(stage=SessionStage.SENDER_COMPLETED, role=Role.SENDER, payload=payload)

    @classmethod
    def receiver_starting(cls) -> "SessionState":
        return cls(stage=SessionStage.RECEIVER_STARTING, role=Role.RECEIVER)

    @classmethod
    def receiver_waiting(cls, descriptor: ConnectionDescriptor) -> "SessionState":
        return cls(stage=SessionStage.RECEIVER_WAITING, role=Role.RECEIVER, descriptor=descriptor)

    @classmethod
    def receiver_completed(cls, payload: str) -> "SessionState":
        return cls(stage=SessionStage.RECEIVER_COMPLETED, role=Role.RECEIVER, payload=payload)

    @classmethod
    def error(cls, reason: str, role: Role | None = None) -> "SessionState":
        return cls(stage=SessionStage.ERROR, role=role, reason=reason)

    @property
    def is_terminal(self) -> bool:
        return self.stage in TERMINAL_STAGES

    @property
    def pairing_code(self) -> str | None:
        if self.descriptor is None:
            return None
        return encode(self.descriptor)

    def __str__(self) -> str:
        detail = self.pairing_code or self.reason or self.payload
        return f"{self.stage.value}({detail})" if detail is not None else self.stage.value
