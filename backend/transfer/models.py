"""Pydantic models for the transfer wire protocol and session roles."""

import time
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def now_millis() -> int:
    return int(time.time() * 1000)


class Role(str, Enum):
    SENDER = "sender"
    RECEIVER = "receiver"


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class TransferRequest(WireModel):
    """Body of ``POST /receive``, produced by the sender."""
    payload: str
    sent_at_epoch_millis: int = Field(default_factory=now_millis)
    sender_info: str | None = None


class TransferResponse(WireModel):
    """Acknowledgment returned by the receiver."""
    accepted: bool
    message: str
    responded_at_epoch_millis: int = Field(default_factory=now_millis)
    received_length: int = 0

    @classmethod
    def accept(cls, request: TransferRequest) -> "TransferResponse":
        return cls(accepted=True, message="ok", received_length=len(request.payload))

    @classmethod
    def reject(cls, reason: str) -> "TransferResponse":
        return cls(accepted=False, message=reason, received_length=0)
