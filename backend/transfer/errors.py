"""Error taxonomy and result values shared by the transfer components."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class NetworkError(str, Enum):
    """Closed set of failure conditions surfaced to the session."""
    NO_CONNECTIVITY = "no_connectivity"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    MALFORMED_PAYLOAD = "malformed_payload"
    TIMEOUT = "timeout"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    SERVER_FAULT = "server_fault"
    UNKNOWN = "unknown"

    @property
    def reason(self) -> str:
        return _REASONS[self]


_REASONS = {
    NetworkError.NO_CONNECTIVITY: "the other device could not be reached",
    NetworkError.UNAUTHORIZED: "the other device refused the request",
    NetworkError.CONFLICT: "the other device reported a conflict",
    NetworkError.MALFORMED_PAYLOAD: "the other device sent an unreadable reply",
    NetworkError.TIMEOUT: "the transfer timed out",
    NetworkError.PAYLOAD_TOO_LARGE: "the data is too large for the other device",
    NetworkError.SERVER_FAULT: "the receiving server failed",
    NetworkError.UNKNOWN: "an unexpected network error occurred",
}


class ServerBindError(OSError):
    """Raised when the receiver listener cannot bind its address."""


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a network operation: either a value or a NetworkError."""
    value: T | None = None
    error: NetworkError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: NetworkError) -> "Result[T]":
        return cls(error=error)
