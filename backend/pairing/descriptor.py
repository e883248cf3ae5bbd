"""
Connection descriptor and its pairing-code text form.

A pairing code is plain text ``"<host>:<port>"``, e.g. ``"192.168.1.42:8080"``.
"""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

MIN_PORT = 1
MAX_PORT = 65535


class ConnectionDescriptor(BaseModel):
    """Host/port pair identifying a reachable receiver."""
    model_config = ConfigDict(frozen=True)

    host: str
    port: int = Field(ge=MIN_PORT, le=MAX_PORT)

    @field_validator("host")
    @classmethod
    def _check_host(cls, value: str) -> str:
        if not value:
            raise ValueError("host must not be empty")
        if ":" in value:
            raise ValueError("host must not contain ':'")
        if not value.isprintable() or any(ch.isspace() for ch in value):
            raise ValueError("host must be a printable token")
        return value

    def __str__(self) -> str:
        return encode(self)


@dataclass(frozen=True)
class ParseError:
    """Why a pairing code could not be decoded."""
    text: str
    reason: str


def encode(descriptor: ConnectionDescriptor) -> str:
    return f"{descriptor.host}:{descriptor.port}"


def decode(text: str) -> ConnectionDescriptor | ParseError:
    """Parse a pairing code. Never raises; failures come back as ParseError."""
    if not isinstance(text, str):
        return ParseError(repr(text), "pairing code must be text")

    stripped = text.strip()
    host, sep, port_text = stripped.partition(":")
    if not sep or not host or not port_text:
        return ParseError(text, "expected <host>:<port>")
    if not (port_text.isascii() and port_text.isdigit()):
        return ParseError(text, f"port {port_text!r} is not a number")
    if len(port_text) > len(str(MAX_PORT)):
        return ParseError(text, f"port {port_text[:8]}... out of range {MIN_PORT}-{MAX_PORT}")

    port = int(port_text)
    if not MIN_PORT <= port <= MAX_PORT:
        return ParseError(text, f"port {port} out of range {MIN_PORT}-{MAX_PORT}")

    try:
        return ConnectionDescriptor(host=host, port=port)
    except ValidationError as e:
        return ParseError(text, e.errors()[0]["msg"])
