from __future__ import annotations

import pytest
from pydantic import ValidationError

from pairing.descriptor import ConnectionDescriptor, ParseError, decode, encode


def test_encode_produces_host_colon_port() -> None:
    descriptor = ConnectionDescriptor(host="192.168.1.42", port=8080)

    assert encode(descriptor) == "192.168.1.42:8080"
    assert str(descriptor) == "192.168.1.42:8080"


@pytest.mark.parametrize(
    ("host", "port"),
    [("192.168.1.42", 8080), ("laptop.local", 1), ("10.0.0.7", 65535)],
)
def test_decode_inverts_encode(host: str, port: int) -> None:
    descriptor = ConnectionDescriptor(host=host, port=port)

    assert decode(encode(descriptor)) == descriptor


@pytest.mark.parametrize(
    "text",
    ["not-a-port", "", "host:99999", "host:0", ":8080", "host:", "host:80a", "host:-1", "a b:80"],
)
def test_decode_rejects_malformed_codes(text: str) -> None:
    result = decode(text)

    assert isinstance(result, ParseError)
    assert result.reason


def test_decode_splits_on_first_colon_only() -> None:
    # "80:90" is not a port, so the whole code is rejected
    assert isinstance(decode("host:80:90"), ParseError)


def test_decode_ignores_surrounding_whitespace() -> None:
    assert decode("  10.0.0.2:9001\n") == ConnectionDescriptor(host="10.0.0.2", port=9001)


def test_decode_never_raises_on_non_text() -> None:
    assert isinstance(decode(None), ParseError)  # type: ignore[arg-type]


def test_descriptor_validates_port_range_and_host() -> None:
    with pytest.raises(ValidationError):
        ConnectionDescriptor(host="10.0.0.2", port=0)
    with pytest.raises(ValidationError):
        ConnectionDescriptor(host="10.0.0.2", port=65536)
    with pytest.raises(ValidationError):
        ConnectionDescriptor(host="", port=80)
    with pytest.raises(ValidationError):
        ConnectionDescriptor(host="fe80::1", port=80)


def test_descriptor_is_immutable() -> None:
    descriptor = ConnectionDescriptor(host="10.0.0.2", port=80)

    with pytest.raises(ValidationError):
        descriptor.port = 81  # type: ignore[misc]


def test_decode_rejects_oversized_port_without_raising() -> None:
    result = decode("host:" + "9" * 5000)

    assert isinstance(result, ParseError)
    assert "out of range" in result.reason
