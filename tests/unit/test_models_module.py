from __future__ import annotations

import json

from transfer.errors import NetworkError, Result
from transfer.models import TransferRequest, TransferResponse


def test_request_serializes_with_camel_case_keys() -> None:
    request = TransferRequest(payload="hello", sent_at_epoch_millis=42, sender_info="tester")

    assert request.to_wire() == {
        "payload": "hello",
        "sentAtEpochMillis": 42,
        "senderInfo": "tester",
    }


def test_request_decodes_wire_json_and_ignores_unknown_keys() -> None:
    body = json.dumps({"payload": "hi", "sentAtEpochMillis": 7, "senderInfo": None, "extra": 1})

    request = TransferRequest.model_validate_json(body)

    assert request.payload == "hi"
    assert request.sent_at_epoch_millis == 7
    assert request.sender_info is None


def test_request_timestamp_defaults_to_now() -> None:
    request = TransferRequest(payload="x")

    assert request.sent_at_epoch_millis > 1_600_000_000_000


def test_accept_reports_payload_length() -> None:
    response = TransferResponse.accept(TransferRequest(payload="héllo 👋"))

    assert response.accepted is True
    assert response.message == "ok"
    assert response.received_length == 7


def test_reject_reports_zero_length() -> None:
    wire = TransferResponse.reject("bad body").to_wire()

    assert wire["accepted"] is False
    assert wire["message"] == "bad body"
    assert wire["receivedLength"] == 0
    assert "respondedAtEpochMillis" in wire


def test_result_success_and_failure() -> None:
    ok = Result.success("value")
    failed = Result.failure(NetworkError.TIMEOUT)

    assert ok.ok and ok.value == "value" and ok.error is None
    assert not failed.ok and failed.error is NetworkError.TIMEOUT


def test_every_network_error_has_a_reason() -> None:
    for error in NetworkError:
        assert error.reason
