from __future__ import annotations

import asyncio

import pytest

import main
from pairing.descriptor import ConnectionDescriptor
from session.state import SessionStage
from transfer.client import TransferClient
from transfer.models import TransferRequest


def test_help_runs(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        main.main(["--help"])

    assert exc.value.code == 0
    assert "usage:" in capsys.readouterr().out.lower()


def test_command_is_required() -> None:
    with pytest.raises(SystemExit) as exc:
        main.main([])

    assert exc.value.code == 2


def test_send_rejects_blank_text(capsys: pytest.CaptureFixture[str]) -> None:
    assert main.main(["send", "127.0.0.1:9", "  "]) == 2
    assert "nothing to send" in capsys.readouterr().err


def test_send_with_bad_code_reports_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert main.main(["send", "not-a-code", "hello"]) == 1
    assert "invalid pairing code" in capsys.readouterr().err


def test_receive_then_send(free_port: int, capsys: pytest.CaptureFixture[str]) -> None:
    async def scenario():
        receiving = asyncio.create_task(main.receive(free_port, "127.0.0.1"))
        target = ConnectionDescriptor(host="127.0.0.1", port=free_port)
        client = TransferClient(timeout=2)
        for _ in range(100):
            result = await client.send(target, TransferRequest(payload="from the cli"))
            if result.ok:
                break
            await asyncio.sleep(0.05)
        return await asyncio.wait_for(receiving, timeout=10)

    state = asyncio.run(scenario())

    assert state.stage is SessionStage.RECEIVER_COMPLETED
    assert main._report(state) == 0
    out = capsys.readouterr().out
    assert f"Pairing code: 127.0.0.1:{free_port}" in out
    assert "from the cli" in out
