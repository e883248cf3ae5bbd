from __future__ import annotations

import pytest

import config


def test_defaults() -> None:
    assert config.RECEIVE_PATH == "/receive"
    assert config.SEND_TIMEOUT > 0
    assert config.SENDER_INFO.startswith(config.APP_NAME)


def test_env_number_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XSHARE_PORT", "9001")

    assert config._env_number("XSHARE_PORT", 8080, int) == 9001


def test_env_number_falls_back_on_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XSHARE_PORT", "eighty")

    assert config._env_number("XSHARE_PORT", 8080, int) == 8080


def test_env_number_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("XSHARE_SEND_TIMEOUT", raising=False)

    assert config._env_number("XSHARE_SEND_TIMEOUT", 10.0, float) == 10.0
