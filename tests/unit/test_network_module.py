from __future__ import annotations

import pytest

import pairing.network as network


def test_prefers_routed_lan_address(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(network, "_probe_route", lambda: "192.168.1.42")
    monkeypatch.setattr(network, "_resolve_hostname", lambda: ["10.0.0.9"])

    assert network.discover_local_ipv4() == "192.168.1.42"


def test_falls_back_to_hostname_addresses(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(network, "_probe_route", lambda: None)
    monkeypatch.setattr(network, "_resolve_hostname", lambda: ["127.0.1.1", "10.0.0.9"])

    assert network.discover_local_ipv4() == "10.0.0.9"


def test_returns_none_without_lan_address(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(network, "_probe_route", lambda: "8.8.4.4")
    monkeypatch.setattr(network, "_resolve_hostname", lambda: ["127.0.0.1", "169.254.3.3"])

    assert network.discover_local_ipv4() is None


@pytest.mark.parametrize(
    ("candidate", "expected"),
    [("192.168.0.2", True), ("172.16.4.1", True), ("127.0.0.1", False), ("fe80::1", False), ("junk", False)],
)
def test_is_lan_ipv4(candidate: str, expected: bool) -> None:
    assert network._is_lan_ipv4(candidate) is expected
