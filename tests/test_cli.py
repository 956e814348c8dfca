from __future__ import annotations

from typing import Any

import pytest
from typer.testing import CliRunner

from conftest import FakeClient, make_config
from portwalker import cli
from portwalker.core.config import Config
from portwalker.core.errors import ConfigurationError

runner = CliRunner()


@pytest.fixture
def fake_client(monkeypatch: pytest.MonkeyPatch) -> FakeClient:
    client = FakeClient(posts={"/submitSolution": ["well done"]})
    monkeypatch.setattr(cli, "load_config", lambda: make_config())
    monkeypatch.setattr(cli, "HttpClient", lambda: client)
    return client


def _scan_returns(monkeypatch: pytest.MonkeyPatch, result: set[int]) -> list[Any]:
    seen: list[Any] = []

    def fake_scan_range(target: Any, workers: int) -> set[int]:
        seen.append((target, workers))
        return set(result)

    monkeypatch.setattr(cli.port_scan, "scan_range", fake_scan_range)
    return seen


def test_run_walks_every_open_port(monkeypatch: pytest.MonkeyPatch, fake_client: FakeClient) -> None:
    seen = _scan_returns(monkeypatch, {8090, 8080})
    result = runner.invoke(cli.app, ["run"])

    assert result.exit_code == 0, result.output
    assert "Found open ports: [8080, 8090]" in result.output
    assert {port for _, port, _, _ in fake_client.calls} == {8080, 8090}
    assert seen[0][1] == make_config().workers


def test_run_without_open_ports(monkeypatch: pytest.MonkeyPatch, fake_client: FakeClient) -> None:
    _scan_returns(monkeypatch, set())
    result = runner.invoke(cli.app, ["run"])

    assert result.exit_code == 0
    assert cli.NO_OPEN_PORTS in result.output
    assert fake_client.calls == []


def test_scan_only(monkeypatch: pytest.MonkeyPatch, fake_client: FakeClient) -> None:
    _scan_returns(monkeypatch, {22})
    result = runner.invoke(cli.app, ["scan"])

    assert result.exit_code == 0
    assert "[22]" in result.output
    assert fake_client.calls == []


def test_configuration_error_exits_non_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken() -> Config:
        raise ConfigurationError("START_PORT is not set")

    seen = _scan_returns(monkeypatch, {1})
    monkeypatch.setattr(cli, "load_config", broken)
    result = runner.invoke(cli.app, ["run"])

    assert result.exit_code == 1
    assert "START_PORT is not set" in result.output
    assert seen == []
