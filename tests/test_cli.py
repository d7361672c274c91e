from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import pytest
import typer
from typer.testing import CliRunner

from cli.app import app, celsius_to_fahrenheit
from cli.client import ApiClient
from cli.config import CLIConfig, load_config

READING = {
    "waterLevel": 12.5,
    "temperatureCelsius": 28.3,
    "temperatureFahrenheit": 82.9,
    "timestamp": "2024-01-01 05:30:00",
    "id": "1704067200000",
}


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.sent: List[tuple[float, float, float]] = []
        self.list_calls: List[Optional[int]] = []
        self.latest: Optional[Dict[str, Any]] = READING
        self.closed = False

    def send_reading(self, water_level: float, celsius: float, fahrenheit: float) -> Dict[str, Any]:
        self.sent.append((water_level, celsius, fahrenheit))
        return {
            "success": True,
            "message": "Data stored locally (fallback)",
            "latestData": {**READING, "waterLevel": water_level},
        }

    def list_readings(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        self.list_calls.append(limit)
        return [READING, {**READING, "id": "1704067100000"}]

    def latest_reading(self) -> Optional[Dict[str, Any]]:
        return self.latest

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stub(monkeypatch) -> StubClient:
    stub = StubClient(config=None)

    def factory(config):
        stub.config = config
        return stub

    monkeypatch.setattr("cli.app.ApiClient", factory)
    return stub


def test_send_derives_fahrenheit_when_omitted(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["send", "--water-level", "12.5", "--celsius", "28.3"])

    assert result.exit_code == 0
    assert "Data stored locally (fallback)" in result.stdout
    assert "water_level: 12.5" in result.stdout
    assert stub.sent == [(12.5, 28.3, celsius_to_fahrenheit(28.3))]
    assert stub.closed is True


def test_send_passes_explicit_fahrenheit(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["send", "-w", "3", "-c", "20", "-f", "70"])

    assert result.exit_code == 0
    assert stub.sent == [(3.0, 20.0, 70.0)]


def test_list_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["--base-url", "http://sensors:3000/", "list", "--limit", "2"])

    assert result.exit_code == 0
    assert "Readings (2)" in result.stdout
    assert "1704067100000" in result.stdout
    assert stub.list_calls == [2]
    assert stub.config.base_url == "http://sensors:3000"


def test_latest_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["latest"])

    assert result.exit_code == 0
    assert "Latest reading" in result.stdout
    assert "celsius: 28.3" in result.stdout


def test_latest_command_without_data(runner: CliRunner, stub: StubClient) -> None:
    stub.latest = None

    result = runner.invoke(app, ["latest"])

    assert result.exit_code == 1


def test_celsius_to_fahrenheit() -> None:
    assert celsius_to_fahrenheit(0) == 32.0
    assert celsius_to_fahrenheit(100) == 212.0
    assert celsius_to_fahrenheit(-40) == -40.0


def test_load_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://example:9000/")
    monkeypatch.setenv("CLI_TIMEOUT", "2.5")

    config = load_config()

    assert config == CLIConfig(base_url="http://example:9000", timeout=2.5)


def test_load_config_ignores_invalid_timeout(monkeypatch) -> None:
    monkeypatch.setenv("CLI_TIMEOUT", "soon")

    assert load_config().timeout == 10.0


def _client_with(handler) -> ApiClient:
    client = ApiClient(CLIConfig(base_url="http://test"))
    client.close()
    client._client = httpx.Client(base_url="http://test", transport=httpx.MockTransport(handler))
    return client


def test_api_client_posts_wire_payload() -> None:
    seen: Dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = request.read()
        return httpx.Response(
            200, json={"success": True, "message": "ok", "latestData": READING}
        )

    client = _client_with(handler)
    payload = client.send_reading(12.5, 28.3, 82.9)

    assert seen["path"] == "/api/sensor-data"
    assert b'"temperatureCelsius":28.3' in seen["body"].replace(b" ", b"")
    assert payload["latestData"]["id"] == READING["id"]


def test_api_client_latest_returns_none_on_not_found() -> None:
    client = _client_with(
        lambda request: httpx.Response(404, json={"success": False, "message": "No data available"})
    )

    assert client.latest_reading() is None


def test_api_client_reports_server_message() -> None:
    client = _client_with(
        lambda request: httpx.Response(400, json={"success": False, "message": "Missing required fields"})
    )

    with pytest.raises(typer.Exit):
        client.send_reading(1, 2, 3)
