from __future__ import annotations

from typing import Callable, List, Optional

import pytest
from typer.testing import CliRunner

from cli.app import app
from cli.config import load_config
from models.records import NormalizedSeries
from services.admin import ActionResult, AdminAction
from services.history import HistoryFetchError
from services.live import ListenerState


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.series = NormalizedSeries(categories=("Jan", "Feb"), values=(10.0, 13.0))
        self.fetch_error: Optional[HistoryFetchError] = None
        self.action_calls: List[AdminAction] = []
        self.action_succeeds = True
        self.live_messages = ["21.1", "21.3", "21.0"]
        self.live_final_state = ListenerState.closed
        self.live_counts: List[Optional[int]] = []
        self.closed = False

    def fetch_series(self) -> NormalizedSeries:
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.series

    def run_action(self, action: AdminAction) -> ActionResult:
        self.action_calls.append(action)
        if self.action_succeeds:
            return ActionResult(action=action, succeeded=True, status_code=200, detail="completed")
        return ActionResult(
            action=action,
            succeeded=False,
            status_code=500,
            detail="device responded with status 500",
        )

    def stream_live(self, on_value: Callable[[str], None], count: Optional[int] = None) -> ListenerState:
        self.live_counts.append(count)
        messages = self.live_messages if count is None else self.live_messages[:count]
        for message in messages:
            on_value(message)
        return self.live_final_state

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stub(monkeypatch) -> StubClient:
    client = StubClient(config=None)

    def factory(config):
        client.config = config
        return client

    monkeypatch.setattr("cli.app.DeviceClient", factory)
    return client


def test_history_prints_table(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["--device-url", "http://sensor.local/", "history"])

    assert result.exit_code == 0
    assert "Temperature History" in result.stdout
    assert "Jan   10.00" in result.stdout
    assert "Feb   13.00" in result.stdout
    assert "samples: 2" in result.stdout
    assert stub.config.device_url == "http://sensor.local"
    assert stub.closed is True


def test_history_empty_log(runner: CliRunner, stub: StubClient) -> None:
    stub.series = NormalizedSeries()

    result = runner.invoke(app, ["history"])

    assert result.exit_code == 0
    assert "No samples recorded." in result.stdout


def test_history_failure_exits_non_zero(runner: CliRunner, stub: StubClient) -> None:
    stub.fetch_error = HistoryFetchError("device responded with status 500", status_code=500)

    result = runner.invoke(app, ["history"])

    assert result.exit_code == 1
    assert stub.closed is True


def test_live_prints_readings_in_order(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["live", "--count", "2"])

    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert lines[-2:] == ["21.1", "21.3"]
    assert stub.live_counts == [2]


def test_live_failure_exits_non_zero(runner: CliRunner, stub: StubClient) -> None:
    stub.live_final_state = ListenerState.error
    stub.live_messages = []

    result = runner.invoke(app, ["live"])

    assert result.exit_code == 1


@pytest.mark.parametrize(
    ("command", "action"),
    [
        ("clear-datalog", AdminAction.clear_data_log),
        ("clear-network", AdminAction.clear_network_config),
    ],
)
def test_admin_commands_report_success(runner: CliRunner, stub: StubClient, command, action) -> None:
    result = runner.invoke(app, [command])

    assert result.exit_code == 0
    assert f"{action.value}: done" in result.stdout
    assert stub.action_calls == [action]


def test_admin_command_failure_is_distinct(runner: CliRunner, stub: StubClient) -> None:
    stub.action_succeeds = False

    result = runner.invoke(app, ["clear-datalog"])

    assert result.exit_code == 1
    assert "done" not in result.stdout
    assert stub.action_calls == [AdminAction.clear_data_log]


def test_load_config_derives_live_url(monkeypatch) -> None:
    monkeypatch.delenv("DEVICE_LIVE_URL", raising=False)
    monkeypatch.delenv("DEVICE_TIMEOUT", raising=False)

    config = load_config(device_url="https://sensor.local/")

    assert config.device_url == "https://sensor.local"
    assert config.live_url == "wss://sensor.local/wsden"
    assert config.timeout == 10.0
