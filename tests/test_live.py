"""Tests for the live stream listener and its display sink."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional, Union

from websockets.exceptions import ConnectionClosedError, InvalidURI

from services.live import ListenerState, LiveStreamListener, LiveValueSink


class FakeConnection:
    def __init__(
        self,
        messages: Iterable[Union[str, bytes]],
        hold_open: bool = False,
        drop_with: Optional[BaseException] = None,
    ) -> None:
        self._messages = list(messages)
        self._hold_open = hold_open
        self._drop_with = drop_with
        self.closed = False

    async def __aenter__(self) -> "FakeConnection":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.closed = True

    def __aiter__(self) -> "FakeConnection":
        return self

    async def __anext__(self) -> Union[str, bytes]:
        if self._messages:
            return self._messages.pop(0)
        if self._drop_with is not None:
            raise self._drop_with
        if self._hold_open:
            await asyncio.Event().wait()
        raise StopAsyncIteration


class FakeConnector:
    """Hands out scripted connections; an exception entry fails that attempt."""

    def __init__(self, *attempts) -> None:
        self._attempts = list(attempts)
        self.urls: List[str] = []

    def __call__(self, url: str):
        self.urls.append(url)
        attempt = self._attempts.pop(0)
        if isinstance(attempt, BaseException):
            raise attempt
        return attempt


def _recording_sink() -> tuple[LiveValueSink, List[str]]:
    sink = LiveValueSink()
    seen: List[str] = []
    sink.subscribe(seen.append)
    return sink, seen


def test_messages_overwrite_sink_in_arrival_order() -> None:
    sink, seen = _recording_sink()
    connection = FakeConnection(["21.1", "21.3", "21.0"])
    listener = LiveStreamListener("ws://device/wsden", sink, connect=FakeConnector(connection))

    asyncio.run(listener.run())

    assert seen == ["21.1", "21.3", "21.0"]
    assert sink.value == "21.0"
    assert sink.message_count == 3
    assert sink.updated_at is not None
    assert listener.state is ListenerState.closed
    assert connection.closed is True


def test_bytes_frames_are_decoded() -> None:
    sink, _ = _recording_sink()
    connector = FakeConnector(FakeConnection([b"22.5", b"\xff"]))
    listener = LiveStreamListener("ws://device/wsden", sink, connect=connector)

    asyncio.run(listener.run())

    assert sink.value == "\ufffd"
    assert sink.message_count == 2


def test_max_messages_stops_listener() -> None:
    sink, seen = _recording_sink()
    connection = FakeConnection(["1", "2", "3"], hold_open=True)
    listener = LiveStreamListener("ws://device/wsden", sink, connect=FakeConnector(connection))

    asyncio.run(listener.run(max_messages=2))

    assert seen == ["1", "2"]
    assert listener.state is ListenerState.closed


def test_error_is_terminal_without_reconnect_delay() -> None:
    sink, seen = _recording_sink()
    connector = FakeConnector(ConnectionRefusedError("refused"))
    listener = LiveStreamListener("ws://device/wsden", sink, connect=connector)

    asyncio.run(listener.run())

    assert listener.state is ListenerState.error
    assert seen == []
    assert connector.urls == ["ws://device/wsden"]


def test_error_reconnects_when_delay_configured() -> None:
    sink, seen = _recording_sink()
    connector = FakeConnector(
        InvalidURI("ws://device/wsden", "bad handshake"),
        OSError("network down"),
        FakeConnection(["20.0"]),
    )
    listener = LiveStreamListener(
        "ws://device/wsden", sink, reconnect_delay=0.01, connect=connector
    )

    asyncio.run(listener.run())

    assert len(connector.urls) == 3
    assert seen == ["20.0"]
    assert listener.state is ListenerState.closed


def test_stop_cancels_running_listener() -> None:
    sink, seen = _recording_sink()
    connection = FakeConnection(["19.5"], hold_open=True)
    listener = LiveStreamListener("ws://device/wsden", sink, connect=FakeConnector(connection))

    async def scenario() -> ListenerState:
        listener.start()
        for _ in range(50):
            if sink.message_count:
                break
            await asyncio.sleep(0.01)
        observed = listener.state
        await listener.stop()
        return observed

    observed = asyncio.run(scenario())

    assert observed is ListenerState.open
    assert seen == ["19.5"]
    assert listener.state is ListenerState.closed
    assert connection.closed is True


def test_unexpected_error_is_logged_and_terminal(caplog) -> None:
    sink, seen = _recording_sink()
    connector = FakeConnector(
        ValueError("Port could not be cast to integer value as 'notaport'"),
        FakeConnection(["never read"]),
    )
    listener = LiveStreamListener(
        "ws://device:notaport/wsden", sink, reconnect_delay=0.01, connect=connector
    )

    with caplog.at_level(logging.INFO, logger="services.live"):
        asyncio.run(listener.run())

    assert listener.state is ListenerState.error
    assert connector.urls == ["ws://device:notaport/wsden"]
    assert seen == []
    failures = [record for record in caplog.records if record.levelno == logging.ERROR]
    assert len(failures) == 1
    assert getattr(failures[0], "reason") == "ValueError"
    assert getattr(failures[0], "endpoint") == "ws://device:notaport/wsden"
    assert failures[0].exc_info is not None


def test_started_listener_reports_unexpected_error() -> None:
    sink, _ = _recording_sink()
    connector = FakeConnector(ValueError("bad port"))
    listener = LiveStreamListener("ws://device/wsden", sink, reconnect_delay=0.01, connect=connector)

    async def scenario() -> ListenerState:
        task = listener.start()
        await asyncio.wait_for(task, timeout=1.0)
        observed = listener.state
        await listener.stop()
        return observed

    assert asyncio.run(scenario()) is ListenerState.error


def test_dropped_connection_reconnects(caplog) -> None:
    sink, seen = _recording_sink()
    connector = FakeConnector(
        FakeConnection(["21.1", "21.3"], drop_with=ConnectionClosedError(None, None)),
        FakeConnection(["21.0"]),
    )
    listener = LiveStreamListener(
        "ws://device/wsden", sink, reconnect_delay=0.01, connect=connector
    )

    with caplog.at_level(logging.INFO, logger="services.live"):
        asyncio.run(listener.run())

    states = [
        getattr(record, "state")
        for record in caplog.records
        if record.name == "services.live" and hasattr(record, "state")
    ]
    assert states == ["connecting", "open", "error", "connecting", "open", "closed"]
    assert seen == ["21.1", "21.3", "21.0"]
    assert len(connector.urls) == 2
    assert listener.state is ListenerState.closed
