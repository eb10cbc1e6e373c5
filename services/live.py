"""Live reading stream from the device's WebSocket channel."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from threading import Lock
from typing import Any, AsyncContextManager, Callable, List, Optional, Union

import websockets
from websockets.exceptions import WebSocketException

logger = logging.getLogger(__name__)

ConnectFactory = Callable[[str], AsyncContextManager[Any]]
SinkSubscriber = Callable[[str], None]


class ListenerState(str, Enum):
    """Connection lifecycle of the live channel."""

    connecting = "connecting"
    open = "open"
    closed = "closed"
    error = "error"


class LiveValueSink:
    """Display sink holding only the most recent live value."""

    def __init__(self) -> None:
        self._value: Optional[str] = None
        self._updated_at: Optional[datetime] = None
        self._count = 0
        self._subscribers: List[SinkSubscriber] = []
        self._lock = Lock()

    @property
    def value(self) -> Optional[str]:
        with self._lock:
            return self._value

    @property
    def updated_at(self) -> Optional[datetime]:
        with self._lock:
            return self._updated_at

    @property
    def message_count(self) -> int:
        with self._lock:
            return self._count

    def subscribe(self, callback: SinkSubscriber) -> None:
        self._subscribers.append(callback)

    def update(self, text: str) -> None:
        with self._lock:
            self._value = text
            self._updated_at = datetime.now(timezone.utc)
            self._count += 1
        for callback in self._subscribers:
            callback(text)


def _as_text(message: Union[str, bytes]) -> str:
    if isinstance(message, bytes):
        return message.decode("utf-8", errors="replace")
    return message


class LiveStreamListener:
    """Pushes every inbound frame, verbatim, into a :class:`LiveValueSink`.

    With ``reconnect_delay`` set, a failed or dropped connection is retried
    after that many seconds; otherwise the ``error`` state is terminal. A
    clean close by the device always ends the listener.
    """

    def __init__(
        self,
        url: str,
        sink: LiveValueSink,
        reconnect_delay: Optional[float] = None,
        connect: Optional[ConnectFactory] = None,
    ) -> None:
        self.url = url
        self.sink = sink
        self.reconnect_delay = reconnect_delay
        self._connect: ConnectFactory = connect or websockets.connect
        self._state = ListenerState.closed
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def state(self) -> ListenerState:
        return self._state

    def _set_state(self, state: ListenerState) -> None:
        if state is self._state:
            return
        self._state = state
        logger.info("Live channel %s", state.value, extra={"state": state.value, "endpoint": self.url})

    async def run(self, max_messages: Optional[int] = None) -> None:
        received = 0
        while True:
            self._set_state(ListenerState.connecting)
            try:
                async with self._connect(self.url) as connection:
                    self._set_state(ListenerState.open)
                    async for message in connection:
                        self.sink.update(_as_text(message))
                        received += 1
                        if max_messages is not None and received >= max_messages:
                            break
            except asyncio.CancelledError:
                self._set_state(ListenerState.closed)
                raise
            except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
                self._set_state(ListenerState.error)
                logger.warning(
                    "Live channel failed: %s",
                    exc,
                    extra={"endpoint": self.url, "reason": exc.__class__.__name__},
                )
                if self.reconnect_delay is None:
                    return
                await asyncio.sleep(self.reconnect_delay)
                continue
            except Exception as exc:  # noqa: BLE001 - logged, listener ends
                # Not a transport failure (e.g. an unparsable URL); retrying cannot help.
                self._set_state(ListenerState.error)
                logger.exception(
                    "Live channel stopped on unexpected error",
                    extra={"endpoint": self.url, "reason": exc.__class__.__name__},
                )
                return

            self._set_state(ListenerState.closed)
            return

    def start(self) -> asyncio.Task[None]:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="live-stream-listener")
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._set_state(ListenerState.closed)
