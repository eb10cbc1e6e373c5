from __future__ import annotations

import asyncio
from typing import Callable, Optional

import httpx

from cli.config import CLIConfig
from models.records import NormalizedSeries
from services.admin import ActionResult, AdminAction, AdminActionController
from services.history import HistoryFetcher
from services.live import ListenerState, LiveStreamListener, LiveValueSink
from services.normalizer import SeriesNormalizer


class DeviceClient:
    """Synchronous facade over the async pipeline services for the CLI."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._runner = asyncio.Runner()
        self._http: Optional[httpx.AsyncClient] = None

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                base_url=self._config.device_url,
                timeout=self._config.timeout,
            )
        return self._http

    def close(self) -> None:
        if self._http is not None:
            self._runner.run(self._http.aclose())
            self._http = None
        self._runner.close()

    def fetch_series(self) -> NormalizedSeries:
        """Fetch the historical log and normalize it; raises ``HistoryFetchError``."""
        fetcher = HistoryFetcher(self._client(), path=self._config.history_path)
        samples = self._runner.run(fetcher.fetch_history())
        return SeriesNormalizer().normalize(samples)

    def run_action(self, action: AdminAction) -> ActionResult:
        controller = AdminActionController(self._client())
        return self._runner.run(controller.execute(action))

    def stream_live(
        self,
        on_value: Callable[[str], None],
        count: Optional[int] = None,
    ) -> ListenerState:
        sink = LiveValueSink()
        sink.subscribe(on_value)
        listener = LiveStreamListener(self._config.live_url, sink)
        self._runner.run(listener.run(max_messages=count))
        return listener.state
