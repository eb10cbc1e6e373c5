"""Orchestration of the historical pipeline, live stream and admin actions."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

import httpx

from app.schemas import PipelineState, PipelineStatus
from services.admin import ActionResult, AdminAction, AdminActionController
from services.chart import ChartRenderer
from services.history import HistoryFetcher, HistoryFetchError
from services.live import LiveStreamListener, LiveValueSink
from services.normalizer import SeriesNormalizer
from settings import get_settings

logger = logging.getLogger(__name__)


class DashboardService:
    """Coordinates fetch, normalization, rendering and the live channel."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        fetcher: HistoryFetcher,
        normalizer: SeriesNormalizer,
        renderer: ChartRenderer,
        sink: LiveValueSink,
        listener: Optional[LiveStreamListener] = None,
    ) -> None:
        self.client = client
        self.fetcher = fetcher
        self.normalizer = normalizer
        self.renderer = renderer
        self.sink = sink
        self.listener = listener
        self.admin = AdminActionController(client, reload=self.refresh)
        self._status = PipelineStatus()
        self._refresh_lock = asyncio.Lock()

    @property
    def status(self) -> PipelineStatus:
        return self._status.model_copy()

    async def refresh(self) -> PipelineStatus:
        """Re-run fetch, normalize and render from scratch."""
        async with self._refresh_lock:
            self.renderer.clear()
            self._status = PipelineStatus(state=PipelineState.pending)
            try:
                samples = await self.fetcher.fetch_history()
            except HistoryFetchError as exc:
                self._status = PipelineStatus(
                    state=PipelineState.failed,
                    reason=exc.reason,
                    refreshed_at=datetime.now(timezone.utc),
                )
                return self.status

            series = self.normalizer.normalize(samples)
            handle = self.renderer.render(series)
            self._status = PipelineStatus(
                state=PipelineState.rendered,
                sample_count=len(series),
                skipped_count=self.fetcher.last_skipped,
                revision=handle.revision,
                refreshed_at=datetime.now(timezone.utc),
            )
            return self.status

    async def run_action(self, action: AdminAction) -> ActionResult:
        return await self.admin.execute(action)

    async def start(self) -> None:
        await self.refresh()
        if self.listener is not None:
            self.listener.start()
        else:
            logger.info("Live channel disabled; no live URL configured.")

    async def shutdown(self) -> None:
        if self.listener is not None:
            await self.listener.stop()
        await self.client.aclose()


@lru_cache
def build_default_dashboard() -> DashboardService:
    """Factory that wires the dashboard against the configured device."""
    settings = get_settings()
    client = httpx.AsyncClient(
        base_url=settings.device_base_url,
        timeout=settings.request_timeout,
    )
    sink = LiveValueSink()
    listener = None
    if settings.live_url:
        listener = LiveStreamListener(
            settings.live_url,
            sink,
            reconnect_delay=settings.live_reconnect_delay,
        )
    return DashboardService(
        client=client,
        fetcher=HistoryFetcher(client, path=settings.history_path),
        normalizer=SeriesNormalizer(),
        renderer=ChartRenderer(title=settings.chart_title),
        sink=sink,
        listener=listener,
    )
