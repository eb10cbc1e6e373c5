"""Destructive administrative actions against the device."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

import httpx

logger = logging.getLogger(__name__)

ReloadHook = Callable[[], Awaitable[object]]


class AdminAction(str, Enum):
    clear_network_config = "clear-network-config"
    clear_data_log = "clear-data-log"

    @property
    def endpoint(self) -> str:
        return _ENDPOINTS[self]


_ENDPOINTS = {
    AdminAction.clear_network_config: "/deleteNetwork",
    AdminAction.clear_data_log: "/deleteDataLog",
}


@dataclass(frozen=True)
class ActionResult:
    action: AdminAction
    succeeded: bool
    status_code: Optional[int] = None
    detail: str = ""


class AdminActionController:
    """Issues one request per action, then re-initializes the dashboard.

    The reload hook runs exactly once after the request settles, whether it
    succeeded or not; the returned :class:`ActionResult` tells the two apart.
    """

    def __init__(self, client: httpx.AsyncClient, reload: Optional[ReloadHook] = None) -> None:
        self._client = client
        self._reload = reload

    async def execute(self, action: AdminAction) -> ActionResult:
        try:
            result = await self._request(action)
        finally:
            await self._run_reload(action)
        return result

    async def _request(self, action: AdminAction) -> ActionResult:
        endpoint = action.endpoint
        try:
            response = await self._client.get(endpoint)
        except httpx.HTTPError as exc:
            reason = f"request failed: {exc.__class__.__name__}: {exc}"
            logger.error(
                "Admin action failed",
                extra={"action": action.value, "endpoint": endpoint, "reason": reason},
            )
            return ActionResult(action=action, succeeded=False, detail=reason)

        if response.is_success:
            logger.info(
                "Admin action completed",
                extra={"action": action.value, "endpoint": endpoint, "status_code": response.status_code},
            )
            return ActionResult(
                action=action,
                succeeded=True,
                status_code=response.status_code,
                detail="completed",
            )

        reason = f"device responded with status {response.status_code}"
        logger.error(
            "Admin action failed",
            extra={
                "action": action.value,
                "endpoint": endpoint,
                "status_code": response.status_code,
                "reason": reason,
            },
        )
        return ActionResult(
            action=action,
            succeeded=False,
            status_code=response.status_code,
            detail=reason,
        )

    async def _run_reload(self, action: AdminAction) -> None:
        if self._reload is None:
            return
        try:
            await self._reload()
        except Exception:  # noqa: BLE001 - logged, result still returned
            logger.exception("Reload after admin action failed", extra={"action": action.value})
