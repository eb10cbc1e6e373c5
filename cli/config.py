from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_DEVICE_URL = "http://ddev-esp32.local"
DEFAULT_TIMEOUT = 10.0

_DEVICE_URL_ENV = "DEVICE_BASE_URL"
_LIVE_URL_ENV = "DEVICE_LIVE_URL"
_HISTORY_PATH_ENV = "DEVICE_HISTORY_PATH"
_TIMEOUT_ENV = "DEVICE_TIMEOUT"


@dataclass(frozen=True)
class CLIConfig:
    device_url: str = DEFAULT_DEVICE_URL
    live_url: str = "ws://ddev-esp32.local/wsden"
    history_path: str = "/getData"
    timeout: float = DEFAULT_TIMEOUT


def _read_float(value: Optional[str], default: float) -> float:
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _live_url_for(device_url: str) -> str:
    ws_url = device_url.replace("https://", "wss://").replace("http://", "ws://")
    return f"{ws_url}/wsden"


def load_config(
    device_url: Optional[str] = None,
    live_url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CLIConfig:
    url = (device_url or os.getenv(_DEVICE_URL_ENV) or DEFAULT_DEVICE_URL).rstrip("/")
    ws = live_url or os.getenv(_LIVE_URL_ENV) or _live_url_for(url)
    path = (os.getenv(_HISTORY_PATH_ENV) or "").strip() or "/getData"
    if timeout is None:
        timeout = _read_float(os.getenv(_TIMEOUT_ENV), DEFAULT_TIMEOUT)
    return CLIConfig(
        device_url=url,
        live_url=ws,
        history_path=path if path.startswith("/") else f"/{path}",
        timeout=timeout,
    )
