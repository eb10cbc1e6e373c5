from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_DEVICE_BASE_URL_ENV = "DEVICE_BASE_URL"
_HISTORY_PATH_ENV = "DEVICE_HISTORY_PATH"
_LIVE_URL_ENV = "DEVICE_LIVE_URL"
_TIMEOUT_ENV = "DEVICE_TIMEOUT"
_RECONNECT_DELAY_ENV = "LIVE_RECONNECT_DELAY"
_CHART_TITLE_ENV = "CHART_TITLE"
_DATALOG_PATH_ENV = "MOCK_DEVICE_DATALOG_PATH"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    device_base_url: str
    history_path: str
    live_url: Optional[str]
    request_timeout: float
    live_reconnect_delay: Optional[float]
    chart_title: str
    datalog_path: Optional[str]
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_float_env(name: str, default: float) -> float:
    value = os.getenv(name)
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


def _read_reconnect_delay(default: float) -> Optional[float]:
    value = os.getenv(_RECONNECT_DELAY_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    if parsed < 0:
        return default
    # Zero turns reconnection off.
    return parsed or None


def _read_history_path(default: str) -> str:
    path = _read_str_env(_HISTORY_PATH_ENV, default)
    return path if path.startswith("/") else f"/{path}"


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        device_base_url=_read_str_env(_DEVICE_BASE_URL_ENV, "http://ddev-esp32.local").rstrip("/"),
        history_path=_read_history_path("/getData"),
        live_url=_read_optional_env(_LIVE_URL_ENV, "ws://ddev-esp32.local/wsden"),
        request_timeout=_read_float_env(_TIMEOUT_ENV, 10.0),
        live_reconnect_delay=_read_reconnect_delay(5.0),
        chart_title=_read_str_env(_CHART_TITLE_ENV, "Average Temperature"),
        datalog_path=_read_optional_env(_DATALOG_PATH_ENV, None),
        log_level=_read_log_level("INFO"),
    )
