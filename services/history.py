"""Retrieval and validation of the device's historical temperature log."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, NoReturn, Optional, Tuple, Union

import httpx

from models.records import SampleRecord

logger = logging.getLogger(__name__)


class HistoryFetchError(RuntimeError):
    """Raised when the historical log could not be retrieved or parsed."""

    def __init__(self, reason: str, status_code: Optional[int] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code


@dataclass(frozen=True)
class HistoryParsed:
    samples: Tuple[SampleRecord, ...]
    skipped: int = 0


@dataclass(frozen=True)
class HistoryParseFailure:
    reason: str


ParseOutcome = Union[HistoryParsed, HistoryParseFailure]


def _coerce_date(raw: Any) -> Optional[str]:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return str(raw)
    return None


def _coerce_temperature(raw: Any) -> Optional[float]:
    if isinstance(raw, bool):
        return None
    if not isinstance(raw, (int, float, str)):
        return None
    try:
        value = float(raw.strip() if isinstance(raw, str) else raw)
    except (ValueError, OverflowError):
        return None
    return value if math.isfinite(value) else None


def _parse_record(item: Any) -> Tuple[Optional[SampleRecord], Optional[str]]:
    if not isinstance(item, dict):
        return None, "record is not an object"
    if "date" not in item:
        return None, "missing date"
    if "temperature" not in item:
        return None, "missing temperature"

    date = _coerce_date(item["date"])
    if date is None:
        return None, "invalid date"
    temperature = _coerce_temperature(item["temperature"])
    if temperature is None:
        return None, "invalid temperature"
    return SampleRecord(date=date, temperature=temperature), None


def parse_history_payload(payload: Any) -> ParseOutcome:
    """Validate a decoded ``/getData`` body.

    ``{"data": [...]}`` and a bare list are accepted. Individual malformed
    records are skipped so that one bad entry does not blank the chart.
    """
    if isinstance(payload, dict):
        if "data" not in payload:
            return HistoryParseFailure(reason="payload object has no 'data' field")
        items = payload["data"]
    else:
        items = payload

    if not isinstance(items, list):
        return HistoryParseFailure(reason="payload is not a list of samples")

    samples: list[SampleRecord] = []
    skipped = 0
    for index, item in enumerate(items):
        sample, reason = _parse_record(item)
        if sample is None:
            skipped += 1
            logger.warning(
                "Skipping malformed history record: %s",
                reason,
                extra={"record_index": index, "reason": reason},
            )
            continue
        samples.append(sample)

    return HistoryParsed(samples=tuple(samples), skipped=skipped)


class HistoryFetcher:
    """Performs the single ``GET`` that loads the historical log."""

    def __init__(self, client: httpx.AsyncClient, path: str = "/getData") -> None:
        self._client = client
        self.path = path
        self.last_skipped = 0

    async def fetch_history(self) -> Tuple[SampleRecord, ...]:
        try:
            response = await self._client.get(self.path)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._fail(
                f"device responded with status {exc.response.status_code}",
                status_code=exc.response.status_code,
            )
        except httpx.HTTPError as exc:
            self._fail(f"request failed: {exc.__class__.__name__}: {exc}")

        try:
            payload = response.json()
        except ValueError:
            self._fail("response body is not valid JSON", status_code=response.status_code)

        outcome = parse_history_payload(payload)
        if isinstance(outcome, HistoryParseFailure):
            self._fail(outcome.reason, status_code=response.status_code)

        self.last_skipped = outcome.skipped
        logger.info(
            "Fetched historical samples",
            extra={
                "endpoint": self.path,
                "sample_count": len(outcome.samples),
                "skipped_count": outcome.skipped or None,
            },
        )
        return outcome.samples

    def _fail(self, reason: str, status_code: Optional[int] = None) -> NoReturn:
        logger.error(
            "Fetching history failed: %s",
            reason,
            extra={"endpoint": self.path, "status_code": status_code, "reason": reason},
        )
        raise HistoryFetchError(reason, status_code=status_code)
