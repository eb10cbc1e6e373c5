"""Ownership of the single temperature chart instance."""

from __future__ import annotations

import copy
import logging
from threading import Lock
from typing import Any, Dict, Optional

from models.records import ChartHandle, NormalizedSeries

logger = logging.getLogger(__name__)

DEFAULT_CHART_TITLE = "Average Temperature"
DEFAULT_CONTAINER_ID = "chart-temperature"
SERIES_NAME = "Temperature (°C)"

_BACKGROUND = "#212529"
_FOREGROUND = "white"
_WHITE_TEXT = {"style": {"color": _FOREGROUND}}


def build_chart_options(series: NormalizedSeries, title: str = DEFAULT_CHART_TITLE) -> Dict[str, Any]:
    """Highcharts options for a dark spline chart of ``series``."""
    return {
        "chart": {"backgroundColor": _BACKGROUND, "type": "spline"},
        "title": {"text": title, **copy.deepcopy(_WHITE_TEXT)},
        "xAxis": {
            "categories": list(series.categories),
            "accessibility": {"description": "Sample dates"},
            "labels": copy.deepcopy(_WHITE_TEXT),
        },
        "yAxis": {
            "gridLineColor": "yellow",
            "gridLineWidth": 0.1,
            "title": {"text": "Temperature", **copy.deepcopy(_WHITE_TEXT)},
            "labels": {"format": "{value}°", **copy.deepcopy(_WHITE_TEXT)},
        },
        "tooltip": {"crosshairs": True, "shared": True},
        "plotOptions": {
            "spline": {
                "marker": {
                    "radius": 4,
                    "lineWidth": 1,
                    "lineColor": _FOREGROUND,
                    "fillColor": _FOREGROUND,
                    "symbol": "circle",
                }
            }
        },
        "series": [
            {"name": SERIES_NAME, "data": list(series.values), "color": _FOREGROUND},
        ],
        "legend": {"itemStyle": {"color": _FOREGROUND}},
    }


class ChartRenderer:
    """Holds the current chart and replaces it wholesale on every render."""

    def __init__(
        self,
        title: str = DEFAULT_CHART_TITLE,
        container_id: str = DEFAULT_CONTAINER_ID,
    ) -> None:
        self.title = title
        self.container_id = container_id
        self._handle: Optional[ChartHandle] = None
        self._revision = 0
        self._lock = Lock()

    @property
    def current(self) -> Optional[ChartHandle]:
        with self._lock:
            return self._handle

    def render(self, series: NormalizedSeries) -> ChartHandle:
        if len(series.categories) != len(series.values):
            raise ValueError(
                f"Series is misaligned: {len(series.categories)} categories "
                f"for {len(series.values)} values."
            )

        with self._lock:
            self._revision += 1
            handle = ChartHandle(
                revision=self._revision,
                series=series,
                options=build_chart_options(series, title=self.title),
            )
            self._handle = handle

        logger.info(
            "Rendered temperature chart",
            extra={"revision": handle.revision, "sample_count": len(series)},
        )
        return handle

    def clear(self) -> None:
        with self._lock:
            self._handle = None
