"""Domain models shared across the telemetry pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple


@dataclass(frozen=True, slots=True)
class SampleRecord:
    """One historical measurement as delivered by the device."""

    date: str
    temperature: float


@dataclass(frozen=True, slots=True)
class NormalizedSeries:
    """Index-aligned chart categories and values.

    ``categories[i]`` and ``values[i]`` always come from the same sample.
    """

    categories: Tuple[str, ...] = ()
    values: Tuple[float, ...] = ()

    def __len__(self) -> int:
        return len(self.categories)


@dataclass(frozen=True, slots=True)
class ChartHandle:
    """The chart currently on display."""

    revision: int
    series: NormalizedSeries
    options: Dict[str, Any] = field(default_factory=dict)
