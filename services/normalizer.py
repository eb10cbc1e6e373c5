"""Conversion of historical samples into chart-ready series."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from models.records import NormalizedSeries, SampleRecord

_TWO_PLACES = Decimal("0.01")
# Floats this large carry no fractional digits.
_NO_FRACTION_ABOVE = 2.0**52


def round_temperature(value: float) -> float:
    """Round to two decimals, ties away from zero.

    Rounding works on the shortest decimal form of the float, so ``21.245``
    becomes ``21.25`` even though its binary value is slightly below the tie.
    """
    if abs(value) >= _NO_FRACTION_ABOVE:
        return float(value)
    # Decimal's ROUND_HALF_UP rounds ties away from zero for negatives too.
    quantized = Decimal(repr(float(value))).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    # Adding 0.0 turns -0.0 into 0.0.
    return float(quantized) + 0.0


class SeriesNormalizer:
    """Pure transformation component that can be unit tested in isolation."""

    def normalize(self, samples: Iterable[SampleRecord]) -> NormalizedSeries:
        categories: list[str] = []
        values: list[float] = []

        for sample in samples:
            categories.append(sample.date)
            values.append(round_temperature(sample.temperature))

        return NormalizedSeries(categories=tuple(categories), values=tuple(values))
