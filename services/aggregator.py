"""Aggregation logic for time-series samples."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from models.records import TimeSeriesSample
from services.errors import EmptySeriesError


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; an empty input has no mean and raises."""
    if not values:
        raise EmptySeriesError("Cannot compute the mean of an empty series.")
    return sum(values) / len(values)


@dataclass
class AggregationSummary:
    """Computed statistics for a batch of samples."""

    sample_count: int = 0
    mean_value: float | None = None


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(self, samples: Iterable[TimeSeriesSample]) -> AggregationSummary:
        values = [sample.value for sample in samples]
        summary = AggregationSummary(sample_count=len(values))
        if values:
            summary.mean_value = mean(values)
        return summary
