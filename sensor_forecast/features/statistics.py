"""
Summary statistics over a sample window.

Provides whole-window and per-hour aggregates (average, min, max, counts)
for reporting alongside forecasts.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

import pandas as pd

from sensor_forecast.models.base import Sample, samples_to_frame
from sensor_forecast.models.channels import CHANNEL_RANGES, SensorChannel


@dataclass(frozen=True)
class StatisticsSummary:
    """Aggregates for one time span of a channel."""

    channel: SensorChannel | None
    start_time: datetime | None
    end_time: datetime | None
    avg_value: float
    min_value: float
    max_value: float
    total_count: int
    valid_count: int

    @property
    def unit(self) -> str | None:
        return self.channel.unit if self.channel else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "channel": self.channel.value if self.channel else None,
            "unit": self.unit,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "avg_value": round(self.avg_value, 2),
            "min_value": round(self.min_value, 2),
            "max_value": round(self.max_value, 2),
            "total_count": self.total_count,
            "valid_count": self.valid_count,
        }


def _valid_mask(values: pd.Series, channel: SensorChannel | None) -> pd.Series:
    if channel is None:
        return pd.Series(True, index=values.index)
    bounds = CHANNEL_RANGES[channel]
    return values.between(bounds.min_value, bounds.max_value)


def summarize(
    history: Sequence[Sample],
    channel: SensorChannel | None = None,
) -> StatisticsSummary:
    """
    Aggregate a whole sample window.

    valid_count counts samples inside the channel's plausible range (all
    samples when no channel is given). An empty window gives zeroed values.
    """
    if not history:
        return StatisticsSummary(
            channel=channel,
            start_time=None,
            end_time=None,
            avg_value=0.0,
            min_value=0.0,
            max_value=0.0,
            total_count=0,
            valid_count=0,
        )

    values = samples_to_frame(history)["value"]
    return StatisticsSummary(
        channel=channel,
        start_time=history[0].timestamp,
        end_time=history[-1].timestamp,
        avg_value=float(values.mean()),
        min_value=float(values.min()),
        max_value=float(values.max()),
        total_count=int(values.size),
        valid_count=int(_valid_mask(values, channel).sum()),
    )


def hourly_statistics(
    history: Sequence[Sample],
    channel: SensorChannel | None = None,
) -> list[StatisticsSummary]:
    """
    Aggregate a sample window per clock hour.

    Hours without samples are omitted. Each bucket spans [hour, hour + 1h).
    """
    if not history:
        return []

    frame = samples_to_frame(history)
    frame["valid"] = _valid_mask(frame["value"], channel)

    hourly = frame.resample("1h").agg(
        {"value": ["mean", "min", "max", "count"], "valid": "sum"}
    )
    hourly.columns = ["avg", "min", "max", "count", "valid"]
    hourly = hourly[hourly["count"] > 0]

    return [
        StatisticsSummary(
            channel=channel,
            start_time=hour.to_pydatetime(),
            end_time=hour.to_pydatetime() + timedelta(hours=1),
            avg_value=float(row["avg"]),
            min_value=float(row["min"]),
            max_value=float(row["max"]),
            total_count=int(row["count"]),
            valid_count=int(row["valid"]),
        )
        for hour, row in hourly.iterrows()
    ]
