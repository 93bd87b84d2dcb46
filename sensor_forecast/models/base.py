"""
Base classes for forecast models.

Provides:
- Sample and PredictionPoint value types
- ForecastMethod names
- Abstract base predictor with shared point construction
- Conversions between sample histories and pandas objects
"""

import math
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd

from sensor_forecast.utils.logging import get_logger

from .channels import SensorChannel, clamp_to_channel

logger = get_logger(__name__)

HOUR = timedelta(hours=1)


class ForecastMethod(str, Enum):
    """Forecasting strategies a caller can request."""

    AUTO = "auto"
    LINEAR = "linear"
    POLYNOMIAL = "polynomial"
    MOVING_AVERAGE = "moving_average"
    EXPONENTIAL_SMOOTHING = "exponential_smoothing"

    @classmethod
    def parse(cls, value: "str | ForecastMethod | None") -> "ForecastMethod":
        """Resolve a method name; blank or unrecognized names mean AUTO."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.AUTO
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.debug("Unknown forecast method, using auto selection", method=value)
            return cls.AUTO


@dataclass(frozen=True)
class Sample:
    """One sensor reading."""

    timestamp: datetime
    value: float


@dataclass(frozen=True)
class PredictionPoint:
    """
    One forecast value.

    Attributes:
        timestamp: Instant the prediction applies to
        predicted_value: Forecast value, clamped to the channel range
        confidence: Heuristic confidence in [0, 1] (a ranking signal, not a probability)
        method: Model that produced the value
    """

    timestamp: datetime
    predicted_value: float
    confidence: float
    method: ForecastMethod

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary with presentation rounding."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "predicted_value": round(self.predicted_value, 2),
            "confidence": round(self.confidence, 2),
            "method": self.method.value,
        }


class BasePredictor(ABC):
    """
    Abstract base class for forecast models.

    Subclasses fit the history and return raw predictions plus confidences
    for hours 1..horizon; the base class attaches timestamps, clamps values
    to the channel range and bounds confidences to [0, 1].
    """

    method: ForecastMethod

    @abstractmethod
    def _predict(
        self,
        history: Sequence[Sample],
        horizon_hours: int,
    ) -> tuple[np.ndarray, np.ndarray]:
        """
        Fit the history and forecast.

        Args:
            history: Ordered samples (at least one)
            horizon_hours: Number of future hourly points

        Returns:
            (predicted values, confidences), each of length horizon_hours
        """
        pass

    @property
    def min_samples(self) -> int:
        """Fewest samples this model can forecast from."""
        return 1

    def forecast(
        self,
        history: Sequence[Sample],
        horizon_hours: int,
        channel: SensorChannel | None = None,
    ) -> list[PredictionPoint]:
        """
        Forecast horizon_hours hourly points after the last sample.

        Args:
            history: Samples in ascending timestamp order
            horizon_hours: Number of hourly points to produce
            channel: Channel whose plausible range bounds the output

        Returns:
            Prediction points, or an empty list if history is too short
        """
        if len(history) < self.min_samples or horizon_hours < 1:
            return []

        values, confidences = self._predict(history, horizon_hours)
        return self._build_points(history, values, confidences, channel)

    def _build_points(
        self,
        history: Sequence[Sample],
        values: np.ndarray,
        confidences: np.ndarray,
        channel: SensorChannel | None,
    ) -> list[PredictionPoint]:
        last_time = history[-1].timestamp
        clamped = clamp_to_channel(channel, values)
        bounded = np.clip(np.asarray(confidences, dtype=float), 0.0, 1.0)

        return [
            PredictionPoint(
                timestamp=last_time + HOUR * step,
                predicted_value=float(value),
                confidence=float(confidence),
                method=self.method,
            )
            for step, (value, confidence) in enumerate(zip(clamped, bounded), start=1)
        ]

    @staticmethod
    def _values(history: Sequence[Sample]) -> np.ndarray:
        return np.array([s.value for s in history], dtype=float)

    @staticmethod
    def _steps(horizon_hours: int) -> np.ndarray:
        """Future hour indices 1..horizon_hours."""
        return np.arange(1, horizon_hours + 1, dtype=float)


def is_complete(points: Sequence[PredictionPoint], horizon_hours: int) -> bool:
    """Check that a prediction list is fully populated with finite values."""
    if len(points) != horizon_hours:
        return False
    return all(
        math.isfinite(p.predicted_value) and math.isfinite(p.confidence)
        for p in points
    )


def samples_from_series(series: pd.Series) -> list[Sample]:
    """
    Build a sample history from a Series with a DatetimeIndex.

    Raises:
        ValueError: If the index is not a DatetimeIndex
    """
    if not isinstance(series.index, pd.DatetimeIndex):
        raise ValueError("Series must have DatetimeIndex")
    return [
        Sample(timestamp=ts.to_pydatetime(), value=float(value))
        for ts, value in series.items()
    ]


def samples_from_dataframe(df: pd.DataFrame, value_column: str = "value") -> list[Sample]:
    """Build a sample history from one column of a DataFrame with a DatetimeIndex."""
    if value_column not in df.columns:
        raise ValueError(f"Value column '{value_column}' not found in DataFrame")
    return samples_from_series(df[value_column])


def samples_to_frame(history: Sequence[Sample]) -> pd.DataFrame:
    """Convert a sample history to a DataFrame indexed by timestamp."""
    return pd.DataFrame(
        {"value": [s.value for s in history]},
        index=pd.DatetimeIndex([s.timestamp for s in history], name="timestamp"),
    )
