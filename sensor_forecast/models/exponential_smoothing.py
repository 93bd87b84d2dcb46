"""
Holt double exponential smoothing forecaster.

Smoothing parameters adapt to the series' coefficient of variation: noisier
series react faster (larger alpha), and the trend gain follows alpha.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from sensor_forecast.utils.logging import get_logger
from sensor_forecast.utils.numeric import (
    coefficient_of_variation,
    mean_absolute_error,
    mean_squared_error,
    sample_std,
)

from .base import BasePredictor, ForecastMethod, Sample

logger = get_logger(__name__)


@dataclass(frozen=True)
class HoltState:
    """Final smoothing state and in-sample fit."""

    alpha: float
    beta: float
    level: float
    trend: float
    fitted: np.ndarray
    mse: float
    mae: float


class ExponentialSmoothingPredictor(BasePredictor):
    """Holt smoothing with adaptive alpha/beta."""

    method = ForecastMethod.EXPONENTIAL_SMOOTHING

    BASE_ALPHA = 0.3
    ALPHA_PER_CV = 0.2
    ALPHA_RANGE = (0.1, 0.5)
    BETA_PER_ALPHA = 0.4
    BETA_RANGE = (0.05, 0.3)

    MIN_CONFIDENCE = 0.3
    MIN_ERROR_FACTOR = 0.5
    DISTANCE_DECAY = 0.02
    MIN_DISTANCE_FACTOR = 0.3

    @classmethod
    def smoothing_parameters(cls, cv: float) -> tuple[float, float]:
        """(alpha, beta) for a series with coefficient of variation `cv`."""
        alpha = float(np.clip(cls.BASE_ALPHA + cls.ALPHA_PER_CV * cv, *cls.ALPHA_RANGE))
        beta = float(np.clip(cls.BETA_PER_ALPHA * alpha, *cls.BETA_RANGE))
        return alpha, beta

    def smooth(self, values: np.ndarray) -> HoltState:
        """Run the Holt recurrence over the whole series."""
        mean = float(values.mean())
        alpha, beta = self.smoothing_parameters(
            coefficient_of_variation(sample_std(values), mean)
        )

        level = float(values[0])
        trend = float(values[1] - values[0]) if values.size > 1 else 0.0

        fitted = np.empty_like(values)
        fitted[0] = level
        for i in range(1, values.size):
            previous_level = level
            level = alpha * values[i] + (1 - alpha) * (previous_level + trend)
            trend = beta * (level - previous_level) + (1 - beta) * trend
            fitted[i] = level + trend

        return HoltState(
            alpha=alpha,
            beta=beta,
            level=level,
            trend=trend,
            fitted=fitted,
            mse=mean_squared_error(values, fitted),
            mae=mean_absolute_error(values, fitted),
        )

    def _predict(
        self,
        history: Sequence[Sample],
        horizon_hours: int,
    ) -> tuple[np.ndarray, np.ndarray]:
        values = self._values(history)
        state = self.smooth(values)

        logger.debug(
            "Exponential smoothing fitted",
            alpha=state.alpha,
            beta=state.beta,
            level=state.level,
            trend=state.trend,
            mse=state.mse,
            mae=state.mae,
        )

        steps = self._steps(horizon_hours)
        predictions = state.level + state.trend * steps

        relative_error = coefficient_of_variation(np.sqrt(state.mse), float(values.mean()))
        error_factor = max(self.MIN_ERROR_FACTOR, 1.0 - relative_error)
        distance = np.maximum(self.MIN_DISTANCE_FACTOR, 1.0 - self.DISTANCE_DECAY * steps)
        confidences = np.maximum(self.MIN_CONFIDENCE, error_factor * distance)

        return predictions, confidences
