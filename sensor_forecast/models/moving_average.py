"""
Moving average forecaster.

Averages the most recent window of samples and carries the window's average
step forward with a decay, so the trend fades over the horizon.
"""

from collections.abc import Sequence

import numpy as np

from sensor_forecast.utils.logging import get_logger
from sensor_forecast.utils.numeric import coefficient_of_variation, sample_std

from .base import BasePredictor, ForecastMethod, Sample

logger = get_logger(__name__)


class MovingAveragePredictor(BasePredictor):
    """Trend-decayed moving average over an adaptive window."""

    method = ForecastMethod.MOVING_AVERAGE

    MIN_WINDOW = 3
    MAX_WINDOW = 8
    TREND_DECAY = 0.95

    MIN_CONFIDENCE = 0.2
    MIN_DATA_STABILITY = 0.1
    DATA_WEIGHT = 0.6
    TREND_WEIGHT = 0.4
    DISTANCE_DECAY = 0.03
    MIN_DISTANCE_FACTOR = 0.3

    @classmethod
    def window_size(cls, count: int) -> int:
        """A third of the history, kept within [MIN_WINDOW, MAX_WINDOW] and count."""
        window = min(cls.MAX_WINDOW, max(cls.MIN_WINDOW, count // 3))
        return min(window, count)

    def _predict(
        self,
        history: Sequence[Sample],
        horizon_hours: int,
    ) -> tuple[np.ndarray, np.ndarray]:
        values = self._values(history)
        window = self.window_size(len(values))
        recent = values[-window:]

        moving_average = float(recent.mean())
        std = sample_std(recent)

        steps_taken = np.diff(recent)
        average_trend = float(steps_taken.mean()) if steps_taken.size else 0.0
        trend_stability = 1.0 / (1.0 + sample_std(steps_taken))
        data_stability = max(
            self.MIN_DATA_STABILITY,
            1.0 - coefficient_of_variation(std, moving_average),
        )

        logger.debug(
            "Moving average fitted",
            window=window,
            mean=moving_average,
            std=std,
            trend=average_trend,
            trend_stability=trend_stability,
            data_stability=data_stability,
        )

        steps = self._steps(horizon_hours)
        predictions = moving_average + average_trend * steps * self.TREND_DECAY ** (steps - 1)

        stability = self.DATA_WEIGHT * data_stability + self.TREND_WEIGHT * trend_stability
        distance = np.maximum(self.MIN_DISTANCE_FACTOR, 1.0 - self.DISTANCE_DECAY * steps)
        confidences = np.maximum(self.MIN_CONFIDENCE, stability * distance)

        return predictions, confidences
