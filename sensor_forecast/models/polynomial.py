"""
Weighted polynomial regression forecaster.

Fits a polynomial of degree up to 3 with recent samples weighted more
heavily. Far outside the fitted span a high-degree polynomial diverges, so
points beyond EXTRAPOLATION_LIMIT times the historical span use a two-point
linear extrapolation instead.
"""

from collections.abc import Sequence

import numpy as np

from sensor_forecast.errors import NumericalFailureError
from sensor_forecast.utils.logging import get_logger
from sensor_forecast.utils.numeric import elapsed_hours, fit_polynomial, r_squared

from .base import HOUR, BasePredictor, ForecastMethod, PredictionPoint, Sample
from .channels import SensorChannel
from .linear import LinearPredictor

logger = get_logger(__name__)


class PolynomialPredictor(BasePredictor):
    """Weighted least squares polynomial with an extrapolation guard."""

    method = ForecastMethod.POLYNOMIAL

    MAX_DEGREE = 3
    OLDEST_WEIGHT = 1.0
    NEWEST_WEIGHT = 1.5
    EXTRAPOLATION_LIMIT = 1.5

    MIN_CONFIDENCE = 0.1
    DISTANCE_DECAY = 0.04
    MIN_DISTANCE_FACTOR = 0.3

    def __init__(self, fallback: LinearPredictor | None = None) -> None:
        """
        Initialize the polynomial predictor.

        Args:
            fallback: Predictor used when the polynomial cannot be fitted
        """
        self._fallback = fallback or LinearPredictor()

    @property
    def min_samples(self) -> int:
        return 2

    @classmethod
    def degree_for(cls, count: int) -> int:
        """Polynomial degree for a history of `count` samples."""
        return max(1, min(cls.MAX_DEGREE, count - 1))

    @classmethod
    def sample_weights(cls, count: int) -> np.ndarray:
        """Linearly increasing weights, oldest to newest."""
        if count == 1:
            return np.array([cls.NEWEST_WEIGHT])
        return np.linspace(cls.OLDEST_WEIGHT, cls.NEWEST_WEIGHT, count)

    def forecast(
        self,
        history: Sequence[Sample],
        horizon_hours: int,
        channel: SensorChannel | None = None,
    ) -> list[PredictionPoint]:
        """Forecast, delegating to linear regression if the fit fails."""
        try:
            return super().forecast(history, horizon_hours, channel)
        except NumericalFailureError as e:
            logger.warning(
                "Polynomial fit failed, delegating to linear regression",
                error=e.message,
                **e.details,
            )
            return self._fallback.forecast(history, horizon_hours, channel)

    def _predict(
        self,
        history: Sequence[Sample],
        horizon_hours: int,
    ) -> tuple[np.ndarray, np.ndarray]:
        timestamps = [s.timestamp for s in history]
        x = elapsed_hours(timestamps)
        y = self._values(history)
        n = len(history)

        degree = self.degree_for(n)
        polynomial = fit_polynomial(x, y, degree, weights=self.sample_weights(n))
        fit_r2 = r_squared(y, polynomial(x))

        logger.debug(
            "Polynomial regression fitted",
            degree=degree,
            coefficients=polynomial.coefficients.tolist(),
            r_squared=fit_r2,
        )

        steps = self._steps(horizon_hours)
        future_x = elapsed_hours(
            [timestamps[-1] + HOUR * int(i) for i in steps],
            origin=timestamps[0],
        )
        predictions = polynomial(future_x)

        # Beyond the guard, continue the last observed step instead
        last_step = y[-1] - y[-2]
        beyond = future_x > x[-1] * self.EXTRAPOLATION_LIMIT
        predictions = np.where(beyond, y[-1] + last_step * steps, predictions)

        distance = np.maximum(
            self.MIN_DISTANCE_FACTOR, 1.0 - self.DISTANCE_DECAY * (steps - 1)
        )
        confidences = np.maximum(self.MIN_CONFIDENCE, fit_r2 * distance)

        return predictions, confidences
