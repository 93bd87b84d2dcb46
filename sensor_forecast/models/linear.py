"""
Linear regression forecaster.

Fits ordinary least squares of value against hours elapsed since the first
sample and extends the line forward.
"""

from collections.abc import Sequence

import numpy as np

from sensor_forecast.utils.logging import get_logger
from sensor_forecast.utils.numeric import elapsed_hours, fit_linear

from .base import HOUR, BasePredictor, ForecastMethod, Sample

logger = get_logger(__name__)


class LinearPredictor(BasePredictor):
    """Straight-line extrapolation with R²-weighted confidence."""

    method = ForecastMethod.LINEAR

    MIN_CONFIDENCE = 0.2
    DISTANCE_DECAY = 0.03
    MIN_DISTANCE_FACTOR = 0.5

    @property
    def min_samples(self) -> int:
        return 2

    def _predict(
        self,
        history: Sequence[Sample],
        horizon_hours: int,
    ) -> tuple[np.ndarray, np.ndarray]:
        timestamps = [s.timestamp for s in history]
        x = elapsed_hours(timestamps)
        y = self._values(history)

        fit = fit_linear(x, y)

        logger.debug(
            "Linear regression fitted",
            slope=fit.slope,
            intercept=fit.intercept,
            r_squared=fit.r_squared,
            correlation=fit.correlation,
            mse=fit.mse,
        )

        steps = self._steps(horizon_hours)
        future = [timestamps[-1] + HOUR * int(i) for i in steps]
        predictions = fit.predict(elapsed_hours(future, origin=timestamps[0]))

        distance = np.maximum(self.MIN_DISTANCE_FACTOR, 1.0 - self.DISTANCE_DECAY * steps)
        confidences = np.maximum(self.MIN_CONFIDENCE, fit.r_squared * distance)

        return predictions, confidences
