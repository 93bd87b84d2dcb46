"""
Feature extraction for forecast method selection.

Summarizes a sample window with:
- Moments (mean, std, skewness, kurtosis)
- Linearity (time/value correlation)
- Volatility (coefficient of variation)
- Trend strength (consistency of first differences)
"""

import math
import warnings
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np
from scipy import stats

from sensor_forecast.errors import InvalidRequestError, NumericalFailureError
from sensor_forecast.models.base import Sample
from sensor_forecast.utils.logging import get_logger
from sensor_forecast.utils.numeric import (
    coefficient_of_variation,
    elapsed_hours,
    fit_linear,
    pearson_correlation,
    sample_std,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class FeatureVector:
    """Descriptive features of one sample window."""

    count: int
    mean: float
    std_dev: float
    skewness: float
    kurtosis: float
    correlation: float
    volatility: float
    trend_strength: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


class FeatureExtractor:
    """
    Computes a FeatureVector from an ordered sample history.

    Degenerate windows yield zeroed features instead of errors:
    fewer than 2 samples zero correlation, volatility and trend strength;
    fewer than 3 zero trend strength.
    """

    def extract(self, history: Sequence[Sample]) -> FeatureVector:
        """
        Extract features from a sample history.

        Args:
            history: Samples in ascending timestamp order

        Returns:
            FeatureVector for the window

        Raises:
            InvalidRequestError: If history is empty
        """
        if not history:
            raise InvalidRequestError("Feature extraction needs at least one sample")

        values = np.array([s.value for s in history], dtype=float)
        count = int(values.size)
        mean = float(values.mean())
        std_dev = sample_std(values)

        if count < 2:
            return FeatureVector(
                count=count,
                mean=mean,
                std_dev=std_dev,
                skewness=0.0,
                kurtosis=0.0,
                correlation=0.0,
                volatility=0.0,
                trend_strength=0.0,
            )

        x = elapsed_hours([s.timestamp for s in history])
        skewness, kurtosis = self._shape(values)

        return FeatureVector(
            count=count,
            mean=mean,
            std_dev=std_dev,
            skewness=skewness,
            kurtosis=kurtosis,
            correlation=self._correlation(x, values),
            volatility=coefficient_of_variation(std_dev, mean),
            trend_strength=self.trend_strength(values),
        )

    @staticmethod
    def _shape(values: np.ndarray) -> tuple[float, float]:
        """Bias-corrected skewness and excess kurtosis; 0 where undefined."""
        with warnings.catch_warnings():
            # Constant windows trigger precision-loss warnings and yield NaN
            warnings.simplefilter("ignore", RuntimeWarning)
            skewness = float(stats.skew(values, bias=False)) if values.size >= 3 else 0.0
            kurtosis = float(stats.kurtosis(values, bias=False)) if values.size >= 4 else 0.0
        return (
            skewness if math.isfinite(skewness) else 0.0,
            kurtosis if math.isfinite(kurtosis) else 0.0,
        )

    @staticmethod
    def _correlation(x: np.ndarray, values: np.ndarray) -> float:
        try:
            return pearson_correlation(x, values)
        except NumericalFailureError as e:
            logger.debug("Pearson correlation undefined, using regression fit", error=e.message)

        try:
            return fit_linear(x, values).correlation
        except NumericalFailureError:
            return 0.0

    @staticmethod
    def trend_strength(values: np.ndarray) -> float:
        """|mean step| / std of steps; 0 below 3 samples or for uniform steps."""
        if values.size < 3:
            return 0.0
        steps = np.diff(values)
        spread = sample_std(steps)
        if spread == 0:
            return 0.0
        return float(abs(steps.mean()) / spread)
