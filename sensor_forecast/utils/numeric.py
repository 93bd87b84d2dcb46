"""
Numeric helpers shared by the feature extractor and all predictors.

Provides:
- Elapsed-hours time axis
- Ordinary least squares and weighted polynomial fits
- Goodness-of-fit and error metrics (R², MSE, MAE)
- Pearson correlation and coefficient of variation
"""

import warnings
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

import numpy as np

from sensor_forecast.errors import NumericalFailureError

SECONDS_PER_HOUR = 3600.0


@dataclass(frozen=True)
class LinearFit:
    """Result of an ordinary least squares fit of y on x."""

    slope: float
    intercept: float
    r_squared: float
    mse: float

    def predict(self, x: np.ndarray | float) -> np.ndarray | float:
        return self.slope * x + self.intercept

    @property
    def correlation(self) -> float:
        """Correlation recovered from R², signed by the slope."""
        sign = 1.0 if self.slope >= 0 else -1.0
        return sign * float(np.sqrt(abs(self.r_squared)))


def elapsed_hours(timestamps: Sequence[datetime], origin: datetime | None = None) -> np.ndarray:
    """
    Convert timestamps to fractional hours elapsed since an origin.

    Args:
        timestamps: Ordered timestamps
        origin: Reference instant (defaults to the first timestamp)

    Returns:
        Array of elapsed hours, 0.0 at the origin
    """
    if not timestamps:
        return np.array([], dtype=float)
    base = origin if origin is not None else timestamps[0]
    return np.array(
        [(t - base).total_seconds() / SECONDS_PER_HOUR for t in timestamps],
        dtype=float,
    )


def r_squared(actual: np.ndarray, fitted: np.ndarray) -> float:
    """
    Coefficient of determination of fitted values against the actual mean.

    Returns 0.0 when the actual values have no variance.
    """
    actual = np.asarray(actual, dtype=float)
    fitted = np.asarray(fitted, dtype=float)
    total_ss = float(np.sum((actual - actual.mean()) ** 2))
    if total_ss == 0:
        return 0.0
    residual_ss = float(np.sum((actual - fitted) ** 2))
    return 1.0 - residual_ss / total_ss


def mean_squared_error(actual: np.ndarray, predicted: np.ndarray) -> float:
    """MSE over the pairs where the prediction is finite."""
    actual, predicted = _paired(actual, predicted)
    if actual.size == 0:
        return float("inf")
    return float(np.mean((actual - predicted) ** 2))


def mean_absolute_error(actual: np.ndarray, predicted: np.ndarray) -> float:
    """MAE over the pairs where the prediction is finite."""
    actual, predicted = _paired(actual, predicted)
    if actual.size == 0:
        return float("inf")
    return float(np.mean(np.abs(actual - predicted)))


def _paired(actual: np.ndarray, predicted: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    actual = np.asarray(actual, dtype=float)
    predicted = np.asarray(predicted, dtype=float)
    if actual.shape != predicted.shape:
        raise ValueError(
            f"Length mismatch: {actual.shape[0]} actual vs {predicted.shape[0]} predicted"
        )
    mask = np.isfinite(predicted)
    return actual[mask], predicted[mask]


def coefficient_of_variation(std: float, mean: float) -> float:
    """std / |mean|, defined as 0 for a zero mean."""
    if mean == 0:
        return 0.0
    return float(std / abs(mean))


def sample_std(values: np.ndarray) -> float:
    """Sample standard deviation (ddof=1); 0 for fewer than two values."""
    values = np.asarray(values, dtype=float)
    if values.size < 2:
        return 0.0
    return float(np.std(values, ddof=1))


def pearson_correlation(x: np.ndarray, y: np.ndarray) -> float:
    """
    Pearson correlation coefficient.

    Raises:
        NumericalFailureError: If either series is constant or too short
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.size < 2 or x.size != y.size:
        raise NumericalFailureError("Correlation needs two equally sized series of 2+ points")

    dx = x - x.mean()
    dy = y - y.mean()
    denominator = float(np.sqrt(np.sum(dx**2) * np.sum(dy**2)))
    if denominator == 0:
        raise NumericalFailureError("Correlation undefined for a constant series")
    return float(np.clip(np.sum(dx * dy) / denominator, -1.0, 1.0))


def fit_linear(x: np.ndarray, y: np.ndarray) -> LinearFit:
    """
    Ordinary least squares fit of y = slope * x + intercept.

    Raises:
        NumericalFailureError: Fewer than two points or no spread in x
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.size < 2:
        raise NumericalFailureError("Linear fit needs at least 2 points", {"count": int(x.size)})

    dx = x - x.mean()
    sxx = float(np.sum(dx**2))
    if sxx == 0:
        raise NumericalFailureError("Linear fit undefined: all samples share one timestamp")

    slope = float(np.sum(dx * (y - y.mean())) / sxx)
    intercept = float(y.mean() - slope * x.mean())
    fitted = slope * x + intercept

    return LinearFit(
        slope=slope,
        intercept=intercept,
        r_squared=r_squared(y, fitted),
        mse=mean_squared_error(y, fitted),
    )


def fit_polynomial(
    x: np.ndarray,
    y: np.ndarray,
    degree: int,
    weights: np.ndarray | None = None,
) -> np.poly1d:
    """
    Weighted least squares polynomial fit.

    Weights scale each point's squared residual, so the square root is
    handed to numpy (which scales the unsquared residual).

    Raises:
        NumericalFailureError: Rank-deficient system or non-finite coefficients
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.size <= degree:
        raise NumericalFailureError(
            "Not enough points for polynomial degree",
            {"count": int(x.size), "degree": degree},
        )

    w = None if weights is None else np.sqrt(np.asarray(weights, dtype=float))
    with warnings.catch_warnings():
        warnings.simplefilter("error", np.exceptions.RankWarning)
        try:
            coefficients = np.polyfit(x, y, degree, w=w)
        except (np.exceptions.RankWarning, np.linalg.LinAlgError, ValueError) as e:
            raise NumericalFailureError(f"Polynomial fit failed: {e}", {"degree": degree}) from e

    if not np.all(np.isfinite(coefficients)):
        raise NumericalFailureError("Polynomial fit produced non-finite coefficients")
    return np.poly1d(coefficients)
