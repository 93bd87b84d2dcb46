"""
Phase 2 Tests: Numeric Utilities

Tests for:
- Elapsed-hours time axis
- Linear and polynomial fits
- R², MSE, MAE
- Correlation and coefficient of variation
"""

from datetime import UTC, datetime, timedelta

import numpy as np
import pytest

from sensor_forecast.errors import NumericalFailureError
from sensor_forecast.utils.numeric import (
    coefficient_of_variation,
    elapsed_hours,
    fit_linear,
    fit_polynomial,
    mean_absolute_error,
    mean_squared_error,
    pearson_correlation,
    r_squared,
    sample_std,
)


class TestElapsedHours:
    """Test time axis conversion."""

    def test_fractional_hours(self):
        """Test sub-hour spacing is kept as fractions."""
        start = datetime(2024, 1, 1, tzinfo=UTC)
        timestamps = [start + timedelta(minutes=30 * i) for i in range(3)]

        np.testing.assert_allclose(elapsed_hours(timestamps), [0.0, 0.5, 1.0])

    def test_custom_origin(self):
        """Test elapsed hours relative to an explicit origin."""
        start = datetime(2024, 1, 1, tzinfo=UTC)
        future = [start + timedelta(hours=5)]

        np.testing.assert_allclose(elapsed_hours(future, origin=start), [5.0])

    def test_empty(self):
        """Test empty input gives an empty axis."""
        assert elapsed_hours([]).size == 0


class TestFitMetrics:
    """Test goodness-of-fit and error metrics."""

    def test_r_squared_perfect_fit(self):
        y = np.array([1.0, 2.0, 3.0])
        assert r_squared(y, y) == pytest.approx(1.0)

    def test_r_squared_constant_actuals(self):
        """Test zero-variance actuals give 0 rather than dividing by zero."""
        y = np.array([5.0, 5.0, 5.0])
        assert r_squared(y, y) == 0.0

    def test_r_squared_mean_model(self):
        """Predicting the mean explains nothing."""
        y = np.array([1.0, 2.0, 3.0])
        assert r_squared(y, np.full(3, 2.0)) == pytest.approx(0.0)

    def test_mse_and_mae(self):
        actual = np.array([1.0, 2.0, 3.0])
        predicted = np.array([2.0, 2.0, 1.0])

        assert mean_squared_error(actual, predicted) == pytest.approx(5.0 / 3.0)
        assert mean_absolute_error(actual, predicted) == pytest.approx(1.0)

    def test_errors_skip_non_finite_predictions(self):
        actual = np.array([1.0, 2.0, 3.0])
        predicted = np.array([1.0, np.nan, 5.0])

        assert mean_squared_error(actual, predicted) == pytest.approx(2.0)
        assert mean_absolute_error(actual, predicted) == pytest.approx(1.0)

    def test_errors_length_mismatch(self):
        with pytest.raises(ValueError):
            mean_squared_error(np.array([1.0, 2.0]), np.array([1.0]))


class TestStatistics:
    """Test dispersion and correlation helpers."""

    def test_coefficient_of_variation(self):
        assert coefficient_of_variation(2.0, -4.0) == pytest.approx(0.5)
        assert coefficient_of_variation(2.0, 0.0) == 0.0

    def test_sample_std(self):
        assert sample_std(np.array([1.0])) == 0.0
        assert sample_std(np.array([1.0, 3.0])) == pytest.approx(np.sqrt(2.0))

    def test_pearson_correlation(self):
        x = np.arange(5, dtype=float)

        assert pearson_correlation(x, 3 * x + 1) == pytest.approx(1.0)
        assert pearson_correlation(x, -x) == pytest.approx(-1.0)

    def test_pearson_constant_series_fails(self):
        x = np.arange(5, dtype=float)

        with pytest.raises(NumericalFailureError):
            pearson_correlation(x, np.ones(5))


class TestFits:
    """Test least squares fits."""

    def test_fit_linear_exact(self):
        x = np.array([0.0, 1.0, 2.0, 3.0])
        fit = fit_linear(x, 2 * x + 1)

        assert fit.slope == pytest.approx(2.0)
        assert fit.intercept == pytest.approx(1.0)
        assert fit.r_squared == pytest.approx(1.0)
        assert fit.mse == pytest.approx(0.0)
        assert fit.predict(4.0) == pytest.approx(9.0)
        assert fit.correlation == pytest.approx(1.0)

    def test_fit_linear_negative_slope_correlation(self):
        x = np.array([0.0, 1.0, 2.0, 3.0])
        fit = fit_linear(x, np.array([4.0, 3.1, 1.9, 1.0]))

        assert fit.correlation < 0

    def test_fit_linear_too_few_points(self):
        with pytest.raises(NumericalFailureError):
            fit_linear(np.array([0.0]), np.array([1.0]))

    def test_fit_linear_single_timestamp(self):
        with pytest.raises(NumericalFailureError):
            fit_linear(np.zeros(3), np.array([1.0, 2.0, 3.0]))

    def test_fit_polynomial_recovers_quadratic(self):
        x = np.arange(8, dtype=float)
        y = 0.5 * x**2 - 2 * x + 3

        polynomial = fit_polynomial(x, y, 2)

        np.testing.assert_allclose(polynomial.coefficients, [0.5, -2.0, 3.0], atol=1e-8)

    def test_fit_polynomial_weighted_exact_data(self):
        """Weights do not disturb an exact fit."""
        x = np.arange(6, dtype=float)
        y = x**3 - x

        polynomial = fit_polynomial(x, y, 3, weights=np.linspace(1.0, 1.5, 6))

        np.testing.assert_allclose(polynomial(x), y, atol=1e-6)

    def test_fit_polynomial_rank_deficient(self):
        x = np.array([0.0, 0.0, 1.0, 1.0])

        with pytest.raises(NumericalFailureError):
            fit_polynomial(x, np.array([1.0, 2.0, 3.0, 4.0]), 3)

    def test_fit_polynomial_too_few_points(self):
        with pytest.raises(NumericalFailureError):
            fit_polynomial(np.array([0.0, 1.0]), np.array([1.0, 2.0]), 2)
