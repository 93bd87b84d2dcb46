"""
Phase 5 Tests: Method Selection

Tests for:
- Rule table order and outcomes
- Polynomial-vs-linear fit comparison
- Configurable thresholds
"""

import numpy as np
import pytest

from sensor_forecast.features.extractor import FeatureVector
from sensor_forecast.models.base import ForecastMethod
from sensor_forecast.prediction.selector import MethodSelector, SelectorConfig


def make_features(**overrides) -> FeatureVector:
    """Feature vector that matches no early rule unless overridden."""
    values = {
        "count": 20,
        "mean": 50.0,
        "std_dev": 7.5,
        "skewness": 0.0,
        "kurtosis": 0.0,
        "correlation": 0.8,
        "volatility": 0.15,
        "trend_strength": 0.25,
    }
    values.update(overrides)
    return FeatureVector(**values)


class TestRuleTable:
    """Test each rule in priority order."""

    def test_rule_order(self):
        names = [rule.name for rule in MethodSelector().rules]

        assert names == [
            "too_few_points",
            "strong_linear_trend",
            "flat_low_noise",
            "nonlinear_shape",
            "trending_or_noisy",
            "default_large",
            "default_small",
        ]

    def test_too_few_points(self):
        # Even a perfect linear trend needs 5 points
        features = make_features(count=4, correlation=0.99, trend_strength=2.0)

        assert MethodSelector().select(features) is ForecastMethod.MOVING_AVERAGE

    def test_strong_linear_trend(self):
        features = make_features(correlation=-0.9, trend_strength=0.5)

        assert MethodSelector().select(features) is ForecastMethod.LINEAR

    def test_linear_needs_trend_strength(self):
        features = make_features(correlation=0.95, trend_strength=0.3)

        assert MethodSelector().select(features) is not ForecastMethod.LINEAR

    def test_flat_low_noise(self):
        features = make_features(volatility=0.05, trend_strength=0.1)

        assert MethodSelector().explain(features).rule == "flat_low_noise"

    def test_nonlinear_shape(self, make_history):
        x = np.arange(20, dtype=float)
        history = make_history(50 + (x - 10) ** 2)
        features = make_features(correlation=0.5, skewness=1.0)

        selection = MethodSelector().explain(features, history)

        assert selection.method is ForecastMethod.POLYNOMIAL
        assert selection.rule == "nonlinear_shape"

    def test_nonlinear_shape_needs_history(self):
        features = make_features(correlation=0.5, skewness=1.0)

        assert MethodSelector().explain(features).rule != "nonlinear_shape"

    def test_nonlinear_shape_rejected_for_linear_data(self, make_history):
        history = make_history([3.0 * i for i in range(20)])
        features = make_features(correlation=0.5, skewness=1.0)

        assert MethodSelector().explain(features, history).rule != "nonlinear_shape"

    def test_nonlinear_shape_needs_enough_points(self, make_history):
        x = np.arange(8, dtype=float)
        history = make_history(50 + (x - 4) ** 2)
        features = make_features(count=8, correlation=0.5, skewness=1.0)

        assert MethodSelector().explain(features, history).rule != "nonlinear_shape"

    @pytest.mark.parametrize(
        "overrides",
        [{"trend_strength": 0.45}, {"volatility": 0.25}],
    )
    def test_trending_or_noisy(self, overrides):
        features = make_features(**overrides)

        assert MethodSelector().select(features) is ForecastMethod.EXPONENTIAL_SMOOTHING

    def test_default_large(self):
        features = make_features(count=11)

        selection = MethodSelector().explain(features)

        assert selection.method is ForecastMethod.POLYNOMIAL
        assert selection.rule == "default_large"

    def test_default_small(self):
        features = make_features(count=9)

        selection = MethodSelector().explain(features)

        assert selection.method is ForecastMethod.EXPONENTIAL_SMOOTHING
        assert selection.rule == "default_small"

    def test_never_selects_auto(self):
        for count in range(1, 15):
            method = MethodSelector().select(make_features(count=count))
            assert method is not ForecastMethod.AUTO


class TestFitComparison:
    """Test the polynomial gain measure."""

    def test_gain_for_parabola(self, make_history):
        x = np.arange(20, dtype=float)
        history = make_history((x - 10) ** 2)

        assert MethodSelector().polynomial_gain(history) > 0.9

    def test_gain_for_line(self, make_history):
        history = make_history([2.0 * i + 1 for i in range(12)])

        assert MethodSelector().polynomial_gain(history) == pytest.approx(0.0, abs=1e-9)

    def test_gain_unavailable_for_degenerate_history(self, base_time):
        from sensor_forecast.models.base import Sample

        history = [Sample(base_time, float(v)) for v in range(10)]

        assert MethodSelector().polynomial_gain(history) is None


class TestSelectorConfig:
    """Test configurable thresholds."""

    def test_custom_thresholds(self):
        selector = MethodSelector(SelectorConfig(min_curve_fit_samples=10))

        assert selector.select(make_features(count=8)) is ForecastMethod.MOVING_AVERAGE

    def test_from_settings(self):
        from config.settings import ForecastSettings

        config = SelectorConfig.from_settings(
            ForecastSettings(linear_min_correlation=0.5, linear_min_trend_strength=0.1)
        )

        assert config.linear_min_correlation == 0.5
        assert MethodSelector(config).select(make_features()) is ForecastMethod.LINEAR

    def test_every_threshold_comes_from_settings(self, monkeypatch):
        from config.settings import ForecastSettings

        monkeypatch.setenv("FORECAST_POLYNOMIAL_TEST_DEGREE", "3")

        config = SelectorConfig.from_settings(ForecastSettings())

        assert config.polynomial_test_degree == 3
        assert set(SelectorConfig().to_dict()) <= set(ForecastSettings.model_fields)

    def test_to_dict(self):
        data = SelectorConfig().to_dict()

        assert data["linear_min_correlation"] == 0.85
        assert data["polynomial_min_r2_gain"] == 0.05
