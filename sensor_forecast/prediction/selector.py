"""
Forecast method selection.

An ordered rule table maps extracted features to a forecasting method;
the first matching rule wins. The policy prefers the simplest model that
explains the data, moves to curve fitting only when a line clearly fails
and there is enough data, and smooths noisy or trending series.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from config.settings import ForecastSettings
from sensor_forecast.errors import NumericalFailureError
from sensor_forecast.features.extractor import FeatureVector
from sensor_forecast.models.base import ForecastMethod, Sample
from sensor_forecast.utils.logging import get_logger
from sensor_forecast.utils.numeric import (
    elapsed_hours,
    fit_linear,
    fit_polynomial,
    r_squared,
)

logger = get_logger(__name__)


@dataclass
class SelectorConfig:
    """
    Thresholds for method selection.

    These are empirical; keep them configurable rather than trusting the
    defaults for every sensor.
    """

    min_curve_fit_samples: int = 5
    linear_min_correlation: float = 0.85
    linear_min_trend_strength: float = 0.3
    flat_max_volatility: float = 0.1
    flat_max_trend_strength: float = 0.2
    polynomial_min_samples: int = 8
    polynomial_min_skewness: float = 0.5
    polynomial_max_correlation: float = 0.7
    polynomial_min_r2_gain: float = 0.05
    polynomial_test_degree: int = 2
    smoothing_min_trend_strength: float = 0.4
    smoothing_min_volatility: float = 0.2
    default_polynomial_min_samples: int = 10

    @classmethod
    def from_settings(cls, settings: ForecastSettings) -> "SelectorConfig":
        """Build from environment-driven settings."""
        return cls(
            min_curve_fit_samples=settings.min_curve_fit_samples,
            linear_min_correlation=settings.linear_min_correlation,
            linear_min_trend_strength=settings.linear_min_trend_strength,
            flat_max_volatility=settings.flat_max_volatility,
            flat_max_trend_strength=settings.flat_max_trend_strength,
            polynomial_min_samples=settings.polynomial_min_samples,
            polynomial_min_skewness=settings.polynomial_min_skewness,
            polynomial_max_correlation=settings.polynomial_max_correlation,
            polynomial_min_r2_gain=settings.polynomial_min_r2_gain,
            polynomial_test_degree=settings.polynomial_test_degree,
            smoothing_min_trend_strength=settings.smoothing_min_trend_strength,
            smoothing_min_volatility=settings.smoothing_min_volatility,
            default_polynomial_min_samples=settings.default_polynomial_min_samples,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return dict(self.__dict__)


@dataclass(frozen=True)
class SelectionRule:
    """One row of the selection table."""

    name: str
    method: ForecastMethod
    matches: Callable[[FeatureVector, Sequence[Sample] | None], bool]


@dataclass
class Selection:
    """Chosen method and the rule that chose it."""

    method: ForecastMethod
    rule: str
    features: FeatureVector


class MethodSelector:
    """
    Chooses a forecasting method from a FeatureVector.

    Rules, in priority order:
    1. too_few_points      -> moving_average
    2. strong_linear_trend -> linear
    3. flat_low_noise      -> moving_average
    4. nonlinear_shape     -> polynomial (only if it clearly beats a line)
    5. trending_or_noisy   -> exponential_smoothing
    6. default_large       -> polynomial
    7. default_small       -> exponential_smoothing
    """

    def __init__(self, config: SelectorConfig | None = None) -> None:
        self.config = config or SelectorConfig()
        self._rules = self._build_rules()

    @property
    def rules(self) -> list[SelectionRule]:
        return list(self._rules)

    def _build_rules(self) -> list[SelectionRule]:
        c = self.config
        return [
            SelectionRule(
                "too_few_points",
                ForecastMethod.MOVING_AVERAGE,
                lambda f, h: f.count < c.min_curve_fit_samples,
            ),
            SelectionRule(
                "strong_linear_trend",
                ForecastMethod.LINEAR,
                lambda f, h: (
                    abs(f.correlation) > c.linear_min_correlation
                    and f.trend_strength > c.linear_min_trend_strength
                ),
            ),
            SelectionRule(
                "flat_low_noise",
                ForecastMethod.MOVING_AVERAGE,
                lambda f, h: (
                    f.volatility < c.flat_max_volatility
                    and f.trend_strength < c.flat_max_trend_strength
                ),
            ),
            SelectionRule(
                "nonlinear_shape",
                ForecastMethod.POLYNOMIAL,
                self._prefers_polynomial,
            ),
            SelectionRule(
                "trending_or_noisy",
                ForecastMethod.EXPONENTIAL_SMOOTHING,
                lambda f, h: (
                    f.trend_strength > c.smoothing_min_trend_strength
                    or f.volatility > c.smoothing_min_volatility
                ),
            ),
            SelectionRule(
                "default_large",
                ForecastMethod.POLYNOMIAL,
                lambda f, h: f.count > c.default_polynomial_min_samples,
            ),
            SelectionRule(
                "default_small",
                ForecastMethod.EXPONENTIAL_SMOOTHING,
                lambda f, h: True,
            ),
        ]

    def select(
        self,
        features: FeatureVector,
        history: Sequence[Sample] | None = None,
    ) -> ForecastMethod:
        """
        Choose a forecasting method.

        Args:
            features: Features of the history window
            history: The window itself, needed for the polynomial fit test

        Returns:
            Selected ForecastMethod (never AUTO)
        """
        return self.explain(features, history).method

    def explain(
        self,
        features: FeatureVector,
        history: Sequence[Sample] | None = None,
    ) -> Selection:
        """Choose a method and report which rule matched."""
        for rule in self._rules:
            if rule.matches(features, history):
                logger.info(
                    "Forecast method selected",
                    method=rule.method.value,
                    rule=rule.name,
                    **features.to_dict(),
                )
                return Selection(method=rule.method, rule=rule.name, features=features)

        # Unreachable: the last rule always matches
        raise RuntimeError("Selection table has no default rule")

    def _prefers_polynomial(
        self,
        features: FeatureVector,
        history: Sequence[Sample] | None,
    ) -> bool:
        c = self.config
        if features.count <= c.polynomial_min_samples:
            return False
        if not (
            abs(features.skewness) > c.polynomial_min_skewness
            or abs(features.correlation) < c.polynomial_max_correlation
        ):
            return False
        if history is None:
            return False

        gain = self.polynomial_gain(history)
        return gain is not None and gain > c.polynomial_min_r2_gain

    def polynomial_gain(self, history: Sequence[Sample]) -> float | None:
        """
        R² of an unweighted low-degree polynomial minus the linear R².

        Returns None when either fit is impossible.
        """
        x = elapsed_hours([s.timestamp for s in history])
        y = [s.value for s in history]
        try:
            linear = fit_linear(x, y)
            polynomial = fit_polynomial(x, y, self.config.polynomial_test_degree)
        except NumericalFailureError as e:
            logger.debug("Polynomial fit comparison failed", error=e.message)
            return None

        poly_r2 = r_squared(y, polynomial(x))
        logger.debug(
            "Fit comparison",
            linear_r_squared=linear.r_squared,
            polynomial_r_squared=poly_r2,
        )
        return poly_r2 - linear.r_squared
