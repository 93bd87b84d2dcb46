"""
Forecast engine.

Responsibilities:
- Validate forecast requests (horizon bounds, finite and ordered history)
- Report insufficient history as an empty result
- Choose a method from history features, unless the caller names one
- Run the chosen predictor with a linear-regression fallback
- Guarantee all-or-nothing output: a full horizon of valid points or none

The engine holds no state between calls; concurrent use needs no locking.
"""

import math
import numbers
from collections.abc import Sequence
from dataclasses import dataclass, field
from functools import lru_cache

from config.settings import ForecastSettings, get_settings
from sensor_forecast.errors import InvalidRequestError
from sensor_forecast.features.extractor import FeatureExtractor
from sensor_forecast.models.base import (
    BasePredictor,
    ForecastMethod,
    PredictionPoint,
    Sample,
    is_complete,
)
from sensor_forecast.models.channels import SensorChannel
from sensor_forecast.models.exponential_smoothing import ExponentialSmoothingPredictor
from sensor_forecast.models.linear import LinearPredictor
from sensor_forecast.models.moving_average import MovingAveragePredictor
from sensor_forecast.models.polynomial import PolynomialPredictor
from sensor_forecast.utils.logging import get_logger, log_context

from .selector import MethodSelector, SelectorConfig

logger = get_logger(__name__)


@dataclass
class EngineConfig:
    """Configuration for the forecast engine."""

    max_horizon_hours: int = 168
    min_history_samples: int = 3
    default_method: ForecastMethod = ForecastMethod.AUTO
    selector: SelectorConfig = field(default_factory=SelectorConfig)

    @classmethod
    def from_settings(cls, settings: ForecastSettings) -> "EngineConfig":
        """Build from environment-driven settings."""
        return cls(
            max_horizon_hours=settings.max_horizon_hours,
            min_history_samples=settings.min_history_samples,
            default_method=ForecastMethod.parse(settings.default_method),
            selector=SelectorConfig.from_settings(settings),
        )


class ForecastEngine:
    """
    Single-channel forecasting entry point.

    Usage:
        engine = ForecastEngine()
        points = engine.forecast(history, horizon_hours=24, channel="humidity")
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        extractor: FeatureExtractor | None = None,
        selector: MethodSelector | None = None,
    ) -> None:
        """
        Initialize the forecast engine.

        Args:
            config: Engine configuration
            extractor: Feature extractor for auto selection
            selector: Method selector for auto selection
        """
        self.config = config or EngineConfig()
        self._extractor = extractor or FeatureExtractor()
        self._selector = selector or MethodSelector(self.config.selector)

        linear = LinearPredictor()
        self._fallback = linear
        self._predictors: dict[ForecastMethod, BasePredictor] = {
            ForecastMethod.LINEAR: linear,
            ForecastMethod.POLYNOMIAL: PolynomialPredictor(fallback=linear),
            ForecastMethod.MOVING_AVERAGE: MovingAveragePredictor(),
            ForecastMethod.EXPONENTIAL_SMOOTHING: ExponentialSmoothingPredictor(),
        }

    def forecast(
        self,
        history: Sequence[Sample],
        horizon_hours: int,
        method: str | ForecastMethod | None = None,
        channel: str | SensorChannel | None = None,
    ) -> list[PredictionPoint]:
        """
        Forecast hourly values after the last sample.

        Args:
            history: Samples in ascending timestamp order
            horizon_hours: Number of hourly points, 1..max_horizon_hours
            method: Method name; blank or unknown names mean auto selection
            channel: Sensor channel whose range bounds the predictions

        Returns:
            Exactly horizon_hours points, or an empty list when history is
            too short or every model failed

        Raises:
            InvalidRequestError: Bad horizon, channel or history
        """
        horizon_hours = self._validate_horizon(horizon_hours)
        self._validate_history(history)
        resolved_channel = self._resolve_channel(channel)
        requested = ForecastMethod.parse(method) if method is not None else self.config.default_method

        with log_context(
            channel=resolved_channel.value if resolved_channel else None,
            horizon_hours=horizon_hours,
            requested_method=requested.value,
        ):
            if len(history) < self.config.min_history_samples:
                logger.warning(
                    "Insufficient history for forecast",
                    samples=len(history),
                    required=self.config.min_history_samples,
                )
                return []

            chosen = self._choose_method(history, requested)
            points = self._run(chosen, history, horizon_hours, resolved_channel)
            if points:
                return points

            if chosen is not ForecastMethod.LINEAR:
                logger.warning("Falling back to linear regression", failed_method=chosen.value)
                points = self._run(ForecastMethod.LINEAR, history, horizon_hours, resolved_channel)
                if points:
                    return points

            logger.error("All forecast methods failed", samples=len(history))
            return []

    def _choose_method(
        self,
        history: Sequence[Sample],
        requested: ForecastMethod,
    ) -> ForecastMethod:
        if requested is not ForecastMethod.AUTO:
            return requested
        try:
            features = self._extractor.extract(history)
            return self._selector.select(features, history)
        except Exception as e:
            logger.error("Automatic method selection failed", error=str(e))
            return ForecastMethod.LINEAR

    def _run(
        self,
        method: ForecastMethod,
        history: Sequence[Sample],
        horizon_hours: int,
        channel: SensorChannel | None,
    ) -> list[PredictionPoint]:
        """Run one predictor; any failure or incomplete output yields []."""
        predictor = self._predictors[method]
        try:
            points = predictor.forecast(history, horizon_hours, channel)
        except Exception as e:
            logger.error("Forecast model failed", method=method.value, error=str(e))
            return []

        if not is_complete(points, horizon_hours):
            logger.error(
                "Forecast model returned incomplete output",
                method=method.value,
                points=len(points),
                expected=horizon_hours,
            )
            return []

        logger.info(
            "Forecast generated",
            method=points[0].method.value,
            points=len(points),
        )
        return points

    def _validate_horizon(self, horizon_hours: int) -> int:
        if isinstance(horizon_hours, bool) or not isinstance(horizon_hours, numbers.Integral):
            raise InvalidRequestError(
                "Horizon must be an integer number of hours",
                {"horizon_hours": horizon_hours},
            )
        if not 1 <= horizon_hours <= self.config.max_horizon_hours:
            raise InvalidRequestError(
                f"Horizon must be between 1 and {self.config.max_horizon_hours} hours",
                {"horizon_hours": horizon_hours},
            )
        return int(horizon_hours)

    @staticmethod
    def _validate_history(history: Sequence[Sample]) -> None:
        previous = None
        for index, sample in enumerate(history):
            if not math.isfinite(sample.value):
                raise InvalidRequestError(
                    "History values must be finite",
                    {"index": index, "value": sample.value},
                )
            if previous is not None and sample.timestamp < previous:
                raise InvalidRequestError(
                    "History must be sorted by ascending timestamp",
                    {"index": index},
                )
            previous = sample.timestamp

    @staticmethod
    def _resolve_channel(channel: str | SensorChannel | None) -> SensorChannel | None:
        if channel is None:
            return None
        try:
            return SensorChannel.from_value(channel)
        except ValueError as e:
            raise InvalidRequestError(str(e), {"channel": str(channel)}) from e


@lru_cache
def get_engine() -> ForecastEngine:
    """Get the shared engine built from application settings."""
    return ForecastEngine(EngineConfig.from_settings(get_settings().forecast))


def forecast(
    history: Sequence[Sample],
    horizon_hours: int,
    method: str | ForecastMethod | None = "auto",
    channel: str | SensorChannel | None = None,
) -> list[PredictionPoint]:
    """Forecast with the shared engine. See ForecastEngine.forecast."""
    return get_engine().forecast(history, horizon_hours, method=method, channel=channel)
