"""
Forecast models for single-channel sensor histories.

Four fixed strategies, each forecasting hourly points after the last sample:
- Linear: ordinary least squares trend line
- Polynomial: weighted polynomial with an extrapolation guard
- Moving average: trend-decayed recent mean
- Exponential smoothing: Holt level/trend smoothing

All predictions are clamped to the sensor channel's plausible range.
"""

from .base import (
    BasePredictor,
    ForecastMethod,
    PredictionPoint,
    Sample,
    is_complete,
    samples_from_dataframe,
    samples_from_series,
    samples_to_frame,
)
from .channels import CHANNEL_RANGES, ChannelRange, SensorChannel, clamp_to_channel
from .exponential_smoothing import ExponentialSmoothingPredictor, HoltState
from .linear import LinearPredictor
from .moving_average import MovingAveragePredictor
from .polynomial import PolynomialPredictor

__all__ = [
    # Base classes
    "BasePredictor",
    "ForecastMethod",
    "PredictionPoint",
    "Sample",
    "is_complete",
    "samples_from_dataframe",
    "samples_from_series",
    "samples_to_frame",
    # Channels
    "CHANNEL_RANGES",
    "ChannelRange",
    "SensorChannel",
    "clamp_to_channel",
    # Predictors
    "LinearPredictor",
    "PolynomialPredictor",
    "MovingAveragePredictor",
    "ExponentialSmoothingPredictor",
    "HoltState",
]
