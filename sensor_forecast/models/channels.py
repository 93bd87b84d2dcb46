"""
Sensor channels and their plausible value ranges.

Every predicted value is clamped into its channel's range before it is
returned, whichever model produced it.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np


class SensorChannel(str, Enum):
    """Sensor types with unit, display name and plausible range."""

    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    PRESSURE = "pressure"
    LIGHT = "light"
    AIR_QUALITY = "air_quality"

    @property
    def unit(self) -> str:
        return CHANNEL_RANGES[self].unit

    @property
    def display_name(self) -> str:
        return CHANNEL_RANGES[self].display_name

    @property
    def min_value(self) -> float:
        return CHANNEL_RANGES[self].min_value

    @property
    def max_value(self) -> float:
        return CHANNEL_RANGES[self].max_value

    @classmethod
    def from_value(cls, value: "str | SensorChannel") -> "SensorChannel":
        """
        Look up a channel by name.

        Raises:
            ValueError: If the name is not a known channel
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown sensor type: {value}") from None


@dataclass(frozen=True)
class ChannelRange:
    """Unit and inclusive [min_value, max_value] bounds for one channel."""

    display_name: str
    unit: str
    min_value: float
    max_value: float


CHANNEL_RANGES: dict[SensorChannel, ChannelRange] = {
    SensorChannel.TEMPERATURE: ChannelRange("Temperature", "°C", -40.0, 80.0),
    SensorChannel.HUMIDITY: ChannelRange("Humidity", "%", 0.0, 100.0),
    SensorChannel.PRESSURE: ChannelRange("Pressure", "hPa", 800.0, 1200.0),
    SensorChannel.LIGHT: ChannelRange("Light", "lux", 0.0, 100000.0),
    SensorChannel.AIR_QUALITY: ChannelRange("Air quality", "AQI", 0.0, 500.0),
}


def clamp_to_channel(channel: SensorChannel | None, values: np.ndarray) -> np.ndarray:
    """
    Clamp values into the channel's plausible range.

    A missing channel leaves values unbounded.
    """
    values = np.asarray(values, dtype=float)
    if channel is None:
        return values
    bounds = CHANNEL_RANGES[channel]
    return np.clip(values, bounds.min_value, bounds.max_value)
