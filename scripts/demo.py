#!/usr/bin/env python3
"""
Demo script for the sensor forecast engine.

This script:
- Generates a synthetic hourly history for one sensor channel
- Shows the extracted features and the selected method
- Prints the forecast (or compares every method)
"""

import argparse
import json
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import numpy as np

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sensor_forecast.features import FeatureExtractor, summarize  # noqa: E402
from sensor_forecast.models import ForecastMethod, Sample, SensorChannel  # noqa: E402
from sensor_forecast.prediction import ForecastEngine, MethodSelector  # noqa: E402
from sensor_forecast.utils.logging import setup_logging  # noqa: E402

# Typical level and daily swing per channel
CHANNEL_PROFILES: dict[SensorChannel, tuple[float, float]] = {
    SensorChannel.TEMPERATURE: (22.0, 4.0),
    SensorChannel.HUMIDITY: (60.0, 15.0),
    SensorChannel.PRESSURE: (1013.0, 3.0),
    SensorChannel.LIGHT: (20000.0, 18000.0),
    SensorChannel.AIR_QUALITY: (80.0, 25.0),
}


class SensorPatternGenerator:
    """Generate hourly sensor readings with a daily cycle, drift and noise."""

    def __init__(
        self,
        channel: SensorChannel,
        drift_per_hour: float = 0.0,
        noise_level: float = 0.05,
        seed: int | None = None,
    ):
        self.channel = channel
        self.base, self.amplitude = CHANNEL_PROFILES[channel]
        self.drift_per_hour = drift_per_hour
        self.noise_level = noise_level
        self._rng = np.random.default_rng(seed)

    def generate(self, hours: int, end: datetime) -> list[Sample]:
        start = end - timedelta(hours=hours - 1)
        samples = []
        for i in range(hours):
            timestamp = start + timedelta(hours=i)
            daily = self.amplitude * np.sin((timestamp.hour - 8) * np.pi / 12)
            noise = self._rng.normal(0, self.noise_level * self.amplitude)
            value = self.base + daily + self.drift_per_hour * i + noise
            samples.append(Sample(timestamp=timestamp, value=float(value)))
        return samples


def print_header(title: str):
    """Print a section header."""
    print()
    print("=" * 60)
    print(f" {title}")
    print("=" * 60)


def main():
    """Main function."""
    parser = argparse.ArgumentParser(description="Forecast a synthetic sensor channel")
    parser.add_argument(
        "--channel",
        choices=[c.value for c in SensorChannel],
        default=SensorChannel.TEMPERATURE.value,
    )
    parser.add_argument("--history-hours", type=int, default=48, help="Hours of history")
    parser.add_argument("--horizon", type=int, default=12, help="Hours to forecast")
    parser.add_argument("--method", default="auto", help="Forecast method or 'auto'")
    parser.add_argument("--drift", type=float, default=0.0, help="Drift per hour")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--compare", action="store_true", help="Run every method")
    parser.add_argument("--json", action="store_true", help="Print JSON output")
    parser.add_argument("--verbose", action="store_true", help="Show fit diagnostics")
    args = parser.parse_args()

    setup_logging(log_level="DEBUG" if args.verbose else None)

    channel = SensorChannel.from_value(args.channel)
    generator = SensorPatternGenerator(channel, drift_per_hour=args.drift, seed=args.seed)
    end = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)
    history = generator.generate(args.history_hours, end)

    engine = ForecastEngine()
    methods = (
        [m for m in ForecastMethod if m is not ForecastMethod.AUTO]
        if args.compare
        else [ForecastMethod.parse(args.method)]
    )
    results = {
        m.value: engine.forecast(history, args.horizon, method=m, channel=channel)
        for m in methods
    }

    if args.json:
        print(json.dumps({k: [p.to_dict() for p in v] for k, v in results.items()}, indent=2))
        return

    print_header(f"{channel.display_name} history ({channel.unit})")
    print(json.dumps(summarize(history, channel).to_dict(), indent=2))

    features = FeatureExtractor().extract(history)
    selection = MethodSelector(engine.config.selector).explain(features, history)
    print_header("Features")
    for name, value in features.to_dict().items():
        print(f"  {name:<16} {value:>12.4f}")
    print(f"  auto selection   {selection.method.value} (rule: {selection.rule})")

    for name, points in results.items():
        print_header(f"Forecast: {name}")
        if not points:
            print("  Insufficient data")
            continue
        for point in points:
            print(
                f"  {point.timestamp:%Y-%m-%d %H:%M}  "
                f"{point.predicted_value:>10.2f} {channel.unit:<4} "
                f"confidence={point.confidence:.2f}  [{point.method.value}]"
            )


if __name__ == "__main__":
    main()
