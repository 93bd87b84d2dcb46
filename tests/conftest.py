"""
Shared test fixtures and configuration.
"""

from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta

import numpy as np
import pytest

from sensor_forecast.models.base import Sample

# ============================================================================
# Time Fixtures
# ============================================================================


@pytest.fixture
def base_time() -> datetime:
    """Fixed UTC start instant so results are reproducible."""
    return datetime(2024, 3, 1, 0, 0, tzinfo=UTC)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def make_history(base_time: datetime) -> Callable[..., list[Sample]]:
    """Factory building an hourly history from a sequence of values."""

    def _make(values: Sequence[float], step_hours: float = 1.0) -> list[Sample]:
        return [
            Sample(timestamp=base_time + timedelta(hours=i * step_hours), value=float(v))
            for i, v in enumerate(values)
        ]

    return _make


@pytest.fixture
def linear_history(make_history) -> list[Sample]:
    """Perfect unit-slope line: 1, 2, 3, 4."""
    return make_history([1.0, 2.0, 3.0, 4.0])


@pytest.fixture
def constant_history(make_history) -> list[Sample]:
    """Flat series."""
    return make_history([21.5] * 12)


@pytest.fixture
def noisy_temperature_history(make_history) -> list[Sample]:
    """Two days of hourly temperatures with a daily cycle and noise."""
    rng = np.random.default_rng(42)
    hours = np.arange(48)
    values = 22 + 4 * np.sin((hours - 8) * np.pi / 12) + rng.normal(0, 0.5, hours.size)
    return make_history(values)


@pytest.fixture
def rising_humidity_history(make_history) -> list[Sample]:
    """Humidity climbing steeply toward saturation."""
    return make_history([70 + 2.5 * i for i in range(12)])
