"""
Configuration management using pydantic-settings.

Hierarchical configuration with environment variable support.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ForecastSettings(BaseSettings):
    """Forecast engine settings."""

    model_config = SettingsConfigDict(env_prefix="FORECAST_")

    # Request bounds
    max_horizon_hours: int = Field(default=168, ge=1, description="Largest accepted horizon (hours)")
    min_history_samples: int = Field(default=3, ge=1, description="Samples required to forecast")
    default_method: str = Field(default="auto")

    # Method selection thresholds (empirical, tune against real sensor data)
    min_curve_fit_samples: int = Field(default=5, ge=1)
    linear_min_correlation: float = Field(default=0.85, ge=0.0, le=1.0)
    linear_min_trend_strength: float = Field(default=0.3, ge=0.0)
    flat_max_volatility: float = Field(default=0.1, ge=0.0)
    flat_max_trend_strength: float = Field(default=0.2, ge=0.0)
    polynomial_min_samples: int = Field(default=8, ge=2)
    polynomial_min_skewness: float = Field(default=0.5, ge=0.0)
    polynomial_max_correlation: float = Field(default=0.7, ge=0.0, le=1.0)
    polynomial_min_r2_gain: float = Field(default=0.05, ge=0.0)
    polynomial_test_degree: int = Field(default=2, ge=2, le=3)
    smoothing_min_trend_strength: float = Field(default=0.4, ge=0.0)
    smoothing_min_volatility: float = Field(default=0.2, ge=0.0)
    default_polynomial_min_samples: int = Field(default=10, ge=2)

    @field_validator("default_method", mode="before")
    @classmethod
    def normalize_method(cls, v: str | None) -> str:
        return (v or "auto").strip().lower()


class AppSettings(BaseSettings):
    """Application-level settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")

    # Nested settings
    forecast: ForecastSettings = Field(default_factory=ForecastSettings)


@lru_cache
def get_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()

