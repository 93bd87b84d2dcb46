"""
Forecast orchestration.

This module provides:
- ForecastEngine / forecast: validated, fallback-protected forecasting
- MethodSelector: ordered rule table choosing a method from features
"""

from .engine import EngineConfig, ForecastEngine, forecast, get_engine
from .selector import MethodSelector, Selection, SelectionRule, SelectorConfig

__all__ = [
    "ForecastEngine",
    "EngineConfig",
    "forecast",
    "get_engine",
    "MethodSelector",
    "SelectorConfig",
    "SelectionRule",
    "Selection",
]
