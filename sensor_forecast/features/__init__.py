"""
Feature extraction and window statistics.

- FeatureExtractor: moments, correlation, volatility and trend strength
  used to choose a forecasting method
- summarize / hourly_statistics: reporting aggregates over a window
"""

from .extractor import FeatureExtractor, FeatureVector
from .statistics import StatisticsSummary, hourly_statistics, summarize

__all__ = [
    "FeatureExtractor",
    "FeatureVector",
    "StatisticsSummary",
    "hourly_statistics",
    "summarize",
]
