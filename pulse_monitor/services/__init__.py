"""
Core services for heart-rate smoothing.

This package contains the estimator, the outlier guard and classifier, the
per-stream monitor and the alert bridge.
"""

from .alerting import AlertEvent, AlertManager
from .heart_rate import HeartRateFilter, classify_heart_rate
from .kalman_filter import InvalidConfigurationError, InvalidInputError, KalmanFilter
from .stream_monitor import HeartRateMonitor, Result, configure_logging

__all__ = [
    "AlertEvent",
    "AlertManager",
    "HeartRateFilter",
    "HeartRateMonitor",
    "InvalidConfigurationError",
    "InvalidInputError",
    "KalmanFilter",
    "Result",
    "classify_heart_rate",
    "configure_logging",
]
