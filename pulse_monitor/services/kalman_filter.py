"""
Scalar Kalman filter for heart-rate smoothing.

State model: x(k) = x(k-1) + w, where w ~ N(0, Q)
Measurement model: z(k) = x(k) + v, where v ~ N(0, R)

This is the strict core: invalid measurements and degenerate tuning raise,
and a failed call never mutates filter state. Callers that prefer to fail soft
wrap it in `HeartRateFilter`.
"""

import math
from numbers import Real
from typing import Any

import structlog

from pulse_monitor.config import FilterConfig
from pulse_monitor.domain.models import EstimatorState

logger = structlog.get_logger(__name__)

# Uncertainty applied on reset, independent of the seed covariance.
RESET_ERROR_COVARIANCE = 1.0


class InvalidInputError(ValueError):
    """A measurement or reset value that is not a finite real number."""


class InvalidConfigurationError(ValueError):
    """Tuning constants that would make the filter degenerate."""


def is_finite_number(value: Any) -> bool:
    """True for finite real numbers, excluding bools."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints beyond float range
        return False


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, ties away from zero (72.5 -> 73, -72.5 -> -73)."""
    rounded = math.floor(abs(value) + 0.5)
    return -rounded if value < 0 else rounded


class KalmanFilter:
    """
    1D Kalman filter with a predict/update cycle per measurement.

    One instance belongs to exactly one sensor stream. Not thread-safe.
    """

    def __init__(
        self,
        initial_estimate: float = 70.0,
        initial_error_covariance: float = 1.0,
        process_noise: float = 0.01,
        measurement_noise: float = 2.0,
    ) -> None:
        for name, value in (
            ("initial_estimate", initial_estimate),
            ("initial_error_covariance", initial_error_covariance),
            ("process_noise", process_noise),
            ("measurement_noise", measurement_noise),
        ):
            if not is_finite_number(value):
                raise InvalidConfigurationError(f"{name} must be a finite number, got {value!r}")
        if initial_error_covariance < 0:
            raise InvalidConfigurationError("initial_error_covariance must be >= 0")
        if process_noise < 0:
            raise InvalidConfigurationError("process_noise must be >= 0")
        if measurement_noise <= 0:
            raise InvalidConfigurationError("measurement_noise must be > 0")

        self._estimate = float(initial_estimate)
        self._error_covariance = float(initial_error_covariance)
        self._process_noise = float(process_noise)
        self._measurement_noise = float(measurement_noise)
        self.last_gain: float | None = None

    @classmethod
    def from_config(cls, config: FilterConfig) -> "KalmanFilter":
        return cls(
            initial_estimate=config.initial_estimate,
            initial_error_covariance=config.initial_error_covariance,
            process_noise=config.process_noise,
            measurement_noise=config.measurement_noise,
        )

    @property
    def process_noise(self) -> float:
        return self._process_noise

    @property
    def measurement_noise(self) -> float:
        return self._measurement_noise

    @property
    def error_covariance(self) -> float:
        return self._error_covariance

    @property
    def state(self) -> EstimatorState:
        return EstimatorState(
            estimate=self._estimate,
            error_covariance=self._error_covariance,
            process_noise=self._process_noise,
            measurement_noise=self._measurement_noise,
        )

    def update(self, measurement: float) -> int:
        """
        Fold one measurement into the estimate.

        Returns:
            int: The new estimate rounded half away from zero.

        Raises:
            InvalidInputError: If the measurement is not a finite number or
                would push the estimate out of float range.
        """
        if not is_finite_number(measurement):
            raise InvalidInputError(f"measurement must be a finite number, got {measurement!r}")

        predicted_covariance = self._error_covariance + self._process_noise
        gain = predicted_covariance / (predicted_covariance + self._measurement_noise)
        innovation = measurement - self._estimate
        estimate = self._estimate + gain * innovation
        error_covariance = (1.0 - gain) * predicted_covariance
        if not (math.isfinite(estimate) and math.isfinite(error_covariance)):
            raise InvalidInputError(f"measurement {measurement!r} overflows the estimate")
        rounded = round_half_away_from_zero(estimate)

        self._estimate = estimate
        self._error_covariance = error_covariance
        self.last_gain = gain

        logger.debug(
            "kalman_update",
            measurement=measurement,
            estimate=self._estimate,
            gain=gain,
            error_covariance=self._error_covariance,
        )
        return rounded

    def get_estimate(self) -> float:
        return self._estimate

    def reset(self, value: float) -> None:
        """Re-seed the estimate; uncertainty goes to RESET_ERROR_COVARIANCE."""
        if not is_finite_number(value):
            raise InvalidInputError(f"reset value must be a finite number, got {value!r}")
        self._estimate = float(value)
        self._error_covariance = RESET_ERROR_COVARIANCE
