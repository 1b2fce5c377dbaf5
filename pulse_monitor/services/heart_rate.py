"""
Heart-rate guard and classifier.

`HeartRateFilter` is the permissive shell around the strict `KalmanFilter`:
bad samples become a filtered value of 0 without touching filter state, and
large jumps re-seed the filter instead of being absorbed slowly.
"""

from typing import Any

import structlog

from pulse_monitor.config import FilterConfig
from pulse_monitor.domain.models import (
    ClassificationResult,
    HeartRateReading,
    HeartRateStatus,
    Severity,
)
from pulse_monitor.services.kalman_filter import (
    InvalidInputError,
    KalmanFilter,
    is_finite_number,
)

logger = structlog.get_logger(__name__)

CRITICAL_ABOVE_BPM = 120
HIGH_ABOVE_BPM = 100
LOW_BELOW_BPM = 50

INVALID_SAMPLE_OUTPUT = 0


def classify_heart_rate(value: float) -> ClassificationResult:
    """Map a smoothed value to a status band. Boundary values are normal."""
    if value > CRITICAL_ABOVE_BPM:
        return ClassificationResult(status=HeartRateStatus.CRITICAL, severity=Severity.CRITICAL)
    if value > HIGH_ABOVE_BPM:
        return ClassificationResult(status=HeartRateStatus.HIGH, severity=Severity.WARNING)
    if value < LOW_BELOW_BPM:
        return ClassificationResult(status=HeartRateStatus.LOW, severity=Severity.WARNING)
    return ClassificationResult(status=HeartRateStatus.NORMAL, severity=Severity.INFO)


class HeartRateFilter:
    """
    Outlier guard owning one estimator for one stream.

    Design principles:
    - Never raises on bad samples (fail soft, the estimator stays untouched)
    - Re-seeds on step changes larger than the outlier threshold
    """

    def __init__(
        self,
        stream_id: str = "default",
        config: FilterConfig | None = None,
        estimator: KalmanFilter | None = None,
    ) -> None:
        self.stream_id = stream_id
        self.config = config or FilterConfig()
        self.estimator = estimator or KalmanFilter.from_config(self.config)
        self.logger = logger.bind(stream_id=stream_id)

    def get_estimate(self) -> float:
        return self.estimator.get_estimate()

    def _should_reset(self, sample: float) -> bool:
        current = self.estimator.get_estimate()
        # A non-positive estimate is a placeholder seed, not a tracked value.
        return abs(sample - current) > self.config.outlier_threshold and current > 0

    def _discard(self, sample: Any, reason: str) -> HeartRateReading:
        self.logger.warning("invalid_sample_discarded", sample=repr(sample), reason=reason)
        return HeartRateReading(
            stream_id=self.stream_id,
            raw_value=sample,
            filtered_value=INVALID_SAMPLE_OUTPUT,
            classification=classify_heart_rate(INVALID_SAMPLE_OUTPUT),
            accepted=False,
        )

    def process(self, sample: Any) -> HeartRateReading:
        """
        Guard, filter and classify one raw sample.

        Returns:
            HeartRateReading: The filtered value plus what the guard decided.
        """
        if not is_finite_number(sample):
            return self._discard(sample, reason="not a finite number")

        reset_applied = self._should_reset(sample)
        if reset_applied:
            self.logger.info(
                "outlier_reset",
                sample=sample,
                previous_estimate=round(self.estimator.get_estimate(), 3),
                threshold=self.config.outlier_threshold,
            )
            self.estimator.reset(sample)

        try:
            filtered_value = self.estimator.update(sample)
        except InvalidInputError as e:
            # Only reachable without a reset: a reset leaves a zero innovation.
            return self._discard(sample, reason=str(e))

        return HeartRateReading(
            stream_id=self.stream_id,
            raw_value=sample,
            filtered_value=filtered_value,
            classification=classify_heart_rate(filtered_value),
            accepted=True,
            reset_applied=reset_applied,
        )

    def filter(self, sample: Any) -> int:
        """Return the smoothed value for a sample, or 0 for an invalid one."""
        return self.process(sample).filtered_value
