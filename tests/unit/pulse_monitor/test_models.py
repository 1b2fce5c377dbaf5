"""
Tests for domain models in `pulse_monitor/domain/models.py`.
"""

from datetime import UTC, datetime

import pytest
from hypothesis import given
from hypothesis import strategies as st

from pulse_monitor.domain.models import (
    ClassificationResult,
    EstimatorState,
    HeartRateReading,
    HeartRateStatus,
    Severity,
)


@given(
    estimate=st.floats(allow_nan=False, allow_infinity=False),
    error_covariance=st.floats(min_value=0.0, max_value=1e6),
)
def test_estimator_state_accepts_valid_snapshots(estimate: float, error_covariance: float) -> None:
    state = EstimatorState(
        estimate=estimate,
        error_covariance=error_covariance,
        process_noise=0.01,
        measurement_noise=2.0,
    )

    assert state.estimate == estimate
    assert state.error_covariance == error_covariance


def test_estimator_state_rejects_negative_covariance() -> None:
    with pytest.raises(ValueError):
        EstimatorState(estimate=70, error_covariance=-0.1, process_noise=0.01, measurement_noise=2)


def test_reading_is_timestamped_and_frozen() -> None:
    reading = HeartRateReading(
        stream_id="vehicle-1",
        raw_value=72,
        filtered_value=71,
        classification=ClassificationResult(
            status=HeartRateStatus.NORMAL, severity=Severity.INFO
        ),
        accepted=True,
    )

    assert isinstance(reading.timestamp, datetime)
    assert reading.timestamp.tzinfo == UTC
    assert reading.reset_applied is False

    with pytest.raises(ValueError, match="frozen"):
        reading.filtered_value = 80  # type: ignore[misc]


def test_enum_values_are_wire_strings() -> None:
    assert [s.value for s in HeartRateStatus] == ["critical", "high", "low", "normal"]
    assert [s.value for s in Severity] == ["critical", "warning", "info"]
