"""
Domain models for heart-rate smoothing and classification.

These models represent the core business concepts and are framework-agnostic.
They use Pydantic for validation and are frozen so readings can be shared freely.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class HeartRateStatus(str, Enum):
    """Operational band of a smoothed heart-rate value."""

    CRITICAL = "critical"
    HIGH = "high"
    LOW = "low"
    NORMAL = "normal"


class Severity(str, Enum):
    """Alert severity attached to a classification."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class ClassificationResult(BaseModel):
    """Status and severity for a single smoothed value."""

    model_config = ConfigDict(frozen=True)

    status: HeartRateStatus
    severity: Severity


class EstimatorState(BaseModel):
    """Snapshot of a scalar Kalman filter."""

    model_config = ConfigDict(frozen=True)

    estimate: float
    error_covariance: float = Field(ge=0.0)
    process_noise: float = Field(ge=0.0)
    measurement_noise: float = Field(gt=0.0)


class HeartRateReading(BaseModel):
    """Result of routing one raw sample through a guarded filter."""

    model_config = ConfigDict(frozen=True)

    stream_id: str
    raw_value: Any = Field(description="Sample as received, possibly invalid")
    filtered_value: int
    classification: ClassificationResult
    accepted: bool = Field(description="False when the sample was discarded as invalid")
    reset_applied: bool = False
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
