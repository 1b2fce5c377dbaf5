"""
Per-stream heart-rate monitoring.

Key patterns:
- One guarded filter per sensor stream, owned by the monitor (no global filter)
- Generic Result type for expected failures such as unknown streams
- Structured logging configured once for the whole package
"""

import logging
from collections.abc import Iterable
from typing import Any, Generic, TypeVar

import structlog

from pulse_monitor.config import FilterConfig, LoggingConfig
from pulse_monitor.domain.models import HeartRateReading
from pulse_monitor.services.heart_rate import HeartRateFilter


def configure_logging(config: LoggingConfig | None = None) -> None:
    """Configure structlog on top of stdlib logging."""
    config = config or LoggingConfig()
    logging.basicConfig(format="%(message)s", level=getattr(logging, config.level))
    logging.getLogger().setLevel(getattr(logging, config.level))

    renderer = (
        structlog.dev.ConsoleRenderer()
        if config.format == "console"
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Structured logging (production-ready observability)
configure_logging()

logger = structlog.get_logger(__name__)

# Result type for lookups that are expected to miss
ValueT = TypeVar("ValueT")
ErrorT = TypeVar("ErrorT", bound=BaseException)


class Result(Generic[ValueT, ErrorT]):
    """
    Value-or-error holder returned by stream lookups.

    Unknown stream ids are routine for callers (a session may already have
    ended), so they come back as `Result.err(KeyError)` rather than raising.
    """

    def __init__(self, value: ValueT | None = None, error: ErrorT | None = None) -> None:
        if value is not None and error is not None:
            raise ValueError("Result cannot have both value and error")
        if value is None and error is None:
            raise ValueError("Result must have either value or error")
        self._value: ValueT | None = value
        self._error: ErrorT | None = error

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT, ErrorT]":
        return cls(value=value)

    @classmethod
    def err(cls, error: ErrorT) -> "Result[ValueT, ErrorT]":
        return cls(error=error)

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    def unwrap(self) -> ValueT:
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore

    def unwrap_or(self, default: ValueT) -> ValueT:
        return self._value if self._error is None else default  # type: ignore

    def unwrap_err(self) -> ErrorT:
        if self._error is None:
            raise ValueError("Called unwrap_err() on an Ok value")
        return self._error


class HeartRateMonitor:
    """
    Routes samples to the filter that owns their stream.

    Design principles:
    - Each stream gets its own estimator, created lazily from config
    - Callers deliver at most one sample at a time per stream
    - Observable (structured logging for stream lifecycle)
    """

    def __init__(self, config: FilterConfig | None = None) -> None:
        self.config = config or FilterConfig()
        self._filters: dict[str, HeartRateFilter] = {}
        self.logger = logger.bind(component="heart_rate_monitor")

    @property
    def stream_ids(self) -> list[str]:
        return list(self._filters)

    def _filter_for(self, stream_id: str) -> HeartRateFilter:
        heart_rate_filter = self._filters.get(stream_id)
        if heart_rate_filter is None:
            heart_rate_filter = HeartRateFilter(stream_id=stream_id, config=self.config)
            self._filters[stream_id] = heart_rate_filter
            self.logger.info("stream_created", stream_id=stream_id)
        return heart_rate_filter

    def get_filter(self, stream_id: str) -> Result[HeartRateFilter, KeyError]:
        """Look up an existing stream without creating it."""
        heart_rate_filter = self._filters.get(stream_id)
        if heart_rate_filter is None:
            return Result.err(KeyError(f"Unknown stream: {stream_id}"))
        return Result.ok(heart_rate_filter)

    def process_sample(self, stream_id: str, sample: Any) -> HeartRateReading:
        return self._filter_for(stream_id).process(sample)

    def process_batch(self, stream_id: str, samples: Iterable[Any]) -> list[HeartRateReading]:
        """Feed samples in order; each one sees the state left by the previous."""
        heart_rate_filter = self._filter_for(stream_id)
        readings = [heart_rate_filter.process(sample) for sample in samples]

        self.logger.info(
            "batch_processed",
            stream_id=stream_id,
            total_samples=len(readings),
            rejected_samples=sum(1 for r in readings if not r.accepted),
            resets=sum(1 for r in readings if r.reset_applied),
        )
        return readings

    def remove_stream(self, stream_id: str) -> Result[HeartRateFilter, KeyError]:
        """End a stream's session and hand back the filter it owned."""
        heart_rate_filter = self._filters.pop(stream_id, None)
        if heart_rate_filter is None:
            self.logger.warning("remove_unknown_stream", stream_id=stream_id)
            return Result.err(KeyError(f"Unknown stream: {stream_id}"))

        self.logger.info("stream_removed", stream_id=stream_id)
        return Result.ok(heart_rate_filter)
