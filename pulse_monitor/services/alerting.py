"""
Alert bridge between classified readings and the notification layer.

Readings whose severity is above info produce an alert when a stream enters a
new status band. History is in memory only; persistence and UI belong to the
notification layer.
"""

import inspect
import uuid
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog

from pulse_monitor.domain.models import HeartRateReading, HeartRateStatus, Severity

logger = structlog.get_logger(__name__)


@dataclass
class AlertEvent:
    """Represents an alert that should be sent to external systems."""

    stream_id: str
    severity: Severity
    title: str
    description: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    read: bool = False
    alert_id: str = field(default_factory=lambda: uuid.uuid4().hex)


_TITLES = {
    HeartRateStatus.CRITICAL: "Critical heart rate",
    HeartRateStatus.HIGH: "High heart rate",
    HeartRateStatus.LOW: "Low heart rate",
}


class AlertManager:
    """Manages alert generation and dispatching."""

    def __init__(self, max_history: int = 1000) -> None:
        self.alert_history: deque[AlertEvent] = deque(maxlen=max_history)
        self._last_status: dict[str, HeartRateStatus] = {}
        self.logger = logger.bind(component="alert_manager")

    @property
    def alerts(self) -> list[AlertEvent]:
        """Alerts newest first."""
        return sorted(self.alert_history, key=lambda a: a.timestamp, reverse=True)

    @property
    def unread_count(self) -> int:
        return sum(1 for alert in self.alert_history if not alert.read)

    def process_reading(self, reading: HeartRateReading) -> AlertEvent | None:
        """Convert a reading into an alert when its stream enters a non-normal band."""
        if not reading.accepted:
            return None

        status = reading.classification.status
        previous = self._last_status.get(reading.stream_id)
        self._last_status[reading.stream_id] = status

        if reading.classification.severity == Severity.INFO or status == previous:
            return None

        alert = AlertEvent(
            stream_id=reading.stream_id,
            severity=reading.classification.severity,
            title=_TITLES[status],
            description=f"Smoothed heart rate of {reading.filtered_value} bpm on {reading.stream_id}",
            timestamp=reading.timestamp,
        )
        self.alert_history.append(alert)

        self.logger.info(
            "alert_generated",
            alert_id=alert.alert_id,
            stream_id=alert.stream_id,
            severity=alert.severity.value,
            heart_rate=reading.filtered_value,
        )
        return alert

    def forget_stream(self, stream_id: str) -> None:
        """Drop band tracking for an ended session; its alerts stay in history."""
        if self._last_status.pop(stream_id, None) is not None:
            self.logger.info("stream_forgotten", stream_id=stream_id)

    def mark_as_read(self, alert_id: str) -> bool:
        for alert in self.alert_history:
            if alert.alert_id == alert_id:
                alert.read = True
                return True
        return False

    def delete_alert(self, alert_id: str) -> bool:
        for alert in self.alert_history:
            if alert.alert_id == alert_id:
                self.alert_history.remove(alert)
                self.logger.info("alert_deleted", alert_id=alert_id)
                return True
        return False

    async def dispatch_alerts(
        self,
        alerts: list[AlertEvent],
        handlers: list[Callable[[AlertEvent], None]] | None = None,
    ) -> None:
        """Dispatch alerts to configured handlers (push, email, pager, etc.)."""

        if not alerts:
            return

        # Default console handler for development
        if not handlers:
            handlers = [self._console_alert_handler]

        for alert in alerts:
            for handler in handlers:
                try:
                    await handler(alert) if inspect.iscoroutinefunction(handler) else handler(alert)
                except Exception as e:
                    self.logger.error(
                        "alert_dispatch_failed", error=str(e), alert_title=alert.title
                    )

    def _console_alert_handler(self, alert: AlertEvent) -> None:
        """Development alert handler that prints to console."""

        severity_emoji = {Severity.WARNING: "⚠️", Severity.CRITICAL: "🔥"}
        emoji = severity_emoji.get(alert.severity, "📢")

        print(f"\n{emoji} ALERT - {alert.severity.value.upper()}")
        print(f"Title: {alert.title}")
        print(f"Stream: {alert.stream_id}")
        print(f"Time: {alert.timestamp.strftime('%Y-%m-%d %H:%M:%S UTC')}")
        print(f"Description: {alert.description}")
        print("-" * 80)
