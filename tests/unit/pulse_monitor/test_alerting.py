"""
Tests for the alert bridge in `pulse_monitor/services/alerting.py`.
"""

import math

import pytest

from pulse_monitor.domain.models import HeartRateReading, Severity
from pulse_monitor.services.alerting import AlertEvent, AlertManager
from pulse_monitor.services.stream_monitor import HeartRateMonitor


@pytest.fixture
def monitor() -> HeartRateMonitor:
    return HeartRateMonitor()


@pytest.fixture
def manager() -> AlertManager:
    return AlertManager()


def _alerts_for(
    manager: AlertManager, readings: list[HeartRateReading]
) -> list[AlertEvent]:
    return [a for a in map(manager.process_reading, readings) if a is not None]


def test_normal_readings_raise_no_alert(monitor: HeartRateMonitor, manager: AlertManager) -> None:
    readings = monitor.process_batch("vehicle-1", [70, 72, 71])

    assert _alerts_for(manager, readings) == []
    assert manager.unread_count == 0


def test_entering_critical_band_alerts_once(
    monitor: HeartRateMonitor, manager: AlertManager
) -> None:
    readings = monitor.process_batch("vehicle-1", [70, 72, 150, 148, 149])

    alerts = _alerts_for(manager, readings)

    assert len(alerts) == 1
    alert = alerts[0]
    assert alert.severity == Severity.CRITICAL
    assert alert.stream_id == "vehicle-1"
    assert "150 bpm" in alert.description
    assert not alert.read


def test_band_change_alerts_again(monitor: HeartRateMonitor, manager: AlertManager) -> None:
    readings = monitor.process_batch("vehicle-1", [70, 150, 40])

    alerts = _alerts_for(manager, readings)

    assert [a.severity for a in alerts] == [Severity.CRITICAL, Severity.WARNING]
    assert alerts[1].title == "Low heart rate"


def test_streams_are_tracked_independently(
    monitor: HeartRateMonitor, manager: AlertManager
) -> None:
    first = monitor.process_sample("vehicle-1", 150)
    second = monitor.process_sample("vehicle-2", 150)

    assert manager.process_reading(first) is not None
    assert manager.process_reading(second) is not None


def test_forget_stream_lets_new_session_alert_again(
    monitor: HeartRateMonitor, manager: AlertManager
) -> None:
    assert manager.process_reading(monitor.process_sample("vehicle-1", 150)) is not None
    monitor.remove_stream("vehicle-1")
    manager.forget_stream("vehicle-1")

    alert = manager.process_reading(monitor.process_sample("vehicle-1", 150))

    assert alert is not None
    assert alert.severity == Severity.CRITICAL
    assert len(manager.alerts) == 2


def test_same_band_without_forget_stays_silent(
    monitor: HeartRateMonitor, manager: AlertManager
) -> None:
    manager.process_reading(monitor.process_sample("vehicle-1", 150))
    monitor.remove_stream("vehicle-1")

    assert manager.process_reading(monitor.process_sample("vehicle-1", 150)) is None


def test_forget_unknown_stream_is_noop(manager: AlertManager) -> None:
    manager.forget_stream("missing")
    assert manager.alerts == []


def test_discarded_samples_never_alert(monitor: HeartRateMonitor, manager: AlertManager) -> None:
    reading = monitor.process_sample("vehicle-1", math.nan)

    assert reading.classification.severity == Severity.WARNING
    assert manager.process_reading(reading) is None


def test_mark_as_read_and_delete(monitor: HeartRateMonitor, manager: AlertManager) -> None:
    alerts = _alerts_for(manager, monitor.process_batch("vehicle-1", [150, 40]))
    assert manager.unread_count == 2

    assert manager.mark_as_read(alerts[0].alert_id)
    assert manager.unread_count == 1

    assert manager.delete_alert(alerts[1].alert_id)
    assert manager.unread_count == 0
    assert [a.alert_id for a in manager.alerts] == [alerts[0].alert_id]

    assert not manager.mark_as_read("missing")
    assert not manager.delete_alert("missing")


async def test_dispatch_continues_after_handler_failure(manager: AlertManager) -> None:
    alert = AlertEvent(
        stream_id="vehicle-1",
        severity=Severity.CRITICAL,
        title="Critical heart rate",
        description="Smoothed heart rate of 150 bpm on vehicle-1",
    )
    delivered: list[str] = []
    awaited: list[str] = []

    def failing_handler(event: AlertEvent) -> None:
        raise RuntimeError("push service down")

    def recording_handler(event: AlertEvent) -> None:
        delivered.append(event.alert_id)

    async def async_handler(event: AlertEvent) -> None:
        awaited.append(event.alert_id)

    await manager.dispatch_alerts([alert], [failing_handler, recording_handler, async_handler])

    assert delivered == [alert.alert_id]
    assert awaited == [alert.alert_id]


async def test_dispatch_defaults_to_console(
    manager: AlertManager, capsys: pytest.CaptureFixture[str]
) -> None:
    alert = AlertEvent(
        stream_id="vehicle-1",
        severity=Severity.WARNING,
        title="High heart rate",
        description="Smoothed heart rate of 105 bpm on vehicle-1",
    )

    await manager.dispatch_alerts([alert])

    out = capsys.readouterr().out
    assert "ALERT - WARNING" in out
    assert "High heart rate" in out


async def test_dispatch_with_no_alerts_is_noop(manager: AlertManager) -> None:
    calls: list[AlertEvent] = []
    await manager.dispatch_alerts([], [calls.append])
    assert calls == []
