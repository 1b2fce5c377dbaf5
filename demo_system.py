"""
System walkthrough demonstrating the full smoothing pipeline.

This script exercises:
1. Configuration loading and validation
2. Guarded filtering across independent streams
3. Classification of smoothed values
4. Alert generation and dispatch
5. Fail-soft handling of invalid samples

Run with: uv run python demo_system.py
"""

import asyncio

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pulse_monitor.config import get_config, print_config_summary, validate_config
from pulse_monitor.domain.models import HeartRateReading, Severity
from pulse_monitor.services import AlertManager, HeartRateMonitor, configure_logging

console = Console()

SCENARIOS: dict[str, list[object]] = {
    "vehicle-step-change": [70, 72, 150, 148, 149],
    "vehicle-bradycardia": [68, 60, 55, 48, 45, 44],
    "vehicle-noisy-sensor": [71, float("nan"), 73, None, "n/a", 74],
}

_SEVERITY_STYLE = {Severity.INFO: "green", Severity.WARNING: "yellow", Severity.CRITICAL: "red"}


def render_readings(stream_id: str, readings: list[HeartRateReading]) -> None:
    table = Table(title=f"Stream {stream_id}")
    table.add_column("Raw", style="cyan")
    table.add_column("Filtered", style="magenta")
    table.add_column("Status")
    table.add_column("Reset", style="yellow")
    table.add_column("Accepted")

    for reading in readings:
        style = _SEVERITY_STYLE[reading.classification.severity]
        table.add_row(
            repr(reading.raw_value),
            str(reading.filtered_value),
            f"[{style}]{reading.classification.status.value}[/{style}]",
            "yes" if reading.reset_applied else "",
            "✅" if reading.accepted else "❌",
        )

    console.print(table)


async def run_demo() -> None:
    console.print(Panel("💓 Heart-rate smoothing walkthrough", style="bold blue"))

    validate_config()
    config = get_config()
    configure_logging(config.logging)
    print_config_summary()

    monitor = HeartRateMonitor(config.filter)
    alert_manager = AlertManager()

    for stream_id, samples in SCENARIOS.items():
        console.print(f"\n{'=' * 60}")
        readings = monitor.process_batch(stream_id, samples)
        render_readings(stream_id, readings)

        alerts = [a for a in map(alert_manager.process_reading, readings) if a is not None]
        await alert_manager.dispatch_alerts(alerts)

    console.print(f"\n🎯 {alert_manager.unread_count} unread alerts across {len(monitor.stream_ids)} streams")


if __name__ == "__main__":
    try:
        asyncio.run(run_demo())
    except KeyboardInterrupt:
        console.print("\n👋 Demo stopped by user", style="yellow")
