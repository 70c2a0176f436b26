"""Timer package."""

from .engine import (
    TimerEngine,
    TimerSnapshot,
    Phase,
    Status,
    PhaseNotifier,
    TICK_INTERVAL_MS,
    format_time,
    phase_duration,
)

__all__ = [
    "TimerEngine",
    "TimerSnapshot",
    "Phase",
    "Status",
    "PhaseNotifier",
    "TICK_INTERVAL_MS",
    "format_time",
    "phase_duration",
]
