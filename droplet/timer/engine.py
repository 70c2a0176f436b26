"""Timer state machine for droplet.

Phases
------
WORK          Focus interval.
SHORT_BREAK   Break between work phases.
LONG_BREAK    Break after ``workflow_count`` work phases.

Statuses
--------
IDLE              Not started; the full duration is pending.
RUNNING           Counting down, one second per tick.
PAUSED            Countdown suspended, remaining time frozen.
AWAITING_CONFIRM  Countdown hit zero and auto-start is off; held at the
                  boundary (display pulses at 00:00) until the user
                  continues.

Transitions
-----------
IDLE | PAUSED → RUNNING          (toggle_start_pause)
RUNNING → PAUSED                 (toggle_start_pause)
RUNNING → phase end              (tick reaches 0)
IDLE|RUNNING|PAUSED → phase end  (end_current_session)
phase end → RUNNING              (auto-start on)
phase end → AWAITING_CONFIRM     (auto-start off)
AWAITING_CONFIRM → RUNNING|IDLE  (continue_to_next_phase)
any → IDLE                       (reset_current_phase)

Commands whose precondition does not hold are no-ops.

Threading
---------
Single writer: the engine, its ``QTimer`` and every command must run on
the Qt thread that owns the engine.  The tick source only runs while
RUNNING.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..settings import Settings

logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class Phase(Enum):
    WORK = "work"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def label(self) -> str:
        return PHASE_LABELS[self]

    @property
    def icon(self) -> str:
        return PHASE_ICONS[self]

    @property
    def is_break(self) -> bool:
        return self is not Phase.WORK


class Status(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    AWAITING_CONFIRM = "awaiting_confirm"


# ── constants ─────────────────────────────────────────────────────────────

TICK_INTERVAL_MS = 1000

PHASE_LABELS: dict[Phase, str] = {
    Phase.WORK: "Work",
    Phase.SHORT_BREAK: "Break",
    Phase.LONG_BREAK: "Long Break",
}

PHASE_ICONS: dict[Phase, str] = {
    Phase.WORK: "\U0001F4A7",         # droplet
    Phase.SHORT_BREAK: "\U0001F33F",  # herb
    Phase.LONG_BREAK: "\U0001F30A",   # wave
}

_DURATION_FIELDS: dict[Phase, str] = {
    Phase.WORK: "work_duration",
    Phase.SHORT_BREAK: "short_break_duration",
    Phase.LONG_BREAK: "long_break_duration",
}


def format_time(seconds: int) -> str:
    """Render *seconds* as zero-padded ``MM:SS``."""
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


def phase_duration(settings: Settings, phase: Phase) -> int:
    """Configured length of *phase* in seconds (always > 0)."""
    minutes = getattr(settings, _DURATION_FIELDS[phase])
    return max(1, int(minutes)) * 60


# ── snapshot / collaborators ──────────────────────────────────────────────


@dataclass(frozen=True)
class TimerSnapshot:
    """Read-only copy of the engine state, published after every change."""

    phase: Phase
    status: Status
    remaining: int
    total: int
    completed_workflows: int

    @property
    def progress_ratio(self) -> float:
        """0.0 → 1.0 progress through the current phase."""
        elapsed = self.total - self.remaining
        return max(0.0, min(1.0, elapsed / self.total))

    @property
    def formatted_time(self) -> str:
        return format_time(self.remaining)


class PhaseNotifier(Protocol):
    def notify_phase_ended(self, phase: Phase) -> None: ...


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Pomodoro phase state machine driven by a one-second ``QTimer``.

    Signals
    -------
    state_changed(snapshot: TimerSnapshot)
        Emitted after every mutation (commands and ticks).
    phase_ended(phase: Phase)
        Emitted when a phase completes, naturally or via
        ``end_current_session``; carries the phase that just ended.
    """

    state_changed = pyqtSignal(object)
    phase_ended = pyqtSignal(object)

    def __init__(
        self,
        settings: Settings,
        notifier: PhaseNotifier | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings
        self._notifier = notifier

        self._phase: Phase = Phase.WORK
        self._status: Status = Status.IDLE
        self._total: int = phase_duration(settings, Phase.WORK)
        self._remaining: int = self._total
        self._completed_workflows: int = 0

        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(TICK_INTERVAL_MS)
        self._qt_timer.timeout.connect(self.tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def status(self) -> Status:
        return self._status

    @property
    def remaining(self) -> int:
        """Seconds left on the clock."""
        return self._remaining

    @property
    def total_duration(self) -> int:
        """Seconds snapshotted for the current phase when it began."""
        return self._total

    @property
    def completed_workflows(self) -> int:
        return self._completed_workflows

    @property
    def workflow_count(self) -> int:
        return self._settings.workflow_count

    @property
    def progress_ratio(self) -> float:
        return self.snapshot().progress_ratio

    @property
    def formatted_time(self) -> str:
        return format_time(self._remaining)

    @property
    def is_running(self) -> bool:
        return self._status == Status.RUNNING

    @property
    def settings(self) -> Settings:
        return self._settings

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            phase=self._phase,
            status=self._status,
            remaining=self._remaining,
            total=self._total,
            completed_workflows=self._completed_workflows,
        )

    # ══════════════════════════════════════════════════════════════════
    #  COMMANDS
    # ══════════════════════════════════════════════════════════════════

    def toggle_start_pause(self) -> None:
        """Start or resume from IDLE/PAUSED; pause while RUNNING."""
        if self._status == Status.RUNNING:
            self._qt_timer.stop()
            self._status = Status.PAUSED
            logger.debug("Paused %s at %s", self._phase.value, self.formatted_time)
        elif self._status in (Status.IDLE, Status.PAUSED):
            if self._status == Status.IDLE:
                self._remaining = self._total
            self._status = Status.RUNNING
            self._qt_timer.start()
            logger.debug("Running %s from %s", self._phase.value, self.formatted_time)
        else:
            return
        self._publish()

    def reset_current_phase(self) -> None:
        """Back to the full duration of the current phase, IDLE."""
        self._qt_timer.stop()
        self._remaining = self._total
        self._status = Status.IDLE
        logger.debug("Reset %s", self._phase.value)
        self._publish()

    def continue_to_next_phase(self) -> None:
        """Begin the phase held at the boundary.  Only from AWAITING_CONFIRM."""
        if self._status != Status.AWAITING_CONFIRM:
            return
        self._begin_phase()
        self._publish()

    def end_current_session(self) -> None:
        """Complete the current phase now, as if the countdown hit zero.

        Not while AWAITING_CONFIRM: the pending phase has not run yet.
        """
        if self._status == Status.AWAITING_CONFIRM:
            return
        logger.debug(
            "Ending %s early with %s left", self._phase.value, self.formatted_time,
        )
        self._qt_timer.stop()
        self._remaining = 0
        self._finish_phase()

    def reload_settings(self) -> None:
        """Pick up edited settings.

        A lowered ``workflow_count`` clamps ``completed_workflows`` in
        every status.  Durations are re-read only while IDLE and not yet
        started; running, paused and held countdowns keep their snapshot
        and the new values apply when the next phase begins.
        """
        changed = False
        ceiling = self._settings.workflow_count - 1
        if self._completed_workflows > ceiling:
            logger.debug(
                "Workflow count lowered; clamping %d completed to %d",
                self._completed_workflows, ceiling,
            )
            self._completed_workflows = ceiling
            changed = True
        if self._status == Status.IDLE and self._remaining == self._total:
            self._total = phase_duration(self._settings, self._phase)
            self._remaining = self._total
            changed = True
        if changed:
            self._publish()

    def tick(self) -> None:
        """One second elapsed.  No-op unless RUNNING."""
        if self._status != Status.RUNNING:
            return
        self._remaining = max(0, self._remaining - 1)
        if self._remaining == 0:
            self._finish_phase()
        else:
            self._publish()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: phase mechanics
    # ══════════════════════════════════════════════════════════════════

    def _finish_phase(self) -> None:
        self._qt_timer.stop()
        ended = self._phase
        logger.info("%s phase ended", ended.label)

        self._notify(ended)
        self.phase_ended.emit(ended)

        self._advance()
        self._total = phase_duration(self._settings, self._phase)

        if self._settings.auto_start_next_session:
            self._remaining = self._total
            self._status = Status.RUNNING
            self._qt_timer.start()
        else:
            self._remaining = 0
            self._status = Status.AWAITING_CONFIRM
        self._publish()

    def _advance(self) -> None:
        """Move ``phase`` and ``completed_workflows`` to the next position."""
        if self._phase == Phase.WORK:
            if self._completed_workflows + 1 >= self._settings.workflow_count:
                self._phase = Phase.LONG_BREAK
                self._completed_workflows = 0
            else:
                self._phase = Phase.SHORT_BREAK
                self._completed_workflows += 1
        else:
            if self._phase == Phase.LONG_BREAK:
                self._completed_workflows = 0
            self._phase = Phase.WORK

    def _begin_phase(self) -> None:
        self._total = phase_duration(self._settings, self._phase)
        self._remaining = self._total
        if self._settings.auto_start_next_session:
            self._status = Status.RUNNING
            self._qt_timer.start()
        else:
            self._status = Status.IDLE

    def _notify(self, phase: Phase) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier.notify_phase_ended(phase)
        except Exception:
            logger.exception("Notifier failed for %s phase end", phase.value)

    def _publish(self) -> None:
        self.state_changed.emit(self.snapshot())
