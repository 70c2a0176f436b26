"""Phase-end notifications: a tray message plus a chime.

``Notifier.notify_phase_ended`` returns immediately; delivery runs on
the next event-loop turn so the timer engine never waits on the tray or
the audio backend.  Delivery failures are logged here and go no further.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from PyQt6.QtCore import QObject, Qt, pyqtSignal, pyqtSlot

from .audio.sounds import SoundManager
from .settings import Settings
from .timer.engine import Phase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhaseMessage:
    title: str
    body: str
    sound: str


PHASE_MESSAGES: dict[Phase, PhaseMessage] = {
    Phase.WORK: PhaseMessage(
        "Work Session Complete! \U0001F4A7",
        "Time for a break. You've earned it!",
        "work_complete",
    ),
    Phase.SHORT_BREAK: PhaseMessage(
        "Break Over! \U0001F33F",
        "Ready to focus again?",
        "break_complete",
    ),
    Phase.LONG_BREAK: PhaseMessage(
        "Long Break Over! \U0001F30A",
        "Great job! Ready for another workflow?",
        "long_break_complete",
    ),
}


class MessageSink(Protocol):
    """Anything that can pop a notification, e.g. ``QSystemTrayIcon``."""

    def showMessage(self, title: str, msg: str) -> None: ...


class Notifier(QObject):
    """Delivers "phase ended" notifications.

    Signals
    -------
    delivered(phase: Phase)
        Emitted after a notification was handed to the tray/sound backend.
    """

    delivered = pyqtSignal(object)
    _delivery_requested = pyqtSignal(object)

    def __init__(
        self,
        settings: Settings,
        *,
        tray: MessageSink | None = None,
        sounds: SoundManager | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings
        self._tray = tray
        self._sounds = sounds
        self._delivery_requested.connect(
            self._deliver, Qt.ConnectionType.QueuedConnection,
        )

    def set_tray(self, tray: MessageSink | None) -> None:
        self._tray = tray

    def notify_phase_ended(self, phase: Phase) -> None:
        """Queue delivery for *phase*; never blocks the caller."""
        self._delivery_requested.emit(phase)

    @pyqtSlot(object)
    def _deliver(self, phase: Phase) -> None:
        message = PHASE_MESSAGES[phase]
        try:
            if self._settings.notifications_enabled and self._tray is not None:
                self._tray.showMessage(message.title, message.body)
            if self._settings.sound_enabled and self._sounds is not None:
                self._sounds.play(message.sound)
        except Exception:
            logger.exception("Failed to deliver %s notification", phase.value)
            return
        logger.debug("Delivered %s notification", phase.value)
        self.delivered.emit(phase)
