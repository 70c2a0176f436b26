"""Main timer display.

Layout (top → bottom):
    - MM:SS time label (pulses while waiting for confirmation)
    - Thin progress bar in the phase accent colour
    - Workflow dots, one per work phase in the cycle

Mouse:
    - single click  → continue (when waiting) or start/pause
    - double click  → reset the current phase
    - right click   → ``settings_requested``
"""

from __future__ import annotations

from enum import Enum

from PyQt6.QtCore import Qt, QTimer, QPropertyAnimation, QEasingCurve, pyqtSignal
from PyQt6.QtGui import QColor, QFont
from PyQt6.QtWidgets import (
    QApplication, QWidget, QVBoxLayout, QHBoxLayout, QLabel, QProgressBar,
    QGraphicsOpacityEffect, QGraphicsDropShadowEffect,
)

from ..settings import Settings
from ..timer.engine import TimerEngine, TimerSnapshot, Phase, Status
from .styles import ThemeDef, get_theme, accent_for, with_alpha

PROGRESS_STEPS = 1000
PULSE_MS = 1000
DOT_SIZE = 6


class DotState(Enum):
    EMPTY = "empty"
    FILLED = "filled"
    CURRENT = "current"


def workflow_dot_states(
    phase: Phase, completed: int, workflow_count: int,
) -> list[DotState]:
    """Dot row for the current position in the cycle.

    Work: finished phases filled, the one in progress marked current.
    Short break: finished phases filled.
    Long break: the whole cycle is done, so every dot is filled.
    """
    if phase == Phase.LONG_BREAK:
        return [DotState.FILLED] * workflow_count
    dots = []
    for i in range(workflow_count):
        if i < completed:
            dots.append(DotState.FILLED)
        elif i == completed and phase == Phase.WORK:
            dots.append(DotState.CURRENT)
        else:
            dots.append(DotState.EMPTY)
    return dots


class TimerWidget(QWidget):
    """Read-only view of a ``TimerEngine`` plus its mouse controls."""

    settings_requested = pyqtSignal()

    def __init__(
        self,
        engine: TimerEngine,
        settings: Settings,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("dropletRoot")
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setMinimumSize(140, 100)
        self._engine = engine
        self._settings = settings
        self._theme: ThemeDef = get_theme(settings.theme)
        self._snapshot: TimerSnapshot = engine.snapshot()
        self._dots: list[QLabel] = []

        self._click_timer = QTimer(self)
        self._click_timer.setSingleShot(True)
        self._click_timer.setInterval(
            QApplication.styleHints().mouseDoubleClickInterval()
        )
        self._click_timer.timeout.connect(self._on_single_click)

        self._build_ui()
        self._engine.state_changed.connect(self._on_state_changed)
        self.apply_settings()

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(8)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._time_label = QLabel(self)
        self._time_label.setObjectName("timeLabel")
        self._time_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._time_label)

        self._opacity = QGraphicsOpacityEffect(self._time_label)
        self._opacity.setOpacity(1.0)
        self._time_label.setGraphicsEffect(self._opacity)

        self._pulse = QPropertyAnimation(self._opacity, b"opacity", self)
        self._pulse.setDuration(PULSE_MS * 2)
        self._pulse.setStartValue(1.0)
        self._pulse.setKeyValueAt(0.5, 0.5)
        self._pulse.setEndValue(1.0)
        self._pulse.setEasingCurve(QEasingCurve.Type.InOutSine)
        self._pulse.setLoopCount(-1)

        self._progress = QProgressBar(self)
        self._progress.setRange(0, PROGRESS_STEPS)
        self._progress.setTextVisible(False)
        self._progress.setFixedHeight(4)
        layout.addWidget(self._progress)

        self._dot_row = QHBoxLayout()
        self._dot_row.setSpacing(4)
        self._dot_row.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addLayout(self._dot_row)

    def _rebuild_dots(self, count: int) -> None:
        for dot in self._dots:
            self._dot_row.removeWidget(dot)
            dot.deleteLater()
        self._dots = []
        for _ in range(count):
            dot = QLabel(self)
            dot.setFixedSize(DOT_SIZE, DOT_SIZE)
            self._dots.append(dot)
            self._dot_row.addWidget(dot)

    # ── public ────────────────────────────────────────────────────────────

    @property
    def is_pulsing(self) -> bool:
        return self._pulse.state() == QPropertyAnimation.State.Running

    @property
    def time_text(self) -> str:
        return self._time_label.text()

    @property
    def dot_states(self) -> list[DotState]:
        return workflow_dot_states(
            self._snapshot.phase,
            self._snapshot.completed_workflows,
            self._settings.workflow_count,
        )

    def apply_settings(self) -> None:
        """Re-read theme, font size, glow and workflow count."""
        self._theme = get_theme(self._settings.theme)

        font = QFont("Avenir Next")
        font.setWeight(QFont.Weight.Medium)
        font.setPixelSize(self._settings.timer_font_size)
        self._time_label.setFont(font)

        if self._settings.enable_glow:
            glow = QGraphicsDropShadowEffect(self._progress)
            glow.setBlurRadius(12)
            glow.setOffset(0, 0)
            self._progress.setGraphicsEffect(glow)
        else:
            self._progress.setGraphicsEffect(None)

        if len(self._dots) != self._settings.workflow_count:
            self._rebuild_dots(self._settings.workflow_count)

        self._render(self._engine.snapshot())

    # ── slots ─────────────────────────────────────────────────────────────

    def _on_state_changed(self, snapshot: TimerSnapshot) -> None:
        self._render(snapshot)

    def _on_single_click(self) -> None:
        if self._engine.status == Status.AWAITING_CONFIRM:
            self._engine.continue_to_next_phase()
        else:
            self._engine.toggle_start_pause()

    def _on_double_click(self) -> None:
        self._click_timer.stop()
        self._engine.reset_current_phase()

    # ── rendering ─────────────────────────────────────────────────────────

    def _render(self, snapshot: TimerSnapshot) -> None:
        self._snapshot = snapshot
        accent = accent_for(self._theme, snapshot.phase)

        self._time_label.setText(snapshot.formatted_time)
        self._time_label.setToolTip(
            f"{snapshot.phase.icon} {snapshot.phase.label}"
        )

        self._progress.setValue(round(snapshot.progress_ratio * PROGRESS_STEPS))
        self._progress.setStyleSheet(
            f"QProgressBar::chunk {{ background-color: {accent}; border-radius: 2px; }}"
        )
        glow = self._progress.graphicsEffect()
        if isinstance(glow, QGraphicsDropShadowEffect):
            glow.setColor(QColor(accent))

        muted = with_alpha(self._theme.text, 0.3)
        for dot, state in zip(self._dots, self.dot_states):
            if state == DotState.FILLED:
                style = f"background-color: {accent}; border: none;"
            elif state == DotState.CURRENT:
                style = f"background-color: {muted}; border: 1px solid {accent};"
            else:
                style = f"background-color: {muted}; border: none;"
            dot.setStyleSheet(f"{style} border-radius: {DOT_SIZE // 2}px;")

        if snapshot.status == Status.AWAITING_CONFIRM:
            if not self.is_pulsing:
                self._pulse.start()
        elif self.is_pulsing:
            self._pulse.stop()
            self._opacity.setOpacity(1.0)

    # ── events ────────────────────────────────────────────────────────────

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton:
            self._click_timer.start()
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseDoubleClickEvent(self, event) -> None:  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton:
            self._on_double_click()
            event.accept()
            return
        super().mouseDoubleClickEvent(event)

    def contextMenuEvent(self, event) -> None:  # type: ignore[override]
        self.settings_requested.emit()
        event.accept()
