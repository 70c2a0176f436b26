"""Main application window for droplet."""

from __future__ import annotations

import logging

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QIcon, QImage, QPainter, QColor, QPen, QPixmap, QKeySequence
from PyQt6.QtWidgets import QApplication, QMainWindow, QMenu, QSystemTrayIcon

from .audio.sounds import SoundManager
from .notifications import Notifier
from .settings import Settings, save_settings
from .timer.engine import TimerEngine, TimerSnapshot, Status
from .ui.settings_dialog import SettingsDialog
from .ui.styles import build_stylesheet, get_theme, accent_for
from .ui.timer_widget import TimerWidget

logger = logging.getLogger(__name__)

APP_NAME = "droplet"


# ── tray-icon image generation ────────────────────────────────────────────


def _make_tray_icon(status: Status, colour: str = "#000000") -> QIcon:
    """32×32 menu-bar icon.

    - IDLE:              circle outline
    - RUNNING:           filled circle
    - PAUSED:            two vertical pause bars
    - AWAITING_CONFIRM:  circle outline with a centre dot
    """
    size = 64  # draw at 2× for Retina
    img = QImage(size, size, QImage.Format.Format_ARGB32_Premultiplied)
    img.fill(Qt.GlobalColor.transparent)
    p = QPainter(img)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    brush = QColor(colour)
    p.setPen(Qt.PenStyle.NoPen)
    p.setBrush(brush)

    cx, cy, r = size // 2, size // 2, size // 2 - 4

    if status == Status.RUNNING:
        p.drawEllipse(cx - r, cy - r, r * 2, r * 2)
    elif status == Status.PAUSED:
        bar_w, bar_h = 8, 28
        gap = 6
        y = cy - bar_h // 2
        p.drawRoundedRect(cx - gap - bar_w, y, bar_w, bar_h, 3, 3)
        p.drawRoundedRect(cx + gap, y, bar_w, bar_h, 3, 3)
    else:
        p.setPen(QPen(brush, 4))
        p.setBrush(Qt.BrushStyle.NoBrush)
        p.drawEllipse(cx - r, cy - r, r * 2, r * 2)
        if status == Status.AWAITING_CONFIRM:
            p.setPen(Qt.PenStyle.NoPen)
            p.setBrush(brush)
            dot_r = 6
            p.drawEllipse(cx - dot_r, cy - dot_r, dot_r * 2, dot_r * 2)

    p.end()
    img.setDevicePixelRatio(2.0)
    return QIcon(QPixmap.fromImage(img))


def menu_bar_text(snapshot: TimerSnapshot, show_timer: bool) -> str:
    """Tray tooltip: phase icon plus remaining time when enabled."""
    if not show_timer:
        return APP_NAME
    return f"{snapshot.phase.icon} {snapshot.formatted_time}"


class DropletApp(QMainWindow):
    """Main window: timer view, tray icon, keyboard controls."""

    def __init__(
        self,
        settings: Settings,
        engine: TimerEngine,
        notifier: Notifier,
        sounds: SoundManager | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self.setMinimumSize(140, 100)
        self.resize(220, 140)

        self._settings = settings
        self._engine = engine
        self._notifier = notifier
        self._sounds = sounds

        # ── central widget ────────────────────────────────────────────
        self._timer_widget = TimerWidget(engine, settings, self)
        self._timer_widget.settings_requested.connect(self._open_settings)
        self.setCentralWidget(self._timer_widget)

        # ── system tray icon ──────────────────────────────────────────
        self._tray_icon = QSystemTrayIcon(self)
        self._build_tray_menu()
        self._tray_icon.activated.connect(self._on_tray_activated)
        if QSystemTrayIcon.isSystemTrayAvailable():
            self._tray_icon.show()
            self._notifier.set_tray(self._tray_icon)
        else:
            logger.warning("System tray unavailable; notifications disabled")

        # ── shortcuts ─────────────────────────────────────────────────
        self._setup_shortcuts()

        # ── wire signals ──────────────────────────────────────────────
        self._engine.state_changed.connect(self._on_state_changed)

        self._apply_settings()

    # ══════════════════════════════════════════════════════════════════
    #  SYSTEM TRAY
    # ══════════════════════════════════════════════════════════════════

    def _build_tray_menu(self) -> None:
        menu = QMenu(self)

        self._tray_time_action = menu.addAction("")
        self._tray_time_action.setEnabled(False)

        menu.addSeparator()

        self._tray_start_action = menu.addAction("Start")
        self._tray_start_action.triggered.connect(self._engine.toggle_start_pause)

        self._tray_continue_action = menu.addAction("Continue")
        self._tray_continue_action.triggered.connect(self._engine.continue_to_next_phase)

        reset_action = menu.addAction("Reset")
        reset_action.triggered.connect(self._engine.reset_current_phase)

        self._tray_end_action = menu.addAction("End Session")
        self._tray_end_action.triggered.connect(self._engine.end_current_session)

        menu.addSeparator()

        show_action = menu.addAction("Show droplet")
        show_action.triggered.connect(self._show_window)

        settings_action = menu.addAction("Settings…")
        settings_action.triggered.connect(self._open_settings)

        menu.addSeparator()

        quit_action = menu.addAction("Quit droplet")
        quit_action.triggered.connect(self._quit_app)

        self._tray_icon.setContextMenu(menu)

    def _on_tray_activated(self, reason: QSystemTrayIcon.ActivationReason) -> None:
        """Left-click on tray icon → toggle window visibility."""
        if reason == QSystemTrayIcon.ActivationReason.Trigger:
            if self.isVisible():
                self.hide()
            else:
                self._show_window()

    def _show_window(self) -> None:
        self.show()
        self.raise_()
        self.activateWindow()

    def _quit_app(self) -> None:
        self._tray_icon.hide()
        QApplication.instance().quit()

    def _update_tray(self, snapshot: TimerSnapshot) -> None:
        theme = get_theme(self._settings.theme)
        self._tray_icon.setIcon(
            _make_tray_icon(snapshot.status, accent_for(theme, snapshot.phase))
        )
        text = menu_bar_text(snapshot, self._settings.show_menu_bar_timer)
        self._tray_icon.setToolTip(text)
        self._tray_time_action.setText(
            f"{snapshot.phase.icon} {snapshot.phase.label} — {snapshot.formatted_time}"
        )

        self._tray_start_action.setEnabled(snapshot.status != Status.AWAITING_CONFIRM)
        self._tray_continue_action.setEnabled(snapshot.status == Status.AWAITING_CONFIRM)
        self._tray_end_action.setEnabled(snapshot.status != Status.AWAITING_CONFIRM)
        if snapshot.status == Status.RUNNING:
            self._tray_start_action.setText("Pause")
        elif snapshot.status == Status.PAUSED:
            self._tray_start_action.setText("Resume")
        else:
            self._tray_start_action.setText("Start")

    # ══════════════════════════════════════════════════════════════════
    #  TIMER SIGNALS
    # ══════════════════════════════════════════════════════════════════

    def _on_state_changed(self, snapshot: TimerSnapshot) -> None:
        self._update_tray(snapshot)

    # ══════════════════════════════════════════════════════════════════
    #  SETTINGS
    # ══════════════════════════════════════════════════════════════════

    def _open_settings(self) -> None:
        dlg = SettingsDialog(self._settings, parent=self, save=self._save_settings)
        dlg.settings_changed.connect(self._apply_settings)
        dlg.exec()

    def _save_settings(self, settings: Settings) -> None:
        try:
            save_settings(settings)
        except OSError:
            logger.exception("Could not save settings")

    def _apply_settings(self) -> None:
        """Push current Settings into the views and the idle engine."""
        s = self._settings
        self.setStyleSheet(build_stylesheet(get_theme(s.theme)))
        self._apply_always_on_top(s.always_on_top)
        if self._sounds is not None:
            self._sounds.set_volume(s.sound_volume)
            self._sounds.set_enabled(s.sound_enabled)
        # Running countdowns keep their snapshot; only an unstarted phase refreshes
        self._engine.reload_settings()
        self._timer_widget.apply_settings()
        self._update_tray(self._engine.snapshot())

    def _apply_always_on_top(self, on_top: bool) -> None:
        flags = self.windowFlags()
        has_flag = bool(flags & Qt.WindowType.WindowStaysOnTopHint)
        if has_flag == on_top:
            return
        if on_top:
            flags |= Qt.WindowType.WindowStaysOnTopHint
        else:
            flags &= ~Qt.WindowType.WindowStaysOnTopHint
        was_visible = self.isVisible()
        self.setWindowFlags(flags)
        if was_visible:
            self.show()  # setWindowFlags hides the window

    # ══════════════════════════════════════════════════════════════════
    #  KEYBOARD SHORTCUTS
    # ══════════════════════════════════════════════════════════════════

    def _setup_shortcuts(self) -> None:
        """Ctrl+E / Ctrl+, / Ctrl+Q (Space and R go through keyPressEvent)."""
        end_session = QAction("End Session", self)
        end_session.setShortcut(QKeySequence("Ctrl+E"))
        end_session.triggered.connect(self._engine.end_current_session)
        self.addAction(end_session)

        prefs = QAction("Settings…", self)
        prefs.setShortcut(QKeySequence("Ctrl+,"))
        prefs.triggered.connect(self._open_settings)
        self.addAction(prefs)

        quit_action = QAction("Quit", self)
        quit_action.setShortcut(QKeySequence("Ctrl+Q"))
        quit_action.triggered.connect(self._quit_app)
        self.addAction(quit_action)

    def _on_space(self) -> None:
        """Continue when waiting at a boundary, otherwise start/pause."""
        if self._engine.status == Status.AWAITING_CONFIRM:
            self._engine.continue_to_next_phase()
        else:
            self._engine.toggle_start_pause()

    def _on_reset_key(self) -> None:
        self._engine.reset_current_phase()

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW EVENTS
    # ══════════════════════════════════════════════════════════════════

    def closeEvent(self, event) -> None:  # type: ignore[override]
        """Hide to the tray instead of quitting while the tray is up."""
        if self._tray_icon.isVisible():
            event.ignore()
            self.hide()
        else:
            event.accept()

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        key = event.key()
        if event.modifiers() == Qt.KeyboardModifier.NoModifier:
            if key == Qt.Key.Key_Space:
                self._on_space()
                event.accept()
                return
            if key == Qt.Key.Key_R:
                self._on_reset_key()
                event.accept()
                return
        super().keyPressEvent(event)
