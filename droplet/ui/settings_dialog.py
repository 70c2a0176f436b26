"""Settings dialog for droplet.

A modal dialog for timer durations, the workflow count, auto-start,
visuals, sound and notifications.  Every edit is written to the shared
``Settings`` instance, saved to disk and announced via
``settings_changed`` so the app can refresh the engine and views.
"""

from __future__ import annotations

from collections.abc import Callable

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout,
    QLabel, QComboBox, QSlider, QCheckBox, QPushButton,
    QFrame, QWidget,
)

from ..settings import (
    Settings, save_settings,
    WORK_CHOICES, SHORT_BREAK_CHOICES, LONG_BREAK_CHOICES,
    WORKFLOW_CHOICES, FONT_SIZE_CHOICES,
)
from .styles import THEMES


def _choices_with(choices: tuple[int, ...], current: int) -> list[int]:
    """Menu choices plus the current value if it was set elsewhere."""
    return sorted(set(choices) | {current})


class SettingsDialog(QDialog):
    """Modal dialog for all user preferences."""

    settings_changed = pyqtSignal()

    def __init__(
        self,
        settings: Settings,
        parent: QWidget | None = None,
        *,
        save: Callable[[Settings], None] = save_settings,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setMinimumWidth(380)
        self.setModal(True)

        self._settings = settings
        self._save_fn = save
        self._populating = False

        self._build_ui()
        self._populate()

    # ══════════════════════════════════════════════════════════════════
    #  BUILD UI
    # ══════════════════════════════════════════════════════════════════

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(24, 20, 24, 20)
        root.setSpacing(16)

        # ── Timer section ────────────────────────────────────────────
        root.addWidget(self._section_label("Timer"))
        timer_form = self._form()

        self._work_combo = self._minutes_combo()
        timer_form.addRow("Work duration:", self._work_combo)

        self._short_combo = self._minutes_combo()
        timer_form.addRow("Break duration:", self._short_combo)

        self._long_combo = self._minutes_combo()
        timer_form.addRow("Long break duration:", self._long_combo)

        self._workflow_combo = QComboBox()
        self._workflow_combo.currentIndexChanged.connect(self._on_timer_changed)
        timer_form.addRow("Workflows before long break:", self._workflow_combo)

        self._auto_start_cb = QCheckBox("Auto-start next session")
        self._auto_start_cb.toggled.connect(self._on_toggle_changed)
        timer_form.addRow("", self._auto_start_cb)

        root.addLayout(timer_form)
        root.addWidget(self._separator())

        # ── Appearance section ───────────────────────────────────────
        root.addWidget(self._section_label("Appearance"))
        look_form = self._form()

        self._theme_combo = QComboBox()
        for name in THEMES:
            self._theme_combo.addItem(name, name)
        self._theme_combo.currentIndexChanged.connect(self._on_visuals_changed)
        look_form.addRow("Theme:", self._theme_combo)

        self._font_combo = QComboBox()
        self._font_combo.currentIndexChanged.connect(self._on_visuals_changed)
        look_form.addRow("Font size:", self._font_combo)

        self._glow_cb = QCheckBox("Enable glow")
        self._glow_cb.toggled.connect(self._on_visuals_changed)
        look_form.addRow("", self._glow_cb)

        self._aot_cb = QCheckBox("Always on top")
        self._aot_cb.toggled.connect(self._on_toggle_changed)
        look_form.addRow("", self._aot_cb)

        self._menu_timer_cb = QCheckBox("Show timer in menu bar")
        self._menu_timer_cb.toggled.connect(self._on_toggle_changed)
        look_form.addRow("", self._menu_timer_cb)

        root.addLayout(look_form)
        root.addWidget(self._separator())

        # ── Sound & Notifications section ────────────────────────────
        root.addWidget(self._section_label("Sound & Notifications"))
        snd_form = self._form()

        self._sound_cb = QCheckBox("Chime at phase end")
        self._sound_cb.toggled.connect(self._on_toggle_changed)
        snd_form.addRow("", self._sound_cb)

        vol_row = QHBoxLayout()
        vol_row.setSpacing(10)
        self._vol_slider = QSlider(Qt.Orientation.Horizontal)
        self._vol_slider.setRange(0, 100)
        self._vol_slider.setTickInterval(10)
        self._vol_label = QLabel("70%")
        self._vol_label.setMinimumWidth(36)
        self._vol_slider.valueChanged.connect(self._on_volume_changed)
        self._vol_slider.sliderReleased.connect(self._on_volume_released)
        vol_row.addWidget(self._vol_slider)
        vol_row.addWidget(self._vol_label)

        vol_wrapper = QWidget()
        vol_wrapper.setLayout(vol_row)
        snd_form.addRow("Volume:", vol_wrapper)

        self._notif_cb = QCheckBox("Desktop notifications")
        self._notif_cb.toggled.connect(self._on_toggle_changed)
        snd_form.addRow("", self._notif_cb)

        root.addLayout(snd_form)

        # ── close button ─────────────────────────────────────────────
        root.addStretch()
        btn_row = QHBoxLayout()
        btn_row.addStretch()
        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.accept)
        btn_row.addWidget(close_btn)
        root.addLayout(btn_row)

    # ── helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _section_label(text: str) -> QLabel:
        lbl = QLabel(text)
        lbl.setStyleSheet("font-size: 15px; font-weight: 700; margin-top: 4px;")
        return lbl

    @staticmethod
    def _separator() -> QFrame:
        line = QFrame()
        line.setFrameShape(QFrame.Shape.HLine)
        line.setFixedHeight(1)
        line.setStyleSheet("background-color: rgba(255,255,255,0.08);")
        return line

    @staticmethod
    def _form() -> QFormLayout:
        form = QFormLayout()
        form.setContentsMargins(0, 0, 0, 0)
        form.setHorizontalSpacing(20)
        form.setVerticalSpacing(10)
        return form

    def _minutes_combo(self) -> QComboBox:
        combo = QComboBox()
        combo.currentIndexChanged.connect(self._on_timer_changed)
        return combo

    @staticmethod
    def _fill(combo: QComboBox, values: list[int], fmt: str, current: int) -> None:
        combo.clear()
        for value in values:
            combo.addItem(fmt.format(value), value)
        combo.setCurrentIndex(combo.findData(current))

    # ══════════════════════════════════════════════════════════════════
    #  POPULATE FROM SETTINGS
    # ══════════════════════════════════════════════════════════════════

    def _populate(self) -> None:
        s = self._settings
        self._populating = True
        try:
            self._fill(self._work_combo, _choices_with(WORK_CHOICES, s.work_duration),
                       "{} min", s.work_duration)
            self._fill(self._short_combo,
                       _choices_with(SHORT_BREAK_CHOICES, s.short_break_duration),
                       "{} min", s.short_break_duration)
            self._fill(self._long_combo,
                       _choices_with(LONG_BREAK_CHOICES, s.long_break_duration),
                       "{} min", s.long_break_duration)
            self._fill(self._workflow_combo,
                       _choices_with(WORKFLOW_CHOICES, s.workflow_count),
                       "{} workflows", s.workflow_count)
            self._fill(self._font_combo,
                       _choices_with(FONT_SIZE_CHOICES, s.timer_font_size),
                       "{}px", s.timer_font_size)
            theme_idx = self._theme_combo.findData(s.theme)
            self._theme_combo.setCurrentIndex(max(0, theme_idx))
            self._auto_start_cb.setChecked(s.auto_start_next_session)
            self._glow_cb.setChecked(s.enable_glow)
            self._aot_cb.setChecked(s.always_on_top)
            self._menu_timer_cb.setChecked(s.show_menu_bar_timer)
            self._sound_cb.setChecked(s.sound_enabled)
            self._vol_slider.setValue(s.sound_volume)
            self._vol_label.setText(f"{s.sound_volume}%")
            self._notif_cb.setChecked(s.notifications_enabled)
        finally:
            self._populating = False

    # ══════════════════════════════════════════════════════════════════
    #  CHANGE HANDLERS: save immediately
    # ══════════════════════════════════════════════════════════════════

    def _on_timer_changed(self) -> None:
        if self._populating:
            return
        self._settings.work_duration = self._work_combo.currentData()
        self._settings.short_break_duration = self._short_combo.currentData()
        self._settings.long_break_duration = self._long_combo.currentData()
        self._settings.workflow_count = self._workflow_combo.currentData()
        self._save()

    def _on_visuals_changed(self) -> None:
        if self._populating:
            return
        self._settings.theme = self._theme_combo.currentData()
        self._settings.timer_font_size = self._font_combo.currentData()
        self._settings.enable_glow = self._glow_cb.isChecked()
        self._save()

    def _on_toggle_changed(self) -> None:
        if self._populating:
            return
        self._settings.auto_start_next_session = self._auto_start_cb.isChecked()
        self._settings.always_on_top = self._aot_cb.isChecked()
        self._settings.show_menu_bar_timer = self._menu_timer_cb.isChecked()
        self._settings.sound_enabled = self._sound_cb.isChecked()
        self._settings.notifications_enabled = self._notif_cb.isChecked()
        self._save()

    def _on_volume_changed(self, value: int) -> None:
        self._vol_label.setText(f"{value}%")
        if self._populating:
            return
        self._settings.sound_volume = value
        if not self._vol_slider.isSliderDown():
            self._save()

    def _on_volume_released(self) -> None:
        if self._populating:
            return
        self._settings.sound_volume = self._vol_slider.value()
        self._save()

    def _save(self) -> None:
        self._save_fn(self._settings)
        self.settings_changed.emit()

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC
    # ══════════════════════════════════════════════════════════════════

    @property
    def settings(self) -> Settings:
        return self._settings
