"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/Droplet/settings.json

Usage::

    settings = load_settings()
    settings.work_duration = 50
    save_settings(settings)

The timer engine holds a reference to the live ``Settings`` instance and
reads durations, ``workflow_count`` and ``auto_start_next_session`` each
time a phase begins.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

logger = logging.getLogger(__name__)

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "Droplet"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"

# Menu choices offered by the settings dialog
WORK_CHOICES = (10, 15, 20, 25, 30, 45, 50, 60)
SHORT_BREAK_CHOICES = (3, 5, 10, 15)
LONG_BREAK_CHOICES = (10, 15, 20, 30)
WORKFLOW_CHOICES = (2, 3, 4, 5, 6)
FONT_SIZE_CHOICES = (16, 24, 32, 42, 52, 64)

MIN_WORKFLOW_COUNT = 2


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    work_duration: int = 25                # minutes
    short_break_duration: int = 5
    long_break_duration: int = 15
    workflow_count: int = 4                # work phases per long break
    auto_start_next_session: bool = True

    # ── window ────────────────────────────────────────────────────────
    always_on_top: bool = False
    show_menu_bar_timer: bool = True

    # ── visuals ───────────────────────────────────────────────────────
    theme: str = "Dark"
    timer_font_size: int = 42
    enable_glow: bool = False

    # ── notifications / audio ─────────────────────────────────────────
    notifications_enabled: bool = True
    sound_enabled: bool = True
    sound_volume: int = 70                 # 0-100

    def __post_init__(self) -> None:
        self.work_duration = max(1, int(self.work_duration))
        self.short_break_duration = max(1, int(self.short_break_duration))
        self.long_break_duration = max(1, int(self.long_break_duration))
        self.workflow_count = max(MIN_WORKFLOW_COUNT, int(self.workflow_count))
        self.timer_font_size = max(
            FONT_SIZE_CHOICES[0], min(int(self.timer_font_size), FONT_SIZE_CHOICES[-1])
        )
        self.sound_volume = max(0, min(int(self.sound_volume), 100))


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    if not SETTINGS_PATH.exists():
        return Settings()
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
        # Only use keys that exist in the dataclass
        valid_keys = {f.name for f in fields(Settings)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return Settings(**filtered)
    except (OSError, ValueError, TypeError, AttributeError):
        logger.warning(
            "Could not read settings from %s; using defaults",
            SETTINGS_PATH, exc_info=True,
        )
    return Settings()


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
    logger.debug("Settings saved to %s", SETTINGS_PATH)
