"""UI package."""

from .timer_widget import TimerWidget, DotState, workflow_dot_states
from .settings_dialog import SettingsDialog
from .styles import ThemeDef, THEMES, get_theme, accent_for, build_stylesheet

__all__ = [
    "TimerWidget",
    "DotState",
    "workflow_dot_states",
    "SettingsDialog",
    "ThemeDef",
    "THEMES",
    "get_theme",
    "accent_for",
    "build_stylesheet",
]
