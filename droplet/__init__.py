"""droplet: a small Pomodoro timer for the menu bar."""

__version__ = "0.1.0"
