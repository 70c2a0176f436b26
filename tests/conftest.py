"""Shared pytest fixtures for droplet tests."""

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from droplet.settings import Settings
from droplet.timer.engine import TimerEngine

from helpers import RecordingNotifier


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def isolated_app_dir(tmp_path, monkeypatch):
    """Keep settings, sounds and logs out of the real home directory."""
    monkeypatch.setattr("droplet.settings.APP_SUPPORT_DIR", tmp_path)
    monkeypatch.setattr("droplet.settings.SETTINGS_PATH", tmp_path / "settings.json")
    monkeypatch.setattr("droplet.audio.sounds.SOUNDS_DIR", tmp_path / "sounds")
    yield tmp_path


@pytest.fixture
def settings():
    """Defaults, except auto-start OFF so phase ends wait for confirmation."""
    return Settings(auto_start_next_session=False)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def engine(qapp, settings, notifier):
    """Fresh TimerEngine, auto-start OFF."""
    return TimerEngine(settings, notifier)


@pytest.fixture
def engine_auto(qapp, notifier):
    """Fresh TimerEngine with auto-start ON."""
    return TimerEngine(Settings(auto_start_next_session=True), notifier)
