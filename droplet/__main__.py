"""Allow running droplet as a module: python -m droplet."""

import logging
import sys

from PyQt6.QtWidgets import QApplication

from .app import APP_NAME, DropletApp
from .audio.sounds import SoundManager
from .logger import configure_logging
from .notifications import Notifier
from .settings import load_settings
from .timer.engine import TimerEngine

logger = logging.getLogger(__name__)


def main() -> None:
    configure_logging()

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setOrganizationName(APP_NAME)
    app.setQuitOnLastWindowClosed(False)

    # One instance of each service for the whole process
    settings = load_settings()
    sounds = SoundManager(parent=app)
    notifier = Notifier(settings, sounds=sounds, parent=app)
    engine = TimerEngine(settings, notifier, parent=app)

    window = DropletApp(settings, engine, notifier, sounds)
    window.show()
    logger.info("droplet ready")

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
