"""
pmo - a minimal always-on-top Pomodoro timer.
Entry point for the application.
"""

import faulthandler
import logging
import sys
from pathlib import Path

faulthandler.enable()

# Ensure pmo is importable when run from a checkout
sys.path.insert(0, str(Path(__file__).resolve().parent))

from PySide6.QtWidgets import QApplication

from pmo.config import load_config
from pmo.ui.styles import DARK_STYLESHEET
from pmo.ui.timer_widget import TimerWidget


def setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler("pmo.log", encoding="utf-8"),
        ],
    )


def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("Starting pmo...")

    app = QApplication(sys.argv)
    app.setApplicationName("pmo")
    app.setOrganizationName("Pomodoro")
    app.setQuitOnLastWindowClosed(True)
    app.setStyleSheet(DARK_STYLESHEET)

    window = TimerWidget(load_config())
    window.show()

    logger.info("Application started.")
    sys.exit(app.exec())


if __name__ == "__main__":
    main()


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Starts the app: crash tracebacks via faulthandler, logging to console
#   and pmo.log, the dark stylesheet, then the TimerWidget built from the
#   loaded settings.
