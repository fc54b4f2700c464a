"""
Qt-backed one-second tick source.

Each schedule() call creates a fresh QTimer wrapped in a handle; cancelling
the handle stops and releases that timer. TimerService keeps exactly one
handle at a time.
"""

from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QTimer

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 1000


class QtTickHandle:
    """A running QTimer that can be cancelled exactly once."""

    def __init__(self, timer: QTimer) -> None:
        self._timer = timer

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None


class QtTicker:
    """Creates QTimer-based tick handles on the Qt event loop."""

    def __init__(self, interval_ms: int = TICK_INTERVAL_MS) -> None:
        self.interval_ms = interval_ms

    def schedule(self, callback: Callable[[], None]) -> QtTickHandle:
        timer = QTimer()
        timer.setInterval(self.interval_ms)
        timer.timeout.connect(callback)
        timer.start()
        logger.debug("Tick timer started (%d ms)", self.interval_ms)
        return QtTickHandle(timer)


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Adapts QTimer to the small Ticker/TickHandle interface TimerService
#   expects, so the service can be tested with a fake ticker.
#
# Data flow:
#   TimerService.start() → QtTicker.schedule(self.tick) → QTimer fires each
#   second → TimerService.tick(). Pause/reset → handle.cancel() → timer
#   stopped and deleted.
