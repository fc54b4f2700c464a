"""
Desktop notifications for finished timer phases.

Shows an OS notification through the system tray and plays the audio cue.
Whether the platform can show notifications is asked once and cached.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtWidgets import QSystemTrayIcon

from pmo.services.cycle import CyclePhase, Notify

from .sound_manager import SoundManager

logger = logging.getLogger(__name__)

NOTIFICATION_TITLE = "Pomodoro Timer"
UNNAMED_TASK = "Unnamed Task"
NOTIFICATION_TIMEOUT_MS = 5000


def completion_message(phase: CyclePhase, task_name: str) -> str:
    name = (task_name or "").strip() or UNNAMED_TASK
    return f"Time's up for task: {name}"


def platform_supports_messages() -> bool:
    return QSystemTrayIcon.isSystemTrayAvailable() and QSystemTrayIcon.supportsMessages()


class DesktopNotifier:
    """Turns Notify effects into a tray message plus a sound."""

    def __init__(
        self,
        sound: SoundManager,
        tray: Optional[QSystemTrayIcon] = None,
        supports_messages: Callable[[], bool] = platform_supports_messages,
    ) -> None:
        self.sound = sound
        self.tray = tray
        self._supports_messages = supports_messages
        self._permitted: Optional[bool] = None

    def _can_notify(self) -> bool:
        if self._permitted is None:
            self._permitted = bool(self.tray is not None and self._supports_messages())
            logger.info("Desktop notifications %s.",
                        "enabled" if self._permitted else "unavailable")
        return self._permitted

    def notify(self, event: Notify) -> None:
        sound_name = "session_complete" if event.phase is CyclePhase.LONG_BREAK else "phase_complete"
        self.sound.play(sound_name)
        if not self._can_notify():
            return
        self.tray.showMessage(
            NOTIFICATION_TITLE,
            completion_message(event.phase, event.task_name),
            QSystemTrayIcon.MessageIcon.Information,
            NOTIFICATION_TIMEOUT_MS,
        )


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Reacts to the Notify effect from the timer: always a sound cue, plus a
#   tray balloon when the desktop supports one.
#
# Data flow:
#   TimerService → on_notify(Notify) → TimerWidget._on_notify →
#   DesktopNotifier.notify() → SoundManager.play() + tray.showMessage().
#   The platform check runs on the first notify only.
