"""
Timer Widget - the always-on-top Pomodoro window.

Contains:
  - Task name input
  - Live MM:SS countdown, phase label and progress bar
  - Start/Pause toggle, Reset, and the session history toggle
  - The history panel (window grows taller while it is open)
"""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QApplication, QHBoxLayout, QLabel, QLineEdit, QMenu, QProgressBar,
    QPushButton, QStyle, QSystemTrayIcon, QVBoxLayout, QWidget,
)

from pmo.alerts import DesktopNotifier, SoundManager
from pmo.config import durations_from_config, save_config
from pmo.data.database import Database
from pmo.data.repository import SessionRepository
from pmo.services.cycle import CyclePhase, Notify, SessionNearingCompletion, TimerState, format_clock
from pmo.services.ticker import QtTicker
from pmo.services.timer_service import TimerService
from pmo.ui.history_widget import HistoryWidget

logger = logging.getLogger(__name__)

ICON_PLAY = "▶"
ICON_PAUSE = "❚❚"
ICON_RESET = "↺"
ICON_HISTORY = "☰"


class TimerWidget(QWidget):
    """The Pomodoro overlay window."""

    def __init__(self, config: dict, database: Optional[Database] = None) -> None:
        super().__init__()
        self.config = config
        self.setWindowTitle("pmo")
        flags = Qt.WindowType.Window
        if config.get("always_on_top", True):
            flags |= Qt.WindowType.WindowStaysOnTopHint
        self.setWindowFlags(flags)

        window_cfg = config["window"]
        self._width = window_cfg["width"]
        self._compact_height = window_cfg["compact_height"]
        self._history_height = window_cfg["history_height"]
        self.setFixedWidth(self._width)

        # ── Initialize core systems ─────────────────────────────────────
        self.db = database or Database(config.get("db_path"))
        self.db.connect()
        self.repo = SessionRepository(self.db.conn)
        self.sound = SoundManager(
            enabled=config.get("sound_enabled", True),
            volume=config.get("volume", 0.5),
        )
        self._setup_tray()
        self.notifier = DesktopNotifier(self.sound, self.tray)

        self.timer_svc = TimerService(
            self.repo,
            QtTicker(),
            durations=durations_from_config(config),
            on_state_changed=self._render_state,
            on_notify=self._on_notify,
            on_nearing_completion=self._on_nearing_completion,
        )

        # ── Build UI ────────────────────────────────────────────────────
        self._build_ui()
        self._render_state(self.timer_svc.state)
        self._set_history_open(False)

    # ── UI Construction ─────────────────────────────────────────────────

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(14, 12, 14, 12)
        layout.setSpacing(8)

        self.task_input = QLineEdit()
        self.task_input.setPlaceholderText("Create a task")
        self.task_input.returnPressed.connect(self._on_start_pause)
        layout.addWidget(self.task_input)

        row = QHBoxLayout()
        clock_col = QVBoxLayout()
        clock_col.setSpacing(0)
        self.timer_label = QLabel(format_clock(self.timer_svc.durations.work))
        self.timer_label.setObjectName("timer")
        clock_col.addWidget(self.timer_label)
        self.phase_label = QLabel("")
        self.phase_label.setObjectName("phase_label")
        clock_col.addWidget(self.phase_label)
        row.addLayout(clock_col, 1)

        self.btn_start = QPushButton(ICON_PLAY)
        self.btn_start.setToolTip("Start / pause")
        self.btn_start.clicked.connect(self._on_start_pause)
        row.addWidget(self.btn_start)

        self.btn_reset = QPushButton(ICON_RESET)
        self.btn_reset.setToolTip("Reset")
        self.btn_reset.clicked.connect(self._on_reset)
        row.addWidget(self.btn_reset)

        self.btn_history = QPushButton(ICON_HISTORY)
        self.btn_history.setToolTip("Session history")
        self.btn_history.setCheckable(True)
        self.btn_history.toggled.connect(self._set_history_open)
        row.addWidget(self.btn_history)
        layout.addLayout(row)

        self.progress = QProgressBar()
        self.progress.setRange(0, 1000)
        self.progress.setTextVisible(False)
        layout.addWidget(self.progress)

        self.history = HistoryWidget(self.repo)
        self.history.closed.connect(lambda: self.btn_history.setChecked(False))
        layout.addWidget(self.history, 1)

    def _setup_tray(self) -> None:
        """Tray icon: notification channel plus a Show/Quit menu."""
        self.tray = QSystemTrayIcon(self)
        self.tray.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_ComputerIcon))
        self.tray.setToolTip("pmo")

        tray_menu = QMenu()
        show_action = tray_menu.addAction("Show")
        show_action.triggered.connect(self._show_window)
        self.sound_action = tray_menu.addAction("Sound")
        self.sound_action.setCheckable(True)
        self.sound_action.setChecked(self.sound.enabled)
        self.sound_action.toggled.connect(self._on_sound_toggled)
        quit_action = tray_menu.addAction("Quit")
        quit_action.triggered.connect(self._quit_app)
        self.tray.setContextMenu(tray_menu)
        if QSystemTrayIcon.isSystemTrayAvailable():
            self.tray.show()

    # ── Timer actions ───────────────────────────────────────────────────

    @Slot()
    def _on_start_pause(self) -> None:
        if self.timer_svc.state.is_running:
            self.timer_svc.pause()
        else:
            self.timer_svc.start(self.task_input.text())

    @Slot()
    def _on_reset(self) -> None:
        self.timer_svc.reset()
        self.task_input.clear()
        # a partial session may have just been saved
        self.history.refresh()

    # ── Service callbacks ───────────────────────────────────────────────

    def _on_notify(self, event: Notify) -> None:
        self.notifier.notify(event)
        if event.phase is CyclePhase.LONG_BREAK:
            # Sequence finished and saved; task name was cleared
            self.task_input.clear()
            self.history.refresh()

    def _on_nearing_completion(self, event: SessionNearingCompletion) -> None:
        self.tray.setToolTip(
            f"pmo · {event.task_name}: {event.completed_work_periods} cycles done, long break"
        )

    # ── Rendering ───────────────────────────────────────────────────────

    def _render_state(self, state: TimerState) -> None:
        self.timer_label.setText(format_clock(state.remaining_seconds))
        self.btn_start.setText(ICON_PAUSE if state.is_running else ICON_PLAY)
        self.progress.setValue(int(self.timer_svc.progress() * 1000))
        done = state.completed_work_periods
        total = self.timer_svc.durations.cycles_per_session
        if state.is_fresh:
            self.phase_label.setText("Ready")
        else:
            self.phase_label.setText(f"{state.phase.label} · {done}/{total}")
        self.task_input.setReadOnly(not state.is_fresh)

    # ── Settings ────────────────────────────────────────────────────────

    @Slot(bool)
    def _on_sound_toggled(self, enabled: bool) -> None:
        self.sound.set_enabled(enabled)
        self.config["sound_enabled"] = enabled
        try:
            save_config(self.config)
        except OSError:
            logger.exception("Could not save settings.")

    # ── History ─────────────────────────────────────────────────────────

    @Slot(bool)
    def _set_history_open(self, is_open: bool) -> None:
        self.history.setVisible(is_open)
        if is_open:
            self.history.open()
        self.setFixedHeight(self._history_height if is_open else self._compact_height)

    # ── Misc ────────────────────────────────────────────────────────────

    def _show_window(self) -> None:
        self.show()
        self.raise_()
        self.activateWindow()

    def _quit_app(self) -> None:
        self.timer_svc.shutdown()
        self.history.shutdown()
        self.tray.hide()
        self.db.close()
        QApplication.quit()

    def closeEvent(self, event: QCloseEvent) -> None:
        self._quit_app()
        event.accept()


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   The only window. It builds the Database, SessionRepository, TimerService,
#   SoundManager and DesktopNotifier, then renders whatever TimerState the
#   service reports.
#
# Data flow:
#   Play click → TimerService.start(task) → QtTicker schedules ticks →
#   each tick → on_state_changed → _render_state() updates clock/progress.
#   Phase ends → Notify effect → DesktopNotifier (tray message + chime).
#   History toggle → window grows to history_height → HistoryWidget fetches
#   the picked date in the background. A save (reset or long break end)
#   refreshes the open panel. Tray "Sound" toggle → set_enabled + save_config.
