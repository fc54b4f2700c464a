"""
History panel - pick a date, see the sessions recorded that day.

Read-only view over HistoryService. The "Recent" button switches to the
latest sessions across all days; picking a date switches back. Fetches
run on a worker thread; the result is handed back to the UI thread through
a Qt signal, where HistoryService drops it if a newer fetch was issued.
"""

from __future__ import annotations

import concurrent.futures
import logging
from typing import List, Optional

from PySide6.QtCore import QDate, Qt, Signal, Slot
from PySide6.QtWidgets import (
    QDateEdit, QFrame, QHBoxLayout, QLabel, QPushButton, QScrollArea,
    QVBoxLayout, QWidget,
)

from pmo.data.models import Session
from pmo.services.history_service import HistoryService, HistoryState, HistoryStatus

logger = logging.getLogger(__name__)


class HistoryWidget(QWidget):
    """Date picker plus the list of sessions for that date."""

    closed = Signal()
    # (requested date, finished future), emitted from the worker thread
    _fetch_finished = Signal(str, object)

    def __init__(self, store, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.service = HistoryService(
            store,
            post=self._fetch_finished.emit,
            on_change=self._render,
        )
        self._fetch_finished.connect(self._on_fetch_finished)
        self._build_ui()

    # ── UI Construction ─────────────────────────────────────────────────

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 8, 0, 0)
        layout.setSpacing(8)

        header = QHBoxLayout()
        self.date_edit = QDateEdit(QDate.currentDate())
        self.date_edit.setCalendarPopup(True)
        self.date_edit.setDisplayFormat("MMMM d, yyyy")
        self.date_edit.dateChanged.connect(self._on_date_changed)
        header.addWidget(self.date_edit, 1)

        self.btn_recent = QPushButton("Recent")
        self.btn_recent.setToolTip("Latest sessions across all days")
        self.btn_recent.clicked.connect(lambda: self.service.show_recent())
        header.addWidget(self.btn_recent)

        self.btn_close = QPushButton("✕")
        self.btn_close.setToolTip("Close history")
        self.btn_close.clicked.connect(self.closed.emit)
        header.addWidget(self.btn_close)
        layout.addLayout(header)

        self.status_label = QLabel("")
        self.status_label.setObjectName("history_status")
        self.status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.status_label.setWordWrap(True)
        layout.addWidget(self.status_label)

        self.scroll = QScrollArea()
        self.scroll.setWidgetResizable(True)
        self.scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.list_host = QWidget()
        self.list_layout = QVBoxLayout(self.list_host)
        self.list_layout.setContentsMargins(0, 0, 0, 0)
        self.list_layout.setSpacing(6)
        self.list_layout.addStretch()
        self.scroll.setWidget(self.list_host)
        layout.addWidget(self.scroll, 1)

    # ── Public ──────────────────────────────────────────────────────────

    def open(self) -> None:
        """Load the currently picked date (called whenever the panel opens)."""
        self._on_date_changed(self.date_edit.date())

    def refresh(self) -> None:
        """Re-run the current view if the panel is showing."""
        if self.isVisible():
            self.service.refresh()

    def shutdown(self) -> None:
        self.service.shutdown()

    # ── Slots ───────────────────────────────────────────────────────────

    @Slot(QDate)
    def _on_date_changed(self, qdate: QDate) -> None:
        self.service.select_date(qdate.toString("yyyy-MM-dd"))

    @Slot(str, object)
    def _on_fetch_finished(self, requested: str, future: concurrent.futures.Future) -> None:
        self.service.deliver(requested, future)

    # ── Rendering ───────────────────────────────────────────────────────

    def _render(self, state: HistoryState) -> None:
        self._clear_rows()
        self.status_label.setObjectName("history_status")
        if state.status is HistoryStatus.LOADING:
            self.status_label.setText("Loading sessions...")
        elif state.status is HistoryStatus.ERROR:
            self.status_label.setObjectName("history_error")
            self.status_label.setText(f"Error: {state.error}")
        elif not state.sessions:
            self.status_label.setText("No study sessions recorded yet")
        else:
            self.status_label.setText("")
            self._add_rows(state.sessions, with_date=state.showing_recent)
        self.status_label.setVisible(bool(self.status_label.text()))
        # objectName changed; re-polish so the stylesheet picks it up
        self.status_label.style().unpolish(self.status_label)
        self.status_label.style().polish(self.status_label)

    def _clear_rows(self) -> None:
        while self.list_layout.count() > 1:
            item = self.list_layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()

    def _add_rows(self, sessions: List[Session], with_date: bool = False) -> None:
        for i, session in enumerate(sessions):
            self.list_layout.insertWidget(i, self._make_row(session, with_date))

    @staticmethod
    def _make_row(session: Session, with_date: bool = False) -> QFrame:
        row = QFrame()
        row.setObjectName("session_row")
        h = QHBoxLayout(row)
        h.setContentsMargins(10, 8, 10, 8)

        left = QVBoxLayout()
        left.setSpacing(2)
        left.addWidget(QLabel(session.task_name))
        when_text = session.time_range_label
        if with_date and session.start_time:
            when_text = f"{session.start_time:%b %d} · {when_text}"
        when = QLabel(when_text)
        when.setObjectName("session_meta")
        left.addWidget(when)
        h.addLayout(left, 1)

        cycles = QLabel(session.cycles_label)
        cycles.setObjectName("session_meta")
        h.addWidget(cycles)

        badge = QLabel("Complete" if session.is_completed else "Partial")
        badge.setObjectName("badge_complete" if session.is_completed else "badge_partial")
        h.addWidget(badge)
        return row


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   The panel under the timer: a date picker, a "Recent" button and one row
#   per session (task, time range, cycles, Complete/Partial badge).
#
# Data flow:
#   Date picked / Recent clicked → HistoryService fetch on a worker thread →
#   _fetch_finished signal (queued onto the UI thread) → service.deliver()
#   → _render(). TimerWidget calls refresh() after it saves a session.
