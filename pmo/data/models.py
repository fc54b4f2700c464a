"""
Data models for pmo.

Plain dataclasses mirroring database rows, plus the conversion to the
camelCase record shape the history view and exports speak.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Session:
    """One study session: up to four work periods from first Start to save."""
    id: Optional[int] = None
    task_name: str = ""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: int = 0  # seconds
    completed_cycles: int = 0
    is_completed: bool = False

    def to_record(self) -> dict:
        return {
            "taskName": self.task_name,
            "startTime": self.start_time.isoformat() if self.start_time else None,
            "endTime": self.end_time.isoformat() if self.end_time else None,
            "duration": self.duration,
            "completedCycles": self.completed_cycles,
            "isCompleted": self.is_completed,
        }

    @property
    def cycles_label(self) -> str:
        noun = "cycle" if self.completed_cycles == 1 else "cycles"
        return f"{self.completed_cycles} {noun}"

    @property
    def time_range_label(self) -> str:
        if not self.start_time or not self.end_time:
            return ""
        return f"{self.start_time:%H:%M} - {self.end_time:%H:%M}"


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Defines Session, one saved Pomodoro sequence, plus the labels the
#   history panel shows and the camelCase record shape used for export.
#
# Data flow:
#   SessionRepository._row_to_session() → Session → HistoryService →
#   HistoryWidget rows (time_range_label, cycles_label, is_completed badge).
