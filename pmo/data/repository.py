"""
Repository: the single place where SQL lives.

Every other module talks to SessionRepository, never to raw SQL. Sessions are
append-only: written once when a cycle sequence completes or is reset, and
read back by calendar date for the history view.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import date, datetime
from typing import List, Optional, Union

from .models import Session

logger = logging.getLogger(__name__)

# helper: parse ISO datetime strings from SQLite
_parse_dt = lambda s: datetime.fromisoformat(s) if s else None

DateLike = Union[date, str]


def normalize_date(value: DateLike) -> str:
    """Return a YYYY-MM-DD string; raise ValueError on anything else."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()).isoformat()
        except ValueError:
            raise ValueError(f"Expected a YYYY-MM-DD date, got {value!r}") from None
    raise ValueError(f"Expected a date or YYYY-MM-DD string, got {type(value).__name__}")


class SessionRepository:
    """Data-access layer wrapping a sqlite3 connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self._lock = threading.Lock()

    # ── Writes ──────────────────────────────────────────────────────────────

    def save_completed_session(
        self, task_name: str, start_time: datetime, end_time: datetime, cycles: int
    ) -> Optional[Session]:
        return self._insert(task_name, start_time, end_time, cycles, completed=True)

    def save_partial_session(
        self, task_name: str, start_time: datetime, end_time: datetime,
        cycles_completed: int,
    ) -> Optional[Session]:
        """Record an aborted sequence. Only saved if a work period finished."""
        if cycles_completed < 1:
            logger.info("Partial session for %r had no completed cycles; not saved.", task_name)
            return None
        return self._insert(task_name, start_time, end_time, cycles_completed, completed=False)

    def _insert(
        self, task_name: str, start_time: datetime, end_time: datetime,
        cycles: int, completed: bool,
    ) -> Optional[Session]:
        if not task_name.strip():
            logger.warning("Refusing to save a session without a task name.")
            return None
        duration = max(int((end_time - start_time).total_seconds()), 0)
        with self._lock:
            cur = self.conn.execute(
                """INSERT INTO sessions
                    (task_name, start_time, end_time, duration, completed_cycles, is_completed)
                VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    task_name,
                    start_time.isoformat(timespec="seconds"),
                    end_time.isoformat(timespec="seconds"),
                    duration,
                    cycles,
                    1 if completed else 0,
                ),
            )
            self.conn.commit()
        logger.info(
            "Saved %s session %d for %r (%d cycles, %ds)",
            "completed" if completed else "partial",
            cur.lastrowid, task_name, cycles, duration,
        )
        return Session(
            id=cur.lastrowid, task_name=task_name,
            start_time=start_time, end_time=end_time, duration=duration,
            completed_cycles=cycles, is_completed=completed,
        )

    # ── Reads ───────────────────────────────────────────────────────────────

    def list_sessions_by_date(self, day: DateLike) -> List[Session]:
        """Sessions that started on `day`, oldest first. Empty list if none."""
        day_str = normalize_date(day)
        with self._lock:
            rows = self.conn.execute(
                "SELECT * FROM sessions WHERE date(start_time) = ? "
                "ORDER BY start_time ASC, id ASC",
                (day_str,),
            ).fetchall()
        return [self._row_to_session(r) for r in rows]

    def list_recent_sessions(self, limit: int = 50) -> List[Session]:
        with self._lock:
            rows = self.conn.execute(
                "SELECT * FROM sessions ORDER BY start_time DESC, id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [self._row_to_session(r) for r in rows]

    def count_sessions(self) -> int:
        with self._lock:
            row = self.conn.execute("SELECT COUNT(*) FROM sessions").fetchone()
        return row[0]

    # ── Row mappers ─────────────────────────────────────────────────────────

    @staticmethod
    def _row_to_session(row: sqlite3.Row) -> Session:
        return Session(
            id=row["id"],
            task_name=row["task_name"],
            start_time=_parse_dt(row["start_time"]),
            end_time=_parse_dt(row["end_time"]),
            duration=row["duration"] or 0,
            completed_cycles=row["completed_cycles"],
            is_completed=bool(row["is_completed"]),
        )


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   The SessionRepository is the ONLY place raw SQL queries live. The timer
#   service calls save_completed_session()/save_partial_session() at phase
#   boundaries; the history view calls list_sessions_by_date().
#
# Key methods:
#   - save_*: append-only inserts. Duration is stored in whole seconds.
#   - list_sessions_by_date(): filters on date(start_time) so a session is
#     listed under the day it began, ordered oldest first.
#   - list_recent_sessions(): newest-first feed, capped at 50 by default.
#
# Data flow:
#   TimerService effect → Repository.save_*() → SQL INSERT
#   HistoryService worker → Repository.list_sessions_by_date() → Session list
