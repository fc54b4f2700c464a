"""
SQLite database initialization and connection management.

Single responsibility: own the connection and create the sessions table.
All actual queries live in SessionRepository.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

APP_DIR_NAME = "Pomodoro"
DB_FILE_NAME = "pomodoro.db"

SCHEMA_SQL = """
-- Sessions ------------------------------------------------------------------
CREATE TABLE IF NOT EXISTS sessions (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    task_name           TEXT    NOT NULL,
    start_time          TEXT    NOT NULL,
    end_time            TEXT    NOT NULL,
    duration            INTEGER NOT NULL,
    completed_cycles    INTEGER NOT NULL,
    is_completed        INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_sessions_start ON sessions(start_time);
"""


def user_config_dir() -> Path:
    """Per-user config directory (XDG on Linux, AppData on Windows)."""
    if os.name == "nt":
        base = os.environ.get("APPDATA", os.path.expanduser("~\\AppData\\Roaming"))
    else:
        base = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(base)


def default_db_path() -> Path:
    return user_config_dir() / APP_DIR_NAME / DB_FILE_NAME


class Database:
    """Thin wrapper around a SQLite connection."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self.db_path = Path(db_path) if db_path else default_db_path()
        self.conn: Optional[sqlite3.Connection] = None

    # -- lifecycle -----------------------------------------------------------

    def connect(self) -> sqlite3.Connection:
        """Open (or return existing) connection and ensure schema exists."""
        if self.conn is not None:
            return self.conn
        if str(self.db_path) != ":memory:":
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Connecting to SQLite at %s", self.db_path)
        # History fetches run on a worker thread; Repository serialises access.
        self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self._create_tables()
        return self.conn

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.info("Database connection closed.")

    # -- internal ------------------------------------------------------------

    def _create_tables(self) -> None:
        assert self.conn is not None
        self.conn.executescript(SCHEMA_SQL)
        self.conn.commit()
        logger.info("Database schema ensured.")


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Opens the SQLite file under the user's config directory
#   (~/.config/Pomodoro/pomodoro.db on Linux) and makes sure the single
#   `sessions` table exists.
#
# Data flow:
#   App start → Database.connect() → table created → SessionRepository uses conn
