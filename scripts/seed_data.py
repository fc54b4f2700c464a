"""
Seed Data Generator - fills the session history with realistic fake data
for development and for eyeballing the history panel.

Run: python scripts/seed_data.py [days]
"""

import random
import sys
from datetime import datetime, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from pmo.data.database import Database
from pmo.data.repository import SessionRepository
from pmo.services.cycle import CycleDurations

TASKS = [
    "Read chapter 4", "Linear Algebra problem set", "CS 440 HW",
    "Essay outline", "Flashcards", "Lab report", "Code review",
]


def seed(repo: SessionRepository, days: int = 14,
         durations: CycleDurations = CycleDurations(), rng=None) -> int:
    """Write 1-4 sessions per day for the last `days` days. Returns count."""
    rng = rng or random.Random()
    base = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
    written = 0

    for d in range(days, 0, -1):
        cursor = base - timedelta(days=d) + timedelta(hours=rng.randint(8, 11))
        for _ in range(rng.randint(1, 4)):
            task = rng.choice(TASKS)
            cycles = rng.randint(1, durations.cycles_per_session)
            completed = cycles == durations.cycles_per_session and rng.random() < 0.8

            # work periods plus the breaks between them
            seconds = cycles * durations.work + (cycles - 1) * durations.short_break
            if completed:
                seconds += durations.long_break
            else:
                seconds += rng.randint(0, durations.work)

            start = cursor
            end = start + timedelta(seconds=seconds)
            if completed:
                repo.save_completed_session(task, start, end, cycles)
            else:
                repo.save_partial_session(task, start, end, cycles)
            written += 1
            cursor = end + timedelta(minutes=rng.randint(10, 90))

    return written


def main() -> None:
    days = int(sys.argv[1]) if len(sys.argv) > 1 else 14
    db = Database()
    db.connect()
    repo = SessionRepository(db.conn)
    count = seed(repo, days=days)
    total = repo.count_sessions()
    db.close()
    print(f"Seeded {count} sessions over {days} days into {db.db_path} ({total} total)")


if __name__ == "__main__":
    main()


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Fills the real database with believable history (mix of completed and
#   partial sessions, realistic lengths and gaps) so the history panel can
#   be checked without running the timer for days.
