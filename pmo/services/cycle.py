"""
Pomodoro cycle state machine.

Pure transition functions: each takes the current TimerState and returns a
Transition holding the next state plus the effects the host must perform
(save a session, show a notification). Nothing here touches Qt, sound or the
database, so every rule is unit-testable with plain values.

    Work ─► ShortBreak ─► Work ─► … ─► (4th Work) ─► LongBreak ─► Work (halted)
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import List, Optional, Union


class CyclePhase(Enum):
    WORK = "work"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def label(self) -> str:
        return {
            CyclePhase.WORK: "Focus",
            CyclePhase.SHORT_BREAK: "Short break",
            CyclePhase.LONG_BREAK: "Long break",
        }[self]


@dataclass(frozen=True)
class CycleDurations:
    """Nominal phase lengths in seconds."""
    work: int = 25 * 60
    short_break: int = 5 * 60
    long_break: int = 15 * 60
    cycles_per_session: int = 4

    def for_phase(self, phase: CyclePhase) -> int:
        if phase is CyclePhase.WORK:
            return self.work
        if phase is CyclePhase.SHORT_BREAK:
            return self.short_break
        return self.long_break


@dataclass(frozen=True)
class TimerState:
    phase: CyclePhase
    remaining_seconds: int
    is_running: bool = False
    task_name: str = ""
    completed_work_periods: int = 0
    cycle_started_at: Optional[datetime] = None

    @property
    def is_fresh(self) -> bool:
        """True until the first Start of a cycle sequence."""
        return self.cycle_started_at is None


# ── Effects ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SaveCompletedSession:
    task_name: str
    start_time: datetime
    end_time: datetime
    cycles: int


@dataclass(frozen=True)
class SavePartialSession:
    task_name: str
    start_time: datetime
    end_time: datetime
    cycles_completed: int


@dataclass(frozen=True)
class Notify:
    phase: CyclePhase        # the phase that just finished
    next_phase: CyclePhase
    task_name: str


@dataclass(frozen=True)
class SessionNearingCompletion:
    task_name: str
    completed_work_periods: int


Effect = Union[SaveCompletedSession, SavePartialSession, Notify, SessionNearingCompletion]


@dataclass(frozen=True)
class Transition:
    state: TimerState
    effects: List[Effect] = field(default_factory=list)


# ── Operations ──────────────────────────────────────────────────────────────

def initial_state(durations: CycleDurations) -> TimerState:
    return TimerState(phase=CyclePhase.WORK, remaining_seconds=durations.work)


def start(state: TimerState, task_name: str, now: datetime) -> Transition:
    """Begin a fresh cycle (needs a task name) or resume a paused one."""
    if state.is_running:
        return Transition(state)
    if state.is_fresh:
        name = (task_name or "").strip()
        if not name:
            return Transition(state)
        return Transition(replace(state, is_running=True, task_name=name, cycle_started_at=now))
    return Transition(replace(state, is_running=True))


def pause(state: TimerState) -> Transition:
    if not state.is_running:
        return Transition(state)
    return Transition(replace(state, is_running=False))


def reset(state: TimerState, durations: CycleDurations, now: datetime) -> Transition:
    effects: List[Effect] = []
    if state.completed_work_periods >= 1 and state.cycle_started_at is not None:
        effects.append(SavePartialSession(
            task_name=state.task_name,
            start_time=state.cycle_started_at,
            end_time=now,
            cycles_completed=state.completed_work_periods,
        ))
    return Transition(initial_state(durations), effects)


def tick(state: TimerState, durations: CycleDurations, now: datetime) -> Transition:
    """Advance one second; on reaching zero, move to the next phase."""
    if not state.is_running:
        return Transition(state)
    remaining = max(state.remaining_seconds - 1, 0)
    if remaining > 0:
        return Transition(replace(state, remaining_seconds=remaining))
    return _advance_phase(replace(state, remaining_seconds=0), durations, now)


def _advance_phase(state: TimerState, durations: CycleDurations, now: datetime) -> Transition:
    finished = state.phase
    effects: List[Effect] = []

    if finished is CyclePhase.WORK:
        completed = state.completed_work_periods + 1
        if completed < durations.cycles_per_session:
            next_phase = CyclePhase.SHORT_BREAK
        else:
            next_phase = CyclePhase.LONG_BREAK
            effects.append(SessionNearingCompletion(state.task_name, completed))
        new_state = replace(
            state,
            phase=next_phase,
            remaining_seconds=durations.for_phase(next_phase),
            completed_work_periods=completed,
        )
    elif finished is CyclePhase.SHORT_BREAK:
        next_phase = CyclePhase.WORK
        new_state = replace(state, phase=next_phase, remaining_seconds=durations.work)
    else:
        next_phase = CyclePhase.WORK
        if state.cycle_started_at is not None:
            effects.append(SaveCompletedSession(
                task_name=state.task_name,
                start_time=state.cycle_started_at,
                end_time=now,
                cycles=state.completed_work_periods,
            ))
        # Full reset; the next sequence waits for an explicit Start.
        new_state = initial_state(durations)

    effects.append(Notify(phase=finished, next_phase=next_phase, task_name=state.task_name))
    return Transition(new_state, effects)


def clamp_to(state: TimerState, durations: CycleDurations) -> TimerState:
    """Cap remaining_seconds at the nominal length of the current phase."""
    limit = durations.for_phase(state.phase)
    if state.remaining_seconds <= limit:
        return state
    return replace(state, remaining_seconds=limit)


# ── Display helpers ─────────────────────────────────────────────────────────

def progress(state: TimerState, durations: CycleDurations) -> float:
    total = durations.for_phase(state.phase)
    if total <= 0:
        return 0.0
    return min(max((total - state.remaining_seconds) / total, 0.0), 1.0)


def format_clock(seconds: int) -> str:
    seconds = max(int(seconds), 0)
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Encodes the whole Pomodoro cycle as pure functions over an immutable
#   TimerState. Every call returns (new_state, effects).
#
# Key pieces:
#   - CyclePhase / CycleDurations / TimerState: the data.
#   - start / pause / reset / tick: the only ways state changes.
#   - Effects (SaveCompletedSession, SavePartialSession, Notify,
#     SessionNearingCompletion): instructions for the host, never executed here.
#
# Data flow:
#   TimerService.tick() → cycle.tick(state) → Transition → TimerService
#   stores Transition.state and runs each effect (DB save, notification).
