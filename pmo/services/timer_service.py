"""
Timer Service - hosts the Pomodoro cycle state machine.

Holds the current TimerState, owns the single cancellable tick handle and
executes the effects returned by the pure transitions in cycle.py:
session saves go to the repository, notifications go to an injected
callback. Neither may break the countdown if it fails.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional, Protocol

from . import cycle
from .cycle import (
    CycleDurations, Effect, Notify, SaveCompletedSession, SavePartialSession,
    SessionNearingCompletion, TimerState, Transition,
)

logger = logging.getLogger(__name__)


class TickHandle(Protocol):
    def cancel(self) -> None: ...


class Ticker(Protocol):
    def schedule(self, callback: Callable[[], None]) -> TickHandle: ...


class SessionStore(Protocol):
    def save_completed_session(self, task_name: str, start_time: datetime,
                               end_time: datetime, cycles: int): ...

    def save_partial_session(self, task_name: str, start_time: datetime,
                             end_time: datetime, cycles_completed: int): ...


class TimerService:
    """
    Single-task Pomodoro controller.

    The UI calls start/pause/reset; the ticker calls tick once per second
    while running. Callbacks let the UI react without the service knowing
    anything about widgets.
    """

    def __init__(
        self,
        store: SessionStore,
        ticker: Ticker,
        durations: Optional[CycleDurations] = None,
        clock: Callable[[], datetime] = datetime.now,
        on_state_changed: Optional[Callable[[TimerState], None]] = None,
        on_notify: Optional[Callable[[Notify], None]] = None,
        on_nearing_completion: Optional[Callable[[SessionNearingCompletion], None]] = None,
    ) -> None:
        self.store = store
        self.ticker = ticker
        self.durations = durations or CycleDurations()
        self.clock = clock

        self.on_state_changed = on_state_changed
        self.on_notify = on_notify
        self.on_nearing_completion = on_nearing_completion

        self._state = cycle.initial_state(self.durations)
        self._tick_handle: Optional[TickHandle] = None

    # ── Public API ──────────────────────────────────────────────────────────

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def is_ticking(self) -> bool:
        return self._tick_handle is not None

    def start(self, task_name: str = "") -> TimerState:
        before = self._state
        self._apply(cycle.start(before, task_name, self.clock()))
        if self._state is before and not before.is_running:
            logger.debug("Start ignored: a task name is required to begin a cycle.")
        elif before.is_fresh and self._state.is_running:
            logger.info("Cycle started for task %r", self._state.task_name)
        return self._state

    def pause(self) -> TimerState:
        self._apply(cycle.pause(self._state))
        return self._state

    def reset(self) -> TimerState:
        self._apply(cycle.reset(self._state, self.durations, self.clock()))
        logger.info("Timer reset.")
        return self._state

    def tick(self) -> TimerState:
        self._apply(cycle.tick(self._state, self.durations, self.clock()))
        return self._state

    def progress(self) -> float:
        return cycle.progress(self._state, self.durations)

    def set_durations(self, durations: CycleDurations) -> None:
        """
        Apply new phase lengths. A fresh timer restarts at the new work
        length; mid-cycle the countdown is kept but clamped to the new
        nominal length of the current phase.
        """
        self.durations = durations
        if self._state.is_fresh and not self._state.is_running:
            self._state = cycle.initial_state(durations)
        else:
            self._state = cycle.clamp_to(self._state, durations)
        self._emit_state()

    def shutdown(self) -> None:
        self._cancel_tick()

    # ── Internal ────────────────────────────────────────────────────────────

    def _apply(self, transition: Transition) -> None:
        previous = self._state
        self._state = transition.state
        if previous.phase is not self._state.phase:
            logger.info(
                "Phase %s → %s (%d/%d work periods)",
                previous.phase.value, self._state.phase.value,
                self._state.completed_work_periods, self.durations.cycles_per_session,
            )
        self._sync_ticker(restart=not previous.is_running and self._state.is_running)
        self._run_effects(transition.effects)
        if self._state != previous:
            self._emit_state()

    def _sync_ticker(self, restart: bool = False) -> None:
        """Keep exactly one tick handle alive while running, none otherwise."""
        if restart:
            self._cancel_tick()
        if self._state.is_running and self._tick_handle is None:
            self._tick_handle = self.ticker.schedule(self.tick)
        elif not self._state.is_running:
            self._cancel_tick()

    def _cancel_tick(self) -> None:
        handle, self._tick_handle = self._tick_handle, None
        if handle is not None:
            handle.cancel()

    def _run_effects(self, effects: List[Effect]) -> None:
        for effect in effects:
            if isinstance(effect, SaveCompletedSession):
                self._persist(
                    "completed", self.store.save_completed_session,
                    effect.task_name, effect.start_time, effect.end_time, effect.cycles,
                )
            elif isinstance(effect, SavePartialSession):
                self._persist(
                    "partial", self.store.save_partial_session,
                    effect.task_name, effect.start_time, effect.end_time,
                    effect.cycles_completed,
                )
            elif isinstance(effect, SessionNearingCompletion):
                logger.info("Long break reached for %r.", effect.task_name)
                self._callback(self.on_nearing_completion, effect)
            elif isinstance(effect, Notify):
                self._callback(self.on_notify, effect)

    @staticmethod
    def _persist(kind: str, save: Callable, *args) -> None:
        try:
            save(*args)
        except Exception:
            logger.exception("Failed to save %s session; timer continues.", kind)

    @staticmethod
    def _callback(cb: Optional[Callable], payload) -> None:
        if cb is None:
            return
        try:
            cb(payload)
        except Exception:
            logger.exception("Timer callback failed for %s", type(payload).__name__)

    def _emit_state(self) -> None:
        self._callback(self.on_state_changed, self._state)


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Wraps the pure cycle functions with the parts that touch the outside
#   world: the tick timer, the session store and UI callbacks.
#
# Key pieces:
#   - _tick_handle: the only live timer. _sync_ticker() cancels it whenever
#     the state stops running and replaces it whenever the state starts, so
#     two tick streams can never overlap.
#   - _run_effects(): turns Save*/Notify effects into repository calls and
#     callbacks. Failures are logged and swallowed; the state already moved.
#
# Data flow:
#   QTimer fires → TimerService.tick() → cycle.tick() → Transition →
#   state stored → effects run → on_state_changed(state) → widget repaints.
