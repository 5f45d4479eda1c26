"""Time-driven event state transitions.

Two states: CLOSED (initial) and OPEN. A sweep opens CLOSED events whose window
has started and not yet ended, and closes OPEN events whose window has ended.
An event whose whole window passed before any sweep saw it stays CLOSED.

State is derived only from stored timestamps and the current time, so a sweep
after a restart lands in the same state as if the process never stopped.
Confirmation reads the persisted state, so it lags the true window by at most
one sweep interval.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_utc
from ..core.constants import DEFAULT_SWEEP_INTERVAL_SECONDS
from ..core.enums import EventState
from ..events.model import Event
from ..events.repository import EventRepository
from ..events.timing import has_ended, is_within_window
from .task import RepeatingTask

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    opened: list[int] = field(default_factory=list)
    closed: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)


class EventStateScheduler:
    def __init__(
        self,
        events: EventRepository,
        *,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._events = events
        self._clock = clock
        self._task = RepeatingTask(self.sweep, interval=interval_seconds, name="event-state-scheduler")

    @property
    def is_running(self) -> bool:
        return self._task.is_running

    def start(self) -> None:
        """Sweep immediately, then every interval, on a background thread."""
        self._task.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._task.stop(timeout)

    def run_once(self) -> bool:
        """Sweep now unless a sweep is already running."""
        return self._task.run_once()

    def sweep(self, now: Optional[datetime] = None) -> SweepResult:
        now = now or self._clock()
        result = SweepResult()

        for event in self._events.list_closed_due(now):
            if not is_within_window(event.scheduled_time, event.duration_minutes, now):
                # Missed window: never opened retroactively.
                continue
            self._transition(event, EventState.CLOSED, EventState.OPEN, now, result.opened, result)

        for event in self._events.list_open():
            if has_ended(event.scheduled_time, event.duration_minutes, now):
                self._transition(event, EventState.OPEN, EventState.CLOSED, now, result.closed, result)

        if result.opened or result.closed or result.failed:
            logger.info(
                "Sweep at %s: opened=%s closed=%s failed=%s",
                now.isoformat(),
                result.opened,
                result.closed,
                result.failed,
            )
        return result

    def _transition(
        self,
        event: Event,
        from_state: EventState,
        to_state: EventState,
        now: datetime,
        bucket: list[int],
        result: SweepResult,
    ) -> None:
        try:
            changed = self._events.transition_state(event.event_id, from_state=from_state, to_state=to_state)
        except Exception:
            # One bad event must not stop the sweep; it is retried next tick.
            logger.exception("Failed to move event %s from %s to %s", event.event_id, from_state.value, to_state.value)
            result.failed.append(event.event_id)
            return

        if changed:
            bucket.append(event.event_id)
            logger.info(
                "Event %s (%s) %s at %s",
                event.event_id,
                event.name,
                "opened" if to_state == EventState.OPEN else "closed",
                now.isoformat(),
            )
