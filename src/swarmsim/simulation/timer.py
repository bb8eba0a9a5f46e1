# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Timers — one-shot and periodic callbacks on simulated time.

A Timer is a thin wrapper over the event queue: each firing is an event
addressed to the owning model carrying a ``TimerFired`` payload, which
the Executive routes to the timer instead of the model's handler.  If
the owner is destroyed the pending firing is dropped with it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from swarmsim.errors import SchedulingError

if TYPE_CHECKING:
    from swarmsim.simulation.model import Model

TimerCallback = Callable[[float], None]


@dataclass(frozen=True)
class TimerFired:
    timer: "Timer"


class Timer:
    """Fires *callback(time)* after *offset* seconds, then every *period*.

    ``period`` of None (or 0) makes a one-shot timer.  Periodic firing
    times are ``origin + n*period`` rather than a running sum, so they
    line up with the count-based clock.  A timer fires at most once per
    step: firings that would fall due again in the step that is being
    delivered are skipped.
    """

    def __init__(
        self,
        owner: Model,
        callback: TimerCallback,
        offset: float,
        period: float | None = None,
    ) -> None:
        self._owner = owner
        self._callback = callback
        self._event_id: int | None = None
        self._fired = 0
        _check_intervals(offset, period)
        self._start(offset, period)

    @property
    def period(self) -> float | None:
        return self._period

    @property
    def fire_count(self) -> int:
        return self._fired

    @property
    def pending(self) -> bool:
        return (
            self._event_id is not None
            and self._owner.executive.event_pending(self._event_id)
        )

    def _start(self, offset: float, period: float | None) -> None:
        self._period = period or None
        self._origin = self._owner.clock.current_time + offset
        self._index = 0
        self._schedule(self._origin)

    def _schedule(self, when: float) -> None:
        self._event_id = self._owner.executive.schedule_event(
            self._owner.id, when, TimerFired(self)
        )

    def _fire(self, time: float) -> None:
        self._event_id = None
        self._fired += 1
        if self._period is not None:
            clock = self._owner.clock
            horizon = clock.current_time + clock.tolerance
            self._index += 1
            next_time = self._origin + self._index * self._period
            if next_time <= horizon:
                # Periods shorter than the step collapse to one firing per step
                skipped = math.floor((horizon - self._origin) / self._period)
                self._index = max(self._index, skipped)
                next_time = self._origin + self._index * self._period
                while next_time <= horizon:
                    self._index += 1
                    next_time = self._origin + self._index * self._period
            self._schedule(next_time)
        self._callback(time)

    def cancel(self) -> None:
        if self._event_id is not None:
            self._owner.executive.cancel_event(self._event_id)
            self._event_id = None

    def reset(self, offset: float, period: float | None = None) -> None:
        """Cancel any pending firing and restart from the current time."""
        _check_intervals(offset, period)
        self.cancel()
        self._start(offset, period)


def _check_intervals(offset: float, period: float | None) -> None:
    for label, value in (("offset", offset), ("period", period)):
        if value is not None and (math.isnan(value) or value < 0):
            raise SchedulingError(f"timer {label} cannot be negative: {value}")
