# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Real-time pacing — throttles the step loop to wall-clock time.

The pacer only sleeps.  It never changes simulated time or the order of
anything inside a step, so a paced run and an unpaced run of the same
variation produce identical results.
"""

from __future__ import annotations

import time
from typing import Callable

# Sleeps shorter than this are skipped
MIN_SLEEP = 0.0005


class RealTimePacer:
    """Keeps ``wall_elapsed >= sim_elapsed * scale``.

    ``scale`` is wall seconds per simulated second: 1.0 is real time, 2.0
    runs at half speed, 0.5 at double speed.  ``clock`` and ``sleep`` are
    injectable for tests.
    """

    def __init__(
        self,
        scale: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if scale <= 0:
            raise ValueError(f"scale must be positive, got {scale}")
        self.scale = scale
        self._clock = clock
        self._sleep = sleep
        self._wall_origin: float | None = None
        self._sim_origin = 0.0
        self.total_slept = 0.0

    def begin(self, sim_time: float) -> None:
        """Anchor pacing at *sim_time*.  Call again after a pause."""
        self._wall_origin = self._clock()
        self._sim_origin = sim_time

    def wait_until(self, sim_time: float) -> float:
        """Sleep until the wall clock catches up with *sim_time*."""
        if self._wall_origin is None:
            self.begin(sim_time)
            return 0.0
        target = self._wall_origin + (sim_time - self._sim_origin) * self.scale
        delay = target - self._clock()
        if delay < MIN_SLEEP:
            return 0.0
        self._sleep(delay)
        self.total_slept += delay
        return delay
