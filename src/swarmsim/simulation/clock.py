# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""SimClock — simulated time for one executive run.

Time is derived from an integer step count, ``current_time = start +
step_index * step_size``, so long runs never accumulate rounding error.
Models and sensors only read the clock; ``_advance`` is called by the
Executive and nothing else.
"""

from __future__ import annotations

import math

# Tolerance, in steps, when comparing an event time with the clock
STEP_EPSILON = 1e-9


class SimClock:
    def __init__(self, step_size: float, start_time: float = 0.0) -> None:
        if not math.isfinite(step_size) or step_size <= 0:
            raise ValueError(f"step_size must be positive, got {step_size}")
        self._step_size = float(step_size)
        self._start_time = float(start_time)
        self._step_index = 0

    @property
    def step_size(self) -> float:
        return self._step_size

    @property
    def step_index(self) -> int:
        return self._step_index

    @property
    def current_time(self) -> float:
        return self._start_time + self._step_index * self._step_size

    @property
    def tolerance(self) -> float:
        """Times within this many seconds of the clock count as now."""
        return STEP_EPSILON * self._step_size

    def time_at(self, step_index: int) -> float:
        return self._start_time + step_index * self._step_size

    def steps_until(self, end_time: float) -> int:
        """Whole steps from the current time until *end_time* is reached."""
        remaining = (end_time - self.current_time) / self._step_size
        return max(0, math.ceil(remaining - STEP_EPSILON))

    def _advance(self) -> float:
        self._step_index += 1
        return self.current_time

    def __repr__(self) -> str:
        return f"SimClock(t={self.current_time:.6f}, step={self._step_size})"
