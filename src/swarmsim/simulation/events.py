# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Event queue — time-ordered asynchronous deliveries to models.

Events sit in a binary heap keyed on ``(delivery_time, seq)``.  ``seq``
is the monotonically increasing event id, so events due at the same time
come out in the order they were scheduled regardless of who scheduled
them.  Cancellation is lazy: a cancelled event stays in the heap and is
skipped when it reaches the top.
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ScheduledEvent:
    event_id: int
    target_id: int
    delivery_time: float
    payload: Any = None
    cancelled: bool = field(default=False, compare=False)


class EventQueue:
    def __init__(self) -> None:
        self._heap: list[tuple[float, int, ScheduledEvent]] = []
        self._pending: dict[int, ScheduledEvent] = {}
        self._ids = itertools.count(1)

    def push(self, target_id: int, delivery_time: float, payload: Any = None) -> ScheduledEvent:
        event = ScheduledEvent(next(self._ids), target_id, delivery_time, payload)
        heapq.heappush(self._heap, (delivery_time, event.event_id, event))
        self._pending[event.event_id] = event
        return event

    def cancel(self, event_id: int) -> bool:
        """Cancel a pending event.  Returns False if it was already delivered."""
        event = self._pending.pop(event_id, None)
        if event is None:
            return False
        event.cancelled = True
        return True

    def _discard_cancelled(self) -> None:
        while self._heap and self._heap[0][2].cancelled:
            heapq.heappop(self._heap)

    def peek_time(self) -> float | None:
        self._discard_cancelled()
        return self._heap[0][0] if self._heap else None

    def pop_due(self, now: float) -> ScheduledEvent | None:
        """Remove and return the earliest event with ``delivery_time <= now``."""
        self._discard_cancelled()
        if not self._heap or self._heap[0][0] > now:
            return None
        _, _, event = heapq.heappop(self._heap)
        self._pending.pop(event.event_id, None)
        return event

    def is_pending(self, event_id: int) -> bool:
        return event_id in self._pending

    def clear(self) -> None:
        self._heap.clear()
        self._pending.clear()

    def __len__(self) -> int:
        return len(self._pending)

    def __bool__(self) -> bool:
        return bool(self._pending)
