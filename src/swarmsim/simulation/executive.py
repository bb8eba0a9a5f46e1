# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Executive — owns simulated time, the model registry, and event delivery.

Architecture
------------
One Executive drives exactly one variation.  It is single threaded and
cooperative: a step runs to completion before the next one begins.

States:

  NOT_STARTED --start()--> RUNNING <--pause()/resume()--> PAUSED
        \\                     |                            /
         `------------------ stop() ----------------------'
                               v
                            STOPPED (terminal)

Per step, while RUNNING:

  1. Deliver every event with ``delivery_time <= current_time`` in
     (delivery_time, scheduling order).  Events scheduled during this
     phase for a time that is already due are delivered in the same
     phase.
  2. Call ``update(current_time)`` on every ACTIVE model in registration
     order.  Events scheduled here wait for the next step's delivery.
  3. Advance the clock by one step.

A model that raises in any hook is logged and recorded in ``faults``;
the step carries on with the next model.  Events addressed to unknown
or destroyed models are dropped.

``stop()`` is idempotent and callable from any state.  Called from
inside a step (an agent ending the run), it stops further event
delivery, lets the remaining updates finish, and tears down at the end
of that step.  Called from another thread while ``run()`` is looping,
it takes effect between steps.
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from loguru import logger

from swarmsim.errors import LifecycleError, SchedulingError
from swarmsim.scenarios.seeds import SeedFactory
from swarmsim.simulation.aggregator import Aggregator
from swarmsim.simulation.clock import SimClock
from swarmsim.simulation.events import EventQueue
from swarmsim.simulation.model import Model, ModelState
from swarmsim.simulation.pacing import RealTimePacer
from swarmsim.simulation.timer import TimerFired

if TYPE_CHECKING:
    from swarmsim.comms.propagation import PropagationModel
    from swarmsim.config import Settings
    from swarmsim.scenarios.variation import Variation

M = TypeVar("M", bound=Model)

# Model ids are assigned 1..MAX_MODEL_ID
MAX_MODEL_ID = 2 ** 31 - 1


class ExecutiveState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass
class ExecutiveConfig:
    """Executive settings.

    ``real_time_scale`` is wall seconds per simulated second and only
    matters when ``real_time`` is on.
    """
    step_size: float = 0.1
    end_time: float = 10.0
    real_time: bool = False
    real_time_scale: float = 1.0

    @classmethod
    def from_settings(cls, settings: Settings) -> ExecutiveConfig:
        return cls(
            step_size=settings.step_size,
            end_time=settings.end_time,
            real_time=settings.real_time,
            real_time_scale=settings.real_time_scale,
        )


@dataclass
class AgentFault:
    model_id: int | None
    time: float
    phase: str
    error: BaseException = field(repr=False)


class Executive:
    def __init__(
        self,
        config: ExecutiveConfig | None = None,
        *,
        seed_factory: SeedFactory | None = None,
        variation: Variation | None = None,
        pacer: RealTimePacer | None = None,
    ) -> None:
        self.config = config or ExecutiveConfig()
        self._clock = SimClock(self.config.step_size)
        self._queue = EventQueue()
        self._models: dict[int, Model] = {}
        self._next_id = 1
        self._state = ExecutiveState.NOT_STARTED
        self._propagation: PropagationModel | None = None
        self._variation = variation
        if seed_factory is None:
            seed_factory = SeedFactory(variation.master_seed if variation is not None else 0)
        self._seed_factory = seed_factory
        if pacer is None and self.config.real_time:
            pacer = RealTimePacer(self.config.real_time_scale)
        self._pacer = pacer
        self.aggregator = Aggregator()
        self.faults: list[AgentFault] = []

        self._lock = threading.RLock()
        self._resumed = threading.Event()  # set = running, clear = paused
        self._resumed.set()
        self._in_step = False
        self._stop_requested = False
        self._termination_requested = False

    # -- read-only views ------------------------------------------------------

    @property
    def clock(self) -> SimClock:
        return self._clock

    @property
    def current_time(self) -> float:
        return self._clock.current_time

    @property
    def state(self) -> ExecutiveState:
        return self._state

    @property
    def variation(self) -> Variation | None:
        return self._variation

    @property
    def seed_factory(self) -> SeedFactory:
        return self._seed_factory

    @property
    def pending_events(self) -> int:
        return len(self._queue)

    @property
    def models(self) -> list[Model]:
        return list(self._models.values())

    # -- propagation ----------------------------------------------------------

    @property
    def propagation(self) -> PropagationModel | None:
        return self._propagation

    @propagation.setter
    def propagation(self, model: PropagationModel | None) -> None:
        if self._state is not ExecutiveState.NOT_STARTED:
            raise LifecycleError("propagation model must be set before start()")
        self._propagation = model

    # -- registry -------------------------------------------------------------

    def register(self, model: M) -> M:
        """Assign *model* the next id.  Only allowed before ``start()``."""
        if self._state is not ExecutiveState.NOT_STARTED:
            raise LifecycleError(f"cannot register models while {self._state.value}")
        if self._next_id > MAX_MODEL_ID:
            raise LifecycleError("model id space exhausted")
        model._attach(self, self._next_id)
        self._models[self._next_id] = model
        self._next_id += 1
        return model

    def destroy_model(self, model_id: int) -> bool:
        """Finish and destroy one model mid-run.  Pending events to it are dropped."""
        model = self._models.get(model_id)
        if model is None or model.state is ModelState.DESTROYED:
            return False
        self._destroy_model(model)
        return True

    def find_model(self, model_id: int) -> Model | None:
        return self._models.get(model_id)

    def find_models_by_type(self, kind: type[M]) -> list[M]:
        return [m for m in self._models.values() if isinstance(m, kind)]

    # -- events ---------------------------------------------------------------

    def schedule_event(self, target_id: int, delivery_time: float, payload: Any = None) -> int:
        """Queue *payload* for *target_id* at *delivery_time*; returns the event id."""
        if self._state is ExecutiveState.STOPPED:
            raise SchedulingError("cannot schedule events after stop()")
        now = self._clock.current_time
        if math.isnan(delivery_time) or delivery_time < now:
            raise SchedulingError(
                f"cannot schedule event for model {target_id} at t={delivery_time} "
                f"before current time t={now}"
            )
        return self._queue.push(target_id, delivery_time, payload).event_id

    def cancel_event(self, event_id: int) -> bool:
        return self._queue.cancel(event_id)

    def event_pending(self, event_id: int) -> bool:
        return self._queue.is_pending(event_id)

    # -- lifecycle ------------------------------------------------------------

    def start(self) -> None:
        with self._lock:
            if self._state is not ExecutiveState.NOT_STARTED:
                raise LifecycleError(f"cannot start from {self._state.value}")
            logger.debug("Executive starting with {} model(s)", len(self._models))
            for model in list(self._models.values()):
                try:
                    model._initialize()
                except Exception as exc:
                    self._record_fault(model, "initialize", exc)
                    self._destroy_model(model)
            self._state = ExecutiveState.RUNNING
            if self._pacer is not None:
                self._pacer.begin(self._clock.current_time)

    def pause(self) -> None:
        with self._lock:
            if self._state is ExecutiveState.RUNNING:
                self._state = ExecutiveState.PAUSED
                self._resumed.clear()
                logger.debug("Executive paused at t={:.3f}", self._clock.current_time)

    def resume(self) -> None:
        with self._lock:
            if self._state is ExecutiveState.PAUSED:
                self._state = ExecutiveState.RUNNING
                if self._pacer is not None:
                    self._pacer.begin(self._clock.current_time)
                self._resumed.set()
                logger.debug("Executive resumed at t={:.3f}", self._clock.current_time)

    def stop(self) -> None:
        if self._in_step:
            self._stop_requested = True
            return
        with self._lock:
            if self._state is ExecutiveState.STOPPED:
                return
            self._teardown()

    def request_termination(self) -> None:
        """Ask the run to end after the current step completes."""
        self._termination_requested = True

    def _teardown(self) -> None:
        self._state = ExecutiveState.STOPPED
        self._queue.clear()
        for model in list(self._models.values()):
            self._destroy_model(model)
        if self._propagation is not None:
            try:
                self._propagation.shutdown()
            except Exception as exc:
                self._record_fault(None, "shutdown", exc)
        self._resumed.set()
        logger.debug(
            "Executive stopped at t={:.3f} ({} fault(s))",
            self._clock.current_time, len(self.faults),
        )

    def _destroy_model(self, model: Model) -> None:
        try:
            model._destroy()
        except Exception as exc:
            self._record_fault(model, "destroy", exc)

    # -- stepping -------------------------------------------------------------

    def step(self) -> bool:
        """Run one step.  Returns False when not RUNNING (nothing happens)."""
        with self._lock:
            if self._state is not ExecutiveState.RUNNING:
                return False
            if self._stop_requested or self._termination_requested:
                self._teardown()
                return False
            self._in_step = True
            try:
                now = self._clock.current_time
                self._deliver_due(now)
                for model in list(self._models.values()):
                    if model.state is not ModelState.ACTIVE:
                        continue
                    try:
                        model.update(now)
                    except Exception as exc:
                        self._record_fault(model, "update", exc)
                self._clock._advance()
            finally:
                self._in_step = False
            if self._stop_requested or self._termination_requested:
                self._teardown()
            return True

    def _deliver_due(self, now: float) -> None:
        while not self._stop_requested:
            event = self._queue.pop_due(now + self._clock.tolerance)
            if event is None:
                return
            model = self._models.get(event.target_id)
            if model is None or model.state is not ModelState.ACTIVE:
                logger.debug(
                    "Dropping event {} for missing or inactive model {}",
                    event.event_id, event.target_id,
                )
                continue
            try:
                if isinstance(event.payload, TimerFired):
                    event.payload.timer._fire(event.delivery_time)
                else:
                    model.handle_event(event.delivery_time, event.payload)
            except Exception as exc:
                self._record_fault(model, "event", exc)

    def run(
        self,
        end_time: float | None = None,
        on_step: Callable[[Executive], None] | None = None,
    ) -> int:
        """Start if needed and step until *end_time*, then stop.

        Blocks while paused; another thread must ``resume()`` or
        ``stop()``.  Returns the number of steps executed.
        """
        end_time = self.config.end_time if end_time is None else end_time
        if self._state is ExecutiveState.NOT_STARTED:
            self.start()
        steps = 0
        try:
            while self._clock.steps_until(end_time) > 0:
                self._resumed.wait()
                if self._state is not ExecutiveState.RUNNING:
                    if self._state is ExecutiveState.STOPPED:
                        break
                    continue
                if not self.step():
                    continue
                steps += 1
                if on_step is not None:
                    on_step(self)
                if self._pacer is not None and self._state is ExecutiveState.RUNNING:
                    self._pacer.wait_until(self._clock.current_time)
        finally:
            self.stop()
        return steps

    # -- faults ---------------------------------------------------------------

    def _record_fault(self, model: Model | None, phase: str, exc: Exception) -> None:
        model_id = model.id if model is not None else None
        self.faults.append(AgentFault(model_id, self._clock.current_time, phase, exc))
        logger.opt(exception=exc).warning(
            "Model {} failed during {} at t={:.3f}: {}",
            model_id, phase, self._clock.current_time, exc,
        )
