# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Model lifecycle, agents, and the physical-entity contract.

Architecture
------------
The Executive only knows ``Model``: an id, a lifecycle state, and four
hooks (initialize, update, handle_event, finish/destroy).  Agents are
Models built by composition instead of subclassing:

  Agent
    body          PhysicalEntity (owned by the physics world, read only)
    capabilities  Radio, sensors, anything with the Capability hooks
    behavior      optional Behavior driving the agent each step

Lifecycle: UNINITIALIZED -> ACTIVE -> DESTROYED.  ``initialize`` runs
exactly once, before the first ``update``; ``update`` runs once per step
while ACTIVE; teardown calls ``finish`` then ``destroy``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

import numpy as np

from swarmsim.errors import LifecycleError

if TYPE_CHECKING:
    from swarmsim.simulation.clock import SimClock
    from swarmsim.simulation.executive import Executive

C = TypeVar("C", bound="Capability")


class ModelState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    DESTROYED = "destroyed"


class Model:
    """Minimal lifecycle contract driven by the Executive."""

    def __init__(self, name: str | None = None) -> None:
        self.name = name or type(self).__name__
        self._id: int | None = None
        self._state = ModelState.UNINITIALIZED
        self._executive: Executive | None = None

    @property
    def id(self) -> int | None:
        return self._id

    @property
    def state(self) -> ModelState:
        return self._state

    @property
    def active(self) -> bool:
        return self._state is ModelState.ACTIVE

    @property
    def executive(self) -> Executive:
        if self._executive is None:
            raise LifecycleError(f"{self.name} is not registered with an executive")
        return self._executive

    @property
    def clock(self) -> SimClock:
        return self.executive.clock

    # -- executive-facing transitions ----------------------------------------

    def _attach(self, executive: Executive, model_id: int) -> None:
        if self._executive is not None:
            raise LifecycleError(f"{self.name} is already registered (id={self._id})")
        self._executive = executive
        self._id = model_id

    def _initialize(self) -> None:
        if self._state is not ModelState.UNINITIALIZED:
            raise LifecycleError(f"{self.name} initialized twice")
        self.initialize()
        self._state = ModelState.ACTIVE

    def _destroy(self) -> None:
        if self._state is ModelState.DESTROYED:
            return
        was_active = self._state is ModelState.ACTIVE
        self._state = ModelState.DESTROYED
        if was_active:
            self.finish()
        self.destroy()

    # -- hooks ----------------------------------------------------------------

    def initialize(self) -> None:
        pass

    def update(self, current_time: float) -> None:
        pass

    def handle_event(self, time: float, payload: Any) -> None:
        pass

    def finish(self) -> None:
        pass

    def destroy(self) -> None:
        pass

    # -- helpers --------------------------------------------------------------

    def schedule_event(self, target_id: int, delivery_time: float, payload: Any = None) -> int:
        return self.executive.schedule_event(target_id, delivery_time, payload)

    def schedule_self(self, delay: float, payload: Any = None) -> int:
        """Schedule *payload* back to this model *delay* seconds from now."""
        return self.executive.schedule_event(self.id, self.clock.current_time + delay, payload)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._id}, name={self.name!r}, state={self._state.value})"


# ---------------------------------------------------------------------------
# Physical entity contract
# ---------------------------------------------------------------------------

@runtime_checkable
class PhysicalEntity(Protocol):
    """Truth state owned by the physics world.  Never mutated by the core.

    Orientation is a unit quaternion ``(w, x, y, z)``.
    """

    def truth_position(self) -> np.ndarray: ...
    def truth_orientation(self) -> np.ndarray: ...
    def truth_linear_velocity(self) -> np.ndarray: ...
    def truth_angular_velocity(self) -> np.ndarray: ...
    def truth_linear_acceleration(self) -> np.ndarray: ...
    def truth_angular_acceleration(self) -> np.ndarray: ...
    def contact_points(self) -> list[np.ndarray]: ...


def _vec(values=(0.0, 0.0, 0.0)) -> np.ndarray:
    return np.asarray(values, dtype=float)


@dataclass
class RigidBodyState:
    """Plain in-memory PhysicalEntity for tests and headless runs.

    ``integrate(dt)`` does explicit Euler on the linear terms only; a
    real physics world replaces this object entirely.
    """
    position: np.ndarray = field(default_factory=_vec)
    orientation: np.ndarray = field(default_factory=lambda: _vec((1.0, 0.0, 0.0, 0.0)))
    linear_velocity: np.ndarray = field(default_factory=_vec)
    angular_velocity: np.ndarray = field(default_factory=_vec)
    linear_acceleration: np.ndarray = field(default_factory=_vec)
    angular_acceleration: np.ndarray = field(default_factory=_vec)
    contacts: list[np.ndarray] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.position = _vec(self.position)
        self.orientation = _vec(self.orientation)
        self.linear_velocity = _vec(self.linear_velocity)
        self.angular_velocity = _vec(self.angular_velocity)
        self.linear_acceleration = _vec(self.linear_acceleration)
        self.angular_acceleration = _vec(self.angular_acceleration)

    def truth_position(self) -> np.ndarray:
        return self.position.copy()

    def truth_orientation(self) -> np.ndarray:
        return self.orientation.copy()

    def truth_linear_velocity(self) -> np.ndarray:
        return self.linear_velocity.copy()

    def truth_angular_velocity(self) -> np.ndarray:
        return self.angular_velocity.copy()

    def truth_linear_acceleration(self) -> np.ndarray:
        return self.linear_acceleration.copy()

    def truth_angular_acceleration(self) -> np.ndarray:
        return self.angular_acceleration.copy()

    def contact_points(self) -> list[np.ndarray]:
        return [c.copy() for c in self.contacts]

    def integrate(self, dt: float) -> None:
        self.linear_velocity = self.linear_velocity + self.linear_acceleration * dt
        self.position = self.position + self.linear_velocity * dt


# ---------------------------------------------------------------------------
# Composition: capabilities and behaviors
# ---------------------------------------------------------------------------

class Capability:
    """Something an Agent owns: a radio, a sensor.

    Hooks mirror the Model lifecycle and are called by the owning Agent
    in the order capabilities were added.
    """

    def __init__(self) -> None:
        self._owner: Agent | None = None

    @property
    def owner(self) -> Agent:
        if self._owner is None:
            raise LifecycleError(f"{type(self).__name__} is not attached to an agent")
        return self._owner

    @property
    def executive(self) -> Executive:
        return self.owner.executive

    def attach(self, owner: Agent) -> None:
        if self._owner is not None:
            raise LifecycleError(f"{type(self).__name__} is already attached")
        self._owner = owner

    def initialize(self) -> None:
        pass

    def update(self, current_time: float) -> None:
        pass

    def destroy(self) -> None:
        pass


class Behavior(Protocol):
    """Agent logic.  Every hook is optional in practice; Agent checks."""

    def initialize(self, agent: Agent) -> None: ...
    def update(self, agent: Agent, current_time: float) -> None: ...
    def handle_event(self, agent: Agent, time: float, payload: Any) -> None: ...


class Agent(Model):
    """A Model assembled from a body, capabilities, and a behavior."""

    def __init__(
        self,
        body: PhysicalEntity | None = None,
        capabilities: list[Capability] | None = None,
        behavior: Behavior | None = None,
        name: str | None = None,
    ) -> None:
        super().__init__(name)
        self.body = body if body is not None else RigidBodyState()
        self.behavior = behavior
        self._capabilities: list[Capability] = []
        for capability in capabilities or []:
            self.add_capability(capability)

    @property
    def capabilities(self) -> list[Capability]:
        return list(self._capabilities)

    def add_capability(self, capability: C) -> C:
        if self.state is not ModelState.UNINITIALIZED:
            raise LifecycleError("capabilities must be added before initialize")
        capability.attach(self)
        self._capabilities.append(capability)
        return capability

    def get_capability(self, kind: type[C]) -> C | None:
        for capability in self._capabilities:
            if isinstance(capability, kind):
                return capability
        return None

    def get_capabilities(self, kind: type[C]) -> list[C]:
        return [c for c in self._capabilities if isinstance(c, kind)]

    def initialize(self) -> None:
        for capability in self._capabilities:
            capability.initialize()
        hook = getattr(self.behavior, "initialize", None)
        if hook is not None:
            hook(self)

    def update(self, current_time: float) -> None:
        for capability in self._capabilities:
            capability.update(current_time)
        hook = getattr(self.behavior, "update", None)
        if hook is not None:
            hook(self, current_time)

    def handle_event(self, time: float, payload: Any) -> None:
        hook = getattr(self.behavior, "handle_event", None)
        if hook is not None:
            hook(self, time, payload)

    def destroy(self) -> None:
        for capability in reversed(self._capabilities):
            capability.destroy()
