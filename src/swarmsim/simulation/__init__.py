# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Simulation executive — clock, events, model lifecycle, timers."""

from .aggregator import Aggregator
from .clock import SimClock
from .events import EventQueue, ScheduledEvent
from .model import (
    Agent,
    Behavior,
    Capability,
    Model,
    ModelState,
    PhysicalEntity,
    RigidBodyState,
)
from .pacing import RealTimePacer
from .timer import Timer, TimerFired
from .executive import AgentFault, Executive, ExecutiveConfig, ExecutiveState
from .sensors import Sensor

__all__ = [
    "Aggregator",
    "SimClock",
    "EventQueue",
    "ScheduledEvent",
    "Agent",
    "Behavior",
    "Capability",
    "Model",
    "ModelState",
    "PhysicalEntity",
    "RigidBodyState",
    "RealTimePacer",
    "Timer",
    "TimerFired",
    "AgentFault",
    "Executive",
    "ExecutiveConfig",
    "ExecutiveState",
    "Sensor",
]
