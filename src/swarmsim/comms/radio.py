# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Radios — transmit/receive endpoints mounted on agents.

A Radio is an Agent capability.  Its position and pointing are derived
from the owner's body on every query and never cached, so radios follow
their agents without any bookkeeping.  The radio registers with the
executive's propagation model when its agent initializes and leaves it
when the agent is destroyed.

Power is linear, in milliwatts.  Gains and SNR are in dB.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable

import numpy as np
from loguru import logger

from swarmsim.comms.antenna import AntennaPattern, IsotropicAntenna
from swarmsim.comms.band import ISM_2_4GHZ, Band
from swarmsim.comms.geometry import as_vector, body_to_world, normalize, rotate
from swarmsim.errors import LifecycleError
from swarmsim.simulation.model import Capability
from swarmsim.simulation.timer import Timer

MessageListener = Callable[[float, Any, float], None]

# Idle energy is sampled on this period, seconds
IDLE_POLL_PERIOD = 0.1


@dataclass
class RadioConfig:
    """Mounting geometry and electrical characteristics.

    Energy figures are current draw in mA; accumulated energy is mA*s.
    """
    offset: tuple[float, float, float] = (0.0, 0.0, 0.0)
    pointing: tuple[float, float, float] = (0.0, 0.0, 1.0)
    normal: tuple[float, float, float] = (1.0, 0.0, 0.0)
    band: Band = field(default_factory=lambda: ISM_2_4GHZ)
    tx_power: float = 1.0          # mW
    snr_margin: float = 7.0        # dB
    bandwidth_kbps: float = 250.0
    tx_energy: float = 12.0
    rx_energy: float = 15.0
    idle_energy: float = 0.5


def payload_size(payload: Any) -> int:
    """Bytes on the air for *payload*; unknown objects count as zero."""
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return len(payload)
    if isinstance(payload, str):
        return len(payload.encode("utf-8"))
    return 0


class Radio(Capability):
    """Base radio: geometry, registration, and listener fan-out."""

    def __init__(
        self,
        antenna: AntennaPattern | None = None,
        config: RadioConfig | None = None,
    ) -> None:
        super().__init__()
        self.config = config or RadioConfig()
        self.antenna = antenna or IsotropicAntenna()
        self._offset = as_vector(self.config.offset)
        self._pointing = normalize(as_vector(self.config.pointing))
        self._normal = normalize(as_vector(self.config.normal))
        self._listeners: list[MessageListener] = []
        self._registered = False

    @property
    def band(self) -> Band:
        return self.config.band

    @property
    def registered(self) -> bool:
        return self._registered

    # -- geometry -------------------------------------------------------------

    def position(self) -> np.ndarray:
        body = self.owner.body
        return body_to_world(body.truth_position(), body.truth_orientation(), self._offset)

    def pointing(self) -> np.ndarray:
        return rotate(self.owner.body.truth_orientation(), self._pointing)

    def normal(self) -> np.ndarray:
        return rotate(self.owner.body.truth_orientation(), self._normal)

    # -- lifecycle ------------------------------------------------------------

    @property
    def propagation(self):
        model = self.executive.propagation
        if model is None:
            raise LifecycleError("no propagation model is attached to the executive")
        return model

    def initialize(self) -> None:
        if self.executive.propagation is None:
            logger.warning("Radio on {} has no propagation model; comms disabled", self.owner.name)
            return
        self.executive.propagation.register(self)
        self._registered = True

    def destroy(self) -> None:
        if self._registered:
            self.executive.propagation.unregister(self)
            self._registered = False

    # -- listeners ------------------------------------------------------------

    def add_listener(self, listener: MessageListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: MessageListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify_listeners(self, time: float, payload: Any, rx_power: float) -> None:
        for listener in list(self._listeners):
            listener(time, payload, rx_power)

    # -- traffic --------------------------------------------------------------

    def transmit(self, payload: Any, tx_power: float | None = None) -> None:
        power = self.config.tx_power if tx_power is None else tx_power
        self.propagation.transmit(self, payload, power)

    def receive(self, time: float, payload: Any, rx_power: float) -> None:
        """Called by the propagation model for every transmission in range."""
        self.notify_listeners(time, payload, rx_power)


class DefaultRadio(Radio):
    """Radio with an SNR capture threshold and energy accounting.

    A reception is delivered to listeners only when its power is a real
    positive number and ``10*log10(rx_power / noise_floor) >= snr_margin``
    against a fresh noise-floor sample.  A non-positive noise sample
    counts as no noise.
    """

    def __init__(self, antenna=None, config=None) -> None:
        super().__init__(antenna, config)
        self._busy_time = 0.0
        self._idle_timer: Timer | None = None
        self.dropped = 0

    @property
    def bytes_per_second(self) -> float:
        return self.config.bandwidth_kbps * 125.0

    def airtime(self, payload: Any) -> float:
        return payload_size(payload) / self.bytes_per_second

    def initialize(self) -> None:
        super().initialize()
        self._idle_timer = Timer(self.owner, self._account_idle, 0.0, IDLE_POLL_PERIOD)

    def destroy(self) -> None:
        if self._idle_timer is not None:
            self._idle_timer.cancel()
            self._idle_timer = None
        super().destroy()

    def _energy(self, key: str, value: float) -> None:
        self.executive.aggregator.add_value("energy", key, value, model_id=self.owner.id)

    def _account_idle(self, time: float) -> None:
        idle = IDLE_POLL_PERIOD - self._busy_time
        if idle < 0:
            self._busy_time -= IDLE_POLL_PERIOD
            return
        self._busy_time = 0.0
        self._energy("radio-idle", self.config.idle_energy * idle)

    def transmit(self, payload: Any, tx_power: float | None = None) -> None:
        airtime = self.airtime(payload)
        self._busy_time += airtime
        self._energy("radio-tx", airtime * self.config.tx_energy)
        super().transmit(payload, tx_power)

    def receive(self, time: float, payload: Any, rx_power: float) -> None:
        airtime = self.airtime(payload)
        self._busy_time += airtime
        self._energy("radio-rx", airtime * self.config.rx_energy)

        if not isinstance(rx_power, (int, float)) or math.isnan(rx_power) or rx_power <= 0:
            self.dropped += 1
            return
        noise = self.propagation.noise_floor()
        if noise > 0:
            snr = 10.0 * math.log10(rx_power / noise)
            if snr < self.config.snr_margin:
                self.dropped += 1
                return
        self.notify_listeners(time, payload, rx_power)
