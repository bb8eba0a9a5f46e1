# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""RF propagation — who hears a transmission, and how loudly.

Architecture
------------
One PropagationModel per executive run.  Radios register at agent
initialize and unregister at teardown; the set never changes while a
``transmit`` call is in progress.

transmit(tx, payload, tx_power), for every registered radio except tx:

  1. d = rx.position() - tx.position(); skip if |d|^2 > range_threshold^2.
     Receivers beyond the threshold get exactly zero power.  This is a
     modelling simplification, not an error path.
  2. Skip if both radios declare a band and rx's band does not contain
     tx's centre frequency.
  3. If |d| > 0, express d in tx's antenna frame (pointing +Z, normal
     +X), take azimuth and elevation off boresight, and scale the nominal
     tx_power by 10^(gain/10).  Each receiver starts again from the
     nominal power.
  4. rx_power = attenuate(...); the default law is p / (|d|^2 + 1), the
     +1 keeping zero range finite.
  5. rx.receive(current_time, payload, rx_power), synchronously.

A misbehaving antenna pattern that returns NaN yields NaN power; the
receiving radio decides what that means.

``noise_floor()`` draws a fresh Gaussian sample per call from the
model's own numpy Generator.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np
from loguru import logger

from swarmsim.comms.geometry import antenna_angles

if TYPE_CHECKING:
    from swarmsim.comms.radio import Radio
    from swarmsim.config import Settings
    from swarmsim.simulation.clock import SimClock


@dataclass
class PropagationConfig:
    range_threshold: float = 10.0       # m
    noise_floor_mean: float = 0.01      # mW
    noise_floor_sigma: float = 0.005    # mW
    filter_bands: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> PropagationConfig:
        return cls(
            range_threshold=settings.range_threshold,
            noise_floor_mean=settings.noise_floor_mean,
            noise_floor_sigma=settings.noise_floor_sigma,
        )


@dataclass
class Reception:
    """One delivered transmission, as recorded in ``last_receptions``."""
    receiver: Radio
    rx_power: float
    distance: float


class PropagationModel:
    """Range culling, band filtering, and antenna gain; subclasses attenuate."""

    def __init__(
        self,
        clock: SimClock,
        config: PropagationConfig | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self._clock = clock
        self.config = config or PropagationConfig()
        self._rng = rng if rng is not None else np.random.default_rng(0)
        self._radios: list[Radio] = []
        self._range_sq = self.config.range_threshold ** 2
        self.transmissions = 0
        self.last_receptions: list[Reception] = []

    @property
    def radios(self) -> list[Radio]:
        return list(self._radios)

    def register(self, radio: Radio) -> None:
        if radio not in self._radios:
            self._radios.append(radio)

    def unregister(self, radio: Radio) -> None:
        if radio in self._radios:
            self._radios.remove(radio)

    def shutdown(self) -> None:
        if self._radios:
            logger.debug("Propagation model releasing {} radio(s)", len(self._radios))
        self._radios.clear()
        self.last_receptions = []

    def noise_floor(self) -> float:
        return float(
            self.config.noise_floor_mean
            + self._rng.standard_normal() * self.config.noise_floor_sigma
        )

    def _in_band(self, tx: Radio, rx: Radio) -> bool:
        tx_band = getattr(tx, "band", None)
        rx_band = getattr(rx, "band", None)
        if not self.config.filter_bands or tx_band is None or rx_band is None:
            return True
        return rx_band.in_band(tx_band.center)

    def _directional_power(self, tx: Radio, diff: np.ndarray, tx_power: float) -> float:
        azimuth, elevation = antenna_angles(diff, tx.pointing(), tx.normal())
        gain = tx.antenna.gain(azimuth, elevation)
        return tx_power * math.pow(10.0, gain / 10.0)

    def attenuate(self, power: float, dist_sq: float, tx: Radio, rx: Radio,
                  tx_pos: np.ndarray, rx_pos: np.ndarray) -> float:
        raise NotImplementedError

    def transmit(self, tx: Radio, payload: Any, tx_power: float) -> list[Reception]:
        """Deliver *payload* from *tx* to every reachable radio.

        Returns the receptions made, in registration order.
        """
        self.transmissions += 1
        now = self._clock.current_time
        tx_pos = tx.position()
        receptions: list[Reception] = []

        for rx in list(self._radios):
            if rx is tx:
                continue
            rx_pos = rx.position()
            diff = rx_pos - tx_pos
            dist_sq = float(np.dot(diff, diff))
            if dist_sq > self._range_sq:
                continue
            if not self._in_band(tx, rx):
                continue

            power = tx_power
            if dist_sq > 0:
                power = self._directional_power(tx, diff, tx_power)
            rx_power = self.attenuate(power, dist_sq, tx, rx, tx_pos, rx_pos)

            rx.receive(now, payload, rx_power)
            receptions.append(Reception(rx, rx_power, math.sqrt(dist_sq)))

        self.last_receptions = receptions
        return receptions


class DefaultPropagationModel(PropagationModel):
    """Inverse-square law with a +1 smoothing term."""

    def attenuate(self, power, dist_sq, tx, rx, tx_pos, rx_pos):
        return power / (dist_sq + 1.0)


class TwoRayPropagationModel(PropagationModel):
    """Two-ray ground reflection.

    Antenna heights are the z coordinates of the radios, floored at
    ``min_height``.  Below the crossover distance ``4*pi*ht*hr/lambda``
    the free-space law ``(lambda / (4*pi*d))^2`` applies; beyond it
    ``(ht*hr)^2 / d^4``.  Distances under MIN_DISTANCE use
    ``1 / (d + 1)^2``.
    """

    MIN_DISTANCE = 0.01

    def __init__(self, clock, config=None, rng=None, min_height: float = 0.01) -> None:
        super().__init__(clock, config, rng)
        self.min_height = min_height

    def crossover_distance(self, ht: float, hr: float, wavelength: float) -> float:
        return 4.0 * math.pi * ht * hr / wavelength

    def attenuate(self, power, dist_sq, tx, rx, tx_pos, rx_pos):
        distance = math.sqrt(dist_sq)
        if distance < self.MIN_DISTANCE:
            return power / (distance + 1.0) ** 2
        ht = max(float(tx_pos[2]), self.min_height)
        hr = max(float(rx_pos[2]), self.min_height)
        wavelength = tx.band.wavelength
        if distance <= self.crossover_distance(ht, hr, wavelength):
            return power * (wavelength / (4.0 * math.pi * distance)) ** 2
        return power * (ht * hr) ** 2 / distance ** 4
