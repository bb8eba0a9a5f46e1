# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Sensor base capability — mounting geometry and noise injection.

Concrete sensors (range finders, compasses, accelerometers) subclass
Sensor and implement ``sense()``.  Each sensor draws its own numpy
Generator from the executive's seed factory when it is initialized, so
sensor noise is reproducible per variation and independent between
sensors.
"""

from __future__ import annotations

import numpy as np

from swarmsim.comms.geometry import as_vector, body_to_world, normalize, rotate
from swarmsim.errors import LifecycleError
from swarmsim.simulation.model import Capability


class Sensor(Capability):
    def __init__(
        self,
        offset=(0.0, 0.0, 0.0),
        pointing=(0.0, 0.0, 1.0),
        sigma: float = 0.0,
        rng: np.random.Generator | None = None,
    ) -> None:
        super().__init__()
        self.offset = as_vector(offset)
        self.pointing = normalize(as_vector(pointing))
        self.sigma = sigma
        self.rng = rng

    def initialize(self) -> None:
        if self.rng is None:
            self.rng = self.executive.seed_factory.numpy_rng()

    def position(self) -> np.ndarray:
        body = self.owner.body
        return body_to_world(body.truth_position(), body.truth_orientation(), self.offset)

    def world_pointing(self) -> np.ndarray:
        return rotate(self.owner.body.truth_orientation(), self.pointing)

    def add_noise(self, reading, sigma: float | None = None):
        """Return *reading* plus zero-mean Gaussian noise.

        Works on scalars and arrays; arrays get independent noise per
        element.  ``sigma`` defaults to the sensor's configured sigma.
        """
        sigma = self.sigma if sigma is None else sigma
        if self.rng is None:
            raise LifecycleError(
                f"{type(self).__name__} has no random stream; initialize it or pass rng"
            )
        if np.isscalar(reading):
            return float(reading) + float(self.rng.normal(0.0, sigma))
        values = np.asarray(reading, dtype=float)
        return values + self.rng.normal(0.0, sigma, size=values.shape)

    def sense(self):
        raise NotImplementedError
