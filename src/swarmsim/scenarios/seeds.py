# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""SeedFactory — deterministic seed stream derived from one master seed.

Every consumer that needs randomness asks the factory for a seed (or a
ready-made generator) in a fixed order.  Same master seed plus same
request order means the same seeds on every platform, because the
underlying stream is Python's Mersenne Twister.
"""

from __future__ import annotations

import random

import numpy as np

# Seeds are non-negative int64 so both random.Random and numpy accept them
SEED_BITS = 63


class SeedFactory:
    def __init__(self, master_seed: int) -> None:
        self._master_seed = int(master_seed)
        self._stream = random.Random(self._master_seed)
        self._issued = 0

    @property
    def master_seed(self) -> int:
        return self._master_seed

    @property
    def issued(self) -> int:
        """Number of seeds handed out so far."""
        return self._issued

    def next_seed(self) -> int:
        self._issued += 1
        return self._stream.getrandbits(SEED_BITS)

    def rng(self) -> random.Random:
        return random.Random(self.next_seed())

    def numpy_rng(self) -> np.random.Generator:
        return np.random.default_rng(self.next_seed())
