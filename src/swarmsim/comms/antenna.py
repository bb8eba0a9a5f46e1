# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Antenna patterns: (azimuth, elevation) in radians -> gain in dB.

Angles are in the antenna's own frame: the pointing vector is +Z, the
normal +X, and elevation is measured off +Z (see
``geometry.antenna_angles``).
"""

from __future__ import annotations

import math
from typing import Protocol, runtime_checkable

# Floor for pattern nulls so gains stay finite
MIN_GAIN_DB = -40.0


@runtime_checkable
class AntennaPattern(Protocol):
    def gain(self, azimuth: float, elevation: float) -> float: ...


class IsotropicAntenna:
    """Same gain in every direction."""

    def __init__(self, gain_db: float = 0.0) -> None:
        self.gain_db = gain_db

    def gain(self, azimuth: float, elevation: float) -> float:
        return self.gain_db


class DipoleAntenna:
    """Half-wave dipole along the pointing axis.

    Power pattern ``(cos(pi/2 cos t) / sin t)^2`` where ``t`` is the angle
    off the dipole axis, normalized to a 2.15 dBi peak broadside.
    """

    PEAK_GAIN_DB = 2.15

    def gain(self, azimuth: float, elevation: float) -> float:
        # Elevation is already the angle off the pointing axis
        theta = abs(elevation)
        sin_t = math.sin(theta)
        if sin_t < 1e-9:
            return MIN_GAIN_DB
        pattern = (math.cos(math.pi / 2.0 * math.cos(theta)) / sin_t) ** 2
        if pattern <= 0:
            return MIN_GAIN_DB
        return max(MIN_GAIN_DB, self.PEAK_GAIN_DB + 10.0 * math.log10(pattern))
