# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Frequency bands, in MHz."""

from __future__ import annotations

from dataclasses import dataclass

# Speed of light, m/s
SPEED_OF_LIGHT = 299_792_458.0


@dataclass(frozen=True)
class Band:
    center: float      # MHz
    bandwidth: float   # MHz

    def __post_init__(self) -> None:
        if self.center <= 0:
            raise ValueError(f"center frequency must be positive, got {self.center}")
        if self.bandwidth < 0:
            raise ValueError(f"bandwidth cannot be negative, got {self.bandwidth}")

    @property
    def low(self) -> float:
        return self.center - self.bandwidth / 2.0

    @property
    def high(self) -> float:
        return self.center + self.bandwidth / 2.0

    @property
    def wavelength(self) -> float:
        """Wavelength at the centre frequency, in metres."""
        return SPEED_OF_LIGHT / (self.center * 1e6)

    def in_band(self, frequency: float) -> bool:
        return self.low <= frequency <= self.high

    def contains(self, other: Band) -> bool:
        return self.low <= other.low and other.high <= self.high

    def overlaps(self, other: Band) -> bool:
        return self.low <= other.high and other.low <= self.high


# 2.4 GHz ISM band as used by 802.15.4 radios
ISM_2_4GHZ = Band(2442.5, 85.0)


def zigbee_channel(channel: int) -> Band:
    """802.15.4 channel 11-26 in the 2.4 GHz band."""
    if not 11 <= channel <= 26:
        raise ValueError(f"802.15.4 channel must be 11..26, got {channel}")
    return Band(2405.0 + 5.0 * (channel - 11), 5.0)
