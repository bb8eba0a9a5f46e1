# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""RF comms — antenna patterns, bands, radios, propagation models."""

# geometry must load before radio; simulation.sensors imports it
from .geometry import antenna_angles, rotate, rotation_between
from .antenna import AntennaPattern, DipoleAntenna, IsotropicAntenna
from .band import Band, ISM_2_4GHZ, zigbee_channel
from .radio import DefaultRadio, Radio, RadioConfig
from .propagation import (
    DefaultPropagationModel,
    PropagationConfig,
    PropagationModel,
    Reception,
    TwoRayPropagationModel,
)

__all__ = [
    "antenna_angles",
    "rotate",
    "rotation_between",
    "AntennaPattern",
    "DipoleAntenna",
    "IsotropicAntenna",
    "Band",
    "ISM_2_4GHZ",
    "zigbee_channel",
    "DefaultRadio",
    "Radio",
    "RadioConfig",
    "DefaultPropagationModel",
    "PropagationConfig",
    "PropagationModel",
    "Reception",
    "TwoRayPropagationModel",
]
