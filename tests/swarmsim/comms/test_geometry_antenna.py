# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Unit tests for quaternion helpers, antenna angles, bands, and patterns."""

from __future__ import annotations

import math

import numpy as np
import pytest

from swarmsim.comms.antenna import (
    MIN_GAIN_DB,
    AntennaPattern,
    DipoleAntenna,
    IsotropicAntenna,
)
from swarmsim.comms.band import ISM_2_4GHZ, Band, zigbee_channel
from swarmsim.comms.geometry import (
    IDENTITY,
    antenna_angles,
    as_vector,
    body_to_world,
    normalize,
    quat_conjugate,
    quat_from_axis_angle,
    quat_multiply,
    rotate,
    rotation_between,
)

pytestmark = pytest.mark.unit

QUARTER_TURN_Z = quat_from_axis_angle((0, 0, 1), math.pi / 2)


# ===========================================================================
# Vectors and quaternions
# ===========================================================================

class TestQuaternions:
    def test_as_vector_shape(self):
        with pytest.raises(ValueError):
            as_vector((1.0, 2.0))

    def test_normalize_zero_vector(self):
        assert list(normalize(np.zeros(3))) == [0.0, 0.0, 0.0]

    def test_identity_rotation(self):
        np.testing.assert_allclose(rotate(IDENTITY, (1.0, 2.0, 3.0)), [1.0, 2.0, 3.0])

    def test_quarter_turn(self):
        np.testing.assert_allclose(rotate(QUARTER_TURN_Z, (1.0, 0.0, 0.0)), [0.0, 1.0, 0.0], atol=1e-12)

    def test_multiply_composes(self):
        half = quat_multiply(QUARTER_TURN_Z, QUARTER_TURN_Z)
        np.testing.assert_allclose(rotate(half, (1.0, 0.0, 0.0)), [-1.0, 0.0, 0.0], atol=1e-12)

    def test_conjugate_inverts(self):
        back = quat_multiply(QUARTER_TURN_Z, quat_conjugate(QUARTER_TURN_Z))
        np.testing.assert_allclose(back, IDENTITY, atol=1e-12)

    def test_body_to_world(self):
        world = body_to_world((1.0, 2.0, 3.0), QUARTER_TURN_Z, (1.0, 0.0, 0.0))
        np.testing.assert_allclose(world, [1.0, 3.0, 3.0], atol=1e-12)

    @pytest.mark.parametrize("v1,v2", [
        ((1, 0, 0), (0, 1, 0)),
        ((0, 0, 1), (1, 1, 0)),
        ((1, 0, 0), (1, 0, 0)),
        ((0, 0, -1), (0, 0, 1)),
        ((1, 0, 0), (-1, 0, 0)),
    ])
    def test_rotation_between(self, v1, v2):
        q = rotation_between(v1, v2)
        np.testing.assert_allclose(rotate(q, normalize(as_vector(v1))), normalize(as_vector(v2)), atol=1e-9)


# ===========================================================================
# Antenna frame angles
# ===========================================================================

class TestAntennaAngles:
    def test_boresight(self):
        az, el = antenna_angles((0, 0, 5), (0, 0, 1))
        assert az == pytest.approx(0.0)
        assert el == pytest.approx(0.0)

    def test_broadside(self):
        _, el = antenna_angles((1, 0, 0), (0, 0, 1))
        assert el == pytest.approx(math.pi / 2)

    def test_pointing_along_x(self):
        _, el = antenna_angles((3, 0, 0), (1, 0, 0))
        assert el == pytest.approx(0.0, abs=1e-9)

    def test_antiparallel_pointing(self):
        _, el = antenna_angles((0, 0, -2), (0, 0, -1))
        assert el == pytest.approx(0.0, abs=1e-9)

    @pytest.mark.parametrize("direction", [(0, 1, 0), (0, -4, 0), (1, 1, 0), (-1, 0, 0)])
    def test_every_broadside_direction_is_off_axis(self, direction):
        _, el = antenna_angles(direction, (0, 0, 1))
        assert el == pytest.approx(math.pi / 2)

    def test_behind_boresight(self):
        _, el = antenna_angles((0, 0, -1), (0, 0, 1))
        assert el == pytest.approx(math.pi)

    def test_normal_defines_zero_azimuth(self):
        az, _ = antenna_angles((1, 0, 0), (0, 0, 1), normal=(1, 0, 0))
        assert az == pytest.approx(0.0)

    def test_rolled_normal_shifts_azimuth(self):
        az, el = antenna_angles((1, 0, 0), (0, 0, 1), normal=(0, 1, 0))
        assert az == pytest.approx(-math.pi / 2)
        assert el == pytest.approx(math.pi / 2)

    def test_normal_projected_off_pointing(self):
        az, _ = antenna_angles((0, 1, 0), (0, 0, 1), normal=(0, 2, 5))
        assert az == pytest.approx(0.0, abs=1e-9)

    def test_normal_along_pointing_falls_back(self):
        assert antenna_angles((1, 2, 0.5), (0, 0, 1), normal=(0, 0, 3)) == pytest.approx(
            antenna_angles((1, 2, 0.5), (0, 0, 1))
        )


# ===========================================================================
# Bands
# ===========================================================================

class TestBand:
    def test_edges(self):
        assert ISM_2_4GHZ.low == 2400.0
        assert ISM_2_4GHZ.high == 2485.0
        assert ISM_2_4GHZ.in_band(2400.0)
        assert not ISM_2_4GHZ.in_band(2500.0)

    def test_wavelength(self):
        assert ISM_2_4GHZ.wavelength == pytest.approx(0.12274, rel=1e-4)

    def test_zigbee_channels(self):
        ch11 = zigbee_channel(11)
        assert ch11.center == 2405.0
        assert ISM_2_4GHZ.contains(ch11)
        assert not ch11.overlaps(zigbee_channel(13))
        assert ch11.overlaps(Band(2407.0, 1.0))

    @pytest.mark.parametrize("channel", [10, 27])
    def test_zigbee_channel_range(self, channel):
        with pytest.raises(ValueError):
            zigbee_channel(channel)

    def test_validation(self):
        with pytest.raises(ValueError):
            Band(0.0, 1.0)
        with pytest.raises(ValueError):
            Band(100.0, -1.0)


# ===========================================================================
# Patterns
# ===========================================================================

class TestPatterns:
    def test_isotropic(self):
        antenna = IsotropicAntenna(3.0)
        assert isinstance(antenna, AntennaPattern)
        assert antenna.gain(1.0, -0.5) == 3.0

    def test_dipole_peak_broadside(self):
        assert DipoleAntenna().gain(0.0, math.pi / 2) == pytest.approx(DipoleAntenna.PEAK_GAIN_DB)

    def test_dipole_null_on_axis(self):
        assert DipoleAntenna().gain(0.0, 0.0) == MIN_GAIN_DB

    def test_dipole_symmetric(self):
        d = DipoleAntenna()
        assert d.gain(0.0, 0.7) == pytest.approx(d.gain(0.0, -0.7))
        assert MIN_GAIN_DB < d.gain(0.0, 0.7) < DipoleAntenna.PEAK_GAIN_DB

    def test_dipole_broadside_gain_same_on_x_and_y(self):
        d = DipoleAntenna()
        on_x = d.gain(*antenna_angles((5, 0, 0), (0, 0, 1), (1, 0, 0)))
        on_y = d.gain(*antenna_angles((0, 5, 0), (0, 0, 1), (1, 0, 0)))
        assert on_y == pytest.approx(on_x)
        assert on_y == pytest.approx(DipoleAntenna.PEAK_GAIN_DB)
