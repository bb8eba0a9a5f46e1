# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Unit tests for Radio and DefaultRadio — geometry, SNR gate, energy."""

from __future__ import annotations

import math

import numpy as np
import pytest

from swarmsim.comms.geometry import quat_from_axis_angle
from swarmsim.comms.propagation import DefaultPropagationModel, PropagationConfig
from swarmsim.comms.radio import (
    IDLE_POLL_PERIOD,
    DefaultRadio,
    Radio,
    RadioConfig,
    payload_size,
)
from swarmsim.errors import LifecycleError
from swarmsim.simulation.executive import Executive, ExecutiveConfig
from swarmsim.simulation.model import Agent, RigidBodyState

pytestmark = pytest.mark.unit


class _NaNAntenna:
    def gain(self, azimuth, elevation):
        return float("nan")


def _make_pair(distance, *, noise_mean=0.01, tx_antenna=None, config=None):
    """Two DefaultRadios *distance* metres apart with a noiseless floor."""
    ex = Executive(ExecutiveConfig(step_size=0.1))
    ex.propagation = DefaultPropagationModel(
        ex.clock, PropagationConfig(noise_floor_mean=noise_mean, noise_floor_sigma=0.0),
    )
    tx = DefaultRadio(tx_antenna, config)
    rx = DefaultRadio(None, config)
    ex.register(Agent(body=RigidBodyState(position=(0, 0, 0)), capabilities=[tx], name="tx"))
    ex.register(Agent(body=RigidBodyState(position=(distance, 0, 0)), capabilities=[rx], name="rx"))
    heard: list = []
    rx.add_listener(lambda t, p, power: heard.append(p))
    ex.start()
    return ex, tx, rx, heard


# ===========================================================================
# Base radio
# ===========================================================================

class TestRadio:
    def test_position_follows_body(self):
        radio = Radio(config=RadioConfig(offset=(1.0, 0.0, 0.0), pointing=(1.0, 0.0, 0.0)))
        body = RigidBodyState(position=(0.0, 0.0, 2.0), orientation=quat_from_axis_angle((0, 0, 1), math.pi / 2))
        Agent(body=body, capabilities=[radio])
        np.testing.assert_allclose(radio.position(), [0.0, 1.0, 2.0], atol=1e-12)
        np.testing.assert_allclose(radio.pointing(), [0.0, 1.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(radio.normal(), [0.0, 1.0, 0.0], atol=1e-12)

        body.position = np.array([5.0, 0.0, 0.0])
        np.testing.assert_allclose(radio.position(), [5.0, 1.0, 0.0], atol=1e-12)

    def test_listeners(self):
        radio = Radio()
        got = []

        def listener(t, p, power):
            got.append((t, p, power))

        radio.add_listener(listener)
        radio.receive(1.5, "msg", 0.2)
        radio.remove_listener(listener)
        radio.remove_listener(listener)
        radio.receive(2.0, "again", 0.2)
        assert got == [(1.5, "msg", 0.2)]

    def test_without_propagation_model(self, log_messages):
        ex = Executive()
        radio = Radio()
        ex.register(Agent(capabilities=[radio]))
        ex.start()
        assert not radio.registered
        assert any(level == "WARNING" and "no propagation model" in msg for level, msg in log_messages)
        with pytest.raises(LifecycleError):
            radio.transmit("lost")

    def test_payload_size(self):
        assert payload_size(b"abc") == 3
        assert payload_size("héllo") == 6
        assert payload_size({"x": 1}) == 0


# ===========================================================================
# DefaultRadio SNR gate
# ===========================================================================

class TestDefaultRadioReception:
    def test_strong_signal_delivered(self):
        _, tx, rx, heard = _make_pair(1.0)
        tx.transmit("hi")
        assert heard == ["hi"]
        assert rx.dropped == 0

    def test_weak_signal_dropped(self):
        # 1 / 82 mW over a 0.01 mW floor is under the 7 dB margin
        _, tx, rx, heard = _make_pair(9.0)
        tx.transmit("hi")
        assert heard == []
        assert rx.dropped == 1

    def test_margin_is_configurable(self):
        _, tx, _, heard = _make_pair(9.0, config=RadioConfig(snr_margin=0.5))
        tx.transmit("hi")
        assert heard == ["hi"]

    def test_nan_power_dropped(self):
        _, tx, rx, heard = _make_pair(1.0, tx_antenna=_NaNAntenna())
        tx.transmit("hi")
        assert heard == []
        assert rx.dropped == 1

    def test_zero_power_dropped(self):
        _, tx, rx, heard = _make_pair(1.0)
        tx.transmit("hi", tx_power=0.0)
        assert heard == []
        assert rx.dropped == 1

    def test_non_positive_noise_means_no_noise(self):
        _, tx, _, heard = _make_pair(9.0, noise_mean=0.0)
        tx.transmit("hi", tx_power=1e-9)
        assert heard == ["hi"]


# ===========================================================================
# Energy accounting
# ===========================================================================

class TestEnergy:
    def test_tx_and_rx_energy(self):
        ex, tx, rx, _ = _make_pair(1.0)
        tx.transmit(b"hello")
        airtime = 5 / 31250.0
        assert tx.airtime(b"hello") == pytest.approx(airtime)
        assert ex.aggregator.total("energy", "radio-tx", model_id=tx.owner.id) == pytest.approx(airtime * 12.0)
        assert ex.aggregator.total("energy", "radio-rx", model_id=rx.owner.id) == pytest.approx(airtime * 15.0)

    def test_rx_energy_spent_on_dropped_frames(self):
        ex, tx, rx, _ = _make_pair(9.0)
        tx.transmit(b"hello")
        assert rx.dropped == 1
        assert ex.aggregator.total("energy", "radio-rx") > 0

    def test_idle_energy_sampled_each_period(self):
        ex, tx, _, _ = _make_pair(1.0)
        for _ in range(3):
            ex.step()
        idle = ex.aggregator.total("energy", "radio-idle", model_id=tx.owner.id)
        assert idle == pytest.approx(3 * IDLE_POLL_PERIOD * 0.5)

    def test_idle_energy_accrues_every_step_over_long_runs(self):
        ex, tx, _, _ = _make_pair(1.0)
        for _ in range(30):
            ex.step()
        idle = ex.aggregator.total("energy", "radio-idle", model_id=tx.owner.id)
        assert idle == pytest.approx(30 * IDLE_POLL_PERIOD * 0.5)

    def test_busy_time_reduces_idle(self):
        ex, tx, _, _ = _make_pair(1.0)
        tx.transmit(b"x" * 3125)  # 0.1 s of airtime
        ex.step()
        assert ex.aggregator.total("energy", "radio-idle", model_id=tx.owner.id) == pytest.approx(0.0)

    def test_teardown_cancels_idle_timer(self):
        ex, tx, _, _ = _make_pair(1.0)
        ex.stop()
        assert tx._idle_timer is None
        assert not tx.registered
