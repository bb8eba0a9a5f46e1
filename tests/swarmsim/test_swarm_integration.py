# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""End-to-end: scenario document -> variations -> executives -> radio traffic."""

from __future__ import annotations

import pytest

from swarmsim.comms.propagation import PropagationConfig
from swarmsim.comms.radio import DefaultRadio, RadioConfig
from swarmsim.runner import VariationRunner
from swarmsim.scenarios.placeholders import resolve_properties
from swarmsim.scenarios.schema import ScenarioSpec
from swarmsim.simulation.executive import ExecutiveConfig
from swarmsim.simulation.model import Agent, RigidBodyState
from swarmsim.simulation.sensors import Sensor
from swarmsim.simulation.timer import Timer

pytestmark = pytest.mark.integration

SCENARIO = {
    "name": "hive-line",
    "master_seed": {"kind": "each", "values": [11, 12]},
    "repetitions": 2,
    "variables": [
        {"name": "spacing", "kind": "for", "lower": 2, "upper": 6, "step": 4},
        {"name": "power", "kind": "each", "values": ["${spacing}:1", "0.01"]},
        {"name": "jitter", "kind": "uniform-random", "num_draws": 1, "min": 0, "max": 0.5},
    ],
    "properties": {
        "radio": {"tx_power": "${power}", "snr_margin": "${margin}:3"},
        "layout": {"spacing": "${spacing}", "bees": 4},
    },
}


class _Altimeter(Sensor):
    def sense(self):
        return self.add_noise(float(self.owner.body.truth_position()[2]))


class _Chirper:
    """Chirps every 0.2 s and logs altimeter readings."""

    def initialize(self, agent):
        self.radio = agent.get_capability(DefaultRadio)
        self.altimeter = agent.get_capability(_Altimeter)
        Timer(agent, self._chirp, 0.0, 0.2)

    def _chirp(self, time):
        self.radio.transmit(b"chirp")

    def update(self, agent, current_time):
        agent.executive.aggregator.add_value("altitude", agent.name, self.altimeter.sense(), model_id=agent.id)


def _build(executive, variation):
    props = resolve_properties(SCENARIO["properties"], variation.parameters)
    radio_cfg = RadioConfig(
        tx_power=float(props["radio"]["tx_power"]),
        snr_margin=float(props["radio"]["snr_margin"]),
    )
    spacing = float(props["layout"]["spacing"])
    for i in range(props["layout"]["bees"]):
        radio = DefaultRadio(config=radio_cfg)
        agent = executive.register(Agent(
            body=RigidBodyState(position=(i * spacing, 0.0, 1.0)),
            capabilities=[radio, _Altimeter(sigma=0.05)],
            behavior=_Chirper(),
            name=f"bee{i}",
        ))
        radio.add_listener(
            lambda t, p, power, agent=agent: executive.aggregator.add_value(
                "comms", "heard", power, model_id=agent.id,
            )
        )


def _collect(executive):
    return {
        "heard": executive.aggregator.count("comms", "heard"),
        "altitude": round(executive.aggregator.total("altitude"), 12),
    }


def _run(workers=1):
    spec = ScenarioSpec.model_validate(SCENARIO)
    runner = VariationRunner(
        spec.resolve(),
        _build,
        config=ExecutiveConfig(step_size=0.1, end_time=1.0),
        propagation_config=PropagationConfig(noise_floor_mean=0.001, noise_floor_sigma=0.0002),
        collect=_collect,
        workers=workers,
    )
    return runner.run()


class TestSwarmScenario:
    def test_variation_count(self):
        results = _run()
        # 2 master seeds x 2 spacings x 2 powers, repeated twice
        assert len(results) == 16
        assert all(r.ok for r in results)

    def test_close_strong_swarm_hears_neighbours(self):
        results = _run()
        close = [r for r in results if r.variation["spacing"] == "2" and r.variation["power"] == "2"]
        # 5 chirps each, every bee within 6 m of 3 others
        assert all(r.data["heard"] == 4 * 5 * 3 for r in close)

    def test_weak_sparse_swarm_is_silent(self):
        results = _run()
        sparse = [r for r in results if r.variation["spacing"] == "6" and r.variation["power"] == "0.01"]
        assert sparse
        assert all(r.data["heard"] == 0 for r in sparse)

    def test_runs_reproduce(self):
        first = [(r.variation, r.data) for r in _run()]
        second = [(r.variation, r.data) for r in _run(workers=3)]
        assert first == second

    def test_repetitions_identical_and_seeds_distinct(self):
        results = _run()
        assert results[0].data == results[8].data
        by_seed = {r.variation.master_seed: r.data["altitude"] for r in results if r.variation["spacing"] == "2"}
        assert by_seed[11] != by_seed[12]
