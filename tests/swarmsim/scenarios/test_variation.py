# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Unit tests for Variation immutability and VariationSequence replay."""

from __future__ import annotations

import dataclasses

import pytest

from swarmsim.scenarios.seeds import SeedFactory
from swarmsim.scenarios.variation import Variation, VariationSequence

pytestmark = pytest.mark.unit


def _make_sequence(repetitions: int = 1) -> VariationSequence:
    combos = [
        Variation(1, {"x": "0"}),
        Variation(1, {"x": "1"}),
        Variation(2, {"x": "0"}),
    ]
    return VariationSequence(combos, repetitions)


class TestVariation:
    def test_fields(self):
        v = Variation(7, {"a": "1", "b": "2"})
        assert v.master_seed == 7
        assert v["a"] == "1"
        assert v.get("missing") is None
        assert v.get("missing", "d") == "d"
        assert "b" in v

    def test_insertion_order_preserved(self):
        v = Variation(1, {"z": "1", "a": "2", "m": "3"})
        assert list(v.parameters) == ["z", "a", "m"]

    def test_attributes_are_frozen(self):
        v = Variation(1, {"a": "1"})
        with pytest.raises(dataclasses.FrozenInstanceError):
            v.master_seed = 2

    def test_parameters_are_read_only(self):
        v = Variation(1, {"a": "1"})
        with pytest.raises(TypeError):
            v.parameters["a"] = "2"

    def test_source_dict_changes_do_not_leak(self):
        source = {"a": "1"}
        v = Variation(1, source)
        source["a"] = "changed"
        assert v["a"] == "1"

    def test_equality_and_hash(self):
        assert Variation(1, {"a": "1"}) == Variation(1, {"a": "1"})
        assert Variation(1, {"a": "1"}) != Variation(2, {"a": "1"})
        assert len({Variation(1, {"a": "1"}), Variation(1, {"a": "1"})}) == 1

    def test_to_dict(self):
        assert Variation(3, {"a": "1"}).to_dict() == {"master_seed": 3, "parameters": {"a": "1"}}


class TestVariationSequence:
    def test_logical_size(self):
        assert len(_make_sequence(repetitions=4)) == 12

    def test_restarts_until_repetitions_delivered(self):
        seq = _make_sequence(repetitions=2)
        items = list(seq)
        assert items[:3] == items[3:]
        assert len(items) == 6

    def test_iteration_is_repeatable(self):
        seq = _make_sequence(repetitions=2)
        assert list(seq) == list(seq)

    def test_indexing_wraps_combinations(self):
        seq = _make_sequence(repetitions=2)
        assert seq[4] == seq[1]
        assert seq[-1] == seq[2]

    def test_index_out_of_range(self):
        with pytest.raises(IndexError):
            _make_sequence()[3]

    def test_repetitions_must_be_positive(self):
        with pytest.raises(ValueError):
            VariationSequence([], 0)


class TestSeedFactory:
    def test_same_master_same_stream(self):
        a, b = SeedFactory(42), SeedFactory(42)
        assert [a.next_seed() for _ in range(5)] == [b.next_seed() for _ in range(5)]

    def test_different_masters_differ(self):
        assert SeedFactory(1).next_seed() != SeedFactory(2).next_seed()

    def test_seeds_are_non_negative_int64(self):
        f = SeedFactory(0)
        for _ in range(100):
            seed = f.next_seed()
            assert 0 <= seed < 2 ** 63

    def test_issued_counter(self):
        f = SeedFactory(3)
        f.rng()
        f.numpy_rng()
        assert f.issued == 2

    def test_generators_reproducible(self):
        x = SeedFactory(5).numpy_rng().standard_normal(3)
        y = SeedFactory(5).numpy_rng().standard_normal(3)
        assert list(x) == list(y)
