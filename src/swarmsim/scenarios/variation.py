# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Variation and VariationSequence.

A Variation is one concrete assignment of scenario parameters plus the
master seed its run derives every random stream from.  Variations are
frozen: the dataclass rejects attribute assignment and ``parameters`` is
a read-only mapping view.

A VariationSequence holds the distinct combinations once and replays
them ``repetitions`` times.  It can be iterated any number of times and
always yields the same order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Sequence


@dataclass(frozen=True)
class Variation:
    master_seed: int
    parameters: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Copy then wrap so later changes to the caller's dict cannot leak in
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.parameters.get(name, default)

    def __getitem__(self, name: str) -> str:
        return self.parameters[name]

    def __contains__(self, name: object) -> bool:
        return name in self.parameters

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Variation):
            return NotImplemented
        return (
            self.master_seed == other.master_seed
            and list(self.parameters.items()) == list(other.parameters.items())
        )

    def __hash__(self) -> int:
        return hash((self.master_seed, tuple(self.parameters.items())))

    def to_dict(self) -> dict[str, Any]:
        return {"master_seed": self.master_seed, "parameters": dict(self.parameters)}


class VariationSequence:
    """Ordered, restartable sequence of variations.

    ``len()`` is the logical size, combinations times repetitions.  Index
    ``i`` maps to combination ``i % len(combinations)``.
    """

    def __init__(self, combinations: Sequence[Variation], repetitions: int = 1) -> None:
        if repetitions < 1:
            raise ValueError(f"repetitions must be >= 1, got {repetitions}")
        self._combinations: tuple[Variation, ...] = tuple(combinations)
        self._repetitions = repetitions

    @property
    def combinations(self) -> tuple[Variation, ...]:
        return self._combinations

    @property
    def repetitions(self) -> int:
        return self._repetitions

    def __len__(self) -> int:
        return len(self._combinations) * self._repetitions

    def __getitem__(self, index: int) -> Variation:
        size = len(self)
        if index < 0:
            index += size
        if not 0 <= index < size:
            raise IndexError(f"variation index {index} out of range")
        return self._combinations[index % len(self._combinations)]

    def __iter__(self) -> Iterator[Variation]:
        for _ in range(self._repetitions):
            yield from self._combinations

    def __repr__(self) -> str:
        return (
            f"VariationSequence(combinations={len(self._combinations)}, "
            f"repetitions={self._repetitions})"
        )
