# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Scenario schema — Pydantic models for scenario documents.

A scenario document is JSON:

    {
      "name": "range-sweep",
      "master_seed": {"kind": "for", "lower": 1, "upper": 3, "step": 1},
      "repetitions": 2,
      "variables": [
        {"name": "spacing", "kind": "for", "lower": 0, "upper": 2, "step": 1},
        {"name": "power", "kind": "each", "values": ["${spacing}", "5"]}
      ],
      "properties": {"radio": {"tx_power": "${power}:1.0"}}
    }

Models only check structure.  Value-level problems (bad literals, zero
step, cycles) surface when the scenario is resolved.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Union

from pydantic import BaseModel, Field, model_validator

from swarmsim.scenarios.resolver import ScenarioResolver
from swarmsim.scenarios.variables import (
    ConstantVariable,
    EachVariable,
    ForVariable,
    LoopingVariable,
    NormalRandomVariable,
    SeedSource,
    UniformRandomVariable,
)
from swarmsim.scenarios.variation import VariationSequence

Scalar = Union[str, int, float]


class VariableKind(str, Enum):
    CONSTANT = "constant"
    FOR = "for"
    EACH = "each"
    UNIFORM_RANDOM = "uniform-random"
    NORMAL_RANDOM = "normal-random"


_REQUIRED: dict[VariableKind, tuple[str, ...]] = {
    VariableKind.CONSTANT: ("value",),
    VariableKind.FOR: ("lower", "upper", "step"),
    VariableKind.EACH: ("values",),
    VariableKind.UNIFORM_RANDOM: ("num_draws",),
    VariableKind.NORMAL_RANDOM: ("num_draws", "mean", "std_dev"),
}


class VariableDefinition(BaseModel):
    """One looping variable as written in a scenario document."""
    name: str = ""
    kind: VariableKind
    value: Scalar | None = None
    lower: Scalar | None = None
    upper: Scalar | None = None
    step: Scalar | None = None
    values: list[Scalar] = Field(default_factory=list)
    first_draw: Scalar = 1
    num_draws: Scalar | None = None
    min: Scalar | None = None
    max: Scalar | None = None
    mean: Scalar | None = None
    std_dev: Scalar | None = None
    seed: Scalar | None = None
    seed_source: SeedSource | None = None

    @model_validator(mode="after")
    def _check_required(self) -> "VariableDefinition":
        missing = [f for f in _REQUIRED[self.kind] if getattr(self, f) in (None, [])]
        if missing:
            raise ValueError(
                f"{self.kind.value} variable '{self.name}' is missing: {', '.join(missing)}"
            )
        if self.seed_source is SeedSource.USER and self.seed is None:
            raise ValueError(f"variable '{self.name}' uses seed_source 'user' without a seed")
        return self

    def build(self, name: str | None = None) -> LoopingVariable:
        name = name or self.name
        if self.kind is VariableKind.CONSTANT:
            return ConstantVariable(name, self.value)
        if self.kind is VariableKind.FOR:
            return ForVariable(name, self.lower, self.upper, self.step)
        if self.kind is VariableKind.EACH:
            return EachVariable(
                name, self.values, first_draw=self.first_draw,
                num_draws=-1 if self.num_draws is None else self.num_draws,
            )
        random_kwargs = dict(
            first_draw=self.first_draw, seed=self.seed, seed_source=self.seed_source,
        )
        if self.kind is VariableKind.UNIFORM_RANDOM:
            return UniformRandomVariable(
                name, self.num_draws,
                min=0 if self.min is None else self.min,
                max=1 if self.max is None else self.max,
                **random_kwargs,
            )
        return NormalRandomVariable(
            name, self.num_draws, self.mean, self.std_dev,
            min=self.min, max=self.max, **random_kwargs,
        )


def _default_master_seed() -> VariableDefinition:
    return VariableDefinition(kind=VariableKind.CONSTANT, value=1)


class ScenarioSpec(BaseModel):
    """A complete scenario: variables, master seed, repetitions, properties."""
    name: str = "scenario"
    description: str = ""
    master_seed: VariableDefinition = Field(default_factory=_default_master_seed)
    variables: list[VariableDefinition] = Field(default_factory=list)
    repetitions: int = Field(default=1, ge=1)
    properties: dict[str, Any] = Field(default_factory=dict)

    def build_variables(self) -> list[LoopingVariable]:
        return [definition.build() for definition in self.variables]

    def resolver(self, repetitions: int | None = None) -> ScenarioResolver:
        return ScenarioResolver(
            self.build_variables(),
            master_seed=self.master_seed.build("master-seed"),
            repetitions=self.repetitions if repetitions is None else repetitions,
        )

    def resolve(self, repetitions: int | None = None) -> VariationSequence:
        return self.resolver(repetitions).resolve()

    # -- persistence --------------------------------------------------------

    @classmethod
    def load(cls, path: str | Path) -> "ScenarioSpec":
        return cls.model_validate_json(Path(path).read_text())

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2, exclude_defaults=True))
        return path
