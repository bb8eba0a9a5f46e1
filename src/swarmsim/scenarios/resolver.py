# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""ScenarioResolver — expands looping variables into a VariationSequence.

Architecture
------------
Resolution happens once, before any executive is built:

  1. Validate names.  Duplicates, malformed names, and references to
     undeclared variables without a placeholder default are rejected.

  2. Order variables with Kahn's algorithm.  Variables with no declared
     dependencies come first, in declaration order.  Each following level
     holds the variables whose last dependency was just placed, again in
     declaration order.  Anything left over sits on a cycle and is
     reported by name.

  3. For each master seed value (the master seed is itself a looping
     variable), build a SeedFactory and draw one stream seed per
     externally seeded random variable, in declaration order.  Then run
     the ordered Cartesian expansion: single-valued variables extend the
     existing maps in place, multi-valued ones fork each map once per
     value.

  4. Concatenate the per-seed combination sets in master-seed order.

Everything is a pure function of the definitions, so resolving the same
scenario twice yields identical sequences.
"""

from __future__ import annotations

import math
from typing import Sequence

from loguru import logger

from swarmsim.errors import ConfigurationError, InvalidScenarioError
from swarmsim.scenarios.placeholders import is_valid_name
from swarmsim.scenarios.seeds import SeedFactory
from swarmsim.scenarios.variables import ConstantVariable, LoopingVariable
from swarmsim.scenarios.variation import Variation, VariationSequence

DEFAULT_MASTER_SEED = 1

_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1


def order_variables(variables: Sequence[LoopingVariable]) -> list[LoopingVariable]:
    """Return *variables* in dependency order.

    Only dependencies on declared variables create edges; references that
    fall back to a placeholder default are not ordering constraints.
    """
    position = {var.name: i for i, var in enumerate(variables)}
    declared = {var.name: var for var in variables}

    indegree: dict[str, int] = {}
    dependents: dict[str, list[str]] = {name: [] for name in declared}
    for var in variables:
        deps = [d for d in var.dependencies if d in declared]
        indegree[var.name] = len(deps)
        for dep in deps:
            dependents[dep].append(var.name)

    ordered: list[str] = []
    frontier = [var.name for var in variables if indegree[var.name] == 0]
    while frontier:
        ordered.extend(frontier)
        released: list[str] = []
        for name in frontier:
            for dependent in dependents[name]:
                indegree[dependent] -= 1
                if indegree[dependent] == 0:
                    released.append(dependent)
        frontier = sorted(released, key=position.__getitem__)

    if len(ordered) != len(variables):
        placed = set(ordered)
        stuck = [var.name for var in variables if var.name not in placed]
        raise InvalidScenarioError(
            "Cannot resolve variable dependency: cyclic or unresolvable "
            "dependencies among " + ", ".join(stuck)
        )
    return [declared[name] for name in ordered]


class ScenarioResolver:
    """Resolves one scenario's variables into variations.

    Validation and ordering run at construction so a broken scenario
    fails before any work is done.
    """

    def __init__(
        self,
        variables: Sequence[LoopingVariable],
        master_seed: LoopingVariable | None = None,
        repetitions: int = 1,
    ) -> None:
        if repetitions < 1:
            raise InvalidScenarioError(f"repetitions must be >= 1, got {repetitions}")
        self._variables = list(variables)
        self._master_seed = master_seed or ConstantVariable("master-seed", DEFAULT_MASTER_SEED)
        self._repetitions = repetitions
        self._validate()
        self._ordered = order_variables(self._variables)
        logger.debug(
            "Variable resolution order: {}", [v.name for v in self._ordered]
        )

    @property
    def ordered_names(self) -> list[str]:
        return [var.name for var in self._ordered]

    @property
    def repetitions(self) -> int:
        return self._repetitions

    # -- validation ---------------------------------------------------------

    def _validate(self) -> None:
        seen: set[str] = set()
        for var in self._variables:
            if not var.name or not is_valid_name(var.name):
                raise InvalidScenarioError(f"invalid variable name '{var.name}'")
            if var.name in seen:
                raise InvalidScenarioError(
                    f"Variable names must be unique: '{var.name}' is declared more than once"
                )
            seen.add(var.name)

        for var in self._variables:
            if var.name in var.dependencies:
                raise InvalidScenarioError(
                    f"Cannot resolve variable dependency: '{var.name}' references itself"
                )
            for ref, default in var.references.items():
                if ref not in seen and default is None:
                    raise InvalidScenarioError(
                        f"variable '{var.name}' depends on undeclared variable '{ref}'"
                    )

        unbound = [ref for ref, default in self._master_seed.references.items() if default is None]
        if unbound:
            raise InvalidScenarioError(
                "master seed cannot reference scenario variables: " + ", ".join(unbound)
            )
        if self._master_seed.externally_seeded:
            raise InvalidScenarioError("master seed cannot be seeded from the master stream")

    # -- expansion ----------------------------------------------------------

    def master_seeds(self) -> list[int]:
        seeds = []
        for value in self._master_seed.values({}):
            try:
                seed = math.floor(float(value))
            except (ValueError, OverflowError):
                raise ConfigurationError(f"master seed value '{value}' is not a number") from None
            if not _INT64_MIN <= seed <= _INT64_MAX:
                raise ConfigurationError(f"master seed value '{value}' does not fit in 64 bits")
            seeds.append(seed)
        return seeds

    def combinations_for_seed(self, master_seed: int) -> list[Variation]:
        factory = SeedFactory(master_seed)
        stream_seeds = {
            var.name: factory.next_seed()
            for var in self._variables
            if var.externally_seeded
        }

        maps: list[dict[str, str]] = [{}]
        for var in self._ordered:
            expanded: list[dict[str, str]] = []
            for current in maps:
                values = var.values(current, stream_seed=stream_seeds.get(var.name))
                if len(values) == 1:
                    current[var.name] = values[0]
                    expanded.append(current)
                    continue
                for value in values:
                    fork = dict(current)
                    fork[var.name] = value
                    expanded.append(fork)
            maps = expanded

        return [Variation(master_seed=master_seed, parameters=m) for m in maps]

    def resolve(self) -> VariationSequence:
        combinations: list[Variation] = []
        for seed in self.master_seeds():
            per_seed = self.combinations_for_seed(seed)
            logger.info(
                "Master seed {} produced {} variation(s)", seed, len(per_seed)
            )
            combinations.extend(per_seed)
        return VariationSequence(combinations, self._repetitions)


def resolve_variations(
    variables: Sequence[LoopingVariable],
    master_seed: LoopingVariable | None = None,
    repetitions: int = 1,
) -> VariationSequence:
    """Shortcut for ``ScenarioResolver(...).resolve()``."""
    return ScenarioResolver(variables, master_seed, repetitions).resolve()
