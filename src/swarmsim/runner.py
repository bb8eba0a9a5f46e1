# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""VariationRunner — one fresh executive per variation.

For each variation in a VariationSequence the runner:

  1. builds a SeedFactory from the variation's master seed,
  2. constructs an Executive and a propagation model seeded from it,
  3. hands both to the caller's ``build(executive, variation)`` which
     registers agents,
  4. runs to ``end_time`` and tears everything down,
  5. collects a VariationResult.

Runs share nothing mutable, so ``workers > 1`` runs variations on a
thread pool.  Results always come back in sequence order.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable

from loguru import logger

from swarmsim.comms.propagation import (
    DefaultPropagationModel,
    PropagationConfig,
    PropagationModel,
)
from swarmsim.scenarios.seeds import SeedFactory
from swarmsim.scenarios.variation import Variation, VariationSequence
from swarmsim.simulation.executive import AgentFault, Executive, ExecutiveConfig

BuildFn = Callable[[Executive, Variation], Any]
CollectFn = Callable[[Executive], Any]
PropagationFactory = Callable[..., PropagationModel]


@dataclass
class VariationResult:
    index: int
    variation: Variation
    steps: int
    sim_time: float
    wall_time: float
    faults: list[AgentFault] = field(default_factory=list)
    stats: dict = field(default_factory=dict)
    data: Any = None

    @property
    def ok(self) -> bool:
        return not self.faults


class VariationRunner:
    def __init__(
        self,
        variations: VariationSequence,
        build: BuildFn,
        config: ExecutiveConfig | None = None,
        propagation_config: PropagationConfig | None = None,
        propagation_factory: PropagationFactory = DefaultPropagationModel,
        collect: CollectFn | None = None,
        workers: int = 1,
    ) -> None:
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        self.variations = variations
        self.build = build
        self.config = config or ExecutiveConfig()
        self.propagation_config = propagation_config or PropagationConfig()
        self.propagation_factory = propagation_factory
        self.collect = collect
        self.workers = workers

    def make_executive(self, variation: Variation) -> Executive:
        """Fresh executive and propagation model for *variation*."""
        seeds = SeedFactory(variation.master_seed)
        executive = Executive(self.config, seed_factory=seeds, variation=variation)
        executive.propagation = self.propagation_factory(
            executive.clock, self.propagation_config, rng=seeds.numpy_rng()
        )
        return executive

    def run_variation(self, index: int, variation: Variation) -> VariationResult:
        logger.info("Executing scenario variation {}", index)
        started = time.perf_counter()
        executive = self.make_executive(variation)
        try:
            self.build(executive, variation)
            steps = executive.run(self.config.end_time)
        finally:
            executive.stop()
        elapsed = time.perf_counter() - started
        logger.info("Scenario variation {} executed in {:.3f} seconds", index, elapsed)

        return VariationResult(
            index=index,
            variation=variation,
            steps=steps,
            sim_time=executive.current_time,
            wall_time=elapsed,
            faults=list(executive.faults),
            stats=executive.aggregator.to_dict(),
            data=self.collect(executive) if self.collect is not None else None,
        )

    def run(self) -> list[VariationResult]:
        jobs = list(enumerate(self.variations))
        logger.info(
            "Running {} variation(s) ({} combination(s) x {} repetition(s))",
            len(jobs), len(self.variations.combinations), self.variations.repetitions,
        )
        if self.workers == 1:
            return [self.run_variation(i, v) for i, v in jobs]
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="variation") as pool:
            futures = [pool.submit(self.run_variation, i, v) for i, v in jobs]
            return [f.result() for f in futures]
