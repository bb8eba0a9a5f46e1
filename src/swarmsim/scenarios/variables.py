# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Looping variables — the parameter definitions a scenario is swept over.

Every variable produces an ordered list of string values once the
variables it references are bound.  Order matters: it fixes the order in
which the resolver builds combinations.

Kinds
-----
  constant        one value, possibly a placeholder
  for             ranged sweep ``lower..upper`` by ``step`` (inclusive)
  each            explicit list, optional 1-based first draw and draw count
  uniform-random  draws in ``[min, max)`` from a seeded stream
  normal-random   Gaussian draws, outliers outside ``[min, max]`` redrawn

Any parameter may be a ``${name}`` placeholder.  Referenced names become
dependencies of the variable and are substituted from the bindings given
to ``values()``.

Ranged sweeps are count based: value ``k`` is ``lower + k*step`` for
``k = 0 .. floor((upper - lower)/step + 1e-9)``, so the upper bound is
reached without accumulating rounding error.
"""

from __future__ import annotations

import math
import random
from enum import Enum
from typing import Any, ClassVar, Iterable, Mapping

from swarmsim.errors import VariableCalculationError, VariableDependencyError
from swarmsim.scenarios.placeholders import parse_placeholder, resolve_value

# Tolerance, in steps, for reaching the upper bound of a ranged sweep
RANGE_EPSILON = 1e-9

# Significant digits kept when rendering non-integral computed floats
VALUE_DIGITS = 15

# Redraw limit for a normal-random variable whose bounds reject every sample
MAX_REJECTIONS = 10_000

DEFAULT_SEED = 1


class SeedSource(str, Enum):
    """Where a random variable gets its stream seed."""
    USER = "user"                    # explicit ``seed`` parameter
    RANDOM_STREAM = "random_stream"  # drawn from the master seed stream
    DEFAULT = "default"              # fixed DEFAULT_SEED


def format_number(value: float) -> str:
    """Render a computed number as a variable value.

    Integral values are printed exactly, without a fractional part (``2``
    not ``2.0``).  Other values are rounded to VALUE_DIGITS significant
    digits, which strips float noise so ``0.1*3`` reads ``0.3``.
    """
    value = float(value)
    if not math.isfinite(value):
        return repr(value)
    if value.is_integer():
        return str(int(value))
    rounded = float(f"{value:.{VALUE_DIGITS}g}")
    if rounded.is_integer():
        return str(int(rounded))
    return repr(rounded)


class LoopingVariable:
    """Base class for all variable kinds.

    Subclasses list their raw parameters in ``_raw_parameters()`` and
    compute values in ``_calculate()`` from already-substituted text.
    """

    kind: ClassVar[str] = ""

    def __init__(self, name: str) -> None:
        self.name = name

    # -- dependency surface -------------------------------------------------

    def _raw_parameters(self) -> Iterable[Any]:
        return ()

    @property
    def references(self) -> dict[str, str | None]:
        """Referenced variable name -> placeholder default (None if absent)."""
        refs: dict[str, str | None] = {}
        for raw in self._raw_parameters():
            placeholder = parse_placeholder(raw)
            if placeholder is not None and placeholder.name not in refs:
                refs[placeholder.name] = placeholder.default
        return refs

    @property
    def dependencies(self) -> frozenset[str]:
        return frozenset(self.references)

    @property
    def externally_seeded(self) -> bool:
        return False

    # -- evaluation ---------------------------------------------------------

    def values(
        self,
        bindings: Mapping[str, str] | None = None,
        *,
        stream_seed: int | None = None,
    ) -> list[str]:
        """Compute this variable's value list against *bindings*.

        *stream_seed* is only consulted by externally seeded random kinds.
        """
        bindings = bindings or {}
        missing = [
            name for name, default in self.references.items()
            if name not in bindings and default is None
        ]
        if missing:
            raise VariableDependencyError(self.name, missing)
        return self._calculate(bindings, stream_seed)

    def _calculate(self, bindings: Mapping[str, str], stream_seed: int | None) -> list[str]:
        raise NotImplementedError

    # -- parsing helpers ----------------------------------------------------

    def _text(self, raw: Any, bindings: Mapping[str, str]) -> str:
        return str(resolve_value(raw, bindings)).strip()

    def _number(self, label: str, raw: Any, bindings: Mapping[str, str]) -> float:
        text = self._text(raw, bindings)
        try:
            value = float(text)
        except ValueError:
            raise VariableCalculationError(
                self.name, f"{label} '{text}' is not a number"
            ) from None
        if math.isnan(value):
            raise VariableCalculationError(self.name, f"{label} '{text}' is not a number")
        return value

    def _count(self, label: str, raw: Any, bindings: Mapping[str, str]) -> int:
        value = self._number(label, raw, bindings)
        if not math.isfinite(value) or value != int(value):
            raise VariableCalculationError(
                self.name, f"{label} '{self._text(raw, bindings)}' is not an integer"
            )
        return int(value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class ConstantVariable(LoopingVariable):
    kind = "constant"

    def __init__(self, name: str, value: Any) -> None:
        super().__init__(name)
        self.value = value

    def _raw_parameters(self) -> Iterable[Any]:
        return (self.value,)

    def _calculate(self, bindings, stream_seed):
        return [self._text(self.value, bindings)]


class ForVariable(LoopingVariable):
    """Inclusive ranged sweep."""

    kind = "for"

    def __init__(self, name: str, lower: Any, upper: Any, step: Any) -> None:
        super().__init__(name)
        self.lower = lower
        self.upper = upper
        self.step = step

    def _raw_parameters(self) -> Iterable[Any]:
        return (self.lower, self.upper, self.step)

    def _calculate(self, bindings, stream_seed):
        for label, raw in (("lower", self.lower), ("upper", self.upper), ("step", self.step)):
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                raise VariableCalculationError(self.name, f"'{label}' must be set")
        literals = [self._text(raw, bindings) for raw in (self.lower, self.upper, self.step)]
        try:
            lower, upper, step = (float(text) for text in literals)
        except ValueError:
            raise VariableCalculationError(
                self.name,
                f"lower, upper and step must be numbers ({','.join(literals)})",
            ) from None
        if not all(math.isfinite(v) for v in (lower, upper, step)):
            raise VariableCalculationError(
                self.name,
                f"lower, upper and step must be finite ({','.join(literals)})",
            )
        if step == 0:
            raise VariableCalculationError(self.name, "step cannot be zero")
        if (upper - lower) * step < 0:
            raise VariableCalculationError(
                self.name,
                f"bounds ({lower},{upper}) are inconsistent with step {step}",
            )

        count = math.floor((upper - lower) / step + RANGE_EPSILON)
        return [format_number(lower + k * step) for k in range(count + 1)]


class EachVariable(LoopingVariable):
    """Explicit list with an optional window.

    ``first_draw`` is 1-based.  ``num_draws`` of -1 takes every remaining
    entry; a larger count than remains is truncated.
    """

    kind = "each"

    def __init__(
        self,
        name: str,
        values: list[Any],
        first_draw: Any = 1,
        num_draws: Any = -1,
    ) -> None:
        super().__init__(name)
        self.picks = list(values)
        self.first_draw = first_draw
        self.num_draws = num_draws

    def _raw_parameters(self) -> Iterable[Any]:
        return (*self.picks, self.first_draw, self.num_draws)

    def _calculate(self, bindings, stream_seed):
        if not self.picks:
            raise VariableCalculationError(self.name, "list of values is empty")
        first = self._count("first_draw", self.first_draw, bindings)
        draws = self._count("num_draws", self.num_draws, bindings)
        if first < 1 or first > len(self.picks):
            raise VariableCalculationError(
                self.name, f"first_draw {first} outside 1..{len(self.picks)}"
            )
        if draws == 0 or draws < -1:
            raise VariableCalculationError(self.name, f"num_draws {draws} must be -1 or positive")

        window = self.picks[first - 1:]
        if draws != -1:
            window = window[:draws]
        return [self._text(raw, bindings) for raw in window]


class RandomVariable(LoopingVariable):
    """Shared draw logic for the random kinds.

    ``num_draws + first_draw - 1`` samples are taken from a fresh
    ``random.Random(seed)`` and the first ``first_draw - 1`` discarded, so
    changing the window never changes the values inside it.
    """

    def __init__(
        self,
        name: str,
        num_draws: Any,
        first_draw: Any = 1,
        seed: Any = None,
        seed_source: SeedSource | str | None = None,
    ) -> None:
        super().__init__(name)
        self.num_draws = num_draws
        self.first_draw = first_draw
        self.seed = seed
        if seed_source is None:
            seed_source = SeedSource.USER if seed is not None else SeedSource.RANDOM_STREAM
        self.seed_source = SeedSource(seed_source)
        if self.seed_source is SeedSource.USER and seed is None:
            raise VariableCalculationError(name, "seed source 'user' requires a seed")

    @property
    def externally_seeded(self) -> bool:
        return self.seed_source is SeedSource.RANDOM_STREAM

    def _raw_parameters(self) -> Iterable[Any]:
        params: list[Any] = [self.num_draws, self.first_draw]
        if self.seed_source is SeedSource.USER:
            params.append(self.seed)
        return params

    def _stream(self, bindings: Mapping[str, str], stream_seed: int | None) -> random.Random:
        if self.seed_source is SeedSource.USER:
            return random.Random(self._count("seed", self.seed, bindings))
        if self.seed_source is SeedSource.DEFAULT:
            return random.Random(DEFAULT_SEED)
        if stream_seed is None:
            raise VariableCalculationError(
                self.name, "externally seeded variable evaluated without a stream seed"
            )
        return random.Random(stream_seed)

    def _calculate(self, bindings, stream_seed):
        draws = self._count("num_draws", self.num_draws, bindings)
        first = self._count("first_draw", self.first_draw, bindings)
        if draws < 1:
            raise VariableCalculationError(self.name, f"num_draws {draws} must be positive")
        if first < 1:
            raise VariableCalculationError(self.name, f"first_draw {first} must be at least 1")
        sampler = self._sampler(bindings)
        rng = self._stream(bindings, stream_seed)
        samples = [sampler(rng) for _ in range(draws + first - 1)]
        return [format_number(v) for v in samples[first - 1:]]

    def _sampler(self, bindings: Mapping[str, str]):
        raise NotImplementedError


class UniformRandomVariable(RandomVariable):
    kind = "uniform-random"

    def __init__(self, name: str, num_draws: Any, min: Any = 0, max: Any = 1, **kwargs) -> None:
        super().__init__(name, num_draws, **kwargs)
        self.min = min
        self.max = max

    def _raw_parameters(self) -> Iterable[Any]:
        return (*super()._raw_parameters(), self.min, self.max)

    def _sampler(self, bindings):
        low = self._number("min", self.min, bindings)
        high = self._number("max", self.max, bindings)
        if low > high:
            low, high = high, low
        diff = high - low
        return lambda rng: low + rng.random() * diff


class NormalRandomVariable(RandomVariable):
    kind = "normal-random"

    def __init__(
        self,
        name: str,
        num_draws: Any,
        mean: Any,
        std_dev: Any,
        min: Any = None,
        max: Any = None,
        **kwargs,
    ) -> None:
        super().__init__(name, num_draws, **kwargs)
        self.mean = mean
        self.std_dev = std_dev
        self.min = min
        self.max = max

    def _raw_parameters(self) -> Iterable[Any]:
        optional = [v for v in (self.min, self.max) if v is not None]
        return (*super()._raw_parameters(), self.mean, self.std_dev, *optional)

    def _sampler(self, bindings):
        mean = self._number("mean", self.mean, bindings)
        std_dev = self._number("std_dev", self.std_dev, bindings)
        if std_dev < 0:
            raise VariableCalculationError(self.name, f"std_dev {std_dev} is negative")
        low = -math.inf if self.min is None else self._number("min", self.min, bindings)
        high = math.inf if self.max is None else self._number("max", self.max, bindings)
        if low > high:
            raise VariableCalculationError(self.name, f"min {low} is greater than max {high}")

        def _draw(rng: random.Random) -> float:
            for _ in range(MAX_REJECTIONS):
                value = rng.gauss(mean, std_dev)
                if low <= value <= high:
                    return value
            raise VariableCalculationError(
                self.name,
                f"no sample of N({mean}, {std_dev}) fell inside [{low}, {high}]",
            )

        return _draw
