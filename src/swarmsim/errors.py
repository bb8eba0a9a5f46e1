# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Exception taxonomy for swarmsim.

Configuration errors are raised while a scenario is being resolved and
abort the whole run.  Usage errors signal programmer misuse of the
executive (scheduling into the past, registering after stop).  Runtime
degenerate cases (events for destroyed agents, receivers beyond range)
are not errors at all and never raise.
"""

from __future__ import annotations


class SwarmSimError(Exception):
    """Base class for every error raised by swarmsim."""


# -- Configuration errors ---------------------------------------------------

class ConfigurationError(SwarmSimError):
    """A scenario or component configuration cannot be used as given."""


class InvalidScenarioError(ConfigurationError):
    """Structural problem in a scenario: duplicate names, cycles, bad kinds."""


class VariableCalculationError(ConfigurationError):
    """A looping variable's parameters cannot produce a value list."""

    def __init__(self, variable: str, message: str) -> None:
        self.variable = variable
        super().__init__(f"variable '{variable}': {message}")


class VariableDependencyError(ConfigurationError):
    """A looping variable was evaluated before its dependencies were bound."""

    def __init__(self, variable: str, missing: list[str]) -> None:
        self.variable = variable
        self.missing = list(missing)
        super().__init__(
            f"variable '{variable}' depends on unbound variable(s): "
            + ", ".join(self.missing)
        )


# -- Usage errors -----------------------------------------------------------

class UsageError(SwarmSimError):
    """The caller used an API in a way that can never be correct."""


class SchedulingError(UsageError):
    """An event was scheduled for a time before the current simulated time."""


class LifecycleError(UsageError):
    """An executive or model transition was requested from the wrong state."""
