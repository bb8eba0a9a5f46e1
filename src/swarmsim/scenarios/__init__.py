# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Scenario variation resolution — looping variables to variations."""

from .placeholders import parse_placeholder, resolve_properties, resolve_value
from .resolver import ScenarioResolver, order_variables, resolve_variations
from .schema import ScenarioSpec, VariableDefinition, VariableKind
from .seeds import SeedFactory
from .variables import (
    ConstantVariable,
    EachVariable,
    ForVariable,
    LoopingVariable,
    NormalRandomVariable,
    SeedSource,
    UniformRandomVariable,
)
from .variation import Variation, VariationSequence

__all__ = [
    "parse_placeholder",
    "resolve_properties",
    "resolve_value",
    "ScenarioResolver",
    "order_variables",
    "resolve_variations",
    "ScenarioSpec",
    "VariableDefinition",
    "VariableKind",
    "SeedFactory",
    "ConstantVariable",
    "EachVariable",
    "ForVariable",
    "LoopingVariable",
    "NormalRandomVariable",
    "SeedSource",
    "UniformRandomVariable",
    "Variation",
    "VariationSequence",
]
