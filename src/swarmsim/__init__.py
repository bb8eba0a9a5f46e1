# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""swarmsim — reproducible multi-agent swarm simulation core.

Three parts:

  scenarios   looping variables resolved into a VariationSequence
  simulation  the Executive: simulated time, model lifecycle, events
  comms       radios, antenna patterns, and RF propagation

``VariationRunner`` ties them together, one fresh executive per
variation.
"""

__version__ = "0.1.0"
