# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Aggregator — named statistics collected during one run.

Models add samples under ``(category, key)``, optionally tagged with
their id, e.g. ``add_value("energy", "radio-tx", 0.4, model_id=3)``.
Summaries are computed on demand with numpy.
"""

from __future__ import annotations

from collections import defaultdict

import numpy as np


class Aggregator:
    def __init__(self) -> None:
        self._samples: dict[tuple[str, str, int | None], list[float]] = defaultdict(list)

    def add_value(self, category: str, key: str, value: float, model_id: int | None = None) -> None:
        self._samples[(category, key, model_id)].append(float(value))

    def _select(self, category: str, key: str | None, model_id: int | None) -> np.ndarray:
        values: list[float] = []
        for (cat, k, mid), samples in self._samples.items():
            if cat != category:
                continue
            if key is not None and k != key:
                continue
            if model_id is not None and mid != model_id:
                continue
            values.extend(samples)
        return np.asarray(values, dtype=float)

    def total(self, category: str, key: str | None = None, model_id: int | None = None) -> float:
        return float(self._select(category, key, model_id).sum())

    def count(self, category: str, key: str | None = None, model_id: int | None = None) -> int:
        return int(self._select(category, key, model_id).size)

    def summary(self, category: str, key: str | None = None, model_id: int | None = None) -> dict:
        values = self._select(category, key, model_id)
        if values.size == 0:
            return {"count": 0, "sum": 0.0, "mean": 0.0, "std": 0.0, "min": 0.0, "max": 0.0}
        return {
            "count": int(values.size),
            "sum": float(values.sum()),
            "mean": float(values.mean()),
            "std": float(values.std()),
            "min": float(values.min()),
            "max": float(values.max()),
        }

    def categories(self) -> list[str]:
        return sorted({cat for cat, _, _ in self._samples})

    def keys(self, category: str) -> list[str]:
        return sorted({k for cat, k, _ in self._samples if cat == category})

    def to_dict(self) -> dict[str, dict[str, dict]]:
        return {
            cat: {key: self.summary(cat, key) for key in self.keys(cat)}
            for cat in self.categories()
        }

    def reset(self) -> None:
        self._samples.clear()
