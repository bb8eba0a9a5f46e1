# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Process-wide settings for swarmsim.

Values come from ``SWARMSIM_*`` environment variables or a local ``.env``
file.  Components never read ``settings`` implicitly inside the step loop;
each one takes an explicit config record at construction, and those
records offer ``from_settings()`` to bridge the two.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SWARMSIM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Executive
    step_size: float = Field(default=0.1, gt=0.0, description="Simulated seconds per step")
    end_time: float = Field(default=10.0, ge=0.0, description="Simulated seconds per variation")
    real_time: bool = False
    real_time_scale: float = Field(default=1.0, gt=0.0)

    # Scenario
    repetitions: int = Field(default=1, ge=1)
    workers: int = Field(default=1, ge=1)

    # Propagation
    range_threshold: float = Field(default=10.0, ge=0.0, description="Metres")
    noise_floor_mean: float = Field(default=0.01, description="mW")
    noise_floor_sigma: float = Field(default=0.005, ge=0.0, description="mW")

    log_level: str = "INFO"


settings = Settings()
