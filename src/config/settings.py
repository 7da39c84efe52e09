# src/config/settings.py — v1
"""Typed configuration loaded from environment / .env via pydantic-settings.

Single source of truth for clustering, null-model and logging parameters.
Every variable is prefixed with PEERNET_ (e.g. PEERNET_COMMUNITY_SPINS=10).
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from peernet.community.models import EnergyWeights, SpinGlassConfig


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Library settings loaded from the environment and an optional .env file."""

    model_config = SettingsConfigDict(
        env_prefix="PEERNET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Community detection (spin glass) ===
    community_spins: int = 25
    community_start_temp: float = 1.0
    community_stop_temp: float = 0.01
    community_cool_fact: float = 0.99
    community_max_sweeps: int = 10_000
    community_gamma: float = 1.0
    community_weighted: bool = False

    # Energy coefficients (all 1.0 = canonical modularity)
    energy_internal_edge_reward: float = 1.0
    energy_internal_missing_penalty: float = 1.0
    energy_crossing_edge_penalty: float = 1.0
    energy_crossing_missing_reward: float = 1.0

    # === Null model generation ===
    generator_method: Literal["edge_swap", "stub_matching"] = "edge_swap"
    generator_max_tries: int = 1000
    generator_swaps_per_edge: int = 10

    # === Significance test ===
    significance_trials: int = 100
    significance_workers: int = 1
    significance_seed: int | None = None

    # === Exposure ===
    exposure_mode: Literal["out", "in", "all"] = "out"
    exposure_weighted: bool = True

    # === Graph build ===
    self_loop_policy: Literal["reject", "drop"] = "reject"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator(
        "community_spins",
        "community_max_sweeps",
        "generator_max_tries",
        "significance_workers",
    )
    @classmethod
    def validate_positive(cls, v: int, info) -> int:  # noqa: N805
        if v < 1:
            raise ValueError(f"{info.field_name} must be >= 1")
        return v

    @field_validator("generator_swaps_per_edge", "significance_trials")
    @classmethod
    def validate_non_negative(cls, v: int, info) -> int:  # noqa: N805
        if v < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return v

    @field_validator("significance_seed")
    @classmethod
    def validate_seed(cls, v: int | None) -> int | None:  # noqa: N805
        if v is not None and v < 0:
            raise ValueError("significance_seed must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Collect cross-field problems into a single ConfigurationError."""
        errors: list[str] = []

        if not 0.0 < self.community_cool_fact < 1.0:
            errors.append("COMMUNITY_COOL_FACT must be in (0, 1)")

        if self.community_stop_temp <= 0.0:
            errors.append("COMMUNITY_STOP_TEMP must be > 0")
        elif self.community_stop_temp >= self.community_start_temp:
            errors.append("COMMUNITY_STOP_TEMP must be < COMMUNITY_START_TEMP")

        if self.community_gamma < 0.0:
            errors.append("COMMUNITY_GAMMA must be >= 0")

        negative = [
            name
            for name, value in self._energy_fields().items()
            if value < 0.0
        ]
        if negative:
            errors.append(
                "Energy coefficients must be >= 0: " + ", ".join(n.upper() for n in negative)
            )

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    def _energy_fields(self) -> dict[str, float]:
        return {
            "energy_internal_edge_reward": self.energy_internal_edge_reward,
            "energy_internal_missing_penalty": self.energy_internal_missing_penalty,
            "energy_crossing_edge_penalty": self.energy_crossing_edge_penalty,
            "energy_crossing_missing_reward": self.energy_crossing_missing_reward,
        }

    def spinglass_config(self) -> SpinGlassConfig:
        """Build the detector configuration from the community_* settings."""
        return SpinGlassConfig(
            spins=self.community_spins,
            start_temp=self.community_start_temp,
            stop_temp=self.community_stop_temp,
            cool_fact=self.community_cool_fact,
            max_sweeps=self.community_max_sweeps,
            gamma=self.community_gamma,
            weighted=self.community_weighted,
            energy=EnergyWeights(
                internal_edge_reward=self.energy_internal_edge_reward,
                internal_missing_penalty=self.energy_internal_missing_penalty,
                crossing_edge_penalty=self.energy_crossing_edge_penalty,
                crossing_missing_reward=self.energy_crossing_missing_reward,
            ),
        )


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment/.env with optional overrides.

    Args:
        **overrides: Field-level overrides (for tests or per-analysis config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
