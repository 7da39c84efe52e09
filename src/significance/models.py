# src/significance/models.py — v1
"""Monte Carlo significance result model."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SignificanceResult(BaseModel):
    """Empirical p-value of an observed modularity against a null-model sample."""

    p_value: float
    trials: int
    exceed_count: int
    observed_modularity: float
    null_modularities: list[float] = Field(default_factory=list)
    null_mean: float = 0.0
    null_std: float = 0.0
    seed: int
    method: str = "edge_swap"

    @property
    def z_score(self) -> float | None:
        """Standardised distance of the observed score from the null mean."""
        if self.null_std == 0.0:
            return None
        return (self.observed_modularity - self.null_mean) / self.null_std
