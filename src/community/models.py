# src/community/models.py — v1
"""Community detection models: EnergyWeights, SpinGlassConfig, CommunityResult."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class EnergyWeights(BaseModel):
    """Coefficients of the four spin-glass energy terms.

    All 1.0 gives the canonical (unweighted modularity) formulation.
    Values must be non-negative so rewards stay rewards and penalties stay
    penalties.
    """

    internal_edge_reward: float = 1.0
    internal_missing_penalty: float = 1.0
    crossing_edge_penalty: float = 1.0
    crossing_missing_reward: float = 1.0

    @property
    def edge_coupling(self) -> float:
        """Combined coefficient on observed edges."""
        return self.internal_edge_reward + self.crossing_edge_penalty

    @property
    def null_coupling(self) -> float:
        """Combined coefficient on expected (null model) edges."""
        return self.internal_missing_penalty + self.crossing_missing_reward


class SpinGlassConfig(BaseModel):
    """Annealing schedule and energy parameters for the spin-glass detector."""

    spins: int = 25
    start_temp: float = 1.0
    stop_temp: float = 0.01
    cool_fact: float = 0.99
    max_sweeps: int = 10_000
    gamma: float = 1.0
    weighted: bool = False
    energy: EnergyWeights = Field(default_factory=EnergyWeights)


class CommunityResult(BaseModel):
    """Partition of a graph into communities 1..k with its modularity."""

    partition: dict[Any, int] = Field(default_factory=dict)
    membership: list[int] = Field(default_factory=list)
    num_communities: int = 0
    modularity: float = 0.0
    energy: float = 0.0
    sweeps: int = 0
    final_temperature: float = 0.0
    converged: bool = True
    seed: int | None = None
    config: SpinGlassConfig = Field(default_factory=SpinGlassConfig)

    def communities(self) -> dict[int, list[Any]]:
        """Group nodes by community id, in node order."""
        groups: dict[int, list[Any]] = {}
        for node, cid in self.partition.items():
            groups.setdefault(cid, []).append(node)
        return dict(sorted(groups.items()))

    def sizes(self) -> dict[int, int]:
        return {cid: len(members) for cid, members in self.communities().items()}
