# src/api/models.py — v1
"""Public API result model for the one-call network analysis."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from peernet.community.models import CommunityResult
from peernet.significance.models import SignificanceResult


class NetworkAnalysisResult(BaseModel):
    """Everything produced by analyze_network()."""

    run_id: str
    seed: int

    # --- Graph summary ---
    node_count: int
    edge_count: int
    component_count: int
    giant_component_size: int
    giant_component_edges: int
    analysed_on_giant_component: bool = True

    # --- Outputs ---
    communities: CommunityResult
    significance: SignificanceResult | None = None
    exposure: dict[Any, float] = Field(default_factory=dict)

    @property
    def is_significant(self) -> bool | None:
        """True when no more than 5% of null graphs beat the observed modularity."""
        if self.significance is None:
            return None
        return self.significance.p_value <= 0.05
