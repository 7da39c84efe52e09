# src/api/facade.py — v1
"""Public API facade — single entry point for the nominator/nominee analysis.

Usage:
    from peernet.api.facade import analyze_network
    result = analyze_network(edges, seed=42, outcomes=scores)
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Hashable, Iterable, Mapping, Sequence
from typing import Any

from peernet.api.models import NetworkAnalysisResult
from peernet.community.spinglass import detect_communities
from peernet.config.settings import Settings
from peernet.exposure.computer import compute_exposure
from peernet.graph.model import Graph
from peernet.logging.context import set_run_context, set_stage_context
from peernet.logging.logger import setup_logging_from_settings
from peernet.significance.tester import significance_test

logger = logging.getLogger(__name__)


def analyze_network(
    edges: Iterable[Sequence[Any]],
    seed: int,
    *,
    outcomes: Mapping[Hashable, float | None] | None = None,
    settings: Settings | None = None,
    trials: int | None = None,
    use_giant_component: bool = True,
    configure_logging: bool = False,
) -> NetworkAnalysisResult:
    """Run the full analysis on a raw edge list.

    Steps:
      1. Build the directed relation graph
      2. Restrict to the giant component (optional)
      3. Spin-glass community detection
      4. Monte Carlo significance of the observed modularity
      5. Exposure term on the full graph (if outcomes are given)

    Args:
        edges: (source, target[, weight]) pairs.
        seed: Seed for clustering. Significance trials derive from it unless
            settings.significance_seed is set.
        outcomes: Outcome per node for the exposure term. None = skip.
        settings: Library settings. Loaded from the environment if None.
        trials: Significance trials; overrides settings. 0 = skip the test.
        use_giant_component: Cluster the giant component only.
        configure_logging: Apply the log_* settings before running.

    Returns:
        NetworkAnalysisResult.
    """
    settings = settings or Settings()
    if configure_logging:
        setup_logging_from_settings(settings)
    run_id = uuid.uuid4().hex[:12]
    set_run_context(run_id)
    config = settings.spinglass_config()
    n_trials = settings.significance_trials if trials is None else trials
    null_seed = seed if settings.significance_seed is None else settings.significance_seed

    try:
        set_stage_context("graph")
        graph = Graph.build(edges, self_loops=settings.self_loop_policy)
        giant = graph.largest_component()
        logger.info(
            "Graph: %d nodes, %d edges, %d components; giant component %d nodes",
            graph.number_of_nodes(), graph.number_of_edges(),
            len(graph.components()), giant.number_of_nodes(),
        )
        target = giant if use_giant_component else graph

        set_stage_context("communities")
        communities = detect_communities(target, seed, config)
        logger.info(
            "Found %d communities, modularity=%.4f",
            communities.num_communities, communities.modularity,
            extra={"data": {"sizes": communities.sizes(), "sweeps": communities.sweeps}},
        )

        significance = None
        if n_trials > 0:
            set_stage_context("significance")
            significance = significance_test(
                target,
                communities.modularity,
                n_trials,
                null_seed,
                config=config,
                method=settings.generator_method,
                max_tries=settings.generator_max_tries,
                swaps_per_edge=settings.generator_swaps_per_edge,
                workers=settings.significance_workers,
            )

        exposure: dict[Hashable, float] = {}
        if outcomes is not None:
            set_stage_context("exposure")
            exposure = compute_exposure(
                graph,
                outcomes,
                weighted=settings.exposure_weighted,
                mode=settings.exposure_mode,
            )
    finally:
        set_stage_context(None)

    return NetworkAnalysisResult(
        run_id=run_id,
        seed=seed,
        node_count=graph.number_of_nodes(),
        edge_count=graph.number_of_edges(),
        component_count=len(graph.components()),
        giant_component_size=giant.number_of_nodes(),
        giant_component_edges=giant.number_of_edges(),
        analysed_on_giant_component=use_giant_component,
        communities=communities,
        significance=significance,
        exposure=exposure,
    )
