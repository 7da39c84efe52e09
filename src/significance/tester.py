# src/significance/tester.py — v1
"""Monte Carlo significance of community structure.

For each trial a null graph with the observed undirected degree sequence is
generated and clustered with the same SpinGlassConfig as the observed run.
The estimate is the share of null modularities strictly above the observed
one: 0 means no null instance beat the observed structure.

Trials are independent given their sub-seed, so they may run on a process
pool; the estimate does not depend on execution order. A failing trial
aborts the whole batch.
"""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass

import numpy as np

from peernet.community.models import SpinGlassConfig
from peernet.community.spinglass import detect_communities, validate_config
from peernet.core.errors import InvalidArgumentError
from peernet.graph.generator import (
    DEFAULT_MAX_TRIES,
    DEFAULT_SWAPS_PER_EDGE,
    GenerationMethod,
    generate,
)
from peernet.graph.model import Graph
from peernet.logging.context import set_trial_context
from peernet.significance.models import SignificanceResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrialSpec:
    """Everything one trial needs; picklable for worker processes."""

    degree_sequence: tuple[int, ...]
    seed: int
    trial: int
    config: SpinGlassConfig
    method: GenerationMethod
    max_tries: int
    swaps_per_edge: int


def trial_seeds(seed: int, trial: int) -> tuple[np.random.SeedSequence, np.random.SeedSequence]:
    """Derive (generation, clustering) seeds for ``trial`` from the batch seed."""
    generation, clustering = np.random.SeedSequence(seed, spawn_key=(trial,)).spawn(2)
    return generation, clustering


def run_trial(spec: TrialSpec) -> float:
    """Generate one null graph and return the modularity of its partition."""
    set_trial_context(spec.trial)
    generation_seed, clustering_seed = trial_seeds(spec.seed, spec.trial)
    null_graph = generate(
        spec.degree_sequence,
        generation_seed,
        method=spec.method,
        max_tries=spec.max_tries,
        swaps_per_edge=spec.swaps_per_edge,
    )
    result = detect_communities(null_graph, clustering_seed, spec.config)
    return result.modularity


def significance_test(
    graph: Graph,
    observed_modularity: float,
    trials: int,
    seed: int,
    *,
    config: SpinGlassConfig | None = None,
    method: GenerationMethod = "edge_swap",
    max_tries: int = DEFAULT_MAX_TRIES,
    swaps_per_edge: int = DEFAULT_SWAPS_PER_EDGE,
    workers: int = 1,
) -> SignificanceResult:
    """Estimate how often a degree-preserving null graph beats ``observed_modularity``.

    Args:
        graph: Observed graph; only its undirected degree sequence is used.
        observed_modularity: Modularity of the observed partition.
        trials: Number of null graphs (must be >= 1).
        seed: Batch seed; trial i uses sub-seeds derived from (seed, i).
        config: Clustering configuration, identical to the observed run.
        method: Null-model generation method.
        max_tries: Stub-matching retry budget.
        swaps_per_edge: Double edge swaps per edge for "edge_swap".
        workers: Worker processes; 1 runs trials in this process.

    Returns:
        SignificanceResult with p_value = exceed_count / trials.

    Raises:
        InvalidArgumentError: If trials or workers is < 1.
        DegreeSequenceError, GenerationExhaustedError: From any trial; the
            batch is aborted.
    """
    if isinstance(trials, bool) or not isinstance(trials, int) or trials < 1:
        raise InvalidArgumentError(f"trials must be a positive integer, got {trials!r}")
    if workers < 1:
        raise InvalidArgumentError(f"workers must be >= 1, got {workers}")
    config = config or SpinGlassConfig()
    validate_config(config)

    degree_sequence = tuple(graph.degree_sequence("total"))
    specs = [
        TrialSpec(
            degree_sequence=degree_sequence,
            seed=seed,
            trial=i,
            config=config,
            method=method,
            max_tries=max_tries,
            swaps_per_edge=swaps_per_edge,
        )
        for i in range(trials)
    ]

    logger.info(
        "Running %d null-model trials (method=%s, workers=%d, seed=%d)",
        trials, method, workers, seed,
    )
    if workers == 1:
        try:
            null_scores = [run_trial(spec) for spec in specs]
        finally:
            set_trial_context(None)
    else:
        with ProcessPoolExecutor(max_workers=workers) as pool:
            null_scores = list(pool.map(run_trial, specs))

    sample = np.asarray(null_scores, dtype=np.float64)
    exceed = int(np.count_nonzero(sample > observed_modularity))
    p_value = exceed / trials
    logger.info(
        "Significance: %d/%d null graphs exceed Q=%.4f (p=%.4f)",
        exceed, trials, observed_modularity, p_value,
        extra={"data": {"null_mean": float(sample.mean()), "null_std": float(sample.std())}},
    )
    return SignificanceResult(
        p_value=p_value,
        trials=trials,
        exceed_count=exceed,
        observed_modularity=observed_modularity,
        null_modularities=sample.tolist(),
        null_mean=float(sample.mean()),
        null_std=float(sample.std()),
        seed=seed,
        method=method,
    )
