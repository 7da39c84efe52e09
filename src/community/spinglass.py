# src/community/spinglass.py — v1
"""Spin-glass community detection by simulated annealing.

Each node carries a spin (community label). The Hamiltonian rewards edges
inside a community, penalises expected-but-missing edges inside it, and
mirrors both terms across communities:

    H = - a * sum A_ij d_ij + b * gamma * sum p_ij d_ij
        + c * sum A_ij (1 - d_ij) - e * gamma * sum p_ij (1 - d_ij)

with p_ij = k_i k_j / 2m. Up to a constant this is
-(a + c) * sum (A_ij - gamma' p_ij) d_ij, so the defaults (all 1.0,
gamma = 1) minimise H exactly where modularity is maximised.

Temperatures are in units of the mean coupling energy of a node
((a + c) * 2m / n), so one schedule suits sparse and dense graphs alike.
A node may always move into the lowest unused spin, which lets new
communities nucleate during annealing.

Pure function: takes a Graph, returns CommunityResult. Does NOT modify the
input graph. Deterministic for a fixed seed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from peernet.community.models import CommunityResult, SpinGlassConfig
from peernet.community.modularity import modularity_from_labels
from peernet.core.errors import InvalidArgumentError
from peernet.graph.model import Graph, UndirectedAdjacency

logger = logging.getLogger(__name__)

_EPS = 1e-12


@dataclass
class _Workspace:
    """Mutable per-run state: labels plus per-community strength and size totals."""

    adj: UndirectedAdjacency
    labels: np.ndarray
    community_strength: np.ndarray
    community_size: np.ndarray
    two_m: float
    edge_coupling: float
    null_coupling: float
    temperature_scale: float

    @classmethod
    def allocate(
        cls,
        adj: UndirectedAdjacency,
        spins: int,
        rng: np.random.Generator,
        config: SpinGlassConfig,
    ) -> _Workspace:
        n = adj.strength.size
        labels = rng.integers(spins, size=n).astype(np.int64)
        community_strength = np.bincount(labels, weights=adj.strength, minlength=spins)
        two_m = float(adj.strength.sum())
        edge_coupling = config.energy.edge_coupling
        return cls(
            adj=adj,
            labels=labels,
            community_strength=community_strength.astype(np.float64),
            community_size=np.bincount(labels, minlength=spins),
            two_m=two_m,
            edge_coupling=edge_coupling,
            null_coupling=config.gamma * config.energy.null_coupling,
            # Temperatures are in units of the mean coupling energy per node.
            temperature_scale=(edge_coupling or 1.0) * two_m / n,
        )

    def local_energies(self, i: int) -> tuple[np.ndarray, np.ndarray]:
        """Candidate communities (ascending) for node ``i`` and their local energies.

        Candidates are the node's own community, every community it has an
        edge into, and the lowest empty spin if one is free.
        """
        nbrs, weights = self.adj.neighbours(i)
        current = self.labels[i]
        spins = self.community_strength.size
        links = np.bincount(self.labels[nbrs], weights=weights, minlength=spins)
        extra = [current]
        empty = np.flatnonzero(self.community_size == 0)
        if empty.size:
            extra.append(empty[0])
        candidates = np.union1d(np.flatnonzero(links > 0), extra)

        k_i = self.adj.strength[i]
        others = self.community_strength[candidates] - np.where(
            candidates == current, k_i, 0.0
        )
        energies = (
            -self.edge_coupling * links[candidates]
            + self.null_coupling * k_i * others / self.two_m
        )
        return candidates, energies

    def move(self, i: int, target: int) -> None:
        k_i = self.adj.strength[i]
        source = self.labels[i]
        self.community_strength[source] -= k_i
        self.community_size[source] -= 1
        self.community_strength[target] += k_i
        self.community_size[target] += 1
        self.labels[i] = target

    def energy(self, labels: np.ndarray) -> float:
        """Label-dependent part of H for ``labels``, summed over unordered pairs."""
        _, compact = np.unique(labels, return_inverse=True)
        rows = np.repeat(np.arange(compact.size), np.diff(self.adj.indptr))
        same = compact[rows] == compact[self.adj.indices]
        internal = float(self.adj.data[same].sum()) / 2.0
        k = self.adj.strength
        totals = np.bincount(compact, weights=k)
        squares = np.bincount(compact, weights=k * k)
        pair_products = float((np.square(totals) - squares).sum()) / 2.0
        return -self.edge_coupling * internal + self.null_coupling * pair_products / self.two_m


def detect_communities(
    graph: Graph,
    seed: int | np.random.SeedSequence,
    config: SpinGlassConfig | None = None,
) -> CommunityResult:
    """Partition ``graph`` into communities by spin-glass simulated annealing.

    Edge direction is ignored. Communities that end up internally
    disconnected are split, so disconnected components are always
    partitioned independently within one labeling space.

    Args:
        graph: Graph to partition (not modified).
        seed: Seed for initial spins, sweep order and move acceptance.
        config: Annealing schedule and energy parameters (defaults if None).

    Returns:
        CommunityResult with ids 1..k in node order of first appearance.

    Raises:
        InvalidArgumentError: Invalid schedule or negative energy coefficients.
    """
    config = config or SpinGlassConfig()
    validate_config(config)
    recorded_seed = seed if isinstance(seed, int) else None

    n = graph.number_of_nodes()
    if n == 0:
        return CommunityResult(seed=recorded_seed, config=config)

    adj = graph.undirected_adjacency(config.weighted)
    if adj.strength.sum() == 0:
        logger.debug("Graph has no edges; returning a single community")
        return CommunityResult(
            partition={node: 1 for node in graph.nodes},
            membership=[1] * n,
            num_communities=1,
            modularity=0.0,
            seed=recorded_seed,
            config=config,
        )

    rng = np.random.default_rng(seed)
    ws = _Workspace.allocate(adj, min(config.spins, n), rng, config)

    sweeps, temperature, converged = _anneal(ws, rng, config)
    sweeps += _quench(ws, config.max_sweeps)

    labels = _relabel(_split_disconnected(ws.labels, adj))
    energy = ws.energy(labels)
    q = modularity_from_labels(adj, labels)
    num_communities = int(labels.max())

    logger.debug(
        "Spin-glass finished: %d communities, modularity=%.4f, sweeps=%d, T=%.4f",
        num_communities, q, sweeps, temperature,
    )
    membership = labels.tolist()
    return CommunityResult(
        partition=dict(zip(graph.nodes, membership)),
        membership=membership,
        num_communities=num_communities,
        modularity=q,
        energy=energy,
        sweeps=sweeps,
        final_temperature=temperature,
        converged=converged,
        seed=recorded_seed,
        config=config,
    )


def validate_config(config: SpinGlassConfig) -> None:
    """Raise InvalidArgumentError if the schedule or energy weights are unusable."""
    if config.spins < 1:
        raise InvalidArgumentError(f"spins must be >= 1, got {config.spins}")
    if config.max_sweeps < 1:
        raise InvalidArgumentError(f"max_sweeps must be >= 1, got {config.max_sweeps}")
    if not 0.0 < config.cool_fact < 1.0:
        raise InvalidArgumentError(f"cool_fact must be in (0, 1), got {config.cool_fact}")
    if config.stop_temp <= 0.0 or config.start_temp <= config.stop_temp:
        raise InvalidArgumentError(
            f"Need 0 < stop_temp < start_temp, got {config.stop_temp}, {config.start_temp}"
        )
    if config.gamma < 0.0:
        raise InvalidArgumentError(f"gamma must be >= 0, got {config.gamma}")
    negative = [k for k, v in config.energy.model_dump().items() if v < 0.0]
    if negative:
        raise InvalidArgumentError(f"Energy weights must be >= 0: {', '.join(negative)}")


def _anneal(
    ws: _Workspace,
    rng: np.random.Generator,
    config: SpinGlassConfig,
) -> tuple[int, float, bool]:
    """Heat-bath sweeps with geometric cooling.

    Returns (sweeps, final temperature, converged) where converged means a
    sweep changed no label before the schedule ran out.
    """
    n = ws.labels.size
    temperature = config.start_temp
    sweeps = 0
    converged = False

    while sweeps < config.max_sweeps and temperature >= config.stop_temp:
        changes = 0
        for i in rng.permutation(n):
            candidates, energies = ws.local_energies(i)
            if candidates.size == 1:
                continue
            weights = np.exp(-(energies - energies.min()) / (temperature * ws.temperature_scale))
            cumulative = np.cumsum(weights)
            pick = int(np.searchsorted(cumulative, rng.random() * cumulative[-1], side="right"))
            target = int(candidates[min(pick, candidates.size - 1)])
            if target != ws.labels[i]:
                ws.move(i, target)
                changes += 1
        sweeps += 1
        temperature *= config.cool_fact
        if changes == 0:
            converged = True
            break

    return sweeps, temperature, converged


def _quench(ws: _Workspace, max_sweeps: int) -> int:
    """Zero-temperature greedy sweeps until no single move lowers the energy.

    Ties go to the lowest community id; a node only leaves its community
    for a strictly lower energy.
    """
    n = ws.labels.size
    for sweep in range(1, max_sweeps + 1):
        changes = 0
        for i in range(n):
            candidates, energies = ws.local_energies(i)
            best = int(np.argmin(energies))
            current = int(np.flatnonzero(candidates == ws.labels[i])[0])
            if energies[best] < energies[current] - _EPS:
                ws.move(i, int(candidates[best]))
                changes += 1
        if changes == 0:
            return sweep
    logger.warning("Quench did not stabilise within %d sweeps", max_sweeps)
    return max_sweeps


def _split_disconnected(labels: np.ndarray, adj: UndirectedAdjacency) -> np.ndarray:
    """Give each internally connected piece of a community its own label.

    Uses union-find over node indices; the returned labels are root indices.
    """
    n = labels.size
    parent = np.arange(n)

    def find(x: int) -> int:
        root = x
        while parent[root] != root:
            root = parent[root]
        while parent[x] != root:
            parent[x], x = root, parent[x]
        return root

    rows = np.repeat(np.arange(n), np.diff(adj.indptr))
    mask = (labels[rows] == labels[adj.indices]) & (rows < adj.indices)
    for u, v in zip(rows[mask].tolist(), adj.indices[mask].tolist()):
        ru, rv = find(u), find(v)
        if ru != rv:
            parent[max(ru, rv)] = min(ru, rv)

    return np.fromiter((find(i) for i in range(n)), dtype=np.int64, count=n)


def _relabel(labels: np.ndarray) -> np.ndarray:
    """Map labels to 1..k in order of first appearance."""
    mapping: dict[int, int] = {}
    out = np.empty_like(labels)
    for i, label in enumerate(labels.tolist()):
        out[i] = mapping.setdefault(label, len(mapping) + 1)
    return out
