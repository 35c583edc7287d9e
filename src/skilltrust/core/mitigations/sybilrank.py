"""SybilRank: trust propagation by short random walks from seed reviewers.

The feedback graph is treated as undirected (reviewer <-> subject, edge
weight = number of entries). Trust starts at seed reviewers, the top
quartile by ``distinct subjects * log1p(active span hours) * log1p(count)``,
and is spread by power iteration for ``min(iterations, ceil(log2(n + 1)))``
rounds. Each round keeps half of a node's trust in place (a lazy walk), so
the bipartite reviewer/subject graph settles instead of oscillating
between its two sides. A sybil region joined to the honest region by few
attack edges receives little of that trust. Scores are normalised to [0, 1]; addresses
below ``trust_threshold`` are flagged.

Flagged entries get a graduated discount: the lower the reviewer's trust,
the closer the factor is to ``discount``.

References:
    Cao et al. (2012), "Aiding the Detection of Fake Accounts in Large
    Scale Social Online Services" (SybilRank).
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from skilltrust.core.feedback import FeedbackEntry, active_entries
from skilltrust.core.mitigations.config import SybilRankConfig

_MS_PER_HOUR: float = 3_600_000.0
_SEED_SHARE: float = 0.25
_LAZY_SHARE: float = 0.5


@dataclass(frozen=True)
class SybilRankResult:
    """Normalised trust per address and the addresses below threshold."""

    trust: dict[str, float]
    flagged: frozenset[str]
    iterations_run: int
    node_count: int
    edge_count: int

    def factor(self, entry: FeedbackEntry, config: SybilRankConfig) -> float:
        """Weight factor for an entry (1.0 when neither end is flagged)."""
        if entry.reviewer not in self.flagged and entry.subject_id not in self.flagged:
            return 1.0
        reviewer_trust = self.trust.get(entry.reviewer, 0.0)
        normalized = min(reviewer_trust / config.trust_threshold, 1.0) if config.trust_threshold else 1.0
        return config.discount + (1.0 - config.discount) * normalized


def _build_graph(entries: Sequence[FeedbackEntry]) -> dict[str, dict[str, int]]:
    adjacency: dict[str, dict[str, int]] = {}
    for entry in entries:
        a, b = entry.reviewer, entry.subject_id
        adjacency.setdefault(a, {})
        adjacency.setdefault(b, {})
        adjacency[a][b] = adjacency[a].get(b, 0) + 1
        adjacency[b][a] = adjacency[b].get(a, 0) + 1
    return adjacency


def _select_seeds(entries: Sequence[FeedbackEntry]) -> list[str]:
    stats: dict[str, list] = {}
    for entry in entries:
        record = stats.setdefault(
            entry.reviewer, [set(), entry.timestamp, entry.timestamp, 0]
        )
        record[0].add(entry.subject_id)
        record[1] = min(record[1], entry.timestamp)
        record[2] = max(record[2], entry.timestamp)
        record[3] += 1

    scored = []
    for address, (subjects, first, last, count) in stats.items():
        span_hours = (last - first) / _MS_PER_HOUR
        score = len(subjects) * math.log1p(span_hours) * math.log1p(count)
        scored.append((-score, address))
    scored.sort()

    seed_count = max(1, math.ceil(len(scored) * _SEED_SHARE))
    return [address for _, address in scored[:seed_count]]


def compute_sybilrank(
    entries: Sequence[FeedbackEntry],
    config: SybilRankConfig,
) -> SybilRankResult:
    """Run SybilRank over the full snapshot.

    Args:
        entries: The full snapshot.
        config: SybilRank parameters.

    Returns:
        A ``SybilRankResult``. Empty snapshots yield an empty result.
    """
    active = active_entries(entries)
    adjacency = _build_graph(active)
    if not adjacency:
        return SybilRankResult({}, frozenset(), 0, 0, 0)

    seeds = _select_seeds(active)
    trust = {node: 0.0 for node in adjacency}
    if config.seed_strategy == "degree_weighted":
        total_degree = sum(len(adjacency[s]) or 1 for s in seeds)
        for seed in seeds:
            trust[seed] = (len(adjacency[seed]) or 1) / total_degree
    else:
        for seed in seeds:
            trust[seed] = 1.0 / len(seeds)

    iterations = min(config.iterations, math.ceil(math.log2(len(adjacency) + 1)))
    for _ in range(iterations):
        spread = {node: value * _LAZY_SHARE for node, value in trust.items()}
        for node in sorted(adjacency):
            current = trust[node]
            neighbours = adjacency[node]
            if current == 0.0 or not neighbours:
                continue
            total_weight = sum(neighbours.values())
            for neighbour, weight in neighbours.items():
                spread[neighbour] += current * (1.0 - _LAZY_SHARE) * weight / total_weight
        trust = spread

    peak = max(trust.values())
    if peak > 0:
        trust = {node: value / peak for node, value in trust.items()}

    flagged = frozenset(
        node for node, value in trust.items() if value < config.trust_threshold
    )
    edge_count = sum(len(n) for n in adjacency.values()) // 2
    return SybilRankResult(
        trust=trust,
        flagged=flagged,
        iterations_run=iterations,
        node_count=len(adjacency),
        edge_count=edge_count,
    )
