"""Behavioral fingerprinting via Jaccard similarity of review targets.

Reviewers operated by one actor tend to rate the same subjects with the
same values. For every pair of reviewers that each rated at least
``min_subjects_reviewed`` subjects:

    combined = 0.6 * jaccard(targets_a, targets_b) + 0.4 * value_similarity

where ``value_similarity`` is ``1 - mean(|avg_a - avg_b| / 100)`` over the
subjects both rated. Pairs whose target overlap and combined similarity
both reach ``similarity_threshold`` are linked; connected components of
at least ``min_cluster_size`` reviewers are flagged.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass

from skilltrust.core.feedback import FeedbackEntry, active_entries
from skilltrust.core.mitigations.config import JaccardConfig

_TARGET_WEIGHT: float = 0.6
_VALUE_WEIGHT: float = 0.4


@dataclass(frozen=True)
class JaccardCluster:
    """A group of reviewers with near-identical review behaviour."""

    addresses: tuple[str, ...]
    common_subjects: tuple[str, ...]
    avg_similarity: float


@dataclass(frozen=True)
class JaccardResult:
    clusters: tuple[JaccardCluster, ...]
    flagged: frozenset[str]


def jaccard(a: set[str], b: set[str]) -> float:
    """Jaccard coefficient of two sets (0 for two empty sets)."""
    union = len(a | b)
    return len(a & b) / union if union else 0.0


def _value_similarity(
    values_a: dict[str, list[int]],
    values_b: dict[str, list[int]],
) -> float:
    common = sorted(set(values_a) & set(values_b))
    if not common:
        return 0.0
    total = 0.0
    for subject in common:
        mean_a = sum(values_a[subject]) / len(values_a[subject])
        mean_b = sum(values_b[subject]) / len(values_b[subject])
        total += abs(mean_a - mean_b) / 100.0
    return 1.0 - total / len(common)


def detect_jaccard_clusters(
    entries: Sequence[FeedbackEntry],
    config: JaccardConfig,
) -> JaccardResult:
    """Find clusters of reviewers with overlapping targets and values.

    Args:
        entries: The full snapshot.
        config: Jaccard parameters.

    Returns:
        The clusters found and the union of their members.
    """
    profiles: dict[str, dict[str, list[int]]] = {}
    for entry in active_entries(entries):
        profiles.setdefault(entry.reviewer, {}).setdefault(
            entry.subject_id, []
        ).append(entry.value)

    candidates = sorted(
        address for address, values in profiles.items()
        if len(values) >= config.min_subjects_reviewed
    )

    links: dict[str, set[str]] = {}
    for i, a in enumerate(candidates):
        targets_a = set(profiles[a])
        for b in candidates[i + 1:]:
            overlap = jaccard(targets_a, set(profiles[b]))
            if overlap < config.similarity_threshold:
                continue
            combined = (
                _TARGET_WEIGHT * overlap
                + _VALUE_WEIGHT * _value_similarity(profiles[a], profiles[b])
            )
            if combined >= config.similarity_threshold:
                links.setdefault(a, set()).add(b)
                links.setdefault(b, set()).add(a)

    clusters: list[JaccardCluster] = []
    visited: set[str] = set()
    for start in sorted(links):
        if start in visited:
            continue
        component: set[str] = set()
        queue = deque([start])
        while queue:
            node = queue.popleft()
            if node in visited:
                continue
            visited.add(node)
            component.add(node)
            queue.extend(n for n in links[node] if n not in visited)
        if len(component) < config.min_cluster_size:
            continue

        members = sorted(component)
        common = set(profiles[members[0]])
        for member in members[1:]:
            common &= set(profiles[member])
        pair_sims = [
            jaccard(set(profiles[x]), set(profiles[y]))
            for i, x in enumerate(members)
            for y in members[i + 1:]
        ]
        clusters.append(JaccardCluster(
            addresses=tuple(members),
            common_subjects=tuple(sorted(common)),
            avg_similarity=sum(pair_sims) / len(pair_sims) if pair_sims else 0.0,
        ))

    flagged = frozenset(a for cluster in clusters for a in cluster.addresses)
    return JaccardResult(clusters=tuple(clusters), flagged=flagged)
