"""Mutual-feedback graph analysis and sybil cluster detection.

Builds the directed reviewer graph over the *whole* snapshot: an edge
``A -> B`` exists when address ``A`` left non-revoked feedback for subject
``B`` (a subject id doubles as its publisher's address). A pair is
*mutual* when both ``A -> B`` and ``B -> A`` exist, the signature of two
identities praising each other.

Connected components of the mutual-edge subgraph are sybil clusters.
Components are found with a union-find over the mutual pairs. A self-loop
(an address rating a subject with its own id) runs in both directions at
once, so its entries count as mutual edges; it never produces a pair,
though, so it cannot merge components or form a cluster on its own.

An entry matches the graph predicate when it lies on a mutual edge, when
its subject belongs to a cluster, or when its reviewer belongs to a
cluster. The last two catch secondary identities that aim at a known
ring without forming a pair themselves.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from skilltrust.core.feedback import FeedbackEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MutualPair:
    """Two addresses that rated each other, with the entries involved.

    ``address_a`` sorts before ``address_b``.
    """

    address_a: str
    address_b: str
    entry_ids: tuple[str, ...]


@dataclass(frozen=True)
class GraphAnalysis:
    """Output of graph analysis over one snapshot.

    Attributes:
        pairs: Mutual pairs, sorted by address.
        mutual_entry_ids: Ids of entries on mutual edges.
        clusters: Sybil clusters (size >= 2), largest first.
        sybil_addresses: Union of all cluster members.
    """

    pairs: tuple[MutualPair, ...]
    mutual_entry_ids: frozenset[str]
    clusters: tuple[frozenset[str], ...]
    sybil_addresses: frozenset[str]

    def matches(self, entry: FeedbackEntry) -> bool:
        """Return True if the entry matches the graph predicate."""
        return (
            entry.id in self.mutual_entry_ids
            or entry.subject_id in self.sybil_addresses
            or entry.reviewer in self.sybil_addresses
        )


# ---------------------------------------------------------------------------
# Union-find
# ---------------------------------------------------------------------------


class _DisjointSet:
    """Union-find with path halving and union by size."""

    def __init__(self) -> None:
        self._parent: dict[str, str] = {}
        self._size: dict[str, int] = {}

    def add(self, node: str) -> None:
        if node not in self._parent:
            self._parent[node] = node
            self._size[node] = 1

    def find(self, node: str) -> str:
        parent = self._parent
        while parent[node] != node:
            parent[node] = parent[parent[node]]
            node = parent[node]
        return node

    def union(self, a: str, b: str) -> None:
        root_a, root_b = self.find(a), self.find(b)
        if root_a == root_b:
            return
        if self._size[root_a] < self._size[root_b]:
            root_a, root_b = root_b, root_a
        self._parent[root_b] = root_a
        self._size[root_a] += self._size[root_b]

    def groups(self) -> list[frozenset[str]]:
        members: dict[str, set[str]] = {}
        for node in self._parent:
            members.setdefault(self.find(node), set()).add(node)
        return [frozenset(m) for m in members.values()]


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


def _rated_by(entries: Iterable[FeedbackEntry]) -> dict[str, dict[str, list[str]]]:
    """reviewer -> subject -> [entry ids], over non-revoked entries."""
    rated: dict[str, dict[str, list[str]]] = {}
    for entry in entries:
        if entry.revoked:
            continue
        rated.setdefault(entry.reviewer, {}).setdefault(
            entry.subject_id, []
        ).append(entry.id)
    return rated


def detect_mutual_pairs(entries: Sequence[FeedbackEntry]) -> list[MutualPair]:
    """Find every pair of addresses that rated each other.

    Args:
        entries: The full snapshot (all subjects).

    Returns:
        Mutual pairs sorted by ``(address_a, address_b)``.
    """
    rated = _rated_by(entries)
    pairs: dict[tuple[str, str], MutualPair] = {}

    for reviewer, subjects in rated.items():
        for subject, ids_forward in subjects.items():
            if subject == reviewer:
                continue
            back = rated.get(subject, {}).get(reviewer)
            if not back:
                continue
            key = (min(reviewer, subject), max(reviewer, subject))
            if key in pairs:
                continue
            pairs[key] = MutualPair(
                address_a=key[0],
                address_b=key[1],
                entry_ids=tuple(sorted(ids_forward + back)),
            )

    return [pairs[key] for key in sorted(pairs)]


def detect_sybil_clusters(
    entries: Sequence[FeedbackEntry],
    pairs: Sequence[MutualPair] | None = None,
) -> list[frozenset[str]]:
    """Group mutual pairs into connected components.

    Args:
        entries: The full snapshot.
        pairs: Precomputed mutual pairs, to avoid a second pass.

    Returns:
        Clusters of size >= 2, largest first, ties broken by smallest
        member.
    """
    if pairs is None:
        pairs = detect_mutual_pairs(entries)

    forest = _DisjointSet()
    for pair in pairs:
        forest.add(pair.address_a)
        forest.add(pair.address_b)
        forest.union(pair.address_a, pair.address_b)

    clusters = [group for group in forest.groups() if len(group) >= 2]
    clusters.sort(key=lambda c: (-len(c), min(c)))
    for cluster in clusters:
        logger.debug("Sybil cluster of %d addresses: %s", len(cluster), sorted(cluster))
    return clusters


def detect_self_ratings(entries: Sequence[FeedbackEntry]) -> frozenset[str]:
    """Ids of non-revoked entries whose reviewer is the subject itself."""
    return frozenset(
        entry.id
        for entry in entries
        if not entry.revoked and entry.reviewer == entry.subject_id
    )


def analyze_graph(entries: Sequence[FeedbackEntry]) -> GraphAnalysis:
    """Run mutual-pair and cluster detection over a snapshot.

    Self-ratings are included in ``mutual_entry_ids`` but take no part in
    clustering.
    """
    pairs = detect_mutual_pairs(entries)
    mutual_ids = frozenset(i for pair in pairs for i in pair.entry_ids)
    mutual_ids |= detect_self_ratings(entries)
    clusters = detect_sybil_clusters(entries, pairs)
    return GraphAnalysis(
        pairs=tuple(pairs),
        mutual_entry_ids=mutual_ids,
        clusters=tuple(clusters),
        sybil_addresses=frozenset().union(*clusters),
    )


def sybil_membership(entries: Sequence[FeedbackEntry]) -> dict[str, bool]:
    """Map every address in the snapshot to its sybil status.

    Addresses include both reviewers and subjects of non-revoked entries.
    """
    sybils = analyze_graph(entries).sybil_addresses
    addresses: set[str] = set()
    for entry in entries:
        if entry.revoked:
            continue
        addresses.add(entry.reviewer)
        addresses.add(entry.subject_id)
    return {address: address in sybils for address in sorted(addresses)}
