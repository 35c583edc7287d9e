"""Hardened scoring: the weighted mean after every enabled mitigation.

Weight Composition:
    w(e) = decay * sybil * velocity * new_submitter * anomaly
           * sybilrank * jaccard * correlation

Every factor is 1.0 unless the entry matched that mitigation, so the
product is order-independent and each factor can be inspected on its own
through ``EntryWeight``.

Aggregate:
    mean = sum(v * w) / sum(w)                  (0 when sum(w) == 0)
    hardened = mean * (1 - f * (1 - graph_discount))

where ``f`` is the share of the subject's entries matching the graph
predicate. A discount applied to *every* entry of a subject cancels out of
a weighted mean, so without the second step a subject rated only by its
own ring would keep its inflated score.

Mitigations that need the whole snapshot (graph, new submitters,
SybilRank, Jaccard, correlation) are computed once into a
``MitigationContext`` and shared across subjects.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from skilltrust.core.feedback import FeedbackEntry, active_entries, entry_value, first_seen
from skilltrust.core.mitigations.config import MitigationConfig
from skilltrust.core.mitigations.correlation import (
    CorrelationResult,
    detect_temporal_correlation,
)
from skilltrust.core.mitigations.graph import GraphAnalysis, analyze_graph
from skilltrust.core.mitigations.jaccard import JaccardResult, detect_jaccard_clusters
from skilltrust.core.mitigations.models import EntryWeight, MitigationFlag, MitigationFlags
from skilltrust.core.mitigations.sybilrank import SybilRankResult, compute_sybilrank
from skilltrust.core.mitigations.temporal import decay_weight, is_decayed, new_submitters
from skilltrust.core.mitigations.velocity import (
    detect_anomaly_bursts,
    detect_velocity_bursts,
)
from skilltrust.core.scoring.models import ScoreSummary
from skilltrust.core.scoring.naive import naive_score


# ---------------------------------------------------------------------------
# Snapshot-wide context
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MitigationContext:
    """Snapshot-wide mitigation results, computed once per snapshot.

    Attributes:
        graph: Mutual pairs and sybil clusters.
        first_seen: Reviewer -> earliest non-revoked timestamp.
        new_submitters: Reviewers in the most recent first-seen share.
        sybilrank: SybilRank result, or None when disabled.
        jaccard: Jaccard clusters, or None when disabled.
        correlation: Timing correlation, or None when disabled.
    """

    graph: GraphAnalysis
    first_seen: dict[str, int]
    new_submitters: frozenset[str]
    sybilrank: SybilRankResult | None = None
    jaccard: JaccardResult | None = None
    correlation: CorrelationResult | None = None

    @classmethod
    def build(
        cls,
        entries: Sequence[FeedbackEntry],
        config: MitigationConfig,
    ) -> MitigationContext:
        """Run every snapshot-wide detector that ``config`` enables."""
        seen = first_seen(entries)
        return cls(
            graph=analyze_graph(entries),
            first_seen=seen,
            new_submitters=new_submitters(seen, config.new_submitter.recent_fraction),
            sybilrank=(
                compute_sybilrank(entries, config.sybilrank)
                if config.sybilrank.enabled else None
            ),
            jaccard=(
                detect_jaccard_clusters(entries, config.jaccard)
                if config.jaccard.enabled else None
            ),
            correlation=(
                detect_temporal_correlation(entries, config.correlation)
                if config.correlation.enabled else None
            ),
        )


# ---------------------------------------------------------------------------
# Per-entry weights
# ---------------------------------------------------------------------------


def compute_entry_weights(
    subject_entries: Sequence[FeedbackEntry],
    context: MitigationContext,
    config: MitigationConfig,
    now: int,
    strict: bool = False,
) -> list[EntryWeight]:
    """Compute every weight factor for one subject's non-revoked entries.

    Args:
        subject_entries: Entries of a single subject.
        context: Snapshot-wide mitigation results.
        config: Mitigation settings.
        now: Reference time (ms) for decay.
        strict: Raise on out-of-range values instead of clamping.

    Returns:
        One ``EntryWeight`` per non-revoked entry, in input order.
    """
    active = active_entries(subject_entries)

    velocity_ids: set[str] = set()
    if config.velocity.enabled:
        velocity_ids = detect_velocity_bursts(
            active, config.velocity.max_in_window, config.velocity.window_ms
        )
    anomaly_ids: set[str] = set()
    if config.anomaly.enabled:
        anomaly_ids = detect_anomaly_bursts(
            active, context.first_seen,
            config.anomaly.max_new_in_window, config.anomaly.window_ms,
        )

    weights: list[EntryWeight] = []
    for entry in active:
        factors: dict[str, float] = {}
        flags: set[MitigationFlag] = set()

        if config.temporal_decay.enabled:
            decay = decay_weight(entry.timestamp, now, config.temporal_decay.half_life_ms)
            factors["decay"] = decay
            if is_decayed(decay):
                flags.add(MitigationFlag.TEMPORAL_DECAY)

        if config.graph.enabled and context.graph.matches(entry):
            factors["sybil"] = config.graph.discount
            flags.add(MitigationFlag.SYBIL_MUTUAL)

        if entry.id in velocity_ids:
            factors["velocity"] = config.velocity.discount
            flags.add(MitigationFlag.VELOCITY_BURST)

        if config.new_submitter.enabled and entry.reviewer in context.new_submitters:
            factors["new_submitter"] = config.new_submitter.discount
            flags.add(MitigationFlag.NEW_SUBMITTER)

        if entry.id in anomaly_ids:
            factors["anomaly"] = config.anomaly.discount
            flags.add(MitigationFlag.ANOMALY_BURST)

        if context.sybilrank is not None:
            factor = context.sybilrank.factor(entry, config.sybilrank)
            if factor < 1.0:
                factors["sybilrank"] = factor
                flags.add(MitigationFlag.SYBILRANK_LOW_TRUST)

        if context.jaccard is not None and entry.reviewer in context.jaccard.flagged:
            factors["jaccard"] = config.jaccard.discount
            flags.add(MitigationFlag.JACCARD_COORDINATED)

        if context.correlation is not None and entry.reviewer in context.correlation.flagged:
            factors["correlation"] = config.correlation.discount
            flags.add(MitigationFlag.TEMPORAL_CORRELATION)

        weights.append(EntryWeight(
            entry_id=entry.id,
            value=entry_value(entry, strict),
            flags=frozenset(flags),
            **factors,
        ))
    return weights


def sybil_penalty(weights: Sequence[EntryWeight], config: MitigationConfig) -> float:
    """Multiplier ``1 - f * (1 - graph_discount)`` for a subject's mean."""
    if not weights or not config.graph.enabled:
        return 1.0
    flagged = sum(1 for w in weights if MitigationFlag.SYBIL_MUTUAL in w.flags)
    fraction = flagged / len(weights)
    return 1.0 - fraction * (1.0 - config.graph.discount)


def weighted_mean(values_and_weights: Sequence[tuple[float, float]]) -> float:
    """Weighted mean, 0 when the total weight is not positive."""
    total = sum(w for _, w in values_and_weights)
    if total <= 0:
        return 0.0
    return sum(v * w for v, w in values_and_weights) / total


# ---------------------------------------------------------------------------
# Hardened score
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HardenedResult:
    """Hardened summary plus the diagnostics that explain it.

    Attributes:
        summary: The hardened ``ScoreSummary``.
        flags: Per-predicate counters for the subject.
        weights: Per-entry weight factors.
        sybil_fraction: Share of entries matching the graph predicate.
    """

    summary: ScoreSummary
    flags: MitigationFlags
    weights: tuple[EntryWeight, ...]
    sybil_fraction: float


def hardened_from_weights(
    subject_id: str,
    weights: Sequence[EntryWeight],
    config: MitigationConfig,
) -> HardenedResult:
    """Aggregate precomputed entry weights into a hardened result."""
    if not weights:
        return HardenedResult(ScoreSummary.empty(subject_id), MitigationFlags(), (), 0.0)

    mean = weighted_mean([(w.value, w.composite) for w in weights])
    penalty = sybil_penalty(weights, config)
    flagged = sum(1 for w in weights if MitigationFlag.SYBIL_MUTUAL in w.flags)

    return HardenedResult(
        summary=ScoreSummary.build(subject_id, mean * penalty, len(weights)),
        flags=MitigationFlags.from_weights(weights),
        weights=tuple(weights),
        sybil_fraction=flagged / len(weights),
    )


def hardened_score(
    entries: Sequence[FeedbackEntry],
    subject_id: str,
    now: int,
    config: MitigationConfig | None = None,
    strict: bool = False,
    context: MitigationContext | None = None,
) -> HardenedResult:
    """Compute the hardened score for one subject.

    Args:
        entries: The full snapshot (graph and first-seen analysis span
            every subject).
        subject_id: The subject to score.
        now: Reference time (ms).
        config: Mitigation settings; defaults when None.
        strict: Raise on out-of-range values instead of clamping.
        context: Precomputed snapshot-wide results, to share across
            subjects.

    Returns:
        A ``HardenedResult``.
    """
    config = config or MitigationConfig()
    if context is None:
        context = MitigationContext.build(entries, config)
    subject_entries = [e for e in entries if e.subject_id == subject_id]
    weights = compute_entry_weights(subject_entries, context, config, now, strict)
    return hardened_from_weights(subject_id, weights, config)


@dataclass(frozen=True)
class ScoreComparison:
    """Naive vs hardened score for one subject."""

    naive: ScoreSummary
    hardened: ScoreSummary

    @property
    def delta(self) -> float:
        """How many points of manipulation the mitigations removed."""
        return round(self.naive.summary_value - self.hardened.summary_value, 2)


def compare(
    entries: Sequence[FeedbackEntry],
    subject_id: str,
    now: int,
    config: MitigationConfig | None = None,
    strict: bool = False,
) -> ScoreComparison:
    """Score a subject both ways."""
    return ScoreComparison(
        naive=naive_score(entries, subject_id, strict),
        hardened=hardened_score(entries, subject_id, now, config, strict).summary,
    )
