"""Credibility (usage-weighted) scoring.

Each reviewer is classified per subject by two external signals: the
number of payment receipts it holds for the subject, and whether it is in
the active-stake set.

    staked and >= 1 receipt  -> PAID_AND_STAKED   (5-10x)
    >= 1 receipt, unstaked   -> PAID_UNSTAKED     (1-2x)
    otherwise                -> UNPAID_UNSTAKED   (0.1x)

Inside a range the multiplier grows with receipts:

    m = min + (max - min) * min(1, receipts / receipt_saturation)

The final weight of an entry is its hardened composite weight times its
credibility multiplier. The sybil-fraction penalty of the hardened engine
is applied to the resulting mean as well, so buying credibility does not
launder a ring.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from skilltrust.core.feedback import FeedbackEntry, active_entries
from skilltrust.core.mitigations.config import MitigationConfig
from skilltrust.core.mitigations.models import EntryWeight
from skilltrust.core.scoring.hardened import (
    MitigationContext,
    compute_entry_weights,
    sybil_penalty,
    weighted_mean,
)
from skilltrust.core.scoring.models import CredibilityTier, ScoreSummary
from skilltrust.exceptions import ConfigError

PaymentReceipts = Mapping[tuple[str, str], int]


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CredibilityConfig:
    """Multiplier ranges per credibility tier."""

    paid_staked_min: float = 5.0
    paid_staked_max: float = 10.0
    paid_unstaked_min: float = 1.0
    paid_unstaked_max: float = 2.0
    unpaid_weight: float = 0.1
    receipt_saturation: int = 10

    def validate(self) -> None:
        """Raise ConfigError on non-positive or inverted ranges."""
        for name in (
            "paid_staked_min", "paid_staked_max",
            "paid_unstaked_min", "paid_unstaked_max",
            "unpaid_weight", "receipt_saturation",
        ):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or value <= 0:
                raise ConfigError(f"credibility.{name} must be positive, got {value}")
        if self.paid_staked_min > self.paid_staked_max:
            raise ConfigError("credibility.paid_staked_min exceeds paid_staked_max")
        if self.paid_unstaked_min > self.paid_unstaked_max:
            raise ConfigError("credibility.paid_unstaked_min exceeds paid_unstaked_max")

    def multiplier(self, tier: CredibilityTier, receipts: int) -> float:
        """Multiplier for a tier at a given receipt count."""
        if tier is CredibilityTier.UNPAID_UNSTAKED:
            return self.unpaid_weight
        if tier is CredibilityTier.PAID_AND_STAKED:
            low, high = self.paid_staked_min, self.paid_staked_max
        else:
            low, high = self.paid_unstaked_min, self.paid_unstaked_max
        saturation = min(1.0, max(0, receipts) / self.receipt_saturation)
        return low + (high - low) * saturation


def classify_reviewer(receipts: int, staked: bool) -> CredibilityTier:
    """Credibility tier from a receipt count and stake status."""
    if receipts > 0 and staked:
        return CredibilityTier.PAID_AND_STAKED
    if receipts > 0:
        return CredibilityTier.PAID_UNSTAKED
    return CredibilityTier.UNPAID_UNSTAKED


# ---------------------------------------------------------------------------
# Annotations and breakdown
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnnotatedEntry:
    """Credibility details for one entry.

    ``verified_user`` is the badge shown next to feedback from reviewers
    holding at least one payment receipt for the subject.
    """

    entry_id: str
    reviewer: str
    value: float
    tier: CredibilityTier
    multiplier: float
    receipt_count: int
    staked: bool
    verified_user: bool


@dataclass(frozen=True)
class TierStats:
    count: int = 0
    avg_multiplier: float = 0.0
    avg_value: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "avg_multiplier": round(self.avg_multiplier, 4),
            "avg_value": round(self.avg_value, 2),
        }


@dataclass(frozen=True)
class TierBreakdown:
    """Per-tier statistics for a subject's feedback.

    Attributes:
        tiers: Stats for every credibility tier (zeros when absent).
        total_verified: Entries from reviewers holding a receipt.
        total_unverified: Entries from reviewers without one.
        weight_differential: Highest over lowest average multiplier among
            the tiers present; 1.0 when fewer than two are present.
    """

    tiers: dict[CredibilityTier, TierStats] = field(default_factory=dict)
    total_verified: int = 0
    total_unverified: int = 0
    weight_differential: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "tiers": {tier.value: stats.to_dict() for tier, stats in self.tiers.items()},
            "total_verified": self.total_verified,
            "total_unverified": self.total_unverified,
            "weight_differential": round(self.weight_differential, 4),
        }


def annotate_entries(
    subject_entries: Sequence[FeedbackEntry],
    weights: Sequence[EntryWeight],
    payment_receipts: PaymentReceipts,
    active_stakers: Collection[str],
    config: CredibilityConfig,
) -> list[AnnotatedEntry]:
    """Attach a credibility tier and multiplier to each weighted entry."""
    by_id = {e.id: e for e in subject_entries}
    annotated = []
    for weight in weights:
        entry = by_id[weight.entry_id]
        receipts = payment_receipts.get((entry.subject_id, entry.reviewer), 0)
        staked = entry.reviewer in active_stakers
        tier = classify_reviewer(receipts, staked)
        annotated.append(AnnotatedEntry(
            entry_id=entry.id,
            reviewer=entry.reviewer,
            value=weight.value,
            tier=tier,
            multiplier=config.multiplier(tier, receipts),
            receipt_count=receipts,
            staked=staked,
            verified_user=receipts > 0,
        ))
    return annotated


def tier_breakdown(annotated: Sequence[AnnotatedEntry]) -> TierBreakdown:
    """Summarise annotated entries per credibility tier."""
    tiers: dict[CredibilityTier, TierStats] = {}
    present: list[float] = []
    for tier in CredibilityTier:
        members = [a for a in annotated if a.tier is tier]
        if not members:
            tiers[tier] = TierStats()
            continue
        stats = TierStats(
            count=len(members),
            avg_multiplier=sum(a.multiplier for a in members) / len(members),
            avg_value=sum(a.value for a in members) / len(members),
        )
        tiers[tier] = stats
        present.append(stats.avg_multiplier)

    differential = max(present) / min(present) if len(present) >= 2 else 1.0
    verified = sum(1 for a in annotated if a.verified_user)
    return TierBreakdown(
        tiers=tiers,
        total_verified=verified,
        total_unverified=len(annotated) - verified,
        weight_differential=differential,
    )


# ---------------------------------------------------------------------------
# Credibility score
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CredibilityResult:
    summary: ScoreSummary
    breakdown: TierBreakdown
    entries: tuple[AnnotatedEntry, ...]


def credibility_score(
    entries: Sequence[FeedbackEntry],
    subject_id: str,
    now: int,
    payment_receipts: PaymentReceipts | None = None,
    active_stakers: Collection[str] | None = None,
    config: CredibilityConfig | None = None,
    mitigations: MitigationConfig | None = None,
    strict: bool = False,
    context: MitigationContext | None = None,
) -> CredibilityResult:
    """Compute the usage-weighted score for one subject.

    Missing receipts or stake data classify a reviewer as unpaid and
    unstaked; nothing raises on absent keys.

    Args:
        entries: The full snapshot.
        subject_id: The subject to score.
        now: Reference time (ms).
        payment_receipts: ``(subject, reviewer) -> receipt count``.
        active_stakers: Addresses with an active stake.
        config: Credibility multipliers; defaults when None.
        mitigations: Mitigation settings; defaults when None.
        strict: Raise on out-of-range values instead of clamping.
        context: Precomputed snapshot-wide mitigation results.

    Returns:
        A ``CredibilityResult``.
    """
    config = config or CredibilityConfig()
    mitigations = mitigations or MitigationConfig()
    payment_receipts = payment_receipts or {}
    active_stakers = active_stakers or frozenset()
    if context is None:
        context = MitigationContext.build(entries, mitigations)

    subject_entries = active_entries(e for e in entries if e.subject_id == subject_id)
    weights = compute_entry_weights(subject_entries, context, mitigations, now, strict)
    if not weights:
        return CredibilityResult(ScoreSummary.empty(subject_id), tier_breakdown([]), ())

    annotated = annotate_entries(
        subject_entries, weights, payment_receipts, active_stakers, config
    )
    mean = weighted_mean([
        (w.value, w.composite * a.multiplier) for w, a in zip(weights, annotated)
    ])
    value = mean * sybil_penalty(weights, mitigations)

    return CredibilityResult(
        summary=ScoreSummary.build(subject_id, value, len(weights)),
        breakdown=tier_breakdown(annotated),
        entries=tuple(annotated),
    )
