"""Trust scoring engine: one facade over every lens.

Wraps the pure scoring functions behind a single stateless object bound
to a ``ScoringConfig``. Each call takes a ``ScoringSnapshot`` and an
optional reference time; nothing is cached between calls, so the same
snapshot and time always produce the same result and a leaderboard is
simply ``report_all`` sorted.

Lenses:
    naive          -- unweighted mean
    hardened       -- mitigation-weighted mean (default base lens)
    credibility    -- hardened weights times reviewer credibility
    stake_weighted -- base lens times the subject's stake multiplier
    tee_weighted   -- base lens times the subject's attestation weight
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from skilltrust.config import ScoringConfig
from skilltrust.core.feedback import SubjectInfo
from skilltrust.core.mitigations.graph import detect_sybil_clusters, sybil_membership
from skilltrust.core.mitigations.temporal import now_ms
from skilltrust.core.mitigations.velocity import BehavioralShift, detect_behavioral_shift
from skilltrust.core.scoring.credibility import CredibilityResult, credibility_score
from skilltrust.core.scoring.hardened import HardenedResult, MitigationContext, hardened_score
from skilltrust.core.scoring.models import ScoreSummary
from skilltrust.core.scoring.naive import naive_score
from skilltrust.core.scoring.stake import stake_multiplier, stake_weighted
from skilltrust.core.scoring.tee import tee_multiplier, tee_weighted
from skilltrust.core.tiers import tier_description
from skilltrust.exceptions import ScoringError
from skilltrust.snapshot import ScoringSnapshot


@dataclass(frozen=True)
class SubjectReport:
    """Every lens and diagnostic for one subject.

    Attributes:
        subject_id: The subject.
        info: Registry metadata, if the snapshot has any.
        naive: Unweighted baseline.
        hardened: Hardened summary, flags and entry weights.
        credibility: Credibility summary, breakdown and annotations.
        stake: Stake-weighted summary.
        stake_multiplier: Multiplier behind ``stake``.
        tee: TEE-weighted summary.
        tee_weight: Raw attestation weight behind ``tee``.
        is_sybil: Whether the subject address sits in a sybil cluster.
        shift: Behavioral-shift diagnostic.
    """

    subject_id: str
    info: SubjectInfo | None
    naive: ScoreSummary
    hardened: HardenedResult
    credibility: CredibilityResult
    stake: ScoreSummary
    stake_multiplier: float
    tee: ScoreSummary
    tee_weight: float
    is_sybil: bool
    shift: BehavioralShift

    @property
    def delta(self) -> float:
        """Naive minus hardened score."""
        return round(self.naive.summary_value - self.hardened.summary.summary_value, 2)

    def to_dict(self) -> dict[str, Any]:
        """JSON-serialisable form of the report."""
        info = self.info
        return {
            "subject_id": self.subject_id,
            "publisher": info.publisher if info else "",
            "category": info.category if info else "",
            "naive": self.naive.to_dict(),
            "hardened": self.hardened.summary.to_dict(),
            "credibility": self.credibility.summary.to_dict(),
            "stake_weighted": self.stake.to_dict(),
            "tee_weighted": self.tee.to_dict(),
            "delta": self.delta,
            "tier_description": tier_description(self.hardened.summary.tier),
            "stake_multiplier": round(self.stake_multiplier, 4),
            "tee_weight": round(self.tee_weight, 4),
            "is_sybil": self.is_sybil,
            "sybil_fraction": round(self.hardened.sybil_fraction, 4),
            "mitigation_flags": self.hardened.flags.as_dict(),
            "entry_weights": [
                {
                    "entry_id": w.entry_id,
                    "value": w.value,
                    "composite": round(w.composite, 6),
                    "factors": {k: round(v, 6) for k, v in w.factors().items()},
                    "flags": sorted(flag.value for flag in w.flags),
                }
                for w in self.hardened.weights
            ],
            "usage_breakdown": self.credibility.breakdown.to_dict(),
            "behavioral_shift": {
                "shifted": self.shift.shifted,
                "magnitude": round(self.shift.magnitude, 2),
            },
        }


class TrustScoringEngine:
    """Stateless scoring facade.

    Args:
        config: Scoring configuration. Defaults apply when None.

    Raises:
        ConfigError: If the configuration is invalid.
    """

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self._config = config or ScoringConfig()
        self._config.validate()

    @property
    def config(self) -> ScoringConfig:
        """Return the configuration this engine was built with."""
        return self._config

    def resolve_now(self, snapshot: ScoringSnapshot, now: int | None = None) -> int:
        """Reference time: explicit ``now``, else the snapshot's, else the clock."""
        if now is not None:
            return now
        if snapshot.now is not None:
            return snapshot.now
        return now_ms()

    def context(self, snapshot: ScoringSnapshot) -> MitigationContext:
        """Snapshot-wide mitigation results under this engine's config."""
        return MitigationContext.build(snapshot.feedback, self._config.mitigations)

    # -- Individual lenses --

    def naive(self, snapshot: ScoringSnapshot, subject_id: str) -> ScoreSummary:
        return naive_score(snapshot.feedback, subject_id, self._config.strict)

    def hardened(
        self,
        snapshot: ScoringSnapshot,
        subject_id: str,
        now: int | None = None,
        context: MitigationContext | None = None,
    ) -> HardenedResult:
        return hardened_score(
            snapshot.feedback,
            subject_id,
            self.resolve_now(snapshot, now),
            self._config.mitigations,
            self._config.strict,
            context,
        )

    def credibility(
        self,
        snapshot: ScoringSnapshot,
        subject_id: str,
        now: int | None = None,
        context: MitigationContext | None = None,
    ) -> CredibilityResult:
        return credibility_score(
            snapshot.feedback,
            subject_id,
            self.resolve_now(snapshot, now),
            payment_receipts=snapshot.payment_receipts,
            active_stakers=snapshot.active_stakers,
            config=self._config.credibility,
            mitigations=self._config.mitigations,
            strict=self._config.strict,
            context=context,
        )

    def _base_summary(
        self,
        snapshot: ScoringSnapshot,
        subject_id: str,
        now: int,
        context: MitigationContext | None,
    ) -> ScoreSummary:
        if self._config.base_lens == "credibility":
            return self.credibility(snapshot, subject_id, now, context).summary
        return self.hardened(snapshot, subject_id, now, context).summary

    def stake_weighted(
        self,
        snapshot: ScoringSnapshot,
        subject_id: str,
        now: int | None = None,
        context: MitigationContext | None = None,
    ) -> ScoreSummary:
        now = self.resolve_now(snapshot, now)
        return stake_weighted(
            self._base_summary(snapshot, subject_id, now, context),
            snapshot.stakes.get(subject_id),
            snapshot.slashes_for(subject_id),
            now,
            self._config.stake,
        )

    def tee_weighted(
        self,
        snapshot: ScoringSnapshot,
        subject_id: str,
        now: int | None = None,
        context: MitigationContext | None = None,
    ) -> ScoreSummary:
        now = self.resolve_now(snapshot, now)
        return tee_weighted(
            self._base_summary(snapshot, subject_id, now, context),
            snapshot.tee.get(subject_id),
            self._config.tee,
        )

    # -- Sybil membership --

    def sybil_clusters(self, snapshot: ScoringSnapshot) -> list[frozenset[str]]:
        return detect_sybil_clusters(snapshot.feedback)

    def sybil_membership(self, snapshot: ScoringSnapshot) -> dict[str, bool]:
        return sybil_membership(snapshot.feedback)

    # -- Reports --

    def report(
        self,
        snapshot: ScoringSnapshot,
        subject_id: str,
        now: int | None = None,
        context: MitigationContext | None = None,
    ) -> SubjectReport:
        """Compute every lens and diagnostic for one subject.

        Raises:
            ScoringError: If the snapshot has neither feedback nor
                metadata for ``subject_id``.
        """
        if not snapshot.has_subject(subject_id):
            raise ScoringError(f"Unknown subject: {subject_id}")
        now = self.resolve_now(snapshot, now)
        if context is None:
            context = self.context(snapshot)

        hardened = self.hardened(snapshot, subject_id, now, context)
        credibility = self.credibility(snapshot, subject_id, now, context)
        base = credibility.summary if self._config.base_lens == "credibility" else hardened.summary

        stake_info = snapshot.stakes.get(subject_id)
        slashes = snapshot.slashes_for(subject_id)
        tee_state = snapshot.tee.get(subject_id)
        subject_entries = snapshot.entries_for(subject_id)

        return SubjectReport(
            subject_id=subject_id,
            info=snapshot.subjects.get(subject_id),
            naive=self.naive(snapshot, subject_id),
            hardened=hardened,
            credibility=credibility,
            stake=stake_weighted(base, stake_info, slashes, now, self._config.stake),
            stake_multiplier=stake_multiplier(stake_info, slashes, now, self._config.stake),
            tee=tee_weighted(base, tee_state, self._config.tee),
            tee_weight=tee_multiplier(tee_state, self._config.tee),
            is_sybil=subject_id in context.graph.sybil_addresses,
            shift=detect_behavioral_shift(subject_entries),
        )

    def report_all(
        self,
        snapshot: ScoringSnapshot,
        now: int | None = None,
    ) -> list[SubjectReport]:
        """Report on every subject, sharing one mitigation context."""
        now = self.resolve_now(snapshot, now)
        context = self.context(snapshot)
        return [
            self.report(snapshot, subject_id, now, context)
            for subject_id in snapshot.subject_ids()
        ]

    def leaderboard(
        self,
        snapshot: ScoringSnapshot,
        limit: int | None = None,
        now: int | None = None,
    ) -> list[SubjectReport]:
        """Subjects ranked by hardened score (descending, ties by id)."""
        reports = sorted(
            self.report_all(snapshot, now),
            key=lambda r: (-r.hardened.summary.summary_value, r.subject_id),
        )
        if limit is not None:
            reports = reports[:limit]
        return reports
