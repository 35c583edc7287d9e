"""Scoring data models: summaries and the external trust-signal records.

- ``ScoreSummary`` -- the output of every lens (naive, hardened,
  credibility, stake, TEE).
- ``CredibilityTier`` -- reviewer classification by payment and stake.
- ``StakeInfo`` / ``SlashRecord`` -- a subject's own stake and its slashes.
- ``TEEState`` -- hardware-attestation state for a subject.

The signal records are read-only snapshots owned by external ledger
components; the engines never mutate them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from skilltrust.core.tiers import (
    AccessDecision,
    Tier,
    clamp_score,
    score_to_tier,
    tier_to_access,
)

SUMMARY_PRECISION: int = 2


# ---------------------------------------------------------------------------
# ScoreSummary
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScoreSummary:
    """Score, tier and access decision for one subject under one lens.

    Attributes:
        subject_id: The subject scored.
        summary_value: Score on the 0-100 scale, rounded to two decimals.
        tier: Letter-grade tier of ``summary_value``.
        feedback_count: Number of non-revoked entries considered.
        access_decision: Gate derived from the tier.
    """

    subject_id: str
    summary_value: float
    tier: Tier
    feedback_count: int
    access_decision: AccessDecision

    @classmethod
    def build(cls, subject_id: str, value: float, feedback_count: int) -> ScoreSummary:
        """Clamp, round and classify a raw aggregate."""
        rounded = round(clamp_score(value), SUMMARY_PRECISION)
        tier = score_to_tier(rounded)
        return cls(
            subject_id=subject_id,
            summary_value=rounded,
            tier=tier,
            feedback_count=feedback_count,
            access_decision=tier_to_access(tier),
        )

    @classmethod
    def empty(cls, subject_id: str) -> ScoreSummary:
        """Summary for a subject with no usable feedback: 0, tier C."""
        return cls.build(subject_id, 0.0, 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject_id": self.subject_id,
            "summary_value": self.summary_value,
            "tier": self.tier.name,
            "feedback_count": self.feedback_count,
            "access_decision": self.access_decision.value,
        }


# ---------------------------------------------------------------------------
# Credibility
# ---------------------------------------------------------------------------


class CredibilityTier(str, Enum):
    """Reviewer credibility by payment history and stake."""

    PAID_AND_STAKED = "paid_and_staked"
    PAID_UNSTAKED = "paid_unstaked"
    UNPAID_UNSTAKED = "unpaid_unstaked"


# ---------------------------------------------------------------------------
# Stake
# ---------------------------------------------------------------------------


class StakeTier(str, Enum):
    """Size bracket of a subject's own stake."""

    NONE = "none"
    LOW = "low"
    MID = "mid"
    HIGH = "high"


@dataclass(frozen=True)
class StakeInfo:
    """A subject's stake position.

    Attributes:
        stake_tier: Bracket of the staked amount.
        active: Whether the stake is currently locked.
        last_slash_timestamp: Time of the most recent slash (ms), 0 if never.
        staked_at: When the stake was first locked (ms), 0 if unknown.
        total_stake: Staked amount, informational.
    """

    stake_tier: StakeTier = StakeTier.NONE
    active: bool = False
    last_slash_timestamp: int = 0
    staked_at: int = 0
    total_stake: float = 0.0


@dataclass(frozen=True)
class SlashRecord:
    """One slashing event against a subject's stake."""

    subject_id: str
    timestamp: int
    amount: float = 0.0
    reason: str = ""


# ---------------------------------------------------------------------------
# TEE attestation
# ---------------------------------------------------------------------------


class TEEStatus(str, Enum):
    """Outcome of the latest hardware-attestation check."""

    VERIFIED = "verified"
    STALE = "stale"
    MISMATCH = "mismatch"
    FAILED = "failed"
    UNREGISTERED = "unregistered"


@dataclass(frozen=True)
class TEEState:
    """Attestation state of a subject.

    Attributes:
        status: Latest verification outcome.
        trust_weight: Weight granted to a verified, tier-3 subject.
        tier3_active: Whether tier-3 (hardware-backed) verification is on.
    """

    status: TEEStatus = TEEStatus.UNREGISTERED
    trust_weight: float = 1.5
    tier3_active: bool = False
