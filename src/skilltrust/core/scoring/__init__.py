"""Scoring engines: one lens per module, all pure over a feedback snapshot.

Submodules:
    models       -- ScoreSummary, CredibilityTier, StakeInfo, SlashRecord, TEEState
    naive        -- unweighted mean baseline
    hardened     -- mitigation-weighted mean, MitigationContext, compare
    credibility  -- usage-weighted mean and tier breakdown
    stake        -- subject-level stake multiplier
    tee          -- subject-level attestation multiplier
"""

from skilltrust.core.scoring.credibility import (
    AnnotatedEntry,
    CredibilityConfig,
    CredibilityResult,
    TierBreakdown,
    TierStats,
    classify_reviewer,
    credibility_score,
)
from skilltrust.core.scoring.hardened import (
    HardenedResult,
    MitigationContext,
    ScoreComparison,
    compare,
    compute_entry_weights,
    hardened_score,
)
from skilltrust.core.scoring.models import (
    CredibilityTier,
    ScoreSummary,
    SlashRecord,
    StakeInfo,
    StakeTier,
    TEEState,
    TEEStatus,
)
from skilltrust.core.scoring.naive import naive_score
from skilltrust.core.scoring.stake import StakeConfig, stake_multiplier, stake_weighted
from skilltrust.core.scoring.tee import TEEConfig, tee_multiplier, tee_weighted

__all__ = [
    "AnnotatedEntry",
    "CredibilityConfig",
    "CredibilityResult",
    "CredibilityTier",
    "HardenedResult",
    "MitigationContext",
    "ScoreComparison",
    "ScoreSummary",
    "SlashRecord",
    "StakeConfig",
    "StakeInfo",
    "StakeTier",
    "TEEConfig",
    "TEEState",
    "TEEStatus",
    "TierBreakdown",
    "TierStats",
    "classify_reviewer",
    "compare",
    "compute_entry_weights",
    "credibility_score",
    "hardened_score",
    "naive_score",
    "stake_multiplier",
    "stake_weighted",
    "tee_multiplier",
    "tee_weighted",
]
