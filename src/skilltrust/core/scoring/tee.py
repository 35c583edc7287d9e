"""TEE-weighted lens: a subject-level multiplier from hardware attestation.

    status                       weight
    unregistered                 1.0
    verified, tier 3 active      state.trust_weight (default 1.5)
    verified, no tier 3 / stale  1.0
    mismatch (code hash)         0.9
    failed                       0.8

The weight is dampened before it touches the score, and verified tier-3
subjects with at least one entry receive a flat boost:

    score = base * (1 + (w - 1) * dampening) + tier3_boost
"""

from __future__ import annotations

from dataclasses import dataclass

from skilltrust.core.mitigations.config import _check_fraction, _check_non_negative
from skilltrust.core.scoring.models import ScoreSummary, TEEState, TEEStatus


@dataclass(frozen=True)
class TEEConfig:
    """Attestation weights and score dampening."""

    mismatch_weight: float = 0.9
    failed_weight: float = 0.8
    dampening: float = 0.3
    tier3_score_boost: float = 5.0

    def validate(self) -> None:
        for name in ("mismatch_weight", "failed_weight", "dampening"):
            _check_fraction("tee", name, getattr(self, name))
        _check_non_negative("tee", "tier3_score_boost", self.tier3_score_boost)


def _verified_tier3(state: TEEState) -> bool:
    return state.status is TEEStatus.VERIFIED and state.tier3_active


def tee_multiplier(state: TEEState | None, config: TEEConfig | None = None) -> float:
    """Raw attestation weight for a subject (before dampening)."""
    config = config or TEEConfig()
    if state is None:
        return 1.0
    if _verified_tier3(state):
        return state.trust_weight
    if state.status is TEEStatus.MISMATCH:
        return config.mismatch_weight
    if state.status is TEEStatus.FAILED:
        return config.failed_weight
    return 1.0


def tee_weighted(
    base: ScoreSummary,
    state: TEEState | None,
    config: TEEConfig | None = None,
) -> ScoreSummary:
    """Apply the dampened attestation weight to a base summary."""
    config = config or TEEConfig()
    weight = tee_multiplier(state, config)
    value = base.summary_value * (1.0 + (weight - 1.0) * config.dampening)
    if state is not None and _verified_tier3(state) and base.feedback_count:
        value += config.tier3_score_boost
    return ScoreSummary.build(base.subject_id, value, base.feedback_count)
