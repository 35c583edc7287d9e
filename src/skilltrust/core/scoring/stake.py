"""Stake-weighted lens: a subject-level multiplier from the subject's stake.

Stake Multiplier Model:
    M = tier_base * slash_recovery * (1 + tenure_bonus)

    tier_base       NONE 1.00, LOW 1.05, MID 1.10, HIGH 1.15 (1.0 if inactive)
    slash_recovery  floor + (1 - floor) * age / cooldown   while age < cooldown
                    then * repeat_penalty ** (slashes in cooldown - 1)
                    1.0 once the cooldown has passed
    tenure_bonus    bonus_max * min(1, tenure / tenure_target)

``age`` is the time since the most recent slash; ``tenure`` is measured
from the later of ``staked_at`` and the most recent slash, so a slash
resets accumulated tenure.

The multiplier is applied to a base summary (hardened by default) and the
result is re-clamped and re-tiered. It is never compounded with the TEE
lens.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from skilltrust.core.mitigations.config import (
    DAY_MS,
    _check_fraction,
    _check_non_negative,
    _check_positive,
)
from skilltrust.core.scoring.models import ScoreSummary, SlashRecord, StakeInfo, StakeTier


@dataclass(frozen=True)
class StakeConfig:
    """Stake multiplier curve."""

    none_multiplier: float = 1.0
    low_multiplier: float = 1.05
    mid_multiplier: float = 1.10
    high_multiplier: float = 1.15
    slash_cooldown_ms: int = 30 * DAY_MS
    slash_floor: float = 0.5
    repeat_slash_penalty: float = 0.8
    tenure_target_ms: int = 180 * DAY_MS
    tenure_bonus_max: float = 0.05

    def validate(self) -> None:
        """Raise ConfigError on out-of-range values."""
        for name in (
            "none_multiplier", "low_multiplier", "mid_multiplier", "high_multiplier",
            "slash_cooldown_ms", "tenure_target_ms",
        ):
            _check_positive("stake", name, getattr(self, name))
        for name in ("slash_floor", "repeat_slash_penalty"):
            _check_fraction("stake", name, getattr(self, name))
        _check_non_negative("stake", "tenure_bonus_max", self.tenure_bonus_max)

    def tier_base(self, tier: StakeTier) -> float:
        return {
            StakeTier.NONE: self.none_multiplier,
            StakeTier.LOW: self.low_multiplier,
            StakeTier.MID: self.mid_multiplier,
            StakeTier.HIGH: self.high_multiplier,
        }[tier]


def latest_slash(info: StakeInfo | None, slashes: Sequence[SlashRecord]) -> int:
    """Timestamp of the most recent slash, 0 if never slashed."""
    candidates = [s.timestamp for s in slashes]
    if info is not None:
        candidates.append(info.last_slash_timestamp)
    return max(candidates, default=0)


def slash_recovery(
    last_slash: int,
    slashes: Sequence[SlashRecord],
    now: int,
    config: StakeConfig,
) -> float:
    """Suppression factor in [0, 1] from recent slashes."""
    if last_slash <= 0:
        return 1.0
    age = max(0, now - last_slash)
    if age >= config.slash_cooldown_ms:
        return 1.0

    recovery = config.slash_floor + (1.0 - config.slash_floor) * (age / config.slash_cooldown_ms)
    in_cooldown = sum(
        1 for s in slashes if 0 <= now - s.timestamp < config.slash_cooldown_ms
    )
    if in_cooldown > 1:
        recovery *= config.repeat_slash_penalty ** (in_cooldown - 1)
    return recovery


def tenure_bonus(
    info: StakeInfo | None,
    last_slash: int,
    now: int,
    config: StakeConfig,
) -> float:
    """Bonus in [0, tenure_bonus_max] for clean, active tenure."""
    if info is None or not info.active:
        return 0.0
    start = max(info.staked_at, last_slash)
    if start <= 0:
        return 0.0
    tenure = max(0, now - start)
    return config.tenure_bonus_max * min(1.0, tenure / config.tenure_target_ms)


def stake_multiplier(
    info: StakeInfo | None,
    slashes: Sequence[SlashRecord] = (),
    now: int = 0,
    config: StakeConfig | None = None,
) -> float:
    """Compute the subject-level stake multiplier.

    A subject with no stake record and no slashes gets exactly 1.0.

    Args:
        info: The subject's stake position, or None.
        slashes: The subject's slash history.
        now: Reference time (ms).
        config: Multiplier curve; defaults when None.

    Returns:
        The multiplier (may be below or above 1.0).
    """
    config = config or StakeConfig()
    base = 1.0
    if info is not None and info.active:
        base = config.tier_base(info.stake_tier)
    last = latest_slash(info, slashes)
    return (
        base
        * slash_recovery(last, slashes, now, config)
        * (1.0 + tenure_bonus(info, last, now, config))
    )


def stake_weighted(
    base: ScoreSummary,
    info: StakeInfo | None,
    slashes: Sequence[SlashRecord] = (),
    now: int = 0,
    config: StakeConfig | None = None,
) -> ScoreSummary:
    """Apply the stake multiplier to a base summary."""
    multiplier = stake_multiplier(info, slashes, now, config)
    return ScoreSummary.build(
        base.subject_id, base.summary_value * multiplier, base.feedback_count
    )
