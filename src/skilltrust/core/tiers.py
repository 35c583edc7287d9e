"""Letter-grade trust tiers and access decisions.

Maps a 0-100 score onto nine credit-rating-style tiers using ten-point
buckets from the top:

    AAA >= 90, AA >= 80, A >= 70, BBB >= 60, BB >= 50,
    B >= 40, CCC >= 30, CC >= 20, C < 20

The integer encoding of ``Tier`` enables direct comparison
(C < CC < ... < AAA), so monotonicity of the classifier reads as
``score_to_tier(a) <= score_to_tier(b)`` whenever ``a <= b``.
"""

from __future__ import annotations

import math
from enum import Enum, IntEnum


class Tier(IntEnum):
    """Nine ordinal trust tiers, lowest to highest."""

    C = 0
    CC = 1
    CCC = 2
    B = 3
    BB = 4
    BBB = 5
    A = 6
    AA = 7
    AAA = 8


class AccessDecision(str, Enum):
    """Gate a consumer applies to a skill based on its tier."""

    FULL_ACCESS = "full_access"
    THROTTLED = "throttled"
    DENIED = "denied"


# ---------------------------------------------------------------------------
# Tier boundaries (descending)
# ---------------------------------------------------------------------------

TIER_THRESHOLDS: tuple[tuple[float, Tier], ...] = (
    (90.0, Tier.AAA),
    (80.0, Tier.AA),
    (70.0, Tier.A),
    (60.0, Tier.BBB),
    (50.0, Tier.BB),
    (40.0, Tier.B),
    (30.0, Tier.CCC),
    (20.0, Tier.CC),
)

_DESCRIPTIONS: dict[Tier, str] = {
    Tier.AAA: "Highest trust, extensively validated",
    Tier.AA: "Very high trust, well established",
    Tier.A: "High trust, reliable track record",
    Tier.BBB: "Moderate trust, generally acceptable",
    Tier.BB: "Below average, use with caution",
    Tier.B: "Low trust, limited validation",
    Tier.CCC: "Very low trust, significant concerns",
    Tier.CC: "Near-minimum trust, likely problematic",
    Tier.C: "Minimum trust, insufficient data or confirmed issues",
}


def clamp_score(score: float) -> float:
    """Clamp a score to [0, 100]. NaN becomes 0."""
    if math.isnan(score):
        return 0.0
    return max(0.0, min(100.0, score))


def score_to_tier(score: float) -> Tier:
    """Map a numeric score to its tier.

    Total over all floats: the input is clamped to [0, 100] first and NaN
    maps to the lowest tier.

    Args:
        score: Score on the 0-100 scale.

    Returns:
        The corresponding ``Tier``.
    """
    clamped = clamp_score(score)
    for minimum, tier in TIER_THRESHOLDS:
        if clamped >= minimum:
            return tier
    return Tier.C


def tier_to_access(tier: Tier) -> AccessDecision:
    """Map a tier to an access decision (A-range full, B-range throttled)."""
    if tier >= Tier.A:
        return AccessDecision.FULL_ACCESS
    if tier >= Tier.B:
        return AccessDecision.THROTTLED
    return AccessDecision.DENIED


def tier_description(tier: Tier) -> str:
    """Return a human-readable description of a tier."""
    return _DESCRIPTIONS[tier]
