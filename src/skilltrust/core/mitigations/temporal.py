"""Temporal decay and the new-submitter discount.

Temporal Decay Model:
    w(dt) = 0.5 ** (dt / half_life),   dt = max(0, now - timestamp)

An entry older than one half-life (w < 0.5) is flagged ``temporal_decay``.
The decay weight is non-increasing in ``dt`` for a fixed half-life, and
entries stamped in the future are not boosted (``dt`` is clamped at 0).

New Submitters:
    Reviewers are ordered by their first-seen timestamp across the whole
    registry; the most recent ``recent_fraction`` of them are "new". Every
    entry such a reviewer leaves is flagged ``new_submitter``.
"""

from __future__ import annotations

import math
import time
from collections.abc import Mapping


DECAY_FLAG_THRESHOLD: float = 0.5

# Absorbs float error in n * (1 - fraction) before flooring.
_FLOOR_EPSILON: float = 1e-9


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def decay_weight(timestamp: int, now: int, half_life_ms: float) -> float:
    """Compute the age-based weight of an entry.

    Args:
        timestamp: Entry timestamp (ms).
        now: Reference time (ms).
        half_life_ms: Half-life (ms). Must be positive.

    Returns:
        Weight in (0, 1].
    """
    age = max(0, now - timestamp)
    return 0.5 ** (age / half_life_ms)


def is_decayed(weight: float) -> bool:
    """Return True if a decay weight marks the entry as stale."""
    return weight < DECAY_FLAG_THRESHOLD


def new_submitters(
    first_seen: Mapping[str, int],
    recent_fraction: float,
) -> frozenset[str]:
    """Select the most recently first-seen share of reviewers.

    Reviewers are sorted by first-seen time ascending (ties broken by
    address); those at index ``>= floor(n * (1 - recent_fraction))`` are new.

    Args:
        first_seen: Reviewer -> first-seen timestamp over the whole snapshot.
        recent_fraction: Share of reviewers considered new, in [0, 1].

    Returns:
        The set of new reviewer addresses.
    """
    ordered = sorted(first_seen.items(), key=lambda item: (item[1], item[0]))
    cutoff = math.floor(len(ordered) * (1 - recent_fraction) + _FLOOR_EPSILON)
    return frozenset(address for address, _ in ordered[cutoff:])
