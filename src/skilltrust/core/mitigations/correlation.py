"""Cross-reviewer timing correlation.

Two signals, both computed over the whole snapshot:

1. **Lockstep** -- two reviewers, each with at least
   ``min_lockstep_events`` entries, whose submissions repeatedly land
   within ``lockstep_window_ms`` of each other. Flagged when the number of
   coincidences reaches ``min_lockstep_events`` and exceeds half the
   smaller reviewer's entry count.
2. **Regularity** -- a reviewer with at least
   ``min_feedback_for_regularity`` entries whose inter-submission intervals
   have a coefficient of variation below ``regularity_threshold``.
   Humans submit at noisy intervals; schedulers do not.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from skilltrust.core.feedback import FeedbackEntry, active_entries
from skilltrust.core.mitigations.config import CorrelationConfig

_LOCKSTEP_RATE: float = 0.5


@dataclass(frozen=True)
class LockstepPair:
    address_a: str
    address_b: str
    coincidences: int


@dataclass(frozen=True)
class RegularReviewer:
    address: str
    cv: float
    mean_interval_ms: float


@dataclass(frozen=True)
class CorrelationResult:
    lockstep_pairs: tuple[LockstepPair, ...]
    regular_reviewers: tuple[RegularReviewer, ...]
    flagged: frozenset[str]


def _timestamps_by_reviewer(entries: Sequence[FeedbackEntry]) -> dict[str, list[int]]:
    by_reviewer: dict[str, list[int]] = {}
    for entry in active_entries(entries):
        by_reviewer.setdefault(entry.reviewer, []).append(entry.timestamp)
    for stamps in by_reviewer.values():
        stamps.sort()
    return by_reviewer


def _count_coincidences(a: list[int], b: list[int], window: int) -> int:
    count = 0
    lo = 0
    for stamp in a:
        while lo < len(b) and b[lo] < stamp - window:
            lo += 1
        hi = lo
        while hi < len(b) and b[hi] <= stamp + window:
            count += 1
            hi += 1
    return count


def _lockstep_pairs(
    by_reviewer: dict[str, list[int]],
    config: CorrelationConfig,
) -> list[LockstepPair]:
    eligible = sorted(
        a for a, stamps in by_reviewer.items()
        if len(stamps) >= config.min_lockstep_events
    )
    pairs = []
    for i, a in enumerate(eligible):
        for b in eligible[i + 1:]:
            stamps_a, stamps_b = by_reviewer[a], by_reviewer[b]
            hits = _count_coincidences(stamps_a, stamps_b, config.lockstep_window_ms)
            rate = hits / min(len(stamps_a), len(stamps_b))
            if hits >= config.min_lockstep_events and rate > _LOCKSTEP_RATE:
                pairs.append(LockstepPair(a, b, hits))
    return pairs


def _regular_reviewers(
    by_reviewer: dict[str, list[int]],
    config: CorrelationConfig,
) -> list[RegularReviewer]:
    found = []
    for address in sorted(by_reviewer):
        stamps = by_reviewer[address]
        if len(stamps) < config.min_feedback_for_regularity:
            continue
        intervals = [b - a for a, b in zip(stamps, stamps[1:])]
        if len(intervals) < 2:
            continue
        mean = sum(intervals) / len(intervals)
        if mean == 0:
            continue
        variance = sum((i - mean) ** 2 for i in intervals) / len(intervals)
        cv = math.sqrt(variance) / mean
        if cv < config.regularity_threshold:
            found.append(RegularReviewer(address, cv, mean))
    return found


def detect_temporal_correlation(
    entries: Sequence[FeedbackEntry],
    config: CorrelationConfig,
) -> CorrelationResult:
    """Run lockstep and regularity detection over the snapshot."""
    by_reviewer = _timestamps_by_reviewer(entries)
    pairs = _lockstep_pairs(by_reviewer, config)
    regular = _regular_reviewers(by_reviewer, config)

    flagged: set[str] = set()
    for pair in pairs:
        flagged.update((pair.address_a, pair.address_b))
    flagged.update(r.address for r in regular)

    return CorrelationResult(
        lockstep_pairs=tuple(pairs),
        regular_reviewers=tuple(regular),
        flagged=frozenset(flagged),
    )
