"""Velocity-based mitigations: submission bursts and new-reviewer flash mobs.

Three detectors over a single subject's entries:

- **Velocity burst** -- a sliding window of ``window_ms`` that holds more
  than ``max_in_window`` entries flags every entry inside it. Equivalently,
  an entry is flagged when at least ``max_in_window`` other entries share a
  window with it.
- **Anomaly burst** -- the same sliding window, but only counting entries
  whose reviewer is *new to the registry within that window* (its global
  first-seen timestamp falls inside the window). Catches coordinated
  disposable identities that each stay under the plain velocity limit.
- **Behavioral shift** -- a diagnostic for reputation laundering: the mean
  of the most recent 30 % of entries departs sharply from the historical
  mean.
"""

from __future__ import annotations

import logging
from bisect import bisect_left
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from skilltrust.core.feedback import FeedbackEntry, active_entries, chronological

logger = logging.getLogger(__name__)

SHIFT_MIN_ENTRIES: int = 5
SHIFT_DEVIATION_THRESHOLD: float = 30.0
SHIFT_RECENT_FRACTION: float = 0.3


def detect_velocity_bursts(
    entries: Sequence[FeedbackEntry],
    max_in_window: int,
    window_ms: int,
) -> set[str]:
    """Flag entries that arrived inside an over-full time window.

    Args:
        entries: One subject's entries (revoked entries are ignored).
        max_in_window: Largest number of entries a window may hold
            without triggering.
        window_ms: Window width in milliseconds (inclusive).

    Returns:
        Ids of flagged entries.
    """
    ordered = chronological(active_entries(entries))
    flagged: set[str] = set()
    start = 0

    for end, entry in enumerate(ordered):
        while entry.timestamp - ordered[start].timestamp > window_ms:
            start += 1
        if end - start + 1 > max_in_window:
            for i in range(start, end + 1):
                flagged.add(ordered[i].id)

    if flagged:
        logger.debug(
            "Velocity burst on %s: %d entries flagged",
            ordered[0].subject_id, len(flagged),
        )
    return flagged


def detect_anomaly_bursts(
    entries: Sequence[FeedbackEntry],
    first_seen: Mapping[str, int],
    max_new_in_window: int,
    window_ms: int,
) -> set[str]:
    """Flag entries from a flash mob of reviewers new to the registry.

    For every window ending at an entry's timestamp, a reviewer counts as
    new when its first-seen time (across all subjects) lies inside that
    window. A reviewer missing from ``first_seen`` is treated as first seen
    at the entry itself.

    Args:
        entries: One subject's entries.
        first_seen: Reviewer -> earliest timestamp over the whole snapshot.
        max_new_in_window: Largest number of new-reviewer entries a window
            may hold without triggering.
        window_ms: Window width in milliseconds.

    Returns:
        Ids of flagged entries.
    """
    ordered = chronological(active_entries(entries))
    timestamps = [e.timestamp for e in ordered]
    flagged: set[str] = set()

    for end, entry in enumerate(ordered):
        window_begin = entry.timestamp - window_ms
        start = bisect_left(timestamps, window_begin)
        new_in_window = [
            candidate
            for candidate in ordered[start:end + 1]
            if first_seen.get(candidate.reviewer, candidate.timestamp) >= window_begin
        ]
        if len(new_in_window) > max_new_in_window:
            flagged.update(c.id for c in new_in_window)

    if flagged:
        logger.debug(
            "Anomaly burst on %s: %d new-reviewer entries flagged",
            ordered[0].subject_id, len(flagged),
        )
    return flagged


# ---------------------------------------------------------------------------
# Behavioral shift (laundering diagnostic)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BehavioralShift:
    """Result of comparing recent feedback against the historical baseline.

    Attributes:
        shifted: True if the recent mean deviates by at least the
            threshold.
        magnitude: Absolute difference between recent and historical means.
        recent_entry_ids: Ids of the entries in the recent slice.
    """

    shifted: bool
    magnitude: float
    recent_entry_ids: frozenset[str]


def detect_behavioral_shift(
    entries: Sequence[FeedbackEntry],
    deviation_threshold: float = SHIFT_DEVIATION_THRESHOLD,
    recent_fraction: float = SHIFT_RECENT_FRACTION,
) -> BehavioralShift:
    """Detect a sudden change in how a subject is being rated.

    Needs at least five non-revoked entries; fewer always reports no shift.
    """
    ordered = chronological(active_entries(entries))
    if len(ordered) < SHIFT_MIN_ENTRIES:
        return BehavioralShift(False, 0.0, frozenset())

    split = int(len(ordered) * (1 - recent_fraction))
    historical, recent = ordered[:split], ordered[split:]
    if not historical or not recent:
        return BehavioralShift(False, 0.0, frozenset())

    historical_mean = sum(e.value for e in historical) / len(historical)
    recent_mean = sum(e.value for e in recent) / len(recent)
    magnitude = abs(recent_mean - historical_mean)

    return BehavioralShift(
        shifted=magnitude >= deviation_threshold,
        magnitude=magnitude,
        recent_entry_ids=frozenset(e.id for e in recent),
    )
