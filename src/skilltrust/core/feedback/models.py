"""Feedback data models: entries, subject metadata, and snapshot helpers.

Defines the read-only records the scoring engines consume:

- ``FeedbackEntry`` -- one 0-100 score left by a reviewer for a subject.
- ``SubjectInfo`` -- registry metadata for a subject (attribution only).

Plus the small set of helpers every engine shares: filtering revoked
entries, grouping by subject, and computing reviewer first-seen times.

Lifecycle of a ``FeedbackEntry``: created once at the ingestion boundary,
may transition ``revoked: False -> True`` exactly once, never otherwise
mutated and never deleted. The dataclass is frozen to make that explicit.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, replace

from skilltrust.exceptions import FeedbackValidationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Value range
# ---------------------------------------------------------------------------

MIN_FEEDBACK_VALUE: int = 0
MAX_FEEDBACK_VALUE: int = 100


# ---------------------------------------------------------------------------
# FeedbackEntry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FeedbackEntry:
    """A single piece of feedback submitted for a skill.

    Attributes:
        id: Unique identifier of the entry.
        subject_id: The skill being rated. In the mutual-feedback graph the
            subject id doubles as the publisher's address.
        reviewer: Address of the reviewer who submitted the feedback.
        value: Score on the 0-100 scale.
        timestamp: Submission time in milliseconds since the epoch.
        tag: Optional free-text category.
        revoked: Whether the reviewer has revoked this entry.
    """

    id: str
    subject_id: str
    reviewer: str
    value: int
    timestamp: int
    tag: str | None = None
    revoked: bool = False

    def validate(self) -> None:
        """Raise FeedbackValidationError if the entry is malformed.

        Raises:
            FeedbackValidationError: On empty identifiers, a non-numeric
                value, or a value outside [0, 100].
        """
        for name in ("id", "subject_id", "reviewer"):
            if not getattr(self, name):
                raise FeedbackValidationError(
                    f"Feedback field '{name}' must be non-empty"
                )
        if not isinstance(self.value, (int, float)) or isinstance(self.value, bool):
            raise FeedbackValidationError(
                f"Feedback '{self.id}' value must be numeric, "
                f"got {type(self.value).__name__}"
            )
        if not MIN_FEEDBACK_VALUE <= self.value <= MAX_FEEDBACK_VALUE:
            raise FeedbackValidationError(
                f"Feedback '{self.id}' value must be in [0, 100], got {self.value}"
            )

    def revoke(self) -> FeedbackEntry:
        """Return a revoked copy of this entry."""
        return replace(self, revoked=True)


@dataclass(frozen=True)
class SubjectInfo:
    """Registry metadata for a subject. Never used for scoring."""

    subject_id: str
    publisher: str = ""
    category: str = ""
    name: str = ""


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def active_entries(entries: Iterable[FeedbackEntry]) -> list[FeedbackEntry]:
    """Return the non-revoked entries, preserving input order."""
    return [e for e in entries if not e.revoked]


def entry_value(entry: FeedbackEntry, strict: bool = False) -> float:
    """Return the entry's value, enforcing the 0-100 invariant.

    In strict mode an out-of-range value raises; otherwise it is clamped
    and a warning is logged.

    Args:
        entry: The feedback entry.
        strict: Raise instead of clamping.

    Returns:
        The value as a float in [0, 100].

    Raises:
        FeedbackValidationError: In strict mode, if the value is invalid.
    """
    value = entry.value
    if MIN_FEEDBACK_VALUE <= value <= MAX_FEEDBACK_VALUE:
        return float(value)
    if strict:
        entry.validate()
    if isinstance(value, float) and math.isnan(value):
        logger.warning("Feedback %s has NaN value; treating as 0", entry.id)
        return 0.0
    logger.warning(
        "Feedback %s value %s outside [0, 100]; clamping", entry.id, value
    )
    return float(max(MIN_FEEDBACK_VALUE, min(MAX_FEEDBACK_VALUE, value)))


def group_by_subject(
    entries: Iterable[FeedbackEntry],
) -> dict[str, list[FeedbackEntry]]:
    """Group entries by subject id, keeping first-appearance order."""
    groups: dict[str, list[FeedbackEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.subject_id, []).append(entry)
    return groups


def first_seen(entries: Iterable[FeedbackEntry]) -> dict[str, int]:
    """Map each reviewer to the timestamp of its earliest non-revoked entry.

    Computed across all subjects: a reviewer's first appearance anywhere
    in the registry is what makes it "established".
    """
    seen: dict[str, int] = {}
    for entry in entries:
        if entry.revoked:
            continue
        existing = seen.get(entry.reviewer)
        if existing is None or entry.timestamp < existing:
            seen[entry.reviewer] = entry.timestamp
    return seen


def chronological(entries: Iterable[FeedbackEntry]) -> list[FeedbackEntry]:
    """Sort entries by timestamp, breaking ties by id for determinism."""
    return sorted(entries, key=lambda e: (e.timestamp, e.id))
