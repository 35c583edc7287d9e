"""Naive scoring: the unweighted mean of a subject's feedback.

This is the unguarded baseline. It must stay a plain mean so that the
difference between it and the hardened score reads directly as the amount
of manipulation caught.
"""

from __future__ import annotations

from collections.abc import Iterable

from skilltrust.core.feedback import FeedbackEntry, entry_value
from skilltrust.core.scoring.models import ScoreSummary


def naive_score(
    entries: Iterable[FeedbackEntry],
    subject_id: str,
    strict: bool = False,
) -> ScoreSummary:
    """Compute the arithmetic mean of a subject's non-revoked feedback.

    Args:
        entries: Feedback snapshot; entries for other subjects are ignored.
        subject_id: The subject to score.
        strict: Raise on out-of-range values instead of clamping.

    Returns:
        The summary. Zero entries yield 0 and tier C.
    """
    values = [
        entry_value(e, strict)
        for e in entries
        if e.subject_id == subject_id and not e.revoked
    ]
    if not values:
        return ScoreSummary.empty(subject_id)
    return ScoreSummary.build(subject_id, sum(values) / len(values), len(values))
