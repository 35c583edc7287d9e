"""Feedback records and the read-only helpers shared by every engine.

Submodules:
    models  -- FeedbackEntry, SubjectInfo, grouping and first-seen helpers
"""

from skilltrust.core.feedback.models import (
    MAX_FEEDBACK_VALUE,
    MIN_FEEDBACK_VALUE,
    FeedbackEntry,
    SubjectInfo,
    active_entries,
    chronological,
    entry_value,
    first_seen,
    group_by_subject,
)

__all__ = [
    "FeedbackEntry",
    "MAX_FEEDBACK_VALUE",
    "MIN_FEEDBACK_VALUE",
    "SubjectInfo",
    "active_entries",
    "chronological",
    "entry_value",
    "first_seen",
    "group_by_subject",
]
