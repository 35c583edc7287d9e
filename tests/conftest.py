"""Shared fixtures for skilltrust tests."""

from __future__ import annotations

import itertools
from collections.abc import Callable

import pytest

from skilltrust.core.feedback import FeedbackEntry

# Fixed reference time so every test is deterministic.
NOW_MS: int = 1_700_000_000_000


@pytest.fixture
def now() -> int:
    """Reference time (ms) used as ``now`` throughout the tests."""
    return NOW_MS


@pytest.fixture
def make_entry() -> Callable[..., FeedbackEntry]:
    """Factory for feedback entries with auto-numbered ids.

    Usage: ``make_entry("skill-a", "alice", 80, timestamp=...)``.
    """
    counter = itertools.count(1)

    def _make(
        subject_id: str,
        reviewer: str,
        value: int = 80,
        timestamp: int = NOW_MS,
        **kwargs,
    ) -> FeedbackEntry:
        entry_id = kwargs.pop("id", f"fb-{next(counter):04d}")
        return FeedbackEntry(
            id=entry_id,
            subject_id=subject_id,
            reviewer=reviewer,
            value=value,
            timestamp=timestamp,
            **kwargs,
        )

    return _make
