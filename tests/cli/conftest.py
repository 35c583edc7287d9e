"""Shared fixtures for CLI tests.

Writes small registry snapshots (JSON and YAML) and configuration files
into a temporary directory for the commands to load.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

NOW = 1_700_000_000_000
HOUR = 3_600_000


def _feedback(n: int, subject: str, reviewer: str, value: int, age_hours: int) -> dict:
    return {
        "id": f"fb-{n:03d}",
        "subject": subject,
        "reviewer": reviewer,
        "value": value,
        "timestamp": NOW - age_hours * HOUR,
    }


@pytest.fixture
def snapshot_data() -> dict:
    """Two honest skills and a pair of addresses praising each other."""
    feedback = [
        _feedback(i, "skill-search", f"user-{i}", 88, i) for i in range(6)
    ]
    feedback += [
        _feedback(10 + i, "skill-pdf", f"user-{i}", 64, i) for i in range(4)
    ]
    feedback += [
        _feedback(20, "alice", "bob", 97, 0),
        _feedback(21, "bob", "alice", 97, 0),
    ]
    return {
        "now": NOW,
        "feedback": feedback,
        "payments": [{"subject": "skill-search", "reviewer": "user-0", "receipts": 4}],
        "active_stakers": ["user-0"],
        "stakes": {"skill-search": {"tier": "high", "active": True}},
        "tee": {"skill-pdf": {"status": "verified", "tier3_active": True}},
        "subjects": {"skill-search": {"publisher": "acme", "category": "search"}},
    }


@pytest.fixture
def snapshot_file(tmp_path: Path, snapshot_data: dict) -> Path:
    """The sample snapshot written as JSON."""
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(snapshot_data), encoding="utf-8")
    return path


@pytest.fixture
def yaml_snapshot_file(tmp_path: Path) -> Path:
    """A minimal YAML snapshot with a single subject."""
    path = tmp_path / "snapshot.yaml"
    path.write_text(
        f"now: {NOW}\n"
        "feedback:\n"
        f"  - {{id: y1, subject: skill-yaml, reviewer: carol, value: 72, timestamp: {NOW}}}\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def broken_file(tmp_path: Path) -> Path:
    """A snapshot file that is not valid JSON."""
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    return path
