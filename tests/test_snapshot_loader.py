"""Tests for snapshot parsing and the JSON/YAML loader."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from skilltrust.core.scoring.models import StakeTier, TEEStatus
from skilltrust.exceptions import SnapshotError
from skilltrust.snapshot import load_snapshot, snapshot_from_dict

SAMPLE = {
    "now": 1_700_000_000_000,
    "feedback": [
        {"id": "f1", "subject": "skill-a", "reviewer": "alice", "value": 80,
         "timestamp": 1_699_990_000_000, "tag": "quality"},
        {"id": "f2", "subjectId": "skill-a", "reviewerAddress": "bob", "value": 65.5,
         "timestamp": 1_699_995_000_000, "revoked": True},
    ],
    "payments": [
        {"subject": "skill-a", "reviewer": "alice", "receipts": 3},
        {"subject": "skill-a", "reviewer": "alice"},
    ],
    "active_stakers": ["alice"],
    "stakes": {"skill-a": {"tier": "MID", "active": True, "staked_at": 1_690_000_000_000}},
    "slashes": [
        {"subject": "skill-a", "timestamp": 1_699_000_000_000, "amount": 5},
        {"subject": "skill-a", "timestamp": 1_695_000_000_000, "reason": "spam"},
    ],
    "tee": {"skill-a": {"status": "verified", "tier3_active": True}},
    "subjects": {"skill-a": {"publisher": "acme", "category": "search", "name": "Web Search"}},
}


class TestSnapshotFromDict:

    def test_full_document(self) -> None:
        snap = snapshot_from_dict(SAMPLE)
        assert snap.now == 1_700_000_000_000
        assert [e.id for e in snap.feedback] == ["f1", "f2"]
        assert snap.feedback[0].tag == "quality"
        assert snap.feedback[1].reviewer == "bob"
        assert snap.feedback[1].revoked
        assert snap.payment_receipts == {("skill-a", "alice"): 4}
        assert snap.active_stakers == frozenset({"alice"})
        assert snap.stakes["skill-a"].stake_tier is StakeTier.MID
        assert snap.tee["skill-a"].status is TEEStatus.VERIFIED
        assert snap.subjects["skill-a"].publisher == "acme"

    def test_slashes_sorted_oldest_first(self) -> None:
        slashes = snapshot_from_dict(SAMPLE).slashes_for("skill-a")
        assert [s.timestamp for s in slashes] == [1_695_000_000_000, 1_699_000_000_000]

    def test_empty_document(self) -> None:
        snap = snapshot_from_dict({})
        assert snap.feedback == ()
        assert snap.now is None
        assert snap.subject_ids() == []

    def test_malformed_records_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        data = {
            "feedback": [
                {"id": "ok", "subject": "s", "reviewer": "r", "value": 50, "timestamp": 1},
                {"id": "no-value", "subject": "s", "reviewer": "r", "timestamp": 1},
                {"id": "text", "subject": "s", "reviewer": "r", "value": "high", "timestamp": 1},
                "not a record",
            ],
            "tee": {"s": {"status": "glowing"}},
        }
        with caplog.at_level(logging.WARNING, logger="skilltrust.snapshot"):
            snap = snapshot_from_dict(data)
        assert [e.id for e in snap.feedback] == ["ok"]
        assert snap.tee == {}
        assert "Skipping malformed feedback" in caplog.text

    def test_duplicate_ids_keep_first(self) -> None:
        record = {"id": "dup", "subject": "s", "reviewer": "r", "value": 10, "timestamp": 1}
        snap = snapshot_from_dict({"feedback": [record, {**record, "value": 99}]})
        assert len(snap.feedback) == 1
        assert snap.feedback[0].value == 10

    def test_subject_lookup(self) -> None:
        snap = snapshot_from_dict(SAMPLE)
        assert snap.has_subject("skill-a")
        assert not snap.has_subject("skill-z")
        assert len(snap.entries_for("skill-a")) == 2

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {"feedback": {"id": "f1"}},
            {"stakes": ["skill-a"]},
            {"active_stakers": "alice"},
            {"now": "yesterday"},
        ],
    )
    def test_bad_shapes_raise(self, data) -> None:
        with pytest.raises(SnapshotError):
            snapshot_from_dict(data)


class TestLoadSnapshot:

    def test_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "snap.json"
        path.write_text(json.dumps(SAMPLE), encoding="utf-8")
        assert len(load_snapshot(path).feedback) == 2

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "snap.yaml"
        path.write_text(
            "now: 1000\n"
            "feedback:\n"
            "  - {id: f1, subject: skill-a, reviewer: alice, value: 70, timestamp: 900}\n",
            encoding="utf-8",
        )
        snap = load_snapshot(path)
        assert snap.now == 1000
        assert snap.feedback[0].value == 70

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SnapshotError, match="Cannot read"):
            load_snapshot(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "snap.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SnapshotError, match="Cannot parse"):
            load_snapshot(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "snap.yml"
        path.write_text("feedback: [unclosed\n", encoding="utf-8")
        with pytest.raises(SnapshotError):
            load_snapshot(path)

    def test_wrong_root_reports_path(self, tmp_path: Path) -> None:
        path = tmp_path / "snap.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(SnapshotError, match="snap.yaml"):
            load_snapshot(path)
