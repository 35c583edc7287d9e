"""Point-in-time snapshot of the registry and its JSON/YAML loader.

A ``ScoringSnapshot`` bundles everything the engines read: feedback, the
payment and stake signals used for credibility, each subject's own stake,
slash history and attestation state, and registry metadata. It is built
once and never mutated, which is what gives a computation snapshot
isolation.

File layout (JSON or YAML)::

    now: 1700000000000                  # optional reference time (ms)
    feedback:
      - {id: f1, subject: skill-a, reviewer: alice, value: 80,
         timestamp: 1699990000000, tag: quality, revoked: false}
    payments:
      - {subject: skill-a, reviewer: alice, receipts: 3}
    active_stakers: [alice]
    stakes:
      skill-a: {tier: mid, active: true, last_slash_timestamp: 0,
                staked_at: 1690000000000, total_stake: 500}
    slashes:
      - {subject: skill-a, timestamp: 1695000000000, amount: 50, reason: spam}
    tee:
      skill-a: {status: verified, trust_weight: 1.5, tier3_active: true}
    subjects:
      skill-a: {publisher: acme, category: search, name: Web Search}

Malformed records are skipped with a warning; a file that cannot be read
or parsed raises ``SnapshotError``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from skilltrust.core.feedback import FeedbackEntry, SubjectInfo
from skilltrust.core.scoring.models import (
    SlashRecord,
    StakeInfo,
    StakeTier,
    TEEState,
    TEEStatus,
)
from skilltrust.exceptions import SnapshotError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# ScoringSnapshot
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScoringSnapshot:
    """Immutable input to every scoring call.

    Attributes:
        feedback: All feedback entries, revoked included.
        payment_receipts: ``(subject, reviewer) -> receipt count``.
        active_stakers: Reviewer addresses with an active stake.
        stakes: Subject -> its own stake position.
        slashes: Subject -> its slash history, oldest first.
        tee: Subject -> attestation state.
        subjects: Subject -> registry metadata (attribution only).
        now: Reference time recorded with the snapshot, if any.
    """

    feedback: tuple[FeedbackEntry, ...] = ()
    payment_receipts: Mapping[tuple[str, str], int] = field(default_factory=dict)
    active_stakers: frozenset[str] = frozenset()
    stakes: Mapping[str, StakeInfo] = field(default_factory=dict)
    slashes: Mapping[str, tuple[SlashRecord, ...]] = field(default_factory=dict)
    tee: Mapping[str, TEEState] = field(default_factory=dict)
    subjects: Mapping[str, SubjectInfo] = field(default_factory=dict)
    now: int | None = None

    def subject_ids(self) -> list[str]:
        """Every subject with feedback or metadata, sorted."""
        ids = {e.subject_id for e in self.feedback}
        ids.update(self.subjects)
        return sorted(ids)

    def has_subject(self, subject_id: str) -> bool:
        return subject_id in self.subjects or any(
            e.subject_id == subject_id for e in self.feedback
        )

    def entries_for(self, subject_id: str) -> list[FeedbackEntry]:
        return [e for e in self.feedback if e.subject_id == subject_id]

    def slashes_for(self, subject_id: str) -> tuple[SlashRecord, ...]:
        return self.slashes.get(subject_id, ())


# ---------------------------------------------------------------------------
# Record parsers
# ---------------------------------------------------------------------------


def _first(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in record:
            return record[key]
    raise KeyError(keys[0])


def _parse_feedback(record: Mapping[str, Any]) -> FeedbackEntry:
    value = record["value"]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"value must be numeric, got {value!r}")
    return FeedbackEntry(
        id=str(record["id"]),
        subject_id=str(_first(record, "subject", "subject_id", "subjectId")),
        reviewer=str(_first(record, "reviewer", "reviewer_address", "reviewerAddress")),
        value=value,
        timestamp=int(record["timestamp"]),
        tag=record.get("tag"),
        revoked=bool(record.get("revoked", False)),
    )


def _parse_stake(record: Mapping[str, Any]) -> StakeInfo:
    return StakeInfo(
        stake_tier=StakeTier(str(record.get("tier", "none")).lower()),
        active=bool(record.get("active", False)),
        last_slash_timestamp=int(record.get("last_slash_timestamp", 0)),
        staked_at=int(record.get("staked_at", 0)),
        total_stake=float(record.get("total_stake", 0.0)),
    )


def _parse_slash(record: Mapping[str, Any]) -> SlashRecord:
    return SlashRecord(
        subject_id=str(_first(record, "subject", "subject_id")),
        timestamp=int(record["timestamp"]),
        amount=float(record.get("amount", 0.0)),
        reason=str(record.get("reason", "")),
    )


def _parse_tee(record: Mapping[str, Any]) -> TEEState:
    return TEEState(
        status=TEEStatus(str(record.get("status", "unregistered")).lower()),
        trust_weight=float(record.get("trust_weight", 1.5)),
        tier3_active=bool(record.get("tier3_active", False)),
    )


def _parse_subject(subject_id: str, record: Mapping[str, Any]) -> SubjectInfo:
    return SubjectInfo(
        subject_id=subject_id,
        publisher=str(record.get("publisher", "")),
        category=str(record.get("category", "")),
        name=str(record.get("name", "")),
    )


_RECORD_ERRORS = (KeyError, TypeError, ValueError, AttributeError)


def _parse_list(
    items: Any,
    parse: Callable[[Mapping[str, Any]], Any],
    section: str,
) -> list[Any]:
    if items is None:
        return []
    if not isinstance(items, list):
        raise SnapshotError(f"Section '{section}' must be a list")
    parsed = []
    for index, record in enumerate(items):
        try:
            if not isinstance(record, dict):
                raise TypeError("record is not a mapping")
            parsed.append(parse(record))
        except _RECORD_ERRORS as exc:
            logger.warning("Skipping malformed %s record #%d: %s", section, index, exc)
    return parsed


def _parse_keyed(
    items: Any,
    parse: Callable[[str, Mapping[str, Any]], Any],
    section: str,
) -> dict[str, Any]:
    if items is None:
        return {}
    if not isinstance(items, dict):
        raise SnapshotError(f"Section '{section}' must be a mapping")
    parsed = {}
    for key, record in items.items():
        try:
            if not isinstance(record, dict):
                raise TypeError("record is not a mapping")
            parsed[str(key)] = parse(str(key), record)
        except _RECORD_ERRORS as exc:
            logger.warning("Skipping malformed %s record %r: %s", section, key, exc)
    return parsed


def _dedupe(entries: Iterable[FeedbackEntry]) -> tuple[FeedbackEntry, ...]:
    seen: dict[str, FeedbackEntry] = {}
    for entry in entries:
        if entry.id in seen:
            logger.warning("Duplicate feedback id %s; keeping the first", entry.id)
            continue
        seen[entry.id] = entry
    return tuple(seen.values())


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def snapshot_from_dict(data: Mapping[str, Any]) -> ScoringSnapshot:
    """Build a snapshot from parsed JSON/YAML.

    Raises:
        SnapshotError: If the root or a section has the wrong shape.
    """
    if not isinstance(data, dict):
        raise SnapshotError("Snapshot root must be a mapping")

    feedback = _dedupe(_parse_list(data.get("feedback"), _parse_feedback, "feedback"))

    receipts: dict[tuple[str, str], int] = {}
    for subject, reviewer, count in _parse_list(
        data.get("payments"),
        lambda r: (str(r["subject"]), str(r["reviewer"]), int(r.get("receipts", 1))),
        "payments",
    ):
        receipts[(subject, reviewer)] = receipts.get((subject, reviewer), 0) + count

    stakers = data.get("active_stakers") or []
    if not isinstance(stakers, list):
        raise SnapshotError("Section 'active_stakers' must be a list")

    slashes: dict[str, list[SlashRecord]] = {}
    for record in _parse_list(data.get("slashes"), _parse_slash, "slashes"):
        slashes.setdefault(record.subject_id, []).append(record)

    now = data.get("now")
    if now is not None:
        try:
            now = int(now)
        except (TypeError, ValueError) as exc:
            raise SnapshotError(f"'now' must be an integer timestamp, got {now!r}") from exc

    return ScoringSnapshot(
        feedback=feedback,
        payment_receipts=receipts,
        active_stakers=frozenset(str(s) for s in stakers),
        stakes=_parse_keyed(data.get("stakes"), lambda _, r: _parse_stake(r), "stakes"),
        slashes={
            subject: tuple(sorted(records, key=lambda s: s.timestamp))
            for subject, records in slashes.items()
        },
        tee=_parse_keyed(data.get("tee"), lambda _, r: _parse_tee(r), "tee"),
        subjects=_parse_keyed(data.get("subjects"), _parse_subject, "subjects"),
        now=now,
    )


def load_snapshot(path: Path) -> ScoringSnapshot:
    """Read a snapshot file (``.json``, ``.yaml`` or ``.yml``).

    Args:
        path: Path to the snapshot file.

    Returns:
        The parsed snapshot.

    Raises:
        SnapshotError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SnapshotError(f"Cannot read snapshot {path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(raw)
        else:
            data = yaml.safe_load(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SnapshotError(f"Cannot parse snapshot {path}: {exc}") from exc

    try:
        snapshot = snapshot_from_dict(data)
    except SnapshotError as exc:
        raise SnapshotError(f"{path}: {exc}") from exc
    logger.debug(
        "Loaded snapshot %s: %d feedback entries, %d subjects",
        path, len(snapshot.feedback), len(snapshot.subject_ids()),
    )
    return snapshot
