"""Mitigation result models: flags, per-entry weight factors, counters.

- ``MitigationFlag`` -- which predicate an entry matched.
- ``EntryWeight`` -- every multiplicative factor applied to one entry,
  exposed individually so a single mitigation can be isolated.
- ``MitigationFlags`` -- per-subject counters shown to users.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum


class MitigationFlag(str, Enum):
    """Predicates an entry can match during hardening."""

    SYBIL_MUTUAL = "sybil_mutual"
    VELOCITY_BURST = "velocity_burst"
    TEMPORAL_DECAY = "temporal_decay"
    NEW_SUBMITTER = "new_submitter"
    ANOMALY_BURST = "anomaly_burst"
    SYBILRANK_LOW_TRUST = "sybilrank_low_trust"
    JACCARD_COORDINATED = "jaccard_coordinated"
    TEMPORAL_CORRELATION = "temporal_correlation"


@dataclass(frozen=True)
class EntryWeight:
    """Weight factors for one feedback entry.

    Every factor is 1.0 unless the entry matched that mitigation, so the
    composite is the plain product and does not depend on evaluation
    order.

    Attributes:
        entry_id: Id of the feedback entry.
        value: The entry's (range-checked) value.
        decay: Age-based decay weight in (0, 1].
        sybil: Graph-analysis factor.
        velocity: Velocity-burst factor.
        new_submitter: New-submitter factor.
        anomaly: Anomaly-burst factor.
        sybilrank: SybilRank factor.
        jaccard: Jaccard-cluster factor.
        correlation: Temporal-correlation factor.
        flags: Predicates matched by this entry.
    """

    entry_id: str
    value: float
    decay: float = 1.0
    sybil: float = 1.0
    velocity: float = 1.0
    new_submitter: float = 1.0
    anomaly: float = 1.0
    sybilrank: float = 1.0
    jaccard: float = 1.0
    correlation: float = 1.0
    flags: frozenset[MitigationFlag] = field(default_factory=frozenset)

    @property
    def composite(self) -> float:
        """Product of every factor."""
        return (
            self.decay
            * self.sybil
            * self.velocity
            * self.new_submitter
            * self.anomaly
            * self.sybilrank
            * self.jaccard
            * self.correlation
        )

    def factors(self) -> dict[str, float]:
        """Return the individual factors by name."""
        return {
            "decay": self.decay,
            "sybil": self.sybil,
            "velocity": self.velocity,
            "new_submitter": self.new_submitter,
            "anomaly": self.anomaly,
            "sybilrank": self.sybilrank,
            "jaccard": self.jaccard,
            "correlation": self.correlation,
        }


@dataclass(frozen=True)
class MitigationFlags:
    """Number of a subject's non-revoked entries matching each predicate.

    Purely diagnostic: the weight each mitigation contributes is already
    in ``EntryWeight``; these counters are never applied again.
    """

    sybil_mutual: int = 0
    velocity_burst: int = 0
    temporal_decay: int = 0
    new_submitter: int = 0
    anomaly_burst: int = 0
    sybilrank_low_trust: int = 0
    jaccard_coordinated: int = 0
    temporal_correlation: int = 0

    @classmethod
    def from_weights(cls, weights: Iterable[EntryWeight]) -> MitigationFlags:
        """Count flags across a subject's entry weights."""
        counts = {flag.value: 0 for flag in MitigationFlag}
        for weight in weights:
            for flag in weight.flags:
                counts[flag.value] += 1
        return cls(**counts)

    def as_dict(self) -> dict[str, int]:
        return {flag.value: getattr(self, flag.value) for flag in MitigationFlag}

    @property
    def total(self) -> int:
        return sum(self.as_dict().values())
