"""Mitigation configuration: per-mitigation toggles and tunable constants.

Each mitigation owns a small dataclass carrying its enabled flag, its
detection parameters and its discount factor. ``MitigationConfig`` bundles
them. Defaults reproduce the recommended production values:

- graph analysis:   mutual-feedback entries weighted at 0.1
- velocity check:   more than 10 entries in 60 s weighted at 0.5
- temporal decay:   one-day half-life
- new submitters:   most recent 20 % of reviewers weighted at 0.2
- anomaly burst:    more than 5 new reviewers in 60 s weighted at 0.1

SybilRank, Jaccard co-review clustering and temporal correlation are
available but disabled by default.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace

from skilltrust.exceptions import ConfigError

DAY_MS: int = 86_400_000
MINUTE_MS: int = 60_000


def _check_fraction(owner: str, name: str, value: float) -> None:
    if not isinstance(value, (int, float)):
        raise ConfigError(
            f"{owner}.{name} must be numeric, got {type(value).__name__}"
        )
    if value < 0.0 or value > 1.0:
        raise ConfigError(f"{owner}.{name} must be in [0, 1], got {value}")


def _check_positive(owner: str, name: str, value: float) -> None:
    if not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{owner}.{name} must be positive, got {value}")


def _check_non_negative(owner: str, name: str, value: float) -> None:
    if not isinstance(value, (int, float)) or value < 0:
        raise ConfigError(f"{owner}.{name} must be non-negative, got {value}")


# ---------------------------------------------------------------------------
# Core mitigations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GraphAnalysisConfig:
    """Mutual-feedback (sybil ring) detection."""

    enabled: bool = True
    discount: float = 0.1

    def validate(self) -> None:
        _check_fraction("graph", "discount", self.discount)


@dataclass(frozen=True)
class VelocityConfig:
    """Burst detection: more than ``max_in_window`` entries in ``window_ms``."""

    enabled: bool = True
    max_in_window: int = 10
    window_ms: int = MINUTE_MS
    discount: float = 0.5

    def validate(self) -> None:
        _check_non_negative("velocity", "max_in_window", self.max_in_window)
        _check_positive("velocity", "window_ms", self.window_ms)
        _check_fraction("velocity", "discount", self.discount)


@dataclass(frozen=True)
class TemporalDecayConfig:
    """Exponential decay of entry weight with age."""

    enabled: bool = True
    half_life_ms: int = DAY_MS

    def validate(self) -> None:
        _check_positive("temporal_decay", "half_life_ms", self.half_life_ms)


@dataclass(frozen=True)
class NewSubmitterConfig:
    """Discount for the most recently first-seen share of reviewers."""

    enabled: bool = True
    recent_fraction: float = 0.2
    discount: float = 0.2

    def validate(self) -> None:
        _check_fraction("new_submitter", "recent_fraction", self.recent_fraction)
        _check_fraction("new_submitter", "discount", self.discount)


@dataclass(frozen=True)
class AnomalyConfig:
    """Flash-mob detection: many brand-new reviewers in one window."""

    enabled: bool = True
    max_new_in_window: int = 5
    window_ms: int = MINUTE_MS
    discount: float = 0.1

    def validate(self) -> None:
        _check_non_negative("anomaly", "max_new_in_window", self.max_new_in_window)
        _check_positive("anomaly", "window_ms", self.window_ms)
        _check_fraction("anomaly", "discount", self.discount)


# ---------------------------------------------------------------------------
# Extended mitigations (off by default)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SybilRankConfig:
    """Random-walk trust propagation from high-activity seed reviewers."""

    enabled: bool = False
    iterations: int = 10
    trust_threshold: float = 0.2
    discount: float = 0.1
    seed_strategy: str = "degree_weighted"

    def validate(self) -> None:
        _check_positive("sybilrank", "iterations", self.iterations)
        _check_fraction("sybilrank", "trust_threshold", self.trust_threshold)
        _check_fraction("sybilrank", "discount", self.discount)
        if self.seed_strategy not in ("uniform", "degree_weighted"):
            raise ConfigError(
                "sybilrank.seed_strategy must be 'uniform' or "
                f"'degree_weighted', got {self.seed_strategy!r}"
            )


@dataclass(frozen=True)
class JaccardConfig:
    """Clusters of reviewers with near-identical review targets and values."""

    enabled: bool = False
    similarity_threshold: float = 0.7
    min_cluster_size: int = 3
    min_subjects_reviewed: int = 2
    discount: float = 0.15

    def validate(self) -> None:
        _check_fraction("jaccard", "similarity_threshold", self.similarity_threshold)
        _check_positive("jaccard", "min_cluster_size", self.min_cluster_size)
        _check_positive("jaccard", "min_subjects_reviewed", self.min_subjects_reviewed)
        _check_fraction("jaccard", "discount", self.discount)


@dataclass(frozen=True)
class CorrelationConfig:
    """Lockstep timing between reviewers and machine-regular intervals."""

    enabled: bool = False
    lockstep_window_ms: int = 5_000
    min_lockstep_events: int = 3
    regularity_threshold: float = 0.15
    min_feedback_for_regularity: int = 5
    discount: float = 0.2

    def validate(self) -> None:
        _check_non_negative("correlation", "lockstep_window_ms", self.lockstep_window_ms)
        _check_positive("correlation", "min_lockstep_events", self.min_lockstep_events)
        _check_non_negative("correlation", "regularity_threshold", self.regularity_threshold)
        _check_positive(
            "correlation", "min_feedback_for_regularity",
            self.min_feedback_for_regularity,
        )
        _check_fraction("correlation", "discount", self.discount)


# ---------------------------------------------------------------------------
# MitigationConfig
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MitigationConfig:
    """All mitigation settings consumed by the hardened engine.

    Supplied by the caller; the engines never hard-code these constants.
    """

    graph: GraphAnalysisConfig = field(default_factory=GraphAnalysisConfig)
    velocity: VelocityConfig = field(default_factory=VelocityConfig)
    temporal_decay: TemporalDecayConfig = field(default_factory=TemporalDecayConfig)
    new_submitter: NewSubmitterConfig = field(default_factory=NewSubmitterConfig)
    anomaly: AnomalyConfig = field(default_factory=AnomalyConfig)
    sybilrank: SybilRankConfig = field(default_factory=SybilRankConfig)
    jaccard: JaccardConfig = field(default_factory=JaccardConfig)
    correlation: CorrelationConfig = field(default_factory=CorrelationConfig)

    def validate(self) -> None:
        """Validate every section.

        Raises:
            ConfigError: If any section holds an invalid value.
        """
        for f in fields(self):
            getattr(self, f.name).validate()

    @classmethod
    def disabled(cls) -> MitigationConfig:
        """Return a configuration with every mitigation switched off."""
        base = cls()
        return cls(**{
            f.name: replace(getattr(base, f.name), enabled=False)
            for f in fields(base)
        })

    def only(self, *names: str) -> MitigationConfig:
        """Return a copy with only the named mitigations enabled.

        Used to isolate a single mitigation in diagnostics and tests.

        Raises:
            ConfigError: If a name does not match a section.
        """
        known = {f.name for f in fields(self)}
        unknown = set(names) - known
        if unknown:
            raise ConfigError(f"Unknown mitigation(s): {sorted(unknown)}")
        return replace(self, **{
            name: replace(getattr(self, name), enabled=name in names)
            for name in known
        })
