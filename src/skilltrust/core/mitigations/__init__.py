"""Anti-manipulation mitigations for the hardened scoring engine.

Each detector is a pure function over a feedback snapshot returning the
entries (or addresses) matching its predicate. The hardened engine turns
those predicates into per-entry weight factors.

Submodules:
    config       -- MitigationConfig and per-mitigation settings
    models       -- MitigationFlag, EntryWeight, MitigationFlags
    graph        -- mutual-feedback pairs and sybil clusters
    velocity     -- velocity bursts, anomaly bursts, behavioral shift
    temporal     -- temporal decay and new-submitter classification
    sybilrank    -- SybilRank trust propagation (off by default)
    jaccard      -- co-review fingerprint clusters (off by default)
    correlation  -- lockstep timing and regular intervals (off by default)
"""

from skilltrust.core.mitigations.config import (
    AnomalyConfig,
    CorrelationConfig,
    GraphAnalysisConfig,
    JaccardConfig,
    MitigationConfig,
    NewSubmitterConfig,
    SybilRankConfig,
    TemporalDecayConfig,
    VelocityConfig,
)
from skilltrust.core.mitigations.correlation import (
    CorrelationResult,
    detect_temporal_correlation,
)
from skilltrust.core.mitigations.graph import (
    GraphAnalysis,
    MutualPair,
    analyze_graph,
    detect_mutual_pairs,
    detect_self_ratings,
    detect_sybil_clusters,
    sybil_membership,
)
from skilltrust.core.mitigations.jaccard import JaccardResult, detect_jaccard_clusters
from skilltrust.core.mitigations.models import (
    EntryWeight,
    MitigationFlag,
    MitigationFlags,
)
from skilltrust.core.mitigations.sybilrank import SybilRankResult, compute_sybilrank
from skilltrust.core.mitigations.temporal import (
    decay_weight,
    is_decayed,
    new_submitters,
    now_ms,
)
from skilltrust.core.mitigations.velocity import (
    BehavioralShift,
    detect_anomaly_bursts,
    detect_behavioral_shift,
    detect_velocity_bursts,
)

__all__ = [
    "AnomalyConfig",
    "BehavioralShift",
    "CorrelationConfig",
    "CorrelationResult",
    "EntryWeight",
    "GraphAnalysis",
    "GraphAnalysisConfig",
    "JaccardConfig",
    "JaccardResult",
    "MitigationConfig",
    "MitigationFlag",
    "MitigationFlags",
    "MutualPair",
    "NewSubmitterConfig",
    "SybilRankConfig",
    "SybilRankResult",
    "TemporalDecayConfig",
    "VelocityConfig",
    "analyze_graph",
    "compute_sybilrank",
    "decay_weight",
    "detect_anomaly_bursts",
    "detect_behavioral_shift",
    "detect_jaccard_clusters",
    "detect_mutual_pairs",
    "detect_self_ratings",
    "detect_sybil_clusters",
    "detect_temporal_correlation",
    "detect_velocity_bursts",
    "is_decayed",
    "new_submitters",
    "now_ms",
    "sybil_membership",
]
