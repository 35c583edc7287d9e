"""Tests for mitigation configuration defaults and validation."""

from __future__ import annotations

import pytest

from skilltrust.core.mitigations.config import (
    DAY_MS,
    AnomalyConfig,
    GraphAnalysisConfig,
    MitigationConfig,
    NewSubmitterConfig,
    SybilRankConfig,
    TemporalDecayConfig,
    VelocityConfig,
)
from skilltrust.exceptions import ConfigError


class TestDefaults:
    """Defaults match the recommended production values."""

    def test_core_mitigations_enabled(self) -> None:
        config = MitigationConfig()
        assert config.graph.enabled
        assert config.velocity.enabled
        assert config.temporal_decay.enabled
        assert config.new_submitter.enabled
        assert config.anomaly.enabled

    def test_extended_mitigations_disabled(self) -> None:
        config = MitigationConfig()
        assert not config.sybilrank.enabled
        assert not config.jaccard.enabled
        assert not config.correlation.enabled

    def test_default_constants(self) -> None:
        config = MitigationConfig()
        assert config.graph.discount == 0.1
        assert (config.velocity.max_in_window, config.velocity.window_ms) == (10, 60_000)
        assert config.velocity.discount == 0.5
        assert config.temporal_decay.half_life_ms == DAY_MS
        assert config.new_submitter.recent_fraction == 0.2
        assert config.new_submitter.discount == 0.2
        assert (config.anomaly.max_new_in_window, config.anomaly.discount) == (5, 0.1)

    def test_defaults_validate(self) -> None:
        MitigationConfig().validate()


class TestValidation:
    """validate() rejects out-of-range constants."""

    @pytest.mark.parametrize(
        "section",
        [
            GraphAnalysisConfig(discount=1.5),
            VelocityConfig(window_ms=0),
            VelocityConfig(max_in_window=-1),
            VelocityConfig(discount=-0.1),
            TemporalDecayConfig(half_life_ms=0),
            NewSubmitterConfig(recent_fraction=1.2),
            AnomalyConfig(window_ms=-5),
            SybilRankConfig(seed_strategy="random"),
            SybilRankConfig(iterations=0),
        ],
    )
    def test_invalid_section_raises(self, section) -> None:
        with pytest.raises(ConfigError):
            section.validate()

    def test_nested_invalid_section_raises(self) -> None:
        config = MitigationConfig(velocity=VelocityConfig(window_ms=-1))
        with pytest.raises(ConfigError, match="velocity.window_ms"):
            config.validate()


class TestToggles:

    def test_disabled_turns_everything_off(self) -> None:
        config = MitigationConfig.disabled()
        assert not any(
            getattr(config, name).enabled
            for name in ("graph", "velocity", "temporal_decay", "new_submitter",
                         "anomaly", "sybilrank", "jaccard", "correlation")
        )

    def test_disabled_keeps_constants(self) -> None:
        assert MitigationConfig.disabled().graph.discount == 0.1

    def test_only_isolates_one_mitigation(self) -> None:
        config = MitigationConfig().only("velocity")
        assert config.velocity.enabled
        assert not config.graph.enabled
        assert not config.temporal_decay.enabled

    def test_only_unknown_name_raises(self) -> None:
        with pytest.raises(ConfigError, match="Unknown mitigation"):
            MitigationConfig().only("telepathy")
