"""Tests for the TEE attestation multiplier."""

from __future__ import annotations

import pytest

from skilltrust.core.scoring.models import ScoreSummary, TEEState, TEEStatus
from skilltrust.core.scoring.tee import TEEConfig, tee_multiplier, tee_weighted
from skilltrust.exceptions import ConfigError


class TestTEEMultiplier:

    @pytest.mark.parametrize(
        ("state", "expected"),
        [
            (None, 1.0),
            (TEEState(), 1.0),
            (TEEState(status=TEEStatus.VERIFIED, tier3_active=True), 1.5),
            (TEEState(status=TEEStatus.VERIFIED, tier3_active=False), 1.0),
            (TEEState(status=TEEStatus.STALE, tier3_active=True), 1.0),
            (TEEState(status=TEEStatus.MISMATCH), 0.9),
            (TEEState(status=TEEStatus.FAILED), 0.8),
        ],
    )
    def test_status_weights(self, state: TEEState | None, expected: float) -> None:
        assert tee_multiplier(state) == pytest.approx(expected)

    def test_custom_trust_weight(self) -> None:
        state = TEEState(status=TEEStatus.VERIFIED, trust_weight=1.2, tier3_active=True)
        assert tee_multiplier(state) == 1.2


class TestTEEWeighted:

    def test_verified_tier3_dampened_plus_boost(self) -> None:
        base = ScoreSummary.build("skill-a", 60.0, 8)
        state = TEEState(status=TEEStatus.VERIFIED, tier3_active=True)
        # 60 * (1 + 0.5 * 0.3) + 5
        assert tee_weighted(base, state).summary_value == 74.0

    def test_failed_attestation_lowers_score(self) -> None:
        base = ScoreSummary.build("skill-a", 80.0, 8)
        state = TEEState(status=TEEStatus.FAILED)
        # 80 * (1 - 0.2 * 0.3)
        assert tee_weighted(base, state).summary_value == pytest.approx(75.2)

    def test_unregistered_unchanged(self) -> None:
        base = ScoreSummary.build("skill-a", 42.5, 3)
        assert tee_weighted(base, None) == base

    def test_no_boost_without_feedback(self) -> None:
        base = ScoreSummary.empty("skill-a")
        state = TEEState(status=TEEStatus.VERIFIED, tier3_active=True)
        assert tee_weighted(base, state).summary_value == 0.0

    def test_boost_clamped_at_ceiling(self) -> None:
        base = ScoreSummary.build("skill-a", 95.0, 8)
        state = TEEState(status=TEEStatus.VERIFIED, tier3_active=True)
        assert tee_weighted(base, state).summary_value == 100.0


class TestTEEConfig:

    def test_defaults_validate(self) -> None:
        TEEConfig().validate()

    def test_dampening_out_of_range(self) -> None:
        with pytest.raises(ConfigError, match="dampening"):
            TEEConfig(dampening=2.0).validate()

    def test_negative_boost(self) -> None:
        with pytest.raises(ConfigError):
            TEEConfig(tier3_score_boost=-1.0).validate()
