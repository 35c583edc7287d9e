"""Tests for credibility classification and the usage-weighted score."""

from __future__ import annotations

import pytest

from skilltrust.core.mitigations.config import MitigationConfig
from skilltrust.core.scoring.credibility import (
    CredibilityConfig,
    classify_reviewer,
    credibility_score,
)
from skilltrust.core.scoring.hardened import hardened_score
from skilltrust.core.scoring.models import CredibilityTier
from skilltrust.exceptions import ConfigError


class TestClassification:

    def test_paid_and_staked(self) -> None:
        assert classify_reviewer(3, True) is CredibilityTier.PAID_AND_STAKED

    def test_paid_unstaked(self) -> None:
        assert classify_reviewer(1, False) is CredibilityTier.PAID_UNSTAKED

    def test_staked_without_receipt_is_unpaid(self) -> None:
        assert classify_reviewer(0, True) is CredibilityTier.UNPAID_UNSTAKED

    def test_nothing_is_unpaid(self) -> None:
        assert classify_reviewer(0, False) is CredibilityTier.UNPAID_UNSTAKED


class TestMultiplier:
    """m = min + (max - min) * min(1, receipts / 10)."""

    @pytest.mark.parametrize(
        ("tier", "receipts", "expected"),
        [
            (CredibilityTier.PAID_AND_STAKED, 1, 5.5),
            (CredibilityTier.PAID_AND_STAKED, 5, 7.5),
            (CredibilityTier.PAID_AND_STAKED, 10, 10.0),
            (CredibilityTier.PAID_AND_STAKED, 50, 10.0),
            (CredibilityTier.PAID_UNSTAKED, 1, 1.1),
            (CredibilityTier.PAID_UNSTAKED, 10, 2.0),
            (CredibilityTier.UNPAID_UNSTAKED, 0, 0.1),
        ],
    )
    def test_multiplier(self, tier: CredibilityTier, receipts: int, expected: float) -> None:
        assert CredibilityConfig().multiplier(tier, receipts) == pytest.approx(expected)

    def test_inverted_range_rejected(self) -> None:
        with pytest.raises(ConfigError):
            CredibilityConfig(paid_staked_min=20.0).validate()

    def test_non_positive_weight_rejected(self) -> None:
        with pytest.raises(ConfigError, match="unpaid_weight"):
            CredibilityConfig(unpaid_weight=0.0).validate()


class TestCredibilityScore:

    def test_paid_staked_entry_dominates(self, make_entry, now) -> None:
        paid = make_entry("skill-a", "whale", value=100, timestamp=now)
        free = make_entry("skill-a", "drive-by", value=0, timestamp=now)
        result = credibility_score(
            [paid, free], "skill-a", now,
            payment_receipts={("skill-a", "whale"): 10},
            active_stakers={"whale"},
            mitigations=MitigationConfig.disabled(),
        )
        # weights 10 and 0.1
        assert result.summary.summary_value == pytest.approx(1000 / 10.1, abs=0.01)

    def test_receipts_are_per_subject(self, make_entry, now) -> None:
        entry = make_entry("skill-a", "whale", value=80, timestamp=now)
        result = credibility_score(
            [entry], "skill-a", now,
            payment_receipts={("skill-b", "whale"): 10},
            active_stakers={"whale"},
        )
        assert result.entries[0].tier is CredibilityTier.UNPAID_UNSTAKED
        assert not result.entries[0].verified_user

    def test_missing_signals_equal_hardened(self, make_entry, now) -> None:
        entries = [
            make_entry("skill-a", f"r{i}", value=50 + 10 * i, timestamp=now - i * 3_600_000)
            for i in range(4)
        ]
        cred = credibility_score(entries, "skill-a", now)
        hard = hardened_score(entries, "skill-a", now)
        assert cred.summary.summary_value == pytest.approx(hard.summary.summary_value, abs=0.01)

    def test_sybil_penalty_still_applies(self, make_entry, now) -> None:
        entries = [
            make_entry("bob", "alice", value=90, timestamp=now),
            make_entry("alice", "bob", value=90, timestamp=now),
        ]
        result = credibility_score(
            entries, "bob", now,
            payment_receipts={("bob", "alice"): 10},
            active_stakers={"alice"},
        )
        assert result.summary.summary_value == 9.0

    def test_empty_subject(self, now) -> None:
        result = credibility_score([], "skill-a", now)
        assert result.summary.summary_value == 0.0
        assert result.breakdown.weight_differential == 1.0


class TestTierBreakdown:

    def test_breakdown_counts_and_differential(self, make_entry, now) -> None:
        entries = [
            make_entry("skill-a", "whale", value=90, timestamp=now),
            make_entry("skill-a", "buyer", value=70, timestamp=now),
            make_entry("skill-a", "anon-1", value=20, timestamp=now),
            make_entry("skill-a", "anon-2", value=40, timestamp=now),
        ]
        result = credibility_score(
            entries, "skill-a", now,
            payment_receipts={("skill-a", "whale"): 10, ("skill-a", "buyer"): 10},
            active_stakers={"whale"},
        )
        breakdown = result.breakdown
        assert breakdown.tiers[CredibilityTier.PAID_AND_STAKED].count == 1
        assert breakdown.tiers[CredibilityTier.PAID_UNSTAKED].count == 1
        unpaid = breakdown.tiers[CredibilityTier.UNPAID_UNSTAKED]
        assert unpaid.count == 2
        assert unpaid.avg_value == 30.0
        assert unpaid.avg_multiplier == pytest.approx(0.1)
        assert breakdown.total_verified == 2
        assert breakdown.total_unverified == 2
        assert breakdown.weight_differential == pytest.approx(100.0)

    def test_single_tier_differential_is_one(self, make_entry, now) -> None:
        entries = [make_entry("skill-a", "anon", value=50, timestamp=now)]
        result = credibility_score(entries, "skill-a", now)
        assert result.breakdown.weight_differential == 1.0

    def test_to_dict_uses_tier_names(self, make_entry, now) -> None:
        entries = [make_entry("skill-a", "anon", value=50, timestamp=now)]
        data = credibility_score(entries, "skill-a", now).breakdown.to_dict()
        assert set(data["tiers"]) == {"paid_and_staked", "paid_unstaked", "unpaid_unstaked"}
