"""
Unit tests for rate resolution.

Tests cover:
- Precedence of personal overrides, member tiers and distributor tiers
- Scaling of legacy 0-1 distributor fields to percents
- Indirect fallback through the direct referrer's tier
- Eligibility helpers
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from backoffice.services.commission.rate_resolver import (
    RateKind,
    has_distributor_tier,
    is_cost_holder,
    is_direct_eligible,
    is_indirect_eligible,
    is_sharing_earner,
    resolve_rate,
)


class TestDirectRate:
    """Test direct rate precedence."""

    def test_personal_override_wins(self, make_actor, sharing_tier):
        """Personal rate pre-empts the member tier."""
        actor = make_actor(
            member_tier=sharing_tier, personal_direct_rate=Decimal("12")
        )
        assert resolve_rate(actor, RateKind.DIRECT) == Decimal("12")

    def test_member_tier_for_sharing_earner(self, make_actor, sharing_tier):
        actor = make_actor(member_tier=sharing_tier)
        assert resolve_rate(actor, RateKind.DIRECT) == Decimal("10")

    def test_member_tier_ignored_without_sharing_flag(
        self, make_actor, make_distributor_tier
    ):
        """Non-sharing member tier falls through to the sharer rate."""
        tier = SimpleNamespace(
            is_sharing_earner=False,
            direct_rate=Decimal("10"),
            indirect_rate=Decimal("5"),
        )
        actor = make_actor(
            member_tier=tier,
            distributor_tier=make_distributor_tier(sharer_direct_rate="0.08"),
        )
        assert resolve_rate(actor, RateKind.DIRECT) == Decimal("8")

    def test_zero_personal_rate_is_skipped(self, make_actor, sharing_tier):
        """Only strictly positive candidates win."""
        actor = make_actor(
            member_tier=sharing_tier, personal_direct_rate=Decimal("0")
        )
        assert resolve_rate(actor, RateKind.DIRECT) == Decimal("10")

    def test_no_source_returns_none(self, make_actor):
        assert resolve_rate(make_actor(), RateKind.DIRECT) is None


class TestIndirectRate:
    """Test indirect rate precedence and downline fallback."""

    def test_member_tier_indirect(self, make_actor, sharing_tier):
        actor = make_actor(member_tier=sharing_tier)
        assert resolve_rate(actor, RateKind.INDIRECT) == Decimal("5")

    def test_own_sharer_rate_scaled(self, make_actor, make_distributor_tier):
        actor = make_actor(
            distributor_tier=make_distributor_tier(sharer_indirect_rate="0.03")
        )
        assert resolve_rate(actor, RateKind.INDIRECT) == Decimal("3")

    def test_fallback_to_direct_referrer_tier(
        self, make_actor, make_distributor_tier
    ):
        """Direct referrer's sharer indirect rate pays its own upline."""
        indirect = make_actor(id=2)
        direct = make_actor(
            id=1,
            referrer_id=2,
            distributor_tier=make_distributor_tier(sharer_indirect_rate="0.02"),
        )
        assert resolve_rate(
            indirect, RateKind.INDIRECT, downline=direct
        ) == Decimal("2")

    def test_own_rate_beats_fallback(self, make_actor, make_distributor_tier):
        indirect = make_actor(id=2, personal_indirect_rate=Decimal("4"))
        direct = make_actor(
            id=1,
            distributor_tier=make_distributor_tier(sharer_indirect_rate="0.02"),
        )
        assert resolve_rate(
            indirect, RateKind.INDIRECT, downline=direct
        ) == Decimal("4")


class TestCostRate:
    """Test cost rate precedence."""

    def test_tier_cost_rate(self, make_actor, make_distributor_tier):
        actor = make_actor(distributor_tier=make_distributor_tier("30"))
        assert resolve_rate(actor, RateKind.COST) == Decimal("30")

    def test_legacy_procurement_cost_scaled(
        self, make_actor, make_distributor_tier
    ):
        """procurement_cost 0.35 is used only when cost_rate is zero."""
        actor = make_actor(
            distributor_tier=make_distributor_tier("0", procurement_cost="0.35")
        )
        assert resolve_rate(actor, RateKind.COST) == Decimal("35")

    def test_personal_cost_override(self, make_actor, make_distributor_tier):
        actor = make_actor(
            distributor_tier=make_distributor_tier("30"),
            personal_cost_rate=Decimal("25"),
        )
        assert resolve_rate(actor, RateKind.COST) == Decimal("25")

    def test_pure_sharer_has_no_cost(self, make_actor, make_distributor_tier):
        actor = make_actor(
            distributor_tier=make_distributor_tier("0", sharer_direct_rate="0.1")
        )
        assert resolve_rate(actor, RateKind.COST) is None

    @pytest.mark.parametrize(
        "fraction,percent",
        [("0.05", "5"), ("0.125", "12.5"), ("1", "100")],
    )
    def test_resolved_rates_are_percent_scale(
        self, make_actor, make_distributor_tier, fraction, percent
    ):
        actor = make_actor(
            distributor_tier=make_distributor_tier(
                "0", procurement_cost=fraction
            )
        )
        assert resolve_rate(actor, RateKind.COST) == Decimal(percent)

    def test_missing_actor(self):
        assert resolve_rate(None, RateKind.COST) is None


class TestEligibility:
    """Test eligibility helpers."""

    def test_sharing_earner_is_direct_eligible(self, make_actor, sharing_tier):
        actor = make_actor(member_tier=sharing_tier)
        assert is_sharing_earner(actor)
        assert is_direct_eligible(actor)

    def test_personal_rate_alone_is_not_direct_eligible(self, make_actor):
        """Eligibility needs a sharing tier or a sharer rate."""
        actor = make_actor(personal_direct_rate=Decimal("10"))
        assert not is_direct_eligible(actor)

    def test_indirect_eligible_through_fallback(
        self, make_actor, make_distributor_tier
    ):
        indirect = make_actor(id=2)
        direct = make_actor(
            id=1,
            distributor_tier=make_distributor_tier(sharer_indirect_rate="0.01"),
        )
        assert is_indirect_eligible(indirect, direct)
        assert not is_indirect_eligible(None, direct)
        assert not is_indirect_eligible(indirect, make_actor(id=3))

    def test_cost_holder(self, make_actor, make_distributor_tier):
        assert is_cost_holder(make_actor(distributor_tier=make_distributor_tier()))
        assert is_cost_holder(make_actor(personal_cost_rate=Decimal("40")))
        assert not is_cost_holder(make_actor(personal_cost_rate=Decimal("0")))
        assert not has_distributor_tier(make_actor())
