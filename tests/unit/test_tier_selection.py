"""
Unit tests for best-fit tier selection and month parsing.

Selection is pure given (points / sales / fans, tier configuration).
"""

from datetime import UTC, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from backoffice.services.team_incentive_service import incentive_window_holds
from backoffice.services.tier_upgrade.evaluator import (
    distributor_tier_fits,
    select_distributor_tier,
    select_member_tier,
)
from backoffice.utils.datetime_utils import month_bounds


def member_tier(id, rank, min_points, max_points=None):
    return SimpleNamespace(
        id=id, rank=rank, min_points=min_points, max_points=max_points
    )


def dist_tier(
    id, rank, min_sales="0", max_sales=None, min_fans=0, max_fans=None,
    logic="and",
):
    return SimpleNamespace(
        id=id,
        rank=rank,
        min_sales=Decimal(min_sales),
        max_sales=Decimal(max_sales) if max_sales is not None else None,
        min_fans=min_fans,
        max_fans=max_fans,
        upgrade_condition_logic=logic,
    )


@pytest.fixture
def member_tiers():
    """Highest rank first, as the tier repository returns them."""
    return [
        member_tier(3, 3, 1000),
        member_tier(2, 2, 100, 999),
        member_tier(1, 1, 0, 99),
    ]


class TestMemberTierSelection:
    """Test member tier best fit."""

    @pytest.mark.parametrize(
        "points,expected",
        [(0, 1), (99, 1), (100, 2), (999, 2), (1000, 3), (50000, 3)],
    )
    def test_best_fit(self, member_tiers, points, expected):
        assert select_member_tier(points, member_tiers).id == expected

    def test_no_fit(self):
        tiers = [member_tier(1, 1, 100)]
        assert select_member_tier(50, tiers) is None

    def test_deterministic(self, member_tiers):
        first = select_member_tier(150, member_tiers)
        assert all(
            select_member_tier(150, member_tiers) is first for _ in range(3)
        )


class TestDistributorTierSelection:
    """Test distributor windows and condition logic."""

    def test_and_requires_both_windows(self):
        tier = dist_tier(1, 1, min_sales="1000", min_fans=10)
        assert distributor_tier_fits(tier, Decimal("1500"), 10)
        assert not distributor_tier_fits(tier, Decimal("1500"), 9)
        assert not distributor_tier_fits(tier, Decimal("999"), 50)

    def test_or_accepts_either_window(self):
        tier = dist_tier(1, 1, min_sales="1000", min_fans=10, logic="or")
        assert distributor_tier_fits(tier, Decimal("1500"), 0)
        assert distributor_tier_fits(tier, Decimal("0"), 10)
        assert not distributor_tier_fits(tier, Decimal("10"), 2)

    def test_non_positive_max_is_unbounded(self):
        tier = dist_tier(1, 1, min_sales="100", max_sales="0", max_fans=0)
        assert distributor_tier_fits(tier, Decimal("1000000"), 100000)

    def test_max_window_is_inclusive(self):
        tier = dist_tier(1, 1, max_sales="500", max_fans=5)
        assert distributor_tier_fits(tier, Decimal("500"), 5)
        assert not distributor_tier_fits(tier, Decimal("500.01"), 5)

    def test_highest_rank_wins(self):
        tiers = [
            dist_tier(2, 2, min_sales="5000"),
            dist_tier(1, 1, min_sales="100"),
        ]
        assert select_distributor_tier(Decimal("6000"), 0, tiers).id == 2
        assert select_distributor_tier(Decimal("200"), 0, tiers).id == 1
        assert select_distributor_tier(Decimal("50"), 0, tiers) is None


class TestIncentiveWindow:
    """Test team-expansion incentive base window."""

    def test_missing_bounds(self):
        tier = SimpleNamespace(min_incentive_base=None, max_incentive_base=None)
        assert incentive_window_holds(tier, Decimal("0.01"))

    def test_bounded(self):
        tier = SimpleNamespace(
            min_incentive_base=Decimal("100"),
            max_incentive_base=Decimal("1000"),
        )
        assert incentive_window_holds(tier, Decimal("100"))
        assert incentive_window_holds(tier, Decimal("1000"))
        assert not incentive_window_holds(tier, Decimal("99.99"))
        assert not incentive_window_holds(tier, Decimal("1000.01"))


class TestMonthBounds:
    """Test calendar month parsing."""

    def test_regular_month(self):
        start, end = month_bounds("2026-09")
        assert start == datetime(2026, 9, 1, tzinfo=UTC)
        assert end == datetime(2026, 10, 1, tzinfo=UTC)

    def test_december_rolls_over(self):
        start, end = month_bounds("2026-12")
        assert end == datetime(2027, 1, 1, tzinfo=UTC)

    @pytest.mark.parametrize("month", ["2026-13", "2026-9", "2026/09", "", "09-2026"])
    def test_invalid(self, month):
        with pytest.raises(ValueError):
            month_bounds(month)
