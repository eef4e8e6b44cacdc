"""Unit tests for the order points formula."""

from decimal import Decimal

import pytest

from backoffice.services.points_aggregator import calculate_order_points


class TestCalculateOrderPoints:
    """Test (base + amount * multiplier) * points_rate."""

    def test_amount_only(self):
        assert calculate_order_points(Decimal("120")) == 120

    def test_base_multiplier_and_tier_rate(self):
        points = calculate_order_points(
            Decimal("99.50"), 10, Decimal("2"), Decimal("1.5")
        )
        # (10 + 199) * 1.5 = 313.5
        assert points == 314

    def test_rounds_half_up(self):
        assert calculate_order_points(Decimal("0.5")) == 1
        assert calculate_order_points(Decimal("0.49")) == 0

    @pytest.mark.parametrize("value", [None, Decimal("0"), Decimal("-1")])
    def test_non_positive_factors_count_as_one(self, value):
        assert calculate_order_points(
            Decimal("50"), multiplier=value, points_rate=value
        ) == 50

    def test_negative_amount_earns_only_base(self):
        assert calculate_order_points(Decimal("-30"), base_points=5) == 5
