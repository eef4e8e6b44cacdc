"""Integration tests for paid-order sales aggregation."""

from decimal import Decimal

import pytest
import pytest_asyncio

from backoffice.models import Order
from backoffice.repositories.level_change_repository import LevelChangeRepository
from backoffice.repositories.member_repository import MemberRepository
from backoffice.services.sales_aggregator import (
    REASON_ALREADY_AGGREGATED,
    REASON_NO_REFERRER,
    REASON_NOT_PAID,
    SalesAggregator,
)
from backoffice.utils.exceptions import BuyerNotFoundError, OrderNotFoundError


@pytest_asyncio.fixture
async def network(factory):
    """
    D (Starter) <- B (Starter) <- C <- A <- buyer.

    Starter is an auto-upgrade distributor tier from 100 in sales.
    """
    starter = await factory.distributor_tier(
        name="Starter",
        cost_rate="30",
        min_sales="100",
        auto_upgrade_enabled=True,
    )
    d, b, c, a, buyer = await factory.chain(
        {"nickname": "D", "distributor_tier": starter,
         "total_sales": Decimal("1000")},
        {"nickname": "B", "distributor_tier": starter,
         "total_sales": Decimal("1000")},
        {"nickname": "C"},
        {"nickname": "A"},
        {"nickname": "buyer"},
    )
    return {
        "starter": starter,
        "D": d.id, "B": b.id, "C": c.id, "A": a.id, "buyer": buyer,
    }


async def fresh(session, member_id):
    return await MemberRepository(session).get_fresh(member_id)


class TestAggregate:
    """Test counter fan-out."""

    @pytest.mark.asyncio
    async def test_counters_fan_out(self, session, factory, network):
        order = await factory.order(network["buyer"], "200", status="paid")

        result = await SalesAggregator(session).aggregate(order.id)

        assert result.applied
        assert not result.chain_truncated
        assert result.touched_member_ids == [
            network["A"], network["C"], network["B"], network["D"],
        ]

        a = await fresh(session, network["A"])
        assert a.direct_sales == Decimal("200.00")
        assert a.total_sales == Decimal("200.00")

        c = await fresh(session, network["C"])
        assert c.indirect_sales == Decimal("200.00")

        for key in ("B", "D"):
            distributor = await fresh(session, network[key])
            assert distributor.distributor_sales == Decimal("200.00")
            assert distributor.total_sales == Decimal("1200.00")

    @pytest.mark.asyncio
    async def test_touched_members_are_promoted(self, session, factory, network):
        order = await factory.order(network["buyer"], "200", status="paid")

        result = await SalesAggregator(session).aggregate(order.id)

        promoted = {
            e.distributor_tier.member_id
            for e in result.tier_changes
            if e.distributor_tier.changed
        }
        assert promoted == {network["A"], network["C"]}

        a = await fresh(session, network["A"])
        assert a.distributor_tier_id == network["starter"].id

        history = await LevelChangeRepository(session).get_history(network["A"])
        assert len(history) == 1
        assert history[0].tier_type == "distributor"
        assert history[0].old_tier_id is None
        assert history[0].new_tier_id == network["starter"].id
        assert history[0].reason == "auto_upgrade"

    @pytest.mark.asyncio
    async def test_distributor_referrer_books_distributor_sales(
        self, session, factory, network
    ):
        """A sale under a distributor referrer lands in distributor_sales."""
        b = await fresh(session, network["B"])
        buyer = await factory.member("direct_buyer", referrer=b)
        order = await factory.order(buyer, "50", status="paid")

        await SalesAggregator(session).aggregate(order.id)

        b = await fresh(session, network["B"])
        assert b.distributor_sales == Decimal("50.00")
        assert b.direct_sales == Decimal("0")

    @pytest.mark.asyncio
    async def test_depth_limit_keeps_found_ancestors(
        self, session, factory, network
    ):
        order = await factory.order(network["buyer"], "200", status="paid")

        result = await SalesAggregator(session, max_chain_depth=1).aggregate(
            order.id
        )

        assert result.applied
        assert result.chain_truncated
        b = await fresh(session, network["B"])
        d = await fresh(session, network["D"])
        assert b.distributor_sales == Decimal("200.00")
        assert d.distributor_sales == Decimal("0")


class TestIdempotence:
    """Test the one-time aggregation marker."""

    @pytest.mark.asyncio
    async def test_second_call_is_noop(self, session, factory, network):
        order = await factory.order(network["buyer"], "200", status="paid")
        aggregator = SalesAggregator(session)

        await aggregator.aggregate(order.id)
        again = await aggregator.aggregate(order.id)

        assert not again.applied
        assert again.reason == REASON_ALREADY_AGGREGATED
        a = await fresh(session, network["A"])
        assert a.total_sales == Decimal("200.00")

    @pytest.mark.asyncio
    async def test_unpaid_order_is_skipped(self, session, factory, network):
        order = await factory.order(network["buyer"], "200", status="completed")

        result = await SalesAggregator(session).aggregate(order.id)

        assert not result.applied
        assert result.reason == REASON_NOT_PAID
        a = await fresh(session, network["A"])
        assert a.total_sales == Decimal("0")

    @pytest.mark.asyncio
    async def test_no_referrer_still_claims_marker(self, session, factory):
        buyer = await factory.member("loner")
        order = await factory.order(buyer, "10", status="paid")
        aggregator = SalesAggregator(session)

        first = await aggregator.aggregate(order.id)
        second = await aggregator.aggregate(order.id)

        assert first.applied
        assert first.reason == REASON_NO_REFERRER
        assert first.touched_member_ids == []
        assert second.reason == REASON_ALREADY_AGGREGATED

    @pytest.mark.asyncio
    async def test_missing_order(self, session):
        with pytest.raises(OrderNotFoundError):
            await SalesAggregator(session).aggregate(31337)

    @pytest.mark.asyncio
    async def test_missing_buyer_leaves_marker_unclaimed(self, session, factory):
        order = await factory.order(999, "100", status="paid")
        await session.commit()

        with pytest.raises(BuyerNotFoundError):
            await SalesAggregator(session).aggregate(order.id)

        order = await session.get(Order, order.id, populate_existing=True)
        assert order.sales_aggregated_at is None

        # Once the buyer row exists the sale aggregates normally
        await factory.member("restored", id=999)
        result = await SalesAggregator(session).aggregate(order.id)
        assert result.applied
        assert result.reason == REASON_NO_REFERRER
