"""Integration tests for the monthly team-expansion incentive batch."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
import pytest_asyncio

from backoffice.repositories.member_repository import MemberRepository
from backoffice.services.team_incentive_service import TeamIncentiveService
from backoffice.utils.exceptions import (
    IncentiveEntryNotFoundError,
    InvalidMonthError,
    InvalidStatusTransitionError,
)


SEPTEMBER = datetime(2026, 9, 10, 9, 30, tzinfo=UTC)
OCTOBER = datetime(2026, 10, 2, 8, 0, tzinfo=UTC)


@pytest_asyncio.fixture
async def month_setup(factory):
    """
    One incentive-earning distributor plus one per skip reason.

    D's September: 600 completed + 400 paid, 300 refunded (excluded);
    a 1000 October order falls outside the month.
    """
    dist_tier = await factory.distributor_tier(name="Distributor", cost_rate="30")
    team_tier = await factory.team_expansion_tier(
        name="Team Builder", incentive_rate="5", min_incentive_base="100"
    )
    referrer = await factory.member("R", team_expansion_tier=team_tier)
    plain_referrer = await factory.member("P")

    d = await factory.member("D", referrer=referrer, distributor_tier=dist_tier)
    await factory.order(d, "600", status="completed", paid_at=SEPTEMBER)
    await factory.order(d, "400", status="paid", paid_at=SEPTEMBER)
    await factory.order(d, "300", status="refunded", paid_at=SEPTEMBER)
    await factory.order(d, "1000", status="completed", paid_at=OCTOBER)

    orphan = await factory.member("E", distributor_tier=dist_tier)
    await factory.order(orphan, "500", paid_at=SEPTEMBER)

    untiered = await factory.member(
        "F", referrer=plain_referrer, distributor_tier=dist_tier
    )
    await factory.order(untiered, "500", paid_at=SEPTEMBER)

    small = await factory.member(
        "G", referrer=referrer, distributor_tier=dist_tier
    )
    await factory.order(small, "50", paid_at=SEPTEMBER)

    await factory.member("H", referrer=referrer, distributor_tier=dist_tier)

    return {"referrer": referrer, "distributor": d}


class TestRunMonth:
    """Test the monthly batch."""

    @pytest.mark.asyncio
    async def test_incentive_and_skip_reasons(self, session, month_setup):
        result = await TeamIncentiveService(session).run_month("2026-09")

        assert result.scanned == 5
        assert len(result.entries) == 1
        entry = result.entries[0]
        assert entry.distributor_id == month_setup["distributor"].id
        assert entry.referrer_id == month_setup["referrer"].id
        assert entry.monthly_sales == Decimal("1000.00")
        assert entry.incentive_base == Decimal("100.00")
        assert entry.incentive_amount == Decimal("50.00")
        assert entry.status == "pending"
        assert result.total_amount == Decimal("50.00")

        assert result.no_referrer == 1
        assert result.no_tier == 1
        assert result.outside_window == 1
        assert result.no_sales == 1

    @pytest.mark.asyncio
    async def test_rerun_adds_nothing(self, session, month_setup):
        service = TeamIncentiveService(session)
        await service.run_month("2026-09")

        again = await service.run_month("2026-09")

        assert again.entries == []
        assert again.already_calculated == 1

    @pytest.mark.asyncio
    async def test_other_month_is_independent(self, session, month_setup):
        result = await TeamIncentiveService(session).run_month("2026-10")

        assert [e.monthly_sales for e in result.entries] == [Decimal("1000.00")]
        assert result.entries[0].calculation_month == "2026-10"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("month", ["2026-13", "September", "2026/09"])
    async def test_invalid_month(self, session, month):
        with pytest.raises(InvalidMonthError):
            await TeamIncentiveService(session).run_month(month)


class TestSettlement:
    """Test incentive confirmation and cancellation."""

    @pytest.mark.asyncio
    async def test_confirm_credits_referrer(self, session, month_setup):
        service = TeamIncentiveService(session)
        result = await service.run_month("2026-09")

        await service.confirm(result.entries[0].id)

        referrer = await MemberRepository(session).get_fresh(
            month_setup["referrer"].id
        )
        assert referrer.available_team_incentive == Decimal("50.00")
        assert referrer.total_team_incentive == Decimal("50.00")
        # Commission balances are a separate ledger
        assert referrer.available_commission == Decimal("0")

    @pytest.mark.asyncio
    async def test_cancel_then_confirm_is_rejected(self, session, month_setup):
        service = TeamIncentiveService(session)
        result = await service.run_month("2026-09")
        entry_id = result.entries[0].id

        cancelled = await service.cancel(entry_id)
        assert cancelled.status == "cancelled"

        with pytest.raises(InvalidStatusTransitionError):
            await service.confirm(entry_id)

    @pytest.mark.asyncio
    async def test_missing_entry(self, session):
        with pytest.raises(IncentiveEntryNotFoundError):
            await TeamIncentiveService(session).cancel(99)
