"""
Shared fixtures for integration tests.

Each test gets a fresh in-memory SQLite database (aiosqlite) with the full
schema, plus a factory for tiers, members and orders.
"""

import itertools
from datetime import UTC, datetime
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from backoffice.models import (
    Base,
    DistributorTier,
    Member,
    MemberTier,
    Order,
    PointSourceConfig,
    TeamExpansionTier,
)


@pytest_asyncio.fixture
async def engine():
    """In-memory database engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    """Session configured like the application session maker."""
    maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with maker() as session:
        yield session


class Factory:
    """Creates persisted rows with relationships loaded."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._order_numbers = itertools.count(1)

    async def _save(self, entity):
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def member_tier(
        self,
        name: str = "Sharer",
        rank: int = 1,
        direct_rate: str = "10",
        indirect_rate: str = "5",
        is_sharing_earner: bool = True,
        min_points: int = 0,
        max_points: int | None = None,
        points_rate: str = "1",
        auto_upgrade_enabled: bool = False,
    ) -> MemberTier:
        return await self._save(
            MemberTier(
                name=name,
                rank=rank,
                direct_rate=Decimal(direct_rate),
                indirect_rate=Decimal(indirect_rate),
                is_sharing_earner=is_sharing_earner,
                min_points=min_points,
                max_points=max_points,
                auto_upgrade_enabled=auto_upgrade_enabled,
                points_rate=Decimal(points_rate),
            )
        )

    async def distributor_tier(
        self,
        name: str = "Distributor",
        rank: int = 1,
        cost_rate: str = "0",
        procurement_cost: str | None = None,
        sharer_direct_rate: str | None = None,
        sharer_indirect_rate: str | None = None,
        min_sales: str = "0",
        max_sales: str | None = None,
        min_fans: int = 0,
        max_fans: int | None = None,
        upgrade_condition_logic: str = "and",
        auto_upgrade_enabled: bool = False,
    ) -> DistributorTier:
        def dec(value):
            return Decimal(value) if value is not None else None

        return await self._save(
            DistributorTier(
                name=name,
                rank=rank,
                cost_rate=Decimal(cost_rate),
                procurement_cost=dec(procurement_cost),
                sharer_direct_rate=dec(sharer_direct_rate),
                sharer_indirect_rate=dec(sharer_indirect_rate),
                min_sales=Decimal(min_sales),
                max_sales=dec(max_sales),
                min_fans=min_fans,
                max_fans=max_fans,
                upgrade_condition_logic=upgrade_condition_logic,
                auto_upgrade_enabled=auto_upgrade_enabled,
            )
        )

    async def team_expansion_tier(
        self,
        name: str = "Team",
        incentive_rate: str = "5",
        min_incentive_base: str | None = None,
        max_incentive_base: str | None = None,
        status: str = "active",
    ) -> TeamExpansionTier:
        return await self._save(
            TeamExpansionTier(
                name=name,
                rank=1,
                incentive_rate=Decimal(incentive_rate),
                min_incentive_base=(
                    Decimal(min_incentive_base) if min_incentive_base else None
                ),
                max_incentive_base=(
                    Decimal(max_incentive_base) if max_incentive_base else None
                ),
                status=status,
            )
        )

    async def point_source(
        self,
        source: str = "order",
        base_points: int = 0,
        multiplier: str = "1",
        is_enabled: bool = True,
    ) -> PointSourceConfig:
        return await self._save(
            PointSourceConfig(
                source=source,
                base_points=base_points,
                multiplier=Decimal(multiplier),
                is_enabled=is_enabled,
            )
        )

    async def member(
        self,
        nickname: str,
        referrer: Member | None = None,
        member_tier: MemberTier | None = None,
        distributor_tier: DistributorTier | None = None,
        team_expansion_tier: TeamExpansionTier | None = None,
        **fields,
    ) -> Member:
        return await self._save(
            Member(
                nickname=nickname,
                referrer_id=referrer.id if referrer is not None else None,
                member_tier_id=member_tier.id if member_tier else None,
                distributor_tier_id=(
                    distributor_tier.id if distributor_tier else None
                ),
                team_expansion_tier_id=(
                    team_expansion_tier.id if team_expansion_tier else None
                ),
                **fields,
            )
        )

    async def order(
        self,
        buyer: Member | int,
        amount: str = "100",
        status: str = "completed",
        paid_at: datetime | None = None,
    ) -> Order:
        member_id = buyer if isinstance(buyer, int) else buyer.id
        return await self._save(
            Order(
                order_no=f"ORD{next(self._order_numbers):06d}",
                member_id=member_id,
                total_amount=Decimal(amount),
                status=status,
                paid_at=paid_at or datetime(2026, 9, 15, 12, 0, tzinfo=UTC),
            )
        )

    async def chain(self, *layers: dict) -> list[Member]:
        """
        Build a referral chain from the root down.

        Layers are listed root first; each member is referred by the one
        before it.
        """
        members: list[Member] = []
        for layer in layers:
            layer = dict(layer)
            nickname = layer.pop("nickname")
            referrer = members[-1] if members else None
            members.append(await self.member(nickname, referrer=referrer, **layer))
        return members


@pytest.fixture
def factory(session) -> Factory:
    """Row factory bound to the test session."""
    return Factory(session)
