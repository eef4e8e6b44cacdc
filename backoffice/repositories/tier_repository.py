"""
Tier repository.

Read access to member, distributor and team-expansion tier configuration.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.models.tiers import (
    DistributorTier,
    MemberTier,
    TeamExpansionTier,
    TierStatus,
)


class TierRepository:
    """Tier configuration queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize tier repository."""
        self.session = session

    async def get_auto_member_tiers(self) -> list[MemberTier]:
        """
        Get active auto-upgrade member tiers, highest rank first.

        Returns:
            List of member tiers
        """
        stmt = (
            select(MemberTier)
            .where(
                MemberTier.status == TierStatus.ACTIVE.value,
                MemberTier.auto_upgrade_enabled.is_(True),
            )
            .order_by(MemberTier.rank.desc(), MemberTier.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_auto_distributor_tiers(self) -> list[DistributorTier]:
        """
        Get active auto-upgrade distributor tiers, highest rank first.

        Returns:
            List of distributor tiers
        """
        stmt = (
            select(DistributorTier)
            .where(
                DistributorTier.status == TierStatus.ACTIVE.value,
                DistributorTier.auto_upgrade_enabled.is_(True),
            )
            .order_by(DistributorTier.rank.desc(), DistributorTier.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_team_expansion_tier(
        self, tier_id: int | None
    ) -> TeamExpansionTier | None:
        """
        Get an active team-expansion tier.

        Args:
            tier_id: Tier ID (None short-circuits)

        Returns:
            Tier or None if absent or inactive
        """
        if tier_id is None:
            return None
        tier = await self.session.get(TeamExpansionTier, tier_id)
        if tier is None or tier.status != TierStatus.ACTIVE.value:
            return None
        return tier
