"""
Member repository.

Read access to the referral graph plus explicit counter increments.
"""

from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.models.member import Member
from backoffice.repositories.base import BaseRepository


class MemberRepository(BaseRepository[Member]):
    """Member repository with referral-graph queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize member repository."""
        super().__init__(Member, session)

    async def get_fresh(self, member_id: int) -> Member | None:
        """
        Get member re-read from the database.

        Overwrites any identity-map copy, so counters and tier links written
        by bulk UPDATE statements earlier in the transaction are visible.

        Args:
            member_id: Member ID

        Returns:
            Member or None if not found
        """
        return await self.session.get(Member, member_id, populate_existing=True)

    async def get_referrer(self, member: Member) -> Member | None:
        """
        Get the member's direct referrer (tiers eagerly loaded).

        Args:
            member: Member whose referrer to load

        Returns:
            Referrer or None if unset or no longer present
        """
        if member.referrer_id is None:
            return None
        return await self.get_by_id(member.referrer_id)

    async def get_distributors(self) -> list[Member]:
        """
        Get all members holding a distributor tier.

        Returns:
            List of distributors ordered by ID
        """
        stmt = (
            select(Member)
            .where(Member.distributor_tier_id.is_not(None))
            .order_by(Member.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_ids_by_statuses(self, statuses: tuple[str, ...]) -> list[int]:
        """
        Get member IDs in the given statuses.

        Optimized to avoid fetching full objects - only returns IDs.

        Args:
            statuses: Member statuses to include

        Returns:
            List of member IDs ordered by ID
        """
        stmt = (
            select(Member.id)
            .where(Member.status.in_(statuses))
            .order_by(Member.id)
        )
        result = await self.session.execute(stmt)
        return [row[0] for row in result.all()]

    async def get_referral_ids(self, referrer_ids: list[int]) -> list[int]:
        """
        Get IDs of members directly referred by any of the given members.

        Args:
            referrer_ids: Referrer member IDs

        Returns:
            List of referral member IDs
        """
        if not referrer_ids:
            return []

        stmt = select(Member.id).where(Member.referrer_id.in_(referrer_ids))
        result = await self.session.execute(stmt)
        return [row[0] for row in result.all()]

    async def count_referrals(self, referrer_ids: list[int]) -> int:
        """
        Count members directly referred by any of the given members.

        Args:
            referrer_ids: Referrer member IDs

        Returns:
            Count of referrals
        """
        if not referrer_ids:
            return 0

        stmt = (
            select(func.count(Member.id))
            .where(Member.referrer_id.in_(referrer_ids))
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def increment(self, member_id: int, **deltas: Decimal | int) -> bool:
        """
        Atomically add deltas to counter columns.

        Runs a single UPDATE ... SET col = col + delta, so concurrent
        increments from other transactions are never lost.

        Args:
            member_id: Member ID
            **deltas: Column name to amount

        Returns:
            True if the member row was updated
        """
        if not deltas:
            return False

        values = {
            name: getattr(Member, name) + delta
            for name, delta in deltas.items()
        }
        stmt = (
            update(Member)
            .where(Member.id == member_id)
            .values(**values)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def set_fans(
        self, member_id: int, direct_fans: int, total_fans: int
    ) -> None:
        """
        Store recomputed fan counters.

        Args:
            member_id: Member ID
            direct_fans: Directly referred member count
            total_fans: Direct plus second-level member count
        """
        stmt = (
            update(Member)
            .where(Member.id == member_id)
            .values(direct_fans=direct_fans, total_fans=total_fans)
        )
        await self.session.execute(stmt)

    async def set_tier(self, member_id: int, column: str, tier_id: int | None) -> None:
        """
        Assign (or clear) a tier classification.

        Args:
            member_id: Member ID
            column: member_tier_id or distributor_tier_id
            tier_id: New tier ID, None to unassign
        """
        stmt = (
            update(Member)
            .where(Member.id == member_id)
            .values({column: tier_id})
        )
        await self.session.execute(stmt)
