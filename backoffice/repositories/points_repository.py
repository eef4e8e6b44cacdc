"""
Points repository.

Points ledger writes and point source configuration lookups.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.models.points import MemberPointsRecord, PointSourceConfig
from backoffice.repositories.base import BaseRepository


class PointsRepository(BaseRepository[MemberPointsRecord]):
    """Member points ledger repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize points repository."""
        super().__init__(MemberPointsRecord, session)

    async def has_grant(self, source: str, source_id: int) -> bool:
        """Check whether a source object already produced points."""
        return await self.exists(source=source, source_id=source_id)

    async def get_enabled_source_config(
        self, source: str
    ) -> PointSourceConfig | None:
        """
        Get the enabled points formula for a source.

        Args:
            source: Point source name

        Returns:
            Config or None when the source is unconfigured or disabled
        """
        stmt = select(PointSourceConfig).where(
            PointSourceConfig.source == source,
            PointSourceConfig.is_enabled.is_(True),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_history(self, member_id: int) -> list[MemberPointsRecord]:
        """Get a member's points records, oldest first."""
        return await self.find_by(member_id=member_id)
