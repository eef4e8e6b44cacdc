"""
Team incentive repository.

Data access layer for TeamIncentiveEntry.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.models.team_incentive_entry import TeamIncentiveEntry
from backoffice.repositories.base import BaseRepository


class TeamIncentiveRepository(BaseRepository[TeamIncentiveEntry]):
    """Team incentive repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize team incentive repository."""
        super().__init__(TeamIncentiveEntry, session)

    async def get_calculated_distributor_ids(self, month: str) -> set[int]:
        """
        Get distributors that already have an entry for a month.

        Args:
            month: Month in YYYY-MM format

        Returns:
            Set of distributor member IDs
        """
        stmt = select(TeamIncentiveEntry.distributor_id).where(
            TeamIncentiveEntry.calculation_month == month
        )
        result = await self.session.execute(stmt)
        return {row[0] for row in result.all()}
