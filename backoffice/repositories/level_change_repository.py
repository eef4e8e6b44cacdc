"""
Level change record repository.

Append-only audit trail for tier assignment changes.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.models.level_change_record import LevelChangeRecord
from backoffice.repositories.base import BaseRepository


class LevelChangeRepository(BaseRepository[LevelChangeRecord]):
    """Level change record repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize level change repository."""
        super().__init__(LevelChangeRecord, session)

    async def get_history(self, member_id: int) -> list[LevelChangeRecord]:
        """
        Get a member's tier change history, oldest first.

        Args:
            member_id: Member ID

        Returns:
            List of records
        """
        return await self.find_by(member_id=member_id)
