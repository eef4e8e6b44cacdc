"""
Commission ledger repository.

Data access layer for CommissionEntry.
"""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.models.commission_entry import CommissionEntry, SettlementStatus
from backoffice.repositories.base import BaseRepository


class CommissionRepository(BaseRepository[CommissionEntry]):
    """Commission ledger repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize commission repository."""
        super().__init__(CommissionEntry, session)

    async def get_by_order(self, order_id: int) -> list[CommissionEntry]:
        """
        Get all ledger entries produced for an order.

        Args:
            order_id: Order ID

        Returns:
            List of entries ordered by ID
        """
        return await self.find_by(order_id=order_id)

    async def has_entries_for_order(self, order_id: int) -> bool:
        """
        Check whether an order was already calculated.

        Args:
            order_id: Order ID

        Returns:
            True if any entry exists
        """
        return await self.exists(order_id=order_id)

    async def get_stats(self) -> dict[str, int | Decimal]:
        """
        Get ledger statistics in a single query.

        Optimized to avoid fetching all records - uses SQL aggregation.

        Returns:
            Dict with per-status counts and the confirmed amount sum
        """
        stmt = (
            select(
                CommissionEntry.status,
                func.count(CommissionEntry.id).label("count"),
                func.coalesce(
                    func.sum(CommissionEntry.commission_amount),
                    Decimal("0"),
                ).label("amount"),
            )
            .group_by(CommissionEntry.status)
        )

        result = await self.session.execute(stmt)
        rows = result.all()

        stats: dict[str, int | Decimal] = {
            "total": 0,
            SettlementStatus.PENDING.value: 0,
            SettlementStatus.CONFIRMED.value: 0,
            SettlementStatus.CANCELLED.value: 0,
            "confirmed_amount": Decimal("0"),
        }

        for row in rows:
            stats[row.status] = row.count
            stats["total"] += row.count
            if row.status == SettlementStatus.CONFIRMED.value:
                stats["confirmed_amount"] = Decimal(str(row.amount))

        return stats
