"""
Order repository.

Read access to orders owned by the order lifecycle, plus the sales
aggregation marker.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.models.order import Order
from backoffice.repositories.base import BaseRepository
from backoffice.utils.datetime_utils import utc_now


class OrderRepository(BaseRepository[Order]):
    """Order repository with aggregation queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize order repository."""
        super().__init__(Order, session)

    async def claim_sales_aggregation(self, order_id: int) -> bool:
        """
        Set the one-time sales aggregation marker.

        Conditional UPDATE: only the first caller sees rowcount 1, so a
        retried or concurrent aggregation never double-counts.

        Args:
            order_id: Order ID

        Returns:
            True if this call claimed the marker
        """
        stmt = (
            update(Order)
            .where(
                Order.id == order_id,
                Order.sales_aggregated_at.is_(None),
            )
            .values(sales_aggregated_at=utc_now())
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def sum_member_sales(
        self,
        member_id: int,
        start: datetime,
        end: datetime,
        excluded_statuses: tuple[str, ...],
    ) -> Decimal:
        """
        Sum a member's own paid order amounts within [start, end).

        Args:
            member_id: Buyer member ID
            start: Inclusive lower bound on paid_at
            end: Exclusive upper bound on paid_at
            excluded_statuses: Statuses that reverse a payment

        Returns:
            Total amount (0 when there are no orders)
        """
        stmt = select(
            func.coalesce(func.sum(Order.total_amount), Decimal("0"))
        ).where(
            Order.member_id == member_id,
            Order.paid_at.is_not(None),
            Order.paid_at >= start,
            Order.paid_at < end,
            Order.status.not_in(excluded_statuses),
        )
        result = await self.session.execute(stmt)
        total = result.scalar()
        return Decimal(str(total)) if total is not None else Decimal("0")
