"""
Sales aggregator.

Fans a paid order's amount out into the sales counters of the buyer's
referrer, indirect referrer and every further distributor up the chain.
Runs once per order: the order's sales_aggregated_at marker is claimed by a
conditional update before any counter moves.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from backoffice.config.commission_constants import ORDER_STATUS_PAID
from backoffice.config.settings import settings
from backoffice.models.member import Member
from backoffice.repositories.member_repository import MemberRepository
from backoffice.repositories.order_repository import OrderRepository
from backoffice.services.base_service import BaseService, transaction
from backoffice.services.commission.chain_walker import ChainWalker
from backoffice.services.commission.rate_resolver import has_distributor_tier
from backoffice.services.tier_upgrade.evaluator import (
    MemberEvaluation,
    TierUpgradeEvaluator,
)
from backoffice.utils.exceptions import BuyerNotFoundError, OrderNotFoundError
from backoffice.utils.money import to_decimal


# No-op reasons
REASON_APPLIED = "applied"
REASON_ALREADY_AGGREGATED = "already_aggregated"
REASON_NOT_PAID = "order_not_paid"
REASON_NO_REFERRER = "no_referrer"


@dataclass
class AggregationResult:
    """Outcome of one sales aggregation."""

    order_id: int
    applied: bool = False
    reason: str = REASON_APPLIED
    touched_member_ids: list[int] = field(default_factory=list)
    tier_changes: list[MemberEvaluation] = field(default_factory=list)
    chain_truncated: bool = False


class SalesAggregator(BaseService):
    """Idempotent fan-out of paid-order amounts into sales counters."""

    def __init__(self, session, max_chain_depth: int | None = None) -> None:
        """
        Initialize sales aggregator.

        Args:
            session: Async database session
            max_chain_depth: Hop ceiling for the distributor walk
        """
        super().__init__(session)
        depth = max_chain_depth or settings.commission_max_chain_depth
        self.member_repo = MemberRepository(session)
        self.order_repo = OrderRepository(session)
        self.walker = ChainWalker(self.member_repo, depth)
        self.tier_evaluator = TierUpgradeEvaluator(session, depth)

    @transaction
    async def aggregate(self, order_id: int) -> AggregationResult:
        """
        Aggregate a paid order into ancestor sales counters.

        Args:
            order_id: Order ID

        Returns:
            AggregationResult (applied=False with a reason on no-op)

        Raises:
            OrderNotFoundError: Order does not exist
            BuyerNotFoundError: Order's buyer does not exist
        """
        result = AggregationResult(order_id=order_id)

        order = await self.order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)

        if order.sales_aggregated_at is not None:
            result.reason = REASON_ALREADY_AGGREGATED
            return result
        if order.status != ORDER_STATUS_PAID:
            result.reason = REASON_NOT_PAID
            return result

        buyer = await self.member_repo.get_by_id(order.member_id)
        if buyer is None:
            raise BuyerNotFoundError(order.id, order.member_id)

        # Concurrent or retried call lost the race
        if not await self.order_repo.claim_sales_aggregation(order_id):
            result.reason = REASON_ALREADY_AGGREGATED
            return result

        result.applied = True
        amount = to_decimal(order.total_amount)

        referrer = await self.member_repo.get_referrer(buyer)
        if referrer is None or referrer.id == buyer.id:
            result.reason = REASON_NO_REFERRER
            return result

        await self._credit(result, referrer, amount, "direct_sales")

        indirect = await self.member_repo.get_referrer(referrer)
        if indirect is not None and indirect.id not in (buyer.id, referrer.id):
            await self._credit(result, indirect, amount, "indirect_sales")

            walk = await self.walker.walk(
                indirect,
                has_distributor_tier,
                exclude={buyer.id, referrer.id},
            )
            result.chain_truncated = walk.truncated
            for ancestor in walk.members:
                await self._credit(result, ancestor, amount, "distributor_sales")

        result.tier_changes = await self.tier_evaluator.reevaluate(
            result.touched_member_ids
        )

        self.logger.info(
            "Sales aggregated",
            extra={
                "order_id": order_id,
                "amount": str(amount),
                "touched": len(result.touched_member_ids),
                "chain_truncated": result.chain_truncated,
            },
        )
        return result

    async def _credit(
        self,
        result: AggregationResult,
        member: Member,
        amount: Decimal,
        sharer_column: str,
    ) -> None:
        # Distributors book every downline sale as distributor sales
        column = (
            "distributor_sales" if has_distributor_tier(member) else sharer_column
        )
        await self.member_repo.increment(
            member.id, **{column: amount, "total_sales": amount}
        )
        result.touched_member_ids.append(member.id)
