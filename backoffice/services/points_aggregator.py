"""
Points aggregator.

Grants the buyer points for a paid order, once per order, and re-fits the
buyer's tiers afterwards. The points record keyed by (source, order id) is
the one-time marker; its unique constraint rejects a concurrent second grant.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from backoffice.config.commission_constants import ORDER_STATUS_PAID, ZERO
from backoffice.models.points import PointSource, PointsRecordType
from backoffice.repositories.member_repository import MemberRepository
from backoffice.repositories.order_repository import OrderRepository
from backoffice.repositories.points_repository import PointsRepository
from backoffice.services.base_service import BaseService, transaction
from backoffice.services.tier_upgrade.evaluator import (
    MemberEvaluation,
    TierUpgradeEvaluator,
)
from backoffice.utils.exceptions import BuyerNotFoundError, OrderNotFoundError
from backoffice.utils.money import to_decimal


# No-op reasons
REASON_GRANTED = "granted"
REASON_ALREADY_GRANTED = "already_granted"
REASON_NOT_PAID = "order_not_paid"
REASON_ZERO_POINTS = "zero_points"

DEFAULT_POINTS_MULTIPLIER = Decimal("1")


@dataclass
class PointsGrantResult:
    """Outcome of one order points grant."""

    order_id: int
    granted: bool = False
    reason: str = REASON_GRANTED
    member_id: int | None = None
    points: int = 0
    tier_changes: list[MemberEvaluation] = field(default_factory=list)


def _positive_or(value, default: Decimal) -> Decimal:
    value = to_decimal(value)
    return value if value > 0 else default


def calculate_order_points(
    order_amount: Decimal,
    base_points: int = 0,
    multiplier: Decimal | None = None,
    points_rate: Decimal | None = None,
) -> int:
    """
    Points earned by an order.

    Formula: (base_points + order_amount * multiplier) * points_rate,
    rounded half-up to a whole point and never negative. A missing or
    non-positive multiplier or points rate counts as 1.

    Example:
        >>> calculate_order_points(Decimal("99.50"), 10, Decimal("1"), Decimal("1.5"))
        164
    """
    amount = max(ZERO, to_decimal(order_amount))
    multiplier = _positive_or(multiplier, DEFAULT_POINTS_MULTIPLIER)
    points_rate = _positive_or(points_rate, DEFAULT_POINTS_MULTIPLIER)

    raw = (Decimal(base_points or 0) + amount * multiplier) * points_rate
    points = int(raw.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return max(0, points)


class PointsAggregator(BaseService):
    """Idempotent per-order points grant."""

    def __init__(self, session, max_chain_depth: int | None = None) -> None:
        """
        Initialize points aggregator.

        Args:
            session: Async database session
            max_chain_depth: Hop ceiling passed to the tier evaluator
        """
        super().__init__(session)
        self.member_repo = MemberRepository(session)
        self.order_repo = OrderRepository(session)
        self.points_repo = PointsRepository(session)
        self.tier_evaluator = TierUpgradeEvaluator(session, max_chain_depth)

    @transaction
    async def grant_for_order(self, order_id: int) -> PointsGrantResult:
        """
        Grant the buyer points for a paid order.

        Args:
            order_id: Order ID

        Returns:
            PointsGrantResult (granted=False with a reason on no-op)

        Raises:
            OrderNotFoundError: Order does not exist
            BuyerNotFoundError: Order's buyer does not exist
        """
        result = PointsGrantResult(order_id=order_id)

        order = await self.order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        result.member_id = order.member_id

        if order.status != ORDER_STATUS_PAID:
            result.reason = REASON_NOT_PAID
            return result
        if await self.points_repo.has_grant(PointSource.ORDER.value, order.id):
            result.reason = REASON_ALREADY_GRANTED
            return result

        buyer = await self.member_repo.get_fresh(order.member_id)
        if buyer is None:
            raise BuyerNotFoundError(order.id, order.member_id)

        config = await self.points_repo.get_enabled_source_config(
            PointSource.ORDER.value
        )
        points = calculate_order_points(
            order.total_amount,
            base_points=config.base_points if config is not None else 0,
            multiplier=config.multiplier if config is not None else None,
            points_rate=(
                buyer.member_tier.points_rate
                if buyer.member_tier is not None
                else None
            ),
        )
        if points <= 0:
            result.reason = REASON_ZERO_POINTS
            return result

        await self.points_repo.create(
            member_id=buyer.id,
            record_type=PointsRecordType.EARN.value,
            points=points,
            balance=(buyer.available_points or 0) + points,
            source=PointSource.ORDER.value,
            source_id=order.id,
            description=f"Order {order.order_no} paid: {points} points",
        )
        await self.member_repo.increment(
            buyer.id, total_points=points, available_points=points
        )

        result.granted = True
        result.points = points
        result.tier_changes = await self.tier_evaluator.reevaluate([buyer.id])

        self.logger.info(
            "Order points granted",
            extra={
                "order_id": order_id,
                "member_id": buyer.id,
                "points": points,
                "tier_changed": any(e.changed for e in result.tier_changes),
            },
        )
        return result
