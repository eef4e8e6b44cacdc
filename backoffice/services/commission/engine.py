"""
Commission engine.

Turns one completed order into the full set of commission ledger entries:
direct and indirect sharing commissions, the direct referrer's gross-margin
distributor commission, and the network/differential commissions paid up the
distributor chain. Every entry for an order is written in one bulk insert.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from backoffice.config.commission_constants import COMMISSIONABLE_ORDER_STATUSES
from backoffice.config.settings import settings
from backoffice.models.commission_entry import CommissionEntry
from backoffice.models.member import Member
from backoffice.models.order import Order
from backoffice.repositories.commission_repository import CommissionRepository
from backoffice.repositories.member_repository import MemberRepository
from backoffice.repositories.order_repository import OrderRepository
from backoffice.services.base_service import BaseService, transaction
from backoffice.services.commission.chain_walker import (
    ChainWalker,
    has_positive_cost_rate,
)
from backoffice.services.commission.entries import (
    CommissionDraft,
    OrderContext,
    build_differential,
    build_direct,
    build_distributor,
    build_indirect,
    build_network_margin,
)
from backoffice.services.commission.rate_resolver import (
    RateKind,
    has_distributor_tier,
    is_cost_holder,
    is_direct_eligible,
    is_indirect_eligible,
    resolve_rate,
)
from backoffice.utils.exceptions import BuyerNotFoundError, OrderNotFoundError
from backoffice.utils.money import to_decimal


@dataclass
class CalculationResult:
    """Outcome of one commission calculation."""

    order_id: int
    drafts: list[CommissionDraft] = field(default_factory=list)
    entries: list[CommissionEntry] = field(default_factory=list)
    no_referrer: bool = False
    referrer_not_found: bool = False
    already_calculated: bool = False
    order_not_completed: bool = False
    chain_truncated: bool = False

    @property
    def total_amount(self) -> Decimal:
        """Sum of all computed commission amounts."""
        return sum(
            (draft.commission_amount for draft in self.drafts), Decimal("0")
        )


# (network drafts, walk truncated)
NetworkOutcome = tuple[list[CommissionDraft], bool]


class CommissionEngine(BaseService):
    """
    Multi-level commission calculator.

    The direct referrer decides everything: its sharing eligibility drives
    the direct entry, its own referrer the indirect entry, and its
    distributor status picks exactly one of the three network branches.
    """

    def __init__(self, session, max_chain_depth: int | None = None) -> None:
        """
        Initialize commission engine.

        Args:
            session: Async database session
            max_chain_depth: Hop ceiling for chain walks
                (defaults to COMMISSION_MAX_CHAIN_DEPTH)
        """
        super().__init__(session)
        self.member_repo = MemberRepository(session)
        self.order_repo = OrderRepository(session)
        self.commission_repo = CommissionRepository(session)
        self.walker = ChainWalker(
            self.member_repo,
            max_chain_depth or settings.commission_max_chain_depth,
        )

    @transaction
    async def calculate(self, order_id: int) -> CalculationResult:
        """
        Calculate and persist commissions for a completed order.

        Args:
            order_id: Order ID

        Returns:
            CalculationResult with persisted entries

        Raises:
            OrderNotFoundError: Order does not exist
            BuyerNotFoundError: Order's buyer does not exist
        """
        order = await self._load_order(order_id)

        if order.status not in COMMISSIONABLE_ORDER_STATUSES:
            self.logger.info(
                "Order not completed, skipping commission",
                extra={"order_id": order_id, "status": order.status},
            )
            return CalculationResult(order_id=order_id, order_not_completed=True)

        if await self.commission_repo.has_entries_for_order(order_id):
            self.logger.warning(
                "Commission already calculated for order",
                extra={"order_id": order_id},
            )
            return CalculationResult(order_id=order_id, already_calculated=True)

        result, context = await self._compute(order)

        if result.drafts:
            rows = [draft.to_row(context) for draft in result.drafts]
            result.entries = await self.commission_repo.bulk_create(rows)

        self.logger.info(
            "Commission calculated",
            extra={
                "order_id": order_id,
                "entries": len(result.entries),
                "total_amount": str(result.total_amount),
                "chain_truncated": result.chain_truncated,
            },
        )

        return result

    async def preview(self, order_id: int) -> CalculationResult:
        """
        Compute the commissions an order would produce, without writing.

        Ignores the order status and any existing ledger entries.

        Args:
            order_id: Order ID

        Returns:
            CalculationResult with drafts only
        """
        order = await self._load_order(order_id)
        result, _ = await self._compute(order)
        return result

    async def _load_order(self, order_id: int) -> Order:
        order = await self.order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def _compute(
        self, order: Order
    ) -> tuple[CalculationResult, OrderContext]:
        result = CalculationResult(order_id=order.id)

        buyer = await self.member_repo.get_by_id(order.member_id)
        if buyer is None:
            raise BuyerNotFoundError(order.id, order.member_id)

        context = OrderContext(
            order_id=order.id,
            buyer_id=buyer.id,
            order_amount=to_decimal(order.total_amount),
        )

        if buyer.referrer_id is None:
            result.no_referrer = True
            return result, context

        referrer = await self.member_repo.get_referrer(buyer)
        if referrer is None:
            self.logger.warning(
                "Referrer not found",
                extra={"order_id": order.id, "referrer_id": buyer.referrer_id},
            )
            result.referrer_not_found = True
            return result, context

        if referrer.id == buyer.id:
            self.logger.warning(
                "Buyer refers itself, no commission paid",
                extra={"order_id": order.id, "buyer_id": buyer.id},
            )
            result.chain_truncated = True
            return result, context

        indirect_referrer = await self.member_repo.get_referrer(referrer)
        if indirect_referrer is not None and indirect_referrer.id in (
            buyer.id,
            referrer.id,
        ):
            indirect_referrer = None

        direct = self._direct(context, referrer)
        indirect = self._indirect(context, indirect_referrer, referrer)
        shared_amount = sum(
            (d.commission_amount for d in (direct, indirect) if d is not None),
            Decimal("0"),
        )
        distributor = self._distributor(context, referrer, shared_amount)

        result.drafts.extend(
            d for d in (direct, indirect, distributor) if d is not None
        )

        network, truncated = await self._network(
            context, buyer, referrer, shared_amount
        )
        result.drafts.extend(network)
        result.chain_truncated = truncated

        return result, context

    def _direct(
        self, context: OrderContext, referrer: Member
    ) -> CommissionDraft | None:
        if not is_direct_eligible(referrer):
            return None
        rate = resolve_rate(referrer, RateKind.DIRECT)
        if rate is None:
            return None
        return build_direct(context, referrer, rate)

    def _indirect(
        self,
        context: OrderContext,
        indirect_referrer: Member | None,
        referrer: Member,
    ) -> CommissionDraft | None:
        if not is_indirect_eligible(indirect_referrer, referrer):
            return None
        rate = resolve_rate(indirect_referrer, RateKind.INDIRECT, downline=referrer)
        if rate is None:
            return None
        return build_indirect(context, indirect_referrer, rate)

    def _distributor(
        self, context: OrderContext, referrer: Member, shared_amount: Decimal
    ) -> CommissionDraft | None:
        if not is_cost_holder(referrer):
            return None
        cost_rate = resolve_rate(referrer, RateKind.COST)
        if cost_rate is None:
            return None
        return build_distributor(context, referrer, cost_rate, shared_amount)

    async def _network(
        self,
        context: OrderContext,
        buyer: Member,
        referrer: Member,
        shared_amount: Decimal,
    ) -> NetworkOutcome:
        """Pick exactly one network branch from the referrer's status."""
        exclude = {buyer.id}
        referrer_cost = resolve_rate(referrer, RateKind.COST)

        if not has_distributor_tier(referrer):
            # Personal cost override already paid the referrer the margin
            if referrer_cost is not None:
                return await self._differential_walk(
                    context, referrer, referrer_cost, exclude
                )

            walk = await self.walker.find_nearest(
                referrer, has_distributor_tier, exclude=exclude
            )
            if walk.truncated:
                return [], True
            nearest = walk.nearest
            if nearest is None:
                return [], False

            nearest_cost = resolve_rate(nearest, RateKind.COST)
            if nearest_cost is None:
                return await self._pay_nearest_cost_holder(
                    context, nearest, shared_amount, exclude | {referrer.id}
                )
            return await self._margin_then_differential(
                context, nearest, nearest_cost, shared_amount,
                exclude | {referrer.id},
            )

        if referrer_cost is not None:
            return await self._differential_walk(
                context, referrer, referrer_cost, exclude
            )

        # Pure sharer
        return await self._pay_nearest_cost_holder(
            context, referrer, shared_amount, exclude
        )

    async def _pay_nearest_cost_holder(
        self,
        context: OrderContext,
        start: Member,
        shared_amount: Decimal,
        exclude: set[int],
    ) -> NetworkOutcome:
        walk = await self.walker.find_nearest(
            start, has_positive_cost_rate, exclude=exclude
        )
        if walk.truncated:
            return [], True
        holder = walk.nearest
        if holder is None:
            return [], False

        cost_rate = resolve_rate(holder, RateKind.COST)
        return await self._margin_then_differential(
            context, holder, cost_rate, shared_amount, exclude | {start.id}
        )

    async def _margin_then_differential(
        self,
        context: OrderContext,
        holder: Member,
        cost_rate: Decimal,
        shared_amount: Decimal,
        exclude: set[int],
    ) -> NetworkOutcome:
        drafts, truncated = await self._differential_walk(
            context, holder, cost_rate, exclude
        )
        if truncated:
            return [], True

        margin = build_network_margin(context, holder, cost_rate, shared_amount)
        if margin is not None:
            drafts.insert(0, margin)
        return drafts, False

    async def _differential_walk(
        self,
        context: OrderContext,
        start: Member,
        baseline_rate: Decimal,
        exclude: set[int],
    ) -> NetworkOutcome:
        """
        Pay cost-rate spreads to distributor ancestors above start.

        Only an ancestor strictly cheaper than the running downstream rate
        earns, and its rate becomes the new downstream rate.
        """
        walk = await self.walker.walk(
            start, has_distributor_tier, exclude=exclude
        )
        if walk.truncated:
            return [], True

        drafts: list[CommissionDraft] = []
        downstream_rate = baseline_rate

        for ancestor in walk.members:
            ancestor_rate = resolve_rate(ancestor, RateKind.COST)
            if ancestor_rate is None or ancestor_rate >= downstream_rate:
                continue
            draft = build_differential(
                context, ancestor, downstream_rate, ancestor_rate
            )
            if draft is not None:
                drafts.append(draft)
            downstream_rate = ancestor_rate

        return drafts, False
