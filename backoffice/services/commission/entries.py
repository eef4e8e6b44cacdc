"""
Commission entry builders.

One draft class per commission kind and one constructor per engine branch.
Drafts are plain values; the engine turns them into ledger rows in a single
bulk insert.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, ClassVar

from backoffice.config.commission_constants import ZERO
from backoffice.models.commission_entry import CommissionType, SettlementStatus
from backoffice.utils.money import percent_of, quantize_money


@dataclass(frozen=True)
class OrderContext:
    """Order facts every commission derives from."""

    order_id: int
    buyer_id: int
    order_amount: Decimal


@dataclass(frozen=True)
class CommissionDraft:
    """Computed, not yet persisted, commission."""

    commission_type: ClassVar[CommissionType]

    recipient_id: int
    commission_rate: Decimal
    commission_amount: Decimal
    description: str
    cost_rate: Decimal | None = None
    cost_amount: Decimal | None = None

    def to_row(self, context: OrderContext) -> dict[str, Any]:
        """Ledger row values for a bulk insert."""
        return {
            "order_id": context.order_id,
            "buyer_id": context.buyer_id,
            "commission_type": self.commission_type.value,
            "recipient_id": self.recipient_id,
            "order_amount": context.order_amount,
            "commission_rate": self.commission_rate,
            "commission_amount": self.commission_amount,
            "cost_rate": self.cost_rate,
            "cost_amount": self.cost_amount,
            "status": SettlementStatus.PENDING.value,
            "description": self.description,
        }


@dataclass(frozen=True)
class DirectCommission(CommissionDraft):
    commission_type: ClassVar[CommissionType] = CommissionType.DIRECT


@dataclass(frozen=True)
class IndirectCommission(CommissionDraft):
    commission_type: ClassVar[CommissionType] = CommissionType.INDIRECT


@dataclass(frozen=True)
class DistributorCommission(CommissionDraft):
    commission_type: ClassVar[CommissionType] = CommissionType.DISTRIBUTOR


@dataclass(frozen=True)
class NetworkDistributorCommission(CommissionDraft):
    commission_type: ClassVar[CommissionType] = CommissionType.NETWORK_DISTRIBUTOR


def _name(member: Any) -> str:
    return getattr(member, "nickname", None) or f"#{member.id}"


def build_direct(
    context: OrderContext, referrer: Any, rate: Decimal
) -> DirectCommission | None:
    """
    Direct commission for the buyer's referrer.

    Args:
        context: Order facts
        referrer: Direct referrer
        rate: Resolved percent

    Returns:
        Draft, or None when the amount rounds to zero
    """
    amount = percent_of(context.order_amount, rate)
    if amount <= 0:
        return None
    return DirectCommission(
        recipient_id=referrer.id,
        commission_rate=rate,
        commission_amount=amount,
        description=f"Direct commission: {_name(referrer)} earns {rate}%",
    )


def build_indirect(
    context: OrderContext, indirect_referrer: Any, rate: Decimal
) -> IndirectCommission | None:
    """Indirect commission for the referrer's referrer."""
    amount = percent_of(context.order_amount, rate)
    if amount <= 0:
        return None
    return IndirectCommission(
        recipient_id=indirect_referrer.id,
        commission_rate=rate,
        commission_amount=amount,
        description=(
            f"Indirect commission: {_name(indirect_referrer)} earns {rate}%"
        ),
    )


def gross_margin_split(
    order_amount: Decimal, cost_rate: Decimal, shared_amount: Decimal
) -> tuple[Decimal, Decimal]:
    """
    Split an order into wholesale cost and distributor margin.

    Direct and indirect commissions come out of the same gross margin, so
    they are subtracted and the remainder is clamped at zero.

    Formula:
        cost = order_amount * cost_rate / 100
        margin = max(0, order_amount - cost - shared_amount)

    Args:
        order_amount: Order base
        cost_rate: Percent retained as wholesale cost
        shared_amount: Direct + indirect amounts already paid

    Returns:
        Tuple of (cost_amount, margin_amount)
    """
    cost_amount = percent_of(order_amount, cost_rate)
    margin = order_amount - cost_amount - shared_amount
    return cost_amount, quantize_money(max(ZERO, margin))


def _build_margin(
    draft_class: type[CommissionDraft],
    label: str,
    context: OrderContext,
    recipient: Any,
    cost_rate: Decimal,
    shared_amount: Decimal,
) -> CommissionDraft | None:
    cost_amount, margin = gross_margin_split(
        context.order_amount, cost_rate, shared_amount
    )
    if margin <= 0:
        return None
    return draft_class(
        recipient_id=recipient.id,
        commission_rate=cost_rate,
        commission_amount=margin,
        cost_rate=cost_rate,
        cost_amount=cost_amount,
        description=(
            f"{label}: {_name(recipient)} keeps margin over {cost_rate}% cost"
        ),
    )


def build_distributor(
    context: OrderContext,
    referrer: Any,
    cost_rate: Decimal,
    shared_amount: Decimal,
) -> DistributorCommission | None:
    """Gross-margin commission for a distributor direct referrer."""
    return _build_margin(
        DistributorCommission,
        "Distributor commission",
        context,
        referrer,
        cost_rate,
        shared_amount,
    )


def build_network_margin(
    context: OrderContext,
    distributor: Any,
    cost_rate: Decimal,
    shared_amount: Decimal,
) -> NetworkDistributorCommission | None:
    """Gross-margin commission for the nearest upstream cost holder."""
    return _build_margin(
        NetworkDistributorCommission,
        "Network distributor commission",
        context,
        distributor,
        cost_rate,
        shared_amount,
    )


def build_differential(
    context: OrderContext,
    ancestor: Any,
    downstream_rate: Decimal,
    ancestor_rate: Decimal,
) -> NetworkDistributorCommission | None:
    """
    Cost-rate spread paid to an upstream distributor.

    Formula: (downstream_rate - ancestor_rate) * order_amount / 100

    Args:
        context: Order facts
        ancestor: Upstream distributor
        downstream_rate: Cost rate of the closest distributor below
        ancestor_rate: Ancestor's own (lower) cost rate

    Returns:
        Draft, or None when the spread is not positive
    """
    spread = downstream_rate - ancestor_rate
    if spread <= 0:
        return None
    amount = percent_of(context.order_amount, spread)
    if amount <= 0:
        return None
    return NetworkDistributorCommission(
        recipient_id=ancestor.id,
        commission_rate=spread,
        commission_amount=amount,
        cost_rate=ancestor_rate,
        description=(
            f"Network distributor commission: {_name(ancestor)} earns "
            f"{spread}% cost spread ({downstream_rate}% -> {ancestor_rate}%)"
        ),
    )
