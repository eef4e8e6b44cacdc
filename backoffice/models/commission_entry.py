"""
Commission ledger entry model.

Append-only ledger of computed commissions. Only `status` (and the
`settled_at` stamp) changes after creation.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.models.base import Base
from backoffice.models.types import MoneyType, RateType


class CommissionType(StrEnum):
    """Commission kinds produced by the engine."""

    DIRECT = "direct"
    INDIRECT = "indirect"
    DISTRIBUTOR = "distributor"
    NETWORK_DISTRIBUTOR = "network_distributor"


class SettlementStatus(StrEnum):
    """Ledger status; pending is the only non-terminal state."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class CommissionEntry(Base):
    """
    Commission ledger entry.

    Attributes:
        order_id: Source order
        buyer_id: Member who placed the order
        commission_type: direct / indirect / distributor / network_distributor
        recipient_id: Member credited on confirmation
        order_amount: Computation base
        commission_rate: Percent (0-100) the amount derives from
        commission_amount: Amount credited on confirmation
        cost_rate / cost_amount: Wholesale cost (distributor kinds only)
        status: pending -> confirmed | cancelled
    """

    __tablename__ = "commission_entries"
    __table_args__ = (
        UniqueConstraint(
            "order_id",
            "commission_type",
            "recipient_id",
            name="uq_commission_entry_order_type_recipient",
        ),
        CheckConstraint(
            "commission_amount >= 0",
            name="check_commission_amount_non_negative",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id"), nullable=False, index=True
    )
    buyer_id: Mapped[int] = mapped_column(
        ForeignKey("members.id"), nullable=False
    )
    commission_type: Mapped[str] = mapped_column(String(30), nullable=False)
    recipient_id: Mapped[int] = mapped_column(
        ForeignKey("members.id"), nullable=False, index=True
    )

    order_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    commission_rate: Mapped[Decimal] = mapped_column(
        RateType, nullable=False, comment="Percent (0-100)"
    )
    commission_amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
    )
    cost_rate: Mapped[Decimal | None] = mapped_column(RateType, nullable=True)
    cost_amount: Mapped[Decimal | None] = mapped_column(
        MoneyType, nullable=True
    )

    status: Mapped[str] = mapped_column(
        String(20),
        default=SettlementStatus.PENDING.value,
        nullable=False,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    settled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return (
            f"<CommissionEntry(id={self.id}, order_id={self.order_id}, "
            f"type={self.commission_type}, recipient_id={self.recipient_id}, "
            f"amount={self.commission_amount}, status={self.status})>"
        )
