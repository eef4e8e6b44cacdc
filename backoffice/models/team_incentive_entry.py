"""
Team incentive entry model.

One row per (distributor, calendar month) produced by the monthly batch.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.models.base import Base
from backoffice.models.commission_entry import SettlementStatus
from backoffice.models.types import MoneyType, RateType


class TeamIncentiveEntry(Base):
    """Monthly team-expansion incentive paid to a distributor's referrer."""

    __tablename__ = "team_incentive_entries"
    __table_args__ = (
        UniqueConstraint(
            "distributor_id",
            "calculation_month",
            name="uq_team_incentive_distributor_month",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    distributor_id: Mapped[int] = mapped_column(
        ForeignKey("members.id"), nullable=False, index=True
    )
    referrer_id: Mapped[int] = mapped_column(
        ForeignKey("members.id"), nullable=False, index=True
    )
    calculation_month: Mapped[str] = mapped_column(
        String(7), nullable=False, comment="YYYY-MM"
    )

    monthly_sales: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    incentive_base: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, comment="Tier minimum incentive base"
    )
    incentive_rate: Mapped[Decimal] = mapped_column(
        RateType, nullable=False, comment="Percent (0-100)"
    )
    incentive_amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
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
            f"<TeamIncentiveEntry(id={self.id}, "
            f"distributor_id={self.distributor_id}, "
            f"month={self.calculation_month}, "
            f"amount={self.incentive_amount})>"
        )
