"""
Member model.

A node of the referral forest. Each member has at most one referrer; the
link is a plain id (back-reference only) and nothing enforces acyclicity.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.models.base import Base
from backoffice.models.tiers import DistributorTier, MemberTier, TeamExpansionTier
from backoffice.models.types import MoneyType, RateType


class Member(Base):
    """Member model - buyers, sharers and distributors."""

    __tablename__ = "members"
    __table_args__ = (
        CheckConstraint(
            "available_commission >= 0",
            name="check_member_available_commission_non_negative",
        ),
        CheckConstraint(
            "total_commission >= 0",
            name="check_member_total_commission_non_negative",
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    nickname: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default="active", nullable=False, index=True
    )

    # Referral
    referrer_id: Mapped[int | None] = mapped_column(
        ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Classifications
    member_tier_id: Mapped[int | None] = mapped_column(
        ForeignKey("member_tiers.id", ondelete="SET NULL"), nullable=True
    )
    distributor_tier_id: Mapped[int | None] = mapped_column(
        ForeignKey("distributor_tiers.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    team_expansion_tier_id: Mapped[int | None] = mapped_column(
        ForeignKey("team_expansion_tiers.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Points and sales counters
    total_points: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    available_points: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    total_sales: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    direct_sales: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    indirect_sales: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    distributor_sales: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    # Commission balances
    total_commission: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    available_commission: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    total_team_incentive: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    available_team_incentive: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    # Team size
    direct_fans: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    total_fans: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )

    # Personal overrides (percent, pre-empt tier-derived rates)
    personal_direct_rate: Mapped[Decimal | None] = mapped_column(
        RateType, nullable=True
    )
    personal_indirect_rate: Mapped[Decimal | None] = mapped_column(
        RateType, nullable=True
    )
    personal_cost_rate: Mapped[Decimal | None] = mapped_column(
        RateType, nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Relationships (many-to-one, always needed by the resolver)
    member_tier: Mapped[Optional["MemberTier"]] = relationship(
        MemberTier, lazy="joined"
    )
    distributor_tier: Mapped[Optional["DistributorTier"]] = relationship(
        DistributorTier, lazy="joined"
    )
    team_expansion_tier: Mapped[Optional["TeamExpansionTier"]] = relationship(
        TeamExpansionTier, lazy="joined"
    )

    def __repr__(self) -> str:
        return (
            f"<Member(id={self.id}, nickname={self.nickname!r}, "
            f"referrer_id={self.referrer_id})>"
        )
