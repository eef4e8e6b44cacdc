"""
Tier configuration models.

Three parallel classification tables: member tiers (points based, grant
sharing commissions), distributor tiers (sales/fans based, carry a cost rate)
and team-expansion tiers (monthly incentive paid to a distributor's referrer).
"""

from decimal import Decimal
from enum import StrEnum

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.models.base import Base
from backoffice.models.types import MoneyType, RateType


class TierStatus(StrEnum):
    """Tier availability."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class UpgradeConditionLogic(StrEnum):
    """How distributor sales and fans windows combine."""

    AND = "and"
    OR = "or"


class MemberTier(Base):
    """
    Member tier.

    Attributes:
        rank: Ordering key, higher is better
        min_points / max_points: Eligibility window on total_points
            (max_points None means unbounded)
        is_sharing_earner: Grants direct/indirect commission eligibility
        direct_rate / indirect_rate: Percent (0-100)
        points_rate: Multiplier on earned points
        auto_upgrade_enabled: Manual-only tiers are never auto-assigned
    """

    __tablename__ = "member_tiers"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    rank: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    min_points: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    max_points: Mapped[int | None] = mapped_column(Integer, nullable=True)

    is_sharing_earner: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    direct_rate: Mapped[Decimal] = mapped_column(
        RateType, default=Decimal("0"), nullable=False,
        comment="Direct commission percent (0-100)"
    )
    indirect_rate: Mapped[Decimal] = mapped_column(
        RateType, default=Decimal("0"), nullable=False,
        comment="Indirect commission percent (0-100)"
    )
    points_rate: Mapped[Decimal] = mapped_column(
        RateType, default=Decimal("1"), nullable=False,
        comment="Multiplier on points earned by members of this tier"
    )

    auto_upgrade_enabled: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), default=TierStatus.ACTIVE.value, nullable=False
    )

    def __repr__(self) -> str:
        return f"<MemberTier(id={self.id}, name={self.name!r}, rank={self.rank})>"


class DistributorTier(Base):
    """
    Distributor tier.

    Rates on two scales: cost_rate is a percent (0-100); procurement_cost,
    sharer_direct_rate and sharer_indirect_rate are legacy fractions (0-1).
    Only the rate resolver reads them raw.
    """

    __tablename__ = "distributor_tiers"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    rank: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    # Eligibility windows (max <= 0 or None means unbounded)
    min_sales: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    max_sales: Mapped[Decimal | None] = mapped_column(MoneyType, nullable=True)
    min_fans: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    max_fans: Mapped[int | None] = mapped_column(Integer, nullable=True)
    upgrade_condition_logic: Mapped[str] = mapped_column(
        String(3), default=UpgradeConditionLogic.AND.value, nullable=False
    )

    cost_rate: Mapped[Decimal] = mapped_column(
        RateType, default=Decimal("0"), nullable=False,
        comment="Wholesale cost percent of order price (0-100)"
    )
    procurement_cost: Mapped[Decimal | None] = mapped_column(
        RateType, nullable=True,
        comment="Legacy wholesale cost fraction (0-1)"
    )
    sharer_direct_rate: Mapped[Decimal | None] = mapped_column(
        RateType, nullable=True,
        comment="Direct sharing fraction (0-1)"
    )
    sharer_indirect_rate: Mapped[Decimal | None] = mapped_column(
        RateType, nullable=True,
        comment="Indirect sharing fraction (0-1)"
    )

    auto_upgrade_enabled: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), default=TierStatus.ACTIVE.value, nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<DistributorTier(id={self.id}, name={self.name!r}, "
            f"rank={self.rank}, cost_rate={self.cost_rate})>"
        )


class TeamExpansionTier(Base):
    """Team-expansion tier: monthly incentive window and percent rate."""

    __tablename__ = "team_expansion_tiers"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    rank: Mapped[int] = mapped_column(Integer, nullable=False)

    min_incentive_base: Mapped[Decimal | None] = mapped_column(
        MoneyType, nullable=True
    )
    max_incentive_base: Mapped[Decimal | None] = mapped_column(
        MoneyType, nullable=True
    )
    incentive_rate: Mapped[Decimal] = mapped_column(
        RateType, default=Decimal("0"), nullable=False,
        comment="Incentive percent of downstream monthly sales (0-100)"
    )

    status: Mapped[str] = mapped_column(
        String(20), default=TierStatus.ACTIVE.value, nullable=False
    )

    def __repr__(self) -> str:
        return f"<TeamExpansionTier(id={self.id}, name={self.name!r})>"
