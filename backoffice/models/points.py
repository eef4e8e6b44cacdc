"""
Points models.

Point source configuration and the per-member points ledger. A points record
is written once per (source, source_id); the order points grant relies on it
to stay idempotent.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.models.base import Base
from backoffice.models.types import RateType


class PointSource(StrEnum):
    """Where a points grant comes from."""

    ORDER = "order"


class PointsRecordType(StrEnum):
    """Direction of a points movement."""

    EARN = "earn"


class PointSourceConfig(Base):
    """
    Points formula for one source.

    points = (base_points + amount * multiplier) * member tier points_rate
    """

    __tablename__ = "point_source_configs"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    source: Mapped[str] = mapped_column(
        String(30), nullable=False, unique=True
    )
    base_points: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    multiplier: Mapped[Decimal] = mapped_column(
        RateType, default=Decimal("1"), nullable=False,
        comment="Points per currency unit"
    )
    is_enabled: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<PointSourceConfig(source={self.source!r}, "
            f"base={self.base_points}, multiplier={self.multiplier})>"
        )


class MemberPointsRecord(Base):
    """Points ledger row. Never mutated."""

    __tablename__ = "member_points_records"
    __table_args__ = (
        UniqueConstraint(
            "source", "source_id", name="uq_member_points_source"
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    member_id: Mapped[int] = mapped_column(
        ForeignKey("members.id"), nullable=False, index=True
    )
    record_type: Mapped[str] = mapped_column(
        String(20), default=PointsRecordType.EARN.value, nullable=False
    )
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    # Member's available_points after this record
    balance: Mapped[int] = mapped_column(Integer, nullable=False)
    source: Mapped[str] = mapped_column(String(30), nullable=False)
    source_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<MemberPointsRecord(member_id={self.member_id}, "
            f"points={self.points}, source={self.source}:{self.source_id})>"
        )
