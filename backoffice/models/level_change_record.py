"""
Level change record model.

Audit trail written whenever a tier assignment changes. Never mutated.
"""

from datetime import UTC, datetime
from enum import StrEnum

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.models.base import Base


class TierType(StrEnum):
    """Classification a record refers to."""

    MEMBER = "member"
    DISTRIBUTOR = "distributor"


class LevelChangeRecord(Base):
    """Tier assignment change (new_tier_id None means unassigned)."""

    __tablename__ = "level_change_records"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    member_id: Mapped[int] = mapped_column(
        ForeignKey("members.id"), nullable=False, index=True
    )
    tier_type: Mapped[str] = mapped_column(String(20), nullable=False)
    old_tier_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    new_tier_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reason: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(String(200), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<LevelChangeRecord(member_id={self.member_id}, "
            f"type={self.tier_type}, {self.old_tier_id} -> {self.new_tier_id})>"
        )
