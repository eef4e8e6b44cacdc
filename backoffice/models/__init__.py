"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from backoffice.models.base import Base
from backoffice.models.commission_entry import (
    CommissionEntry,
    CommissionType,
    SettlementStatus,
)
from backoffice.models.level_change_record import LevelChangeRecord, TierType
from backoffice.models.member import Member
from backoffice.models.order import Order, OrderStatus
from backoffice.models.points import (
    MemberPointsRecord,
    PointSource,
    PointSourceConfig,
    PointsRecordType,
)
from backoffice.models.team_incentive_entry import TeamIncentiveEntry
from backoffice.models.tiers import (
    DistributorTier,
    MemberTier,
    TeamExpansionTier,
    TierStatus,
    UpgradeConditionLogic,
)


__all__ = [
    "Base",
    # Referral graph
    "Member",
    "Order",
    "OrderStatus",
    # Tier configuration
    "MemberTier",
    "DistributorTier",
    "TeamExpansionTier",
    "TierStatus",
    "UpgradeConditionLogic",
    # Ledgers
    "CommissionEntry",
    "CommissionType",
    "SettlementStatus",
    "TeamIncentiveEntry",
    "LevelChangeRecord",
    "TierType",
    # Points
    "PointSourceConfig",
    "PointSource",
    "MemberPointsRecord",
    "PointsRecordType",
]
