"""
Repositories.

Data access layer over the referral graph, tier configuration and ledgers.
"""

from backoffice.repositories.commission_repository import CommissionRepository
from backoffice.repositories.level_change_repository import LevelChangeRepository
from backoffice.repositories.member_repository import MemberRepository
from backoffice.repositories.order_repository import OrderRepository
from backoffice.repositories.points_repository import PointsRepository
from backoffice.repositories.team_incentive_repository import (
    TeamIncentiveRepository,
)
from backoffice.repositories.tier_repository import TierRepository


__all__ = [
    "CommissionRepository",
    "LevelChangeRepository",
    "MemberRepository",
    "OrderRepository",
    "PointsRepository",
    "TeamIncentiveRepository",
    "TierRepository",
]
