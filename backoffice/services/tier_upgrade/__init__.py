"""
Tier upgrade package.

Best-fit member and distributor tier assignment plus fan counters.
"""

from backoffice.services.tier_upgrade.evaluator import (
    EvaluationSummary,
    MemberEvaluation,
    TierChange,
    TierUpgradeEvaluator,
    select_distributor_tier,
    select_member_tier,
)
from backoffice.services.tier_upgrade.fans import FanCounts, count_fans


__all__ = [
    "EvaluationSummary",
    "FanCounts",
    "MemberEvaluation",
    "TierChange",
    "TierUpgradeEvaluator",
    "count_fans",
    "select_distributor_tier",
    "select_member_tier",
]
