"""
Services.

Business logic layer.
"""

from backoffice.services.base_service import (
    BaseService,
    log_operation,
    transaction,
)
from backoffice.services.commission import (
    CalculationResult,
    CommissionEngine,
    CommissionLedger,
)
from backoffice.services.points_aggregator import (
    PointsAggregator,
    PointsGrantResult,
)
from backoffice.services.sales_aggregator import (
    AggregationResult,
    SalesAggregator,
)
from backoffice.services.team_incentive_service import (
    MonthRunResult,
    TeamIncentiveService,
)
from backoffice.services.tier_upgrade import (
    EvaluationSummary,
    MemberEvaluation,
    TierChange,
    TierUpgradeEvaluator,
)


__all__ = [
    # Base
    "BaseService",
    "log_operation",
    "transaction",
    # Commission core
    "CalculationResult",
    "CommissionEngine",
    "CommissionLedger",
    # Aggregation and tiers
    "AggregationResult",
    "SalesAggregator",
    "PointsAggregator",
    "PointsGrantResult",
    "EvaluationSummary",
    "MemberEvaluation",
    "TierChange",
    "TierUpgradeEvaluator",
    # Monthly batch
    "MonthRunResult",
    "TeamIncentiveService",
]
