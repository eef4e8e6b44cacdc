"""
Commission core.

Rate resolution, chain walking, the calculation engine and the settlement
ledger.
"""

from backoffice.services.commission.chain_walker import ChainWalk, ChainWalker
from backoffice.services.commission.engine import (
    CalculationResult,
    CommissionEngine,
)
from backoffice.services.commission.entries import (
    CommissionDraft,
    DirectCommission,
    DistributorCommission,
    IndirectCommission,
    NetworkDistributorCommission,
    OrderContext,
)
from backoffice.services.commission.ledger import CommissionLedger
from backoffice.services.commission.rate_resolver import RateKind, resolve_rate


__all__ = [
    "CalculationResult",
    "ChainWalk",
    "ChainWalker",
    "CommissionDraft",
    "CommissionEngine",
    "CommissionLedger",
    "DirectCommission",
    "DistributorCommission",
    "IndirectCommission",
    "NetworkDistributorCommission",
    "OrderContext",
    "RateKind",
    "resolve_rate",
]
