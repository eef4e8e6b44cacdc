"""
Business constants for the commission engine.

Central location for statuses, scales and rounding rules shared by the
commission, aggregation, tier and incentive services.
"""

from decimal import ROUND_HALF_UP, Decimal

# Money is settled to cents; every computed amount is quantized once
MONEY_QUANTUM = Decimal("0.01")
MONEY_ROUNDING = ROUND_HALF_UP

# Percent rates are stored 0-100; legacy distributor fields are 0-1
PERCENT_SCALE = Decimal("100")

ZERO = Decimal("0")

# Referrer-chain walk ceiling (corrupted graphs may contain cycles)
DEFAULT_MAX_CHAIN_DEPTH = 64

# Order statuses owned by the order lifecycle
ORDER_STATUS_PAID = "paid"
ORDER_STATUS_SHIPPED = "shipped"
ORDER_STATUS_DELIVERED = "delivered"
ORDER_STATUS_COMPLETED = "completed"
ORDER_STATUS_CANCELLED = "cancelled"
ORDER_STATUS_REFUNDED = "refunded"
ORDER_STATUS_RETURNED = "returned"

# Orders that may produce ledger rows
COMMISSIONABLE_ORDER_STATUSES = (
    ORDER_STATUS_DELIVERED,
    ORDER_STATUS_COMPLETED,
)

# Orders excluded from monthly distributor sales
REVERSED_ORDER_STATUSES = (
    ORDER_STATUS_CANCELLED,
    ORDER_STATUS_REFUNDED,
    ORDER_STATUS_RETURNED,
)

# Members included in the full-population tier recalculation
EVALUATED_MEMBER_STATUSES = ("active", "inactive")

# Level change reasons
LEVEL_CHANGE_REASON_AUTO = "auto_upgrade"
