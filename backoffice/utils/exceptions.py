"""
Exception handling utilities.

Defines categorized exception types for the commission core.

Expected empty outcomes (no referrer, no positive rate, no eligible tier,
no monthly sales) are result flags and never raise. Exceptions here are
data-integrity failures and illegal state transitions.
"""

from sqlalchemy.exc import OperationalError


class CommissionError(Exception):
    """Base class for commission core errors."""

    pass


class DataIntegrityError(CommissionError):
    """A referenced record does not exist."""

    pass


class OrderNotFoundError(DataIntegrityError):
    """Raised when an order id does not resolve."""

    def __init__(self, order_id: int) -> None:
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class BuyerNotFoundError(DataIntegrityError):
    """Raised when an order's buyer no longer exists."""

    def __init__(self, order_id: int, member_id: int) -> None:
        self.order_id = order_id
        self.member_id = member_id
        super().__init__(f"Buyer {member_id} of order {order_id} not found")


class MemberNotFoundError(DataIntegrityError):
    """Raised when a member id does not resolve."""

    def __init__(self, member_id: int) -> None:
        self.member_id = member_id
        super().__init__(f"Member {member_id} not found")


class LedgerEntryNotFoundError(DataIntegrityError):
    """Raised when a commission ledger entry id does not resolve."""

    def __init__(self, entry_id: int) -> None:
        self.entry_id = entry_id
        super().__init__(f"Commission entry {entry_id} not found")


class IncentiveEntryNotFoundError(DataIntegrityError):
    """Raised when a team incentive entry id does not resolve."""

    def __init__(self, entry_id: int) -> None:
        self.entry_id = entry_id
        super().__init__(f"Team incentive entry {entry_id} not found")


class InvalidStatusTransitionError(CommissionError):
    """Raised when a settlement transition does not start from pending."""

    def __init__(self, entry_id: int, current: str, target: str) -> None:
        self.entry_id = entry_id
        self.current = current
        self.target = target
        super().__init__(
            f"Entry {entry_id} cannot move from {current!r} to {target!r}"
        )


class InvalidMonthError(CommissionError, ValueError):
    """Raised when a batch month is not in YYYY-MM format."""

    def __init__(self, month: str) -> None:
        self.month = month
        super().__init__(f"Invalid month {month!r}, expected YYYY-MM")


# Exception categories based on handling strategy

# Must raise to caller - referenced data is missing or state is illegal
MUST_RAISE = (
    DataIntegrityError,
    InvalidStatusTransitionError,
    InvalidMonthError,
)

# Transient - safe for the task queue to retry
RETRYABLE = (
    OperationalError,
)


def must_raise(exc: Exception) -> bool:
    """
    Check if exception must be raised.

    Args:
        exc: Exception to check

    Returns:
        True if exception must be raised
    """
    return isinstance(exc, MUST_RAISE)


def is_retryable(exc: Exception) -> bool:
    """
    Check if exception is transient and worth a queue retry.

    Args:
        exc: Exception to check

    Returns:
        True if exception is retryable
    """
    return isinstance(exc, RETRYABLE)
