"""
Base service class.

Every commission core service owns an AsyncSession and a logger bound to its
class name. Public operations are units of work wrapped by `transaction`;
long batches are additionally timed by `log_operation`.
"""

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.utils.exceptions import CommissionError


# Type variable for generic decorator return types
T = TypeVar("T")


class BaseService:
    """
    Base service class.

    Attributes:
        session: Async database session shared by the service's repositories
        logger: loguru logger bound with service=<ClassName>
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize base service.

        Args:
            session: Async database session
        """
        self.session = session
        self.logger = logger.bind(service=self.__class__.__name__)

    async def commit(self) -> None:
        """Commit the current unit of work."""
        await self.session.commit()

    async def rollback(self) -> None:
        """Discard the current unit of work."""
        await self.session.rollback()


def transaction(func: Callable[..., T]) -> Callable[..., T]:
    """
    Run a service method as one unit of work.

    Commits when the method returns; rolls back and re-raises when it
    raises, so a half-built set of ledger rows or counter increments is never
    persisted. Business rejections (missing rows, illegal transitions) are
    logged as warnings, anything else as errors.

    Usage:
        @transaction
        async def calculate(self, order_id: int) -> CalculationResult:
            ...

    Args:
        func: Async service method

    Returns:
        Wrapped async method
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        try:
            result = await func(self, *args, **kwargs)
        except CommissionError as e:
            await self.rollback()
            self.logger.warning(
                f"{func.__name__} rejected, rolled back",
                extra={"operation": func.__name__, "error": str(e)},
            )
            raise
        except Exception as e:
            await self.rollback()
            self.logger.error(
                f"{func.__name__} failed, rolled back",
                extra={
                    "operation": func.__name__,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            )
            raise

        await self.commit()
        return result

    return wrapper


def log_operation(func: Callable[..., T]) -> Callable[..., T]:
    """
    Log start, finish and duration of a batch operation.

    Usage:
        @log_operation
        @transaction
        async def run_month(self, month: str) -> MonthRunResult:
            ...

    Args:
        func: Async service method

    Returns:
        Wrapped async method
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        started = time.perf_counter()
        self.logger.debug(
            f"Starting {func.__name__}",
            extra={"operation": func.__name__, "args": [str(a) for a in args]},
        )

        try:
            result = await func(self, *args, **kwargs)
        except Exception:
            self.logger.error(
                f"{func.__name__} aborted",
                extra={
                    "operation": func.__name__,
                    "duration_seconds": round(time.perf_counter() - started, 3),
                },
            )
            raise

        self.logger.info(
            f"{func.__name__} finished",
            extra={
                "operation": func.__name__,
                "duration_seconds": round(time.perf_counter() - started, 3),
            },
        )
        return result

    return wrapper
