"""
Commission tasks.

Dramatiq actors the order lifecycle and back-office operators trigger:
commission calculation on completion, sales aggregation and the points
grant on payment, the monthly team incentive batch and a full tier
recalculation. Every run opens its own session; the service commits or rolls
back its unit of work.

Transient database errors are re-raised for the Retries middleware.
Data-integrity errors and illegal transitions are logged and dropped since a
retry cannot fix them; anything else propagates to the worker.
"""

from collections.abc import Awaitable, Callable
from typing import Any

import dramatiq
from loguru import logger

from backoffice.services.commission.engine import CommissionEngine
from backoffice.services.points_aggregator import PointsAggregator
from backoffice.services.sales_aggregator import SalesAggregator
from backoffice.services.team_incentive_service import TeamIncentiveService
from backoffice.services.tier_upgrade.evaluator import TierUpgradeEvaluator
from backoffice.utils.exceptions import is_retryable, must_raise
from jobs.async_runner import create_local_session, run_async
from jobs.broker import broker  # noqa: F401  (binds actors to the Redis broker)


SessionFactory = Callable[[], Any]


def _run(task_name: str, coro: Awaitable[dict]) -> dict | None:
    try:
        return run_async(coro)
    except Exception as e:
        if is_retryable(e):
            logger.warning(f"{task_name} hit a transient error, retrying: {e}")
            raise
        if must_raise(e):
            logger.error(f"{task_name} rejected: {e}")
            return None
        logger.exception(f"{task_name} failed: {e}")
        raise


@dramatiq.actor(max_retries=3, time_limit=120_000)  # 2 min timeout
def calculate_order_commission(order_id: int) -> None:
    """
    Calculate commissions for a completed order.

    Args:
        order_id: Completed order ID
    """
    logger.info(f"Calculating commission for order {order_id}...")
    result = _run(
        "Commission calculation", _calculate_order_commission_async(order_id)
    )
    if result is not None:
        logger.info(f"Commission calculation complete: {result}")


@dramatiq.actor(max_retries=3, time_limit=120_000)  # 2 min timeout
def aggregate_order_sales(order_id: int) -> None:
    """
    Aggregate a paid order into ancestor sales counters.

    Args:
        order_id: Paid order ID
    """
    logger.info(f"Aggregating sales for order {order_id}...")
    result = _run("Sales aggregation", _aggregate_order_sales_async(order_id))
    if result is not None:
        logger.info(f"Sales aggregation complete: {result}")


@dramatiq.actor(max_retries=3, time_limit=120_000)  # 2 min timeout
def grant_order_points(order_id: int) -> None:
    """
    Grant the buyer points for a paid order.

    Args:
        order_id: Paid order ID
    """
    logger.info(f"Granting points for order {order_id}...")
    result = _run("Points grant", _grant_order_points_async(order_id))
    if result is not None:
        logger.info(f"Points grant complete: {result}")


@dramatiq.actor(max_retries=3, time_limit=1_800_000)  # 30 min timeout
def run_team_incentive_month(month: str) -> None:
    """
    Run the team-expansion incentive batch for a month.

    Args:
        month: Month in YYYY-MM format
    """
    logger.info(f"Running team incentive batch for {month}...")
    result = _run("Team incentive batch", _run_team_incentive_month_async(month))
    if result is not None:
        logger.info(f"Team incentive batch complete: {result}")


@dramatiq.actor(max_retries=3, time_limit=1_800_000)  # 30 min timeout
def recalculate_all_tiers() -> None:
    """Re-fit the tiers of every active or inactive member."""
    logger.info("Starting full tier recalculation...")
    result = _run("Tier recalculation", _recalculate_all_tiers_async())
    if result is not None:
        logger.info(f"Tier recalculation complete: {result}")


async def _calculate_order_commission_async(
    order_id: int, session_factory: SessionFactory = create_local_session
) -> dict:
    """Async implementation of commission calculation."""
    async with session_factory() as session:
        result = await CommissionEngine(session).calculate(order_id)
        return {
            "order_id": order_id,
            "entries": len(result.entries),
            "total_amount": str(result.total_amount),
            "no_referrer": result.no_referrer,
            "referrer_not_found": result.referrer_not_found,
            "already_calculated": result.already_calculated,
            "order_not_completed": result.order_not_completed,
            "chain_truncated": result.chain_truncated,
        }


async def _aggregate_order_sales_async(
    order_id: int, session_factory: SessionFactory = create_local_session
) -> dict:
    """Async implementation of sales aggregation."""
    async with session_factory() as session:
        result = await SalesAggregator(session).aggregate(order_id)
        return {
            "order_id": order_id,
            "applied": result.applied,
            "reason": result.reason,
            "touched": len(result.touched_member_ids),
            "tier_changes": sum(1 for e in result.tier_changes if e.changed),
        }


async def _grant_order_points_async(
    order_id: int, session_factory: SessionFactory = create_local_session
) -> dict:
    """Async implementation of the order points grant."""
    async with session_factory() as session:
        result = await PointsAggregator(session).grant_for_order(order_id)
        return {
            "order_id": order_id,
            "granted": result.granted,
            "reason": result.reason,
            "points": result.points,
            "tier_changes": sum(1 for e in result.tier_changes if e.changed),
        }


async def _run_team_incentive_month_async(
    month: str, session_factory: SessionFactory = create_local_session
) -> dict:
    """Async implementation of the monthly team incentive batch."""
    async with session_factory() as session:
        result = await TeamIncentiveService(session).run_month(month)
        return {
            "month": month,
            "scanned": result.scanned,
            "created": len(result.entries),
            "total_amount": str(result.total_amount),
        }


async def _recalculate_all_tiers_async(
    session_factory: SessionFactory = create_local_session,
) -> dict:
    """Async implementation of the full tier recalculation."""
    async with session_factory() as session:
        summary = await TierUpgradeEvaluator(session).evaluate_all()
        return {
            "total": summary.total,
            "member_tier_changes": summary.member_tier_changes,
            "distributor_tier_changes": summary.distributor_tier_changes,
        }
