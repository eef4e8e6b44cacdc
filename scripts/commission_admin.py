#!/usr/bin/env python3
"""
Commission back-office operator commands.

Runs one commission core operation against the configured database and
prints its result. Used for manual triggers (monthly batch, tier
recalculation) and for inspecting an order's expected commissions.

Usage:
    python scripts/commission_admin.py preview 1042
    python scripts/commission_admin.py calculate 1042
    python scripts/commission_admin.py confirm 77
    python scripts/commission_admin.py grant-points 1042
    python scripts/commission_admin.py run-month 2026-09
    python scripts/commission_admin.py recalc-tiers
    python scripts/commission_admin.py stats
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger  # noqa: E402

from backoffice.config.database import async_engine, async_session_maker  # noqa: E402
from backoffice.services.commission import (  # noqa: E402
    CommissionEngine,
    CommissionLedger,
)
from backoffice.services.points_aggregator import PointsAggregator  # noqa: E402
from backoffice.services.sales_aggregator import SalesAggregator  # noqa: E402
from backoffice.services.team_incentive_service import (  # noqa: E402
    TeamIncentiveService,
)
from backoffice.services.tier_upgrade import TierUpgradeEvaluator  # noqa: E402
from backoffice.utils.exceptions import CommissionError  # noqa: E402

# Configure logging
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    level="INFO",
)


def print_calculation(result) -> None:
    """Print a calculation result, one line per commission."""
    flags = [
        name
        for name in (
            "no_referrer",
            "referrer_not_found",
            "already_calculated",
            "order_not_completed",
            "chain_truncated",
        )
        if getattr(result, name)
    ]
    logger.info(f"Order {result.order_id}: {len(result.drafts)} commission(s)")
    for draft in result.drafts:
        logger.info(
            f"  {draft.commission_type.value:<20} member {draft.recipient_id:<8} "
            f"{draft.commission_rate}% = {draft.commission_amount}"
        )
    logger.info(f"Total: {result.total_amount}")
    if flags:
        logger.warning(f"Flags: {', '.join(flags)}")


async def run(args: argparse.Namespace) -> None:
    async with async_session_maker() as session:
        if args.command == "preview":
            print_calculation(await CommissionEngine(session).preview(args.id))
        elif args.command == "calculate":
            print_calculation(await CommissionEngine(session).calculate(args.id))
        elif args.command == "confirm":
            entry = await CommissionLedger(session).confirm(args.id)
            logger.success(f"Confirmed {entry}")
        elif args.command == "cancel":
            entry = await CommissionLedger(session).cancel(args.id)
            logger.success(f"Cancelled {entry}")
        elif args.command == "aggregate":
            result = await SalesAggregator(session).aggregate(args.id)
            logger.info(
                f"Applied: {result.applied} ({result.reason}), "
                f"touched members: {result.touched_member_ids}"
            )
        elif args.command == "grant-points":
            result = await PointsAggregator(session).grant_for_order(args.id)
            logger.info(
                f"Granted: {result.granted} ({result.reason}), "
                f"member {result.member_id} +{result.points} points"
            )
        elif args.command == "run-month":
            result = await TeamIncentiveService(session).run_month(args.month)
            logger.info(
                f"Scanned {result.scanned} distributors, created "
                f"{len(result.entries)} entries totalling {result.total_amount}"
            )
        elif args.command == "confirm-incentive":
            entry = await TeamIncentiveService(session).confirm(args.id)
            logger.success(f"Confirmed {entry}")
        elif args.command == "cancel-incentive":
            entry = await TeamIncentiveService(session).cancel(args.id)
            logger.success(f"Cancelled {entry}")
        elif args.command == "recalc-tiers":
            summary = await TierUpgradeEvaluator(session).evaluate_all()
            logger.info(
                f"Evaluated {summary.total} members: "
                f"{summary.member_tier_changes} member tier change(s), "
                f"{summary.distributor_tier_changes} distributor tier change(s)"
            )
        elif args.command == "stats":
            stats = await CommissionLedger(session).get_stats()
            for key, value in stats.items():
                logger.info(f"  {key:<18} {value}")

    await async_engine.dispose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    commands = parser.add_subparsers(dest="command", required=True)

    for name in ("preview", "calculate", "aggregate", "grant-points"):
        commands.add_parser(name).add_argument("id", type=int, help="Order ID")
    for name in ("confirm", "cancel"):
        commands.add_parser(name).add_argument(
            "id", type=int, help="Commission entry ID"
        )
    for name in ("confirm-incentive", "cancel-incentive"):
        commands.add_parser(name).add_argument(
            "id", type=int, help="Team incentive entry ID"
        )
    commands.add_parser("run-month").add_argument("month", help="YYYY-MM")
    commands.add_parser("recalc-tiers")
    commands.add_parser("stats")
    return parser


if __name__ == "__main__":
    try:
        asyncio.run(run(build_parser().parse_args()))
    except CommissionError as e:
        logger.error(str(e))
        sys.exit(1)
