"""
Team incentive service.

Monthly team-expansion incentive batch: each distributor's own paid sales
for a calendar month earn its referrer a percentage set by the referrer's
team-expansion tier. Entries follow the same pending -> confirmed | cancelled
settlement as the commission ledger.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from backoffice.config.commission_constants import REVERSED_ORDER_STATUSES
from backoffice.models.commission_entry import SettlementStatus
from backoffice.models.member import Member
from backoffice.models.team_incentive_entry import TeamIncentiveEntry
from backoffice.models.tiers import TeamExpansionTier
from backoffice.repositories.member_repository import MemberRepository
from backoffice.repositories.order_repository import OrderRepository
from backoffice.repositories.team_incentive_repository import (
    TeamIncentiveRepository,
)
from backoffice.repositories.tier_repository import TierRepository
from backoffice.services.base_service import BaseService, log_operation, transaction
from backoffice.utils.datetime_utils import month_bounds, utc_now
from backoffice.utils.exceptions import (
    IncentiveEntryNotFoundError,
    InvalidMonthError,
    InvalidStatusTransitionError,
    MemberNotFoundError,
)
from backoffice.utils.money import percent_of, to_decimal


@dataclass
class MonthRunResult:
    """Outcome of one monthly batch run."""

    month: str
    entries: list[TeamIncentiveEntry] = field(default_factory=list)
    scanned: int = 0
    already_calculated: int = 0
    no_sales: int = 0
    no_referrer: int = 0
    no_tier: int = 0
    outside_window: int = 0

    @property
    def total_amount(self) -> Decimal:
        return sum(
            (entry.incentive_amount for entry in self.entries), Decimal("0")
        )


def incentive_window_holds(tier: TeamExpansionTier, monthly_sales: Decimal) -> bool:
    """
    Check monthly sales against a tier's incentive base window.

    Missing minimum is zero; missing maximum is unbounded.
    """
    minimum = to_decimal(tier.min_incentive_base)
    if monthly_sales < minimum:
        return False
    if tier.max_incentive_base is None:
        return True
    return monthly_sales <= to_decimal(tier.max_incentive_base)


class TeamIncentiveService(BaseService):
    """Monthly team-expansion incentive calculator and settlement."""

    def __init__(self, session) -> None:
        """Initialize team incentive service."""
        super().__init__(session)
        self.member_repo = MemberRepository(session)
        self.order_repo = OrderRepository(session)
        self.tier_repo = TierRepository(session)
        self.incentive_repo = TeamIncentiveRepository(session)

    @log_operation
    @transaction
    async def run_month(self, month: str) -> MonthRunResult:
        """
        Calculate team-expansion incentives for a calendar month.

        Safe to re-run: distributors already holding an entry for the month
        are skipped.

        Args:
            month: Month in YYYY-MM format

        Returns:
            MonthRunResult with created entries and skip counts

        Raises:
            InvalidMonthError: Month is not YYYY-MM
        """
        try:
            start, end = month_bounds(month)
        except ValueError as e:
            raise InvalidMonthError(month) from e

        result = MonthRunResult(month=month)
        done = await self.incentive_repo.get_calculated_distributor_ids(month)
        distributors = await self.member_repo.get_distributors()

        for distributor in distributors:
            result.scanned += 1

            if distributor.id in done:
                result.already_calculated += 1
                continue

            monthly_sales = await self.order_repo.sum_member_sales(
                distributor.id, start, end, REVERSED_ORDER_STATUSES
            )
            if monthly_sales <= 0:
                result.no_sales += 1
                continue

            row = await self._build_entry(
                result, distributor, month, monthly_sales
            )
            if row is not None:
                result.entries.append(await self.incentive_repo.create(**row))

        self.logger.info(
            "Team incentive month calculated",
            extra={
                "month": month,
                "scanned": result.scanned,
                "created": len(result.entries),
                "total_amount": str(result.total_amount),
            },
        )
        return result

    @transaction
    async def confirm(self, entry_id: int) -> TeamIncentiveEntry:
        """
        Confirm a pending incentive and credit the referrer.

        Raises:
            IncentiveEntryNotFoundError: Entry does not exist
            InvalidStatusTransitionError: Entry is not pending
            MemberNotFoundError: Referrer no longer exists
        """
        entry = await self._settle(entry_id, SettlementStatus.CONFIRMED)

        credited = await self.member_repo.increment(
            entry.referrer_id,
            available_team_incentive=entry.incentive_amount,
            total_team_incentive=entry.incentive_amount,
        )
        if not credited:
            raise MemberNotFoundError(entry.referrer_id)

        self.logger.info(
            "Team incentive confirmed",
            extra={
                "entry_id": entry.id,
                "referrer_id": entry.referrer_id,
                "amount": str(entry.incentive_amount),
            },
        )
        return entry

    @transaction
    async def cancel(self, entry_id: int) -> TeamIncentiveEntry:
        """
        Cancel a pending incentive.

        Raises:
            IncentiveEntryNotFoundError: Entry does not exist
            InvalidStatusTransitionError: Entry is not pending
        """
        entry = await self._settle(entry_id, SettlementStatus.CANCELLED)
        self.logger.info(
            "Team incentive cancelled", extra={"entry_id": entry.id}
        )
        return entry

    async def _build_entry(
        self,
        result: MonthRunResult,
        distributor: Member,
        month: str,
        monthly_sales: Decimal,
    ) -> dict | None:
        referrer = await self.member_repo.get_referrer(distributor)
        if referrer is None:
            result.no_referrer += 1
            return None

        tier = await self.tier_repo.get_team_expansion_tier(
            referrer.team_expansion_tier_id
        )
        if tier is None:
            result.no_tier += 1
            return None

        if not incentive_window_holds(tier, monthly_sales):
            result.outside_window += 1
            return None

        rate = to_decimal(tier.incentive_rate)
        return {
            "distributor_id": distributor.id,
            "referrer_id": referrer.id,
            "calculation_month": month,
            "monthly_sales": monthly_sales,
            "incentive_base": to_decimal(tier.min_incentive_base),
            "incentive_rate": rate,
            "incentive_amount": percent_of(monthly_sales, rate),
            "status": SettlementStatus.PENDING.value,
            "description": (
                f"Team expansion incentive {month}: {distributor.nickname} "
                f"sales {monthly_sales} at {rate}% ({tier.name})"
            ),
        }

    async def _settle(
        self, entry_id: int, target: SettlementStatus
    ) -> TeamIncentiveEntry:
        entry = await self.incentive_repo.get_for_update(entry_id)
        if entry is None:
            raise IncentiveEntryNotFoundError(entry_id)

        if entry.status != SettlementStatus.PENDING.value:
            raise InvalidStatusTransitionError(
                entry_id, entry.status, target.value
            )

        entry.status = target.value
        entry.settled_at = utc_now()
        await self.session.flush()
        return entry
