"""
Tier upgrade evaluator.

Moves members to the best-fitting auto-upgrade tier for their current
points, sales and fans. Selection is "best current fit": one call may move a
member up or down several tiers, or unassign the tier when nothing fits.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from backoffice.config.commission_constants import (
    EVALUATED_MEMBER_STATUSES,
    LEVEL_CHANGE_REASON_AUTO,
)
from backoffice.config.settings import settings
from backoffice.models.level_change_record import TierType
from backoffice.models.member import Member
from backoffice.models.tiers import (
    DistributorTier,
    MemberTier,
    UpgradeConditionLogic,
)
from backoffice.repositories.level_change_repository import LevelChangeRepository
from backoffice.repositories.member_repository import MemberRepository
from backoffice.repositories.tier_repository import TierRepository
from backoffice.services.base_service import BaseService, log_operation, transaction
from backoffice.services.commission.chain_walker import ChainWalker
from backoffice.services.tier_upgrade.fans import refresh_fans as store_fans
from backoffice.utils.exceptions import MemberNotFoundError
from backoffice.utils.money import to_decimal


@dataclass(frozen=True)
class TierChange:
    """Old and new assignment of one classification."""

    member_id: int
    tier_type: TierType
    old_tier_id: int | None
    new_tier_id: int | None

    @property
    def changed(self) -> bool:
        return self.old_tier_id != self.new_tier_id


@dataclass(frozen=True)
class MemberEvaluation:
    """Both classifications of one member after evaluation."""

    member_tier: TierChange
    distributor_tier: TierChange

    @property
    def changed(self) -> bool:
        return self.member_tier.changed or self.distributor_tier.changed


@dataclass
class EvaluationSummary:
    """Counts from a population-wide recalculation."""

    total: int = 0
    member_tier_changes: int = 0
    distributor_tier_changes: int = 0


def _within(value, minimum, maximum) -> bool:
    if value < minimum:
        return False
    return maximum is None or value <= maximum


def _open_max(value):
    # Distributor windows: missing or non-positive max is unbounded
    if value is None or value <= 0:
        return None
    return value


def select_member_tier(
    total_points: int, tiers: Sequence[MemberTier]
) -> MemberTier | None:
    """
    Pick the best member tier for a points total.

    Args:
        total_points: Member's points
        tiers: Candidate tiers, highest rank first

    Returns:
        First tier whose [min_points, max_points] holds the points, or None
    """
    points = total_points or 0
    for tier in tiers:
        if _within(points, tier.min_points or 0, tier.max_points):
            return tier
    return None


def distributor_tier_fits(
    tier: DistributorTier, total_sales: Decimal, total_fans: int
) -> bool:
    """Check a distributor tier's sales and fans windows."""
    sales_ok = _within(
        total_sales,
        to_decimal(tier.min_sales),
        _open_max(tier.max_sales),
    )
    fans_ok = _within(total_fans, tier.min_fans or 0, _open_max(tier.max_fans))

    if tier.upgrade_condition_logic == UpgradeConditionLogic.OR.value:
        return sales_ok or fans_ok
    return sales_ok and fans_ok


def select_distributor_tier(
    total_sales: Decimal, total_fans: int, tiers: Sequence[DistributorTier]
) -> DistributorTier | None:
    """
    Pick the best distributor tier for sales and fans.

    Args:
        total_sales: Member's total sales
        total_fans: Member's total fans
        tiers: Candidate tiers, highest rank first

    Returns:
        First fitting tier, or None
    """
    sales = to_decimal(total_sales)
    fans = total_fans or 0
    for tier in tiers:
        if distributor_tier_fits(tier, sales, fans):
            return tier
    return None


class TierUpgradeEvaluator(BaseService):
    """
    Tier auto-upgrade service.

    Public methods are units of work. `reevaluate` runs inside the caller's
    transaction and is what other services use after their own writes.
    """

    def __init__(self, session, max_chain_depth: int | None = None) -> None:
        """
        Initialize evaluator.

        Args:
            session: Async database session
            max_chain_depth: Hop ceiling for upline walks
        """
        super().__init__(session)
        self.member_repo = MemberRepository(session)
        self.tier_repo = TierRepository(session)
        self.level_change_repo = LevelChangeRepository(session)
        self.walker = ChainWalker(
            self.member_repo,
            max_chain_depth or settings.commission_max_chain_depth,
        )

    @transaction
    async def evaluate_member_tier(self, member_id: int) -> TierChange:
        """
        Re-fit a member's member tier from total points.

        Raises:
            MemberNotFoundError: Member does not exist
        """
        member = await self._load(member_id)
        tiers = await self.tier_repo.get_auto_member_tiers()
        return await self._apply_member_tier(member, tiers)

    @transaction
    async def evaluate_distributor_tier(self, member_id: int) -> TierChange:
        """
        Re-fit a member's distributor tier from total sales and fans.

        Raises:
            MemberNotFoundError: Member does not exist
        """
        member = await self._load(member_id)
        tiers = await self.tier_repo.get_auto_distributor_tiers()
        return await self._apply_distributor_tier(member, tiers)

    @transaction
    async def evaluate_member(self, member_id: int) -> MemberEvaluation:
        """Re-fit both classifications of a member."""
        evaluations = await self.reevaluate([member_id], strict=True)
        return evaluations[0]

    @log_operation
    @transaction
    async def evaluate_all(self) -> EvaluationSummary:
        """
        Re-fit every active or inactive member.

        Returns:
            EvaluationSummary with change counts
        """
        member_ids = await self.member_repo.get_ids_by_statuses(
            EVALUATED_MEMBER_STATUSES
        )
        evaluations = await self.reevaluate(member_ids)

        summary = EvaluationSummary(total=len(member_ids))
        for evaluation in evaluations:
            if evaluation.member_tier.changed:
                summary.member_tier_changes += 1
            if evaluation.distributor_tier.changed:
                summary.distributor_tier_changes += 1

        self.logger.info(
            "Tier recalculation finished",
            extra={
                "total": summary.total,
                "member_tier_changes": summary.member_tier_changes,
                "distributor_tier_changes": summary.distributor_tier_changes,
            },
        )
        return summary

    @transaction
    async def refresh_fans(self, member_id: int) -> MemberEvaluation:
        """Recount a member's fans, then re-fit the member."""
        await self._load(member_id)
        await store_fans(self.member_repo, member_id)
        evaluations = await self.reevaluate([member_id], strict=True)
        return evaluations[0]

    @transaction
    async def on_referrer_changed(
        self,
        member_id: int,
        old_referrer_id: int | None,
        new_referrer_id: int | None,
    ) -> list[MemberEvaluation]:
        """
        Propagate a referrer reassignment.

        Re-fits the member, then for the old and the new referrer recounts
        fans and re-fits every member from that referrer to the top of its
        chain.

        Args:
            member_id: Member whose referrer changed
            old_referrer_id: Previous referrer (None if there was none)
            new_referrer_id: Current referrer (None if removed)

        Returns:
            Evaluations in processing order
        """
        evaluations = await self.reevaluate([member_id], strict=True)

        if old_referrer_id == new_referrer_id:
            return evaluations

        for referrer_id in (old_referrer_id, new_referrer_id):
            if referrer_id is None:
                continue
            evaluations.extend(await self._refresh_upline(referrer_id))

        return evaluations

    async def reevaluate(
        self, member_ids: Iterable[int], strict: bool = False
    ) -> list[MemberEvaluation]:
        """
        Re-fit members inside the current transaction.

        Args:
            member_ids: Members to evaluate
            strict: Raise for a missing member instead of skipping it

        Returns:
            Evaluations of the members that exist
        """
        member_tiers = await self.tier_repo.get_auto_member_tiers()
        distributor_tiers = await self.tier_repo.get_auto_distributor_tiers()

        evaluations = []
        for member_id in member_ids:
            member = await self.member_repo.get_fresh(member_id)
            if member is None:
                if strict:
                    raise MemberNotFoundError(member_id)
                continue
            evaluations.append(
                MemberEvaluation(
                    member_tier=await self._apply_member_tier(
                        member, member_tiers
                    ),
                    distributor_tier=await self._apply_distributor_tier(
                        member, distributor_tiers
                    ),
                )
            )
        return evaluations

    async def _refresh_upline(self, referrer_id: int) -> list[MemberEvaluation]:
        start = await self.member_repo.get_by_id(referrer_id)
        if start is None:
            return []

        walk = await self.walker.walk(start)
        chain_ids = [start.id, *(member.id for member in walk.members)]

        for chain_id in chain_ids:
            await store_fans(self.member_repo, chain_id)
        return await self.reevaluate(chain_ids)

    async def _load(self, member_id: int) -> Member:
        member = await self.member_repo.get_fresh(member_id)
        if member is None:
            raise MemberNotFoundError(member_id)
        return member

    async def _apply_member_tier(
        self, member: Member, tiers: Sequence[MemberTier]
    ) -> TierChange:
        best = select_member_tier(member.total_points, tiers)
        description = (
            f"Points {member.total_points} fit tier {best.name!r}"
            if best is not None
            else f"Points {member.total_points} fit no auto-upgrade tier"
        )
        return await self._assign(
            member, TierType.MEMBER, "member_tier_id", best, description
        )

    async def _apply_distributor_tier(
        self, member: Member, tiers: Sequence[DistributorTier]
    ) -> TierChange:
        best = select_distributor_tier(
            member.total_sales, member.total_fans, tiers
        )
        facts = f"Sales {member.total_sales}, fans {member.total_fans}"
        description = (
            f"{facts} fit tier {best.name!r}"
            if best is not None
            else f"{facts} fit no auto-upgrade tier"
        )
        return await self._assign(
            member, TierType.DISTRIBUTOR, "distributor_tier_id", best, description
        )

    async def _assign(
        self,
        member: Member,
        tier_type: TierType,
        column: str,
        best: MemberTier | DistributorTier | None,
        description: str,
    ) -> TierChange:
        change = TierChange(
            member_id=member.id,
            tier_type=tier_type,
            old_tier_id=getattr(member, column),
            new_tier_id=best.id if best is not None else None,
        )
        if not change.changed:
            return change

        await self.member_repo.set_tier(member.id, column, change.new_tier_id)
        await self.level_change_repo.create(
            member_id=member.id,
            tier_type=tier_type.value,
            old_tier_id=change.old_tier_id,
            new_tier_id=change.new_tier_id,
            reason=LEVEL_CHANGE_REASON_AUTO,
            description=description[:200],
        )

        self.logger.info(
            "Tier assignment changed",
            extra={
                "member_id": member.id,
                "tier_type": tier_type.value,
                "old_tier_id": change.old_tier_id,
                "new_tier_id": change.new_tier_id,
            },
        )
        return change
