"""
Referrer chain walker.

Bounded upward traversal over the referral graph. The graph is an arena of
members keyed by id with a single referrer link per member; nothing prevents
a corrupted cycle, so every walk carries a hop ceiling and a visited set and
fails closed (reports truncation) instead of looping.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from loguru import logger

from backoffice.models.member import Member
from backoffice.repositories.member_repository import MemberRepository
from backoffice.services.commission.rate_resolver import (
    RateKind,
    has_distributor_tier,
    resolve_rate,
)


MemberFilter = Callable[[Member], bool]


def has_positive_cost_rate(member: Member) -> bool:
    """Filter: member resolves to a strictly positive cost rate."""
    return resolve_rate(member, RateKind.COST) is not None


@dataclass
class ChainWalk:
    """Result of one upward walk."""

    members: list[Member] = field(default_factory=list)
    hops: int = 0
    depth_exceeded: bool = False
    cycle_detected: bool = False

    @property
    def truncated(self) -> bool:
        """Walk stopped before reaching the root of the chain."""
        return self.depth_exceeded or self.cycle_detected

    @property
    def nearest(self) -> Member | None:
        """First matching ancestor, if any."""
        return self.members[0] if self.members else None


class ChainWalker:
    """Walks referrer links upward from a starting member."""

    def __init__(self, member_repo: MemberRepository, max_depth: int) -> None:
        """
        Initialize chain walker.

        Args:
            member_repo: Member repository used to load each ancestor
            max_depth: Maximum number of referrer hops per walk
        """
        self.member_repo = member_repo
        self.max_depth = max_depth

    async def walk(
        self,
        start: Member,
        member_filter: MemberFilter | None = None,
        exclude: Iterable[int] = (),
        stop_at_first: bool = False,
    ) -> ChainWalk:
        """
        Walk from start's referrer to the root of the chain.

        Args:
            start: Member whose ancestors are walked (not itself included)
            member_filter: Only ancestors passing the filter are collected
            exclude: IDs already seen below start; reaching one is a cycle
            stop_at_first: Stop at the first collected ancestor

        Returns:
            ChainWalk with collected ancestors, nearest first
        """
        result = ChainWalk()
        visited = {start.id, *exclude}
        current_id = start.referrer_id

        while current_id is not None:
            if result.hops >= self.max_depth:
                result.depth_exceeded = True
                break
            if current_id in visited:
                result.cycle_detected = True
                break

            visited.add(current_id)
            member = await self.member_repo.get_by_id(current_id)
            result.hops += 1

            # Dangling link ends the chain
            if member is None:
                break

            if member_filter is None or member_filter(member):
                result.members.append(member)
                if stop_at_first:
                    break

            current_id = member.referrer_id

        if result.truncated:
            logger.warning(
                "Referrer chain walk truncated",
                extra={
                    "start_member_id": start.id,
                    "hops": result.hops,
                    "max_depth": self.max_depth,
                    "depth_exceeded": result.depth_exceeded,
                    "cycle_detected": result.cycle_detected,
                },
            )

        return result

    async def find_nearest(
        self,
        start: Member,
        member_filter: MemberFilter,
        exclude: Iterable[int] = (),
    ) -> ChainWalk:
        """
        Find the nearest ancestor passing a filter.

        Args:
            start: Member whose ancestors are searched
            member_filter: Predicate the ancestor must satisfy
            exclude: IDs already seen below start

        Returns:
            ChainWalk whose `nearest` is the match (None if not found)
        """
        return await self.walk(
            start, member_filter, exclude=exclude, stop_at_first=True
        )


__all__ = [
    "ChainWalk",
    "ChainWalker",
    "has_distributor_tier",
    "has_positive_cost_rate",
]
