"""
Fan counters.

direct_fans is the number of directly referred members; total_fans adds the
members those referrals brought in (second level only).
"""

from dataclasses import dataclass

from backoffice.repositories.member_repository import MemberRepository


@dataclass(frozen=True)
class FanCounts:
    """Recomputed fan counters of one member."""

    member_id: int
    direct_fans: int
    total_fans: int


async def count_fans(member_repo: MemberRepository, member_id: int) -> FanCounts:
    """
    Recount a member's fans from the referral graph.

    Args:
        member_repo: Member repository
        member_id: Member ID

    Returns:
        FanCounts (not yet stored)
    """
    direct_ids = await member_repo.get_referral_ids([member_id])
    second_level = await member_repo.count_referrals(direct_ids)
    return FanCounts(
        member_id=member_id,
        direct_fans=len(direct_ids),
        total_fans=len(direct_ids) + second_level,
    )


async def refresh_fans(member_repo: MemberRepository, member_id: int) -> FanCounts:
    """Recount and store a member's fan counters."""
    counts = await count_fans(member_repo, member_id)
    await member_repo.set_fans(member_id, counts.direct_fans, counts.total_fans)
    return counts
