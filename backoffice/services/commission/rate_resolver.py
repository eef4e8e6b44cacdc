"""
Rate resolver.

Pure functions turning a member's overrides and tier configuration into an
effective percentage. Distributor tiers store sharer rates and the legacy
procurement cost as 0-1 fractions; they are scaled here and nowhere else, so
every rate that leaves this module is on the 0-100 scale.
"""

from collections.abc import Iterable
from decimal import Decimal
from enum import StrEnum
from typing import Any

from backoffice.config.commission_constants import PERCENT_SCALE
from backoffice.utils.money import to_decimal


class RateKind(StrEnum):
    """Rate families the resolver understands."""

    DIRECT = "direct"
    INDIRECT = "indirect"
    COST = "cost"


def _percent(value: Any) -> Decimal | None:
    """Candidate already on the 0-100 scale."""
    if value is None:
        return None
    return to_decimal(value)


def _fraction(value: Any) -> Decimal | None:
    """Candidate stored as 0-1, scaled to 0-100."""
    if value is None:
        return None
    return to_decimal(value) * PERCENT_SCALE


def _first_positive(candidates: Iterable[Decimal | None]) -> Decimal | None:
    for candidate in candidates:
        if candidate is not None and candidate > 0:
            return candidate
    return None


def is_sharing_earner(actor: Any) -> bool:
    """Check if the actor's member tier grants sharing commissions."""
    tier = getattr(actor, "member_tier", None)
    return bool(tier is not None and tier.is_sharing_earner)


def has_distributor_tier(actor: Any) -> bool:
    """Check if the actor holds a distributor tier."""
    return getattr(actor, "distributor_tier", None) is not None


def sharer_rate(actor: Any, kind: RateKind) -> Decimal | None:
    """
    Get the actor's distributor-tier sharer rate as a percent.

    Args:
        actor: Member (or any object with distributor_tier)
        kind: DIRECT or INDIRECT

    Returns:
        Positive percent or None
    """
    tier = getattr(actor, "distributor_tier", None)
    if tier is None:
        return None
    raw = (
        tier.sharer_direct_rate
        if kind == RateKind.DIRECT
        else tier.sharer_indirect_rate
    )
    return _first_positive([_fraction(raw)])


def _direct_candidates(actor: Any) -> list[Decimal | None]:
    member_tier = getattr(actor, "member_tier", None)
    return [
        _percent(actor.personal_direct_rate),
        _percent(member_tier.direct_rate) if is_sharing_earner(actor) else None,
        sharer_rate(actor, RateKind.DIRECT),
    ]


def _indirect_candidates(actor: Any, downline: Any) -> list[Decimal | None]:
    member_tier = getattr(actor, "member_tier", None)
    return [
        _percent(actor.personal_indirect_rate),
        _percent(member_tier.indirect_rate) if is_sharing_earner(actor) else None,
        sharer_rate(actor, RateKind.INDIRECT),
        # Fallback: the direct referrer's tier pays its own upline
        sharer_rate(downline, RateKind.INDIRECT) if downline is not None else None,
    ]


def _cost_candidates(actor: Any) -> list[Decimal | None]:
    tier = getattr(actor, "distributor_tier", None)
    return [
        _percent(actor.personal_cost_rate),
        _percent(tier.cost_rate) if tier is not None else None,
        _fraction(tier.procurement_cost) if tier is not None else None,
    ]


def resolve_rate(
    actor: Any, kind: RateKind, downline: Any | None = None
) -> Decimal | None:
    """
    Resolve the effective percent rate for an actor.

    Precedence (first strictly positive wins):
        direct:   personal -> member tier (sharing earners) -> sharer direct x100
        indirect: personal -> member tier (sharing earners) -> sharer indirect x100
                  -> downline's sharer indirect x100
        cost:     personal -> cost_rate -> procurement_cost x100

    Args:
        actor: Member receiving the commission
        kind: Rate family
        downline: Direct referrer, used by the indirect fallback only

    Returns:
        Percent on the 0-100 scale, or None when nothing is positive
    """
    if actor is None:
        return None

    if kind == RateKind.DIRECT:
        return _first_positive(_direct_candidates(actor))
    if kind == RateKind.INDIRECT:
        return _first_positive(_indirect_candidates(actor, downline))
    if kind == RateKind.COST:
        return _first_positive(_cost_candidates(actor))

    raise ValueError(f"Unknown rate kind: {kind!r}")


def is_direct_eligible(referrer: Any) -> bool:
    """Direct commission needs a sharing earner or a positive sharer rate."""
    return is_sharing_earner(referrer) or sharer_rate(
        referrer, RateKind.DIRECT
    ) is not None


def is_indirect_eligible(indirect_referrer: Any, direct_referrer: Any) -> bool:
    """Indirect commission: own eligibility or the direct referrer's fallback."""
    if indirect_referrer is None:
        return False
    return (
        is_sharing_earner(indirect_referrer)
        or sharer_rate(indirect_referrer, RateKind.INDIRECT) is not None
        or sharer_rate(direct_referrer, RateKind.INDIRECT) is not None
    )


def is_cost_holder(member: Any) -> bool:
    """Distributor commission needs a distributor tier or a personal cost rate."""
    return has_distributor_tier(member) or (
        member.personal_cost_rate is not None
        and to_decimal(member.personal_cost_rate) > 0
    )
