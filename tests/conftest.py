"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
import tempfile
from pathlib import Path

# Minimal environment for Settings() at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault(
    "LOG_FILE", str(Path(tempfile.gettempdir()) / "backoffice-tests.log")
)
os.environ.setdefault("COMMISSION_MAX_CHAIN_DEPTH", "64")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from decimal import Decimal
from types import SimpleNamespace

import pytest


@pytest.fixture
def make_actor():
    """
    Build an in-memory member double for the pure resolver and walker.

    Tiers are passed as SimpleNamespace objects; every rate field the
    resolver reads defaults to None.
    """

    def _make(
        id: int = 1,
        referrer_id: int | None = None,
        member_tier=None,
        distributor_tier=None,
        **overrides,
    ):
        fields = {
            "id": id,
            "nickname": f"member{id}",
            "referrer_id": referrer_id,
            "member_tier": member_tier,
            "distributor_tier": distributor_tier,
            "personal_direct_rate": None,
            "personal_indirect_rate": None,
            "personal_cost_rate": None,
        }
        fields.update(overrides)
        return SimpleNamespace(**fields)

    return _make


@pytest.fixture
def sharing_tier():
    """Member tier granting 10% direct and 5% indirect commission."""
    return SimpleNamespace(
        is_sharing_earner=True,
        direct_rate=Decimal("10"),
        indirect_rate=Decimal("5"),
    )


def distributor_tier(
    cost_rate: str = "0",
    procurement_cost: str | None = None,
    sharer_direct_rate: str | None = None,
    sharer_indirect_rate: str | None = None,
) -> SimpleNamespace:
    """Distributor tier double (sharer and procurement values on 0-1)."""
    return SimpleNamespace(
        cost_rate=Decimal(cost_rate),
        procurement_cost=Decimal(procurement_cost) if procurement_cost else None,
        sharer_direct_rate=(
            Decimal(sharer_direct_rate) if sharer_direct_rate else None
        ),
        sharer_indirect_rate=(
            Decimal(sharer_indirect_rate) if sharer_indirect_rate else None
        ),
    )


@pytest.fixture
def make_distributor_tier():
    """Factory fixture for distributor tier doubles."""
    return distributor_tier
