"""Pytest fixtures for Hotelman tests."""

from decimal import Decimal

import pytest

from hotelman.models import Branch, Guest


@pytest.fixture
def branch(db):
    """Create the main branch."""
    return Branch.objects.create(code="DOWNTOWN", name="Downtown")


@pytest.fixture
def other_branch(db):
    """Create a second branch."""
    return Branch.objects.create(code="AIRPORT", name="Airport")


@pytest.fixture
def make_guest(db, branch):
    """Factory for guests with a given balance and tier."""
    counter = {"n": 0}

    def _make(points=0, tier="bronze", **kwargs):
        counter["n"] += 1
        defaults = {
            "code": f"MEM-{counter['n']:03d}",
            "first_name": "Guest",
            "last_name": str(counter["n"]),
            "branch": branch,
            "loyalty_points": points,
            "loyalty_tier": tier,
        }
        defaults.update(kwargs)
        return Guest.objects.create(**defaults)

    return _make


@pytest.fixture
def guest(make_guest):
    """Bronze guest with no points."""
    return make_guest(
        code="GST-001",
        first_name="Ana",
        last_name="Costa",
        email="ana@example.com",
    )


@pytest.fixture
def gold_guest(make_guest):
    """Gold guest with 6000 points."""
    return make_guest(
        points=6000,
        tier="gold",
        code="GST-GOLD",
        first_name="Bruno",
        last_name="Lima",
        total_stays=12,
        total_spent=Decimal("6000.00"),
    )


@pytest.fixture
def platinum_guest(make_guest):
    """Platinum guest with 20000 points."""
    return make_guest(
        points=20000,
        tier="platinum",
        code="GST-PLAT",
        first_name="Carla",
        last_name="Reis",
    )
