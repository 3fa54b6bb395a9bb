"""
Hotelman configuration.

Usage in settings.py:
    HOTELMAN = {
        "POINTS_EXPIRY_MONTHS": 12,
        "LEADERBOARD_SIZE": 10,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class HotelmanSettings:
    """Hotelman configuration settings."""

    # Points of guests not seen for this long count as "expiring"
    POINTS_EXPIRY_MONTHS: int = 12

    # Window for the "recent tier changes" statistic
    TIER_CHANGE_WINDOW_DAYS: int = 30

    # Size of the top spenders / most loyal lists
    LEADERBOARD_SIZE: int = 10

    # Extra attempts the HTTP layer makes after a ConcurrencyConflict
    CONFLICT_RETRIES: int = 1

    # Actor recorded for operations without an acting staff member
    SYSTEM_ACTOR: str = "system"


def get_hotelman_settings() -> HotelmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "HOTELMAN", {})
    return HotelmanSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_hotelman_settings(), name)


hotelman_settings = _LazySettings()
