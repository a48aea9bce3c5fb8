from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable

Clock = Callable[[], datetime]


def now_local() -> datetime:
    """Current server time.

    Note: Services take a ``clock`` argument defaulting to this function so
    tests can pass a fixed clock; client-supplied timestamps are never used.
    """
    return datetime.now()


def minutes_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 60.0


def hours(delta: timedelta) -> float:
    return delta.total_seconds() / 3600.0


def round_half_up(value: float) -> int:
    """Round like the mobile clients do (0.5 goes up), not banker's rounding."""
    if value >= 0:
        return int(value + 0.5)
    return -int(-value + 0.5)
