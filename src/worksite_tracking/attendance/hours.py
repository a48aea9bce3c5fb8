from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import hours


@dataclass(frozen=True)
class WorkedHours:
    regular_hours: float
    overtime_hours: float


class HoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for hour totals)."""

    @abstractmethod
    def compute(
        self,
        *,
        check_in_at: datetime,
        check_out_at: datetime,
        lunch_minutes: float,
        overtime_start_at: Optional[datetime],
        shift_hours: float,
    ) -> WorkedHours:
        raise NotImplementedError


@dataclass(frozen=True)
class StandardHoursCalculator(HoursCalculator):
    """Standard rule: (out - in) - lunch, capped at the shift; the excess is overtime.

    With ``reconcile_overtime`` the excess counts as overtime even if the
    worker never invoked overtime-start. Without it, only the time after
    overtime-start counts and the rest of the excess is dropped.
    """

    reconcile_overtime: bool = True

    def compute(
        self,
        *,
        check_in_at: datetime,
        check_out_at: datetime,
        lunch_minutes: float,
        overtime_start_at: Optional[datetime],
        shift_hours: float,
    ) -> WorkedHours:
        worked = hours(check_out_at - check_in_at - timedelta(minutes=lunch_minutes or 0.0))
        worked = max(worked, 0.0)
        shift = max(float(shift_hours), 0.0)

        regular = min(worked, shift)
        excess = max(worked - shift, 0.0)
        if not self.reconcile_overtime:
            # only time spent ON_OVERTIME counts; the gap before overtime-start is dropped
            claimed = hours(check_out_at - overtime_start_at) if overtime_start_at is not None else 0.0
            excess = min(excess, max(claimed, 0.0))

        return WorkedHours(regular_hours=round(regular, 2), overtime_hours=round(excess, 2))
