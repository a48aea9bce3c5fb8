from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import TaskStatus


@dataclass(frozen=True)
class DailyTarget:
    target_quantity: float
    target_unit: str = ""
    progress_today: float = 0.0


@dataclass(frozen=True)
class PauseEntry:
    paused_at: datetime
    resumed_at: Optional[datetime] = None
    reason: str = ""

    @property
    def is_open(self) -> bool:
        return self.resumed_at is None


@dataclass(frozen=True)
class TaskAssignment:
    """Thực thể miền: một công việc được giao cho công nhân trong ngày."""

    assignment_id: int
    employee_id: int
    project_id: int
    task_id: int
    work_date: date
    status: TaskStatus = TaskStatus.QUEUED
    priority: int = 0
    sequence: int = 0
    progress_percent: int = 0
    daily_target: Optional[DailyTarget] = None
    pause_history: tuple[PauseEntry, ...] = field(default_factory=tuple)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancel_reason: Optional[str] = None
    dependencies: tuple[int, ...] = field(default_factory=tuple)
    started_out_of_sequence: bool = False
    version: int = 0

    @property
    def open_pause(self) -> Optional[PauseEntry]:
        if self.pause_history and self.pause_history[-1].is_open:
            return self.pause_history[-1]
        return None

    def with_pause_closed(self, at: datetime) -> tuple[PauseEntry, ...]:
        """Pause history with the trailing open entry (if any) closed at ``at``."""
        if self.open_pause is None:
            return self.pause_history
        last = self.pause_history[-1]
        return self.pause_history[:-1] + (PauseEntry(paused_at=last.paused_at, resumed_at=at, reason=last.reason),)

    def active_minutes(self, now: datetime) -> float:
        """Working minutes since start, excluding paused intervals."""
        if self.started_at is None:
            return 0.0
        end = self.completed_at or self.cancelled_at or now
        total = (end - self.started_at).total_seconds()
        for entry in self.pause_history:
            resumed = entry.resumed_at or end
            total -= max((resumed - entry.paused_at).total_seconds(), 0.0)
        return max(total / 60.0, 0.0)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data
