from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date


@dataclass(frozen=True)
class DailySummary:
    """Tổng hợp công việc và giờ công của một nhân viên trong một ngày."""

    employee_id: int
    work_date: date
    total_tasks: int = 0
    completed_tasks: int = 0
    in_progress_tasks: int = 0
    paused_tasks: int = 0
    queued_tasks: int = 0
    cancelled_tasks: int = 0
    overall_progress: int = 0
    average_task_progress: float = 0.0
    regular_hours: float = 0.0
    overtime_hours: float = 0.0
    clocked_in_projects: tuple[int, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["work_date"] = self.work_date.isoformat()
        data["clocked_in_projects"] = list(self.clocked_in_projects)
        return data
