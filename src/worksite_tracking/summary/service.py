from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import Clock, now_local, round_half_up
from ..common.validators import require_id
from ..core.enums import AttendanceState, TaskStatus
from ..corrections.service import CorrectionService
from ..tasks.repository import TaskAssignmentRepository
from .model import DailySummary

_ON_SITE = (AttendanceState.CLOCKED_IN, AttendanceState.ON_LUNCH, AttendanceState.ON_OVERTIME)


class DailySummaryService:
    def __init__(
        self,
        assignments: TaskAssignmentRepository,
        attendance: AttendanceRepository,
        *,
        corrections: Optional[CorrectionService] = None,
        clock: Clock = now_local,
    ):
        self._assignments = assignments
        self._attendance = attendance
        self._corrections = corrections
        self._clock = clock

    def daily_summary(self, employee_id, work_date: Optional[date] = None) -> DailySummary:
        """Task counts and hours for one employee across all projects of a day.

        Cancelled assignments are counted separately and excluded from
        ``total_tasks`` and the progress figures.
        """

        employee_id = require_id(employee_id, "employee_id")
        work_date = work_date or self._clock().date()

        tasks = self._assignments.list_for_employee_and_date(employee_id, work_date)
        counts = Counter(t.status for t in tasks)
        active = [t for t in tasks if t.status != TaskStatus.CANCELLED]

        total = len(active)
        completed = counts[TaskStatus.COMPLETED]
        overall = round_half_up(100.0 * completed / total) if total else 0
        average = round(sum(t.progress_percent for t in active) / total, 2) if total else 0.0

        regular = overtime = 0.0
        on_site: list[int] = []
        for record in self._attendance.list_for_employee_and_date(employee_id, work_date):
            if self._corrections is not None:
                view = self._corrections.apply_to(record)
                regular += view.regular_hours
                overtime += view.overtime_hours
            else:
                regular += record.regular_hours
                overtime += record.overtime_hours
            if record.status in _ON_SITE:
                on_site.append(record.project_id)

        return DailySummary(
            employee_id=employee_id,
            work_date=work_date,
            total_tasks=total,
            completed_tasks=completed,
            in_progress_tasks=counts[TaskStatus.IN_PROGRESS],
            paused_tasks=counts[TaskStatus.PAUSED],
            queued_tasks=counts[TaskStatus.QUEUED],
            cancelled_tasks=counts[TaskStatus.CANCELLED],
            overall_progress=overall,
            average_task_progress=average,
            regular_hours=round(regular, 2),
            overtime_hours=round(overtime, 2),
            clocked_in_projects=tuple(sorted(on_site)),
        )
