from __future__ import annotations

from datetime import datetime, timedelta

from worksite_tracking.core.enums import TaskStatus
from worksite_tracking.summary.service import DailySummaryService
from worksite_tracking.tasks.model import TaskAssignment

from ..conftest import BYPASS_PROJECT, GEOFENCED_PROJECT, SITE_LAT, SITE_LNG

EMP = 7


def _add(container, clock, assignment_id, status, progress=0, project_id=GEOFENCED_PROJECT, employee_id=EMP):
    container.assignments_repo.add(
        TaskAssignment(
            assignment_id=assignment_id,
            employee_id=employee_id,
            project_id=project_id,
            task_id=assignment_id,
            work_date=clock.now.date(),
            status=status,
            progress_percent=progress,
        )
    )


def test_empty_day(container, clock):
    summary = container.summary_service.daily_summary(EMP, clock.now.date())

    assert summary.total_tasks == 0
    assert summary.overall_progress == 0
    assert summary.average_task_progress == 0
    assert summary.regular_hours == 0
    assert summary.clocked_in_projects == ()


def test_counts_and_progress_across_projects(container, clock):
    _add(container, clock, 1, TaskStatus.COMPLETED, 100)
    _add(container, clock, 2, TaskStatus.IN_PROGRESS, 40)
    _add(container, clock, 3, TaskStatus.QUEUED)
    _add(container, clock, 4, TaskStatus.CANCELLED, 10)
    _add(container, clock, 5, TaskStatus.PAUSED, 30, project_id=BYPASS_PROJECT)
    _add(container, clock, 6, TaskStatus.COMPLETED, 100, employee_id=8)

    summary = container.summary_service.daily_summary(EMP, clock.now.date())

    assert summary.total_tasks == 4
    assert summary.completed_tasks == 1
    assert summary.in_progress_tasks == 1
    assert summary.queued_tasks == 1
    assert summary.paused_tasks == 1
    assert summary.cancelled_tasks == 1
    assert summary.overall_progress == 25
    assert summary.average_task_progress == 42.5


def test_overall_progress_rounds_half_up(container, clock):
    _add(container, clock, 1, TaskStatus.COMPLETED, 100)
    _add(container, clock, 2, TaskStatus.QUEUED)
    _add(container, clock, 3, TaskStatus.QUEUED)

    assert container.summary_service.daily_summary(EMP, clock.now.date()).overall_progress == 33

    _add(container, clock, 4, TaskStatus.COMPLETED, 100)
    _add(container, clock, 5, TaskStatus.COMPLETED, 100)
    _add(container, clock, 6, TaskStatus.QUEUED)
    _add(container, clock, 7, TaskStatus.QUEUED)
    _add(container, clock, 8, TaskStatus.QUEUED)

    # 3 of 8 = 37.5%
    assert container.summary_service.daily_summary(EMP, clock.now.date()).overall_progress == 38


def test_hours_and_on_site_projects(container, clock):
    attendance = container.attendance_service
    attendance.clock_in(EMP, GEOFENCED_PROJECT, SITE_LAT, SITE_LNG)
    clock.advance(hours=10)
    attendance.clock_out(EMP, GEOFENCED_PROJECT)
    attendance.clock_in(EMP, BYPASS_PROJECT)
    clock.advance(hours=1)

    summary = container.summary_service.daily_summary(EMP)

    assert (summary.regular_hours, summary.overtime_hours) == (8, 2)
    assert summary.clocked_in_projects == (BYPASS_PROJECT,)
    assert summary.to_dict()["work_date"] == clock.now.date().isoformat()


def test_hours_use_approved_corrections(container, clock):
    attendance = container.attendance_service
    rec = attendance.clock_in(EMP, GEOFENCED_PROJECT, SITE_LAT, SITE_LNG)
    clock.advance(hours=10)
    attendance.clock_out(EMP, GEOFENCED_PROJECT)
    c = container.correction_service.submit(
        EMP,
        GEOFENCED_PROJECT,
        rec.work_date,
        EMP,
        "left at 16:00",
        requested_check_out_at=rec.check_in_at + timedelta(hours=9),
    )
    container.correction_service.approve(c.correction_id, 99)

    with_corrections = container.summary_service.daily_summary(EMP, rec.work_date)
    raw = DailySummaryService(container.assignments_repo, container.attendance_repo).daily_summary(EMP, rec.work_date)

    assert (with_corrections.regular_hours, with_corrections.overtime_hours) == (8, 1)
    assert (raw.regular_hours, raw.overtime_hours) == (8, 2)


def test_other_days_are_ignored(container, clock):
    _add(container, clock, 1, TaskStatus.COMPLETED, 100)

    tomorrow = (clock.now + timedelta(days=1)).date()

    assert container.summary_service.daily_summary(EMP, tomorrow).total_tasks == 0
    assert container.summary_service.daily_summary(EMP, datetime(2024, 3, 4).date()).total_tasks == 1
