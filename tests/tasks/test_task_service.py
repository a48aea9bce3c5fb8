from __future__ import annotations

import pytest

from worksite_tracking.core.enums import LocationLogType, TaskStatus
from worksite_tracking.core.exceptions import (
    ConcurrentModificationError,
    InvalidInputError,
    InvalidStateTransitionError,
    NotFoundError,
    OutsideGeofenceError,
    PreconditionFailedError,
)
from worksite_tracking.geofence.model import LocationSample
from worksite_tracking.settings import EngineSettings
from worksite_tracking.tasks.model import DailyTarget, TaskAssignment
from worksite_tracking.tasks.service import TaskAssignmentService

from ..conftest import GEOFENCED_PROJECT, SITE_LAT, SITE_LNG, north_of_site

EMP = 7


@pytest.fixture
def tasks(container):
    return container.task_service


@pytest.fixture
def assign(container, clock):
    def _assign(assignment_id: int, **kwargs) -> TaskAssignment:
        fields = dict(
            assignment_id=assignment_id,
            employee_id=EMP,
            project_id=GEOFENCED_PROJECT,
            task_id=100 + assignment_id,
            work_date=clock.now.date(),
            sequence=assignment_id,
        )
        fields.update(kwargs)
        return container.assignments_repo.add(TaskAssignment(**fields))

    return _assign


@pytest.fixture
def clocked_in(container):
    return container.attendance_service.clock_in(EMP, GEOFENCED_PROJECT, SITE_LAT, SITE_LNG)


def test_start_without_clock_in_fails_and_keeps_status(tasks, assign):
    assign(1)

    with pytest.raises(PreconditionFailedError) as exc:
        tasks.start(1, EMP)

    assert exc.value.details["attendance_status"] == "NOT_CLOCKED_IN"
    a = tasks.get(1)
    assert a.status == TaskStatus.QUEUED
    assert a.started_at is None
    assert a.version == 1


def test_start_after_clock_in(tasks, assign, clocked_in, clock):
    assign(1)

    a = tasks.start(1, EMP)

    assert a.status == TaskStatus.IN_PROGRESS
    assert a.started_at == clock.now
    assert a.started_out_of_sequence is False
    assert a.version == 2


def test_start_on_lunch_fails(tasks, assign, container, clocked_in, clock):
    assign(1)
    clock.advance(hours=4)
    container.attendance_service.lunch_start(EMP, GEOFENCED_PROJECT, SITE_LAT, SITE_LNG)

    with pytest.raises(PreconditionFailedError):
        tasks.start(1, EMP)


def test_start_on_overtime_is_allowed(tasks, assign, container, clocked_in, clock):
    assign(1)
    clock.advance(hours=8)
    container.attendance_service.overtime_start(EMP, GEOFENCED_PROJECT)

    assert tasks.start(1, EMP).status == TaskStatus.IN_PROGRESS


def test_start_twice_is_invalid_transition(tasks, assign, clocked_in):
    assign(1)
    tasks.start(1, EMP)

    with pytest.raises(InvalidStateTransitionError) as exc:
        tasks.start(1, EMP)
    assert exc.value.current_state == "in_progress"
    assert exc.value.action == "start"


def test_state_is_checked_before_attendance(tasks, assign):
    assign(1, status=TaskStatus.COMPLETED, progress_percent=100)

    with pytest.raises(InvalidStateTransitionError):
        tasks.start(1, EMP)


def test_other_employees_assignment_is_not_found(tasks, assign, clocked_in):
    assign(1)

    with pytest.raises(NotFoundError):
        tasks.start(1, 8)
    with pytest.raises(NotFoundError):
        tasks.get(99)


def test_start_requires_completed_dependencies(tasks, assign, clocked_in):
    assign(1, progress_percent=0)
    assign(2, dependencies=(1,))

    with pytest.raises(PreconditionFailedError) as exc:
        tasks.start(2, EMP)
    assert exc.value.details["pending_dependencies"] == [1]

    tasks.start(1, EMP)
    tasks.update_progress(1, progress_percent=100, employee_id=EMP)
    tasks.complete(1, EMP)

    assert tasks.start(2, EMP).status == TaskStatus.IN_PROGRESS


def test_out_of_sequence_start_is_flagged_not_blocked(tasks, assign, clocked_in):
    assign(1)
    assign(2)
    tasks.start(1, EMP)

    second = tasks.start(2, EMP)

    assert second.status == TaskStatus.IN_PROGRESS
    assert second.started_out_of_sequence is True


def test_start_after_earlier_tasks_finish_is_in_sequence(tasks, assign, clocked_in):
    assign(1)
    assign(2)
    tasks.start(1, EMP)
    tasks.cancel(1, EMP, reason="rain")

    assert tasks.start(2, EMP).started_out_of_sequence is False


def test_start_with_location_checks_geofence(tasks, assign, container, clocked_in):
    assign(1)
    lat, lng = north_of_site(1000)

    with pytest.raises(OutsideGeofenceError):
        tasks.start(1, EMP, location=LocationSample(lat, lng))
    assert tasks.get(1).status == TaskStatus.QUEUED

    tasks.start(1, EMP, location=LocationSample(SITE_LAT, SITE_LNG, accuracy_meters=4))
    logs = container.location_logs_repo.list_for_employee(EMP)
    task_logs = [e for e in logs if e.log_type == LocationLogType.TASK_START]
    assert len(task_logs) == 1
    assert task_logs[0].task_assignment_id == 1


def test_progress_updates_percent_and_quantity_together(tasks, assign, clocked_in):
    assign(1, daily_target=DailyTarget(target_quantity=100, target_unit="m2"))
    tasks.start(1, EMP)

    a = tasks.update_progress(1, completed_quantity=50)

    assert a.progress_percent == 50
    assert a.daily_target.progress_today == 50
    assert a.daily_target.target_unit == "m2"


@pytest.mark.parametrize("quantity,percent", [(1, 33), (2, 67), (0.5, 17), (150, 100)])
def test_progress_percent_is_rounded_and_capped(tasks, assign, clocked_in, quantity, percent):
    assign(1, daily_target=DailyTarget(target_quantity=3 if quantity < 100 else 100))
    tasks.start(1, EMP)

    a = tasks.update_progress(1, quantity)

    assert a.progress_percent == percent
    assert a.daily_target.progress_today == quantity


def test_progress_cannot_decrease_or_go_negative(tasks, assign, clocked_in):
    assign(1, daily_target=DailyTarget(target_quantity=10))
    tasks.start(1, EMP)
    tasks.update_progress(1, 6)

    with pytest.raises(InvalidInputError):
        tasks.update_progress(1, 4)
    with pytest.raises(InvalidInputError):
        tasks.update_progress(1, -1)

    a = tasks.get(1)
    assert (a.progress_percent, a.daily_target.progress_today) == (60, 6)


def test_progress_without_target_uses_caller_percent(tasks, assign, clocked_in):
    assign(1)
    tasks.start(1, EMP)

    assert tasks.update_progress(1, progress_percent=40).progress_percent == 40
    with pytest.raises(InvalidInputError):
        tasks.update_progress(1, 5)
    with pytest.raises(InvalidInputError):
        tasks.update_progress(1, progress_percent=120)


def test_zero_target_leaves_progress_today_alone(tasks, assign, clocked_in):
    assign(1, daily_target=DailyTarget(target_quantity=0, target_unit="m2"))
    tasks.start(1, EMP)

    a = tasks.update_progress(1, 5, progress_percent=90)

    assert a.progress_percent == 90
    assert a.daily_target.progress_today == 0


def test_progress_allowed_while_paused_not_while_queued(tasks, assign, clocked_in):
    assign(1, daily_target=DailyTarget(target_quantity=10))
    assign(2, daily_target=DailyTarget(target_quantity=10))
    tasks.start(1, EMP)
    tasks.pause(1, EMP)

    a = tasks.update_progress(1, 5)
    assert a.status == TaskStatus.PAUSED
    assert a.progress_percent == 50

    with pytest.raises(InvalidStateTransitionError):
        tasks.update_progress(2, 5)


def test_pause_then_resume_leaves_one_closed_entry(tasks, assign, clocked_in, clock):
    assign(1)
    tasks.start(1, EMP)
    clock.advance(minutes=30)
    paused_at = clock.now

    paused = tasks.pause(1, EMP, reason="waiting for concrete")
    assert paused.status == TaskStatus.PAUSED
    assert paused.open_pause is not None

    clock.advance(minutes=15)
    resumed = tasks.resume(1, EMP)

    assert resumed.status == TaskStatus.IN_PROGRESS
    (entry,) = resumed.pause_history
    assert entry.paused_at == paused_at
    assert entry.resumed_at == clock.now
    assert entry.reason == "waiting for concrete"


def test_resume_requires_paused(tasks, assign, clocked_in):
    assign(1)
    tasks.start(1, EMP)

    with pytest.raises(InvalidStateTransitionError):
        tasks.resume(1, EMP)


def test_complete_while_paused_closes_open_entry(tasks, assign, clocked_in, clock):
    assign(1, daily_target=DailyTarget(target_quantity=10))
    tasks.start(1, EMP)
    tasks.update_progress(1, 10)
    tasks.pause(1, EMP)
    clock.advance(minutes=5)

    done = tasks.complete(1, EMP)

    assert done.status == TaskStatus.COMPLETED
    assert done.completed_at == clock.now
    assert done.pause_history[-1].resumed_at == clock.now
    assert done.open_pause is None
    assert done.progress_percent == 100


def test_complete_below_threshold_fails(tasks, assign, clocked_in):
    assign(1)
    tasks.start(1, EMP)
    tasks.update_progress(1, progress_percent=90)

    with pytest.raises(PreconditionFailedError) as exc:
        tasks.complete(1, EMP)
    assert exc.value.details == {"progress_percent": 90, "threshold_percent": 100}
    assert tasks.get(1).status == TaskStatus.IN_PROGRESS


def test_complete_threshold_is_configurable(container, assign, clocked_in, clock):
    svc = TaskAssignmentService(
        container.assignments_repo,
        container.attendance_repo,
        container.projects_repo,
        settings=EngineSettings(completion_threshold_percent=90),
        clock=clock,
    )
    assign(1)
    svc.start(1, EMP)
    svc.update_progress(1, progress_percent=90)

    assert svc.complete(1, EMP).status == TaskStatus.COMPLETED


def test_cancel_is_idempotent(tasks, assign, clock):
    assign(1)

    first = tasks.cancel(1, EMP, reason="  rain delay ")
    again = tasks.cancel(1, EMP, reason="other")

    assert first.status == TaskStatus.CANCELLED
    assert first.cancel_reason == "rain delay"
    assert first.cancelled_at == clock.now
    assert again == first
    assert tasks.get(1).version == 2


def test_cancel_completed_is_invalid(tasks, assign):
    assign(1, status=TaskStatus.COMPLETED, progress_percent=100)

    with pytest.raises(InvalidStateTransitionError):
        tasks.cancel(1, EMP)


def test_cancel_while_paused_closes_pause(tasks, assign, clocked_in, clock):
    assign(1)
    tasks.start(1, EMP)
    tasks.pause(1, EMP)
    clock.advance(minutes=10)

    a = tasks.cancel(1, EMP)

    assert a.status == TaskStatus.CANCELLED
    assert a.pause_history[-1].resumed_at == clock.now


def test_active_minutes_exclude_pauses(tasks, assign, clocked_in, clock):
    assign(1)
    tasks.start(1, EMP)
    clock.advance(minutes=60)
    tasks.pause(1, EMP)
    clock.advance(minutes=15)
    tasks.resume(1, EMP)
    clock.advance(minutes=30)
    tasks.update_progress(1, progress_percent=100)

    done = tasks.complete(1, EMP)
    clock.advance(hours=2)

    assert done.active_minutes(clock.now) == pytest.approx(90)


def test_active_minutes_while_paused(tasks, assign, clocked_in, clock):
    assign(1)
    tasks.start(1, EMP)
    clock.advance(minutes=20)
    a = tasks.pause(1, EMP)
    clock.advance(minutes=40)

    assert a.active_minutes(clock.now) == pytest.approx(20)


def test_list_for_day_and_next_in_sequence(tasks, assign, clock):
    assign(3, sequence=2)
    assign(1, sequence=1)
    assign(2, sequence=1, priority=5)
    assign(4, sequence=3, status=TaskStatus.CANCELLED)
    assign(5, sequence=4, project_id=9)

    day = tasks.list_for_day(EMP, clock.now.date(), project_id=GEOFENCED_PROJECT)

    assert [a.assignment_id for a in day] == [2, 1, 3, 4]
    assert len(tasks.list_for_day(EMP)) == 5
    assert tasks.next_in_sequence(1).assignment_id == 3
    assert tasks.next_in_sequence(3) is None


def test_stale_task_write_is_rejected(container, assign):
    a = assign(1)
    container.assignments_repo.update(a, expected_version=1)

    with pytest.raises(ConcurrentModificationError):
        container.assignments_repo.update(a, expected_version=1)
