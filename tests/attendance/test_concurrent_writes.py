from __future__ import annotations

import threading
from datetime import date

import pytest

from worksite_tracking.attendance.memory_attendance_repository import InMemoryAttendanceRepository
from worksite_tracking.attendance.model import AttendanceRecord
from worksite_tracking.attendance.service import AttendanceService
from worksite_tracking.core.enums import AttendanceState
from worksite_tracking.core.exceptions import ConcurrentModificationError, InvalidStateTransitionError

from ..conftest import BYPASS_PROJECT


class RacingAttendanceRepository(InMemoryAttendanceRepository):
    """Holds every reader at a barrier so all requests see the same version."""

    def __init__(self, parties: int):
        super().__init__()
        self.barrier = threading.Barrier(parties)

    def get_for_employee_and_date(self, employee_id, project_id, work_date):
        record = super().get_for_employee_and_date(employee_id, project_id, work_date)
        self.barrier.wait(timeout=5)
        return record


def _race(fn, parties: int = 2):
    outcomes: list[object] = []
    lock = threading.Lock()

    def worker():
        try:
            result = fn()
        except Exception as err:  # collected for assertions
            result = err
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=worker) for _ in range(parties)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)
    return outcomes


def test_concurrent_clock_in_exactly_one_wins(container, clock):
    repo = RacingAttendanceRepository(parties=2)
    svc = AttendanceService(repo, container.projects_repo, clock=clock)

    outcomes = _race(lambda: svc.clock_in(7, BYPASS_PROJECT))

    records = [o for o in outcomes if isinstance(o, AttendanceRecord)]
    errors = [o for o in outcomes if isinstance(o, Exception)]
    assert len(records) == 1
    assert len(errors) == 1
    assert isinstance(errors[0], ConcurrentModificationError)
    assert errors[0].to_dict()["error"] == "ConcurrentModification"
    assert records[0].version == 1


def test_concurrent_lunch_start_exactly_one_wins(container, clock):
    repo = RacingAttendanceRepository(parties=2)
    svc = AttendanceService(repo, container.projects_repo, clock=clock)
    repo.create(AttendanceRecord(None, 7, BYPASS_PROJECT, clock.now.date(), status=AttendanceState.CLOCKED_IN, check_in_at=clock.now))

    outcomes = _race(lambda: svc.lunch_start(7, BYPASS_PROJECT))

    assert sum(isinstance(o, AttendanceRecord) for o in outcomes) == 1
    assert sum(isinstance(o, ConcurrentModificationError) for o in outcomes) == 1
    stored = InMemoryAttendanceRepository.get_for_employee_and_date(repo, 7, BYPASS_PROJECT, clock.now.date())
    assert stored.status == AttendanceState.ON_LUNCH
    assert stored.version == 2


def test_stale_update_is_rejected():
    repo = InMemoryAttendanceRepository()
    day = date(2025, 1, 1)
    created = repo.create(AttendanceRecord(None, 1, 1, day, status=AttendanceState.CLOCKED_IN))
    repo.update(created, expected_version=1)

    with pytest.raises(ConcurrentModificationError):
        repo.update(created, expected_version=1)


def test_duplicate_create_is_a_conflict():
    repo = InMemoryAttendanceRepository()
    day = date(2025, 1, 1)
    repo.create(AttendanceRecord(None, 1, 1, day))

    with pytest.raises(ConcurrentModificationError):
        repo.create(AttendanceRecord(None, 1, 1, day))


def test_sequential_retry_sees_new_state(container, clock):
    svc = container.attendance_service
    svc.clock_in(7, BYPASS_PROJECT)

    with pytest.raises(InvalidStateTransitionError):
        svc.clock_in(7, BYPASS_PROJECT)
