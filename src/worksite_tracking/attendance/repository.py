from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Persistence port for attendance records.

    Writes are guarded by the record's ``version``: ``create`` fails when a
    row already exists for (employee, project, date) and ``update`` fails
    when the stored version differs from ``expected_version``. Both raise
    ConcurrentModificationError.
    """

    def get_for_employee_and_date(self, employee_id: int, project_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_employee_and_date(self, employee_id: int, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert a new record; returns it with ``attendance_id`` and ``version=1``."""

        raise NotImplementedError

    def update(self, record: AttendanceRecord, *, expected_version: int) -> AttendanceRecord:
        """Store ``record`` if the row is still at ``expected_version``; returns it with the bumped version."""

        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: int,
        *,
        project_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 30,
        offset: int = 0,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_for_employee(
        self,
        employee_id: int,
        *,
        project_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        raise NotImplementedError
