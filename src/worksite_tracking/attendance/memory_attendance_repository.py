from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ..core.exceptions import ConcurrentModificationError
from .model import AttendanceRecord
from .repository import AttendanceRepository

Key = tuple[int, int, date]


class InMemoryAttendanceRepository(AttendanceRepository):
    """Thread-safe in-process store; version checks run under one lock."""

    def __init__(self):
        self._by_key: dict[Key, AttendanceRecord] = {}
        self._lock = threading.Lock()
        self._id = 0

    @staticmethod
    def _key(record: AttendanceRecord) -> Key:
        return (record.employee_id, record.project_id, record.work_date)

    def get_for_employee_and_date(self, employee_id: int, project_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with self._lock:
            return self._by_key.get((int(employee_id), int(project_id), work_date))

    def list_for_employee_and_date(self, employee_id: int, work_date: date) -> Sequence[AttendanceRecord]:
        with self._lock:
            items = [r for (emp, _, day), r in self._by_key.items() if emp == int(employee_id) and day == work_date]
        items.sort(key=lambda r: r.project_id)
        return items

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        key = self._key(record)
        with self._lock:
            if key in self._by_key:
                raise ConcurrentModificationError("Attendance record was created by another request")
            self._id += 1
            stored = replace(record, attendance_id=self._id, version=1)
            self._by_key[key] = stored
            return stored

    def update(self, record: AttendanceRecord, *, expected_version: int) -> AttendanceRecord:
        key = self._key(record)
        with self._lock:
            current = self._by_key.get(key)
            if current is None or current.version != expected_version:
                raise ConcurrentModificationError("Attendance record changed since it was read")
            stored = replace(record, attendance_id=current.attendance_id, version=expected_version + 1)
            self._by_key[key] = stored
            return stored

    def _filtered(self, employee_id, project_id, start_date, end_date) -> list[AttendanceRecord]:
        with self._lock:
            items = [r for r in self._by_key.values() if r.employee_id == int(employee_id)]
        if project_id is not None:
            items = [r for r in items if r.project_id == int(project_id)]
        if start_date is not None:
            items = [r for r in items if r.work_date >= start_date]
        if end_date is not None:
            items = [r for r in items if r.work_date <= end_date]
        return items

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
        items = self._filtered(employee_id, project_id, start_date, end_date)
        items.sort(key=lambda r: (r.work_date, r.project_id), reverse=True)
        return items[offset : offset + limit]

    def count_for_employee(
        self,
        employee_id: int,
        *,
        project_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        return len(self._filtered(employee_id, project_id, start_date, end_date))
