from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import CorrectionStatus
from .model import AttendanceCorrection
from .repository import CorrectionRepository


class InMemoryCorrectionRepository(CorrectionRepository):
    def __init__(self):
        self._items: dict[int, AttendanceCorrection] = {}
        self._lock = threading.Lock()
        self._id = 0

    def add(self, correction: AttendanceCorrection) -> AttendanceCorrection:
        with self._lock:
            self._id += 1
            stored = replace(correction, correction_id=self._id)
            self._items[self._id] = stored
            return stored

    def get(self, correction_id: int) -> Optional[AttendanceCorrection]:
        with self._lock:
            return self._items.get(int(correction_id))

    def decide(
        self,
        correction_id: int,
        *,
        status: CorrectionStatus,
        decided_by: int,
        decided_at: datetime,
        reviewer_note: Optional[str] = None,
    ) -> bool:
        with self._lock:
            current = self._items.get(int(correction_id))
            if current is None or current.status != CorrectionStatus.PENDING:
                return False
            self._items[current.correction_id] = replace(
                current,
                status=status,
                decided_by=int(decided_by),
                decided_at=decided_at,
                reviewer_note=reviewer_note,
            )
            return True

    def list_for_record(self, employee_id: int, project_id: int, work_date: date) -> Sequence[AttendanceCorrection]:
        with self._lock:
            items = [
                c
                for c in self._items.values()
                if c.employee_id == int(employee_id) and c.project_id == int(project_id) and c.work_date == work_date
            ]
        items.sort(key=lambda c: c.correction_id)
        return items

    def list_by_status(self, status: CorrectionStatus, *, limit: int = 500) -> Sequence[AttendanceCorrection]:
        with self._lock:
            items = [c for c in self._items.values() if c.status == status]
        items.sort(key=lambda c: c.correction_id)
        return items[:limit]
