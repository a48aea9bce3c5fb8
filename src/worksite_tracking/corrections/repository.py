from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import CorrectionStatus
from .model import AttendanceCorrection


class CorrectionRepository(Protocol):
    def add(self, correction: AttendanceCorrection) -> AttendanceCorrection:
        raise NotImplementedError

    def get(self, correction_id: int) -> Optional[AttendanceCorrection]:
        raise NotImplementedError

    def decide(
        self,
        correction_id: int,
        *,
        status: CorrectionStatus,
        decided_by: int,
        decided_at: datetime,
        reviewer_note: Optional[str] = None,
    ) -> bool:
        """Move a PENDING correction to ``status``; False when it was no longer pending."""

        raise NotImplementedError

    def list_for_record(self, employee_id: int, project_id: int, work_date: date) -> Sequence[AttendanceCorrection]:
        raise NotImplementedError

    def list_by_status(self, status: CorrectionStatus, *, limit: int = 500) -> Sequence[AttendanceCorrection]:
        raise NotImplementedError
