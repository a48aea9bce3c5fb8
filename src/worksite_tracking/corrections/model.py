from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import CorrectionStatus


@dataclass(frozen=True)
class AttendanceCorrection:
    """Yêu cầu điều chỉnh chấm công (append-only; bản ghi gốc không bị ghi đè)."""

    correction_id: Optional[int]
    attendance_id: int
    employee_id: int
    project_id: int
    work_date: date
    requested_check_in_at: Optional[datetime]
    requested_check_out_at: Optional[datetime]
    requested_lunch_minutes: Optional[float]
    reason: str
    requested_by: int
    status: CorrectionStatus = CorrectionStatus.PENDING
    created_at: Optional[datetime] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    reviewer_note: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass(frozen=True)
class CorrectedAttendance:
    """Read-time view of a record with its approved corrections applied."""

    record: AttendanceRecord
    effective_check_in_at: Optional[datetime]
    effective_check_out_at: Optional[datetime]
    effective_lunch_minutes: float
    regular_hours: float
    overtime_hours: float
    applied_correction_ids: tuple[int, ...] = ()

    @property
    def is_corrected(self) -> bool:
        return bool(self.applied_correction_ids)
