from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceState


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): Bản ghi chấm công theo nhân viên/dự án/ngày."""

    attendance_id: Optional[int]
    employee_id: int
    project_id: int
    work_date: date
    status: AttendanceState = AttendanceState.NOT_CLOCKED_IN
    check_in_at: Optional[datetime] = None
    check_out_at: Optional[datetime] = None
    lunch_start_at: Optional[datetime] = None
    lunch_end_at: Optional[datetime] = None
    overtime_start_at: Optional[datetime] = None
    regular_hours: float = 0.0
    overtime_hours: float = 0.0
    lunch_duration_minutes: float = 0.0
    inside_geofence_at_check_in: Optional[bool] = None
    check_in_distance_meters: Optional[float] = None
    version: int = 0

    @classmethod
    def blank(cls, employee_id: int, project_id: int, work_date: date) -> "AttendanceRecord":
        """Unsaved NOT_CLOCKED_IN record standing in for a day with no row yet."""
        return cls(attendance_id=None, employee_id=employee_id, project_id=project_id, work_date=work_date)

    @property
    def is_persisted(self) -> bool:
        return self.version > 0

    def worked_minutes(self, now: datetime) -> float:
        """Minutes on the clock so far, excluding lunch (an ongoing lunch included)."""
        if self.check_in_at is None:
            return 0.0
        end = self.check_out_at or now
        lunch = self.lunch_duration_minutes
        if self.status == AttendanceState.ON_LUNCH and self.lunch_start_at is not None:
            lunch += max((now - self.lunch_start_at).total_seconds() / 60.0, 0.0)
        return max((end - self.check_in_at).total_seconds() / 60.0 - lunch, 0.0)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass(frozen=True)
class AttendanceHistoryPage:
    """Read-model phục vụ màn hình lịch sử chấm công (phân trang)."""

    records: list[AttendanceRecord] = field(default_factory=list)
    page: int = 1
    limit: int = 30
    total_records: int = 0

    @property
    def total_pages(self) -> int:
        if self.total_records <= 0:
            return 0
        return (self.total_records + self.limit - 1) // self.limit

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1
