from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..attendance.hours import HoursCalculator, StandardHoursCalculator
from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import Clock, now_local
from ..common.validators import require_id, require_non_empty, require_number
from ..core.constants import DEFAULT_PENDING_LIMIT
from ..core.enums import CorrectionStatus
from ..core.exceptions import (
    ConcurrentModificationError,
    InvalidInputError,
    InvalidStateTransitionError,
    NotFoundError,
    PreconditionFailedError,
)
from ..projects.repository import ProjectRepository
from ..settings import EngineSettings
from .model import AttendanceCorrection, CorrectedAttendance
from .repository import CorrectionRepository

logger = logging.getLogger(__name__)


def _approved_in_order(corrections: Iterable[AttendanceCorrection]) -> list[AttendanceCorrection]:
    approved = [c for c in corrections if c.status == CorrectionStatus.APPROVED]
    approved.sort(key=lambda c: (c.decided_at or datetime.min, c.correction_id or 0))
    return approved


class CorrectionService:
    """Submit/approve/reject workflow for attendance corrections.

    Corrections never overwrite the stored attendance record. Approved ones
    are applied when the record is read through ``corrected_view``.
    """

    def __init__(
        self,
        corrections: CorrectionRepository,
        attendance: AttendanceRepository,
        *,
        projects: Optional[ProjectRepository] = None,
        settings: Optional[EngineSettings] = None,
        hours_calculator: Optional[HoursCalculator] = None,
        clock: Clock = now_local,
    ):
        self._corrections = corrections
        self._attendance = attendance
        self._projects = projects
        self._settings = settings or EngineSettings()
        self._hours = hours_calculator or StandardHoursCalculator(
            reconcile_overtime=self._settings.reconcile_overtime_at_clock_out
        )
        self._clock = clock

    def _get_record(self, employee_id: int, project_id: int, work_date: date) -> AttendanceRecord:
        record = self._attendance.get_for_employee_and_date(employee_id, project_id, work_date)
        if not record:
            raise NotFoundError("Attendance record not found for this day")
        return record

    def _shift_hours(self, project_id: int) -> float:
        if self._projects is not None:
            project = self._projects.get_by_id(project_id)
            if project and project.shift_hours is not None:
                return float(project.shift_hours)
        return self._settings.scheduled_shift_hours

    def submit(
        self,
        employee_id,
        project_id,
        work_date: date,
        requested_by,
        reason: str,
        *,
        requested_check_in_at: Optional[datetime] = None,
        requested_check_out_at: Optional[datetime] = None,
        requested_lunch_minutes: Optional[float] = None,
    ) -> AttendanceCorrection:
        employee_id = require_id(employee_id, "employee_id")
        project_id = require_id(project_id, "project_id")
        requested_by = require_id(requested_by, "requested_by")
        reason = require_non_empty(reason, "reason")

        if requested_check_in_at is None and requested_check_out_at is None and requested_lunch_minutes is None:
            raise InvalidInputError("At least one change is required")
        if requested_lunch_minutes is not None:
            requested_lunch_minutes = require_number(requested_lunch_minutes, "requested_lunch_minutes", minimum=0)
        if requested_check_in_at and requested_check_out_at and requested_check_out_at < requested_check_in_at:
            raise InvalidInputError("Check-out cannot be earlier than check-in")

        record = self._get_record(employee_id, project_id, work_date)
        correction = self._corrections.add(
            AttendanceCorrection(
                correction_id=None,
                attendance_id=record.attendance_id,
                employee_id=employee_id,
                project_id=project_id,
                work_date=work_date,
                requested_check_in_at=requested_check_in_at,
                requested_check_out_at=requested_check_out_at,
                requested_lunch_minutes=requested_lunch_minutes,
                reason=reason,
                requested_by=requested_by,
                created_at=self._clock(),
            )
        )
        logger.info(
            "Correction %s submitted for employee %s on project %s (%s)",
            correction.correction_id,
            employee_id,
            project_id,
            work_date.isoformat(),
        )
        return correction

    def _get_pending(self, correction_id, reviewer_id, action: str) -> AttendanceCorrection:
        correction = self._corrections.get(require_id(correction_id, "correction_id"))
        if not correction:
            raise NotFoundError(f"Correction {correction_id} not found")
        if correction.status != CorrectionStatus.PENDING:
            raise InvalidStateTransitionError(current_state=correction.status.value, action=action)
        if correction.requested_by == reviewer_id:
            raise PreconditionFailedError("A correction cannot be reviewed by its requester")
        return correction

    def _decide(self, correction: AttendanceCorrection, status: CorrectionStatus, reviewer_id: int, note: str):
        ok = self._corrections.decide(
            correction.correction_id,
            status=status,
            decided_by=reviewer_id,
            decided_at=self._clock(),
            reviewer_note=(note or "").strip() or None,
        )
        if not ok:
            raise ConcurrentModificationError("Correction was decided by another request")
        logger.info("Correction %s %s by %s", correction.correction_id, status.value.lower(), reviewer_id)
        return self._corrections.get(correction.correction_id)

    def approve(self, correction_id, reviewer_id, note: str = "") -> AttendanceCorrection:
        reviewer_id = require_id(reviewer_id, "reviewer_id")
        correction = self._get_pending(correction_id, reviewer_id, "approve")

        record = self._get_record(correction.employee_id, correction.project_id, correction.work_date)
        current = self._apply(record, self._corrections.list_for_record(record.employee_id, record.project_id, record.work_date))
        check_in = correction.requested_check_in_at or current.effective_check_in_at
        check_out = correction.requested_check_out_at or current.effective_check_out_at
        if check_in and check_out and check_out < check_in:
            raise InvalidInputError("Check-out cannot be earlier than check-in")

        return self._decide(correction, CorrectionStatus.APPROVED, reviewer_id, note)

    def reject(self, correction_id, reviewer_id, note: str = "") -> AttendanceCorrection:
        reviewer_id = require_id(reviewer_id, "reviewer_id")
        correction = self._get_pending(correction_id, reviewer_id, "reject")
        return self._decide(correction, CorrectionStatus.REJECTED, reviewer_id, note)

    def _apply(self, record: AttendanceRecord, corrections: Iterable[AttendanceCorrection]) -> CorrectedAttendance:
        check_in = record.check_in_at
        check_out = record.check_out_at
        lunch = record.lunch_duration_minutes
        applied: list[int] = []

        for c in _approved_in_order(corrections):
            if c.requested_check_in_at is not None:
                check_in = c.requested_check_in_at
            if c.requested_check_out_at is not None:
                check_out = c.requested_check_out_at
            if c.requested_lunch_minutes is not None:
                lunch = c.requested_lunch_minutes
            applied.append(c.correction_id)

        regular, overtime = record.regular_hours, record.overtime_hours
        if applied and check_in is not None and check_out is not None:
            totals = self._hours.compute(
                check_in_at=check_in,
                check_out_at=check_out,
                lunch_minutes=lunch,
                overtime_start_at=record.overtime_start_at,
                shift_hours=self._shift_hours(record.project_id),
            )
            regular, overtime = totals.regular_hours, totals.overtime_hours

        return CorrectedAttendance(
            record=record,
            effective_check_in_at=check_in,
            effective_check_out_at=check_out,
            effective_lunch_minutes=lunch,
            regular_hours=regular,
            overtime_hours=overtime,
            applied_correction_ids=tuple(applied),
        )

    def apply_to(self, record: AttendanceRecord) -> CorrectedAttendance:
        if not record.is_persisted:
            return self._apply(record, ())
        return self._apply(record, self._corrections.list_for_record(record.employee_id, record.project_id, record.work_date))

    def corrected_view(self, employee_id, project_id, work_date: date) -> CorrectedAttendance:
        employee_id = require_id(employee_id, "employee_id")
        project_id = require_id(project_id, "project_id")
        return self.apply_to(self._get_record(employee_id, project_id, work_date))

    def list_for_record(self, employee_id, project_id, work_date: date) -> Sequence[AttendanceCorrection]:
        return self._corrections.list_for_record(
            require_id(employee_id, "employee_id"), require_id(project_id, "project_id"), work_date
        )

    def list_pending(self, limit: int = DEFAULT_PENDING_LIMIT) -> Sequence[AttendanceCorrection]:
        return self._corrections.list_by_status(CorrectionStatus.PENDING, limit=int(limit))
