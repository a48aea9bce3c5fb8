from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import Clock, minutes_between, now_local
from ..common.validators import require_id, require_number
from ..core.constants import DEFAULT_HISTORY_LIMIT, MAX_HISTORY_LIMIT
from ..core.enums import AttendanceAction, AttendanceState, LocationLogType
from ..core.exceptions import (
    ConfigurationMissingError,
    InvalidInputError,
    NotFoundError,
    OutsideGeofenceError,
    PreconditionFailedError,
)
from ..core.state_machine import allowed_actions, next_state
from ..geofence.model import GeofenceResult, LocationSample
from ..geofence.validator import GeofenceValidator
from ..location_logs.repository import LocationLogRepository, record_location
from ..projects.model import Project
from ..projects.repository import ProjectRepository
from ..settings import EngineSettings
from .hours import HoursCalculator, StandardHoursCalculator
from .model import AttendanceHistoryPage, AttendanceRecord
from .repository import AttendanceRepository
from .transitions import ATTENDANCE_TRANSITIONS, GEOFENCED_ACTIONS

logger = logging.getLogger(__name__)

_LOG_TYPES = {
    AttendanceAction.CLOCK_IN: LocationLogType.CHECK_IN,
    AttendanceAction.LUNCH_START: LocationLogType.LUNCH_START,
    AttendanceAction.LUNCH_END: LocationLogType.LUNCH_END,
    AttendanceAction.OVERTIME_START: LocationLogType.OVERTIME_START,
    AttendanceAction.CLOCK_OUT: LocationLogType.CHECK_OUT,
}

Mutator = Callable[[AttendanceRecord, datetime, Project, Optional[GeofenceResult]], AttendanceRecord]


def make_sample(latitude, longitude, accuracy=None) -> Optional[LocationSample]:
    if latitude is None and longitude is None:
        return None
    return LocationSample(
        latitude=latitude,
        longitude=longitude,
        accuracy_meters=require_number(accuracy, "accuracy_meters", minimum=0) if accuracy is not None else None,
    )


def check_project_geofence(
    validator: GeofenceValidator,
    project: Project,
    sample: Optional[LocationSample],
    *,
    action: str,
) -> Optional[GeofenceResult]:
    """Gate an action on the project's geofence.

    Returns the measurement (None when nothing could be measured). Raises
    ConfigurationMissingError / OutsideGeofenceError unless the project
    allows bypass.
    """

    if project.allow_geofence_bypass:
        result = None
        if sample is not None and project.geofence is not None:
            try:
                result = validator.validate(sample, project.geofence)
            except ConfigurationMissingError:
                result = None
        if result is None or not result.inside_geofence:
            logger.warning("Geofence bypassed for %s on project %s", action, project.project_id)
        return result

    if sample is None:
        raise InvalidInputError(f"Location is required to {action}")

    result = validator.validate(sample, project.geofence)
    if not result.inside_geofence:
        logger.warning(
            "Rejected %s on project %s: %.1fm from center, allowed %.1fm",
            action,
            project.project_id,
            result.distance_meters,
            result.effective_radius,
        )
        raise OutsideGeofenceError(distance_meters=result.distance_meters, effective_radius=result.effective_radius)
    return result


class AttendanceService:
    """Attendance state machine: clock-in, lunch, overtime, clock-out.

    Each operation reads one record, checks the transition table, then the
    geofence, then any other precondition, and writes the new version back.
    Nothing is written when a check fails.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        projects: ProjectRepository,
        *,
        location_logs: Optional[LocationLogRepository] = None,
        settings: Optional[EngineSettings] = None,
        validator: Optional[GeofenceValidator] = None,
        hours_calculator: Optional[HoursCalculator] = None,
        clock: Clock = now_local,
    ):
        self._attendance = attendance
        self._projects = projects
        self._location_logs = location_logs
        self._settings = settings or EngineSettings()
        self._validator = validator or GeofenceValidator(
            required_accuracy_meters=self._settings.required_gps_accuracy_meters,
            strict_mode_disables_accuracy_margin=self._settings.strict_mode_disables_accuracy_margin,
        )
        self._hours = hours_calculator or StandardHoursCalculator(
            reconcile_overtime=self._settings.reconcile_overtime_at_clock_out
        )
        self._clock = clock

    @property
    def hours_calculator(self) -> HoursCalculator:
        return self._hours

    def _get_project(self, project_id: int) -> Project:
        project = self._projects.get_by_id(project_id)
        if not project:
            raise NotFoundError(f"Project {project_id} not found")
        return project

    def shift_hours_for(self, project: Project) -> float:
        if project.shift_hours is not None:
            return float(project.shift_hours)
        return self._settings.scheduled_shift_hours

    def _load(self, employee_id: int, project_id: int, work_date: date) -> AttendanceRecord:
        record = self._attendance.get_for_employee_and_date(employee_id, project_id, work_date)
        return record or AttendanceRecord.blank(employee_id, project_id, work_date)

    def _save(self, before: AttendanceRecord, after: AttendanceRecord) -> AttendanceRecord:
        if before.is_persisted:
            return self._attendance.update(after, expected_version=before.version)
        return self._attendance.create(after)

    def _measure(self, project: Project, sample: Optional[LocationSample]) -> Optional[GeofenceResult]:
        # Best-effort measurement for the audit log on actions that are not geofence-gated.
        if sample is None or project.geofence is None:
            return None
        try:
            return self._validator.validate(sample, project.geofence)
        except ConfigurationMissingError:
            return None

    def _transition(
        self,
        action: AttendanceAction,
        employee_id,
        project_id,
        latitude,
        longitude,
        accuracy,
        mutate: Mutator,
    ) -> AttendanceRecord:
        employee_id = require_id(employee_id, "employee_id")
        project_id = require_id(project_id, "project_id")
        project = self._get_project(project_id)

        now = self._clock()
        record = self._load(employee_id, project_id, now.date())
        target = next_state(ATTENDANCE_TRANSITIONS, record.status, action)

        sample = make_sample(latitude, longitude, accuracy)
        gated = action in GEOFENCED_ACTIONS or (
            action == AttendanceAction.CLOCK_OUT and self._settings.geofence_on_clock_out
        )
        if gated:
            result = check_project_geofence(self._validator, project, sample, action=action.value)
        else:
            result = self._measure(project, sample)

        updated = replace(mutate(record, now, project, result), status=target)
        saved = self._save(record, updated)

        logger.info(
            "Employee %s %s on project %s: %s -> %s",
            employee_id,
            action.value,
            project_id,
            record.status.value,
            saved.status.value,
        )
        record_location(
            self._location_logs,
            employee_id=employee_id,
            project_id=project_id,
            sample=sample,
            result=result,
            log_type=_LOG_TYPES[action],
            logged_at=now,
        )
        return saved

    def validate_location(self, employee_id, project_id, latitude, longitude, accuracy=None) -> GeofenceResult:
        employee_id = require_id(employee_id, "employee_id")
        project_id = require_id(project_id, "project_id")
        project = self._get_project(project_id)

        sample = make_sample(latitude, longitude, accuracy)
        if sample is None:
            raise InvalidInputError("Location is required")
        result = self._validator.validate(sample, project.geofence)

        record_location(
            self._location_logs,
            employee_id=employee_id,
            project_id=project_id,
            sample=sample,
            result=result,
            log_type=LocationLogType.VALIDATION,
            logged_at=self._clock(),
        )
        return result

    def clock_in(self, employee_id, project_id, latitude=None, longitude=None, accuracy=None) -> AttendanceRecord:
        def mutate(record, now, project, result):
            return replace(
                record,
                check_in_at=now,
                inside_geofence_at_check_in=result.inside_geofence if result else None,
                check_in_distance_meters=result.distance_meters if result else None,
            )

        return self._transition(AttendanceAction.CLOCK_IN, employee_id, project_id, latitude, longitude, accuracy, mutate)

    def lunch_start(self, employee_id, project_id, latitude=None, longitude=None, accuracy=None) -> AttendanceRecord:
        def mutate(record, now, project, result):
            return replace(record, lunch_start_at=now, lunch_end_at=None)

        return self._transition(AttendanceAction.LUNCH_START, employee_id, project_id, latitude, longitude, accuracy, mutate)

    def lunch_end(self, employee_id, project_id, latitude=None, longitude=None, accuracy=None) -> AttendanceRecord:
        def mutate(record, now, project, result):
            taken = minutes_between(record.lunch_start_at, now)
            return replace(
                record,
                lunch_end_at=now,
                lunch_duration_minutes=record.lunch_duration_minutes + max(taken, 0.0),
            )

        return self._transition(AttendanceAction.LUNCH_END, employee_id, project_id, latitude, longitude, accuracy, mutate)

    def overtime_start(self, employee_id, project_id, latitude=None, longitude=None, accuracy=None) -> AttendanceRecord:
        def mutate(record, now, project, result):
            shift_hours = self.shift_hours_for(project)
            worked_hours = record.worked_minutes(now) / 60.0
            if worked_hours < shift_hours:
                raise PreconditionFailedError(
                    f"Overtime starts after {shift_hours:g} regular hours ({worked_hours:.2f}h worked)",
                    details={"worked_hours": round(worked_hours, 2), "scheduled_shift_hours": shift_hours},
                )
            return replace(record, overtime_start_at=now)

        return self._transition(
            AttendanceAction.OVERTIME_START, employee_id, project_id, latitude, longitude, accuracy, mutate
        )

    def clock_out(self, employee_id, project_id, latitude=None, longitude=None, accuracy=None) -> AttendanceRecord:
        def mutate(record, now, project, result):
            totals = self._hours.compute(
                check_in_at=record.check_in_at,
                check_out_at=now,
                lunch_minutes=record.lunch_duration_minutes,
                overtime_start_at=record.overtime_start_at,
                shift_hours=self.shift_hours_for(project),
            )
            return replace(
                record,
                check_out_at=now,
                regular_hours=totals.regular_hours,
                overtime_hours=totals.overtime_hours,
            )

        return self._transition(AttendanceAction.CLOCK_OUT, employee_id, project_id, latitude, longitude, accuracy, mutate)

    def get_status(self, employee_id, project_id, work_date: Optional[date] = None) -> AttendanceRecord:
        employee_id = require_id(employee_id, "employee_id")
        project_id = require_id(project_id, "project_id")
        return self._load(employee_id, project_id, work_date or self._clock().date())

    def available_actions(self, employee_id, project_id) -> list[AttendanceAction]:
        """Actions allowed from today's status."""
        return allowed_actions(ATTENDANCE_TRANSITIONS, self.get_status(employee_id, project_id).status)

    def is_working(self, employee_id: int, project_id: int, work_date: Optional[date] = None) -> bool:
        status = self.get_status(employee_id, project_id, work_date).status
        return status in (AttendanceState.CLOCKED_IN, AttendanceState.ON_OVERTIME)

    def get_history(
        self,
        employee_id,
        project_id=None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> AttendanceHistoryPage:
        employee_id = require_id(employee_id, "employee_id")
        if project_id is not None:
            project_id = require_id(project_id, "project_id")
        if start_date and end_date and end_date < start_date:
            raise InvalidInputError("end_date must be on or after start_date")

        page = max(int(page), 1)
        limit = min(max(int(limit), 1), MAX_HISTORY_LIMIT)

        records = self._attendance.list_for_employee(
            employee_id,
            project_id=project_id,
            start_date=start_date,
            end_date=end_date,
            limit=limit,
            offset=(page - 1) * limit,
        )
        total = self._attendance.count_for_employee(
            employee_id, project_id=project_id, start_date=start_date, end_date=end_date
        )
        return AttendanceHistoryPage(records=list(records), page=page, limit=limit, total_records=total)
