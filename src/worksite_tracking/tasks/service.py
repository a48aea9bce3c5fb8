from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..attendance.service import check_project_geofence
from ..attendance.transitions import WORKING_STATES
from ..common.datetime_utils import Clock, now_local, round_half_up
from ..common.validators import require_id, require_number
from ..core.enums import LocationLogType, TaskAction, TaskStatus
from ..core.exceptions import InvalidInputError, NotFoundError, PreconditionFailedError
from ..core.state_machine import next_state
from ..geofence.model import LocationSample
from ..geofence.validator import GeofenceValidator
from ..location_logs.repository import LocationLogRepository, record_location
from ..projects.repository import ProjectRepository
from ..settings import EngineSettings
from .model import PauseEntry, TaskAssignment
from .repository import TaskAssignmentRepository
from .transitions import TASK_TRANSITIONS

logger = logging.getLogger(__name__)

_UNFINISHED = (TaskStatus.IN_PROGRESS, TaskStatus.PAUSED)


class TaskAssignmentService:
    """Task assignment state machine.

    Assignments are created by a scheduling collaborator; this service only
    moves them through queued -> in_progress <-> paused -> completed, or to
    cancelled, writing each change with a version check.
    """

    def __init__(
        self,
        assignments: TaskAssignmentRepository,
        attendance: AttendanceRepository,
        projects: ProjectRepository,
        *,
        location_logs: Optional[LocationLogRepository] = None,
        settings: Optional[EngineSettings] = None,
        validator: Optional[GeofenceValidator] = None,
        clock: Clock = now_local,
    ):
        self._assignments = assignments
        self._attendance = attendance
        self._projects = projects
        self._location_logs = location_logs
        self._settings = settings or EngineSettings()
        self._validator = validator or GeofenceValidator(
            required_accuracy_meters=self._settings.required_gps_accuracy_meters,
            strict_mode_disables_accuracy_margin=self._settings.strict_mode_disables_accuracy_margin,
        )
        self._clock = clock

    def get(self, assignment_id) -> TaskAssignment:
        assignment_id = require_id(assignment_id, "assignment_id")
        assignment = self._assignments.get_by_id(assignment_id)
        if not assignment:
            raise NotFoundError(f"Task assignment {assignment_id} not found")
        return assignment

    def _get_owned(self, assignment_id, employee_id) -> TaskAssignment:
        assignment = self.get(assignment_id)
        if employee_id is not None and assignment.employee_id != require_id(employee_id, "employee_id"):
            # Không tiết lộ công việc của người khác
            raise NotFoundError(f"Task assignment {assignment.assignment_id} not found")
        return assignment

    def _save(self, before: TaskAssignment, after: TaskAssignment, action: TaskAction) -> TaskAssignment:
        saved = self._assignments.update(after, expected_version=before.version)
        logger.info(
            "Assignment %s %s: %s -> %s",
            saved.assignment_id,
            action.value,
            before.status.value,
            saved.status.value,
        )
        return saved

    def start(self, assignment_id, employee_id, location: Optional[LocationSample] = None) -> TaskAssignment:
        assignment = self._get_owned(assignment_id, employee_id)
        target = next_state(TASK_TRANSITIONS, assignment.status, TaskAction.START)
        now = self._clock()

        attendance = self._attendance.get_for_employee_and_date(
            assignment.employee_id, assignment.project_id, now.date()
        )
        if attendance is None or attendance.status not in WORKING_STATES:
            raise PreconditionFailedError(
                "Clock in to the project before starting a task",
                details={"attendance_status": attendance.status.value if attendance else "NOT_CLOCKED_IN"},
            )

        if assignment.dependencies:
            done = {
                d.assignment_id
                for d in self._assignments.get_many(assignment.dependencies)
                if d.status == TaskStatus.COMPLETED
            }
            pending = [d for d in assignment.dependencies if d not in done]
            if pending:
                raise PreconditionFailedError(
                    "Complete the prerequisite tasks first",
                    details={"pending_dependencies": pending},
                )

        result = None
        if location is not None:
            project = self._projects.get_by_id(assignment.project_id)
            if not project:
                raise NotFoundError(f"Project {assignment.project_id} not found")
            result = check_project_geofence(self._validator, project, location, action="start task")

        siblings = self._assignments.list_for_employee_and_date(
            assignment.employee_id, assignment.work_date, project_id=assignment.project_id
        )
        ahead = [s.assignment_id for s in siblings if s.sequence < assignment.sequence and s.status in _UNFINISHED]
        if ahead:
            logger.warning(
                "Assignment %s started out of sequence; earlier assignments %s are unfinished",
                assignment.assignment_id,
                ahead,
            )

        saved = self._save(
            assignment,
            replace(assignment, status=target, started_at=now, started_out_of_sequence=bool(ahead)),
            TaskAction.START,
        )
        record_location(
            self._location_logs,
            employee_id=assignment.employee_id,
            project_id=assignment.project_id,
            sample=location,
            result=result,
            log_type=LocationLogType.TASK_START,
            logged_at=now,
            task_assignment_id=assignment.assignment_id,
        )
        return saved

    def pause(self, assignment_id, employee_id, reason: str = "") -> TaskAssignment:
        assignment = self._get_owned(assignment_id, employee_id)
        target = next_state(TASK_TRANSITIONS, assignment.status, TaskAction.PAUSE)
        entry = PauseEntry(paused_at=self._clock(), reason=(reason or "").strip())
        return self._save(
            assignment,
            replace(assignment, status=target, pause_history=assignment.pause_history + (entry,)),
            TaskAction.PAUSE,
        )

    def resume(self, assignment_id, employee_id) -> TaskAssignment:
        assignment = self._get_owned(assignment_id, employee_id)
        target = next_state(TASK_TRANSITIONS, assignment.status, TaskAction.RESUME)
        return self._save(
            assignment,
            replace(assignment, status=target, pause_history=assignment.with_pause_closed(self._clock())),
            TaskAction.RESUME,
        )

    def update_progress(
        self,
        assignment_id,
        completed_quantity=None,
        *,
        progress_percent=None,
        employee_id=None,
    ) -> TaskAssignment:
        """Record progress; percent and ``progress_today`` always change together.

        With a daily target the percent is derived from the quantity
        (capped at 100). Without a positive target the caller's percent
        is used and ``progress_today`` is left as it was.
        """

        assignment = self._get_owned(assignment_id, employee_id)
        next_state(TASK_TRANSITIONS, assignment.status, TaskAction.UPDATE_PROGRESS)

        target = assignment.daily_target
        new_target = target
        quantity = None
        if completed_quantity is not None:
            quantity = require_number(completed_quantity, "completed_quantity", minimum=0)

        if target is not None and target.target_quantity > 0:
            if quantity is None:
                raise InvalidInputError("completed_quantity is required for a task with a daily target")
            percent = min(100, round_half_up(100.0 * quantity / target.target_quantity))
            if quantity < target.progress_today:
                raise InvalidInputError("Progress cannot decrease")
            new_target = replace(target, progress_today=quantity)
        else:
            if progress_percent is None:
                raise InvalidInputError("progress_percent is required for a task without a daily target")
            percent = round_half_up(require_number(progress_percent, "progress_percent", minimum=0, maximum=100))

        if percent < assignment.progress_percent:
            raise InvalidInputError("Progress cannot decrease")

        return self._save(
            assignment,
            replace(assignment, progress_percent=percent, daily_target=new_target),
            TaskAction.UPDATE_PROGRESS,
        )

    def complete(self, assignment_id, employee_id) -> TaskAssignment:
        assignment = self._get_owned(assignment_id, employee_id)
        target = next_state(TASK_TRANSITIONS, assignment.status, TaskAction.COMPLETE)

        threshold = self._settings.completion_threshold_percent
        if assignment.progress_percent < threshold:
            raise PreconditionFailedError(
                f"Progress {assignment.progress_percent}% is below the {threshold}% completion threshold",
                details={"progress_percent": assignment.progress_percent, "threshold_percent": threshold},
            )

        now = self._clock()
        return self._save(
            assignment,
            replace(
                assignment,
                status=target,
                completed_at=now,
                pause_history=assignment.with_pause_closed(now),
            ),
            TaskAction.COMPLETE,
        )

    def cancel(self, assignment_id, employee_id, reason: str = "") -> TaskAssignment:
        assignment = self._get_owned(assignment_id, employee_id)
        if assignment.status == TaskStatus.CANCELLED:
            return assignment
        target = next_state(TASK_TRANSITIONS, assignment.status, TaskAction.CANCEL)

        now = self._clock()
        return self._save(
            assignment,
            replace(
                assignment,
                status=target,
                cancelled_at=now,
                cancel_reason=(reason or "").strip() or None,
                pause_history=assignment.with_pause_closed(now),
            ),
            TaskAction.CANCEL,
        )

    def list_for_day(self, employee_id, work_date: Optional[date] = None, project_id=None) -> Sequence[TaskAssignment]:
        employee_id = require_id(employee_id, "employee_id")
        if project_id is not None:
            project_id = require_id(project_id, "project_id")
        return self._assignments.list_for_employee_and_date(
            employee_id, work_date or self._clock().date(), project_id=project_id
        )

    def next_in_sequence(self, assignment_id) -> Optional[TaskAssignment]:
        assignment = self.get(assignment_id)
        siblings = self._assignments.list_for_employee_and_date(
            assignment.employee_id, assignment.work_date, project_id=assignment.project_id
        )
        for s in siblings:
            if s.status == TaskStatus.QUEUED and s.sequence > assignment.sequence:
                return s
        return None
