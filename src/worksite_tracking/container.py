from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Optional

from .attendance.memory_attendance_repository import InMemoryAttendanceRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import Clock, now_local
from .corrections.memory_correction_repository import InMemoryCorrectionRepository
from .corrections.mysql_correction_repository import MySQLCorrectionRepository
from .corrections.repository import CorrectionRepository
from .corrections.service import CorrectionService
from .database.connection import DBConfig, DatabaseConnection
from .geofence.validator import GeofenceValidator
from .location_logs.memory_location_log_repository import InMemoryLocationLogRepository
from .location_logs.mysql_location_log_repository import MySQLLocationLogRepository
from .location_logs.repository import LocationLogRepository
from .projects.memory_project_repository import InMemoryProjectRepository
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.repository import ProjectRepository
from .settings import EngineSettings, load_engine_settings
from .summary.service import DailySummaryService
from .tasks.memory_task_repository import InMemoryTaskAssignmentRepository
from .tasks.mysql_task_repository import MySQLTaskAssignmentRepository
from .tasks.repository import TaskAssignmentRepository
from .tasks.service import TaskAssignmentService


@dataclass(frozen=True)
class Container:
    settings: EngineSettings
    conn: Optional[DatabaseConnection]

    projects_repo: ProjectRepository
    attendance_repo: AttendanceRepository
    corrections_repo: CorrectionRepository
    assignments_repo: TaskAssignmentRepository
    location_logs_repo: LocationLogRepository

    attendance_service: AttendanceService
    correction_service: CorrectionService
    task_service: TaskAssignmentService
    summary_service: DailySummaryService


def _wire(
    *,
    settings: EngineSettings,
    conn: Optional[DatabaseConnection],
    projects_repo: ProjectRepository,
    attendance_repo: AttendanceRepository,
    corrections_repo: CorrectionRepository,
    assignments_repo: TaskAssignmentRepository,
    location_logs_repo: LocationLogRepository,
    clock: Clock,
) -> Container:
    validator = GeofenceValidator(
        required_accuracy_meters=settings.required_gps_accuracy_meters,
        strict_mode_disables_accuracy_margin=settings.strict_mode_disables_accuracy_margin,
    )
    attendance_service = AttendanceService(
        attendance_repo,
        projects_repo,
        location_logs=location_logs_repo,
        settings=settings,
        validator=validator,
        clock=clock,
    )
    correction_service = CorrectionService(
        corrections_repo,
        attendance_repo,
        projects=projects_repo,
        settings=settings,
        hours_calculator=attendance_service.hours_calculator,
        clock=clock,
    )
    task_service = TaskAssignmentService(
        assignments_repo,
        attendance_repo,
        projects_repo,
        location_logs=location_logs_repo,
        settings=settings,
        validator=validator,
        clock=clock,
    )
    summary_service = DailySummaryService(
        assignments_repo,
        attendance_repo,
        corrections=correction_service,
        clock=clock,
    )

    return Container(
        settings=settings,
        conn=conn,
        projects_repo=projects_repo,
        attendance_repo=attendance_repo,
        corrections_repo=corrections_repo,
        assignments_repo=assignments_repo,
        location_logs_repo=location_logs_repo,
        attendance_service=attendance_service,
        correction_service=correction_service,
        task_service=task_service,
        summary_service=summary_service,
    )


def build_container(settings_module: ModuleType, *, clock: Clock = now_local) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(getattr(settings_module, "DB_CONFIG")))
    return _wire(
        settings=load_engine_settings(settings_module),
        conn=conn,
        projects_repo=MySQLProjectRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        corrections_repo=MySQLCorrectionRepository(conn),
        assignments_repo=MySQLTaskAssignmentRepository(conn),
        location_logs_repo=MySQLLocationLogRepository(conn),
        clock=clock,
    )


def build_in_memory_container(
    engine_settings: Optional[EngineSettings] = None, *, clock: Clock = now_local
) -> Container:
    return _wire(
        settings=engine_settings or EngineSettings(),
        conn=None,
        projects_repo=InMemoryProjectRepository(),
        attendance_repo=InMemoryAttendanceRepository(),
        corrections_repo=InMemoryCorrectionRepository(),
        assignments_repo=InMemoryTaskAssignmentRepository(),
        location_logs_repo=InMemoryLocationLogRepository(),
        clock=clock,
    )
