from __future__ import annotations

from enum import Enum


class AttendanceState(str, Enum):
    """Trạng thái chấm công trong ngày của một nhân viên tại một dự án."""

    NOT_CLOCKED_IN = "NOT_CLOCKED_IN"
    CLOCKED_IN = "CLOCKED_IN"
    ON_LUNCH = "ON_LUNCH"
    ON_OVERTIME = "ON_OVERTIME"
    CLOCKED_OUT = "CLOCKED_OUT"


class AttendanceAction(str, Enum):
    CLOCK_IN = "clock-in"
    LUNCH_START = "lunch-start"
    LUNCH_END = "lunch-end"
    OVERTIME_START = "overtime-start"
    CLOCK_OUT = "clock-out"


class TaskStatus(str, Enum):
    """Lifecycle of a worker's task assignment for one day."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskAction(str, Enum):
    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    UPDATE_PROGRESS = "update-progress"
    COMPLETE = "complete"
    CANCEL = "cancel"


class CorrectionStatus(str, Enum):
    """Trạng thái luồng duyệt yêu cầu điều chỉnh chấm công."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class LocationLogType(str, Enum):
    VALIDATION = "VALIDATION"
    CHECK_IN = "CHECK_IN"
    LUNCH_START = "LUNCH_START"
    LUNCH_END = "LUNCH_END"
    OVERTIME_START = "OVERTIME_START"
    CHECK_OUT = "CHECK_OUT"
    TASK_START = "TASK_START"


class ErrorKind(str, Enum):
    """Error taxonomy returned to callers (controllers map these to HTTP codes)."""

    CONFIGURATION_MISSING = "ConfigurationMissing"
    OUTSIDE_GEOFENCE = "OutsideGeofence"
    INVALID_STATE_TRANSITION = "InvalidStateTransition"
    PRECONDITION_FAILED = "PreconditionFailed"
    CONCURRENT_MODIFICATION = "ConcurrentModification"
    NOT_FOUND = "NotFound"
    INVALID_INPUT = "InvalidInput"
