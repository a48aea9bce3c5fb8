from __future__ import annotations

from ..core.enums import AttendanceAction, AttendanceState

ATTENDANCE_TRANSITIONS: dict[tuple[AttendanceState, AttendanceAction], AttendanceState] = {
    (AttendanceState.NOT_CLOCKED_IN, AttendanceAction.CLOCK_IN): AttendanceState.CLOCKED_IN,
    (AttendanceState.CLOCKED_IN, AttendanceAction.LUNCH_START): AttendanceState.ON_LUNCH,
    (AttendanceState.ON_LUNCH, AttendanceAction.LUNCH_END): AttendanceState.CLOCKED_IN,
    (AttendanceState.CLOCKED_IN, AttendanceAction.OVERTIME_START): AttendanceState.ON_OVERTIME,
    (AttendanceState.CLOCKED_IN, AttendanceAction.CLOCK_OUT): AttendanceState.CLOCKED_OUT,
    (AttendanceState.ON_OVERTIME, AttendanceAction.CLOCK_OUT): AttendanceState.CLOCKED_OUT,
}

# States in which the worker is on site and may work on tasks.
WORKING_STATES = frozenset({AttendanceState.CLOCKED_IN, AttendanceState.ON_OVERTIME})

# Actions that need a passing geofence check (or a project bypass).
GEOFENCED_ACTIONS = frozenset({AttendanceAction.CLOCK_IN, AttendanceAction.LUNCH_START})
