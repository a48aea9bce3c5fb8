from __future__ import annotations

from ..core.enums import TaskAction, TaskStatus

_Q = TaskStatus.QUEUED
_RUN = TaskStatus.IN_PROGRESS
_PAUSED = TaskStatus.PAUSED

TASK_TRANSITIONS: dict[tuple[TaskStatus, TaskAction], TaskStatus] = {
    (_Q, TaskAction.START): _RUN,
    (_RUN, TaskAction.PAUSE): _PAUSED,
    (_PAUSED, TaskAction.RESUME): _RUN,
    (_RUN, TaskAction.UPDATE_PROGRESS): _RUN,
    (_PAUSED, TaskAction.UPDATE_PROGRESS): _PAUSED,
    (_RUN, TaskAction.COMPLETE): TaskStatus.COMPLETED,
    (_PAUSED, TaskAction.COMPLETE): TaskStatus.COMPLETED,
    (_Q, TaskAction.CANCEL): TaskStatus.CANCELLED,
    (_RUN, TaskAction.CANCEL): TaskStatus.CANCELLED,
    (_PAUSED, TaskAction.CANCEL): TaskStatus.CANCELLED,
}
