from __future__ import annotations

import json
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import TaskStatus
from ..core.exceptions import ConcurrentModificationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, load_json
from .model import DailyTarget, PauseEntry, TaskAssignment
from .repository import TaskAssignmentRepository

_COLUMNS = """
    assignment_id, employee_id, project_id, task_id, work_date, status, priority, sequence,
    progress_percent, target_quantity, target_unit, progress_today, pause_history, dependencies,
    started_at, completed_at, cancelled_at, cancel_reason, started_out_of_sequence, version
"""

_ORDER = "ORDER BY sequence ASC, priority DESC, assignment_id ASC"


def _dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def dump_pause_history(entries: Iterable[PauseEntry]) -> str:
    return json.dumps(
        [
            {
                "paused_at": e.paused_at.isoformat(),
                "resumed_at": e.resumed_at.isoformat() if e.resumed_at else None,
                "reason": e.reason,
            }
            for e in entries
        ]
    )


def load_pause_history(value: Any) -> tuple[PauseEntry, ...]:
    return tuple(
        PauseEntry(paused_at=_dt(e["paused_at"]), resumed_at=_dt(e.get("resumed_at")), reason=e.get("reason") or "")
        for e in load_json(value, [])
    )


def _to_assignment(r: dict[str, Any]) -> TaskAssignment:
    target = None
    if r.get("target_quantity") is not None:
        target = DailyTarget(
            target_quantity=float(r["target_quantity"]),
            target_unit=r.get("target_unit") or "",
            progress_today=float(r.get("progress_today") or 0),
        )
    return TaskAssignment(
        assignment_id=int(r["assignment_id"]),
        employee_id=int(r["employee_id"]),
        project_id=int(r["project_id"]),
        task_id=int(r["task_id"]),
        work_date=r["work_date"],
        status=TaskStatus(r["status"]),
        priority=int(r.get("priority") or 0),
        sequence=int(r.get("sequence") or 0),
        progress_percent=int(r.get("progress_percent") or 0),
        daily_target=target,
        pause_history=load_pause_history(r.get("pause_history")),
        started_at=r.get("started_at"),
        completed_at=r.get("completed_at"),
        cancelled_at=r.get("cancelled_at"),
        cancel_reason=r.get("cancel_reason"),
        dependencies=tuple(int(d) for d in load_json(r.get("dependencies"), [])),
        started_out_of_sequence=bool(r.get("started_out_of_sequence")),
        version=int(r["version"]),
    )


def _values(a: TaskAssignment) -> tuple:
    target = a.daily_target
    return (
        a.status.value,
        a.priority,
        a.sequence,
        a.progress_percent,
        target.target_quantity if target else None,
        target.target_unit if target else None,
        target.progress_today if target else 0,
        dump_pause_history(a.pause_history),
        json.dumps(list(a.dependencies)),
        a.started_at,
        a.completed_at,
        a.cancelled_at,
        a.cancel_reason,
        a.started_out_of_sequence,
    )


class MySQLTaskAssignmentRepository(TaskAssignmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, assignment_id: int) -> Optional[TaskAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM task_assignments WHERE assignment_id=%s", (int(assignment_id),))
            r = fetchone(cur)
            return _to_assignment(r) if r else None

    def get_many(self, assignment_ids: Iterable[int]) -> Sequence[TaskAssignment]:
        ids = [int(i) for i in assignment_ids]
        if not ids:
            return []
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM task_assignments WHERE assignment_id IN ({placeholders})",
                tuple(ids),
            )
            return [_to_assignment(r) for r in fetchall(cur)]

    def list_for_employee_and_date(
        self, employee_id: int, work_date: date, *, project_id: Optional[int] = None
    ) -> Sequence[TaskAssignment]:
        where = "employee_id=%s AND work_date=%s"
        params: list[object] = [int(employee_id), work_date]
        if project_id is not None:
            where += " AND project_id=%s"
            params.append(int(project_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM task_assignments WHERE {where} {_ORDER}", tuple(params))
            return [_to_assignment(r) for r in fetchall(cur)]

    def add(self, assignment: TaskAssignment) -> TaskAssignment:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO task_assignments(
                        assignment_id, employee_id, project_id, task_id, work_date,
                        status, priority, sequence, progress_percent,
                        target_quantity, target_unit, progress_today, pause_history, dependencies,
                        started_at, completed_at, cancelled_at, cancel_reason, started_out_of_sequence,
                        version
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                    """,
                    (
                        assignment.assignment_id,
                        assignment.employee_id,
                        assignment.project_id,
                        assignment.task_id,
                        assignment.work_date,
                    )
                    + _values(assignment),
                )
        except IntegrityError as err:
            if is_duplicate_key(err):
                raise ConcurrentModificationError(f"Assignment {assignment.assignment_id} already exists") from err
            raise
        return replace(assignment, version=1)

    def update(self, assignment: TaskAssignment, *, expected_version: int) -> TaskAssignment:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE task_assignments
                SET status=%s, priority=%s, sequence=%s, progress_percent=%s,
                    target_quantity=%s, target_unit=%s, progress_today=%s,
                    pause_history=%s, dependencies=%s,
                    started_at=%s, completed_at=%s, cancelled_at=%s, cancel_reason=%s,
                    started_out_of_sequence=%s, version=version+1
                WHERE assignment_id=%s AND version=%s
                """,
                _values(assignment) + (assignment.assignment_id, int(expected_version)),
            )
            if cur.rowcount == 0:
                raise ConcurrentModificationError("Task assignment changed since it was read")
        return replace(assignment, version=int(expected_version) + 1)
