from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..core.enums import CorrectionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceCorrection
from .repository import CorrectionRepository

_COLUMNS = """
    correction_id, attendance_id, employee_id, project_id, work_date,
    requested_check_in_at, requested_check_out_at, requested_lunch_minutes,
    reason, requested_by, status, created_at, decided_by, decided_at, reviewer_note
"""


def _to_correction(r: dict[str, Any]) -> AttendanceCorrection:
    lunch = r.get("requested_lunch_minutes")
    decided_by = r.get("decided_by")
    return AttendanceCorrection(
        correction_id=int(r["correction_id"]),
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        project_id=int(r["project_id"]),
        work_date=r["work_date"],
        requested_check_in_at=r.get("requested_check_in_at"),
        requested_check_out_at=r.get("requested_check_out_at"),
        requested_lunch_minutes=None if lunch is None else float(lunch),
        reason=r["reason"],
        requested_by=int(r["requested_by"]),
        status=CorrectionStatus(r["status"]),
        created_at=r.get("created_at"),
        decided_by=None if decided_by is None else int(decided_by),
        decided_at=r.get("decided_at"),
        reviewer_note=r.get("reviewer_note"),
    )


class MySQLCorrectionRepository(CorrectionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, correction: AttendanceCorrection) -> AttendanceCorrection:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_corrections(
                    attendance_id, employee_id, project_id, work_date,
                    requested_check_in_at, requested_check_out_at, requested_lunch_minutes,
                    reason, requested_by, status, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    correction.attendance_id,
                    correction.employee_id,
                    correction.project_id,
                    correction.work_date,
                    correction.requested_check_in_at,
                    correction.requested_check_out_at,
                    correction.requested_lunch_minutes,
                    correction.reason,
                    correction.requested_by,
                    correction.status.value,
                    correction.created_at,
                ),
            )
            new_id = int(cur.lastrowid)
        return replace(correction, correction_id=new_id)

    def get(self, correction_id: int) -> Optional[AttendanceCorrection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_corrections WHERE correction_id=%s",
                (int(correction_id),),
            )
            r = fetchone(cur)
            return _to_correction(r) if r else None

    def decide(
        self,
        correction_id: int,
        *,
        status: CorrectionStatus,
        decided_by: int,
        decided_at: datetime,
        reviewer_note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_corrections
                SET status=%s, decided_by=%s, decided_at=%s, reviewer_note=%s
                WHERE correction_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(decided_by),
                    decided_at,
                    reviewer_note,
                    int(correction_id),
                    CorrectionStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def list_for_record(self, employee_id: int, project_id: int, work_date: date) -> Sequence[AttendanceCorrection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_corrections
                WHERE employee_id=%s AND project_id=%s AND work_date=%s
                ORDER BY correction_id ASC
                """,
                (int(employee_id), int(project_id), work_date),
            )
            return [_to_correction(r) for r in fetchall(cur)]

    def list_by_status(self, status: CorrectionStatus, *, limit: int = 500) -> Sequence[AttendanceCorrection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_corrections
                WHERE status=%s
                ORDER BY correction_id ASC
                LIMIT %s
                """,
                (status.value, int(limit)),
            )
            return [_to_correction(r) for r in fetchall(cur)]
