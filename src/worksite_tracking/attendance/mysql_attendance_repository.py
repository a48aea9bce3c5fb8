from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import AttendanceState
from ..core.exceptions import ConcurrentModificationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, project_id, work_date, status,
    check_in_at, check_out_at, lunch_start_at, lunch_end_at, overtime_start_at,
    regular_hours, overtime_hours, lunch_duration_minutes,
    inside_geofence_at_check_in, check_in_distance_meters, version
"""


def _to_record(r: dict[str, Any]) -> AttendanceRecord:
    inside = r.get("inside_geofence_at_check_in")
    distance = r.get("check_in_distance_meters")
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        project_id=int(r["project_id"]),
        work_date=r["work_date"],
        status=AttendanceState(r["status"]),
        check_in_at=r.get("check_in_at"),
        check_out_at=r.get("check_out_at"),
        lunch_start_at=r.get("lunch_start_at"),
        lunch_end_at=r.get("lunch_end_at"),
        overtime_start_at=r.get("overtime_start_at"),
        regular_hours=float(r.get("regular_hours") or 0),
        overtime_hours=float(r.get("overtime_hours") or 0),
        lunch_duration_minutes=float(r.get("lunch_duration_minutes") or 0),
        inside_geofence_at_check_in=None if inside is None else bool(inside),
        check_in_distance_meters=None if distance is None else float(distance),
        version=int(r["version"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: int, project_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND project_id=%s AND work_date=%s
                """,
                (int(employee_id), int(project_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_employee_and_date(self, employee_id: int, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date=%s
                ORDER BY project_id ASC
                """,
                (int(employee_id), work_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, project_id, work_date, status,
                        check_in_at, check_out_at, lunch_start_at, lunch_end_at, overtime_start_at,
                        regular_hours, overtime_hours, lunch_duration_minutes,
                        inside_geofence_at_check_in, check_in_distance_meters, version
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                    """,
                    (
                        record.employee_id,
                        record.project_id,
                        record.work_date,
                        record.status.value,
                        record.check_in_at,
                        record.check_out_at,
                        record.lunch_start_at,
                        record.lunch_end_at,
                        record.overtime_start_at,
                        record.regular_hours,
                        record.overtime_hours,
                        record.lunch_duration_minutes,
                        record.inside_geofence_at_check_in,
                        record.check_in_distance_meters,
                    ),
                )
                new_id = int(cur.lastrowid)
        except IntegrityError as err:
            if is_duplicate_key(err):
                raise ConcurrentModificationError("Attendance record was created by another request") from err
            raise
        return replace(record, attendance_id=new_id, version=1)

    def update(self, record: AttendanceRecord, *, expected_version: int) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, check_in_at=%s, check_out_at=%s, lunch_start_at=%s, lunch_end_at=%s,
                    overtime_start_at=%s, regular_hours=%s, overtime_hours=%s, lunch_duration_minutes=%s,
                    inside_geofence_at_check_in=%s, check_in_distance_meters=%s, version=version+1
                WHERE attendance_id=%s AND version=%s
                """,
                (
                    record.status.value,
                    record.check_in_at,
                    record.check_out_at,
                    record.lunch_start_at,
                    record.lunch_end_at,
                    record.overtime_start_at,
                    record.regular_hours,
                    record.overtime_hours,
                    record.lunch_duration_minutes,
                    record.inside_geofence_at_check_in,
                    record.check_in_distance_meters,
                    record.attendance_id,
                    int(expected_version),
                ),
            )
            if cur.rowcount == 0:
                raise ConcurrentModificationError("Attendance record changed since it was read")
        return replace(record, version=int(expected_version) + 1)

    @staticmethod
    def _where(employee_id, project_id, start_date, end_date) -> tuple[str, list[object]]:
        clauses = ["employee_id=%s"]
        params: list[object] = [int(employee_id)]
        if project_id is not None:
            clauses.append("project_id=%s")
            params.append(int(project_id))
        if start_date is not None:
            clauses.append("work_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("work_date <= %s")
            params.append(end_date)
        return " AND ".join(clauses), params

    def list_for_employee(
        self,
        employee_id: int,
        *,
        project_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 30,
        offset: int = 0,
    ) -> Sequence[AttendanceRecord]:
        where, params = self._where(employee_id, project_id, start_date, end_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY work_date DESC, project_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count_for_employee(
        self,
        employee_id: int,
        *,
        project_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        where, params = self._where(employee_id, project_id, start_date, end_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance_records WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["total"]) if r else 0
