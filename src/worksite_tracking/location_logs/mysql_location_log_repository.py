from __future__ import annotations

from typing import Sequence

from ..core.enums import LocationLogType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import LocationLogEntry
from .repository import LocationLogRepository


class MySQLLocationLogRepository(LocationLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, entry: LocationLogEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO location_logs(
                    employee_id, project_id, latitude, longitude, accuracy_meters,
                    inside_geofence, distance_meters, log_type, logged_at, task_assignment_id
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.employee_id,
                    entry.project_id,
                    entry.latitude,
                    entry.longitude,
                    entry.accuracy_meters,
                    entry.inside_geofence,
                    entry.distance_meters,
                    entry.log_type.value,
                    entry.logged_at,
                    entry.task_assignment_id,
                ),
            )
            return int(cur.lastrowid)

    def list_for_employee(self, employee_id: int, *, limit: int = 100) -> Sequence[LocationLogEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, project_id, latitude, longitude, accuracy_meters,
                       inside_geofence, distance_meters, log_type, logged_at, task_assignment_id
                FROM location_logs
                WHERE employee_id=%s
                ORDER BY logged_at DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return [
                LocationLogEntry(
                    employee_id=int(r["employee_id"]),
                    project_id=int(r["project_id"]),
                    latitude=float(r["latitude"]),
                    longitude=float(r["longitude"]),
                    accuracy_meters=r.get("accuracy_meters"),
                    inside_geofence=None if r.get("inside_geofence") is None else bool(r["inside_geofence"]),
                    distance_meters=r.get("distance_meters"),
                    log_type=LocationLogType(r["log_type"]),
                    logged_at=r["logged_at"],
                    task_assignment_id=r.get("task_assignment_id"),
                )
                for r in fetchall(cur)
            ]
