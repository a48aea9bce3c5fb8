from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from ..geofence.model import GeofenceSpec
from .model import Project
from .repository import ProjectRepository


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, project_id: int) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT project_id, project_name, center_latitude, center_longitude,
                       radius_meters, allowed_variance_meters, strict_mode,
                       allow_geofence_bypass, shift_hours
                FROM projects
                WHERE project_id=%s
                """,
                (int(project_id),),
            )
            r = fetchone(cur)
            if not r:
                return None

            geofence = None
            if r.get("radius_meters") is not None:
                geofence = GeofenceSpec(
                    center_latitude=_float_or_none(r.get("center_latitude")),
                    center_longitude=_float_or_none(r.get("center_longitude")),
                    radius_meters=float(r["radius_meters"]),
                    allowed_variance_meters=float(r.get("allowed_variance_meters") or 0),
                    strict_mode=bool(r.get("strict_mode")),
                )

            return Project(
                project_id=int(r["project_id"]),
                name=r["project_name"],
                geofence=geofence,
                allow_geofence_bypass=bool(r.get("allow_geofence_bypass")),
                shift_hours=_float_or_none(r.get("shift_hours")),
            )


def _float_or_none(value) -> Optional[float]:
    # DECIMAL columns come back as Decimal.
    return float(value) if value is not None else None
