from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LocationLogType
from ..geofence.model import GeofenceResult, LocationSample
from .model import LocationLogEntry

logger = logging.getLogger(__name__)


class LocationLogRepository(Protocol):
    def append(self, entry: LocationLogEntry) -> int:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, limit: int = 100) -> Sequence[LocationLogEntry]:
        raise NotImplementedError


def record_location(
    logs: Optional[LocationLogRepository],
    *,
    employee_id: int,
    project_id: int,
    sample: Optional[LocationSample],
    result: Optional[GeofenceResult],
    log_type: LocationLogType,
    logged_at: datetime,
    task_assignment_id: Optional[int] = None,
) -> None:
    """Append an audit entry; failures are logged and never fail the caller's transition."""

    if logs is None or sample is None:
        return
    entry = LocationLogEntry(
        employee_id=employee_id,
        project_id=project_id,
        latitude=sample.latitude,
        longitude=sample.longitude,
        accuracy_meters=sample.accuracy_meters,
        inside_geofence=result.inside_geofence if result else None,
        distance_meters=result.distance_meters if result else None,
        log_type=log_type,
        logged_at=logged_at,
        task_assignment_id=task_assignment_id,
    )
    try:
        logs.append(entry)
    except Exception:
        logger.exception("Failed to write %s location log for employee %s", log_type.value, employee_id)
