from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import LocationLogType


@dataclass(frozen=True)
class LocationLogEntry:
    """Audit row for a location sample attached to an attendance or task action."""

    employee_id: int
    project_id: int
    latitude: float
    longitude: float
    accuracy_meters: Optional[float]
    inside_geofence: Optional[bool]
    distance_meters: Optional[float]
    log_type: LocationLogType
    logged_at: datetime
    task_assignment_id: Optional[int] = None
