from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..geofence.model import GeofenceSpec


@dataclass(frozen=True)
class Project:
    """Công trình: vị trí geofence và chính sách chấm công."""

    project_id: int
    name: str
    geofence: Optional[GeofenceSpec] = None
    # When set, geofence-gated attendance actions proceed without a passing check.
    allow_geofence_bypass: bool = False
    # Overrides the engine's scheduled shift length for this site.
    shift_hours: Optional[float] = None
