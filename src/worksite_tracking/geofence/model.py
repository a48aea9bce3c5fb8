from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class GeofenceSpec:
    """Circular boundary around a project's coordinates."""

    center_latitude: Optional[float]
    center_longitude: Optional[float]
    radius_meters: float
    allowed_variance_meters: float = 0.0
    strict_mode: bool = False


@dataclass(frozen=True)
class LocationSample:
    """Raw GPS reading from a device. ``captured_at`` is informational only."""

    latitude: float
    longitude: float
    accuracy_meters: Optional[float] = None
    captured_at: Optional[datetime] = None


@dataclass(frozen=True)
class GeofenceResult:
    distance_meters: float
    inside_geofence: bool
    effective_radius: float
    accuracy_meters: Optional[float] = None
    # Display-only: never changes inside_geofence.
    accuracy_hint: Optional[str] = None
    within_accuracy_margin: bool = False

    def to_dict(self) -> dict:
        return asdict(self)
