from __future__ import annotations

import math
from dataclasses import dataclass
from math import atan2, cos, radians, sin, sqrt
from typing import Optional

from ..common.validators import require_coordinates
from ..core.constants import (
    DEFAULT_REQUIRED_GPS_ACCURACY_METERS,
    EARTH_RADIUS_METERS,
    WEAK_GPS_ACCURACY_METERS,
)
from ..core.exceptions import ConfigurationMissingError
from .model import GeofenceResult, GeofenceSpec, LocationSample


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in meters between two points in decimal degrees."""

    φ1, φ2 = radians(lat1), radians(lat2)
    Δφ = radians(lat2 - lat1)
    Δλ = radians(lng2 - lng1)

    a = sin(Δφ / 2) ** 2 + cos(φ1) * cos(φ2) * sin(Δλ / 2) ** 2
    # Rounding can push a a hair past 1.0 for antipodal points.
    a = min(1.0, max(0.0, a))
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def effective_radius(spec: GeofenceSpec) -> float:
    if spec.strict_mode:
        return float(spec.radius_meters)
    return float(spec.radius_meters) + float(spec.allowed_variance_meters or 0.0)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _check_spec(spec: Optional[GeofenceSpec]) -> GeofenceSpec:
    if spec is None:
        raise ConfigurationMissingError("Project has no geofence configured")
    if not _is_number(spec.center_latitude) or not _is_number(spec.center_longitude):
        raise ConfigurationMissingError("Project geofence has no center coordinates")
    if not _is_number(spec.radius_meters) or spec.radius_meters < 0:
        raise ConfigurationMissingError("Project geofence radius must be >= 0")
    if spec.allowed_variance_meters is not None and (
        not _is_number(spec.allowed_variance_meters) or spec.allowed_variance_meters < 0
    ):
        raise ConfigurationMissingError("Project geofence variance must be >= 0")
    return spec


def accuracy_hint(accuracy_meters: Optional[float], required_meters: float) -> Optional[str]:
    if accuracy_meters is None or accuracy_meters <= required_meters:
        return None
    if accuracy_meters > WEAK_GPS_ACCURACY_METERS:
        return "GPS signal is very weak. Move to an open area away from buildings and try again."
    if accuracy_meters > DEFAULT_REQUIRED_GPS_ACCURACY_METERS:
        return "GPS accuracy is poor. Wait for a better signal or move to a clearer location."
    return "GPS accuracy is below the required threshold. Wait for a better signal."


@dataclass(frozen=True)
class GeofenceValidator:
    """Distance and containment check against a project's circular geofence.

    The reported accuracy never widens the fence. It only drives two
    display fields: a GPS quality hint and ``within_accuracy_margin``, set
    when the fence would contain the sample if the fix were off by its
    reported accuracy. Strict-mode projects suppress the margin unless
    ``strict_mode_disables_accuracy_margin`` is turned off.
    """

    required_accuracy_meters: float = DEFAULT_REQUIRED_GPS_ACCURACY_METERS
    strict_mode_disables_accuracy_margin: bool = True

    def validate(self, sample: LocationSample, spec: Optional[GeofenceSpec]) -> GeofenceResult:
        spec = _check_spec(spec)
        lat, lng = require_coordinates(sample.latitude, sample.longitude)

        distance = haversine_distance(lat, lng, float(spec.center_latitude), float(spec.center_longitude))
        radius = effective_radius(spec)
        inside = distance <= radius

        accuracy = sample.accuracy_meters
        margin = False
        if not inside and accuracy is not None and accuracy > 0:
            if not (spec.strict_mode and self.strict_mode_disables_accuracy_margin):
                margin = distance - accuracy <= radius

        return GeofenceResult(
            distance_meters=distance,
            inside_geofence=inside,
            effective_radius=radius,
            accuracy_meters=accuracy,
            accuracy_hint=accuracy_hint(accuracy, self.required_accuracy_meters),
            within_accuracy_margin=margin,
        )


_default_validator = GeofenceValidator()


def validate(sample: LocationSample, spec: Optional[GeofenceSpec]) -> GeofenceResult:
    return _default_validator.validate(sample, spec)
