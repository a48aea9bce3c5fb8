from __future__ import annotations

from typing import Any, Optional

from .enums import ErrorKind


class DomainError(Exception):
    """Base exception for business rule violations."""

    kind: ErrorKind = ErrorKind.PRECONDITION_FAILED

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.kind.value, "message": self.message, **self.details}


class ConfigurationMissingError(DomainError):
    """Raised when a project has no usable geofence configuration."""

    kind = ErrorKind.CONFIGURATION_MISSING


class OutsideGeofenceError(DomainError):
    """Raised when a location sample falls outside the effective radius."""

    kind = ErrorKind.OUTSIDE_GEOFENCE

    def __init__(self, *, distance_meters: float, effective_radius: float, message: Optional[str] = None):
        super().__init__(
            message or f"Outside project geofence ({distance_meters:.1f}m > {effective_radius:.1f}m)",
            details={"distance_meters": distance_meters, "effective_radius": effective_radius},
        )
        self.distance_meters = distance_meters
        self.effective_radius = effective_radius


class InvalidStateTransitionError(DomainError):
    """Raised when an action is not legal for the record's current state."""

    kind = ErrorKind.INVALID_STATE_TRANSITION

    def __init__(self, *, current_state: str, action: str):
        super().__init__(
            f"Cannot {action} while {current_state}",
            details={"current_state": current_state, "action": action},
        )
        self.current_state = current_state
        self.action = action


class PreconditionFailedError(DomainError):
    kind = ErrorKind.PRECONDITION_FAILED


class ConcurrentModificationError(DomainError):
    """Raised when the stored record changed since it was read."""

    kind = ErrorKind.CONCURRENT_MODIFICATION


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class InvalidInputError(DomainError):
    """Raised when input data is malformed (ids, coordinates, quantities)."""

    kind = ErrorKind.INVALID_INPUT
