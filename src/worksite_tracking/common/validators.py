from __future__ import annotations

import math
from typing import Any, Optional

from ..core.exceptions import InvalidInputError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise InvalidInputError(f"{field_name} is required")
    return value.strip()


def require_id(value: Any, field_name: str) -> int:
    """Coerce an identifier to the canonical ``int`` type.

    Ids arrive as ints, numeric strings or floats from different clients;
    everything past this point compares ints only.
    """

    if isinstance(value, bool):
        raise InvalidInputError(f"{field_name} must be a positive integer")
    try:
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError(value)
            ident = int(value)
        else:
            ident = int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidInputError(f"{field_name} must be a positive integer") from None
    if ident <= 0:
        raise InvalidInputError(f"{field_name} must be a positive integer")
    return ident


def require_number(value: Any, field_name: str, *, minimum: Optional[float] = None, maximum: Optional[float] = None) -> float:
    if isinstance(value, bool):
        raise InvalidInputError(f"{field_name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{field_name} must be a number") from None
    if not math.isfinite(number):
        raise InvalidInputError(f"{field_name} must be a finite number")
    if minimum is not None and number < minimum:
        raise InvalidInputError(f"{field_name} must be >= {minimum}")
    if maximum is not None and number > maximum:
        raise InvalidInputError(f"{field_name} must be <= {maximum}")
    return number


def require_coordinates(latitude: Any, longitude: Any) -> tuple[float, float]:
    lat = require_number(latitude, "latitude", minimum=-90.0, maximum=90.0)
    lng = require_number(longitude, "longitude", minimum=-180.0, maximum=180.0)
    return lat, lng
