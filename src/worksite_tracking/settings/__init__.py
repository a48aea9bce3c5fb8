from __future__ import annotations

import importlib
import os
from dataclasses import dataclass
from types import ModuleType
from typing import Optional

from ..core.constants import (
    DEFAULT_COMPLETION_THRESHOLD_PERCENT,
    DEFAULT_REQUIRED_GPS_ACCURACY_METERS,
    DEFAULT_SCHEDULED_SHIFT_HOURS,
)


def get_settings_module() -> str:
    # Môi trường lấy từ biến APP_ENV, mặc định là 'development'
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "worksite_tracking.settings.production"

    if env in {"test", "testing"}:
        return "worksite_tracking.settings.testing"

    return "worksite_tracking.settings.development"


def load_settings_module(name: Optional[str] = None) -> ModuleType:
    return importlib.import_module(name or get_settings_module())


@dataclass(frozen=True)
class EngineSettings:
    """Business policy knobs consumed by the state-machine services."""

    scheduled_shift_hours: float = DEFAULT_SCHEDULED_SHIFT_HOURS
    completion_threshold_percent: int = DEFAULT_COMPLETION_THRESHOLD_PERCENT
    reconcile_overtime_at_clock_out: bool = True
    geofence_on_clock_out: bool = False
    required_gps_accuracy_meters: float = DEFAULT_REQUIRED_GPS_ACCURACY_METERS
    strict_mode_disables_accuracy_margin: bool = True


def load_engine_settings(settings: ModuleType) -> EngineSettings:
    defaults = EngineSettings()
    return EngineSettings(
        scheduled_shift_hours=float(getattr(settings, "SCHEDULED_SHIFT_HOURS", defaults.scheduled_shift_hours)),
        completion_threshold_percent=int(
            getattr(settings, "COMPLETION_THRESHOLD_PERCENT", defaults.completion_threshold_percent)
        ),
        reconcile_overtime_at_clock_out=bool(
            getattr(settings, "RECONCILE_OVERTIME_AT_CLOCK_OUT", defaults.reconcile_overtime_at_clock_out)
        ),
        geofence_on_clock_out=bool(getattr(settings, "GEOFENCE_ON_CLOCK_OUT", defaults.geofence_on_clock_out)),
        required_gps_accuracy_meters=float(
            getattr(settings, "REQUIRED_GPS_ACCURACY_METERS", defaults.required_gps_accuracy_meters)
        ),
        strict_mode_disables_accuracy_margin=bool(
            getattr(settings, "STRICT_MODE_DISABLES_ACCURACY_MARGIN", defaults.strict_mode_disables_accuracy_margin)
        ),
    )
