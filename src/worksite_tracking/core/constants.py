"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000

DEFAULT_SCHEDULED_SHIFT_HOURS = 8.0
DEFAULT_COMPLETION_THRESHOLD_PERCENT = 100
DEFAULT_REQUIRED_GPS_ACCURACY_METERS = 20.0
WEAK_GPS_ACCURACY_METERS = 50.0
DEFAULT_HISTORY_LIMIT = 30
MAX_HISTORY_LIMIT = 200
DEFAULT_PENDING_LIMIT = 500
