import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "worksite_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = os.getenv("LOG_FILE") or None

SCHEDULED_SHIFT_HOURS = float(os.getenv("SCHEDULED_SHIFT_HOURS", "8"))
COMPLETION_THRESHOLD_PERCENT = int(os.getenv("COMPLETION_THRESHOLD_PERCENT", "100"))
RECONCILE_OVERTIME_AT_CLOCK_OUT = bool(int(os.getenv("RECONCILE_OVERTIME_AT_CLOCK_OUT", "1")))
GEOFENCE_ON_CLOCK_OUT = bool(int(os.getenv("GEOFENCE_ON_CLOCK_OUT", "0")))
REQUIRED_GPS_ACCURACY_METERS = float(os.getenv("REQUIRED_GPS_ACCURACY_METERS", "20"))
STRICT_MODE_DISABLES_ACCURACY_MARGIN = bool(int(os.getenv("STRICT_MODE_DISABLES_ACCURACY_MARGIN", "1")))

# If enabled, create_container() applies schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
