import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "worksite_test_db"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
LOG_FILE = None

SCHEDULED_SHIFT_HOURS = 8.0
COMPLETION_THRESHOLD_PERCENT = 100
RECONCILE_OVERTIME_AT_CLOCK_OUT = True
GEOFENCE_ON_CLOCK_OUT = False
REQUIRED_GPS_ACCURACY_METERS = 20.0
STRICT_MODE_DISABLES_ACCURACY_MARGIN = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
