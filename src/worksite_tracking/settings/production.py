import os

DB_CONFIG = {
    "host": os.environ["DB_HOST"],
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.environ["DB_USER"],
    "password": os.environ["DB_PASSWORD"],
    "database": os.getenv("DB_NAME", "worksite_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "logs/worksite-tracking.log")

SCHEDULED_SHIFT_HOURS = float(os.getenv("SCHEDULED_SHIFT_HOURS", "8"))
COMPLETION_THRESHOLD_PERCENT = int(os.getenv("COMPLETION_THRESHOLD_PERCENT", "100"))
RECONCILE_OVERTIME_AT_CLOCK_OUT = bool(int(os.getenv("RECONCILE_OVERTIME_AT_CLOCK_OUT", "1")))
GEOFENCE_ON_CLOCK_OUT = bool(int(os.getenv("GEOFENCE_ON_CLOCK_OUT", "0")))
REQUIRED_GPS_ACCURACY_METERS = float(os.getenv("REQUIRED_GPS_ACCURACY_METERS", "20"))
STRICT_MODE_DISABLES_ACCURACY_MARGIN = bool(int(os.getenv("STRICT_MODE_DISABLES_ACCURACY_MARGIN", "1")))

AUTO_INIT_DB = False
