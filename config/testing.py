import os
import tempfile

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "custody_tracker_test"),
}

DEBUG = False
TESTING = True

UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join(tempfile.gettempdir(), "custody-tracker-test-uploads"))
PUBLIC_UPLOAD_PREFIX = "/uploads"
MAX_IMAGE_BYTES = 1024 * 1024

DEFAULT_GEOFENCE_RADIUS_METERS = 100
SUSPICIOUS_GRACE_MINUTES = 5
DEFAULT_EXPECTED_TRAVEL_MINUTES = 30
LOCK_TIMEOUT_SECONDS = 5.0

# Number of reverse proxies in front of the app whose X-Forwarded-For is trusted
TRUSTED_PROXY_COUNT = int(os.getenv("TRUSTED_PROXY_COUNT", "0"))

LOG_LEVEL = "WARNING"
LOG_DIR = None

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
