"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000

DEFAULT_GEOFENCE_RADIUS_METERS = 100
DEFAULT_SUSPICIOUS_GRACE_MINUTES = 5
DEFAULT_EXPECTED_TRAVEL_MINUTES = 30
TRAVEL_TIME_TOLERANCE = 1.5

MAX_IMAGE_BYTES = 10 * 1024 * 1024
DEFAULT_LOCK_TIMEOUT_SECONDS = 10

ERROR_CODE_VERSION = 1
