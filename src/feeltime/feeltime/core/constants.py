"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MIN_EMOTION = 1
MAX_EMOTION = 5

DEFAULT_RECENT_LIMIT = 10
MAX_RECENT_LIMIT = 100

EMPLOYEE_ID_MAX_LENGTH = 64
NOTE_MAX_LENGTH = 1000

DEFAULT_SQLITE_FILENAME = "dev.db"
DEFAULT_MYSQL_PORT = 3306
DEFAULT_MYSQL_POOL_SIZE = 5

DEFAULT_GCS_PREFIX = "feeltime"
DEFAULT_GCS_DOWNLOAD_WORKERS = 16
