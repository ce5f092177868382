import os


class Config:
    # Storage backend selection (resolved once at startup)
    STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "")
    DATABASE_URL = os.environ.get("DATABASE_URL", "")
    SQLITE_PATH = os.environ.get("SQLITE_PATH", "")

    # Object storage
    GCS_BUCKET = os.environ.get("GCS_BUCKET", "")
    GCS_PREFIX = os.environ.get("GCS_PREFIX", "feeltime")
    GCS_DOWNLOAD_WORKERS = int(os.environ.get("GCS_DOWNLOAD_WORKERS", "16"))

    # Networked relational
    MYSQL_POOL_SIZE = int(os.environ.get("MYSQL_POOL_SIZE", "5"))

    PORT = int(os.environ.get("PORT", "8080"))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
