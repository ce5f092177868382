import os

from .config import Config

# Tests never touch MySQL or Cloud Storage unless explicitly asked to.
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "sqlite")
DATABASE_URL = ""
SQLITE_PATH = os.getenv("SQLITE_PATH", "")

GCS_BUCKET = Config.GCS_BUCKET
GCS_PREFIX = os.getenv("GCS_PREFIX", "feeltime-test")
GCS_DOWNLOAD_WORKERS = 4
MYSQL_POOL_SIZE = Config.MYSQL_POOL_SIZE

PORT = Config.PORT
LOG_LEVEL = "WARNING"

DEBUG = False
TESTING = True
