import os

from .config import Config

STORAGE_BACKEND = Config.STORAGE_BACKEND
DATABASE_URL = Config.DATABASE_URL
# Empty means <repo>/data/dev.db
SQLITE_PATH = Config.SQLITE_PATH

GCS_BUCKET = Config.GCS_BUCKET
GCS_PREFIX = Config.GCS_PREFIX
GCS_DOWNLOAD_WORKERS = Config.GCS_DOWNLOAD_WORKERS
MYSQL_POOL_SIZE = Config.MYSQL_POOL_SIZE

PORT = Config.PORT
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()

DEBUG = True
