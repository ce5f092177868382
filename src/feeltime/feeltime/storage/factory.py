"""One-time backend selection.

Order of precedence:
1. ``STORAGE_BACKEND`` override (object storage, or an explicit relational engine);
2. a ``DATABASE_URL`` with a MySQL scheme selects the networked store;
3. otherwise the embedded SQLite file (parent directories are created).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from google.cloud import storage

from ..core.constants import (
    DEFAULT_GCS_DOWNLOAD_WORKERS,
    DEFAULT_GCS_PREFIX,
    DEFAULT_MYSQL_POOL_SIZE,
    DEFAULT_SQLITE_FILENAME,
)
from ..core.enums import StorageBackend
from ..core.exceptions import ConfigurationError
from ..database.connection import DBConfig, MySQLConnection, SQLiteConnection, is_mysql_url
from .gcs_store import GCSEmotionStore
from .mysql_store import MySQLEmotionStore
from .repository import EmotionStore
from .sqlite_store import SQLiteEmotionStore

logger = logging.getLogger(__name__)

DEFAULT_SQLITE_PATH = Path(__file__).resolve().parents[4] / "data" / DEFAULT_SQLITE_FILENAME


@dataclass(frozen=True)
class StorageSettings:
    backend: Optional[str] = None
    database_url: Optional[str] = None
    sqlite_path: Optional[str] = None
    gcs_bucket: Optional[str] = None
    gcs_prefix: str = DEFAULT_GCS_PREFIX
    mysql_pool_size: int = DEFAULT_MYSQL_POOL_SIZE
    gcs_download_workers: int = DEFAULT_GCS_DOWNLOAD_WORKERS

    @classmethod
    def from_settings(cls, settings: Any) -> "StorageSettings":
        """Build from a settings module (see ``config.get_settings_module``)."""
        return cls(
            backend=getattr(settings, "STORAGE_BACKEND", None) or None,
            database_url=getattr(settings, "DATABASE_URL", None) or None,
            sqlite_path=getattr(settings, "SQLITE_PATH", None) or None,
            gcs_bucket=getattr(settings, "GCS_BUCKET", None) or None,
            gcs_prefix=getattr(settings, "GCS_PREFIX", None) or DEFAULT_GCS_PREFIX,
            mysql_pool_size=int(getattr(settings, "MYSQL_POOL_SIZE", DEFAULT_MYSQL_POOL_SIZE)),
            gcs_download_workers=int(getattr(settings, "GCS_DOWNLOAD_WORKERS", DEFAULT_GCS_DOWNLOAD_WORKERS)),
        )


def resolve_backend(settings: StorageSettings) -> StorageBackend:
    if settings.backend:
        try:
            return StorageBackend.parse(settings.backend)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from None
    if is_mysql_url(settings.database_url):
        return StorageBackend.MYSQL
    return StorageBackend.SQLITE


def create_store(settings: StorageSettings, **store_kwargs) -> EmotionStore:
    backend = resolve_backend(settings)

    if backend is StorageBackend.GCS:
        if not settings.gcs_bucket:
            raise ConfigurationError("GCS_BUCKET is required when STORAGE_BACKEND=gcs")
        bucket = storage.Client().bucket(settings.gcs_bucket)
        logger.info("storage backend: gcs (bucket=%s, prefix=%s)", settings.gcs_bucket, settings.gcs_prefix)
        return GCSEmotionStore(
            bucket,
            prefix=settings.gcs_prefix,
            download_workers=settings.gcs_download_workers,
            **store_kwargs,
        )

    if backend is StorageBackend.MYSQL:
        if not is_mysql_url(settings.database_url):
            raise ConfigurationError("DATABASE_URL must be a mysql:// URL for the mysql backend")
        config = DBConfig.from_url(settings.database_url)
        logger.info(
            "storage backend: mysql (%s@%s:%s/%s, pool=%d)",
            config.user, config.host, config.port, config.database, settings.mysql_pool_size,
        )
        return MySQLEmotionStore(MySQLConnection(config, pool_size=settings.mysql_pool_size), **store_kwargs)

    path = Path(settings.sqlite_path) if settings.sqlite_path else DEFAULT_SQLITE_PATH
    logger.info("storage backend: sqlite (%s)", path)
    return SQLiteEmotionStore(SQLiteConnection(path), **store_kwargs)
