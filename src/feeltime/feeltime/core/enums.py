from __future__ import annotations

from enum import Enum


class EventType(str, Enum):
    """Loại sự kiện chấm công: vào ca / tan ca."""

    IN = "in"
    OUT = "out"


class StorageBackend(str, Enum):
    """Backend lưu trữ được chọn một lần khi khởi động."""

    SQLITE = "sqlite"
    MYSQL = "mysql"
    GCS = "gcs"

    @classmethod
    def parse(cls, value: str) -> "StorageBackend":
        key = (value or "").strip().lower()
        aliases = {
            "sqlite": cls.SQLITE,
            "embedded-relational": cls.SQLITE,
            "mysql": cls.MYSQL,
            "networked-relational": cls.MYSQL,
            "gcs": cls.GCS,
            "object-storage": cls.GCS,
        }
        try:
            return aliases[key]
        except KeyError:
            raise ValueError(f"Unknown storage backend: {value!r}") from None
