from __future__ import annotations

from datetime import datetime
from typing import Any

from ..common.datetime_utils import to_sqlite_text, to_utc
from ..core.exceptions import StorageUnavailable
from ..database.base import fetchone
from ..database.bootstrap import apply_schema
from ..database.connection import SQLiteConnection
from ..database.errors import translate_sqlite_error
from .relational_store import RelationalEmotionStore
from .schema import SQLITE


class SQLiteEmotionStore(RelationalEmotionStore):
    """Embedded single-file store; the reference/development backend.

    ``created_at`` is TEXT ``YYYY-MM-DD HH:MM:SS.ffffff`` in UTC, so range
    filters and ordering work as plain string comparisons.
    """

    dialect = SQLITE
    placeholder = "?"
    # Date part only: SQLite rounds fractional seconds to milliseconds, which
    # could push 23:59:59.9999 into the next day.
    dow_expr = "CAST(strftime('%w', substr(created_at, 1, 10)) AS INTEGER)"
    # Step back six days, then forward to the next Monday: a Monday maps to itself.
    week_start_expr = "date(substr(created_at, 1, 10), '-6 days', 'weekday 1')"
    translate_error = staticmethod(translate_sqlite_error)

    def __init__(self, conn_factory: SQLiteConnection, **kwargs):
        super().__init__(conn_factory, **kwargs)
        apply_schema(conn_factory, dialect=SQLITE)

    def encode_timestamp(self, value: datetime) -> str:
        return to_sqlite_text(value)

    def decode_timestamp(self, value: Any) -> datetime:
        return to_utc(datetime.fromisoformat(str(value)))

    def _check_health(self, cur) -> None:
        cur.execute("PRAGMA quick_check")
        row = fetchone(cur)
        result = next(iter(row.values())) if row else None
        if result != "ok":
            raise StorageUnavailable(f"SQLite quick_check failed: {result}")
