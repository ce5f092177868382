from __future__ import annotations

from datetime import datetime
from typing import Any

from ..common.datetime_utils import naive_utc, parse_iso_datetime, to_utc
from ..database.base import fetchone
from ..database.bootstrap import apply_schema, ensure_database_exists
from ..database.connection import MySQLConnection
from ..database.errors import translate_mysql_error
from .relational_store import RelationalEmotionStore
from .schema import MYSQL


class MySQLEmotionStore(RelationalEmotionStore):
    """Networked store over a bounded connection pool.

    Same SQL as the SQLite store apart from ``%s`` placeholders and the
    MySQL spelling of day-of-week (``DAYOFWEEK`` is 1=Sunday) and week start
    (``WEEKDAY`` is 0=Monday). ``created_at`` is ``DATETIME(6)`` holding UTC.
    """

    dialect = MYSQL
    placeholder = "%s"
    dow_expr = "(DAYOFWEEK(created_at) - 1)"
    week_start_expr = "DATE(DATE_SUB(created_at, INTERVAL WEEKDAY(created_at) DAY))"
    translate_error = staticmethod(translate_mysql_error)

    def __init__(self, conn_factory: MySQLConnection, *, bootstrap: bool = True, **kwargs):
        super().__init__(conn_factory, **kwargs)
        if bootstrap:
            ensure_database_exists(conn_factory)
            apply_schema(conn_factory, dialect=MYSQL)

    def encode_timestamp(self, value: datetime) -> datetime:
        return naive_utc(value)

    def decode_timestamp(self, value: Any) -> datetime:
        if isinstance(value, datetime):
            return to_utc(value)
        return parse_iso_datetime(str(value))

    def _check_health(self, cur) -> None:
        cur.execute("SELECT 1 AS ok")
        fetchone(cur)
