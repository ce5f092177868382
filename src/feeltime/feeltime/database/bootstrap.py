from __future__ import annotations

import logging
from typing import List

from ..storage.schema import MYSQL, SQLITE, Dialect, schema_statements
from .base import db_cursor, fetchall
from .connection import MySQLConnection
from .errors import translate_mysql_error, translate_sqlite_error

logger = logging.getLogger(__name__)


def ensure_database_exists(conn_factory: MySQLConnection) -> None:
    """Create the configured database on the server if it is missing."""
    target = conn_factory.config
    try:
        conn = conn_factory.connect_server()
        try:
            cur = conn.cursor()
            cur.execute(
                f"CREATE DATABASE IF NOT EXISTS `{target.database}` "
                "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
            )
            conn.commit()
            cur.close()
        finally:
            conn.close()
    except Exception as exc:
        mapped = translate_mysql_error(exc)
        if mapped is None:
            raise
        raise mapped from exc


def apply_schema(conn_factory, *, dialect: Dialect) -> None:
    """Create the tables and indexes if missing (idempotent)."""
    translate = translate_mysql_error if dialect is MYSQL else translate_sqlite_error
    if dialect is SQLITE:
        # WAL lets readers proceed while the single writer commits.
        with conn_factory.connection() as conn:
            conn.execute("PRAGMA journal_mode=WAL")

    with db_cursor(conn_factory, translate=translate) as (_, cur):
        for stmt in schema_statements(dialect):
            cur.execute(stmt)

    logger.info("schema ready (%s, tables=%d)", dialect.name, len(list_tables(conn_factory, dialect=dialect)))


def list_tables(conn_factory, *, dialect: Dialect) -> List[str]:
    if dialect is SQLITE:
        sql = "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
    else:
        sql = (
            "SELECT table_name AS name FROM information_schema.tables "
            "WHERE table_schema = DATABASE() ORDER BY table_name"
        )
    with db_cursor(conn_factory) as (_, cur):
        cur.execute(sql)
        return [r["name"] for r in fetchall(cur)]
