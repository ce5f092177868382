from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional

from ..core.exceptions import DomainError

ErrorTranslator = Callable[[BaseException], Optional[DomainError]]


@contextmanager
def db_cursor(conn_factory, *, translate: Optional[ErrorTranslator] = None):
    """Yield ``(conn, cursor)``; commit on success, roll back on error.

    Driver errors are re-raised as domain errors when ``translate`` maps them.
    """
    try:
        with conn_factory.connection() as conn:
            cur = conn_factory.cursor(conn)
            try:
                yield conn, cur
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                cur.close()
    except DomainError:
        raise
    except Exception as exc:
        mapped = translate(exc) if translate else None
        if mapped is None:
            raise
        raise mapped from exc


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return dict(row) if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return [dict(r) for r in (rows or [])]
