from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from ..common.datetime_utils import coerce_timestamp, now_utc, parse_iso_date
from ..common.ids import new_id
from ..core.constants import DEFAULT_RECENT_LIMIT
from ..core.enums import EventType
from ..database.base import ErrorTranslator, db_cursor, fetchall
from .aggregation import TypeBuckets, summary_from, weekday_from, weekly_from
from .model import Department, EmotionLog, Summary, Trends
from .repository import Bound, EmotionStore
from .schema import TABLES_IN_DELETE_ORDER, Dialect

logger = logging.getLogger(__name__)

_LOG_COLUMNS = "{a}id, {a}employee_id, {a}event_type, {a}emotion, {a}note, {a}created_at"


class RelationalEmotionStore(EmotionStore):
    """SQL implementation shared by the SQLite and MySQL stores.

    Subclasses only supply the placeholder, the day-of-week and week-start
    expressions, timestamp encoding and the health probe. Aggregates select
    COUNT/SUM and derive the mean in Python so every backend agrees exactly.
    """

    dialect: Dialect
    placeholder: str = "?"
    dow_expr: str = ""
    week_start_expr: str = ""
    translate_error: ErrorTranslator

    def __init__(self, conn_factory, *, clock: Callable[[], datetime] = now_utc):
        self._conn_factory = conn_factory
        self._clock = clock

    # --- dialect hooks -------------------------------------------------

    def encode_timestamp(self, value: datetime) -> Any:
        raise NotImplementedError

    def decode_timestamp(self, value: Any) -> datetime:
        raise NotImplementedError

    def _check_health(self, cur) -> None:
        raise NotImplementedError

    # --- helpers -------------------------------------------------------

    def _cursor(self):
        return db_cursor(self._conn_factory, translate=self.translate_error)

    def _where(
        self, key_column: str, key: str, from_: Bound, to: Bound, *, alias: str = ""
    ) -> Tuple[str, List[Any]]:
        p = self.placeholder
        clauses = [f"{key_column}={p}"]
        params: List[Any] = [key]

        start = coerce_timestamp(from_)
        end = coerce_timestamp(to)
        if start is not None:
            clauses.append(f"{alias}created_at >= {p}")
            params.append(self.encode_timestamp(start))
        if end is not None:
            clauses.append(f"{alias}created_at <= {p}")
            params.append(self.encode_timestamp(end))
        return " AND ".join(clauses), params

    def _to_log(self, r: Dict[str, Any]) -> EmotionLog:
        return EmotionLog(
            id=str(r["id"]),
            employee_id=str(r["employee_id"]),
            event_type=EventType(r["event_type"]),
            emotion=int(r["emotion"]),
            note=r.get("note"),
            created_at=self.decode_timestamp(r["created_at"]),
        )

    @staticmethod
    def _to_date(value: Union[str, date, datetime]) -> date:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        return parse_iso_date(str(value))

    # --- contract ------------------------------------------------------

    def reset_all(self) -> None:
        with self._cursor() as (_, cur):
            for table in TABLES_IN_DELETE_ORDER:
                cur.execute(f"DELETE FROM {table}")
        logger.info("%s store reset", self.dialect.name)

    def insert_department(self, *, name: str) -> str:
        p = self.placeholder
        dept_id = new_id()
        with self._cursor() as (_, cur):
            cur.execute(f"INSERT INTO departments (id, name) VALUES ({p}, {p})", (dept_id, name))
        return dept_id

    def insert_employee(self, *, name: str, department_id: str) -> str:
        p = self.placeholder
        employee_id = new_id()
        with self._cursor() as (_, cur):
            cur.execute(
                f"INSERT INTO employees (id, name, department_id) VALUES ({p}, {p}, {p})",
                (employee_id, name, department_id),
            )
        return employee_id

    def health(self) -> Dict[str, bool]:
        with self._cursor() as (_, cur):
            self._check_health(cur)
        return {"ok": True}

    def insert_emotion_log(
        self,
        *,
        employee_id: str,
        event_type: Union[EventType, str],
        emotion: int,
        note: Optional[str] = None,
        created_at: Bound = None,
    ) -> str:
        p = self.placeholder
        log_id = new_id()
        stamp = coerce_timestamp(created_at) or self._clock()
        kind = event_type.value if isinstance(event_type, EventType) else event_type

        with self._cursor() as (_, cur):
            cur.execute(
                f"""
                INSERT INTO emotion_logs (id, employee_id, event_type, emotion, note, created_at)
                VALUES ({p}, {p}, {p}, {p}, {p}, {p})
                """,
                (log_id, employee_id, kind, emotion, note or None, self.encode_timestamp(stamp)),
            )
        return log_id

    def get_summary(self, *, employee_id: str, from_: Bound = None, to: Bound = None) -> Summary:
        where, params = self._where("employee_id", employee_id, from_, to)
        with self._cursor() as (_, cur):
            cur.execute(
                f"""
                SELECT event_type, COUNT(*) AS cnt, SUM(emotion) AS total
                FROM emotion_logs
                WHERE {where}
                GROUP BY event_type
                ORDER BY event_type
                """,
                tuple(params),
            )
            rows = fetchall(cur)

        buckets = TypeBuckets()
        for r in rows:
            buckets.add_totals(None, r["event_type"], r["cnt"], r["total"])
        return summary_from(buckets)

    def get_recent(self, *, employee_id: str, limit: int = DEFAULT_RECENT_LIMIT) -> Sequence[EmotionLog]:
        p = self.placeholder
        with self._cursor() as (_, cur):
            cur.execute(
                f"""
                SELECT {_LOG_COLUMNS.format(a="")}
                FROM emotion_logs
                WHERE employee_id={p}
                ORDER BY created_at DESC, id DESC
                LIMIT {p}
                """,
                (employee_id, int(limit)),
            )
            return [self._to_log(r) for r in fetchall(cur)]

    def get_logs_range(self, *, employee_id: str, from_: Bound = None, to: Bound = None) -> Sequence[EmotionLog]:
        where, params = self._where("employee_id", employee_id, from_, to)
        with self._cursor() as (_, cur):
            cur.execute(
                f"""
                SELECT {_LOG_COLUMNS.format(a="")}
                FROM emotion_logs
                WHERE {where}
                ORDER BY created_at ASC, id ASC
                """,
                tuple(params),
            )
            return [self._to_log(r) for r in fetchall(cur)]

    def get_departments(self) -> Sequence[Department]:
        with self._cursor() as (_, cur):
            cur.execute("SELECT id, name FROM departments ORDER BY name, id")
            return [Department(id=str(r["id"]), name=r["name"]) for r in fetchall(cur)]

    def get_logs_range_by_department(
        self, *, department_id: str, from_: Bound = None, to: Bound = None
    ) -> Sequence[EmotionLog]:
        where, params = self._where("e.department_id", department_id, from_, to, alias="l.")
        with self._cursor() as (_, cur):
            cur.execute(
                f"""
                SELECT {_LOG_COLUMNS.format(a="l.")}
                FROM emotion_logs l
                JOIN employees e ON e.id = l.employee_id
                WHERE {where}
                ORDER BY l.created_at ASC, l.id ASC
                """,
                tuple(params),
            )
            return [self._to_log(r) for r in fetchall(cur)]

    def get_trends(self, *, employee_id: str, from_: Bound = None, to: Bound = None) -> Trends:
        where, params = self._where("employee_id", employee_id, from_, to)
        with self._cursor() as (_, cur):
            cur.execute(
                f"""
                SELECT {self.dow_expr} AS dow, event_type, COUNT(*) AS cnt, SUM(emotion) AS total
                FROM emotion_logs
                WHERE {where}
                GROUP BY dow, event_type
                ORDER BY dow
                """,
                tuple(params),
            )
            weekday_rows = fetchall(cur)

            cur.execute(
                f"""
                SELECT {self.week_start_expr} AS week_start, event_type, COUNT(*) AS cnt, SUM(emotion) AS total
                FROM emotion_logs
                WHERE {where}
                GROUP BY week_start, event_type
                ORDER BY week_start
                """,
                tuple(params),
            )
            weekly_rows = fetchall(cur)

        by_dow = TypeBuckets()
        for r in weekday_rows:
            by_dow.add_totals(int(r["dow"]), r["event_type"], r["cnt"], r["total"])

        by_week = TypeBuckets()
        for r in weekly_rows:
            by_week.add_totals(self._to_date(r["week_start"]), r["event_type"], r["cnt"], r["total"])

        return Trends(weekday=weekday_from(by_dow), weekly=weekly_from(by_week))
