"""MySQL store against a scripted cursor, plus an opt-in live test.

Set FEELTIME_TEST_MYSQL_URL (e.g. mysql://root:pw@127.0.0.1:3306/feeltime_test)
to run the contract scenario against a real server.
"""

from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from mysql.connector import errors as mysql_errors

from src.feeltime.feeltime.common.datetime_utils import day_of_week, naive_utc, week_start
from src.feeltime.feeltime.core.exceptions import ConstraintViolation, StorageUnavailable
from src.feeltime.feeltime.database.base import db_cursor, fetchone
from src.feeltime.feeltime.database.connection import DBConfig, MySQLConnection
from src.feeltime.feeltime.storage.mysql_store import MySQLEmotionStore


class FakeCursor:
    def __init__(self, factory: "FakeFactory"):
        self._factory = factory
        self._rows = []

    def execute(self, sql, params=None):
        self._factory.executed.append((" ".join(sql.split()), params))
        if self._factory.fail_with is not None:
            raise self._factory.fail_with
        self._rows = self._factory.results.pop(0) if self._factory.results else []

    def fetchall(self):
        return self._rows

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def close(self):
        pass


class FakeConn:
    def __init__(self):
        self.commits = 0
        self.rollbacks = 0

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


class FakeFactory:
    """Stands in for MySQLConnection: scripted result sets, recorded SQL."""

    def __init__(self, results=None, fail_with=None):
        self.results = list(results or [])
        self.fail_with = fail_with
        self.executed = []
        self.conn = FakeConn()

    @contextmanager
    def connection(self):
        yield self.conn

    def cursor(self, conn):
        return FakeCursor(self)


def make_store(**kwargs) -> tuple:
    factory = FakeFactory(**kwargs)
    return MySQLEmotionStore(factory, bootstrap=False), factory


def test_insert_uses_format_placeholders_and_naive_utc():
    store, factory = make_store()

    store.insert_emotion_log(
        employee_id="E1", event_type="in", emotion=4, note="", created_at="2024-01-01T10:00:00.250000+01:00"
    )

    sql, params = factory.executed[0]
    assert "VALUES (%s, %s, %s, %s, %s, %s)" in sql
    assert params[1:] == ("E1", "in", 4, None, datetime(2024, 1, 1, 9, 0, 0, 250000))
    assert factory.conn.commits == 1


def test_summary_accepts_decimal_totals():
    store, factory = make_store(
        results=[[{"event_type": "in", "cnt": 3, "total": Decimal("10")}, {"event_type": "out", "cnt": 1, "total": Decimal("2")}]]
    )

    summary = store.get_summary(employee_id="E1", from_="2024-01-01T00:00:00Z")

    assert summary.to_dict() == {"in": {"count": 3, "avg": 10 / 3}, "out": {"count": 1, "avg": 2.0}}
    sql, params = factory.executed[0]
    assert "employee_id=%s AND created_at >= %s" in sql
    assert params == ("E1", datetime(2024, 1, 1))


def test_trends_shapes_mysql_rows():
    store, _ = make_store(
        results=[
            [{"dow": 1, "event_type": "in", "cnt": 2, "total": Decimal("9")}],
            [
                {"week_start": date(2024, 1, 8), "event_type": "out", "cnt": 1, "total": Decimal("1")},
                {"week_start": date(2024, 1, 1), "event_type": "in", "cnt": 2, "total": Decimal("9")},
            ],
        ]
    )

    trends = store.get_trends(employee_id="E1")

    assert [w.dow for w in trends.weekday] == list(range(7))
    assert trends.weekday[1].clock_in.to_dict() == {"count": 2, "avg": 4.5}
    assert trends.weekday[0].clock_in.count == 0
    assert [w.week_start for w in trends.weekly] == [date(2024, 1, 1), date(2024, 1, 8)]
    assert trends.weekly[1].clock_out.avg == 1.0


def test_rows_decode_to_aware_utc():
    store, _ = make_store(
        results=[
            [
                {
                    "id": "a",
                    "employee_id": "E1",
                    "event_type": "out",
                    "emotion": 2,
                    "note": None,
                    "created_at": datetime(2024, 1, 1, 18, 0, 0, 5),
                }
            ]
        ]
    )

    (log,) = store.get_recent(employee_id="E1", limit=1)

    assert log.created_at == datetime(2024, 1, 1, 18, 0, 0, 5, tzinfo=timezone.utc)
    assert log.to_dict()["created_at"] == "2024-01-01T18:00:00.000005Z"


@pytest.mark.parametrize(
    "error",
    [
        mysql_errors.IntegrityError(msg="Duplicate entry", errno=1062),
        mysql_errors.DatabaseError(msg="Check constraint violated", errno=3819),
        mysql_errors.DatabaseError(msg="Cannot add child row", errno=1452),
    ],
)
def test_constraint_errors_are_translated(error):
    store, factory = make_store(fail_with=error)

    with pytest.raises(ConstraintViolation):
        store.insert_department(name="HR")
    assert factory.conn.rollbacks == 1


def test_connection_errors_are_storage_unavailable():
    store, _ = make_store(fail_with=mysql_errors.InterfaceError(msg="Lost connection", errno=2013))

    with pytest.raises(StorageUnavailable):
        store.health()


def test_pool_is_created_lazily():
    factory = MySQLConnection(DBConfig("db", 3306, "root", "", "feeltime"), pool_size=2)

    assert factory._pool is None


class FakePool:
    """Like MySQLConnectionPool: raises PoolError once every connection is out."""

    def __init__(self, size: int):
        self._free = size
        self._lock = threading.Lock()

    def get_connection(self):
        with self._lock:
            if self._free == 0:
                raise mysql_errors.PoolError(msg="Failed getting connection; pool exhausted")
            self._free -= 1
        return FakePooledConn(self)

    def release(self):
        with self._lock:
            self._free += 1


class FakePooledConn:
    def __init__(self, pool: FakePool):
        self._pool = pool

    def close(self):
        self._pool.release()


def test_callers_beyond_pool_size_wait_for_a_connection(monkeypatch):
    factory = MySQLConnection(DBConfig("db", 3306, "root", "", "feeltime"), pool_size=2)
    pool = FakePool(2)
    monkeypatch.setattr(factory, "_get_pool", lambda: pool)

    release = threading.Event()
    both_held = threading.Barrier(3)

    def hold():
        with factory.connection():
            both_held.wait(timeout=5)
            release.wait(timeout=5)

    holders = [threading.Thread(target=hold) for _ in range(2)]
    for t in holders:
        t.start()
    both_held.wait(timeout=5)

    acquired = threading.Event()
    errors = []

    def latecomer():
        try:
            with factory.connection():
                acquired.set()
        except Exception as exc:
            errors.append(exc)

    third = threading.Thread(target=latecomer)
    third.start()

    assert not acquired.wait(0.2)
    release.set()
    assert acquired.wait(5)
    for t in holders + [third]:
        t.join(timeout=5)
    assert errors == []


MYSQL_URL = os.environ.get("FEELTIME_TEST_MYSQL_URL")


@pytest.mark.skipif(not MYSQL_URL, reason="FEELTIME_TEST_MYSQL_URL not set")
def test_live_mysql_round_trip():
    store = MySQLEmotionStore(MySQLConnection(DBConfig.from_url(MYSQL_URL), pool_size=2))
    store.reset_all()

    store.insert_emotion_log(employee_id="E1", event_type="in", emotion=5, created_at="2024-01-07T23:59:59.999999Z")
    store.insert_emotion_log(employee_id="E1", event_type="in", emotion=1, created_at="2024-01-08T00:00:00Z")
    dept = store.insert_department(name="Ops")
    store.insert_employee(name="Ann", department_id=dept)

    trends = store.get_trends(employee_id="E1")
    assert trends.weekday[0].clock_in.to_dict() == {"count": 1, "avg": 5.0}
    assert trends.weekday[1].clock_in.to_dict() == {"count": 1, "avg": 1.0}
    assert [w.week_start for w in trends.weekly] == [date(2024, 1, 1), date(2024, 1, 8)]
    assert store.get_summary(employee_id="E1").clock_in.avg == 3.0
    assert [d.name for d in store.get_departments()] == ["Ops"]
    with pytest.raises(ConstraintViolation):
        store.insert_department(name="Ops")
    assert store.health() == {"ok": True}
    store.reset_all()


@pytest.mark.skipif(not MYSQL_URL, reason="FEELTIME_TEST_MYSQL_URL not set")
def test_live_mysql_bucketing_matches_python_functions():
    factory = MySQLConnection(DBConfig.from_url(MYSQL_URL), pool_size=1)
    MySQLEmotionStore(factory)  # creates the database if needed
    start = datetime(2023, 12, 24, 0, 0, tzinfo=timezone.utc)
    stamps = [start + timedelta(hours=7 * i, microseconds=i) for i in range(60)]
    stamps.append(datetime(2024, 1, 7, 23, 59, 59, 999999, tzinfo=timezone.utc))
    stamps.append(datetime(2024, 1, 8, 0, 0, 0, tzinfo=timezone.utc))

    sql = (
        f"SELECT {MySQLEmotionStore.dow_expr} AS dow, {MySQLEmotionStore.week_start_expr} AS week_start "
        "FROM (SELECT CAST(%s AS DATETIME(6)) AS created_at) t"
    )
    with db_cursor(factory) as (_, cur):
        for ts in stamps:
            cur.execute(sql, (naive_utc(ts),))
            row = fetchone(cur)

            assert int(row["dow"]) == day_of_week(ts), ts
            assert row["week_start"] == week_start(ts), ts
