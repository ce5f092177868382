"""Canonical three-table schema rendered for each relational dialect.

Columns, keys and CHECK constraints are shared; only the type spelling of ids
and timestamps, the clock default and index placement differ per engine. The
object-storage backend emulates the same constraints in code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

# Child tables first: deleting in this order never trips a foreign key.
TABLES_IN_DELETE_ORDER = ("emotion_logs", "employees", "departments")

_DEPARTMENTS = """
CREATE TABLE IF NOT EXISTS departments (
    id {id_type} PRIMARY KEY,
    name VARCHAR(255) NOT NULL UNIQUE
){table_suffix}
"""

_EMPLOYEES = """
CREATE TABLE IF NOT EXISTS employees (
    id {id_type} PRIMARY KEY,
    name VARCHAR(255) NOT NULL,
    department_id {id_type} NOT NULL,
    FOREIGN KEY (department_id) REFERENCES departments(id){employees_index}
){table_suffix}
"""

_EMOTION_LOGS = """
CREATE TABLE IF NOT EXISTS emotion_logs (
    id {id_type} PRIMARY KEY,
    employee_id {id_type} NOT NULL,
    event_type VARCHAR(3) NOT NULL CHECK (event_type IN ('in', 'out')),
    emotion INTEGER NOT NULL CHECK (emotion BETWEEN 1 AND 5),
    note TEXT,
    created_at {timestamp_type} NOT NULL DEFAULT {now}{emotion_logs_index}
){table_suffix}
"""

_EMPLOYEES_INDEX = "idx_employees_department"
_EMOTION_LOGS_INDEX = "idx_emotion_logs_employee_created"


@dataclass(frozen=True)
class Dialect:
    name: str
    id_type: str
    timestamp_type: str
    now: str
    inline_indexes: bool
    table_suffix: str = ""


SQLITE = Dialect(
    name="sqlite",
    id_type="VARCHAR(64)",
    timestamp_type="TEXT",
    now="CURRENT_TIMESTAMP",
    inline_indexes=False,
)

MYSQL = Dialect(
    name="mysql",
    id_type="VARCHAR(64)",
    timestamp_type="DATETIME(6)",
    now="CURRENT_TIMESTAMP(6)",
    inline_indexes=True,
    table_suffix=" ENGINE=InnoDB DEFAULT CHARSET=utf8mb4",
)


def schema_statements(dialect: Dialect) -> List[str]:
    if dialect.inline_indexes:
        employees_index = f",\n    KEY {_EMPLOYEES_INDEX} (department_id)"
        emotion_logs_index = f",\n    KEY {_EMOTION_LOGS_INDEX} (employee_id, created_at)"
    else:
        employees_index = ""
        emotion_logs_index = ""

    params = {
        "id_type": dialect.id_type,
        "timestamp_type": dialect.timestamp_type,
        "now": dialect.now,
        "table_suffix": dialect.table_suffix,
        "employees_index": employees_index,
        "emotion_logs_index": emotion_logs_index,
    }
    statements = [tpl.format(**params).strip() for tpl in (_DEPARTMENTS, _EMPLOYEES, _EMOTION_LOGS)]

    if not dialect.inline_indexes:
        statements.append(
            f"CREATE INDEX IF NOT EXISTS {_EMOTION_LOGS_INDEX} ON emotion_logs(employee_id, created_at)"
        )
        statements.append(f"CREATE INDEX IF NOT EXISTS {_EMPLOYEES_INDEX} ON employees(department_id)")
    return statements
