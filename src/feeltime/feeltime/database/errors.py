"""Translate driver exceptions into the domain error taxonomy."""

from __future__ import annotations

import sqlite3
from typing import Optional

from mysql.connector import errorcode
from mysql.connector import errors as mysql_errors

from ..core.exceptions import ConstraintViolation, DomainError, StorageUnavailable

_MYSQL_CONSTRAINT_ERRNOS = {
    errorcode.ER_DUP_ENTRY,
    errorcode.ER_BAD_NULL_ERROR,
    errorcode.ER_NO_REFERENCED_ROW_2,
    errorcode.ER_ROW_IS_REFERENCED_2,
    errorcode.ER_CHECK_CONSTRAINT_VIOLATED,
}


def translate_sqlite_error(exc: BaseException) -> Optional[DomainError]:
    if isinstance(exc, sqlite3.IntegrityError):
        return ConstraintViolation(str(exc))
    if isinstance(exc, sqlite3.OperationalError):
        return StorageUnavailable(str(exc))
    return None


def translate_mysql_error(exc: BaseException) -> Optional[DomainError]:
    if isinstance(exc, mysql_errors.IntegrityError):
        return ConstraintViolation(str(exc))
    if isinstance(exc, mysql_errors.Error) and getattr(exc, "errno", None) in _MYSQL_CONSTRAINT_ERRNOS:
        return ConstraintViolation(str(exc))
    if isinstance(exc, (mysql_errors.InterfaceError, mysql_errors.OperationalError, mysql_errors.PoolError)):
        return StorageUnavailable(str(exc))
    return None
