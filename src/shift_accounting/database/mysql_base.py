from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.constants import SECONDS_PER_DAY
from ..core.exceptions import PersistenceError
from .connection import DatabaseConnection

# Errors raised when a concurrent transaction already claimed the same
# "ongoing"/"active" slot for a user.
_CONTENTION_ERRNOS = frozenset({errorcode.ER_DUP_ENTRY, errorcode.ER_LOCK_DEADLOCK})


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)`` inside a single transaction.

    Commits when the block exits normally, rolls back otherwise. Driver errors
    surface as :class:`PersistenceError` with the original error chained.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        raise PersistenceError(f"Could not connect to database: {exc}") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        conn.rollback()
        raise PersistenceError(str(exc)) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def is_contention(exc: PersistenceError) -> bool:
    """True when ``exc`` was caused by a duplicate key or a deadlock."""
    cause = exc.__cause__
    return isinstance(cause, mysql.connector.Error) and cause.errno in _CONTENTION_ERRNOS


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Coerce a ``user_details`` TIME column to a time of day.

    The C extension hands back ``timedelta``, the pure driver may return
    ``time`` or text; fractional seconds are dropped.
    """
    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        return _time_of_day(int(value.total_seconds()))
    if isinstance(value, str):
        return time.fromisoformat(value.strip()).replace(microsecond=0)
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def _time_of_day(seconds: int) -> time:
    hours, rest = divmod(seconds % SECONDS_PER_DAY, 3600)
    return time(hours, *divmod(rest, 60))
