from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Optional

from ..common.datetime_utils import elapsed_seconds
from ..core.enums import BreakStatus, SessionStatus
from ..core.exceptions import ConflictError, NotFoundError, PersistenceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, is_contention
from ..rollups.mysql_rollup_repository import record_break_end, record_break_start
from .model import Break
from .repository import BreakLedger

logger = logging.getLogger(__name__)

_BREAK_COLUMNS = """
    b.break_id, b.session_id, b.user_id, b.started_at, b.ended_at,
    b.duration_seconds, b.reason, b.notes, b.status
"""


def _row_to_break(r: Dict[str, Any]) -> Break:
    return Break(
        break_id=str(r["break_id"]),
        session_id=str(r["session_id"]),
        user_id=str(r["user_id"]),
        started_at=r["started_at"],
        ended_at=r.get("ended_at"),
        duration_seconds=int(r.get("duration_seconds") or 0),
        reason=r["reason"],
        notes=r.get("notes"),
        status=BreakStatus(r["status"]),
    )


def select_active_break(cur, *, user_id: str) -> Optional[Break]:
    cur.execute(
        f"""
        SELECT {_BREAK_COLUMNS}
        FROM breaks b
        WHERE b.user_id=%s AND b.status=%s
        LIMIT 1
        """,
        (user_id, BreakStatus.ACTIVE.value),
    )
    r = fetchone(cur)
    return _row_to_break(r) if r else None


def complete_active_break(cur, *, user_id: str, ended_at: datetime) -> Optional[Break]:
    """Close the user's active break on ``cur`` and credit it to its session.

    Locks the break and its session row. Returns the completed break, or None
    when the user has no active break.
    """
    cur.execute(
        f"""
        SELECT {_BREAK_COLUMNS}, s.work_date
        FROM breaks b
        JOIN session_logs s ON s.session_id = b.session_id
        WHERE b.user_id=%s AND b.status=%s
        LIMIT 1
        FOR UPDATE
        """,
        (user_id, BreakStatus.ACTIVE.value),
    )
    r = fetchone(cur)
    if not r:
        return None

    brk = _row_to_break(r)
    duration = elapsed_seconds(brk.started_at, ended_at)

    cur.execute(
        """
        UPDATE breaks
        SET ended_at=%s, duration_seconds=%s, status=%s
        WHERE break_id=%s
        """,
        (ended_at, duration, BreakStatus.COMPLETED.value, brk.break_id),
    )
    cur.execute(
        """
        UPDATE session_logs
        SET break_count=break_count+1, total_break_seconds=total_break_seconds+%s
        WHERE session_id=%s
        """,
        (duration, brk.session_id),
    )
    record_break_end(cur, user_id=user_id, work_date=r["work_date"], at=ended_at, duration_seconds=duration)

    return replace(brk, ended_at=ended_at, duration_seconds=duration, status=BreakStatus.COMPLETED)


class MySQLBreakLedger(BreakLedger):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def open(self, *, user_id: str, started_at: datetime, reason: str, notes: Optional[str] = None) -> Break:
        brk = Break(
            break_id=str(uuid.uuid4()),
            session_id="",
            user_id=user_id,
            started_at=started_at,
            status=BreakStatus.ACTIVE,
            reason=reason,
            notes=notes,
        )
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                # Locking the ongoing session row serialises break transitions per user.
                cur.execute(
                    """
                    SELECT session_id, work_date
                    FROM session_logs
                    WHERE user_id=%s AND status=%s
                    LIMIT 1
                    FOR UPDATE
                    """,
                    (user_id, SessionStatus.ONGOING.value),
                )
                session_row = fetchone(cur)
                if not session_row:
                    raise NotFoundError("No active session.")

                cur.execute(
                    """
                    SELECT break_id
                    FROM breaks
                    WHERE user_id=%s AND status=%s
                    LIMIT 1
                    FOR UPDATE
                    """,
                    (user_id, BreakStatus.ACTIVE.value),
                )
                existing = fetchone(cur)
                if existing:
                    raise ConflictError("You already have an active break.", resource_id=str(existing["break_id"]))

                brk = replace(brk, session_id=str(session_row["session_id"]))
                cur.execute(
                    """
                    INSERT INTO breaks(break_id, session_id, user_id, started_at, reason, notes, status)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (brk.break_id, brk.session_id, user_id, started_at, reason, notes, brk.status.value),
                )
                record_break_start(cur, user_id=user_id, work_date=session_row["work_date"], at=started_at)
        except PersistenceError as exc:
            if not is_contention(exc):
                raise
            winner_id = self._locked_active_id(user_id)
            logger.warning("Concurrent break start for user %s lost to %s", user_id, winner_id)
            raise ConflictError("You already have an active break.", resource_id=winner_id) from exc
        return brk

    def close(self, *, user_id: str, ended_at: datetime) -> Break:
        with db_cursor(self._conn_factory) as (_, cur):
            brk = complete_active_break(cur, user_id=user_id, ended_at=ended_at)
            if brk is None:
                raise NotFoundError("No active break found.")
            return brk

    def _locked_active_id(self, user_id: str) -> Optional[str]:
        # Blocks on the winning insert until it commits or rolls back.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT break_id
                FROM breaks
                WHERE user_id=%s AND status=%s
                LIMIT 1
                LOCK IN SHARE MODE
                """,
                (user_id, BreakStatus.ACTIVE.value),
            )
            r = fetchone(cur)
            return str(r["break_id"]) if r else None
