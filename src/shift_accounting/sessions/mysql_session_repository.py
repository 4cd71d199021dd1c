from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..attendance.model import AttendanceSnapshot
from ..breaks.mysql_break_repository import complete_active_break, select_active_break
from ..core.enums import SessionStatus
from ..core.exceptions import ConflictError, NotFoundError, PersistenceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_contention
from ..rollups.mysql_rollup_repository import record_login, record_logout
from .model import WorkSession
from .repository import SessionLedger, SettleFn

logger = logging.getLogger(__name__)

_SESSION_COLUMNS = """
    session_id, user_id, work_date, session_number, started_at, ended_at,
    logout_date, status, break_count, total_break_seconds, total_duration_seconds,
    worked_seconds, regular_shift_seconds, early_overtime_seconds,
    late_overtime_seconds, total_overtime_seconds, undertime_seconds
"""


def _row_to_session(r: Dict[str, Any]) -> WorkSession:
    return WorkSession(
        session_id=str(r["session_id"]),
        user_id=str(r["user_id"]),
        work_date=r["work_date"],
        session_number=int(r["session_number"]),
        started_at=r["started_at"],
        ended_at=r.get("ended_at"),
        logout_date=r.get("logout_date"),
        status=SessionStatus(r["status"]),
        break_count=int(r.get("break_count") or 0),
        total_break_seconds=int(r.get("total_break_seconds") or 0),
        total_duration_seconds=int(r.get("total_duration_seconds") or 0),
        worked_seconds=int(r.get("worked_seconds") or 0),
        regular_shift_seconds=int(r.get("regular_shift_seconds") or 0),
        early_overtime_seconds=int(r.get("early_overtime_seconds") or 0),
        late_overtime_seconds=int(r.get("late_overtime_seconds") or 0),
        total_overtime_seconds=int(r.get("total_overtime_seconds") or 0),
        undertime_seconds=int(r.get("undertime_seconds") or 0),
    )


class MySQLSessionLedger(SessionLedger):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def snapshot(self, user_id: str, today: date) -> AttendanceSnapshot:
        # One transaction, so all three reads come from the same consistent view.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM session_logs
                WHERE user_id=%s AND status=%s
                ORDER BY started_at DESC
                LIMIT 1
                """,
                (user_id, SessionStatus.ONGOING.value),
            )
            r = fetchone(cur)
            session = _row_to_session(r) if r else None

            active_break = select_active_break(cur, user_id=user_id)

            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM session_logs
                WHERE user_id=%s AND work_date=%s AND status=%s
                ORDER BY session_number ASC
                """,
                (user_id, today, SessionStatus.COMPLETED.value),
            )
            completed = tuple(_row_to_session(row) for row in fetchall(cur))

        return AttendanceSnapshot(session=session, active_break=active_break, today_sessions=completed)

    def open(self, *, user_id: str, work_date: date, started_at: datetime) -> WorkSession:
        session_id = str(uuid.uuid4())
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    SELECT session_id
                    FROM session_logs
                    WHERE user_id=%s AND status=%s
                    LIMIT 1
                    FOR UPDATE
                    """,
                    (user_id, SessionStatus.ONGOING.value),
                )
                existing = fetchone(cur)
                if existing:
                    raise ConflictError("You already have an active session.", resource_id=str(existing["session_id"]))

                cur.execute(
                    """
                    SELECT COUNT(*) AS n
                    FROM session_logs
                    WHERE user_id=%s AND work_date=%s
                    FOR UPDATE
                    """,
                    (user_id, work_date),
                )
                session_number = int(fetchone(cur)["n"]) + 1

                cur.execute(
                    """
                    INSERT INTO session_logs(session_id, user_id, work_date, login_date, session_number, started_at, status)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (session_id, user_id, work_date, work_date, session_number, started_at, SessionStatus.ONGOING.value),
                )
                record_login(cur, user_id=user_id, work_date=work_date, at=started_at)
        except PersistenceError as exc:
            # Duplicate key on the "one ongoing per user" index (or a deadlock on
            # its gap lock) means a concurrent start won the race.
            if not is_contention(exc):
                raise
            winner_id = self._locked_ongoing_id(user_id)
            logger.warning("Concurrent session start for user %s lost to %s", user_id, winner_id)
            raise ConflictError("You already have an active session.", resource_id=winner_id) from exc

        return WorkSession(
            session_id=session_id,
            user_id=user_id,
            work_date=work_date,
            session_number=session_number,
            started_at=started_at,
            status=SessionStatus.ONGOING,
        )

    def close(self, *, user_id: str, ended_at: datetime, settle: SettleFn) -> WorkSession:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM session_logs
                WHERE user_id=%s AND status=%s
                ORDER BY started_at DESC
                LIMIT 1
                FOR UPDATE
                """,
                (user_id, SessionStatus.ONGOING.value),
            )
            r = fetchone(cur)
            if not r:
                raise NotFoundError("No active session found.")
            session = _row_to_session(r)

            open_break = complete_active_break(cur, user_id=user_id, ended_at=ended_at)
            if open_break is not None:
                logger.info("Closed break %s together with session %s", open_break.break_id, session.session_id)
                session = replace(
                    session,
                    break_count=session.break_count + 1,
                    total_break_seconds=session.total_break_seconds + open_break.duration_seconds,
                )

            closure = settle(session)
            breakdown = closure.breakdown
            cur.execute(
                """
                UPDATE session_logs
                SET ended_at=%s,
                    logout_date=%s,
                    status=%s,
                    total_duration_seconds=%s,
                    worked_seconds=%s,
                    regular_shift_seconds=%s,
                    early_overtime_seconds=%s,
                    late_overtime_seconds=%s,
                    total_overtime_seconds=%s,
                    undertime_seconds=%s
                WHERE session_id=%s
                """,
                (
                    closure.ended_at,
                    closure.logout_date,
                    SessionStatus.COMPLETED.value,
                    closure.total_duration_seconds,
                    closure.worked_seconds,
                    breakdown.regular_shift_seconds,
                    breakdown.early_overtime_seconds,
                    breakdown.late_overtime_seconds,
                    breakdown.total_overtime_seconds,
                    breakdown.undertime_seconds,
                    session.session_id,
                ),
            )

            closed = session.closed_with(closure)
            record_logout(cur, session=closed, at=ended_at)
            return closed


    def _locked_ongoing_id(self, user_id: str) -> Optional[str]:
        """Id of the session that won a concurrent start.

        The shared lock waits for the winner's transaction, so its row is
        visible once it commits. None when the winner rolled back instead.
        """
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT session_id
                FROM session_logs
                WHERE user_id=%s AND status=%s
                LIMIT 1
                LOCK IN SHARE MODE
                """,
                (user_id, SessionStatus.ONGOING.value),
            )
            r = fetchone(cur)
            return str(r["session_id"]) if r else None
