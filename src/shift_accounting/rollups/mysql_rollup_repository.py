from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..core.enums import ActivityStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from ..sessions.model import WorkSession
from .model import DailyRollup
from .repository import DailyRollupRepository

# The record_* helpers take an open cursor: they are always called from inside
# the ledger transaction that caused the transition.


def record_login(cur, *, user_id: str, work_date: date, at: datetime) -> None:
    cur.execute(
        """
        INSERT INTO user_activity(user_id, work_date, status, first_logged_in, login_count, last_logged_in)
        VALUES(%s,%s,%s,%s,1,%s)
        ON DUPLICATE KEY UPDATE
            status=%s,
            login_count=login_count+1,
            last_logged_in=%s
        """,
        (
            user_id, work_date, ActivityStatus.LOGGED_IN.value, at, at,
            ActivityStatus.LOGGED_IN.value, at,
        ),
    )


def record_break_start(cur, *, user_id: str, work_date: date, at: datetime) -> None:
    cur.execute(
        """
        INSERT INTO user_activity(user_id, work_date, status, last_break_start)
        VALUES(%s,%s,%s,%s)
        ON DUPLICATE KEY UPDATE status=%s, last_break_start=%s
        """,
        (
            user_id, work_date, ActivityStatus.ON_BREAK.value, at,
            ActivityStatus.ON_BREAK.value, at,
        ),
    )


def record_break_end(cur, *, user_id: str, work_date: date, at: datetime, duration_seconds: int) -> None:
    cur.execute(
        """
        INSERT INTO user_activity(user_id, work_date, status, total_break_seconds, last_break_end)
        VALUES(%s,%s,%s,%s,%s)
        ON DUPLICATE KEY UPDATE
            status=%s,
            total_break_seconds=total_break_seconds+%s,
            last_break_end=%s
        """,
        (
            user_id, work_date, ActivityStatus.LOGGED_IN.value, int(duration_seconds), at,
            ActivityStatus.LOGGED_IN.value, int(duration_seconds), at,
        ),
    )


def record_logout(cur, *, session: WorkSession, at: datetime) -> None:
    """Add a closed session's figures to the rollup of its original work date."""
    totals = (
        session.total_duration_seconds,
        session.regular_shift_seconds,
        session.early_overtime_seconds,
        session.late_overtime_seconds,
        session.total_overtime_seconds,
        session.undertime_seconds,
    )
    cur.execute(
        """
        INSERT INTO user_activity(
            user_id, work_date, status, last_logged_out,
            session_duration_seconds, total_shift_seconds,
            total_early_overtime_seconds, total_late_overtime_seconds,
            total_overtime_seconds, total_undertime_seconds
        )
        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
        ON DUPLICATE KEY UPDATE
            status=%s,
            last_logged_out=%s,
            session_duration_seconds=session_duration_seconds+%s,
            total_shift_seconds=total_shift_seconds+%s,
            total_early_overtime_seconds=total_early_overtime_seconds+%s,
            total_late_overtime_seconds=total_late_overtime_seconds+%s,
            total_overtime_seconds=total_overtime_seconds+%s,
            total_undertime_seconds=total_undertime_seconds+%s
        """,
        (
            session.user_id, session.work_date, ActivityStatus.LOGGED_OUT.value, at, *totals,
            ActivityStatus.LOGGED_OUT.value, at, *totals,
        ),
    )


class MySQLDailyRollupRepository(DailyRollupRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_id: str, work_date: date) -> Optional[DailyRollup]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, work_date, status, login_count, total_break_seconds,
                       session_duration_seconds, total_shift_seconds,
                       total_early_overtime_seconds, total_late_overtime_seconds,
                       total_overtime_seconds, total_undertime_seconds,
                       first_logged_in, last_logged_in, last_logged_out,
                       last_break_start, last_break_end
                FROM user_activity
                WHERE user_id=%s AND work_date=%s
                """,
                (user_id, work_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            return DailyRollup(
                user_id=str(r["user_id"]),
                work_date=r["work_date"],
                status=ActivityStatus(r["status"]),
                login_count=int(r["login_count"]),
                total_break_seconds=int(r["total_break_seconds"]),
                session_duration_seconds=int(r["session_duration_seconds"]),
                total_shift_seconds=int(r["total_shift_seconds"]),
                total_early_overtime_seconds=int(r["total_early_overtime_seconds"]),
                total_late_overtime_seconds=int(r["total_late_overtime_seconds"]),
                total_overtime_seconds=int(r["total_overtime_seconds"]),
                total_undertime_seconds=int(r["total_undertime_seconds"]),
                first_logged_in=r.get("first_logged_in"),
                last_logged_in=r.get("last_logged_in"),
                last_logged_out=r.get("last_logged_out"),
                last_break_start=r.get("last_break_start"),
                last_break_end=r.get("last_break_end"),
            )
