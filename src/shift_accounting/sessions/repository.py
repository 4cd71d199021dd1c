from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Protocol

from ..attendance.model import AttendanceSnapshot
from .model import SessionClosure, WorkSession

# Derives the closing figures from the locked session row (break time already
# credited), so the calculation and the write share one transaction.
SettleFn = Callable[[WorkSession], SessionClosure]


class SessionLedger(Protocol):
    """Durable store of work sessions.

    Every mutating method is one atomic unit against the store, including the
    DailyRollup update it implies.
    """

    def snapshot(self, user_id: str, today: date) -> AttendanceSnapshot:
        """Ongoing session, active break and completed sessions of ``today``.

        All three are read from one consistent view of the store. Completed
        sessions are ordered by session_number ascending.
        """

        raise NotImplementedError

    def open(self, *, user_id: str, work_date: date, started_at: datetime) -> WorkSession:
        """Insert an ongoing session numbered after the user's sessions of ``work_date``.

        Raises ConflictError (carrying the existing session id) when the user
        already has an ongoing session.
        """

        raise NotImplementedError

    def close(self, *, user_id: str, ended_at: datetime, settle: SettleFn) -> WorkSession:
        """Close the user's ongoing session.

        A break still active is closed at ``ended_at`` and credited to the
        session before ``settle`` runs. Raises NotFoundError when nothing is
        ongoing.
        """

        raise NotImplementedError
