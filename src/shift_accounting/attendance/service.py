from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from ..breaks.repository import BreakLedger
from ..common.datetime_utils import elapsed_seconds, now_local
from ..common.validators import clean_optional_text
from ..core.constants import DEFAULT_BREAK_REASON
from ..overtime.calculator.base import OvertimeCalculator
from ..overtime.calculator.shift_window_calculator import ShiftWindowOvertimeCalculator
from ..rollups.model import DailyRollup
from ..rollups.repository import DailyRollupRepository
from ..schedules.model import ShiftSchedule
from ..schedules.repository import ScheduleResolver
from ..sessions.model import SessionClosure, WorkSession
from ..sessions.repository import SessionLedger
from .model import AttendanceSnapshot

logger = logging.getLogger(__name__)


class AttendanceService:
    """Session/break state machine for one user at a time.

    ``now`` is sampled once per call; the ledgers enforce the one-ongoing-session
    and one-active-break rules atomically, so this class keeps no state.
    """

    def __init__(
        self,
        sessions: SessionLedger,
        breaks: BreakLedger,
        rollups: DailyRollupRepository,
        schedules: ScheduleResolver,
        *,
        calculator: OvertimeCalculator | None = None,
    ):
        self._sessions = sessions
        self._breaks = breaks
        self._rollups = rollups
        self._schedules = schedules
        self._calculator = calculator or ShiftWindowOvertimeCalculator()

    def start_session(self, user_id: str, *, now: datetime | None = None) -> str:
        now = now or now_local()
        session = self._sessions.open(user_id=user_id, work_date=now.date(), started_at=now)
        logger.info(
            "Session %s started for user %s (date=%s, #%d)",
            session.session_id, user_id, session.work_date, session.session_number,
        )
        return session.session_id

    def end_session(self, user_id: str, *, now: datetime | None = None) -> WorkSession:
        now = now or now_local()
        schedule = self._schedules.get_for_user(user_id)

        closed = self._sessions.close(
            user_id=user_id,
            ended_at=now,
            settle=lambda session: self._settle(session, ended_at=now, schedule=schedule),
        )
        logger.info(
            "Session %s ended for user %s (worked=%ss, overtime=%ss, undertime=%ss)",
            closed.session_id, user_id, closed.worked_seconds,
            closed.total_overtime_seconds, closed.undertime_seconds,
        )
        return closed

    def start_break(
        self,
        user_id: str,
        *,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        now: datetime | None = None,
    ) -> str:
        now = now or now_local()
        reason = clean_optional_text(reason, "reason", default=DEFAULT_BREAK_REASON)
        notes = clean_optional_text(notes, "notes")

        brk = self._breaks.open(user_id=user_id, started_at=now, reason=reason, notes=notes)
        logger.info("Break %s started for user %s in session %s", brk.break_id, user_id, brk.session_id)
        return brk.break_id

    def end_break(self, user_id: str, *, now: datetime | None = None) -> int:
        now = now or now_local()
        brk = self._breaks.close(user_id=user_id, ended_at=now)
        logger.info("Break %s ended for user %s (%ss)", brk.break_id, user_id, brk.duration_seconds)
        return brk.duration_seconds

    def get_status(self, user_id: str, *, today: date | None = None) -> AttendanceSnapshot:
        today = today or now_local().date()
        return self._sessions.snapshot(user_id, today)

    def get_daily_summary(self, user_id: str, *, work_date: date | None = None) -> Optional[DailyRollup]:
        work_date = work_date or now_local().date()
        return self._rollups.get_for_user_and_date(user_id, work_date)

    def _settle(
        self,
        session: WorkSession,
        *,
        ended_at: datetime,
        schedule: Optional[ShiftSchedule],
    ) -> SessionClosure:
        total = elapsed_seconds(session.started_at, ended_at)
        worked = max(0, total - session.total_break_seconds)
        breakdown = self._calculator.split(
            started_at=session.started_at,
            ended_at=ended_at,
            worked_seconds=worked,
            schedule=schedule,
        )
        return SessionClosure(
            ended_at=ended_at,
            total_duration_seconds=total,
            worked_seconds=worked,
            breakdown=breakdown,
        )
