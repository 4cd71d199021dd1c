from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional

import pytest

from shift_accounting.attendance.model import AttendanceSnapshot
from shift_accounting.attendance.service import AttendanceService
from shift_accounting.breaks.model import Break
from shift_accounting.common.datetime_utils import elapsed_seconds
from shift_accounting.container import Container
from shift_accounting.core.enums import ActivityStatus, BreakStatus, SessionStatus
from shift_accounting.core.exceptions import ConflictError, NotFoundError
from shift_accounting.rollups.model import DailyRollup
from shift_accounting.schedules.model import ShiftSchedule
from shift_accounting.sessions.model import WorkSession


class InMemoryStore:
    """Shared state for the in-memory ledgers; ``lock`` plays the DB transaction."""

    def __init__(self):
        self.lock = threading.Lock()
        self.sessions: dict[str, WorkSession] = {}
        self.breaks: dict[str, Break] = {}
        self.rollups: dict[tuple[str, date], DailyRollup] = {}
        self._next_id = 0

    def new_id(self, prefix: str) -> str:
        self._next_id += 1
        return f"{prefix}-{self._next_id}"

    def ongoing(self, user_id: str) -> Optional[WorkSession]:
        return next((s for s in self.sessions.values() if s.user_id == user_id and s.is_ongoing), None)

    def active_break(self, user_id: str) -> Optional[Break]:
        return next((b for b in self.breaks.values() if b.user_id == user_id and b.is_active), None)

    def bump_rollup(self, user_id: str, work_date: date, **changes) -> None:
        current = self.rollups.get((user_id, work_date)) or DailyRollup(
            user_id=user_id, work_date=work_date, status=ActivityStatus.LOGGED_OUT
        )
        values = {}
        for field, value in changes.items():
            if field.startswith("add_"):
                name = field[len("add_"):]
                values[name] = getattr(current, name) + value
            else:
                values[field] = value
        self.rollups[(user_id, work_date)] = replace(current, **values)

    def complete_active_break(self, user_id: str, ended_at: datetime) -> Optional[Break]:
        brk = self.active_break(user_id)
        if brk is None:
            return None
        duration = elapsed_seconds(brk.started_at, ended_at)
        done = replace(brk, ended_at=ended_at, duration_seconds=duration, status=BreakStatus.COMPLETED)
        self.breaks[brk.break_id] = done

        parent = self.sessions[brk.session_id]
        self.sessions[parent.session_id] = replace(
            parent,
            break_count=parent.break_count + 1,
            total_break_seconds=parent.total_break_seconds + duration,
        )
        self.bump_rollup(
            user_id, parent.work_date,
            status=ActivityStatus.LOGGED_IN, add_total_break_seconds=duration, last_break_end=ended_at,
        )
        return done


class InMemorySessions:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def snapshot(self, user_id, today):
        store = self._store
        with store.lock:
            completed = sorted(
                (
                    s for s in store.sessions.values()
                    if s.user_id == user_id and s.work_date == today and s.status == SessionStatus.COMPLETED
                ),
                key=lambda s: s.session_number,
            )
            return AttendanceSnapshot(
                session=store.ongoing(user_id),
                active_break=store.active_break(user_id),
                today_sessions=tuple(completed),
            )

    def open(self, *, user_id, work_date, started_at):
        store = self._store
        with store.lock:
            existing = store.ongoing(user_id)
            if existing:
                raise ConflictError("You already have an active session.", resource_id=existing.session_id)

            number = 1 + sum(1 for s in store.sessions.values() if s.user_id == user_id and s.work_date == work_date)
            session = WorkSession(
                session_id=store.new_id("session"),
                user_id=user_id,
                work_date=work_date,
                session_number=number,
                started_at=started_at,
                status=SessionStatus.ONGOING,
            )
            store.sessions[session.session_id] = session

            first = store.rollups.get((user_id, work_date)) is None
            store.bump_rollup(
                user_id, work_date,
                status=ActivityStatus.LOGGED_IN, add_login_count=1, last_logged_in=started_at,
                **({"first_logged_in": started_at} if first else {}),
            )
            return session

    def close(self, *, user_id, ended_at, settle):
        store = self._store
        with store.lock:
            session = store.ongoing(user_id)
            if session is None:
                raise NotFoundError("No active session found.")

            store.complete_active_break(user_id, ended_at)
            session = store.sessions[session.session_id]

            closed = session.closed_with(settle(session))
            store.sessions[closed.session_id] = closed
            store.bump_rollup(
                user_id, closed.work_date,
                status=ActivityStatus.LOGGED_OUT,
                last_logged_out=ended_at,
                add_session_duration_seconds=closed.total_duration_seconds,
                add_total_shift_seconds=closed.regular_shift_seconds,
                add_total_early_overtime_seconds=closed.early_overtime_seconds,
                add_total_late_overtime_seconds=closed.late_overtime_seconds,
                add_total_overtime_seconds=closed.total_overtime_seconds,
                add_total_undertime_seconds=closed.undertime_seconds,
            )
            return closed


class InMemoryBreaks:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def open(self, *, user_id, started_at, reason, notes=None):
        store = self._store
        with store.lock:
            session = store.ongoing(user_id)
            if session is None:
                raise NotFoundError("No active session.")
            existing = store.active_break(user_id)
            if existing:
                raise ConflictError("You already have an active break.", resource_id=existing.break_id)

            brk = Break(
                break_id=store.new_id("break"),
                session_id=session.session_id,
                user_id=user_id,
                started_at=started_at,
                status=BreakStatus.ACTIVE,
                reason=reason,
                notes=notes,
            )
            store.breaks[brk.break_id] = brk
            store.bump_rollup(user_id, session.work_date, status=ActivityStatus.ON_BREAK, last_break_start=started_at)
            return brk

    def close(self, *, user_id, ended_at):
        with self._store.lock:
            brk = self._store.complete_active_break(user_id, ended_at)
            if brk is None:
                raise NotFoundError("No active break found.")
            return brk


class InMemoryRollups:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def get_for_user_and_date(self, user_id, work_date):
        return self._store.rollups.get((user_id, work_date))


class InMemorySchedules:
    def __init__(self, schedules: Optional[dict[str, ShiftSchedule]] = None):
        self.schedules = dict(schedules or {})

    def get_for_user(self, user_id):
        return self.schedules.get(user_id)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 9, 0, 0)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def schedules() -> InMemorySchedules:
    return InMemorySchedules({"day-shift": ShiftSchedule(check_in_time=time(9, 0), check_out_time=time(17, 0))})


@pytest.fixture
def service(store: InMemoryStore, schedules: InMemorySchedules) -> AttendanceService:
    return AttendanceService(
        InMemorySessions(store),
        InMemoryBreaks(store),
        InMemoryRollups(store),
        schedules,
    )


@pytest.fixture
def container(store: InMemoryStore, schedules: InMemorySchedules, service: AttendanceService) -> Container:
    return Container(
        sessions_repo=InMemorySessions(store),
        breaks_repo=InMemoryBreaks(store),
        rollups_repo=InMemoryRollups(store),
        schedules_repo=schedules,
        attendance_service=service,
    )
