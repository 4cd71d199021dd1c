from __future__ import annotations

from dataclasses import dataclass

from .attendance.service import AttendanceService
from .breaks.mysql_break_repository import MySQLBreakLedger
from .breaks.repository import BreakLedger
from .database.connection import DBConfig, DatabaseConnection
from .overtime.calculator.shift_window_calculator import ShiftWindowOvertimeCalculator
from .rollups.mysql_rollup_repository import MySQLDailyRollupRepository
from .rollups.repository import DailyRollupRepository
from .schedules.mysql_schedule_repository import MySQLScheduleResolver
from .schedules.repository import ScheduleResolver
from .sessions.mysql_session_repository import MySQLSessionLedger
from .sessions.repository import SessionLedger


@dataclass(frozen=True)
class Container:
    sessions_repo: SessionLedger
    breaks_repo: BreakLedger
    rollups_repo: DailyRollupRepository
    schedules_repo: ScheduleResolver

    attendance_service: AttendanceService


def build_container(*, db_config: dict) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    sessions_repo = MySQLSessionLedger(conn)
    breaks_repo = MySQLBreakLedger(conn)
    rollups_repo = MySQLDailyRollupRepository(conn)
    schedules_repo = MySQLScheduleResolver(conn)

    attendance_service = AttendanceService(
        sessions_repo,
        breaks_repo,
        rollups_repo,
        schedules_repo,
        calculator=ShiftWindowOvertimeCalculator(),
    )

    return Container(
        sessions_repo=sessions_repo,
        breaks_repo=breaks_repo,
        rollups_repo=rollups_repo,
        schedules_repo=schedules_repo,
        attendance_service=attendance_service,
    )
