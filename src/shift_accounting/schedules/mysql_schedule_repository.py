from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import ShiftSchedule
from .repository import ScheduleResolver


class MySQLScheduleResolver(ScheduleResolver):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user(self, user_id: str) -> Optional[ShiftSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT check_in_time, check_out_time
                FROM user_details
                WHERE user_id=%s
                """,
                (user_id,),
            )
            r = fetchone(cur)
            if not r:
                return None

            check_in = normalize_mysql_time(r.get("check_in_time"))
            check_out = normalize_mysql_time(r.get("check_out_time"))
            if check_in is None or check_out is None:
                return None
            return ShiftSchedule(check_in_time=check_in, check_out_time=check_out)
