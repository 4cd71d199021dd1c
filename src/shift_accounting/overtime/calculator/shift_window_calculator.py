from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...common.datetime_utils import seconds_since_midnight
from ...schedules.model import ShiftSchedule
from ..model import OvertimeBreakdown
from .base import OvertimeCalculator


class ShiftWindowOvertimeCalculator(OvertimeCalculator):
    """Segment worked time against the shift window by clock time.

    Time before check-in is early overtime, time after check-out is late
    overtime, the rest is regular shift time. Undertime is the shortfall of
    regular time against the configured shift length.

    Session instants are reduced to seconds since midnight of their own day,
    so a session crossing midnight is not recognised as such. Late overtime
    is never counted for overnight shifts.
    """

    def split(
        self,
        *,
        started_at: datetime,
        ended_at: datetime,
        worked_seconds: int,
        schedule: Optional[ShiftSchedule],
    ) -> OvertimeBreakdown:
        worked = max(int(worked_seconds), 0)
        if schedule is None:
            return OvertimeBreakdown(regular_shift_seconds=worked)

        check_in = schedule.check_in_seconds
        check_out = schedule.check_out_seconds
        start_secs = seconds_since_midnight(started_at)
        end_secs = seconds_since_midnight(ended_at)

        early = 0
        if start_secs < check_in:
            early = min(worked, check_in - start_secs)

        late = 0
        if not schedule.is_overnight and end_secs > check_out:
            # Bounded by what early overtime left over so the three buckets
            # always add up to the worked seconds.
            late = min(worked - early, end_secs - check_out)

        regular = max(0, worked - early - late)

        undertime = 0
        if regular < schedule.duration_seconds:
            undertime = schedule.duration_seconds - regular

        return OvertimeBreakdown(
            regular_shift_seconds=regular,
            early_overtime_seconds=early,
            late_overtime_seconds=late,
            undertime_seconds=undertime,
        )
