from __future__ import annotations

from dataclasses import dataclass
from datetime import time

from ..common.datetime_utils import seconds_since_midnight
from ..core.constants import SECONDS_PER_DAY


@dataclass(frozen=True)
class ShiftSchedule:
    """Expected daily work window of a user (time of day only, no date)."""

    check_in_time: time
    check_out_time: time

    @property
    def check_in_seconds(self) -> int:
        return seconds_since_midnight(self.check_in_time)

    @property
    def check_out_seconds(self) -> int:
        return seconds_since_midnight(self.check_out_time)

    @property
    def is_overnight(self) -> bool:
        return self.check_out_seconds < self.check_in_seconds

    @property
    def duration_seconds(self) -> int:
        if self.is_overnight:
            return (SECONDS_PER_DAY - self.check_in_seconds) + self.check_out_seconds
        return self.check_out_seconds - self.check_in_seconds
