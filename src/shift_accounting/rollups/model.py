from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..core.enums import ActivityStatus


@dataclass(frozen=True)
class DailyRollup:
    """Per-user, per-day totals across all sessions and breaks (``user_activity``)."""

    user_id: str
    work_date: date
    status: ActivityStatus
    login_count: int = 0
    total_break_seconds: int = 0
    session_duration_seconds: int = 0
    total_shift_seconds: int = 0
    total_early_overtime_seconds: int = 0
    total_late_overtime_seconds: int = 0
    total_overtime_seconds: int = 0
    total_undertime_seconds: int = 0
    first_logged_in: Optional[datetime] = None
    last_logged_in: Optional[datetime] = None
    last_logged_out: Optional[datetime] = None
    last_break_start: Optional[datetime] = None
    last_break_end: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        def _iso(value: Optional[datetime]) -> Optional[str]:
            return value.isoformat() if value else None

        return {
            "date": self.work_date.isoformat(),
            "status": self.status.value,
            "login_count": self.login_count,
            "total_break_time": self.total_break_seconds,
            "session_duration": self.session_duration_seconds,
            "total_shift_hours": self.total_shift_seconds,
            "total_overtime_early": self.total_early_overtime_seconds,
            "total_overtime_late": self.total_late_overtime_seconds,
            "total_overtime": self.total_overtime_seconds,
            "total_undertime": self.total_undertime_seconds,
            "session_start_time": _iso(self.first_logged_in),
            "last_logged_in": _iso(self.last_logged_in),
            "last_logged_out": _iso(self.last_logged_out),
            "last_break_start": _iso(self.last_break_start),
            "last_break_end": _iso(self.last_break_end),
        }
