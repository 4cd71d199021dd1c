from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..core.enums import SessionStatus
from ..overtime.model import OvertimeBreakdown


@dataclass(frozen=True)
class WorkSession:
    """Domain entity: one login-to-logout work period (row of ``session_logs``)."""

    session_id: str
    user_id: str
    work_date: date
    session_number: int
    started_at: datetime
    status: SessionStatus
    ended_at: Optional[datetime] = None
    logout_date: Optional[date] = None
    break_count: int = 0
    total_break_seconds: int = 0
    total_duration_seconds: int = 0
    worked_seconds: int = 0
    regular_shift_seconds: int = 0
    early_overtime_seconds: int = 0
    late_overtime_seconds: int = 0
    undertime_seconds: int = 0
    total_overtime_seconds: int = 0

    @property
    def is_ongoing(self) -> bool:
        return self.status == SessionStatus.ONGOING

    def closed_with(self, closure: "SessionClosure") -> "WorkSession":
        """Return this session as it reads once ``closure`` has been written."""
        breakdown = closure.breakdown
        return replace(
            self,
            status=SessionStatus.COMPLETED,
            ended_at=closure.ended_at,
            logout_date=closure.logout_date,
            total_duration_seconds=closure.total_duration_seconds,
            worked_seconds=closure.worked_seconds,
            regular_shift_seconds=breakdown.regular_shift_seconds,
            early_overtime_seconds=breakdown.early_overtime_seconds,
            late_overtime_seconds=breakdown.late_overtime_seconds,
            total_overtime_seconds=breakdown.total_overtime_seconds,
            undertime_seconds=breakdown.undertime_seconds,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.session_id,
            "date": self.work_date.isoformat(),
            "session_number": self.session_number,
            "session_start_time": self.started_at.isoformat(),
            "session_end_time": self.ended_at.isoformat() if self.ended_at else None,
            "logout_date": self.logout_date.isoformat() if self.logout_date else None,
            "status": self.status.value,
            "break_count": self.break_count,
            "total_break_duration": self.total_break_seconds,
            "session_duration": self.total_duration_seconds,
            "worked": self.worked_seconds,
            "shift_hours": self.regular_shift_seconds,
            "overtime_early": self.early_overtime_seconds,
            "overtime_late": self.late_overtime_seconds,
            "total_overtime": self.total_overtime_seconds,
            "undertime": self.undertime_seconds,
        }


@dataclass(frozen=True)
class SessionClosure:
    """Figures written onto a session when it is closed."""

    ended_at: datetime
    total_duration_seconds: int
    worked_seconds: int
    breakdown: OvertimeBreakdown

    @property
    def logout_date(self) -> date:
        return self.ended_at.date()
