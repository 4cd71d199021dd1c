from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.constants import DEFAULT_BREAK_REASON
from ..core.enums import BreakStatus


@dataclass(frozen=True)
class Break:
    """Domain entity: a pause nested inside exactly one work session."""

    break_id: str
    session_id: str
    user_id: str
    started_at: datetime
    status: BreakStatus
    ended_at: Optional[datetime] = None
    duration_seconds: int = 0
    reason: str = DEFAULT_BREAK_REASON
    notes: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == BreakStatus.ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.break_id,
            "session_id": self.session_id,
            "start_time": self.started_at.isoformat(),
            "end_time": self.ended_at.isoformat() if self.ended_at else None,
            "duration": self.duration_seconds,
            "reason": self.reason,
            "notes": self.notes,
            "status": self.status.value,
        }
