from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ..breaks.model import Break
from ..sessions.model import WorkSession


@dataclass(frozen=True)
class AttendanceSnapshot:
    """Read model returned by the status probe."""

    session: Optional[WorkSession]
    active_break: Optional[Break]
    today_sessions: Tuple[WorkSession, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_ongoing_session": self.session is not None,
            "session": self.session.to_dict() if self.session else None,
            "has_active_break": self.active_break is not None,
            "active_break": self.active_break.to_dict() if self.active_break else None,
            "today_sessions": [s.to_dict() for s in self.today_sessions],
        }
