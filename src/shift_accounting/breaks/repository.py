from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import Break


class BreakLedger(Protocol):
    def open(self, *, user_id: str, started_at: datetime, reason: str, notes: Optional[str] = None) -> Break:
        """Open a break under the user's ongoing session.

        Raises NotFoundError without an ongoing session and ConflictError
        (carrying the existing break id) when a break is already active.
        """

        raise NotImplementedError

    def close(self, *, user_id: str, ended_at: datetime) -> Break:
        """Complete the active break and credit its duration to the session.

        Raises NotFoundError when no break is active.
        """

        raise NotImplementedError
