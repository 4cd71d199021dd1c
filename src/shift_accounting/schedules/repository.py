from __future__ import annotations

from typing import Optional, Protocol

from .model import ShiftSchedule


class ScheduleResolver(Protocol):
    def get_for_user(self, user_id: str) -> Optional[ShiftSchedule]:
        """Return the user's shift window, or None when it is not configured.

        A profile with only one of check-in/check-out set counts as unconfigured.
        """

        raise NotImplementedError
