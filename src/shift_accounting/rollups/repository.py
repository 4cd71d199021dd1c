from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from .model import DailyRollup


class DailyRollupRepository(Protocol):
    """Read side of the daily rollup.

    Writes happen inside the session/break ledger transactions that cause them.
    """

    def get_for_user_and_date(self, user_id: str, work_date: date) -> Optional[DailyRollup]:
        raise NotImplementedError
