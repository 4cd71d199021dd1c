from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ...schedules.model import ShiftSchedule
from ..model import OvertimeBreakdown


class OvertimeCalculator(ABC):
    """Calculator interface (Strategy Pattern for overtime/undertime rules)."""

    @abstractmethod
    def split(
        self,
        *,
        started_at: datetime,
        ended_at: datetime,
        worked_seconds: int,
        schedule: Optional[ShiftSchedule],
    ) -> OvertimeBreakdown:
        raise NotImplementedError
