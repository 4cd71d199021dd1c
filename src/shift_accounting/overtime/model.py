from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OvertimeBreakdown:
    """How the worked seconds of one session split against the shift window."""

    regular_shift_seconds: int
    early_overtime_seconds: int = 0
    late_overtime_seconds: int = 0
    undertime_seconds: int = 0

    @property
    def total_overtime_seconds(self) -> int:
        return self.early_overtime_seconds + self.late_overtime_seconds
