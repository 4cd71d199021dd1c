from __future__ import annotations

from enum import Enum


class SessionStatus(str, Enum):
    """Lifecycle of a work session row."""

    ONGOING = "ongoing"
    COMPLETED = "completed"


class BreakStatus(str, Enum):
    """Lifecycle of a break row."""

    ACTIVE = "active"
    COMPLETED = "completed"


class ActivityStatus(str, Enum):
    """Daily rollup status, mirrors the latest session/break transition."""

    LOGGED_OUT = "logged_out"
    LOGGED_IN = "logged_in"
    ON_BREAK = "on_break"
