"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

SECONDS_PER_DAY = 86400
DEFAULT_BREAK_REASON = "Personal"
DEFAULT_LOG_LEVEL = "INFO"
