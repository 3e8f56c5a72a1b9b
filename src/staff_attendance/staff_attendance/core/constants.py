"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "Africa/Nairobi"
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_REPORT_DAYS = 7
DEFAULT_LIST_LIMIT = 200

DEFAULT_MAX_BREAKS_PER_DAY = 2
MAX_BREAKS_PER_DAY_LIMIT = 10

TOTAL_HOURS_PRECISION = 2

# A leave type allowing this many days has no balance limit.
UNLIMITED_LEAVE_DAYS = 999
