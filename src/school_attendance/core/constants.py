"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_MARK_WORKERS = 8
HALF_DAY_WEIGHT = 0.5
PERCENTAGE_FORMAT = "{:.2f}"
API_PREFIX = "/api/attendance"
