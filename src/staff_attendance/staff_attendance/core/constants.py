"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# 07:00 expressed as minutes since midnight.
DEFAULT_LATE_THRESHOLD_MINUTES = 420
DEFAULT_TIME_IN = "07:00"

# Operator id used when the recording user is unknown.
SYSTEM_USER_ID = 1

LATE_ARRIVAL_CREDIT = 0.5
DEFAULT_BULK_TIMEOUT_SECONDS = 30.0
