"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

LATE_ARRIVAL_CUTOFF = time(9, 0)
FULL_DAY_HOURS = 8
MAX_ENTRY_HOURS = 24
# free-text columns (notes, reasons, review comments) are VARCHAR(500)
NOTE_MAX_LENGTH = 500
DAYS_PER_WEEK = 7

DEFAULT_RECENT_DAYS = 7
OTP_VALID_MINUTES = 10
TEMP_PASSWORD_LENGTH = 12

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"
