"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 1
MIN_PASSWORD_LENGTH = 6

CLASS_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
CLASS_CODE_LENGTH = 6
CLASS_CODE_MAX_LENGTH = 8
CLASS_CODE_ATTEMPTS_PER_LENGTH = 20

# Attendance bands (percent).
GOOD_THRESHOLD = 75.0
WARNING_THRESHOLD = 60.0
DEFAULTER_THRESHOLD = 75.0
