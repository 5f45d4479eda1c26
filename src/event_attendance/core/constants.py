"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

ACCESS_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
ACCESS_CODE_LENGTH = 8
MAX_ACCESS_CODE_ATTEMPTS = 5

DEFAULT_SWEEP_INTERVAL_SECONDS = 60
DEFAULT_EXPORT_MAX_AGE_HOURS = 24
DEFAULT_TOKEN_TTL_HOURS = 24

MAX_NAME_LENGTH = 100
MAX_ACCESS_CODE_INPUT_LENGTH = 20
MIN_PASSWORD_LENGTH = 6

EXPORT_HEADERS = ("Event Name", "Participant Name", "Participant Email", "Confirmed At")
EXPORT_COLUMN_WIDTHS = (30, 25, 30, 20)
EXPORT_SHEET_NAME = "Attendance"
MISSING_VALUE = "N/A"
