"""Constants for the timetable parser and availability engine."""

# Header row index (0-based). Rows above it are title/metadata rows.
HEADER_ROW = 3

# Column indices (0-based)
COL_COURSE_CODE = 1
COL_CLASS_NAME = 4
COL_DAY = 8
COL_PERIOD = 9
COL_ROOM = 10
COL_VALID_FROM = 11
COL_VALID_TO = 12
COL_INSTRUCTOR = 13

# Day codes: 2 = Monday ... 7 = Saturday
MIN_DAY = 2
MAX_DAY = 7
INVALID = -1

DAY_NAMES = {
    2: "Monday",
    3: "Tuesday",
    4: "Wednesday",
    5: "Thursday",
    6: "Friday",
    7: "Saturday",
}

# Regex patterns
DAY_TEXT_PATTERN = r"(?:thu|day)\s*(\d)"
PERIOD_SEPARATORS = ["->", "→", "–", "—"]
BUILDING_ONLY_PATTERN = r"^[A-Z0-9]{2,10}$"
COURSE_CODE_IN_NAME_PATTERN = r"\(([A-Z0-9]+)\)"
ROOM_STRIP_PATTERN = r"[>→\s]+"

# Room cell prefixes
ONLINE_PREFIX = "LMS"
SPORT_PREFIXES = ("SAN", "SÂN")

# Sentinels
ONLINE = "ONLINE"
SPORT = "SPORT"
SPORT_ROOM = "SAN"
ROOM_UNDETERMINED = "UNDETERMINED"

# Building tokens that never map to a catalog room
NON_PHYSICAL_BUILDINGS = {ONLINE, SPORT, "KCNTT"}

# Spreadsheet serial date of 1970-01-01
SERIAL_DATE_EPOCH = 25569

# Cache
CACHE_KEY_PREFIX = "available"
