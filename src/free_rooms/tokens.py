"""Cell-level token rules for timetable rows.

Each function takes one raw cell (number, text, date or None) and returns a
canonical value:

- parse_day: day code 2..7, or INVALID
- parse_period_range: (start, end), or (INVALID, INVALID)
- parse_room: RoomToken, raising RoomFormatError for unrecognized shapes
- parse_date: date, or None
- extract_course_code: code embedded in a class name, or None
"""

import re
from datetime import date, datetime, timedelta

from .constants import (
    BUILDING_ONLY_PATTERN,
    COURSE_CODE_IN_NAME_PATTERN,
    DAY_TEXT_PATTERN,
    INVALID,
    MAX_DAY,
    MIN_DAY,
    ONLINE_PREFIX,
    SERIAL_DATE_EPOCH,
    SPORT_PREFIXES,
)
from .exceptions import RoomFormatError
from .models import RoomToken
from .normalization import normalize_day_text, normalize_period_text, normalize_room_text
from .utils import as_whole_number, is_blank, is_date_like, safe_str

UNIX_EPOCH = datetime(1970, 1, 1)
SECONDS_PER_DAY = 86400


def _valid_day(day: int) -> bool:
    return MIN_DAY <= day <= MAX_DAY


def parse_day(value) -> int:
    """Parse a day cell into a day code.

    Accepts 2..7 as a number or a single digit, and textual forms such as
    'Thứ 3' or 'Day 3' (diacritics and case are ignored).

    Args:
        value: Raw day cell

    Returns:
        Day code in [2, 7], or INVALID
    """
    number = as_whole_number(value)
    if number is not None and _valid_day(number):
        return number

    text = safe_str(value)
    if re.fullmatch(r"[2-7]", text):
        return int(text)

    match = re.search(DAY_TEXT_PATTERN, normalize_day_text(text))
    if match and _valid_day(int(match.group(1))):
        return int(match.group(1))

    return INVALID


def parse_period_range(value) -> tuple[int, int]:
    """Parse a period cell such as '4-6', '4->6', '4→6', '4–6' or '4'.

    A single number means a one-period class. Only the first two
    dash-separated tokens are read.

    Args:
        value: Raw period cell

    Returns:
        (period_start, period_end), or (INVALID, INVALID)
    """
    invalid = (INVALID, INVALID)

    number = as_whole_number(value)
    if number is not None:
        return (number, number) if number >= 1 else invalid

    parts = normalize_period_text(value).split("-")
    if not parts[0].isdigit() or int(parts[0]) < 1:
        return invalid

    start = int(parts[0])
    end = int(parts[1]) if len(parts) > 1 and parts[1].isdigit() else start
    if end < start:
        return invalid
    return start, end


def _starts_with_letter(text: str) -> bool:
    return bool(text) and text[0].isalpha()


def _starts_with_digit(text: str) -> bool:
    return bool(text) and text[0].isdigit()


def parse_room(value) -> RoomToken:
    """Parse a room cell into a room/building token.

    Rules are applied in order, first match wins:
    1. LMS... -> online class
    2. SAN.../SÂN... -> sports ground
    3. 2-10 alphanumerics without a dash -> building code, room undetermined
    4. exactly two dash-separated parts -> room and building

    For rule 4 a leading part that starts with a letter followed by a part
    that starts with a digit ('A1-301') is read as building-room; any other
    pair ('301-A1', '302A-B2') is read as room-building.

    Args:
        value: Raw room cell

    Returns:
        RoomToken

    Raises:
        RoomFormatError: If the cell matches none of the rules
    """
    raw = safe_str(value)
    text = normalize_room_text(raw)
    if not text:
        raise RoomFormatError(raw)

    if text.startswith(ONLINE_PREFIX):
        return RoomToken.online()

    if text.startswith(SPORT_PREFIXES):
        return RoomToken.sport()

    if re.fullmatch(BUILDING_ONLY_PATTERN, text):
        return RoomToken.building_only(text)

    parts = text.split("-")
    if len(parts) != 2 or not all(parts):
        raise RoomFormatError(raw)

    first, second = parts
    if _starts_with_letter(first) and _starts_with_digit(second):
        return RoomToken.room_and_building(room=second, building=first)
    return RoomToken.room_and_building(room=first, building=second)


def _from_serial(serial: float) -> date | None:
    try:
        seconds = round((serial - SERIAL_DATE_EPOCH) * SECONDS_PER_DAY)
        moment = UNIX_EPOCH + timedelta(seconds=seconds)
    except OverflowError:
        return None
    return moment.date()


def _from_day_month_year(text: str) -> date | None:
    parts = [p.strip() for p in text.split("/")]
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None

    day, month, year = (int(p) for p in parts)
    if len(parts[2]) <= 2:
        year += 2000
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(value) -> date | None:
    """Parse a valid-from/valid-to cell.

    Numbers are spreadsheet serial dates; text with '/' is read as
    day/month/year with a 2-digit year in the 2000s. Cells that a reader
    already converted to dates are passed through.

    Args:
        value: Raw date cell

    Returns:
        Calendar date, or None when the cell holds no recognizable date
    """
    if is_blank(value):
        return None

    if is_date_like(value):
        return value.date() if isinstance(value, datetime) else value

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _from_serial(float(value))

    if isinstance(value, str) and "/" in value:
        return _from_day_month_year(value)

    return None


def extract_course_code(text) -> str | None:
    """Recover a course code written in parentheses, e.g. 'Networks (CS101)'."""
    match = re.search(COURSE_CODE_IN_NAME_PATTERN, safe_str(text), re.IGNORECASE)
    return match.group(1) if match else None
