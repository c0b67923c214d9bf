"""Data models for the timetable parser and room finder."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Self

from .constants import ONLINE, ROOM_UNDETERMINED, SPORT, SPORT_ROOM


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value else None


class SkipReason(str, Enum):
    """Why a data row did not produce a schedule interval."""

    BLANK_ROW = "blank_row"
    LAYOUT_ROW = "layout_row"
    INVALID_DAY = "invalid_day"
    INVALID_PERIOD = "invalid_period"
    MISSING_ROOM = "missing_room"
    MISSING_COURSE_CODE = "missing_course_code"
    INVALID_ROOM = "invalid_room"


class RoomKind(str, Enum):
    """Shape of a parsed room cell."""

    ONLINE = "online"
    SPORT = "sport"
    BUILDING_ONLY = "building_only"
    ROOM_AND_BUILDING = "room_and_building"


@dataclass(frozen=True)
class RoomToken:
    """Result of parsing a room cell.

    Attributes:
        kind: Which rule matched the cell
        room: Room identifier (or a sentinel)
        building: Building code (or a sentinel)
    """

    kind: RoomKind
    room: str
    building: str

    @classmethod
    def online(cls) -> Self:
        return cls(RoomKind.ONLINE, ONLINE, ONLINE)

    @classmethod
    def sport(cls) -> Self:
        return cls(RoomKind.SPORT, SPORT_ROOM, SPORT)

    @classmethod
    def building_only(cls, building: str) -> Self:
        return cls(RoomKind.BUILDING_ONLY, ROOM_UNDETERMINED, building)

    @classmethod
    def room_and_building(cls, room: str, building: str) -> Self:
        return cls(RoomKind.ROOM_AND_BUILDING, room, building)


@dataclass(frozen=True)
class ScheduleInterval:
    """One class occupying a room for a closed range of periods on one day.

    Attributes:
        day: Day code, 2 (Monday) to 7 (Saturday)
        period_start: First occupied period
        period_end: Last occupied period (inclusive)
        room: Room token as written on the timetable
        building: Building code or sentinel derived from the room cell
        course_code: Course code (propagated across merged rows)
        class_name: Class identifier (propagated across merged rows)
        course_name: Descriptive course/class text
        instructor: Instructor name
        valid_from: First date the class takes place
        valid_to: Last date the class takes place
        sheet: Source sheet name
        row_index: Source row index in the sheet matrix
    """

    day: int
    period_start: int
    period_end: int
    room: str
    building: str
    course_code: str
    class_name: str
    course_name: str | None = None
    instructor: str | None = None
    valid_from: date | None = None
    valid_to: date | None = None
    sheet: str = ""
    row_index: int | None = None

    @property
    def room_key(self) -> str:
        """Catalog lookup key, e.g. 'A1-301'."""
        return f"{self.building}-{self.room}"

    def overlaps(self, start: int, end: int) -> bool:
        """Check whether this interval overlaps the closed range [start, end]."""
        return not (self.period_end < start or self.period_start > end)

    def is_effective_on(self, on: date) -> bool:
        """Check whether the effective date range contains a date.

        Open bounds (missing dates) are treated as unbounded.
        """
        if self.valid_from and on < self.valid_from:
            return False
        if self.valid_to and on > self.valid_to:
            return False
        return True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "day": self.day,
            "period_start": self.period_start,
            "period_end": self.period_end,
            "room": self.room,
            "building": self.building,
            "course_code": self.course_code,
            "class_name": self.class_name,
            "course_name": self.course_name,
            "instructor": self.instructor,
            "valid_from": _iso(self.valid_from),
            "valid_to": _iso(self.valid_to),
            "sheet": self.sheet,
            "row_index": self.row_index,
        }


@dataclass(frozen=True)
class SkippedRow:
    """A data row that was skipped during parsing."""

    row_index: int
    reason: SkipReason
    detail: str = ""
    sheet: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "sheet": self.sheet,
            "row_index": self.row_index,
            "reason": self.reason.value,
            "detail": self.detail,
        }


@dataclass
class SheetResult:
    """Intervals and skipped rows recovered from one sheet."""

    sheet_name: str
    intervals: list[ScheduleInterval] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)

    @property
    def rows_accepted(self) -> int:
        return len(self.intervals)

    @property
    def rows_skipped(self) -> int:
        return len(self.skipped)


@dataclass
class ParseResult:
    """Result of parsing a timetable workbook.

    Attributes:
        file_path: Path to the parsed file
        parse_date: Date of parsing (ISO format)
        sheets_processed: List of successfully processed sheet names
        intervals: Accepted schedule intervals in sheet and row order
        skipped: Skipped rows with their reasons
        errors: List of error messages
        warnings: List of warning messages
    """

    file_path: str
    parse_date: str
    sheets_processed: list[str] = field(default_factory=list)
    intervals: list[ScheduleInterval] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def rows_accepted(self) -> int:
        """Number of rows that produced an interval."""
        return len(self.intervals)

    @property
    def rows_skipped(self) -> int:
        """Number of data rows that were skipped."""
        return len(self.skipped)

    @property
    def ok(self) -> bool:
        """True when no workbook-level error occurred."""
        return not self.errors

    def add_sheet(self, sheet: SheetResult) -> None:
        """Append one sheet's results, preserving sheet order."""
        self.intervals.extend(sheet.intervals)
        self.skipped.extend(sheet.skipped)
        self.sheets_processed.append(sheet.sheet_name)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "file_path": self.file_path,
            "parse_date": self.parse_date,
            "sheets_processed": self.sheets_processed,
            "rows_accepted": self.rows_accepted,
            "rows_skipped": self.rows_skipped,
            "intervals": [i.to_dict() for i in self.intervals],
            "skipped": [s.to_dict() for s in self.skipped],
            "errors": self.errors,
            "warnings": self.warnings,
        }


@dataclass(frozen=True)
class FreeRun:
    """Starting periods of the qualifying free runs of one room."""

    room: str
    start_periods: tuple[int, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.start_periods)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"room": self.room, "continuous_slots": list(self.start_periods)}


@dataclass(frozen=True)
class Room:
    """A physical room from the room catalog."""

    building: str
    name: str
    is_active: bool = True

    @property
    def key(self) -> str:
        return f"{self.building}-{self.name}"


@dataclass(frozen=True)
class ScheduleRecord:
    """A parsed interval resolved against the room catalog."""

    room: Room
    interval: ScheduleInterval
    deleted: bool = False

    @property
    def day(self) -> int:
        return self.interval.day

    @property
    def period_start(self) -> int:
        return self.interval.period_start

    @property
    def period_end(self) -> int:
        return self.interval.period_end


@dataclass
class AvailabilityResponse:
    """Free rooms of one building for one query window."""

    day: int
    date: date | None
    period_range: str
    building: str
    rooms: list[FreeRun] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "day": self.day,
            "date": _iso(self.date),
            "period_range": self.period_range,
            "building": self.building,
            "rooms": [r.to_dict() for r in self.rooms],
        }


@dataclass(frozen=True)
class RoomStatus:
    """Free/occupied status of a room for a query window."""

    building: str
    room: str
    occupied_by: ScheduleInterval | None = None

    @property
    def status(self) -> str:
        return "occupied" if self.occupied_by else "free"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {
            "building": self.building,
            "room": self.room,
            "status": self.status,
        }
        if self.occupied_by:
            data.update(
                {
                    "course_code": self.occupied_by.course_code,
                    "course_name": self.occupied_by.course_name,
                    "class_name": self.occupied_by.class_name,
                    "instructor": self.occupied_by.instructor,
                    "periods": f"{self.occupied_by.period_start}-{self.occupied_by.period_end}",
                }
            )
        return data
