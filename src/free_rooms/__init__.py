"""Free Rooms - timetable spreadsheet parser and free classroom finder.

This package reads timetable workbooks in a fixed column layout, recovers
one schedule interval per class row (filling merged cells forward), and
answers "which rooms of building B have N consecutive free periods on
day D between periods P1 and P2?".

Example usage:
    from free_rooms import TimetableParser, find_free_runs

    parser = TimetableParser()
    result = parser.parse("timetable.xlsx")

    print(f"Accepted rows: {result.rows_accepted}")
    print(f"Skipped rows: {result.rows_skipped}")

    busy = [i for i in result.intervals if i.room_key == "A1-301" and i.day == 3]
    print(find_free_runs(1, 10, busy, min_continuous=2))
"""

from .availability import AvailabilityEngine, find_free_runs, overlaps
from .cache import AvailabilityCache, cache_key
from .catalog import RoomCatalog
from .exceptions import (
    EmptyScheduleError,
    FormatError,
    HeaderRowNotFoundError,
    IngestError,
    ParseError,
    QueryValidationError,
    RoomFormatError,
    UnresolvedRoomError,
)
from .exporters import CSVExporter, ExcelExporter, JSONExporter, get_exporter
from .ingest import ImportSummary, ScheduleStore, build_records, import_schedule
from .models import (
    AvailabilityResponse,
    FreeRun,
    ParseResult,
    Room,
    RoomKind,
    RoomStatus,
    RoomToken,
    ScheduleInterval,
    ScheduleRecord,
    SheetResult,
    SkippedRow,
    SkipReason,
)
from .parser import MergeState, TimetableParser, parse_matrix, parse_row
from .query import AvailabilityQuery, find_available_rooms, room_status
from .tokens import extract_course_code, parse_date, parse_day, parse_period_range, parse_room

__version__ = "0.1.0"

__all__ = [
    # Parser
    "TimetableParser",
    "MergeState",
    "parse_matrix",
    "parse_row",
    # Token rules
    "parse_day",
    "parse_period_range",
    "parse_room",
    "parse_date",
    "extract_course_code",
    # Availability
    "AvailabilityEngine",
    "find_free_runs",
    "overlaps",
    # Catalog, import and query
    "RoomCatalog",
    "ScheduleStore",
    "ImportSummary",
    "build_records",
    "import_schedule",
    "AvailabilityQuery",
    "AvailabilityCache",
    "cache_key",
    "find_available_rooms",
    "room_status",
    # Models
    "ScheduleInterval",
    "SkippedRow",
    "SkipReason",
    "SheetResult",
    "ParseResult",
    "RoomKind",
    "RoomToken",
    "FreeRun",
    "Room",
    "ScheduleRecord",
    "AvailabilityResponse",
    "RoomStatus",
    # Exporters
    "JSONExporter",
    "CSVExporter",
    "ExcelExporter",
    "get_exporter",
    # Exceptions
    "ParseError",
    "FormatError",
    "HeaderRowNotFoundError",
    "RoomFormatError",
    "IngestError",
    "EmptyScheduleError",
    "UnresolvedRoomError",
    "QueryValidationError",
]
