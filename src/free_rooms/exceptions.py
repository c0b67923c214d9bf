"""Custom exceptions for the timetable parser and room finder."""


class ParseError(Exception):
    """Base exception for parser errors."""

    pass


class FormatError(ParseError):
    """Spreadsheet content does not follow the fixed timetable layout."""

    pass


class HeaderRowNotFoundError(FormatError):
    """Sheet is too short to contain the header row."""

    def __init__(self, row_count: int, header_row: int, sheet_name: str | None = None):
        self.row_count = row_count
        self.header_row = header_row
        self.sheet_name = sheet_name
        location = f" in sheet '{sheet_name}'" if sheet_name else ""
        super().__init__(
            f"Invalid timetable format{location}: expected header at row {header_row}, "
            f"sheet has {row_count} rows"
        )


class RoomFormatError(FormatError):
    """Room cell cannot be split into room and building."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Invalid room format: '{raw}'")


class IngestError(Exception):
    """Base exception for schedule import errors."""

    pass


class EmptyScheduleError(IngestError):
    """Parsed workbook contains no schedule rows."""

    def __init__(self):
        super().__init__("No valid schedule rows found in workbook")


class UnresolvedRoomError(IngestError):
    """Parsed room does not exist in the room catalog."""

    def __init__(self, room: str, building: str, row_index: int | None = None):
        self.room = room
        self.building = building
        self.row_index = row_index
        location = f" (row {row_index})" if row_index is not None else ""
        super().__init__(
            f"Room not found: {room} (building: {building}){location}. "
            "Check the room catalog."
        )


class QueryValidationError(ValueError):
    """Availability query parameters are missing or invalid."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid '{field}': {message}")
