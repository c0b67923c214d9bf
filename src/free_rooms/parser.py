"""Timetable workbook parser.

Turns the fixed-layout timetable matrix into ScheduleInterval rows. Values
of merged cells appear only on the first row of a block, so course code,
class name, instructor and validity dates are carried forward through
MergeState until a new value appears.
"""

import io
import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

import pandas as pd

from .constants import (
    COL_CLASS_NAME,
    COL_COURSE_CODE,
    COL_DAY,
    COL_INSTRUCTOR,
    COL_PERIOD,
    COL_ROOM,
    COL_VALID_FROM,
    COL_VALID_TO,
    HEADER_ROW,
    INVALID,
)
from .exceptions import HeaderRowNotFoundError, ParseError, RoomFormatError
from .models import ParseResult, ScheduleInterval, SheetResult, SkippedRow, SkipReason
from .tokens import extract_course_code, parse_date, parse_day, parse_period_range, parse_room
from .utils import cell, dataframe_to_matrix, is_empty_row, safe_str

logger = logging.getLogger(__name__)


@dataclass
class MergeState:
    """Values carried forward from the last row that had them."""

    course_code: str = ""
    class_name: str = ""
    instructor: str = ""
    valid_from: date | None = None
    valid_to: date | None = None

    def absorb(self, row) -> None:
        """Update carried values from the non-empty cells of a row."""
        code = cell(row, COL_COURSE_CODE)
        class_name = cell(row, COL_CLASS_NAME)
        instructor = cell(row, COL_INSTRUCTOR)
        valid_from = cell(row, COL_VALID_FROM)
        valid_to = cell(row, COL_VALID_TO)

        if code is not None:
            self.course_code = safe_str(code)

        if not self.course_code and class_name is not None:
            self.course_code = extract_course_code(class_name) or ""

        if class_name is not None:
            self.class_name = safe_str(class_name)
        if instructor is not None:
            self.instructor = safe_str(instructor)
        if valid_from is not None:
            self.valid_from = parse_date(valid_from)
        if valid_to is not None:
            self.valid_to = parse_date(valid_to)


def parse_row(
    row, row_index: int, state: MergeState, sheet_name: str = ""
) -> ScheduleInterval | SkippedRow:
    """Parse one data row.

    Updates the merge state, then either builds an interval or reports why
    the row was skipped.

    Args:
        row: Raw cells of the row
        row_index: Index of the row in the sheet matrix
        state: Merge state shared by the rows of one sheet
        sheet_name: Source sheet name

    Returns:
        ScheduleInterval, or SkippedRow with the reason
    """

    def skip(reason: SkipReason, detail: str = "") -> SkippedRow:
        return SkippedRow(row_index=row_index, reason=reason, detail=detail, sheet=sheet_name)

    if is_empty_row(row):
        return skip(SkipReason.BLANK_ROW)

    state.absorb(row)

    day_raw = cell(row, COL_DAY)
    period_raw = cell(row, COL_PERIOD)
    room_raw = cell(row, COL_ROOM)

    if day_raw is None and period_raw is None and room_raw is None:
        return skip(SkipReason.LAYOUT_ROW)

    day = parse_day(day_raw)
    if day == INVALID:
        return skip(SkipReason.INVALID_DAY, safe_str(day_raw))

    period_start, period_end = parse_period_range(period_raw)
    if period_start == INVALID:
        return skip(SkipReason.INVALID_PERIOD, safe_str(period_raw))

    if room_raw is None:
        return skip(SkipReason.MISSING_ROOM)

    if not state.course_code:
        return skip(SkipReason.MISSING_COURSE_CODE)

    try:
        token = parse_room(room_raw)
    except RoomFormatError as e:
        logger.warning(f"[SKIP ROW {row_index}] {e}")
        return skip(SkipReason.INVALID_ROOM, e.raw)

    return ScheduleInterval(
        day=day,
        period_start=period_start,
        period_end=period_end,
        room=token.room,
        building=token.building,
        course_code=state.course_code,
        class_name=state.class_name or state.course_code,
        course_name=state.class_name or None,
        instructor=state.instructor or None,
        valid_from=state.valid_from,
        valid_to=state.valid_to,
        sheet=sheet_name,
        row_index=row_index,
    )


def parse_matrix(
    rows: list[list], sheet_name: str = "", header_row: int = HEADER_ROW
) -> SheetResult:
    """Parse one sheet's cell matrix.

    Rows after the header are processed top to bottom; every data row ends
    up either as an interval or as a skipped row.

    Args:
        rows: Sheet cells, one list per row
        sheet_name: Source sheet name
        header_row: Index of the header row

    Returns:
        SheetResult with intervals and skipped rows in row order

    Raises:
        HeaderRowNotFoundError: If the matrix has no header row
    """
    if len(rows) <= header_row:
        raise HeaderRowNotFoundError(len(rows), header_row, sheet_name or None)

    result = SheetResult(sheet_name=sheet_name)
    state = MergeState()

    for idx in range(header_row + 1, len(rows)):
        outcome = parse_row(rows[idx], idx, state, sheet_name)
        if isinstance(outcome, SkippedRow):
            if outcome.reason != SkipReason.BLANK_ROW:
                logger.debug(f"Skip row {idx}: {outcome.reason.value} {outcome.detail}")
            result.skipped.append(outcome)
        else:
            result.intervals.append(outcome)

    logger.info(f"Parse done: OK={result.rows_accepted}, SKIP={result.rows_skipped}")
    return result


class TimetableParser:
    """Parser for timetable workbooks in the fixed column layout."""

    def __init__(self, sheet_names: list[str] | None = None, header_row: int = HEADER_ROW):
        """Initialize parser.

        Args:
            sheet_names: Sheets to process. Defaults to every sheet in the workbook.
            header_row: Index of the header row in each sheet
        """
        self.sheet_names = sheet_names
        self.header_row = header_row

    def parse(self, file_path: str | Path) -> ParseResult:
        """Parse a timetable workbook.

        Problems are reported in ParseResult.errors instead of being raised.
        A malformed sheet invalidates the whole workbook, so on error the
        result carries no intervals.

        Args:
            file_path: Path to the Excel file

        Returns:
            ParseResult with all extracted intervals
        """
        file_path = Path(file_path)

        result = ParseResult(
            file_path=str(file_path),
            parse_date=datetime.now().isoformat(),
        )

        if not file_path.exists():
            result.errors.append(f"File not found: {file_path}")
            return result

        try:
            excel_file = pd.ExcelFile(file_path)
        except Exception as e:
            result.errors.append(f"Failed to open Excel file: {e}")
            return result

        try:
            self._parse_workbook(excel_file, result)
        except ParseError as e:
            logger.error(e)
            result.errors.append(str(e))
            result.intervals.clear()
            result.skipped.clear()

        return result

    def parse_or_raise(self, file_path: str | Path) -> ParseResult:
        """Parse a workbook, raising on the first malformed sheet.

        Raises:
            FileNotFoundError: If the file does not exist
            FormatError: If a sheet does not follow the layout
        """
        excel_file = pd.ExcelFile(Path(file_path))
        result = ParseResult(
            file_path=str(file_path),
            parse_date=datetime.now().isoformat(),
        )
        self._parse_workbook(excel_file, result)
        return result

    def parse_bytes(self, content: bytes, name: str = "upload.xlsx") -> ParseResult:
        """Parse an uploaded workbook held in memory.

        Raises:
            FormatError: If a sheet does not follow the layout
        """
        excel_file = pd.ExcelFile(io.BytesIO(content))
        result = ParseResult(file_path=name, parse_date=datetime.now().isoformat())
        self._parse_workbook(excel_file, result)
        return result

    def _parse_workbook(self, excel_file: pd.ExcelFile, result: ParseResult) -> None:
        """Parse the selected sheets in workbook order into result."""
        available_sheets = excel_file.sheet_names

        for sheet_name in self.sheet_names or available_sheets:
            if sheet_name not in available_sheets:
                result.warnings.append(
                    f"Sheet '{sheet_name}' not found. Available: {', '.join(available_sheets)}"
                )
                continue

            rows = self._read_sheet(excel_file, sheet_name)
            if not rows:
                result.warnings.append(f"Sheet '{sheet_name}' is empty")
                continue

            logger.info(f"Sheet {sheet_name}: {len(rows)} rows")
            result.add_sheet(parse_matrix(rows, sheet_name, self.header_row))

    def _read_sheet(self, excel_file: pd.ExcelFile, sheet_name: str) -> list[list]:
        # Read with no header: the layout is handled by parse_matrix
        df = pd.read_excel(excel_file, sheet_name=sheet_name, header=None)
        return dataframe_to_matrix(df)

    def validate(self, file_path: str | Path) -> dict:
        """Validate workbook structure without collecting intervals.

        Args:
            file_path: Path to the Excel file

        Returns:
            Dictionary with validation results
        """
        file_path = Path(file_path)
        validation = {
            "valid": True,
            "file_exists": False,
            "sheets_found": [],
            "sheets_missing": [],
            "errors": [],
            "warnings": [],
        }

        if not file_path.exists():
            validation["valid"] = False
            validation["errors"].append(f"File not found: {file_path}")
            return validation

        validation["file_exists"] = True

        try:
            excel_file = pd.ExcelFile(file_path)
        except Exception as e:
            validation["valid"] = False
            validation["errors"].append(f"Failed to open Excel file: {e}")
            return validation

        available_sheets = excel_file.sheet_names

        for sheet_name in self.sheet_names or available_sheets:
            if sheet_name not in available_sheets:
                validation["sheets_missing"].append(sheet_name)
                continue

            validation["sheets_found"].append(sheet_name)
            rows = self._read_sheet(excel_file, sheet_name)
            if not rows:
                validation["warnings"].append(f"Sheet '{sheet_name}' is empty")
            elif len(rows) <= self.header_row:
                validation["valid"] = False
                validation["errors"].append(
                    str(HeaderRowNotFoundError(len(rows), self.header_row, sheet_name))
                )

        if validation["sheets_missing"]:
            validation["warnings"].append(
                f"Missing sheets: {', '.join(validation['sheets_missing'])}"
            )

        if not validation["sheets_found"]:
            validation["valid"] = False
            validation["errors"].append("No sheets found in workbook")

        return validation

    def get_stats(self, result: ParseResult) -> dict:
        """Get statistics from a parse result.

        Args:
            result: ParseResult from parsing

        Returns:
            Dictionary with statistics
        """
        skip_reasons = Counter(s.reason.value for s in result.skipped)
        by_day = Counter(i.day for i in result.intervals)
        by_building = Counter(i.building for i in result.intervals)

        return {
            "file_path": result.file_path,
            "parse_date": result.parse_date,
            "sheets_processed": len(result.sheets_processed),
            "rows_accepted": result.rows_accepted,
            "rows_skipped": result.rows_skipped,
            "skip_reasons": dict(skip_reasons),
            "intervals_by_day": dict(sorted(by_day.items())),
            "intervals_by_building": dict(sorted(by_building.items())),
            "rooms_count": len({i.room_key for i in result.intervals}),
            "courses_count": len({i.course_code for i in result.intervals}),
            "errors_count": len(result.errors),
            "warnings_count": len(result.warnings),
        }
