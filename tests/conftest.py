"""Test fixtures for timetable parser and room finder tests."""

from datetime import date

import pandas as pd
import pytest

from free_rooms.catalog import RoomCatalog
from free_rooms.constants import (
    COL_CLASS_NAME,
    COL_COURSE_CODE,
    COL_DAY,
    COL_INSTRUCTOR,
    COL_PERIOD,
    COL_ROOM,
    COL_VALID_FROM,
    COL_VALID_TO,
)
from free_rooms.models import Room, ScheduleInterval

ROW_WIDTH = 14

HEADER = [
    "No",
    "Course code",
    "Credits",
    "Type",
    "Class",
    "Students",
    "Weeks",
    "Faculty",
    "Day",
    "Periods",
    "Room",
    "From",
    "To",
    "Instructor",
]


def _make_row(
    code=None,
    class_name=None,
    day=None,
    period=None,
    room=None,
    valid_from=None,
    valid_to=None,
    instructor=None,
    note=None,
) -> list:
    """Build one timetable row in the fixed column layout."""
    row = [None] * ROW_WIDTH
    row[0] = note
    row[COL_COURSE_CODE] = code
    row[COL_CLASS_NAME] = class_name
    row[COL_DAY] = day
    row[COL_PERIOD] = period
    row[COL_ROOM] = room
    row[COL_VALID_FROM] = valid_from
    row[COL_VALID_TO] = valid_to
    row[COL_INSTRUCTOR] = instructor
    return row


def _title_rows() -> list[list]:
    return [
        _make_row(note="UNIVERSITY TIMETABLE"),
        _make_row(note="Semester 2, 2024-2025"),
        _make_row(note="Faculty of Information Technology"),
        list(HEADER),
    ]


@pytest.fixture
def make_row():
    """Factory for rows in the fixed column layout."""
    return _make_row


@pytest.fixture
def title_rows():
    """Three title rows followed by the header row."""
    return _title_rows()


@pytest.fixture
def sample_matrix():
    """Sheet matrix mixing good rows, merged rows and every kind of skipped row."""
    return _title_rows() + [
        # 4: complete row
        _make_row(
            code="CS101",
            class_name="Programming (CS101)",
            day=2,
            period="4->6",
            room="A1-301",
            valid_from=45658,
            valid_to="31/05/25",
            instructor="Dr. Nguyen A",
        ),
        # 5: merged row, inherits course, class, instructor and dates
        _make_row(day="Thứ 3", period="7-9", room="302-A1"),
        # 6: blank
        [None] * ROW_WIDTH,
        # 7: online class
        _make_row(code="MATH202", class_name="Calculus", day=4, period=1, room="LMS-ONLINE"),
        # 8: layout row
        _make_row(note="Afternoon session"),
        # 9: day out of range
        _make_row(code="PHY1", day=9, period="1-2", room="A1-301"),
        # 10: unreadable periods
        _make_row(code="PHY1", day=5, period="abc", room="A1-301"),
        # 11: no room
        _make_row(code="PHY1", day=5, period="1-2"),
        # 12: room with too many parts
        _make_row(code="PHY1", day=6, period="2-3", room="A1-301-X"),
    ]


@pytest.fixture
def timetable_file(tmp_path, sample_matrix):
    """Create a timetable workbook with two sheets."""
    file_path = tmp_path / "timetable.xlsx"

    second_sheet = _title_rows() + [
        _make_row(code="ENG301", class_name="English 3", day=5, period="1-3", room="B1-101"),
    ]

    with pd.ExcelWriter(file_path, engine="openpyxl") as writer:
        pd.DataFrame(sample_matrix).to_excel(writer, sheet_name="Week A", index=False, header=False)
        pd.DataFrame(second_sheet).to_excel(writer, sheet_name="Week B", index=False, header=False)

    return file_path


@pytest.fixture
def rooms_csv(tmp_path):
    """Create a rooms.csv catalog file."""
    file_path = tmp_path / "rooms.csv"
    file_path.write_text(
        "building,room,is_active\n"
        "A1,301,true\n"
        "A1,302,true\n"
        "A1,303,false\n"
        "A2,201,true\n"
        "B1,101,true\n",
        encoding="utf-8",
    )
    return file_path


@pytest.fixture
def catalog():
    """Room catalog with two buildings."""
    return RoomCatalog(
        [
            Room("A1", "301"),
            Room("A1", "302"),
            Room("A1", "303", is_active=False),
            Room("A2", "201"),
        ]
    )


@pytest.fixture
def make_interval():
    """Factory for schedule intervals."""

    def factory(
        room="301",
        building="A1",
        day=3,
        start=7,
        end=9,
        code="CS101",
        valid_from=None,
        valid_to=None,
    ) -> ScheduleInterval:
        return ScheduleInterval(
            day=day,
            period_start=start,
            period_end=end,
            room=room,
            building=building,
            course_code=code,
            class_name=code,
            course_name=f"Course {code}",
            valid_from=valid_from,
            valid_to=valid_to,
        )

    return factory


@pytest.fixture
def spring_term():
    """Effective date range of a spring term."""
    return date(2025, 1, 1), date(2025, 5, 31)
