"""Tests for exporters."""

import json

import pandas as pd
import pytest

from free_rooms.exporters import (
    CSVExporter,
    ExcelExporter,
    JSONExporter,
    export_availability_json,
    get_exporter,
)
from free_rooms.models import AvailabilityResponse, FreeRun
from free_rooms.parser import TimetableParser


@pytest.fixture
def parse_result(timetable_file):
    """Parse result of the sample workbook."""
    return TimetableParser().parse(timetable_file)


class TestJSONExporter:
    """Tests for JSONExporter class."""

    def test_export(self, parse_result, tmp_path):
        """Test exporting a parse result to JSON."""
        output = tmp_path / "out" / "result.json"
        JSONExporter().export(parse_result, output)

        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["rows_accepted"] == 4
        assert data["rows_skipped"] == 6
        assert data["intervals"][0]["valid_from"] == "2025-01-01"
        assert data["skipped"][0]["reason"] == "blank_row"


class TestCSVExporter:
    """Tests for CSVExporter class."""

    def test_export(self, parse_result, tmp_path):
        """Test exporting a parse result to CSV files."""
        CSVExporter().export(parse_result, tmp_path / "csv")

        intervals = pd.read_csv(tmp_path / "csv" / "intervals.csv")
        skipped = pd.read_csv(tmp_path / "csv" / "skipped.csv")
        summary = pd.read_csv(tmp_path / "csv" / "summary.csv")

        assert len(intervals) == 4
        assert list(intervals["course_code"]) == ["CS101", "CS101", "MATH202", "ENG301"]
        assert len(skipped) == 6
        assert "rows_accepted" in list(summary["metric"])


class TestExcelExporter:
    """Tests for ExcelExporter class."""

    def test_export(self, parse_result, tmp_path):
        """Test exporting a parse result to one workbook."""
        output = tmp_path / "result.xlsx"
        ExcelExporter().export(parse_result, output)

        sheets = pd.read_excel(output, sheet_name=None)
        assert list(sheets) == ["Intervals", "Skipped", "Summary", "Errors"]
        assert len(sheets["Intervals"]) == 4
        assert len(sheets["Skipped"]) == 6


class TestExportAvailability:
    """Tests for export_availability_json function."""

    def test_export(self, tmp_path):
        """Test the response is written in its JSON shape."""
        response = AvailabilityResponse(3, None, "1-10", "A1", [FreeRun("301", (1, 10))])
        output = tmp_path / "available.json"

        export_availability_json(response, output)

        assert json.loads(output.read_text(encoding="utf-8")) == {
            "day": 3,
            "date": None,
            "period_range": "1-10",
            "building": "A1",
            "rooms": [{"room": "301", "continuous_slots": [1, 10]}],
        }


class TestGetExporter:
    """Tests for get_exporter function."""

    def test_known_formats(self):
        """Test each supported format."""
        assert isinstance(get_exporter("json"), JSONExporter)
        assert isinstance(get_exporter("csv"), CSVExporter)
        assert isinstance(get_exporter("excel"), ExcelExporter)

    def test_unknown_format(self):
        """Test an unsupported format."""
        with pytest.raises(ValueError, match="Unsupported format"):
            get_exporter("xml")
