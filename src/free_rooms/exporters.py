"""Export functionality for parse results and availability responses."""

import csv
import json
from abc import ABC, abstractmethod
from pathlib import Path

import pandas as pd

from .models import AvailabilityResponse, ParseResult

INTERVAL_COLUMNS = [
    "sheet",
    "row_index",
    "day",
    "period_start",
    "period_end",
    "building",
    "room",
    "course_code",
    "class_name",
    "course_name",
    "instructor",
    "valid_from",
    "valid_to",
]


class BaseExporter(ABC):
    """Base class for exporters."""

    @abstractmethod
    def export(self, result: ParseResult, output_path: str | Path) -> None:
        """Export parse result to file.

        Args:
            result: ParseResult to export
            output_path: Path to output file or directory
        """
        pass


class JSONExporter(BaseExporter):
    """Export to JSON format."""

    def __init__(self, indent: int = 2, ensure_ascii: bool = False):
        """Initialize exporter.

        Args:
            indent: JSON indentation level
            ensure_ascii: If False, allows non-ASCII characters
        """
        self.indent = indent
        self.ensure_ascii = ensure_ascii

    def export(self, result: ParseResult, output_path: str | Path) -> None:
        """Export parse result to JSON file."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(
                result.to_dict(),
                f,
                indent=self.indent,
                ensure_ascii=self.ensure_ascii,
            )


class CSVExporter(BaseExporter):
    """Export to CSV format (multiple files)."""

    def export(self, result: ParseResult, output_path: str | Path) -> None:
        """Export parse result to CSV files.

        Creates three files:
        - intervals.csv: All accepted intervals
        - skipped.csv: Skipped rows with reasons
        - summary.csv: Overall summary

        Args:
            result: ParseResult to export
            output_path: Path to output directory
        """
        output_dir = Path(output_path)
        output_dir.mkdir(parents=True, exist_ok=True)

        intervals = [
            {column: i.to_dict()[column] for column in INTERVAL_COLUMNS}
            for i in result.intervals
        ]
        self._write_csv(output_dir / "intervals.csv", intervals)
        self._write_csv(output_dir / "skipped.csv", [s.to_dict() for s in result.skipped])
        self._write_csv(output_dir / "summary.csv", _summary_rows(result))

    def _write_csv(self, output_path: Path, rows: list[dict]) -> None:
        """Write rows to CSV file."""
        if not rows:
            return

        with open(output_path, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=rows[0].keys())
            writer.writeheader()
            writer.writerows(rows)


class ExcelExporter(BaseExporter):
    """Export to Excel format (single workbook with multiple sheets)."""

    def export(self, result: ParseResult, output_path: str | Path) -> None:
        """Export parse result to Excel file.

        Creates workbook with sheets Intervals, Skipped, Summary and Errors.
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        intervals = pd.DataFrame(
            [i.to_dict() for i in result.intervals], columns=INTERVAL_COLUMNS
        )
        skipped = pd.DataFrame(
            [s.to_dict() for s in result.skipped],
            columns=["sheet", "row_index", "reason", "detail"],
        )
        summary = pd.DataFrame(_summary_rows(result))
        errors = pd.DataFrame(
            [{"Error": e} for e in result.errors + result.warnings], columns=["Error"]
        )

        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            intervals.to_excel(writer, sheet_name="Intervals", index=False)
            skipped.to_excel(writer, sheet_name="Skipped", index=False)
            summary.to_excel(writer, sheet_name="Summary", index=False)
            errors.to_excel(writer, sheet_name="Errors", index=False)


def _summary_rows(result: ParseResult) -> list[dict]:
    return [
        {"metric": "file_path", "value": result.file_path},
        {"metric": "parse_date", "value": result.parse_date},
        {"metric": "sheets_processed", "value": len(result.sheets_processed)},
        {"metric": "rows_accepted", "value": result.rows_accepted},
        {"metric": "rows_skipped", "value": result.rows_skipped},
        {"metric": "errors", "value": len(result.errors)},
        {"metric": "warnings", "value": len(result.warnings)},
    ]


def export_availability_json(response: AvailabilityResponse, output_path: Path | str) -> None:
    """Export an availability response to a JSON file."""
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with open(output, "w", encoding="utf-8") as f:
        json.dump(response.to_dict(), f, ensure_ascii=False, indent=2)


def get_exporter(format_type: str) -> BaseExporter:
    """Get appropriate exporter for format type.

    Args:
        format_type: Export format ('json', 'csv', 'excel')

    Returns:
        Exporter instance

    Raises:
        ValueError: If format type is not supported
    """
    exporters = {
        "json": JSONExporter,
        "csv": CSVExporter,
        "excel": ExcelExporter,
    }

    if format_type not in exporters:
        raise ValueError(
            f"Unsupported format: {format_type}. Supported: {', '.join(exporters.keys())}"
        )

    return exporters[format_type]()
