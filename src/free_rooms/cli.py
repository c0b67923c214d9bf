"""CLI entry point for the free room finder."""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from .catalog import RoomCatalog
from .constants import DAY_NAMES
from .exceptions import IngestError, QueryValidationError
from .exporters import export_availability_json, get_exporter
from .ingest import ScheduleStore, import_schedule
from .parser import TimetableParser
from .query import (
    AvailabilityQuery,
    find_available_rooms,
    parse_query_date,
    room_status,
    validate_window,
)

app = typer.Typer(
    name="free-rooms",
    help="Parse timetable workbooks and find free classrooms",
    add_completion=False,
)
console = Console()

# Default path for reference data
DEFAULT_ROOMS_CSV = Path("data/reference/rooms.csv")


class OutputFormat(str, Enum):
    """Output format options."""

    json = "json"
    csv = "csv"
    excel = "excel"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_store(input_file: Path, rooms_csv: Path | None) -> tuple[RoomCatalog, ScheduleStore]:
    """Parse a workbook and import it against the room catalog."""
    rooms_path = rooms_csv or DEFAULT_ROOMS_CSV
    if not rooms_path.exists():
        console.print(f"[bold red]Error:[/bold red] Rooms file not found: {rooms_path}")
        raise typer.Exit(1)

    with console.status("[bold green]Parsing timetable..."):
        result = TimetableParser().parse(input_file)

    if result.errors:
        for error in result.errors:
            console.print(f"[bold red]Error:[/bold red] {error}")
        raise typer.Exit(1)

    catalog = RoomCatalog.from_csv(rooms_path)
    store = ScheduleStore()
    try:
        summary = import_schedule(result.intervals, catalog, store)
    except IngestError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(
        f"  Imported {summary.rows_imported} schedules "
        f"({summary.rows_excluded} online/sport excluded, {result.rows_skipped} rows skipped)"
    )
    return catalog, store


@app.command()
def parse(
    input_file: Annotated[
        Path,
        typer.Argument(help="Path to the timetable Excel file", exists=True, readable=True),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("-o", "--output", help="Output file or directory path"),
    ] = None,
    format: Annotated[
        OutputFormat,
        typer.Option("-f", "--format", help="Output format"),
    ] = OutputFormat.json,
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Show detailed output"),
    ] = False,
) -> None:
    """Parse a timetable Excel file and extract schedule intervals."""
    _configure_logging(verbose)
    parser = TimetableParser()

    with console.status("[bold green]Parsing file..."):
        result = parser.parse(input_file)

    console.print(f"\n[bold]Parse Results for:[/bold] {input_file.name}")
    console.print(f"  Sheets processed: {len(result.sheets_processed)}")
    console.print(f"  Rows accepted: {result.rows_accepted}")
    console.print(f"  Rows skipped: {result.rows_skipped}")

    if result.errors:
        console.print(f"\n[bold red]Errors ({len(result.errors)}):[/bold red]")
        for error in result.errors:
            console.print(f"  [red]• {error}[/red]")

    if result.warnings and verbose:
        console.print(f"\n[bold yellow]Warnings ({len(result.warnings)}):[/bold yellow]")
        for warning in result.warnings:
            console.print(f"  [yellow]• {warning}[/yellow]")

    if output:
        exporter = get_exporter(format.value)

        if format == OutputFormat.csv:
            # CSV exports to directory
            output_path = output if output.is_dir() else output.parent / output.stem
        else:
            if not output.suffix:
                output = output.with_suffix(".xlsx" if format == OutputFormat.excel else ".json")
            output_path = output

        with console.status(f"[bold green]Exporting to {format.value}..."):
            exporter.export(result, output_path)

        console.print(f"\n[bold green]✓[/bold green] Exported to: {output_path}")
    elif verbose:
        _show_intervals(result)

    if not result.ok:
        raise typer.Exit(1)


@app.command()
def validate(
    input_file: Annotated[
        Path,
        typer.Argument(help="Path to the timetable Excel file"),
    ],
) -> None:
    """Validate a timetable file structure without full parsing."""
    if not input_file.exists():
        console.print(f"[bold red]Error:[/bold red] File not found: {input_file}")
        raise typer.Exit(1)

    parser = TimetableParser()

    with console.status("[bold green]Validating file..."):
        validation = parser.validate(input_file)

    console.print(f"\n[bold]Validation Results for:[/bold] {input_file.name}")

    if validation["valid"]:
        console.print("[bold green]✓ File is valid[/bold green]")
    else:
        console.print("[bold red]✗ File has issues[/bold red]")

    console.print(f"\n  Sheets found: {len(validation['sheets_found'])}")
    if validation["sheets_found"]:
        console.print(f"    {', '.join(validation['sheets_found'])}")

    if validation["errors"]:
        console.print(f"\n[bold red]Errors ({len(validation['errors'])}):[/bold red]")
        for error in validation["errors"]:
            console.print(f"  [red]• {error}[/red]")

    if validation["warnings"]:
        console.print(f"\n[bold yellow]Warnings ({len(validation['warnings'])}):[/bold yellow]")
        for warning in validation["warnings"]:
            console.print(f"  [yellow]• {warning}[/yellow]")

    if not validation["valid"]:
        raise typer.Exit(1)


@app.command()
def stats(
    input_file: Annotated[
        Path,
        typer.Argument(help="Path to the timetable Excel file", exists=True, readable=True),
    ],
) -> None:
    """Show detailed statistics for a timetable file."""
    parser = TimetableParser()

    with console.status("[bold green]Analyzing file..."):
        result = parser.parse(input_file)
        statistics = parser.get_stats(result)

    console.print(f"\n[bold]Statistics for:[/bold] {input_file.name}")
    console.print(f"  Parse date: {statistics['parse_date']}")

    overview_table = Table(title="Overview", show_header=False)
    overview_table.add_column("Metric", style="cyan")
    overview_table.add_column("Value", style="green")

    overview_table.add_row("Sheets Processed", str(statistics["sheets_processed"]))
    overview_table.add_row("Rows Accepted", str(statistics["rows_accepted"]))
    overview_table.add_row("Rows Skipped", str(statistics["rows_skipped"]))
    overview_table.add_row("Distinct Rooms", str(statistics["rooms_count"]))
    overview_table.add_row("Distinct Courses", str(statistics["courses_count"]))
    overview_table.add_row("Errors", str(statistics["errors_count"]))
    overview_table.add_row("Warnings", str(statistics["warnings_count"]))

    console.print(overview_table)

    if statistics["intervals_by_day"]:
        day_table = Table(title="Classes by Day")
        day_table.add_column("Day", style="cyan")
        day_table.add_column("Count", style="green")

        for day, count in statistics["intervals_by_day"].items():
            day_table.add_row(DAY_NAMES.get(day, str(day)), str(count))

        console.print(day_table)

    if statistics["intervals_by_building"]:
        building_table = Table(title="Classes by Building")
        building_table.add_column("Building", style="cyan")
        building_table.add_column("Count", style="green")

        for building, count in statistics["intervals_by_building"].items():
            building_table.add_row(building, str(count))

        console.print(building_table)

    if statistics["skip_reasons"]:
        skip_table = Table(title="Skipped Rows")
        skip_table.add_column("Reason", style="cyan")
        skip_table.add_column("Rows", style="yellow")

        for reason, count in statistics["skip_reasons"].items():
            skip_table.add_row(reason, str(count))

        console.print(skip_table)


@app.command()
def available(
    input_file: Annotated[
        Path,
        typer.Argument(help="Path to the timetable Excel file", exists=True, readable=True),
    ],
    day: Annotated[int, typer.Option("--day", "-d", help="Day code (2=Monday ... 7=Saturday)")],
    start: Annotated[int, typer.Option("--start", "-s", help="First period of the window")],
    end: Annotated[int, typer.Option("--end", "-e", help="Last period of the window")],
    building: Annotated[str, typer.Option("--building", "-b", help="Building code, e.g. A1")],
    min_continuous: Annotated[
        int,
        typer.Option("--min", "-m", help="Minimum consecutive free periods"),
    ] = 1,
    on_date: Annotated[
        Optional[str],
        typer.Option("--date", help="Date (YYYY-MM-DD) the schedule must be effective on"),
    ] = None,
    rooms_csv: Annotated[
        Optional[Path],
        typer.Option("--rooms", help="Path to rooms.csv file"),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("-o", "--output", help="Write the response to a JSON file"),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the response as JSON"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Show detailed output"),
    ] = False,
) -> None:
    """Find rooms of a building with enough consecutive free periods."""
    _configure_logging(verbose)

    try:
        query = AvailabilityQuery.from_params(day, start, end, building, min_continuous, on_date)
    except QueryValidationError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    catalog, store = _load_store(input_file, rooms_csv)
    response = find_available_rooms(query, catalog, store)

    if as_json:
        console.print_json(json.dumps(response.to_dict(), ensure_ascii=False))
    else:
        table = Table(
            title=f"Free rooms in {response.building}, "
            f"{DAY_NAMES[response.day]}, periods {response.period_range}"
        )
        table.add_column("Room", style="cyan")
        table.add_column(f"Free runs (>= {query.min_continuous} periods) start at", style="green")

        for run in response.rooms:
            table.add_row(run.room, ", ".join(map(str, run.start_periods)))

        console.print(table)
        if not response.rooms:
            console.print("[bold yellow]No free rooms match the query[/bold yellow]")

    if output:
        output_path = output if output.suffix == ".json" else output.with_suffix(".json")
        export_availability_json(response, output_path)
        console.print(f"\n[bold green]✓[/bold green] Exported to: {output_path}")


@app.command()
def status(
    input_file: Annotated[
        Path,
        typer.Argument(help="Path to the timetable Excel file", exists=True, readable=True),
    ],
    day: Annotated[int, typer.Option("--day", "-d", help="Day code (2=Monday ... 7=Saturday)")],
    start: Annotated[int, typer.Option("--start", "-s", help="First period of the window")],
    end: Annotated[int, typer.Option("--end", "-e", help="Last period of the window")],
    building: Annotated[
        Optional[str],
        typer.Option("--building", "-b", help="Building code, all buildings if omitted"),
    ] = None,
    on_date: Annotated[
        Optional[str],
        typer.Option("--date", help="Date (YYYY-MM-DD) the schedule must be effective on"),
    ] = None,
    rooms_csv: Annotated[
        Optional[Path],
        typer.Option("--rooms", help="Path to rooms.csv file"),
    ] = None,
) -> None:
    """Show which rooms are free or occupied during a window."""
    try:
        validate_window(day, start, end)
        on = parse_query_date(on_date)
    except QueryValidationError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    catalog, store = _load_store(input_file, rooms_csv)
    statuses = room_status(day, start, end, catalog, store, building, on)

    table = Table(title=f"Room status, {DAY_NAMES[day]}, periods {start}-{end}")
    table.add_column("Building", style="blue")
    table.add_column("Room", style="cyan")
    table.add_column("Status")
    table.add_column("Course", max_width=40)
    table.add_column("Periods")

    for item in statuses:
        if item.occupied_by:
            occupant = item.occupied_by
            table.add_row(
                item.building,
                item.room,
                "[red]occupied[/red]",
                f"{occupant.course_code} {occupant.course_name or ''}".strip(),
                f"{occupant.period_start}-{occupant.period_end}",
            )
        else:
            table.add_row(item.building, item.room, "[green]free[/green]", "", "")

    console.print(table)


def _show_intervals(result) -> None:
    """Show parsed intervals in a table."""
    if not result.intervals:
        return

    table = Table(title="Schedule Intervals")
    table.add_column("Day", style="cyan")
    table.add_column("Periods", style="green")
    table.add_column("Building", style="blue")
    table.add_column("Room", style="blue")
    table.add_column("Course", style="magenta")
    table.add_column("Class", max_width=40)
    table.add_column("Instructor", max_width=30)

    for interval in result.intervals[:20]:  # Limit to first 20
        table.add_row(
            str(interval.day),
            f"{interval.period_start}-{interval.period_end}",
            interval.building,
            interval.room,
            interval.course_code,
            interval.class_name[:40],
            (interval.instructor or "")[:30],
        )

    if len(result.intervals) > 20:
        table.add_row("...", "...", "...", "...", "...", "...", "...")

    console.print(table)


if __name__ == "__main__":
    app()
