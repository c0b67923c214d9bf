"""Utility functions for reading raw spreadsheet cells."""

import math
from datetime import date, datetime

import pandas as pd


def is_blank(value) -> bool:
    """Check if a cell is empty (None, NaN, NaT or whitespace-only text).

    Args:
        value: Raw cell value

    Returns:
        True if the cell carries no value
    """
    if value is None:
        return True
    try:
        if pd.isna(value):
            return True
    except (ValueError, TypeError):
        return False
    if isinstance(value, str):
        return not value.strip()
    return False


def is_empty_row(row) -> bool:
    """Check if every cell of a row is blank."""
    return not row or all(is_blank(cell) for cell in row)


def cell(row, index: int):
    """Get a cell from a row, tolerating short rows."""
    if row is None or index >= len(row):
        return None
    value = row[index]
    return None if is_blank(value) else value


def as_whole_number(value) -> int | None:
    """Return the integer value of a numeric cell, or None.

    Spreadsheet readers return 2.0 for a cell typed as 2, so
    whole floats count as integers. Booleans do not.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    return None


def is_date_like(value) -> bool:
    """Check if a cell already holds a date or timestamp."""
    return isinstance(value, (date, datetime, pd.Timestamp))


def safe_str(value, default: str = "") -> str:
    """Safely convert a value to a stripped string.

    Whole floats are rendered without the trailing '.0'.

    Args:
        value: Value to convert
        default: Default value if the cell is blank

    Returns:
        String value
    """
    if is_blank(value):
        return default
    number = as_whole_number(value)
    if number is not None:
        return str(number)
    return str(value).strip()


def dataframe_to_matrix(df: pd.DataFrame) -> list[list]:
    """Convert a headerless sheet DataFrame into a list of rows.

    Missing cells become None.
    """
    if df.empty:
        return []
    cleaned = df.astype(object).where(df.notna(), None)
    return cleaned.values.tolist()
