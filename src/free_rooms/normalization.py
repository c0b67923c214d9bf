"""Text normalization for raw timetable cells."""

import re
import unicodedata

import pandas as pd

from .constants import PERIOD_SEPARATORS, ROOM_STRIP_PATTERN

# Letters that do not decompose under NFD
EXTRA_FOLDS = {"đ": "d", "Đ": "D"}


def strip_diacritics(text: str) -> str:
    """Remove diacritics so that 'Thứ 2' and 'Thu 2' compare equal.

    Args:
        text: Raw text

    Returns:
        Text with combining marks removed
    """
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    for src, dst in EXTRA_FOLDS.items():
        stripped = stripped.replace(src, dst)
    return stripped


def normalize_period_text(value) -> str:
    """Normalize a period-range cell to the 'start-end' form.

    Arrow glyphs, en/em dashes and '->' all become a single dash,
    and whitespace is removed.
    """
    if value is None or pd.isna(value):
        return ""

    text = str(value).strip()
    for separator in PERIOD_SEPARATORS:
        text = text.replace(separator, "-")
    return re.sub(r"\s+", "", text)


def normalize_room_text(value) -> str:
    """Normalize a room cell: underscores to dashes, no arrows or spaces, uppercase."""
    if value is None or pd.isna(value):
        return ""

    text = str(value).strip().replace("_", "-")
    text = re.sub(ROOM_STRIP_PATTERN, "", text)
    return text.upper()


def normalize_day_text(value) -> str:
    """Lowercase a day cell with diacritics removed."""
    if value is None or pd.isna(value):
        return ""
    return strip_diacritics(str(value).strip()).lower()
