"""Free-run detection for one room on one day.

The query window [start, end] becomes a bitmap with one entry per period
(False = free, True = busy). Every busy interval overlapping the window
marks its clamped span as busy, then a left-to-right scan reports the
first period of each maximal free run that is long enough.

    window 1..10, busy [7, 9]     ->  bitmap 0000001110
    min_continuous=2              ->  [1]
    min_continuous=1              ->  [1, 10]
"""

import logging
from collections.abc import Iterable
from typing import Protocol

from .models import FreeRun

logger = logging.getLogger(__name__)


class BusyInterval(Protocol):
    """Anything with an inclusive period range."""

    period_start: int
    period_end: int


def overlaps(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Check whether closed intervals [start1, end1] and [start2, end2] overlap."""
    return not (end1 < start2 or start1 > end2)


def build_bitmap(
    period_start: int, period_end: int, busy: Iterable[BusyInterval]
) -> list[bool]:
    """Mark busy periods of the window.

    Args:
        period_start: First period of the window
        period_end: Last period of the window (inclusive)
        busy: Busy intervals of the room

    Returns:
        One flag per period of the window, True when busy
    """
    length = period_end - period_start + 1
    bitmap = [False] * length

    for interval in busy:
        if not overlaps(interval.period_start, interval.period_end, period_start, period_end):
            continue
        first = max(0, interval.period_start - period_start)
        last = min(length - 1, interval.period_end - period_start)
        for i in range(first, last + 1):
            bitmap[i] = True

    return bitmap


def scan_free_runs(bitmap: list[bool], min_continuous: int) -> list[int]:
    """Find the start index of every free run of at least min_continuous periods."""
    starts = []
    run_length = 0
    run_start = 0

    for i, is_busy in enumerate(bitmap):
        if not is_busy:
            if run_length == 0:
                run_start = i
            run_length += 1
            continue
        if run_length >= min_continuous:
            starts.append(run_start)
        run_length = 0

    if run_length >= min_continuous:
        starts.append(run_start)

    return starts


def find_free_runs(
    period_start: int,
    period_end: int,
    busy: Iterable[BusyInterval],
    min_continuous: int,
) -> list[int]:
    """Find free runs of a room within a query window.

    The caller guarantees period_start <= period_end and min_continuous > 0.

    Args:
        period_start: First period of the window
        period_end: Last period of the window (inclusive)
        busy: Busy intervals of the room on the queried day
        min_continuous: Minimum run length

    Returns:
        First period of every qualifying run, ascending
    """
    bitmap = build_bitmap(period_start, period_end, busy)
    logger.debug(
        f"Bitmap for periods {period_start}-{period_end}: "
        + "".join("1" if b else "0" for b in bitmap)
    )

    starts = [period_start + i for i in scan_free_runs(bitmap, min_continuous)]
    logger.debug(f"Found {len(starts)} continuous free runs: {starts}")
    return starts


class AvailabilityEngine:
    """Computes free runs for rooms. Holds no state between calls."""

    def free_runs(
        self,
        room: str,
        period_start: int,
        period_end: int,
        busy: Iterable[BusyInterval],
        min_continuous: int,
    ) -> FreeRun:
        """Compute the free runs of one room."""
        return FreeRun(
            room=room,
            start_periods=tuple(find_free_runs(period_start, period_end, busy, min_continuous)),
        )

    def free_runs_by_room(
        self,
        period_start: int,
        period_end: int,
        busy_by_room: dict[str, list[BusyInterval]],
        min_continuous: int,
    ) -> list[FreeRun]:
        """Compute free runs for several rooms, keeping the input order."""
        return [
            self.free_runs(room, period_start, period_end, busy, min_continuous)
            for room, busy in busy_by_room.items()
        ]
