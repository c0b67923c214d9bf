"""Import parsed intervals into the schedule store."""

import logging
from dataclasses import dataclass
from datetime import date
from threading import Lock

from .cache import AvailabilityCache
from .catalog import RoomCatalog
from .constants import NON_PHYSICAL_BUILDINGS
from .exceptions import EmptyScheduleError, UnresolvedRoomError
from .models import ScheduleInterval, ScheduleRecord

logger = logging.getLogger(__name__)


@dataclass
class ImportSummary:
    """Counts reported after an import."""

    rows_parsed: int
    rows_imported: int
    rows_excluded: int

    def to_dict(self) -> dict:
        return {
            "success": True,
            "message": "Schedule imported successfully",
            "rows_parsed": self.rows_parsed,
            "rows_imported": self.rows_imported,
            "rows_excluded": self.rows_excluded,
        }


def build_records(
    intervals: list[ScheduleInterval], catalog: RoomCatalog
) -> tuple[list[ScheduleRecord], int]:
    """Resolve intervals against the room catalog.

    Intervals held online, on the sports ground or in other non-physical
    locations are left out. Any other interval must name a catalog room.

    Args:
        intervals: Parsed intervals
        catalog: Known rooms

    Returns:
        Tuple of (records, number of excluded intervals)

    Raises:
        UnresolvedRoomError: If an interval names a room missing from the catalog
    """
    records = []
    excluded = 0

    for interval in intervals:
        if interval.building in NON_PHYSICAL_BUILDINGS:
            excluded += 1
            continue

        room = catalog.resolve(interval.building, interval.room)
        if room is None:
            logger.error(
                f"Room not found: key={interval.room_key} | room={interval.room} "
                f"| building={interval.building}"
            )
            raise UnresolvedRoomError(interval.room, interval.building, interval.row_index)

        records.append(ScheduleRecord(room=room, interval=interval))

    return records, excluded


class ScheduleStore:
    """In-memory schedule records, replaced wholesale on each import."""

    def __init__(self, cache: AvailabilityCache | None = None):
        self.cache = cache
        self.generation = 0
        self._records: list[ScheduleRecord] = []
        self._lock = Lock()

    @property
    def records(self) -> list[ScheduleRecord]:
        return self._records

    def replace(self, records: list[ScheduleRecord]) -> None:
        """Swap in a new set of records and invalidate cached results."""
        with self._lock:
            self._records = list(records)
            self.generation += 1
        if self.cache is not None:
            self.cache.invalidate()
        logger.info(f"Stored {len(records)} schedules (generation {self.generation})")

    def records_for(
        self, day: int, on: date | None = None, room_keys: set[str] | None = None
    ) -> list[ScheduleRecord]:
        """Get live records of a day, optionally limited to a date and to rooms.

        Args:
            day: Day code
            on: Date that must fall inside the record's effective range
            room_keys: Catalog keys of the rooms of interest

        Returns:
            Matching records in import order
        """
        records = self._records
        return [
            r
            for r in records
            if not r.deleted
            and r.day == day
            and (room_keys is None or r.room.key in room_keys)
            and (on is None or r.interval.is_effective_on(on))
        ]

    def __len__(self) -> int:
        return len(self._records)


def import_schedule(
    intervals: list[ScheduleInterval], catalog: RoomCatalog, store: ScheduleStore
) -> ImportSummary:
    """Replace the stored schedule with freshly parsed intervals.

    Nothing is stored unless every physical room resolves.

    Raises:
        EmptyScheduleError: If there are no intervals
        UnresolvedRoomError: If a room is missing from the catalog
    """
    if not intervals:
        raise EmptyScheduleError()

    logger.info(f"Parsed {len(intervals)} schedule rows")
    records, excluded = build_records(intervals, catalog)
    store.replace(records)

    logger.info(f"Successfully imported {len(records)} schedules, excluded {excluded}")
    return ImportSummary(
        rows_parsed=len(intervals),
        rows_imported=len(records),
        rows_excluded=excluded,
    )
