"""Free room queries over the stored schedule."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date

from .availability import AvailabilityEngine
from .cache import AvailabilityCache, cache_key
from .catalog import RoomCatalog
from .constants import MAX_DAY, MIN_DAY
from .exceptions import QueryValidationError
from .ingest import ScheduleStore
from .models import AvailabilityResponse, FreeRun, RoomStatus, ScheduleInterval
from .utils import as_whole_number, is_blank

logger = logging.getLogger(__name__)


def _required_int(field: str, value) -> int:
    if is_blank(value):
        raise QueryValidationError(field, "parameter is required")
    if isinstance(value, bool):
        raise QueryValidationError(field, f"expected an integer, got {value!r}")
    number = as_whole_number(value)
    if number is not None:
        return number
    try:
        return int(str(value).strip())
    except ValueError:
        raise QueryValidationError(field, f"expected an integer, got {value!r}") from None


def parse_query_date(value) -> date | None:
    if is_blank(value):
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise QueryValidationError("date", f"expected YYYY-MM-DD, got {value!r}") from None


def validate_window(day: int, period_start: int, period_end: int) -> None:
    """Check a day code and period window.

    Raises:
        QueryValidationError: If a value is out of range
    """
    if not MIN_DAY <= day <= MAX_DAY:
        raise QueryValidationError("day", f"must be between {MIN_DAY} and {MAX_DAY}")
    if period_start < 1:
        raise QueryValidationError("period_start", "must be >= 1")
    if period_start > period_end:
        raise QueryValidationError("period_start", "must be <= period_end")


@dataclass(frozen=True)
class AvailabilityQuery:
    """Which rooms of a building have enough consecutive free periods.

    Attributes:
        day: Day code, 2 (Monday) to 7 (Saturday)
        period_start: First period of the window
        period_end: Last period of the window (inclusive)
        building: Building code
        min_continuous: Minimum number of consecutive free periods
        date: Calendar date used to select effective schedules
    """

    day: int
    period_start: int
    period_end: int
    building: str
    min_continuous: int
    date: date | None = None

    @classmethod
    def from_params(
        cls,
        day,
        period_start,
        period_end,
        building,
        min_continuous,
        date=None,
    ) -> "AvailabilityQuery":
        """Build a validated query from raw request parameters.

        Raises:
            QueryValidationError: If a parameter is missing or invalid
        """
        if is_blank(building):
            raise QueryValidationError("building", "parameter is required")

        query = cls(
            day=_required_int("day", day),
            period_start=_required_int("period_start", period_start),
            period_end=_required_int("period_end", period_end),
            building=str(building).strip(),
            min_continuous=_required_int("min_continuous", min_continuous),
            date=parse_query_date(date),
        )
        query.validate()
        return query

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            QueryValidationError: If a value is out of range
        """
        validate_window(self.day, self.period_start, self.period_end)
        if self.min_continuous <= 0:
            raise QueryValidationError("min_continuous", "must be > 0")
        if not self.building:
            raise QueryValidationError("building", "parameter is required")

    @property
    def period_range(self) -> str:
        return f"{self.period_start}-{self.period_end}"

    @property
    def cache_key(self) -> str:
        """Cache key; the date is appended when the query has one."""
        key = cache_key(
            self.day, self.period_start, self.period_end, self.building, self.min_continuous
        )
        return f"{key}:{self.date.isoformat()}" if self.date else key


def find_available_rooms(
    query: AvailabilityQuery,
    catalog: RoomCatalog,
    store: ScheduleStore,
    cache: AvailabilityCache | None = None,
    engine: AvailabilityEngine | None = None,
) -> AvailabilityResponse:
    """List the rooms of a building with enough consecutive free periods.

    Rooms without a qualifying run are left out of the response.

    Args:
        query: Validated query
        catalog: Known rooms
        store: Stored schedule
        cache: Optional response cache
        engine: Engine to use (a fresh one by default)

    Returns:
        AvailabilityResponse
    """
    generation = store.generation
    if cache is not None:
        cached = cache.get(query.cache_key, generation)
        if cached is not None:
            logger.debug(f"Cache hit: {query.cache_key}")
            return cached
        logger.debug(f"Cache miss: {query.cache_key}")

    engine = engine or AvailabilityEngine()
    response = AvailabilityResponse(
        day=query.day,
        date=query.date,
        period_range=query.period_range,
        building=query.building,
    )

    rooms = catalog.rooms_in_building(query.building)
    if rooms:
        busy: dict[str, list[ScheduleInterval]] = defaultdict(list)
        for record in store.records_for(query.day, query.date, {r.key for r in rooms}):
            busy[record.room.key].append(record.interval)

        for room in rooms:
            run: FreeRun = engine.free_runs(
                room.name,
                query.period_start,
                query.period_end,
                busy.get(room.key, []),
                query.min_continuous,
            )
            if run:
                response.rooms.append(run)

    logger.info(
        f"Available rooms: day={query.day}, periods={query.period_range}, "
        f"building={query.building}, min_continuous={query.min_continuous} "
        f"-> {len(response.rooms)}/{len(rooms)} rooms"
    )

    if cache is not None:
        # Tagged with the generation the records were read from
        cache.set(query.cache_key, response, generation)
    return response


def room_status(
    day: int,
    period_start: int,
    period_end: int,
    catalog: RoomCatalog,
    store: ScheduleStore,
    building: str | None = None,
    on: date | None = None,
) -> list[RoomStatus]:
    """Report each room as free or occupied for a window.

    An occupied room reports the first stored class overlapping the window.
    """
    rooms = catalog.rooms_in_building(building) if building else catalog.active_rooms()

    occupied: dict[str, ScheduleInterval] = {}
    for record in store.records_for(day, on, {r.key for r in rooms}):
        if record.interval.overlaps(period_start, period_end):
            occupied.setdefault(record.room.key, record.interval)

    return [
        RoomStatus(building=room.building, room=room.name, occupied_by=occupied.get(room.key))
        for room in rooms
    ]
