"""In-memory cache for availability responses."""

from dataclasses import replace
from threading import Lock

from .constants import CACHE_KEY_PREFIX
from .models import AvailabilityResponse


def cache_key(
    day: int, period_start: int, period_end: int, building: str, min_continuous: int
) -> str:
    """Build the cache key for an availability query, e.g. 'available:3:4:6:A1:2'."""
    return f"{CACHE_KEY_PREFIX}:{day}:{period_start}:{period_end}:{building}:{min_continuous}"


def _copy(response: AvailabilityResponse) -> AvailabilityResponse:
    return replace(response, rooms=list(response.rooms))


class AvailabilityCache:
    """Dict-backed response cache, cleared whenever the schedule is replaced.

    Each entry remembers the schedule generation it was computed from; a
    lookup for another generation is a miss. Responses are copied on the
    way in and out, so callers never share the stored entry.
    """

    def __init__(self):
        self._entries: dict[str, tuple[int | None, AvailabilityResponse]] = {}
        self._lock = Lock()

    def get(self, key: str, generation: int | None = None) -> AvailabilityResponse | None:
        """Get a cached response.

        Args:
            key: Cache key
            generation: Current schedule generation; entries from other
                generations are ignored

        Returns:
            A copy of the cached response, or None
        """
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        entry_generation, response = entry
        if generation is not None and entry_generation != generation:
            return None
        return _copy(response)

    def set(
        self, key: str, response: AvailabilityResponse, generation: int | None = None
    ) -> None:
        with self._lock:
            self._entries[key] = (generation, _copy(response))

    def invalidate(self) -> None:
        """Drop every cached response."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
