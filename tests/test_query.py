"""Tests for free room queries."""

from datetime import date

import pytest

from free_rooms.availability import AvailabilityEngine
from free_rooms.cache import AvailabilityCache, cache_key
from free_rooms.exceptions import QueryValidationError
from free_rooms.ingest import ScheduleStore, build_records, import_schedule
from free_rooms.models import AvailabilityResponse, FreeRun
from free_rooms.query import (
    AvailabilityQuery,
    find_available_rooms,
    parse_query_date,
    room_status,
)


@pytest.fixture
def store(catalog, make_interval, spring_term):
    """Store with a Tuesday schedule in building A1."""
    start, end = spring_term
    store = ScheduleStore()
    import_schedule(
        [
            make_interval(room="301", start=7, end=9, valid_from=start, valid_to=end),
            make_interval(room="302", start=1, end=10, code="MATH202"),
            make_interval(room="301", day=4, start=1, end=10),
        ],
        catalog,
        store,
    )
    return store


class TestAvailabilityQuery:
    """Tests for AvailabilityQuery class."""

    def test_from_params(self):
        """Test building a query from request parameters."""
        query = AvailabilityQuery.from_params("3", "1", "10", " A1 ", "2", "2025-03-04")

        assert query == AvailabilityQuery(3, 1, 10, "A1", 2, date(2025, 3, 4))
        assert query.period_range == "1-10"

    def test_missing_parameter(self):
        """Test a missing parameter is reported by name."""
        with pytest.raises(QueryValidationError) as exc_info:
            AvailabilityQuery.from_params(3, None, 10, "A1", 2)
        assert exc_info.value.field == "period_start"

    def test_missing_building(self):
        """Test the building is required."""
        with pytest.raises(QueryValidationError) as exc_info:
            AvailabilityQuery.from_params(3, 1, 10, "  ", 2)
        assert exc_info.value.field == "building"

    def test_non_integer(self):
        """Test text that is not a number is rejected."""
        with pytest.raises(QueryValidationError) as exc_info:
            AvailabilityQuery.from_params(3, 1, "ten", "A1", 2)
        assert exc_info.value.field == "period_end"

    @pytest.mark.parametrize("day", [1, 8])
    def test_day_out_of_range(self, day):
        """Test day codes outside Monday to Saturday."""
        with pytest.raises(QueryValidationError) as exc_info:
            AvailabilityQuery.from_params(day, 1, 10, "A1", 2)
        assert exc_info.value.field == "day"

    def test_start_after_end(self):
        """Test an inverted window."""
        with pytest.raises(QueryValidationError):
            AvailabilityQuery.from_params(3, 6, 4, "A1", 1)

    def test_start_below_one(self):
        """Test periods are numbered from one."""
        with pytest.raises(QueryValidationError):
            AvailabilityQuery.from_params(3, 0, 4, "A1", 1)

    @pytest.mark.parametrize("min_continuous", [0, -1])
    def test_min_continuous_positive(self, min_continuous):
        """Test the minimum run length must be positive."""
        with pytest.raises(QueryValidationError) as exc_info:
            AvailabilityQuery.from_params(3, 1, 10, "A1", min_continuous)
        assert exc_info.value.field == "min_continuous"

    def test_cache_key(self):
        """Test the cache key format."""
        query = AvailabilityQuery(3, 4, 6, "A1", 2)
        assert query.cache_key == "available:3:4:6:A1:2"
        assert query.cache_key == cache_key(3, 4, 6, "A1", 2)

    def test_date_defaults_to_none(self):
        """Test a query built without a date."""
        query = AvailabilityQuery(3, 1, 10, "A1", 2)
        assert query.date is None
        assert query == AvailabilityQuery.from_params(3, 1, 10, "A1", 2)

    def test_cache_key_with_date(self):
        """Test a dated query gets its own cache key."""
        query = AvailabilityQuery(3, 4, 6, "A1", 2, date(2025, 3, 4))
        assert query.cache_key == "available:3:4:6:A1:2:2025-03-04"


class TestParseQueryDate:
    """Tests for parse_query_date function."""

    def test_iso_date(self):
        """Test an ISO date."""
        assert parse_query_date("2025-03-04") == date(2025, 3, 4)

    def test_blank(self):
        """Test a missing date."""
        assert parse_query_date(None) is None
        assert parse_query_date("") is None

    def test_invalid(self):
        """Test other formats are rejected."""
        with pytest.raises(QueryValidationError):
            parse_query_date("04/03/2025")


class TestFindAvailableRooms:
    """Tests for find_available_rooms function."""

    def test_rooms_with_runs(self, catalog, store):
        """Test rooms with enough consecutive free periods are listed."""
        query = AvailabilityQuery(3, 1, 10, "A1", 2)

        response = find_available_rooms(query, catalog, store)

        assert response.to_dict() == {
            "day": 3,
            "date": None,
            "period_range": "1-10",
            "building": "A1",
            "rooms": [{"room": "301", "continuous_slots": [1]}],
        }

    def test_single_period_runs(self, catalog, store):
        """Test a minimum of one period also reports short gaps."""
        response = find_available_rooms(AvailabilityQuery(3, 1, 10, "A1", 1), catalog, store)
        assert [r.start_periods for r in response.rooms] == [(1, 10)]

    def test_date_outside_term(self, catalog, store):
        """Test classes outside their effective range do not block rooms."""
        query = AvailabilityQuery(3, 1, 10, "A1", 10, date(2025, 7, 1))

        response = find_available_rooms(query, catalog, store)

        assert [r.room for r in response.rooms] == ["301"]
        assert response.rooms[0].start_periods == (1,)

    def test_unknown_building(self, catalog, store):
        """Test a building without rooms gives an empty list."""
        response = find_available_rooms(AvailabilityQuery(3, 1, 10, "Z9", 1), catalog, store)
        assert response.rooms == []

    def test_other_building(self, catalog, store):
        """Test a building without classes is free for the whole window."""
        response = find_available_rooms(AvailabilityQuery(3, 2, 5, "A2", 4), catalog, store)
        assert response.to_dict()["rooms"] == [{"room": "201", "continuous_slots": [2]}]

    def test_cached_response(self, catalog, store):
        """Test a repeated query is served from the cache."""
        cache = AvailabilityCache()
        query = AvailabilityQuery(3, 1, 10, "A1", 2)

        first = find_available_rooms(query, catalog, store, cache)
        second = find_available_rooms(query, catalog, store, cache)

        assert second == first
        assert len(cache) == 1

    def test_cache_consulted_before_store(self, catalog, store):
        """Test a cached entry for the current schedule is returned as stored."""
        cache = AvailabilityCache()
        query = AvailabilityQuery(3, 1, 10, "A1", 2)
        canned = AvailabilityResponse(3, None, "1-10", "A1", [FreeRun("999", (4,))])
        cache.set(query.cache_key, canned, store.generation)

        assert find_available_rooms(query, catalog, store, cache) == canned

    def test_cached_response_is_a_copy(self, catalog, store):
        """Test changing a returned response leaves the cached entry intact."""
        cache = AvailabilityCache()
        query = AvailabilityQuery(3, 1, 10, "A1", 2)

        first = find_available_rooms(query, catalog, store, cache)
        first.rooms.append(FreeRun("999", (1,)))
        first.rooms.clear()
        second = find_available_rooms(query, catalog, store, cache)

        assert [r.room for r in second.rooms] == ["301"]

    def test_import_after_query_is_not_served_stale(self, catalog, store):
        """Test a new schedule is used after an import."""
        cache = AvailabilityCache()
        store.cache = cache
        query = AvailabilityQuery(3, 1, 10, "A1", 2)

        find_available_rooms(query, catalog, store, cache)
        records, _ = build_records([], catalog)
        store.replace(records)

        response = find_available_rooms(query, catalog, store, cache)
        assert [r.room for r in response.rooms] == ["301", "302"]

    def test_import_during_query_is_not_cached(self, catalog, store, make_interval):
        """Test a response computed from replaced records is not reused."""
        cache = AvailabilityCache()
        store.cache = cache
        query = AvailabilityQuery(3, 1, 10, "A1", 2)

        class ImportingEngine(AvailabilityEngine):
            """Engine that imports a fully booked schedule on its first call."""

            imported = False

            def free_runs(self, room, period_start, period_end, busy, min_continuous):
                if not self.imported:
                    self.imported = True
                    import_schedule(
                        [
                            make_interval(room="301", start=1, end=10),
                            make_interval(room="302", start=1, end=10),
                        ],
                        catalog,
                        store,
                    )
                return super().free_runs(room, period_start, period_end, busy, min_continuous)

        stale = find_available_rooms(query, catalog, store, cache, ImportingEngine())
        fresh = find_available_rooms(query, catalog, store, cache)

        assert [r.room for r in stale.rooms] == ["301"]
        assert fresh.rooms == []

    def test_entry_from_other_generation_ignored(self):
        """Test a lookup for another schedule generation misses."""
        cache = AvailabilityCache()
        cache.set("key", AvailabilityResponse(3, None, "1-10", "A1"), generation=1)

        assert cache.get("key", generation=2) is None
        assert cache.get("key", generation=1) is not None
        assert len(cache) == 1


class TestRoomStatus:
    """Tests for room_status function."""

    def test_building_status(self, catalog, store):
        """Test free and occupied rooms of a building."""
        statuses = room_status(3, 1, 3, catalog, store, building="A1")

        assert [(s.room, s.status) for s in statuses] == [("301", "free"), ("302", "occupied")]
        assert statuses[1].occupied_by.course_code == "MATH202"
        assert statuses[1].to_dict()["periods"] == "1-10"

    def test_all_buildings(self, catalog, store):
        """Test every active room is reported without a building filter."""
        statuses = room_status(3, 8, 8, catalog, store)

        assert [(s.building, s.room, s.status) for s in statuses] == [
            ("A1", "301", "occupied"),
            ("A1", "302", "occupied"),
            ("A2", "201", "free"),
        ]

    def test_date_filter(self, catalog, store):
        """Test classes outside their effective range are ignored."""
        statuses = room_status(3, 8, 8, catalog, store, building="A1", on=date(2024, 12, 1))
        assert [s.status for s in statuses] == ["free", "occupied"]
