"""Room catalog loaded from rooms.csv."""

import csv
from pathlib import Path

from .models import Room


class RoomCatalog:
    """Known rooms, keyed by building code and room name.

    Expected CSV columns: building, room, is_active (optional, default true).
    """

    def __init__(self, rooms: list[Room] | None = None):
        self.rooms: list[Room] = []
        self._by_key: dict[str, Room] = {}
        self._by_building: dict[str, list[Room]] = {}

        for room in rooms or []:
            self.add(room)

    @classmethod
    def from_csv(cls, path: Path | str) -> "RoomCatalog":
        """Load rooms from a CSV file."""
        catalog = cls()
        with open(path, encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for row in reader:
                building = (row.get("building") or "").strip()
                name = (row.get("room") or "").strip()
                if not building or not name:
                    continue

                is_active_str = (row.get("is_active") or "true").strip().lower()
                catalog.add(
                    Room(
                        building=building,
                        name=name,
                        is_active=is_active_str not in ("false", "0", "no"),
                    )
                )
        return catalog

    def add(self, room: Room) -> None:
        """Register a room. A later room with the same key replaces the earlier one."""
        if room.key in self._by_key:
            previous = self._by_key[room.key]
            self.rooms.remove(previous)
            self._by_building[previous.building].remove(previous)

        self.rooms.append(room)
        self._by_key[room.key] = room
        self._by_building.setdefault(room.building, []).append(room)

    def resolve(self, building: str, room: str) -> Room | None:
        """Find the catalog room for a parsed (building, room) pair."""
        return self._by_key.get(f"{building.strip()}-{room.strip()}")

    def rooms_in_building(self, building: str) -> list[Room]:
        """Get the active rooms of a building in catalog order."""
        return [r for r in self._by_building.get(building, []) if r.is_active]

    def active_rooms(self) -> list[Room]:
        """Get all active rooms."""
        return [r for r in self.rooms if r.is_active]

    def buildings(self) -> list[str]:
        """Get all building codes."""
        return sorted(self._by_building)

    def __len__(self) -> int:
        return len(self.rooms)
