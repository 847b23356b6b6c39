from __future__ import annotations

from collections.abc import Iterable

from coursegrid.core.exceptions import SchedulerError
from coursegrid.services.time_grid import SlotKey


class ConflictTracker:
    """Occupied slot keys per faculty member and per room for a single generation run."""

    def __init__(self, faculty_ids: Iterable[str], room_ids: Iterable[str]) -> None:
        self._faculty_slots: dict[str, set[SlotKey]] = {faculty_id: set() for faculty_id in faculty_ids}
        self._room_slots: dict[str, set[SlotKey]] = {room_id: set() for room_id in room_ids}

    def is_faculty_free(self, faculty_id: str, slot_key: SlotKey) -> bool:
        return slot_key not in self._occupied(self._faculty_slots, "Faculty", faculty_id)

    def is_room_free(self, room_id: str, slot_key: SlotKey) -> bool:
        return slot_key not in self._occupied(self._room_slots, "Room", room_id)

    def occupy(self, faculty_id: str, room_id: str, slot_key: SlotKey) -> None:
        faculty_slots = self._occupied(self._faculty_slots, "Faculty", faculty_id)
        room_slots = self._occupied(self._room_slots, "Room", room_id)
        # Check both before touching either so a bad call leaves no half-recorded state.
        if slot_key in faculty_slots:
            raise SchedulerError(
                "Faculty is already booked for this slot",
                details={"faculty_id": faculty_id, "day": int(slot_key.day), "start": slot_key.start},
            )
        if slot_key in room_slots:
            raise SchedulerError(
                "Room is already booked for this slot",
                details={"room_id": room_id, "day": int(slot_key.day), "start": slot_key.start},
            )
        faculty_slots.add(slot_key)
        room_slots.add(slot_key)

    @staticmethod
    def _occupied(slots_by_resource: dict[str, set[SlotKey]], resource_type: str, resource_id: str) -> set[SlotKey]:
        try:
            return slots_by_resource[resource_id]
        except KeyError:
            raise SchedulerError(
                f"{resource_type} {resource_id} is not tracked in this generation run",
                details={"resource_type": resource_type.lower(), "resource_id": resource_id},
            ) from None
