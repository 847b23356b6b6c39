from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import NamedTuple

from coursegrid.core.config import Settings
from coursegrid.core.exceptions import ConfigurationError

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def parse_time_to_minutes(value: str) -> int:
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


class Weekday(IntEnum):
    """ISO weekday numbers; persisted as ``timetable_slots.day_of_week``."""

    monday = 1
    tuesday = 2
    wednesday = 3
    thursday = 4
    friday = 5
    saturday = 6
    sunday = 7

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, value: str) -> "Weekday":
        key = value.strip().lower()
        for day in cls:
            if day.name == key or day.name[:3] == key:
                return day
        raise ValueError(f"Invalid day value: {value}")


@dataclass(frozen=True)
class TimeSlot:
    start: str
    end: str

    @classmethod
    def parse(cls, value: str) -> "TimeSlot":
        start, sep, end = value.partition("-")
        if not sep:
            raise ValueError(f"Time slot must look like HH:MM-HH:MM, got {value!r}")
        return cls(start=start.strip(), end=end.strip())


class SlotKey(NamedTuple):
    day: Weekday
    start: str


class GridCell(NamedTuple):
    day: Weekday
    slot: TimeSlot

    @property
    def key(self) -> SlotKey:
        return SlotKey(self.day, self.slot.start)


@dataclass(frozen=True)
class TimeGrid:
    """Fixed weekly universe of (day, slot) cells the scheduler may assign into.

    Declaration order is the placement priority: days first, then slots within
    a day. Slots recur daily and must be strictly increasing without overlap.
    """

    days: tuple[Weekday, ...]
    slots: tuple[TimeSlot, ...]

    def __post_init__(self) -> None:
        if not self.days:
            raise ConfigurationError("Time grid needs at least one day")
        if not self.slots:
            raise ConfigurationError("Time grid needs at least one time slot")
        if len(set(self.days)) != len(self.days):
            raise ConfigurationError("Time grid days must be unique")

        previous_end = -1
        for slot in self.slots:
            try:
                start = parse_time_to_minutes(slot.start)
                end = parse_time_to_minutes(slot.end)
            except ValueError as exc:
                raise ConfigurationError(f"Invalid time slot {slot.start}-{slot.end}: {exc}") from exc
            if end <= start:
                raise ConfigurationError(f"Time slot {slot.start}-{slot.end} must end after it starts")
            if start < previous_end:
                raise ConfigurationError(
                    f"Time slot {slot.start}-{slot.end} overlaps or precedes the slot before it"
                )
            previous_end = end

    @property
    def size(self) -> int:
        return len(self.days) * len(self.slots)

    def cells(self) -> Iterator[GridCell]:
        """Yield every cell once, in priority order. Call again for a fresh scan."""
        return (GridCell(day, slot) for day in self.days for slot in self.slots)

    @classmethod
    def build(cls, days: Sequence[str | Weekday], slots: Sequence[str | TimeSlot]) -> "TimeGrid":
        try:
            parsed_days = tuple(day if isinstance(day, Weekday) else Weekday.parse(day) for day in days)
            parsed_slots = tuple(slot if isinstance(slot, TimeSlot) else TimeSlot.parse(slot) for slot in slots)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        return cls(days=parsed_days, slots=parsed_slots)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TimeGrid":
        return cls.build(settings.grid_days, settings.grid_slots)


DEFAULT_TIME_GRID = TimeGrid.build(
    ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
    [
        "09:00-10:00",
        "10:00-11:00",
        "11:00-12:00",
        "12:00-13:00",
        "14:00-15:00",
        "15:00-16:00",
        "16:00-17:00",
        "17:00-18:00",
    ],
)
