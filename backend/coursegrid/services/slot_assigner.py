from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from coursegrid.core.exceptions import SchedulerError
from coursegrid.models.course import Course
from coursegrid.models.faculty import Faculty
from coursegrid.models.room import Room
from coursegrid.services.conflict_tracker import ConflictTracker
from coursegrid.services.time_grid import GridCell, SlotKey, TimeGrid, Weekday

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assignment:
    timetable_id: str
    course_id: str
    faculty_id: str
    room_id: str
    day: Weekday
    start_time: str
    end_time: str

    def as_row(self) -> dict:
        return {
            "timetable_id": self.timetable_id,
            "course_id": self.course_id,
            "faculty_id": self.faculty_id,
            "room_id": self.room_id,
            "day_of_week": int(self.day),
            "start_time": self.start_time,
            "end_time": self.end_time,
        }


@dataclass(frozen=True)
class PartialSchedulingWarning:
    course_id: str
    course_code: str | None
    required: int
    scheduled: int

    @property
    def message(self) -> str:
        label = self.course_code or self.course_id
        return f"Could not schedule all credits for course {label} ({self.scheduled}/{self.required} placed)"


@dataclass
class CourseSchedule:
    course_id: str
    assignments: list[Assignment] = field(default_factory=list)
    warning: PartialSchedulingWarning | None = None


class SlotAssigner:
    """Greedy first-fit placement of one-cell sessions, one per course credit.

    Faculty and rooms are tried in the order they were loaded; rooms are
    expected largest-first. A course meets at most once per cell, so its credit
    units spread across the week. There is no backtracking: a placed session is
    never moved to make room for a later one.
    """

    def __init__(
        self,
        *,
        grid: TimeGrid,
        faculty: Sequence[Faculty],
        rooms: Sequence[Room],
        tracker: ConflictTracker,
    ) -> None:
        self.grid = grid
        self.faculty = list(faculty)
        self.rooms = list(rooms)
        self.tracker = tracker

    def assign(self, course: Course, timetable_id: str) -> CourseSchedule:
        schedule = CourseSchedule(course_id=course.id)
        required = course.credits or 0
        if required < 0:
            raise SchedulerError(
                message=f"Course {getattr(course, 'code', None) or course.id} has negative credits",
                details={"course_id": course.id, "credits": required},
            )
        eligible = self._eligible_faculty(course)
        taken: set[SlotKey] = set()

        for _ in range(required):
            assignment = self._place_one(course, timetable_id, eligible, taken)
            if assignment is None:
                # Later credit units would scan the same exhausted grid.
                break
            schedule.assignments.append(assignment)

        if len(schedule.assignments) < required:
            schedule.warning = PartialSchedulingWarning(
                course_id=course.id,
                course_code=getattr(course, "code", None),
                required=required,
                scheduled=len(schedule.assignments),
            )
            logger.warning(
                "COURSE PARTIALLY SCHEDULED | course_id=%s | code=%s | required=%s | scheduled=%s",
                course.id,
                schedule.warning.course_code,
                required,
                len(schedule.assignments),
            )
        return schedule

    def _eligible_faculty(self, course: Course) -> list[Faculty]:
        return [
            member
            for member in self.faculty
            if member.department_id is None or member.department_id == course.department_id
        ]

    def _place_one(
        self,
        course: Course,
        timetable_id: str,
        eligible: list[Faculty],
        taken: set[SlotKey],
    ) -> Assignment | None:
        cells = self.grid.cells()
        for cell in cells:
            if cell.key in taken:
                continue
            selected = self._first_free_pair(cell, eligible)
            if selected is None:
                continue
            member, room = selected
            self.tracker.occupy(member.id, room.id, cell.key)
            taken.add(cell.key)
            return Assignment(
                timetable_id=timetable_id,
                course_id=course.id,
                faculty_id=member.id,
                room_id=room.id,
                day=cell.day,
                start_time=cell.slot.start,
                end_time=cell.slot.end,
            )
        return None

    def _first_free_pair(self, cell: GridCell, eligible: list[Faculty]) -> tuple[Faculty, Room] | None:
        key = cell.key
        member = next((item for item in eligible if self.tracker.is_faculty_free(item.id, key)), None)
        if member is None:
            return None
        room = next((item for item in self.rooms if self.tracker.is_room_free(item.id, key)), None)
        if room is None:
            return None
        return member, room
