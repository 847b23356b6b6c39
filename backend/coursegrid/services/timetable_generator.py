from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from time import perf_counter

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coursegrid.core.exceptions import AppError, InputUnavailableError, PersistenceFailureError
from coursegrid.db.unit_of_work import UnitOfWork
from coursegrid.models.course import Course, Semester
from coursegrid.models.faculty import Faculty
from coursegrid.models.room import Room
from coursegrid.services.conflict_tracker import ConflictTracker
from coursegrid.services.slot_assigner import Assignment, PartialSchedulingWarning, SlotAssigner
from coursegrid.services.time_grid import DEFAULT_TIME_GRID, TimeGrid

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    timetable_id: str
    assignments_count: int
    message: str
    warnings: list[PartialSchedulingWarning] = field(default_factory=list)
    assignments: list[Assignment] = field(default_factory=list)


@contextmanager
def _database_errors(error_type: type[AppError], message: str, **details) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise error_type(message, details={**details, "error": exc.__class__.__name__}) from exc


class TimetableGenerator:
    """Builds and stores a new active timetable for one term in a single transaction.

    Runs for the same term must be serialised by the caller; two overlapping
    runs can both deactivate each other's timetable.
    """

    def __init__(self, db: Session, *, grid: TimeGrid = DEFAULT_TIME_GRID) -> None:
        self.db = db
        self.grid = grid

    def generate(
        self,
        semester: Semester | str,
        year: int,
        name: str,
        *,
        triggered_by: str | None = None,
    ) -> GenerationResult:
        semester = Semester(semester)
        started = perf_counter()
        logger.info(
            "TIMETABLE GENERATION START | semester=%s | year=%s | name=%s | triggered_by=%s",
            semester.value,
            year,
            name,
            triggered_by,
        )
        try:
            with UnitOfWork(self.db) as uow:
                with _database_errors(PersistenceFailureError, "Failed to create timetable", stage="create"):
                    timetable = uow.timetables.create_timetable(name=name, semester=semester, year=year)
                    timetable_id = timetable.id
                    deactivated = uow.timetables.deactivate_other_timetables(
                        semester=semester, year=year, keep_id=timetable_id
                    )

                with _database_errors(InputUnavailableError, "Failed to load scheduling input", stage="load"):
                    courses = uow.entities.list_courses_by_term(semester, year)
                    faculty = uow.entities.list_all_faculty()
                    rooms = uow.entities.list_all_rooms_by_capacity_desc()

                assignments, warnings = self._schedule(timetable_id, courses, faculty, rooms)

                with _database_errors(PersistenceFailureError, "Failed to store timetable slots", stage="persist"):
                    uow.timetables.bulk_insert_assignments(assignments)
                    uow.timetables.record_activity(
                        actor=triggered_by,
                        action="timetable.generate",
                        entity_id=timetable_id,
                        details={
                            "semester": semester.value,
                            "year": year,
                            "name": name,
                            "assignments": len(assignments),
                            "partially_scheduled": [warning.course_id for warning in warnings],
                            "deactivated": deactivated,
                        },
                    )
                    uow.commit()
        except Exception:
            logger.exception(
                "TIMETABLE GENERATION FAILED | semester=%s | year=%s | name=%s | wall_ms=%s",
                semester.value,
                year,
                name,
                int((perf_counter() - started) * 1000),
            )
            raise

        message = f"Generated timetable with {len(assignments)} slots"
        if warnings:
            message += f"; {len(warnings)} course(s) partially scheduled"
        logger.info(
            "TIMETABLE GENERATION COMPLETE | timetable_id=%s | courses=%s | faculty=%s | rooms=%s "
            "| assignments=%s | partial=%s | deactivated=%s | wall_ms=%s",
            timetable_id,
            len(courses),
            len(faculty),
            len(rooms),
            len(assignments),
            len(warnings),
            deactivated,
            int((perf_counter() - started) * 1000),
        )
        return GenerationResult(
            timetable_id=timetable_id,
            assignments_count=len(assignments),
            message=message,
            warnings=warnings,
            assignments=assignments,
        )

    def _schedule(
        self,
        timetable_id: str,
        courses: list[Course],
        faculty: list[Faculty],
        rooms: list[Room],
    ) -> tuple[list[Assignment], list[PartialSchedulingWarning]]:
        tracker = ConflictTracker(
            faculty_ids=[member.id for member in faculty],
            room_ids=[room.id for room in rooms],
        )
        assigner = SlotAssigner(grid=self.grid, faculty=faculty, rooms=rooms, tracker=tracker)

        assignments: list[Assignment] = []
        warnings: list[PartialSchedulingWarning] = []
        for course in courses:
            schedule = assigner.assign(course, timetable_id)
            assignments.extend(schedule.assignments)
            if schedule.warning is not None:
                warnings.append(schedule.warning)
        return assignments, warnings
