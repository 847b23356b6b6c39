from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from coursegrid.models.course import Course, Semester
from coursegrid.models.faculty import Faculty
from coursegrid.models.room import Room


class EntityRepository:
    """Read access to the reference data a generation run schedules from.

    Ordering is part of the contract: the greedy assigner breaks ties by the
    order returned here.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def list_courses_by_term(self, semester: Semester, year: int) -> list[Course]:
        query = (
            select(Course)
            .where(Course.semester == semester, Course.year == year)
            .order_by(Course.code, Course.id)
        )
        return list(self.db.execute(query).scalars())

    def list_all_faculty(self) -> list[Faculty]:
        return list(self.db.execute(select(Faculty).order_by(Faculty.name, Faculty.id)).scalars())

    def list_all_rooms_by_capacity_desc(self) -> list[Room]:
        query = select(Room).order_by(Room.capacity.desc(), Room.name, Room.id)
        return list(self.db.execute(query).scalars())
