from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import insert, update
from sqlalchemy.orm import Session

from coursegrid.db.repository import EntityRepository
from coursegrid.models.course import Semester
from coursegrid.models.timetable import Timetable, TimetableSlot
from coursegrid.services.audit import log_activity
from coursegrid.services.slot_assigner import Assignment


class TimetableGateway:
    """Staged writes for a generation run. Nothing here commits."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def create_timetable(self, *, name: str, semester: Semester, year: int) -> Timetable:
        timetable = Timetable(name=name, semester=semester, year=year, is_active=True)
        self.db.add(timetable)
        self.db.flush()
        return timetable

    def deactivate_other_timetables(self, *, semester: Semester, year: int, keep_id: str) -> int:
        result = self.db.execute(
            update(Timetable)
            .where(
                Timetable.semester == semester,
                Timetable.year == year,
                Timetable.id != keep_id,
                Timetable.is_active.is_(True),
            )
            .values(is_active=False)
        )
        return result.rowcount or 0

    def bulk_insert_assignments(self, assignments: Sequence[Assignment]) -> int:
        if not assignments:
            return 0
        self.db.execute(insert(TimetableSlot), [assignment.as_row() for assignment in assignments])
        return len(assignments)

    def record_activity(
        self,
        *,
        actor: str | None,
        action: str,
        entity_id: str,
        details: dict,
    ) -> None:
        log_activity(
            self.db,
            actor=actor,
            action=action,
            entity_type="timetable",
            entity_id=entity_id,
            details=details,
        )
        self.db.flush()


class UnitOfWork:
    """Scoped transaction around one generation run.

    Leaving the ``with`` block without calling :meth:`commit` rolls back,
    whatever the exit path (return, exception, or ``BaseException`` such as
    ``KeyboardInterrupt`` or task cancellation).
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self.timetables = TimetableGateway(db)
        self.entities = EntityRepository(db)
        self._committed = False

    def __enter__(self) -> "UnitOfWork":
        self._committed = False
        if not self.db.in_transaction():
            self.db.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if not self._committed:
            self.rollback()
        return False

    def commit(self) -> None:
        self.db.commit()
        self._committed = True

    def rollback(self) -> None:
        self.db.rollback()
