import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from coursegrid.api.deps import get_db, get_time_grid, require_admin
from coursegrid.core.exceptions import ResourceNotFoundError
from coursegrid.models.course import Semester
from coursegrid.models.faculty import Faculty
from coursegrid.models.room import Room
from coursegrid.models.timetable import Timetable, TimetableSlot
from coursegrid.schemas.conflict import ConflictReport
from coursegrid.schemas.timetable import (
    GenerateTimetableRequest,
    GenerateTimetableResponse,
    PartialSchedulingWarningOut,
    TimetableDetailOut,
    TimetableOut,
    TimetableSlotOut,
)
from coursegrid.services.conflict_audit import ConflictAuditService
from coursegrid.services.term_lock import term_generation_lock
from coursegrid.services.time_grid import TimeGrid
from coursegrid.services.timetable_generator import TimetableGenerator

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_timetable_or_404(db: Session, timetable_id: str) -> Timetable:
    timetable = db.get(Timetable, timetable_id)
    if timetable is None:
        raise ResourceNotFoundError("Timetable", timetable_id)
    return timetable


def _load_slots(db: Session, timetable_id: str) -> list[TimetableSlot]:
    return list(
        db.execute(
            select(TimetableSlot)
            .where(TimetableSlot.timetable_id == timetable_id)
            .order_by(TimetableSlot.day_of_week, TimetableSlot.start_time, TimetableSlot.room_id)
        ).scalars()
    )


@router.post("/generate", response_model=GenerateTimetableResponse, status_code=status.HTTP_201_CREATED)
def generate_timetable(
    payload: GenerateTimetableRequest,
    actor: str = Depends(require_admin),
    db: Session = Depends(get_db),
    grid: TimeGrid = Depends(get_time_grid),
) -> GenerateTimetableResponse:
    # The generator does not coordinate concurrent runs; serialise per term here.
    with term_generation_lock(payload.semester, payload.year):
        result = TimetableGenerator(db, grid=grid).generate(
            payload.semester,
            payload.year,
            payload.name,
            triggered_by=actor,
        )
    return GenerateTimetableResponse(
        timetable_id=result.timetable_id,
        assignments_count=result.assignments_count,
        message=result.message,
        warnings=[PartialSchedulingWarningOut.model_validate(warning) for warning in result.warnings],
    )


@router.get("/", response_model=list[TimetableOut])
def list_timetables(
    semester: Semester | None = Query(default=None),
    year: int | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[TimetableOut]:
    query = select(Timetable)
    if semester is not None:
        query = query.where(Timetable.semester == semester)
    if year is not None:
        query = query.where(Timetable.year == year)
    query = query.order_by(Timetable.created_at.desc(), Timetable.name)
    return list(db.execute(query).scalars())


@router.get("/active", response_model=TimetableDetailOut)
def get_active_timetable(
    semester: Semester = Query(...),
    year: int = Query(...),
    db: Session = Depends(get_db),
) -> TimetableDetailOut:
    timetable = db.execute(
        select(Timetable).where(
            Timetable.semester == semester,
            Timetable.year == year,
            Timetable.is_active.is_(True),
        )
    ).scalar_one_or_none()
    if timetable is None:
        raise ResourceNotFoundError("Active timetable", f"{semester.value}-{year}")
    return _detail(db, timetable)


@router.get("/{timetable_id}", response_model=TimetableDetailOut)
def get_timetable(timetable_id: str, db: Session = Depends(get_db)) -> TimetableDetailOut:
    return _detail(db, _get_timetable_or_404(db, timetable_id))


@router.get("/{timetable_id}/conflicts", response_model=ConflictReport)
def get_timetable_conflicts(timetable_id: str, db: Session = Depends(get_db)) -> ConflictReport:
    _get_timetable_or_404(db, timetable_id)
    slots = _load_slots(db, timetable_id)
    room_names = {room.id: room.name for room in db.execute(select(Room)).scalars()}
    faculty_names = {member.id: member.name for member in db.execute(select(Faculty)).scalars()}
    report = ConflictAuditService(timetable_id, slots, room_names, faculty_names).detect_conflicts()
    if report.conflicts:
        logger.warning(
            "TIMETABLE CONFLICTS FOUND | timetable_id=%s | conflicts=%s",
            timetable_id,
            len(report.conflicts),
        )
    return report


def _detail(db: Session, timetable: Timetable) -> TimetableDetailOut:
    slots = _load_slots(db, timetable.id)
    return TimetableDetailOut(
        id=timetable.id,
        name=timetable.name,
        semester=timetable.semester,
        year=timetable.year,
        is_active=timetable.is_active,
        created_at=timetable.created_at,
        slots=[TimetableSlotOut.model_validate(slot) for slot in slots],
    )
