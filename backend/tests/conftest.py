import os

# Keep the module-level engine off the production database URL.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from coursegrid.api.deps import get_db
from coursegrid.db.base import Base
from coursegrid.main import app
from coursegrid.models.course import Course, Semester
from coursegrid.models.department import Department
from coursegrid.models.faculty import Faculty
from coursegrid.models.room import Room
from coursegrid.services.term_lock import clear_term_locks
import coursegrid.models  # noqa: F401


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory):
    clear_term_locks()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    clear_term_locks()


@pytest.fixture()
def seed_term(session_factory):
    """Insert a department with courses, faculty and rooms; returns their ids in load order."""

    def _seed(
        *,
        credits: list[int],
        faculty_count: int = 2,
        room_capacities: tuple[int, ...] = (120, 60),
        faculty_department: str | None = "CSE",
        semester: Semester = Semester.fall,
        year: int = 2026,
    ) -> dict:
        db = session_factory()
        try:
            cse = Department(id="dept-cse", code="CSE", name="Computer Science")
            other = Department(id="dept-me", code="ME", name="Mechanical Engineering")
            db.add_all([cse, other])
            department_ids = {"CSE": cse.id, "ME": other.id, None: None}

            courses = [
                Course(
                    id=f"course-{index}",
                    code=f"CS{100 + index}",
                    name=f"Course {index}",
                    department_id=cse.id,
                    semester=semester,
                    year=year,
                    credits=value,
                )
                for index, value in enumerate(credits, start=1)
            ]
            faculty = [
                Faculty(
                    id=f"faculty-{index}",
                    name=f"Prof {chr(64 + index)}",
                    email=f"prof{index}@example.edu",
                    department_id=department_ids[faculty_department],
                )
                for index in range(1, faculty_count + 1)
            ]
            rooms = [
                Room(id=f"room-{index}", name=f"LH-{100 + index}", capacity=capacity)
                for index, capacity in enumerate(room_capacities, start=1)
            ]
            db.add_all([*courses, *faculty, *rooms])
            db.commit()
            return {
                "course_ids": [f"course-{index}" for index in range(1, len(credits) + 1)],
                "faculty_ids": [f"faculty-{index}" for index in range(1, faculty_count + 1)],
                "room_ids": [
                    f"room-{index}"
                    for index, _ in sorted(
                        enumerate(room_capacities, start=1), key=lambda item: item[1], reverse=True
                    )
                ],
            }
        finally:
            db.close()

    return _seed
