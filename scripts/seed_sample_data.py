"""Seed departments, faculty, rooms and one term of courses, then generate a timetable.

Run:
  PYTHONPATH=backend python scripts/seed_sample_data.py

Re-running updates rows in place; set SEED_SKIP_GENERATE=true to only load data.
"""

from __future__ import annotations

import logging
import os

from sqlalchemy import select

from coursegrid.core.config import get_settings
from coursegrid.db.session import SessionLocal
from coursegrid.models.course import Course, Semester
from coursegrid.models.department import Department
from coursegrid.models.faculty import Faculty
from coursegrid.models.room import Room
from coursegrid.services.time_grid import TimeGrid
from coursegrid.services.timetable_generator import TimetableGenerator

SEMESTER = Semester(os.getenv("SEED_SEMESTER", "fall").strip().lower() or "fall")
YEAR = int(os.getenv("SEED_YEAR", "2026"))
SKIP_GENERATE = os.getenv("SEED_SKIP_GENERATE", "false").strip().lower() in {"1", "true", "yes", "on"}
EMAIL_DOMAIN = os.getenv("SEED_EMAIL_DOMAIN", "university.edu").strip().lower() or "university.edu"

DEPARTMENTS = {
    "CSE": "Computer Science and Engineering",
    "ECE": "Electronics and Communication Engineering",
    "MAT": "Mathematics",
}

# (name, department code or None for cross-department staff)
FACULTY = [
    ("Dr. Anitha Rao", "CSE"),
    ("Dr. Karthik Menon", "CSE"),
    ("Prof. Lakshmi Iyer", "CSE"),
    ("Dr. Vivek Nair", "ECE"),
    ("Prof. Divya Pillai", "ECE"),
    ("Dr. Suresh Babu", "MAT"),
    ("Prof. Meera Krishnan", None),
]

ROOMS = [
    ("Main Auditorium", "Central Block", 240),
    ("LH-101", "Academic Block", 120),
    ("LH-102", "Academic Block", 90),
    ("LH-201", "Academic Block", 60),
    ("Seminar Hall", "Library Block", 40),
]

# (code, name, department code, credits)
COURSES = [
    ("CS201", "Data Structures", "CSE", 4),
    ("CS202", "Database Systems", "CSE", 3),
    ("CS203", "Operating Systems", "CSE", 4),
    ("CS204", "Computer Networks", "CSE", 3),
    ("EC201", "Signals and Systems", "ECE", 4),
    ("EC202", "Digital Electronics", "ECE", 3),
    ("MA201", "Probability and Statistics", "MAT", 4),
    ("MA202", "Discrete Mathematics", "MAT", 3),
    ("HS201", "Professional Ethics", "CSE", 0),
]


def _email_for(name: str) -> str:
    local = name.lower().replace("dr. ", "").replace("prof. ", "").replace(" ", ".")
    return f"{local}@{EMAIL_DOMAIN}"


def upsert_departments(session) -> dict[str, Department]:
    departments: dict[str, Department] = {}
    for code, name in DEPARTMENTS.items():
        department = session.execute(select(Department).where(Department.code == code)).scalar_one_or_none()
        if department is None:
            department = Department(code=code, name=name)
            session.add(department)
        else:
            department.name = name
        departments[code] = department
    session.flush()
    return departments


def upsert_faculty(session, departments: dict[str, Department]) -> None:
    for name, department_code in FACULTY:
        email = _email_for(name)
        department_id = departments[department_code].id if department_code else None
        member = session.execute(select(Faculty).where(Faculty.email == email)).scalar_one_or_none()
        if member is None:
            session.add(Faculty(name=name, email=email, department_id=department_id))
        else:
            member.name = name
            member.department_id = department_id


def upsert_rooms(session) -> None:
    for name, building, capacity in ROOMS:
        room = session.execute(select(Room).where(Room.name == name)).scalar_one_or_none()
        if room is None:
            session.add(Room(name=name, building=building, capacity=capacity))
        else:
            room.building = building
            room.capacity = capacity


def upsert_courses(session, departments: dict[str, Department]) -> None:
    for code, name, department_code, credits in COURSES:
        course = session.execute(select(Course).where(Course.code == code)).scalar_one_or_none()
        if course is None:
            course = Course(code=code)
            session.add(course)
        course.name = name
        course.department_id = departments[department_code].id
        course.semester = SEMESTER
        course.year = YEAR
        course.credits = credits


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    with SessionLocal() as session:
        departments = upsert_departments(session)
        upsert_faculty(session, departments)
        upsert_rooms(session)
        upsert_courses(session, departments)
        session.commit()

    print(
        f"Seeded {len(DEPARTMENTS)} departments, {len(FACULTY)} faculty, "
        f"{len(ROOMS)} rooms, {len(COURSES)} courses for {SEMESTER.value} {YEAR}."
    )
    if SKIP_GENERATE:
        return

    with SessionLocal() as session:
        grid = TimeGrid.from_settings(get_settings())
        result = TimetableGenerator(session, grid=grid).generate(
            SEMESTER,
            YEAR,
            f"{SEMESTER.value.title()} {YEAR} (seed)",
            triggered_by="seed-script",
        )
    print(f"{result.message} (timetable {result.timetable_id})")
    for warning in result.warnings:
        print(f"  warning: {warning.message}")


if __name__ == "__main__":
    main()
