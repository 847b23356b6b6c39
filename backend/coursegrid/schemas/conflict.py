from typing import List, Literal

from pydantic import BaseModel


class ConflictDetail(BaseModel):
    id: str
    conflict_type: Literal["room_conflict", "faculty_conflict"]
    description: str
    affected_slots: List[str]  # timetable slot ids involved


class ConflictReport(BaseModel):
    timetable_id: str
    checked_slots: int
    conflicts: List[ConflictDetail]
