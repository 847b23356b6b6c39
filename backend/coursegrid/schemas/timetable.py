from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, computed_field, field_validator

from coursegrid.models.course import Semester
from coursegrid.services.time_grid import Weekday


class GenerateTimetableRequest(BaseModel):
    semester: Semester
    year: int = Field(ge=2000, le=2100)
    name: str = Field(min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("Timetable name cannot be blank")
        return name


class PartialSchedulingWarningOut(BaseModel):
    course_id: str
    course_code: str | None = None
    required: int
    scheduled: int
    message: str

    model_config = {"from_attributes": True}


class GenerateTimetableResponse(BaseModel):
    timetable_id: str
    assignments_count: int
    message: str
    warnings: list[PartialSchedulingWarningOut] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class TimetableOut(BaseModel):
    id: str
    name: str
    semester: Semester
    year: int
    is_active: bool
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class TimetableSlotOut(BaseModel):
    id: str
    course_id: str
    faculty_id: str
    room_id: str
    day_of_week: int
    start_time: str
    end_time: str

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def day(self) -> str:
        return Weekday(self.day_of_week).label


class TimetableDetailOut(TimetableOut):
    slots: list[TimetableSlotOut] = Field(default_factory=list)
