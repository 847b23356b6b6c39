from coursegrid.models.activity_log import ActivityLog  # noqa: F401
from coursegrid.models.course import Course, Semester  # noqa: F401
from coursegrid.models.department import Department  # noqa: F401
from coursegrid.models.faculty import Faculty  # noqa: F401
from coursegrid.models.room import Room  # noqa: F401
from coursegrid.models.timetable import Timetable, TimetableSlot  # noqa: F401
