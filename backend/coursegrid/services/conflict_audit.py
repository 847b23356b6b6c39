from collections import defaultdict
from typing import Dict, List

from coursegrid.models.timetable import TimetableSlot
from coursegrid.schemas.conflict import ConflictDetail, ConflictReport
from coursegrid.services.time_grid import Weekday, parse_time_to_minutes


class ConflictAuditService:
    """Re-checks a stored timetable for faculty and room double-booking."""

    def __init__(
        self,
        timetable_id: str,
        slots: List[TimetableSlot],
        room_names: Dict[str, str],
        faculty_names: Dict[str, str],
    ):
        self.timetable_id = timetable_id
        self.slots = slots
        self.room_names = room_names
        self.faculty_names = faculty_names

    def detect_conflicts(self) -> ConflictReport:
        conflicts: List[ConflictDetail] = []

        # Only slots on the same day can overlap
        slots_by_day = defaultdict(list)
        for slot in self.slots:
            slots_by_day[slot.day_of_week].append(slot)

        for day, day_slots in slots_by_day.items():
            n = len(day_slots)
            for i in range(n):
                s1 = day_slots[i]
                start1, end1 = parse_time_to_minutes(s1.start_time), parse_time_to_minutes(s1.end_time)
                for j in range(i + 1, n):
                    s2 = day_slots[j]
                    start2, end2 = parse_time_to_minutes(s2.start_time), parse_time_to_minutes(s2.end_time)
                    if max(start1, start2) >= min(end1, end2):
                        continue

                    when = f"{Weekday(day).label} {s1.start_time}"
                    if s1.room_id == s2.room_id:
                        room_name = self.room_names.get(s1.room_id, s1.room_id)
                        conflicts.append(ConflictDetail(
                            id=f"room-{s1.id}-{s2.id}",
                            conflict_type="room_conflict",
                            description=f"Room overlap in {room_name} on {when}: {s1.course_id} and {s2.course_id}",
                            affected_slots=[s1.id, s2.id],
                        ))
                    if s1.faculty_id == s2.faculty_id:
                        faculty_name = self.faculty_names.get(s1.faculty_id, s1.faculty_id)
                        conflicts.append(ConflictDetail(
                            id=f"fac-{s1.id}-{s2.id}",
                            conflict_type="faculty_conflict",
                            description=f"Faculty overlap for {faculty_name} on {when}: {s1.course_id} and {s2.course_id}",
                            affected_slots=[s1.id, s2.id],
                        ))

        return ConflictReport(timetable_id=self.timetable_id, checked_slots=len(self.slots), conflicts=conflicts)
