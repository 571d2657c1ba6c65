from datetime import date, time
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class Parity(str, Enum):
    EVEN = "EVEN"
    ODD = "ODD"
    WEEKLY = "WEEKLY"


class DayOfWeek(str, Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @classmethod
    def of(cls, d: date) -> "DayOfWeek":
        return WEEKDAYS[d.weekday()]

    @property
    def weekday(self) -> int:
        """0 for Monday .. 6 for Sunday, same as date.weekday()."""
        return WEEKDAYS.index(self)


WEEKDAYS = list(DayOfWeek)


class LessonType(str, Enum):
    LECTURE = "LECTURE"
    PRACTICAL = "PRACTICAL"
    LABORATORY = "LABORATORY"


class WishStatus(str, Enum):
    OK = "OK"
    BAD = "BAD"


# ---- Requests ----

class ScheduleCreate(BaseModel):
    lesson_id: int
    period_id: int
    room_id: int
    day_of_week: DayOfWeek
    parity: Parity = Parity.WEEKLY


class ScheduleUpdate(ScheduleCreate):
    pass


# ---- Entities ----

class PeriodOut(BaseModel):
    id: int
    name: str
    start_time: time
    end_time: time

    class Config:
        from_attributes = True


class RoomOut(BaseModel):
    id: int
    name: str
    type: Optional[str] = None

    class Config:
        from_attributes = True


class GroupOut(BaseModel):
    id: int
    title: str

    class Config:
        from_attributes = True


class TeacherOut(BaseModel):
    id: int
    name: str
    surname: str

    class Config:
        from_attributes = True


class SubjectOut(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class SemesterOut(BaseModel):
    id: int
    description: str
    start_day: date
    end_day: date
    days_of_week: List[DayOfWeek] = []

    class Config:
        from_attributes = True


class LessonOut(BaseModel):
    id: int
    hours: int
    lesson_type: LessonType
    grouped: bool
    teacher_for_site: str
    subject_for_site: str
    link_to_meeting: Optional[str] = None
    group: GroupOut
    teacher: TeacherOut
    subject: SubjectOut

    class Config:
        from_attributes = True


class ScheduleOut(BaseModel):
    id: int
    day_of_week: DayOfWeek
    parity: Parity
    lesson: LessonOut
    period: PeriodOut
    room: RoomOut

    class Config:
        from_attributes = True


class TemporaryScheduleOut(BaseModel):
    id: int
    date: date
    schedule_id: Optional[int] = None
    vacation: bool
    grouped: bool
    lesson_type: Optional[LessonType] = None
    subject_for_site: Optional[str] = None
    link_to_meeting: Optional[str] = None
    teacher: Optional[TeacherOut] = None
    subject: Optional[SubjectOut] = None
    group: Optional[GroupOut] = None
    room: Optional[RoomOut] = None
    period: Optional[PeriodOut] = None

    class Config:
        from_attributes = True


# ---- Calendar (date range) views ----

class OccurrenceOut(BaseModel):
    schedule: ScheduleOut
    override: Optional[TemporaryScheduleOut] = None

    class Config:
        from_attributes = True


class AgendaSlotOut(BaseModel):
    period: PeriodOut
    occurrences: List[OccurrenceOut]

    class Config:
        from_attributes = True


class DailyAgendaOut(BaseModel):
    date: date
    slots: List[AgendaSlotOut]

    class Config:
        from_attributes = True


# ---- Slot checks ----

class CreateScheduleInfo(BaseModel):
    teacher_available: bool
    class_suits_to_teacher: bool
    rooms: List[RoomOut]


class ConflictCounts(BaseModel):
    group_conflicts: Optional[int] = Field(None, description="Set when group_id was given")
    teacher_conflicts: Optional[int] = Field(None, description="Set when teacher_id was given")


# ---- Typical week views ----

class LessonInSchedule(BaseModel):
    id: int
    lesson_type: LessonType
    subject_for_site: str
    teacher_for_site: str
    link_to_meeting: Optional[str] = None
    grouped: bool
    room: RoomOut


class LessonsByWeek(BaseModel):
    even: Optional[LessonInSchedule] = None
    odd: Optional[LessonInSchedule] = None


class ClassesInScheduleForGroup(BaseModel):
    period: PeriodOut
    weeks: LessonsByWeek


class DayWithClassesForGroup(BaseModel):
    day: DayOfWeek
    classes: List[ClassesInScheduleForGroup]


class ScheduleForGroup(BaseModel):
    group: GroupOut
    days: List[DayWithClassesForGroup]


class ScheduleFull(BaseModel):
    semester: SemesterOut
    schedule: List[ScheduleForGroup]


class LessonForTeacherSchedule(BaseModel):
    id: int
    lesson_type: LessonType
    subject_for_site: str
    group: GroupOut
    room: str


class ClassForTeacherSchedule(BaseModel):
    period: PeriodOut
    lessons: List[LessonForTeacherSchedule]


class ClassesInScheduleForTeacher(BaseModel):
    periods: List[ClassForTeacherSchedule]


class DayWithClassesForTeacher(BaseModel):
    day: DayOfWeek
    even_week: ClassesInScheduleForTeacher
    odd_week: ClassesInScheduleForTeacher


class ScheduleForTeacher(BaseModel):
    semester: SemesterOut
    teacher: TeacherOut
    days: List[DayWithClassesForTeacher]


class LessonInRoomSchedule(BaseModel):
    lesson_id: int
    lesson_type: LessonType
    subject_name: str
    surname: str
    group_id: int
    group_name: str
    class_id: int
    class_name: str


class RoomClasses(BaseModel):
    even: List[LessonInRoomSchedule] = []
    odd: List[LessonInRoomSchedule] = []


class DayWithClassesForRoom(BaseModel):
    day: DayOfWeek
    classes: List[RoomClasses]


class ScheduleForRoom(BaseModel):
    room_id: int
    room_name: str
    room_type: Optional[str] = None
    schedules: List[DayWithClassesForRoom]
