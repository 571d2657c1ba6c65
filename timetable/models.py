from sqlalchemy import JSON, Boolean, Column, Date, ForeignKey, Integer, String, Table, Time
from sqlalchemy.orm import relationship

from timetable.core.database import Base


semester_periods = Table(
    "semester_periods",
    Base.metadata,
    Column("semester_id", Integer, ForeignKey("semesters.id", ondelete="CASCADE"), primary_key=True),
    Column("period_id", Integer, ForeignKey("periods.id", ondelete="CASCADE"), primary_key=True),
)


class Semester(Base):
    __tablename__ = "semesters"
    id = Column(Integer, primary_key=True, index=True)
    description = Column(String, nullable=False)
    start_day = Column(Date, nullable=False)
    end_day = Column(Date, nullable=False)
    # Active weekdays as DayOfWeek values, e.g. ["MONDAY", "TUESDAY"]
    days_of_week = Column(JSON, nullable=False, default=list)
    disabled = Column(Boolean, default=False, nullable=False)

    periods = relationship("Period", secondary=semester_periods)
    lessons = relationship("Lesson", back_populates="semester")


class Period(Base):
    __tablename__ = "periods"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)


class Room(Base):
    __tablename__ = "rooms"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    type = Column(String, nullable=True)
    sort_order = Column(Integer, default=0, nullable=False)
    disabled = Column(Boolean, default=False, nullable=False)


class Group(Base):
    __tablename__ = "groups"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, unique=True, index=True, nullable=False)
    disabled = Column(Boolean, default=False, nullable=False)


class Teacher(Base):
    __tablename__ = "teachers"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    surname = Column(String, index=True, nullable=False)
    disabled = Column(Boolean, default=False, nullable=False)


class Subject(Base):
    __tablename__ = "subjects"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    disabled = Column(Boolean, default=False, nullable=False)


class Lesson(Base):
    __tablename__ = "lessons"
    id = Column(Integer, primary_key=True, index=True)
    hours = Column(Integer, default=1, nullable=False)
    lesson_type = Column(String, nullable=False)  # LessonType value
    grouped = Column(Boolean, default=False, nullable=False)
    teacher_for_site = Column(String, nullable=False)
    subject_for_site = Column(String, nullable=False)
    link_to_meeting = Column(String, nullable=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False, index=True)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    semester_id = Column(Integer, ForeignKey("semesters.id"), nullable=False, index=True)

    teacher = relationship("Teacher")
    subject = relationship("Subject")
    group = relationship("Group")
    semester = relationship("Semester", back_populates="lessons")


class Schedule(Base):
    """One recurring weekly slot of a lesson."""

    __tablename__ = "schedules"
    id = Column(Integer, primary_key=True, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False, index=True)
    period_id = Column(Integer, ForeignKey("periods.id"), nullable=False, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    day_of_week = Column(String, nullable=False)  # DayOfWeek value
    parity = Column(String, nullable=False)  # Parity value

    lesson = relationship("Lesson")
    period = relationship("Period")
    room = relationship("Room")

    @property
    def semester(self):
        return self.lesson.semester

    @property
    def is_active(self) -> bool:
        """False when the room, semester, group, teacher or subject is disabled."""
        lesson = self.lesson
        return not (
            self.room.disabled
            or lesson.semester.disabled
            or lesson.group.disabled
            or lesson.teacher.disabled
            or lesson.subject.disabled
        )

    def __repr__(self) -> str:
        return f"Schedule(id={self.id}, lesson={self.lesson_id}, {self.day_of_week} {self.parity}, period={self.period_id}, room={self.room_id})"


class TemporarySchedule(Base):
    """
    A change valid for a single date.

    With schedule_id set it substitutes values of that schedule's occurrence
    (or cancels it when vacation is true); without schedule_id and with
    vacation it marks the whole date as a holiday.
    """

    __tablename__ = "temporary_schedules"
    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    schedule_id = Column(Integer, ForeignKey("schedules.id", ondelete="CASCADE"), nullable=True, index=True)
    vacation = Column(Boolean, default=False, nullable=False)
    grouped = Column(Boolean, default=False, nullable=False)
    lesson_type = Column(String, nullable=True)
    subject_for_site = Column(String, nullable=True)
    link_to_meeting = Column(String, nullable=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=True, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=True)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=True)
    period_id = Column(Integer, ForeignKey("periods.id"), nullable=True)
    semester_id = Column(Integer, ForeignKey("semesters.id"), nullable=True)

    schedule = relationship("Schedule")
    teacher = relationship("Teacher")
    subject = relationship("Subject")
    group = relationship("Group")
    room = relationship("Room")
    period = relationship("Period")
    semester = relationship("Semester")


class TeacherWish(Base):
    """A teacher's declared preference for one weekly slot."""

    __tablename__ = "teacher_wishes"
    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False, index=True)
    day_of_week = Column(String, nullable=False)
    parity = Column(String, nullable=False)
    period_id = Column(Integer, ForeignKey("periods.id"), nullable=False)
    status = Column(String, default="OK", nullable=False)  # OK | BAD
