"""Entity store: lookups, active-schedule snapshots and schedule writes."""
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, aliased, joinedload

from timetable import models
from timetable.core.exceptions import NotFoundError

logger = logging.getLogger(__name__)


def _value(v):
    """Plain column value for a str Enum member or a string."""
    return getattr(v, "value", v)


def _get_or_raise(db: Session, model, entity_id: int, name: str, *options):
    obj = db.query(model).options(*options).filter(model.id == entity_id).first()
    if obj is None:
        raise NotFoundError(name, entity_id)
    return obj


def _schedule_load_options():
    return (
        joinedload(models.Schedule.lesson).joinedload(models.Lesson.semester),
        joinedload(models.Schedule.lesson).joinedload(models.Lesson.group),
        joinedload(models.Schedule.lesson).joinedload(models.Lesson.teacher),
        joinedload(models.Schedule.lesson).joinedload(models.Lesson.subject),
        joinedload(models.Schedule.period),
        joinedload(models.Schedule.room),
    )


def _active(schedules) -> List[models.Schedule]:
    return [s for s in schedules if s.is_active]


# ---- Lookups ----

def get_semester(db: Session, semester_id: int) -> models.Semester:
    return _get_or_raise(db, models.Semester, semester_id, "Semester", joinedload(models.Semester.periods))


def get_period(db: Session, period_id: int) -> models.Period:
    return _get_or_raise(db, models.Period, period_id, "Period")


def get_room(db: Session, room_id: int) -> models.Room:
    return _get_or_raise(db, models.Room, room_id, "Room")


def get_group(db: Session, group_id: int) -> models.Group:
    return _get_or_raise(db, models.Group, group_id, "Group")


def get_teacher(db: Session, teacher_id: int) -> models.Teacher:
    return _get_or_raise(db, models.Teacher, teacher_id, "Teacher")


def get_lesson(db: Session, lesson_id: int) -> models.Lesson:
    return _get_or_raise(
        db,
        models.Lesson,
        lesson_id,
        "Lesson",
        joinedload(models.Lesson.group),
        joinedload(models.Lesson.teacher),
        joinedload(models.Lesson.semester),
    )


def get_schedule(db: Session, schedule_id: int) -> models.Schedule:
    return _get_or_raise(db, models.Schedule, schedule_id, "Schedule", *_schedule_load_options())


# ---- Active snapshots ----

def schedules_at_slot(db: Session, semester_id: int, day_of_week, period_id: int) -> List[models.Schedule]:
    """Active schedules of a semester occupying one (day, period) weekly slot, any parity."""
    rows = (
        db.query(models.Schedule)
        .options(*_schedule_load_options())
        .join(models.Lesson, models.Schedule.lesson_id == models.Lesson.id)
        .filter(
            models.Lesson.semester_id == semester_id,
            models.Schedule.day_of_week == _value(day_of_week),
            models.Schedule.period_id == period_id,
        )
        .all()
    )
    return _active(rows)


def active_schedules(
    db: Session,
    semester_id: int,
    *,
    group_id: Optional[int] = None,
    teacher_id: Optional[int] = None,
    room_id: Optional[int] = None,
) -> List[models.Schedule]:
    q = (
        db.query(models.Schedule)
        .options(*_schedule_load_options())
        .join(models.Lesson, models.Schedule.lesson_id == models.Lesson.id)
        .filter(models.Lesson.semester_id == semester_id)
    )
    if group_id is not None:
        q = q.filter(models.Lesson.group_id == group_id)
    if teacher_id is not None:
        q = q.filter(models.Lesson.teacher_id == teacher_id)
    if room_id is not None:
        q = q.filter(models.Schedule.room_id == room_id)
    return _active(q.order_by(models.Schedule.id).all())


def schedules_by_date_range_for_teacher(db: Session, from_date: date, to_date: date, teacher_id: int) -> List[models.Schedule]:
    """Active schedules of a teacher whose semester overlaps ``[from_date, to_date]``."""
    rows = (
        db.query(models.Schedule)
        .options(*_schedule_load_options())
        .join(models.Lesson, models.Schedule.lesson_id == models.Lesson.id)
        .join(models.Semester, models.Lesson.semester_id == models.Semester.id)
        .filter(
            models.Lesson.teacher_id == teacher_id,
            models.Semester.start_day <= to_date,
            models.Semester.end_day >= from_date,
        )
        .order_by(models.Schedule.id)
        .all()
    )
    return _active(rows)


def temporary_schedules_by_date_range_for_teacher(db: Session, from_date: date, to_date: date, teacher_id: int) -> List[models.TemporarySchedule]:
    """Overrides bound to a schedule, either of this teacher's lessons or substituting this teacher."""
    base_lesson = aliased(models.Lesson)
    return (
        db.query(models.TemporarySchedule)
        .options(
            joinedload(models.TemporarySchedule.room),
            joinedload(models.TemporarySchedule.teacher),
            joinedload(models.TemporarySchedule.subject),
            joinedload(models.TemporarySchedule.group),
            joinedload(models.TemporarySchedule.period),
        )
        .join(models.Schedule, models.TemporarySchedule.schedule_id == models.Schedule.id)
        .join(base_lesson, models.Schedule.lesson_id == base_lesson.id)
        .filter(
            models.TemporarySchedule.date >= from_date,
            models.TemporarySchedule.date <= to_date,
            or_(models.TemporarySchedule.teacher_id == teacher_id, base_lesson.teacher_id == teacher_id),
        )
        .order_by(models.TemporarySchedule.date, models.TemporarySchedule.id)
        .all()
    )


def vacations_by_date_range(db: Session, from_date: date, to_date: date) -> List[models.TemporarySchedule]:
    return (
        db.query(models.TemporarySchedule)
        .filter(
            models.TemporarySchedule.schedule_id.is_(None),
            models.TemporarySchedule.vacation.is_(True),
            models.TemporarySchedule.date >= from_date,
            models.TemporarySchedule.date <= to_date,
        )
        .order_by(models.TemporarySchedule.date, models.TemporarySchedule.id)
        .all()
    )


def active_rooms(db: Session) -> List[models.Room]:
    return (
        db.query(models.Room)
        .filter(models.Room.disabled.is_(False))
        .order_by(models.Room.sort_order, models.Room.name, models.Room.id)
        .all()
    )


def teacher_wishes(db: Session, teacher_id: int) -> List[models.TeacherWish]:
    return db.query(models.TeacherWish).filter(models.TeacherWish.teacher_id == teacher_id).all()


# ---- Writes ----

def lock_group(db: Session, group_id: int) -> models.Group:
    """Row lock serializing schedule writes of one group until the transaction ends."""
    return db.query(models.Group).filter(models.Group.id == group_id).with_for_update().one()


def create_schedule(db: Session, *, lesson_id: int, period_id: int, room_id: int, day_of_week, parity) -> models.Schedule:
    schedule = models.Schedule(
        lesson_id=lesson_id,
        period_id=period_id,
        room_id=room_id,
        day_of_week=_value(day_of_week),
        parity=_value(parity),
    )
    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    logger.debug("Created schedule id=%s", schedule.id)
    return schedule


def update_schedule(db: Session, schedule: models.Schedule, *, lesson_id: int, period_id: int, room_id: int, day_of_week, parity) -> models.Schedule:
    schedule.lesson_id = lesson_id
    schedule.period_id = period_id
    schedule.room_id = room_id
    schedule.day_of_week = _value(day_of_week)
    schedule.parity = _value(parity)
    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    logger.debug("Updated schedule id=%s", schedule.id)
    return schedule


def delete_schedule(db: Session, schedule: models.Schedule) -> None:
    db.query(models.TemporarySchedule).filter(models.TemporarySchedule.schedule_id == schedule.id).delete(synchronize_session=False)
    db.delete(schedule)
    db.commit()


def delete_schedules_by_semester(db: Session, semester_id: int) -> int:
    ids = [
        row.id
        for row in db.query(models.Schedule.id)
        .join(models.Lesson, models.Schedule.lesson_id == models.Lesson.id)
        .filter(models.Lesson.semester_id == semester_id)
    ]
    if not ids:
        return 0
    db.query(models.TemporarySchedule).filter(models.TemporarySchedule.schedule_id.in_(ids)).delete(synchronize_session=False)
    deleted = db.query(models.Schedule).filter(models.Schedule.id.in_(ids)).delete(synchronize_session=False)
    db.commit()
    return deleted
