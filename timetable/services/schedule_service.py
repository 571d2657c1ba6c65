"""Schedule orchestration: checked writes, typical-week views and calendar views.

Writes go through the group conflict check before reaching the entity store.
Typical-week views are assembled straight from active-schedule snapshots;
calendar views expand the snapshot over a date range and merge overrides.
"""
import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from timetable import models, schemas
from timetable.core.exceptions import ConflictError
from timetable.core.monitoring import EXPANSION_DURATION, SCHEDULE_WRITES
from timetable.schemas import DayOfWeek, Parity, WishStatus
from timetable.services import conflicts, crud, overrides, recurrence
from timetable.services.overrides import DailyAgenda

logger = logging.getLogger(__name__)


# ---- Writes ----

def _check_group_slot(db: Session, lesson: models.Lesson, payload: schemas.ScheduleCreate, exclude_schedule_id: Optional[int] = None) -> None:
    # Held until commit/rollback, serializes writers of the same group
    crud.lock_group(db, lesson.group_id)
    count = conflicts.conflict_count_for_group(
        db,
        lesson.semester_id,
        payload.day_of_week,
        payload.parity,
        payload.period_id,
        lesson.group_id,
        exclude_schedule_id=exclude_schedule_id,
    )
    if count:
        logger.warning(
            "Group %s already has %s schedule(s) at semester=%s %s %s period=%s",
            lesson.group_id, count, lesson.semester_id, payload.day_of_week.value, payload.parity.value, payload.period_id,
        )
        raise ConflictError("You can't create schedule for this group, because one already exists")

    busy = conflicts.conflict_count_for_teacher(
        db,
        lesson.semester_id,
        payload.day_of_week,
        payload.parity,
        payload.period_id,
        lesson.teacher_id,
        exclude_schedule_id=exclude_schedule_id,
    )
    if busy:
        logger.warning("Teacher %s is double-booked at %s %s period=%s", lesson.teacher_id, payload.day_of_week.value, payload.parity.value, payload.period_id)


def _checked_write(db: Session, operation: str, lesson: models.Lesson, payload: schemas.ScheduleCreate, exclude_schedule_id: Optional[int] = None) -> None:
    try:
        _check_group_slot(db, lesson, payload, exclude_schedule_id)
    except ConflictError:
        db.rollback()
        SCHEDULE_WRITES.labels(operation=operation, outcome="conflict").inc()
        raise


def save(db: Session, payload: schemas.ScheduleCreate) -> models.Schedule:
    logger.info(
        "Saving schedule: lesson=%s %s %s period=%s room=%s",
        payload.lesson_id, payload.day_of_week.value, payload.parity.value, payload.period_id, payload.room_id,
    )
    lesson = crud.get_lesson(db, payload.lesson_id)
    crud.get_period(db, payload.period_id)
    crud.get_room(db, payload.room_id)
    _checked_write(db, "save", lesson, payload)

    schedule = crud.create_schedule(
        db,
        lesson_id=payload.lesson_id,
        period_id=payload.period_id,
        room_id=payload.room_id,
        day_of_week=payload.day_of_week,
        parity=payload.parity,
    )
    SCHEDULE_WRITES.labels(operation="save", outcome="ok").inc()
    logger.info("Saved schedule id=%s", schedule.id)
    return crud.get_schedule(db, schedule.id)


def update(db: Session, schedule_id: int, payload: schemas.ScheduleUpdate) -> models.Schedule:
    logger.info("Updating schedule id=%s", schedule_id)
    schedule = crud.get_schedule(db, schedule_id)
    lesson = crud.get_lesson(db, payload.lesson_id)
    crud.get_period(db, payload.period_id)
    crud.get_room(db, payload.room_id)
    _checked_write(db, "update", lesson, payload, exclude_schedule_id=schedule_id)

    crud.update_schedule(
        db,
        schedule,
        lesson_id=payload.lesson_id,
        period_id=payload.period_id,
        room_id=payload.room_id,
        day_of_week=payload.day_of_week,
        parity=payload.parity,
    )
    SCHEDULE_WRITES.labels(operation="update", outcome="ok").inc()
    return crud.get_schedule(db, schedule_id)


def delete(db: Session, schedule_id: int) -> None:
    logger.info("Deleting schedule id=%s", schedule_id)
    schedule = crud.get_schedule(db, schedule_id)
    crud.delete_schedule(db, schedule)


def delete_by_semester(db: Session, semester_id: int) -> int:
    crud.get_semester(db, semester_id)
    deleted = crud.delete_schedules_by_semester(db, semester_id)
    logger.info("Deleted %s schedule(s) of semester id=%s", deleted, semester_id)
    return deleted


def get_by_id(db: Session, schedule_id: int) -> models.Schedule:
    return crud.get_schedule(db, schedule_id)


def get_by_semester(db: Session, semester_id: int, teacher_id: Optional[int] = None) -> List[models.Schedule]:
    """Active schedules of a semester, optionally narrowed to one teacher."""
    crud.get_semester(db, semester_id)
    if teacher_id is not None:
        crud.get_teacher(db, teacher_id)
    return crud.active_schedules(db, semester_id, teacher_id=teacher_id)


# ---- Slot checks ----

def _class_suits_to_teacher(db: Session, teacher_id: int, day_of_week: DayOfWeek, parity: Parity, period_id: int) -> bool:
    """False only when the teacher marked an overlapping slot as BAD."""
    for wish in crud.teacher_wishes(db, teacher_id):
        if (
            wish.status == WishStatus.BAD.value
            and wish.day_of_week == day_of_week.value
            and wish.period_id == period_id
            and conflicts.parities_intersect(parity, wish.parity)
        ):
            return False
    return True


def get_info_for_creating_schedule(
    db: Session,
    semester_id: int,
    day_of_week: DayOfWeek,
    parity: Parity,
    period_id: int,
    lesson_id: int,
) -> schemas.CreateScheduleInfo:
    logger.info(
        "Info for creating schedule: semester=%s %s %s period=%s lesson=%s",
        semester_id, day_of_week.value, parity.value, period_id, lesson_id,
    )
    crud.get_semester(db, semester_id)
    crud.get_period(db, period_id)
    lesson = crud.get_lesson(db, lesson_id)

    if conflicts.conflict_count_for_group(db, semester_id, day_of_week, parity, period_id, lesson.group_id):
        logger.warning("Schedule for group %s already exists at %s %s period=%s", lesson.group_id, day_of_week.value, parity.value, period_id)
        raise ConflictError("You can't create schedule for this group, because one already exists")

    teacher_busy = conflicts.conflict_count_for_teacher(db, semester_id, day_of_week, parity, period_id, lesson.teacher_id)
    rooms = conflicts.free_rooms(db, semester_id, day_of_week, parity, period_id)
    return schemas.CreateScheduleInfo(
        teacher_available=teacher_busy == 0,
        class_suits_to_teacher=_class_suits_to_teacher(db, lesson.teacher_id, day_of_week, parity, period_id),
        rooms=[schemas.RoomOut.model_validate(r) for r in rooms],
    )


def conflict_counts(
    db: Session,
    semester_id: int,
    day_of_week: DayOfWeek,
    parity: Parity,
    period_id: int,
    *,
    group_id: Optional[int] = None,
    teacher_id: Optional[int] = None,
    exclude_schedule_id: Optional[int] = None,
) -> schemas.ConflictCounts:
    crud.get_semester(db, semester_id)
    crud.get_period(db, period_id)
    result = schemas.ConflictCounts()
    if group_id is not None:
        crud.get_group(db, group_id)
        result.group_conflicts = conflicts.conflict_count_for_group(
            db, semester_id, day_of_week, parity, period_id, group_id, exclude_schedule_id
        )
    if teacher_id is not None:
        crud.get_teacher(db, teacher_id)
        result.teacher_conflicts = conflicts.conflict_count_for_teacher(
            db, semester_id, day_of_week, parity, period_id, teacher_id, exclude_schedule_id
        )
    return result


# ---- Typical week views ----

def _in_week(schedule: models.Schedule, parity: Parity) -> bool:
    return schedule.parity in (parity.value, Parity.WEEKLY.value)


def _sorted_periods(periods: Iterable[models.Period]) -> List[models.Period]:
    unique = {p.id: p for p in periods}
    return sorted(unique.values(), key=recurrence.period_sort_key)


def _days_of(schedules: Iterable[models.Schedule]) -> List[DayOfWeek]:
    return sorted({DayOfWeek(s.day_of_week) for s in schedules}, key=lambda d: d.weekday)


def _lesson_in_schedule(schedule: models.Schedule) -> schemas.LessonInSchedule:
    lesson = schedule.lesson
    return schemas.LessonInSchedule(
        id=lesson.id,
        lesson_type=lesson.lesson_type,
        subject_for_site=lesson.subject_for_site,
        teacher_for_site=lesson.teacher_for_site,
        link_to_meeting=lesson.link_to_meeting,
        grouped=lesson.grouped,
        room=schemas.RoomOut.model_validate(schedule.room),
    )


def _lessons_by_week(schedules: List[models.Schedule]) -> schemas.LessonsByWeek:
    even = next((s for s in schedules if _in_week(s, Parity.EVEN)), None)
    odd = next((s for s in schedules if _in_week(s, Parity.ODD)), None)
    return schemas.LessonsByWeek(
        even=_lesson_in_schedule(even) if even else None,
        odd=_lesson_in_schedule(odd) if odd else None,
    )


def _group_days(
    schedules: List[models.Schedule],
    days: Optional[List[DayOfWeek]] = None,
    periods: Optional[List[models.Period]] = None,
) -> List[schemas.DayWithClassesForGroup]:
    """
    Nest one group's schedules as day -> period -> {even, odd}.

    Without ``days``/``periods`` only days and periods that hold classes are
    listed; with them every given cell is present, empty or not.
    """
    by_day: Dict[str, List[models.Schedule]] = defaultdict(list)
    for s in schedules:
        by_day[s.day_of_week].append(s)

    result = []
    for day in days if days is not None else _days_of(schedules):
        day_schedules = by_day.get(day.value, [])
        day_periods = periods if periods is not None else _sorted_periods(s.period for s in day_schedules)
        classes = [
            schemas.ClassesInScheduleForGroup(
                period=schemas.PeriodOut.model_validate(period),
                weeks=_lessons_by_week([s for s in day_schedules if s.period_id == period.id]),
            )
            for period in day_periods
        ]
        result.append(schemas.DayWithClassesForGroup(day=day, classes=classes))
    return result


def _by_group(schedules: List[models.Schedule]) -> List[tuple]:
    groups: Dict[int, models.Group] = {}
    buckets: Dict[int, List[models.Schedule]] = defaultdict(list)
    for s in schedules:
        groups[s.lesson.group_id] = s.lesson.group
        buckets[s.lesson.group_id].append(s)
    ordered = sorted(groups.values(), key=lambda g: (g.title, g.id))
    return [(g, buckets[g.id]) for g in ordered]


def get_full_schedule_for_group(db: Session, semester_id: int, group_id: Optional[int] = None) -> List[schemas.ScheduleForGroup]:
    logger.info("Full schedule for semester=%s group=%s", semester_id, group_id)
    crud.get_semester(db, semester_id)
    if group_id is not None:
        group = crud.get_group(db, group_id)
        schedules = crud.active_schedules(db, semester_id, group_id=group_id)
        if not schedules:
            return []
        return [schemas.ScheduleForGroup(group=schemas.GroupOut.model_validate(group), days=_group_days(schedules))]

    schedules = crud.active_schedules(db, semester_id)
    return [
        schemas.ScheduleForGroup(group=schemas.GroupOut.model_validate(group), days=_group_days(group_schedules))
        for group, group_schedules in _by_group(schedules)
    ]


def get_full_schedule_for_semester(db: Session, semester_id: int) -> schemas.ScheduleFull:
    logger.info("Full semester grid for semester=%s", semester_id)
    semester = crud.get_semester(db, semester_id)
    days = sorted((DayOfWeek(d) for d in semester.days_of_week or []), key=lambda d: d.weekday)
    periods = _sorted_periods(semester.periods)
    schedules = crud.active_schedules(db, semester_id)
    return schemas.ScheduleFull(
        semester=schemas.SemesterOut.model_validate(semester),
        schedule=[
            schemas.ScheduleForGroup(
                group=schemas.GroupOut.model_validate(group),
                days=_group_days(group_schedules, days=days, periods=periods),
            )
            for group, group_schedules in _by_group(schedules)
        ],
    )


def _teacher_week(schedules: List[models.Schedule], parity: Parity) -> schemas.ClassesInScheduleForTeacher:
    week = [s for s in schedules if _in_week(s, parity)]
    classes = []
    for period in _sorted_periods(s.period for s in week):
        lessons = [
            schemas.LessonForTeacherSchedule(
                id=s.lesson.id,
                lesson_type=s.lesson.lesson_type,
                subject_for_site=s.lesson.subject_for_site,
                group=schemas.GroupOut.model_validate(s.lesson.group),
                room=s.room.name,
            )
            for s in week
            if s.period_id == period.id
        ]
        classes.append(schemas.ClassForTeacherSchedule(period=schemas.PeriodOut.model_validate(period), lessons=lessons))
    return schemas.ClassesInScheduleForTeacher(periods=classes)


def get_schedule_for_teacher(db: Session, semester_id: int, teacher_id: int) -> schemas.ScheduleForTeacher:
    logger.info("Schedule for teacher=%s semester=%s", teacher_id, semester_id)
    semester = crud.get_semester(db, semester_id)
    teacher = crud.get_teacher(db, teacher_id)
    schedules = crud.active_schedules(db, semester_id, teacher_id=teacher_id)

    days = []
    for day in _days_of(schedules):
        day_schedules = [s for s in schedules if s.day_of_week == day.value]
        days.append(
            schemas.DayWithClassesForTeacher(
                day=day,
                even_week=_teacher_week(day_schedules, Parity.EVEN),
                odd_week=_teacher_week(day_schedules, Parity.ODD),
            )
        )
    return schemas.ScheduleForTeacher(
        semester=schemas.SemesterOut.model_validate(semester),
        teacher=schemas.TeacherOut.model_validate(teacher),
        days=days,
    )


def _lesson_in_room(schedule: models.Schedule) -> schemas.LessonInRoomSchedule:
    lesson = schedule.lesson
    return schemas.LessonInRoomSchedule(
        lesson_id=lesson.id,
        lesson_type=lesson.lesson_type,
        subject_name=lesson.subject.name,
        surname=lesson.teacher.surname,
        group_id=lesson.group.id,
        group_name=lesson.group.title,
        class_id=schedule.period.id,
        class_name=schedule.period.name,
    )


def get_schedule_for_rooms(db: Session, semester_id: int) -> List[schemas.ScheduleForRoom]:
    logger.info("Room schedules for semester=%s", semester_id)
    crud.get_semester(db, semester_id)
    by_room: Dict[int, List[models.Schedule]] = defaultdict(list)
    for s in crud.active_schedules(db, semester_id):
        by_room[s.room_id].append(s)

    result = []
    for room in crud.active_rooms(db):
        room_schedules = sorted(by_room.get(room.id, []), key=lambda s: (recurrence.period_sort_key(s.period), s.id))
        days = []
        for day in DayOfWeek:
            day_schedules = [s for s in room_schedules if s.day_of_week == day.value]
            classes = schemas.RoomClasses(
                even=[_lesson_in_room(s) for s in day_schedules if _in_week(s, Parity.EVEN)],
                odd=[_lesson_in_room(s) for s in day_schedules if _in_week(s, Parity.ODD)],
            )
            days.append(schemas.DayWithClassesForRoom(day=day, classes=[classes]))
        result.append(schemas.ScheduleForRoom(room_id=room.id, room_name=room.name, room_type=room.type, schedules=days))
    return result


# ---- Calendar views ----

def _expand(schedules: List[models.Schedule], from_date: date, to_date: date) -> recurrence.Expanded:
    with EXPANSION_DURATION.time():
        return recurrence.expand(schedules, from_date, to_date)


def schedule_by_date_range_for_teacher(db: Session, from_date: date, to_date: date, teacher_id: int) -> List[DailyAgenda]:
    logger.info("Schedule by date range for teacher=%s: %s..%s", teacher_id, from_date, to_date)
    crud.get_teacher(db, teacher_id)
    schedules = crud.schedules_by_date_range_for_teacher(db, from_date, to_date, teacher_id)
    return overrides.merge(_expand(schedules, from_date, to_date))


def temporary_schedule_by_date_range_for_teacher(db: Session, from_date: date, to_date: date, teacher_id: int) -> List[DailyAgenda]:
    logger.info("Temporary schedule by date range for teacher=%s: %s..%s", teacher_id, from_date, to_date)
    crud.get_teacher(db, teacher_id)
    schedules = crud.schedules_by_date_range_for_teacher(db, from_date, to_date, teacher_id)
    expanded = _expand(schedules, from_date, to_date)
    temporary = crud.temporary_schedules_by_date_range_for_teacher(db, from_date, to_date, teacher_id)
    vacations = crud.vacations_by_date_range(db, from_date, to_date)
    logger.debug("Merging %s override(s) and %s vacation(s)", len(temporary), len(vacations))
    return overrides.merge(expanded, temporary, vacations)
