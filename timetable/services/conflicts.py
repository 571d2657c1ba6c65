"""
Conflict checks for weekly slots.

Two schedules at the same (semester, day, period) collide when they share
a group or a teacher and their parities intersect: WEEKLY intersects every
parity, EVEN and ODD intersect themselves and WEEKLY.
"""
import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from timetable import models
from timetable.core.monitoring import SCHEDULE_CONFLICTS
from timetable.schemas import Parity
from timetable.services import crud

logger = logging.getLogger(__name__)


def parities_intersect(candidate, existing) -> bool:
    candidate, existing = Parity(candidate), Parity(existing)
    if candidate == Parity.WEEKLY or existing == Parity.WEEKLY:
        return True
    return candidate == existing


def count_conflicts(
    schedules: Iterable[models.Schedule],
    parity,
    *,
    group_id: Optional[int] = None,
    teacher_id: Optional[int] = None,
    exclude_schedule_id: Optional[int] = None,
) -> int:
    """
    Count schedules of one slot snapshot that collide with a candidate parity.

    ``schedules`` must already be narrowed to one semester, day and period.
    Only schedules of ``group_id`` / ``teacher_id`` are considered when given.
    """
    count = 0
    for schedule in schedules:
        if exclude_schedule_id is not None and schedule.id == exclude_schedule_id:
            continue
        if not schedule.is_active:
            continue
        if group_id is not None and schedule.lesson.group_id != group_id:
            continue
        if teacher_id is not None and schedule.lesson.teacher_id != teacher_id:
            continue
        if parities_intersect(parity, schedule.parity):
            count += 1
    return count


def conflict_count_for_group(
    db: Session,
    semester_id: int,
    day_of_week,
    parity,
    period_id: int,
    group_id: int,
    exclude_schedule_id: Optional[int] = None,
) -> int:
    snapshot = crud.schedules_at_slot(db, semester_id, day_of_week, period_id)
    count = count_conflicts(snapshot, parity, group_id=group_id, exclude_schedule_id=exclude_schedule_id)
    if count:
        SCHEDULE_CONFLICTS.labels(kind="group").inc(count)
    return count


def conflict_count_for_teacher(
    db: Session,
    semester_id: int,
    day_of_week,
    parity,
    period_id: int,
    teacher_id: int,
    exclude_schedule_id: Optional[int] = None,
) -> int:
    snapshot = crud.schedules_at_slot(db, semester_id, day_of_week, period_id)
    count = count_conflicts(snapshot, parity, teacher_id=teacher_id, exclude_schedule_id=exclude_schedule_id)
    if count:
        SCHEDULE_CONFLICTS.labels(kind="teacher").inc(count)
    return count


def free_rooms(db: Session, semester_id: int, day_of_week, parity, period_id: int) -> List[models.Room]:
    """Active rooms not taken at the slot by a schedule whose parity intersects ``parity``.

    Occupancy is scoped to ``semester_id``: a room booked at the same slot by
    another, overlapping semester is still reported free.
    """
    occupied = {
        s.room_id
        for s in crud.schedules_at_slot(db, semester_id, day_of_week, period_id)
        if parities_intersect(parity, s.parity)
    }
    rooms = [room for room in crud.active_rooms(db) if room.id not in occupied]
    logger.debug("Free rooms for semester=%s %s %s period=%s: %s", semester_id, day_of_week, parity, period_id, len(rooms))
    return rooms
