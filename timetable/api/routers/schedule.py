import logging
from datetime import date, datetime
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from timetable import schemas
from timetable.core.config import settings
from timetable.core.database import get_db
from timetable.core.security import require_admin
from timetable.schemas import DayOfWeek, Parity
from timetable.services import schedule_service as sched_svc

router = APIRouter(prefix="/schedules", tags=["schedule"])
logger = logging.getLogger(__name__)


def _parse_range(from_: str, to: str) -> Tuple[date, date]:
    try:
        from_date = datetime.strptime(from_, "%Y-%m-%d").date()
        to_date = datetime.strptime(to, "%Y-%m-%d").date()
    except ValueError as e:
        logger.warning("Bad date range %s..%s: %s", from_, to, e)
        raise HTTPException(status_code=400, detail=str(e))
    if from_date > to_date:
        raise HTTPException(status_code=400, detail="'from' must not be after 'to'")
    if (to_date - from_date).days + 1 > settings.max_date_range_days:
        raise HTTPException(status_code=400, detail=f"Date range is limited to {settings.max_date_range_days} days")
    return from_date, to_date


def _agenda_out(agenda) -> List[schemas.DailyAgendaOut]:
    return [schemas.DailyAgendaOut.model_validate(day) for day in agenda]


# --- Writes ---
@router.post(
    "",
    response_model=schemas.ScheduleOut,
    status_code=201,
    summary="Create a weekly schedule after the group conflict check",
)
def create_schedule(payload: schemas.ScheduleCreate, db: Session = Depends(get_db), _: bool = Depends(require_admin)):
    return sched_svc.save(db, payload)


@router.put(
    "/{schedule_id}",
    response_model=schemas.ScheduleOut,
    summary="Update a weekly schedule after the group conflict check",
)
def update_schedule(schedule_id: int, payload: schemas.ScheduleUpdate, db: Session = Depends(get_db), _: bool = Depends(require_admin)):
    return sched_svc.update(db, schedule_id, payload)


@router.delete("/semester/{semester_id}", summary="Delete every schedule of a semester")
def delete_semester_schedules(semester_id: int, db: Session = Depends(get_db), _: bool = Depends(require_admin)):
    deleted = sched_svc.delete_by_semester(db, semester_id)
    return {"deleted": deleted, "semester_id": semester_id}


@router.delete("/{schedule_id}", summary="Delete a weekly schedule")
def delete_schedule(schedule_id: int, db: Session = Depends(get_db), _: bool = Depends(require_admin)):
    sched_svc.delete(db, schedule_id)
    return {"deleted": True, "schedule_id": schedule_id}


# --- Lists ---
@router.get(
    "",
    response_model=List[schemas.ScheduleOut],
    summary="Active schedules of a semester, optionally for one teacher",
)
def list_schedules(semester_id: int, teacher_id: Optional[int] = None, db: Session = Depends(get_db)):
    return sched_svc.get_by_semester(db, semester_id, teacher_id)


# --- Slot checks ---
@router.get(
    "/data-before",
    response_model=schemas.CreateScheduleInfo,
    summary="Teacher availability, free rooms and teacher wishes for a candidate slot",
)
def data_before_creating(
    semester_id: int,
    day_of_week: DayOfWeek,
    period_id: int,
    lesson_id: int,
    parity: Parity = Parity.WEEKLY,
    db: Session = Depends(get_db),
):
    """Answers 409 when the lesson's group is already busy at that slot."""
    return sched_svc.get_info_for_creating_schedule(db, semester_id, day_of_week, parity, period_id, lesson_id)


@router.get(
    "/conflicts",
    response_model=schemas.ConflictCounts,
    summary="Count group and teacher conflicts at a weekly slot",
)
def conflicts(
    semester_id: int,
    day_of_week: DayOfWeek,
    period_id: int,
    parity: Parity = Parity.WEEKLY,
    group_id: Optional[int] = None,
    teacher_id: Optional[int] = None,
    exclude_schedule_id: Optional[int] = Query(None, description="Ignore this schedule, e.g. the one being edited"),
    db: Session = Depends(get_db),
):
    if group_id is None and teacher_id is None:
        raise HTTPException(status_code=400, detail="group_id or teacher_id is required")
    return sched_svc.conflict_counts(
        db,
        semester_id,
        day_of_week,
        parity,
        period_id,
        group_id=group_id,
        teacher_id=teacher_id,
        exclude_schedule_id=exclude_schedule_id,
    )


# --- Typical week ---
@router.get(
    "/full/groups",
    response_model=List[schemas.ScheduleForGroup],
    summary="Typical week per group (all groups of the semester by default)",
)
def full_schedule_for_groups(semester_id: int, group_id: Optional[int] = None, db: Session = Depends(get_db)):
    return sched_svc.get_full_schedule_for_group(db, semester_id, group_id)


@router.get(
    "/full/semester",
    response_model=schemas.ScheduleFull,
    summary="Semester grid over all configured days and periods",
)
def full_schedule_for_semester(semester_id: int, db: Session = Depends(get_db)):
    return sched_svc.get_full_schedule_for_semester(db, semester_id)


@router.get(
    "/full/teachers",
    response_model=schemas.ScheduleForTeacher,
    summary="Typical week for a teacher, split into even and odd weeks",
)
def full_schedule_for_teacher(semester_id: int, teacher_id: int, db: Session = Depends(get_db)):
    return sched_svc.get_schedule_for_teacher(db, semester_id, teacher_id)


@router.get(
    "/full/rooms",
    response_model=List[schemas.ScheduleForRoom],
    summary="Typical week per active room",
)
def full_schedule_for_rooms(semester_id: int, db: Session = Depends(get_db)):
    return sched_svc.get_schedule_for_rooms(db, semester_id)


# --- Calendar ---
@router.get(
    "/teachers/{teacher_id}/range",
    response_model=List[schemas.DailyAgendaOut],
    summary="Teacher's lessons on concrete dates",
)
def teacher_range(
    teacher_id: int,
    from_: str = Query(..., alias="from", description="Start date YYYY-MM-DD"),
    to: str = Query(..., description="End date YYYY-MM-DD"),
    db: Session = Depends(get_db),
):
    from_date, to_date = _parse_range(from_, to)
    return _agenda_out(sched_svc.schedule_by_date_range_for_teacher(db, from_date, to_date, teacher_id))


@router.get(
    "/teachers/{teacher_id}/range/temporary",
    response_model=List[schemas.DailyAgendaOut],
    summary="Teacher's lessons on concrete dates with one-date changes and vacations",
)
def teacher_range_temporary(
    teacher_id: int,
    from_: str = Query(..., alias="from", description="Start date YYYY-MM-DD"),
    to: str = Query(..., description="End date YYYY-MM-DD"),
    db: Session = Depends(get_db),
):
    from_date, to_date = _parse_range(from_, to)
    return _agenda_out(sched_svc.temporary_schedule_by_date_range_for_teacher(db, from_date, to_date, teacher_id))


@router.get("/{schedule_id}", response_model=schemas.ScheduleOut, summary="Get a weekly schedule by id")
def get_schedule(schedule_id: int, db: Session = Depends(get_db)):
    return sched_svc.get_by_id(db, schedule_id)
