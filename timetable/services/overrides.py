"""Merge expanded occurrences with one-date temporary schedules and vacations."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from timetable import models
from timetable.services.recurrence import Expanded


@dataclass(frozen=True)
class Occurrence:
    schedule: models.Schedule
    override: Optional[models.TemporarySchedule] = None


@dataclass(frozen=True)
class AgendaSlot:
    period: models.Period
    occurrences: List[Occurrence]


@dataclass(frozen=True)
class DailyAgenda:
    date: date
    slots: List[AgendaSlot]


def _same_period(a: models.Period, b: models.Period) -> bool:
    return a is b or (a.id is not None and a.id == b.id)


def merge(
    expanded: Expanded,
    temporary_schedules: Iterable[models.TemporarySchedule] = (),
    vacations: Iterable[models.TemporarySchedule] = (),
) -> List[DailyAgenda]:
    """
    Build the per-date agenda, attaching at most one override per occurrence.

    An override bound to the schedule on that date wins; otherwise the first
    vacation on that date applies to every occurrence of the day. Neither
    schedules nor overrides are modified.
    """
    by_schedule: Dict[Tuple[int, date], models.TemporarySchedule] = {}
    for temporary in temporary_schedules:
        if temporary.schedule_id is not None:
            by_schedule.setdefault((temporary.schedule_id, temporary.date), temporary)

    by_date: Dict[date, models.TemporarySchedule] = {}
    for vacation in vacations:
        by_date.setdefault(vacation.date, vacation)

    agenda: List[DailyAgenda] = []
    for day, pairs in expanded.items():
        slots: List[AgendaSlot] = []
        for period, schedule in pairs:
            override = by_schedule.get((schedule.id, day)) or by_date.get(day)
            occurrence = Occurrence(schedule=schedule, override=override)
            # pairs arrive ordered by period, so equal periods are adjacent
            if slots and _same_period(slots[-1].period, period):
                slots[-1].occurrences.append(occurrence)
            else:
                slots.append(AgendaSlot(period=period, occurrences=[occurrence]))
        agenda.append(DailyAgenda(date=day, slots=slots))
    return agenda
