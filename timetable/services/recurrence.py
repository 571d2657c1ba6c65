"""
Calendar expansion of weekly schedules.

Week parity is counted from the semester start: the Monday-to-Sunday week
that contains the semester's first day is week 0 and is EVEN, the next one
is ODD, and so on. WEEKLY schedules occur in every week.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Tuple

from timetable import models
from timetable.schemas import DayOfWeek, Parity

Expanded = Dict[date, List[Tuple[models.Period, models.Schedule]]]


def monday_of(d: date) -> date:
    return d - timedelta(days=d.weekday())


def parity_of(semester_start_day: date, d: date) -> Parity:
    """EVEN or ODD for the week containing ``d``; never WEEKLY."""
    weeks_elapsed = (monday_of(d) - monday_of(semester_start_day)).days // 7
    return Parity.EVEN if weeks_elapsed % 2 == 0 else Parity.ODD


def applies(schedule: models.Schedule, d: date) -> bool:
    """True when the weekly ``schedule`` has an occurrence on ``d``."""
    semester = schedule.lesson.semester
    if not semester.start_day <= d <= semester.end_day:
        return False
    if DayOfWeek.of(d) != schedule.day_of_week:
        return False
    return schedule.parity == Parity.WEEKLY or schedule.parity == parity_of(semester.start_day, d)


def period_sort_key(period: models.Period):
    return (period.start_time, period.id or 0)


def expand(schedules: Iterable[models.Schedule], from_date: date, to_date: date) -> Expanded:
    """
    Map every date of ``[from_date, to_date]`` that has occurrences to its
    ``(period, schedule)`` pairs.

    Dates come in ascending order and only dates with at least one occurrence
    are present. Pairs within a date are ordered by period start time.
    A schedule listed twice in ``schedules`` is expanded once.
    """
    by_weekday: dict[int, list[models.Schedule]] = defaultdict(list)
    seen = set()
    for schedule in schedules:
        key = schedule.id if schedule.id is not None else id(schedule)
        if key in seen:
            continue
        seen.add(key)
        by_weekday[DayOfWeek(schedule.day_of_week).weekday].append(schedule)

    expanded: Expanded = {}
    current = from_date
    while current <= to_date:
        pairs = [(s.period, s) for s in by_weekday.get(current.weekday(), ()) if applies(s, current)]
        if pairs:
            pairs.sort(key=lambda pair: (period_sort_key(pair[0]), pair[1].id or 0))
            expanded[current] = pairs
        current += timedelta(days=1)
    return expanded
