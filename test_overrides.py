from datetime import date

from timetable import models
from timetable.services.overrides import merge
from timetable.services.recurrence import expand

SEPT_6 = date(2021, 9, 6)
SEPT_13 = date(2021, 9, 13)
SEPT_20 = date(2021, 9, 20)


def _override(schedule_id, day, room=None, vacation=False):
    return models.TemporarySchedule(
        id=100 + (schedule_id or 0),
        date=day,
        schedule_id=schedule_id,
        vacation=vacation,
        grouped=False,
        room=room,
        room_id=room.id if room else None,
    )


def test_merge_without_overrides_keeps_expansion_shape(make_schedule):
    first = make_schedule(1, day="MONDAY", period_id=1)
    second = make_schedule(2, day="MONDAY", period_id=1, group_id=2, lesson_id=20)
    third = make_schedule(3, day="MONDAY", period_id=2)

    agenda = merge(expand([first, second, third], SEPT_6, SEPT_6))

    assert len(agenda) == 1
    day = agenda[0]
    assert day.date == SEPT_6
    assert [slot.period.id for slot in day.slots] == [1, 2]
    assert [o.schedule.id for o in day.slots[0].occurrences] == [1, 2]
    assert all(o.override is None for slot in day.slots for o in slot.occurrences)


# An override for (schedule, date) touches only that date's occurrence
def test_override_changes_only_its_date(make_schedule):
    a = make_schedule(1, day="MONDAY", parity="EVEN", room_id=1)
    r2 = models.Room(id=2, name="R2", type="LAB", sort_order=2, disabled=False)
    override = _override(a.id, SEPT_20, room=r2)

    agenda = merge(expand([a], SEPT_6, SEPT_20), [override])

    by_date = {day.date: day.slots[0].occurrences[0] for day in agenda}
    assert set(by_date) == {SEPT_6, SEPT_20}
    assert by_date[SEPT_6].override is None
    assert by_date[SEPT_20].override is override
    assert by_date[SEPT_20].override.room.name == "R2"
    # base schedule untouched
    assert a.room.name == "R1"
    assert a.room_id == 1
    assert by_date[SEPT_20].schedule is a


def test_override_for_other_schedule_is_not_applied(make_schedule):
    a = make_schedule(1, day="MONDAY")
    stray = _override(99, SEPT_6)
    agenda = merge(expand([a], SEPT_6, SEPT_6), [stray])
    assert agenda[0].slots[0].occurrences[0].override is None


def test_vacation_applies_to_every_occurrence_of_its_date(make_schedule):
    a = make_schedule(1, day="MONDAY", period_id=1)
    b = make_schedule(2, day="MONDAY", period_id=2, group_id=2, lesson_id=20)
    vacation = _override(None, SEPT_13, vacation=True)

    agenda = merge(expand([a, b], SEPT_6, SEPT_13), vacations=[vacation])

    sept_6, sept_13 = agenda
    assert all(o.override is None for slot in sept_6.slots for o in slot.occurrences)
    assert all(o.override is vacation for slot in sept_13.slots for o in slot.occurrences)


def test_schedule_override_wins_over_vacation(make_schedule):
    a = make_schedule(1, day="MONDAY")
    cancellation = _override(a.id, SEPT_6, vacation=True)
    holiday = _override(None, SEPT_6, vacation=True)

    agenda = merge(expand([a], SEPT_6, SEPT_6), [cancellation], [holiday])

    assert agenda[0].slots[0].occurrences[0].override is cancellation


def test_first_override_for_a_date_wins(make_schedule):
    a = make_schedule(1, day="MONDAY")
    first = _override(a.id, SEPT_6)
    second = models.TemporarySchedule(id=500, date=SEPT_6, schedule_id=a.id, vacation=True, grouped=False)

    agenda = merge(expand([a], SEPT_6, SEPT_6), [first, second])

    assert agenda[0].slots[0].occurrences[0].override is first


def test_merge_of_nothing_is_empty():
    assert merge({}) == []
    assert merge({}, [], []) == []
