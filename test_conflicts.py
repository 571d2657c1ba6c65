import pytest

from timetable.services.conflicts import count_conflicts, parities_intersect

PARITIES = ["EVEN", "ODD", "WEEKLY"]

INTERSECTS = {
    "WEEKLY": {"EVEN", "ODD", "WEEKLY"},
    "EVEN": {"EVEN", "WEEKLY"},
    "ODD": {"ODD", "WEEKLY"},
}


@pytest.mark.parametrize("candidate", PARITIES)
@pytest.mark.parametrize("existing", PARITIES)
def test_parities_intersect_table(candidate, existing):
    assert parities_intersect(candidate, existing) == (existing in INTERSECTS[candidate])
    assert parities_intersect(candidate, existing) == parities_intersect(existing, candidate)


# Zero conflicts exactly when no same-group schedule with an intersecting parity exists
@pytest.mark.parametrize("candidate", PARITIES)
@pytest.mark.parametrize("existing", PARITIES)
def test_group_count_follows_intersection(make_schedule, candidate, existing):
    snapshot = [make_schedule(1, parity=existing, group_id=1)]
    expected = 1 if existing in INTERSECTS[candidate] else 0
    assert count_conflicts(snapshot, candidate, group_id=1) == expected


def test_even_and_odd_can_share_a_slot(make_schedule):
    snapshot = [make_schedule(1, parity="EVEN", group_id=1)]
    assert count_conflicts(snapshot, "ODD", group_id=1) == 0
    snapshot.append(make_schedule(2, parity="ODD", group_id=1))
    assert count_conflicts(snapshot, "WEEKLY", group_id=1) == 2


def test_other_groups_and_teachers_are_ignored(make_schedule):
    snapshot = [
        make_schedule(1, parity="WEEKLY", group_id=2, teacher_id=7),
        make_schedule(2, parity="EVEN", group_id=3, teacher_id=8),
    ]
    assert count_conflicts(snapshot, "WEEKLY", group_id=1) == 0
    assert count_conflicts(snapshot, "EVEN", teacher_id=7) == 1
    assert count_conflicts(snapshot, "ODD", teacher_id=8) == 0


def test_disabled_schedules_do_not_conflict(make_schedule):
    snapshot = [make_schedule(1, parity="WEEKLY", group_id=1, disabled_group=True)]
    assert count_conflicts(snapshot, "WEEKLY", group_id=1) == 0


def test_excluded_schedule_does_not_conflict_with_itself(make_schedule):
    snapshot = [make_schedule(1, parity="EVEN", group_id=1), make_schedule(2, parity="ODD", group_id=1)]
    assert count_conflicts(snapshot, "EVEN", group_id=1, exclude_schedule_id=1) == 0
    assert count_conflicts(snapshot, "WEEKLY", group_id=1, exclude_schedule_id=1) == 1


def test_enum_and_string_parities_are_interchangeable(make_schedule):
    from timetable.schemas import Parity

    snapshot = [make_schedule(1, parity="ODD", group_id=1)]
    assert count_conflicts(snapshot, Parity.ODD, group_id=1) == 1
    assert parities_intersect(Parity.EVEN, "WEEKLY")
