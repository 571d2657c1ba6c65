import os
from datetime import date, time
from types import SimpleNamespace

# Settings are read once at import time, so the test environment goes first
os.environ["DATABASE_URL"] = "sqlite+pysqlite://"
os.environ["LOG_TO_FILE"] = "false"
os.environ["ADMIN_API_KEY"] = "test-admin-token"
os.environ["API_ROOT_PATH"] = ""

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from timetable import models
from timetable.core.database import Base, get_db
from timetable.main import app

ADMIN_HEADERS = {"X-Admin-Token": "test-admin-token"}

engine = create_engine(
    "sqlite+pysqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ---- Transient (no database) builders for the pure engine tests ----

@pytest.fixture()
def semester():
    return models.Semester(
        id=1,
        description="Autumn 2021",
        start_day=date(2021, 9, 6),
        end_day=date(2021, 12, 24),
        days_of_week=["MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY"],
        disabled=False,
    )


@pytest.fixture()
def make_schedule(semester):
    """Factory for detached schedules with their whole lesson graph filled in."""
    periods = {}

    def _make(
        schedule_id,
        day="MONDAY",
        parity="WEEKLY",
        period_id=1,
        period_start=None,
        group_id=1,
        teacher_id=1,
        room_id=1,
        lesson_id=None,
        sem=None,
        disabled_group=False,
    ):
        if period_id not in periods:
            start = period_start or time(8 + period_id, 0)
            periods[period_id] = models.Period(id=period_id, name=f"P{period_id}", start_time=start, end_time=time(start.hour, 50))
        sem = sem or semester
        lesson = models.Lesson(
            id=lesson_id or schedule_id,
            hours=2,
            lesson_type="LECTURE",
            grouped=False,
            teacher_for_site=f"Teacher {teacher_id}",
            subject_for_site="Algebra",
            teacher_id=teacher_id,
            subject_id=1,
            group_id=group_id,
            semester_id=sem.id,
            teacher=models.Teacher(id=teacher_id, name="T", surname=f"Teacher{teacher_id}", disabled=False),
            subject=models.Subject(id=1, name="Algebra", disabled=False),
            group=models.Group(id=group_id, title=f"G{group_id}", disabled=disabled_group),
            semester=sem,
        )
        return models.Schedule(
            id=schedule_id,
            lesson_id=lesson.id,
            period_id=period_id,
            room_id=room_id,
            day_of_week=day,
            parity=parity,
            lesson=lesson,
            period=periods[period_id],
            room=models.Room(id=room_id, name=f"R{room_id}", type="LECTURE_HALL", sort_order=room_id, disabled=False),
        )

    return _make


# ---- Database and API ----

@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def seed(db):
    """
    Semester 2021-09-06..2021-12-24 with two periods, three rooms,
    groups G1/G2, teachers Ivanov/Petrova and four lessons:
    L1, L2 (G1, Ivanov), L3 (G2, Petrova), L4 (G2, Ivanov).
    """
    p1 = models.Period(name="1", start_time=time(8, 30), end_time=time(9, 50))
    p2 = models.Period(name="2", start_time=time(10, 5), end_time=time(11, 25))
    sem = models.Semester(
        description="Autumn 2021",
        start_day=date(2021, 9, 6),
        end_day=date(2021, 12, 24),
        days_of_week=["MONDAY", "TUESDAY"],
        periods=[p2, p1],
    )
    r1 = models.Room(name="101", type="LECTURE_HALL", sort_order=1)
    r2 = models.Room(name="202", type="LAB", sort_order=2)
    r3 = models.Room(name="303", type="LAB", sort_order=3)
    g1 = models.Group(title="CS-11")
    g2 = models.Group(title="CS-12")
    ivanov = models.Teacher(name="Ivan", surname="Ivanov")
    petrova = models.Teacher(name="Olga", surname="Petrova")
    algebra = models.Subject(name="Algebra")
    physics = models.Subject(name="Physics")
    db.add_all([p1, p2, sem, r1, r2, r3, g1, g2, ivanov, petrova, algebra, physics])
    db.flush()

    def lesson(group, teacher, subject, lesson_type="LECTURE"):
        return models.Lesson(
            hours=2,
            lesson_type=lesson_type,
            teacher_for_site=f"{teacher.surname} {teacher.name[0]}.",
            subject_for_site=subject.name,
            teacher_id=teacher.id,
            subject_id=subject.id,
            group_id=group.id,
            semester_id=sem.id,
        )

    l1 = lesson(g1, ivanov, algebra)
    l2 = lesson(g1, ivanov, physics, "PRACTICAL")
    l3 = lesson(g2, petrova, physics)
    l4 = lesson(g2, ivanov, algebra)
    db.add_all([l1, l2, l3, l4])
    db.commit()
    return SimpleNamespace(
        semester=sem, p1=p1, p2=p2, r1=r1, r2=r2, r3=r3, g1=g1, g2=g2,
        ivanov=ivanov, petrova=petrova, algebra=algebra, physics=physics,
        l1=l1, l2=l2, l3=l3, l4=l4,
    )


@pytest.fixture()
def add_schedule(db):
    """Insert a schedule directly, bypassing the conflict check."""

    def _add(lesson, period, room, day="MONDAY", parity="WEEKLY"):
        schedule = models.Schedule(lesson_id=lesson.id, period_id=period.id, room_id=room.id, day_of_week=day, parity=parity)
        db.add(schedule)
        db.commit()
        return schedule

    return _add


@pytest_asyncio.fixture()
async def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
