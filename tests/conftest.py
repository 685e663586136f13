# tests/conftest.py
import os

# Settings are read at import time, so these must be set before any learnpath import
os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017/learnpath_test")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
os.environ.setdefault("JWT_SECRET", "test-secret-for-learnpath-0123456789abcdef")

import typing
from unittest.mock import AsyncMock, MagicMock

import jwt
import pytest

from learnpath.config import settings
from learnpath.repos import courses as course_repo
from learnpath.repos import progress as progress_repo
from learnpath.services import unlock_service
from learnpath.services.memory_cache import AsyncInMemoryCache
from learnpath.services.unlock_types import ActiveCourse, CompletionRecord, CourseProgress


def progress_of(*rows: typing.Tuple[int, int, int]) -> typing.List[CourseProgress]:
    """Build a snapshot from (order_index, completed, total) rows; course_id mirrors order_index * 10."""
    return [
        CourseProgress(course_id=order * 10, order_index=order, total_lessons=total, completed_lessons=done)
        for order, done, total in rows
    ]


class FakeStore:
    """In-memory stand-in for the courses, lessons and progress collections."""

    def __init__(self) -> None:
        self.courses: typing.List[ActiveCourse] = []
        self.lessons: typing.Dict[int, typing.Set[int]] = {}
        self.records: typing.Dict[int, typing.List[CompletionRecord]] = {}
        self.inactive: typing.Set[int] = set()

    def add_course(
        self,
        course_id: int,
        order_index: int,
        lessons: int = 0,
        title: typing.Optional[str] = None,
        is_active: bool = True,
    ) -> None:
        self.courses.append(ActiveCourse(course_id=course_id, title=title or f"Course {course_id}", order_index=order_index))
        if not is_active:
            self.inactive.add(course_id)
        self.lessons[course_id] = {course_id * 100 + i for i in range(1, lessons + 1)}

    def complete(self, user_id: int, course_id: int, count: int) -> None:
        for lesson_id in sorted(self.lessons[course_id])[:count]:
            self.records.setdefault(user_id, []).append(CompletionRecord(lesson_id=lesson_id, is_completed=True))

    def list_active_courses(self, db):
        active = [c for c in self.courses if c.course_id not in self.inactive]
        return sorted(active, key=lambda c: c.order_index)

    def list_lessons_by_course(self, db, course_ids):
        return {cid: set(self.lessons.get(cid, set())) for cid in course_ids}

    def list_existing_lesson_ids(self, db, lesson_ids):
        known = set().union(*self.lessons.values()) if self.lessons else set()
        return known & set(lesson_ids)

    def list_completion_records(self, db, user_id):
        return list(self.records.get(user_id, []))


@pytest.fixture
def store(monkeypatch) -> FakeStore:
    fake = FakeStore()
    monkeypatch.setattr(course_repo, "list_active_courses", fake.list_active_courses)
    monkeypatch.setattr(course_repo, "list_lessons_by_course", fake.list_lessons_by_course)
    monkeypatch.setattr(course_repo, "list_existing_lesson_ids", fake.list_existing_lesson_ids)
    monkeypatch.setattr(progress_repo, "list_completion_records", fake.list_completion_records)
    return fake


@pytest.fixture(autouse=True)
def fresh_memory_cache(monkeypatch) -> AsyncInMemoryCache:
    cache = AsyncInMemoryCache()
    monkeypatch.setattr(unlock_service, "memory_cache", cache)
    return cache


@pytest.fixture
def redis_mock() -> AsyncMock:
    r = AsyncMock()
    r.get = AsyncMock(return_value=None)
    r.set = AsyncMock(return_value=True)
    r.hincrby = AsyncMock(return_value=1)
    r.hgetall = AsyncMock(return_value={})
    r.sadd = AsyncMock(return_value=1)
    r.scard = AsyncMock(return_value=0)
    r.ping = AsyncMock(return_value=True)
    return r


@pytest.fixture
def db_mock() -> MagicMock:
    return MagicMock()


def make_token(user_id: typing.Union[int, str], role: str = "student", **extra) -> str:
    payload = {"sub": str(user_id), "role": role, **extra}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def auth_header(user_id: typing.Union[int, str], role: str = "student") -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, role)}"}
