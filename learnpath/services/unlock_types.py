# services/unlock_types.py
"""
Value types shared by the progress aggregator and the unlock resolver.
All of them are immutable and request-scoped.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

CourseId = int
LessonId = int
UserId = int

ANONYMOUS_USER_ID: UserId = 0


class UnlockReason(str, Enum):
    FIRST_COURSE = "FIRST_COURSE"
    ALREADY_IN_PROGRESS = "ALREADY_IN_PROGRESS"
    PREDECESSOR_COMPLETE = "PREDECESSOR_COMPLETE"
    PREDECESSOR_INCOMPLETE = "PREDECESSOR_INCOMPLETE"
    NO_PREDECESSOR = "NO_PREDECESSOR"


class AnomalyKind(str, Enum):
    DUPLICATE_ORDER_INDEX = "DUPLICATE_ORDER_INDEX"
    MISSING_ORDER_INDEX = "MISSING_ORDER_INDEX"
    MISSING_FIRST_COURSE = "MISSING_FIRST_COURSE"
    INVALID_ORDER_INDEX = "INVALID_ORDER_INDEX"
    ORPHANED_RECORD = "ORPHANED_RECORD"


@dataclass(frozen=True)
class ActiveCourse:
    course_id: CourseId
    title: str
    order_index: int
    description: str = ""
    image_url: Optional[str] = None
    difficulty: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ActiveCourse":
        created_at = payload.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return cls(
            course_id=int(payload["course_id"]),
            title=str(payload.get("title", "")),
            order_index=int(payload["order_index"]),
            description=str(payload.get("description") or ""),
            image_url=payload.get("image_url"),
            difficulty=payload.get("difficulty"),
            created_at=created_at,
        )


@dataclass(frozen=True)
class CompletionRecord:
    lesson_id: LessonId
    is_completed: bool


@dataclass(frozen=True)
class CourseProgress:
    course_id: CourseId
    order_index: int
    total_lessons: int
    completed_lessons: int

    @property
    def percent(self) -> float:
        if self.total_lessons <= 0:
            return 0.0
        return self.completed_lessons / self.total_lessons * 100.0

    def to_dict(self) -> Dict[str, Any]:
        return {**asdict(self), "percent": self.percent}


@dataclass(frozen=True)
class UnlockVerdict:
    course_id: CourseId
    unlocked: bool
    reason: UnlockReason

    def to_dict(self) -> Dict[str, Any]:
        return {"course_id": self.course_id, "unlocked": self.unlocked, "reason": self.reason.value}


@dataclass(frozen=True)
class OrderIrregularity:
    kind: AnomalyKind
    order_index: int
    course_ids: Tuple[CourseId, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "order_index": self.order_index, "course_ids": list(self.course_ids)}


@dataclass(frozen=True)
class CourseCatalog:
    courses: Tuple[ActiveCourse, ...]
    lessons_by_course: Mapping[CourseId, FrozenSet[LessonId]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "courses": [c.to_dict() for c in self.courses],
            "lessons_by_course": {str(cid): sorted(ids) for cid, ids in self.lessons_by_course.items()},
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "CourseCatalog":
        return cls(
            courses=tuple(ActiveCourse.from_dict(c) for c in payload.get("courses", [])),
            lessons_by_course={
                int(cid): frozenset(int(i) for i in ids)
                for cid, ids in (payload.get("lessons_by_course") or {}).items()
            },
        )
