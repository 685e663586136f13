# repos/courses.py
from pymongo.database import Database
from pymongo import ASCENDING
from typing import Dict, Any, Iterable, List, Set

from learnpath.services.unlock_types import ActiveCourse, CourseId, LessonId

COURSE_FIELDS = {
    "_id": 1, "title": 1, "order_index": 1, "description": 1,
    "image_url": 1, "difficulty": 1, "created_at": 1,
}

# ---------------------------
# Helpers
# ---------------------------

def _to_active_course(doc: Dict[str, Any]) -> ActiveCourse:
    return ActiveCourse(
        course_id=int(doc["_id"]),
        title=str(doc.get("title", "")),
        # missing order_index is kept as 0 and reported as an invalid position
        order_index=int(doc.get("order_index") or 0),
        description=str(doc.get("description") or ""),
        image_url=doc.get("image_url"),
        difficulty=doc.get("difficulty"),
        created_at=doc.get("created_at"),
    )

# ---------------------------
# Indexes
# ---------------------------

def ensure_indexes(db: Database) -> None:
    db.courses.create_index([("is_active", ASCENDING), ("order_index", ASCENDING)], name="active_by_order")
    db.lessons.create_index([("course_id", ASCENDING)], name="lessons_by_course")

# ---------------------------
# Reads
# ---------------------------

def list_active_courses(db: Database) -> List[ActiveCourse]:
    cursor = db.courses.find({"is_active": True}, COURSE_FIELDS).sort(
        [("order_index", ASCENDING), ("created_at", ASCENDING)]
    )
    return [_to_active_course(doc) for doc in cursor]

def list_lessons_by_course(db: Database, course_ids: Iterable[CourseId]) -> Dict[CourseId, Set[LessonId]]:
    ids = list(course_ids)
    out: Dict[CourseId, Set[LessonId]] = {cid: set() for cid in ids}
    if not ids:
        return out
    for doc in db.lessons.find({"course_id": {"$in": ids}}, {"_id": 1, "course_id": 1}):
        out.setdefault(int(doc["course_id"]), set()).add(int(doc["_id"]))
    return out

def list_lessons_for_course(db: Database, course_id: CourseId) -> Set[LessonId]:
    return list_lessons_by_course(db, [course_id])[course_id]

def list_existing_lesson_ids(db: Database, lesson_ids: Iterable[LessonId]) -> Set[LessonId]:
    """Lesson ids that still exist, whatever the state of their course."""
    ids = list(lesson_ids)
    if not ids:
        return set()
    return {int(doc["_id"]) for doc in db.lessons.find({"_id": {"$in": ids}}, {"_id": 1})}
