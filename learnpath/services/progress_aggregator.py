# services/progress_aggregator.py
"""
Progress aggregation: folds a user's raw lesson completion records into one
CourseProgress entry per active course.
"""

from typing import Dict, Iterable, List, Mapping, Set

from learnpath.services.unlock_types import (
    ActiveCourse,
    CompletionRecord,
    CourseId,
    CourseProgress,
    LessonId,
)


def _completed_lesson_ids(records: Iterable[CompletionRecord]) -> Set[LessonId]:
    # a lesson contributes once no matter how many records it has
    return {rec.lesson_id for rec in records if rec.is_completed}


def aggregate_progress(
    courses: Iterable[ActiveCourse],
    lessons_by_course: Mapping[CourseId, Set[LessonId]],
    records: Iterable[CompletionRecord],
) -> List[CourseProgress]:
    """
    Build the per-course progress snapshot for one user.

    Args:
        courses: Active courses (any order)
        lessons_by_course: Lesson ids owned by each course
        records: Completion records for the user

    Returns:
        One CourseProgress per course, ascending order_index. Courses without
        lessons or without records are included with zero counts.
    """
    completed = _completed_lesson_ids(records)
    snapshot: List[CourseProgress] = []
    for course in sorted(courses, key=lambda c: (c.order_index, c.course_id)):
        lesson_ids = lessons_by_course.get(course.course_id, set())
        snapshot.append(CourseProgress(
            course_id=course.course_id,
            order_index=course.order_index,
            total_lessons=len(lesson_ids),
            completed_lessons=len(completed & set(lesson_ids)),
        ))
    return snapshot


def find_orphaned_records(
    lessons_by_course: Mapping[CourseId, Set[LessonId]],
    records: Iterable[CompletionRecord],
) -> Set[LessonId]:
    """Lesson ids referenced by records but owned by no active course."""
    known: Set[LessonId] = set()
    for lesson_ids in lessons_by_course.values():
        known.update(lesson_ids)
    return {rec.lesson_id for rec in records if rec.lesson_id not in known}


def lesson_counts(lessons_by_course: Mapping[CourseId, Set[LessonId]]) -> Dict[CourseId, int]:
    return {course_id: len(ids) for course_id, ids in lessons_by_course.items()}
