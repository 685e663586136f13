# services/unlock_service.py
"""
Entry points used by the routers, the scheduler and the diagnostics CLI.

The course catalog (active courses and their lesson ids) goes through the
two-level cache. Completion records are always read fresh, and progress and
verdicts are recomputed on every call.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Set, Tuple

from fastapi.concurrency import run_in_threadpool
from pymongo.database import Database
from redis.asyncio import Redis

from learnpath.config import settings
from learnpath.repos import courses as course_repo
from learnpath.repos import progress as progress_repo
from learnpath.services.cache_keys import active_catalog_key
from learnpath.services.cache_stats import hit, miss, record_anomaly, record_orphans
from learnpath.services.memory_cache import memory_cache
from learnpath.services.progress_aggregator import aggregate_progress, find_orphaned_records, lesson_counts
from learnpath.services.unlock_resolver import find_order_irregularities, resolve_unlocks
from learnpath.services.unlock_types import (
    ANONYMOUS_USER_ID,
    CompletionRecord,
    CourseCatalog,
    CourseId,
    CourseProgress,
    LessonId,
    OrderIrregularity,
    UnlockVerdict,
    UserId,
)

logger = logging.getLogger(__name__)

CATALOG_NAMESPACE = "catalog"


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _read_catalog(db: Database) -> CourseCatalog:
    courses = course_repo.list_active_courses(db)
    lessons = course_repo.list_lessons_by_course(db, [c.course_id for c in courses])
    return CourseCatalog(
        courses=tuple(courses),
        lessons_by_course={cid: frozenset(ids) for cid, ids in lessons.items()},
    )


async def _report_irregularities(r: Redis, irregularities: List[OrderIrregularity]) -> None:
    for item in irregularities:
        logger.warning(
            f"Course ordering irregularity {item.kind.value} at order_index={item.order_index} "
            f"courses={list(item.course_ids)}"
        )
        await record_anomaly(r, item.kind.value)


async def load_catalog(db: Database, r: Redis) -> CourseCatalog:
    """Active courses with their lesson ids, L1 (memory) then L2 (Redis) then MongoDB."""
    key = active_catalog_key()
    ttl = settings.CATALOG_CACHE_TTL_SECONDS

    cached = await memory_cache.get(key)
    if cached is not None:
        await hit(r, CATALOG_NAMESPACE)
        return cached

    lock = await memory_cache.get_lock(key)
    async with lock:
        cached = await memory_cache.get(key)
        if cached is not None:
            await hit(r, CATALOG_NAMESPACE)
            return cached

        cached_l2 = await r.get(key)
        if cached_l2:
            catalog = CourseCatalog.from_dict(json.loads(cached_l2))
            await memory_cache.set(key, catalog, ttl=ttl)
            await hit(r, CATALOG_NAMESPACE)
            return catalog

        await miss(r, CATALOG_NAMESPACE)
        catalog = await run_in_threadpool(_read_catalog, db)
        logger.debug(f"Catalog loaded from MongoDB: {len(catalog.courses)} active courses")

        empty = [CourseProgress(c.course_id, c.order_index, 0, 0) for c in catalog.courses]
        await _report_irregularities(r, find_order_irregularities(empty))

        if ttl > 0:
            await r.set(key, json.dumps(catalog.to_dict(), default=_json_default), ex=ttl)
            await memory_cache.set(key, catalog, ttl=ttl)
        return catalog


async def _load_records(db: Database, user_id: UserId) -> List[CompletionRecord]:
    if user_id == ANONYMOUS_USER_ID:
        return []
    return await run_in_threadpool(progress_repo.list_completion_records, db, user_id)


async def _report_orphans(db: Database, r: Redis, user_id: UserId, orphans: Set[LessonId]) -> None:
    # lessons of deactivated courses are valid history, not anomalies
    existing = await run_in_threadpool(course_repo.list_existing_lesson_ids, db, orphans)
    missing = orphans - existing
    if not missing:
        return
    added = await record_orphans(r, user_id, missing)
    if added:
        logger.warning(f"User {user_id} has completion records for missing lessons: {sorted(missing)}")


async def _snapshot(db: Database, r: Redis, user_id: UserId) -> Tuple[CourseCatalog, List[CourseProgress]]:
    catalog = await load_catalog(db, r)
    records = await _load_records(db, user_id)

    orphans = find_orphaned_records(catalog.lessons_by_course, records)
    if orphans:
        await _report_orphans(db, r, user_id, orphans)

    progress = aggregate_progress(catalog.courses, catalog.lessons_by_course, records)
    return catalog, progress


async def compute_progress(db: Database, r: Redis, user_id: UserId) -> List[CourseProgress]:
    """Per-course completion counts for a user, ascending order_index."""
    _, progress = await _snapshot(db, r, user_id)
    return progress


async def compute_unlock_status(db: Database, r: Redis, user_id: UserId) -> List[UnlockVerdict]:
    """Unlock verdicts for a user, aligned with compute_progress ordering."""
    _, progress = await _snapshot(db, r, user_id)
    return resolve_unlocks(progress)


async def course_overview(db: Database, r: Redis, user_id: UserId) -> List[Dict[str, Any]]:
    catalog, progress = await _snapshot(db, r, user_id)
    verdicts = resolve_unlocks(progress)
    courses = {c.course_id: c for c in catalog.courses}

    items: List[Dict[str, Any]] = []
    for p, v in zip(progress, verdicts):
        course = courses[p.course_id]
        items.append({
            "course_id": course.course_id,
            "title": course.title,
            "description": course.description,
            "image_url": course.image_url,
            "difficulty": course.difficulty,
            "order_index": course.order_index,
            "total_lessons": p.total_lessons,
            "completed_lessons": p.completed_lessons,
            "progress": p.percent,
            "is_unlocked": v.unlocked,
            "unlock_reason": v.reason.value,
            "created_at": course.created_at,
        })
    logger.info(f"Resolved {len(items)} courses for user {user_id}: "
                f"{sum(1 for it in items if it['is_unlocked'])} unlocked")
    return items


async def course_detail(db: Database, r: Redis, user_id: UserId, course_id: CourseId) -> Optional[Dict[str, Any]]:
    # verdict depends on the predecessor, so resolve the whole sequence
    for item in await course_overview(db, r, user_id):
        if item["course_id"] == course_id:
            return item
    return None


async def audit_catalog(db: Database, r: Redis) -> Dict[str, Any]:
    """Read the catalog straight from MongoDB and report ordering problems."""
    catalog = await run_in_threadpool(_read_catalog, db)
    counts = lesson_counts(catalog.lessons_by_course)
    empty = [CourseProgress(c.course_id, c.order_index, counts.get(c.course_id, 0), 0) for c in catalog.courses]
    irregularities = find_order_irregularities(empty)
    await _report_irregularities(r, irregularities)

    return {
        "generated_at": datetime.utcnow().isoformat(),
        "courses": [
            {
                "course_id": c.course_id,
                "title": c.title,
                "order_index": c.order_index,
                "total_lessons": counts.get(c.course_id, 0),
            }
            for c in sorted(catalog.courses, key=lambda c: (c.order_index, c.course_id))
        ],
        "irregularities": [i.to_dict() for i in irregularities],
    }
