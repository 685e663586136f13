# services/unlock_resolver.py
"""
Sequential course unlocking.

A course is accessible when it is the first one, when the user already has
completed lessons in it, or when the course right before it is complete.
Pure functions only: the same snapshot always yields the same verdicts.
"""

from collections import defaultdict
from typing import Dict, List, Sequence

from learnpath.services.unlock_types import (
    AnomalyKind,
    CourseProgress,
    OrderIrregularity,
    UnlockReason,
    UnlockVerdict,
)

FIRST_ORDER_INDEX = 1


def is_complete(p: CourseProgress) -> bool:
    # an empty course never satisfies the prerequisite of its successor
    return p.total_lessons > 0 and p.completed_lessons == p.total_lessons


def has_started(p: CourseProgress) -> bool:
    return p.completed_lessons > 0


def _by_order_index(progress: Sequence[CourseProgress]) -> Dict[int, List[CourseProgress]]:
    index: Dict[int, List[CourseProgress]] = defaultdict(list)
    for p in progress:
        index[p.order_index].append(p)
    return index


def _resolve_one(p: CourseProgress, index: Dict[int, List[CourseProgress]]) -> UnlockVerdict:
    if p.order_index == FIRST_ORDER_INDEX:
        return UnlockVerdict(p.course_id, True, UnlockReason.FIRST_COURSE)

    if has_started(p):
        return UnlockVerdict(p.course_id, True, UnlockReason.ALREADY_IN_PROGRESS)

    candidates = index.get(p.order_index - 1, [])
    # zero or several courses at the previous slot: nothing to chain from
    if len(candidates) != 1:
        return UnlockVerdict(p.course_id, False, UnlockReason.NO_PREDECESSOR)

    if is_complete(candidates[0]):
        return UnlockVerdict(p.course_id, True, UnlockReason.PREDECESSOR_COMPLETE)
    return UnlockVerdict(p.course_id, False, UnlockReason.PREDECESSOR_INCOMPLETE)


def resolve_unlocks(progress: Sequence[CourseProgress]) -> List[UnlockVerdict]:
    """
    Assign an unlock verdict to every course of a progress snapshot.

    Args:
        progress: Per-course progress for one user, ascending order_index

    Returns:
        One verdict per input course, in input order
    """
    index = _by_order_index(progress)
    return [_resolve_one(p, index) for p in progress]


def find_order_irregularities(progress: Sequence[CourseProgress]) -> List[OrderIrregularity]:
    """Duplicate, missing, invalid or non-1-based order indexes in the active catalog."""
    if not progress:
        return []

    index = _by_order_index(progress)
    found: List[OrderIrregularity] = []

    if FIRST_ORDER_INDEX not in index:
        found.append(OrderIrregularity(AnomalyKind.MISSING_FIRST_COURSE, FIRST_ORDER_INDEX))

    for order_index in sorted(index):
        course_ids = tuple(sorted(e.course_id for e in index[order_index]))
        if order_index < FIRST_ORDER_INDEX:
            found.append(OrderIrregularity(AnomalyKind.INVALID_ORDER_INDEX, order_index, course_ids))
        elif len(course_ids) > 1:
            found.append(OrderIrregularity(AnomalyKind.DUPLICATE_ORDER_INDEX, order_index, course_ids))

    # gaps only make sense between valid positions
    highest = max(index)
    for order_index in range(FIRST_ORDER_INDEX + 1, highest):
        if order_index not in index:
            found.append(OrderIrregularity(AnomalyKind.MISSING_ORDER_INDEX, order_index))

    return found
