from pydantic import BaseModel
from typing import List

from learnpath.services.unlock_types import UnlockReason

class CourseProgressOut(BaseModel):
    course_id: int
    order_index: int
    total_lessons: int = 0
    completed_lessons: int = 0
    percent: float = 0.0

class UnlockVerdictOut(BaseModel):
    course_id: int
    unlocked: bool
    reason: UnlockReason

class ProgressOut(BaseModel):
    user_id: int
    items: List[CourseProgressOut]

class UnlockStatusOut(BaseModel):
    user_id: int
    unlocked_count: int
    items: List[UnlockVerdictOut]
