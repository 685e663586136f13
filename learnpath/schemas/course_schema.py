from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from learnpath.services.unlock_types import UnlockReason


class CourseOut(BaseModel):
    course_id: int
    title: str
    description: str = ""
    image_url: Optional[str] = None
    difficulty: Optional[str] = None
    order_index: int
    total_lessons: int = 0
    completed_lessons: int = 0
    progress: float = 0.0
    is_unlocked: bool = False
    unlock_reason: UnlockReason
    created_at: Optional[datetime] = None

class CoursesOut(BaseModel):
    success: bool = True
    message: str
    data: List[CourseOut]

class CourseDetailOut(BaseModel):
    success: bool = True
    message: str
    data: CourseOut
