from fastapi import APIRouter, Depends, HTTPException
from redis.asyncio import Redis
from pymongo.database import Database

from learnpath.deps import get_db, get_redis
from learnpath.auth.dependencies import get_optional_user
from learnpath.services import unlock_service
from learnpath.schemas.course_schema import CoursesOut, CourseDetailOut

router = APIRouter(prefix="/courses", tags=["courses"])

# Route to list every active course with the caller's progress and unlock state
@router.get("", response_model=CoursesOut)
async def list_courses(db: Database = Depends(get_db),
                       r: Redis = Depends(get_redis),
                       user=Depends(get_optional_user)):
    """
    List active courses in sequence order.

    Authentication is optional. Anonymous callers get zero progress, so only
    the first course comes back unlocked.

    Returns:
        CoursesOut envelope with one item per active course
    """
    items = await unlock_service.course_overview(db, r, user["user_id"])
    return {"success": True, "message": "Courses retrieved", "data": items}

# Route to get one course with the caller's unlock state
@router.get("/{course_id}", response_model=CourseDetailOut)
async def get_course(course_id: int,
                     db: Database = Depends(get_db),
                     r: Redis = Depends(get_redis),
                     user=Depends(get_optional_user)):
    """
    Get an active course by ID.

    Raises:
        HTTPException: 404 if the course does not exist or is inactive
    """
    item = await unlock_service.course_detail(db, r, user["user_id"], course_id)
    if not item:
        raise HTTPException(status_code=404, detail="Course not found")
    return {"success": True, "message": "Course retrieved", "data": item}
