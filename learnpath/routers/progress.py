from fastapi import APIRouter, Depends
from redis.asyncio import Redis
from pymongo.database import Database

from learnpath.deps import get_db, get_redis
from learnpath.auth.dependencies import get_current_user
from learnpath.services import unlock_service
from learnpath.schemas.progress_schema import ProgressOut, UnlockStatusOut

router = APIRouter(prefix="/progress", tags=["progress"])

@router.get("/courses", response_model=ProgressOut)
async def course_progress(db: Database = Depends(get_db),
                          r: Redis = Depends(get_redis),
                          user=Depends(get_current_user)):
    progress = await unlock_service.compute_progress(db, r, user["user_id"])
    return {"user_id": user["user_id"], "items": [p.to_dict() for p in progress]}

@router.get("/unlock-status", response_model=UnlockStatusOut)
async def unlock_status(db: Database = Depends(get_db),
                        r: Redis = Depends(get_redis),
                        user=Depends(get_current_user)):
    verdicts = await unlock_service.compute_unlock_status(db, r, user["user_id"])
    return {
        "user_id": user["user_id"],
        "unlocked_count": sum(1 for v in verdicts if v.unlocked),
        "items": [v.to_dict() for v in verdicts],
    }
