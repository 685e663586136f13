from fastapi import APIRouter, Depends
from redis.asyncio import Redis
from pymongo.database import Database

from learnpath.deps import get_db, get_redis
from learnpath.auth.dependencies import require_role
from learnpath.services import unlock_service
from learnpath.services.cache_stats import get_stats

router = APIRouter(prefix="/diagnostics", tags=["diagnostics"], dependencies=[Depends(require_role("admin"))])

@router.get("/catalog")
async def catalog_audit(db: Database = Depends(get_db), r: Redis = Depends(get_redis)):
    return await unlock_service.audit_catalog(db, r)

@router.get("/stats")
async def cache_and_anomaly_stats(r: Redis = Depends(get_redis)):
    return await get_stats(r)
