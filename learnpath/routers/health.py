from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from datetime import datetime, timezone
from redis.asyncio import Redis
from pymongo.database import Database
import logging

from learnpath.deps import get_redis, get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"], prefix="/api/v1")

@router.get("/health", summary="Health Check", description="Check MongoDB and Redis connectivity")
async def health_check(r: Redis = Depends(get_redis), db: Database = Depends(get_db)):
    services = {}

    try:
        await r.ping()
        services["redis"] = {"status": "connected", "error": None}
    except Exception as e:
        logger.warning(f"Redis health check failed: {str(e)}")
        services["redis"] = {"status": "disconnected", "error": "Health check failed"}

    try:
        await run_in_threadpool(db.command, "ping")
        services["mongodb"] = {"status": "connected", "error": None}
    except Exception as e:
        logger.warning(f"MongoDB health check failed: {str(e)}")
        services["mongodb"] = {"status": "disconnected", "error": "Health check failed"}

    connected = sum(1 for s in services.values() if s["status"] == "connected")
    if connected == len(services):
        overall_status = "healthy"
    elif connected:
        overall_status = "degraded"
    else:
        overall_status = "unhealthy"

    response = {
        "status": overall_status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": services
    }

    if overall_status == "unhealthy":
        raise HTTPException(status_code=503, detail=response)

    return response
