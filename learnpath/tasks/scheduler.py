# tasks/scheduler.py
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from pymongo.database import Database
from redis.asyncio import Redis
import logging

from learnpath.config import settings
from learnpath.services import unlock_service

logger = logging.getLogger(__name__)

def create_scheduler() -> AsyncIOScheduler:
    return AsyncIOScheduler()

def schedule_jobs(scheduler: AsyncIOScheduler, db: Database, r: Redis) -> None:
    scheduler.add_job(
        audit_catalog,
        trigger=IntervalTrigger(minutes=settings.AUDIT_INTERVAL_MINUTES),
        args=[db, r],
        id="audit_catalog",
        replace_existing=True,
    )

async def audit_catalog(db: Database, r: Redis) -> None:
    report = await unlock_service.audit_catalog(db, r)
    problems = report["irregularities"]
    if problems:
        logger.warning(f"Catalog audit found {len(problems)} ordering irregularities")
    else:
        logger.info(f"Catalog audit clean: {len(report['courses'])} active courses")
